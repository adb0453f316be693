"""
Physio.Case — Схеми каталогу знань

Pydantic моделі для:
- SymptomLikelihood: likelihood симптому для однієї гіпотези
- ConditionEntry: стан (діагноз) з таблицею likelihoods
- SourceEntry: джерело болю (локальне або віддзеркалене)
- QuestionDefinition: питання каталогу

Всі моделі незмінні (frozen): каталог завантажується один раз і
спільно використовується всіма сесіями.
"""

from enum import Enum
from typing import Any, Dict, List, Optional, Union
from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)

from ..regions import ALL_REGIONS, normalize_region, normalize_regions


YES_TOKENS = frozenset({"yes", "y", "true", "1"})
NO_TOKENS = frozenset({"no", "n", "false", "0"})


# =============================================================================
# ENUMS
# =============================================================================

class SymptomCategory(str, Enum):
    """Діагностична категорія симптому"""
    SCREENING = "screening"           # загальний скринінг
    CONFIRMATION = "confirmation"     # підтверджує провідну гіпотезу
    PATHOGNOMONIC = "pathognomonic"   # майже однозначно вказує на стан


class QuestionPhase(str, Enum):
    """Фаза інтерв'ю, до якої належить питання"""
    SAFETY = "safety"
    CONTEXT = "context"
    REGION = "region"
    SOURCE_IDENTIFICATION = "source_identification"
    FUNCTIONAL = "functional"
    DIFFERENTIAL = "differential"


class QuestionType(str, Enum):
    """Тип відповіді"""
    YES_NO = "yes_no"
    MULTIPLE_CHOICE = "multiple_choice"
    BODY_SELECTION = "body_selection"


# =============================================================================
# LIKELIHOODS
# =============================================================================

class SymptomLikelihood(BaseModel):
    """
    Likelihood симптому для однієї гіпотези.

    Два формати:
        {"present": 0.9, "absent": 0.1, "weight": 0.9, "category": "confirmation"}
        {"mild": 0.6, "severe": 0.3}   # value-specific (multiple choice)

    Приклад:
        lk = SymptomLikelihood(present=0.9, absent=0.1)
        lk.probability_of(True)     # 0.9
        lk.probability_of("mild")   # 0.5 (значення не описане)
    """
    model_config = ConfigDict(frozen=True)

    present: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="P(симптом є | гіпотеза)")
    absent: Optional[float] = Field(default=None, ge=0.0, le=1.0, description="P(симптому немає | гіпотеза)")
    weight: float = Field(default=0.5, ge=0.0, le=1.0, description="Діагностична вага симптому")
    category: SymptomCategory = Field(default=SymptomCategory.SCREENING)
    values: Dict[str, float] = Field(
        default_factory=dict,
        description="Value-specific likelihoods {значення: ймовірність}"
    )

    @model_validator(mode="before")
    @classmethod
    def _collect_value_specific(cls, data: Any) -> Any:
        """Перенести невідомі числові ключі у values"""
        if not isinstance(data, dict):
            return data
        reserved = {"present", "absent", "weight", "category", "values"}
        extra = {k: v for k, v in data.items() if k not in reserved}
        if not extra:
            return data
        result = {k: v for k, v in data.items() if k in reserved}
        values = dict(result.get("values") or {})
        values.update({str(k): v for k, v in extra.items()})
        result["values"] = values
        return result

    @field_validator("values")
    @classmethod
    def _check_values(cls, v: Dict[str, float]) -> Dict[str, float]:
        for key, p in v.items():
            if not isinstance(p, (int, float)) or isinstance(p, bool) or not 0.0 <= p <= 1.0:
                raise ValueError(f"ймовірність для значення '{key}' має бути в [0, 1], отримано {p!r}")
        return {str(key).strip().lower(): float(p) for key, p in v.items()}

    def probability_of(self, value: Union[bool, str, None], neutral: float = 0.5) -> float:
        """
        P(спостереження | гіпотеза).

        Невідома комбінація симптом/значення дає нейтральне значення,
        ніколи не нуль: пропуск у таблиці не виключає гіпотезу.
        """
        if isinstance(value, bool):
            p = self.present if value else self.absent
            return neutral if p is None else p

        if isinstance(value, str):
            key = value.strip().lower()
            if key in self.values:
                return self.values[key]
            if key in YES_TOKENS and self.present is not None:
                return self.present
            if key in NO_TOKENS and self.absent is not None:
                return self.absent

        return neutral


class _HypothesisEntry(BaseModel):
    """Спільні поля стану та джерела болю"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., min_length=1)
    name: str = Field(default="")
    base_probability: float = Field(default=0.0, ge=0.0, le=1.0)
    symptom_likelihoods: Dict[str, SymptomLikelihood] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("symptom_likelihoods", "symptom_probabilities"),
    )

    @model_validator(mode="before")
    @classmethod
    def _default_name(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("name") and data.get("id"):
            data = {**data, "name": str(data["id"]).replace("_", " ").title()}
        return data

    def likelihood(self, symptom: str) -> Optional[SymptomLikelihood]:
        return self.symptom_likelihoods.get(symptom)


class ConditionEntry(_HypothesisEntry):
    """
    Стан (діагноз) в регіональній таблиці.

    Приклад:
        ConditionEntry(
            id="lateral_ligament_sprain",
            name="Lateral Ankle Sprain",
            base_probability=0.4,
            regions=["ankle"],
            symptom_likelihoods={"inversion_injury": {"present": 0.9, "absent": 0.1}},
        )
    """
    regions: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(
        default_factory=list,
        description="Специфічні рекомендації самодопомоги"
    )

    @field_validator("regions", mode="before")
    @classmethod
    def _normalize_regions(cls, v: Any) -> List[str]:
        if v is None:
            return []
        if isinstance(v, str):
            v = [v]
        return normalize_regions(v)


class SourceEntry(_HypothesisEntry):
    """
    Кандидат-джерело болю для ділянки.

    is_local=False означає, що біль віддзеркалений з іншої
    ділянки (refers_to_region).
    """
    is_local: bool = True
    is_red_flag: bool = False
    refers_to_region: Optional[str] = None

    @field_validator("refers_to_region", mode="before")
    @classmethod
    def _normalize_target(cls, v: Any) -> Optional[str]:
        return normalize_region(v) if v else None


# =============================================================================
# QUESTIONS
# =============================================================================

class QuestionOption(BaseModel):
    """Варіант відповіді для multiple choice"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    value: str = Field(..., validation_alias=AliasChoices("value", "id"))
    text: str = ""

    @model_validator(mode="before")
    @classmethod
    def _default_text(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("text"):
            data = {**data, "text": data.get("value", data.get("id", ""))}
        return data


class ConditionalOn(BaseModel):
    """Питання показується лише після певної відповіді на інше питання"""
    model_config = ConfigDict(frozen=True)

    question: str
    answer: Union[bool, str]


class QuestionDefinition(BaseModel):
    """
    Питання каталогу.

    body_regions=["all"] означає загальне питання; інакше питання
    стосується лише перелічених ділянок.

    option_symptoms задає відповідність "варіант → симптоми" для
    питань з одним вибором: обраний варіант дає present для своїх
    симптомів і absent для симптомів інших варіантів.
    """
    model_config = ConfigDict(frozen=True)

    id: str = Field(..., min_length=1)
    phase: QuestionPhase
    text: str
    type: QuestionType = QuestionType.YES_NO
    options: List[QuestionOption] = Field(default_factory=list)
    body_regions: List[str] = Field(default_factory=lambda: [ALL_REGIONS])
    tests_symptoms: List[str] = Field(default_factory=list)
    diagnostic_weight: float = Field(default=1.0, ge=0.0)
    information_gain_potential: float = Field(default=1.0, ge=0.0)
    red_flag: bool = False
    red_flag_options: List[str] = Field(default_factory=list)
    conditional_on: Optional[ConditionalOn] = None
    clinical_note: Optional[str] = None
    option_symptoms: Dict[str, List[str]] = Field(default_factory=dict)

    @field_validator("body_regions", mode="before")
    @classmethod
    def _normalize_body_regions(cls, v: Any) -> List[str]:
        if v is None:
            return [ALL_REGIONS]
        if isinstance(v, str):
            v = [v]
        regions = normalize_regions(v)
        return regions or [ALL_REGIONS]

    @field_validator("options", mode="before")
    @classmethod
    def _coerce_options(cls, v: Any) -> Any:
        # Допускаємо скорочений запис: ["mild", "severe"]
        if isinstance(v, list):
            return [{"value": o, "text": o} if isinstance(o, str) else o for o in v]
        return v

    @model_validator(mode="after")
    def _check_options(self):
        values = {o.value for o in self.options}
        unknown = (set(self.red_flag_options) | set(self.option_symptoms)) - values
        if self.options and unknown:
            raise ValueError(f"варіанти {sorted(unknown)} відсутні серед options")
        # Без red_flag_options жодна відповідь не підніме прапорець
        if self.red_flag and self.type == QuestionType.MULTIPLE_CHOICE and not self.red_flag_options:
            raise ValueError("multiple choice питання з red_flag потребує red_flag_options")
        return self

    # -------------------------------------------------------------------------

    @property
    def applies_to_all(self) -> bool:
        return ALL_REGIONS in self.body_regions

    def applies_to(self, region: Optional[str]) -> bool:
        """Чи можна ставити питання для ділянки (None = ділянка ще невідома)"""
        if self.applies_to_all:
            return True
        return region is not None and region in self.body_regions

    @property
    def option_values(self) -> List[str]:
        return [o.value for o in self.options]

    def option_text(self, value: str) -> Optional[str]:
        for option in self.options:
            if option.value == value:
                return option.text
        return None

    @property
    def all_symptoms(self) -> List[str]:
        """tests_symptoms + симптоми всіх варіантів (без дублікатів)"""
        result = list(self.tests_symptoms)
        for symptoms in self.option_symptoms.values():
            for symptom in symptoms:
                if symptom not in result:
                    result.append(symptom)
        return result

    def sibling_symptoms(self, value: str) -> List[str]:
        """Симптоми інших варіантів, які виключає обраний варіант"""
        selected = set(self.option_symptoms.get(value, []))
        result: List[str] = []
        for option, symptoms in self.option_symptoms.items():
            if option == value:
                continue
            for symptom in symptoms:
                if symptom not in selected and symptom not in result:
                    result.append(symptom)
        return result

    def __repr__(self) -> str:
        return f"QuestionDefinition(id={self.id!r}, phase={self.phase.value}, type={self.type.value})"
