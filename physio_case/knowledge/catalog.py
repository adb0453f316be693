"""
Physio.Case — Каталог знань

KnowledgeBase містить:
- таблиці станів по ділянках (condition → base probability + likelihoods)
- таблиці джерел болю по ділянках (локальне / віддзеркалене)
- єдиний каталог питань (основні + питання джерела болю)

Каталог завантажується один раз на процес і передається в движки
(load_knowledge_base кешує результат).
"""

import json
import logging
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple

import yaml
from pydantic import ValidationError

from ..errors import KnowledgeBaseError
from ..regions import normalize_region
from ..schemas.knowledge import (
    ConditionEntry,
    QuestionDefinition,
    QuestionPhase,
    SourceEntry,
)


logger = logging.getLogger(__name__)

DEFAULT_DATA_DIR = Path(__file__).resolve().parent.parent / "data"

_EMPTY: Mapping[str, Any] = MappingProxyType({})


# =============================================================================
# PARSING
# =============================================================================

def _validate(model, data: Dict[str, Any], what: str):
    """Pydantic валідація з помилкою KnowledgeBaseError"""
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise KnowledgeBaseError(f"{what}: {e}") from e


def _parse_condition_tables(raw: Mapping[str, Any]) -> Dict[str, Dict[str, ConditionEntry]]:
    """
    Таблиці станів.

    Формати:
        {"ankle": {"lateral_ligament_sprain": {...}}}

        {"cpt_tables": {"lateral_ligament_sprain": {...}},
         "prior_probabilities": {"ankle": {"lateral_ligament_sprain": 0.4}}}
    """
    if "cpt_tables" in raw:
        return _parse_flat_condition_tables(raw)
    if "regions" in raw and isinstance(raw["regions"], Mapping):
        raw = raw["regions"]

    tables: Dict[str, Dict[str, ConditionEntry]] = {}
    for region_name, conditions in raw.items():
        region = normalize_region(region_name)
        if not isinstance(conditions, Mapping):
            raise KnowledgeBaseError(f"conditions[{region_name}]: очікувався словник станів")
        table: Dict[str, ConditionEntry] = {}
        for condition_id, data in conditions.items():
            data = {"regions": [region], **dict(data), "id": condition_id}
            table[condition_id] = _validate(ConditionEntry, data, f"condition '{condition_id}'")
        tables[region] = table
    return tables


def _parse_flat_condition_tables(raw: Mapping[str, Any]) -> Dict[str, Dict[str, ConditionEntry]]:
    cpt = raw.get("cpt_tables") or {}
    priors = raw.get("prior_probabilities") or {}

    entries = {
        condition_id: _validate(ConditionEntry, {**dict(data), "id": condition_id}, f"condition '{condition_id}'")
        for condition_id, data in cpt.items()
    }

    tables: Dict[str, Dict[str, ConditionEntry]] = {}
    if priors:
        for region_name, region_priors in priors.items():
            region = normalize_region(region_name)
            table: Dict[str, ConditionEntry] = {}
            for condition_id, prior in region_priors.items():
                if condition_id not in entries:
                    raise KnowledgeBaseError(
                        f"prior_probabilities[{region_name}]: невідомий стан '{condition_id}'"
                    )
                # Регіональний prior перекриває base_probability
                table[condition_id] = _validate(
                    ConditionEntry,
                    {**entries[condition_id].model_dump(), "base_probability": prior},
                    f"condition '{condition_id}'",
                )
            tables[region] = table
    else:
        for condition_id, entry in entries.items():
            for region in entry.regions:
                tables.setdefault(region, {})[condition_id] = entry
    return tables


def _parse_source_tables(raw: Mapping[str, Any]) -> Dict[str, Dict[str, SourceEntry]]:
    """
    Таблиці джерел болю.

    Формат:
        {"shoulder": {"sources": {"local_shoulder": {...}, "cervical_referral": {...}}}}
    ("sources" можна опустити; обгортка "source_cpt_tables" теж допускається)
    """
    if "source_cpt_tables" in raw:
        raw = raw["source_cpt_tables"]

    tables: Dict[str, Dict[str, SourceEntry]] = {}
    for region_name, region_data in raw.items():
        region = normalize_region(region_name)
        if not isinstance(region_data, Mapping):
            raise KnowledgeBaseError(f"sources[{region_name}]: очікувався словник джерел")
        sources = region_data.get("sources", region_data)
        table: Dict[str, SourceEntry] = {}
        for source_id, data in sources.items():
            table[source_id] = _validate(SourceEntry, {**dict(data), "id": source_id}, f"source '{source_id}'")
        tables[region] = table
    return tables


def _question_items(raw: Any, key: str) -> List[Dict[str, Any]]:
    """Питання як список або словник {id: питання}"""
    if isinstance(raw, Mapping) and key in raw:
        raw = raw[key]
    if raw is None:
        return []
    if isinstance(raw, Mapping):
        return [{**dict(data), "id": qid} for qid, data in raw.items()]
    if isinstance(raw, list):
        return [dict(item) for item in raw]
    raise KnowledgeBaseError(f"{key}: очікувався список або словник питань")


def _parse_questions(items: Iterable[Dict[str, Any]], default_phase: Optional[QuestionPhase] = None) -> List[QuestionDefinition]:
    questions = []
    for data in items:
        if default_phase is not None:
            data.setdefault("phase", default_phase.value)
        questions.append(_validate(QuestionDefinition, data, f"question '{data.get('id', '?')}'"))
    return questions


def _read_document(directory: Path, stem: str, required: bool) -> Optional[Any]:
    """Прочитати {stem}.json / {stem}.yaml / {stem}.yml"""
    for suffix in (".json", ".yaml", ".yml"):
        path = directory / f"{stem}{suffix}"
        if not path.exists():
            continue
        with open(path, "r", encoding="utf-8") as f:
            try:
                if suffix == ".json":
                    return json.load(f)
                return yaml.safe_load(f)
            except (json.JSONDecodeError, yaml.YAMLError) as e:
                raise KnowledgeBaseError(f"{path}: {e}") from e
    if required:
        raise KnowledgeBaseError(f"{directory}: відсутній файл {stem}.json або {stem}.yaml")
    return None


# =============================================================================
# KNOWLEDGE BASE
# =============================================================================

class KnowledgeBase:
    """
    Незмінний каталог знань.

    Приклад використання:
        kb = KnowledgeBase.from_directory("physio_case/data")
        kb.conditions_for("ankle")         # {id: ConditionEntry}
        kb.sources_for("shoulder")         # {id: SourceEntry}
        kb.question("REGION_001")
    """

    def __init__(
        self,
        condition_tables: Mapping[str, Mapping[str, ConditionEntry]],
        questions: Iterable[QuestionDefinition],
        source_tables: Optional[Mapping[str, Mapping[str, SourceEntry]]] = None,
    ):
        self._conditions = MappingProxyType({
            region: MappingProxyType(dict(table))
            for region, table in condition_tables.items()
        })
        self._sources = MappingProxyType({
            region: MappingProxyType(dict(table))
            for region, table in (source_tables or {}).items()
        })

        ordered: Dict[str, QuestionDefinition] = {}
        for question in questions:
            if question.id in ordered:
                raise KnowledgeBaseError(f"дублікат id питання '{question.id}'")
            ordered[question.id] = question
        self._questions = MappingProxyType(ordered)

        self._validate_references()

    def _validate_references(self) -> None:
        for question in self._questions.values():
            dependency = question.conditional_on
            if dependency is not None and dependency.question not in self._questions:
                raise KnowledgeBaseError(
                    f"питання '{question.id}' залежить від невідомого питання '{dependency.question}'"
                )

    # -------------------------------------------------------------------------
    # Constructors
    # -------------------------------------------------------------------------

    @classmethod
    def from_dicts(
        cls,
        conditions: Mapping[str, Any],
        questions: Any,
        sources: Optional[Mapping[str, Any]] = None,
        referral_questions: Any = None,
    ) -> "KnowledgeBase":
        """Створити каталог з сирих словників (JSON/YAML структура)"""
        parsed_questions = _parse_questions(_question_items(questions, "questions"))
        parsed_questions += _parse_questions(
            _question_items(referral_questions, "referral_questions"),
            default_phase=QuestionPhase.SOURCE_IDENTIFICATION,
        )
        return cls(
            condition_tables=_parse_condition_tables(conditions or {}),
            questions=parsed_questions,
            source_tables=_parse_source_tables(sources or {}),
        )

    @classmethod
    def from_directory(cls, path) -> "KnowledgeBase":
        """
        Завантажити каталог з директорії.

        Файли: conditions.*, questions.* (обов'язкові),
               sources.*, referral_questions.* (необов'язкові).
        """
        directory = Path(path)
        if not directory.is_dir():
            raise KnowledgeBaseError(f"директорія каталогу не існує: {directory}")

        kb = cls.from_dicts(
            conditions=_read_document(directory, "conditions", required=True),
            questions=_read_document(directory, "questions", required=True),
            sources=_read_document(directory, "sources", required=False),
            referral_questions=_read_document(directory, "referral_questions", required=False),
        )
        logger.info(
            "Knowledge pack loaded from %s: %d regions, %d source regions, %d questions",
            directory, len(kb.regions), len(kb.source_regions), len(kb.questions),
        )
        return kb

    # -------------------------------------------------------------------------
    # Accessors
    # -------------------------------------------------------------------------

    @property
    def regions(self) -> Tuple[str, ...]:
        return tuple(self._conditions)

    @property
    def source_regions(self) -> Tuple[str, ...]:
        return tuple(self._sources)

    def conditions_for(self, region: Optional[str]) -> Mapping[str, ConditionEntry]:
        """Таблиця станів ділянки (порожня, якщо ділянка невідома)"""
        return self._conditions.get(normalize_region(region), _EMPTY)

    def sources_for(self, region: Optional[str]) -> Mapping[str, SourceEntry]:
        """Таблиця джерел болю ділянки (порожня, якщо не описана)"""
        return self._sources.get(normalize_region(region), _EMPTY)

    def has_conditions(self, region: Optional[str]) -> bool:
        return len(self.conditions_for(region)) > 0

    def has_sources(self, region: Optional[str]) -> bool:
        return len(self.sources_for(region)) > 0

    def condition(self, condition_id: str, region: Optional[str] = None) -> Optional[ConditionEntry]:
        """Знайти стан (спочатку в таблиці ділянки, потім у всіх)"""
        if region is not None:
            entry = self.conditions_for(region).get(condition_id)
            if entry is not None:
                return entry
        for table in self._conditions.values():
            if condition_id in table:
                return table[condition_id]
        return None

    @property
    def questions(self) -> Tuple[QuestionDefinition, ...]:
        """Всі питання в порядку каталогу"""
        return tuple(self._questions.values())

    def question(self, question_id: str) -> Optional[QuestionDefinition]:
        return self._questions.get(question_id)

    def questions_for_phase(self, phase: QuestionPhase) -> List[QuestionDefinition]:
        return [q for q in self._questions.values() if q.phase == phase]

    def __repr__(self) -> str:
        return (
            f"KnowledgeBase(regions={list(self.regions)}, "
            f"source_regions={list(self.source_regions)}, questions={len(self._questions)})"
        )


@lru_cache(maxsize=None)
def _load_cached(path: str) -> KnowledgeBase:
    return KnowledgeBase.from_directory(path)


def load_knowledge_base(path=None) -> KnowledgeBase:
    """
    Завантажити каталог один раз на процес.

    Args:
        path: директорія каталогу (None = вбудований пакет physio_case/data)
    """
    directory = Path(path) if path is not None else DEFAULT_DATA_DIR
    return _load_cached(str(directory.resolve()))
