"""
Physio.Case — Answer Processor

Перетворення відповіді пацієнта на спостереження симптомів.

Підтримує:
- yes/no: кожен симптом питання отримує True/False
- multiple choice з option_symptoms: симптоми обраного варіанту present,
  симптоми інших варіантів absent (взаємовиключні варіанти)
- multiple choice без option_symptoms: симптом отримує значення варіанту
  (value-specific likelihoods)
- "Не знаю": спостережень немає
"""

import logging
from enum import Enum
from typing import Any, List, Mapping, NamedTuple, Optional, Union

from ..schemas.knowledge import NO_TOKENS, YES_TOKENS, QuestionDefinition, QuestionType


logger = logging.getLogger(__name__)

UNKNOWN_TOKENS = frozenset({"unknown", "not sure", "unsure", "skip", "?", "не знаю"})


class AnswerType(Enum):
    """Типи відповідей на питання"""
    YES = "yes"
    NO = "no"
    UNKNOWN = "unknown"  # "Не знаю"


class SymptomEvidence(NamedTuple):
    """Одне спостереження: симптом і значення (bool або варіант)"""
    symptom: str
    value: Union[bool, str]


def answer_type(raw: Any) -> Optional[AnswerType]:
    """Класифікувати відповідь (None = не yes/no/unknown)"""
    if isinstance(raw, bool):
        return AnswerType.YES if raw else AnswerType.NO
    if isinstance(raw, AnswerType):
        return raw
    if isinstance(raw, (int, float)) and raw in (0, 1):
        return AnswerType.YES if raw == 1 else AnswerType.NO
    if isinstance(raw, str):
        key = raw.strip().lower()
        if key in YES_TOKENS or key == "так":
            return AnswerType.YES
        if key in NO_TOKENS or key == "ні":
            return AnswerType.NO
        if key in UNKNOWN_TOKENS:
            return AnswerType.UNKNOWN
    return None


def coerce_yes_no(raw: Any) -> Optional[bool]:
    """bool / "yes" / "no" → True / False; інше → None"""
    kind = answer_type(raw)
    if kind == AnswerType.YES:
        return True
    if kind == AnswerType.NO:
        return False
    return None


def _is_non_empty(raw: Any) -> bool:
    if raw is None:
        return False
    if isinstance(raw, str):
        return bool(raw.strip())
    if isinstance(raw, (list, tuple, set, dict)):
        return len(raw) > 0
    return bool(raw)


def _fallback(question: QuestionDefinition, raw: Any) -> List[SymptomEvidence]:
    """Некоректна відповідь: непорожня = так, порожня = ні"""
    affirmative = _is_non_empty(raw)
    logger.warning(
        "Data-quality: malformed answer %r for %s (%s), treating as %s",
        raw, question.id, question.type.value, "affirmative" if affirmative else "negative",
    )
    return [SymptomEvidence(s, affirmative) for s in question.tests_symptoms]


def _option_evidence(question: QuestionDefinition, value: str) -> List[SymptomEvidence]:
    if question.option_symptoms:
        evidence = [SymptomEvidence(s, True) for s in question.option_symptoms.get(value, [])]
        evidence += [SymptomEvidence(s, False) for s in question.sibling_symptoms(value)]
        return evidence
    return [SymptomEvidence(s, value) for s in question.tests_symptoms]


def evidence_for(question: QuestionDefinition, raw: Any) -> List[SymptomEvidence]:
    """
    Спостереження симптомів з відповіді.

    Args:
        question: питання каталогу
        raw: відповідь (bool, рядок-варіант, ...)

    Returns:
        Список SymptomEvidence (порожній для "Не знаю" та вибору ділянки)
    """
    if question.type == QuestionType.BODY_SELECTION:
        return []

    if question.type == QuestionType.MULTIPLE_CHOICE and isinstance(raw, str) and raw in question.option_values:
        return _option_evidence(question, raw)

    if answer_type(raw) == AnswerType.UNKNOWN:
        return []

    if question.type == QuestionType.YES_NO:
        value = coerce_yes_no(raw)
        if value is None:
            return _fallback(question, raw)
        return [SymptomEvidence(s, value) for s in question.tests_symptoms]

    # MULTIPLE_CHOICE без переліку варіантів приймає будь-який рядок
    if isinstance(raw, str) and not question.options:
        return _option_evidence(question, raw)
    return _fallback(question, raw)


def possible_outcomes(question: QuestionDefinition) -> List[List[SymptomEvidence]]:
    """Всі можливі відповіді питання як списки спостережень (для EIG)"""
    if question.type == QuestionType.BODY_SELECTION:
        return []
    if question.type == QuestionType.MULTIPLE_CHOICE and question.options:
        return [_option_evidence(question, value) for value in question.option_values]
    return [
        [SymptomEvidence(s, True) for s in question.tests_symptoms],
        [SymptomEvidence(s, False) for s in question.tests_symptoms],
    ]


def is_affirmative(question: QuestionDefinition, raw: Any) -> bool:
    """Чи відповідь "так" (для multiple choice: обрано будь-який варіант)"""
    if question.type == QuestionType.YES_NO:
        value = coerce_yes_no(raw)
        if value is None:
            return answer_type(raw) != AnswerType.UNKNOWN and _is_non_empty(raw)
        return value
    return isinstance(raw, str) and raw in question.option_values


def is_red_flag_answer(question: QuestionDefinition, raw: Any) -> bool:
    """
    Чи відповідь піднімає червоний прапорець.

    - yes/no питання з red_flag: відповідь "так"
    - multiple choice: обраний варіант у red_flag_options
    """
    if question.type == QuestionType.MULTIPLE_CHOICE and question.red_flag_options:
        return isinstance(raw, str) and raw in question.red_flag_options
    if not question.red_flag:
        return False
    return question.type == QuestionType.YES_NO and is_affirmative(question, raw)


def finding_text(question: QuestionDefinition, raw: Any) -> Optional[str]:
    """Текст знахідки для звіту (None, якщо відповідь не є знахідкою)"""
    if not is_affirmative(question, raw):
        return None
    if question.type == QuestionType.MULTIPLE_CHOICE:
        label = question.text.replace("?", "").strip()
        return f"{label}: {question.option_text(raw) or raw}"
    if question.clinical_note:
        return question.clinical_note
    return question.text.replace("?", "").strip()


def is_condition_satisfied(question: QuestionDefinition, answers: Mapping[str, Any]) -> bool:
    """Чи виконана умова conditional_on"""
    dependency = question.conditional_on
    if dependency is None:
        return True
    if dependency.question not in answers:
        return False
    given = answers[dependency.question]
    expected = dependency.answer
    if isinstance(expected, bool):
        return coerce_yes_no(given) == expected
    return given == expected
