"""
Physio.Case — Модуль Question Engine

Байєсівське оновлення гіпотез та вибір питань за Expected Information
Gain (EIG).

EIG(q) = H(p) - Σ_a P(a) · H(p | a)

Компоненти:
- information_gain: ентропія, байєсівське оновлення, впевненість, EIG
- PosteriorTracker / HypothesisSpace: поточний розподіл гіпотез
- QuestionSelector: ранжування питань
- answer_processor: відповідь → спостереження симптомів

Приклад використання:
    from physio_case.question_engine import HypothesisSpace, PosteriorTracker, QuestionSelector

    tracker = PosteriorTracker(HypothesisSpace(kb.conditions_for("ankle")))
    best = QuestionSelector().select(candidates, tracker)
    tracker.update("inversion_injury", True)
"""

from .information_gain import (
    EIGResult,
    entropy,
    normalize_probs,
    bayes_update,
    confidence,
    expected_information_gain,
)

from .posterior import (
    HypothesisSpace,
    PosteriorTracker,
)

from .question_selector import (
    QuestionSelector,
    RankedQuestion,
)

from .answer_processor import (
    AnswerType,
    SymptomEvidence,
    answer_type,
    coerce_yes_no,
    evidence_for,
    possible_outcomes,
    is_affirmative,
    is_red_flag_answer,
    finding_text,
    is_condition_satisfied,
)


__all__ = [
    # Information Gain
    "EIGResult",
    "entropy",
    "normalize_probs",
    "bayes_update",
    "confidence",
    "expected_information_gain",

    # Posterior
    "HypothesisSpace",
    "PosteriorTracker",

    # Question Selector
    "QuestionSelector",
    "RankedQuestion",

    # Answer Processor
    "AnswerType",
    "SymptomEvidence",
    "answer_type",
    "coerce_yes_no",
    "evidence_for",
    "possible_outcomes",
    "is_affirmative",
    "is_red_flag_answer",
    "finding_text",
    "is_condition_satisfied",
]
