"""
Physio.Case — Формування звіту

- confidence_label: ймовірність → "Very High" / ... / "Very Low"
- rank_conditions: ≤ 3 стани з P > 1%, округлені до 2 знаків
- diagnostic_summary: одне речення висновку
- evidence_quality: оцінка доказової бази
- pain_source_summary / build_recommendations / conversation_summary
"""

from typing import Callable, List, Mapping, Optional, Sequence

from ..config.settings import ReportingConfig
from ..schemas.knowledge import ConditionEntry
from ..schemas.results import (
    ConversationSummary,
    RankedCondition,
    Recommendations,
    SourceIdentificationResult,
)
from ..question_engine.answer_processor import is_affirmative


GENERAL_MESSAGE = (
    "Based on your responses, we recommend a comprehensive physiotherapy "
    "assessment to determine the best treatment approach."
)

GENERAL_STEPS = [
    "Schedule an appointment with a physiotherapist",
    "Avoid activities that worsen your symptoms",
    "Apply ice for acute injuries, heat for stiffness",
    "Gentle movement as tolerated",
]

SPECIFIC_STEPS = [
    "Schedule an appointment with a physiotherapist for confirmation",
    "Avoid activities that worsen your symptoms",
    "Gentle movement as tolerated - avoid complete rest",
    "Apply ice for acute pain (first 48-72 hours) or heat for chronic stiffness",
    "Keep track of your symptoms and any changes",
]

PRELIMINARY_NOTE = (
    "This is a preliminary assessment based on your reported symptoms. "
    "A hands-on clinical examination is recommended for accurate diagnosis "
    "and personalized treatment planning."
)


def _percent(p: float) -> int:
    return int(round(p * 100))


def _non_local(source: Optional[SourceIdentificationResult]) -> bool:
    return source is not None and source.top_source is not None and not source.is_local


def confidence_label(probability: float, config: Optional[ReportingConfig] = None) -> str:
    """Мітка впевненості (пороги 0.8 / 0.6 / 0.4 / 0.2)"""
    config = config or ReportingConfig()
    for label, threshold in sorted(config.confidence_labels.items(), key=lambda x: x[1], reverse=True):
        if probability > threshold:
            return label
    return "Very Low"


def rank_conditions(
    posterior: Mapping[str, float],
    name_of: Callable[[str], str],
    config: Optional[ReportingConfig] = None,
) -> List[RankedCondition]:
    """Топ стани з P > min_condition_probability"""
    config = config or ReportingConfig()
    ranked = sorted(posterior.items(), key=lambda x: x[1], reverse=True)
    return [
        RankedCondition(
            id=condition_id,
            name=name_of(condition_id),
            probability=round(p, 2),
            confidence=confidence_label(p, config),
        )
        for condition_id, p in ranked
        if p > config.min_condition_probability
    ][:config.max_ranked_conditions]


def diagnostic_summary(
    ranked: Sequence[RankedCondition],
    source: Optional[SourceIdentificationResult] = None,
    config: Optional[ReportingConfig] = None,
) -> str:
    """
    Висновок одним реченням.

    - лідер > 0.8: "Strong evidence suggests ..."
    - лідер > 0.6: "Likely diagnosis: ..."
    - два й більше кандидатів: "Differential diagnosis between ..."
    - інакше: "Possible diagnosis: ..." / "Insufficient information ..."
    """
    config = config or ReportingConfig()
    if not ranked:
        return "Insufficient information for diagnosis. More assessment needed."

    top = ranked[0]
    if top.probability > config.strong_probability:
        summary = f"Strong evidence suggests {top.name} ({_percent(top.probability)}% probability)"
    elif top.probability > config.likely_probability:
        summary = f"Likely diagnosis: {top.name} ({_percent(top.probability)}% probability)"
    elif len(ranked) > 1:
        second = ranked[1]
        summary = (
            f"Differential diagnosis between {top.name} ({_percent(top.probability)}%) "
            f"and {second.name} ({_percent(second.probability)}%)"
        )
    else:
        summary = f"Possible diagnosis: {top.name} ({_percent(top.probability)}% probability). Further assessment recommended."

    if _non_local(source):
        if not summary.endswith("."):
            summary += "."
        summary += f" Pain at {source.pain_site} is likely referred from {source.top_source.name}."
    return summary


def evidence_quality(
    questions_asked: int,
    has_region: bool,
    has_high_value_evidence: bool,
    config: Optional[ReportingConfig] = None,
) -> str:
    config = config or ReportingConfig()
    if questions_asked >= config.strong_evidence_questions and has_region and has_high_value_evidence:
        return "Strong evidence base"
    if questions_asked >= config.adequate_evidence_questions and has_region:
        return "Adequate evidence base"
    if questions_asked >= config.limited_evidence_questions:
        return "Limited evidence base"
    return "Insufficient evidence"


def pain_source_summary(source: Optional[SourceIdentificationResult]) -> Optional[str]:
    if source is None or source.top_source is None:
        return None
    top = source.top_source
    if source.is_local:
        return f"Pain appears to originate locally from {top.name} ({_percent(top.probability)}% confidence)"
    return (
        f"Pain at {source.pain_site} is likely REFERRED from {top.name} "
        f"({_percent(top.probability)}% confidence). {source.clinical_implication}"
    )


def build_recommendations(
    ranked: Sequence[RankedCondition],
    confidence: float,
    source: Optional[SourceIdentificationResult] = None,
    condition: Optional[ConditionEntry] = None,
    config: Optional[ReportingConfig] = None,
) -> Recommendations:
    """
    Рекомендації для пацієнта.

    Низька впевненість → загальні рекомендації, інакше рекомендації для провідного
    стану (з його власними порадами з каталогу). Віддзеркалений біль
    додає примітку та крок про оцінку ділянки-джерела.
    """
    config = config or ReportingConfig()
    referred = _non_local(source)
    source_note = f"\n\nIMPORTANT: {source.clinical_implication}" if referred else ""
    target = (source.top_source.refers_to_region or "referring region") if referred else None

    if not ranked or confidence < config.specific_recommendation_confidence:
        steps = list(GENERAL_STEPS)
        if referred:
            steps.append(f"Have your {target} assessed as well")
        return Recommendations(
            type="general",
            confidence=round(confidence, 2),
            message=GENERAL_MESSAGE + source_note,
            next_steps=steps,
        )

    top = ranked[0]
    steps = list(SPECIFIC_STEPS)
    if condition is not None:
        steps += [s for s in condition.recommendations if s not in steps]
    if referred:
        steps.append(f"Assessment should include {target}")

    return Recommendations(
        type="specific",
        condition=top.name,
        confidence=round(confidence, 2),
        message=(
            f"Your symptoms suggest {top.name}. A professional physiotherapy assessment "
            f"can confirm the diagnosis and provide targeted treatment." + source_note
        ),
        next_steps=steps,
        note=PRELIMINARY_NOTE,
    )


def conversation_summary(
    turns: Sequence,
    question_lookup: Callable,
    final_confidence: float,
    config: Optional[ReportingConfig] = None,
) -> ConversationSummary:
    """
    Підсумок інтерв'ю.

    Args:
        turns: історія розмови (ConversationTurn)
        question_lookup: id → QuestionDefinition
        final_confidence: фінальна впевненість
    """
    config = config or ReportingConfig()
    findings: List[str] = []
    for turn in turns:
        question = question_lookup(turn.question_id)
        if question is not None and is_affirmative(question, turn.answer):
            findings.append(turn.question_text)

    duration = 0.0
    if turns:
        duration = round((turns[-1].timestamp - turns[0].timestamp).total_seconds(), 1)

    return ConversationSummary(
        total_questions=len(turns),
        duration_seconds=duration,
        key_findings=findings[:config.max_key_findings],
        final_confidence=round(final_confidence, 2),
    )
