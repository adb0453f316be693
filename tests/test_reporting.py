"""
Тести для модуля diagnosis_cycle.reporting

Запуск: pytest tests/test_reporting.py -v
"""

import pytest


def _ranked(*items):
    from physio_case.diagnosis_cycle.reporting import confidence_label
    from physio_case.schemas import RankedCondition

    return [
        RankedCondition(id=cid, name=name, probability=p, confidence=confidence_label(p))
        for cid, name, p in items
    ]


def _referred_source():
    from physio_case.schemas import SourceIdentificationResult, SourceSummary

    top = SourceSummary(
        id="cervical_referral", name="Cervical Spine Referral", probability=0.78,
        is_local=False, refers_to_region="cervical_spine",
    )
    return SourceIdentificationResult(
        pain_site="shoulder",
        is_local=False,
        top_source=top,
        all_sources=[top],
        should_switch_region=True,
        new_region="cervical_spine",
        clinical_implication="Pain at shoulder is likely referred from Cervical Spine Referral.",
    )


@pytest.mark.parametrize("probability, label", [
    (0.81, "Very High"),
    (0.8, "High"),
    (0.61, "High"),
    (0.41, "Moderate"),
    (0.21, "Low"),
    (0.2, "Very Low"),
    (0.0, "Very Low"),
])
def test_confidence_label(probability, label):
    from physio_case.diagnosis_cycle.reporting import confidence_label

    assert confidence_label(probability) == label


def test_rank_conditions():
    from physio_case.diagnosis_cycle.reporting import rank_conditions

    posterior = {"a": 0.004, "b": 0.6461, "c": 0.2, "d": 0.1, "e": 0.05}
    ranked = rank_conditions(posterior, lambda cid: cid.upper())

    assert [r.id for r in ranked] == ["b", "c", "d"]
    assert ranked[0].probability == 0.65
    assert ranked[0].name == "B"
    assert ranked[0].confidence == "High"


def test_diagnostic_summary():
    from physio_case.diagnosis_cycle.reporting import diagnostic_summary

    assert diagnostic_summary([]) == "Insufficient information for diagnosis. More assessment needed."

    strong = _ranked(("a", "Lateral Ankle Sprain", 0.86))
    assert diagnostic_summary(strong) == "Strong evidence suggests Lateral Ankle Sprain (86% probability)"

    likely = _ranked(("a", "Lateral Ankle Sprain", 0.65), ("b", "High Ankle Sprain", 0.3))
    assert diagnostic_summary(likely) == "Likely diagnosis: Lateral Ankle Sprain (65% probability)"

    differential = _ranked(("a", "Lateral Ankle Sprain", 0.5), ("b", "High Ankle Sprain", 0.4))
    assert diagnostic_summary(differential) == (
        "Differential diagnosis between Lateral Ankle Sprain (50%) and High Ankle Sprain (40%)"
    )

    single = _ranked(("a", "Lateral Ankle Sprain", 0.5))
    assert diagnostic_summary(single).startswith("Possible diagnosis: Lateral Ankle Sprain (50% probability).")


def test_diagnostic_summary_mentions_referral():
    from physio_case.diagnosis_cycle.reporting import diagnostic_summary

    summary = diagnostic_summary(_ranked(("r", "Cervical Radiculopathy", 0.86)), _referred_source())
    assert summary == (
        "Strong evidence suggests Cervical Radiculopathy (86% probability). "
        "Pain at shoulder is likely referred from Cervical Spine Referral."
    )


def test_evidence_quality():
    from physio_case.diagnosis_cycle.reporting import evidence_quality

    assert evidence_quality(8, True, True) == "Strong evidence base"
    assert evidence_quality(8, True, False) == "Adequate evidence base"
    assert evidence_quality(5, True, False) == "Adequate evidence base"
    assert evidence_quality(5, False, True) == "Limited evidence base"
    assert evidence_quality(3, False, False) == "Limited evidence base"
    assert evidence_quality(2, True, True) == "Insufficient evidence"


def test_pain_source_summary():
    from physio_case.diagnosis_cycle.reporting import pain_source_summary

    assert pain_source_summary(None) is None
    text = pain_source_summary(_referred_source())
    assert text.startswith("Pain at shoulder is likely REFERRED from Cervical Spine Referral (78% confidence).")


def test_general_recommendations():
    from physio_case.diagnosis_cycle.reporting import GENERAL_STEPS, build_recommendations

    ranked = _ranked(("a", "Lateral Ankle Sprain", 0.5))
    rec = build_recommendations(ranked, confidence=0.4)

    assert rec.type == "general"
    assert rec.condition is None
    assert rec.next_steps == GENERAL_STEPS
    assert rec.note is None


def test_specific_recommendations_include_condition_advice(kb):
    from physio_case.diagnosis_cycle.reporting import SPECIFIC_STEPS, build_recommendations

    ranked = _ranked(("achilles_tendinopathy", "Achilles Tendinopathy", 0.8))
    entry = kb.condition("achilles_tendinopathy", "ankle")
    rec = build_recommendations(ranked, confidence=0.7, condition=entry)

    assert rec.type == "specific"
    assert rec.condition == "Achilles Tendinopathy"
    assert rec.next_steps[:len(SPECIFIC_STEPS)] == SPECIFIC_STEPS
    assert "Start a graded calf-loading programme" in rec.next_steps
    assert rec.note is not None


def test_recommendations_for_referred_pain():
    from physio_case.diagnosis_cycle.reporting import build_recommendations

    ranked = _ranked(("r", "Cervical Radiculopathy", 0.86))
    source = _referred_source()

    specific = build_recommendations(ranked, confidence=0.7, source=source)
    assert "IMPORTANT: Pain at shoulder is likely referred" in specific.message
    assert specific.next_steps[-1] == "Assessment should include cervical_spine"

    general = build_recommendations(ranked, confidence=0.3, source=source)
    assert general.next_steps[-1] == "Have your cervical_spine assessed as well"


def test_conversation_summary(kb):
    from physio_case.diagnosis_cycle import ConversationTurn
    from physio_case.diagnosis_cycle.reporting import conversation_summary

    turns = [
        ConversationTurn("SAFETY_001", kb.question("SAFETY_001").text, False, "safety"),
        ConversationTurn("CONTEXT_001", kb.question("CONTEXT_001").text, "sudden", "context"),
        ConversationTurn("DIFF_ANKLE_001", kb.question("DIFF_ANKLE_001").text, True, "differential"),
    ]
    summary = conversation_summary(turns, kb.question, 0.8234)

    assert summary.total_questions == 3
    assert summary.key_findings == [kb.question("CONTEXT_001").text, kb.question("DIFF_ANKLE_001").text]
    assert summary.final_confidence == 0.82
    assert summary.duration_seconds >= 0
