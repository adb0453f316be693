"""
Тести для модулів knowledge, schemas.knowledge та regions

Запуск: pytest tests/test_knowledge.py -v
"""

import json

import pytest


# =============================================================================
# REGIONS
# =============================================================================

@pytest.mark.parametrize("raw, expected", [
    ("Lower Back", "lumbar_spine"),
    ("lower-back", "lumbar_spine"),
    ("neck", "cervical_spine"),
    ("calf", "lower_leg"),
    ("upper_arm", "arm"),
    (" Ankle ", "ankle"),
    ("", None),
    (None, None),
])
def test_normalize_region(raw, expected):
    from physio_case.knowledge import normalize_region

    assert normalize_region(raw) == expected


def test_normalize_regions_deduplicates():
    from physio_case.regions import normalize_regions

    assert normalize_regions(["neck", "cervical", "Shoulder", ""]) == ["cervical_spine", "shoulder"]


# =============================================================================
# SCHEMAS
# =============================================================================

def test_symptom_likelihood_formats():
    from physio_case.schemas import SymptomCategory, SymptomLikelihood

    lk = SymptomLikelihood.model_validate({"present": 0.9, "absent": 0.1, "category": "pathognomonic"})
    assert lk.category == SymptomCategory.PATHOGNOMONIC
    assert lk.probability_of(True) == 0.9
    assert lk.probability_of(False) == 0.1
    assert lk.probability_of("mild") == 0.5

    valued = SymptomLikelihood.model_validate({"Mild": 0.6, "severe": 0.3})
    assert valued.values == {"mild": 0.6, "severe": 0.3}
    assert valued.probability_of("MILD") == 0.6
    assert valued.probability_of(True) == 0.5
    assert valued.probability_of(True, neutral=0.4) == 0.4


def test_invalid_probability_rejected():
    from pydantic import ValidationError
    from physio_case.schemas import SymptomLikelihood

    with pytest.raises(ValidationError):
        SymptomLikelihood.model_validate({"present": 1.2})
    with pytest.raises(ValidationError):
        SymptomLikelihood.model_validate({"mild": -0.1})
    with pytest.raises(ValidationError):
        SymptomLikelihood.model_validate({"present": 0.9, "weight": 1.5})


def test_question_definition_defaults():
    from physio_case.schemas import QuestionDefinition, QuestionType

    question = QuestionDefinition.model_validate({
        "id": "DIFF_X", "phase": "differential", "text": "Swelling?",
        "type": "multiple_choice", "options": ["none", {"id": "mild", "text": "A little"}],
        "body_regions": ["Lower Back", "lumbar"],
    })

    assert question.type == QuestionType.MULTIPLE_CHOICE
    assert question.option_values == ["none", "mild"]
    assert question.option_text("none") == "none"
    assert question.option_text("mild") == "A little"
    assert question.body_regions == ["lumbar_spine"]
    assert question.applies_to("lumbar_spine")
    assert not question.applies_to(None)
    assert not question.applies_to_all

    general = QuestionDefinition(id="SAFETY_X", phase="safety", text="Fever?")
    assert general.body_regions == ["all"]
    assert general.applies_to(None)


def test_question_option_references_checked():
    from pydantic import ValidationError
    from physio_case.schemas import QuestionDefinition

    with pytest.raises(ValidationError):
        QuestionDefinition.model_validate({
            "id": "Q", "phase": "safety", "text": "?", "type": "multiple_choice",
            "options": ["a", "b"], "red_flag_options": ["c"],
        })


def test_entry_default_name():
    from physio_case.schemas import ConditionEntry, SourceEntry

    entry = ConditionEntry(id="rotator_cuff_tendinopathy", base_probability=0.4, regions="Shoulder")
    assert entry.name == "Rotator Cuff Tendinopathy"
    assert entry.regions == ["shoulder"]

    source = SourceEntry.model_validate({
        "id": "cervical_referral", "is_local": False, "refers_to_region": "neck",
        "symptom_probabilities": {"neck_pain": {"present": 0.8}},
    })
    assert source.refers_to_region == "cervical_spine"
    assert source.likelihood("neck_pain").present == 0.8


# =============================================================================
# KNOWLEDGE BASE
# =============================================================================

def test_knowledge_base_accessors(kb):
    from physio_case.schemas import QuestionPhase

    assert set(kb.regions) == {"ankle", "shoulder", "cervical_spine"}
    assert kb.source_regions == ("shoulder",)
    assert kb.has_conditions("Ankle")
    assert kb.has_sources("shoulder")
    assert not kb.has_sources("ankle")
    assert len(kb.sources_for("knee")) == 0
    assert len(kb.conditions_for(None)) == 0

    assert kb.question("missing") is None
    assert kb.question("RSRC_SHOULDER_001").phase == QuestionPhase.SOURCE_IDENTIFICATION
    assert [q.id for q in kb.questions_for_phase(QuestionPhase.SAFETY)] == ["SAFETY_001", "SAFETY_ANKLE_001"]

    assert kb.condition("frozen_shoulder").name == "Frozen Shoulder"
    assert kb.condition("frozen_shoulder", "ankle").name == "Frozen Shoulder"
    assert kb.condition("nothing") is None


def test_knowledge_base_is_read_only(kb):
    with pytest.raises(TypeError):
        kb.conditions_for("ankle")["new"] = None


def test_duplicate_question_id(make_kb, raw_questions):
    from physio_case.errors import KnowledgeBaseError

    with pytest.raises(KnowledgeBaseError):
        make_kb(questions=raw_questions + [raw_questions[0]])


def test_unknown_conditional_reference(make_kb, raw_questions):
    from physio_case.errors import KnowledgeBaseError

    raw_questions[-1]["conditional_on"] = {"question": "NOPE_001", "answer": True}
    with pytest.raises(KnowledgeBaseError):
        make_kb(questions=raw_questions)


def test_invalid_table_raises_knowledge_error(make_kb):
    from physio_case.errors import KnowledgeBaseError

    conditions = {"knee": {"meniscus_tear": {"base_probability": 1.5}}}
    with pytest.raises(KnowledgeBaseError):
        make_kb(conditions=conditions)

    # KnowledgeBaseError є підкласом ValueError
    with pytest.raises(ValueError):
        make_kb(conditions={"knee": ["not", "a", "mapping"]})


def test_red_flag_choice_without_flag_options_rejected(make_kb, raw_questions):
    from physio_case.errors import KnowledgeBaseError

    safety = next(q for q in raw_questions if q["id"] == "SAFETY_001")
    safety.update({"type": "multiple_choice", "options": ["bladder_loss", "none"]})
    with pytest.raises(KnowledgeBaseError, match="red_flag_options"):
        make_kb(questions=raw_questions)

    # З red_flag_options каталог валідний
    safety["red_flag_options"] = ["bladder_loss"]
    kb = make_kb(questions=raw_questions)
    assert kb.question("SAFETY_001").red_flag_options == ["bladder_loss"]


def test_flat_condition_format():
    """cpt_tables + регіональні prior_probabilities"""
    from physio_case.knowledge import KnowledgeBase

    kb = KnowledgeBase.from_dicts(
        conditions={
            "cpt_tables": {
                "cervical_radiculopathy": {"symptom_probabilities": {"arm_tingling": {"present": 0.85}}},
                "cervical_facet_syndrome": {"symptom_probabilities": {"arm_tingling": {"present": 0.1}}},
            },
            "prior_probabilities": {
                "neck": {"cervical_radiculopathy": 0.3, "cervical_facet_syndrome": 0.7},
            },
        },
        questions={"questions": {"Q1": {"phase": "differential", "text": "Tingling?"}}},
    )

    table = kb.conditions_for("cervical_spine")
    assert table["cervical_facet_syndrome"].base_probability == 0.7
    assert table["cervical_radiculopathy"].likelihood("arm_tingling").present == 0.85
    assert kb.question("Q1").text == "Tingling?"


def test_from_directory(tmp_path):
    """JSON та YAML файли каталогу"""
    import yaml
    from physio_case.knowledge import KnowledgeBase

    (tmp_path / "conditions.json").write_text(json.dumps({
        "knee": {"meniscus_tear": {"base_probability": 0.6}, "patellofemoral_pain": {"base_probability": 0.4}},
    }), encoding="utf-8")
    (tmp_path / "questions.yaml").write_text(yaml.safe_dump({"questions": [
        {"id": "REGION_001", "phase": "region", "type": "body_selection", "text": "Where?"},
    ]}), encoding="utf-8")

    kb = KnowledgeBase.from_directory(tmp_path)
    assert kb.regions == ("knee",)
    assert kb.source_regions == ()
    assert kb.question("REGION_001") is not None


def test_from_directory_missing_files(tmp_path):
    from physio_case.errors import KnowledgeBaseError
    from physio_case.knowledge import KnowledgeBase

    with pytest.raises(KnowledgeBaseError):
        KnowledgeBase.from_directory(tmp_path / "absent")
    with pytest.raises(KnowledgeBaseError):
        KnowledgeBase.from_directory(tmp_path)


def test_bundled_pack_loads_once():
    from physio_case.knowledge import DEFAULT_DATA_DIR, load_knowledge_base

    kb = load_knowledge_base()
    assert kb is load_knowledge_base(DEFAULT_DATA_DIR)
    assert {"ankle", "shoulder", "cervical_spine"} <= set(kb.regions)
    assert kb.has_sources("shoulder")
    assert kb.question("REGION_001") is not None

    # Джерела з refers_to_region вказують на ділянки з таблицями станів
    for source in kb.sources_for("shoulder").values():
        if source.refers_to_region is not None:
            assert kb.has_conditions(source.refers_to_region)
