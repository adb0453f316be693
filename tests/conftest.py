"""
Спільні фікстури: синтетичні таблиці ймовірностей та каталоги питань.

Числа підібрані так, щоб сценарії тестів були детермінованими
(див. коментарі біля окремих таблиць).
"""

import copy

import pytest


TEST_CONDITIONS = {
    "ankle": {
        "lateral_ligament_sprain": {
            "name": "Lateral Ankle Sprain",
            "base_probability": 0.4,
            "symptom_likelihoods": {
                "sudden_onset": {"present": 0.8, "absent": 0.2},
                "difficulty_weight_bearing": {"present": 0.7, "absent": 0.3, "weight": 0.5},
                "inversion_injury": {"present": 0.9, "absent": 0.1, "weight": 0.9, "category": "pathognomonic"},
                "lateral_tenderness": {"present": 0.9, "absent": 0.1, "weight": 0.85, "category": "confirmation"},
                "swelling": {"mild": 0.6, "severe": 0.3, "none": 0.1},
            },
        },
        "high_ankle_sprain": {
            "name": "High Ankle Sprain",
            "base_probability": 0.3,
            "symptom_likelihoods": {
                "sudden_onset": {"present": 0.7, "absent": 0.3},
                "difficulty_weight_bearing": {"present": 0.8, "absent": 0.2},
                "inversion_injury": {"present": 0.2, "absent": 0.8},
                "lateral_tenderness": {"present": 0.3, "absent": 0.7},
                "swelling": {"mild": 0.2, "severe": 0.6, "none": 0.2},
            },
        },
        "achilles_tendinopathy": {
            "name": "Achilles Tendinopathy",
            "base_probability": 0.3,
            "symptom_likelihoods": {
                "sudden_onset": {"present": 0.2, "absent": 0.8},
                "difficulty_weight_bearing": {"present": 0.3, "absent": 0.7},
                "inversion_injury": {"present": 0.1, "absent": 0.9},
                "lateral_tenderness": {"present": 0.1, "absent": 0.9},
                "swelling": {"mild": 0.2, "severe": 0.1, "none": 0.7},
            },
            "recommendations": ["Start a graded calf-loading programme"],
        },
    },
    "shoulder": {
        "rotator_cuff_tendinopathy": {
            "name": "Rotator Cuff Tendinopathy",
            "base_probability": 0.5,
            "symptom_likelihoods": {
                "overhead_pain": {"present": 0.85, "absent": 0.15},
                "painful_arc": {"present": 0.8, "absent": 0.2, "weight": 0.85},
            },
        },
        "frozen_shoulder": {
            "name": "Frozen Shoulder",
            "base_probability": 0.5,
            "symptom_likelihoods": {
                "overhead_pain": {"present": 0.6, "absent": 0.4},
                "painful_arc": {"present": 0.3, "absent": 0.7},
            },
        },
    },
    "cervical_spine": {
        "cervical_radiculopathy": {
            "name": "Cervical Radiculopathy",
            "base_probability": 0.5,
            "symptom_likelihoods": {
                "arm_tingling": {"present": 0.85, "absent": 0.15, "weight": 0.9},
                "pain_turning_head": {"present": 0.6, "absent": 0.4},
            },
        },
        "cervical_facet_syndrome": {
            "name": "Cervical Facet Joint Pain",
            "base_probability": 0.5,
            "symptom_likelihoods": {
                "arm_tingling": {"present": 0.1, "absent": 0.9},
                "pain_turning_head": {"present": 0.8, "absent": 0.2},
            },
        },
    },
}


TEST_SOURCES = {
    "shoulder": {
        "sources": {
            "shoulder_local": {
                "name": "Local Shoulder Structures",
                "base_probability": 0.5,
                "is_local": True,
                "symptom_likelihoods": {
                    "neck_reproduces_arm_symptoms": {"present": 0.1, "absent": 0.9},
                    "exertional_chest_symptoms": {"present": 0.05, "absent": 0.95},
                    "symptoms_below_elbow": {"present": 0.1, "absent": 0.9},
                    "symptoms_localized_to_shoulder": {"present": 0.8, "absent": 0.2},
                },
            },
            "cervical_referral": {
                "name": "Cervical Spine Referral",
                "base_probability": 0.35,
                "is_local": False,
                "refers_to_region": "neck",
                "symptom_likelihoods": {
                    "neck_reproduces_arm_symptoms": {
                        "present": 0.9, "absent": 0.1, "weight": 0.9, "category": "pathognomonic",
                    },
                    "exertional_chest_symptoms": {"present": 0.05, "absent": 0.95},
                    "symptoms_below_elbow": {"present": 0.8, "absent": 0.2, "category": "confirmation"},
                    "symptoms_localized_to_shoulder": {"present": 0.2, "absent": 0.8},
                },
            },
            "cardiac_referral": {
                "name": "Cardiac Referred Pain",
                "base_probability": 0.15,
                "is_local": False,
                "is_red_flag": True,
                "symptom_likelihoods": {
                    "neck_reproduces_arm_symptoms": {"present": 0.05, "absent": 0.95},
                    "exertional_chest_symptoms": {"present": 0.9, "absent": 0.1},
                    "symptoms_below_elbow": {"present": 0.5, "absent": 0.5},
                    "symptoms_localized_to_shoulder": {"present": 0.3, "absent": 0.7},
                },
            },
        }
    }
}


TEST_QUESTIONS = [
    {
        "id": "SAFETY_001", "phase": "safety",
        "text": "Any numbness in the saddle area or loss of bladder control?",
        "tests_symptoms": ["cauda_equina_signs"], "red_flag": True,
    },
    {
        "id": "SAFETY_ANKLE_001", "phase": "safety",
        "text": "Were you unable to take four steps after the injury?",
        "body_regions": ["ankle"], "tests_symptoms": ["ottawa_positive"], "red_flag": True,
    },
    {
        "id": "CONTEXT_001", "phase": "context", "type": "multiple_choice",
        "text": "How did your symptoms start?",
        "options": [{"value": "sudden", "text": "Suddenly"}, {"value": "gradual", "text": "Gradually"}],
        "tests_symptoms": ["sudden_onset", "gradual_onset"],
        "option_symptoms": {"sudden": ["sudden_onset"], "gradual": ["gradual_onset"]},
    },
    {
        "id": "CONTEXT_SHOULDER_001", "phase": "context",
        "text": "Did the pain start after a fall onto the shoulder?",
        "body_regions": ["shoulder"], "tests_symptoms": ["fall_onto_shoulder"],
    },
    {
        "id": "REGION_001", "phase": "region", "type": "body_selection",
        "text": "Where is your pain?",
    },
    {
        "id": "FUNCTIONAL_ANKLE_001", "phase": "functional",
        "text": "Is it hard to put weight on the ankle?",
        "body_regions": ["ankle"], "tests_symptoms": ["difficulty_weight_bearing"],
    },
    {
        "id": "FUNCTIONAL_SHOULDER_001", "phase": "functional",
        "text": "Is it painful to reach overhead?",
        "body_regions": ["shoulder"], "tests_symptoms": ["overhead_pain"],
    },
    {
        "id": "FUNCTIONAL_CERVICAL_001", "phase": "functional",
        "text": "Is it painful to turn your head?",
        "body_regions": ["neck"], "tests_symptoms": ["pain_turning_head"],
    },
    {
        "id": "DIFF_ANKLE_001", "phase": "differential",
        "text": "Did your foot roll inwards?",
        "body_regions": ["ankle"], "tests_symptoms": ["inversion_injury"], "diagnostic_weight": 0.9,
    },
    {
        "id": "DIFF_ANKLE_002", "phase": "differential",
        "text": "Is the outside of the ankle tender?",
        "body_regions": ["ankle"], "tests_symptoms": ["lateral_tenderness"], "diagnostic_weight": 0.85,
    },
    {
        "id": "DIFF_ANKLE_003", "phase": "differential", "type": "multiple_choice",
        "text": "How much swelling is there?",
        "options": ["none", "mild", "severe"],
        "body_regions": ["ankle"], "tests_symptoms": ["swelling"], "diagnostic_weight": 0.6,
    },
    {
        "id": "DIFF_SHOULDER_001", "phase": "differential",
        "text": "Is there a painful arc when lifting the arm?",
        "body_regions": ["shoulder"], "tests_symptoms": ["painful_arc"],
    },
    {
        "id": "DIFF_CERVICAL_001", "phase": "differential",
        "text": "Do you have pins and needles in the arm?",
        "body_regions": ["cervical_spine"], "tests_symptoms": ["arm_tingling"],
    },
]


TEST_REFERRAL_QUESTIONS = [
    {
        "id": "RSRC_SHOULDER_001",
        "text": "Does moving your neck reproduce your arm symptoms?",
        "body_regions": ["shoulder"], "tests_symptoms": ["neck_reproduces_arm_symptoms"],
        "diagnostic_weight": 0.9, "clinical_note": "Neck movement reproduces arm symptoms",
    },
    {
        "id": "RSRC_SHOULDER_002",
        "text": "Is the pain brought on by exertion with chest tightness?",
        "body_regions": ["shoulder"], "tests_symptoms": ["exertional_chest_symptoms"],
        "red_flag": True,
    },
    {
        "id": "RSRC_SHOULDER_003", "type": "multiple_choice",
        "text": "Where do your symptoms spread?",
        "options": [
            {"value": "shoulder_only", "text": "Around the shoulder"},
            {"value": "below_elbow", "text": "Below the elbow"},
        ],
        "body_regions": ["shoulder"],
        "tests_symptoms": ["symptoms_localized_to_shoulder", "symptoms_below_elbow"],
        "option_symptoms": {
            "shoulder_only": ["symptoms_localized_to_shoulder"],
            "below_elbow": ["symptoms_below_elbow"],
        },
    },
]


def build_kb(conditions=None, questions=None, sources=None, referral_questions=None):
    from physio_case.knowledge import KnowledgeBase

    return KnowledgeBase.from_dicts(
        conditions=copy.deepcopy(TEST_CONDITIONS if conditions is None else conditions),
        questions=copy.deepcopy(TEST_QUESTIONS if questions is None else questions),
        sources=copy.deepcopy(TEST_SOURCES if sources is None else sources),
        referral_questions=copy.deepcopy(TEST_REFERRAL_QUESTIONS if referral_questions is None else referral_questions),
    )


@pytest.fixture
def kb():
    """Синтетичний каталог: ankle, shoulder (з джерелами болю), cervical_spine"""
    return build_kb()


@pytest.fixture
def make_kb():
    """Фабрика каталогів з підміною окремих частин"""
    return build_kb


@pytest.fixture
def sample_kb():
    """Вбудований пакет physio_case/data"""
    from physio_case.knowledge import load_knowledge_base

    return load_knowledge_base()


@pytest.fixture
def orchestrator(kb):
    from physio_case.diagnosis_cycle import AssessmentOrchestrator

    return AssessmentOrchestrator(kb)


def run_scripted(orchestrator, script, default=False):
    """
    Пройти інтерв'ю, відповідаючи за сценарієм {question_id: answer}.

    Returns:
        (фінальна відповідь, список id поставлених питань, список усіх відповідей)
    """
    responses = [orchestrator.start()]
    asked = []
    while responses[-1].type in ("question", "source_identified"):
        question = responses[-1].question
        asked.append(question.id)
        responses.append(orchestrator.answer(question.id, script.get(question.id, default)))
    return responses[-1], asked, responses


@pytest.fixture
def raw_questions():
    """Копія синтетичного каталогу питань для модифікації в тесті"""
    return copy.deepcopy(TEST_QUESTIONS)


@pytest.fixture
def raw_referral_questions():
    return copy.deepcopy(TEST_REFERRAL_QUESTIONS)


@pytest.fixture
def scripted():
    return run_scripted
