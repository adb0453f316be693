"""
Physio.Case — Налаштування системи

Всі пороги системи зібрані в dataclass-и для:
- Типізації та валідації
- Легкого доступу через config.condition_stopping.max_questions
- Серіалізації в YAML
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


# =============================================================================
# INFERENCE CONFIGURATION
# =============================================================================

@dataclass
class InferenceConfig:
    """Параметри байєсівського оновлення"""
    evidence_floor: float = 0.001       # нижня межа P(evidence)
    neutral_likelihood: float = 0.5     # likelihood для невідомих даних


# =============================================================================
# QUESTION RANKING CONFIGURATION
# =============================================================================

@dataclass
class QuestionRankingConfig:
    """
    Параметри ранжування питань

    score = EIG × diagnostic_weight × information_gain_potential × boost
    """
    pathognomonic_boost: float = 1.5
    confirmation_boost: float = 1.3

    # Движок станів
    pathognomonic_min_posterior: float = 0.7   # P(h) > 0.7
    confirmation_top_n: int = 2                # "провідні" гіпотези

    # Движок джерела болю
    source_boost_min_posterior: float = 0.2    # джерела з P(s) < 0.2 не дають boost


# =============================================================================
# STOPPING CRITERIA CONFIGURATION
# =============================================================================

@dataclass
class ConditionStoppingConfig:
    """Критерії зупинки для станів (движок діагнозу)"""

    # DOMINANCE
    dominance_threshold: float = 0.85
    dominance_confidence: float = 0.8

    # SEPARATION
    separation_threshold: float = 0.7
    separation_gap: float = 0.4

    # QUESTION_LIMIT
    max_questions: int = 12
    max_questions_complex: int = 15
    complex_regions: List[str] = field(default_factory=lambda: ["ankle"])

    # DIFFERENTIAL_CONFIDENCE
    differential_confidence: float = 0.6
    differential_min_questions: int = 8

    def question_limit(self, region: Optional[str]) -> int:
        """Ліміт питань для ділянки (складні ділянки отримують більше)"""
        if region and region in self.complex_regions:
            return self.max_questions_complex
        return self.max_questions


@dataclass
class SourceStoppingConfig:
    """Критерії зупинки для движка джерела болю"""

    dominance_threshold: float = 0.85
    dominance_confidence: float = 0.8

    separation_threshold: float = 0.7
    separation_gap: float = 0.35

    max_questions: int = 30

    # Рання зупинка при високій впевненості
    early_questions: int = 6
    early_confidence: float = 0.85
    late_questions: int = 10
    late_confidence: float = 0.75

    # Перемикання ділянки
    switch_threshold: float = 0.55
    max_supporting_findings: int = 5


# =============================================================================
# ORCHESTRATOR CONFIGURATION
# =============================================================================

@dataclass
class OrchestratorConfig:
    """Параметри фазового автомата"""
    fast_track_confidence: float = 0.7            # functional → differential
    functional_questions_before_differential: int = 1


# =============================================================================
# REPORTING CONFIGURATION
# =============================================================================

@dataclass
class ReportingConfig:
    """Параметри звіту"""

    # Ранжований список
    max_ranked_conditions: int = 3
    min_condition_probability: float = 0.01

    # Мітки впевненості
    confidence_labels: Dict[str, float] = field(default_factory=lambda: {
        "Very High": 0.8,
        "High": 0.6,
        "Moderate": 0.4,
        "Low": 0.2,
    })

    # Формулювання висновку
    strong_probability: float = 0.8
    likely_probability: float = 0.6

    # Якість доказової бази
    strong_evidence_questions: int = 8
    adequate_evidence_questions: int = 5
    limited_evidence_questions: int = 3
    high_value_weight: float = 0.8

    # Рекомендації
    specific_recommendation_confidence: float = 0.6
    max_key_findings: int = 5


# =============================================================================
# MAIN CONFIGURATION
# =============================================================================

@dataclass
class PhysioCaseConfig:
    """
    Головна конфігурація Physio.Case

    Приклад використання:
        config = PhysioCaseConfig()
        print(config.condition_stopping.max_questions)  # 12
        print(config.source_stopping.switch_threshold)  # 0.55
    """

    # Метадані
    version: str = "0.1.0"
    project_name: str = "Physio.Case"

    # Компоненти
    inference: InferenceConfig = field(default_factory=InferenceConfig)
    ranking: QuestionRankingConfig = field(default_factory=QuestionRankingConfig)
    condition_stopping: ConditionStoppingConfig = field(default_factory=ConditionStoppingConfig)
    source_stopping: SourceStoppingConfig = field(default_factory=SourceStoppingConfig)
    orchestrator: OrchestratorConfig = field(default_factory=OrchestratorConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)

    # Каталог знань (None = вбудований пакет physio_case/data)
    knowledge_dir: Optional[str] = None


# =============================================================================
# DEFAULT CONFIG INSTANCE
# =============================================================================

def get_default_config() -> PhysioCaseConfig:
    """Отримати конфігурацію за замовчуванням"""
    return PhysioCaseConfig()
