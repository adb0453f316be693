"""
Physio.Case — Движок станів (Condition Inference Engine)

Апостеріорний розподіл станів обраної ділянки:
- initialize(region): base probabilities ділянки, нормалізовані
- update(symptom, value): байєсівське оновлення
- next_question(...): питання фази differential з найбільшим score
- should_stop(...): критерії зупинки ConditionStoppingCriteria
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from ..config.settings import PhysioCaseConfig
from ..knowledge.catalog import KnowledgeBase
from ..regions import normalize_region
from ..schemas.knowledge import QuestionDefinition, QuestionPhase, SymptomCategory
from ..question_engine.answer_processor import SymptomEvidence, is_condition_satisfied
from ..question_engine.information_gain import Observation
from ..question_engine.posterior import HypothesisSpace, PosteriorTracker
from ..question_engine.question_selector import QuestionSelector, RankedQuestion
from .stopping_criteria import ConditionStoppingCriteria, StopDecision


logger = logging.getLogger(__name__)


class ConditionInferenceEngine:
    """
    Байєсівський движок станів однієї ділянки.

    Приклад використання:
        engine = ConditionInferenceEngine(kb)
        engine.initialize("ankle")
        engine.update("inversion_injury", True)

        question = engine.next_question(asked={"DIFF_ANKLE_001"})
        engine.top_conditions(3)
        engine.should_stop(questions_asked=6, in_differential=True)
    """

    def __init__(self, knowledge_base: KnowledgeBase, config: Optional[PhysioCaseConfig] = None):
        self.kb = knowledge_base
        self.config = config or PhysioCaseConfig()
        self.region: Optional[str] = None

        self.tracker = PosteriorTracker(evidence_floor=self.config.inference.evidence_floor)
        self.selector = QuestionSelector(evidence_floor=self.config.inference.evidence_floor)
        self.stopping = ConditionStoppingCriteria(self.config.condition_stopping)

    # =========================================================================
    # STATE
    # =========================================================================

    def initialize(self, region: Optional[str]) -> Dict[str, float]:
        """
        Встановити ділянку та base probabilities.

        Для ділянки без таблиці розподіл порожній (движок "пропускає"
        свою роботу, сесія не переривається).
        """
        self.region = normalize_region(region)
        conditions = self.kb.conditions_for(self.region)
        if not conditions and self.region is not None:
            logger.warning("No condition table for region %r, differential diagnosis skipped", self.region)

        space = HypothesisSpace(conditions, neutral_likelihood=self.config.inference.neutral_likelihood)
        return self.tracker.reset(space)

    def update(self, symptom: str, value: Observation) -> Dict[str, float]:
        return self.tracker.update(symptom, value)

    def apply(self, evidence: Iterable[SymptomEvidence]) -> Dict[str, float]:
        return self.tracker.apply(evidence)

    @property
    def posterior(self) -> Dict[str, float]:
        return self.tracker.posterior

    @property
    def is_empty(self) -> bool:
        return self.tracker.is_empty

    def confidence(self) -> float:
        return self.tracker.confidence

    def top_conditions(self, n: int = 3) -> List[Tuple[str, float]]:
        return self.tracker.top(n)

    def condition_name(self, condition_id: str) -> str:
        return self.tracker.space.name(condition_id)

    # =========================================================================
    # QUESTION SELECTION
    # =========================================================================

    def category_boost(self, question: QuestionDefinition) -> float:
        """
        Множник за категорією симптомів питання.

        1.5 — симптом патогномонічний для гіпотези з P > 0.7
        1.3 — симптом підтверджує одну з провідних гіпотез
        1.0 — інакше
        """
        ranking = self.config.ranking
        posterior = self.tracker.posterior
        leaders = [h for h, _ in self.tracker.top(ranking.confirmation_top_n)]
        symptoms = question.all_symptoms

        dominant = [h for h, p in posterior.items() if p > ranking.pathognomonic_min_posterior]
        for hypothesis in dominant:
            for symptom in symptoms:
                lk = self.tracker.space.symptom_entry(hypothesis, symptom)
                if lk is not None and lk.category == SymptomCategory.PATHOGNOMONIC:
                    return ranking.pathognomonic_boost

        for hypothesis in leaders:
            for symptom in symptoms:
                lk = self.tracker.space.symptom_entry(hypothesis, symptom)
                if lk is not None and lk.category == SymptomCategory.CONFIRMATION:
                    return ranking.confirmation_boost

        return 1.0

    def candidate_questions(
        self,
        asked: Set[str],
        answers: Optional[Mapping[str, Any]] = None,
    ) -> List[QuestionDefinition]:
        """Незадані питання differential, що стосуються ділянки"""
        answers = answers or {}
        return [
            q for q in self.kb.questions_for_phase(QuestionPhase.DIFFERENTIAL)
            if q.id not in asked
            and q.applies_to(self.region)
            and is_condition_satisfied(q, answers)
        ]

    def rank_questions(
        self,
        asked: Set[str],
        answers: Optional[Mapping[str, Any]] = None,
    ) -> List[RankedQuestion]:
        if self.tracker.is_empty:
            return []
        return self.selector.rank(self.candidate_questions(asked, answers), self.tracker, self.category_boost)

    def next_question(
        self,
        asked: Set[str],
        answers: Optional[Mapping[str, Any]] = None,
    ) -> Optional[QuestionDefinition]:
        """Питання з найбільшим score або None"""
        ranked = self.rank_questions(asked, answers)
        if not ranked:
            return None
        best = ranked[0]
        logger.debug("Next differential question %r", best)
        return best.question

    # =========================================================================
    # STOPPING
    # =========================================================================

    def stop_decision(self, questions_asked: int, in_differential: bool = False) -> StopDecision:
        return self.stopping.check(
            self.tracker.posterior,
            questions_asked,
            region=self.region,
            in_differential=in_differential,
        )

    def should_stop(self, questions_asked: int, in_differential: bool = False) -> bool:
        return self.stop_decision(questions_asked, in_differential).should_stop

    def has_high_value_evidence(self, observed_symptoms: Iterable[str]) -> bool:
        """Чи є спостережений симптом з weight > 0.8 для двох провідних станів"""
        threshold = self.config.reporting.high_value_weight
        leaders = [h for h, _ in self.tracker.top(2)]
        for symptom in observed_symptoms:
            for hypothesis in leaders:
                lk = self.tracker.space.symptom_entry(hypothesis, symptom)
                if lk is not None and lk.weight > threshold:
                    return True
        return False

    def __repr__(self) -> str:
        return f"ConditionInferenceEngine(region={self.region!r}, {self.tracker!r})"
