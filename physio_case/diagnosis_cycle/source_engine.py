"""
Physio.Case — Движок джерела болю (Referral Source Engine)

Перед диференційною діагностикою визначає, чи біль у вибраній ділянці
локальний, чи віддзеркалений з іншої ділянки (наприклад, біль у плечі
від шийного відділу).

Математика та ж, що й у движку станів; відмінності:
- boost дають лише джерела з P > 0.2
- взаємовиключні варіанти: обраний варіант → інші варіанти absent
- власні критерії зупинки (SourceStoppingCriteria)
- червоний прапорець негайно завершує роботу движка
"""

import logging
from typing import Any, Dict, List, Optional, Set

from ..config.settings import PhysioCaseConfig
from ..knowledge.catalog import KnowledgeBase
from ..regions import normalize_region
from ..schemas.knowledge import QuestionDefinition, QuestionPhase, SymptomCategory
from ..schemas.results import SourceIdentificationResult, SourceSummary
from ..question_engine.answer_processor import (
    evidence_for,
    finding_text,
    is_condition_satisfied,
    is_red_flag_answer,
)
from ..question_engine.information_gain import Observation
from ..question_engine.posterior import HypothesisSpace, PosteriorTracker
from ..question_engine.question_selector import QuestionSelector
from .stopping_criteria import SourceStoppingCriteria, StopDecision


logger = logging.getLogger(__name__)


class ReferralSourceEngine:
    """
    Визначення джерела болю для ділянки.

    Приклад використання:
        engine = ReferralSourceEngine(kb)
        engine.initialize_for_region("shoulder")

        question = engine.next_question()
        while question is not None:
            engine.process_answer(question, ask_patient(question))
            question = engine.next_question()

        result = engine.result()
        if result.should_switch_region:
            print(f"Оцінювати {result.new_region}")
    """

    def __init__(self, knowledge_base: KnowledgeBase, config: Optional[PhysioCaseConfig] = None):
        self.kb = knowledge_base
        self.config = config or PhysioCaseConfig()

        self.tracker = PosteriorTracker(evidence_floor=self.config.inference.evidence_floor)
        self.selector = QuestionSelector(evidence_floor=self.config.inference.evidence_floor)
        self.stopping = SourceStoppingCriteria(self.config.source_stopping)

        self.reset()

    def reset(self) -> None:
        self.region: Optional[str] = None
        self.asked: Set[str] = set()
        self.answers: Dict[str, Any] = {}
        self.supporting_findings: List[str] = []
        self.red_flag_detected = False
        self._complete = False
        self.tracker.reset(HypothesisSpace({}))

    # =========================================================================
    # STATE
    # =========================================================================

    def initialize_for_region(self, region: Optional[str]) -> Dict[str, float]:
        """
        Почати ідентифікацію для ділянки (попередній стан очищається).

        Ділянка без таблиці джерел → движок одразу завершений.
        """
        self.reset()
        self.region = normalize_region(region)
        sources = self.kb.sources_for(self.region)
        space = HypothesisSpace(sources, neutral_likelihood=self.config.inference.neutral_likelihood)
        posterior = self.tracker.reset(space)
        if not sources:
            logger.debug("No source table for region %r, source identification skipped", self.region)
            self._complete = True
        return posterior

    @property
    def is_initialized(self) -> bool:
        return self.region is not None

    @property
    def is_complete(self) -> bool:
        return self._complete

    @property
    def questions_asked(self) -> int:
        return len(self.asked)

    @property
    def posterior(self) -> Dict[str, float]:
        return self.tracker.posterior

    def confidence(self) -> float:
        return self.tracker.confidence

    def update(self, symptom: str, value: Observation) -> Dict[str, float]:
        return self.tracker.update(symptom, value)

    def process_answer(self, question: QuestionDefinition, raw: Any) -> Dict[str, float]:
        """
        Обробити відповідь на питання джерела болю.

        Варіанти одного вибору взаємовиключні: симптоми інших варіантів
        отримують absent (через option_symptoms питання).
        """
        self.asked.add(question.id)
        self.answers[question.id] = raw

        self.tracker.apply(evidence_for(question, raw))

        finding = finding_text(question, raw)
        if finding and finding not in self.supporting_findings:
            self.supporting_findings.append(finding)

        if is_red_flag_answer(question, raw):
            logger.warning("Red flag raised by %s during source identification (region=%s)", question.id, self.region)
            self.red_flag_detected = True
            self._complete = True
        elif self.should_stop():
            self._complete = True

        return self.tracker.posterior

    # =========================================================================
    # QUESTION SELECTION
    # =========================================================================

    def category_boost(self, question: QuestionDefinition) -> float:
        """Boost лише від джерел з P > 0.2 (патогномонічний 1.5, підтверджувальний 1.3)"""
        ranking = self.config.ranking
        eligible = [h for h, p in self.tracker.posterior.items() if p > ranking.source_boost_min_posterior]
        boost = 1.0
        for hypothesis in eligible:
            for symptom in question.all_symptoms:
                lk = self.tracker.space.symptom_entry(hypothesis, symptom)
                if lk is None:
                    continue
                if lk.category == SymptomCategory.PATHOGNOMONIC:
                    return ranking.pathognomonic_boost
                if lk.category == SymptomCategory.CONFIRMATION:
                    boost = ranking.confirmation_boost
        return boost

    def candidate_questions(self) -> List[QuestionDefinition]:
        return [
            q for q in self.kb.questions_for_phase(QuestionPhase.SOURCE_IDENTIFICATION)
            if q.id not in self.asked
            and q.applies_to(self.region)
            and is_condition_satisfied(q, self.answers)
        ]

    def next_question(self) -> Optional[QuestionDefinition]:
        """Наступне питання або None (движок завершено)"""
        if self._complete:
            return None
        if self.should_stop():
            self._complete = True
            return None

        best = self.selector.select(self.candidate_questions(), self.tracker, self.category_boost)
        if best is None:
            self._complete = True
            return None
        logger.debug("Next source question %r", best)
        return best.question

    def stop_decision(self) -> StopDecision:
        return self.stopping.check(self.tracker.posterior, self.questions_asked)

    def should_stop(self) -> bool:
        if self.red_flag_detected:
            return True
        return self.stop_decision().should_stop

    # =========================================================================
    # RESULT
    # =========================================================================

    def _summary(self, source_id: str, probability: float) -> SourceSummary:
        entry = self.tracker.space.entry(source_id)
        return SourceSummary(
            id=source_id,
            name=entry.name,
            probability=round(probability, 2),
            is_local=entry.is_local,
            is_red_flag=entry.is_red_flag,
            refers_to_region=entry.refers_to_region,
        )

    def result(self) -> SourceIdentificationResult:
        """Висновок про джерело болю"""
        pain_site = self.region or "unknown"
        ranked = self.tracker.top(len(self.tracker.posterior))
        if not ranked:
            return SourceIdentificationResult(
                pain_site=pain_site,
                clinical_implication="Unable to determine pain source. Proceed with local assessment.",
                red_flag_detected=self.red_flag_detected,
            )

        top_id, top_probability = ranked[0]
        top = self._summary(top_id, top_probability)

        # Рішення на неокругленій ймовірності
        should_switch = (
            not top.is_local
            and top_probability > self.config.source_stopping.switch_threshold
            and top.refers_to_region is not None
            and top.refers_to_region != self.region
        )

        if self.red_flag_detected:
            implication = f"RED FLAG DETECTED: {top.name}. Immediate referral required."
        elif should_switch:
            implication = (
                f"Pain at {pain_site} is likely referred from {top.name}. "
                f"Recommend assessing {top.refers_to_region} before treating {pain_site} locally."
            )
        elif top.is_local:
            implication = f"Pain appears to originate locally from {top.name}. Proceed with {pain_site} assessment."
        else:
            implication = f"Mixed findings. Consider both local {pain_site} and {top.name} involvement."

        limit = self.config.source_stopping.max_supporting_findings
        return SourceIdentificationResult(
            pain_site=pain_site,
            is_local=top.is_local,
            top_source=top,
            all_sources=[self._summary(h, p) for h, p in ranked],
            should_switch_region=should_switch,
            new_region=top.refers_to_region if should_switch else None,
            confidence=round(self.tracker.confidence, 2),
            supporting_findings=self.supporting_findings[:limit],
            clinical_implication=implication,
            red_flag_detected=self.red_flag_detected,
        )

    def __repr__(self) -> str:
        return f"ReferralSourceEngine(region={self.region!r}, complete={self._complete}, {self.tracker!r})"
