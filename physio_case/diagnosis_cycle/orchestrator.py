"""
Physio.Case — Оркестратор інтерв'ю

Інтегрує всі компоненти:
- фазовий автомат (phases.next_phase)
- движок джерела болю (ReferralSourceEngine)
- движок станів (ConditionInferenceEngine)
- формування звіту (reporting)

Гарантії:
- жодне питання не ставиться двічі
- жодне питання конкретної ділянки не ставиться до вибору ділянки
- червоний прапорець негайно завершує сесію направленням
"""

import logging
from typing import Any, Optional

from ..config.settings import PhysioCaseConfig
from ..errors import AssessmentStateError
from ..knowledge.catalog import KnowledgeBase
from ..regions import normalize_region
from ..schemas.knowledge import QuestionDefinition, QuestionPhase, QuestionType
from ..schemas.results import (
    AssessmentResponse,
    DiagnosisResponse,
    DiagnosticResults,
    Progress,
    QuestionResponse,
    ReferralResponse,
    SourceIdentificationResult,
    SourceIdentifiedResponse,
)
from ..question_engine.answer_processor import (
    evidence_for,
    is_condition_satisfied,
    is_red_flag_answer,
)
from . import reporting
from .condition_engine import ConditionInferenceEngine
from .phases import AssessmentPhase, PhaseContext, next_phase
from .session import AssessmentSession
from .source_engine import ReferralSourceEngine


logger = logging.getLogger(__name__)

REFERRAL_MESSAGE = (
    "Based on your responses, you should seek immediate medical attention. "
    "Please contact your doctor or visit an emergency room."
)


class AssessmentOrchestrator:
    """
    Адаптивне інтерв'ю від скринінгу безпеки до диференційного діагнозу.

    Приклад використання:
        kb = load_knowledge_base()
        orchestrator = AssessmentOrchestrator(kb)

        response = orchestrator.start()
        while response.type in ("question", "source_identified"):
            answer = ask_patient(response.question)
            response = orchestrator.answer(response.question.id, answer)

        print(response.type)                          # "diagnosis" або "referral"
        print(response.results.diagnostic_summary)
    """

    def __init__(self, knowledge_base: KnowledgeBase, config: Optional[PhysioCaseConfig] = None):
        self.kb = knowledge_base
        self.config = config or PhysioCaseConfig()

        self.condition_engine = ConditionInferenceEngine(knowledge_base, self.config)
        self.source_engine = ReferralSourceEngine(knowledge_base, self.config)

        self._session = AssessmentSession()
        self._started = False
        self._switch_result: Optional[SourceIdentificationResult] = None

    # =========================================================================
    # PUBLIC API
    # =========================================================================

    def reset(self) -> None:
        """Почати з чистого аркуша"""
        self._session = AssessmentSession()
        self.condition_engine.initialize(None)
        self.source_engine.reset()
        self._started = False
        self._switch_result = None

    def start(self) -> AssessmentResponse:
        """Нова сесія → перше питання"""
        self.reset()
        self._started = True
        logger.info("Assessment session %s started", self._session.session_id)
        return self._respond()

    def answer(self, question_id: str, value: Any) -> AssessmentResponse:
        """
        Прийняти відповідь на поточне питання.

        Args:
            question_id: id питання, яке було поставлене останнім
            value: bool для yes/no, значення варіанту для multiple choice,
                   назва ділянки для вибору ділянки

        Returns:
            QuestionResponse / SourceIdentifiedResponse / ReferralResponse / DiagnosisResponse

        Raises:
            AssessmentStateError: сесію не розпочато, вона завершена, або
                question_id не є поточним питанням
        """
        session = self._session
        if not self._started:
            raise AssessmentStateError("Сесію не розпочато: спочатку викличте start()")
        if session.is_terminal:
            raise AssessmentStateError(f"Сесію завершено ({session.current_phase.value})")
        if question_id != session.pending_question_id:
            raise AssessmentStateError(
                f"Очікувалась відповідь на '{session.pending_question_id}', отримано '{question_id}'"
            )

        question = self.kb.question(question_id)
        session.record_answer(question, value)

        if question.phase == QuestionPhase.SOURCE_IDENTIFICATION:
            self._process_source_answer(question, value)
        elif question.type == QuestionType.BODY_SELECTION:
            self._process_region_answer(value)
        else:
            self._process_clinical_answer(question, value)

        if is_red_flag_answer(question, value) and not session.red_flag_detected:
            self._raise_red_flag(question)

        return self._respond()

    def next_question(self) -> Optional[QuestionDefinition]:
        """Поточне питання (None, якщо сесія завершена)"""
        if self._session.pending_question_id is None:
            return None
        return self.kb.question(self._session.pending_question_id)

    @property
    def session(self) -> AssessmentSession:
        return self._session

    @property
    def phase(self) -> AssessmentPhase:
        return self._session.current_phase

    # =========================================================================
    # ANSWER HANDLING
    # =========================================================================

    def _process_source_answer(self, question: QuestionDefinition, value: Any) -> None:
        self.source_engine.process_answer(question, value)
        if self.source_engine.red_flag_detected:
            self._session.source_result = self.source_engine.result()
            self._session.source_identification_complete = True

    def _process_region_answer(self, value: Any) -> None:
        if isinstance(value, (list, tuple)) and value:
            logger.warning("Data-quality: body selection answered with %r, using first entry", value)
            value = value[0]
        region = normalize_region(str(value)) if value is not None else None
        if region is None:
            logger.warning("Data-quality: empty body selection answer")
            return
        session = self._session
        session.body_region = region
        if session.initial_region is None:
            session.initial_region = region
        logger.info("Body region selected: %s", region)
        self._initialize_conditions()

    def _process_clinical_answer(self, question: QuestionDefinition, value: Any) -> None:
        session = self._session
        for symptom, observed in evidence_for(question, value):
            session.symptom_observations[symptom] = observed
            if session.body_region is not None:
                self.condition_engine.update(symptom, observed)
        self._sync_posterior()

    def _raise_red_flag(self, question: QuestionDefinition) -> None:
        session = self._session
        logger.warning("Red flag raised by %s (session %s)", question.id, session.session_id)
        session.red_flag_detected = True

    def _initialize_conditions(self) -> None:
        """Base probabilities ділянки + вже зібрані спостереження"""
        session = self._session
        self.condition_engine.initialize(session.body_region)
        for symptom, observed in session.symptom_observations.items():
            self.condition_engine.update(symptom, observed)
        self._sync_posterior()

    def _sync_posterior(self) -> None:
        self._session.condition_posterior = self.condition_engine.posterior
        self._session.confidence = self.condition_engine.confidence()

    # =========================================================================
    # REGION SWITCH
    # =========================================================================

    def _switch_region(self, new_region: str) -> None:
        """
        Перейти на ділянку-джерело болю.

        Питання старої ділянки забуваються (загальні відповіді та
        відповіді джерела болю зберігаються), движок станів
        ініціалізується для нової ділянки.
        """
        session = self._session
        old_region = session.body_region
        discarded = []
        for qid in sorted(session.asked_questions):
            question = self.kb.question(qid)
            if (
                question.phase != QuestionPhase.SOURCE_IDENTIFICATION
                and not question.applies_to_all
                and old_region in question.body_regions
            ):
                discarded.append(qid)
        session.forget_questions(discarded)

        # Спостереження перебудовуються з відповідей, що залишились
        session.symptom_observations = {}
        for turn in session.conversation_history:
            if turn.question_id not in session.answers:
                continue
            question = self.kb.question(turn.question_id)
            if question.phase == QuestionPhase.SOURCE_IDENTIFICATION or question.type == QuestionType.BODY_SELECTION:
                continue
            for symptom, observed in evidence_for(question, turn.answer):
                session.symptom_observations[symptom] = observed

        session.body_region = new_region
        logger.info(
            "Region switch %s -> %s (discarded %d region-specific questions)",
            old_region, new_region, len(discarded),
        )
        self._initialize_conditions()

    def _complete_source_identification(self) -> None:
        session = self._session
        result = self.source_engine.result()
        session.source_result = result
        session.source_identification_complete = True
        logger.info(
            "Source identification complete for %s: %s (%.2f)",
            result.pain_site,
            result.top_source.id if result.top_source else None,
            result.top_source.probability if result.top_source else 0.0,
        )
        if result.should_switch_region and result.new_region:
            self._switch_region(result.new_region)
            self._switch_result = result

    # =========================================================================
    # PHASE MACHINE
    # =========================================================================

    def _is_eligible(self, question: QuestionDefinition, phase: QuestionPhase) -> bool:
        session = self._session
        return (
            question.phase == phase
            and question.id not in session.asked_questions
            and question.applies_to(session.body_region)
            and is_condition_satisfied(question, session.answers)
        )

    def _screening_question(self, phase: QuestionPhase) -> Optional[QuestionDefinition]:
        """Питання safety/context/region/functional: спочатку загальні, потім ділянки"""
        eligible = [q for q in self.kb.questions_for_phase(phase) if self._is_eligible(q, phase)]
        general = [q for q in eligible if q.applies_to_all]
        specific = [q for q in eligible if not q.applies_to_all]
        ordered = general + specific
        return ordered[0] if ordered else None

    def _candidate_question(self, phase: AssessmentPhase) -> Optional[QuestionDefinition]:
        session = self._session
        if phase == AssessmentPhase.SOURCE_IDENTIFICATION:
            if self.source_engine.region != session.body_region:
                self.source_engine.initialize_for_region(session.body_region)
            question = self.source_engine.next_question()
            if question is None and not session.source_identification_complete:
                self._complete_source_identification()
            return question

        if phase == AssessmentPhase.DIFFERENTIAL:
            return self.condition_engine.next_question(session.asked_questions, session.answers)

        return self._screening_question(phase.question_phase)

    def _functional_answered(self) -> int:
        count = 0
        for qid in self._session.asked_questions:
            question = self.kb.question(qid)
            if question.phase == QuestionPhase.FUNCTIONAL and question.type != QuestionType.BODY_SELECTION:
                count += 1
        return count

    def _phase_context(self, phase: AssessmentPhase, question: Optional[QuestionDefinition]) -> PhaseContext:
        session = self._session
        cfg = self.config.orchestrator

        should_stop = False
        fast_track = False
        if phase in (AssessmentPhase.FUNCTIONAL, AssessmentPhase.DIFFERENTIAL) and not self.condition_engine.is_empty:
            should_stop = self.condition_engine.should_stop(
                session.questions_asked,
                in_differential=phase == AssessmentPhase.DIFFERENTIAL,
            )
            fast_track = self.condition_engine.confidence() > cfg.fast_track_confidence

        return PhaseContext(
            region_known=session.body_region is not None,
            phase_exhausted=question is None,
            source_available=self.kb.has_sources(session.body_region),
            source_complete=session.source_identification_complete,
            functional_done=self._functional_answered() >= cfg.functional_questions_before_differential,
            fast_track=fast_track,
            should_stop=should_stop,
            red_flag=session.red_flag_detected,
        )

    def _advance(self) -> Optional[QuestionDefinition]:
        """Перейти до фази, в якій є питання (або до термінального стану)"""
        session = self._session
        while not session.current_phase.is_terminal:
            phase = session.current_phase
            question = None if session.red_flag_detected else self._candidate_question(phase)
            following = next_phase(phase, self._phase_context(phase, question))
            if following == phase:
                return question
            logger.debug("Phase %s -> %s", phase.value, following.value)
            session.current_phase = following
        return None

    # =========================================================================
    # RESPONSES
    # =========================================================================

    def _respond(self) -> AssessmentResponse:
        session = self._session
        question = self._advance()
        session.pending_question_id = question.id if question is not None else None

        if session.current_phase == AssessmentPhase.REFERRAL_REQUIRED:
            response = self._referral_response()
        elif question is None:
            response = self._diagnosis_response()
        elif self._switch_result is not None:
            result, self._switch_result = self._switch_result, None
            response = SourceIdentifiedResponse(
                message=result.clinical_implication,
                source_identification=result,
                question=question,
                progress=self._progress(),
            )
        else:
            response = QuestionResponse(question=question, progress=self._progress())

        return response

    def _progress(self) -> Progress:
        session = self._session
        top = self.condition_engine.top_conditions(1)
        return Progress(
            questions_asked=session.questions_asked,
            confidence=round(session.confidence, 2),
            leading_hypothesis_name=self.condition_engine.condition_name(top[0][0]) if top else "Analyzing...",
            phase=session.current_phase.value,
            source_identification=(
                "Identifying pain source..."
                if session.current_phase == AssessmentPhase.SOURCE_IDENTIFICATION else None
            ),
        )

    def diagnostic_results(self) -> DiagnosticResults:
        """Поточний стан диференційного діагнозу"""
        session = self._session
        cfg = self.config.reporting
        ranked = reporting.rank_conditions(
            self.condition_engine.posterior,
            self.condition_engine.condition_name,
            cfg,
        )
        source = session.source_result
        has_high_value = self.condition_engine.has_high_value_evidence(session.symptom_observations)
        return DiagnosticResults(
            top_conditions=ranked,
            confidence=round(session.confidence, 2),
            needs_referral=session.red_flag_detected,
            questions_asked=session.questions_asked,
            body_region=session.body_region,
            diagnostic_summary=reporting.diagnostic_summary(ranked, source, cfg),
            evidence_quality=reporting.evidence_quality(
                session.questions_asked, session.body_region is not None, has_high_value, cfg
            ),
            source_identification=source,
            pain_source_summary=reporting.pain_source_summary(source),
        )

    def _referral_response(self) -> ReferralResponse:
        source = self._session.source_result
        if source is not None and source.red_flag_detected:
            message = f"{source.clinical_implication} Please seek immediate medical attention."
        else:
            message = REFERRAL_MESSAGE
        return ReferralResponse(
            message=message,
            results=self.diagnostic_results(),
            source_identification=source,
        )

    def _diagnosis_response(self) -> DiagnosisResponse:
        session = self._session
        results = self.diagnostic_results()
        top_entry = None
        if results.top_conditions:
            top_entry = self.kb.condition(results.top_conditions[0].id, session.body_region)
        logger.info(
            "Assessment %s complete: %s", session.session_id, results.diagnostic_summary
        )
        return DiagnosisResponse(
            results=results,
            source_identification=session.source_result,
            conversation_summary=reporting.conversation_summary(
                session.conversation_history,
                self.kb.question,
                session.confidence,
                self.config.reporting,
            ),
            recommendations=reporting.build_recommendations(
                results.top_conditions,
                session.confidence,
                session.source_result,
                top_entry,
                self.config.reporting,
            ),
        )

    def __repr__(self) -> str:
        return f"AssessmentOrchestrator({self._session!r})"
