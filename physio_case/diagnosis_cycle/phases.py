"""
Physio.Case — Фазовий автомат інтерв'ю

safety → context → region → source_identification → functional → differential
                                                                   ↓
                      referral_required (червоний прапорець) / diagnosis_complete

next_phase() — чиста функція: та сама фаза + той самий контекст дають
той самий результат. Оркестратор лише збирає PhaseContext.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..schemas.knowledge import QuestionPhase


class AssessmentPhase(str, Enum):
    """Фаза сесії"""
    SAFETY = "safety"
    CONTEXT = "context"
    REGION = "region"
    SOURCE_IDENTIFICATION = "source_identification"
    FUNCTIONAL = "functional"
    DIFFERENTIAL = "differential"
    REFERRAL_REQUIRED = "referral_required"
    DIAGNOSIS_COMPLETE = "diagnosis_complete"

    @property
    def is_terminal(self) -> bool:
        return self in (AssessmentPhase.REFERRAL_REQUIRED, AssessmentPhase.DIAGNOSIS_COMPLETE)

    @property
    def question_phase(self) -> Optional[QuestionPhase]:
        """Фаза питань каталогу (None для термінальних станів)"""
        if self.is_terminal:
            return None
        return QuestionPhase(self.value)


@dataclass(frozen=True)
class PhaseContext:
    """Все, що потрібно для рішення про перехід"""
    region_known: bool = False
    phase_exhausted: bool = False      # у фазі немає питання, яке можна поставити
    source_available: bool = False     # для ділянки є таблиця джерел
    source_complete: bool = False      # ідентифікацію джерела завершено
    functional_done: bool = False      # поставлено достатньо функціональних питань
    fast_track: bool = False           # confidence > 0.7 під час functional
    should_stop: bool = False          # критерії зупинки станів виконані
    red_flag: bool = False


def _after_context(ctx: PhaseContext) -> AssessmentPhase:
    if not ctx.region_known:
        return AssessmentPhase.REGION
    if ctx.source_available and not ctx.source_complete:
        return AssessmentPhase.SOURCE_IDENTIFICATION
    return AssessmentPhase.FUNCTIONAL


def next_phase(phase: AssessmentPhase, ctx: PhaseContext) -> AssessmentPhase:
    """
    Наступна фаза.

    Повертає ту саму фазу, якщо в ній ще є що питати.

    Приклад:
        next_phase(AssessmentPhase.SAFETY, PhaseContext(phase_exhausted=True))
        # AssessmentPhase.CONTEXT
    """
    if phase.is_terminal:
        return phase

    # Червоний прапорець перериває будь-яку фазу
    if ctx.red_flag:
        return AssessmentPhase.REFERRAL_REQUIRED

    if phase == AssessmentPhase.SAFETY:
        return AssessmentPhase.CONTEXT if ctx.phase_exhausted else phase

    if phase == AssessmentPhase.CONTEXT:
        return _after_context(ctx) if ctx.phase_exhausted else phase

    if phase == AssessmentPhase.REGION:
        if ctx.region_known:
            # Повторний скринінг: питання безпеки/контексту для конкретної ділянки
            return AssessmentPhase.SAFETY
        return AssessmentPhase.DIAGNOSIS_COMPLETE if ctx.phase_exhausted else phase

    # Далі потрібна відома ділянка
    if not ctx.region_known:
        return AssessmentPhase.REGION

    if phase == AssessmentPhase.SOURCE_IDENTIFICATION:
        if ctx.source_complete or not ctx.source_available:
            return AssessmentPhase.FUNCTIONAL
        return phase

    if phase == AssessmentPhase.FUNCTIONAL:
        if ctx.should_stop:
            return AssessmentPhase.DIAGNOSIS_COMPLETE
        if ctx.fast_track or ctx.functional_done or ctx.phase_exhausted:
            return AssessmentPhase.DIFFERENTIAL
        return phase

    # DIFFERENTIAL
    if ctx.should_stop or ctx.phase_exhausted:
        return AssessmentPhase.DIAGNOSIS_COMPLETE
    return phase
