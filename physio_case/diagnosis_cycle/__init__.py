"""
Physio.Case — Цикл оцінки

Компоненти:
- ConditionInferenceEngine: байєсівський движок станів ділянки
- ReferralSourceEngine: локальний чи віддзеркалений біль
- ConditionStoppingCriteria / SourceStoppingCriteria: критерії зупинки
- AssessmentPhase / next_phase: фазовий автомат
- AssessmentSession: стан інтерв'ю
- AssessmentOrchestrator: start / answer / reset
- reporting: висновок, якість доказів, рекомендації

Приклад використання:
    from physio_case.knowledge import load_knowledge_base
    from physio_case.diagnosis_cycle import AssessmentOrchestrator

    orchestrator = AssessmentOrchestrator(load_knowledge_base())
    response = orchestrator.start()
    response = orchestrator.answer(response.question.id, False)
"""

from .stopping_criteria import (
    StopReason,
    StopDecision,
    ConditionStoppingCriteria,
    SourceStoppingCriteria,
)

from .condition_engine import ConditionInferenceEngine
from .source_engine import ReferralSourceEngine

from .phases import (
    AssessmentPhase,
    PhaseContext,
    next_phase,
)

from .session import (
    AssessmentSession,
    ConversationTurn,
)

from .orchestrator import AssessmentOrchestrator
from . import reporting


__all__ = [
    # Stopping
    "StopReason",
    "StopDecision",
    "ConditionStoppingCriteria",
    "SourceStoppingCriteria",

    # Engines
    "ConditionInferenceEngine",
    "ReferralSourceEngine",

    # Phases
    "AssessmentPhase",
    "PhaseContext",
    "next_phase",

    # Session
    "AssessmentSession",
    "ConversationTurn",

    # Orchestrator
    "AssessmentOrchestrator",
    "reporting",
]
