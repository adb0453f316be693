"""
Physio.Case — Сесія оцінки

AssessmentSession зберігає стан одного інтерв'ю:
- фазу та ділянку
- задані питання та відповіді
- спостереження симптомів (для движка станів)
- результат движка джерела болю
- історію розмови
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional, Set, Union

from ..schemas.knowledge import QuestionDefinition
from ..schemas.results import SourceIdentificationResult
from .phases import AssessmentPhase


@dataclass
class ConversationTurn:
    """Запис питання-відповідь"""
    question_id: str
    question_text: str
    answer: Any
    phase: str
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class AssessmentSession:
    """
    Сесія оцінки.

    Приклад:
        session = AssessmentSession()
        session.record_answer(question, True)
        session.asked_questions      # {"SAFETY_001"}
        session.questions_asked      # 1
    """

    # Ідентифікатор
    session_id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])

    # Фаза та ділянка
    current_phase: AssessmentPhase = AssessmentPhase.SAFETY
    body_region: Optional[str] = None
    initial_region: Optional[str] = None

    # Питання
    asked_questions: Set[str] = field(default_factory=set)
    answers: Dict[str, Any] = field(default_factory=dict)
    pending_question_id: Optional[str] = None

    # Симптоми та гіпотези
    symptom_observations: Dict[str, Union[bool, str]] = field(default_factory=dict)
    condition_posterior: Dict[str, float] = field(default_factory=dict)
    confidence: float = 0.0

    # Джерело болю
    source_identification_complete: bool = False
    source_result: Optional[SourceIdentificationResult] = None

    red_flag_detected: bool = False

    # Історія
    conversation_history: List[ConversationTurn] = field(default_factory=list)
    started_at: datetime = field(default_factory=datetime.now)

    @property
    def is_terminal(self) -> bool:
        return self.current_phase.is_terminal

    @property
    def questions_asked(self) -> int:
        return len(self.asked_questions)

    @property
    def duration_seconds(self) -> float:
        return (datetime.now() - self.started_at).total_seconds()

    def record_answer(self, question: QuestionDefinition, answer: Any) -> None:
        self.asked_questions.add(question.id)
        self.answers[question.id] = answer
        self.conversation_history.append(ConversationTurn(
            question_id=question.id,
            question_text=question.text,
            answer=answer,
            phase=self.current_phase.value,
        ))
        if self.pending_question_id == question.id:
            self.pending_question_id = None

    def forget_questions(self, question_ids: Iterable[str]) -> None:
        """Прибрати питання з заданих (історія розмови зберігається)"""
        for qid in question_ids:
            self.asked_questions.discard(qid)
            self.answers.pop(qid, None)

    def to_dict(self) -> dict:
        """Серіалізація стану"""
        return {
            "session_id": self.session_id,
            "phase": self.current_phase.value,
            "body_region": self.body_region,
            "initial_region": self.initial_region,
            "asked_questions": sorted(self.asked_questions),
            "symptom_observations": dict(self.symptom_observations),
            "condition_posterior": dict(self.condition_posterior),
            "confidence": self.confidence,
            "red_flag_detected": self.red_flag_detected,
            "source_identification_complete": self.source_identification_complete,
            "questions_asked": self.questions_asked,
            "started_at": self.started_at.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"AssessmentSession(id='{self.session_id}', phase={self.current_phase.value}, "
            f"region={self.body_region!r}, questions={self.questions_asked})"
        )
