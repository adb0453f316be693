"""
Physio.Case — Question Selector

Вибір найкращого питання серед кандидатів.

score(q) = EIG(q) × diagnostic_weight × information_gain_potential × boost(q)

boost задає движок (стани та джерела болю мають різні правила).
"""

from dataclasses import dataclass
from typing import Callable, Iterable, List, Optional

from ..schemas.knowledge import QuestionDefinition
from .answer_processor import possible_outcomes
from .information_gain import EIGResult, expected_information_gain
from .posterior import PosteriorTracker


BoostFunction = Callable[[QuestionDefinition], float]


@dataclass
class RankedQuestion:
    """Питання з оцінкою"""
    question: QuestionDefinition
    eig: float
    boost: float
    score: float

    def __repr__(self) -> str:
        return f"RankedQuestion('{self.question.id}', score={self.score:.4f}, eig={self.eig:.4f}, boost={self.boost})"


class QuestionSelector:
    """
    Ранжування питань за EIG.

    Приклад використання:
        selector = QuestionSelector()
        best = selector.select(candidates, tracker, boost=engine.category_boost)
        if best:
            print(best.question.text, best.score)
    """

    def __init__(self, evidence_floor: float = 0.001):
        self.evidence_floor = evidence_floor

    def information_gain(self, question: QuestionDefinition, tracker: PosteriorTracker) -> EIGResult:
        return expected_information_gain(
            tracker.space,
            tracker.posterior,
            possible_outcomes(question),
            question_id=question.id,
            evidence_floor=self.evidence_floor,
        )

    def score(
        self,
        question: QuestionDefinition,
        tracker: PosteriorTracker,
        boost: Optional[BoostFunction] = None,
    ) -> RankedQuestion:
        eig = self.information_gain(question, tracker).eig
        factor = boost(question) if boost is not None else 1.0
        value = eig * question.diagnostic_weight * question.information_gain_potential * factor
        return RankedQuestion(question=question, eig=eig, boost=factor, score=value)

    def rank(
        self,
        candidates: Iterable[QuestionDefinition],
        tracker: PosteriorTracker,
        boost: Optional[BoostFunction] = None,
    ) -> List[RankedQuestion]:
        """Кандидати за спаданням score (при рівних score зберігається порядок каталогу)"""
        scored = [self.score(q, tracker, boost) for q in candidates]
        return sorted(scored, key=lambda r: r.score, reverse=True)

    def select(
        self,
        candidates: Iterable[QuestionDefinition],
        tracker: PosteriorTracker,
        boost: Optional[BoostFunction] = None,
    ) -> Optional[RankedQuestion]:
        """Найкраще питання або None, якщо кандидатів немає"""
        ranked = self.rank(candidates, tracker, boost)
        return ranked[0] if ranked else None

    def __repr__(self) -> str:
        return f"QuestionSelector(evidence_floor={self.evidence_floor})"
