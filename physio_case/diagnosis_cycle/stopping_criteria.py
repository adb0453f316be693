"""
Physio.Case — Критерії зупинки

Стани (движок діагнозу), зупинка якщо виконано будь-що:
- DOMINANCE: top > 0.85 AND confidence > 0.8
- SEPARATION: top > 0.7 AND gap > 0.4
- QUESTION_LIMIT: питань більше ніж ліміт ділянки (12, для складних 15)
- DIFFERENTIAL_CONFIDENCE: фаза differential, confidence > 0.6, питань ≥ 8

Джерела болю:
- DOMINANCE: top > 0.85 AND confidence > 0.8
- SEPARATION: gap > 0.35 AND top > 0.7
- QUESTION_LIMIT: питань ≥ 30
- CONFIDENT_EARLY: питань ≥ 6 AND confidence > 0.85,
                   або питань ≥ 10 AND confidence > 0.75
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Tuple

from ..config.settings import ConditionStoppingConfig, SourceStoppingConfig
from ..question_engine.information_gain import confidence as confidence_score


class StopReason(Enum):
    """Причина зупинки"""
    CONTINUE = "continue"                                  # Продовжуємо
    DOMINANCE = "dominance"                                # Є чіткий лідер
    SEPARATION = "separation"                              # Великий відрив від другого
    QUESTION_LIMIT = "question_limit"                      # Досягнуто ліміту питань
    DIFFERENTIAL_CONFIDENCE = "differential_confidence"    # Достатня впевненість у differential
    CONFIDENT_EARLY = "confident_early"                    # Висока впевненість джерела
    RED_FLAG = "red_flag"                                  # Червоний прапорець
    NO_QUESTIONS = "no_questions"                          # Немає більше питань


@dataclass
class StopDecision:
    """Результат перевірки критеріїв зупинки"""
    reason: StopReason
    should_stop: bool
    message: str = ""

    top_probability: float = 0.0
    gap: float = 0.0
    confidence: float = 0.0

    @property
    def should_continue(self) -> bool:
        return not self.should_stop


def _top_and_gap(posterior: Dict[str, float]) -> Tuple[Optional[str], float, float]:
    ranked = sorted(posterior.items(), key=lambda x: x[1], reverse=True)
    if not ranked:
        return None, 0.0, 0.0
    top_name, top = ranked[0]
    second = ranked[1][1] if len(ranked) > 1 else 0.0
    return top_name, top, top - second


class ConditionStoppingCriteria:
    """
    Критерії зупинки движка станів.

    Приклад:
        criteria = ConditionStoppingCriteria()
        decision = criteria.check(
            posterior={"lateral_ligament_sprain": 0.95, "high_ankle_sprain": 0.05},
            questions_asked=4,
            region="ankle",
        )
        if decision.should_stop:
            print(decision.reason.value, decision.message)
    """

    def __init__(self, config: Optional[ConditionStoppingConfig] = None):
        self.config = config or ConditionStoppingConfig()

    def question_limit(self, region: Optional[str]) -> int:
        return self.config.question_limit(region)

    def check(
        self,
        posterior: Dict[str, float],
        questions_asked: int,
        region: Optional[str] = None,
        in_differential: bool = False,
    ) -> StopDecision:
        """
        Перевірити всі критерії.

        Args:
            posterior: поточний розподіл станів
            questions_asked: кількість заданих питань (всіх фаз)
            region: активна ділянка (для ліміту питань)
            in_differential: чи йде фаза differential

        Returns:
            StopDecision
        """
        top_name, top, gap = _top_and_gap(posterior)
        if top_name is None:
            return StopDecision(reason=StopReason.CONTINUE, should_stop=False, message="Немає гіпотез")

        conf = confidence_score(posterior)
        details = dict(top_probability=top, gap=gap, confidence=conf)
        cfg = self.config

        if top > cfg.dominance_threshold and conf > cfg.dominance_confidence:
            return StopDecision(
                reason=StopReason.DOMINANCE,
                should_stop=True,
                message=f"Домінуючий стан: {top_name} ({top:.1%}), впевненість {conf:.2f}",
                **details,
            )

        if top > cfg.separation_threshold and gap > cfg.separation_gap:
            return StopDecision(
                reason=StopReason.SEPARATION,
                should_stop=True,
                message=f"Чіткий лідер: {top_name} ({top:.1%}), відрив {gap:.1%}",
                **details,
            )

        limit = self.question_limit(region)
        if questions_asked > limit:
            return StopDecision(
                reason=StopReason.QUESTION_LIMIT,
                should_stop=True,
                message=f"Досягнуто ліміту питань ({limit})",
                **details,
            )

        if (
            in_differential
            and conf > cfg.differential_confidence
            and questions_asked >= cfg.differential_min_questions
        ):
            return StopDecision(
                reason=StopReason.DIFFERENTIAL_CONFIDENCE,
                should_stop=True,
                message=f"Достатня впевненість ({conf:.2f}) після {questions_asked} питань",
                **details,
            )

        return StopDecision(reason=StopReason.CONTINUE, should_stop=False, message="Продовжуємо", **details)

    def __repr__(self) -> str:
        return (
            f"ConditionStoppingCriteria(dominance={self.config.dominance_threshold:.0%}, "
            f"max_questions={self.config.max_questions}/{self.config.max_questions_complex})"
        )


class SourceStoppingCriteria:
    """Критерії зупинки движка джерела болю"""

    def __init__(self, config: Optional[SourceStoppingConfig] = None):
        self.config = config or SourceStoppingConfig()

    def check(self, posterior: Dict[str, float], questions_asked: int) -> StopDecision:
        top_name, top, gap = _top_and_gap(posterior)
        if top_name is None:
            return StopDecision(reason=StopReason.CONTINUE, should_stop=False, message="Немає джерел")

        conf = confidence_score(posterior)
        details = dict(top_probability=top, gap=gap, confidence=conf)
        cfg = self.config

        if top > cfg.dominance_threshold and conf > cfg.dominance_confidence:
            return StopDecision(
                reason=StopReason.DOMINANCE,
                should_stop=True,
                message=f"Домінуюче джерело: {top_name} ({top:.1%})",
                **details,
            )

        if gap > cfg.separation_gap and top > cfg.separation_threshold:
            return StopDecision(
                reason=StopReason.SEPARATION,
                should_stop=True,
                message=f"Чітке джерело: {top_name} ({top:.1%}), відрив {gap:.1%}",
                **details,
            )

        if questions_asked >= cfg.max_questions:
            return StopDecision(
                reason=StopReason.QUESTION_LIMIT,
                should_stop=True,
                message=f"Досягнуто ліміту питань ({cfg.max_questions})",
                **details,
            )

        early = questions_asked >= cfg.early_questions and conf > cfg.early_confidence
        late = questions_asked >= cfg.late_questions and conf > cfg.late_confidence
        if early or late:
            return StopDecision(
                reason=StopReason.CONFIDENT_EARLY,
                should_stop=True,
                message=f"Висока впевненість ({conf:.2f}) після {questions_asked} питань",
                **details,
            )

        return StopDecision(reason=StopReason.CONTINUE, should_stop=False, message="Продовжуємо", **details)

    def __repr__(self) -> str:
        return f"SourceStoppingCriteria(max_questions={self.config.max_questions})"
