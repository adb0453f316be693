"""
Physio.Case — Відстеження апостеріорного розподілу

HypothesisSpace: таблиця гіпотез (стани або джерела болю) з likelihoods.
PosteriorTracker: поточний розподіл, спостереження та історія оновлень.

Один і той самий трекер використовують движок станів і движок
джерела болю; відрізняються лише таблиці та правила зупинки.
"""

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from .information_gain import (
    Evidence,
    Observation,
    bayes_update,
    confidence,
    entropy,
    normalize_probs,
    outcome_probability,
    simulate_evidence,
)


logger = logging.getLogger(__name__)


class HypothesisSpace:
    """
    Таблиця гіпотез.

    Приклад:
        space = HypothesisSpace(kb.conditions_for("ankle"))
        space.likelihood("lateral_ligament_sprain", "inversion_injury", True)  # 0.9
        space.likelihood("lateral_ligament_sprain", "unknown_symptom", True)   # 0.5
    """

    def __init__(self, hypotheses: Mapping[str, object], neutral_likelihood: float = 0.5):
        self._hypotheses = dict(hypotheses)
        self.neutral_likelihood = neutral_likelihood

    def __len__(self) -> int:
        return len(self._hypotheses)

    def __contains__(self, hypothesis_id: str) -> bool:
        return hypothesis_id in self._hypotheses

    @property
    def ids(self) -> List[str]:
        return list(self._hypotheses)

    def entry(self, hypothesis_id: str):
        return self._hypotheses.get(hypothesis_id)

    def name(self, hypothesis_id: str) -> str:
        entry = self._hypotheses.get(hypothesis_id)
        return entry.name if entry is not None else hypothesis_id

    def priors(self) -> Dict[str, float]:
        """Base probabilities, нормалізовані до 1"""
        return normalize_probs({h: e.base_probability for h, e in self._hypotheses.items()})

    def symptom_entry(self, hypothesis_id: str, symptom: str):
        entry = self._hypotheses.get(hypothesis_id)
        if entry is None:
            return None
        return entry.likelihood(symptom)

    def likelihood(self, hypothesis_id: str, symptom: str, value: Observation) -> float:
        """P(спостереження | гіпотеза); відсутні дані → нейтральне значення"""
        lk = self.symptom_entry(hypothesis_id, symptom)
        if lk is None:
            return self.neutral_likelihood
        return lk.probability_of(value, self.neutral_likelihood)

    def likelihoods(self, symptom: str, value: Observation) -> Dict[str, float]:
        return {h: self.likelihood(h, symptom, value) for h in self._hypotheses}


class PosteriorTracker:
    """
    Поточний розподіл гіпотез.

    Розподіл є звичайним словником, який замінюється цілком при кожному
    оновленні; назовні віддаються лише копії.

    Приклад:
        tracker = PosteriorTracker(HypothesisSpace(kb.conditions_for("ankle")))
        tracker.update("inversion_injury", True)
        tracker.top(3)
        tracker.confidence
    """

    def __init__(self, space: Optional[HypothesisSpace] = None, evidence_floor: float = 0.001):
        self.evidence_floor = evidence_floor
        self.space = space or HypothesisSpace({})
        self._posterior: Dict[str, float] = {}
        self._observations: Dict[str, Observation] = {}
        self.history: List[Tuple[str, Observation, Dict[str, float]]] = []
        self.reset(self.space)

    def reset(self, space: Optional[HypothesisSpace] = None) -> Dict[str, float]:
        """Повернутись до base probabilities (опційно з новою таблицею)"""
        if space is not None:
            self.space = space
        self._posterior = self.space.priors()
        self._observations = {}
        self.history = []
        return dict(self._posterior)

    # -------------------------------------------------------------------------
    # Updates
    # -------------------------------------------------------------------------

    def update(self, symptom: str, value: Observation) -> Dict[str, float]:
        """Оновити розподіл одним спостереженням"""
        self._observations[symptom] = value
        if not self._posterior:
            return {}
        self._posterior = bayes_update(
            self._posterior,
            self.space.likelihoods(symptom, value),
            self.evidence_floor,
            self.space.neutral_likelihood,
        )
        self.history.append((symptom, value, dict(self._posterior)))
        logger.debug("Posterior after %s=%r: %s", symptom, value, self._format_top())
        return dict(self._posterior)

    def apply(self, evidence: Evidence) -> Dict[str, float]:
        for symptom, value in evidence:
            self.update(symptom, value)
        return dict(self._posterior)

    def simulate(self, evidence: Evidence) -> Dict[str, float]:
        """Розподіл після гіпотетичних спостережень (стан не змінюється)"""
        return simulate_evidence(self.space, self._posterior, evidence, self.evidence_floor)

    def outcome_probability(self, evidence: Evidence) -> float:
        return outcome_probability(self.space, self._posterior, evidence)

    # -------------------------------------------------------------------------
    # Views
    # -------------------------------------------------------------------------

    @property
    def posterior(self) -> Dict[str, float]:
        return dict(self._posterior)

    @property
    def observations(self) -> Dict[str, Observation]:
        return dict(self._observations)

    @property
    def is_empty(self) -> bool:
        return not self._posterior

    @property
    def confidence(self) -> float:
        return confidence(self._posterior)

    @property
    def entropy(self) -> float:
        return entropy(self._posterior)

    def top(self, n: int = 3) -> List[Tuple[str, float]]:
        """Топ-n гіпотез (id, ймовірність) за спаданням"""
        ranked = sorted(self._posterior.items(), key=lambda x: x[1], reverse=True)
        return ranked[:n]

    @property
    def top_probability(self) -> float:
        ranked = self.top(1)
        return ranked[0][1] if ranked else 0.0

    @property
    def gap(self) -> float:
        """Різниця між першою та другою гіпотезою"""
        ranked = self.top(2)
        if not ranked:
            return 0.0
        second = ranked[1][1] if len(ranked) > 1 else 0.0
        return ranked[0][1] - second

    def _format_top(self) -> str:
        return ", ".join(f"{h}={p:.3f}" for h, p in self.top(3))

    def __repr__(self) -> str:
        return f"PosteriorTracker(n={len(self._posterior)}, top=[{self._format_top()}])"
