"""
Physio.Case — Information Gain для вибору питань

Байєсівське оновлення гіпотез та Expected Information Gain (EIG).

EIG(q) = H(p) - Σ_a P(a) · H(p | a)

де:
- H(p) = ентропія поточного розподілу гіпотез (в бітах)
- P(a) = Σ_h p(h) · Π_s L(s, a | h) — ймовірність відповіді a
- H(p | a) = ентропія після симуляції відповіді a на всі симптоми питання

Ті самі функції використовують і движок станів, і движок джерела болю.
"""

import math
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Mapping, Sequence, Tuple, Union

import numpy as np


Observation = Union[bool, str]
Evidence = Sequence[Tuple[str, Observation]]


@dataclass
class EIGResult:
    """Результат обчислення EIG для питання"""
    question_id: str
    eig: float
    h_current: float
    outcome_probabilities: List[float] = field(default_factory=list)
    h_after: List[float] = field(default_factory=list)

    def __repr__(self) -> str:
        return f"EIGResult(question_id='{self.question_id}', eig={self.eig:.4f}, h={self.h_current:.3f})"


# =============================================================================
# PURE FUNCTIONS
# =============================================================================

def entropy(probs: Union[Mapping[str, float], Iterable[float]]) -> float:
    """
    Обчислити ентропію Шеннона.

    H = -Σ p_i * log2(p_i)   (нульові ймовірності пропускаються)

    Args:
        probs: Ймовірності (словник або послідовність)

    Returns:
        Ентропія в бітах
    """
    if isinstance(probs, Mapping):
        probs = list(probs.values())
    probs = np.asarray(list(probs), dtype=np.float64)
    probs = probs[probs > 0]
    if probs.size == 0:
        return 0.0
    return float(-np.sum(probs * np.log2(probs)))


def normalize_probs(probs: Mapping[str, float], eps: float = 1e-12) -> Dict[str, float]:
    """Нормалізувати ймовірності щоб сума = 1 (нульова маса → рівномірний розподіл)"""
    if not probs:
        return {}
    keys = list(probs)
    values = np.asarray([probs[k] for k in keys], dtype=np.float64)
    total = float(np.sum(values))
    if total < eps:
        values = np.ones_like(values) / len(values)
    else:
        values = values / total
    return {k: float(v) for k, v in zip(keys, values)}


def bayes_update(
    prior: Mapping[str, float],
    likelihoods: Mapping[str, float],
    evidence_floor: float = 0.001,
    neutral: float = 0.5,
) -> Dict[str, float]:
    """
    Одне байєсівське оновлення.

    P(h|e) = P(e|h) · P(h) / max(P(e), evidence_floor)

    Повертає НОВИЙ словник; prior не змінюється.
    """
    if not prior:
        return {}
    evidence = sum(likelihoods.get(h, neutral) * p for h, p in prior.items())
    evidence = max(evidence, evidence_floor)
    posterior = {h: likelihoods.get(h, neutral) * p / evidence for h, p in prior.items()}
    if sum(posterior.values()) <= 0:
        # Жодна гіпотеза не пояснює спостереження
        return dict(prior)
    return normalize_probs(posterior)


def confidence(posterior: Mapping[str, float]) -> float:
    """
    Впевненість у розподілі.

    confidence = sqrt(max_p · (1 - H / H_max)),  H_max = log2(n)

    1.0 для однієї гіпотези, 0.0 для порожнього розподілу.
    """
    n = len(posterior)
    if n == 0:
        return 0.0
    max_p = max(posterior.values())
    if n == 1:
        return math.sqrt(max_p)
    h_max = math.log2(n)
    normalized = 1.0 - entropy(posterior) / h_max
    return math.sqrt(max(0.0, max_p * normalized))


# =============================================================================
# SIMULATION
# =============================================================================

def simulate_evidence(space, posterior: Mapping[str, float], evidence: Evidence, evidence_floor: float = 0.001) -> Dict[str, float]:
    """Послідовно застосувати спостереження до копії розподілу"""
    result = dict(posterior)
    for symptom, value in evidence:
        result = bayes_update(result, space.likelihoods(symptom, value), evidence_floor, space.neutral_likelihood)
    return result


def outcome_probability(space, posterior: Mapping[str, float], evidence: Evidence) -> float:
    """P(відповідь) = Σ_h p(h) · Π_s L(s, відповідь | h)"""
    total = 0.0
    for hypothesis, p in posterior.items():
        product = p
        for symptom, value in evidence:
            product *= space.likelihood(hypothesis, symptom, value)
        total += product
    return total


def expected_information_gain(
    space,
    posterior: Mapping[str, float],
    outcomes: Sequence[Evidence],
    question_id: str = "",
    evidence_floor: float = 0.001,
) -> EIGResult:
    """
    Обчислити EIG питання.

    Args:
        space: HypothesisSpace (likelihood / likelihoods)
        posterior: поточний розподіл
        outcomes: можливі відповіді, кожна — список (симптом, значення)
        question_id: для звіту
        evidence_floor: нижня межа P(evidence)

    Returns:
        EIGResult (eig ≥ 0)
    """
    h_current = entropy(posterior)
    if not posterior or not outcomes:
        return EIGResult(question_id=question_id, eig=0.0, h_current=h_current)

    weights = [outcome_probability(space, posterior, evidence) for evidence in outcomes]
    total = sum(weights)
    if total <= 0:
        return EIGResult(question_id=question_id, eig=0.0, h_current=h_current)
    # Likelihoods "так"/"ні" не зобов'язані сумуватись до 1
    probabilities = [w / total for w in weights]

    h_after = [
        entropy(simulate_evidence(space, posterior, evidence, evidence_floor))
        for evidence in outcomes
    ]
    expected = sum(p * h for p, h in zip(probabilities, h_after))

    return EIGResult(
        question_id=question_id,
        eig=max(0.0, h_current - expected),
        h_current=h_current,
        outcome_probabilities=probabilities,
        h_after=h_after,
    )
