"""
Score ranking policy.

Candidates are folded left in registry order; a candidate replaces the
running best only when is_better() says so. With priority tie-breaking the
first-enumerated action therefore wins ties, which is how callers express
a deterministic priority order.
"""
from __future__ import annotations

import random
from dataclasses import dataclass
from typing import Iterable, Optional

from .action import UtilityAction


@dataclass(frozen=True)
class ScoringPolicy:
    """
    Comparison settings.

    Attributes:
        equality_tolerance: Scores closer than this are a tie
        invert_scoring: Lowest score wins instead of highest
        invert_priority: Ties go to the later-enumerated action
        randomize_on_equality: Ties are a coin flip (ignored when
            invert_priority is set)
    """
    equality_tolerance: float = 0.0
    invert_scoring: bool = False
    invert_priority: bool = False
    randomize_on_equality: bool = False


def rand_bool(rng: random.Random) -> bool:
    return rng.random() < 0.5


def is_better(
    candidate: UtilityAction,
    incumbent: Optional[UtilityAction],
    policy: ScoringPolicy,
    rng: random.Random,
) -> bool:
    """
    Whether `candidate` should replace `incumbent` as the running best.

    Compares last_score of both actions. `rng` is only consulted for ties
    under randomize_on_equality.
    """
    if incumbent is None:
        return True

    if abs(incumbent.last_score - candidate.last_score) <= policy.equality_tolerance:
        if policy.invert_priority:
            return True
        if policy.randomize_on_equality:
            return rand_bool(rng)
        return False

    if policy.invert_scoring:
        return candidate.last_score < incumbent.last_score
    return candidate.last_score > incumbent.last_score


def select_best(
    candidates: Iterable[UtilityAction],
    policy: ScoringPolicy,
    rng: random.Random,
) -> Optional[UtilityAction]:
    """Left fold of already-scored candidates through is_better()."""
    best: Optional[UtilityAction] = None
    for action in candidates:
        if is_better(action, best, policy, rng):
            best = action
    return best
