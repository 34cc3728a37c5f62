"""Derived metrics: time-to-kill, effective HP and finite-only averaging."""
from __future__ import annotations
from typing import Iterable
import math
import numpy as np


def compute_ttk(target_hp: float, expected_damage_per_round: float) -> float:
    """
    Rounds needed to bring a target to 0 HP at the expected-damage rate.

    Non-positive damage can never kill: the result is infinity. HP floors
    at 1 so a misconfigured 0-HP target still yields a finite round count.
    """
    if not expected_damage_per_round > 0:
        return math.inf
    return max(1, target_hp) / expected_damage_per_round


def compute_ehp(hp: float, incoming_damage_per_round: float) -> float:
    """Rounds until this unit dies under the incoming expected damage."""
    return compute_ttk(hp, incoming_damage_per_round)


def finite_mean(values: Iterable[float], default: float = math.inf) -> float:
    """Mean of the finite entries only; `default` when none is finite."""
    arr = np.asarray(list(values), dtype=float)
    finite = arr[np.isfinite(arr)]
    if finite.size == 0:
        return default
    return float(finite.mean())
