"""Roll unit-vs-standard rows up into per-class and global summaries."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Sequence
import math
import numpy as np

from .enums import LOW_HIT_THRESHOLD, ONE_SHOT_TTK, SLOW_TTK
from .metrics import finite_mean
from .tables import UnitRow


@dataclass(frozen=True)
class ClassAggregate:
    """Averages of all unit rows sharing a class."""
    class_id: str
    class_name: str
    count: int
    hit_avg: float
    exp_avg: float
    ttk_avg: float  # finite TTKs only
    zero_damage_count: int
    low_hit_count: int


@dataclass(frozen=True)
class GlobalOverview:
    """Averages and flag counts over every unit row."""
    count: int
    hit_avg: float
    exp_avg: float
    ttk_avg: float
    zero_damage_count: int
    low_hit_count: int
    one_shot_count: int
    slow_count: int


def _mean(values: Sequence[float]) -> float:
    return float(np.mean(values)) if len(values) else 0.0


def is_low_hit(hit: float) -> bool:
    return hit < LOW_HIT_THRESHOLD


def is_one_shot(ttk: float, expected_damage: float) -> bool:
    """A kill in (about) one round is too punitive."""
    return math.isfinite(ttk) and ttk < ONE_SHOT_TTK and expected_damage > 0


def is_slow(ttk: float) -> bool:
    """Fights dragging past SLOW_TTK rounds. Unkillable targets are not counted here."""
    return math.isfinite(ttk) and ttk > SLOW_TTK


def aggregate_by_class(rows: Sequence[UnitRow]) -> list[ClassAggregate]:
    """Group rows by class; highest average expected damage first."""
    groups: dict[str, list[UnitRow]] = {}
    for row in rows:
        groups.setdefault(row.class_id, []).append(row)

    result = []
    for class_id, group in groups.items():
        result.append(ClassAggregate(
            class_id=class_id,
            class_name=group[0].class_name,
            count=len(group),
            hit_avg=_mean([r.hit for r in group]),
            exp_avg=_mean([r.expected_damage for r in group]),
            ttk_avg=finite_mean(r.ttk for r in group),
            zero_damage_count=sum(1 for r in group if r.zero_damage),
            low_hit_count=sum(1 for r in group if is_low_hit(r.hit))
        ))

    result.sort(key=lambda a: a.exp_avg, reverse=True)
    return result


def global_overview(rows: Sequence[UnitRow]) -> GlobalOverview:
    """Summary over every row, using the same averaging rules as per-class."""
    return GlobalOverview(
        count=len(rows),
        hit_avg=_mean([r.hit for r in rows]),
        exp_avg=_mean([r.expected_damage for r in rows]),
        ttk_avg=finite_mean(r.ttk for r in rows),
        zero_damage_count=sum(1 for r in rows if r.zero_damage),
        low_hit_count=sum(1 for r in rows if is_low_hit(r.hit)),
        one_shot_count=sum(1 for r in rows if is_one_shot(r.ttk, r.expected_damage)),
        slow_count=sum(1 for r in rows if is_slow(r.ttk))
    )
