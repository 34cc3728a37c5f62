"""Data models for the balance lab document."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional
import numpy as np

from .enums import (
    WeaponType, Side, ComparisonScope, WEAPON_TYPE_NAMES,
    DEFAULT_CRIT_MULTIPLIER, DEFAULT_MACRO_RADIUS
)


@dataclass
class Position:
    """Map position (x=column, y=row)."""
    x: int = 0
    y: int = 0


@dataclass
class StatBlock:
    """The six combat stats. `def` is exposed as `def_`."""
    hp: float = 0
    atk: float = 0
    def_: float = 0
    matk: float = 0
    mdef: float = 0
    spd: float = 0

    def get(self, key: str) -> float:
        """Read a stat by its JSON key."""
        return getattr(self, "def_" if key == "def" else key)


@dataclass
class DefenderStats(StatBlock):
    """Stat block after a terrain bonus was applied."""
    avoid: float = 0


@dataclass
class UnitClass:
    """A character class and its base stats."""
    id: str
    name: str
    role: str = ""
    base_stats: StatBlock = field(default_factory=StatBlock)


@dataclass
class Weapon:
    """A weapon. Unknown `type_name` values are kept as-is."""
    id: str
    name: str
    type_name: str = "physical"
    might: float = 0
    hit: float = 0
    crit: float = 0
    range_min: int = 1
    range_max: int = 1

    @property
    def weapon_type(self) -> Optional[WeaponType]:
        return WEAPON_TYPE_NAMES.get(self.type_name)

    def in_range(self, distance: int) -> bool:
        return self.range_min <= distance <= self.range_max


@dataclass
class TerrainBonus:
    """Bonuses granted to a unit defending on a tile."""
    def_: float = 0
    mdef: float = 0
    avoid: float = 0


@dataclass
class Terrain:
    """A terrain type."""
    id: str
    name: str
    move_cost: float = 1
    bonus: TerrainBonus = field(default_factory=TerrainBonus)


@dataclass
class Unit:
    """A placed unit. `stats_override` values replace the class base stat."""
    id: str
    name: str
    class_id: str
    weapon_id: str
    side: Side = Side.PLAYER
    level: int = 1
    position: Position = field(default_factory=Position)
    stats_override: dict[str, float] = field(default_factory=dict)


@dataclass
class Stage:
    """A map: terrain grid (row-major) plus the units placed on it."""
    id: str
    name: str
    width: int = 0
    height: int = 0
    terrain_grid: list[str] = field(default_factory=list)
    units: list[str] = field(default_factory=list)

    @property
    def has_valid_grid(self) -> bool:
        return self.width > 0 and self.height > 0 and len(self.terrain_grid) == self.width * self.height

    def grid(self) -> Optional[np.ndarray]:
        """Terrain ids as a (height, width) array, or None if the grid is inconsistent."""
        if not self.has_valid_grid:
            return None
        return np.array(self.terrain_grid, dtype=object).reshape(self.height, self.width)

    def terrain_at(self, pos: Position) -> Optional[str]:
        """Terrain id under a position, None when off-grid."""
        grid = self.grid()
        if grid is None:
            return None
        if 0 <= pos.y < self.height and 0 <= pos.x < self.width:
            return grid[pos.y, pos.x]
        return None


@dataclass
class GameConfig:
    """Global rule toggles stored in the document."""
    enable_doubling: bool = False
    enable_crit: bool = False
    crit_multiplier: float = DEFAULT_CRIT_MULTIPLIER
    base_avoid: float = 0  # unused baseline


@dataclass
class ChecklistItem:
    """A named metric with its inclusive target band."""
    id: str
    label: str
    metric: str
    min: float
    max: float
    extra: dict = field(default_factory=dict)


@dataclass
class BalanceDocument:
    """Everything the designer edits. Catalogs keep document order."""
    config: GameConfig = field(default_factory=GameConfig)
    classes: dict[str, UnitClass] = field(default_factory=dict)
    weapons: dict[str, Weapon] = field(default_factory=dict)
    terrain: dict[str, Terrain] = field(default_factory=dict)
    units: dict[str, Unit] = field(default_factory=dict)
    stages: dict[str, Stage] = field(default_factory=dict)
    checklist: list[ChecklistItem] = field(default_factory=list)

    def get_class(self, class_id: Optional[str]) -> Optional[UnitClass]:
        return self.classes.get(class_id)

    def get_weapon(self, weapon_id: Optional[str]) -> Optional[Weapon]:
        return self.weapons.get(weapon_id)

    def get_terrain(self, terrain_id: Optional[str]) -> Optional[Terrain]:
        return self.terrain.get(terrain_id)

    def get_unit(self, unit_id: Optional[str]) -> Optional[Unit]:
        return self.units.get(unit_id)

    def get_stage(self, stage_id: Optional[str]) -> Optional[Stage]:
        return self.stages.get(stage_id)

    def get_units_by_side(self, side: Side) -> list[Unit]:
        return [u for u in self.units.values() if u.side == side]

    def units_on_stage(self, stage: Stage) -> list[Unit]:
        """Resolve a stage's unit ids, dropping dangling ones."""
        return [self.units[uid] for uid in stage.units if uid in self.units]


@dataclass
class Selection:
    """UI selection bundle passed into the evaluators."""
    attacker_id: Optional[str] = None
    defender_id: Optional[str] = None   # the "standard"
    attacker_terrain_id: Optional[str] = None
    defender_terrain_id: Optional[str] = None
    stage_id: Optional[str] = None
    scope: ComparisonScope = ComparisonScope.ALL
    enable_doubling: bool = False
    enable_crit: bool = False
    macro_radius: int = DEFAULT_MACRO_RADIUS

    @classmethod
    def from_config(cls, config: GameConfig, **kwargs) -> "Selection":
        """Seed the rule toggles from the document config."""
        kwargs.setdefault("enable_doubling", bool(config.enable_doubling))
        kwargs.setdefault("enable_crit", bool(config.enable_crit))
        return cls(**kwargs)


@dataclass
class LabError:
    """Returned instead of a result when a required entity is missing."""
    message: str
