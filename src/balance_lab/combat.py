"""Combat mechanics - stat resolution, terrain and expected-value attacks."""
from __future__ import annotations
from dataclasses import dataclass, replace
from typing import Optional
import logging

from .enums import (
    WeaponType, STAT_KEYS, DOUBLING_SPEED_GAP, DEFAULT_CRIT_MULTIPLIER,
    NO_TERRAIN_NAME
)
from .data_loader import to_number
from .models import (
    StatBlock, DefenderStats, Terrain, Unit, Weapon, BalanceDocument,
    Selection
)


def clamp01(value: float) -> float:
    return max(0.0, min(1.0, value))


def resolve_stats(document: BalanceDocument, unit: Unit) -> Optional[StatBlock]:
    """
    Effective stats of a unit.

    Each stat is the override if it is a finite number, else the class base
    stat if finite, else 0. Returns None when the class does not resolve.
    """
    unit_class = document.get_class(unit.class_id)
    if unit_class is None:
        return None

    base = unit_class.base_stats
    override = unit.stats_override or {}
    values = {}
    for key in STAT_KEYS:
        base_value = to_number(base.get(key), 0)
        values["def_" if key == "def" else key] = to_number(override.get(key), base_value)
    return StatBlock(**values)


def apply_terrain(stats: StatBlock, terrain: Optional[Terrain]) -> DefenderStats:
    """
    Apply a terrain bonus to a defender.

    Avoid comes from the terrain only; it is set, never accumulated.
    """
    if terrain is None:
        bonus_def = bonus_mdef = avoid = 0
    else:
        bonus_def = to_number(terrain.bonus.def_)
        bonus_mdef = to_number(terrain.bonus.mdef)
        avoid = to_number(terrain.bonus.avoid)

    return DefenderStats(
        hp=stats.hp,
        atk=stats.atk,
        def_=stats.def_ + bonus_def,
        matk=stats.matk,
        mdef=stats.mdef + bonus_mdef,
        spd=stats.spd,
        avoid=avoid
    )


@dataclass(frozen=True)
class CombatContext:
    """Everything a simulated attack needs besides the two units."""
    document: BalanceDocument
    defender_terrain_id: Optional[str] = None
    enable_doubling: bool = False
    enable_crit: bool = False
    crit_multiplier: float = DEFAULT_CRIT_MULTIPLIER

    @classmethod
    def from_selection(cls, document: BalanceDocument, selection: Selection) -> "CombatContext":
        return cls(
            document=document,
            defender_terrain_id=selection.defender_terrain_id,
            enable_doubling=selection.enable_doubling,
            enable_crit=selection.enable_crit,
            crit_multiplier=to_number(document.config.crit_multiplier, DEFAULT_CRIT_MULTIPLIER)
        )

    def on_terrain(self, terrain_id: Optional[str]) -> "CombatContext":
        """Same rules, different defender tile."""
        return replace(self, defender_terrain_id=terrain_id)


@dataclass(frozen=True)
class AttackResult:
    """One simulated attack, in expectation."""
    hit_chance: float
    damage: float           # per hit, before hit chance
    attacks_count: int
    crit_factor: float
    expected_damage: float  # per combat round
    is_magic: bool = False
    is_heal: bool = False
    terrain_name: str = NO_TERRAIN_NAME


class DamageCalculator:
    """The individual combat formulas."""

    @staticmethod
    def hit_chance(weapon_hit: float, avoid: float) -> float:
        """Hit = (weapon hit - defender avoid) / 100, clamped to [0, 1]."""
        return clamp01((to_number(weapon_hit) - to_number(avoid)) / 100)

    @staticmethod
    def attacks_count(attacker_spd: float, defender_spd: float, enable_doubling: bool) -> int:
        """Two attacks when doubling is on and the attacker is 4+ speed faster."""
        if not enable_doubling:
            return 1
        return 2 if attacker_spd >= defender_spd + DOUBLING_SPEED_GAP else 1

    @staticmethod
    def raw_damage(
        weapon: Weapon,
        attacker: StatBlock,
        defender: StatBlock
    ) -> tuple[float, bool, bool]:
        """
        Per-hit damage for a weapon.

        Returns: (damage, is_magic, is_heal). Heals are negative.
        """
        might = to_number(weapon.might)
        weapon_type = weapon.weapon_type

        if weapon_type == WeaponType.PHYSICAL:
            return (max(0, attacker.atk + might - defender.def_), False, False)
        elif weapon_type == WeaponType.MAGIC:
            return (max(0, attacker.matk + might - defender.mdef), True, False)
        elif weapon_type == WeaponType.HEAL:
            return (-max(0, attacker.atk + might), False, True)
        else:
            # Unknown weapon types use the physical formula
            return (max(0, attacker.atk + might - defender.def_), False, False)

    @staticmethod
    def crit_factor(weapon_crit: float, enable_crit: bool, crit_multiplier: float) -> float:
        """Expected crit multiplier: 1 + critChance * (multiplier - 1)."""
        crit_chance = clamp01(to_number(weapon_crit) / 100) if enable_crit else 0.0
        return 1 + crit_chance * (to_number(crit_multiplier, DEFAULT_CRIT_MULTIPLIER) - 1)


def simulate_attack(
    attacker: Unit,
    defender: Unit,
    context: CombatContext
) -> Optional[AttackResult]:
    """
    Simulate one attack round of `attacker` on `defender`.

    Returns None when a stat block or the attacker's weapon cannot be resolved.
    """
    document = context.document
    attacker_stats = resolve_stats(document, attacker)
    defender_base = resolve_stats(document, defender)
    weapon = document.get_weapon(attacker.weapon_id)
    if attacker_stats is None or defender_base is None or weapon is None:
        logging.debug(f"Cannot simulate {attacker.id} -> {defender.id}: unresolved class or weapon")
        return None

    terrain = document.get_terrain(context.defender_terrain_id)
    defender_stats = apply_terrain(defender_base, terrain)

    hit_chance = DamageCalculator.hit_chance(weapon.hit, defender_stats.avoid)
    # Doubling compares against pre-terrain speed
    attacks = DamageCalculator.attacks_count(
        attacker_stats.spd, defender_base.spd, context.enable_doubling
    )
    damage, is_magic, is_heal = DamageCalculator.raw_damage(weapon, attacker_stats, defender_stats)
    crit_factor = DamageCalculator.crit_factor(
        weapon.crit, context.enable_crit, context.crit_multiplier
    )

    return AttackResult(
        hit_chance=hit_chance,
        damage=damage,
        attacks_count=attacks,
        crit_factor=crit_factor,
        expected_damage=hit_chance * damage * attacks * crit_factor,
        is_magic=is_magic,
        is_heal=is_heal,
        terrain_name=terrain.name if terrain else NO_TERRAIN_NAME
    )
