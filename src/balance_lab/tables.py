"""Comparative tables: every class or unit against a standard defender."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging

from .enums import WeaponType, Side, ComparisonScope
from .models import BalanceDocument, UnitClass, Unit, Weapon, Position
from .combat import CombatContext, resolve_stats, simulate_attack
from .metrics import compute_ttk

SYNTHETIC_UNIT_ID = "tmp"


@dataclass(frozen=True)
class ClassRow:
    """A class (with its heuristic weapon) against the standard."""
    class_id: str
    class_name: str
    weapon_name: str
    hit: float
    damage: float
    attacks: int
    expected_damage: float
    ttk: float


@dataclass(frozen=True)
class UnitRow:
    """A placed unit against the standard."""
    unit_id: str
    unit_name: str
    class_id: str
    class_name: str
    side: str
    weapon_name: str
    hit: float
    damage: float
    attacks: int
    expected_damage: float
    ttk: float
    zero_damage: bool


def resolve_standard(document: BalanceDocument, defender_id: Optional[str]) -> Optional[Unit]:
    """The selected defender, else the first enemy, else the first unit."""
    unit = document.get_unit(defender_id)
    if unit is not None:
        return unit
    enemies = document.get_units_by_side(Side.ENEMY)
    if enemies:
        return enemies[0]
    return next(iter(document.units.values()), None)


def pick_weapon_for_class(document: BalanceDocument, unit_class: UnitClass) -> Optional[Weapon]:
    """
    Weapon that best represents a class in comparisons.

    Casters (matk >= atk) take the first magic weapon; everyone else the
    first physical one. Falls back to the first weapon of the catalog.
    """
    weapons = list(document.weapons.values())
    if not weapons:
        return None

    stats = unit_class.base_stats
    preferred = WeaponType.MAGIC if stats.matk >= stats.atk else WeaponType.PHYSICAL
    for weapon in weapons:
        if weapon.weapon_type == preferred:
            return weapon
    if preferred == WeaponType.MAGIC:
        for weapon in weapons:
            if weapon.weapon_type == WeaponType.PHYSICAL:
                return weapon
    return weapons[0]


def synthetic_unit(class_id: str, weapon_id: str) -> Unit:
    """Temporary level-1 player unit used to probe a class."""
    return Unit(
        id=SYNTHETIC_UNIT_ID,
        name=SYNTHETIC_UNIT_ID.upper(),
        class_id=class_id,
        weapon_id=weapon_id,
        side=Side.PLAYER,
        level=1,
        position=Position(0, 0)
    )


def class_vs_standard(
    document: BalanceDocument,
    standard: Unit,
    context: CombatContext
) -> list[ClassRow]:
    """Every class of the catalog attacks the standard; highest pressure first."""
    standard_stats = resolve_stats(document, standard)
    if standard_stats is None:
        return []

    rows = []
    for unit_class in document.classes.values():
        weapon = pick_weapon_for_class(document, unit_class)
        if weapon is None:
            continue
        sim = simulate_attack(synthetic_unit(unit_class.id, weapon.id), standard, context)
        if sim is None:
            logging.debug(f"Skipping class '{unit_class.id}' in class table")
            continue
        rows.append(ClassRow(
            class_id=unit_class.id,
            class_name=unit_class.name,
            weapon_name=weapon.name,
            hit=sim.hit_chance,
            damage=sim.damage,
            attacks=sim.attacks_count,
            expected_damage=sim.expected_damage,
            ttk=compute_ttk(standard_stats.hp, sim.expected_damage)
        ))

    rows.sort(key=lambda r: r.expected_damage, reverse=True)
    return rows


def _in_scope(unit: Unit, scope: ComparisonScope) -> bool:
    if scope == ComparisonScope.PLAYER:
        return unit.side == Side.PLAYER
    if scope == ComparisonScope.ENEMY:
        return unit.side == Side.ENEMY
    return True


def units_vs_standard(
    document: BalanceDocument,
    standard: Unit,
    context: CombatContext,
    scope: ComparisonScope = ComparisonScope.ALL
) -> list[UnitRow]:
    """Every placed unit in scope (except the standard) attacks the standard."""
    standard_stats = resolve_stats(document, standard)
    if standard_stats is None:
        return []

    rows = []
    for unit in document.units.values():
        if unit.id == standard.id or not _in_scope(unit, scope):
            continue
        unit_class = document.get_class(unit.class_id)
        weapon = document.get_weapon(unit.weapon_id)
        sim = simulate_attack(unit, standard, context)
        if sim is None or unit_class is None or weapon is None:
            logging.debug(f"Skipping unit '{unit.id}' in unit table")
            continue
        rows.append(UnitRow(
            unit_id=unit.id,
            unit_name=unit.name,
            class_id=unit_class.id,
            class_name=unit_class.name,
            side=unit.side.value,
            weapon_name=weapon.name,
            hit=sim.hit_chance,
            damage=sim.damage,
            attacks=sim.attacks_count,
            expected_damage=sim.expected_damage,
            ttk=compute_ttk(standard_stats.hp, sim.expected_damage),
            zero_damage=sim.damage == 0
        ))

    rows.sort(key=lambda r: r.expected_damage, reverse=True)
    return rows
