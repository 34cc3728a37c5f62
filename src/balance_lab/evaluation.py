"""Duel and class reports: indicators, break alerts and tuning advice."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from .enums import (
    Side, Verdict, LOW_HIT_THRESHOLD, ONE_SHOT_TTK, SLOW_TTK, REACHABLE_HIT,
    HIT_OK_BAND, HIT_WARN_BAND, TTK_OK_BAND, TTK_WARN_BAND
)
from .models import BalanceDocument, LabError, Selection
from .combat import AttackResult, CombatContext, resolve_stats, simulate_attack
from .metrics import compute_ttk
from .tables import pick_weapon_for_class, resolve_standard, synthetic_unit

TARGET_TTK_MAX = TTK_OK_BAND[1]
TARGET_TTK_MIN = TTK_OK_BAND[0]


@dataclass(frozen=True)
class Advice:
    """A leveled message for the designer."""
    level: Verdict
    text: str


@dataclass(frozen=True)
class Indicator:
    """One displayed number with its verdict."""
    label: str
    value: float
    level: Verdict
    why: str


@dataclass(frozen=True)
class DuelReport:
    attacker_id: str
    defender_id: str
    sim: AttackResult
    defender_hp: float
    ttk: float
    indicators: list[Indicator] = field(default_factory=list)
    advice: list[Advice] = field(default_factory=list)


@dataclass(frozen=True)
class ClassReport:
    class_id: str
    weapon_id: str
    standard_id: str
    sim: AttackResult
    standard_hp: float
    ttk: float
    hit_verdict: Verdict
    ttk_verdict: Verdict
    exp_verdict: Verdict
    dmg_verdict: Verdict
    breaks: list[Advice] = field(default_factory=list)
    recommendations: list[Advice] = field(default_factory=list)


def band_verdict(value: float, ok_band: tuple[float, float], warn_band: tuple[float, float]) -> Verdict:
    if ok_band[0] <= value <= ok_band[1]:
        return Verdict.OK
    if warn_band[0] <= value <= warn_band[1]:
        return Verdict.WARN
    return Verdict.FAIL


def player_class_ids(document: BalanceDocument) -> list[str]:
    """Classes used by player units, in document order, dropping unknown ids."""
    seen = []
    for unit in document.get_units_by_side(Side.PLAYER):
        if unit.class_id not in seen and document.get_class(unit.class_id) is not None:
            seen.append(unit.class_id)
    return seen


def evaluate_duel(document: BalanceDocument, selection: Selection) -> DuelReport | LabError:
    """The selected attacker hits the selected defender on the defender's terrain."""
    attacker = document.get_unit(selection.attacker_id)
    defender = document.get_unit(selection.defender_id)
    if attacker is None or defender is None:
        return LabError("Attacker or defender not found.")

    sim = simulate_attack(attacker, defender, CombatContext.from_selection(document, selection))
    if sim is None:
        return LabError("Simulation impossible.")

    defender_hp = resolve_stats(document, defender).hp
    ttk = compute_ttk(defender_hp, sim.expected_damage)

    indicators = [
        Indicator("Hit", sim.hit_chance,
                  Verdict.WARN if sim.hit_chance < LOW_HIT_THRESHOLD else Verdict.OK,
                  "Reliability. Too low means frustration."),
        Indicator("Damage", sim.damage,
                  Verdict.FAIL if sim.damage == 0 else Verdict.OK,
                  "At 0 nothing ever happens."),
        Indicator("Expected damage", sim.expected_damage,
                  Verdict.FAIL if sim.expected_damage <= 0 else Verdict.OK,
                  "Real pace: hit x damage x attacks."),
        Indicator("TTK", ttk,
                  Verdict.WARN if ttk > TARGET_TTK_MAX else Verdict.OK,
                  "Tempo. Aim for about 2-3 against the standard."),
    ]

    advice = []
    if sim.damage == 0:
        advice.append(Advice(Verdict.FAIL, "Lower the standard's DEF/MDEF (or terrain) or raise Might/ATK/MATK."))
    if sim.hit_chance < REACHABLE_HIT:
        advice.append(Advice(Verdict.WARN, "Raise weapon hit (+5 to +10) or lower terrain avoid."))
    if ttk > TARGET_TTK_MAX:
        advice.append(Advice(Verdict.WARN, "+1 Might or -1 DEF/MDEF on the standard."))
    if not advice:
        advice.append(Advice(Verdict.OK, "Nothing to report on this duel."))

    return DuelReport(
        attacker_id=attacker.id,
        defender_id=defender.id,
        sim=sim,
        defender_hp=defender_hp,
        ttk=ttk,
        indicators=indicators,
        advice=advice
    )


def evaluate_class(
    document: BalanceDocument,
    selection: Selection,
    class_id: str,
    weapon_id: Optional[str] = None
) -> ClassReport | LabError:
    """
    A class, armed with `weapon_id` (or its heuristic weapon), against the
    standard unit: verdicts, break alerts and recommendations.
    """
    standard = resolve_standard(document, selection.defender_id)
    if standard is None:
        return LabError("No standard unit available.")

    unit_class = document.get_class(class_id)
    if weapon_id is None and unit_class is not None:
        weapon = pick_weapon_for_class(document, unit_class)
        weapon_id = weapon.id if weapon else None
    if weapon_id is None:
        return LabError("Simulation impossible.")

    context = CombatContext.from_selection(document, selection)
    sim = simulate_attack(synthetic_unit(class_id, weapon_id), standard, context)
    if sim is None:
        return LabError("Simulation impossible.")

    standard_hp = resolve_stats(document, standard).hp
    ttk = compute_ttk(standard_hp, sim.expected_damage)
    hit, exp, dmg = sim.hit_chance, sim.expected_damage, sim.damage

    breaks = []
    if dmg == 0:
        breaks.append(Advice(Verdict.FAIL, "Damage = 0: this unit is useless against the standard."))
    if hit < LOW_HIT_THRESHOLD:
        breaks.append(Advice(Verdict.WARN, "Hit < 50%: frustration, too many misses."))
    if ttk < ONE_SHOT_TTK and exp > 0:
        breaks.append(Advice(Verdict.WARN, "Likely one-shot: too punitive."))
    if ttk > SLOW_TTK:
        breaks.append(Advice(Verdict.WARN, "TTK > 4: fights drag on."))
    if not breaks:
        breaks.append(Advice(Verdict.OK, "No major alert detected."))

    recommendations = []
    if dmg == 0:
        recommendations.append(Advice(Verdict.FAIL, "Lower the standard's DEF/MDEF (or terrain), or raise ATK/MATK/Might."))
    if hit < REACHABLE_HIT:
        recommendations.append(Advice(Verdict.WARN, "Raise weapon hit (+5 to +10) or lower terrain avoid."))
    if ttk > TARGET_TTK_MAX:
        recommendations.append(Advice(Verdict.WARN, "+1 Might (weapon) or +1 ATK/MATK (class), or -1 DEF/MDEF on the standard."))
    if ttk < TARGET_TTK_MIN:
        recommendations.append(Advice(Verdict.WARN, "+HP/+DEF on the standard, or lower Might / ATK/MATK."))
    if not recommendations:
        recommendations.append(Advice(Verdict.OK, "Nothing to change against this standard."))

    return ClassReport(
        class_id=class_id,
        weapon_id=weapon_id,
        standard_id=standard.id,
        sim=sim,
        standard_hp=standard_hp,
        ttk=ttk,
        hit_verdict=band_verdict(hit, HIT_OK_BAND, HIT_WARN_BAND),
        ttk_verdict=band_verdict(ttk, TTK_OK_BAND, TTK_WARN_BAND),
        exp_verdict=Verdict.OK if exp > 0 else Verdict.FAIL,
        dmg_verdict=Verdict.OK if dmg > 0 else Verdict.FAIL,
        breaks=breaks,
        recommendations=recommendations
    )
