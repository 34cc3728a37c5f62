"""Checklist evaluation - named metrics checked against target bands."""
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional
import logging
import math

from .enums import (
    Verdict, MissDirection, WeaponType, ARCHETYPE_ROLES,
    WARN_BAND_LOW, WARN_BAND_HIGH, MAGE_EHP_MAX_TURNS
)
from .data_loader import to_number
from .models import BalanceDocument, ChecklistItem, LabError, Selection, UnitClass
from .combat import CombatContext, resolve_stats, simulate_attack
from .metrics import compute_ehp, finite_mean
from .tables import (
    class_vs_standard, pick_weapon_for_class, resolve_standard, synthetic_unit
)


DEFAULT_CHECKLIST = [
    ChecklistItem("ttk_avg", "Average TTK vs standard", "ttk_vs_standard_avg", 2, 3),
    ChecklistItem("hit_avg", "Average hit vs standard", "hit_vs_standard_avg", 0.7, 0.9),
    ChecklistItem("zero_dmg", "Classes dealing no damage", "zero_damage_classes", 0, 0),
    ChecklistItem("mage_dmg", "Mage pressure", "mage_expected_damage", 4, 8,
                  extra={"checkMageEhpMax": True}),
    ChecklistItem("priest_dmg", "Priest stays a support", "priest_expected_damage", 0, 3),
    ChecklistItem("tank_hits", "Tank survives hits", "tank_survive_hits", 3, 6),
]

# Keyword -> advice per miss direction. First matching rule wins, so
# "survive_hits" must be tested before "hit" and "zero" before "damage".
HINT_RULES = [
    (("ehp", "survive"), {
        MissDirection.UNDER: "Too fragile: +HP or +DEF/MDEF on the class, or -Might on the standard's weapon.",
        MissDirection.OVER: "Too tanky: -HP or -DEF/MDEF on the class, or +Might on the standard's weapon.",
    }),
    (("heal",), {
        MissDirection.UNDER: "Heals too small: +Might on the heal weapon or +ATK on the healer.",
        MissDirection.OVER: "Heals too large: -Might on the heal weapon or -ATK on the healer.",
    }),
    (("ttk",), {
        MissDirection.UNDER: "Fights too fast: +HP/+DEF on the standard, or -Might / -ATK/MATK.",
        MissDirection.OVER: "Fights too slow: +1 Might or +1 ATK/MATK, or -1 DEF/MDEF on the standard.",
    }),
    (("hit",), {
        MissDirection.UNDER: "Raise weapon hit (+5 to +10) or lower terrain avoid.",
        MissDirection.OVER: "Lower weapon hit (-5) or raise terrain avoid.",
    }),
    (("zero",), {
        MissDirection.UNDER: "Fewer zero-damage classes than expected: check the band of this rule.",
        MissDirection.OVER: "Some classes deal 0 damage: lower DEF/MDEF on the standard (or its terrain), or raise ATK/MATK/Might.",
    }),
    (("damage", "dmg"), {
        MissDirection.UNDER: "Raise Might or ATK/MATK, or lower DEF/MDEF on the standard.",
        MissDirection.OVER: "Lower Might or ATK/MATK, or raise DEF/MDEF on the standard.",
    }),
]
FALLBACK_HINTS = {
    MissDirection.UNDER: "Value below target: push the related stats up.",
    MissDirection.OVER: "Value above target: pull the related stats down.",
}
INSIDE_HINT = "On target, nothing to change."
UNKNOWN_HINT = "Metric unavailable: check that the standard unit and the classes resolve."


@dataclass(frozen=True)
class ChecklistVerdict:
    """Result of one checklist item."""
    item_id: str
    label: str
    metric: str
    verdict: Verdict
    value: Optional[float]
    direction: MissDirection
    extra_note: str = ""
    hint: str = ""


def find_archetype(document: BalanceDocument, archetype: str) -> Optional[UnitClass]:
    """
    Class standing for an archetype: exact id, then role keyword, then the
    first class of the catalog.
    """
    classes = list(document.classes.values())
    if not classes:
        return None
    for unit_class in classes:
        if unit_class.id.lower() == archetype:
            return unit_class
    roles = ARCHETYPE_ROLES.get(archetype, (archetype,))
    for role in roles:
        for unit_class in classes:
            if unit_class.role.lower() == role or unit_class.id.lower() == role:
                return unit_class
    return classes[0]


def compute_metrics(document: BalanceDocument, selection: Selection) -> dict[str, float] | LabError:
    """Every metric a checklist item may refer to, keyed by name."""
    standard = resolve_standard(document, selection.defender_id)
    if standard is None or resolve_stats(document, standard) is None:
        return LabError("No standard unit available.")

    context = CombatContext.from_selection(document, selection)
    bare_context = context.on_terrain(None)

    rows = class_vs_standard(document, standard, context)
    finite_rows = [r for r in rows if math.isfinite(r.ttk)]
    metrics = {
        "ttk_vs_standard_avg": finite_mean(r.ttk for r in finite_rows),
        "hit_vs_standard_avg": finite_mean((r.hit for r in finite_rows), default=0.0),
        "zero_damage_classes": float(sum(1 for r in rows if r.damage == 0)),
    }

    def probe_offense(unit_class: Optional[UnitClass]) -> float:
        if unit_class is None:
            return 0.0
        weapon = pick_weapon_for_class(document, unit_class)
        if weapon is None:
            return 0.0
        sim = simulate_attack(synthetic_unit(unit_class.id, weapon.id), standard, context)
        return sim.expected_damage if sim else 0.0

    def probe_defense(unit_class: Optional[UnitClass]) -> tuple[float, float, float]:
        """(hp, raw damage taken per hit, expected damage taken per round)"""
        if unit_class is None:
            return (0.0, 0.0, 0.0)
        target = synthetic_unit(unit_class.id, "")
        hp = resolve_stats(document, target).hp
        sim = simulate_attack(standard, target, bare_context)
        if sim is None:
            return (hp, 0.0, 0.0)
        return (hp, sim.damage, sim.expected_damage)

    priest = find_archetype(document, "priest")
    mage = find_archetype(document, "mage")
    tank = find_archetype(document, "tank")

    metrics["priest_expected_damage"] = probe_offense(priest)
    metrics["priest_heal_amount"] = 0.0
    heal_weapon = next(
        (w for w in document.weapons.values() if w.weapon_type == WeaponType.HEAL), None
    )
    if priest is not None and heal_weapon is not None:
        sim = simulate_attack(synthetic_unit(priest.id, heal_weapon.id), standard, context)
        if sim is not None:
            metrics["priest_heal_amount"] = float(max(0, -sim.damage))

    metrics["mage_expected_damage"] = probe_offense(mage)
    mage_hp, _, mage_incoming = probe_defense(mage)
    metrics["mage_ehp_turns"] = compute_ehp(mage_hp, mage_incoming)

    tank_hp, tank_hit_damage, tank_incoming = probe_defense(tank)
    metrics["tank_survive_hits"] = compute_ehp(tank_hp, tank_hit_damage)
    metrics["tank_ehp_turns"] = compute_ehp(tank_hp, tank_incoming)

    return metrics


def miss_direction(value: Optional[float], lo: float, hi: float) -> MissDirection:
    if value is None or math.isnan(value):
        return MissDirection.UNKNOWN
    if value < lo:
        return MissDirection.UNDER
    if value > hi:
        return MissDirection.OVER
    return MissDirection.INSIDE


def remediation_hint(metric: str, direction: MissDirection) -> str:
    """Advice text; a pure function of the metric name and the miss direction."""
    if direction == MissDirection.INSIDE:
        return INSIDE_HINT
    if direction == MissDirection.UNKNOWN:
        return UNKNOWN_HINT
    name = metric.lower()
    for keywords, hints in HINT_RULES:
        if any(k in name for k in keywords):
            return hints[direction]
    return FALLBACK_HINTS[direction]


def _mage_ehp_limit(flag) -> Optional[float]:
    """`checkMageEhpMax` may be a boolean switch or an explicit turn limit."""
    if isinstance(flag, bool):
        return MAGE_EHP_MAX_TURNS if flag else None
    if flag is None:
        return None
    return to_number(flag, MAGE_EHP_MAX_TURNS)


def eval_checklist_item(item: ChecklistItem, metrics: dict[str, float]) -> ChecklistVerdict:
    """
    Check one metric against its band.

    ok inside [min, max]; warn when finite and inside
    [min * 0.9, max * 1.1]; fail otherwise. An item flagged with
    `checkMageEhpMax` is capped at warn while the mage survives more than
    the limit (3 rounds by default).
    """
    raw = metrics.get(item.metric)
    value = None if raw is None else float(raw)
    direction = miss_direction(value, item.min, item.max)

    if direction == MissDirection.INSIDE:
        verdict = Verdict.OK
    elif (value is not None and math.isfinite(value)
          and item.min * WARN_BAND_LOW <= value <= item.max * WARN_BAND_HIGH):
        verdict = Verdict.WARN
    else:
        verdict = Verdict.FAIL

    extra_note = ""
    limit = _mage_ehp_limit(item.extra.get("checkMageEhpMax"))
    if limit is not None:
        mage_ehp = metrics.get("mage_ehp_turns")
        if mage_ehp is not None and mage_ehp > limit:
            extra_note = f"Mage survives {mage_ehp:.2f} rounds (> {limit:g}): too tanky to be interesting."
            if verdict == Verdict.OK:
                verdict = Verdict.WARN

    if raw is None:
        logging.debug(f"Checklist item '{item.id}' refers to unknown metric '{item.metric}'")

    return ChecklistVerdict(
        item_id=item.id,
        label=item.label,
        metric=item.metric,
        verdict=verdict,
        value=value,
        direction=direction,
        extra_note=extra_note,
        hint=remediation_hint(item.metric, direction)
    )


def evaluate_checklist(document: BalanceDocument, selection: Selection) -> list[ChecklistVerdict] | LabError:
    """Run every checklist item of the document (or the default list)."""
    metrics = compute_metrics(document, selection)
    if isinstance(metrics, LabError):
        return metrics
    items = document.checklist or DEFAULT_CHECKLIST
    return [eval_checklist_item(item, metrics) for item in items]
