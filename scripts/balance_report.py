#!/usr/bin/env python3
"""Print every balance analysis for a document.

Usage:
    python scripts/balance_report.py                      # bundled example
    python scripts/balance_report.py my_balance.json --defender e1 --doubling
    python scripts/balance_report.py --json > report.json
"""
import argparse
import json
import logging
import sys
from pathlib import Path

# Add repo root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.balance_lab import BalanceLab, LabError, SCOPE_NAMES, player_class_ids
from src.balance_lab.report import (
    Colors, badge, fmt_num, fmt_pct, render_table, render_error, to_jsonable
)


def print_separator(title: str = ""):
    """Print a section separator."""
    print("\n" + "=" * 60)
    if title:
        print(f" {title}")
        print("=" * 60)


def print_duel(lab: BalanceLab, color: bool):
    print_separator("Duel")
    report = lab.duel()
    if isinstance(report, LabError):
        print(render_error(report, color))
        return
    sim = report.sim
    print(f"{report.attacker_id} -> {report.defender_id} on {sim.terrain_name}")
    for ind in report.indicators:
        value = fmt_pct(ind.value) if ind.label == "Hit" else fmt_num(ind.value)
        print(f"  {badge(ind.level, f'{ind.label}: {value}', color)}  ({ind.why})")
    for advice in report.advice:
        print(f"  {badge(advice.level, advice.text, color)}")


def print_classes(lab: BalanceLab, color: bool):
    print_separator("Classes vs standard")
    rows = lab.class_table()
    print(render_table(
        ["class", "weapon", "hit", "dmg", "x", "exp", "ttk"],
        [[r.class_name, r.weapon_name, fmt_pct(r.hit), fmt_num(r.damage), str(r.attacks),
          fmt_num(r.expected_damage), fmt_num(r.ttk)] for r in rows]
    ))

    for class_id in player_class_ids(lab.document):
        report = lab.class_report(class_id)
        if isinstance(report, LabError):
            print(render_error(report, color))
            continue
        print(f"\n{class_id} ({report.weapon_id}) vs {report.standard_id}: "
              f"hit {badge(report.hit_verdict, fmt_pct(report.sim.hit_chance), color)} "
              f"ttk {badge(report.ttk_verdict, fmt_num(report.ttk), color)}")
        for advice in report.breaks + report.recommendations:
            print(f"  {badge(advice.level, advice.text, color)}")


def print_units(lab: BalanceLab):
    print_separator(f"Units vs standard ({lab.selection.scope.value})")
    rows = lab.unit_table()
    print(render_table(
        ["unit", "class", "side", "hit", "dmg", "exp", "ttk", "zero"],
        [[r.unit_name, r.class_name, r.side, fmt_pct(r.hit), fmt_num(r.damage),
          fmt_num(r.expected_damage), fmt_num(r.ttk), "yes" if r.zero_damage else ""] for r in rows]
    ))

    print("\nPer class:")
    print(render_table(
        ["class", "n", "hit", "exp", "ttk", "zero", "low hit"],
        [[a.class_name, str(a.count), fmt_pct(a.hit_avg), fmt_num(a.exp_avg), fmt_num(a.ttk_avg),
          str(a.zero_damage_count), str(a.low_hit_count)] for a in lab.class_aggregates()]
    ))

    o = lab.overview()
    print(f"\nOverall: {o.count} units, hit {fmt_pct(o.hit_avg)}, exp {fmt_num(o.exp_avg)}, "
          f"ttk {fmt_num(o.ttk_avg)}, zero dmg {o.zero_damage_count}, low hit {o.low_hit_count}, "
          f"one-shot {o.one_shot_count}, slow {o.slow_count}")


def print_macro(lab: BalanceLab, color: bool, use_stage_terrain: bool):
    print_separator(f"Stage macro (radius {lab.selection.macro_radius})")
    analysis = lab.macro(use_stage_terrain=use_stage_terrain)
    if isinstance(analysis, LabError):
        print(render_error(analysis, color))
        return
    print(render_table(
        ["player", "hp", "threats", "incoming", "survive"],
        [[p.unit_name, fmt_num(p.hp), str(p.threats), fmt_num(p.expected_incoming),
          fmt_num(p.survive_turns)] for p in analysis.per_player]
    ))
    print(f"\nAverage TTK vs nearest enemy: {fmt_num(analysis.avg_ttk)}")


def print_checklist(lab: BalanceLab, color: bool):
    print_separator("Checklist")
    verdicts = lab.checklist()
    if isinstance(verdicts, LabError):
        print(render_error(verdicts, color))
        return
    for v in verdicts:
        print(f"{badge(v.verdict, v.label, color)}: {fmt_num(v.value)} ({v.metric})")
        print(f"    {v.hint}")
        if v.extra_note:
            print(f"    {Colors.YELLOW if color else ''}{v.extra_note}{Colors.RESET if color else ''}")


def build_report(lab: BalanceLab, use_stage_terrain: bool) -> dict:
    """Everything as plain JSON data."""
    return to_jsonable({
        "duel": lab.duel(),
        "classes": lab.class_table(),
        "units": lab.unit_table(),
        "classAggregates": lab.class_aggregates(),
        "overview": lab.overview(),
        "macro": lab.macro(use_stage_terrain=use_stage_terrain),
        "metrics": lab.metrics(),
        "checklist": lab.checklist(),
    })


def main(argv=None):
    parser = argparse.ArgumentParser(description="Balance lab report")
    parser.add_argument("document", nargs="?", default=None,
                        help="Balance JSON document (defaults to the bundled example)")
    parser.add_argument("--attacker", type=str, default=None)
    parser.add_argument("--defender", type=str, default=None, help="Standard unit id")
    parser.add_argument("--attacker-terrain", type=str, default=None)
    parser.add_argument("--defender-terrain", type=str, default=None)
    parser.add_argument("--stage", type=str, default=None)
    parser.add_argument("--scope", type=str, default="all", choices=list(SCOPE_NAMES))
    parser.add_argument("--radius", type=int, default=None)
    parser.add_argument("--doubling", action="store_true", default=None)
    parser.add_argument("--crit", action="store_true", default=None)
    parser.add_argument("--stage-terrain", action="store_true",
                        help="Use the stage grid terrain in the macro pass")
    parser.add_argument("--json", action="store_true", help="Print JSON instead of text")
    parser.add_argument("--no-color", action="store_true")
    parser.add_argument("-v", "--verbose", action="store_true")

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s"
    )

    selection = {"scope": SCOPE_NAMES[args.scope]}
    for key, value in (
        ("attacker_id", args.attacker), ("defender_id", args.defender),
        ("attacker_terrain_id", args.attacker_terrain), ("defender_terrain_id", args.defender_terrain),
        ("stage_id", args.stage), ("macro_radius", args.radius),
        ("enable_doubling", args.doubling), ("enable_crit", args.crit),
    ):
        if value is not None:
            selection[key] = value

    if args.document:
        lab = BalanceLab.from_file(args.document, **selection)
    else:
        lab = BalanceLab.example(**selection)

    if args.json:
        print(json.dumps(build_report(lab, args.stage_terrain), indent=2, ensure_ascii=False))
        return 0

    color = not args.no_color
    print_duel(lab, color)
    print_classes(lab, color)
    print_units(lab)
    print_macro(lab, color, args.stage_terrain)
    print_checklist(lab, color)
    return 0


if __name__ == "__main__":
    sys.exit(main())
