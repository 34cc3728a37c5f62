#!/usr/bin/env python3
"""
Demo script for the balance lab.
Loads the example document and walks through the main analyses.
"""

import sys
from dataclasses import replace
from pathlib import Path

# Add src to path
sys.path.insert(0, str(Path(__file__).parent))

from src.balance_lab import (
    BalanceLab, ComparisonScope, LabError, compute_ttk, resolve_stats
)
from src.balance_lab.report import fmt_num, fmt_pct


def print_separator(title: str = ""):
    """Print a section separator."""
    print("\n" + "=" * 60)
    if title:
        print(f" {title}")
        print("=" * 60)
    print()


def demo_data_loading() -> BalanceLab:
    """Demonstrate loading the example document."""
    print_separator("Data Loading Demo")

    lab = BalanceLab.example()
    doc = lab.document

    print(f"Loaded {len(doc.classes)} classes")
    print(f"Loaded {len(doc.weapons)} weapons")
    print(f"Loaded {len(doc.terrain)} terrain types")
    print(f"Loaded {len(doc.units)} units")
    print(f"Loaded {len(doc.stages)} stages")

    print("\nUnits:")
    for unit in doc.units.values():
        stats = resolve_stats(doc, unit)
        print(f"  - {unit.name} ({unit.side.value}, {unit.class_id}/{unit.weapon_id}): "
              f"HP={fmt_num(stats.hp)} ATK={fmt_num(stats.atk)} SPD={fmt_num(stats.spd)}")

    return lab


def demo_duel(lab: BalanceLab):
    """Demonstrate a single duel on different terrains."""
    print_separator("Duel Demo")

    defender = lab.document.get_unit("e1")
    defender_hp = resolve_stats(lab.document, defender).hp
    for terrain_id in lab.document.terrain:
        on_terrain = BalanceLab(lab.document, replace(lab.selection, defender_terrain_id=terrain_id))
        sim = on_terrain.simulate("p1", "e1")
        ttk = compute_ttk(defender_hp, sim.expected_damage)
        print(f"Hero -> Bandit on {sim.terrain_name}: hit {fmt_pct(sim.hit_chance)}, "
              f"dmg {fmt_num(sim.damage)}, expected {fmt_num(sim.expected_damage)}, TTK {fmt_num(ttk)}")


def demo_tables(lab: BalanceLab):
    """Demonstrate the comparison tables."""
    print_separator("Tables Demo")

    print("Classes vs standard (highest pressure first):")
    for row in lab.class_table():
        print(f"  {row.class_name:<10} {row.weapon_name:<12} exp={fmt_num(row.expected_damage)} ttk={fmt_num(row.ttk)}")

    lab.selection.scope = ComparisonScope.PLAYER
    overview = lab.overview()
    print(f"\nPlayers vs standard: {overview.count} units, average TTK {fmt_num(overview.ttk_avg)}")


def demo_macro_and_checklist(lab: BalanceLab):
    """Demonstrate the stage macro pass and the checklist."""
    print_separator("Macro + Checklist Demo")

    analysis = lab.macro()
    if isinstance(analysis, LabError):
        print(analysis.message)
    else:
        for p in analysis.per_player:
            print(f"  {p.unit_name}: {p.threats} threats, survives {fmt_num(p.survive_turns)} rounds")
        print(f"  Average TTK vs nearest enemy: {fmt_num(analysis.avg_ttk)}")

    verdicts = lab.checklist()
    if isinstance(verdicts, LabError):
        print(verdicts.message)
        return
    print()
    for v in verdicts:
        print(f"  [{v.verdict.value:>4}] {v.label}: {fmt_num(v.value)}")


def main():
    lab = demo_data_loading()
    demo_duel(lab)
    demo_tables(lab)
    demo_macro_and_checklist(lab)


if __name__ == "__main__":
    main()
