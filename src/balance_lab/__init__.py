"""Balance lab package - combat metrics for a tactics-RPG data sheet."""
from .enums import (
    WeaponType, Side, ComparisonScope, Verdict, MissDirection,
    WEAPON_TYPE_NAMES, SIDE_NAMES, SCOPE_NAMES, STAT_KEYS,
    LOW_HIT_THRESHOLD, ONE_SHOT_TTK, SLOW_TTK
)
from .models import (
    Position, StatBlock, DefenderStats, UnitClass, Weapon, TerrainBonus,
    Terrain, Unit, Stage, GameConfig, ChecklistItem, BalanceDocument,
    Selection, LabError
)
from .data_loader import (
    BalanceDataLoader, to_number, parse_document, load_document,
    load_example_document
)
from .combat import (
    CombatContext, AttackResult, DamageCalculator,
    resolve_stats, apply_terrain, simulate_attack
)
from .metrics import compute_ttk, compute_ehp, finite_mean
from .tables import (
    ClassRow, UnitRow, resolve_standard, pick_weapon_for_class,
    synthetic_unit, class_vs_standard, units_vs_standard
)
from .aggregate import ClassAggregate, GlobalOverview, aggregate_by_class, global_overview
from .macro import PlayerThreat, MacroAnalysis, analyze_macro
from .checklist import (
    ChecklistVerdict, DEFAULT_CHECKLIST, find_archetype, compute_metrics,
    eval_checklist_item, remediation_hint, evaluate_checklist
)
from .evaluation import (
    Advice, Indicator, DuelReport, ClassReport,
    evaluate_duel, evaluate_class, player_class_ids
)
from .lab import BalanceLab

__all__ = [
    # Enums and constants
    "WeaponType", "Side", "ComparisonScope", "Verdict", "MissDirection",
    "WEAPON_TYPE_NAMES", "SIDE_NAMES", "SCOPE_NAMES", "STAT_KEYS",
    "LOW_HIT_THRESHOLD", "ONE_SHOT_TTK", "SLOW_TTK",
    # Models
    "Position", "StatBlock", "DefenderStats", "UnitClass", "Weapon", "TerrainBonus",
    "Terrain", "Unit", "Stage", "GameConfig", "ChecklistItem", "BalanceDocument",
    "Selection", "LabError",
    # Data loader
    "BalanceDataLoader", "to_number", "parse_document", "load_document",
    "load_example_document",
    # Combat
    "CombatContext", "AttackResult", "DamageCalculator",
    "resolve_stats", "apply_terrain", "simulate_attack",
    # Metrics
    "compute_ttk", "compute_ehp", "finite_mean",
    # Tables and aggregates
    "ClassRow", "UnitRow", "resolve_standard", "pick_weapon_for_class",
    "synthetic_unit", "class_vs_standard", "units_vs_standard",
    "ClassAggregate", "GlobalOverview", "aggregate_by_class", "global_overview",
    # Macro
    "PlayerThreat", "MacroAnalysis", "analyze_macro",
    # Checklist
    "ChecklistVerdict", "DEFAULT_CHECKLIST", "find_archetype", "compute_metrics",
    "eval_checklist_item", "remediation_hint", "evaluate_checklist",
    # Reports
    "Advice", "Indicator", "DuelReport", "ClassReport",
    "evaluate_duel", "evaluate_class", "player_class_ids",
    # Facade
    "BalanceLab"
]
