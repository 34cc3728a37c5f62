"""High-level balance lab that bundles a document with a UI selection."""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Optional

from .models import BalanceDocument, LabError, Selection, Unit
from .data_loader import load_document, load_example_document
from .combat import AttackResult, CombatContext, simulate_attack
from .tables import (
    ClassRow, UnitRow, class_vs_standard, units_vs_standard, resolve_standard
)
from .aggregate import ClassAggregate, GlobalOverview, aggregate_by_class, global_overview
from .macro import MacroAnalysis, analyze_macro
from .checklist import ChecklistVerdict, compute_metrics, evaluate_checklist
from .evaluation import DuelReport, ClassReport, evaluate_duel, evaluate_class


@dataclass
class BalanceLab:
    """Runs every analysis against one document snapshot."""
    document: BalanceDocument
    selection: Selection = field(default_factory=Selection)

    @classmethod
    def from_file(cls, path: str, **selection) -> "BalanceLab":
        document = load_document(path)
        return cls(document, Selection.from_config(document.config, **selection))

    @classmethod
    def example(cls, **selection) -> "BalanceLab":
        document = load_example_document()
        selection.setdefault("attacker_id", "p1")
        selection.setdefault("defender_id", "e1")
        selection.setdefault("attacker_terrain_id", "plain")
        selection.setdefault("defender_terrain_id", "plain")
        selection.setdefault("stage_id", next(iter(document.stages), None))
        return cls(document, Selection.from_config(document.config, **selection))

    @property
    def context(self) -> CombatContext:
        return CombatContext.from_selection(self.document, self.selection)

    @property
    def standard(self) -> Optional[Unit]:
        return resolve_standard(self.document, self.selection.defender_id)

    def simulate(self, attacker_id: str, defender_id: str) -> Optional[AttackResult]:
        attacker = self.document.get_unit(attacker_id)
        defender = self.document.get_unit(defender_id)
        if attacker is None or defender is None:
            return None
        return simulate_attack(attacker, defender, self.context)

    def duel(self) -> DuelReport | LabError:
        return evaluate_duel(self.document, self.selection)

    def class_report(self, class_id: str, weapon_id: Optional[str] = None) -> ClassReport | LabError:
        return evaluate_class(self.document, self.selection, class_id, weapon_id)

    def class_table(self) -> list[ClassRow]:
        standard = self.standard
        if standard is None:
            return []
        return class_vs_standard(self.document, standard, self.context)

    def unit_table(self) -> list[UnitRow]:
        standard = self.standard
        if standard is None:
            return []
        return units_vs_standard(self.document, standard, self.context, self.selection.scope)

    def class_aggregates(self) -> list[ClassAggregate]:
        return aggregate_by_class(self.unit_table())

    def overview(self) -> GlobalOverview:
        return global_overview(self.unit_table())

    def macro(self, use_stage_terrain: bool = False) -> MacroAnalysis | LabError:
        stage = self.document.get_stage(self.selection.stage_id)
        if stage is None:
            return LabError("Stage not found.")
        return analyze_macro(
            self.document, stage, self.selection.macro_radius, self.context,
            use_stage_terrain=use_stage_terrain
        )

    def metrics(self) -> dict[str, float] | LabError:
        return compute_metrics(self.document, self.selection)

    def checklist(self) -> list[ChecklistVerdict] | LabError:
        return evaluate_checklist(self.document, self.selection)
