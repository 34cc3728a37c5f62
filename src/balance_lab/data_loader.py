"""Data loader for parsing balance documents from JSON."""
from __future__ import annotations
import json
import logging
import math
from pathlib import Path
from typing import Any, Optional

from .enums import SIDE_NAMES, STAT_KEYS, Side, DEFAULT_CRIT_MULTIPLIER
from .models import (
    Position, StatBlock, UnitClass, Weapon, TerrainBonus, Terrain, Unit,
    Stage, GameConfig, ChecklistItem, BalanceDocument
)

EXAMPLE_DOCUMENT_PATH = Path(__file__).parent / "data" / "example_balance.json"


def to_number(value: Any, default: float = 0) -> float:
    """
    Coerce a JSON value to a finite number.

    Numbers and numeric strings pass through; anything else (None, NaN,
    infinities, lists, garbage strings) gives `default`.
    """
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    try:
        number = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(number):
        return default
    return number


def is_number(value: Any) -> bool:
    """True if `value` coerces to a finite number."""
    return to_number(value, None) is not None


def _stat_block(data: Any) -> StatBlock:
    data = data if isinstance(data, dict) else {}
    return StatBlock(
        hp=to_number(data.get("hp")),
        atk=to_number(data.get("atk")),
        def_=to_number(data.get("def")),
        matk=to_number(data.get("matk")),
        mdef=to_number(data.get("mdef")),
        spd=to_number(data.get("spd"))
    )


class BalanceDataLoader:
    """Parses a balance document (the editor's JSON) into models."""

    def __init__(self, path: Optional[str | Path] = None):
        self.path = Path(path) if path is not None else None
        self.document: Optional[BalanceDocument] = None

    def load_all(self) -> BalanceDocument:
        """Read the JSON file and parse it."""
        if self.path is None:
            raise ValueError("BalanceDataLoader.load_all() needs a path")
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return self.parse(data)

    def parse(self, data: dict) -> BalanceDocument:
        """Parse an already decoded JSON document."""
        if not isinstance(data, dict):
            data = {}

        self.document = BalanceDocument(
            config=self._parse_config(data.get("config")),
            classes=self._index(data.get("classes"), self._parse_class, "class"),
            weapons=self._index(data.get("weapons"), self._parse_weapon, "weapon"),
            terrain=self._index(data.get("terrain"), self._parse_terrain, "terrain"),
            units=self._index(data.get("units"), self._parse_unit, "unit"),
            stages=self._index(data.get("stages"), self._parse_stage, "stage"),
            checklist=[
                self._parse_checklist_item(entry)
                for entry in self._entries(data.get("checklist"))
            ]
        )
        self._check_references(self.document)
        return self.document

    @staticmethod
    def _entries(value: Any) -> list[dict]:
        if not isinstance(value, list):
            return []
        return [entry for entry in value if isinstance(entry, dict)]

    def _index(self, value: Any, parser, kind: str) -> dict:
        """Parse a catalog list into an ordered id -> entity dict; first id wins."""
        result = {}
        for entry in self._entries(value):
            item = parser(entry)
            if item.id in result:
                logging.warning(f"Duplicate {kind} id '{item.id}' ignored")
                continue
            result[item.id] = item
        return result

    def _parse_config(self, data: Any) -> GameConfig:
        data = data if isinstance(data, dict) else {}
        return GameConfig(
            enable_doubling=bool(data.get("enableDoubling", False)),
            enable_crit=bool(data.get("enableCrit", False)),
            crit_multiplier=to_number(data.get("critMultiplier"), DEFAULT_CRIT_MULTIPLIER),
            base_avoid=to_number(data.get("baseAvoid"))
        )

    def _parse_class(self, data: dict) -> UnitClass:
        class_id = str(data.get("id", ""))
        return UnitClass(
            id=class_id,
            name=str(data.get("name", class_id)),
            role=str(data.get("role") or ""),
            base_stats=_stat_block(data.get("baseStats"))
        )

    def _parse_weapon(self, data: dict) -> Weapon:
        weapon_id = str(data.get("id", ""))
        return Weapon(
            id=weapon_id,
            name=str(data.get("name", weapon_id)),
            type_name=str(data.get("type", "physical")),
            might=to_number(data.get("might")),
            hit=to_number(data.get("hit")),
            crit=to_number(data.get("crit")),
            range_min=int(to_number(data.get("rangeMin"), 1)),
            range_max=int(to_number(data.get("rangeMax"), 1))
        )

    def _parse_terrain(self, data: dict) -> Terrain:
        terrain_id = str(data.get("id", ""))
        bonus = data.get("bonus") if isinstance(data.get("bonus"), dict) else {}
        return Terrain(
            id=terrain_id,
            name=str(data.get("name", terrain_id)),
            move_cost=to_number(data.get("moveCost"), 1),
            bonus=TerrainBonus(
                def_=to_number(bonus.get("def")),
                mdef=to_number(bonus.get("mdef")),
                avoid=to_number(bonus.get("avoid"))
            )
        )

    def _parse_unit(self, data: dict) -> Unit:
        unit_id = str(data.get("id", ""))
        pos = data.get("position") if isinstance(data.get("position"), dict) else {}

        # Only finite override entries count as overrides
        override = data.get("statsOverride") if isinstance(data.get("statsOverride"), dict) else {}
        stats_override = {
            key: to_number(override[key])
            for key in STAT_KEYS
            if key in override and is_number(override[key])
        }

        side_name = data.get("side", "player")
        side = SIDE_NAMES.get(side_name) if isinstance(side_name, str) else None
        if side is None:
            logging.warning(f"Unit '{unit_id}' has unknown side '{side_name}', treated as player")
            side = Side.PLAYER

        return Unit(
            id=unit_id,
            name=str(data.get("name", unit_id)),
            class_id=str(data.get("classId", "")),
            weapon_id=str(data.get("weaponId", "")),
            side=side,
            level=int(to_number(data.get("level"), 1)),
            position=Position(
                x=int(to_number(pos.get("x"))),
                y=int(to_number(pos.get("y")))
            ),
            stats_override=stats_override
        )

    def _parse_stage(self, data: dict) -> Stage:
        stage_id = str(data.get("id", ""))
        grid = data.get("terrainGrid") if isinstance(data.get("terrainGrid"), list) else []
        units = data.get("units") if isinstance(data.get("units"), list) else []
        return Stage(
            id=stage_id,
            name=str(data.get("name", stage_id)),
            width=int(to_number(data.get("width"))),
            height=int(to_number(data.get("height"))),
            terrain_grid=[str(t) for t in grid],
            units=[str(u) for u in units]
        )

    def _parse_checklist_item(self, data: dict) -> ChecklistItem:
        item_id = str(data.get("id", ""))
        extra = data.get("extra") if isinstance(data.get("extra"), dict) else {}
        return ChecklistItem(
            id=item_id,
            label=str(data.get("label", item_id)),
            metric=str(data.get("metric", "")),
            min=to_number(data.get("min"), -math.inf),
            max=to_number(data.get("max"), math.inf),
            extra=dict(extra)
        )

    def _check_references(self, document: BalanceDocument) -> None:
        """Warn about dangling ids; the engine tolerates them."""
        for unit in document.units.values():
            if unit.class_id not in document.classes:
                logging.warning(f"Unit '{unit.id}' references unknown class '{unit.class_id}'")
            if unit.weapon_id not in document.weapons:
                logging.warning(f"Unit '{unit.id}' references unknown weapon '{unit.weapon_id}'")

        for stage in document.stages.values():
            if not stage.has_valid_grid:
                logging.warning(
                    f"Stage '{stage.id}' grid has {len(stage.terrain_grid)} cells, "
                    f"expected {stage.width}x{stage.height}"
                )
            for unit_id in stage.units:
                if unit_id not in document.units:
                    logging.warning(f"Stage '{stage.id}' references unknown unit '{unit_id}'")


def parse_document(data: dict) -> BalanceDocument:
    """Parse a decoded JSON document."""
    return BalanceDataLoader().parse(data)


def load_document(path: str | Path) -> BalanceDocument:
    """Load a balance document from a JSON file."""
    return BalanceDataLoader(path).load_all()


def load_example_document() -> BalanceDocument:
    """Load the bundled example document."""
    return load_document(EXAMPLE_DOCUMENT_PATH)
