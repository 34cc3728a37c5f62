"""Tests for balance document loading."""
import copy
import json
import math
import pytest

from src.balance_lab.data_loader import (
    BalanceDataLoader, EXAMPLE_DOCUMENT_PATH, to_number, is_number,
    parse_document, load_document, load_example_document
)
from src.balance_lab.enums import Side, WeaponType
from src.balance_lab.models import Position


@pytest.fixture
def raw_example():
    """The example document as decoded JSON."""
    with open(EXAMPLE_DOCUMENT_PATH, "r", encoding="utf-8") as f:
        return json.load(f)


@pytest.fixture
def document():
    return load_example_document()


class TestToNumber:
    """Tests for numeric coercion."""

    def test_numbers_pass_through(self):
        assert to_number(5) == 5
        assert to_number(2.5) == 2.5
        assert to_number(-3) == -3

    def test_numeric_strings(self):
        assert to_number("7") == 7.0
        assert to_number(" 1.5 ") == 1.5

    def test_non_numeric_uses_default(self):
        assert to_number(None) == 0
        assert to_number("abc") == 0
        assert to_number([1, 2]) == 0
        assert to_number({}, 4) == 4

    def test_non_finite_uses_default(self):
        assert to_number(float("nan"), 7) == 7
        assert to_number(float("inf")) == 0
        assert to_number("-inf", 2) == 2

    def test_is_number(self):
        assert is_number(0)
        assert is_number("3")
        assert not is_number(None)
        assert not is_number(float("nan"))


class TestBalanceDataLoader:
    """Tests for BalanceDataLoader."""

    def test_load_example(self, document):
        """Example document has every catalog."""
        assert list(document.classes) == ["swordsman", "lancer", "mage", "priest"]
        assert len(document.weapons) == 5
        assert len(document.terrain) == 3
        assert len(document.units) == 3
        assert "stage1" in document.stages
        assert len(document.checklist) > 0

    def test_config(self, document):
        assert document.config.enable_doubling is False
        assert document.config.enable_crit is False
        assert document.config.crit_multiplier == 3

    def test_units(self, document):
        hero = document.get_unit("p1")
        assert hero.class_id == "swordsman"
        assert hero.weapon_id == "iron_sword"
        assert hero.side == Side.PLAYER
        assert (hero.position.x, hero.position.y) == (2, 4)
        assert document.get_unit("e1").side == Side.ENEMY

    def test_weapons(self, document):
        assert document.get_weapon("fire").weapon_type == WeaponType.MAGIC
        assert document.get_weapon("mend").weapon_type == WeaponType.HEAL
        lance = document.get_weapon("iron_lance")
        assert (lance.might, lance.hit, lance.range_min, lance.range_max) == (4, 80, 1, 1)

    def test_terrain_bonus(self, document):
        forest = document.get_terrain("forest")
        assert forest.bonus.def_ == 1
        assert forest.bonus.avoid == 15

    def test_missing_lookups_return_none(self, document):
        assert document.get_unit("nobody") is None
        assert document.get_class(None) is None
        assert document.get_stage("nowhere") is None

    def test_stats_override_keeps_only_finite_entries(self, raw_example):
        raw_example["units"][0]["statsOverride"] = {"hp": 30, "atk": "x", "spd": None, "mdef": "6"}
        document = parse_document(raw_example)
        assert document.get_unit("p1").stats_override == {"hp": 30, "mdef": 6.0}

    def test_unknown_weapon_type_is_kept(self, raw_example):
        raw_example["weapons"][0]["type"] = "bow"
        document = parse_document(raw_example)
        weapon = document.get_weapon("iron_sword")
        assert weapon.type_name == "bow"
        assert weapon.weapon_type is None

    def test_duplicate_ids_keep_first(self, raw_example):
        dup = copy.deepcopy(raw_example["classes"][0])
        dup["name"] = "Impostor"
        raw_example["classes"].append(dup)
        document = parse_document(raw_example)
        assert document.get_class("swordsman").name == "Swordsman"
        assert len(document.classes) == 4

    def test_unknown_side_warns_and_defaults_to_player(self, raw_example, caplog):
        raw_example["units"][2]["side"] = "neutral"
        with caplog.at_level("WARNING"):
            document = parse_document(raw_example)
        assert document.get_unit("e1").side == Side.PLAYER
        assert "unknown side 'neutral'" in caplog.text

    def test_missing_side_defaults_to_player_quietly(self, raw_example, caplog):
        del raw_example["units"][0]["side"]
        with caplog.at_level("WARNING"):
            document = parse_document(raw_example)
        assert document.get_unit("p1").side == Side.PLAYER
        assert "unknown side" not in caplog.text

    def test_garbage_document_is_tolerated(self):
        document = parse_document({"classes": "nope", "units": [1, None, {"id": "u"}]})
        assert document.classes == {}
        assert list(document.units) == ["u"]
        assert document.checklist == []

    def test_checklist_item_defaults(self, raw_example):
        raw_example["checklist"] = [{"id": "x", "metric": "hit_vs_standard_avg"}]
        item = parse_document(raw_example).checklist[0]
        assert item.min == -math.inf
        assert item.max == math.inf
        assert item.extra == {}

    def test_load_from_file(self, tmp_path, raw_example):
        path = tmp_path / "doc.json"
        path.write_text(json.dumps(raw_example), encoding="utf-8")
        document = load_document(path)
        assert list(document.units) == ["p1", "p2", "e1"]

    def test_missing_file_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            BalanceDataLoader(tmp_path / "missing.json").load_all()


class TestStage:
    """Tests for stage grids."""

    def test_grid_shape(self, document):
        stage = document.get_stage("stage1")
        assert stage.has_valid_grid
        assert stage.grid().shape == (6, 10)

    def test_terrain_at(self, document):
        stage = document.get_stage("stage1")
        assert stage.terrain_at(Position(3, 0)) == "forest"
        assert stage.terrain_at(Position(7, 1)) == "fort"
        assert stage.terrain_at(Position(10, 0)) is None

    def test_inconsistent_grid(self, raw_example):
        raw_example["stages"][0]["terrainGrid"] = ["plain"] * 5
        stage = parse_document(raw_example).get_stage("stage1")
        assert not stage.has_valid_grid
        assert stage.grid() is None

    def test_units_on_stage_drops_dangling_ids(self, raw_example):
        raw_example["stages"][0]["units"].append("ghost")
        document = parse_document(raw_example)
        units = document.units_on_stage(document.get_stage("stage1"))
        assert [u.id for u in units] == ["p1", "p2", "e1"]
