"""Tests for stat resolution, terrain and the attack simulator."""
import copy
import math
import pytest

from src.balance_lab.combat import (
    CombatContext, DamageCalculator, apply_terrain, resolve_stats, simulate_attack
)
from src.balance_lab.data_loader import load_example_document
from src.balance_lab.enums import Side, NO_TERRAIN_NAME
from src.balance_lab.metrics import compute_ttk
from src.balance_lab.models import (
    Position, StatBlock, Terrain, TerrainBonus, Unit, UnitClass, Weapon, Selection
)


@pytest.fixture
def document():
    return load_example_document()


def make_unit(unit_id, class_id, weapon_id, side=Side.ENEMY, **override):
    return Unit(
        id=unit_id, name=unit_id, class_id=class_id, weapon_id=weapon_id,
        side=side, position=Position(0, 0), stats_override=override
    )


class TestResolveStats:
    """Tests for resolve_stats."""

    def test_base_stats(self, document):
        stats = resolve_stats(document, document.get_unit("e1"))
        assert stats == StatBlock(hp=20, atk=6, def_=4, matk=1, mdef=2, spd=5)

    def test_override_replaces_base(self, document):
        unit = make_unit("x", "lancer", "iron_lance", hp=30, spd=9)
        stats = resolve_stats(document, unit)
        assert stats.hp == 30
        assert stats.spd == 9
        assert stats.atk == 6

    def test_non_finite_values_fall_back(self, document):
        document.classes["broken"] = UnitClass(
            id="broken", name="Broken",
            base_stats=StatBlock(hp=float("nan"), atk=3, def_=None, matk=1, mdef=1, spd=1)
        )
        unit = make_unit("x", "broken", "iron_sword", atk=float("inf"), matk="2")
        stats = resolve_stats(document, unit)
        assert stats.hp == 0
        assert stats.def_ == 0
        assert stats.atk == 3
        assert stats.matk == 2

    def test_unknown_class(self, document):
        assert resolve_stats(document, make_unit("x", "nope", "iron_sword")) is None


class TestApplyTerrain:
    """Tests for apply_terrain."""

    def test_adds_defense_and_sets_avoid(self, document):
        base = StatBlock(hp=18, atk=6, def_=3, matk=1, mdef=2, spd=7)
        stats = apply_terrain(base, document.get_terrain("fort"))
        assert (stats.def_, stats.mdef, stats.avoid) == (5, 4, 10)
        assert stats.spd == 7

    def test_no_terrain(self):
        base = StatBlock(hp=18, atk=6, def_=3, matk=1, mdef=2, spd=7)
        stats = apply_terrain(base, None)
        assert (stats.def_, stats.mdef, stats.avoid) == (3, 2, 0)

    def test_pure_and_repeatable(self, document):
        base = StatBlock(hp=18, atk=6, def_=3, matk=1, mdef=2, spd=7)
        before = copy.deepcopy(base)
        forest = document.get_terrain("forest")
        first = apply_terrain(base, forest)
        second = apply_terrain(base, forest)
        assert first == second
        assert first.avoid == 15
        assert base == before

    def test_avoid_is_not_accumulated(self, document):
        forest = document.get_terrain("forest")
        once = apply_terrain(StatBlock(), forest)
        twice = apply_terrain(once, forest)
        assert twice.avoid == 15


class TestDamageCalculator:
    """Tests for the individual formulas."""

    def test_hit_chance_bounds(self):
        for hit in range(0, 101, 5):
            for avoid in range(0, 101, 5):
                chance = DamageCalculator.hit_chance(hit, avoid)
                assert 0.0 <= chance <= 1.0

    def test_hit_chance_value(self):
        assert DamageCalculator.hit_chance(85, 15) == pytest.approx(0.70)
        assert DamageCalculator.hit_chance(120, 0) == 1.0
        assert DamageCalculator.hit_chance(10, 30) == 0.0

    def test_doubling_threshold(self):
        assert DamageCalculator.attacks_count(8, 5, True) == 1
        assert DamageCalculator.attacks_count(9, 5, True) == 2
        assert DamageCalculator.attacks_count(20, 5, False) == 1

    def test_crit_factor(self):
        assert DamageCalculator.crit_factor(10, True, 3) == pytest.approx(1.2)
        assert DamageCalculator.crit_factor(10, False, 3) == 1.0
        assert DamageCalculator.crit_factor(250, True, 2) == pytest.approx(2.0)

    def test_offense_damage_never_negative(self):
        attacker = StatBlock(atk=1, matk=1)
        defender = StatBlock(def_=50, mdef=50)
        for type_name in ("physical", "magic", "bow"):
            weapon = Weapon(id="w", name="w", type_name=type_name, might=-2)
            damage, _, is_heal = DamageCalculator.raw_damage(weapon, attacker, defender)
            assert damage == 0
            assert not is_heal

    def test_unknown_type_uses_physical_formula(self):
        weapon = Weapon(id="w", name="w", type_name="bow", might=4)
        damage, is_magic, is_heal = DamageCalculator.raw_damage(
            weapon, StatBlock(atk=6, matk=20), StatBlock(def_=3, mdef=0)
        )
        assert damage == 7
        assert not is_magic and not is_heal


class TestSimulateAttack:
    """Tests for simulate_attack."""

    def test_scenario_forest(self, document):
        """atk 6 + might 4 vs def 3 (+1 forest), hit 85 vs avoid 15."""
        attacker = document.get_unit("p1")
        defender = make_unit("target", "swordsman", "iron_sword")
        context = CombatContext(document, defender_terrain_id="forest")

        sim = simulate_attack(attacker, defender, context)

        assert sim.damage == 6
        assert sim.hit_chance == pytest.approx(0.70)
        assert sim.attacks_count == 1
        assert sim.crit_factor == 1.0
        assert sim.expected_damage == pytest.approx(4.2)
        assert sim.terrain_name == "Forest"
        assert compute_ttk(18, sim.expected_damage) == pytest.approx(4.2857, rel=1e-4)

    def test_scenario_zero_damage(self, document):
        """matk 1 + might 1 magic vs mdef 4 on plain."""
        attacker = make_unit("weak", "swordsman", "blowgun", side=Side.PLAYER)
        defender = document.get_unit("p2")
        sim = simulate_attack(attacker, defender, CombatContext(document, "plain"))

        assert sim.is_magic
        assert sim.damage == 0
        assert sim.expected_damage == 0
        assert compute_ttk(17, sim.expected_damage) == math.inf

    def test_scenario_heal(self, document):
        """Heal weapon, might 5, attacker atk 2."""
        attacker = make_unit("healer", "priest", "mend", side=Side.PLAYER, atk=2)
        defender = document.get_unit("e1")
        sim = simulate_attack(attacker, defender, CombatContext(document, "fort"))

        assert sim.is_heal
        assert sim.damage == -7
        assert sim.expected_damage < 0
        assert compute_ttk(20, sim.expected_damage) == math.inf

    def test_magic_uses_mdef(self, document):
        attacker = make_unit("m", "mage", "fire", side=Side.PLAYER)
        sim = simulate_attack(attacker, document.get_unit("e1"), CombatContext(document, "fort"))
        # 7 + 4 - (2 + 2)
        assert sim.damage == 7
        assert sim.hit_chance == pytest.approx(0.80)

    def test_doubling_uses_base_speed(self, document):
        defender = document.get_unit("e1")  # spd 5
        context = CombatContext(document, "forest", enable_doubling=True)

        slow = make_unit("a", "swordsman", "iron_sword", side=Side.PLAYER, spd=8)
        fast = make_unit("b", "swordsman", "iron_sword", side=Side.PLAYER, spd=9)

        assert simulate_attack(slow, defender, context).attacks_count == 1
        assert simulate_attack(fast, defender, context).attacks_count == 2

    def test_doubling_disabled(self, document):
        fast = make_unit("b", "swordsman", "iron_sword", side=Side.PLAYER, spd=30)
        sim = simulate_attack(fast, document.get_unit("e1"), CombatContext(document, "plain"))
        assert sim.attacks_count == 1

    def test_crit_expected_value(self, document):
        document.weapons["keen"] = Weapon(
            id="keen", name="Keen", type_name="physical", might=4, hit=100, crit=25
        )
        attacker = make_unit("a", "swordsman", "keen", side=Side.PLAYER)
        context = CombatContext(document, "plain", enable_crit=True, crit_multiplier=3)
        sim = simulate_attack(attacker, document.get_unit("e1"), context)
        # factor 1 + 0.25 * 2 = 1.5, damage 6
        assert sim.crit_factor == pytest.approx(1.5)
        assert sim.expected_damage == pytest.approx(9.0)

    def test_unknown_terrain_means_no_bonus(self, document):
        sim = simulate_attack(document.get_unit("p1"), document.get_unit("e1"),
                              CombatContext(document, "lava"))
        assert sim.terrain_name == NO_TERRAIN_NAME
        assert sim.damage == 6
        assert sim.hit_chance == pytest.approx(0.85)

    def test_unresolvable_returns_none(self, document):
        context = CombatContext(document, "plain")
        e1 = document.get_unit("e1")
        assert simulate_attack(make_unit("a", "nope", "iron_sword"), e1, context) is None
        assert simulate_attack(make_unit("a", "lancer", "nope"), e1, context) is None
        assert simulate_attack(e1, make_unit("d", "nope", "iron_sword"), context) is None

    def test_inputs_not_mutated(self, document):
        snapshot = copy.deepcopy(document)
        simulate_attack(document.get_unit("p1"), document.get_unit("e1"),
                        CombatContext(document, "forest", enable_doubling=True, enable_crit=True))
        assert document == snapshot


class TestCombatContext:
    """Tests for CombatContext construction."""

    def test_from_selection(self, document):
        selection = Selection(defender_terrain_id="fort", enable_doubling=True)
        context = CombatContext.from_selection(document, selection)
        assert context.defender_terrain_id == "fort"
        assert context.enable_doubling
        assert not context.enable_crit
        assert context.crit_multiplier == 3

    def test_on_terrain_copies(self, document):
        context = CombatContext(document, "fort", enable_crit=True)
        plain = context.on_terrain(None)
        assert plain.defender_terrain_id is None
        assert plain.enable_crit
        assert context.defender_terrain_id == "fort"

    def test_terrain_objects(self):
        terrain = Terrain(id="t", name="T", bonus=TerrainBonus(def_=2, mdef=1, avoid=30))
        stats = apply_terrain(StatBlock(def_=1, mdef=1), terrain)
        assert (stats.def_, stats.mdef, stats.avoid) == (3, 2, 30)
