"""Stage macro analysis - static threat estimate for placed units."""
from __future__ import annotations
from dataclasses import dataclass, field
import logging
import math
import numpy as np

from .enums import Side
from .models import BalanceDocument, Stage, Unit
from .combat import CombatContext, resolve_stats, simulate_attack
from .metrics import compute_ttk, compute_ehp, finite_mean


@dataclass(frozen=True)
class PlayerThreat:
    """Incoming pressure on one player unit."""
    unit_id: str
    unit_name: str
    hp: float
    threats: int
    expected_incoming: float
    survive_turns: float


@dataclass(frozen=True)
class MacroAnalysis:
    """Threat rows per player plus the average TTK against the nearest enemy."""
    per_player: list[PlayerThreat] = field(default_factory=list)
    avg_ttk: float = math.inf


def distance_matrix(players: list[Unit], enemies: list[Unit]) -> np.ndarray:
    """Manhattan distances, shape (len(players), len(enemies))."""
    if not players or not enemies:
        return np.zeros((len(players), len(enemies)), dtype=int)
    p = np.array([(u.position.x, u.position.y) for u in players], dtype=int)
    e = np.array([(u.position.x, u.position.y) for u in enemies], dtype=int)
    return np.abs(p[:, None, :] - e[None, :, :]).sum(axis=2)


def analyze_macro(
    document: BalanceDocument,
    stage: Stage,
    radius: int,
    context: CombatContext,
    use_stage_terrain: bool = False
) -> MacroAnalysis:
    """
    Estimate, for every player on the stage, how much damage the enemies can
    bring in one round.

    An enemy counts as a threat when it is within `radius` tiles (planning
    horizon) and the distance falls inside its weapon's range band, even
    when its expected damage is 0. Heal weapons never threaten. No
    pathfinding and no turn order: this is a static snapshot.

    Attacks resolve on plain ground unless `use_stage_terrain` is set, in
    which case the defender's tile on the stage grid is used.
    """
    on_stage = document.units_on_stage(stage)
    players = [u for u in on_stage if u.side == Side.PLAYER]
    enemies = [u for u in on_stage if u.side == Side.ENEMY]
    distances = distance_matrix(players, enemies)

    def context_for(defender: Unit) -> CombatContext:
        if use_stage_terrain:
            return context.on_terrain(stage.terrain_at(defender.position))
        return context.on_terrain(None)

    per_player = []
    nearest_ttks = []
    for i, player in enumerate(players):
        player_stats = resolve_stats(document, player)
        if player_stats is None:
            logging.debug(f"Skipping player '{player.id}' in macro analysis: unknown class")
            continue

        threats = 0
        expected_incoming = 0.0
        for j, enemy in enumerate(enemies):
            distance = int(distances[i, j])
            if distance > radius:
                continue
            weapon = document.get_weapon(enemy.weapon_id)
            if weapon is None or not weapon.in_range(distance):
                continue
            sim = simulate_attack(enemy, player, context_for(player))
            # Enemies carrying a heal weapon cannot attack
            if sim is None or sim.is_heal:
                continue
            threats += 1
            expected_incoming += max(0.0, sim.expected_damage)

        per_player.append(PlayerThreat(
            unit_id=player.id,
            unit_name=player.name,
            hp=player_stats.hp,
            threats=threats,
            expected_incoming=expected_incoming,
            survive_turns=compute_ehp(player_stats.hp, expected_incoming)
        ))

        if enemies:
            # argmin keeps the first enemy on ties
            nearest = enemies[int(np.argmin(distances[i]))]
            nearest_stats = resolve_stats(document, nearest)
            sim = simulate_attack(player, nearest, context_for(nearest))
            if sim is not None and nearest_stats is not None:
                nearest_ttks.append(compute_ttk(nearest_stats.hp, sim.expected_damage))

    return MacroAnalysis(per_player=per_player, avg_ttk=finite_mean(nearest_ttks))
