from __future__ import annotations

"""Combat entry points and the search for a loss-free attack power."""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple

from .board import Board, Faction
from .rules import DEFAULT_ATTACK_POWER, MAX_ATTACK_POWER, MAX_ROUNDS
from .simulation import CombatState, Engine

log = logging.getLogger(__name__)


class SearchExhausted(Exception):
    """Raised when no attack power up to the cutoff keeps the protected faction alive."""

    def __init__(self, faction: Faction, cutoff: int) -> None:
        super().__init__(f"no attack power up to {cutoff} lets the {faction.plural} win without losses")
        self.faction = faction
        self.cutoff = cutoff


@dataclass(frozen=True)
class SearchResult:
    faction: Faction
    power: int
    score: int
    rounds: int
    attempts: int


def simulate(board: Board, *, max_rounds: int = MAX_ROUNDS) -> Engine:
    """Play a copy of ``board`` to the end and return the finished engine."""
    engine = Engine(board.copy(), max_rounds=max_rounds)
    engine.run()
    return engine


def run(board: Board) -> int:
    return simulate(board).outcome()


def attempt(board: Board, faction: Faction, power: int, *, max_rounds: int = MAX_ROUNDS) -> Optional[Engine]:
    """Fight with ``faction`` at ``power``; None if any of its units dies."""
    trial = board.copy()
    trial.set_attack_power(faction, power)
    engine = Engine(trial, max_rounds=max_rounds)

    def on_death(payload: Dict[str, Any]) -> None:
        if payload["faction"] is faction:
            engine.abort(f"{faction.label} {payload['unit_id']} died at {payload['position']}")

    engine.add_event_listener("unit_died", on_death)
    if engine.run() is CombatState.ABORTED:
        log.info("Attack power %d: %s in round %d", power, engine.abort_reason, engine.rounds + 1)
        return None
    return engine


def find_minimal_power(
    board: Board,
    faction: Faction = Faction.ELF,
    *,
    floor: int = DEFAULT_ATTACK_POWER,
    cutoff: int = MAX_ATTACK_POWER,
    max_rounds: int = MAX_ROUNDS,
) -> SearchResult:
    """Smallest attack power above ``floor`` with which ``faction`` loses nobody."""
    if cutoff <= floor:
        raise ValueError(f"cutoff {cutoff} must exceed floor {floor}")

    attempts = 0
    for power in range(floor + 1, cutoff + 1):
        attempts += 1
        engine = attempt(board, faction, power, max_rounds=max_rounds)
        if engine is None:
            continue
        score = engine.outcome()
        log.info(
            "Attack power %d: %s win after %d rounds with score %d",
            power,
            faction.plural,
            engine.rounds,
            score,
        )
        return SearchResult(faction=faction, power=power, score=score, rounds=engine.rounds, attempts=attempts)

    raise SearchExhausted(faction, cutoff)


def run_protecting(board: Board, faction: Faction = Faction.ELF) -> Tuple[int, int]:
    result = find_minimal_power(board, faction)
    return result.power, result.score


__all__ = [
    "SearchExhausted",
    "SearchResult",
    "attempt",
    "find_minimal_power",
    "run",
    "run_protecting",
    "simulate",
]
