from __future__ import annotations

"""Round-based combat loop: unit decisions, movement, attacks and scoring."""

import logging
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Tuple

from .board import Board, Direction, Faction, Position, Unit, neighbors
from .pathfinding import next_step
from .rules import MAX_ROUNDS

log = logging.getLogger(__name__)


class CombatError(Exception):
    """Raised when combat cannot produce an outcome."""


class CombatState(Enum):
    RUNNING = "running"
    ENDED = "ended"
    ABORTED = "aborted"


class ActionKind(Enum):
    ATTACK = "attack"
    MOVE = "move"
    NOTHING = "nothing"


@dataclass(frozen=True)
class Action:
    kind: ActionKind
    direction: Optional[Direction] = None

    @classmethod
    def attack(cls, direction: Direction) -> "Action":
        return cls(ActionKind.ATTACK, direction)

    @classmethod
    def move(cls, direction: Direction) -> "Action":
        return cls(ActionKind.MOVE, direction)

    @classmethod
    def nothing(cls) -> "Action":
        return cls(ActionKind.NOTHING)

    def __str__(self) -> str:
        if self.direction is None:
            return self.kind.value
        return f"{self.kind.value} {self.direction.name.lower()}"


def adjacent_target(board: Board, position: Position) -> Optional[Direction]:
    """Direction of the adjacent enemy with the fewest hit points, if any."""
    unit = board.unit_at(position)
    assert unit is not None, f"no unit at {position}"

    best: Optional[Tuple[int, Direction]] = None
    for direction, tile in neighbors(position):
        other = board.unit_at(tile)
        if other is None or not unit.is_enemy(other):
            continue
        # neighbors() yields reading order, so strict < keeps the earliest on ties
        if best is None or other.hp < best[0]:
            best = (other.hp, direction)
    return best[1] if best is not None else None


def choose_action(board: Board, position: Position) -> Action:
    """Attack the weakest adjacent enemy, else step toward the nearest one."""
    target = adjacent_target(board, position)
    if target is not None:
        return Action.attack(target)

    direction = next_step(board, position)
    if direction is not None:
        return Action.move(direction)
    return Action.nothing()


def outcome(board: Board, rounds: int) -> int:
    return rounds * board.total_hp()


class Engine:
    """Plays combat on a board it owns until one faction is gone."""

    def __init__(self, board: Board, *, max_rounds: int = MAX_ROUNDS) -> None:
        self.board = board
        self.max_rounds = max_rounds
        self.state = CombatState.RUNNING
        self.rounds = 0
        self.abort_reason: Optional[str] = None
        self._acted_this_round = False

        self.event_log: List[Tuple[str, Dict[str, Any]]] = []
        self._recent_events: List[Tuple[str, Dict[str, Any]]] = []
        self._event_listeners: Dict[str, List[Callable[[Dict[str, Any]], None]]] = defaultdict(list)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def run(self) -> CombatState:
        while self.state is CombatState.RUNNING:
            if self.rounds >= self.max_rounds:
                raise CombatError(f"combat still running after {self.max_rounds} rounds")
            self.step()
        return self.state

    def step(self) -> CombatState:
        """Play one round; a round cut short by the end of combat is not counted."""
        if self.state is not CombatState.RUNNING:
            return self.state

        self._acted_this_round = False
        snapshot = self.board.units()
        if not snapshot:
            self._end_combat()
            return self.state

        for unit in snapshot:
            if not unit.alive:
                continue
            if self.board.count(Faction.ELF) == 0 or self.board.count(Faction.GOBLIN) == 0:
                self._end_combat()
                return self.state
            self._take_turn(unit)
            if self.state is not CombatState.RUNNING:
                return self.state

        self.rounds += 1
        log.debug("Round %d complete: %s", self.rounds, self.board.summary())
        self._dispatch_event("round_completed", {"round": self.rounds, "total_hp": self.board.total_hp()})
        if not self._acted_this_round:
            raise CombatError(f"stalemate after {self.rounds} rounds: no unit can reach an enemy")
        return self.state

    def abort(self, reason: Optional[str] = None) -> None:
        """Stop before the next unit acts; an aborted combat has no outcome."""
        if self.state is not CombatState.RUNNING:
            return
        self.state = CombatState.ABORTED
        self.abort_reason = reason
        log.debug("Combat aborted in round %d: %s", self.rounds + 1, reason or "no reason given")

    def outcome(self) -> int:
        if self.state is not CombatState.ENDED:
            raise CombatError(f"no outcome for combat in state {self.state.value}")
        return outcome(self.board, self.rounds)

    def winner(self) -> Optional[Faction]:
        if self.state is not CombatState.ENDED:
            return None
        for faction in Faction:
            if self.board.count(faction):
                return faction
        return None

    # ------------------------------------------------------------------
    # Event helpers
    # ------------------------------------------------------------------

    def add_event_listener(self, event_name: str, callback: Callable[[Dict[str, Any]], None]) -> None:
        self._event_listeners[event_name].append(callback)

    def remove_event_listener(self, event_name: str, callback: Callable[[Dict[str, Any]], None]) -> None:
        listeners = self._event_listeners.get(event_name)
        if not listeners:
            return
        try:
            listeners.remove(callback)
        except ValueError:
            return
        if not listeners:
            self._event_listeners.pop(event_name, None)

    def poll_events(self, *, clear: bool = True) -> List[Tuple[str, Dict[str, Any]]]:
        events = list(self._recent_events)
        if clear:
            self._recent_events.clear()
        return events

    def _dispatch_event(self, event_name: str, payload: Dict[str, Any]) -> None:
        event_payload = dict(payload)
        event_payload.setdefault("round", self.rounds + 1)
        record = (event_name, event_payload)
        self.event_log.append(record)
        self._recent_events.append(record)
        for callback in tuple(self._event_listeners.get(event_name, ())):
            callback(dict(event_payload))

    # ------------------------------------------------------------------
    # Turn resolution
    # ------------------------------------------------------------------

    def _take_turn(self, unit: Unit) -> None:
        if log.isEnabledFor(logging.DEBUG):
            log.debug("Board before unit %d acts:\n%s", unit.id, self.board.render(unit.position))

        action = choose_action(self.board, unit.position)
        log.debug("%s %d at %s decided to %s", unit.faction.label, unit.id, unit.position, action)

        if action.kind is ActionKind.MOVE:
            self._move(unit, action.direction)
            if self.state is not CombatState.RUNNING:
                return
            target = adjacent_target(self.board, unit.position)
            if target is not None:
                self._attack(unit, target)
        elif action.kind is ActionKind.ATTACK:
            self._attack(unit, action.direction)

    def _move(self, unit: Unit, direction: Direction) -> None:
        origin = unit.position
        target = self.board.move_unit(origin, direction)
        self._acted_this_round = True
        self._dispatch_event(
            "unit_moved",
            {"unit_id": unit.id, "faction": unit.faction, "from": origin, "to": target},
        )

    def _attack(self, unit: Unit, direction: Direction) -> None:
        tile = direction.step(unit.position)
        target = self.board.unit_at(tile)
        assert target is not None, f"unit {unit.id} attacked empty cell {tile}"
        assert unit.is_enemy(target), f"unit {unit.id} attacked an ally at {tile}"

        target.hp -= unit.attack_power
        self._acted_this_round = True
        self._dispatch_event(
            "unit_attacked",
            {
                "attacker_id": unit.id,
                "target_id": target.id,
                "faction": target.faction,
                "position": tile,
                "damage": unit.attack_power,
                "hp": max(target.hp, 0),
            },
        )
        if not target.alive:
            self.board.remove_unit(tile)
            log.debug("%s %d at %s died", target.faction.label, target.id, tile)
            self._dispatch_event(
                "unit_died",
                {"unit_id": target.id, "faction": target.faction, "position": tile, "killer_id": unit.id},
            )

    def _end_combat(self) -> None:
        self.state = CombatState.ENDED
        winner = self.winner()
        log.debug(
            "Combat ended after %d full rounds, %s win with %d hp",
            self.rounds,
            winner.plural if winner else "nobody",
            self.board.total_hp(),
        )
        self._dispatch_event("combat_ended", {"rounds": self.rounds, "total_hp": self.board.total_hp()})


__all__ = ["Action", "ActionKind", "CombatError", "CombatState", "Engine", "adjacent_target", "choose_action", "outcome"]
