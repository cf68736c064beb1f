"""Elves vs Goblins: deterministic grid combat simulator."""

from .board import Board, BoardError, Cell, Direction, Faction, Unit, parse_board
from .search import SearchExhausted, SearchResult, find_minimal_power, run, run_protecting
from .simulation import Action, CombatError, CombatState, Engine, choose_action, outcome

__all__ = [
    "Action",
    "Board",
    "BoardError",
    "Cell",
    "CombatError",
    "CombatState",
    "Direction",
    "Engine",
    "Faction",
    "SearchExhausted",
    "SearchResult",
    "Unit",
    "choose_action",
    "find_minimal_power",
    "outcome",
    "parse_board",
    "run",
    "run_protecting",
]
