from __future__ import annotations

"""Battle map: wall/open cells plus the living units standing on them."""

import dataclasses
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from .rules import (
    DEFAULT_ATTACK_POWER,
    DEFAULT_HIT_POINTS,
    ELF_SYMBOL,
    GOBLIN_SYMBOL,
    OPEN_SYMBOL,
    WALL_SYMBOL,
)

Position = Tuple[int, int]


class BoardError(Exception):
    """Raised when board data is malformed or a placement breaks the board invariants."""


class Cell(Enum):
    WALL = WALL_SYMBOL
    OPEN = OPEN_SYMBOL


class Faction(Enum):
    ELF = ELF_SYMBOL
    GOBLIN = GOBLIN_SYMBOL

    def opposing(self) -> "Faction":
        return Faction.GOBLIN if self is Faction.ELF else Faction.ELF

    @property
    def label(self) -> str:
        return self.name.capitalize()

    @property
    def plural(self) -> str:
        return "Elves" if self is Faction.ELF else "Goblins"

    @classmethod
    def from_name(cls, name: str) -> "Faction":
        key = name.strip().upper()
        if key in cls.__members__:
            return cls[key]
        for faction in cls:
            if faction.value == name.strip().upper():
                return faction
        raise ValueError(f"unknown faction: {name!r}")


class Direction(Enum):
    """Orthogonal steps, declared in reading order (the tie-break order)."""

    UP = (-1, 0)
    LEFT = (0, -1)
    RIGHT = (0, 1)
    DOWN = (1, 0)

    def step(self, position: Position) -> Position:
        dr, dc = self.value
        return position[0] + dr, position[1] + dc

    def opposite(self) -> "Direction":
        return _OPPOSITES[self]

    @property
    def rank(self) -> int:
        return _RANKS[self]


_OPPOSITES = {
    Direction.UP: Direction.DOWN,
    Direction.DOWN: Direction.UP,
    Direction.LEFT: Direction.RIGHT,
    Direction.RIGHT: Direction.LEFT,
}
_RANKS = {direction: idx for idx, direction in enumerate(Direction)}


def neighbors(position: Position) -> Iterator[Tuple[Direction, Position]]:
    """Yield (direction, adjacent position) pairs in reading order."""
    for direction in Direction:
        yield direction, direction.step(position)


@dataclass
class Unit:
    id: int
    faction: Faction
    row: int
    col: int
    hp: int = DEFAULT_HIT_POINTS
    attack_power: int = DEFAULT_ATTACK_POWER

    @property
    def position(self) -> Position:
        return self.row, self.col

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def is_enemy(self, other: "Unit") -> bool:
        return other.faction is self.faction.opposing()


class Board:
    """Cell grid with a side table of living units keyed by position."""

    def __init__(self, cells: Sequence[Sequence[Cell]], units: Iterable[Unit] = ()) -> None:
        if not cells or not cells[0]:
            raise BoardError("board has no cells")
        self.height = len(cells)
        self.width = len(cells[0])
        grid: List[Tuple[Cell, ...]] = []
        for row_idx, row in enumerate(cells):
            if len(row) != self.width:
                raise BoardError(f"row {row_idx} has width {len(row)}, expected {self.width}")
            grid.append(tuple(row))
        self.grid: Tuple[Tuple[Cell, ...], ...] = tuple(grid)
        self._units: Dict[Position, Unit] = {}
        for unit in units:
            self.add_unit(unit)

    # ------------------------------------------------------------------
    # Cell queries
    # ------------------------------------------------------------------

    def in_bounds(self, position: Position) -> bool:
        row, col = position
        return 0 <= row < self.height and 0 <= col < self.width

    def cell(self, position: Position) -> Cell:
        if not self.in_bounds(position):
            return Cell.WALL
        row, col = position
        return self.grid[row][col]

    def is_open(self, position: Position) -> bool:
        return self.cell(position) is Cell.OPEN

    def is_free(self, position: Position) -> bool:
        return self.is_open(position) and position not in self._units

    def index(self, position: Position) -> int:
        return position[0] * self.width + position[1]

    def position(self, index: int) -> Position:
        return divmod(index, self.width)

    # ------------------------------------------------------------------
    # Units
    # ------------------------------------------------------------------

    def unit_at(self, position: Position) -> Optional[Unit]:
        return self._units.get(position)

    def units(self) -> List[Unit]:
        """Living units in reading order."""
        return [self._units[pos] for pos in sorted(self._units)]

    def faction_units(self, faction: Faction) -> List[Unit]:
        return [unit for unit in self.units() if unit.faction is faction]

    def count(self, faction: Faction) -> int:
        return sum(1 for unit in self._units.values() if unit.faction is faction)

    def total_hp(self) -> int:
        return sum(unit.hp for unit in self._units.values())

    def add_unit(self, unit: Unit) -> None:
        position = unit.position
        if not self.in_bounds(position):
            raise BoardError(f"unit {unit.id} placed outside the board at {position}")
        if not self.is_open(position):
            raise BoardError(f"unit {unit.id} placed on a wall at {position}")
        if position in self._units:
            raise BoardError(f"unit {unit.id} placed on occupied cell {position}")
        if not unit.alive:
            raise BoardError(f"unit {unit.id} placed with {unit.hp} hit points")
        self._units[position] = unit

    def move_unit(self, position: Position, direction: Direction) -> Position:
        unit = self._units.get(position)
        assert unit is not None, f"no unit to move at {position}"
        target = direction.step(position)
        assert self.is_free(target), f"cannot move {position} onto {target}"
        del self._units[position]
        unit.row, unit.col = target
        self._units[target] = unit
        return target

    def remove_unit(self, position: Position) -> Unit:
        unit = self._units.pop(position, None)
        assert unit is not None, f"no unit to remove at {position}"
        return unit

    def set_attack_power(self, faction: Faction, power: int) -> None:
        for unit in self._units.values():
            if unit.faction is faction:
                unit.attack_power = power

    def copy(self) -> "Board":
        """Independent copy: units are duplicated, the immutable grid is shared."""
        clone = Board.__new__(Board)
        clone.height = self.height
        clone.width = self.width
        clone.grid = self.grid
        clone._units = {pos: dataclasses.replace(unit) for pos, unit in self._units.items()}
        return clone

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def symbol(self, position: Position) -> str:
        unit = self._units.get(position)
        if unit is not None:
            return unit.faction.value
        return self.cell(position).value

    def render(self, highlight: Optional[Position] = None, *, hit_points: bool = True) -> str:
        lines = []
        for row in range(self.height):
            line = "".join(
                f"[{self.symbol((row, col))}]" if (row, col) == highlight else self.symbol((row, col))
                for col in range(self.width)
            )
            if hit_points:
                row_units = [self._units[(row, col)] for col in range(self.width) if (row, col) in self._units]
                if row_units:
                    line += "   " + ", ".join(f"{u.faction.value}({u.hp})" for u in row_units)
            lines.append(line)
        return "\n".join(lines)

    def summary(self) -> str:
        parts = [f"Board {self.width}x{self.height}"]
        for faction in Faction:
            members = self.faction_units(faction)
            parts.append(f"{faction.plural}: {len(members)} ({sum(u.hp for u in members)} hp)")
        return ", ".join(parts)

    def __repr__(self) -> str:
        return f"<{self.summary()}>"


def parse_board(
    text: str,
    *,
    hit_points: int = DEFAULT_HIT_POINTS,
    attack_power: int = DEFAULT_ATTACK_POWER,
) -> Board:
    """Decode a text map into a Board; units receive the given starting stats."""
    rows = [line.rstrip("\r") for line in text.splitlines()]
    while rows and not rows[-1].strip():
        rows.pop()
    while rows and not rows[0].strip():
        rows.pop(0)
    if not rows:
        raise BoardError("board text is empty")

    factions = {faction.value: faction for faction in Faction}
    cells: List[List[Cell]] = []
    units: List[Unit] = []
    for row_idx, line in enumerate(rows):
        row: List[Cell] = []
        for col_idx, char in enumerate(line):
            if char == WALL_SYMBOL:
                row.append(Cell.WALL)
            elif char == OPEN_SYMBOL:
                row.append(Cell.OPEN)
            elif char in factions:
                row.append(Cell.OPEN)
                units.append(
                    Unit(
                        id=len(units) + 1,
                        faction=factions[char],
                        row=row_idx,
                        col=col_idx,
                        hp=hit_points,
                        attack_power=attack_power,
                    )
                )
            else:
                raise BoardError(f"unknown map symbol {char!r} at row {row_idx}, column {col_idx}")
        cells.append(row)
    return Board(cells, units)


__all__ = [
    "Board",
    "BoardError",
    "Cell",
    "Direction",
    "Faction",
    "Position",
    "Unit",
    "neighbors",
    "parse_board",
]
