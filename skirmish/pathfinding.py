from __future__ import annotations

"""Breadth-first reachability and first-step selection for melee units."""

import heapq
from typing import List, Optional, Set, Tuple

from .board import Board, Direction, Position, neighbors

# Heap entries: (distance, first-step rank, row, col). The start cell has no first step.
_NO_STEP = -1


class Reachability:
    """Result of one search: distances and arrival directions in flat grid-indexed arenas."""

    __slots__ = ("board", "start", "distances", "came_from", "enemies")

    def __init__(self, board: Board, start: Position) -> None:
        size = board.width * board.height
        self.board = board
        self.start = start
        self.distances: List[Optional[int]] = [None] * size
        self.came_from: List[Optional[Direction]] = [None] * size
        self.enemies: Set[Position] = set()

    def distance(self, position: Position) -> Optional[int]:
        if not self.board.in_bounds(position):
            return None
        return self.distances[self.board.index(position)]

    def reachable(self, position: Position) -> bool:
        return self.distance(position) is not None

    def destinations(self) -> List[Position]:
        """Reachable cells orthogonally adjacent to a reachable enemy."""
        found: List[Position] = []
        seen: Set[Position] = set()
        for enemy in sorted(self.enemies):
            for _, tile in neighbors(enemy):
                if tile in seen or not self.reachable(tile):
                    continue
                seen.add(tile)
                found.append(tile)
        return found

    def nearest_destination(self) -> Optional[Position]:
        candidates = self.destinations()
        if not candidates:
            return None
        return min(candidates, key=lambda tile: (self.distance(tile), tile))

    def first_step(self, destination: Position) -> Optional[Direction]:
        """Walk arrival directions back to the start and return the opening move."""
        current = destination
        step: Optional[Direction] = None
        while current != self.start:
            step = self.came_from[self.board.index(current)]
            assert step is not None, f"{current} has no recorded predecessor"
            current = step.opposite().step(current)
        return step


def reachability(board: Board, start: Position) -> Reachability:
    """Search outward from the unit at ``start`` through free open cells.

    Cells are expanded by increasing distance; among equal distances, cells whose
    path opened with an earlier neighbour of the start go first, then reading
    order. A cell keeps the direction it was first reached with, so walking those
    directions back from any cell retraces a shortest path whose opening step is
    the earliest one in reading order.
    """
    unit = board.unit_at(start)
    assert unit is not None, f"no unit at {start}"
    enemy = unit.faction.opposing()

    result = Reachability(board, start)
    result.distances[board.index(start)] = 0
    heap: List[Tuple[int, int, int, int]] = [(0, _NO_STEP, start[0], start[1])]

    while heap:
        distance, rank, row, col = heapq.heappop(heap)
        for direction, tile in neighbors((row, col)):
            occupant = board.unit_at(tile)
            if occupant is not None:
                if occupant.faction is enemy:
                    result.enemies.add(tile)
                continue
            if not board.is_open(tile):
                continue
            idx = board.index(tile)
            if result.distances[idx] is not None:
                continue
            result.distances[idx] = distance + 1
            result.came_from[idx] = direction
            tile_rank = direction.rank if rank == _NO_STEP else rank
            heapq.heappush(heap, (distance + 1, tile_rank, tile[0], tile[1]))

    return result


def next_step(board: Board, start: Position) -> Optional[Direction]:
    """Direction of the first move toward the nearest reachable enemy, if any.

    Returns None when no enemy is reachable or the unit is already in range.
    """
    search = reachability(board, start)
    destination = search.nearest_destination()
    if destination is None:
        return None
    return search.first_step(destination)


def visualize_reachability(search: Reachability, *, mark: str = "+") -> str:
    board = search.board
    lines = []
    for row in range(board.height):
        chars = []
        for col in range(board.width):
            pos = (row, col)
            if pos != search.start and board.unit_at(pos) is None and search.reachable(pos):
                chars.append(mark)
            else:
                chars.append(board.symbol(pos))
        lines.append("".join(chars))
    return "\n".join(lines)


__all__ = ["Reachability", "next_step", "reachability", "visualize_reachability"]
