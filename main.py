"""Command line entry point: score a battle map and search for a loss-free attack power.

Usage:
    python main.py input.txt                  # text map from a file
    python main.py < input.txt                # text map from stdin
    python main.py map.png --image            # map drawn as a PNG, one pixel per cell
    python main.py input.txt --faction goblin # protect the goblins instead
    python main.py input.txt --verbose        # log every decision and board state
"""
from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from skirmish.board import Board, BoardError, Faction, parse_board
from skirmish.board_image import load_board_image
from skirmish.rules import DEFAULT_ATTACK_POWER, DEFAULT_HIT_POINTS, MAX_ATTACK_POWER
from skirmish.search import SearchExhausted, find_minimal_power, run
from skirmish.simulation import CombatError

log = logging.getLogger("skirmish.cli")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Elves vs Goblins combat simulator")
    parser.add_argument("input", nargs="?", default="-", help="map file, or - for stdin (default)")
    parser.add_argument("--image", action="store_true", help="read the map from an image file")
    parser.add_argument("--faction", default="elf", help="faction to protect in the search (elf or goblin)")
    parser.add_argument("--hit-points", type=int, default=DEFAULT_HIT_POINTS, help="starting hit points")
    parser.add_argument("--attack-power", type=int, default=DEFAULT_ATTACK_POWER, help="default attack power")
    parser.add_argument("--max-power", type=int, default=MAX_ATTACK_POWER, help="search cutoff")
    parser.add_argument("--verbose", action="store_true", help="log every decision")
    return parser


def load_board(args: argparse.Namespace) -> Board:
    if args.image:
        if args.input == "-":
            raise BoardError("--image needs a file path")
        return load_board_image(args.input, hit_points=args.hit_points, attack_power=args.attack_power)
    if args.input == "-":
        text = sys.stdin.read()
    else:
        with open(args.input, "r", encoding="utf-8") as handle:
            text = handle.read()
    return parse_board(text, hit_points=args.hit_points, attack_power=args.attack_power)


def main(argv: Optional[List[str]] = None) -> int:
    args = _build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        faction = Faction.from_name(args.faction)
        board = load_board(args)
        log.info("Loaded %s", board.summary())
        print(f"Outcome of combat is: {run(board)}")
        result = find_minimal_power(board, faction, floor=args.attack_power, cutoff=args.max_power)
    except (BoardError, CombatError, SearchExhausted, ValueError, OSError) as exc:
        print(f"[!] {exc}", file=sys.stderr)
        return 1

    print(
        f"Outcome of combat with no {faction.label} deaths: {result.score} "
        f"(attack power {result.power})"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
