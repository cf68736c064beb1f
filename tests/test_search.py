from __future__ import annotations

import pytest

from maps import COMBAT_EXAMPLE, PROTECTED_OUTCOMES
from skirmish.board import Faction, parse_board
from skirmish.rules import DEFAULT_ATTACK_POWER
from skirmish.search import SearchExhausted, attempt, find_minimal_power, run, run_protecting


def test_run_scores_default_combat_without_touching_the_board() -> None:
    board = parse_board(COMBAT_EXAMPLE)

    assert run(board) == 27730
    assert board.total_hp() == 1200
    assert [u.position for u in board.units()] == [(1, 2), (2, 4), (2, 5), (3, 5), (4, 3), (4, 5)]


def test_run_protecting_finds_minimal_elf_power() -> None:
    board = parse_board(COMBAT_EXAMPLE)

    assert run_protecting(board, Faction.ELF) == (15, 4988)
    assert all(unit.attack_power == DEFAULT_ATTACK_POWER for unit in board.units())
    assert board.total_hp() == 1200


@pytest.mark.parametrize("text, power, rounds, score", PROTECTED_OUTCOMES)
def test_find_minimal_power_on_standard_maps(text: str, power: int, rounds: int, score: int) -> None:
    board = parse_board(text)
    result = find_minimal_power(board, Faction.ELF)

    assert (result.power, result.rounds, result.score) == (power, rounds, score)
    assert result.attempts == power - DEFAULT_ATTACK_POWER
    assert result.faction is Faction.ELF


def test_winning_attempt_loses_no_elves() -> None:
    board = parse_board(COMBAT_EXAMPLE)
    elves = board.count(Faction.ELF)

    engine = attempt(board, Faction.ELF, 15)
    assert engine is not None
    assert engine.board.count(Faction.ELF) == elves
    assert engine.board.count(Faction.GOBLIN) == 0
    assert all(unit.attack_power == 15 for unit in engine.board.units())


def test_attempt_below_minimal_power_is_discarded() -> None:
    board = parse_board(COMBAT_EXAMPLE)

    assert attempt(board, Faction.ELF, 14) is None
    assert board.count(Faction.ELF) == 2


def test_goblins_can_be_protected_too() -> None:
    board = parse_board(COMBAT_EXAMPLE)
    goblins = board.count(Faction.GOBLIN)

    result = find_minimal_power(board, Faction.GOBLIN)
    engine = attempt(board, Faction.GOBLIN, result.power)

    assert result.power > DEFAULT_ATTACK_POWER
    assert engine is not None
    assert engine.board.count(Faction.GOBLIN) == goblins
    assert engine.outcome() == result.score


def test_search_reports_exhaustion_at_cutoff() -> None:
    board = parse_board(COMBAT_EXAMPLE)

    with pytest.raises(SearchExhausted) as excinfo:
        find_minimal_power(board, Faction.ELF, cutoff=10)
    assert excinfo.value.cutoff == 10
    assert excinfo.value.faction is Faction.ELF
    assert "Elves" in str(excinfo.value)


def test_search_rejects_cutoff_below_floor() -> None:
    board = parse_board(COMBAT_EXAMPLE)

    with pytest.raises(ValueError):
        find_minimal_power(board, Faction.ELF, floor=10, cutoff=10)
