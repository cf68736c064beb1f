from __future__ import annotations

from pathlib import Path

import pytest
from PIL import Image

from convert_board_from_png import convert
from skirmish.board import BoardError, Faction
from skirmish.board_image import (
    DEFAULT_PALETTE,
    ImageBoardError,
    board_to_text,
    image_to_text,
    load_board_image,
)

SMALL_MAP = "#####\n#E.G#\n#####"


def _colour(symbol: str):
    return next(rgb for rgb, sym in DEFAULT_PALETTE.items() if sym == symbol)


def _draw(text: str, scale: int = 1) -> Image.Image:
    rows = text.splitlines()
    img = Image.new("RGB", (len(rows[0]) * scale, len(rows) * scale))
    for y, row in enumerate(rows):
        for x, symbol in enumerate(row):
            for dy in range(scale):
                for dx in range(scale):
                    img.putpixel((x * scale + dx, y * scale + dy), _colour(symbol))
    return img


def test_load_board_image_reads_one_pixel_per_cell(tmp_path: Path) -> None:
    path = tmp_path / "board.png"
    _draw(SMALL_MAP).save(path)

    board = load_board_image(path, hit_points=50)

    assert (board.width, board.height) == (5, 3)
    assert board.unit_at((1, 1)).faction is Faction.ELF
    assert board.unit_at((1, 3)).faction is Faction.GOBLIN
    assert board.unit_at((1, 3)).hp == 50
    assert board_to_text(board) == SMALL_MAP


def test_image_to_text_resizes_with_nearest_sampling() -> None:
    assert image_to_text(_draw(SMALL_MAP, scale=2), size=(5, 3)) == SMALL_MAP


def test_custom_palette() -> None:
    img = Image.new("RGB", (3, 1), (10, 10, 10))
    img.putpixel((1, 0), (1, 2, 3))
    palette = {(10, 10, 10): "#", (1, 2, 3): "G"}

    assert image_to_text(img, palette=palette) == "#G#"


def test_unknown_colour_is_rejected(tmp_path: Path) -> None:
    img = _draw(SMALL_MAP)
    img.putpixel((2, 1), (12, 34, 56))
    path = tmp_path / "bad.png"
    img.save(path)

    with pytest.raises(ImageBoardError, match=r"\(12, 34, 56\) at pixel \(2, 1\)"):
        load_board_image(path)
    assert issubclass(ImageBoardError, BoardError)


def test_missing_image_raises(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError):
        load_board_image(tmp_path / "nope.png")


def test_convert_writes_text_map(tmp_path: Path) -> None:
    src = tmp_path / "board.png"
    _draw(SMALL_MAP).save(src)

    out = convert(src, tmp_path / "out" / "board.txt")

    assert out.read_text(encoding="utf-8") == SMALL_MAP + "\n"
