"""Load battle maps drawn as images: one pixel per cell, colours from a palette."""
from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from PIL import Image

from .board import Board, BoardError, parse_board
from .rules import (
    DEFAULT_ATTACK_POWER,
    DEFAULT_HIT_POINTS,
    ELF_SYMBOL,
    GOBLIN_SYMBOL,
    OPEN_SYMBOL,
    WALL_SYMBOL,
)

RGB = Tuple[int, int, int]

DEFAULT_PALETTE: Dict[RGB, str] = {
    (0, 0, 0): WALL_SYMBOL,
    (255, 255, 255): OPEN_SYMBOL,
    (0, 255, 0): ELF_SYMBOL,
    (255, 0, 0): GOBLIN_SYMBOL,
}


class ImageBoardError(BoardError):
    """Raised when an image pixel does not map to a known cell."""


def image_to_text(
    image: Image.Image,
    *,
    palette: Optional[Dict[RGB, str]] = None,
    size: Optional[Tuple[int, int]] = None,
) -> str:
    colours = DEFAULT_PALETTE if palette is None else palette
    img = image.convert("RGB")
    if size is not None:
        img = img.resize(size, Image.NEAREST)
    width, height = img.size
    pixels = img.load()

    rows = []
    for y in range(height):
        row = []
        for x in range(width):
            rgb = pixels[x, y]
            symbol = colours.get(rgb)
            if symbol is None:
                raise ImageBoardError(f"unknown colour {rgb} at pixel ({x}, {y})")
            row.append(symbol)
        rows.append("".join(row))
    return "\n".join(rows)


def load_board_image(
    path: Union[str, Path],
    *,
    palette: Optional[Dict[RGB, str]] = None,
    size: Optional[Tuple[int, int]] = None,
    hit_points: int = DEFAULT_HIT_POINTS,
    attack_power: int = DEFAULT_ATTACK_POWER,
) -> Board:
    image_path = Path(path)
    if not image_path.exists():
        raise FileNotFoundError(f"Missing board image {image_path}")
    with Image.open(image_path) as image:
        text = image_to_text(image, palette=palette, size=size)
    return parse_board(text, hit_points=hit_points, attack_power=attack_power)


def board_to_text(board: Board) -> str:
    """Map symbols only, in the text format ``parse_board`` reads."""
    return board.render(hit_points=False)


__all__ = ["DEFAULT_PALETTE", "ImageBoardError", "board_to_text", "image_to_text", "load_board_image"]
