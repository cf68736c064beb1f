import argparse
from pathlib import Path

from skirmish.board_image import board_to_text, load_board_image

ROOT = Path(__file__).parent
IMG_PATH = ROOT / "data" / "board.png"      # one pixel per cell
BOARD_PATH = ROOT / "data" / "board.txt"    # text map output


def convert(img_path: Path = IMG_PATH, board_path: Path = BOARD_PATH) -> Path:
    board = load_board_image(img_path)
    board_path.parent.mkdir(parents=True, exist_ok=True)
    board_path.write_text(board_to_text(board) + "\n", encoding="utf-8")
    print(f"Board converted -> {board_path} ({board.summary()})")
    return board_path


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Convert a board image to a text map")
    parser.add_argument("image", nargs="?", type=Path, default=IMG_PATH)
    parser.add_argument("output", nargs="?", type=Path, default=BOARD_PATH)
    args = parser.parse_args()
    convert(args.image, args.output)
