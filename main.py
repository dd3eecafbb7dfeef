"""
main.py — Entry point.

Run with:
    python main.py

Requires:
    pip install pygame

Environment:
    GRIDSNAKE_STORAGE    — high-score file (default ~/.gridsnake/storage.json)
    GRIDSNAKE_LOG_LEVEL  — logging level (default INFO)
"""

import logging

from gridsnake.config import LOG_LEVEL
from gridsnake.controller import GameController


def main() -> None:
    logging.basicConfig(
        level=getattr(logging, LOG_LEVEL, logging.INFO),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    GameController().run()


if __name__ == "__main__":
    main()
