"""
config.py — Shared constants for the entire application.
No game logic, no imports from internal modules.
"""

import os
from pathlib import Path

# ── Grid & Timing ─────────────────────────────────────────────────
GRID_SIZE       = 20
TICK_MS         = 150        # one simulation step
HIGHSCORE_CHECK_DELAY_MS = 100
FPS             = 60

# ── Window ────────────────────────────────────────────────────────
CELL            = 20
PANEL_H         = 60
GAME_W = GAME_H = GRID_SIZE * CELL
SIDE_W          = 190        # high-score table
OFFSET_X        = 10
OFFSET_Y        = PANEL_H + 10
SIDE_X          = OFFSET_X + GAME_W + 10
WIDTH           = SIDE_X + SIDE_W + 10
HEIGHT          = OFFSET_Y + GAME_H + 10

# ── Colors ────────────────────────────────────────────────────────
BG          = (24,  24,  27)
BOARD_BG    = (20,  83,  45)
GRID_COL    = (21,  128, 61)
SNAKE_COL   = (74,  222, 128)
HEAD_COL    = (134, 239, 172)
SNAKE_DIM   = (22,  101, 52)
FOOD_COL    = (250, 204, 21)
UI_COL      = (134, 239, 172)
TITLE_COL   = (74,  222, 128)
BLACK       = (0,   0,   0)
PANEL_BG    = (18,  18,  21)
BORDER_COL  = (75,  85,  99)

# ── Gameplay ──────────────────────────────────────────────────────
SCORE_PER_FOOD    = 10
INITIAL_DIRECTION = (0, -1)  # up

# ── High scores ───────────────────────────────────────────────────
MAX_HIGH_SCORES = 5
MAX_NAME_LEN    = 15
HIGHSCORE_KEY   = "snake-high-scores"
STORAGE_PATH    = Path(
    os.environ.get("GRIDSNAKE_STORAGE",
                   Path.home() / ".gridsnake" / "storage.json")
)

# ── Logging ───────────────────────────────────────────────────────
LOG_LEVEL = os.environ.get("GRIDSNAKE_LOG_LEVEL", "INFO").upper()

# ── Game States ───────────────────────────────────────────────────
STATE_WAITING = "waiting"
STATE_PLAYING = "playing"
STATE_PAUSED  = "paused"
STATE_OVER    = "gameOver"
