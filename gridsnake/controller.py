"""
controller.py — Controller layer.

Responsibilities:
  - Own the pygame event loop and the frame clock.
  - Feed elapsed frame time into the Scheduler, which drives the
    model's tick timer and its delayed high-score check.
  - Translate raw keyboard events into model commands.
  - Collect the player's name when a score makes the leaderboard.
  - Tear the model down (timers included) when the window closes.

Know nothing about rendering details (that's the View's job).
Know nothing about game rules (that's the Model's job).

The controller is the only layer that reads pygame events.
"""

import logging
from typing import Optional

import pygame

from .config import WIDTH, HEIGHT, FPS, MAX_NAME_LEN, STORAGE_PATH, STATE_OVER, STATE_WAITING
from .leaderboard import JsonFileStore, Leaderboard
from .model import Direction, GameModel, GameSnapshot
from .scheduler import Scheduler
from .view import GameView

logger = logging.getLogger(__name__)

KEY_DIRECTIONS = {
    pygame.K_UP:    Direction.UP,
    pygame.K_DOWN:  Direction.DOWN,
    pygame.K_LEFT:  Direction.LEFT,
    pygame.K_RIGHT: Direction.RIGHT,
    pygame.K_w:     Direction.UP,
    pygame.K_s:     Direction.DOWN,
    pygame.K_a:     Direction.LEFT,
    pygame.K_d:     Direction.RIGHT,
}
PAUSE_KEYS   = (pygame.K_SPACE, pygame.K_p)
CONFIRM_KEYS = (pygame.K_RETURN, pygame.K_KP_ENTER)
QUIT_KEYS    = (pygame.K_q, pygame.K_ESCAPE)


class NameEntryPrompt:
    """Text buffer behind the high-score name dialog."""

    def __init__(self, max_len: int = MAX_NAME_LEN):
        self.max_len = max_len
        self.text: str = ""
        self.active: bool = False

    def open(self) -> None:
        self.text = ""
        self.active = True

    def close(self) -> None:
        self.text = ""
        self.active = False

    def type(self, chars: str) -> None:
        for ch in chars:
            if len(self.text) >= self.max_len:
                break
            if ch.isprintable():
                self.text += ch

    def backspace(self) -> None:
        self.text = self.text[:-1]

    @property
    def value(self) -> str:
        return self.text.strip()


class GameController:
    """
    Owns the main loop.
    Glues Model <-> View without them knowing about each other.
    """

    def __init__(self, store=None):
        pygame.init()
        self.screen    = pygame.display.set_mode((WIDTH, HEIGHT))
        pygame.display.set_caption("SNAKE")
        self.clock     = pygame.time.Clock()
        self.scheduler = Scheduler()
        self.prompt    = NameEntryPrompt()

        if store is None:
            store = JsonFileStore(STORAGE_PATH)
            logger.info("high scores stored in %s", STORAGE_PATH)
        self.leaderboard = Leaderboard(store)
        self.leaderboard.load()

        self.model = GameModel(self.leaderboard, self.scheduler,
                               name_entry=self._open_name_entry)
        self.model.add_listener(self._on_state_change)
        self.view  = GameView(self.screen)
        self.running = True

    # ── Public entry point ────────────────────────────────────────
    def run(self) -> None:
        """Start and run the game loop until the player quits."""
        try:
            while self.running:
                dt = self.clock.tick(FPS)
                self._handle_events()
                self.scheduler.advance(dt)
                self.view.render(self.model.snapshot(), self._prompt_text())
        finally:
            self.shutdown()

    def shutdown(self) -> None:
        self.model.close()
        self.scheduler.cancel_all()
        pygame.quit()

    # ── Event dispatch ────────────────────────────────────────────
    def _handle_events(self) -> None:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)
            elif event.type == pygame.TEXTINPUT:
                self.handle_text(event.text)

    def handle_key(self, key: int) -> None:
        if self.prompt.active:
            self._handle_prompt_keys(key)
            return

        if key in QUIT_KEYS:
            self.running = False
        elif key == pygame.K_r:
            self.model.reset()
        elif self.model.state == STATE_WAITING:
            if key in CONFIRM_KEYS or key == pygame.K_SPACE:
                self.model.start()
        elif self.model.state == STATE_OVER:
            if key in CONFIRM_KEYS:
                self.model.reset()
        elif key in KEY_DIRECTIONS:
            self.model.set_direction(KEY_DIRECTIONS[key])
        elif key in PAUSE_KEYS:
            self.model.toggle_pause()

    def handle_text(self, text: str) -> None:
        if self.prompt.active:
            self.prompt.type(text)

    # ── Name entry ────────────────────────────────────────────────
    def _handle_prompt_keys(self, key: int) -> None:
        if key in CONFIRM_KEYS:
            if self.prompt.value:
                self.model.submit_name(self.prompt.value)
        elif key == pygame.K_ESCAPE:
            self.model.skip_name_entry()
        elif key == pygame.K_BACKSPACE:
            self.prompt.backspace()

    def _open_name_entry(self, score: int) -> None:
        logger.debug("asking for a name for score %d", score)
        self.prompt.open()

    def _on_state_change(self, snap: GameSnapshot) -> None:
        if snap.pending_high_score is None and self.prompt.active:
            self.prompt.close()

    def _prompt_text(self) -> Optional[str]:
        return self.prompt.text if self.prompt.active else None
