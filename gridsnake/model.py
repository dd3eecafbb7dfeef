"""
model.py — Model layer.

Owns ALL game state and rules. Zero rendering, zero input handling.
Exposes a clean API for the Controller to read/write.

Classes:
    Direction     — immutable (dx, dy) value object
    Snake         — body and buffered heading
    GameSnapshot  — read-only state handed to the view and listeners
    GameModel     — the engine: lifecycle, tick, leaderboard hand-off
"""

import datetime
import logging
import random
from collections import deque
from typing import Callable, Iterable, NamedTuple, Optional

from .config import (
    GRID_SIZE, TICK_MS, HIGHSCORE_CHECK_DELAY_MS, SCORE_PER_FOOD,
    INITIAL_DIRECTION,
    STATE_WAITING, STATE_PLAYING, STATE_PAUSED, STATE_OVER,
)
from .leaderboard import HighScoreRecord, Leaderboard
from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

Position = tuple[int, int]


def initial_layout(grid_size: int) -> tuple[tuple[Position, ...], Position]:
    """Starting snake and food: head in the centre, food toward the far corner."""
    centre = (grid_size // 2, grid_size // 2)
    food = (grid_size * 3 // 4, grid_size * 3 // 4)
    if food == centre:
        food = (0, 0)
    return (centre,), food


# ─────────────────────────── Direction ───────────────────────────
class Direction:
    """Immutable 2-D unit direction."""
    LEFT  = None  # filled below after class definition
    RIGHT = None
    UP    = None
    DOWN  = None

    __slots__ = ("x", "y")

    def __init__(self, x: int, y: int):
        object.__setattr__(self, "x", x)
        object.__setattr__(self, "y", y)

    def __setattr__(self, key, value):
        raise AttributeError("Direction is immutable")

    @property
    def is_cardinal(self) -> bool:
        return (abs(self.x), abs(self.y)) in ((1, 0), (0, 1))

    def is_opposite(self, other: "Direction") -> bool:
        return self.x == -other.x and self.y == -other.y

    def blocked_by(self, current: "Direction") -> bool:
        """True if turning to self would move along current's axis."""
        return (current.x != 0 and self.x != 0) or (current.y != 0 and self.y != 0)

    def as_tuple(self) -> Position:
        return (self.x, self.y)

    def __eq__(self, other):
        return isinstance(other, Direction) and self.x == other.x and self.y == other.y

    def __hash__(self):
        return hash((self.x, self.y))

    def __repr__(self):
        return f"Direction({self.x}, {self.y})"


Direction.LEFT  = Direction(-1,  0)
Direction.RIGHT = Direction( 1,  0)
Direction.UP    = Direction( 0, -1)
Direction.DOWN  = Direction( 0,  1)
ALL_DIRS = [Direction.RIGHT, Direction.LEFT, Direction.DOWN, Direction.UP]


# ──────────────────────────── Snake ──────────────────────────────
class Snake:
    """
    Pure body data. Head at index 0.
    The heading is the one that will be applied on the next step;
    turns are validated against it, not against the last move drawn.
    """

    def __init__(self, body: Iterable[Position], direction: Direction):
        self.body: deque[Position] = deque(body)
        self.dir: Direction = direction

    # ── Accessors ────────────────────────────────────────────────
    @property
    def head(self) -> Position:
        return self.body[0]

    def __len__(self) -> int:
        return len(self.body)

    # ── Commands ─────────────────────────────────────────────────
    def request_direction(self, new_dir: Direction) -> bool:
        """Buffer a turn; ignored if it would reverse (or repeat) the heading."""
        if not new_dir.is_cardinal or new_dir.blocked_by(self.dir):
            return False
        self.dir = new_dir
        return True

    def next_head(self) -> Position:
        hx, hy = self.head
        return (hx + self.dir.x, hy + self.dir.y)

    def advance(self, new_head: Position, grow: bool) -> None:
        self.body.appendleft(new_head)
        if not grow:
            self.body.pop()

    # ── Queries ──────────────────────────────────────────────────
    def occupies(self, x: int, y: int) -> bool:
        return (x, y) in self.body


# ───────────────────────── GameSnapshot ──────────────────────────
class GameSnapshot(NamedTuple):
    snake: tuple[Position, ...]
    food: Position
    direction: Position
    state: str
    score: int
    high_scores: tuple[HighScoreRecord, ...]
    best: int
    pending_high_score: Optional[int]


# ─────────────────────────── GameModel ───────────────────────────
class GameModel:
    """
    Top-level model. Owns all game state.

    The scheduler delivers tick() every TICK_MS while playing; the
    controller forwards input as set_direction() / toggle_pause().
    At game over the final score is checked against the leaderboard
    after a short delay; a qualifying score is offered to `name_entry`
    and committed by submit_name() or dropped by skip_name_entry().
    """

    def __init__(
        self,
        leaderboard: Leaderboard,
        scheduler: Scheduler,
        rng: Optional[random.Random] = None,
        name_entry: Optional[Callable[[int], None]] = None,
        grid_size: int = GRID_SIZE,
        today: Callable[[], datetime.date] = datetime.date.today,
    ):
        self.leaderboard = leaderboard
        self.scheduler = scheduler
        if grid_size < 2:
            raise ValueError(f"grid_size must be >= 2, got {grid_size}")
        self.rng = rng or random.Random()
        self.name_entry = name_entry
        self.grid_size = grid_size
        self.today = today

        self.state: str = STATE_WAITING
        self.snake: Snake = None
        self.food: Position = None
        self.score: int = 0
        self.pending_high_score: Optional[int] = None

        self._tick_timer: Optional[TimerHandle] = None
        self._check_timer: Optional[TimerHandle] = None
        self._checked: bool = False
        self._listeners: list[Callable[[GameSnapshot], None]] = []
        self._reset_entities()

    # ── Public API ───────────────────────────────────────────────
    @property
    def direction(self) -> Direction:
        return self.snake.dir

    def start(self) -> None:
        if self.state != STATE_WAITING:
            return
        self.state = STATE_PLAYING
        self._start_ticking()
        logger.debug("game started")
        self._notify()

    def toggle_pause(self) -> None:
        if self.state == STATE_PLAYING:
            self.state = STATE_PAUSED
            self._stop_ticking()
        elif self.state == STATE_PAUSED:
            self.state = STATE_PLAYING
            self._start_ticking()
        else:
            return
        logger.debug("state -> %s", self.state)
        self._notify()

    def set_direction(self, requested: Direction) -> None:
        if self.state not in (STATE_PLAYING, STATE_PAUSED):
            return
        if self.snake.request_direction(requested):
            self._notify()

    def tick(self) -> None:
        """Advance the snake one cell."""
        if self.state != STATE_PLAYING:
            return

        nx, ny = self.snake.next_head()
        if not (0 <= nx < self.grid_size and 0 <= ny < self.grid_size):
            self._game_over("wall")
            return
        # Checked against the whole pre-move body, tail included.
        if self.snake.occupies(nx, ny):
            self._game_over("self")
            return

        ate = (nx, ny) == self.food
        self.snake.advance((nx, ny), grow=ate)
        if ate:
            self.score += SCORE_PER_FOOD
            if len(self.snake) >= self.grid_size * self.grid_size:
                self._game_over("board full")
                return
            self.food = self._spawn_food()
        self._notify()

    def reset(self) -> None:
        self._stop_ticking()
        self._cancel_check()
        self.pending_high_score = None
        self._reset_entities()
        self.state = STATE_WAITING
        logger.debug("game reset")
        self._notify()

    def close(self) -> None:
        """Release every timer this model owns."""
        self._stop_ticking()
        self._cancel_check()
        self._listeners.clear()

    # ── Name entry ───────────────────────────────────────────────
    def submit_name(self, name: str) -> Optional[HighScoreRecord]:
        if self.pending_high_score is None:
            return None
        record = self.leaderboard.accept(name, self.pending_high_score, self.today())
        if record is None:
            return None  # blank name: keep the prompt open
        self.pending_high_score = None
        self._notify()
        return record

    def skip_name_entry(self) -> None:
        if self.pending_high_score is None:
            return
        logger.debug("high score %d skipped", self.pending_high_score)
        self.pending_high_score = None
        self._notify()

    # ── Observation ──────────────────────────────────────────────
    def add_listener(self, callback: Callable[[GameSnapshot], None]) -> None:
        self._listeners.append(callback)

    def snapshot(self) -> GameSnapshot:
        return GameSnapshot(
            snake=tuple(self.snake.body),
            food=self.food,
            direction=self.snake.dir.as_tuple(),
            state=self.state,
            score=self.score,
            high_scores=self.leaderboard.records,
            best=self.leaderboard.best,
            pending_high_score=self.pending_high_score,
        )

    # ── Private helpers ──────────────────────────────────────────
    def _reset_entities(self) -> None:
        body, self.food = initial_layout(self.grid_size)
        self.snake = Snake(body, Direction(*INITIAL_DIRECTION))
        self.score = 0
        self._checked = False

    def _spawn_food(self) -> Position:
        while True:
            pos = (self.rng.randrange(self.grid_size), self.rng.randrange(self.grid_size))
            if not self.snake.occupies(*pos):
                return pos

    def _game_over(self, reason: str) -> None:
        self.state = STATE_OVER
        self._stop_ticking()
        logger.info("game over (%s), score %d", reason, self.score)
        if not self._checked:
            self._check_timer = self.scheduler.call_later(
                HIGHSCORE_CHECK_DELAY_MS, self._check_high_score, self.score,
            )
        self._notify()

    def _check_high_score(self, final_score: int) -> None:
        self._check_timer = None
        if self._checked or self.state != STATE_OVER:
            return
        self._checked = True
        if not self.leaderboard.qualifies(final_score):
            return
        self.pending_high_score = final_score
        if self.name_entry is not None:
            self.name_entry(final_score)
        self._notify()

    def _start_ticking(self) -> None:
        self._stop_ticking()
        self._tick_timer = self.scheduler.call_every(TICK_MS, self.tick)

    def _stop_ticking(self) -> None:
        if self._tick_timer is not None:
            self._tick_timer.cancel()
            self._tick_timer = None

    def _cancel_check(self) -> None:
        if self._check_timer is not None:
            self._check_timer.cancel()
            self._check_timer = None

    def _notify(self) -> None:
        if not self._listeners:
            return
        snap = self.snapshot()
        for callback in list(self._listeners):
            callback(snap)
