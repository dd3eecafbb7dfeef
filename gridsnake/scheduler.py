"""
scheduler.py — Timer collaborator.

A millisecond clock that the host loop advances explicitly
(the controller feeds it the frame delta from pygame's Clock).
Timers fire synchronously from advance(), in due-time order, so the
model never sees two callbacks at once.

Classes:
    TimerHandle — cancellable reference to a scheduled callback
    Scheduler   — owns the clock and the pending timers
"""

import itertools
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class TimerHandle:
    """Returned by Scheduler.call_later / call_every."""

    def __init__(
        self,
        due: float,
        interval: Optional[float],
        callback: Callable,
        args: tuple,
        seq: int,
    ):
        self.due = due
        self.interval = interval
        self.callback = callback
        self.args = args
        self.seq = seq
        self._cancelled = False
        self._finished = False

    @property
    def active(self) -> bool:
        return not (self._cancelled or self._finished)

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def __repr__(self):
        kind = "every" if self.interval is not None else "once"
        return f"TimerHandle({kind}, due={self.due}, active={self.active})"


class Scheduler:
    """
    Deterministic timer queue.

    A repeating timer fires at most once per advance(), so the host gets
    to handle input between two of its callbacks. A callback may cancel
    its own timer or schedule new ones.
    """

    def __init__(self):
        self.now: float = 0.0
        self._timers: list[TimerHandle] = []
        self._seq = itertools.count()

    # ── Scheduling ───────────────────────────────────────────────
    def call_later(self, delay_ms: float, callback: Callable, *args) -> TimerHandle:
        """Run callback(*args) once, delay_ms from now."""
        if delay_ms < 0:
            raise ValueError(f"delay must be >= 0, got {delay_ms}")
        return self._add(TimerHandle(self.now + delay_ms, None, callback, args, next(self._seq)))

    def call_every(self, interval_ms: float, callback: Callable, *args) -> TimerHandle:
        """Run callback(*args) every interval_ms, first call one interval from now."""
        if interval_ms <= 0:
            raise ValueError(f"interval must be > 0, got {interval_ms}")
        return self._add(
            TimerHandle(self.now + interval_ms, interval_ms, callback, args, next(self._seq))
        )

    def cancel_all(self) -> None:
        for timer in self._timers:
            timer.cancel()
        self._timers = []

    @property
    def pending(self) -> int:
        return sum(1 for t in self._timers if t.active)

    # ── Clock ────────────────────────────────────────────────────
    def advance(self, dt_ms: float) -> None:
        """Move the clock forward, firing every timer that falls due."""
        target = self.now + dt_ms
        while True:
            due = [t for t in self._timers if t.active and t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: (t.due, t.seq))
            self.now = timer.due
            if timer.interval is None:
                timer._finished = True
            else:
                # Once per frame; intervals missed by a long frame are dropped.
                timer.due += timer.interval
                while timer.due <= target:
                    timer.due += timer.interval
            timer.callback(*timer.args)
        self.now = target
        self._timers = [t for t in self._timers if t.active]

    # ── Private helpers ──────────────────────────────────────────
    def _add(self, timer: TimerHandle) -> TimerHandle:
        self._timers.append(timer)
        logger.debug("scheduled %r", timer)
        return timer
