import datetime
import os
import random

import pytest

# pygame must never open a real window or audio device under test
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")
os.environ.setdefault("SDL_AUDIODRIVER", "dummy")

from gridsnake.leaderboard import Leaderboard, MemoryStore  # noqa: E402
from gridsnake.model import GameModel  # noqa: E402
from gridsnake.scheduler import Scheduler  # noqa: E402

TODAY = datetime.date(2024, 3, 14)


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def leaderboard(store):
    board = Leaderboard(store)
    board.load()
    return board


@pytest.fixture
def scheduler():
    return Scheduler()


@pytest.fixture
def model(leaderboard, scheduler):
    return GameModel(leaderboard, scheduler, rng=random.Random(1234), today=lambda: TODAY)


@pytest.fixture
def today():
    return TODAY
