"""
Tests for model.py - the game engine.

Covers the lifecycle state machine, tick movement / collision / growth,
the no-reversal rule, and the delayed leaderboard hand-off at game over.
"""

import random
from unittest.mock import Mock

import pytest

from gridsnake.config import (
    TICK_MS, HIGHSCORE_CHECK_DELAY_MS,
    STATE_WAITING, STATE_PLAYING, STATE_PAUSED, STATE_OVER,
)
from gridsnake.leaderboard import HighScoreRecord, Leaderboard, MemoryStore
from gridsnake.model import ALL_DIRS, Direction, GameModel, Snake, initial_layout


def _playing(model, body, direction, food=(19, 19)):
    """Start the game and place the snake and food by hand."""
    model.start()
    model.snake = Snake(body, direction)
    model.food = food
    return model


def _crash(model, scheduler, score=0):
    """Drive the snake into the top wall with the given score."""
    _playing(model, [(3, 0)], Direction.UP)
    model.score = score
    model.tick()
    assert model.state == STATE_OVER


class TestDirection:
    """Direction value object."""

    def test_cardinals(self):
        assert [d.as_tuple() for d in ALL_DIRS] == [(1, 0), (-1, 0), (0, 1), (0, -1)]
        assert all(d.is_cardinal for d in ALL_DIRS)
        assert not Direction(1, 1).is_cardinal
        assert not Direction(0, 0).is_cardinal

    def test_immutable(self):
        with pytest.raises(AttributeError):
            Direction.UP.x = 5

    def test_blocked_by_same_axis(self):
        assert Direction.LEFT.blocked_by(Direction.RIGHT)
        assert Direction.RIGHT.blocked_by(Direction.RIGHT)
        assert not Direction.UP.blocked_by(Direction.RIGHT)


class TestLifecycle:
    """start / toggle_pause / reset transitions."""

    @pytest.mark.parametrize("grid_size", [2, 3, 4, 5, 8, 20, 31])
    def test_initial_layout_fits_grid(self, leaderboard, scheduler, grid_size):
        model = GameModel(leaderboard, scheduler, grid_size=grid_size)
        (head,) = model.snake.body
        for x, y in (head, model.food):
            assert 0 <= x < grid_size and 0 <= y < grid_size
        assert model.food != head

    def test_initial_layout_moves_food_off_centre(self):
        assert initial_layout(2) == (((1, 1),), (0, 0))
        assert initial_layout(20) == (((10, 10),), (15, 15))

    @pytest.mark.parametrize("grid_size", [0, 1, -3])
    def test_degenerate_grid_rejected(self, leaderboard, scheduler, grid_size):
        with pytest.raises(ValueError):
            GameModel(leaderboard, scheduler, grid_size=grid_size)

    def test_small_grid_game_stays_on_board(self, leaderboard, scheduler):
        model = GameModel(leaderboard, scheduler, rng=random.Random(3), grid_size=6)
        model.start()
        scheduler.advance(TICK_MS)
        assert model.snake.head == (3, 2)
        assert model.state == STATE_PLAYING

    def test_initial_state(self, model):
        snap = model.snapshot()
        assert snap.state == STATE_WAITING
        assert snap.snake == ((10, 10),)
        assert snap.food == (15, 15)
        assert snap.direction == (0, -1)
        assert snap.score == 0
        assert snap.pending_high_score is None

    def test_start_only_from_waiting(self, model):
        model.start()
        assert model.state == STATE_PLAYING
        model.toggle_pause()
        model.start()
        assert model.state == STATE_PAUSED

    def test_toggle_pause_round_trip(self, model):
        model.start()
        model.toggle_pause()
        assert model.state == STATE_PAUSED
        model.toggle_pause()
        assert model.state == STATE_PLAYING

    @pytest.mark.parametrize("state", [STATE_WAITING, STATE_OVER])
    def test_toggle_pause_ignored_outside_play(self, model, state):
        model.state = state
        model.toggle_pause()
        assert model.state == state

    def test_ticks_delivered_while_playing(self, model, scheduler):
        model.start()
        scheduler.advance(TICK_MS - 1)
        assert model.snake.head == (10, 10)
        scheduler.advance(1)
        assert model.snake.head == (10, 9)
        scheduler.advance(TICK_MS)
        scheduler.advance(TICK_MS)
        assert model.snake.head == (10, 7)

    def test_long_frame_moves_one_cell(self, model, scheduler):
        model.start()
        scheduler.advance(TICK_MS * 8)
        assert model.snake.head == (10, 9)
        # Turn lands before the next step.
        model.set_direction(Direction.LEFT)
        scheduler.advance(TICK_MS)
        assert model.snake.head == (9, 9)

    def test_pause_suspends_ticks(self, model, scheduler):
        model.start()
        model.toggle_pause()
        scheduler.advance(TICK_MS * 5)
        assert model.snake.head == (10, 10)
        model.toggle_pause()
        scheduler.advance(TICK_MS)
        assert model.snake.head == (10, 9)

    def test_tick_ignored_unless_playing(self, model):
        model.tick()
        assert model.snake.head == (10, 10)
        model.start()
        model.toggle_pause()
        model.tick()
        assert model.snake.head == (10, 10)

    @pytest.mark.parametrize("setup", ["playing", "paused", "over"])
    def test_reset_restores_initial_values(self, model, scheduler, setup):
        _playing(model, [(5, 5), (4, 5), (3, 5)], Direction.RIGHT, food=(6, 5))
        model.tick()
        model.set_direction(Direction.DOWN)
        if setup == "paused":
            model.toggle_pause()
        elif setup == "over":
            model.snake = Snake([(19, 0)], Direction.RIGHT)
            model.tick()

        model.reset()

        assert model.state == STATE_WAITING
        assert list(model.snake.body) == [(10, 10)]
        assert model.food == (15, 15)
        assert model.direction == Direction.UP
        assert model.score == 0
        scheduler.advance(TICK_MS * 10)
        assert model.snake.head == (10, 10)

    def test_close_releases_timers(self, model, scheduler):
        model.start()
        model.close()
        assert scheduler.pending == 0


class TestSetDirection:
    """No 180° reversal; last valid request before a tick wins."""

    def test_reversal_rejected(self, model):
        _playing(model, [(5, 5), (4, 5)], Direction.RIGHT)
        model.set_direction(Direction.LEFT)
        assert model.direction == Direction.RIGHT
        model.tick()
        assert model.snake.head == (6, 5)

    def test_perpendicular_accepted(self, model):
        _playing(model, [(5, 5), (4, 5)], Direction.RIGHT)
        model.set_direction(Direction.UP)
        model.tick()
        assert model.snake.head == (5, 4)

    def test_last_valid_request_wins(self, model):
        _playing(model, [(5, 5), (4, 5)], Direction.RIGHT)
        model.set_direction(Direction.UP)
        model.set_direction(Direction.DOWN)   # reverses the buffered UP
        assert model.direction == Direction.UP

    def test_checked_against_buffered_heading(self, model):
        # RIGHT -> UP -> LEFT within one tick lands LEFT, straight into the neck.
        _playing(model, [(5, 5), (4, 5), (3, 5)], Direction.RIGHT)
        model.set_direction(Direction.UP)
        model.set_direction(Direction.LEFT)
        assert model.direction == Direction.LEFT
        model.tick()
        assert model.state == STATE_OVER

    def test_buffered_while_paused(self, model):
        _playing(model, [(5, 5)], Direction.RIGHT)
        model.toggle_pause()
        model.set_direction(Direction.DOWN)
        model.toggle_pause()
        model.tick()
        assert model.snake.head == (5, 6)

    @pytest.mark.parametrize("state", [STATE_WAITING, STATE_OVER])
    def test_ignored_outside_play(self, model, state):
        model.state = state
        model.set_direction(Direction.LEFT)
        assert model.direction == Direction.UP

    def test_non_cardinal_ignored(self, model):
        _playing(model, [(5, 5)], Direction.RIGHT)
        model.set_direction(Direction(1, 1))
        model.set_direction(Direction(0, 0))
        assert model.direction == Direction.RIGHT


class TestTick:
    """Movement, growth and collisions."""

    def test_plain_move_keeps_length(self, model):
        _playing(model, [(5, 5), (4, 5), (3, 5)], Direction.RIGHT)
        model.tick()
        assert list(model.snake.body) == [(6, 5), (5, 5), (4, 5)]
        assert model.score == 0

    def test_eating_grows_and_scores(self, model):
        _playing(model, [(5, 5), (4, 5), (3, 5)], Direction.RIGHT, food=(6, 5))
        model.tick()
        assert list(model.snake.body) == [(6, 5), (5, 5), (4, 5), (3, 5)]
        assert model.score == 10
        assert model.food not in model.snake.body
        assert 0 <= model.food[0] < 20 and 0 <= model.food[1] < 20

    @pytest.mark.parametrize("head,direction", [
        ((0, 7), Direction.LEFT),
        ((19, 7), Direction.RIGHT),
        ((7, 0), Direction.UP),
        ((7, 19), Direction.DOWN),
    ])
    def test_wall_collision_ends_game_without_moving(self, model, head, direction):
        _playing(model, [head], direction)
        model.score = 40
        model.tick()
        assert model.state == STATE_OVER
        assert list(model.snake.body) == [head]
        assert model.score == 40

    def test_self_collision(self, model):
        # Heading LEFT from (5,5) lands on (4,5), the 4th of 5 segments.
        body = [(5, 5), (5, 6), (4, 6), (4, 5), (4, 4)]
        _playing(model, body, Direction.LEFT)
        model.tick()
        assert model.state == STATE_OVER
        assert list(model.snake.body) == body

    def test_moving_into_vacating_tail_is_a_collision(self, model):
        # The tail at (4,5) would leave this tick, but the pre-move body still counts.
        body = [(5, 5), (5, 6), (4, 6), (4, 5)]
        _playing(model, body, Direction.LEFT)
        model.tick()
        assert model.state == STATE_OVER
        assert list(model.snake.body) == body

    def test_no_ticks_after_game_over(self, model, scheduler):
        model.start()
        model.snake = Snake([(10, 0)], Direction.UP)
        scheduler.advance(TICK_MS)
        assert model.state == STATE_OVER
        scheduler.advance(TICK_MS * 5)
        assert list(model.snake.body) == [(10, 0)]

    def test_board_full_ends_game(self, scheduler):
        board = Leaderboard(MemoryStore())
        small = GameModel(board, scheduler, rng=random.Random(0), grid_size=2)
        _playing(small, [(1, 1), (1, 0), (0, 0)], Direction.LEFT, food=(0, 1))
        small.tick()
        assert small.state == STATE_OVER
        assert small.score == 10
        assert len(small.snake) == 4

    def test_invariants_hold_over_long_game(self, leaderboard, scheduler):
        rng = random.Random(7)
        model = GameModel(leaderboard, scheduler, rng=random.Random(99))
        model.start()
        for _ in range(3000):
            if model.state != STATE_PLAYING:
                break
            # Greedy toward the food, avoiding immediate death when possible.
            hx, hy = model.snake.head
            fx, fy = model.food
            options = sorted(ALL_DIRS, key=lambda d: abs(hx + d.x - fx) + abs(hy + d.y - fy))
            safe = [d for d in options
                    if 0 <= hx + d.x < 20 and 0 <= hy + d.y < 20
                    and not model.snake.occupies(hx + d.x, hy + d.y)]
            model.set_direction(safe[0] if safe else rng.choice(ALL_DIRS))
            before = len(model.snake)
            score = model.score
            model.tick()
            if model.state != STATE_PLAYING:
                break
            body = list(model.snake.body)
            assert len(set(body)) == len(body)
            assert model.food not in body
            if model.score > score:
                assert len(body) == before + 1
                assert model.score == score + 10
            else:
                assert len(body) == before
        assert model.score > 0


class TestHighScoreCheck:
    """Delayed leaderboard hand-off after game over."""

    def test_prompt_after_delay(self, leaderboard, scheduler):
        name_entry = Mock()
        model = GameModel(leaderboard, scheduler, name_entry=name_entry)
        _crash(model, scheduler, score=30)
        assert model.pending_high_score is None
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS - 1)
        name_entry.assert_not_called()
        scheduler.advance(1)
        name_entry.assert_called_once_with(30)
        assert model.pending_high_score == 30

    def test_checked_once_per_game(self, leaderboard, scheduler):
        name_entry = Mock()
        model = GameModel(leaderboard, scheduler, name_entry=name_entry)
        _crash(model, scheduler, score=30)
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS * 10)
        model.skip_name_entry()
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS * 10)
        name_entry.assert_called_once()

    def test_uses_score_frozen_at_collision(self, model, scheduler):
        _crash(model, scheduler, score=30)
        model.score = 999
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS)
        assert model.pending_high_score == 30

    def test_zero_score_never_prompts(self, leaderboard, scheduler):
        name_entry = Mock()
        model = GameModel(leaderboard, scheduler, name_entry=name_entry)
        _crash(model, scheduler, score=0)
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS)
        name_entry.assert_not_called()
        assert model.pending_high_score is None

    def test_reset_before_check_cancels_it(self, leaderboard, scheduler):
        name_entry = Mock()
        model = GameModel(leaderboard, scheduler, name_entry=name_entry)
        _crash(model, scheduler, score=30)
        model.reset()
        model.start()
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS)
        name_entry.assert_not_called()
        assert model.pending_high_score is None

    def test_submit_commits_record(self, model, scheduler, leaderboard, today):
        _crash(model, scheduler, score=30)
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS)
        record = model.submit_name("  Ada  ")
        assert record == HighScoreRecord("Ada", 30, today.isoformat())
        assert leaderboard.records == (record,)
        assert model.pending_high_score is None

    def test_blank_name_keeps_prompt_open(self, model, scheduler, leaderboard):
        _crash(model, scheduler, score=30)
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS)
        assert model.submit_name("   ") is None
        assert model.pending_high_score == 30
        assert len(leaderboard) == 0

    def test_skip_discards_candidate(self, model, scheduler, leaderboard):
        _crash(model, scheduler, score=30)
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS)
        model.skip_name_entry()
        assert model.pending_high_score is None
        assert len(leaderboard) == 0

    def test_submit_without_candidate_is_ignored(self, model, leaderboard):
        assert model.submit_name("Ada") is None
        assert len(leaderboard) == 0

    def test_non_qualifying_score_not_offered(self, store, scheduler):
        board = Leaderboard(store)
        for i, score in enumerate([500, 400, 300, 200, 100]):
            board.accept(f"p{i}", score, "d")
        name_entry = Mock()
        model = GameModel(board, scheduler, name_entry=name_entry)
        _crash(model, scheduler, score=100)
        scheduler.advance(HIGHSCORE_CHECK_DELAY_MS)
        name_entry.assert_not_called()


class TestListeners:
    """Snapshots are pushed to listeners on every change."""

    def test_listener_sees_transitions(self, model):
        states = []
        model.add_listener(lambda snap: states.append(snap.state))
        model.start()
        model.toggle_pause()
        model.toggle_pause()
        model.reset()
        assert states == [STATE_PLAYING, STATE_PAUSED, STATE_PLAYING, STATE_WAITING]

    def test_snapshot_includes_leaderboard(self, model, leaderboard):
        leaderboard.accept("Ada", 70, "d")
        snap = model.snapshot()
        assert snap.best == 70
        assert snap.high_scores == leaderboard.records
