"""Tests for the level/phase driver shared by the island games."""

from __future__ import annotations

from math_islands.games.core.progression import Phase, ProgressionDriver


class FakeReporter:
    def __init__(self, result=True, exc=None):
        self.calls = []
        self.result = result
        self.exc = exc

    def __call__(self, island_id, score):
        self.calls.append((island_id, score))
        if self.exc is not None:
            raise self.exc
        return self.result


# ---------------------------------------------------------------------------
# Levels
# ---------------------------------------------------------------------------

class TestLevels:
    def test_win_then_advance(self):
        d = ProgressionDriver(island_id=1, completion_level=3)
        assert d.record_win(140) is Phase.WON
        assert d.score == 140
        assert d.advance() is Phase.IN_LEVEL
        assert d.level == 2

    def test_advance_only_from_won(self):
        d = ProgressionDriver(island_id=1)
        d.advance()
        assert d.level == 1
        assert d.phase is Phase.IN_LEVEL

    def test_second_win_in_same_level_ignored(self):
        d = ProgressionDriver(island_id=1, completion_level=3)
        d.record_win(100)
        d.record_win(100)
        assert d.score == 100
        assert d.levels_won == 1


# ---------------------------------------------------------------------------
# Completion
# ---------------------------------------------------------------------------

class TestCompletion:
    def test_reported_exactly_once(self):
        rep = FakeReporter()
        d = ProgressionDriver(island_id=1, completion_level=2, reporter=rep)
        d.record_win(200)
        d.advance()
        assert rep.calls == []
        d.record_win(140)
        d.record_win(140)
        d.advance()
        assert d.phase is Phase.COMPLETED
        assert rep.calls == [(1, 340)]
        assert d.persisted is True
        assert d.redirect_after_ms == 2500

    def test_failed_save_still_completes(self):
        rep = FakeReporter(result=False)
        d = ProgressionDriver(island_id=2, completion_level=1, reporter=rep)
        d.record_win(110)
        assert d.phase is Phase.COMPLETED
        assert d.persisted is False
        assert d.redirect_after_ms is None
        assert len(rep.calls) == 1

    def test_reporter_exception_still_completes(self):
        rep = FakeReporter(exc=RuntimeError("db down"))
        d = ProgressionDriver(island_id=1, completion_level=1, reporter=rep)
        d.record_win(200)
        assert d.phase is Phase.COMPLETED
        assert d.persisted is False
        assert d.redirect_after_ms is None

    def test_no_reporter(self):
        d = ProgressionDriver(island_id=1, completion_level=1)
        d.record_win(200)
        assert d.phase is Phase.COMPLETED
        assert d.persisted is None

    def test_custom_redirect_delay(self):
        d = ProgressionDriver(island_id=1, completion_level=1, reporter=FakeReporter(), redirect_delay_ms=10)
        d.record_win(100)
        assert d.redirect_after_ms == 10

    def test_restart_allows_new_report(self):
        rep = FakeReporter()
        d = ProgressionDriver(island_id=1, completion_level=1, reporter=rep)
        d.record_win(100)
        d.restart()
        assert d.phase is Phase.IN_LEVEL
        assert (d.level, d.score, d.reported) == (1, 0, False)
        d.record_win(200)
        assert rep.calls == [(1, 100), (1, 200)]


# ---------------------------------------------------------------------------
# Lives variant
# ---------------------------------------------------------------------------

class TestLives:
    def test_misses_ignored_without_lives(self):
        d = ProgressionDriver(island_id=1)
        for _ in range(10):
            d.record_miss()
        assert d.phase is Phase.IN_LEVEL

    def test_game_over_is_not_reported(self):
        rep = FakeReporter()
        d = ProgressionDriver(island_id=3, lives=3, reporter=rep)
        d.record_miss()
        d.record_miss()
        assert d.lives_left == 1
        assert d.record_miss() is Phase.GAME_OVER
        assert d.lives_left == 0
        assert rep.calls == []
        assert d.record_win(100) is Phase.GAME_OVER

    def test_restart_restores_lives(self):
        d = ProgressionDriver(island_id=3, lives=2)
        d.record_miss()
        d.record_miss()
        d.restart()
        assert d.lives_left == 2
        assert d.phase is Phase.IN_LEVEL
