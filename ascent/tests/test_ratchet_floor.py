"""
ascent/tests/test_ratchet_floor.py

Guardrails for the consistency floor: it only rises, never above 85%,
and at most once per cooldown.
"""

from datetime import timedelta

import pytest

from ascent.core.errors import ConfigError, ValidationError
from ascent.features.ratchet.strategies import (
    FloorRaiseStrategy,
    TargetEscalationStrategy,
    floor_status,
    should_suggest_easy_mode,
    strategy_for_mode,
)
from ascent.models.ratchet import FloorRatchetState, FloorRecord, RatchetBook
from ascent.tests.factories import daily_completions, habit


@pytest.fixture
def strategy():
    return FloorRaiseStrategy()


def _book(floor, last_raised=None, window=14, history=()):
    return RatchetBook(
        mode="floor",
        consistency_window=window,
        floors={"read": FloorRatchetState(habit_id="read", floor=floor, last_raised=last_raised, history=history)},
    )


class TestShouldRaise:
    def test_raise_to_ninety_percent_of_consistency(self, strategy, fixed_today):
        # 17 of 25 days -> 68%, clears 50 + 15
        rows = daily_completions("read", fixed_today, 25, missed=range(17, 25))
        book = _book(50, last_raised=(fixed_today - timedelta(days=10)).isoformat(), window=25)

        decision = strategy.should_raise_floor("read", rows, book, fixed_today)

        assert decision.should_raise is True
        assert decision.consistency == 68
        assert (decision.current_floor, decision.new_floor) == (50, 61)

    def test_below_margin_no_raise(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 25, missed=range(16, 25))
        decision = strategy.should_raise_floor("read", rows, _book(50, window=25), fixed_today)
        assert decision.consistency == 64
        assert decision.should_raise is False
        assert decision.new_floor == 50

    def test_floor_capped_at_85(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 14)
        decision = strategy.should_raise_floor("read", rows, RatchetBook(), fixed_today)
        assert decision.new_floor == 85

    def test_cooldown_blocks_raise(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 14)
        book = _book(50, last_raised=(fixed_today - timedelta(days=3)).isoformat())
        assert strategy.should_raise_floor("read", rows, book, fixed_today).should_raise is False

    def test_check_up_builds_recommendation(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 25, missed=range(17, 25))
        book = _book(50, window=25)
        rec = strategy.check_up(habit("read"), rows, book, fixed_today)
        assert rec.mode == "floor"
        assert rec.recommendation == "50% → 61% floor"
        assert rec.message == "Your Read consistency has been solid. Your new baseline is 61%."


class TestApply:
    def test_apply_records_history(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 25, missed=range(17, 25))
        book = _book(50, window=25)
        rec = strategy.check_up(habit("read"), rows, book, fixed_today)

        new_book, same_habit = strategy.apply(book, habit("read"), rec, fixed_today)

        state = new_book.floors["read"]
        assert state.floor == 61
        assert state.last_raised == "2026-03-18"
        assert state.history[-1] == FloorRecord(date="2026-03-18", floor=61)
        assert same_habit.target_amount == 5

    def test_history_keeps_last_ten(self, strategy, fixed_today):
        history = tuple(FloorRecord(date=f"2025-01-{d:02d}", floor=d) for d in range(1, 11))
        book = _book(10, history=history)
        rows = daily_completions("read", fixed_today, 14)
        rec = strategy.check_up(habit("read"), rows, book, fixed_today)

        new_book, _ = strategy.apply(book, habit("read"), rec, fixed_today)

        kept = new_book.floors["read"].history
        assert len(kept) == 10
        assert kept[0].date == "2025-01-02"
        assert kept[-1].floor == 85

    def test_floor_never_moves_down(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 10, missed=range(4, 10))
        book = _book(60, window=10)
        warning = strategy.check_down(habit("read"), rows, book, fixed_today)
        with pytest.raises(ValidationError):
            strategy.apply(book, habit("read"), warning, fixed_today, allow_downgrade=True)


class TestSlippingWarning:
    def test_warns_when_more_than_ten_below(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 10, missed=range(4, 10))
        warning = strategy.check_down(habit("read"), rows, _book(60, window=10), fixed_today)
        assert warning.direction == "down"
        assert warning.before == warning.after == 60
        assert warning.consistency == 40

    def test_no_warning_inside_band(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 10, missed=range(5, 10))
        assert strategy.check_down(habit("read"), rows, _book(60, window=10), fixed_today) is None

    def test_no_warning_without_floor(self, strategy, fixed_today):
        assert strategy.check_down(habit("read"), [], RatchetBook(), fixed_today) is None


class TestFloorStatus:
    @pytest.mark.parametrize("consistency,floor,expected", [
        (50, 0, "building"),
        (75, 60, "exceeding"),
        (65, 60, "solid"),
        (55, 60, "maintaining"),
        (45, 60, "slipping"),
        (44, 60, "rebuilding"),
    ])
    def test_bands(self, consistency, floor, expected):
        assert floor_status(consistency, floor).status == expected

    def test_easy_mode_suggestions(self):
        assert should_suggest_easy_mode(90, 60, 35) is True
        assert should_suggest_easy_mode(55, 60, 80) is True
        assert should_suggest_easy_mode(45, 0, 80) is True
        assert should_suggest_easy_mode(80, 60, 80) is False


class TestStrategySelection:
    def test_modes(self, test_settings):
        assert isinstance(strategy_for_mode("floor"), FloorRaiseStrategy)
        assert isinstance(strategy_for_mode("target", test_settings), TargetEscalationStrategy)

    def test_unknown_mode(self):
        with pytest.raises(ConfigError):
            strategy_for_mode("sideways")
