"""
ascent/tests/test_ratchet_target.py

Guardrails for target escalation: raise only on sustained consistency,
never lower without an explicit opt-in, one adjustment per cooldown.
"""

from datetime import timedelta

import pytest

from ascent.core.errors import ValidationError
from ascent.features.ratchet.strategies import FloorRaiseStrategy, TargetEscalationStrategy
from ascent.models.ratchet import RatchetBook, TargetRatchetState
from ascent.tests.factories import daily_completions, habit


@pytest.fixture
def strategy():
    return TargetEscalationStrategy()


@pytest.fixture
def reading():
    return habit("read", name="Read", unit="pages", target=5)


class TestCheckUp:
    def test_full_consistency_raises_target(self, strategy, reading, fixed_today):
        rows = daily_completions("read", fixed_today, 14)
        rec = strategy.check_up(reading, rows, RatchetBook(mode="target"), fixed_today)

        assert rec is not None
        assert rec.direction == "up"
        assert (rec.before, rec.after, rec.increment) == (5, 7, 2)
        assert rec.consistency == 100
        assert rec.message == "You've hit 100% consistency. Time to level up?"
        assert rec.recommendation == "5 → 7 pages"

    def test_needs_fourteen_recorded_days(self, strategy, reading, fixed_today):
        rows = daily_completions("read", fixed_today, 13)
        assert strategy.check_up(reading, rows, RatchetBook(mode="target"), fixed_today) is None

    def test_threshold_is_85_percent(self, strategy, reading, fixed_today):
        at_86 = daily_completions("read", fixed_today, 14, missed=[2, 9])
        at_79 = daily_completions("read", fixed_today, 14, missed=[2, 5, 9])
        assert strategy.check_up(reading, at_86, RatchetBook(mode="target"), fixed_today) is not None
        assert strategy.check_up(reading, at_79, RatchetBook(mode="target"), fixed_today) is None

    def test_cooldown_blocks_raise(self, strategy, reading, fixed_today):
        rows = daily_completions("read", fixed_today, 14)
        book = RatchetBook(mode="target", targets={
            "read": TargetRatchetState(
                habit_id="read", current_target=7, last_ratchet_date=(fixed_today - timedelta(days=3)).isoformat(),
            ),
        })
        assert strategy.check_up(reading, rows, book, fixed_today) is None

    def test_book_state_overrides_habit_target(self, strategy, reading, fixed_today):
        rows = daily_completions("read", fixed_today, 14)
        book = RatchetBook(mode="target", targets={"read": TargetRatchetState(habit_id="read", current_target=10)})
        rec = strategy.check_up(reading, rows, book, fixed_today)
        assert (rec.before, rec.after) == (10, 13)

    @pytest.mark.parametrize("current,expected", [(1, 2), (3, 4), (4, 6), (7, 9), (8, 11), (16, 21), (31, 36)])
    def test_increment_tiers(self, strategy, current, expected):
        assert current + strategy.increment_for(current) == expected


class TestCheckDown:
    def test_low_consistency_suggests_step_down(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 14, missed=range(3, 14))
        rec = strategy.check_down(habit("read", target=10), rows, RatchetBook(mode="target"), fixed_today)
        assert rec.direction == "down"
        assert (rec.before, rec.after) == (10, 8)
        assert rec.consistency == 21

    def test_target_of_one_has_nowhere_to_go(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 14, missed=range(3, 14))
        assert strategy.check_down(habit("read", target=1), rows, RatchetBook(mode="target"), fixed_today) is None

    def test_needs_seven_recorded_days(self, strategy, fixed_today):
        rows = daily_completions("read", fixed_today, 6, missed=range(6))
        assert strategy.check_down(habit("read", target=10), rows, RatchetBook(mode="target"), fixed_today) is None

    @pytest.mark.parametrize("current,expected", [(40, 35), (20, 17), (10, 8), (3, 2), (2, 1)])
    def test_step_down_tiers(self, strategy, current, expected):
        assert strategy.step_down_for(current) == expected


class TestApply:
    def test_apply_raise_updates_book_and_habit(self, strategy, reading, fixed_today):
        rows = daily_completions("read", fixed_today, 14)
        book = RatchetBook(mode="target")
        rec = strategy.check_up(reading, rows, book, fixed_today)

        new_book, new_habit = strategy.apply(book, reading, rec, fixed_today)

        assert new_habit.target_amount == 7
        state = new_book.targets["read"]
        assert state.current_target == 7
        assert state.last_ratchet_date == "2026-03-18"
        assert [(e.previous_target, e.new_target, e.direction) for e in state.events] == [(5, 7, "up")]
        assert book.targets == {}

    def test_second_apply_inside_cooldown_rejected(self, strategy, reading, fixed_today):
        rows = daily_completions("read", fixed_today, 14)
        book = RatchetBook(mode="target")
        rec = strategy.check_up(reading, rows, book, fixed_today)
        new_book, new_habit = strategy.apply(book, reading, rec, fixed_today)

        forced = strategy.check_up(new_habit, rows, RatchetBook(mode="target"), fixed_today)
        with pytest.raises(ValidationError):
            strategy.apply(new_book, new_habit, forced, fixed_today + timedelta(days=2))

    def test_downgrade_requires_opt_in(self, strategy, fixed_today):
        target_ten = habit("read", target=10)
        rows = daily_completions("read", fixed_today, 14, missed=range(3, 14))
        book = RatchetBook(mode="target")
        rec = strategy.check_down(target_ten, rows, book, fixed_today)

        with pytest.raises(ValidationError):
            strategy.apply(book, target_ten, rec, fixed_today)

        new_book, new_habit = strategy.apply(book, target_ten, rec, fixed_today, allow_downgrade=True)
        assert new_habit.target_amount == 8
        assert new_book.targets["read"].events[-1].direction == "down"

    def test_mode_mismatch_rejected(self, reading, fixed_today):
        rows = daily_completions("read", fixed_today, 14)
        floor_rec = FloorRaiseStrategy().check_up(reading, rows, RatchetBook(), fixed_today)
        with pytest.raises(ValidationError):
            TargetEscalationStrategy().apply(RatchetBook(mode="target"), reading, floor_rec, fixed_today)
