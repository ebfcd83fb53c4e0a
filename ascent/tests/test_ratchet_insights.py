"""Tests for ratchet insights and the engine that runs a strategy over all habits."""

import logging
from datetime import timedelta

import pytest

from ascent.core.errors import NotFoundError
from ascent.features.ratchet.insights import generate_insight
from ascent.features.ratchet.service import RatchetEngine
from ascent.features.ratchet.strategies import FloorRaiseStrategy, TargetEscalationStrategy
from ascent.models.ratchet import RatchetBook, RatchetRecommendation
from ascent.tests.factories import daily_completions, habit


def _raise(mode, before, after):
    return RatchetRecommendation(
        habit_id="read", habit_name="Read", mode=mode, direction="up",
        before=before, after=after, consistency=90, message="",
    )


class TestGenerateInsight:
    def test_floor_raise_takes_precedence(self):
        insight = generate_insight("Read", 95, 50, recent_raise=_raise("floor", 50, 61))
        assert insight.type == "floor_raised"
        assert insight.tone == "acknowledgment"
        assert "61%" in insight.message

    def test_target_raise(self):
        insight = generate_insight("Read", 95, 0, recent_raise=_raise("target", 5, 7))
        assert insight.type == "target_raised"
        assert "7" in insight.message and "5" in insight.message

    def test_status_driven_insights(self):
        assert generate_insight("Read", 80, 60).type == "exceeding_floor"
        assert generate_insight("Read", 48, 60).tone == "supportive"
        assert generate_insight("Read", 30, 60).type == "rebuilding"

    def test_quiet_statuses(self):
        assert generate_insight("Read", 60, 60) is None
        assert generate_insight("Read", 90, 0) is None


class TestRatchetEngine:
    def test_next_recommendation_is_first_in_habit_order(self, fixed_today):
        engine = RatchetEngine(TargetEscalationStrategy())
        habits = [habit("walk", name="Walk", target=3), habit("read")]
        rows = daily_completions("read", fixed_today, 14) + daily_completions("walk", fixed_today, 14)

        rec = engine.next_recommendation(habits, rows, RatchetBook(mode="target"), fixed_today)

        assert rec.habit_id == "walk"
        assert len(engine.check_all(habits, rows, RatchetBook(mode="target"), fixed_today)) == 2

    def test_no_recommendation(self, fixed_today):
        engine = RatchetEngine(TargetEscalationStrategy())
        assert engine.next_recommendation([habit("read")], [], RatchetBook(mode="target"), fixed_today) is None

    def test_apply_replaces_habit(self, fixed_today):
        engine = RatchetEngine(TargetEscalationStrategy())
        habits = (habit("walk", target=3), habit("read"))
        rows = daily_completions("read", fixed_today, 14)
        rec = engine.next_recommendation(habits, rows, RatchetBook(mode="target"), fixed_today)

        book, new_habits = engine.apply(RatchetBook(), habits, rec, fixed_today)

        assert book.mode == "target"
        assert [h.target_amount for h in new_habits] == [3, 7]

    def test_apply_unknown_habit(self, fixed_today):
        engine = RatchetEngine(FloorRaiseStrategy())
        with pytest.raises(NotFoundError):
            engine.apply(RatchetBook(), [habit("walk")], _raise("floor", 0, 50), fixed_today)

    def test_mode_mismatch_is_logged(self, fixed_today, caplog):
        engine = RatchetEngine(FloorRaiseStrategy())
        with caplog.at_level(logging.WARNING, logger="ascent"):
            engine.check_all([habit("read")], [], RatchetBook(mode="target"), fixed_today)
        assert any(getattr(r, "event_type", None) == "ratchet.mode_mismatch" for r in caplog.records)

    def test_warnings_are_advisory(self, fixed_today):
        engine = RatchetEngine(FloorRaiseStrategy())
        book = RatchetBook(floors={"read": {"habitId": "read", "floor": 70}})
        rows = daily_completions("read", fixed_today, 14, missed=range(5, 14))

        found = engine.warnings([habit("read")], rows, book, fixed_today)

        assert [w.direction for w in found] == ["down"]
        assert book.floors["read"].floor == 70

    def test_insight_for_uses_book_floor(self, fixed_today):
        engine = RatchetEngine(FloorRaiseStrategy())
        book = RatchetBook(floors={"read": {"habitId": "read", "floor": 60}})
        rows = daily_completions("read", fixed_today - timedelta(days=1), 4)
        insight = engine.insight_for(habit("read"), rows, book, fixed_today)
        assert insight.type == "rebuilding"
