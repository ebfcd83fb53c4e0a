"""
ascent/tests/test_titration_trends.py

Weekly cross-titration report: 8 Sunday-start weeks ending with the current
one, recent half (weeks 1-4) against the older half (weeks 5-8).
"""

from datetime import date

from ascent.features.titration.engine import cross_titration
from ascent.features.titration.tables import TitrationConfig
from ascent.models.habit import CompletionRecord
from ascent.tests.factories import days_from, screen_entry

FIRST_DAY = date(2026, 1, 25)   # Sunday, start of week 8
RECENT_START = date(2026, 2, 22)  # Sunday, start of week 4


def _scenario(today, old_drain, new_drain, old_both_done, new_both_done, start=FIRST_DAY):
    history = []
    completions = []
    for day in days_from(start, today):
        recent = day >= RECENT_START
        history.append(screen_entry(day, new_drain if recent else old_drain))
        completions.append(CompletionRecord(habit_id="h1", date=day.isoformat(), completed=True))
        completions.append(CompletionRecord(
            habit_id="h2", date=day.isoformat(), completed=new_both_done if recent else old_both_done,
        ))
    return history, completions


class TestStatus:
    def test_positive_shift(self, fixed_today):
        history, completions = _scenario(fixed_today, 120, 60, False, True)
        report = cross_titration(history, completions, fixed_today)

        assert report.has_enough_data is True
        assert report.status == "positive"
        assert report.message == "Cross-titration is working"
        assert report.drain_trend == -50
        assert report.completion_trend == 100
        assert report.recent_drain_avg == 60
        assert report.recent_completion_avg == 100
        assert report.insight.startswith("Drain app usage is down 50% while habit completion is up 100%.")

    def test_negative_shift(self, fixed_today):
        history, completions = _scenario(fixed_today, 60, 120, True, False)
        report = cross_titration(history, completions, fixed_today)
        assert report.status == "negative"
        assert report.insight.startswith("Screen time is up 100% and habits are down.")

    def test_building(self, fixed_today):
        history, completions = _scenario(fixed_today, 100, 100, False, True)
        report = cross_titration(history, completions, fixed_today)
        assert report.status == "building"
        assert report.drain_trend == 0
        assert "Completion rate is up 100%" in report.insight

    def test_neutral(self, fixed_today):
        history, completions = _scenario(fixed_today, 100, 100, True, True)
        report = cross_titration(history, completions, fixed_today)
        assert report.status == "neutral"
        assert report.message == "Building baseline"


class TestWeeks:
    def test_weekly_data_oldest_first(self, fixed_today):
        history, completions = _scenario(fixed_today, 120, 60, False, True)
        weeks = cross_titration(history, completions, fixed_today).weekly_data

        assert len(weeks) == 8
        assert (weeks[0].week_number, weeks[0].week_start) == (8, "2026-01-25")
        assert (weeks[-1].week_number, weeks[-1].week_start) == (1, "2026-03-15")
        assert weeks[0].completion_rate == 50
        assert weeks[-1].avg_drain_minutes == 60

    def test_monday_week_start(self, fixed_today):
        history, completions = _scenario(fixed_today, 100, 100, True, True)
        report = cross_titration(history, completions, fixed_today, TitrationConfig(week_start="monday"))
        assert report.weekly_data[-1].week_start == "2026-03-16"

    def test_empty_older_half_is_not_a_division_by_zero(self, fixed_today):
        history, completions = _scenario(fixed_today, 0, 90, False, True, start=date(2026, 3, 1))
        report = cross_titration(history, completions, fixed_today)
        assert report.has_enough_data is True
        assert report.drain_trend == 0
        assert report.completion_trend == 0
        assert report.status == "neutral"


class TestNotEnoughData:
    def test_needs_fourteen_days(self, fixed_today):
        history, completions = _scenario(fixed_today, 100, 100, True, True, start=date(2026, 3, 6))
        assert len(history) == 13

        report = cross_titration(history, completions, fixed_today)

        assert report.has_enough_data is False
        assert report.to_dict() == {
            "hasEnoughData": False,
            "message": "Track screen time for 2+ weeks to see cross-titration patterns.",
        }
