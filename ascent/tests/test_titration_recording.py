"""Tests for screen-time recording and retention."""

from datetime import timedelta

from ascent.features.titration.engine import classify_minutes, record_screen_time
from ascent.features.titration.sources import ManualScreenTimeSource
from ascent.tests.factories import screen_entry


class TestClassify:
    def test_drain_and_recharge_substrings(self):
        drain, recharge = classify_minutes({"Instagram": 30, "YouTube Kids": 15, "Headspace": 10, "Maps": 5})
        assert drain == 45
        assert recharge == 10

    def test_case_insensitive(self):
        assert classify_minutes({"TIKTOK": 12}) == (12, 0)


class TestRecordScreenTime:
    def test_new_entry(self, fixed_today):
        history = record_screen_time({"TikTok": 40, "Calm": 10, "Maps": 5}, fixed_today)
        assert len(history) == 1
        entry = history[0]
        assert entry.date == "2026-03-18"
        assert entry.total_minutes == 55
        assert (entry.drain_minutes, entry.recharge_minutes) == (40, 10)
        assert entry.per_app == {"TikTok": 40, "Calm": 10, "Maps": 5}

    def test_same_day_is_replaced(self, fixed_today):
        first = record_screen_time({"TikTok": 40}, fixed_today)
        second = record_screen_time({"TikTok": 10}, fixed_today, first)
        assert len(second) == 1
        assert second[0].drain_minutes == 10
        assert first[0].drain_minutes == 40

    def test_explicit_total(self, fixed_today):
        history = record_screen_time({"TikTok": 40}, fixed_today, total_minutes=180)
        assert history[0].total_minutes == 180

    def test_history_sorted_and_windowed(self, fixed_today):
        history = [screen_entry(fixed_today - timedelta(days=offset), 30) for offset in range(1, 101)]
        result = record_screen_time({"Reddit": 20}, fixed_today, history)

        assert len(result) == 90
        assert result[0].date == (fixed_today - timedelta(days=89)).isoformat()
        assert result[-1].date == fixed_today.isoformat()
        assert len(history) == 100

    def test_backfill_uses_today_for_eviction(self, fixed_today):
        old_day = fixed_today - timedelta(days=120)
        assert record_screen_time({"Reddit": 20}, old_day, today=fixed_today) == ()


class TestManualSource:
    def test_usage_for_day(self, fixed_today):
        source = ManualScreenTimeSource({fixed_today: {"TikTok": 15}})
        assert source.usage_for(fixed_today) == {"TikTok": 15}
        assert source.usage_for(fixed_today - timedelta(days=1)) is None

        source.set_usage(fixed_today, {"Reddit": 5})
        assert source.usage_for(fixed_today) == {"Reddit": 5}

    def test_manual_entries_accumulate(self, fixed_today):
        source = ManualScreenTimeSource()
        source.add_minutes(fixed_today, "TikTok", 10)
        source.add_minutes(fixed_today, "TikTok", 15)
        source.add_minutes(fixed_today, "Calm", 5)
        assert source.usage_for(fixed_today) == {"TikTok": 25, "Calm": 5}
