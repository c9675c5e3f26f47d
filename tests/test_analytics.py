"""
Aggregation reporters: averaging rules, date windows and daily counts.
"""

from datetime import date, timedelta

import pytest

from dormtrack.core.exceptions import ForbiddenError, ValidationError
from dormtrack.db.read_mode import ReadMode
from dormtrack.models.enums import ReportStatus
from dormtrack.services.report import ReportAnalyticsService
from dormtrack.services.report.report_analytics_service import (
    daily_counts,
    ms_to_minutes,
    resolve_range,
    safe_avg,
)

from factories import insert_report, utc

NOW = utc(2026, 3, 10, 12)
MINUTE = 60_000


@pytest.fixture
def stats(database):
    return ReportAnalyticsService(database, clock=lambda: NOW)


@pytest.fixture
def seeded(database, users):
    """
    Three reports on 8-9 March 2026 plus one outside that window.

    - finished: response 10 min, work 60 min, total 120 min
    - received: response 5 min
    - skewed:   received before it was created, so no response time
    """
    resident = users["resident"].id
    tech = users["tech"].id
    return {
        "finished": insert_report(
            database, resident, utc(2026, 3, 9, 8),
            status=ReportStatus.SELESAI,
            received_at=utc(2026, 3, 9, 8, 10),
            started_at=utc(2026, 3, 9, 9),
            resolved_at=utc(2026, 3, 9, 10),
            assigned_to_id=tech,
        ),
        "received": insert_report(
            database, resident, utc(2026, 3, 9, 9),
            status=ReportStatus.DIPROSES,
            received_at=utc(2026, 3, 9, 9, 5),
        ),
        "skewed": insert_report(
            database, resident, utc(2026, 3, 8, 10),
            status=ReportStatus.DIPROSES,
            received_at=utc(2026, 3, 8, 9),
        ),
        "outside": insert_report(database, resident, utc(2026, 3, 1, 10)),
    }


class TestSafeAvg:

    def test_empty_is_zero(self):
        assert safe_avg(0, 0) == 0
        assert safe_avg(1000, 0) == 0

    @pytest.mark.parametrize("total, count, expected", [
        (10, 2, 5),
        (5, 2, 3),
        (7, 3, 2),
        (8, 3, 3),
        (1, 2, 1),
    ])
    def test_rounds_half_up(self, total, count, expected):
        assert safe_avg(total, count) == expected

    def test_minutes_are_floored(self):
        assert ms_to_minutes(450_000) == 7
        assert ms_to_minutes(59_999) == 0


class TestResolveRange:

    def test_to_is_inclusive(self):
        start, end = resolve_range("2026-03-08", "2026-03-09", date(2026, 3, 10))
        assert start == utc(2026, 3, 8)
        assert end == utc(2026, 3, 10)

    def test_default_is_last_seven_days(self):
        start, end = resolve_range(None, None, date(2026, 3, 10))
        assert start == utc(2026, 3, 4)
        assert end == utc(2026, 3, 11)
        assert end - start == timedelta(days=7)

    def test_malformed_values_fall_back(self):
        assert resolve_range("08/03/2026", "2026-13-40", date(2026, 3, 10)) == resolve_range(
            None, None, date(2026, 3, 10),
        )

    def test_reversed_range_is_rejected(self):
        with pytest.raises(ValidationError):
            resolve_range("2026-03-09", "2026-03-01", date(2026, 3, 10))

    def test_single_day(self):
        start, end = resolve_range("2026-03-09", "2026-03-09", date(2026, 3, 10))
        assert end - start == timedelta(days=1)


def test_daily_counts_fill_empty_days():
    created = [utc(2026, 3, 8, 1), utc(2026, 3, 8, 23, 59), utc(2026, 3, 10, 5)]
    days = daily_counts(created, utc(2026, 3, 8), utc(2026, 3, 11))
    assert [(d.day, d.total) for d in days] == [
        (date(2026, 3, 8), 2),
        (date(2026, 3, 9), 0),
        (date(2026, 3, 10), 1),
    ]


class TestTiming:

    def test_averages_skip_negative_and_missing_durations(self, stats, seeded, admin):
        result = stats.timing(admin, ReadMode.STRONG, "2026-03-08", "2026-03-09")
        summary = result.summary

        assert summary.total == 3
        assert summary.finished == 1
        assert summary.received == 3
        assert summary.rejected == 0
        assert summary.in_progress == 0
        assert summary.avg_response_ms == (10 * MINUTE + 5 * MINUTE) // 2
        assert summary.avg_work_ms == 60 * MINUTE
        assert summary.avg_total_ms == 120 * MINUTE
        assert result.human.avg_response_min == 7
        assert result.human.avg_work_min == 60

        skewed = next(r for r in result.reports if r.id == seeded["skewed"])
        assert skewed.response_ms is None

    def test_empty_window_reports_zeros(self, stats, seeded, admin):
        result = stats.timing(admin, ReadMode.STRONG, "2026-02-01", "2026-02-02")
        assert result.summary.total == 0
        assert result.summary.avg_response_ms == 0
        assert result.summary.avg_work_ms == 0
        assert result.summary.avg_total_ms == 0
        assert result.reports == []

    def test_repeated_calls_agree(self, stats, seeded, admin):
        first = stats.timing(admin, ReadMode.STRONG, "2026-03-01", "2026-03-09")
        second = stats.timing(admin, ReadMode.STRONG, "2026-03-01", "2026-03-09")
        assert first.summary == second.summary
        assert [r.id for r in first.reports] == [r.id for r in second.reports]

    def test_summary_covers_rows_beyond_the_sample(self, database, stats, users, admin):
        for hour in range(12):
            insert_report(database, users["resident"].id, utc(2026, 3, 9, hour))

        result = stats.timing(admin, ReadMode.STRONG, "2026-03-09", "2026-03-09", limit=1)
        assert result.limit == 10
        assert len(result.reports) == 10
        assert result.summary.total == 12

    def test_limit_is_clamped(self, stats, seeded, admin):
        assert stats.timing(admin, ReadMode.STRONG, limit=None).limit == 50
        assert stats.timing(admin, ReadMode.STRONG, limit=5000).limit == 200

    def test_details_are_paged(self, database, stats, users, admin):
        for hour in range(6):
            insert_report(database, users["resident"].id, utc(2026, 3, 9, hour))

        result = stats.timing_details(admin, ReadMode.STRONG, "2026-03-09", "2026-03-09", page=2, page_size=5)
        assert result.meta.total_items == 6
        assert result.meta.total_pages == 2
        assert len(result.items) == 1

    def test_requires_admin(self, stats, resident, tech):
        for actor in (resident, tech):
            with pytest.raises(ForbiddenError):
                stats.timing(actor, ReadMode.STRONG)


class TestStatusStats:

    def test_counts_per_status_and_day(self, stats, seeded, admin):
        result = stats.status_stats(admin, ReadMode.WEAK, "2026-03-08", "2026-03-09")

        assert set(result.per_status) == set(ReportStatus)
        assert result.per_status[ReportStatus.DIPROSES] == 2
        assert result.per_status[ReportStatus.SELESAI] == 1
        assert result.per_status[ReportStatus.BARU] == 0
        assert [(d.day, d.total) for d in result.per_day] == [
            (date(2026, 3, 8), 1),
            (date(2026, 3, 9), 2),
        ]

    def test_default_window(self, stats, seeded, admin):
        result = stats.status_stats(admin, ReadMode.STRONG)
        assert result.range.start == utc(2026, 3, 4)
        assert result.range.end == utc(2026, 3, 11)
        assert len(result.per_day) == 7
        assert sum(result.per_status.values()) == 3
