"""
Aggregation reporters.

Derived, read-only views over reports in a UTC window ``[start, end)``:
counts per status, counts per day and average lifecycle durations.

Duration rules:
    response = received_at - created_at
    work     = resolved_at - started_at
    total    = resolved_at - created_at

A report contributes to a metric only when both timestamps are set and
the difference is not negative; excluded reports count in neither the
sum nor the divisor. A metric with no contributing report averages to 0.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from dormtrack.core.constants import DEFAULT_TIMING_LIMIT, MAX_TIMING_LIMIT, MIN_TIMING_LIMIT
from dormtrack.core.exceptions import ValidationError
from dormtrack.core.pagination import clamp_limit, normalize_pagination, paginate_items
from dormtrack.core.security import Identity
from dormtrack.core.utils import as_utc, ms_between, parse_date_only, start_of_utc_day, utc_now
from dormtrack.db.read_mode import ReadMode
from dormtrack.db.session import Database
from dormtrack.models.enums import ReportStatus
from dormtrack.repositories.analytics_repository import ReportAnalyticsRepository
from dormtrack.schemas.stats import (
    DailyCount,
    DateRange,
    StatusStatsResponse,
    TimingDetailsResponse,
    TimingHuman,
    TimingResponse,
    TimingRow,
    TimingSummary,
)
from dormtrack.services.common import permissions

logger = logging.getLogger(__name__)

MS_PER_MINUTE = 60_000


def safe_avg(total_ms: int, count: int) -> int:
    """Average rounded half up to whole milliseconds; 0 when ``count`` is 0."""
    if not count:
        return 0
    return (2 * total_ms + count) // (2 * count)


def ms_to_minutes(ms: int) -> int:
    return ms // MS_PER_MINUTE


def _non_negative_diff(start: Optional[datetime], end: Optional[datetime]) -> Optional[int]:
    if start is None or end is None:
        return None
    diff = ms_between(start, end)
    return diff if diff >= 0 else None


@dataclass
class _Accumulator:
    total_ms: int = 0
    count: int = 0

    def add(self, value: Optional[int]) -> None:
        if value is not None:
            self.total_ms += value
            self.count += 1

    @property
    def average(self) -> int:
        return safe_avg(self.total_ms, self.count)


@dataclass
class DurationAverages:
    response: _Accumulator = field(default_factory=_Accumulator)
    work: _Accumulator = field(default_factory=_Accumulator)
    total: _Accumulator = field(default_factory=_Accumulator)


def row_durations(row) -> Tuple[Optional[int], Optional[int], Optional[int]]:
    """(response, work, total) in ms for one row, None where excluded."""
    return (
        _non_negative_diff(row.created_at, row.received_at),
        _non_negative_diff(row.started_at, row.resolved_at),
        _non_negative_diff(row.created_at, row.resolved_at),
    )


def summarize(rows: Iterable) -> TimingSummary:
    """Counts and duration averages over ``rows``."""
    summary = TimingSummary()
    averages = DurationAverages()

    for row in rows:
        summary.total += 1
        if row.status == ReportStatus.SELESAI:
            summary.finished += 1
        elif row.status == ReportStatus.DITOLAK:
            summary.rejected += 1
        elif row.status == ReportStatus.DIKERJAKAN:
            summary.in_progress += 1
        if row.received_at is not None:
            summary.received += 1

        response, work, total = row_durations(row)
        averages.response.add(response)
        averages.work.add(work)
        averages.total.add(total)

    summary.avg_response_ms = averages.response.average
    summary.avg_work_ms = averages.work.average
    summary.avg_total_ms = averages.total.average
    return summary


def resolve_range(
    date_from: Optional[str],
    date_to: Optional[str],
    today: date,
    default_days: int = 7,
) -> Tuple[datetime, datetime]:
    """
    Turn ``YYYY-MM-DD`` query values into a half-open UTC window.

    ``date_to`` names the last day included, so the window ends at the
    following midnight. Missing or malformed values fall back to the last
    ``default_days`` days ending today.
    """
    start_day = parse_date_only(date_from) or today - timedelta(days=default_days - 1)
    end_day = parse_date_only(date_to) or today
    start = start_of_utc_day(start_day)
    end = start_of_utc_day(end_day + timedelta(days=1))
    if end <= start:
        raise ValidationError(
            "Date range is empty",
            field_errors={"to": ["must not be before from"]},
        )
    return start, end


def daily_counts(created: Iterable[datetime], start: datetime, end: datetime) -> List[DailyCount]:
    """Per-day report counts, one entry for every day in the window."""
    counts: Dict[date, int] = {}
    for ts in created:
        day = as_utc(ts).date()
        counts[day] = counts.get(day, 0) + 1

    days: List[DailyCount] = []
    day = start.date()
    while start_of_utc_day(day) < end:
        days.append(DailyCount(day=day, total=counts.get(day, 0)))
        day += timedelta(days=1)
    return days


def _timing_row(row) -> TimingRow:
    response, work, total = row_durations(row)
    return TimingRow(
        id=row.id,
        title=row.title,
        category=row.category,
        status=row.status,
        created_at=as_utc(row.created_at),
        received_at=as_utc(row.received_at) if row.received_at else None,
        started_at=as_utc(row.started_at) if row.started_at else None,
        resolved_at=as_utc(row.resolved_at) if row.resolved_at else None,
        response_ms=response,
        work_ms=work,
        total_ms=total,
    )


class ReportAnalyticsService:
    """
    Admin dashboards. Every method takes a read mode; by default these
    reads go to the secondary store.
    """

    def __init__(
        self,
        database: Database,
        default_range_days: int = 7,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._db = database
        self._default_range_days = default_range_days
        self._clock = clock

    def _range(self, date_from: Optional[str], date_to: Optional[str]) -> Tuple[datetime, datetime]:
        today = as_utc(self._clock()).date()
        return resolve_range(date_from, date_to, today, self._default_range_days)

    def status_stats(
        self,
        actor: Identity,
        mode: ReadMode,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
    ) -> StatusStatsResponse:
        permissions.VIEW_STATS.require_role(actor)
        start, end = self._range(date_from, date_to)

        with self._db.reading(mode) as session:
            repo = ReportAnalyticsRepository(session)
            found = repo.status_counts(start, end)
            created = repo.created_timestamps(start, end)

        per_status = {status: found.get(status, 0) for status in ReportStatus}
        return StatusStatsResponse(
            mode=mode,
            range=DateRange(start=start, end=end),
            per_status=per_status,
            per_day=daily_counts(created, start, end),
        )

    def timing(
        self,
        actor: Identity,
        mode: ReadMode,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> TimingResponse:
        """
        Summary over every report in range plus the newest ``limit`` rows.
        """
        permissions.VIEW_STATS.require_role(actor)
        start, end = self._range(date_from, date_to)
        limit = clamp_limit(limit, DEFAULT_TIMING_LIMIT, MIN_TIMING_LIMIT, MAX_TIMING_LIMIT)

        with self._db.reading(mode) as session:
            rows = ReportAnalyticsRepository(session).timing_rows(start, end)

        summary = summarize(rows)
        logger.debug("Timing summary over %d reports", summary.total)
        return TimingResponse(
            mode=mode,
            range=DateRange(start=start, end=end),
            limit=limit,
            summary=summary,
            human=TimingHuman(
                avg_response_min=ms_to_minutes(summary.avg_response_ms),
                avg_work_min=ms_to_minutes(summary.avg_work_ms),
                avg_total_min=ms_to_minutes(summary.avg_total_ms),
            ),
            reports=[_timing_row(r) for r in rows[:limit]],
        )

    def timing_details(
        self,
        actor: Identity,
        mode: ReadMode,
        date_from: Optional[str] = None,
        date_to: Optional[str] = None,
        page: Optional[int] = None,
        page_size: Optional[int] = None,
    ) -> TimingDetailsResponse:
        permissions.VIEW_STATS.require_role(actor)
        start, end = self._range(date_from, date_to)
        params = normalize_pagination(page, page_size)

        with self._db.reading(mode) as session:
            rows, total = ReportAnalyticsRepository(session).timing_page(
                start, end, params.offset, params.limit,
            )

        page_data = paginate_items(
            items=rows,
            total_items=total,
            params=params,
            mapper=_timing_row,
        )
        return TimingDetailsResponse(
            mode=mode,
            range=DateRange(start=start, end=end),
            items=page_data.items,
            meta=page_data.meta,
        )
