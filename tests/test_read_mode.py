"""
Read-mode routing between the primary and the secondary store.
"""

import pytest

from dormtrack.core.exceptions import ValidationError
from dormtrack.db.init_db import init_db
from dormtrack.db.read_mode import ReadMode, StoreRole, parse_read_mode, select_store
from dormtrack.db.session import Database
from dormtrack.services.report import ReportAnalyticsService, ReportService


class TestSelectStore:

    @pytest.mark.parametrize("has_secondary", [True, False])
    def test_strong_always_primary(self, has_secondary):
        assert select_store(ReadMode.STRONG, has_secondary) is StoreRole.PRIMARY

    @pytest.mark.parametrize("mode", [ReadMode.EVENTUAL, ReadMode.WEAK])
    def test_relaxed_modes_use_secondary(self, mode):
        assert select_store(mode, True) is StoreRole.SECONDARY

    @pytest.mark.parametrize("mode", [ReadMode.EVENTUAL, ReadMode.WEAK])
    def test_relaxed_modes_fall_back_without_secondary(self, mode):
        assert select_store(mode, False) is StoreRole.PRIMARY


class TestParseReadMode:

    @pytest.mark.parametrize("raw, expected", [
        ("strong", ReadMode.STRONG),
        ("EVENTUAL", ReadMode.EVENTUAL),
        (" weak ", ReadMode.WEAK),
        (ReadMode.WEAK, ReadMode.WEAK),
    ])
    def test_known_values(self, raw, expected):
        assert parse_read_mode(raw) is expected

    @pytest.mark.parametrize("raw", [None, "", "   "])
    def test_missing_uses_default(self, raw):
        assert parse_read_mode(raw, "weak") is ReadMode.WEAK
        assert parse_read_mode(raw) is ReadMode.STRONG

    def test_unknown_value(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_read_mode("fresh")
        assert "mode" in exc_info.value.field_errors


@pytest.fixture
def replicated(settings, tmp_path, users):
    """Same primary file as ``database`` plus an empty, never-synced secondary."""
    db = Database(
        settings.get_database_url(),
        f"sqlite:///{tmp_path / 'secondary.db'}",
        settings,
    )
    init_db(db.secondary_engine)
    yield db
    db.dispose()


class TestRouting:

    def test_weak_list_reads_stale_secondary(self, replicated, settings, new_report, resident):
        new_report()
        service = ReportService(replicated, settings)

        weak = service.list_reports(resident, ReadMode.WEAK)
        assert weak.items == []
        assert weak.meta.total_items == 0

        strong = service.list_reports(resident, ReadMode.STRONG)
        assert strong.meta.total_items == 1

    @pytest.mark.parametrize("mode", [ReadMode.EVENTUAL, ReadMode.WEAK])
    def test_fallback_to_primary_is_transparent(self, database, settings, new_report, resident, admin, mode):
        new_report()
        listing = ReportService(database, settings).list_reports(resident, mode)
        timing = ReportAnalyticsService(database).timing(admin, mode)

        assert listing.meta.total_items == 1
        assert timing.summary.total == 1
        # The response echoes the requested mode and names no store.
        assert listing.mode is mode
        assert timing.mode is mode
        assert "served_by" not in listing.model_dump()
        assert "served_by" not in timing.model_dump()

    def test_stats_on_stale_secondary(self, replicated, new_report, admin):
        new_report()
        service = ReportAnalyticsService(replicated)

        weak = service.timing(admin, ReadMode.WEAK)
        assert weak.summary.total == 0

        strong = service.timing(admin, ReadMode.STRONG)
        assert strong.summary.total == 1

    def test_detail_reads_ignore_secondary(self, replicated, settings, new_report, resident):
        report = new_report()
        detail = ReportService(replicated, settings).get_detail(report.id, resident)
        assert detail.report.id == report.id
