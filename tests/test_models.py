"""
Schema-level guarantees on the audit trail.
"""

import pytest
from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError

from dormtrack.models.enums import ReportStatus
from dormtrack.models.report import Report
from dormtrack.models.user import User

from factories import count_events


def _delete_user(database, user_id):
    with database.primary_session() as session:
        session.execute(delete(User).where(User.id == user_id))
        session.commit()


def _snapshot(database, report_id):
    with database.primary_session() as session:
        report = session.get(Report, report_id)
        return report.status, report.user_id, report.assigned_to_id, count_events(database, report_id)


@pytest.fixture
def resolved(lifecycle, new_report, admin, tech):
    report = new_report()
    lifecycle.receive(report.id, admin)
    lifecycle.assign(report.id, admin, tech.id)
    lifecycle.start(report.id, tech)
    lifecycle.resolve(report.id, tech)
    return report


@pytest.mark.parametrize("who", ["resident", "admin", "tech"])
def test_identity_with_history_cannot_be_deleted(database, users, resolved, who):
    before = _snapshot(database, resolved.id)

    with pytest.raises(IntegrityError):
        _delete_user(database, users[who].id)

    assert _snapshot(database, resolved.id) == before
    assert before == (ReportStatus.SELESAI, users["resident"].id, users["tech"].id, 5)


def test_identity_without_reports_can_be_deleted(database, users, resolved):
    _delete_user(database, users["tech2"].id)
    with database.primary_session() as session:
        assert session.get(User, users["tech2"].id) is None


def test_report_delete_still_removes_its_events(database, report_service, new_report, admin):
    report = new_report()
    report_service.delete(report.id, admin)

    assert count_events(database, report.id) == 0
