"""
Racing transitions on the same report: one caller wins, the rest see the
status it left behind.
"""

import threading

from dormtrack.core.exceptions import InvalidStateTransitionError
from dormtrack.models.enums import EventType, ReportStatus
from dormtrack.repositories.event_repository import ReportEventRepository
from dormtrack.repositories.report_repository import ReportRepository

from factories import count_events

RACERS = 4


def _race(target, args_list):
    barrier = threading.Barrier(len(args_list))
    outcomes = [None] * len(args_list)

    def run(index, args):
        barrier.wait()
        try:
            outcomes[index] = target(*args)
        except Exception as exc:
            outcomes[index] = exc

    threads = [threading.Thread(target=run, args=(i, a)) for i, a in enumerate(args_list)]
    for t in threads:
        t.start()
    for t in threads:
        t.join(timeout=60)
    return outcomes


def test_concurrent_receive_has_single_winner(database, lifecycle, new_report, admin):
    report = new_report()

    outcomes = _race(lifecycle.receive, [(report.id, admin)] * RACERS)

    winners = [o for o in outcomes if not isinstance(o, Exception)]
    losers = [o for o in outcomes if isinstance(o, Exception)]
    assert len(winners) == 1
    assert len(losers) == RACERS - 1
    assert all(isinstance(o, InvalidStateTransitionError) for o in losers)

    with database.primary_session() as session:
        stored = ReportRepository(session).find_by_id(report.id)
    assert stored.status == ReportStatus.DIPROSES
    assert count_events(database, report.id, EventType.RECEIVED) == 1


def test_concurrent_resolve_and_reject(database, lifecycle, new_report, admin, tech):
    report = new_report()
    lifecycle.receive(report.id, admin)
    lifecycle.assign(report.id, admin, tech.id)
    lifecycle.start(report.id, tech)

    outcomes = _race(
        lambda kind: lifecycle.resolve(report.id, tech) if kind == "resolve" else lifecycle.reject(report.id, admin),
        [("resolve",), ("reject",)],
    )

    winners = [o for o in outcomes if not isinstance(o, Exception)]
    assert len(winners) == 1
    assert isinstance([o for o in outcomes if isinstance(o, Exception)][0], InvalidStateTransitionError)

    with database.primary_session() as session:
        stored = ReportRepository(session).find_by_id(report.id)
        events = ReportEventRepository(session).list_for_report(report.id)
    assert stored.status == winners[0].status
    assert stored.status in (ReportStatus.SELESAI, ReportStatus.DITOLAK)
    terminal_events = [e for e in events if e.type in (EventType.RESOLVED, EventType.STATUS_CHANGED)]
    assert len(terminal_events) == 1
