"""
Shared fixtures.

Every test gets its own SQLite file database (file-backed so separate
connections, including the ones opened by worker threads, genuinely
contend). Five identities are seeded: two residents, one admin and two
technicians.
"""

from typing import Dict, Optional

import pytest

from dormtrack.config.settings import Settings
from dormtrack.core.security import Identity, create_access_token
from dormtrack.db.init_db import drop_db, init_db
from dormtrack.db.session import Database
from dormtrack.models.enums import ReportCategory, ReportPriority, UserRole
from dormtrack.models.user import User
from dormtrack.schemas.report import ReportCreate
from dormtrack.services.report import (
    ReportAnalyticsService,
    ReportLifecycleService,
    ReportService,
    TechnicianService,
)

from factories import TEST_SECRET

SEED_USERS = {
    "resident": dict(full_name="Budi Santoso", email="budi@example.com", role=UserRole.USER, room_number="A-101"),
    "resident2": dict(full_name="Siti Aminah", email="siti@example.com", role=UserRole.USER, room_number=None),
    "admin": dict(full_name="Admin Asrama", email="admin@example.com", role=UserRole.ADMIN, room_number=None),
    "tech": dict(full_name="Joko Teknisi", email="joko@example.com", role=UserRole.TEKNISI, room_number=None),
    "tech2": dict(full_name="Agus Teknisi", email="agus@example.com", role=UserRole.TEKNISI, room_number=None),
}


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(
        ENVIRONMENT="test",
        DEBUG=False,
        DATABASE_URL=f"sqlite:///{tmp_path / 'primary.db'}",
        REPLICA_DATABASE_URL=None,
        JWT_SECRET_KEY=TEST_SECRET,
        LOG_LEVEL="WARNING",
        LOG_TO_FILE=False,
        SENTRY_DSN=None,
        ADMIN_DELETE_ANY_STATUS=True,
    )


@pytest.fixture
def database(settings):
    db = Database(settings.get_database_url(), None, settings)
    init_db(db.primary_engine)
    yield db
    drop_db(db.primary_engine)
    db.dispose()


def _seed(db: Database) -> Dict[str, User]:
    created: Dict[str, User] = {}
    with db.primary_session() as session:
        for key, fields in SEED_USERS.items():
            user = User(**fields)
            session.add(user)
            created[key] = user
        session.commit()
    return created


@pytest.fixture
def users(database) -> Dict[str, User]:
    return _seed(database)


@pytest.fixture
def identities(users) -> Dict[str, Identity]:
    return {key: Identity.from_user(user) for key, user in users.items()}


@pytest.fixture
def resident(identities) -> Identity:
    return identities["resident"]


@pytest.fixture
def admin(identities) -> Identity:
    return identities["admin"]


@pytest.fixture
def tech(identities) -> Identity:
    return identities["tech"]


@pytest.fixture
def tech2(identities) -> Identity:
    return identities["tech2"]


@pytest.fixture
def lifecycle(database) -> ReportLifecycleService:
    return ReportLifecycleService(database.session_factory)


@pytest.fixture
def report_service(database, settings) -> ReportService:
    return ReportService(database, settings)


@pytest.fixture
def analytics(database) -> ReportAnalyticsService:
    return ReportAnalyticsService(database)


@pytest.fixture
def technicians(database) -> TechnicianService:
    return TechnicianService(database)


@pytest.fixture
def new_report(report_service, resident):
    """Factory filing a valid report as ``resident`` (or another USER)."""

    def _create(actor: Optional[Identity] = None, **overrides):
        payload = dict(
            category=ReportCategory.AIR,
            title="Keran bocor",
            description="Keran di kamar mandi lantai dua bocor terus.",
            priority=ReportPriority.SEDANG,
            location="Kamar mandi lt. 2",
        )
        payload.update(overrides)
        return report_service.create(actor or resident, ReportCreate(**payload))

    return _create


@pytest.fixture
def tokens(users) -> Dict[str, str]:
    return {key: create_access_token(user, TEST_SECRET) for key, user in users.items()}
