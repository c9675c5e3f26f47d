"""
Enumerations shared by the ORM models and the API schemas.

Values are the literal strings stored in the database and sent over the
wire, so they stay in the vocabulary the residents and staff use.
"""

import enum
from typing import FrozenSet


class UserRole(str, enum.Enum):
    """Identity role."""
    USER = "USER"
    ADMIN = "ADMIN"
    TEKNISI = "TEKNISI"


class ReportCategory(str, enum.Enum):
    """Facility area a report concerns."""
    AIR = "AIR"
    LISTRIK = "LISTRIK"
    WIFI = "WIFI"
    KEBERSIHAN = "KEBERSIHAN"
    FASILITAS_UMUM = "FASILITAS_UMUM"
    LAINNYA = "LAINNYA"


class ReportPriority(str, enum.Enum):
    """Reporter-declared urgency."""
    RENDAH = "RENDAH"
    SEDANG = "SEDANG"
    TINGGI = "TINGGI"


class ReportStatus(str, enum.Enum):
    """
    Workflow status.

    BARU -> DIPROSES -> DIKERJAKAN -> SELESAI, with DITOLAK reachable from
    any non-terminal status.
    """
    BARU = "BARU"
    DIPROSES = "DIPROSES"
    DIKERJAKAN = "DIKERJAKAN"
    SELESAI = "SELESAI"
    DITOLAK = "DITOLAK"

    @classmethod
    def terminal(cls) -> FrozenSet["ReportStatus"]:
        return frozenset({cls.SELESAI, cls.DITOLAK})

    @classmethod
    def open_statuses(cls) -> FrozenSet["ReportStatus"]:
        return frozenset(cls) - cls.terminal()


class EventType(str, enum.Enum):
    """Kind of audit entry appended by a transition."""
    REPORTED = "REPORTED"
    RECEIVED = "RECEIVED"
    ASSIGNED = "ASSIGNED"
    STARTED = "STARTED"
    RESOLVED = "RESOLVED"
    STATUS_CHANGED = "STATUS_CHANGED"
