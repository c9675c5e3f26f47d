from dormtrack.db.base import Base
from dormtrack.db.read_mode import ReadMode, StoreRole, parse_read_mode, select_store
from dormtrack.db.session import Database

__all__ = [
    "Base",
    "Database",
    "ReadMode",
    "StoreRole",
    "parse_read_mode",
    "select_store",
]
