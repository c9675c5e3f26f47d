"""
Read access to identities.
"""

from typing import List, Optional

from sqlalchemy import asc, select
from sqlalchemy.orm import Session

from dormtrack.models.enums import UserRole
from dormtrack.models.user import User
from dormtrack.repositories.base_repository import BaseRepository


class UserRepository(BaseRepository[User]):

    def __init__(self, session: Session):
        super().__init__(User, session)

    def find_role_locked(self, user_id: str) -> Optional[UserRole]:
        """
        Current role of ``user_id``, read with a shared row lock so it
        cannot change before the enclosing transaction commits.

        SQLite has no row locks and ignores the clause.
        """
        stmt = select(User.role).where(User.id == user_id).with_for_update(read=True)
        return self.session.execute(stmt).scalar_one_or_none()

    def list_by_role(self, role: UserRole) -> List[User]:
        stmt = select(User).where(User.role == role).order_by(asc(User.full_name), asc(User.id))
        return list(self.session.execute(stmt).scalars().all())
