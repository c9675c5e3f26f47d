"""
Identity resolution.

Authentication itself (login, password hashing, token issuance to end
users) lives outside this service. What arrives here is a signed JWT
whose payload carries ``userId``, ``role`` and ``email``; the resolver
verifies it and re-loads the user from the primary store so the role
used for authorization is the current one.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, Optional, Protocol

import jwt
from sqlalchemy.orm import Session

from dormtrack.core.exceptions import UnauthenticatedError
from dormtrack.models.enums import UserRole
from dormtrack.models.user import User

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_LIFETIME = timedelta(days=7)


@dataclass(frozen=True)
class Identity:
    """
    Authenticated caller as seen by the service layer.

    Attributes:
        id: User identifier
        role: Role at resolution time
        email: Login email
        full_name: Display name
        room_number: Dormitory room, residents only
    """
    id: str
    role: UserRole
    email: str
    full_name: str = ""
    room_number: Optional[str] = None

    @classmethod
    def from_user(cls, user: User) -> "Identity":
        return cls(
            id=user.id,
            role=user.role,
            email=user.email,
            full_name=user.full_name,
            room_number=user.room_number,
        )

    def has_role(self, role: UserRole) -> bool:
        return self.role == role

    def has_any_role(self, roles: Iterable[UserRole]) -> bool:
        return self.role in set(roles)


class IdentityResolver(Protocol):
    """Maps a request credential to an ``Identity``."""

    def resolve(self, credential: Optional[str], session: Session) -> Identity:
        ...


class JWTIdentityResolver:
    """
    Resolve HS256 tokens signed with the shared secret.

    Raises ``UnauthenticatedError`` for a missing, malformed or expired
    token, and for a token whose user no longer exists.
    """

    def __init__(self, secret_key: str, algorithm: str = "HS256"):
        self.secret_key = secret_key
        self.algorithm = algorithm

    def decode(self, token: str) -> Dict[str, Any]:
        try:
            return jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except jwt.ExpiredSignatureError:
            logger.info("Rejected expired token")
            raise UnauthenticatedError("Token has expired")
        except jwt.InvalidTokenError as e:
            logger.info("Rejected invalid token: %s", e)
            raise UnauthenticatedError("Invalid token")

    def resolve(self, credential: Optional[str], session: Session) -> Identity:
        if not credential:
            raise UnauthenticatedError()

        payload = self.decode(credential)
        user_id = payload.get("userId")
        if not user_id or not isinstance(user_id, str):
            raise UnauthenticatedError("Invalid token")

        user = session.get(User, user_id)
        if user is None:
            logger.info("Token refers to unknown user %s", user_id)
            raise UnauthenticatedError("User no longer exists")

        return Identity.from_user(user)


def create_access_token(
    user: User,
    secret_key: str,
    algorithm: str = "HS256",
    expires_delta: Optional[timedelta] = None,
) -> str:
    """
    Mint a token in the format the resolver accepts.

    For operators and tests; end-user login is handled elsewhere.
    """
    now = datetime.now(timezone.utc)
    payload = {
        "userId": user.id,
        "role": user.role.value,
        "email": user.email,
        "iat": now,
        "exp": now + (expires_delta or DEFAULT_TOKEN_LIFETIME),
    }
    return jwt.encode(payload, secret_key, algorithm=algorithm)
