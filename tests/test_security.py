"""
Token resolution against the primary store.
"""

from datetime import timedelta

import jwt
import pytest

from dormtrack.core.exceptions import UnauthenticatedError
from dormtrack.core.security import (
    DEFAULT_TOKEN_LIFETIME,
    Identity,
    JWTIdentityResolver,
    create_access_token,
)
from dormtrack.models.enums import UserRole
from dormtrack.models.user import User

from factories import TEST_SECRET


@pytest.fixture
def resolver():
    return JWTIdentityResolver(TEST_SECRET)


def _resolve(database, resolver, token):
    with database.primary_session() as session:
        return resolver.resolve(token, session)


def test_valid_token(database, resolver, tokens, users):
    identity = _resolve(database, resolver, tokens["resident"])
    assert identity == Identity.from_user(users["resident"])
    assert identity.room_number == "A-101"


@pytest.mark.parametrize("token", [None, "", "not-a-jwt", "a.b.c"])
def test_missing_or_malformed(database, resolver, token, users):
    with pytest.raises(UnauthenticatedError):
        _resolve(database, resolver, token)


def test_wrong_secret(database, users):
    token = create_access_token(users["admin"], "another-secret")
    with pytest.raises(UnauthenticatedError):
        _resolve(database, JWTIdentityResolver(TEST_SECRET), token)


def test_expired(database, resolver, users):
    token = create_access_token(users["admin"], TEST_SECRET, expires_delta=timedelta(seconds=-5))
    with pytest.raises(UnauthenticatedError) as exc_info:
        _resolve(database, resolver, token)
    assert "expired" in exc_info.value.message


def test_unknown_user(database, resolver, users):
    ghost = User(id="ghost-user", full_name="Hantu", email="ghost@example.com", role=UserRole.ADMIN)
    token = create_access_token(ghost, TEST_SECRET)
    with pytest.raises(UnauthenticatedError):
        _resolve(database, resolver, token)


def test_role_comes_from_store_not_token(database, resolver, tokens, users):
    token = tokens["tech"]
    with database.primary_session() as session:
        user = session.get(User, users["tech"].id)
        user.role = UserRole.USER
        session.commit()

    identity = _resolve(database, resolver, token)
    assert identity.role is UserRole.USER
    assert not identity.has_role(UserRole.TEKNISI)


def test_default_token_lifetime(users):
    token = create_access_token(users["resident"], TEST_SECRET)
    claims = jwt.decode(token, TEST_SECRET, algorithms=["HS256"])
    assert timedelta(seconds=claims["exp"] - claims["iat"]) == DEFAULT_TOKEN_LIFETIME
