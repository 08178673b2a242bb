"""
Password hashing, token issuing and connection-string cleanup.
"""
from datetime import datetime, timedelta, timezone

import pytest
from jose import JWTError, jwt

from app.core.security import PasswordHasher, TokenIssuer
from app.db.database import clean_database_url


@pytest.fixture
def issuer(settings) -> TokenIssuer:
    return TokenIssuer(settings)


def test_hash_is_salted_and_verifiable():
    hasher = PasswordHasher(rounds=4)
    first = hasher.hash("s3cret!")
    second = hasher.hash("s3cret!")

    assert first != second
    assert first.startswith("$2")
    assert hasher.verify("s3cret!", first)
    assert hasher.verify("s3cret!", second)
    assert not hasher.verify("S3cret!", first)


def test_issue_pair_claims(issuer):
    now = datetime(2030, 1, 1, tzinfo=timezone.utc)
    pair = issuer.issue_pair("user-1", "student", now)

    assert pair.issued_at == now
    assert pair.access_expires_at == now + timedelta(minutes=60)
    assert pair.refresh_expires_at == now + timedelta(days=7)

    access = issuer.decode_access_token(pair.access_token)
    assert access["user_id"] == "user-1"
    assert access["role"] == "student"
    assert access["exp"] == int(pair.access_expires_at.timestamp())

    refresh = issuer.decode_refresh_token(pair.refresh_token)
    assert refresh["user_id"] == "user-1"
    assert "role" not in refresh


def test_access_and_refresh_tokens_are_not_interchangeable(issuer):
    pair = issuer.issue_pair("user-1", "student")

    with pytest.raises(JWTError):
        issuer.decode_access_token(pair.refresh_token)
    with pytest.raises(JWTError):
        issuer.decode_refresh_token(pair.access_token)


def test_expired_access_token_is_rejected(issuer):
    long_ago = datetime.now(tz=timezone.utc) - timedelta(hours=3)
    token = issuer.create_access_token("user-1", "student", long_ago)

    with pytest.raises(JWTError):
        issuer.decode_access_token(token)


def test_clean_neon_url():
    url, connect_args = clean_database_url(
        "postgresql://neon:pw@ep-cool-sun.aws.neon.tech/neondb?sslmode=require&channel_binding=require"
    )
    assert url == "postgresql+asyncpg://neon:pw@ep-cool-sun.aws.neon.tech/neondb"
    assert connect_args == {"ssl": "require"}


def test_clean_url_keeps_other_query_params():
    url, connect_args = clean_database_url("postgres://u:p@db:5432/auth?application_name=auth&channel_binding=prefer")
    assert url == "postgresql+asyncpg://u:p@db:5432/auth?application_name=auth"
    assert connect_args == {}


def test_clean_url_leaves_non_postgres_alone():
    url, connect_args = clean_database_url("sqlite+aiosqlite:///./auth.db")
    assert url == "sqlite+aiosqlite:///./auth.db"
    assert connect_args == {}


def test_token_without_expiry_is_rejected(issuer, settings):
    token = jwt.encode({"user_id": "user-1", "role": "student"}, settings.JWT_SECRET_KEY, algorithm="HS256")

    with pytest.raises(JWTError):
        issuer.decode_access_token(token)
