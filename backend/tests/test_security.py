"""Tests for password hashing and token issuing/verification."""

from datetime import timedelta
from uuid import uuid4

import pytest
from jose import jwt

from fisiohub.core.errors import UnauthenticatedError
from fisiohub.core.security import InvalidTokenError, PasswordHasher, TokenService, TokenType
from fisiohub.models.user import User, UserRole

SECRET = "unit-test-secret"


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def tokens() -> TokenService:
    return TokenService(secret_key=SECRET, issuer="fisiohub")


@pytest.fixture
def user() -> User:
    return User(
        id=uuid4(),
        tenant_id=uuid4(),
        email="a@x.com",
        full_name="Ana Admin",
        password_hash="unused",
        role=UserRole.ADMIN,
        is_active=True,
    )


# ============================================================================
# Password Hashing
# ============================================================================

@pytest.mark.security
def test_hash_is_salted_and_verifies(hasher):
    """Same password hashes differently each time; both digests verify."""
    first = hasher.hash("pw123")
    second = hasher.hash("pw123")

    assert first != second, "Hashes must be salted"
    assert "pw123" not in first
    assert hasher.verify("pw123", first)
    assert hasher.verify("pw123", second)


@pytest.mark.security
def test_wrong_password_does_not_verify(hasher):
    digest = hasher.hash("pw123")
    assert not hasher.verify("pw124", digest)


@pytest.mark.security
def test_malformed_digest_never_matches(hasher):
    assert not hasher.verify("pw123", "not-a-bcrypt-digest")


@pytest.mark.security
def test_password_over_72_bytes_rejected(hasher):
    with pytest.raises(ValueError):
        hasher.hash("x" * 73)


# ============================================================================
# Tokens
# ============================================================================

@pytest.mark.security
def test_token_round_trip_carries_identity(tokens, user):
    claims = tokens.verify(tokens.issue(user))

    assert claims.user_id == user.id
    assert claims.tenant_id == user.tenant_id
    assert claims.email == "a@x.com"
    assert claims.name == "Ana Admin"
    assert claims.typ == "access"
    assert claims.exp > claims.iat


@pytest.mark.security
def test_expired_token_rejected(tokens, user):
    token = tokens.issue(user, ttl=timedelta(seconds=-10))

    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


@pytest.mark.security
def test_token_signed_with_other_key_rejected(user):
    forged = TokenService(secret_key="attacker-key").issue(user)

    with pytest.raises(InvalidTokenError):
        TokenService(secret_key=SECRET).verify(forged)


@pytest.mark.security
def test_tampered_payload_rejected(tokens, user):
    """Changing the payload without re-signing breaks the signature."""
    header, payload, signature = tokens.issue(user).split(".")
    other = tokens.issue(
        User(id=uuid4(), tenant_id=uuid4(), email="b@x.com", full_name="Bruno", role=UserRole.ADMIN)
    )
    tampered = ".".join([header, other.split(".")[1], signature])

    with pytest.raises(InvalidTokenError):
        tokens.verify(tampered)


@pytest.mark.security
def test_unknown_claim_rejected(tokens, user):
    """A correctly signed token with an unexpected claim is refused."""
    claims = jwt.get_unverified_claims(tokens.issue(user))
    claims["role"] = "admin"
    token = jwt.encode(claims, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


@pytest.mark.security
def test_missing_claim_rejected(tokens, user):
    claims = jwt.get_unverified_claims(tokens.issue(user))
    del claims["tid"]
    token = jwt.encode(claims, SECRET, algorithm="HS256")

    with pytest.raises(InvalidTokenError):
        tokens.verify(token)


@pytest.mark.security
def test_wrong_issuer_rejected(user):
    token = TokenService(secret_key=SECRET, issuer="someone-else").issue(user)

    with pytest.raises(InvalidTokenError):
        TokenService(secret_key=SECRET, issuer="fisiohub").verify(token)


@pytest.mark.security
def test_refresh_token_not_accepted_as_access(tokens, user):
    refresh = tokens.issue(user, TokenType.REFRESH)

    with pytest.raises(InvalidTokenError):
        tokens.verify(refresh, TokenType.ACCESS)
    assert tokens.verify(refresh, TokenType.REFRESH).typ == "refresh"


@pytest.mark.security
def test_garbage_token_rejected(tokens):
    with pytest.raises(UnauthenticatedError):
        tokens.verify("not.a.token")
