"""Password hashing and bearer token issuing/verification."""

import logging
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Literal, Optional
from uuid import UUID

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError

from fisiohub.core.config import Settings
from fisiohub.core.errors import UnauthenticatedError
from fisiohub.models.user import User

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes; longer inputs are rejected upstream
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Salted, adaptive-cost one-way hashing (bcrypt)."""

    def __init__(self, rounds: int = 12) -> None:
        self.rounds = rounds

    def hash(self, plaintext: str) -> str:
        """Hash a password with a fresh salt."""
        encoded = plaintext.encode("utf-8")
        if len(encoded) > BCRYPT_MAX_BYTES:
            raise ValueError(f"Password longer than {BCRYPT_MAX_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def verify(self, plaintext: str, digest: str) -> bool:
        """Check a password against a stored digest; malformed digests never match."""
        try:
            return bcrypt.checkpw(plaintext.encode("utf-8"), digest.encode("ascii"))
        except ValueError:
            return False


class TokenType(str, Enum):
    """Purpose of a signed token."""

    ACCESS = "access"
    REFRESH = "refresh"


class TokenClaims(BaseModel):
    """
    Claim set carried by every token.

    Unknown, missing or mistyped claims make the whole token invalid.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    sub: UUID = Field(description="User ID")
    tid: UUID = Field(description="Tenant ID the user belongs to")
    email: StrictStr
    name: StrictStr
    typ: Literal["access", "refresh"]
    iss: StrictStr
    iat: StrictInt
    exp: StrictInt

    @property
    def user_id(self) -> UUID:
        return self.sub

    @property
    def tenant_id(self) -> UUID:
        return self.tid


class InvalidTokenError(UnauthenticatedError):
    """Signature, format, issuer, type or expiry check failed."""

    message = "Invalid or expired token"


class TokenService:
    """Issues and verifies HMAC-signed JWTs (python-jose)."""

    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        issuer: str = "fisiohub",
        access_ttl: timedelta = timedelta(hours=8),
        refresh_ttl: timedelta = timedelta(days=7),
    ) -> None:
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.issuer = issuer
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        return cls(
            secret_key=settings.SECRET_KEY,
            algorithm=settings.JWT_ALGORITHM,
            issuer=settings.JWT_ISSUER,
            access_ttl=timedelta(minutes=settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES),
            refresh_ttl=timedelta(days=settings.JWT_REFRESH_TOKEN_EXPIRE_DAYS),
        )

    def issue(
        self,
        user: User,
        token_type: TokenType = TokenType.ACCESS,
        ttl: Optional[timedelta] = None,
    ) -> str:
        """
        Create a signed token for a user.

        Args:
            user: Authenticated user (identity and tenant come from it)
            token_type: Access or refresh token
            ttl: Lifetime override; defaults to the configured TTL for the type

        Returns:
            Encoded JWT
        """
        if ttl is None:
            ttl = self.access_ttl if token_type == TokenType.ACCESS else self.refresh_ttl

        now = datetime.now(timezone.utc)
        payload = {
            "sub": str(user.id),
            "tid": str(user.tenant_id),
            "email": user.email,
            "name": user.full_name,
            "typ": token_type.value,
            "iss": self.issuer,
            "iat": int(now.timestamp()),
            "exp": int((now + ttl).timestamp()),
        }
        return jwt.encode(payload, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str, expected_type: TokenType = TokenType.ACCESS) -> TokenClaims:
        """
        Verify and decode a token.

        Fails closed: any problem raises InvalidTokenError, never returns a
        partial identity.

        Raises:
            InvalidTokenError: If the token is forged, malformed, expired,
                issued by someone else or of the wrong type
        """
        try:
            payload = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self.algorithm],
                issuer=self.issuer,
                options={"require_exp": True, "require_iat": True, "require_sub": True},
            )
        except JWTError as e:
            # Reason stays in debug logs only
            logger.debug("Token rejected by signature/claims check", extra={"reason": type(e).__name__})
            raise InvalidTokenError() from None

        try:
            claims = TokenClaims.model_validate(payload)
        except ValidationError:
            logger.debug("Token rejected by claim schema")
            raise InvalidTokenError() from None

        if claims.typ != expected_type.value:
            raise InvalidTokenError()

        return claims
