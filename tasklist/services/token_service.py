"""
Session token issuance and verification with JWT.

Tokens are stateless: nothing is stored server side and validity is decided
by the HMAC signature and the expiry claim alone. A token cannot be revoked
before it expires.
"""

import uuid
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from jose.utils import base64url_decode, base64url_encode

from tasklist.config import SYMMETRIC_JWT_ALGORITHMS
from tasklist.utils.logger import setup_logger

logger = setup_logger("token_service")


@dataclass(frozen=True)
class TokenClaims:
    """Verified identity carried by a session token."""

    user_id: uuid.UUID
    username: str
    issued_at: datetime | None = None
    expires_at: datetime | None = None


class TokenService:
    def __init__(
        self,
        secret_key: str,
        algorithm: str = "HS256",
        expires_delta: timedelta = timedelta(hours=24),
    ):
        if not secret_key:
            raise ValueError("A non-empty secret key is required to sign tokens")
        if algorithm not in SYMMETRIC_JWT_ALGORITHMS:
            raise ValueError(
                f"Unsupported token algorithm {algorithm!r}; use one of {SYMMETRIC_JWT_ALGORITHMS}"
            )
        self._secret_key = secret_key
        self.algorithm = algorithm
        self.expires_delta = expires_delta

    def issue(
        self,
        user_id: uuid.UUID,
        username: str,
        expires_delta: timedelta | None = None,
    ) -> str:
        """Create a signed token for the given identity."""
        issued_at = datetime.now(UTC)
        claims = {
            "sub": str(user_id),
            "username": username,
            "iat": issued_at,
            "exp": issued_at + (expires_delta or self.expires_delta),
        }
        return jwt.encode(claims, self._secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> TokenClaims | None:
        """Decode and verify a token. Returns None on any failure."""
        try:
            if not _is_canonical(token):
                logger.warning("Token rejected: non-canonical base64url segment")
                return None
            payload = jwt.decode(token, self._secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            logger.warning(f"JWT verification failed: {e}")
            return None
        except (AttributeError, TypeError, ValueError) as e:
            # jose does not wrap every malformed-input error
            logger.warning(f"Malformed token rejected: {e}")
            return None

        try:
            user_id = uuid.UUID(payload["sub"])
            username = payload["username"]
        except (KeyError, TypeError, ValueError):
            logger.warning("Token signature valid but identity claims are missing")
            return None
        if not isinstance(username, str):
            return None

        return TokenClaims(
            user_id=user_id,
            username=username,
            issued_at=_from_timestamp(payload.get("iat")),
            expires_at=_from_timestamp(payload.get("exp")),
        )


def _is_canonical(token: str) -> bool:
    """
    True when every segment is the exact base64url encoding of its bytes.

    The decoder ignores the unused low bits of a segment's last character, so
    several spellings can decode to the same signature.
    """
    segments = token.split(".")
    if len(segments) != 3:
        return False
    for segment in segments:
        encoded = segment.encode("ascii")
        if base64url_encode(base64url_decode(encoded)) != encoded:
            return False
    return True


def _from_timestamp(value) -> datetime | None:
    if isinstance(value, int | float):
        return datetime.fromtimestamp(value, UTC)
    return None
