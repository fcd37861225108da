"""
infrastructure.auth.jwt_signer - Short-lived credentials for integration calls.

Every external call gets a freshly signed token for the caller; tokens are
never cached, so a long conversation cannot fail on an expired credential.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Any

from jose import jwt

from domain.exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class JwtSigner:
    """Implements CredentialSignerPort with python-jose."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expiry_seconds: int = 300,
    ):
        if not secret:
            raise ConfigurationError("JWT_SECRET is required to sign integration credentials")
        self._secret = secret
        self._algorithm = algorithm
        self._expiry = timedelta(seconds=expiry_seconds)

    def sign(self, user_id: str) -> str:
        now = datetime.now(timezone.utc)
        claims = {
            "sub": user_id,
            "user_id": user_id,
            "iat": int(now.timestamp()),
            "exp": int((now + self._expiry).timestamp()),
        }
        logger.debug("Signing integration credential for user %s", user_id)
        return jwt.encode(claims, self._secret, algorithm=self._algorithm)

    def verify(self, token: str) -> dict[str, Any]:
        """Decode a token signed by this signer. Raises jose.JWTError if invalid."""
        return jwt.decode(token, self._secret, algorithms=[self._algorithm])
