#!/usr/bin/env python
"""Issue and verify the bearer tokens that identify API callers."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt


class TokenError(Exception):
    """Token is malformed, tampered with, or expired."""


class TokenAuthenticator:
    """HS256 JWTs carrying the user id in an ``id`` claim."""

    def __init__(self, secret: str, algorithm: str = "HS256", expires_minutes: int = 60):
        if not secret:
            raise ValueError("A JWT secret is required")
        self.secret = secret
        self.algorithm = algorithm
        self.expires_minutes = expires_minutes

    def issue(self, user_id: int, *, expires_minutes: Optional[int] = None) -> str:
        now = datetime.now(timezone.utc)
        lifetime = self.expires_minutes if expires_minutes is None else expires_minutes
        claims = {
            "id": int(user_id),
            "iat": now,
            "exp": now + timedelta(minutes=lifetime),
        }
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)

    def verify(self, token: str) -> int:
        """Return the user id the token was issued for."""
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise TokenError(str(exc)) from exc
        try:
            return int(claims["id"])
        except (KeyError, TypeError, ValueError) as exc:
            raise TokenError("Token carries no user id") from exc


def bearer_token(header_value: Optional[str]) -> Optional[str]:
    """Extract the credential from an ``Authorization: Bearer <token>`` header."""
    if not header_value:
        return None
    scheme, _, credential = header_value.strip().partition(" ")
    if scheme.lower() != "bearer":
        return None
    return credential.strip() or None


__all__ = ["TokenAuthenticator", "TokenError", "bearer_token"]
