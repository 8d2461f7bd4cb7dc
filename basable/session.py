"""
Session tokens.

Mints and verifies signed JWT sessions bound to an identity string (a
guest's network address or an account id).
"""

from __future__ import annotations

import logging
from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt
from pydantic import BaseModel, Field

from basable.config import AuthSettings, get_settings
from basable.errors import SessionError

logger = logging.getLogger(__name__)


class JwtSession(BaseModel):
    """A minted bearer token."""

    token: str = Field(..., description="Encoded JWT")
    subject: str = Field(..., description="Identity the token is bound to")
    expires_at: datetime = Field(..., description="Expiry timestamp (UTC)")


def create_jwt(identity: str, settings: AuthSettings | None = None) -> JwtSession:
    """
    Mint a session for an identity.

    Raises:
        SessionError: If the identity is empty or signing fails
    """
    if not identity:
        raise SessionError("Cannot mint a session for an empty identity")
    auth = settings or get_settings().auth
    expires_at = datetime.now(UTC) + timedelta(minutes=auth.session_ttl_minutes)
    claims = {"sub": identity, "exp": expires_at}
    try:
        token = jwt.encode(claims, auth.jwt_secret.get_secret_value(), algorithm=auth.jwt_algorithm)
    except JWTError as exc:
        raise SessionError(f"Failed to sign session: {exc}") from exc
    return JwtSession(token=token, subject=identity, expires_at=expires_at)


def decode_jwt(token: str, settings: AuthSettings | None = None) -> str:
    """
    Verify a session token and return its subject.

    Raises:
        SessionError: If the token is invalid, expired or has no subject
    """
    auth = settings or get_settings().auth
    try:
        claims = jwt.decode(token, auth.jwt_secret.get_secret_value(), algorithms=[auth.jwt_algorithm])
    except JWTError as exc:
        logger.warning(f"Rejected session token: {exc}")
        raise SessionError(f"Invalid session: {exc}") from exc
    subject = claims.get("sub")
    if not subject:
        raise SessionError("Session token has no subject")
    return str(subject)
