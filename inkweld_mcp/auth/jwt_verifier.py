"""OAuth access-token verification (HS256 JWT)."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import jwt

from inkweld_mcp.exceptions import AuthenticationError

REQUIRED_CLAIMS = ["sub", "session_id", "client_id", "username", "exp"]
ALGORITHM = "HS256"


@dataclass(frozen=True)
class AccessTokenClaims:
    user_id: str
    session_id: str
    client_id: str
    username: str
    expires_at: datetime
    scope: Optional[str] = None


class JwtAccessTokenVerifier:
    """Verify signature, expiry, audience and issuer of OAuth access tokens."""

    def __init__(self, secret: str, issuer: str, audience: str):
        self.secret = secret
        self.issuer = issuer
        self.audience = audience

    def create_token(
        self,
        user_id: str,
        session_id: str,
        client_id: str,
        username: str,
        expires_in: timedelta = timedelta(hours=1),
        scope: Optional[str] = None,
    ) -> str:
        """Mint an access token the way the authorization server does (local development)."""
        now = datetime.now(timezone.utc)
        payload: Dict[str, Any] = {
            "sub": user_id,
            "session_id": session_id,
            "client_id": client_id,
            "username": username,
            "iss": self.issuer,
            "aud": self.audience,
            "iat": now,
            "exp": now + expires_in,
        }
        if scope:
            payload["scope"] = scope
        return jwt.encode(payload, self.secret, algorithm=ALGORITHM)

    def verify(self, token: str) -> AccessTokenClaims:
        try:
            payload = jwt.decode(
                token,
                self.secret,
                algorithms=[ALGORITHM],
                audience=self.audience,
                issuer=self.issuer,
                options={"require": REQUIRED_CLAIMS},
            )
        except jwt.ExpiredSignatureError as exc:
            raise AuthenticationError("Token has expired") from exc
        except jwt.InvalidTokenError as exc:
            raise AuthenticationError(f"Invalid access token: {exc}") from exc

        return AccessTokenClaims(
            user_id=str(payload["sub"]),
            session_id=str(payload["session_id"]),
            client_id=str(payload["client_id"]),
            username=str(payload["username"]),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            scope=payload.get("scope"),
        )
