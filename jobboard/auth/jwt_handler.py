from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

import jwt

from jobboard.core.config import TokenConfig
from jobboard.models.user import ROLES


class TokenError(Exception):
    """Token could not be accepted."""


class InvalidTokenError(TokenError):
    """Malformed, tampered with, or signed with another key."""


class ExpiredTokenError(TokenError):
    """Signature is fine but ``exp`` has passed."""


@dataclass(frozen=True)
class TokenClaims:
    user_id: int
    role: str
    issued_at: datetime
    expires_at: datetime


class TokenService:
    def __init__(self, config: TokenConfig):
        if not config.secret_key:
            raise ValueError("Token signing key must not be empty.")
        self._config = config

    @property
    def ttl(self) -> timedelta:
        return timedelta(minutes=self._config.expires_minutes)

    def issue(self, user_id: int, role: str, now: datetime | None = None) -> str:
        issued_at = now or datetime.now(timezone.utc)
        expires_at = issued_at + self.ttl
        payload = {
            "sub": str(user_id),
            "role": role,
            "iat": issued_at,
            "exp": expires_at,
        }
        return jwt.encode(payload, self._config.secret_key, algorithm=self._config.algorithm)

    def verify(self, token: str) -> TokenClaims:
        try:
            payload = jwt.decode(
                token,
                self._config.secret_key,
                algorithms=[self._config.algorithm],
                options={"require": ["sub", "exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as exc:
            raise ExpiredTokenError("Token has expired.") from exc
        except jwt.InvalidTokenError as exc:
            raise InvalidTokenError(str(exc)) from exc

        try:
            user_id = int(payload["sub"])
        except (TypeError, ValueError) as exc:
            raise InvalidTokenError("Token subject is not a user id.") from exc

        role = payload.get("role")
        if role not in ROLES:
            raise InvalidTokenError("Token carries an unknown role.")

        return TokenClaims(
            user_id=user_id,
            role=role,
            issued_at=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            expires_at=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
        )
