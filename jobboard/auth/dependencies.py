import logging
from collections.abc import Iterator
from dataclasses import dataclass

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobboard.auth.jwt_handler import ExpiredTokenError, TokenError, TokenService
from jobboard.core.errors import ForbiddenError, UnauthenticatedError, UserNotFoundError
from jobboard.models.user import User
from jobboard.services.credentials import get_user

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class Principal:
    user_id: int
    role: str
    email: str
    first_name: str
    last_name: str

    @classmethod
    def from_user(cls, user: User) -> "Principal":
        return cls(
            user_id=user.id,
            role=user.role,
            email=user.email,
            first_name=user.first_name or "",
            last_name=user.last_name or "",
        )


def get_db(request: Request) -> Iterator[Session]:
    db = request.app.state.session_factory()
    try:
        yield db
    finally:
        db.close()


def get_token_service(request: Request) -> TokenService:
    return request.app.state.token_service


def authorize(
    credentials: HTTPAuthorizationCredentials | None,
    allowed_roles: frozenset[str] | set[str],
    db: Session,
    token_service: TokenService,
) -> Principal:
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthenticatedError("No token provided.")

    try:
        claims = token_service.verify(credentials.credentials)
    except ExpiredTokenError as exc:
        logger.warning('Rejected expired token')
        raise UnauthenticatedError("Token has expired.") from exc
    except TokenError as exc:
        logger.warning('Rejected token: %s', exc)
        raise UnauthenticatedError("Invalid token.") from exc

    try:
        user = get_user(db, claims.user_id)
    except SQLAlchemyError as exc:
        logger.exception('User lookup failed during authorization')
        raise UnauthenticatedError("Invalid token.") from exc

    if user is None:
        logger.warning('Token references missing user %s', claims.user_id)
        raise UserNotFoundError()

    # Role comes from storage; the claim in the token may be stale.
    if allowed_roles and user.role not in allowed_roles:
        logger.info('User %s with role %s denied; requires %s', user.id, user.role, sorted(allowed_roles))
        raise ForbiddenError()

    return Principal.from_user(user)


def require_roles(*roles: str):
    """Dependency factory; no roles means any authenticated user."""
    allowed_roles = frozenset(roles)

    def dependency(
        credentials: HTTPAuthorizationCredentials | None = Depends(security),
        db: Session = Depends(get_db),
        token_service: TokenService = Depends(get_token_service),
    ) -> Principal:
        try:
            return authorize(credentials, allowed_roles, db, token_service)
        except UnauthenticatedError as exc:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail=exc.message,
                headers={"WWW-Authenticate": "Bearer"},
            ) from exc
        except ForbiddenError as exc:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=exc.message) from exc

    return dependency


get_current_user = require_roles()
