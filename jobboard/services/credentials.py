import logging

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.auth.passwords import hash_password, verify_password
from jobboard.core.errors import DuplicateEmailError, InvalidCredentialsError
from jobboard.models.user import ROLE_STUDENT, User

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user(db: Session, user_id: int) -> User | None:
    return db.get(User, user_id)


def find_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(func.lower(User.email) == normalize_email(email)).first()


def register_user(
    db: Session,
    *,
    first_name: str,
    last_name: str,
    email: str,
    password: str,
    role: str = ROLE_STUDENT,
) -> User:
    """Create an account. The unique email index decides duplicates."""
    user = User(
        email=normalize_email(email),
        hashed_password=hash_password(password),
        role=role,
        first_name=first_name,
        last_name=last_name,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateEmailError() from exc
    db.refresh(user)
    logger.info('Registered user %s with role %s', user.id, user.role)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    user = find_user_by_email(db, email)
    if user is None or not verify_password(password, user.hashed_password):
        logger.info('Failed login for %s', normalize_email(email))
        raise InvalidCredentialsError()
    return user
