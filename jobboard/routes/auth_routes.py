from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobboard.auth.dependencies import Principal, get_current_user, get_db, get_token_service
from jobboard.auth.jwt_handler import TokenService
from jobboard.core import config
from jobboard.core.errors import DuplicateEmailError, InvalidCredentialsError
from jobboard.models.user import ROLE_ADMIN, ROLE_STUDENT, ROLES
from jobboard.routes.common import CamelModel, database_unavailable
from jobboard.services import credentials

router = APIRouter(tags=['auth'])

MAX_NAME_LENGTH = 100


class RegisterRequest(CamelModel):
    first_name: str
    last_name: str
    email: str
    password: str
    role: str = ROLE_STUDENT

    @field_validator('first_name', 'last_name')
    @classmethod
    def validate_name(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Name is required.')
        if len(normalized) > MAX_NAME_LENGTH:
            raise ValueError(f'Name must be {MAX_NAME_LENGTH} characters or fewer.')
        return normalized

    @field_validator('email')
    @classmethod
    def validate_email(cls, value: str) -> str:
        normalized = credentials.normalize_email(value)
        local, _, domain = normalized.partition('@')
        if not local or '.' not in domain:
            raise ValueError('A valid email address is required.')
        return normalized

    @field_validator('password')
    @classmethod
    def validate_password(cls, value: str) -> str:
        if not value:
            raise ValueError('Password is required.')
        return value

    @field_validator('role')
    @classmethod
    def validate_role(cls, value: str) -> str:
        normalized = value.strip().lower()
        if normalized not in ROLES:
            raise ValueError('Role must be student or admin.')
        return normalized


class LoginRequest(CamelModel):
    email: str
    password: str


class LoginResponse(CamelModel):
    token: str
    token_type: str = 'bearer'
    role: str
    first_name: str


class UserResponse(CamelModel):
    id: int
    email: str
    role: str
    first_name: str
    last_name: str


@router.post('/register', response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(data: RegisterRequest, db: Session = Depends(get_db)):
    if data.role == ROLE_ADMIN and not config.ALLOW_ADMIN_REGISTRATION:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail='Admin accounts cannot be self-registered.',
        )

    try:
        return credentials.register_user(
            db,
            first_name=data.first_name,
            last_name=data.last_name,
            email=data.email,
            password=data.password,
            role=data.role,
        )
    except DuplicateEmailError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.post('/login', response_model=LoginResponse)
def login(
    data: LoginRequest,
    db: Session = Depends(get_db),
    token_service: TokenService = Depends(get_token_service),
):
    try:
        user = credentials.authenticate(db, data.email, data.password)
    except InvalidCredentialsError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    token = token_service.issue(user.id, user.role)
    return LoginResponse(token=token, role=user.role, first_name=user.first_name)


@router.get('/me', response_model=UserResponse)
def me(current_user: Principal = Depends(get_current_user)):
    return UserResponse(
        id=current_user.user_id,
        email=current_user.email,
        role=current_user.role,
        first_name=current_user.first_name,
        last_name=current_user.last_name,
    )
