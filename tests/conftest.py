from collections.abc import Callable
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from jobboard.auth.jwt_handler import TokenService
from jobboard.core.config import TokenConfig
from jobboard.database import Base, build_engine, build_session_factory
from jobboard.main import create_app
from jobboard.models import application  # noqa: F401
from jobboard.models.job import Job
from jobboard.models.user import ROLE_ADMIN, ROLE_STUDENT
from jobboard.services import credentials

TEST_TOKEN_CONFIG = TokenConfig(
    secret_key='test-signing-key-that-is-long-enough-for-hs256',
    algorithm='HS256',
    expires_minutes=60,
)


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(TEST_TOKEN_CONFIG)


@pytest.fixture
def session_factory(tmp_path: Path):
    engine = build_engine(f"sqlite:///{tmp_path / 'jobboard.sqlite3'}")
    Base.metadata.create_all(bind=engine)
    try:
        yield build_session_factory(engine)
    finally:
        engine.dispose()


@pytest.fixture
def db_session(session_factory: sessionmaker):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def make_user(db_session) -> Callable:
    def _make_user(email: str = 'alice@x.com', role: str = ROLE_STUDENT, password: str = 'pw123'):
        return credentials.register_user(
            db_session,
            first_name='Alice' if role == ROLE_STUDENT else 'Ada',
            last_name='Example',
            email=email,
            password=password,
            role=role,
        )

    return _make_user


@pytest.fixture
def make_job(db_session) -> Callable:
    def _make_job(title: str = 'Backend Engineer') -> Job:
        job = Job(
            title=title,
            description='Build APIs.',
            location='Remote',
            job_type='Full-Time',
            company='Acme',
        )
        db_session.add(job)
        db_session.commit()
        db_session.refresh(job)
        return job

    return _make_job


@pytest.fixture
def api(tmp_path: Path):
    return create_app(
        database_url=f"sqlite:///{tmp_path / 'api.sqlite3'}",
        token_config=TEST_TOKEN_CONFIG,
        upload_dir=tmp_path / 'uploads',
    )


@pytest.fixture
def client(api):
    with TestClient(api) as test_client:
        yield test_client


@pytest.fixture
def register_and_login(client: TestClient) -> Callable:
    def _register_and_login(
        email: str = 'alice@x.com',
        password: str = 'pw123',
        role: str = ROLE_STUDENT,
        first_name: str = 'Alice',
    ) -> dict[str, str]:
        register_response = client.post(
            '/auth/register',
            json={
                'firstName': first_name,
                'lastName': 'Example',
                'email': email,
                'password': password,
                'role': role,
            },
        )
        assert register_response.status_code == 201

        login_response = client.post('/auth/login', json={'email': email, 'password': password})
        assert login_response.status_code == 200
        return {'Authorization': f"Bearer {login_response.json()['token']}"}

    return _register_and_login


@pytest.fixture
def admin_headers(register_and_login: Callable) -> dict[str, str]:
    return register_and_login(email='admin@x.com', password='admin-pw', role=ROLE_ADMIN, first_name='Ada')


@pytest.fixture
def create_job(client: TestClient, admin_headers: dict[str, str]) -> Callable:
    def _create_job(title: str = 'Backend Engineer') -> int:
        response = client.post(
            '/jobs',
            headers=admin_headers,
            json={
                'title': title,
                'description': 'Build APIs.',
                'location': 'Remote',
                'type': 'Full-Time',
                'company': 'Acme',
            },
        )
        assert response.status_code == 201
        return response.json()['id']

    return _create_job
