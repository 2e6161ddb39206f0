from datetime import datetime, timedelta, timezone

import pytest
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.exc import OperationalError

from jobboard.auth.dependencies import authorize
from jobboard.core.errors import ForbiddenError, UnauthenticatedError
from jobboard.models.user import ROLE_ADMIN, ROLE_STUDENT


def _bearer(token: str) -> HTTPAuthorizationCredentials:
    return HTTPAuthorizationCredentials(scheme='Bearer', credentials=token)


def test_authorize_returns_principal_for_valid_token(db_session, make_user, token_service) -> None:
    user = make_user()
    token = token_service.issue(user.id, user.role)

    principal = authorize(_bearer(token), {ROLE_STUDENT}, db_session, token_service)

    assert principal.user_id == user.id
    assert principal.role == ROLE_STUDENT
    assert principal.email == 'alice@x.com'


def test_empty_role_set_accepts_any_authenticated_user(db_session, make_user, token_service) -> None:
    admin = make_user(email='admin@x.com', role=ROLE_ADMIN)

    principal = authorize(_bearer(token_service.issue(admin.id, admin.role)), set(), db_session, token_service)

    assert principal.role == ROLE_ADMIN


def test_missing_credentials_are_unauthenticated(db_session, token_service) -> None:
    with pytest.raises(UnauthenticatedError):
        authorize(None, set(), db_session, token_service)


def test_expired_token_is_unauthenticated(db_session, make_user, token_service) -> None:
    user = make_user()
    token = token_service.issue(user.id, user.role, now=datetime.now(timezone.utc) - timedelta(days=1))

    with pytest.raises(UnauthenticatedError):
        authorize(_bearer(token), set(), db_session, token_service)


def test_garbage_token_is_unauthenticated(db_session, token_service) -> None:
    with pytest.raises(UnauthenticatedError):
        authorize(_bearer('garbage'), set(), db_session, token_service)


def test_deleted_user_is_unauthenticated(db_session, make_user, token_service) -> None:
    user = make_user()
    token = token_service.issue(user.id, user.role)
    db_session.delete(user)
    db_session.commit()

    with pytest.raises(UnauthenticatedError):
        authorize(_bearer(token), set(), db_session, token_service)


def test_student_on_admin_operation_is_forbidden_not_unauthenticated(db_session, make_user, token_service) -> None:
    user = make_user()
    token = token_service.issue(user.id, user.role)

    with pytest.raises(ForbiddenError):
        authorize(_bearer(token), {ROLE_ADMIN}, db_session, token_service)


def test_role_is_taken_from_storage_not_token(db_session, make_user, token_service) -> None:
    admin = make_user(email='admin@x.com', role=ROLE_ADMIN)
    token = token_service.issue(admin.id, ROLE_ADMIN)

    admin.role = ROLE_STUDENT
    db_session.commit()

    with pytest.raises(ForbiddenError):
        authorize(_bearer(token), {ROLE_ADMIN}, db_session, token_service)

    principal = authorize(_bearer(token), {ROLE_STUDENT}, db_session, token_service)
    assert principal.role == ROLE_STUDENT


def _failing_lookup(_db, _user_id):
    raise OperationalError('SELECT users', {}, Exception('database is gone'))


def test_user_lookup_failure_fails_closed(db_session, make_user, token_service, monkeypatch) -> None:
    user = make_user()
    token = token_service.issue(user.id, user.role)
    monkeypatch.setattr('jobboard.auth.dependencies.get_user', _failing_lookup)

    with pytest.raises(UnauthenticatedError):
        authorize(_bearer(token), set(), db_session, token_service)


def test_user_lookup_failure_is_401_over_http(client, register_and_login, monkeypatch) -> None:
    headers = register_and_login()
    monkeypatch.setattr('jobboard.auth.dependencies.get_user', _failing_lookup)

    response = client.get('/auth/me', headers=headers)

    assert response.status_code == 401
    assert response.headers['www-authenticate'] == 'Bearer'
