import logging
from threading import Lock

from sqlalchemy import create_engine, event, inspect, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker

logger = logging.getLogger(__name__)

Base = declarative_base()

_schema_lock = Lock()
_application_schema_checked: set[str] = set()


def _enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(database_url: str) -> Engine:
    if database_url.startswith("sqlite"):
        engine = create_engine(database_url, connect_args={"check_same_thread": False})
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(database_url, pool_pre_ping=True)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
        bind=engine,
    )


def ensure_application_schema(engine: Engine) -> None:
    """Add the (job_id, user_id) unique index to legacy applications tables."""
    engine_key = str(engine.url)
    if engine_key in _application_schema_checked:
        return

    with _schema_lock:
        if engine_key in _application_schema_checked:
            return

        inspector = inspect(engine)

        if 'applications' not in inspector.get_table_names():
            _application_schema_checked.add(engine_key)
            return

        unique_columns = {
            tuple(constraint['column_names'])
            for constraint in inspector.get_unique_constraints('applications')
        }
        unique_columns.update(
            tuple(index['column_names'])
            for index in inspector.get_indexes('applications')
            if index.get('unique')
        )

        if ('job_id', 'user_id') not in unique_columns and ('user_id', 'job_id') not in unique_columns:
            logger.warning('Adding missing unique index on applications(job_id, user_id).')
            with engine.begin() as connection:
                connection.execute(
                    text(
                        'CREATE UNIQUE INDEX IF NOT EXISTS uq_applications_job_user '
                        'ON applications(job_id, user_id)'
                    )
                )

        with engine.begin() as connection:
            connection.execute(
                text('CREATE INDEX IF NOT EXISTS idx_applications_user_applied ON applications(user_id, applied_at)')
            )

        _application_schema_checked.add(engine_key)
