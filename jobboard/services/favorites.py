import logging

from sqlalchemy import delete, insert, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from jobboard.core.errors import JobNotFoundError
from jobboard.models.job import Job
from jobboard.models.user import user_favorites

logger = logging.getLogger(__name__)


def _insert_ignoring_duplicates(db: Session, user_id: int, job_id: int) -> None:
    # Single statement; never read-modify-write the favorite set.
    values = {"user_id": user_id, "job_id": job_id}
    dialect = db.get_bind().dialect.name

    if dialect == "postgresql":
        statement = postgresql.insert(user_favorites).values(**values).on_conflict_do_nothing()
    elif dialect == "sqlite":
        statement = sqlite.insert(user_favorites).values(**values).on_conflict_do_nothing()
    else:
        try:
            with db.begin_nested():
                db.execute(insert(user_favorites).values(**values))
        except IntegrityError:
            logger.debug('Job %s already in favorites of user %s', job_id, user_id)
        return

    db.execute(statement)


def add_favorite(db: Session, user_id: int, job_id: int) -> None:
    if db.get(Job, job_id) is None:
        raise JobNotFoundError()

    try:
        _insert_ignoring_duplicates(db, user_id, job_id)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if db.get(Job, job_id) is None:
            # Job removed between the lookup and the insert.
            raise JobNotFoundError() from exc
        raise
    except SQLAlchemyError:
        db.rollback()
        raise


def remove_favorite(db: Session, user_id: int, job_id: int) -> None:
    try:
        db.execute(
            delete(user_favorites).where(
                user_favorites.c.user_id == user_id,
                user_favorites.c.job_id == job_id,
            )
        )
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        raise


def list_favorite_jobs(db: Session, user_id: int) -> list[Job]:
    return (
        db.query(Job)
        .join(user_favorites, user_favorites.c.job_id == Job.id)
        .filter(user_favorites.c.user_id == user_id)
        .order_by(Job.posted_at.desc(), Job.id.desc())
        .all()
    )


def favorite_job_ids(db: Session, user_id: int) -> set[int]:
    rows = db.execute(
        select(user_favorites.c.job_id).where(user_favorites.c.user_id == user_id)
    ).all()
    return {row.job_id for row in rows}
