import logging
from datetime import datetime, timezone

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from jobboard.core.errors import AlreadyAppliedError, JobNotFoundError
from jobboard.models.application import STATUS_PENDING, Application
from jobboard.models.job import Job

logger = logging.getLogger(__name__)


def _application_exists(db: Session, job_id: int, user_id: int) -> bool:
    return (
        db.query(Application.id)
        .filter(Application.job_id == job_id, Application.user_id == user_id)
        .first()
        is not None
    )


def submit_application(
    db: Session,
    job_id: int,
    user_id: int,
    resume_ref: str,
    message: str | None = None,
) -> Application:
    # The unique constraint decides duplicates: insert first, classify failures after.
    if db.get(Job, job_id) is None:
        raise JobNotFoundError()

    application = Application(
        job_id=job_id,
        user_id=user_id,
        resume_ref=resume_ref,
        message=message,
        status=STATUS_PENDING,
        applied_at=datetime.now(timezone.utc),
    )
    db.add(application)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if _application_exists(db, job_id, user_id):
            logger.info('User %s already applied to job %s', user_id, job_id)
            raise AlreadyAppliedError() from exc
        if db.get(Job, job_id) is None:
            # Job removed between the lookup and the insert.
            raise JobNotFoundError() from exc
        raise

    db.refresh(application)
    logger.info('User %s applied to job %s (application %s)', user_id, job_id, application.id)
    return application


def list_applications_for_user(db: Session, user_id: int) -> list[Application]:
    return (
        db.query(Application)
        .filter(Application.user_id == user_id)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .all()
    )


def list_all_applications(db: Session) -> list[Application]:
    return (
        db.query(Application)
        .order_by(Application.applied_at.desc(), Application.id.desc())
        .all()
    )

