from datetime import datetime

from fastapi import APIRouter, Depends, status
from pydantic import Field, field_validator
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobboard.auth.dependencies import Principal, get_db, require_roles
from jobboard.models.job import JOB_TYPES, Job
from jobboard.models.user import ROLE_ADMIN
from jobboard.routes.common import CamelModel, database_unavailable, job_not_found

router = APIRouter(tags=['jobs'])

require_admin = require_roles(ROLE_ADMIN)


class JobRequest(CamelModel):
    title: str
    description: str = ''
    location: str = ''
    job_type: str = Field(default='Full-Time', alias='type')
    company: str = ''

    @field_validator('title')
    @classmethod
    def validate_title(cls, value: str) -> str:
        normalized = value.strip()
        if not normalized:
            raise ValueError('Title is required.')
        return normalized

    @field_validator('job_type')
    @classmethod
    def validate_job_type(cls, value: str) -> str:
        for job_type in JOB_TYPES:
            if value.strip().lower() == job_type.lower():
                return job_type
        raise ValueError(f'Type must be one of: {", ".join(JOB_TYPES)}.')


class JobResponse(CamelModel):
    id: int
    title: str
    description: str
    location: str
    job_type: str = Field(alias='type')
    company: str
    posted_at: datetime


def _get_job_or_404(db: Session, job_id: int) -> Job:
    job = db.get(Job, job_id)
    if job is None:
        raise job_not_found()
    return job


@router.get('/{job_id}', response_model=JobResponse)
def get_job(job_id: int, db: Session = Depends(get_db)):
    try:
        return _get_job_or_404(db, job_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('', response_model=JobResponse, status_code=status.HTTP_201_CREATED)
def create_job(
    data: JobRequest,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    try:
        job = Job(
            title=data.title,
            description=data.description,
            location=data.location,
            job_type=data.job_type,
            company=data.company,
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        return job
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.put('/{job_id}', response_model=JobResponse)
def update_job(
    job_id: int,
    data: JobRequest,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    try:
        job = _get_job_or_404(db, job_id)
        job.title = data.title
        job.description = data.description
        job.location = data.location
        job.job_type = data.job_type
        job.company = data.company
        db.commit()
        db.refresh(job)
        return job
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc


@router.delete('/{job_id}', status_code=status.HTTP_204_NO_CONTENT)
def delete_job(
    job_id: int,
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    try:
        job = _get_job_or_404(db, job_id)
        db.delete(job)
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        raise database_unavailable() from exc
