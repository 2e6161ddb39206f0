from datetime import datetime
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile, status
from fastapi.concurrency import run_in_threadpool
from pydantic import Field
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobboard.auth.dependencies import Principal, get_db, require_roles
from jobboard.core.errors import AlreadyAppliedError, JobNotFoundError
from jobboard.models.user import ROLE_ADMIN, ROLE_STUDENT
from jobboard.routes.common import CamelModel, database_unavailable, job_not_found
from jobboard.services import applications
from jobboard.services.resumes import ResumeRejectedError, discard_resume, save_resume

router = APIRouter(tags=['applications'])

require_student = require_roles(ROLE_STUDENT)
require_admin = require_roles(ROLE_ADMIN)

MAX_MESSAGE_LENGTH = 2000


class ApplicationJobSummary(CamelModel):
    id: int
    title: str
    company: str
    location: str
    job_type: str = Field(alias='type')


class ApplicantSummary(CamelModel):
    id: int
    email: str
    first_name: str
    last_name: str


class ApplicationResponse(CamelModel):
    id: int
    job_id: int
    user_id: int
    resume_ref: str
    message: str | None = None
    status: str
    applied_at: datetime
    job: ApplicationJobSummary
    user: ApplicantSummary


def normalize_message(message: str | None) -> str | None:
    if message is None:
        return None

    normalized = message.strip()
    if not normalized:
        return None

    if len(normalized) > MAX_MESSAGE_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f'Message must be {MAX_MESSAGE_LENGTH} characters or fewer.',
        )

    return normalized


@router.post('/{job_id}', response_model=ApplicationResponse, status_code=status.HTTP_201_CREATED)
async def apply_to_job(
    job_id: int,
    request: Request,
    resume: UploadFile = File(...),
    message: str | None = Form(default=None),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_student),
):
    normalized_message = normalize_message(message)
    upload_dir = Path(request.app.state.upload_dir)

    try:
        resume_ref = await save_resume(resume, upload_dir, request.app.state.max_resume_bytes)
    except ResumeRejectedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc

    try:
        try:
            application = await run_in_threadpool(
                applications.submit_application,
                db,
                job_id,
                principal.user_id,
                resume_ref,
                normalized_message,
            )
        except BaseException:
            await discard_resume(resume_ref, upload_dir)
            raise
    except AlreadyAppliedError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=exc.message) from exc
    except JobNotFoundError as exc:
        raise job_not_found(exc.message) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return application


@router.get('/my-applications', response_model=list[ApplicationResponse])
def list_my_applications(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_student),
):
    try:
        return applications.list_applications_for_user(db, principal.user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.get('', response_model=list[ApplicationResponse])
def list_applications(
    db: Session = Depends(get_db),
    _admin: Principal = Depends(require_admin),
):
    try:
        return applications.list_all_applications(db)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc
