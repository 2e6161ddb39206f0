from fastapi import APIRouter, Depends
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobboard.auth.dependencies import Principal, get_current_user, get_db
from jobboard.core.errors import JobNotFoundError
from jobboard.routes.common import CamelModel, database_unavailable, job_not_found
from jobboard.routes.job_routes import JobResponse
from jobboard.services import favorites

router = APIRouter(tags=['favorites'])


class FavoritesUpdateResponse(CamelModel):
    message: str
    favorites: list[int]


@router.get('', response_model=list[JobResponse])
def list_favorites(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user),
):
    try:
        return favorites.list_favorite_jobs(db, principal.user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc


@router.post('/{job_id}', response_model=FavoritesUpdateResponse)
def add_favorite(
    job_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user),
):
    try:
        favorites.add_favorite(db, principal.user_id, job_id)
        favorite_ids = favorites.favorite_job_ids(db, principal.user_id)
    except JobNotFoundError as exc:
        raise job_not_found(exc.message) from exc
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return FavoritesUpdateResponse(message='Job added to favorites', favorites=sorted(favorite_ids))


@router.delete('/{job_id}', response_model=FavoritesUpdateResponse)
def remove_favorite(
    job_id: int,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_user),
):
    try:
        favorites.remove_favorite(db, principal.user_id, job_id)
        favorite_ids = favorites.favorite_job_ids(db, principal.user_id)
    except SQLAlchemyError as exc:
        raise database_unavailable() from exc

    return FavoritesUpdateResponse(message='Job removed from favorites', favorites=sorted(favorite_ids))
