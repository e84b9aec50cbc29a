"""Favorites store keyed by (user, place). Insert and delete only."""

import logging

from fastapi import APIRouter, Depends, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from moodplaces.core.auth import Identity, get_current_identity
from moodplaces.db.session import get_db
from moodplaces.models.favorite import Favorite
from moodplaces.schemas.favorites import FavoriteCreate, FavoriteListResponse, FavoriteRead

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/favorites", tags=["favorites"])


def _find(db: Session, user_id: str, place_id: str) -> Favorite | None:
    return (
        db.query(Favorite)
        .filter(Favorite.user_id == user_id, Favorite.place_id == place_id)
        .first()
    )


@router.get("", response_model=FavoriteListResponse)
def list_favorites(
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> FavoriteListResponse:
    """List the caller's favorites, oldest first."""
    favorites = (
        db.query(Favorite)
        .filter(Favorite.user_id == identity.uid)
        .order_by(Favorite.created_at, Favorite.place_id)
        .all()
    )
    return FavoriteListResponse(results=[FavoriteRead.model_validate(f) for f in favorites])


@router.post("", response_model=FavoriteRead, status_code=status.HTTP_201_CREATED)
def add_favorite(
    payload: FavoriteCreate,
    response: Response,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> FavoriteRead:
    """
    Insert a favorite. Idempotent: inserting an existing (user, place) pair returns
    the stored row with 200 instead of 201.
    """
    existing = _find(db, identity.uid, payload.place_id)
    if existing:
        response.status_code = status.HTTP_200_OK
        return FavoriteRead.model_validate(existing)

    favorite = Favorite(
        user_id=identity.uid,
        place_id=payload.place_id,
        place_name=payload.place_name,
    )
    db.add(favorite)
    try:
        db.commit()
    except IntegrityError:
        # Concurrent insert of the same pair
        db.rollback()
        existing = _find(db, identity.uid, payload.place_id)
        if existing is None:
            raise
        response.status_code = status.HTTP_200_OK
        return FavoriteRead.model_validate(existing)

    db.refresh(favorite)
    logger.info(f"Added favorite: user={identity.uid}, place={payload.place_id}")
    return FavoriteRead.model_validate(favorite)


@router.delete("/{place_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_favorite(
    place_id: str,
    identity: Identity = Depends(get_current_identity),
    db: Session = Depends(get_db),
) -> Response:
    """Delete a favorite. Deleting a missing pair is a no-op (still 204)."""
    favorite = _find(db, identity.uid, place_id)
    if favorite:
        db.delete(favorite)
        db.commit()
        logger.info(f"Removed favorite: user={identity.uid}, place={place_id}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)
