from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from catalys.auth.dependencies import AuthContext, get_current_user, get_optional_user
from catalys.db.deps import get_session
from catalys.db.repositories.base import AlreadyExistsError, NotFoundError
from catalys.db.repositories.user_profiles import UserProfilesRepository
from catalys.schemas.user_profiles import (
    UserProfileCreateRequest,
    UserProfileResponse,
    UserProfileUpdateRequest,
)

router = APIRouter(prefix="/user-profiles", tags=["user-profiles"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=UserProfileResponse)
def create_user_profile(
    payload: UserProfileCreateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    try:
        return UserProfilesRepository(session).create(auth.user_id, payload.user_type)
    except AlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.get("/me", response_model=Optional[UserProfileResponse])
def get_current_user_profile(
    auth: Optional[AuthContext] = Depends(get_optional_user),
    session: Session = Depends(get_session),
):
    """The caller's profile, or null when the caller is anonymous or has none yet."""
    if auth is None:
        return None
    return UserProfilesRepository(session).get_by_user_id(auth.user_id)


@router.get("/{user_id}", response_model=UserProfileResponse)
def get_user_profile(
    user_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    profile = UserProfilesRepository(session).get_by_user_id(user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User profile not found")
    return profile


@router.patch("/{user_id}", response_model=UserProfileResponse)
def update_user_profile(
    user_id: str,
    payload: UserProfileUpdateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    if user_id != auth.user_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Cannot update another user's profile")
    try:
        return UserProfilesRepository(session).update(user_id, payload.user_type)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
