from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from catalys.auth.dependencies import AuthContext, get_current_user
from catalys.db.deps import get_session
from catalys.db.models import Startup
from catalys.db.repositories.base import AlreadyExistsError, DuplicateSlugError, NotFoundError
from catalys.db.repositories.co_founders import CoFounderEntry
from catalys.db.repositories.startups import StartupsRepository
from catalys.schemas.startups import (
    StartupCreateRequest,
    StartupCreateResponse,
    StartupResponse,
    StartupUpdateRequest,
)

router = APIRouter(prefix="/startups", tags=["startups"])


def require_startup_member(startup: Startup, auth: AuthContext) -> None:
    if startup.created_by != auth.user_id and startup.organization_id != auth.org_id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not a member of this startup")


def _split_ids(values: List[str]) -> List[str]:
    ids: List[str] = []
    for value in values:
        ids.extend(part.strip() for part in value.split(",") if part.strip())
    return ids


@router.post("", status_code=status.HTTP_201_CREATED, response_model=StartupCreateResponse)
def create_startup(
    payload: StartupCreateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    repo = StartupsRepository(session)
    fields = payload.model_dump(exclude={"name", "organization_id", "co_founders"}, exclude_none=True)
    co_founders = [
        CoFounderEntry(
            email=entry.email,
            role=entry.role,
            equity_percentage=entry.equity_percentage,
            name=entry.name or None,
        )
        for entry in payload.co_founders
    ]
    try:
        startup, invitation_ids = repo.create(
            name=payload.name,
            organization_id=payload.organization_id,
            created_by=auth.user_id,
            co_founders=co_founders,
            **fields,
        )
    except DuplicateSlugError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except AlreadyExistsError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc

    return StartupCreateResponse(
        **StartupResponse.model_validate(startup).model_dump(),
        co_founder_invitation_ids=invitation_ids,
    )


@router.get("", response_model=List[StartupResponse])
def list_startups(
    organization_ids: List[str] = Query(default=[]),
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return StartupsRepository(session).get_by_organization_ids(_split_ids(organization_ids))


@router.get("/by-organization/{organization_id}", response_model=Optional[StartupResponse])
def get_startup_by_organization(
    organization_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return StartupsRepository(session).get_by_organization_id(organization_id)


@router.get("/by-slug/{slug}", response_model=StartupResponse)
def get_startup_by_slug(slug: str, session: Session = Depends(get_session)):
    startup = StartupsRepository(session).get_by_slug(slug)
    if not startup:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Startup not found")
    return startup


@router.get("/{startup_id}", response_model=StartupResponse)
def get_startup(
    startup_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    startup = StartupsRepository(session).get(startup_id)
    if not startup:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Startup not found")
    return startup


@router.patch("/{startup_id}", response_model=StartupResponse)
def update_startup(
    startup_id: UUID,
    payload: StartupUpdateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    repo = StartupsRepository(session)
    startup = repo.get(startup_id)
    if not startup:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Startup not found")
    require_startup_member(startup, auth)

    try:
        return repo.update(startup_id, **payload.model_dump(exclude_unset=True))
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
