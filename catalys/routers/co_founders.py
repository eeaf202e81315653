from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from catalys.auth.dependencies import AuthContext, get_current_user
from catalys.db.deps import get_session
from catalys.db.repositories.base import InvitationAlreadyRespondedError, NotFoundError
from catalys.db.repositories.co_founders import CoFounderEntry, CoFoundersRepository
from catalys.db.repositories.startups import StartupsRepository
from catalys.routers.startups import require_startup_member
from catalys.schemas.co_founders import (
    CoFounderBatchRequest,
    CoFounderBatchResponse,
    CoFounderInvitationResponse,
)

router = APIRouter(tags=["co-founders"])


@router.post(
    "/startups/{startup_id}/co-founders",
    status_code=status.HTTP_201_CREATED,
    response_model=CoFounderBatchResponse,
)
def create_co_founders(
    startup_id: UUID,
    payload: CoFounderBatchRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    startup = StartupsRepository(session).get(startup_id)
    if not startup:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Startup not found")
    require_startup_member(startup, auth)

    ids = CoFoundersRepository(session).create_batch(
        startup_id=startup.id,
        organization_id=startup.organization_id,
        co_founders=[
            CoFounderEntry(
                email=entry.email,
                role=entry.role,
                equity_percentage=entry.equity_percentage,
                name=entry.name or None,
            )
            for entry in payload.co_founders
        ],
        invited_by=auth.user_id,
    )
    return CoFounderBatchResponse(ids=ids)


@router.get("/startups/{startup_id}/co-founders", response_model=List[CoFounderInvitationResponse])
def list_startup_co_founders(
    startup_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return CoFoundersRepository(session).get_by_startup_id(startup_id)


@router.get("/co-founders", response_model=List[CoFounderInvitationResponse])
def list_organization_co_founders(
    organization_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    return CoFoundersRepository(session).get_by_organization_id(organization_id)


def _respond(repo: CoFoundersRepository, action, invitation_id: UUID, auth: AuthContext, *args):
    invitation = repo.get(invitation_id)
    if not invitation:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Co-founder invitation not found")
    if not auth.email or auth.email.strip().lower() != invitation.email.strip().lower():
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invitation was sent to a different email address",
        )
    try:
        return action(invitation_id, *args)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except InvitationAlreadyRespondedError as exc:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc)) from exc


@router.post("/co-founders/{invitation_id}/accept", response_model=CoFounderInvitationResponse)
def accept_co_founder_invitation(
    invitation_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    repo = CoFoundersRepository(session)
    return _respond(repo, repo.accept_invitation, invitation_id, auth, auth.user_id)


@router.post("/co-founders/{invitation_id}/decline", response_model=CoFounderInvitationResponse)
def decline_co_founder_invitation(
    invitation_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    repo = CoFoundersRepository(session)
    return _respond(repo, repo.decline_invitation, invitation_id, auth)
