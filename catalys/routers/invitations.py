import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from catalys.auth.dependencies import AuthContext, get_current_user
from catalys.config import settings
from catalys.db.deps import get_session
from catalys.db.repositories.base import InvitationAlreadyRespondedError
from catalys.db.repositories.co_founders import CoFoundersRepository
from catalys.schemas.invitations import InvitationAcceptResponse, OrganizationInvitationResponse
from catalys.services.organizations import (
    ClerkOrganizationClient,
    OrganizationProviderError,
    get_organization_client,
)

router = APIRouter(prefix="/invitations", tags=["invitations"])
logger = logging.getLogger(__name__)


@router.get("/{organization_id}/{invitation_id}", response_model=OrganizationInvitationResponse)
async def get_invitation(
    organization_id: str,
    invitation_id: str,
    auth: AuthContext = Depends(get_current_user),
    organizations: ClerkOrganizationClient = Depends(get_organization_client),
):
    try:
        invitation = await organizations.get_invitation(organization_id=organization_id, invitation_id=invitation_id)
    except OrganizationProviderError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc
    return OrganizationInvitationResponse(
        id=invitation.id,
        organization_id=invitation.organization_id,
        organization_name=invitation.organization_name,
        email=invitation.email,
        role=invitation.role,
        status=invitation.status,
    )


@router.post("/{organization_id}/{invitation_id}/accept", response_model=InvitationAcceptResponse)
async def accept_invitation(
    organization_id: str,
    invitation_id: str,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
    organizations: ClerkOrganizationClient = Depends(get_organization_client),
):
    """Join the organization from an emailed invite link and make it the caller's active one."""
    try:
        invitation = await organizations.accept_invitation(
            organization_id=organization_id,
            invitation_id=invitation_id,
            user_id=auth.user_id,
            email=auth.email,
        )
        await organizations.set_active_organization(user_id=auth.user_id, organization_id=organization_id)
    except OrganizationProviderError as exc:
        raise HTTPException(status_code=exc.status_code, detail=str(exc)) from exc

    co_founders = CoFoundersRepository(session)
    record = co_founders.find_pending(organization_id, invitation.email)
    record_id = None
    if record:
        try:
            record_id = co_founders.accept_invitation(record.id, auth.user_id).id
        except InvitationAlreadyRespondedError:
            logger.warning(
                "Co-founder invitation was answered concurrently",
                extra={"invitation_id": str(record.id), "organization_id": organization_id},
            )

    return InvitationAcceptResponse(
        organization_id=organization_id,
        redirect_url=settings.dashboard_url,
        co_founder_invitation_id=record_id,
    )
