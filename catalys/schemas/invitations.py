from typing import Optional
from uuid import UUID

from pydantic import BaseModel


class OrganizationInvitationResponse(BaseModel):
    id: str
    organization_id: str
    organization_name: Optional[str] = None
    email: str
    role: str
    status: str


class InvitationAcceptResponse(BaseModel):
    organization_id: str
    redirect_url: str
    co_founder_invitation_id: Optional[UUID] = None
