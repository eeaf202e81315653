from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from catalys.db.enums import InvitationStatusEnum
from catalys.schemas.startups import CoFounderInput


class CoFounderBatchRequest(BaseModel):
    co_founders: List[CoFounderInput]


class CoFounderBatchResponse(BaseModel):
    ids: List[UUID]


class CoFounderInvitationResponse(BaseModel):
    id: UUID
    startup_id: UUID
    organization_id: str
    email: str
    name: Optional[str] = None
    role: str
    equity_percentage: float
    invitation_status: InvitationStatusEnum
    invited_by: str
    user_id: Optional[str] = None
    invited_at: datetime
    responded_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)
