from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from catalys.db.enums import UserTypeEnum


class UserProfileCreateRequest(BaseModel):
    user_type: UserTypeEnum


class UserProfileUpdateRequest(BaseModel):
    user_type: UserTypeEnum


class UserProfileResponse(BaseModel):
    id: UUID
    user_id: str
    user_type: UserTypeEnum
    onboarding_completed: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
