from datetime import datetime
from typing import Any, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from catalys.db.enums import AppliedBeforeEnum, FundingStageEnum, StartupStageEnum


class StartupFields(BaseModel):
    website: Optional[str] = None
    demo_video: Optional[str] = None
    category: Optional[str] = None
    stage: Optional[StartupStageEnum] = None
    founded_date: Optional[str] = None
    location: Optional[str] = None
    future_location: Optional[str] = None
    location_explanation: Optional[str] = None
    team_size: Optional[int] = Field(default=None, ge=1)
    problem_solving: Optional[str] = None
    why_this_idea: Optional[str] = None
    target_market: Optional[str] = None
    customer_need: Optional[str] = None
    competitors: Optional[str] = None
    monetization: Optional[str] = None
    how_far_along: Optional[str] = None
    working_time: Optional[str] = None
    tech_stack: Optional[str] = None
    version_timeline: Optional[str] = None
    traction: Optional[str] = None
    previous_application_notes: Optional[str] = None
    incubator_info: Optional[str] = None
    legal_entities: Optional[str] = None
    equity_breakdown: Optional[str] = None
    people_using: Optional[bool] = None
    has_revenue: Optional[bool] = None
    has_legal_entity: Optional[bool] = None
    investment_taken: Optional[bool] = None
    currently_fundraising: Optional[bool] = None
    funding_stage: Optional[FundingStageEnum] = None
    applied_before: Optional[AppliedBeforeEnum] = None

    model_config = ConfigDict(extra="forbid")


class CoFounderInput(BaseModel):
    email: EmailStr
    role: str = Field(min_length=1)
    equity_percentage: float = Field(ge=0, le=100)
    name: Optional[str] = None


class StartupCreateRequest(StartupFields):
    name: str = Field(min_length=1)
    organization_id: str = Field(min_length=1)
    short_description: str
    description: str
    industry: Optional[str] = None
    co_founders: List[CoFounderInput] = []


class StartupUpdateRequest(StartupFields):
    name: Optional[str] = None
    short_description: Optional[str] = None
    description: Optional[str] = None
    industry: Optional[str] = None

    @field_validator(
        "name",
        "short_description",
        "description",
        "industry",
        "stage",
        "people_using",
        "has_revenue",
        "has_legal_entity",
        "investment_taken",
        "currently_fundraising",
    )
    @classmethod
    def _reject_null(cls, value: Any) -> Any:
        # Omit a field to leave it unchanged; these columns cannot be cleared.
        if value is None:
            raise ValueError("This field cannot be null")
        return value


class StartupResponse(BaseModel):
    id: UUID
    organization_id: str
    slug: str
    name: str
    short_description: str
    description: str
    website: Optional[str] = None
    demo_video: Optional[str] = None
    industry: str
    category: Optional[str] = None
    stage: StartupStageEnum
    founded_date: Optional[str] = None
    location: Optional[str] = None
    future_location: Optional[str] = None
    location_explanation: Optional[str] = None
    team_size: Optional[int] = None
    problem_solving: Optional[str] = None
    why_this_idea: Optional[str] = None
    target_market: Optional[str] = None
    customer_need: Optional[str] = None
    competitors: Optional[str] = None
    monetization: Optional[str] = None
    how_far_along: Optional[str] = None
    working_time: Optional[str] = None
    tech_stack: Optional[str] = None
    version_timeline: Optional[str] = None
    traction: Optional[str] = None
    previous_application_notes: Optional[str] = None
    incubator_info: Optional[str] = None
    legal_entities: Optional[str] = None
    equity_breakdown: Optional[str] = None
    people_using: bool
    has_revenue: bool
    has_legal_entity: bool
    investment_taken: bool
    currently_fundraising: bool
    funding_stage: Optional[FundingStageEnum] = None
    applied_before: Optional[AppliedBeforeEnum] = None
    created_by: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class StartupCreateResponse(StartupResponse):
    co_founder_invitation_ids: List[UUID] = []
