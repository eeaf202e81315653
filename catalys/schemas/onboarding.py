from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel

from catalys.db.enums import OnboardingVariantEnum
from catalys.onboarding.preview import StartupPreview


class DraftCreateRequest(BaseModel):
    variant: OnboardingVariantEnum
    values: Dict[str, Any] = {}


class DraftUpdateRequest(BaseModel):
    values: Dict[str, Any]


class WizardStepInfo(BaseModel):
    id: int
    title: str
    description: str
    fields: List[str]
    visible_fields: List[str]


class DraftStateResponse(BaseModel):
    id: UUID
    variant: OnboardingVariantEnum
    current_step: int
    step_count: int
    is_first_step: bool
    is_last_step: bool
    step: WizardStepInfo
    values: Dict[str, Any]
    errors: Dict[str, str]
    preview: StartupPreview
    advanced: Optional[bool] = None


class SubmitResponse(BaseModel):
    startup_id: UUID
    slug: str
    organization_id: str
    redirect_url: str
    full_page_reload: bool
    replayed: bool = False
