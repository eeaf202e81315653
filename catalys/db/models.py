from __future__ import annotations

from datetime import datetime
from typing import Any, Optional
from uuid import UUID, uuid4

import sqlalchemy as sa
from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    Uuid,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column

from catalys.db.base import Base, utcnow
from catalys.db.enums import (
    AppliedBeforeEnum,
    FundingStageEnum,
    InvitationStatusEnum,
    OnboardingSubmissionStatusEnum,
    OnboardingVariantEnum,
    StartupStageEnum,
    UserTypeEnum,
)

JSONType = JSON().with_variant(JSONB(), "postgresql")


class UserProfile(Base):
    __tablename__ = "user_profiles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(length=255), unique=True, nullable=False, index=True)
    user_type: Mapped[UserTypeEnum] = mapped_column(Enum(UserTypeEnum, name="user_type"), nullable=False)
    onboarding_completed: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=sa.false()
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class Startup(Base):
    __tablename__ = "startups"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    organization_id: Mapped[str] = mapped_column(String(length=255), unique=True, nullable=False, index=True)
    slug: Mapped[str] = mapped_column(String(length=255), unique=True, nullable=False, index=True)

    name: Mapped[str] = mapped_column(Text, nullable=False)
    short_description: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    website: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    demo_video: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    industry: Mapped[str] = mapped_column(Text, nullable=False)
    category: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    stage: Mapped[StartupStageEnum] = mapped_column(
        Enum(StartupStageEnum, name="startup_stage"),
        nullable=False,
        default=StartupStageEnum.IDEA,
    )
    founded_date: Mapped[Optional[str]] = mapped_column(String(length=32), nullable=True)
    location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    future_location: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    location_explanation: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    team_size: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    problem_solving: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    why_this_idea: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    target_market: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    customer_need: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    competitors: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    monetization: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    how_far_along: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    working_time: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tech_stack: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    version_timeline: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    traction: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    previous_application_notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    incubator_info: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    legal_entities: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    equity_breakdown: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    people_using: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_revenue: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_legal_entity: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    investment_taken: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    currently_fundraising: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    funding_stage: Mapped[Optional[FundingStageEnum]] = mapped_column(
        Enum(FundingStageEnum, name="funding_stage"), nullable=True
    )
    applied_before: Mapped[Optional[AppliedBeforeEnum]] = mapped_column(
        Enum(AppliedBeforeEnum, name="applied_before"), nullable=True
    )

    created_by: Mapped[str] = mapped_column(String(length=255), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)


class CoFounderInvitation(Base):
    __tablename__ = "co_founder_invitations"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    startup_id: Mapped[UUID] = mapped_column(
        ForeignKey("startups.id", ondelete="CASCADE"), nullable=False, index=True
    )
    organization_id: Mapped[str] = mapped_column(String(length=255), nullable=False, index=True)
    email: Mapped[str] = mapped_column(String(length=320), nullable=False)
    name: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    role: Mapped[str] = mapped_column(Text, nullable=False)
    equity_percentage: Mapped[float] = mapped_column(Float, nullable=False)
    invitation_status: Mapped[InvitationStatusEnum] = mapped_column(
        Enum(InvitationStatusEnum, name="invitation_status"),
        nullable=False,
        default=InvitationStatusEnum.PENDING,
    )
    invited_by: Mapped[str] = mapped_column(String(length=255), nullable=False)
    user_id: Mapped[Optional[str]] = mapped_column(String(length=255), nullable=True)
    invited_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    responded_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)


class OnboardingDraft(Base):
    __tablename__ = "onboarding_drafts"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    user_id: Mapped[str] = mapped_column(String(length=255), nullable=False, index=True)
    variant: Mapped[OnboardingVariantEnum] = mapped_column(
        Enum(OnboardingVariantEnum, name="onboarding_variant"), nullable=False
    )
    current_step: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    values: Mapped[dict[str, Any]] = mapped_column(JSONType, nullable=False, default=dict)
    errors: Mapped[dict[str, str]] = mapped_column(JSONType, nullable=False, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )


class OnboardingSubmission(Base):
    __tablename__ = "onboarding_submissions"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    idempotency_key: Mapped[str] = mapped_column(String(length=255), unique=True, nullable=False)
    user_id: Mapped[str] = mapped_column(String(length=255), nullable=False, index=True)
    draft_id: Mapped[Optional[UUID]] = mapped_column(
        ForeignKey("onboarding_drafts.id", ondelete="SET NULL"), nullable=True
    )
    status: Mapped[OnboardingSubmissionStatusEnum] = mapped_column(
        Enum(OnboardingSubmissionStatusEnum, name="onboarding_submission_status"),
        nullable=False,
        default=OnboardingSubmissionStatusEnum.pending,
    )
    failed_step: Mapped[Optional[str]] = mapped_column(String(length=64), nullable=True)
    error: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    organization_id: Mapped[Optional[str]] = mapped_column(String(length=255), nullable=True)
    startup_id: Mapped[Optional[UUID]] = mapped_column(Uuid, nullable=True)
    slug: Mapped[Optional[str]] = mapped_column(String(length=255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )
