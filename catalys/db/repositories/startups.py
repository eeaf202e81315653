from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Sequence, Tuple
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalys.db.base import utcnow
from catalys.db.enums import StartupStageEnum
from catalys.db.models import CoFounderInvitation, Startup
from catalys.db.repositories.base import (
    AlreadyExistsError,
    DuplicateSlugError,
    NotFoundError,
    Repository,
)
from catalys.db.repositories.co_founders import CoFounderEntry, build_invitations
from catalys.db.repositories.user_profiles import UserProfilesRepository
from catalys.domain.slugs import slugify

logger = logging.getLogger(__name__)

DUPLICATE_SLUG_MESSAGE = "A startup with this name already exists"

# Fields a partial update may touch; identity and audit columns are not editable.
UPDATABLE_FIELDS = frozenset(
    {
        "name",
        "short_description",
        "description",
        "website",
        "demo_video",
        "industry",
        "category",
        "stage",
        "founded_date",
        "location",
        "future_location",
        "location_explanation",
        "team_size",
        "problem_solving",
        "why_this_idea",
        "target_market",
        "customer_need",
        "competitors",
        "monetization",
        "how_far_along",
        "working_time",
        "tech_stack",
        "version_timeline",
        "traction",
        "previous_application_notes",
        "incubator_info",
        "legal_entities",
        "equity_breakdown",
        "people_using",
        "has_revenue",
        "has_legal_entity",
        "investment_taken",
        "currently_fundraising",
        "funding_stage",
        "applied_before",
    }
)


class StartupsRepository(Repository):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get(self, startup_id: UUID) -> Optional[Startup]:
        stmt = select(Startup).where(Startup.id == startup_id)
        return self.session.scalars(stmt).first()

    def get_by_organization_id(self, organization_id: str) -> Optional[Startup]:
        stmt = select(Startup).where(Startup.organization_id == organization_id)
        return self.session.scalars(stmt).first()

    def get_by_organization_ids(self, organization_ids: Sequence[str]) -> List[Startup]:
        startups = [self.get_by_organization_id(org_id) for org_id in organization_ids]
        return [startup for startup in startups if startup is not None]

    def get_by_slug(self, slug: str) -> Optional[Startup]:
        stmt = select(Startup).where(Startup.slug == slug)
        return self.session.scalars(stmt).first()

    def create(
        self,
        *,
        name: str,
        organization_id: str,
        created_by: str,
        co_founders: Optional[Iterable[CoFounderEntry]] = None,
        **fields: Any,
    ) -> Tuple[Startup, List[UUID]]:
        """
        Insert a startup for ``organization_id`` and mark the creator's onboarding as done.

        The slug is derived from ``name``; a clash raises ``DuplicateSlugError``. When
        ``co_founders`` is given their PENDING invitations are written in the same
        transaction. Returns the startup and the ids of the created invitations.
        """
        slug = slugify(name)
        if not slug:
            raise ValueError("Startup name must contain at least one letter or digit")
        if self.get_by_slug(slug):
            raise DuplicateSlugError(DUPLICATE_SLUG_MESSAGE)
        if self.get_by_organization_id(organization_id):
            raise AlreadyExistsError("This organization already has a startup")

        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown startup fields: {', '.join(sorted(unknown))}")
        if not fields.get("industry"):
            fields["industry"] = fields.get("category") or ""
        if fields.get("stage") is None:
            fields["stage"] = StartupStageEnum.IDEA

        now = utcnow()
        startup = Startup(
            name=name,
            slug=slug,
            organization_id=organization_id,
            created_by=created_by,
            created_at=now,
            updated_at=now,
            **fields,
        )
        self.session.add(startup)
        try:
            self.session.flush()
            invitations = build_invitations(
                startup_id=startup.id,
                organization_id=organization_id,
                co_founders=co_founders or [],
                invited_by=created_by,
                invited_at=now,
            )
            self.session.add_all(invitations)
            UserProfilesRepository(self.session).mark_onboarding_completed(created_by, commit=False)
            self.session.commit()
        except IntegrityError as exc:
            # Lost a race with a concurrent insert; the unique indexes settle it.
            self.session.rollback()
            if self.get_by_slug(slug):
                raise DuplicateSlugError(DUPLICATE_SLUG_MESSAGE) from exc
            raise AlreadyExistsError("This organization already has a startup") from exc

        self.session.refresh(startup)
        logger.info(
            "Startup created",
            extra={"startup_id": str(startup.id), "slug": slug, "organization_id": organization_id},
        )
        return startup, [invitation.id for invitation in invitations]

    def update(self, startup_id: UUID, **fields: Any) -> Startup:
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown startup fields: {', '.join(sorted(unknown))}")
        startup = self.get(startup_id)
        if not startup:
            raise NotFoundError("Startup not found")
        for key, value in fields.items():
            setattr(startup, key, value)
        startup.updated_at = utcnow()
        self.session.commit()
        self.session.refresh(startup)
        return startup

    def delete(self, startup_id: UUID) -> bool:
        """Remove a startup with its invitations and reopen the creator's onboarding."""
        startup = self.get(startup_id)
        if not startup:
            return False
        created_by = startup.created_by
        self.session.execute(delete(CoFounderInvitation).where(CoFounderInvitation.startup_id == startup_id))
        self.session.delete(startup)
        UserProfilesRepository(self.session).mark_onboarding_completed(created_by, False, commit=False)
        self.session.commit()
        return True
