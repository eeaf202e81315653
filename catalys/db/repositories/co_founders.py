from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from catalys.config import settings
from catalys.db.base import utcnow
from catalys.db.enums import InvitationStatusEnum
from catalys.db.models import CoFounderInvitation
from catalys.db.repositories.base import InvitationAlreadyRespondedError, NotFoundError, Repository


@dataclass
class CoFounderEntry:
    email: str
    role: str
    equity_percentage: float
    name: Optional[str] = None


def build_invitations(
    *,
    startup_id: UUID,
    organization_id: str,
    co_founders: Iterable[CoFounderEntry],
    invited_by: str,
    invited_at: datetime,
) -> List[CoFounderInvitation]:
    return [
        CoFounderInvitation(
            startup_id=startup_id,
            organization_id=organization_id,
            name=entry.name,
            email=entry.email,
            role=entry.role,
            equity_percentage=entry.equity_percentage,
            invitation_status=InvitationStatusEnum.PENDING,
            invited_by=invited_by,
            invited_at=invited_at,
        )
        for entry in co_founders
    ]


class CoFoundersRepository(Repository):
    def __init__(self, session: Session, *, enforce_pending: Optional[bool] = None) -> None:
        super().__init__(session)
        if enforce_pending is None:
            enforce_pending = settings.CO_FOUNDER_INVITATION_ENFORCE_PENDING
        self.enforce_pending = enforce_pending

    def get(self, invitation_id: UUID) -> Optional[CoFounderInvitation]:
        stmt = select(CoFounderInvitation).where(CoFounderInvitation.id == invitation_id)
        return self.session.scalars(stmt).first()

    def create_batch(
        self,
        *,
        startup_id: UUID,
        organization_id: str,
        co_founders: Iterable[CoFounderEntry],
        invited_by: str,
    ) -> List[UUID]:
        invitations = build_invitations(
            startup_id=startup_id,
            organization_id=organization_id,
            co_founders=co_founders,
            invited_by=invited_by,
            invited_at=utcnow(),
        )
        self.session.add_all(invitations)
        self.session.commit()
        return [invitation.id for invitation in invitations]

    def get_by_startup_id(self, startup_id: UUID) -> List[CoFounderInvitation]:
        stmt = select(CoFounderInvitation).where(CoFounderInvitation.startup_id == startup_id)
        return list(self.session.scalars(stmt).all())

    def get_by_organization_id(self, organization_id: str) -> List[CoFounderInvitation]:
        stmt = select(CoFounderInvitation).where(CoFounderInvitation.organization_id == organization_id)
        return list(self.session.scalars(stmt).all())

    def find_pending(self, organization_id: str, email: str) -> Optional[CoFounderInvitation]:
        stmt = select(CoFounderInvitation).where(
            CoFounderInvitation.organization_id == organization_id,
            func.lower(CoFounderInvitation.email) == email.strip().lower(),
            CoFounderInvitation.invitation_status == InvitationStatusEnum.PENDING,
        )
        return self.session.scalars(stmt).first()

    def accept_invitation(self, invitation_id: UUID, user_id: str) -> CoFounderInvitation:
        return self._respond(
            invitation_id,
            status=InvitationStatusEnum.ACCEPTED,
            values={"user_id": user_id},
        )

    def decline_invitation(self, invitation_id: UUID) -> CoFounderInvitation:
        return self._respond(invitation_id, status=InvitationStatusEnum.DECLINED, values={})

    def _respond(
        self,
        invitation_id: UUID,
        *,
        status: InvitationStatusEnum,
        values: dict,
    ) -> CoFounderInvitation:
        stmt = (
            update(CoFounderInvitation)
            .where(CoFounderInvitation.id == invitation_id)
            .values(invitation_status=status, responded_at=utcnow(), **values)
        )
        if self.enforce_pending:
            # Compare-and-swap: only a PENDING invitation may move to a terminal state.
            stmt = stmt.where(CoFounderInvitation.invitation_status == InvitationStatusEnum.PENDING)
        result = self.session.execute(stmt)
        if result.rowcount == 0:
            self.session.rollback()
            existing = self.get(invitation_id)
            if not existing:
                raise NotFoundError("Co-founder invitation not found")
            raise InvitationAlreadyRespondedError(
                f"Invitation was already {existing.invitation_status.value.lower()}"
            )
        self.session.commit()
        invitation = self.get(invitation_id)
        self.session.refresh(invitation)
        return invitation
