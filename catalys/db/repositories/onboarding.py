from __future__ import annotations

from typing import Any, Optional, Tuple
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from catalys.db.enums import OnboardingSubmissionStatusEnum, OnboardingVariantEnum
from catalys.db.models import OnboardingDraft, OnboardingSubmission
from catalys.db.repositories.base import Repository


class OnboardingDraftsRepository(Repository):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get(self, user_id: str, draft_id: UUID) -> Optional[OnboardingDraft]:
        stmt = select(OnboardingDraft).where(
            OnboardingDraft.id == draft_id,
            OnboardingDraft.user_id == user_id,
        )
        return self.session.scalars(stmt).first()

    def create(
        self,
        *,
        user_id: str,
        variant: OnboardingVariantEnum,
        values: dict[str, Any],
    ) -> OnboardingDraft:
        draft = OnboardingDraft(
            user_id=user_id,
            variant=variant,
            current_step=1,
            values=values,
            errors={},
        )
        return self.save(draft)

    def save_state(
        self,
        draft: OnboardingDraft,
        *,
        current_step: int,
        values: dict[str, Any],
        errors: dict[str, str],
    ) -> OnboardingDraft:
        draft.current_step = current_step
        # Fresh containers so the JSON columns register as changed.
        draft.values = dict(values)
        draft.errors = dict(errors)
        return self.save(draft)


class OnboardingSubmissionsRepository(Repository):
    def __init__(self, session: Session) -> None:
        super().__init__(session)

    def get_by_idempotency_key(self, idempotency_key: str) -> Optional[OnboardingSubmission]:
        stmt = select(OnboardingSubmission).where(OnboardingSubmission.idempotency_key == idempotency_key)
        return self.session.scalars(stmt).first()

    def get_or_create(
        self,
        *,
        idempotency_key: str,
        user_id: str,
        draft_id: Optional[UUID] = None,
    ) -> Tuple[OnboardingSubmission, bool]:
        """
        Get the submission recorded for an idempotency key or start a new one.

        Returns (submission, created_flag).
        """
        existing = self.get_by_idempotency_key(idempotency_key)
        if existing:
            return existing, False

        submission = OnboardingSubmission(
            idempotency_key=idempotency_key,
            user_id=user_id,
            draft_id=draft_id,
            status=OnboardingSubmissionStatusEnum.pending,
        )
        self.session.add(submission)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            existing = self.get_by_idempotency_key(idempotency_key)
            if existing:
                return existing, False
            raise
        self.session.refresh(submission)
        return submission, True

    def restart(self, submission: OnboardingSubmission) -> OnboardingSubmission:
        submission.status = OnboardingSubmissionStatusEnum.pending
        submission.failed_step = None
        submission.error = None
        submission.organization_id = None
        submission.startup_id = None
        submission.slug = None
        return self.save(submission)

    def record_progress(self, submission: OnboardingSubmission, **fields: Any) -> OnboardingSubmission:
        for key, value in fields.items():
            setattr(submission, key, value)
        return self.save(submission)

    def mark_completed(self, submission: OnboardingSubmission) -> OnboardingSubmission:
        submission.status = OnboardingSubmissionStatusEnum.completed
        return self.save(submission)

    def mark_failed(self, submission: OnboardingSubmission, *, failed_step: str, error: str) -> OnboardingSubmission:
        submission.status = OnboardingSubmissionStatusEnum.failed
        submission.failed_step = failed_step
        submission.error = error[:5000]
        return self.save(submission)
