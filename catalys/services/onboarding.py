from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, List, Optional
from uuid import UUID, uuid4

from sqlalchemy.orm import Session

from catalys.auth.dependencies import AuthContext
from catalys.config import settings
from catalys.db.enums import OnboardingSubmissionStatusEnum
from catalys.db.models import OnboardingSubmission
from catalys.db.repositories.base import DuplicateSlugError
from catalys.db.repositories.onboarding import OnboardingSubmissionsRepository
from catalys.db.repositories.startups import DUPLICATE_SLUG_MESSAGE, StartupsRepository
from catalys.domain.slugs import slugify
from catalys.onboarding.forms import OnboardingForm
from catalys.services.email import ResendEmailClient
from catalys.services.invite_email import build_accept_url, build_organization_invite_email
from catalys.services.organizations import ClerkOrganizationClient, OrganizationInvitation

logger = logging.getLogger(__name__)

LOGIN_REQUIRED_MESSAGE = "You must be logged in to create a startup"
ORGANIZATION_FAILED_MESSAGE = "Failed to create organization"
GENERIC_FAILURE_MESSAGE = "Failed to complete onboarding. Please try again."

STEP_CREATE_ORGANIZATION = "create_organization"
STEP_CREATE_STARTUP = "create_startup"
STEP_INVITE_MEMBERS = "invite_members"
STEP_ACTIVATE_ORGANIZATION = "activate_organization"


class OnboardingError(Exception):
    def __init__(self, message: str, *, status_code: int = 502) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


@dataclass
class OnboardingResult:
    startup_id: UUID
    slug: str
    organization_id: str
    redirect_url: str
    full_page_reload: bool
    replayed: bool = False


@dataclass
class _SagaState:
    submission: OnboardingSubmission
    organization_id: Optional[str] = None
    startup_id: Optional[UUID] = None
    step: str = STEP_CREATE_ORGANIZATION


class OnboardingOrchestrator:
    """
    Runs an onboarding submission as a saga.

    Steps run strictly in order: create the organization, create the startup record
    (with any co-founder invitations), invite the co-founders to the organization,
    activate the organization for the founder. A failure after the organization
    exists undoes the completed steps in reverse order. Each attempt is tracked by
    an idempotency key so a replayed request never creates a second organization.
    """

    def __init__(
        self,
        session: Session,
        *,
        organizations: ClerkOrganizationClient,
        emails: ResendEmailClient,
    ) -> None:
        self.session = session
        self.organizations = organizations
        self.emails = emails
        self.startups = StartupsRepository(session)
        self.submissions = OnboardingSubmissionsRepository(session)

    async def submit(
        self,
        *,
        auth: Optional[AuthContext],
        form: OnboardingForm,
        values: dict[str, Any],
        idempotency_key: Optional[str] = None,
        draft_id: Optional[UUID] = None,
    ) -> OnboardingResult:
        if auth is None:
            raise OnboardingError(LOGIN_REQUIRED_MESSAGE, status_code=401)

        startup_input = form.to_submission(values)
        slug = slugify(startup_input.name)
        if not slug:
            raise OnboardingError("Startup name must contain at least one letter or digit", status_code=400)

        submission = self._begin(auth=auth, idempotency_key=idempotency_key or uuid4().hex, draft_id=draft_id)
        if submission.status == OnboardingSubmissionStatusEnum.completed:
            logger.info(
                "Replaying completed onboarding submission",
                extra={"idempotency_key": submission.idempotency_key, "startup_id": str(submission.startup_id)},
            )
            return OnboardingResult(
                startup_id=submission.startup_id,
                slug=submission.slug,
                organization_id=submission.organization_id,
                redirect_url=settings.dashboard_url,
                full_page_reload=form.full_page_reload,
                replayed=True,
            )

        if self.startups.get_by_slug(slug):
            self.submissions.mark_failed(submission, failed_step=STEP_CREATE_STARTUP, error=DUPLICATE_SLUG_MESSAGE)
            raise OnboardingError(DUPLICATE_SLUG_MESSAGE, status_code=409)

        state = _SagaState(submission=submission)
        self._enter(state, STEP_CREATE_ORGANIZATION)
        sent_invitations: List[OrganizationInvitation] = []
        try:
            organization = await self.organizations.create_organization(
                name=startup_input.name,
                slug=slug,
                created_by=auth.user_id,
            )
            if not organization.id:
                self.submissions.mark_failed(
                    submission, failed_step=STEP_CREATE_ORGANIZATION, error="Organization response had no id"
                )
                raise OnboardingError(ORGANIZATION_FAILED_MESSAGE)
            state.organization_id = organization.id
            self.submissions.record_progress(submission, organization_id=organization.id)

            self._enter(state, STEP_CREATE_STARTUP)
            startup, _ = self.startups.create(
                name=startup_input.name,
                organization_id=organization.id,
                created_by=auth.user_id,
                co_founders=startup_input.co_founders,
                **startup_input.fields,
            )
            state.startup_id = startup.id
            self.submissions.record_progress(submission, startup_id=startup.id, slug=startup.slug)

            self._enter(state, STEP_INVITE_MEMBERS)
            for co_founder in startup_input.co_founders:
                invitation = await self.organizations.invite_member(
                    organization_id=organization.id,
                    email=co_founder.email,
                    inviter_user_id=auth.user_id,
                )
                sent_invitations.append(invitation)
                await self._send_invite_email(
                    auth=auth,
                    organization_name=organization.name,
                    invitation=invitation,
                )

            self._enter(state, STEP_ACTIVATE_ORGANIZATION)
            await self.organizations.set_active_organization(user_id=auth.user_id, organization_id=organization.id)
        except OnboardingError:
            raise
        except Exception as exc:  # noqa: BLE001
            await self._fail(state, auth=auth, sent_invitations=sent_invitations, exc=exc)
            if isinstance(exc, DuplicateSlugError):
                raise OnboardingError(DUPLICATE_SLUG_MESSAGE, status_code=409) from exc
            raise OnboardingError(GENERIC_FAILURE_MESSAGE) from exc

        self.submissions.mark_completed(submission)
        logger.info(
            "Onboarding completed",
            extra={
                "idempotency_key": submission.idempotency_key,
                "organization_id": state.organization_id,
                "startup_id": str(state.startup_id),
            },
        )
        return OnboardingResult(
            startup_id=startup.id,
            slug=startup.slug,
            organization_id=organization.id,
            redirect_url=settings.dashboard_url,
            full_page_reload=form.full_page_reload,
        )

    def _enter(self, state: _SagaState, step: str) -> None:
        state.step = step
        logger.info(
            "Onboarding step started",
            extra={"idempotency_key": state.submission.idempotency_key, "step": step},
        )

    def _begin(self, *, auth: AuthContext, idempotency_key: str, draft_id: Optional[UUID]) -> OnboardingSubmission:
        submission, created = self.submissions.get_or_create(
            idempotency_key=idempotency_key,
            user_id=auth.user_id,
            draft_id=draft_id,
        )
        if created:
            return submission
        if submission.user_id != auth.user_id:
            raise OnboardingError("Idempotency key is already used by another submission", status_code=409)
        if submission.status == OnboardingSubmissionStatusEnum.pending:
            raise OnboardingError("This onboarding submission is already in progress", status_code=409)
        if submission.status == OnboardingSubmissionStatusEnum.failed:
            # Failed attempts were compensated; retry from scratch.
            return self.submissions.restart(submission)
        return submission

    async def _send_invite_email(
        self,
        *,
        auth: AuthContext,
        organization_name: str,
        invitation: OrganizationInvitation,
    ) -> None:
        message = build_organization_invite_email(
            to=invitation.email,
            accept_url=build_accept_url(organization_id=invitation.organization_id, invitation_id=invitation.id),
            organization_name=organization_name,
            inviter_name=auth.name or auth.email or "A Catalys founder",
        )
        await self.emails.send(message)

    async def _fail(
        self,
        state: _SagaState,
        *,
        auth: AuthContext,
        sent_invitations: List[OrganizationInvitation],
        exc: Exception,
    ) -> None:
        logger.warning(
            "Onboarding step failed; compensating",
            extra={
                "idempotency_key": state.submission.idempotency_key,
                "failed_step": state.step,
                "organization_id": state.organization_id,
                "startup_id": str(state.startup_id) if state.startup_id else None,
            },
            exc_info=exc,
        )
        self.session.rollback()

        for invitation in reversed(sent_invitations):
            try:
                await self.organizations.revoke_invitation(
                    organization_id=invitation.organization_id,
                    invitation_id=invitation.id,
                    requesting_user_id=auth.user_id,
                )
            except Exception:  # noqa: BLE001
                logger.exception("Failed to revoke invitation", extra={"invitation_id": invitation.id})

        if state.startup_id is not None:
            try:
                self.startups.delete(state.startup_id)
            except Exception:  # noqa: BLE001
                self.session.rollback()
                logger.exception("Failed to delete startup", extra={"startup_id": str(state.startup_id)})

        if state.organization_id is not None:
            try:
                await self.organizations.delete_organization(state.organization_id)
            except Exception:  # noqa: BLE001
                logger.exception("Failed to delete organization", extra={"organization_id": state.organization_id})

        self.submissions.mark_failed(state.submission, failed_step=state.step, error=str(exc) or type(exc).__name__)
