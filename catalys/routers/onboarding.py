from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Header, HTTPException, status
from sqlalchemy.orm import Session

from catalys.auth.dependencies import AuthContext, get_current_user, get_optional_user
from catalys.db.deps import get_session
from catalys.db.models import OnboardingDraft
from catalys.db.repositories.onboarding import OnboardingDraftsRepository
from catalys.onboarding.forms import get_form
from catalys.onboarding.preview import StartupPreview
from catalys.onboarding.wizard import OnboardingWizard
from catalys.schemas.onboarding import (
    DraftCreateRequest,
    DraftStateResponse,
    DraftUpdateRequest,
    SubmitResponse,
    WizardStepInfo,
)
from catalys.services.email import ResendEmailClient, get_email_client
from catalys.services.onboarding import LOGIN_REQUIRED_MESSAGE, OnboardingError, OnboardingOrchestrator
from catalys.services.organizations import ClerkOrganizationClient, get_organization_client

router = APIRouter(prefix="/onboarding", tags=["onboarding"])


def _load(session: Session, auth: AuthContext, draft_id: UUID) -> tuple[OnboardingDraft, OnboardingWizard]:
    draft = OnboardingDraftsRepository(session).get(auth.user_id, draft_id)
    if not draft:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Onboarding draft not found")
    wizard = OnboardingWizard(
        get_form(draft.variant),
        current_step=draft.current_step,
        values=draft.values,
        errors=draft.errors,
    )
    return draft, wizard


def _save(session: Session, draft: OnboardingDraft, wizard: OnboardingWizard) -> OnboardingDraft:
    return OnboardingDraftsRepository(session).save_state(
        draft,
        current_step=wizard.current_step,
        values=wizard.values,
        errors=wizard.errors,
    )


def _state(draft: OnboardingDraft, wizard: OnboardingWizard, advanced: Optional[bool] = None) -> DraftStateResponse:
    step = wizard.step
    return DraftStateResponse(
        id=draft.id,
        variant=draft.variant,
        current_step=wizard.current_step,
        step_count=wizard.form.step_count,
        is_first_step=wizard.is_first_step,
        is_last_step=wizard.is_last_step,
        step=WizardStepInfo(
            id=step.id,
            title=step.title,
            description=step.description,
            fields=list(step.fields),
            visible_fields=list(wizard.visible_fields()),
        ),
        values=wizard.values,
        errors=wizard.errors,
        preview=wizard.preview(),
        advanced=advanced,
    )


@router.post("/drafts", status_code=status.HTTP_201_CREATED, response_model=DraftStateResponse)
def create_draft(
    payload: DraftCreateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    form = get_form(payload.variant)
    wizard = OnboardingWizard(form)
    try:
        wizard.update_values(payload.values)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    draft = OnboardingDraftsRepository(session).create(
        user_id=auth.user_id,
        variant=payload.variant,
        values=wizard.values,
    )
    return _state(draft, wizard)


@router.get("/drafts/{draft_id}", response_model=DraftStateResponse)
def get_draft(
    draft_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    draft, wizard = _load(session, auth, draft_id)
    return _state(draft, wizard)


@router.patch("/drafts/{draft_id}", response_model=DraftStateResponse)
def update_draft(
    draft_id: UUID,
    payload: DraftUpdateRequest,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    draft, wizard = _load(session, auth, draft_id)
    try:
        wizard.update_values(payload.values)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    draft = _save(session, draft, wizard)
    return _state(draft, wizard)


@router.post("/drafts/{draft_id}/next", response_model=DraftStateResponse)
def next_step(
    draft_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    draft, wizard = _load(session, auth, draft_id)
    advanced = wizard.next_step()
    draft = _save(session, draft, wizard)
    return _state(draft, wizard, advanced=advanced)


@router.post("/drafts/{draft_id}/prev", response_model=DraftStateResponse)
def prev_step(
    draft_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    draft, wizard = _load(session, auth, draft_id)
    wizard.prev_step()
    draft = _save(session, draft, wizard)
    return _state(draft, wizard)


@router.post("/drafts/{draft_id}/co-founders", response_model=DraftStateResponse)
def add_co_founder(
    draft_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    draft, wizard = _load(session, auth, draft_id)
    try:
        wizard.add_co_founder()
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    draft = _save(session, draft, wizard)
    return _state(draft, wizard)


@router.delete("/drafts/{draft_id}/co-founders/{index}", response_model=DraftStateResponse)
def remove_co_founder(
    draft_id: UUID,
    index: int,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    draft, wizard = _load(session, auth, draft_id)
    try:
        wizard.remove_co_founder(index)
    except ValueError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except IndexError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    draft = _save(session, draft, wizard)
    return _state(draft, wizard)


@router.get("/drafts/{draft_id}/preview", response_model=StartupPreview)
def preview_draft(
    draft_id: UUID,
    auth: AuthContext = Depends(get_current_user),
    session: Session = Depends(get_session),
):
    _, wizard = _load(session, auth, draft_id)
    return wizard.preview()


@router.post("/drafts/{draft_id}/submit", response_model=SubmitResponse)
async def submit_draft(
    draft_id: UUID,
    idempotency_key: Optional[str] = Header(default=None, alias="Idempotency-Key"),
    auth: Optional[AuthContext] = Depends(get_optional_user),
    session: Session = Depends(get_session),
    organizations: ClerkOrganizationClient = Depends(get_organization_client),
    emails: ResendEmailClient = Depends(get_email_client),
):
    if auth is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=LOGIN_REQUIRED_MESSAGE)

    draft, wizard = _load(session, auth, draft_id)
    errors = wizard.validate_all()
    if errors:
        wizard.current_step = wizard.first_invalid_step() or wizard.current_step
        _save(session, draft, wizard)
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail={"errors": errors, "current_step": wizard.current_step},
        )

    orchestrator = OnboardingOrchestrator(session, organizations=organizations, emails=emails)
    try:
        result = await orchestrator.submit(
            auth=auth,
            form=wizard.form,
            values=wizard.values,
            idempotency_key=idempotency_key,
            draft_id=draft.id,
        )
    except OnboardingError as exc:
        raise HTTPException(status_code=exc.status_code, detail=exc.message) from exc

    return SubmitResponse(
        startup_id=result.startup_id,
        slug=result.slug,
        organization_id=result.organization_id,
        redirect_url=result.redirect_url,
        full_page_reload=result.full_page_reload,
        replayed=result.replayed,
    )
