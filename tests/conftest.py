import os
import sys
from pathlib import Path
from typing import Optional

import pytest
from fastapi.testclient import TestClient

ROOT = Path(__file__).resolve().parents[1]
TEST_DB_PATH = Path(__file__).resolve().parent / "test.db"

os.environ.setdefault("DATABASE_URL", f"sqlite:///{TEST_DB_PATH}")
os.environ.setdefault("CLERK_JWT_ISSUER", "https://clerk.catalys.example")
os.environ.setdefault("CLERK_JWKS_URL", "https://clerk.catalys.example/.well-known/jwks.json")
os.environ.setdefault("CLERK_SECRET_KEY", "sk_test_catalys")
os.environ.setdefault("APP_BASE_URL", "https://app.catalys.example")

if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from catalys.services.organizations import (  # noqa: E402
    Organization,
    OrganizationInvitation,
    OrganizationProviderError,
)


class FakeOrganizationClient:
    """In-memory stand-in for the Clerk organization API."""

    def __init__(self) -> None:
        self.calls: list[tuple] = []
        self.organizations: dict[str, Organization] = {}
        self.invitations: dict[str, OrganizationInvitation] = {}
        self.memberships: list[tuple[str, str]] = []
        self.active_organizations: dict[str, str] = {}
        self.fail_on: set[str] = set()
        self.omit_organization_id = False

    def _record(self, name: str, *args) -> None:
        self.calls.append((name, *args))
        if name in self.fail_on:
            raise OrganizationProviderError(message=f"{name} failed")

    def count(self, name: str) -> int:
        return sum(1 for call in self.calls if call[0] == name)

    async def create_organization(self, *, name: str, slug: str, created_by: str) -> Organization:
        self._record("create_organization", slug, created_by)
        if self.omit_organization_id:
            return Organization(id=None, name=name, slug=slug)
        organization = Organization(id=f"org_{len(self.organizations) + 1}", name=name, slug=slug)
        self.organizations[organization.id] = organization
        return organization

    async def delete_organization(self, organization_id: str) -> None:
        self._record("delete_organization", organization_id)
        self.organizations.pop(organization_id, None)

    async def invite_member(
        self,
        *,
        organization_id: str,
        email: str,
        inviter_user_id: str,
        role: str = "org:member",
        redirect_url: Optional[str] = None,
    ) -> OrganizationInvitation:
        self._record("invite_member", organization_id, email)
        organization = self.organizations.get(organization_id)
        invitation = OrganizationInvitation(
            id=f"inv_{len(self.invitations) + 1}",
            organization_id=organization_id,
            email=email,
            role=role,
            status="pending",
            organization_name=organization.name if organization else None,
        )
        self.invitations[invitation.id] = invitation
        return invitation

    async def revoke_invitation(self, *, organization_id: str, invitation_id: str, requesting_user_id: str) -> None:
        self._record("revoke_invitation", organization_id, invitation_id)
        self.invitations[invitation_id].status = "revoked"

    async def get_invitation(self, *, organization_id: str, invitation_id: str) -> OrganizationInvitation:
        self._record("get_invitation", organization_id, invitation_id)
        invitation = self.invitations.get(invitation_id)
        if invitation is None or invitation.organization_id != organization_id:
            raise OrganizationProviderError(message="Clerk resource not found", status_code=404)
        return invitation

    async def accept_invitation(
        self,
        *,
        organization_id: str,
        invitation_id: str,
        user_id: str,
        email: Optional[str],
    ) -> OrganizationInvitation:
        invitation = await self.get_invitation(organization_id=organization_id, invitation_id=invitation_id)
        self._record("accept_invitation", organization_id, invitation_id, user_id)
        if not invitation.is_pending:
            raise OrganizationProviderError(message="Invitation is not pending", status_code=409)
        if (email or "").lower() != invitation.email.lower():
            raise OrganizationProviderError(message="Invitation was sent to a different email address", status_code=403)
        invitation.status = "accepted"
        self.memberships.append((organization_id, user_id))
        return invitation

    async def set_active_organization(self, *, user_id: str, organization_id: str) -> None:
        self._record("set_active_organization", user_id, organization_id)
        self.active_organizations[user_id] = organization_id


class FakeEmailClient:
    def __init__(self) -> None:
        self.sent = []

    @property
    def is_configured(self) -> bool:
        return True

    async def send(self, message) -> bool:
        self.sent.append(message)
        return True


def fake_claims(token: str) -> dict:
    # Tests use the bearer token itself as the Clerk user id.
    return {"sub": token, "email": f"{token}@example.com", "name": token.replace("_", " ").title()}


@pytest.fixture
def db_session():
    from catalys.db.base import Base, SessionLocal, engine, init_db

    init_db()
    with engine.begin() as connection:
        for table in reversed(Base.metadata.sorted_tables):
            connection.execute(table.delete())

    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def fake_organizations() -> FakeOrganizationClient:
    return FakeOrganizationClient()


@pytest.fixture
def fake_emails() -> FakeEmailClient:
    return FakeEmailClient()


@pytest.fixture
def auth_headers():
    def _headers(user_id: str = "user_founder") -> dict[str, str]:
        return {"Authorization": f"Bearer {user_id}"}

    return _headers


@pytest.fixture
def api_client(db_session, monkeypatch, fake_organizations, fake_emails):
    from catalys.auth import dependencies as auth_dependencies
    from catalys.db.deps import get_session
    from catalys.main import app
    from catalys.services.email import get_email_client
    from catalys.services.organizations import get_organization_client

    def get_session_override():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides.clear()
    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_organization_client] = lambda: fake_organizations
    app.dependency_overrides[get_email_client] = lambda: fake_emails
    monkeypatch.setattr(auth_dependencies, "verify_clerk_token", fake_claims)

    try:
        with TestClient(app) as client:
            yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def dashboard_values() -> dict:
    return {
        "name": "Acme! Inc.",
        "shortDescription": "Payroll for tiny teams",
        "industry": "SaaS",
        "location": "Berlin",
        "website": "https://acme.example.com",
        "description": "Acme runs payroll, taxes and benefits for teams of one to ten people in Europe.",
        "problemSolving": "Small teams lose days every month to payroll paperwork.",
        "targetMarket": "European micro-businesses with fewer than ten employees.",
        "stage": "MVP",
        "foundedDate": "2024-02-01",
        "traction": "40 paying customers",
        "fundingStage": "PRE_SEED",
        "teamSize": 2,
        "coFounders": [
            {"name": "Ada Lovelace", "email": "ada@example.com", "role": "CTO", "equityPercentage": 40},
        ],
    }


@pytest.fixture
def application_values() -> dict:
    return {
        "companyName": "Acme! Inc.",
        "shortDescription": "Payroll for tiny teams",
        "companyUrl": "https://acme.example.com",
        "demoVideo": "",
        "whatMaking": "A payroll service that runs itself for micro-businesses.",
        "futureLocation": "Berlin",
        "locationExplanation": "Our first customers are all in Germany.",
        "whyThisIdea": "We ran payroll by hand at our last company and hated it.",
        "customerNeed": "Forty teams pay for the beta without any marketing.",
        "competitors": "Gusto, Personio, spreadsheets",
        "monetization": "Per-employee monthly subscription with a free tier.",
        "category": "Fintech",
        "howFarAlong": "Beta live with forty paying teams since March.",
        "workingTime": "Both founders full time since January.",
        "techStack": "Python, FastAPI, Postgres, React",
        "peopleUsing": "yes",
        "versionTimeline": "",
        "hasRevenue": "yes",
        "appliedBefore": "first_time",
        "previousApplicationNotes": "",
        "incubatorInfo": "",
        "hasLegalEntity": "yes",
        "legalEntities": "Acme GmbH (Germany)",
        "equityBreakdown": "50/50 between the founders",
        "investmentTaken": "no",
        "currentlyFundraising": "yes",
    }
