import asyncio
import json

import httpx
import pytest

from catalys.config import settings
from catalys.services.organizations import ClerkOrganizationClient, OrganizationProviderError


class RecordingRequests:
    def __init__(self, responses):
        self.responses = list(responses)
        self.calls = []

    async def __call__(self, method, path, *, payload=None):
        self.calls.append((method, path, payload))
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response


def _client(monkeypatch, *responses):
    client = ClerkOrganizationClient()
    recorder = RecordingRequests(responses)
    monkeypatch.setattr(client, "_request", recorder)
    return client, recorder


def test_create_organization(monkeypatch):
    client, recorder = _client(monkeypatch, {"id": "org_1", "name": "Acme", "slug": "acme"})

    organization = asyncio.run(client.create_organization(name="Acme", slug="acme", created_by="user_1"))

    assert organization.id == "org_1"
    assert recorder.calls == [
        ("POST", "/organizations", {"name": "Acme", "slug": "acme", "created_by": "user_1"}),
    ]


def test_create_organization_without_id(monkeypatch):
    client, _ = _client(monkeypatch, {"name": "Acme"})

    organization = asyncio.run(client.create_organization(name="Acme", slug="acme", created_by="user_1"))
    assert organization.id is None


def test_invite_member(monkeypatch):
    client, recorder = _client(
        monkeypatch,
        {"id": "inv_1", "email_address": "ada@example.com", "role": "org:member", "status": "pending"},
    )

    invitation = asyncio.run(
        client.invite_member(organization_id="org_1", email="ada@example.com", inviter_user_id="user_1")
    )

    assert invitation.id == "inv_1"
    assert invitation.organization_id == "org_1"
    assert invitation.is_pending
    method, path, payload = recorder.calls[0]
    assert (method, path) == ("POST", "/organizations/org_1/invitations")
    assert payload == {"email_address": "ada@example.com", "inviter_user_id": "user_1", "role": "org:member"}


def test_accept_invitation_adds_membership(monkeypatch):
    client, recorder = _client(
        monkeypatch,
        {"id": "inv_1", "email_address": "Ada@Example.com", "role": "org:member", "status": "pending"},
        {"id": "mem_1"},
    )

    invitation = asyncio.run(
        client.accept_invitation(
            organization_id="org_1",
            invitation_id="inv_1",
            user_id="user_2",
            email="ada@example.com",
        )
    )

    assert invitation.id == "inv_1"
    assert recorder.calls[1] == (
        "POST",
        "/organizations/org_1/memberships",
        {"user_id": "user_2", "role": "org:member"},
    )


def test_accept_invitation_rejects_non_pending(monkeypatch):
    client, recorder = _client(
        monkeypatch,
        {"id": "inv_1", "email_address": "ada@example.com", "status": "revoked"},
    )

    with pytest.raises(OrganizationProviderError) as excinfo:
        asyncio.run(
            client.accept_invitation(
                organization_id="org_1",
                invitation_id="inv_1",
                user_id="user_2",
                email="ada@example.com",
            )
        )
    assert excinfo.value.status_code == 409
    assert len(recorder.calls) == 1


def test_accept_invitation_rejects_other_email(monkeypatch):
    client, _ = _client(
        monkeypatch,
        {"id": "inv_1", "email_address": "ada@example.com", "status": "pending"},
    )

    with pytest.raises(OrganizationProviderError) as excinfo:
        asyncio.run(
            client.accept_invitation(
                organization_id="org_1",
                invitation_id="inv_1",
                user_id="user_2",
                email="mallory@example.com",
            )
        )
    assert excinfo.value.status_code == 403


def test_set_active_organization(monkeypatch):
    client, recorder = _client(monkeypatch, {})

    asyncio.run(client.set_active_organization(user_id="user_1", organization_id="org_1"))
    assert recorder.calls == [
        ("PATCH", "/users/user_1/metadata", {"public_metadata": {"active_organization_id": "org_1"}}),
    ]


def _mock_transport(monkeypatch, handler):
    real_async_client = httpx.AsyncClient

    def factory(**kwargs):
        return real_async_client(transport=httpx.MockTransport(handler), **kwargs)

    monkeypatch.setattr(httpx, "AsyncClient", factory)


def test_request_requires_secret_key(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", None)

    with pytest.raises(OrganizationProviderError) as excinfo:
        asyncio.run(ClerkOrganizationClient().delete_organization("org_1"))
    assert excinfo.value.status_code == 500


def test_request_sends_bearer_secret(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", "sk_test_catalys")
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": "org_1", "name": "Acme", "slug": "acme"})

    _mock_transport(monkeypatch, handler)
    organization = asyncio.run(ClerkOrganizationClient().create_organization(name="Acme", slug="acme", created_by="u"))

    assert organization.id == "org_1"
    [request] = seen
    assert request.method == "POST"
    assert request.url.path.endswith("/organizations")
    assert request.headers["Authorization"] == "Bearer sk_test_catalys"
    assert json.loads(request.content)["slug"] == "acme"


@pytest.mark.parametrize(("status_code", "expected"), [(404, 404), (422, 502), (500, 502)])
def test_request_maps_error_statuses(monkeypatch, status_code, expected):
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", "sk_test_catalys")
    _mock_transport(monkeypatch, lambda request: httpx.Response(status_code, json={"errors": []}))

    with pytest.raises(OrganizationProviderError) as excinfo:
        asyncio.run(ClerkOrganizationClient().get_invitation(organization_id="org_1", invitation_id="inv_1"))
    assert excinfo.value.status_code == expected


def test_request_network_error(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", "sk_test_catalys")

    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    _mock_transport(monkeypatch, handler)
    with pytest.raises(OrganizationProviderError) as excinfo:
        asyncio.run(ClerkOrganizationClient().get_invitation(organization_id="org_1", invitation_id="inv_1"))
    assert excinfo.value.status_code == 502


def test_request_empty_body(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_SECRET_KEY", "sk_test_catalys")
    _mock_transport(monkeypatch, lambda request: httpx.Response(204))

    assert asyncio.run(ClerkOrganizationClient().delete_organization("org_1")) is None
