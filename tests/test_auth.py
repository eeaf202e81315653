import pytest
from fastapi import HTTPException

from catalys.auth import clerk
from catalys.auth.dependencies import auth_context_from_claims
from catalys.config import settings


def test_auth_context_from_claims():
    context = auth_context_from_claims(
        {"sub": "user_1", "email": "ada@example.com", "name": "Ada", "org_id": "org_1"}
    )

    assert context.user_id == "user_1"
    assert context.email == "ada@example.com"
    assert context.name == "Ada"
    assert context.org_id == "org_1"


def test_auth_context_requires_subject():
    with pytest.raises(HTTPException) as excinfo:
        auth_context_from_claims({"email": "ada@example.com"})
    assert excinfo.value.status_code == 401


def test_audience_check(monkeypatch):
    monkeypatch.setattr(settings, "CLERK_AUDIENCE", ["backend"])

    clerk._check_audience({"aud": "backend"})
    clerk._check_audience({"azp": ["backend", "other"]})
    clerk._check_audience({})
    with pytest.raises(HTTPException):
        clerk._check_audience({"aud": "someone-else"})


def test_signing_key_refetched_after_rotation(monkeypatch):
    fetches = []
    key_sets = [{"keys": [{"kid": "old"}]}, {"keys": [{"kid": "new", "alg": "RS256"}]}]

    def fake_fetch():
        fetches.append(1)
        return key_sets[len(fetches) - 1]

    monkeypatch.setattr(clerk, "_fetch_jwks", fake_fetch)
    monkeypatch.setattr(clerk.jwt, "get_unverified_header", lambda token: {"kid": "new"})

    assert clerk._get_public_key("token")["kid"] == "new"
    assert len(fetches) == 2


def test_unknown_signing_key(monkeypatch):
    monkeypatch.setattr(clerk, "_fetch_jwks", lambda: {"keys": []})
    monkeypatch.setattr(clerk.jwt, "get_unverified_header", lambda token: {"kid": "missing"})

    with pytest.raises(HTTPException) as excinfo:
        clerk._get_public_key("token")
    assert excinfo.value.status_code == 401
