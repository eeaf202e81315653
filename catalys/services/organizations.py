from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Any, Optional

import httpx

from catalys.config import settings

logger = logging.getLogger(__name__)

DEFAULT_MEMBER_ROLE = "org:member"


class OrganizationProviderError(RuntimeError):
    def __init__(self, *, message: str, status_code: int = 502) -> None:
        super().__init__(message)
        self.status_code = status_code


@dataclass
class Organization:
    id: Optional[str]
    name: str
    slug: Optional[str] = None


@dataclass
class OrganizationInvitation:
    id: str
    organization_id: str
    email: str
    role: str
    status: str
    organization_name: Optional[str] = None
    expires_at: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        return self.status == "pending"


def _invitation_from_payload(body: dict[str, Any], organization_id: str) -> OrganizationInvitation:
    invitation_id = body.get("id")
    if not isinstance(invitation_id, str) or not invitation_id:
        raise OrganizationProviderError(message="Invitation response is missing id")
    organization = body.get("public_organization_data") or {}
    return OrganizationInvitation(
        id=invitation_id,
        organization_id=body.get("organization_id") or organization_id,
        email=str(body.get("email_address") or ""),
        role=str(body.get("role") or DEFAULT_MEMBER_ROLE),
        status=str(body.get("status") or "pending"),
        organization_name=organization.get("name"),
        expires_at=body.get("expires_at"),
    )


class ClerkOrganizationClient:
    """Organizations, invitations and memberships through the Clerk Backend API."""

    def __init__(self) -> None:
        self._base_url = settings.CLERK_API_BASE_URL.rstrip("/")
        self._timeout = settings.CLERK_REQUEST_TIMEOUT_SECONDS

    async def create_organization(self, *, name: str, slug: str, created_by: str) -> Organization:
        body = await self._request(
            "POST",
            "/organizations",
            payload={"name": name, "slug": slug, "created_by": created_by},
        )
        organization_id = body.get("id")
        return Organization(
            id=organization_id if isinstance(organization_id, str) and organization_id else None,
            name=str(body.get("name") or name),
            slug=body.get("slug") or slug,
        )

    async def delete_organization(self, organization_id: str) -> None:
        await self._request("DELETE", f"/organizations/{organization_id}")

    async def invite_member(
        self,
        *,
        organization_id: str,
        email: str,
        inviter_user_id: str,
        role: str = DEFAULT_MEMBER_ROLE,
        redirect_url: Optional[str] = None,
    ) -> OrganizationInvitation:
        payload: dict[str, Any] = {
            "email_address": email,
            "inviter_user_id": inviter_user_id,
            "role": role,
        }
        if redirect_url:
            payload["redirect_url"] = redirect_url
        body = await self._request("POST", f"/organizations/{organization_id}/invitations", payload=payload)
        return _invitation_from_payload(body, organization_id)

    async def revoke_invitation(self, *, organization_id: str, invitation_id: str, requesting_user_id: str) -> None:
        await self._request(
            "POST",
            f"/organizations/{organization_id}/invitations/{invitation_id}/revoke",
            payload={"requesting_user_id": requesting_user_id},
        )

    async def get_invitation(self, *, organization_id: str, invitation_id: str) -> OrganizationInvitation:
        body = await self._request("GET", f"/organizations/{organization_id}/invitations/{invitation_id}")
        return _invitation_from_payload(body, organization_id)

    async def accept_invitation(
        self,
        *,
        organization_id: str,
        invitation_id: str,
        user_id: str,
        email: Optional[str],
    ) -> OrganizationInvitation:
        """Join ``user_id`` to the organization named by a pending invitation addressed to ``email``."""
        invitation = await self.get_invitation(organization_id=organization_id, invitation_id=invitation_id)
        if not invitation.is_pending:
            raise OrganizationProviderError(
                message=f"Invitation is {invitation.status}, not pending",
                status_code=409,
            )
        if not email or email.strip().lower() != invitation.email.strip().lower():
            raise OrganizationProviderError(
                message="Invitation was sent to a different email address",
                status_code=403,
            )
        await self._request(
            "POST",
            f"/organizations/{organization_id}/memberships",
            payload={"user_id": user_id, "role": invitation.role},
        )
        return invitation

    async def set_active_organization(self, *, user_id: str, organization_id: str) -> None:
        # The active organization follows the user into new sessions via public metadata.
        await self._request(
            "PATCH",
            f"/users/{user_id}/metadata",
            payload={"public_metadata": {"active_organization_id": organization_id}},
        )

    async def _request(
        self,
        method: str,
        path: str,
        *,
        payload: Optional[dict[str, Any]] = None,
    ) -> dict[str, Any]:
        if not settings.CLERK_SECRET_KEY:
            raise OrganizationProviderError(message="CLERK_SECRET_KEY is not configured", status_code=500)
        headers = {"Authorization": f"Bearer {settings.CLERK_SECRET_KEY}"}
        url = f"{self._base_url}{path}"
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.request(method, url, json=payload, headers=headers)
        except httpx.RequestError as exc:
            raise OrganizationProviderError(message=f"Network error while calling Clerk: {exc}") from exc

        if response.status_code == 404:
            raise OrganizationProviderError(message=f"Clerk resource not found: {path}", status_code=404)
        if response.status_code >= 400:
            logger.warning(
                "Clerk API call failed",
                extra={"method": method, "path": path, "status_code": response.status_code},
            )
            raise OrganizationProviderError(
                message=f"Clerk API call failed ({response.status_code}): {response.text}",
                status_code=502,
            )
        if not response.content:
            return {}

        try:
            body = response.json()
        except ValueError as exc:
            raise OrganizationProviderError(message="Clerk API returned invalid JSON") from exc

        if not isinstance(body, dict):
            raise OrganizationProviderError(message="Clerk API response must be a JSON object")
        return body


organization_client = ClerkOrganizationClient()


def get_organization_client() -> ClerkOrganizationClient:
    return organization_client
