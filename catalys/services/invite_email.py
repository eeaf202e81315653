from html import escape
from urllib.parse import urlencode

from catalys.config import settings
from catalys.services.email import EmailMessage


def build_accept_url(*, organization_id: str, invitation_id: str) -> str:
    query = urlencode({"organizationId": organization_id, "invitationId": invitation_id})
    return f"{settings.app_base_url}{settings.ACCEPT_INVITE_PATH}?{query}"


def build_organization_invite_email(
    *,
    to: str,
    accept_url: str,
    organization_name: str,
    inviter_name: str,
) -> EmailMessage:
    subject = f"You're invited to join {organization_name} on Catalys"
    html = (
        "<div style=\"font-family:Arial,sans-serif;max-width:560px;margin:0 auto;\">"
        f"<h1 style=\"font-size:22px;\">Join {escape(organization_name)} on Catalys</h1>"
        f"<p>{escape(inviter_name)} invited you to collaborate on Catalys. "
        "Click the button below to accept the invitation and finish setting up your account.</p>"
        f"<p><a href=\"{escape(accept_url, quote=True)}\" target=\"_blank\" rel=\"noopener noreferrer\" "
        "style=\"display:inline-block;padding:14px 28px;background:#6366F1;color:#FFFFFF;"
        "text-decoration:none;border-radius:999px;font-weight:600;\">Accept Invitation</a></p>"
        "<p>If the button doesn't work, copy and paste this URL into your browser:<br/>"
        f"{escape(accept_url)}</p>"
        "<p style=\"color:#6B7280;font-size:12px;\">This invitation was sent from Catalys. "
        "If you weren't expecting it, you can ignore this email.</p>"
        "</div>"
    )
    text = (
        f"{inviter_name} invited you to join {organization_name} on Catalys.\n\n"
        f"Accept your invitation:\n{accept_url}\n\n"
        "If you weren't expecting this invitation, you can ignore this email."
    )
    return EmailMessage(to=to, subject=subject, html=html, text=text)
