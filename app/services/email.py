"""
Transactional email through the Resend REST API
"""

from html import escape
from typing import Any, Dict, Optional
import httpx
import structlog

from app.core.config import get_settings

logger = structlog.get_logger(__name__)
settings = get_settings()


def render_invitation(org_name: str, invite_url: str) -> Dict[str, str]:
    """Subject and bodies of the invitation email"""
    subject = f"Invitación a {org_name}"
    text = (
        f"Te invitaron a unirte a {org_name} en kuSystem.\n\n"
        f"Aceptá la invitación en: {invite_url}\n"
    )
    body = (
        f"<p>Te invitaron a unirte a <strong>{escape(org_name)}</strong> en kuSystem.</p>"
        f'<p><a href="{escape(invite_url)}">Aceptar invitación</a></p>'
    )
    return {"subject": subject, "text": text, "html": body}


async def send_invitation_email(
    to: str,
    org_name: str,
    invite_url: str,
    client: Optional[httpx.AsyncClient] = None,
) -> Dict[str, Any]:
    """
    Send an invitation email

    Args:
        to: Recipient address
        org_name: Organization the recipient is invited to
        invite_url: Link to the invitation acceptance page
        client: Optional HTTP client (tests inject a mock transport)

    Returns:
        Provider response, or {"id": "dev", "status": "logged"} when no API key
        is configured
    """
    content = render_invitation(org_name, invite_url)

    if not settings.RESEND_API_KEY:
        logger.info("Invitation email (not sent, no RESEND_API_KEY)", to=to, invite_url=invite_url)
        return {"id": "dev", "status": "logged"}

    payload = {
        "from": settings.EMAIL_FROM,
        "to": [to],
        "subject": content["subject"],
        "text": content["text"],
        "html": content["html"],
    }
    headers = {"Authorization": f"Bearer {settings.RESEND_API_KEY}"}

    owns_client = client is None
    http = client or httpx.AsyncClient(timeout=10.0)
    try:
        response = await http.post(settings.RESEND_API_URL, json=payload, headers=headers)
        response.raise_for_status()
    except httpx.HTTPError as e:
        logger.error("Invitation email failed", to=to, error=str(e))
        raise
    finally:
        if owns_client:
            await http.aclose()

    result = response.json()
    logger.info("Invitation email sent", to=to, provider_id=result.get("id"))
    return result
