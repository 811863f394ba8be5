"""Outgoing mail. Only account verification is sent; the console provider just logs the link."""

from __future__ import annotations

import logging
from email.utils import parseaddr
from typing import Callable, Optional

import httpx

from app.core.config import get_settings
from app.core.errors import External, Internal

logger = logging.getLogger(__name__)

RESEND_URL = "https://api.resend.com/emails"
BREVO_URL = "https://api.brevo.com/v3/smtp/email"


def _unquote(value: str) -> str:
    # Env vars are often pasted with surrounding quotes; providers reject that.
    v = (value or "").strip()
    if len(v) >= 2 and v[0] == v[-1] and v[0] in "\"'":
        v = v[1:-1].strip()
    return v


def sender_parts(value: str) -> tuple[Optional[str], str]:
    """Split `Name <addr>` or a bare address into (name, addr)."""
    raw = _unquote(value)
    name, address = parseaddr(raw)
    if not address:
        return None, raw
    return (name.strip() or None), address.strip()


def verification_link(token: str) -> str:
    return f"{get_settings().frontend_base_url.rstrip('/')}/verify?token={token}"


def _verification_html(username: str, link: str) -> str:
    return f"""
    <div style="font-family: Arial, sans-serif; line-height: 1.6;">
      <h2 style="margin: 0 0 8px;">Welcome, {username}</h2>
      <p style="margin: 0 0 14px;">Confirm your address to unlock the rest of the game.</p>
      <p style="margin: 0 0 16px;"><a href="{link}">Verify account</a></p>
      <p style="margin: 0; font-size: 13px;">{link}</p>
    </div>
    """.strip()


def _post(provider: str, url: str, payload: dict, headers: dict) -> None:
    try:
        with httpx.Client(timeout=15) as client:
            res = client.post(url, json=payload, headers=headers)
    except httpx.HTTPError as exc:
        raise External(f"{provider} unreachable") from exc
    if res.status_code >= 400:
        raise External(f"{provider} error: {res.status_code}", extra={"body": res.text[:200]})


def _resend(to_email: str, subject: str, html: str) -> None:
    settings = get_settings()
    if not settings.resend_api_key:
        raise Internal("RESEND_API_KEY is required when EMAIL_PROVIDER=resend")
    _post(
        "Resend",
        RESEND_URL,
        {"from": _unquote(settings.email_from), "to": [to_email], "subject": subject, "html": html},
        {"Authorization": f"Bearer {settings.resend_api_key}"},
    )


def _brevo(to_email: str, subject: str, html: str) -> None:
    settings = get_settings()
    if not settings.brevo_api_key:
        raise Internal("BREVO_API_KEY is required when EMAIL_PROVIDER=brevo")
    name, address = sender_parts(settings.email_from)
    _post(
        "Brevo",
        BREVO_URL,
        {
            "sender": {"name": name or settings.app_name, "email": address},
            "to": [{"email": to_email}],
            "subject": subject,
            "htmlContent": html,
        },
        {"api-key": settings.brevo_api_key, "Accept": "application/json"},
    )


_PROVIDERS: dict[str, Callable[[str, str, str], None]] = {
    "resend": _resend,
    "brevo": _brevo,
}


def send_verification_email(to_email: str, username: str, token: str) -> None:
    settings = get_settings()
    link = verification_link(token)
    subject = "Verify your account"
    to_email = (to_email or "").strip()

    provider = (settings.email_provider or "console").lower()
    if provider == "console":
        logger.info("[email][console] to=%s subject=%s link=%s", to_email, subject, link)
        return

    send = _PROVIDERS.get(provider)
    if send is None:
        raise Internal(f"Unsupported EMAIL_PROVIDER: {settings.email_provider}")
    send(to_email, subject, _verification_html(username, link))
    logger.info("Verification email sent provider=%s", provider)
