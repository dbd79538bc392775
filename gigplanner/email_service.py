"""
Email Service using Resend
Notifications are written as MJML templates and compiled to responsive HTML
"""

import logging
from typing import Optional, Union

import resend
from mjml import mjml_to_html

from .config import ADMIN_NOTIFICATION_EMAIL, EMAIL_FROM_ADDRESS, RESEND_API_KEY
from .email_templates import (
    contract_response_template,
    contract_sent_template,
    planner_finalized_template,
)

logger = logging.getLogger(__name__)

resend.api_key = RESEND_API_KEY


class EmailNotConfiguredError(RuntimeError):
    """Raised when no email provider is configured"""


class EmailDeliveryError(RuntimeError):
    """Raised when the provider rejects or fails a send"""


def is_email_configured() -> bool:
    return bool(RESEND_API_KEY)


def compile_mjml_to_html(mjml_content: str) -> str:
    """Compile MJML template to production-ready HTML"""
    result = mjml_to_html(mjml_content)
    # mjml_to_html returns a dict-like result with 'html' and 'errors' keys
    if isinstance(result, dict):
        if result.get("errors"):
            logger.warning(f"MJML compilation warnings: {result['errors']}")
        return result.get("html", "")
    return str(result)


async def send_email(
    to: Union[str, list[str]],
    subject: str,
    mjml_content: str,
    from_address: Optional[str] = None,
) -> dict:
    """
    Send an email through Resend

    Args:
        to: Recipient email(s)
        subject: Email subject line
        mjml_content: MJML template content (will be compiled to HTML)
        from_address: Optional custom from address

    Returns:
        Send response dict
    """
    if not RESEND_API_KEY:
        logger.error("❌ No email service configured - RESEND_API_KEY missing")
        raise EmailNotConfiguredError("Email service not configured")

    recipients = [to] if isinstance(to, str) else to
    html_content = compile_mjml_to_html(mjml_content)

    try:
        logger.info(f"📧 Sending email via Resend to: {recipients}")
        response = resend.Emails.send(
            {
                "from": from_address or EMAIL_FROM_ADDRESS,
                "to": recipients,
                "subject": subject,
                "html": html_content,
            }
        )
        logger.info(f"✅ Email sent successfully via Resend: {response}")
        return response
    except Exception as e:
        logger.error(f"❌ Email send error to {recipients}: {e}")
        raise EmailDeliveryError(f"Failed to send email: {str(e)}") from e


# ============================================
# Pre-built notifications
# ============================================


async def send_contract_email(
    to: str,
    musician_name: str,
    period_label: str,
    lines: list[dict],
    total: float,
    signing_url: str,
    expires_on: str,
    message: Optional[str] = None,
) -> dict:
    """Send the signing link for a contract to a musician"""
    mjml_content = contract_sent_template(
        musician_name, period_label, lines, total, signing_url, expires_on, message
    )
    return await send_email(
        to=to,
        subject=f"Performance contract for {period_label}",
        mjml_content=mjml_content,
    )


async def send_contract_response_notification(
    musician_name: str,
    period_label: str,
    verdict: str,
    signature: Optional[str] = None,
    notes: Optional[str] = None,
) -> Optional[dict]:
    """Tell the office a musician responded; skipped when no admin address is set"""
    if not ADMIN_NOTIFICATION_EMAIL:
        logger.debug("No ADMIN_NOTIFICATION_EMAIL configured - skipping response notification")
        return None

    mjml_content = contract_response_template(
        musician_name, period_label, verdict, signature, notes
    )
    return await send_email(
        to=ADMIN_NOTIFICATION_EMAIL,
        subject=f"{musician_name} {verdict.replace('-', ' ')} the {period_label} contract",
        mjml_content=mjml_content,
    )


async def send_planner_finalized_email(
    to: str, musician_name: str, period_label: str, lines: list[dict], total: float
) -> dict:
    mjml_content = planner_finalized_template(musician_name, period_label, lines, total)
    return await send_email(
        to=to,
        subject=f"Your schedule for {period_label}",
        mjml_content=mjml_content,
    )
