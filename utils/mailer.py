# utils/mailer.py
import logging

import requests

import config
from utils.notify import format_naira

logger = logging.getLogger(__name__)


def send_email(to: str, subject: str, text: str, html: str = None) -> bool:
    """POST a message to the email endpoint. Best effort, never retried."""
    if not to:
        return False
    if not config.EMAIL_ENDPOINT_URL:
        logger.info("Email endpoint not configured, skipping '%s' -> %s", subject, to)
        return False

    headers = {}
    if config.EMAIL_ENDPOINT_TOKEN:
        headers["X-Internal-Token"] = config.EMAIL_ENDPOINT_TOKEN
    try:
        resp = requests.post(
            config.EMAIL_ENDPOINT_URL,
            json={"to": to, "subject": subject, "text": text, "html": html or text},
            headers=headers,
            timeout=config.HTTP_TIMEOUT,
        )
        if resp.status_code >= 300:
            logger.warning("Email endpoint answered %s for %s: %s", resp.status_code, to, resp.text[:200])
            return False
        return True
    except requests.RequestException as exc:
        logger.warning("Sending email to %s failed: %s", to, exc)
        return False


def send_booking_confirmation(to: str, name: str, package_title: str) -> bool:
    name = name or to
    return send_email(
        to,
        "Your Booking is Confirmed!",
        f"Dear {name},\n\nYour booking for {package_title} is confirmed.\n\n"
        f"Thank you for choosing {config.PLATFORM_NAME}!",
        f"<p>Dear {name},</p><p>Your booking for <b>{package_title}</b> is confirmed.</p>"
        f"<p>Thank you for choosing <b>{config.PLATFORM_NAME}</b>!</p>",
    )


def send_payment_success(to: str, name: str, booking_id: str, amount: int, package_title: str = None) -> bool:
    url = f"{config.APP_URL}/booking/{booking_id}"
    package_title = package_title or "your booking"
    return send_email(
        to,
        f"Payment received - {config.PLATFORM_NAME}",
        f"Hi {name or 'Customer'},\n\nWe've received your payment of {format_naira(amount)} "
        f"for {package_title}.\nYour booking reference is {booking_id}.\n\nView booking: {url}",
        f"<p>Hi {name or 'Customer'},</p>"
        f"<p>We've successfully received your payment of <strong>{format_naira(amount)}</strong> "
        f"for <strong>{package_title}</strong>.</p>"
        f"<p>Your booking reference is <strong>{booking_id}</strong>.</p>"
        f"<p><a href=\"{url}\">View booking</a></p>",
    )


def send_request_received(to: str, first_name: str) -> bool:
    return send_email(
        to,
        f"Your {config.PLATFORM_NAME} Booking Confirmation",
        f"Dear {first_name},\n\nYour booking has been received. We will contact you soon.\n\n"
        f"Thank you for choosing {config.PLATFORM_NAME}!",
        f"<p>Dear {first_name},</p><p>Your booking has been received. We will contact you soon.</p>"
        f"<p>Thank you for choosing <b>{config.PLATFORM_NAME}</b>!</p>",
    )


def send_agency_welcome(to: str, agency_name: str) -> bool:
    return send_email(
        to,
        f"Welcome to {config.PLATFORM_NAME}",
        f"Hello {agency_name},\n\nYour agency account has been created and is awaiting verification. "
        "Your packages will be visible to pilgrims once an admin verifies your agency.",
        f"<p>Hello {agency_name},</p><p>Your agency account has been created and is awaiting verification.</p>"
        "<p>Your packages will be visible to pilgrims once an admin verifies your agency.</p>",
    )
