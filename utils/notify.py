# utils/notify.py
"""Fire-and-forget chat webhook notifications.

Every domain event (agency registered / verified / deleted, package
created / updated / deleted, payment received / confirmed, service request)
is POSTed as a Discord-style embed to the URL configured for its category.
Failures are logged and swallowed: a notification never blocks or rolls back
the operation that triggered it, and nothing is retried.
"""
import logging
from datetime import datetime
from typing import List, Optional

import requests

import config

logger = logging.getLogger(__name__)

GREEN = 0x00FF00
ORANGE = 0xFF9900
RED = 0xFF0000
CYAN = 0x00FFFF
BLUE = 0x3498DB


def format_naira(amount) -> str:
    return f"₦{int(amount or 0):,}"


def field(name: str, value, inline: bool = True) -> dict:
    return {"name": name, "value": str(value) if value not in (None, "") else "Unknown", "inline": inline}


def build_payload(title: str, description: str = "", color: int = GREEN,
                  fields: Optional[List[dict]] = None, content: Optional[str] = None) -> dict:
    return {
        "username": config.WEBHOOK_USERNAME,
        "content": content if content is not None else f"**{title}**",
        "embeds": [
            {
                "title": title,
                "description": description,
                "color": color,
                "fields": fields or [],
                "timestamp": datetime.utcnow().isoformat() + "Z",
                "footer": {"text": f"{config.PLATFORM_NAME} Admin Panel"},
            }
        ],
    }


def send_webhook(url: str, payload: dict) -> bool:
    if not url:
        logger.debug("Webhook URL not configured, skipping: %s", payload.get("content"))
        return False
    try:
        resp = requests.post(url, json=payload, timeout=config.HTTP_TIMEOUT)
        if resp.status_code >= 300:
            logger.warning("Webhook %s answered %s: %s", url, resp.status_code, resp.text[:200])
            return False
        return True
    except requests.RequestException as exc:
        logger.warning("Webhook %s failed: %s", url, exc)
        return False


def notify(category: str, title: str, description: str = "", color: int = GREEN,
           fields: Optional[List[dict]] = None) -> bool:
    url = config.WEBHOOK_URLS.get(category, "")
    return send_webhook(url, build_payload(title, description, color, fields))
