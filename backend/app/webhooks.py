# webhooks.py
# Thin requests wrapper for the upstream automation webhooks.
import json
import logging
from typing import Any, Dict, Optional

import requests

from . import settings

logger = logging.getLogger(__name__)

USER_AGENT = "Material-Request-Form/2.0"
PREVIEW_CHARS = 500


class WebhookError(Exception):
    """Raised when an upstream webhook cannot be reached or answers badly."""


def call_webhook(url: str, method: str = "GET", data: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    logger.info("Calling webhook: %s %s", method, url)
    try:
        resp = requests.request(
            method,
            url,
            json=data,
            headers={
                "Content-Type": "application/json",
                "Accept": "application/json",
                "User-Agent": USER_AGENT,
            },
            timeout=settings.WEBHOOK_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error("Webhook error [%s]: %s", url, e)
        raise WebhookError(f"Webhook call failed: {e}") from e

    logger.info("Webhook response: %s %s", resp.status_code, resp.reason)
    if resp.status_code >= 400:
        raise WebhookError(f"Webhook call failed: HTTP {resp.status_code}: {resp.reason}")

    try:
        body = resp.json()
    except ValueError as e:
        raise WebhookError("Webhook call failed: response is not JSON") from e
    if not isinstance(body, dict):
        raise WebhookError("Webhook call failed: unexpected response shape")

    preview = json.dumps(body)[:PREVIEW_CHARS]
    logger.debug("Response data preview: %s", preview)
    return body
