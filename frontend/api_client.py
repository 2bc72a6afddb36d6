# api_client.py
# requests calls from the Streamlit UI to the FastAPI backend
import logging
import os
from typing import Any, Dict, Optional

import requests
from dotenv import load_dotenv

from .form_state import endpoint_for

load_dotenv()

API = os.getenv("API_URL", "http://localhost:5000")
TIMEOUT = float(os.getenv("API_TIMEOUT", "45"))

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Backend unreachable, non-2xx, malformed payload or success: false."""


def _reason(what: str, reason: str) -> str:
    return f"{what}: {reason}" if what else reason


def _error_detail(body: Any) -> Optional[str]:
    """Backend error text: our own `error` field, else FastAPI's validation `detail`."""
    if not isinstance(body, dict):
        return None
    if body.get("error"):
        return str(body["error"])
    detail = body.get("detail")
    if isinstance(detail, list):
        msgs = []
        for item in detail:
            if isinstance(item, dict):
                field = ".".join(str(p) for p in item.get("loc", [])[1:])
                msg = item.get("msg", "")
                msgs.append(f"{field}: {msg}" if field else msg)
        return "; ".join(m for m in msgs if m) or None
    return str(detail) if detail else None


def _json(resp: requests.Response, what: str = "") -> Dict[str, Any]:
    try:
        body = resp.json()
    except ValueError:
        body = None
    if not resp.ok:
        raise ApiError(_error_detail(body) or _reason(what, f"HTTP {resp.status_code}"))
    if not isinstance(body, dict):
        raise ApiError(_reason(what, "malformed response"))
    if body.get("success") is False:
        raise ApiError(_error_detail(body) or _reason(what, "request was not successful"))
    return body


def load_reference_data(api: str = API) -> Dict[str, Any]:
    """Fetch categories, suppliers and materials once at startup."""
    try:
        r = requests.get(f"{api}/api/data/load", timeout=TIMEOUT)
    except requests.RequestException as e:
        raise ApiError(f"Failed to load form data: {e}") from e
    body = _json(r, "Failed to load form data")
    data = body.get("data")
    if not isinstance(data, dict) or not isinstance(data.get("categories", []), list):
        raise ApiError("Failed to load form data: malformed response")
    logger.info("Loaded %d categories", len(data.get("categories") or []))
    return data


def submit_request(payload: Dict[str, Any], api: str = API) -> Dict[str, Any]:
    url = f"{api}{endpoint_for(payload.get('requestType', ''))}"
    logger.info("Submitting %s request with %d materials", payload.get("requestType"), len(payload.get("materials", [])))
    try:
        r = requests.post(url, json=payload, timeout=TIMEOUT)
    except requests.RequestException as e:
        raise ApiError(str(e)) from e
    # finish_submit adds the "Submission failed" prefix
    return _json(r)


def load_order_history(api: str = API) -> Dict[str, Any]:
    try:
        r = requests.get(f"{api}/api/order/history", timeout=TIMEOUT)
    except requests.RequestException as e:
        raise ApiError(f"Failed to load order history: {e}") from e
    return _json(r, "Failed to load order history")
