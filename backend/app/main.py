# main.py
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse, Response
import logging
import time
from datetime import datetime, timezone
from typing import Any, Dict, Optional
from pydantic import ValidationError
from . import settings, storage, models, webhooks, assets
from .webhooks import WebhookError

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

START_TIME = time.time()
NO_CACHE = {
    "Cache-Control": "no-cache, no-store, must-revalidate",
    "Pragma": "no-cache",
    "Expires": "0",
}

app = FastAPI(title="Material Request Form API")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # for local dev only
    allow_methods=["*"],
    allow_headers=["*"],
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _error_response(error: str, **extra) -> JSONResponse:
    return JSONResponse(
        status_code=500,
        content={"success": False, "error": error, **extra, "timestamp": _now()},
    )


@app.exception_handler(WebhookError)
def webhook_error_handler(request: Request, exc: WebhookError):
    logger.error("API error (%s): %s", request.url.path, exc)
    return _error_response(str(exc))


# --- Reference data ---
@app.get("/api/data/load")
def load_data():
    if not settings.DATA_LOAD_WEBHOOK:
        try:
            reference = models.ReferenceData.model_validate(storage.read_json("reference"))
        except ValidationError as e:
            logger.error("Local reference data is invalid: %s", e)
            return _error_response(f"Local reference data is invalid: {e.error_count()} error(s)")
        logger.info("Serving local reference data: %d categories", len(reference.categories))
        return models.LoadResponse(success=True, data=reference).model_dump(by_alias=True, exclude_none=True)

    started = time.time()
    data = webhooks.call_webhook(settings.DATA_LOAD_WEBHOOK)
    logger.info("Data load finished in %dms", (time.time() - started) * 1000)
    return data


# --- Submissions ---
def _reference_id(result: models.SubmissionResult, request_type: str, now: Optional[float] = None) -> str:
    found = result.order_id or result.quote_id or result.id
    if found:
        return str(found)
    millis = int((time.time() if now is None else now) * 1000)
    return f"{request_type.upper()}-{millis}"


def _submit(request_type: str, webhook_url: str, body: models.SubmissionRequest):
    logger.info("Submitting %s: %s", request_type, body.summary())
    payload = body.model_dump(by_alias=True, mode="json")

    raw = webhooks.call_webhook(webhook_url, "POST", payload) if webhook_url else {"success": True}
    try:
        result = models.SubmissionResult.model_validate(raw)
    except ValidationError as e:
        raise WebhookError(f"Webhook call failed: malformed submission reply ({e.error_count()} error(s))") from e

    if not result.success:
        logger.warning("Upstream rejected %s: %s", request_type, result.error)
        return result.model_dump(by_alias=True, exclude_none=True)

    ref = _reference_id(result, request_type)
    if request_type == "order" and result.order_id is None:
        result.order_id = ref
    elif request_type == "quote" and result.quote_id is None:
        result.quote_id = ref
    record = models.SubmissionRecord(
        reference_id=ref,
        request_type=request_type,
        submitted_at=_now(),
        payload=payload,
    )
    storage.append_json("submissions", record.model_dump())
    logger.info("%s submission accepted: %s", request_type.capitalize(), ref)
    return result.model_dump(by_alias=True, exclude_none=True)


@app.post("/api/order/submit")
def submit_order(body: models.SubmissionRequest):
    return _submit("order", settings.ORDER_SUBMIT_WEBHOOK, body)


@app.post("/api/quote/submit")
def submit_quote(body: models.SubmissionRequest):
    return _submit("quote", settings.QUOTE_SUBMIT_WEBHOOK, body)


@app.get("/api/order/history")
def order_history():
    if settings.ORDER_HISTORY_WEBHOOK:
        try:
            return webhooks.call_webhook(settings.ORDER_HISTORY_WEBHOOK)
        except WebhookError as e:
            logger.error("API error (order/history): %s", e)
            return _error_response(str(e), orders=[])
    orders = [s for s in storage.read_json("submissions") if s.get("request_type") == "order"]
    return {"success": True, "orders": orders, "summary": {"totalOrders": len(orders)}}


# --- Health / diagnostics ---
@app.get("/health")
def health():
    return {
        "status": "healthy",
        "timestamp": _now(),
        "environment": settings.APP_ENV,
        "uptime": round(time.time() - START_TIME, 3),
        "version": settings.APP_VERSION,
        "assetVersion": settings.ASSET_VERSION,
        "webhooks": settings.webhooks(),
    }


def _probe(url: str) -> Dict[str, Any]:
    if not url:
        return {"status": "local"}
    started = time.time()
    try:
        result = webhooks.call_webhook(url)
    except WebhookError as e:
        return {"status": "error", "error": str(e)}
    return {
        "status": "success",
        "loadTime": f"{int((time.time() - started) * 1000)}ms",
        "hasSuccess": "success" in result,
    }


@app.get("/debug/webhooks")
def debug_webhooks():
    results = {
        "dataLoad": _probe(settings.DATA_LOAD_WEBHOOK),
        "orderHistory": _probe(settings.ORDER_HISTORY_WEBHOOK),
    }
    healthy = all(r["status"] != "error" for r in results.values())
    return {
        "timestamp": _now(),
        "version": settings.APP_VERSION,
        "testResults": results,
        "overallHealth": "healthy" if healthy else "degraded",
    }


# --- Static assets ---
def _read_static(name: str) -> str:
    return (settings.STATIC_DIR / name).read_text(encoding="utf-8")


@app.get("/", response_class=HTMLResponse)
def index():
    html = _read_static("index.html")
    html = assets.inject_asset_versions(
        html, settings.SCRIPT_ASSETS + settings.STYLE_ASSETS, settings.ASSET_VERSION
    )
    return HTMLResponse(html, headers=NO_CACHE)


@app.get("/{path:path}")
def static_or_redirect(path: str):
    name = path.strip("/")
    if name in settings.SCRIPT_ASSETS and (settings.STATIC_DIR / name).exists():
        return Response(_read_static(name), media_type="application/javascript", headers=NO_CACHE)
    if name in settings.STYLE_ASSETS and (settings.STATIC_DIR / name).exists():
        css = assets.stamp_stylesheet(_read_static(name), settings.ASSET_VERSION)
        return Response(css, media_type="text/css", headers=NO_CACHE)
    logger.info("Unmatched path /%s, redirecting to root", name)
    return RedirectResponse(url="/")
