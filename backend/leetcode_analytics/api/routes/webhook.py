"""
GitHub webhook for the questions repository.

A push to the watched ref refreshes the analytics snapshot. Refresh failures
are logged and never reported back to GitHub.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from datetime import datetime, timezone
import json
import structlog

from leetcode_analytics.core.config import settings
from leetcode_analytics.services.store import AnalyticsStore, get_store

logger = structlog.get_logger()
router = APIRouter()


@router.post("")
async def github_webhook(request: Request, store: AnalyticsStore = Depends(get_store)):
    body = await request.body()

    try:
        payload = json.loads(body)
    except ValueError as e:
        logger.error("Invalid JSON payload", error=str(e))
        return JSONResponse(status_code=400, content={"error": "Invalid JSON payload"})

    ref = payload.get("ref") if isinstance(payload, dict) else None
    logger.info("Webhook received", ref=ref or "unknown ref")

    if ref == settings.WEBHOOK_REFRESH_REF:
        logger.info("Repository updated, triggering data refresh")
        try:
            snapshot = await store.refresh()
            logger.info("Data refresh completed successfully", questions=len(snapshot.questions))
        except Exception as e:
            logger.error("Failed to refresh data", error=str(e))

    return {"success": True, "message": "Webhook processed"}


@router.get("")
async def webhook_status():
    """Liveness check for webhook configuration"""
    return {
        "message": "Webhook endpoint is active",
        "timestamp": datetime.now(timezone.utc).isoformat()
    }
