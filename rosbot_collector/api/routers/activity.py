import asyncio
import logging
from typing import List, Optional

import httpx
from fastapi import APIRouter, HTTPException, Query

from rosbot_collector.models.activity import ParserConfig
from rosbot_collector.services.collector.base import Destination, Quality, Rarity
from rosbot_collector.services.collector.client import RosBotClient
from rosbot_collector.services.collector.errors import (
    ActivityFetchError,
    BadCredentials,
    CollectorError,
    ConfigurationError,
    MissingActivityEndpoint,
    MissingLoginToken,
    ParseCancelled,
    SessionRefreshFailure,
)
from rosbot_collector.settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(tags=["activity"])

_client: Optional[RosBotClient] = None
_client_lock = asyncio.Lock()


async def get_collector() -> RosBotClient:
    """Return the shared, logged-in client, creating it on first use."""
    global _client
    async with _client_lock:
        if _client is None:
            settings = get_settings()
            if not settings.username or not settings.password:
                raise ConfigurationError("Missing Ros-Bot credentials. Set ROSBOT_USERNAME and ROSBOT_PASSWORD.")
            _client = await RosBotClient.create(settings.username, settings.password, settings=settings)
    return _client


async def close_collector() -> None:
    global _client
    if _client is not None:
        await _client.aclose()
        _client = None


def _status_for(exc: Exception) -> int:
    if isinstance(exc, BadCredentials):
        return 401
    if isinstance(exc, SessionRefreshFailure):
        return 503
    if isinstance(exc, ParseCancelled):
        return 504
    if isinstance(exc, ConfigurationError):
        return 500
    if isinstance(exc, (MissingLoginToken, MissingActivityEndpoint, ActivityFetchError, httpx.HTTPError)):
        return 502
    return 500


@router.get("/health")
def api_health():
    return {"ok": True}


@router.get("/activity")
async def api_get_activity(
    destination: Optional[List[Destination]] = Query(None, description="Accepted destinations (repeatable)"),
    rarity: Rarity = Query(Rarity.NON_ANCIENT, description="Rarity floor"),
    quality: Quality = Query(Quality.ALL, description="Item quality, '*' for all"),
    page: int = Query(1, ge=1, description="Activity page number"),
    timeout: Optional[float] = Query(None, gt=0, description="Parse timeout in seconds"),
):
    config = ParserConfig(destinations=destination or [], rarity_level=rarity, quality=quality, page=page)
    try:
        collector = await get_collector()
        updates = await collector.parse_with_config(config, timeout=timeout)
    except (CollectorError, httpx.HTTPError) as exc:
        logger.error("Activity request failed: %s", exc)
        raise HTTPException(status_code=_status_for(exc), detail=str(exc) or exc.__class__.__name__)
    return {
        "count": len(updates),
        "updates": [u.to_dict() for u in updates],
    }
