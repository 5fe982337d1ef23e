from __future__ import annotations

import logging
from typing import List, Optional

import httpx

from rosbot_collector.models.activity import ParserConfig
from rosbot_collector.settings import Settings, get_settings

from .base import ServerUpdate
from .filters import apply_filters
from .parser import FragmentParser
from .query import build_search_params
from .session import Credentials, SessionClient

logger = logging.getLogger(__name__)


class RosBotClient:
    """Fetches and parses the bot-activity feed of one Ros-Bot account.

    Usage:
        async with await RosBotClient.create("user@example.com", "secret") as client:
            updates = await client.parse_with_config(ParserConfig(rarity_level=Rarity.ANCIENT))
    """

    def __init__(self, session_client: SessionClient, parser: Optional[FragmentParser] = None,
                 *, parse_timeout: Optional[float] = None) -> None:
        self.session_client = session_client
        self.parser = parser or FragmentParser()
        self.parse_timeout = parse_timeout

    @classmethod
    async def create(
        cls,
        username_or_email: str,
        password: str,
        *,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "RosBotClient":
        """Log in and return a ready client; raises on bad credentials or transport errors."""
        settings = settings or get_settings()
        session_client = SessionClient(
            Credentials(username_or_email, password),
            base_url=settings.base_url,
            timeout=settings.http_timeout,
            headers={"User-Agent": settings.user_agent},
            transport=transport,
        )
        try:
            await session_client.authenticate()
        except BaseException:
            await session_client.aclose()
            raise
        parser = FragmentParser(workers_per_block=settings.workers_per_block)
        return cls(session_client, parser, parse_timeout=settings.parse_timeout)

    async def parse_with_defaults(self) -> List[ServerUpdate]:
        return await self.parse_with_config(ParserConfig())

    async def parse_with_config(self, config: ParserConfig, *, timeout: Optional[float] = None) -> List[ServerUpdate]:
        query = build_search_params(config)
        html = await self.session_client.fetch_activity(query)
        updates = await self.parser.parse(html, timeout=timeout if timeout is not None else self.parse_timeout)
        logger.info("Parsed %d server updates (page %d)", len(updates), config.page)
        return apply_filters(updates, config)

    async def aclose(self) -> None:
        await self.session_client.aclose()

    async def __aenter__(self) -> "RosBotClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
