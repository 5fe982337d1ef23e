from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from typing import List, Optional

import httpx

from rosbot_collector.models.activity import ParserConfig
from rosbot_collector.settings import Settings, configure_logging, get_settings

from .base import Destination, Quality, Rarity, ServerUpdate
from .client import RosBotClient
from .errors import CollectorError, ConfigurationError
from .filters import apply_filters
from .parser import FragmentParser

logger = logging.getLogger(__name__)


def _config_from_args(args: argparse.Namespace) -> ParserConfig:
    return ParserConfig(
        destinations=[Destination(d.upper()) for d in (args.destination or [])],
        rarity_level=Rarity(args.rarity.upper()),
        quality=Quality(args.quality.upper()),
        page=args.page,
    )


async def run_fetch(config: ParserConfig, settings: Settings, *, timeout: Optional[float] = None) -> List[ServerUpdate]:
    if not settings.username or not settings.password:
        raise ConfigurationError("Set ROSBOT_USERNAME and ROSBOT_PASSWORD to log in")
    async with await RosBotClient.create(settings.username, settings.password, settings=settings) as client:
        return await client.parse_with_config(config, timeout=timeout)


async def run_parse_file(path: str, config: ParserConfig, settings: Settings,
                         *, timeout: Optional[float] = None) -> List[ServerUpdate]:
    with open(path, "r", encoding="utf-8") as f:
        html = f.read()
    parser = FragmentParser(workers_per_block=settings.workers_per_block)
    updates = await parser.parse(html, timeout=timeout if timeout is not None else settings.parse_timeout)
    return apply_filters(updates, config)


def _add_filter_args(p: argparse.ArgumentParser) -> None:
    p.add_argument("--destination", action="append", choices=[d.value.lower() for d in Destination],
                   help="Accepted destination (repeatable, default: all)")
    p.add_argument("--rarity", default=Rarity.NON_ANCIENT.value.lower(),
                   choices=[r.value.lower() for r in Rarity], help="Rarity floor")
    p.add_argument("--quality", default=Quality.ALL.value, choices=[q.value.lower() for q in Quality],
                   help="Item quality ('*' for all)")
    p.add_argument("--page", type=int, default=1, help="Activity page number")
    p.add_argument("--timeout", type=float, default=None, help="Parse timeout in seconds")


def main(argv: Optional[list] = None) -> int:
    parser = argparse.ArgumentParser(description="Collect legendary drops from the Ros-Bot activity page")
    sub = parser.add_subparsers(dest="cmd", required=True)

    fetch = sub.add_parser("fetch", help="Log in with ROSBOT_USERNAME/ROSBOT_PASSWORD and parse the activity page")
    _add_filter_args(fetch)

    local = sub.add_parser("parse", help="Parse a saved activity page")
    local.add_argument("--file", required=True, help="Local HTML file path")
    _add_filter_args(local)

    args = parser.parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_level)
    config = _config_from_args(args)

    try:
        if args.cmd == "fetch":
            updates = asyncio.run(run_fetch(config, settings, timeout=args.timeout))
        else:
            updates = asyncio.run(run_parse_file(args.file, config, settings, timeout=args.timeout))
    except (CollectorError, httpx.HTTPError, OSError) as exc:
        logger.error("%s failed: %s", args.cmd, exc)
        return 1

    for update in updates:
        sys.stdout.write(json.dumps(update.to_dict(), ensure_ascii=False) + "\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
