"""Runtime settings for the collector.

Configuration via environment variables (a .env file at the project root is
loaded first, without overriding variables that are already set):

- ROSBOT_BASE_URL (default: https://www.ros-bot.com)
- ROSBOT_USERNAME / ROSBOT_PASSWORD
- ROSBOT_HTTP_TIMEOUT (default: 10.0 seconds)
- ROSBOT_PARSE_TIMEOUT (optional, seconds)
- ROSBOT_WORKERS_PER_BLOCK (default: 4)
- ROSBOT_USER_AGENT
- LOG_LEVEL (default: INFO)
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_BASE_URL = "https://www.ros-bot.com"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    username: Optional[str] = None
    password: Optional[str] = None
    http_timeout: float = 10.0
    parse_timeout: Optional[float] = None
    workers_per_block: int = 4
    user_agent: str = "RosBotCollector/0.1"
    log_level: str = "INFO"

    def __repr__(self) -> str:
        return (
            f"Settings(base_url={self.base_url!r}, username={self.username!r}, "
            f"http_timeout={self.http_timeout}, parse_timeout={self.parse_timeout}, "
            f"workers_per_block={self.workers_per_block})"
        )


def _load_env_from_file(env_path: Optional[str] = None) -> None:
    """Copy KEY=value lines of a .env file into os.environ.

    Variables that already hold a non-empty value win over the file.
    """
    path = env_path or os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), ".env")
    if not os.path.isfile(path):
        return
    with open(path, encoding="utf-8") as fh:
        lines = [raw.strip() for raw in fh]
    for entry in lines:
        if entry.startswith("#"):
            continue
        key, sep, value = entry.partition("=")
        key = key.strip()
        if not sep or not key or os.environ.get(key):
            continue
        os.environ[key] = value.strip().strip("\"'")


def _getenv_float(name: str, default: Optional[float]) -> Optional[float]:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number", name, raw)
        return default


def _getenv_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not an integer", name, raw)
        return default


def get_settings(env_path: Optional[str] = None) -> Settings:
    _load_env_from_file(env_path)
    workers = _getenv_int("ROSBOT_WORKERS_PER_BLOCK", 4)
    return Settings(
        base_url=(os.getenv("ROSBOT_BASE_URL") or DEFAULT_BASE_URL).rstrip("/"),
        username=os.getenv("ROSBOT_USERNAME") or None,
        password=os.getenv("ROSBOT_PASSWORD") or None,
        http_timeout=_getenv_float("ROSBOT_HTTP_TIMEOUT", 10.0) or 10.0,
        parse_timeout=_getenv_float("ROSBOT_PARSE_TIMEOUT", None),
        workers_per_block=max(1, workers),
        user_agent=os.getenv("ROSBOT_USER_AGENT") or Settings.user_agent,
        log_level=(os.getenv("LOG_LEVEL") or "INFO").upper(),
    )


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL") or "INFO").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
