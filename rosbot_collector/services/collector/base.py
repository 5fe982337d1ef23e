from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Tuple


class Destination(str, Enum):
    """Where the bot placed the item upon collecting it."""

    STASHED = "STASHED"
    SALVAGED = "SALVAGED"
    SOLD = "SOLD"
    UNKNOWN = "UNKNOWN"


class Rarity(str, Enum):
    PRIMAL = "PRIMAL"
    ANCIENT = "ANCIENT"
    NON_ANCIENT = "NON-ANCIENT"


class Quality(str, Enum):
    ALL = "*"
    NORMAL = "NORMAL"
    SET = "SET"


# Returned for timestamps that are missing or do not match DD/MM/YYYY - HH:MM.
SENTINEL_TIMESTAMP = datetime(1, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class LegendaryItem:
    name: str
    rarity: Rarity
    quality: Quality
    destination: Destination
    is_identified: bool
    stats: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": self.quality.value,
            "rarity": self.rarity.value,
            "destination": self.destination.value,
            "is_identified": self.is_identified,
            "stats": self.stats,
        }


@dataclass(frozen=True)
class ServerUpdate:
    """One timeline entry of the bot-activity page."""

    server_timestamp: datetime
    items: Tuple[LegendaryItem, ...] = field(default_factory=tuple)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "server_timestamp": self.server_timestamp.isoformat(),
            "legendaries": [item.to_dict() for item in self.items],
        }
