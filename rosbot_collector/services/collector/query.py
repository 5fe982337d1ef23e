from __future__ import annotations

from rosbot_collector.models.activity import ParserConfig

from .base import Destination, Quality, Rarity

_DESTINATION_PARAMS = {
    Destination.STASHED: "1",
    Destination.SALVAGED: "2",
    Destination.SOLD: "4",
}

_QUALITY_PARAMS = {
    Quality.NORMAL: "3",
    Quality.SET: "4",
}


def build_search_params(config: ParserConfig) -> str:
    """Return the query suffix appended to the bot-activity endpoint.

    The site only filters on a single destination; several (or none) are
    requested as "All" and narrowed down client-side.
    """
    destination = "All"
    if len(config.destinations) == 1:
        destination = _DESTINATION_PARAMS.get(config.destinations[0], "All")

    # Primals are requested with an empty "ancient" value.
    if config.rarity_level == Rarity.PRIMAL:
        ancient = ""
    elif config.rarity_level == Rarity.ANCIENT:
        ancient = "1"
    else:
        ancient = "0"

    quality = _QUALITY_PARAMS.get(config.quality, "All")

    return f"/?item_destination={destination}&ancient={ancient}&item_quality={quality}&page={config.page}"
