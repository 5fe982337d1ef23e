from __future__ import annotations

from typing import Iterable, List

from rosbot_collector.models.activity import ParserConfig

from .base import LegendaryItem, Quality, Rarity, ServerUpdate


def item_matches(item: LegendaryItem, config: ParserConfig) -> bool:
    if config.rarity_level == Rarity.ANCIENT and item.rarity == Rarity.NON_ANCIENT:
        return False
    if config.rarity_level == Rarity.PRIMAL and item.rarity != Rarity.PRIMAL:
        return False

    if config.quality != Quality.ALL and item.quality != config.quality:
        return False

    if config.destinations:
        return item.destination in config.destinations

    return True


def filter_items(items: Iterable[LegendaryItem], config: ParserConfig) -> List[LegendaryItem]:
    return [item for item in items if item_matches(item, config)]


def apply_filters(updates: Iterable[ServerUpdate], config: ParserConfig) -> List[ServerUpdate]:
    """Filter the items of every update; updates themselves are never dropped."""
    return [
        ServerUpdate(server_timestamp=u.server_timestamp, items=tuple(filter_items(u.items, config)))
        for u in updates
    ]
