"""Parsing rules for a single bot-activity item.

Example of an identified legendary as it appears on the page:

    <p class="m-b-xs">
        botname: Salvaged
        <span data-toggle="popover"
              data-title="tyrael&#39;s might"
              data-content="Armor&lt;br /&gt;
              736&lt;br /&gt;
              Primary&lt;br /&gt;
              +474 Dexterity&lt;br /&gt;
              ..."
              class="text-legendary">tyrael's might</span>
    </p>

The regex helpers are pure and take plain strings; extract_item() is the only
function that touches a selectolax node.
"""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Optional

from selectolax.parser import Node

from .base import SENTINEL_TIMESTAMP, Destination, LegendaryItem, Quality, Rarity

UNIDENTIFIED_NAME = "unidentified"
UNIDENTIFIED_NOTICE = "This item cannot be equipped until it is identified."
LINE_BREAK_TAG = "<br />"

_TIMESTAMP_RE = re.compile(r"\d{2}/\d{2}/\d{4}\s-\s\d{2}:\d{2}")
_DESTINATION_RE = re.compile(r":\s([a-zA-Z]+)")
_RARITY_RE = re.compile(r"\[[a-zA-Z]+]")
_LEADING_SPACES_RE = re.compile(r"^ *")

_QUALITY_CLASSES = {
    "text-legendary": Quality.NORMAL,
    "text-set": Quality.SET,
}

_RARITY_TAGS = {
    "[ancient]": Rarity.ANCIENT,
    "[primal]": Rarity.PRIMAL,
}

_DESTINATIONS = {
    "salvaged": Destination.SALVAGED,
    "stashed": Destination.STASHED,
    "sold": Destination.SOLD,
}


def parse_timestamp(raw: str) -> datetime:
    """Parse 'DD/MM/YYYY - HH:MM' as UTC.

    Anything that does not match, or matches but is not a valid date, yields
    SENTINEL_TIMESTAMP instead of an error.
    """
    m = _TIMESTAMP_RE.search((raw or "").strip())
    if not m:
        return SENTINEL_TIMESTAMP
    try:
        parsed = datetime.strptime(m.group(0).replace(" -", ""), "%d/%m/%Y %H:%M")
    except ValueError:
        return SENTINEL_TIMESTAMP
    return parsed.replace(tzinfo=timezone.utc)


def parse_destination(raw: str) -> Destination:
    m = _DESTINATION_RE.search(raw or "")
    if not m:
        return Destination.UNKNOWN
    return _DESTINATIONS.get(m.group(1).lower(), Destination.UNKNOWN)


def parse_item_quality(raw_class: str) -> Optional[Quality]:
    """Map the annotation's class to a quality; None means below legendary."""
    for token in (raw_class or "").split():
        quality = _QUALITY_CLASSES.get(token.lower())
        if quality is not None:
            return quality
    return None


def parse_item_rarity(raw: str) -> Rarity:
    # The class name does not distinguish ancient from normal items, the tag does.
    m = _RARITY_RE.search(raw or "")
    if not m:
        return Rarity.NON_ANCIENT
    return _RARITY_TAGS.get(m.group(0).lower(), Rarity.NON_ANCIENT)


def parse_item_name(raw: str, rarity: Rarity) -> str:
    if rarity == Rarity.NON_ANCIENT:
        return raw
    _, sep, name = raw.partition("] ")
    return name if sep else raw


def parse_item_stats(raw: str) -> str:
    """Sanitize the popover content into an opaque newline separated blob."""
    result = (raw or "").replace(UNIDENTIFIED_NOTICE, "")
    result = result.replace(LINE_BREAK_TAG, "")
    return "\n".join(_LEADING_SPACES_RE.sub("", line) for line in result.split("\n"))


def is_identified(name: str) -> bool:
    # The site labels every unidentified drop with this literal name.
    return name != UNIDENTIFIED_NAME


def extract_item(fragment: Node, text: Optional[str] = None) -> Optional[LegendaryItem]:
    """Build a LegendaryItem from one item fragment.

    text is the fragment's enclosing text carrying the 'botname: Destination'
    prefix; it defaults to the fragment's own text. Returns None for items
    below legendary quality or fragments without an annotation.
    """
    span = fragment.css_first("span")
    if span is None:
        return None

    quality = parse_item_quality(span.attributes.get("class") or "")
    if quality is None:
        return None

    raw_name = (span.text() or "").strip()
    rarity = parse_item_rarity(raw_name)
    name = parse_item_name(raw_name, rarity)
    if text is None:
        text = fragment.text()

    return LegendaryItem(
        name=name,
        rarity=rarity,
        quality=quality,
        destination=parse_destination(text),
        is_identified=is_identified(name),
        stats=parse_item_stats(span.attributes.get("data-content") or ""),
    )
