from datetime import datetime, timezone

from rosbot_collector.services.collector.base import (
    SENTINEL_TIMESTAMP,
    Destination,
    LegendaryItem,
    Quality,
    Rarity,
    ServerUpdate,
)


def test_legendary_item_dict():
    item = LegendaryItem("unidentified", Rarity.ANCIENT, Quality.SET, Destination.STASHED, False, "")
    assert item.to_dict() == {
        "name": "unidentified",
        "type": "SET",
        "rarity": "ANCIENT",
        "destination": "STASHED",
        "is_identified": False,
        "stats": "",
    }


def test_server_update_dict():
    u = ServerUpdate(datetime(2020, 3, 12, 10, 0, tzinfo=timezone.utc))
    assert u.to_dict() == {"server_timestamp": "2020-03-12T10:00:00+00:00", "legendaries": []}
    assert ServerUpdate(SENTINEL_TIMESTAMP).to_dict()["server_timestamp"] == "0001-01-01T00:00:00+00:00"


def test_server_update_dict_lists_items_in_order():
    first = LegendaryItem("Ring of Royal Grandeur", Rarity.PRIMAL, Quality.SET, Destination.STASHED, True, "+5% CHC")
    second = LegendaryItem("unidentified", Rarity.ANCIENT, Quality.NORMAL, Destination.SALVAGED, False, "")
    d = ServerUpdate(SENTINEL_TIMESTAMP, (first, second)).to_dict()
    assert list(d) == ["server_timestamp", "legendaries"]
    assert [item["name"] for item in d["legendaries"]] == ["Ring of Royal Grandeur", "unidentified"]
    assert d["legendaries"][0] == first.to_dict()
