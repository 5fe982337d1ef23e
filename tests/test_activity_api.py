from datetime import datetime, timezone

from fastapi.testclient import TestClient

from rosbot_collector.main import app
from rosbot_collector.services.collector.base import Destination, LegendaryItem, Quality, Rarity, ServerUpdate
from rosbot_collector.services.collector.errors import BadCredentials, ParseCancelled, SessionRefreshFailure


class _FakeCollector:
    def __init__(self, error=None):
        self.error = error
        self.configs = []

    async def parse_with_config(self, config, *, timeout=None):
        self.configs.append(config)
        if self.error is not None:
            raise self.error
        item = LegendaryItem(
            name="the furnace",
            rarity=Rarity.PRIMAL,
            quality=Quality.NORMAL,
            destination=Destination.SOLD,
            is_identified=True,
            stats="Helm",
        )
        return [ServerUpdate(datetime(2001, 10, 5, 14, 55, tzinfo=timezone.utc), (item,))]


def _patch(monkeypatch, fake):
    from rosbot_collector.api.routers import activity as activity_router

    async def _fake_get_collector():
        return fake

    monkeypatch.setattr(activity_router, "get_collector", _fake_get_collector)


def test_health():
    client = TestClient(app)
    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"ok": True}


def test_activity_endpoint_returns_updates(monkeypatch):
    fake = _FakeCollector()
    _patch(monkeypatch, fake)

    client = TestClient(app)
    resp = client.get(
        "/activity",
        params=[("destination", "SOLD"), ("destination", "STASHED"), ("rarity", "ANCIENT"), ("page", "2")],
    )
    assert resp.status_code == 200
    data = resp.json()
    assert data["count"] == 1
    update = data["updates"][0]
    assert update["server_timestamp"] == "2001-10-05T14:55:00+00:00"
    assert update["legendaries"] == [
        {
            "name": "the furnace",
            "type": "NORMAL",
            "rarity": "PRIMAL",
            "destination": "SOLD",
            "is_identified": True,
            "stats": "Helm",
        }
    ]
    config = fake.configs[0]
    assert config.destinations == [Destination.SOLD, Destination.STASHED]
    assert config.rarity_level == Rarity.ANCIENT
    assert config.quality == Quality.ALL
    assert config.page == 2


def test_activity_endpoint_maps_errors(monkeypatch):
    client = TestClient(app)
    cases = [
        (BadCredentials(), 401),
        (SessionRefreshFailure(), 503),
        (ParseCancelled(1.0), 504),
    ]
    for error, status in cases:
        _patch(monkeypatch, _FakeCollector(error=error))
        resp = client.get("/activity")
        assert resp.status_code == status


def test_activity_endpoint_validates_query(monkeypatch):
    _patch(monkeypatch, _FakeCollector())
    client = TestClient(app)
    assert client.get("/activity", params={"page": 0}).status_code == 422
    assert client.get("/activity", params={"rarity": "LEGENDARY"}).status_code == 422


def test_missing_credentials_is_reported(monkeypatch):
    from rosbot_collector.api.routers import activity as activity_router
    from rosbot_collector.settings import Settings

    monkeypatch.setattr(activity_router, "_client", None)
    monkeypatch.setattr(activity_router, "get_settings", lambda: Settings())
    client = TestClient(app)
    resp = client.get("/activity")
    assert resp.status_code == 500
    assert "ROSBOT_USERNAME" in resp.json()["detail"]
