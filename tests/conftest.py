from pathlib import Path
from typing import List, Optional, Set
from urllib.parse import parse_qs

import httpx
import pytest

BASE_URL = "https://rosbot.test"
FIXTURES = Path(__file__).parent / "fixtures"


def read_fixture(name: str) -> str:
    return (FIXTURES / name).read_text(encoding="utf-8")


class FakeRosBotSite:
    """In-memory stand-in for the website, served through httpx.MockTransport.

    activity_statuses are consumed one per activity request; 200 is served once
    the list is exhausted.
    Activity requests carrying a session cookie listed in expired_tokens get 403.
    """

    def __init__(self, *, password: str = "secret", activity_statuses: Optional[List[int]] = None) -> None:
        self.password = password
        self.activity_statuses = list(activity_statuses or [])
        self.login_html = read_fixture("login.html")
        self.landing_html = read_fixture("landing.html")
        self.activity_html = read_fixture("activity.html")
        self.logins = 0
        self.login_forms: List[dict] = []
        self.activity_queries: List[str] = []
        self.expired_tokens: Set[str] = set()

    def __call__(self, request: httpx.Request) -> httpx.Response:
        path = request.url.path
        if path == "/user/login" and request.method == "GET":
            return httpx.Response(200, text=self.login_html)
        if path == "/user/login" and request.method == "POST":
            form = {k: v[0] for k, v in parse_qs(request.content.decode(), keep_blank_values=True).items()}
            self.login_forms.append(form)
            if form.get("pass") == self.password and form.get("form_build_id") == "form-this-is-a-test":
                self.logins += 1
                return httpx.Response(
                    302,
                    headers={"Location": "/users/testuser", "Set-Cookie": f"SESSabc=token{self.logins}; Path=/"},
                )
            return httpx.Response(200, text=self.login_html)
        if path == "/users/testuser":
            return httpx.Response(200, text=self.landing_html)
        if path.endswith("/bot-activity/"):
            self.activity_queries.append(request.url.query.decode())
            if request.headers.get("Cookie", "").partition("SESSabc=")[2] in self.expired_tokens:
                return httpx.Response(403, text="Access denied")
            status = self.activity_statuses.pop(0) if self.activity_statuses else 200
            if status != 200:
                return httpx.Response(status, text="Access denied")
            return httpx.Response(200, text=self.activity_html)
        return httpx.Response(404, text="not found")

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def site():
    return FakeRosBotSite()
