"""Authenticated access to the Ros-Bot website.

Login handshake:
  1. GET /user/login and read the one-time 'form_build_id' hidden input of form#user-login
  2. POST the credentials together with that token as url-encoded form data
  3. The server answers 200 in both cases; the login failed when the final URL
     is still the login page
  4. On the first success, the landing page's primary tabs link to
     /user/<id>/bot-activity, which is cached for the lifetime of the client

Expired cookies show up as a non-success status on the activity page; the
client then logs in again once and retries the request once.
"""

from __future__ import annotations

import asyncio
import logging
import re
from dataclasses import dataclass, field, replace
from typing import Dict, Optional

import httpx
from selectolax.parser import HTMLParser

from .errors import (
    ActivityFetchError,
    BadCredentials,
    CollectorError,
    MissingActivityEndpoint,
    MissingLoginToken,
    SessionRefreshFailure,
)

logger = logging.getLogger(__name__)

LOGIN_PATH = "/user/login"

_ACTIVITY_HREF_RE = re.compile(r"/user/\d+/bot-activity")


@dataclass(frozen=True)
class Credentials:
    username_or_email: str
    password: str = field(repr=False)


@dataclass(frozen=True)
class Session:
    """Authenticated state shared by every request of one client.

    A new value replaces the previous one on each (re-)authentication.
    activity_path is resolved once and carried over to every later session.
    cookies is a snapshot for inspection only; requests always go through
    the client's own cookie jar.
    """

    base_url: str
    activity_path: Optional[str] = None
    cookies: Dict[str, str] = field(default_factory=dict, repr=False)
    generation: int = 0

    @property
    def is_authenticated(self) -> bool:
        return self.generation > 0 and self.activity_path is not None

    def activity_url(self, query_suffix: str = "") -> str:
        if self.activity_path is None:
            raise MissingActivityEndpoint("session has no resolved bot activity endpoint")
        return f"{self.base_url}{self.activity_path}{query_suffix}"


def parse_form_build_id(html: str) -> str:
    """Return the login form's anti-forgery token or raise MissingLoginToken."""
    doc = HTMLParser(html or "")
    for node in doc.css("form#user-login input[type=hidden]"):
        if node.attributes.get("name") == "form_build_id":
            value = node.attributes.get("value") or ""
            if value:
                return value
            break
    raise MissingLoginToken()


def parse_activity_endpoint(html: str) -> str:
    """Return the first /user/<id>/bot-activity href of the primary tabs."""
    doc = HTMLParser(html or "")
    for a in doc.css("ul.tabs--primary.nav.nav-tabs a"):
        href = a.attributes.get("href") or ""
        if _ACTIVITY_HREF_RE.search(href):
            return href
    raise MissingActivityEndpoint()


class SessionClient:
    def __init__(
        self,
        credentials: Credentials,
        *,
        base_url: str = "https://www.ros-bot.com",
        timeout: float = 10.0,
        headers: Optional[Dict[str, str]] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        # Normalized the way httpx reports response URLs (lower-case host, no default port).
        self.login_url = httpx.URL(self.base_url + LOGIN_PATH)
        self.timeout = float(timeout)
        self.headers = headers or {"User-Agent": "RosBotCollector/0.1"}
        self._http = httpx.AsyncClient(
            timeout=self.timeout,
            headers=self.headers,
            follow_redirects=True,
            transport=transport,
        )
        self._session = Session(base_url=self.base_url)
        self._lock = asyncio.Lock()

    @property
    def session(self) -> Session:
        return self._session

    async def aclose(self) -> None:
        await self._http.aclose()

    # --- Public API ---
    async def authenticate(self) -> Session:
        """Log in and install a new Session value."""
        async with self._lock:
            return await self._authenticate()

    async def fetch_activity(self, query_suffix: str) -> str:
        """GET the activity page, re-authenticating once if the session expired."""
        session = self._session
        if not session.is_authenticated:
            session = await self.authenticate()

        response = await self._http.get(session.activity_url(query_suffix))
        if response.is_success:
            return response.text

        logger.warning("Activity request returned HTTP %s; refreshing session", response.status_code)
        session = await self._refresh(session)

        url = session.activity_url(query_suffix)
        response = await self._http.get(url)
        if not response.is_success:
            raise ActivityFetchError(response.status_code, url)
        return response.text

    # --- Internals ---
    async def _refresh(self, stale: Session) -> Session:
        async with self._lock:
            if self._session.generation != stale.generation:
                # Another task already logged in again.
                return self._session
            try:
                return await self._authenticate()
            except (CollectorError, httpx.HTTPError) as exc:
                logger.error("Session refresh failed: %s", exc)
                raise SessionRefreshFailure() from exc

    async def _authenticate(self) -> Session:
        # Caller holds self._lock.
        previous = self._session
        self._http.cookies.clear()
        landing = await self._post_login_form()

        activity_path = previous.activity_path
        if activity_path is None:
            activity_path = parse_activity_endpoint(landing.text)
            logger.info("Resolved bot activity endpoint %s", activity_path)

        self._session = replace(
            previous,
            activity_path=activity_path,
            cookies={c.name: c.value for c in self._http.cookies.jar},
            generation=previous.generation + 1,
        )
        logger.info("Logged in to %s (session %d)", self.base_url, self._session.generation)
        return self._session

    async def _post_login_form(self) -> httpx.Response:
        # The login page carries the 'form_build_id' required by the POST form.
        page = await self._http.get(self.login_url)
        form_build_id = parse_form_build_id(page.text)

        form = {
            "name": self.credentials.username_or_email,
            "pass": self.credentials.password,
            "form_id": "user_login",
            "op": "Log in",
            "form_build_id": form_build_id,
        }
        response = await self._http.post(self.login_url, data=form)
        if response.url == self.login_url:
            raise BadCredentials()
        return response
