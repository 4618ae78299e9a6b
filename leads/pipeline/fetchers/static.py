from __future__ import annotations

import random
import threading
import typing as t
from dataclasses import dataclass
from urllib import robotparser
from urllib.parse import urlparse

import httpx


DEFAULT_USER_AGENTS = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/124.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/605.1.15 (KHTML, like Gecko) Version/17.4 Safari/605.1.15",
    "Mozilla/5.0 (X11; Linux x86_64; rv:125.0) Gecko/20100101 Firefox/125.0",
)


@dataclass(frozen=True)
class FetchResult:
    url: str
    status_code: int
    mime: str | None
    content_length: int
    html: str | None
    headers: dict[str, str]
    blocked_by_robots: bool = False

    @property
    def ok(self) -> bool:
        return not self.blocked_by_robots and self.status_code < 400 and bool(self.html)


class StaticFetcher:
    """Static HTML fetcher with robots.txt enforcement and a rotating user agent.

    - Uses httpx for network IO (one shared client, safe across threads)
    - Parses robots.txt using urllib.robotparser, cached per origin
    - Does NOT execute JavaScript
    """

    def __init__(
        self,
        *,
        timeout_s: float = 15.0,
        user_agents: t.Sequence[str] = DEFAULT_USER_AGENTS,
        respect_robots: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout_s = timeout_s
        self.user_agents = list(user_agents) or list(DEFAULT_USER_AGENTS)
        self.respect_robots = respect_robots
        self._client = httpx.Client(timeout=self.timeout_s, transport=transport)
        self._robots: dict[str, robotparser.RobotFileParser | None] = {}
        self._robots_lock = threading.Lock()

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "StaticFetcher":
        return self

    def __exit__(self, *exc: t.Any) -> None:
        self.close()

    def pick_user_agent(self) -> str:
        return random.choice(self.user_agents)

    def _robots_for(self, url: str) -> robotparser.RobotFileParser | None:
        parsed = urlparse(url)
        origin = f"{parsed.scheme}://{parsed.netloc}"
        with self._robots_lock:
            if origin in self._robots:
                return self._robots[origin]
        rp: robotparser.RobotFileParser | None = None
        try:
            resp = self._client.get(
                f"{origin}/robots.txt", headers={"User-Agent": self.pick_user_agent()}, follow_redirects=True
            )
            if resp.status_code < 400:
                rp = robotparser.RobotFileParser()
                rp.parse(resp.text.splitlines())
        except httpx.HTTPError:
            # Unreachable robots.txt: allow
            rp = None
        with self._robots_lock:
            self._robots[origin] = rp
        return rp

    def _robots_allows(self, url: str, user_agent: str) -> bool:
        if not self.respect_robots:
            return True
        rp = self._robots_for(url)
        if rp is None:
            return True
        return rp.can_fetch(user_agent, url) and rp.can_fetch("*", url)

    def fetch(self, url: str) -> FetchResult:
        """Fetch one page. Network errors propagate as httpx.HTTPError."""
        user_agent = self.pick_user_agent()
        if not self._robots_allows(url, user_agent):
            return FetchResult(
                url=url,
                status_code=0,
                mime=None,
                content_length=0,
                html=None,
                headers={},
                blocked_by_robots=True,
            )
        resp = self._client.get(url, headers={"User-Agent": user_agent}, follow_redirects=True)
        mime = resp.headers.get("Content-Type")
        mime_main = None
        if mime:
            mime_main = mime.split(";")[0].strip().lower()
        html_text = None
        if mime_main in ("text/html", "application/xhtml+xml"):
            html_text = resp.text
        return FetchResult(
            url=str(resp.request.url),
            status_code=resp.status_code,
            mime=mime_main,
            content_length=len(resp.content or b""),
            html=html_text,
            headers={k: v for k, v in resp.headers.items()},
        )
