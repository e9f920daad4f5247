"""
HTTP client for the Congreso open-data portal and its third-party mirror.

Both sources are plain HTTP GETs: listing pages come back as HTML, vote and
deputy payloads as JSON. Unlike the paginated REST APIs this project talks to
elsewhere, there is no envelope and no "next" link; discovery happens by
scanning HTML (see links.py / crawler.py).

Failure policy:
  - Any non-2xx status or transport failure raises FetchError.
  - A body that does not parse as JSON raises ParseError (a FetchError).
  - No retry/backoff. One failed request aborts the current task.

Rate limiting:
  A fixed delay is slept after every successful request. It is the only
  throttle; rate-limit responses from upstream are not interpreted.

Usage example:
    with CongresoClient(delay=0.2) as client:
        html = client.get_text("https://www.congreso.es/es/opendata/votaciones")
        data = client.get_json("https://www.congreso.es/webpublica/opendata/...json")
"""

import json
import time
from typing import Any

import httpx

from config import USER_AGENT
from errors import FetchError, ParseError


class CongresoClient:
    """
    Thin wrapper around httpx for the open-data HTML and JSON resources.

    Parameters
    ----------
    delay : float
        Seconds to sleep after each request (default 0; the portal publishes
        no rate limit; set SLEEP_MS for long crawls).
    timeout : float
        HTTP request timeout in seconds.
    user_agent : str
        Value of the ``User-Agent`` header sent with every request.
    client : httpx.Client, optional
        Pre-built client (tests pass one backed by ``httpx.MockTransport``).
    """

    def __init__(
        self,
        delay: float = 0.0,
        timeout: float = 60.0,
        *,
        user_agent: str = USER_AGENT,
        client: httpx.Client | None = None,
    ) -> None:
        self._delay = delay
        self._user_agent = user_agent
        self._client = client or httpx.Client(
            timeout=timeout,
            follow_redirects=True,
        )

    # ------------------------------------------------------------------
    # Public helpers
    # ------------------------------------------------------------------

    def get_text(self, url: str) -> str:
        """GET ``url`` and return the decoded body."""
        return self._get(url).text

    def get_json(self, url: str) -> Any:
        """
        GET ``url`` and parse the body as JSON.

        Raises
        ------
        FetchError
            On a non-2xx status or transport failure.
        ParseError
            When the body is not valid JSON.
        """
        resp = self._get(url)
        try:
            return resp.json()
        except (json.JSONDecodeError, UnicodeDecodeError) as exc:
            raise ParseError(url, str(exc)) from exc

    def close(self) -> None:
        self._client.close()

    # context-manager support
    def __enter__(self):
        return self

    def __exit__(self, *_):
        self.close()

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _get(self, url: str) -> httpx.Response:
        try:
            resp = self._client.get(url, headers={"User-Agent": self._user_agent})
        except httpx.HTTPError as exc:
            raise FetchError(None, url, str(exc)) from exc
        if not resp.is_success:
            raise FetchError(resp.status_code, url)
        if self._delay > 0:
            time.sleep(self._delay)
        return resp
