"""Network fetches for list files and upstream extensions.

Only text fetches retry: a fixed number of attempts with a fixed delay
between them. Downloads fail fast.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from pathlib import Path

import httpx

from crxforge.core.errors import TransientNetworkError

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 5
DEFAULT_DELAY_SECONDS = 3.0

_CWS_UPDATE_URL = (
    "https://clients2.google.com/service/update2/crx"
    "?response=redirect&prodversion={chromium_version}&acceptformat=crx3"
    "&x=id%3D{component_id}%26uc"
)


class HttpFetcher:
    """Fetches URLs over HTTP; text fetches retry transient failures.

    Parameters
    ----------
    client:
        httpx client to issue requests with. One is created if omitted.
    max_attempts:
        Total attempts, including the first.
    delay_seconds:
        Fixed pause between attempts.
    sleep:
        Injected for tests.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        *,
        max_attempts: int = DEFAULT_MAX_ATTEMPTS,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self._client = client or httpx.Client(follow_redirects=True, timeout=60.0)
        self.max_attempts = max_attempts
        self.delay_seconds = delay_seconds
        self._sleep = sleep

    def _attempt(self, url: str) -> str:
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise TransientNetworkError(f"Error when fetching {url}: {exc}") from exc
        if response.status_code != 200:
            raise TransientNetworkError(
                f"Error status {response.status_code} {response.reason_phrase} "
                f"returned for URL: {url}"
            )
        return response.text

    def fetch_text(self, url: str) -> str:
        """Return the body of ``url``; raise after ``max_attempts`` failures."""
        attempt = 1
        while True:
            try:
                return self._attempt(url)
            except TransientNetworkError as exc:
                if attempt >= self.max_attempts:
                    raise
                logger.warning(
                    "Spurious error (attempt %d/%d): %s; retrying in %.1fs",
                    attempt,
                    self.max_attempts,
                    exc,
                    self.delay_seconds,
                )
            self._sleep(self.delay_seconds)
            attempt += 1

    def download(self, url: str, output_path: Path) -> Path:
        """Stream ``url`` to ``output_path``. Not retried."""
        output_path = Path(output_path)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with self._client.stream("GET", url) as response:
            if response.status_code != 200:
                raise TransientNetworkError(
                    f"Error status {response.status_code} {response.reason_phrase} "
                    f"returned for URL: {url}"
                )
            with output_path.open("wb") as fh:
                for chunk in response.iter_bytes():
                    fh.write(chunk)
        logger.info("Downloaded %s to %s", url, output_path)
        return output_path


def cws_download_url(component_id: str, chromium_version: str) -> str:
    return _CWS_UPDATE_URL.format(chromium_version=chromium_version, component_id=component_id)


def download_extension_from_cws(
    component_id: str,
    chromium_version: str,
    output_path: Path,
    fetcher: HttpFetcher | None = None,
) -> Path:
    """Download the Chrome Web Store build of ``component_id``."""
    fetcher = fetcher or HttpFetcher()
    return fetcher.download(cws_download_url(component_id, chromium_version), output_path)
