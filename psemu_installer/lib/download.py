"""Download-with-retry over httpx.

An attempt succeeds only if the server answers 2xx *and* the file on disk
is non-empty. Anything else (transport error, HTTP error, deadline, an empty
body) removes the partial file and, if attempts remain, sleeps a constant
delay before trying again.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import httpx

from ..errors import DownloadError

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = 5
    delay_s: float = 2.0
    connect_timeout_s: float = 15.0
    max_time_s: float = 300.0


@dataclass(frozen=True)
class DownloadRecord:
    url: str
    dest: Path
    attempts: int
    ok: bool


class _AttemptFailed(Exception):
    pass


def _remove_partial(dest: Path) -> None:
    try:
        dest.unlink(missing_ok=True)
    except OSError as e:
        logger.warning("⚠ Could not remove partial download %s: %s", dest, e)


def _human_size(n: int) -> str:
    size = float(n)
    for unit in ("B", "K", "M", "G"):
        if size < 1024 or unit == "G":
            return f"{size:.0f}{unit}" if unit == "B" else f"{size:.1f}{unit}"
        size /= 1024
    return f"{n}B"


class Downloader:
    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        client: Optional[httpx.Client] = None,
        sleep: Callable[[float], None] = time.sleep,
        dry_run: bool = False,
    ) -> None:
        self.policy = policy or RetryPolicy()
        self._client = client
        self._sleep = sleep
        self.dry_run = dry_run

    def _attempt(self, client: httpx.Client, url: str, dest: Path) -> int:
        timeout = httpx.Timeout(self.policy.max_time_s, connect=self.policy.connect_timeout_s)
        deadline = time.monotonic() + self.policy.max_time_s
        written = 0
        try:
            with client.stream("GET", url, timeout=timeout, follow_redirects=True) as resp:
                try:
                    resp.raise_for_status()
                except httpx.HTTPStatusError as exc:
                    raise _AttemptFailed(f"HTTP {exc.response.status_code}") from exc
                with open(dest, "wb") as fh:
                    for chunk in resp.iter_bytes(chunk_size=CHUNK_SIZE):
                        if time.monotonic() > deadline:
                            raise _AttemptFailed(f"exceeded max time of {self.policy.max_time_s}s")
                        if chunk:
                            fh.write(chunk)
                            written += len(chunk)
        except httpx.HTTPError as exc:
            raise _AttemptFailed(f"network error: {exc}") from exc
        except OSError as exc:
            raise _AttemptFailed(f"I/O error: {exc}") from exc

        if not dest.is_file() or dest.stat().st_size == 0:
            raise _AttemptFailed("empty response body")
        return written

    def fetch(self, url: str, dest: str | Path) -> DownloadRecord:
        """Fetch url into dest. Raises DownloadError after max_attempts failures."""

        dest = Path(dest)
        if self.dry_run:
            logger.info("Would download %s -> %s", url, dest)
            return DownloadRecord(url=url, dest=dest, attempts=0, ok=True)

        dest.parent.mkdir(parents=True, exist_ok=True)
        max_attempts = self.policy.max_attempts

        client = self._client or httpx.Client()
        try:
            for attempt in range(1, max_attempts + 1):
                logger.info("Download attempt %d/%d: %s", attempt, max_attempts, dest.name)
                _remove_partial(dest)
                try:
                    size = self._attempt(client, url, dest)
                except _AttemptFailed as e:
                    _remove_partial(dest)
                    if attempt < max_attempts:
                        logger.warning(
                            "⚠ Download failed (%s). Retrying in %s seconds...", e, self.policy.delay_s
                        )
                        self._sleep(self.policy.delay_s)
                    else:
                        logger.warning("⚠ Download failed (%s)", e)
                    continue
                logger.info("✓ Downloaded: %s (%s)", dest.name, _human_size(size))
                return DownloadRecord(url=url, dest=dest, attempts=attempt, ok=True)
        finally:
            if self._client is None:
                client.close()

        record = DownloadRecord(url=url, dest=dest, attempts=max_attempts, ok=False)
        logger.error("✗ Failed to download after %d attempts: %s", max_attempts, url)
        raise DownloadError(f"Failed to download after {max_attempts} attempts: {url}", record)
