"""HTTP client for the GitHub REST API and raw content host, using httpx."""

import logging
import math
import time

import httpx

logger = logging.getLogger(__name__)

USER_AGENT = "GitHub-Repo-Downloader"
ACCEPT = "application/vnd.github.v3+json"

# Extra wait after the advertised rate limit reset
RATE_LIMIT_BUFFER_MS = 1000

DEFAULT_MAX_RETRIES = 3
DEFAULT_BASE_DELAY_MS = 1000


class FetchError(Exception):
    """A request failed: non-2xx status, or retries ran out."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


def _rate_limit_wait_ms(resp: httpx.Response) -> float | None:
    """Milliseconds to wait if ``resp`` is an exhausted-quota 403, else None.

    A reset time in the past yields a zero wait.
    """
    if resp.status_code != 403 or resp.headers.get("x-ratelimit-remaining") != "0":
        return None
    reset = resp.headers.get("x-ratelimit-reset")
    if reset is None:
        return None
    try:
        reset_epoch = int(reset)
    except ValueError:
        return None
    return max(0.0, reset_epoch * 1000 - time.time() * 1000 + RATE_LIMIT_BUFFER_MS)


class GitHubClient:
    """Thin synchronous client that injects GitHub headers and retries GETs."""

    def __init__(self, token: str | None = None, timeout: float = 30.0):
        headers = {
            "Accept": ACCEPT,
            "User-Agent": USER_AGENT,
        }
        if token:
            headers["Authorization"] = f"Bearer {token}"
        self.headers = headers
        self._client = httpx.Client(headers=headers, timeout=timeout, follow_redirects=True)

    def fetch_with_retry(
        self,
        url: str,
        max_retries: int = DEFAULT_MAX_RETRIES,
        base_delay_ms: int = DEFAULT_BASE_DELAY_MS,
    ) -> httpx.Response:
        """GET ``url`` and return the first successful response.

        Rate-limited responses are waited out and repeat the same attempt.
        Other failures back off linearly (``base_delay_ms * attempt``) and
        the last one is raised once ``max_retries`` attempts are used up.
        """
        if max_retries < 1:
            raise FetchError("Max retries exceeded")

        attempt = 0
        while True:
            try:
                resp = self._client.get(url)

                wait_ms = _rate_limit_wait_ms(resp)
                if wait_ms is not None:
                    logger.warning("Rate limit exceeded. Waiting %d seconds...", math.ceil(wait_ms / 1000))
                    time.sleep(wait_ms / 1000)
                    continue

                if not resp.is_success:
                    raise FetchError(f"HTTP {resp.status_code}: {resp.reason_phrase}", resp.status_code)

                return resp
            except (FetchError, httpx.HTTPError) as exc:
                if attempt >= max_retries - 1:
                    raise
                logger.warning("Request failed (attempt %d/%d): %s, retrying...", attempt + 1, max_retries, exc)
                time.sleep(base_delay_ms * (attempt + 1) / 1000)
                attempt += 1

    def close(self):
        self._client.close()

    def __enter__(self):
        return self

    def __exit__(self, *exc_info):
        self.close()
