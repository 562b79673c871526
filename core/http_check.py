"""
HTTP(S) endpoint check: HEAD first, GET when the server refuses HEAD (405) or
HEAD fails for a reason other than a timeout.
"""
import logging

import httpx

from core.config import APP_VERSION, HTTP_TIMEOUT_SECS

logger = logging.getLogger("pinger.http")

LABEL_TIMEOUT = "HTTP timeout"
LABEL_ERROR = "HTTP error"


def make_client(timeout_s: float = HTTP_TIMEOUT_SECS, **kwargs) -> httpx.AsyncClient:
    """One client per monitor loop; connections are reused across cycles."""
    return httpx.AsyncClient(
        timeout=timeout_s,
        follow_redirects=True,
        headers={"User-Agent": f"CosmicPinger/{APP_VERSION}"},
        **kwargs,
    )


def summarize_status(status_code: int) -> tuple[bool, str]:
    """2xx and 3xx count as reachable."""
    return 200 <= status_code < 400, f"HTTP {status_code}"


async def _fetch_via_get(client: httpx.AsyncClient, url: str) -> tuple[bool, str]:
    try:
        resp = await client.get(url)
    except httpx.TimeoutException:
        return False, LABEL_TIMEOUT
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.info("GET failed for %s: %s", url, e)
        return False, LABEL_ERROR
    return summarize_status(resp.status_code)


async def check_http(client: httpx.AsyncClient, url: str) -> tuple[bool, str]:
    """Returns (reachable, label) for one endpoint."""
    try:
        resp = await client.head(url)
    except httpx.TimeoutException:
        return False, LABEL_TIMEOUT
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.info("HEAD failed for %s: %s", url, e)
        return await _fetch_via_get(client, url)
    if resp.status_code == httpx.codes.METHOD_NOT_ALLOWED:
        return await _fetch_via_get(client, url)
    return summarize_status(resp.status_code)
