"""Single reachability check for one target; dispatches on target kind."""
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable

import httpx

from core.config import MonitorSettings
from core.http_check import check_http
from core.ping import LABEL_ERROR, probe_host
from core.targets import Target

logger = logging.getLogger("pinger.probe")


@dataclass(frozen=True)
class ProbeOutcome:
    target: str
    reachable: bool
    label: str


Prober = Callable[[Target], Awaitable[ProbeOutcome]]


async def probe(target: Target, client: httpx.AsyncClient, settings: MonitorSettings) -> ProbeOutcome:
    """Never raises: unexpected failures become an unreachable outcome labelled "error"."""
    try:
        if target.is_endpoint:
            reachable, label = await check_http(client, target.name)
        else:
            reachable, label = await probe_host(
                target.name,
                attempts=settings.ping_attempts,
                timeout_ms=settings.ping_timeout_ms,
                retry_delay_ms=settings.ping_retry_delay_ms,
            )
    except Exception:
        logger.exception("Probe crashed for %s", target.name)
        reachable, label = False, LABEL_ERROR
    logger.info("Probe %s: %s %s", target.name, "OK" if reachable else "DOWN", label)
    return ProbeOutcome(target=target.name, reachable=reachable, label=label or LABEL_ERROR)


def make_prober(client: httpx.AsyncClient, settings: MonitorSettings) -> Prober:
    """Bind the shared client and settings so the cycle only passes targets."""

    async def _probe(target: Target) -> ProbeOutcome:
        return await probe(target, client, settings)

    return _probe
