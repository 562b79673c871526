"""
ICMP reachability via the system ping binary (1 packet per attempt).
Windows: ping -n 1 -w <timeout_ms> <host>. Linux: ping -c 1 -W <timeout_s> <host>. macOS: -W <timeout_ms>.
probe_host retries a few times before declaring the host OFFLINE.
"""
import asyncio
import logging
import re
import sys
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger("pinger.ping")

LABEL_OFFLINE = "OFFLINE"
LABEL_ERROR = "error"
LABEL_OK = "OK"

_LATENCY_RE = re.compile(r"time[=:<]?\s*([\d.]+)\s*ms", re.I)
_FALLBACK_LATENCY_RE = re.compile(r"([\d.]+)\s*ms")


@dataclass
class PingResult:
    success: bool
    latency_ms: Optional[float]  # None if failed or unparseable
    reason: str  # "OK", "TIMEOUT", "UNREACHABLE", "ERROR:<code>", "SPAWN:<exc>"

    @property
    def spawn_failed(self) -> bool:
        """The ping binary could not be executed at all."""
        return self.reason.startswith("SPAWN:")


def _timeout_seconds(timeout_ms: int) -> int:
    return max(1, (timeout_ms + 999) // 1000)


def build_ping_command(host: str, timeout_ms: int) -> list[str]:
    if sys.platform == "win32":
        return ["ping", "-n", "1", "-w", str(timeout_ms), host]
    if sys.platform == "darwin":
        # macOS reads -W in milliseconds
        return ["ping", "-c", "1", "-W", str(timeout_ms), host]
    return ["ping", "-c", "1", "-W", str(_timeout_seconds(timeout_ms)), host]


async def run_ping(host: str, timeout_ms: int) -> PingResult:
    """
    Run one ping. Returns PingResult with success, latency_ms (if parsed), and reason string.
    """
    cmd = build_ping_command(host, timeout_ms)
    # Subprocess deadline: the ping's own deadline plus a buffer for process startup
    deadline_s = _timeout_seconds(timeout_ms) + 2.0
    try:
        proc = await asyncio.create_subprocess_exec(
            *cmd,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
    except OSError as e:
        logger.warning("Could not run ping for %s: %s", host, e)
        return PingResult(success=False, latency_ms=None, reason=f"SPAWN:{type(e).__name__}")
    try:
        stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=deadline_s)
    except asyncio.TimeoutError:
        try:
            proc.kill()
        except ProcessLookupError:
            pass
        await proc.wait()
        return PingResult(success=False, latency_ms=None, reason="TIMEOUT")
    return _interpret(proc.returncode or 0, stdout.decode("utf-8", errors="replace"))


def _interpret(returncode: int, output: str) -> PingResult:
    """Interpret ping return code and optional output for latency/reason."""
    if returncode == 0:
        return PingResult(success=True, latency_ms=_parse_latency(output), reason="OK")
    output_lower = output.lower()
    if "timed out" in output_lower or "timeout" in output_lower:
        reason = "TIMEOUT"
    elif "unreachable" in output_lower:
        reason = "UNREACHABLE"
    else:
        reason = f"ERROR:{returncode}"
    return PingResult(success=False, latency_ms=None, reason=reason)


def _parse_latency(output: str) -> Optional[float]:
    """Extract latency in ms from ping output. Windows: time=12ms, Linux: time=12.3 ms."""
    m = _LATENCY_RE.search(output)
    if not m:
        m = _FALLBACK_LATENCY_RE.search(output)
    if m:
        try:
            return float(m.group(1))
        except ValueError:
            pass
    return None


def format_latency(latency_ms: Optional[float]) -> str:
    if latency_ms is None:
        return LABEL_OK
    return f"{latency_ms:g} ms"


async def probe_host(
    host: str,
    attempts: int = 3,
    timeout_ms: int = 1000,
    retry_delay_ms: int = 500,
) -> tuple[bool, str]:
    """
    Ping up to `attempts` times, sleeping retry_delay_ms between failures.
    Returns (reachable, label); label is the latency, "OFFLINE" or "error".
    """
    label = LABEL_OFFLINE
    for attempt in range(attempts):
        result = await run_ping(host, timeout_ms)
        if result.success:
            return True, format_latency(result.latency_ms)
        label = LABEL_ERROR if result.spawn_failed else LABEL_OFFLINE
        logger.debug("Ping %s attempt %d/%d failed: %s", host, attempt + 1, attempts, result.reason)
        if attempt + 1 < attempts:
            await asyncio.sleep(retry_delay_ms / 1000.0)
    return False, label
