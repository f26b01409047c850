# header_scanner/probe.py
"""
Method probe policy.

A method counts as enabled when the target answers anything but 405;
DEBUG only counts when the answer is exactly 200. Transport errors are
reported as errors, not as "disabled".
"""
import asyncio
import logging
from typing import Dict, Optional

from .models import LogType, MethodProbeResult, ProbeOutcome, RelayError, RelayResponse
from .scan_log import LogSink, emit, log_headers
from .transport import DEFAULT_TIMEOUT, RELAY_GRACE_SECONDS, Transport, TransportResult, timeout_error

logger = logging.getLogger(__name__)

DEFAULT_MAX_ATTEMPTS = 2
# answers that are not a 405 but do not prove the method works either
INDETERMINATE_STATUSES = frozenset({0, 403})


def classify_status(method: str, status_code: int) -> ProbeOutcome:
    if method.upper() == "DEBUG":
        return ProbeOutcome.ENABLED if status_code == 200 else ProbeOutcome.DISABLED
    if status_code == 405:
        return ProbeOutcome.DISABLED
    if status_code in INDETERMINATE_STATUSES:
        return ProbeOutcome.INDETERMINATE
    return ProbeOutcome.ENABLED


def is_method_enabled(method: str, status_code: int) -> bool:
    return classify_status(method, status_code) != ProbeOutcome.DISABLED


async def request_with_retry(
    transport: Transport,
    url: str,
    method: str = "GET",
    log: Optional[LogSink] = None,
    headers: Optional[Dict[str, str]] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    timeout: float = DEFAULT_TIMEOUT,
) -> TransportResult:
    """
    Send ``method`` to ``url``, retrying only on timeouts, at most
    ``max_attempts`` times in total. Each attempt gets its own ``timeout``.
    """
    log = log if log is not None else []
    max_attempts = max(1, max_attempts)
    result: TransportResult = timeout_error(method, timeout)

    for attempt in range(1, max_attempts + 1):
        emit(log, LogType.REQUEST, f"Making {method} request to {url}...")
        try:
            result = await asyncio.wait_for(
                transport.send(url, method, headers=headers, timeout=timeout),
                timeout=timeout + RELAY_GRACE_SECONDS,
            )
        except asyncio.TimeoutError:
            result = timeout_error(method, timeout)

        if isinstance(result, RelayResponse):
            emit(log, LogType.RESPONSE, f"{method} request completed with status: {result.status}")
            return result

        if not result.is_timeout:
            emit(log, LogType.ERROR, f"Error with {method} request: {result.message}")
            return result

        if attempt < max_attempts:
            emit(log, LogType.REQUEST, f"Request timed out after {timeout:g} seconds, retrying {method} request...")

    emit(log, LogType.ERROR, f"{method} request failed after {max_attempts} attempt(s): Timeout")
    return RelayError(
        message=f"Request timed out after {max_attempts} attempt(s)",
        method=method,
        is_timeout=True,
        status_code=408,
    )


def _verdict_message(method: str, outcome: ProbeOutcome) -> str:
    if outcome == ProbeOutcome.DISABLED:
        return "NOT ALLOWED (secure)"
    if method == "DEBUG":
        return "ENABLED (danger: 200 status code returned)"
    if outcome == ProbeOutcome.INDETERMINATE:
        return "ALLOWED (indeterminate: response does not confirm the method)"
    return "ALLOWED (potentially unsafe)"


async def probe_method(
    transport: Transport,
    url: str,
    method: str,
    log: LogSink,
    headers: Optional[Dict[str, str]] = None,
    max_attempts: int = DEFAULT_MAX_ATTEMPTS,
    timeout: float = DEFAULT_TIMEOUT,
) -> MethodProbeResult:
    method = method.upper()
    emit(log, LogType.REQUEST, f"Testing {method} method...")

    result = await request_with_retry(
        transport, url, method, log=log, headers=headers, max_attempts=max_attempts, timeout=timeout
    )
    if isinstance(result, RelayError):
        emit(log, LogType.ERROR, f"Error checking {method} method: {result.message}")
        return MethodProbeResult(
            method=method,
            status_code=None,
            enabled=False,
            error=result.message,
            outcome=ProbeOutcome.ERROR,
        )

    log_headers(log, result.raw_headers or result.headers.items(), prefix=f"{method} ")
    outcome = classify_status(method, result.status)
    enabled = outcome != ProbeOutcome.DISABLED
    emit(log, LogType.RESPONSE, f"{method} method: {_verdict_message(method, outcome)}")
    logger.debug("%s on %s -> %s (HTTP %s)", method, url, outcome.value, result.status)
    return MethodProbeResult(method=method, status_code=result.status, enabled=enabled, outcome=outcome)
