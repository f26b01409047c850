# header_scanner/scan_core.py
import asyncio
import logging
from typing import Callable, Dict, List, Optional, Sequence

import httpx

from .auth import AuthError, TokenProvider, auth_headers
from .config import Settings, settings as default_settings
from .models import LogType, MethodProbeResult, ProbeOutcome, RelayError, ScanReport
from .probe import probe_method, request_with_retry
from .report import build_report
from .scan_log import LogSink, ScanLog, emit, log_headers
from .transport import ALLOWED_METHODS, DirectTransport, RelayTransport, Transport, normalize_target

logger = logging.getLogger(__name__)


class ScanError(Exception):
    """The initial header fetch failed; nothing can be reported."""


def make_transport(client: httpx.AsyncClient, settings: Settings) -> Transport:
    if settings.transport == "relay":
        return RelayTransport(client, settings.relay_url)
    return DirectTransport(client, user_agent=settings.user_agent)


def default_client_factory(settings: Settings = default_settings) -> Callable[[], httpx.AsyncClient]:
    return lambda: httpx.AsyncClient(verify=settings.verify_tls)


def available_methods(settings: Settings = default_settings) -> List[str]:
    return list(settings.probe_methods)


async def run_scan(
    target: str,
    transport: Transport,
    log: LogSink,
    methods: Optional[Sequence[str]] = None,
    token_provider: Optional[TokenProvider] = None,
    settings: Settings = default_settings,
) -> ScanReport:
    """
    One header fetch, then every method probe concurrently. Raises
    ``ScanError`` only when the header fetch itself fails; a failed probe
    just becomes an error entry in the report.
    """
    url = normalize_target(target)
    if not url:
        raise ScanError("URL is required")

    try:
        headers = await auth_headers(token_provider)
    except AuthError as e:
        raise ScanError(str(e)) from e

    emit(log, LogType.REQUEST, f"Fetching headers from {url}...")
    result = await request_with_retry(
        transport,
        url,
        "GET",
        log=log,
        headers=headers,
        max_attempts=settings.max_attempts,
        timeout=settings.timeout_seconds,
    )
    if isinstance(result, RelayError):
        raise ScanError(result.message)
    raw_headers = result.raw_headers or list(result.headers.items())
    log_headers(log, raw_headers)

    selected = [m.upper() for m in (methods or settings.probe_methods)]
    outcomes = await asyncio.gather(
        *(
            probe_method(
                transport,
                url,
                m,
                log,
                headers=headers,
                max_attempts=settings.max_attempts,
                timeout=settings.timeout_seconds,
            )
            for m in selected
        ),
        return_exceptions=True,
    )

    method_results: List[MethodProbeResult] = []
    for method, outcome in zip(selected, outcomes):
        if isinstance(outcome, asyncio.CancelledError):
            raise outcome
        if isinstance(outcome, BaseException):
            logger.error("Probe %s on %s failed: %s", method, url, outcome, exc_info=outcome)
            emit(log, LogType.ERROR, f"Error checking {method} method: {outcome}")
            outcome = MethodProbeResult(
                method=method, enabled=False, error=str(outcome) or type(outcome).__name__, outcome=ProbeOutcome.ERROR
            )
        method_results.append(outcome)

    return build_report(url, raw_headers, method_results, include_xss_protection=settings.include_xss_protection)


async def run_header_scan(
    scan_id: str,
    target: str,
    methods: List[str],
    store: Dict[str, dict],
    token_provider: Optional[TokenProvider] = None,
    settings: Settings = default_settings,
    client_factory: Optional[Callable[[], httpx.AsyncClient]] = None,
) -> None:
    log = ScanLog()
    store[scan_id]["log"] = log
    store[scan_id]["target"] = target
    try:
        factory = client_factory or default_client_factory(settings)
        async with factory() as client:
            transport = make_transport(client, settings)
            report = await run_scan(target, transport, log, methods, token_provider, settings)
    except ScanError as e:
        logger.info("Scan %s of %s failed: %s", scan_id, target, e)
        log.error(f"Scan failed: {e}")
        store[scan_id]["status"] = "failed"
        store[scan_id]["error"] = str(e)
        return
    except Exception as e:
        logger.exception("Scan %s of %s crashed: %s", scan_id, target, e)
        log.error(f"Scan failed: {e}")
        store[scan_id]["status"] = "failed"
        store[scan_id]["error"] = f"Unexpected error: {e}"
        return

    store[scan_id]["status"] = "done"
    store[scan_id]["target"] = report.target
    store[scan_id]["report"] = report


def relay_methods() -> List[str]:
    return list(ALLOWED_METHODS)
