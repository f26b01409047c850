import asyncio

import pytest

from header_scanner.models import LogEntry, LogType, ProbeOutcome, RelayError, RelayResponse
from header_scanner.probe import classify_status, is_method_enabled, probe_method, request_with_retry
from header_scanner.scan_log import ScanLog, emit
from header_scanner.transport import timeout_error


class ScriptedTransport:
    """Returns the scripted results in order; the last one repeats."""

    def __init__(self, *results, delay=0.0):
        self.results = list(results)
        self.delay = delay
        self.calls = []

    async def send(self, url, method="GET", headers=None, timeout=5.0):
        self.calls.append((url, method, headers))
        if self.delay:
            await asyncio.sleep(self.delay)
        if len(self.results) > 1:
            return self.results.pop(0)
        return self.results[0]


def ok(status, headers=None, method="GET"):
    headers = headers or []
    return RelayResponse(
        status=status,
        status_text="",
        headers=dict(headers),
        raw_headers=headers,
        url="https://example.com",
        ok=200 <= status < 300,
        method=method,
    )


@pytest.mark.parametrize(
    "method,status,enabled",
    [
        ("DEBUG", 200, True),
        ("DEBUG", 204, False),
        ("DEBUG", 405, False),
        ("DEBUG", 500, False),
        ("TRACE", 404, True),
        ("TRACE", 405, False),
        ("TRACE", 200, True),
        ("OPTIONS", 204, True),
        ("HEAD", 500, True),
        ("GET", 405, False),
        ("trace", 405, False),
    ],
)
def test_method_enabled_policy(method, status, enabled):
    assert is_method_enabled(method, status) is enabled


@pytest.mark.parametrize("status", [0, 403])
def test_ambiguous_statuses_stay_enabled_but_indeterminate(status):
    assert classify_status("TRACE", status) == ProbeOutcome.INDETERMINATE
    assert is_method_enabled("TRACE", status) is True


def test_debug_403_is_disabled_not_indeterminate():
    assert classify_status("DEBUG", 403) == ProbeOutcome.DISABLED


def test_retry_after_timeout_then_success():
    transport = ScriptedTransport(timeout_error("TRACE", 5), ok(200))
    log = ScanLog()
    result = asyncio.run(request_with_retry(transport, "https://example.com", "TRACE", log=log))
    assert isinstance(result, RelayResponse)
    assert result.status == 200
    assert len(transport.calls) == 2
    assert any("retrying TRACE request" in e.message for e in log.entries)


def test_retry_budget_exhausted():
    transport = ScriptedTransport(timeout_error("TRACE", 5))
    log = ScanLog()
    result = asyncio.run(request_with_retry(transport, "https://example.com", "TRACE", log=log, max_attempts=2))
    assert isinstance(result, RelayError)
    assert result.is_timeout
    assert result.message == "Request timed out after 2 attempt(s)"
    assert len(transport.calls) == 2
    assert log.entries[-1].type.value == "error"


def test_non_timeout_errors_are_not_retried():
    refused = RelayError(message="Method PATCH is not allowed", method="PATCH", status_code=400)
    transport = ScriptedTransport(refused)
    result = asyncio.run(request_with_retry(transport, "https://example.com", "PATCH"))
    assert result == refused
    assert len(transport.calls) == 1


def test_single_attempt_means_no_retry():
    transport = ScriptedTransport(timeout_error("GET", 5), ok(200))
    result = asyncio.run(request_with_retry(transport, "https://example.com", max_attempts=1))
    assert isinstance(result, RelayError)
    assert len(transport.calls) == 1


def test_hanging_transport_is_cut_off():
    transport = ScriptedTransport(ok(200), delay=5)
    result = asyncio.run(
        request_with_retry(transport, "https://example.com", "HEAD", max_attempts=1, timeout=0.01)
    )
    assert isinstance(result, RelayError)
    assert result.is_timeout


def test_probe_logs_start_response_and_verdict_in_order():
    transport = ScriptedTransport(ok(405, [("allow", "GET, HEAD")], method="TRACE"))
    log = ScanLog()
    result = asyncio.run(probe_method(transport, "https://example.com", "trace", log))

    assert result.method == "TRACE"
    assert result.status_code == 405
    assert result.enabled is False
    assert result.error is None
    assert result.outcome == ProbeOutcome.DISABLED

    messages = [e.message for e in log.entries]
    start = messages.index("Testing TRACE method...")
    status = messages.index("TRACE request completed with status: 405")
    header = messages.index("TRACE allow: GET, HEAD")
    verdict = messages.index("TRACE method: NOT ALLOWED (secure)")
    assert start < status < header < verdict


def test_probe_debug_enabled():
    transport = ScriptedTransport(ok(200, method="DEBUG"))
    log = []
    result = asyncio.run(probe_method(transport, "https://example.com", "DEBUG", log))
    assert result.enabled is True
    assert result.outcome == ProbeOutcome.ENABLED
    assert all(isinstance(e, LogEntry) for e in log)
    assert log[-1].message == "DEBUG method: ENABLED (danger: 200 status code returned)"


def test_probe_transport_error_is_distinct_from_disabled():
    transport = ScriptedTransport(RelayError(message="connection refused", method="TRACE", status_code=502))
    log = ScanLog()
    result = asyncio.run(probe_method(transport, "https://example.com", "TRACE", log))
    assert result.enabled is False
    assert result.error == "connection refused"
    assert result.status_code is None
    assert result.outcome == ProbeOutcome.ERROR
    assert log.entries[-1].message == "Error checking TRACE method: connection refused"


def test_probe_forwards_auth_headers():
    transport = ScriptedTransport(ok(200))
    asyncio.run(
        probe_method(transport, "https://example.com", "OPTIONS", [], headers={"Authorization": "Bearer t"})
    )
    assert transport.calls[0][2] == {"Authorization": "Bearer t"}


def test_scan_log_entries():
    log = ScanLog()
    emit(log, LogType.REQUEST, "Making GET request to https://example.com...")
    entry = log.error("Scan failed: boom")
    assert len(log) == 2
    assert entry.type == LogType.ERROR
    assert [e.type for e in log.entries] == [LogType.REQUEST, LogType.ERROR]
