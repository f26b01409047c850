# header_scanner/transport.py
"""
Transport relay: the only place that touches the network.

``send()`` never raises. It returns either a ``RelayResponse`` or a
``RelayError`` carrying the status the relay endpoint answers with
(400 disallowed method, 408 timeout, 502 unreachable target, 500 otherwise,
including a missing URL).
Redirects are never followed.
"""
import logging
from typing import Dict, Optional, Protocol, Sequence, Union

import httpx

from .models import RelayError, RelayResponse

logger = logging.getLogger(__name__)

ALLOWED_METHODS = ("GET", "HEAD", "OPTIONS", "TRACE", "DEBUG")
DEFAULT_TIMEOUT = 5.0
# extra wait on the caller side so the relay can report its own timeout first
RELAY_GRACE_SECONDS = 1.0

TransportResult = Union[RelayResponse, RelayError]


def normalize_target(url: str) -> str:
    url = (url or "").strip()
    if url and not url.startswith(("http://", "https://")):
        url = f"https://{url}"
    return url


def timeout_error(method: str, timeout: float) -> RelayError:
    return RelayError(
        message=f"Request timed out after {timeout:g} seconds",
        method=method,
        is_timeout=True,
        status_code=408,
    )


class Transport(Protocol):
    async def send(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> TransportResult: ...


def response_from_httpx(resp: httpx.Response, method: str) -> RelayResponse:
    return RelayResponse(
        status=resp.status_code,
        status_text=resp.reason_phrase,
        headers=dict(resp.headers.items()),
        raw_headers=list(resp.headers.multi_items()),
        url=str(resp.url),
        redirected=False,
        ok=resp.is_success,
        method=method,
    )


class DirectTransport:
    """Issues the request straight at the target with a shared ``httpx.AsyncClient``."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        user_agent: str = "Security-Scanner/1.0",
        allowed_methods: Sequence[str] = ALLOWED_METHODS,
    ):
        self.client = client
        self.user_agent = user_agent
        self.allowed_methods = {m.upper() for m in allowed_methods}

    async def send(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> TransportResult:
        method = (method or "GET").upper()
        if method not in self.allowed_methods:
            return RelayError(message=f"Method {method} is not allowed", method=method, status_code=400)
        if not url:
            return RelayError(message="URL is required", method=method, status_code=500)

        request_headers = {"User-Agent": self.user_agent}
        request_headers.update(headers or {})
        logger.debug("Relaying %s %s", method, url)
        try:
            resp = await self.client.request(
                method, url, headers=request_headers, timeout=timeout, follow_redirects=False
            )
        except httpx.TimeoutException:
            return timeout_error(method, timeout)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            logger.info("Fetch error with method %s on %s: %s", method, url, e)
            return RelayError(
                message=str(e) or "Failed to connect to the target server",
                method=method,
                status_code=502,
            )
        except Exception as e:
            logger.exception("Unexpected error relaying %s %s: %s", method, url, e)
            return RelayError(message=str(e) or "An unknown error occurred", method=method, status_code=500)
        return response_from_httpx(resp, method)


class RelayTransport:
    """Goes through a relay endpoint (``POST /relay``) instead of calling the target."""

    def __init__(self, client: httpx.AsyncClient, relay_url: str):
        self.client = client
        self.relay_url = relay_url

    async def send(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Dict[str, str]] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> TransportResult:
        method = (method or "GET").upper()
        auth = {k: v for k, v in (headers or {}).items() if k.lower() == "authorization"}
        body = {"url": url, "method": method, "withAuth": bool(auth)}
        try:
            resp = await self.client.post(
                self.relay_url, json=body, headers=auth, timeout=timeout + RELAY_GRACE_SECONDS
            )
        except httpx.TimeoutException:
            return timeout_error(method, timeout)
        except (httpx.RequestError, httpx.InvalidURL) as e:
            return RelayError(message=f"Relay unreachable: {e}", method=method, status_code=502)

        try:
            data = resp.json()
            if isinstance(data, dict) and data.get("error"):
                return RelayError(
                    message=data.get("message") or "Relay error",
                    method=data.get("method") or method,
                    is_timeout=bool(data.get("isTimeout")),
                    status_code=resp.status_code,
                )
            return RelayResponse.model_validate(data)
        except ValueError as e:
            logger.warning("Invalid relay response (HTTP %s): %s", resp.status_code, e)
            return RelayError(
                message=f"Invalid relay response (HTTP {resp.status_code})",
                method=method,
                status_code=502,
            )
