# header_scanner/router.py
from typing import Callable, List, Optional
from uuid import uuid4

import httpx
from fastapi import APIRouter, BackgroundTasks, Depends, Header, HTTPException
from fastapi.responses import JSONResponse

from .auth import StaticTokenProvider, TokenProvider, bearer_from_header, provider_from_settings
from .config import settings
from .models import LogEntry, RelayError, RelayRequest, ScanRequest, ScanResult, ScanStatus
from .scan_core import available_methods, default_client_factory, relay_methods, run_header_scan
from .store import get_logs, get_results, get_status, new_scan, store
from .transport import DirectTransport, normalize_target

router = APIRouter(prefix="/scan", tags=["scan"])
relay_router = APIRouter(tags=["relay"])


def get_client_factory() -> Callable[[], httpx.AsyncClient]:
    return default_client_factory(settings)


def _token_provider(with_auth: bool, authorization: Optional[str]) -> Optional[TokenProvider]:
    if not with_auth:
        return None
    token = bearer_from_header(authorization)
    if token:
        return StaticTokenProvider(token)
    provider = provider_from_settings(settings)
    if provider is None:
        raise HTTPException(
            status_code=400,
            detail="Authenticated scans need a bearer token or OIDC client credentials",
        )
    return provider


@router.post("", response_model=ScanStatus)
async def start_scan(
    request: ScanRequest,
    background_tasks: BackgroundTasks,
    authorization: Optional[str] = Header(None),
    client_factory: Callable[[], httpx.AsyncClient] = Depends(get_client_factory),
):
    if not request.target.strip():
        raise HTTPException(status_code=400, detail="URL is required")
    provider = _token_provider(request.with_auth, authorization)
    scan_id = str(uuid4())
    new_scan(scan_id, request.target)
    background_tasks.add_task(
        run_header_scan,
        scan_id,
        request.target,
        request.methods,
        store,
        token_provider=provider,
        settings=settings,
        client_factory=client_factory,
    )
    return {"scan_id": scan_id, "status": "in_progress"}


@router.get("/methods")
async def list_methods():
    return {"default": available_methods(settings), "allowed": relay_methods()}


@router.get("/{scan_id}/status", response_model=ScanStatus)
async def check_status(scan_id: str):
    return get_status(scan_id)


@router.get("/{scan_id}/results", response_model=ScanResult)
async def check_results(scan_id: str):
    results = get_results(scan_id)
    if results is None:
        raise HTTPException(status_code=404, detail="Scan not found")
    return results


@router.get("/{scan_id}/logs", response_model=List[LogEntry])
async def check_logs(scan_id: str):
    logs = get_logs(scan_id)
    if logs is None:
        raise HTTPException(status_code=404, detail="Scan not found")
    return logs


@relay_router.post("/relay")
async def relay(
    request: RelayRequest,
    authorization: Optional[str] = Header(None),
    client_factory: Callable[[], httpx.AsyncClient] = Depends(get_client_factory),
):
    """Fetch ``url`` with ``method`` on behalf of the caller and report status and headers."""
    url = normalize_target(request.url)
    headers = {}
    if request.with_auth and authorization:
        headers["Authorization"] = authorization

    async with client_factory() as client:
        transport = DirectTransport(client, user_agent=settings.user_agent)
        result = await transport.send(url, request.method, headers=headers, timeout=settings.timeout_seconds)

    if isinstance(result, RelayError):
        return JSONResponse(status_code=result.status_code, content=result.model_dump(by_alias=True))
    return result.model_dump(by_alias=True)
