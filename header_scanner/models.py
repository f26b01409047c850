# header_scanner/models.py
from enum import Enum
from typing import Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class VerdictStatus(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    INFO = "info"


class Verdict(BaseModel):
    model_config = ConfigDict(frozen=True)

    status: VerdictStatus
    message: str = Field(min_length=1)


class ProbeOutcome(str, Enum):
    ENABLED = "enabled"
    DISABLED = "disabled"
    # non-405 answers that do not prove the method works (opaque or proxy refusals)
    INDETERMINATE = "indeterminate"
    ERROR = "error"


class MethodProbeResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    method: str
    status_code: Optional[int] = None
    enabled: bool
    error: Optional[str] = None
    outcome: ProbeOutcome


class CookieDisplay(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    attributes: str
    raw: str


class HeaderRow(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    value: Optional[str] = None
    display_value: str
    cookies: List[CookieDisplay] = Field(default_factory=list)
    verdict: Verdict


class ScanReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    target: str
    headers: List[Tuple[str, str]] = Field(default_factory=list)
    header_verdicts: Dict[str, Verdict] = Field(default_factory=dict)
    rows: List[HeaderRow] = Field(default_factory=list)
    method_results: List[MethodProbeResult] = Field(default_factory=list)

    @property
    def warnings(self) -> List[HeaderRow]:
        return [row for row in self.rows if row.verdict.status == VerdictStatus.WARNING]

    @property
    def enabled_methods(self) -> List[str]:
        return [r.method for r in self.method_results if r.enabled]


class LogType(str, Enum):
    REQUEST = "request"
    RESPONSE = "response"
    ERROR = "error"


class LogEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: str
    type: LogType
    message: str


# ---------- transport relay contract ----------

class RelayRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    url: str
    method: str = "GET"
    with_auth: bool = Field(False, alias="withAuth")


class RelayResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    status: int
    status_text: str = Field("", alias="statusText")
    headers: Dict[str, str] = Field(default_factory=dict)
    raw_headers: List[Tuple[str, str]] = Field(default_factory=list, alias="rawHeaders")
    url: str
    redirected: bool = False
    ok: bool
    method: str = "GET"


class RelayError(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    error: Literal[True] = True
    message: str
    method: Optional[str] = None
    is_timeout: bool = Field(False, alias="isTimeout")
    # HTTP status the relay answers with: 400 disallowed method, 408 timeout, 502 unreachable
    status_code: int = Field(502, exclude=True)


# ---------- API schemas ----------

class ScanRequest(BaseModel):
    target: str
    methods: List[str] = Field(default_factory=list)
    with_auth: bool = False


class ScanStatus(BaseModel):
    scan_id: str
    status: str


class ScanResult(BaseModel):
    scan_id: str
    status: str
    target: Optional[str] = None
    report: Optional[ScanReport] = None
    error: Optional[str] = None
