# header_scanner/report.py
from typing import Dict, List, Optional, Sequence

from .analyzers import HeaderKind, analyze, important_headers, split_set_cookie
from .headers import HeaderSet, RawHeaders, build_header_set
from .models import CookieDisplay, HeaderRow, MethodProbeResult, ScanReport, Verdict

NOT_SET = "Not set"


def format_cookie_value(value: Optional[str]) -> List[CookieDisplay]:
    """Break a Set-Cookie value into per-cookie display entries (same split as the analyzer)."""
    cookies: List[CookieDisplay] = []
    for cookie in split_set_cookie(value):
        name = cookie.split("=", 1)[0]
        cookies.append(CookieDisplay(name=name, attributes=cookie[len(name):], raw=cookie))
    return cookies


def build_header_row(name: str, headers: HeaderSet, verdict: Optional[Verdict] = None) -> HeaderRow:
    value = headers.get(name)
    if verdict is None:
        verdict = analyze(name, value, headers)
    cookies: List[CookieDisplay] = []
    if value and HeaderKind.lookup(name) == HeaderKind.SET_COOKIE:
        cookies = format_cookie_value(value)
    return HeaderRow(
        name=name,
        value=value,
        display_value=value if value else NOT_SET,
        cookies=cookies if len(cookies) > 1 else [],
        verdict=verdict,
    )


def build_report(
    target: str,
    headers: RawHeaders,
    method_results: Sequence[MethodProbeResult] = (),
    include_xss_protection: bool = False,
) -> ScanReport:
    """
    Assemble a report from an already-fetched header set and finished probes.
    Every present header is analyzed; rows are only built for the important
    headers, which show up as "Not set" when the server did not send them.
    """
    header_set = build_header_set(headers)
    important = important_headers(include_xss_protection)

    names: List[str] = []
    for key in header_set.keys():
        if key.lower() not in names:
            names.append(key.lower())
    for name in important:
        if name not in names:
            names.append(name)

    verdicts: Dict[str, Verdict] = {name: analyze(name, header_set.get(name), header_set) for name in names}
    rows = [build_header_row(name, header_set, verdicts[name]) for name in important]

    return ScanReport(
        target=target,
        headers=list(header_set.multi_items()),
        header_verdicts=verdicts,
        rows=rows,
        method_results=list(method_results),
    )
