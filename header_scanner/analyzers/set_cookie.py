# header_scanner/analyzers/set_cookie.py
import re
from typing import List, Optional, Tuple

from ..models import Verdict, VerdictStatus

# a comma separates two cookies only when a "name=" follows before the next ';'
# (commas inside Expires dates or values are left alone)
COOKIE_SPLIT_RE = re.compile(r",(?=[^;]*=)")
COOKIE_NAME_RE = re.compile(r"^([^=;]*)")


def split_set_cookie(value: Optional[str]) -> List[str]:
    """Split a comma-joined Set-Cookie value into individual cookie strings."""
    if not value or not value.strip():
        return []
    cookies = [c.strip() for c in COOKIE_SPLIT_RE.split(value) if "=" in c]
    if not cookies and "=" in value:
        cookies = [value.strip()]
    return cookies


def cookie_name(cookie: str) -> str:
    m = COOKIE_NAME_RE.match(cookie)
    name = m.group(1).strip() if m else ""
    return name or "[unnamed cookie]"


def cookie_flags(cookie: str) -> Tuple[bool, bool]:
    """Return (secure, httponly) looking only at attribute tokens, never at the value."""
    attrs = set()
    for token in cookie.split(";")[1:]:
        attrs.add(token.split("=", 1)[0].strip().lower())
    return "secure" in attrs, "httponly" in attrs


def analyze_set_cookie(value: Optional[str]) -> Verdict:
    if not value or not value.strip():
        return Verdict(status=VerdictStatus.SUCCESS, message="No Set-Cookie header present, which is acceptable")

    cookies = split_set_cookie(value)
    if not cookies:
        return Verdict(status=VerdictStatus.SUCCESS, message="No cookies detected in the header")

    issues: List[str] = []
    for cookie in cookies:
        name = cookie_name(cookie)
        secure, http_only = cookie_flags(cookie)
        if not secure:
            issues.append(f'Cookie "{name}" does not have the Secure flag')
        if not http_only:
            issues.append(f'Cookie "{name}" does not have the HttpOnly flag')

    if not issues:
        return Verdict(
            status=VerdictStatus.SUCCESS,
            message=f"All {len(cookies)} cookies are marked as Secure and HttpOnly",
        )
    return Verdict(
        status=VerdictStatus.WARNING,
        message=f"Found {len(cookies)} cookies. Issues: {'; '.join(issues)}",
    )
