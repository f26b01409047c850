# header_scanner/analyzers/__init__.py
"""
Header analyzers.

Every analyzer is a pure function returning a ``Verdict``; none of them
raises on odd input. ``analyze()`` dispatches on ``HeaderKind`` and falls
back to ``{info, "Standard header"}`` for anything it does not know.
"""
from enum import Enum
from typing import Callable, Dict, List, Optional, Union

from ..headers import HeaderSet, occurrences
from ..models import Verdict, VerdictStatus
from .csp import analyze_csp
from .hsts import analyze_strict_transport_security
from .presence import analyze_referrer_policy, analyze_x_content_type_options, analyze_x_xss_protection
from .set_cookie import analyze_set_cookie, split_set_cookie
from .x_frame import analyze_x_frame_options


class HeaderKind(str, Enum):
    CONTENT_SECURITY_POLICY = "content-security-policy"
    SET_COOKIE = "set-cookie"
    STRICT_TRANSPORT_SECURITY = "strict-transport-security"
    X_FRAME_OPTIONS = "x-frame-options"
    X_CONTENT_TYPE_OPTIONS = "x-content-type-options"
    REFERRER_POLICY = "referrer-policy"
    X_XSS_PROTECTION = "x-xss-protection"

    @classmethod
    def lookup(cls, header_name: str) -> Optional["HeaderKind"]:
        try:
            return cls(header_name.strip().lower())
        except ValueError:
            return None


def _hsts(value: Optional[str], all_headers: Optional[HeaderSet]) -> Verdict:
    if all_headers is not None:
        count = occurrences(all_headers, HeaderKind.STRICT_TRANSPORT_SECURITY.value)
    else:
        count = 1 if value else 0
    return analyze_strict_transport_security(value, count)


ANALYZERS: Dict[HeaderKind, Callable[[Optional[str], Optional[HeaderSet]], Verdict]] = {
    HeaderKind.CONTENT_SECURITY_POLICY: lambda v, _: analyze_csp(v),
    HeaderKind.SET_COOKIE: lambda v, _: analyze_set_cookie(v),
    HeaderKind.STRICT_TRANSPORT_SECURITY: _hsts,
    HeaderKind.X_FRAME_OPTIONS: lambda v, _: analyze_x_frame_options(v),
    HeaderKind.X_CONTENT_TYPE_OPTIONS: lambda v, _: analyze_x_content_type_options(v),
    HeaderKind.REFERRER_POLICY: lambda v, _: analyze_referrer_policy(v),
    HeaderKind.X_XSS_PROTECTION: lambda v, _: analyze_x_xss_protection(v),
}

STANDARD_HEADER = Verdict(status=VerdictStatus.INFO, message="Standard header")

IMPORTANT_HEADERS: List[HeaderKind] = [
    HeaderKind.CONTENT_SECURITY_POLICY,
    HeaderKind.SET_COOKIE,
    HeaderKind.STRICT_TRANSPORT_SECURITY,
    HeaderKind.X_FRAME_OPTIONS,
    HeaderKind.X_CONTENT_TYPE_OPTIONS,
    HeaderKind.REFERRER_POLICY,
]


def important_headers(include_xss_protection: bool = False) -> List[str]:
    names = [kind.value for kind in IMPORTANT_HEADERS]
    if include_xss_protection:
        names.append(HeaderKind.X_XSS_PROTECTION.value)
    return names


def _coerce(value: Union[str, bytes, None]) -> Optional[str]:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def analyze(header_name: str, value: Union[str, bytes, None], all_headers: Optional[HeaderSet] = None) -> Verdict:
    kind = HeaderKind.lookup(header_name)
    if kind is None:
        return STANDARD_HEADER
    return ANALYZERS[kind](_coerce(value), all_headers)


__all__ = [
    "ANALYZERS",
    "HeaderKind",
    "IMPORTANT_HEADERS",
    "STANDARD_HEADER",
    "analyze",
    "analyze_csp",
    "analyze_referrer_policy",
    "analyze_set_cookie",
    "analyze_strict_transport_security",
    "analyze_x_content_type_options",
    "analyze_x_frame_options",
    "analyze_x_xss_protection",
    "important_headers",
    "split_set_cookie",
]
