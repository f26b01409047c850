# header_scanner/analyzers/x_frame.py
import re
from typing import Optional

from ..models import Verdict, VerdictStatus

ALLOW_FROM_RE = re.compile(r"ALLOW-FROM [^\s;]+")


def analyze_x_frame_options(value: Optional[str]) -> Verdict:
    if not value or not value.strip():
        return Verdict(status=VerdictStatus.WARNING, message="X-Frame-Options header is missing")

    normalized = value.strip().upper()
    if normalized in ("DENY", "SAMEORIGIN") or ALLOW_FROM_RE.fullmatch(normalized):
        return Verdict(status=VerdictStatus.SUCCESS, message="X-Frame-Options is properly set")

    return Verdict(
        status=VerdictStatus.WARNING,
        message="X-Frame-Options should be set to DENY, SAMEORIGIN or 'ALLOW-FROM <url>'",
    )
