# header_scanner/analyzers/presence.py
# headers that only need to be present (or carry one fixed value)
from typing import Optional

from ..models import Verdict, VerdictStatus


def analyze_x_xss_protection(value: Optional[str]) -> Verdict:
    if value:
        return Verdict(status=VerdictStatus.SUCCESS, message="X-XSS-Protection header is present")
    return Verdict(status=VerdictStatus.WARNING, message="X-XSS-Protection header is missing")


def analyze_x_content_type_options(value: Optional[str]) -> Verdict:
    if value and value.lower() == "nosniff":
        return Verdict(status=VerdictStatus.SUCCESS, message="MIME-type sniffing prevention is enabled")
    return Verdict(
        status=VerdictStatus.WARNING,
        message="MIME-type sniffing prevention is not properly configured",
    )


def analyze_referrer_policy(value: Optional[str]) -> Verdict:
    if value:
        return Verdict(status=VerdictStatus.SUCCESS, message="Referrer policy is configured")
    return Verdict(status=VerdictStatus.WARNING, message="Referrer-Policy header is missing")
