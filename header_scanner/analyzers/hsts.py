# header_scanner/analyzers/hsts.py
import re
from typing import List, Optional

from ..models import Verdict, VerdictStatus

MAX_AGE_RE = re.compile(r"max-age=\d+", re.I)
INCLUDE_SUBDOMAINS_RE = re.compile(r"includeSubDomains", re.I)


def analyze_strict_transport_security(value: Optional[str], occurrences: int) -> Verdict:
    """
    Validate an HSTS value. ``occurrences`` is how many times the header was
    sent; anything other than exactly one is a misconfiguration.
    """
    if not value:
        return Verdict(status=VerdictStatus.WARNING, message="Strict-Transport-Security header is missing")

    if occurrences != 1:
        return Verdict(
            status=VerdictStatus.WARNING,
            message="Strict-Transport-Security header must be present exactly once",
        )

    issues: List[str] = []

    max_age_count = len(MAX_AGE_RE.findall(value))
    if max_age_count == 0:
        issues.append("Missing max-age directive")
    elif max_age_count > 1:
        issues.append("Multiple max-age directives found (only one allowed)")

    subdomains_count = len(INCLUDE_SUBDOMAINS_RE.findall(value))
    if subdomains_count == 0:
        issues.append("Missing includeSubDomains directive")
    elif subdomains_count > 1:
        issues.append("Multiple includeSubDomains directives found (only one allowed)")

    if not issues:
        return Verdict(status=VerdictStatus.SUCCESS, message="Strict-Transport-Security is properly configured")
    return Verdict(status=VerdictStatus.WARNING, message="; ".join(issues))
