# header_scanner/analyzers/csp.py
from typing import Optional

from ..models import Verdict, VerdictStatus


def analyze_csp(value: Optional[str]) -> Verdict:
    if not value or not value.strip():
        return Verdict(status=VerdictStatus.WARNING, message="No CSP header found")

    lowered = value.lower()
    directives = [d.strip() for d in lowered.split(";")]

    if "'unsafe-inline'" in lowered:
        return Verdict(status=VerdictStatus.WARNING, message="CSP allows 'unsafe-inline' sources")
    if "*" in lowered:
        return Verdict(status=VerdictStatus.WARNING, message="CSP contains a wildcard (*) source")
    if not any(d.startswith("default-src") for d in directives):
        return Verdict(status=VerdictStatus.WARNING, message="Missing default-src directive")
    if not any(d.startswith("script-src") for d in directives):
        return Verdict(status=VerdictStatus.WARNING, message="Missing script-src directive")
    return Verdict(status=VerdictStatus.SUCCESS, message="CSP is configured")
