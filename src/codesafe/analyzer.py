"""Rule-based vulnerability scanning of a single source file."""

import uuid
from typing import Iterable, Optional

from .models import Finding, ScanResponse, ScanSummary, Severity
from .rules import profile_for

ALL_SEVERITIES: frozenset[Severity] = frozenset(Severity)


def _normalize_extension(file_extension: str) -> str:
    return file_extension.strip().lstrip(".").lower()


def extension_for(file_name: str) -> str:
    """Return the lowercased text after the last dot, or "" when there is none."""
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[1].lower()


def scan(content: str, file_extension: str) -> list[Finding]:
    """
    Scan source text with the rule profile of its extension.

    Findings follow the declaration order of the profile's rules; findings
    from one rule are in ascending line order. Unknown extensions give [].

    Args:
        content: Full text of one source file
        file_extension: Extension without the leading dot, e.g. "py"

    Returns:
        List of Finding objects
    """
    findings: list[Finding] = []

    for rule in profile_for(_normalize_extension(file_extension)):
        for line_num in rule.detect(content):
            findings.append(
                Finding(
                    severity=rule.severity,
                    message=rule.message,
                    line=line_num,
                    rule=rule.id,
                    improvement=rule.improvement,
                )
            )

    return findings


def filter_findings(
    findings: Iterable[Finding],
    enabled_severities: Optional[Iterable[Severity]] = None,
) -> list[Finding]:
    """Keep findings whose severity is enabled, preserving order.

    None enables every severity; an empty collection enables none.
    """
    enabled = ALL_SEVERITIES if enabled_severities is None else frozenset(
        Severity(s) for s in enabled_severities
    )
    return [f for f in findings if f.severity in enabled]


def summarize(findings: Iterable[Finding]) -> ScanSummary:
    """Count findings by severity."""
    summary = ScanSummary()

    for finding in findings:
        if finding.severity == Severity.high:
            summary.high += 1
        elif finding.severity == Severity.medium:
            summary.medium += 1
        elif finding.severity == Severity.low:
            summary.low += 1

    summary.total = summary.high + summary.medium + summary.low
    return summary


def analyze_upload(
    content: str,
    file_name: str,
    severities: Optional[Iterable[Severity]] = None,
) -> ScanResponse:
    """Scan uploaded file text, choosing the rule profile from its name."""
    extension = extension_for(file_name)
    findings = filter_findings(scan(content, extension), severities)

    return ScanResponse(
        scan_id=str(uuid.uuid4()),
        filename=file_name,
        extension=extension,
        findings=findings,
        summary=summarize(findings),
    )
