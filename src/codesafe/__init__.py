"""
CodeSafe: a rule-based source-code vulnerability scanner.

Scans a single JavaScript/TypeScript, Python or Java file with a fixed table of
pattern rules and reports findings with a severity, a line number and a
suggested fix. Scanning is pure and local; only the optional code enhancement
service talks to a remote model.
"""

from .analyzer import analyze_upload, extension_for, filter_findings, scan, summarize
from .models import Finding, Severity

__all__ = [
    "Finding",
    "Severity",
    "analyze_upload",
    "extension_for",
    "filter_findings",
    "scan",
    "summarize",
]
