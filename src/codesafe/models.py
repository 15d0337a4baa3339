"""Pydantic models for the CodeSafe scanner."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(str, Enum):
    """Severity levels for findings."""

    high = "high"
    medium = "medium"
    low = "low"

    @property
    def rank(self) -> int:
        """Sort key where high sorts first."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {Severity.high: 0, Severity.medium: 1, Severity.low: 2}


class Finding(BaseModel):
    """A single issue reported by the rule-based scanner."""

    model_config = ConfigDict(frozen=True)

    severity: Severity = Field(description="Severity level")
    message: str = Field(description="Human-readable description of the issue")
    line: int = Field(ge=1, description="1-based line number that triggered the rule")
    rule: str = Field(description="Stable rule identifier, e.g. no-eval")
    improvement: str = Field(description="Suggested remediation")


class ScanSummary(BaseModel):
    """Summary counts by severity."""

    high: int = Field(default=0, description="Number of high findings")
    medium: int = Field(default=0, description="Number of medium findings")
    low: int = Field(default=0, description="Number of low findings")
    total: int = Field(default=0, description="Total number of findings")


class ScanRequest(BaseModel):
    """Request body for scanning a single uploaded file."""

    code: str = Field(description="Full text content of the file")
    filename: str = Field(description="Original file name, used to derive the language")
    severities: Optional[list[Severity]] = Field(
        default=None,
        description="Severities to include; omit for all",
    )
    save_history: bool = Field(default=True, description="Record the findings in scan history")


class ScanResponse(BaseModel):
    """Findings for one scanned file."""

    scan_id: str = Field(description="Unique identifier for this scan")
    filename: str = Field(description="Scanned file name")
    extension: str = Field(description="Extension the rule profile was chosen by")
    findings: list[Finding] = Field(default_factory=list, description="Findings in rule order")
    summary: ScanSummary = Field(default_factory=ScanSummary, description="Summary counts")


class EnhanceRequest(BaseModel):
    """Request body for the code enhancement proxy."""

    code: str = Field(description="Original code to enhance")
    filename: str = Field(description="Original file name")
    findings: list[Finding] = Field(
        default_factory=list,
        description="Findings from a previous scan, passed to the model as context",
    )


class EnhanceResponse(BaseModel):
    """Replacement code returned by the enhancement model."""

    filename: str = Field(description="Original file name")
    enhanced_code: str = Field(description="Code rewritten by the model")


class HistoryEntry(BaseModel):
    """A saved scan result."""

    id: str = Field(description="Unique identifier for this entry")
    file_name: str = Field(description="File name the findings belong to")
    findings: list[Finding] = Field(default_factory=list, description="Saved findings")
    created_at: datetime = Field(description="When the entry was saved (UTC)")
