from datetime import datetime
from enum import StrEnum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class Severity(StrEnum):
    """Security issue severity"""

    CRITICAL = "critical"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class ValidationResult(BaseModel):
    """Outcome of validating and sanitizing inputs for an inference call"""

    is_valid: bool = Field(default=True, description="Inputs may be sent to the model")
    sanitized_email: str = Field(default="", description="Sanitized email content")
    sanitized_tracking_number: str = Field(
        default="", description="Sanitized tracking number"
    )
    errors: list[str] = Field(default_factory=list, description="Blocking errors")
    warnings: list[str] = Field(default_factory=list, description="Non-blocking notes")
    safety_failed: bool = Field(
        default=False,
        description="Rejected by the safety gate rather than a structural check",
    )


class SecurityIssue(BaseModel):
    """Security issue that must be addressed"""

    model_config = ConfigDict(frozen=True)

    severity: Severity = Field(description="Issue severity")
    component: str = Field(description="Component where the issue was found")
    description: str = Field(description="What is wrong")
    mitigation: str = Field(description="How to fix it")


class SecurityWarning(BaseModel):
    """Security note that does not fail validation"""

    model_config = ConfigDict(frozen=True)

    component: str = Field(description="Component the warning applies to")
    description: str = Field(description="What was noticed")
    suggestion: str = Field(description="Suggested follow-up")


class SecurityReport(BaseModel):
    """Aggregate result of a security validation pass"""

    model_config = ConfigDict(frozen=True)

    passed: bool = Field(description="No failing issue was found")
    issues: tuple[SecurityIssue, ...] = Field(
        default=(), description="Issues in detection order"
    )
    warnings: tuple[SecurityWarning, ...] = Field(
        default=(), description="Warnings in detection order"
    )

    def summary(self) -> str:
        """Render a human-readable report."""
        lines = ["=== Security Validation Report ==="]
        lines.append(f"Status: {'PASSED' if self.passed else 'FAILED'}")

        if self.issues:
            lines.append("")
            lines.append(f"Security Issues ({len(self.issues)}):")
            for i, issue in enumerate(self.issues, start=1):
                lines.append(
                    f"  {i}. [{issue.severity.upper()}] {issue.component}: {issue.description}"
                )
                lines.append(f"     Mitigation: {issue.mitigation}")

        if self.warnings:
            lines.append("")
            lines.append(f"Security Warnings ({len(self.warnings)}):")
            for i, warning in enumerate(self.warnings, start=1):
                lines.append(f"  {i}. {warning.component}: {warning.description}")
                lines.append(f"     Suggestion: {warning.suggestion}")

        if not self.issues and not self.warnings:
            lines.append("")
            lines.append("No security issues or warnings found.")

        lines.append("")
        lines.append("=== End Report ===")
        return "\n".join(lines)


class RateLimiterStats(BaseModel):
    """Snapshot of rate limiter usage"""

    current_requests: int = Field(description="Admissions inside the current window")
    max_requests: int = Field(description="Maximum admissions per window")
    window: float = Field(description="Window length (seconds)")
    min_interval: float = Field(description="Minimum spacing (seconds)")
    last_request: Optional[datetime] = Field(
        default=None, description="Wall-clock time of the last admission"
    )

    @property
    def is_near_limit(self) -> bool:
        """True at or above 80% of the window capacity."""
        return self.current_requests >= self.max_requests * 0.8

    @property
    def remaining_requests(self) -> int:
        return max(self.max_requests - self.current_requests, 0)

    def __str__(self) -> str:
        return (
            f"Rate Limiter: {self.current_requests}/{self.max_requests} requests "
            f"in {self.window:g}s window, min interval {self.min_interval:g}s"
        )
