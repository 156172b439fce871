"""
shipmail data models.

This package contains the Pydantic models shared by the extraction pipeline.
"""

# Email and tracking models
from shipmail.models.email import (
    STANDARD_CARRIER_ORDER,
    Carrier,
    CarrierHint,
    DetectionMethod,
    EmailContent,
    HintSource,
    TrackingCandidate,
    TrackingInfo,
    TrackingSource,
)

# Configuration models
from shipmail.models.extraction import (
    DescriptionResult,
    ExtractorConfig,
    LLMConfig,
    LLMProvider,
)

# Security models
from shipmail.models.security import (
    RateLimiterStats,
    SecurityIssue,
    SecurityReport,
    SecurityWarning,
    Severity,
    ValidationResult,
)

__all__ = [
    # Email and tracking
    "Carrier",
    "CarrierHint",
    "DetectionMethod",
    "EmailContent",
    "HintSource",
    "STANDARD_CARRIER_ORDER",
    "TrackingCandidate",
    "TrackingInfo",
    "TrackingSource",
    # Configuration
    "DescriptionResult",
    "ExtractorConfig",
    "LLMConfig",
    "LLMProvider",
    # Security
    "RateLimiterStats",
    "SecurityIssue",
    "SecurityReport",
    "SecurityWarning",
    "Severity",
    "ValidationResult",
]
