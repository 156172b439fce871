"""
Input hardening for inference calls.

Sanitization, structural validation, rate limiting, aggregate security
checks and secret redaction.
"""

from shipmail.security.input_validator import InputValidator
from shipmail.security.rate_limiter import RateLimiter, default_llm_rate_limiter
from shipmail.security.redaction import (
    mask_key,
    redact_api_keys,
    redact_config,
    safe_error_message,
)
from shipmail.security.sanitizer import ContentSanitizer
from shipmail.security.security_validator import SecurityValidator, has_weak_api_key

__all__ = [
    "ContentSanitizer",
    "InputValidator",
    "RateLimiter",
    "SecurityValidator",
    "default_llm_rate_limiter",
    "has_weak_api_key",
    "mask_key",
    "redact_api_keys",
    "redact_config",
    "safe_error_message",
]
