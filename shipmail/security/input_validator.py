"""
Structural validation of inference inputs.

Checks size, encoding and minimal length of the raw email and tracking
number before anything is sanitized. Only structurally sound input is
passed through the ContentSanitizer and its safety gate.
"""

import logging
import re

from shipmail.exceptions import RequestTooLargeError
from shipmail.models.security import ValidationResult
from shipmail.security.redaction import redact_api_keys
from shipmail.security.sanitizer import ContentSanitizer

logger = logging.getLogger(__name__)

MAX_EMAIL_BYTES = 50 * 1024
MIN_EMAIL_LENGTH = 10
MAX_TRACKING_NUMBER_LENGTH = 100
MIN_TRACKING_NUMBER_LENGTH = 3
MAX_REQUEST_BYTES = 100 * 1024
MIN_RETAINED_RATIO = 0.5
LOG_PREVIEW_LENGTH = 200

_SUSPICIOUS_PATTERNS = [
    re.compile(r"\x00{5,}"),  # Null bytes
    re.compile(r"[^\w\s]{50,}"),  # Symbol floods
    re.compile(r"<script[^>]*>[^<]*</script>", re.IGNORECASE),
    re.compile(r"javascript:[^\"'\s]+", re.IGNORECASE),
    re.compile(r"[\x00-\x1f\x7f-\x9f]{10,}"),  # Control characters
    re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f]{20,}"),  # Binary data
]

_ALPHANUMERIC = re.compile(r"[A-Za-z0-9]")
_WHITESPACE = re.compile(r"\s+")


class InputValidator:
    """Validates and sanitizes email inputs bound for an inference call."""

    def __init__(self, sanitizer: ContentSanitizer | None = None):
        self.sanitizer = sanitizer or ContentSanitizer()

    def validate_email_processing_input(
        self, email_content: str | bytes, tracking_number: str | bytes
    ) -> ValidationResult:
        """
        Validate, then sanitize, an email body and tracking number.

        Structural errors stop processing; sanitized fields are left empty
        in that case. Sanitized email that fails the safety gate marks the
        result invalid with safety_failed set so callers can tell an
        adversarial input from a malformed one.
        """
        result = ValidationResult()

        email_text = self._decode(email_content)
        tracking_text = self._decode(tracking_number)

        if email_text is None:
            result.errors.append("email content is not valid UTF-8")
        else:
            result.errors.extend(self._validate_email_content(email_text))

        if tracking_text is None:
            result.errors.append("tracking number is not valid UTF-8")
        else:
            result.errors.extend(self._validate_tracking_number(tracking_text))

        if result.errors:
            result.is_valid = False
            logger.warning(
                "Input validation failed",
                extra={"json_fields": {"errors": result.errors}},
            )
            return result

        result.sanitized_email = self.sanitizer.sanitize_email_content(email_text)
        result.sanitized_tracking_number = self.sanitizer.sanitize_tracking_number(
            tracking_text
        )

        if not self.sanitizer.validate_content_safety(result.sanitized_email):
            result.errors.append("email content failed safety validation")
            result.is_valid = False
            result.safety_failed = True

        original_size = len(email_text.encode("utf-8"))
        retained_size = len(result.sanitized_email.encode("utf-8"))
        if original_size and retained_size < original_size * MIN_RETAINED_RATIO:
            result.warnings.append("significant content was removed during sanitization")

        return result

    def validate_email_content(self, content: str | bytes) -> list[str]:
        text = self._decode(content)
        if text is None:
            return ["email content is not valid UTF-8"]
        return self._validate_email_content(text)

    def validate_tracking_number(self, tracking_number: str | bytes) -> list[str]:
        text = self._decode(tracking_number)
        if text is None:
            return ["tracking number is not valid UTF-8"]
        return self._validate_tracking_number(text)

    @staticmethod
    def validate_request_size(email_content: str, tracking_number: str) -> None:
        """Raise RequestTooLargeError when both fields exceed 100KB combined."""
        total = len(email_content.encode("utf-8", errors="surrogatepass")) + len(
            tracking_number.encode("utf-8", errors="surrogatepass")
        )
        if total > MAX_REQUEST_BYTES:
            raise RequestTooLargeError(
                f"request too large: {total} bytes (maximum {MAX_REQUEST_BYTES})"
            )

    @staticmethod
    def sanitize_for_logging(content: str) -> str:
        if not content:
            return ""
        if len(content) > LOG_PREVIEW_LENGTH:
            content = content[:LOG_PREVIEW_LENGTH] + "..."
        content = redact_api_keys(content)
        return _WHITESPACE.sub(" ", content).strip()

    @staticmethod
    def _decode(value: str | bytes) -> str | None:
        """Return value as text, or None when it is not valid UTF-8."""
        if isinstance(value, bytes):
            try:
                return value.decode("utf-8")
            except UnicodeDecodeError:
                return None
        try:
            value.encode("utf-8")
        except UnicodeEncodeError:
            # Lone surrogates
            return None
        return value

    @staticmethod
    def _validate_email_content(content: str) -> list[str]:
        if not content:
            return ["email content cannot be empty"]

        errors: list[str] = []
        if len(content.encode("utf-8")) > MAX_EMAIL_BYTES:
            errors.append("email content too large (maximum 50KB)")
            return errors

        if len(content.strip()) < MIN_EMAIL_LENGTH:
            errors.append("email content too short (minimum 10 characters)")

        for pattern in _SUSPICIOUS_PATTERNS:
            if pattern.search(content):
                errors.append("email content contains suspicious patterns")
                break

        return errors

    @staticmethod
    def _validate_tracking_number(tracking_number: str) -> list[str]:
        if not tracking_number:
            return ["tracking number cannot be empty"]

        errors: list[str] = []
        if len(tracking_number) > MAX_TRACKING_NUMBER_LENGTH:
            errors.append("tracking number too long (maximum 100 characters)")
        if len(tracking_number.strip()) < MIN_TRACKING_NUMBER_LENGTH:
            errors.append("tracking number too short (minimum 3 characters)")
        if "\x00" in tracking_number:
            errors.append("tracking number contains null bytes")
        if not _ALPHANUMERIC.search(tracking_number):
            errors.append("tracking number must contain alphanumeric characters")

        return errors
