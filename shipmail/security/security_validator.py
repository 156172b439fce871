"""
Aggregate security checks over inference configuration and inputs.

Configuration problems are reported, never raised; the caller decides
whether a failing report blocks processing.
"""

import ipaddress
import logging
from typing import Optional
from urllib.parse import urlparse

from shipmail.exceptions import RequestTooLargeError
from shipmail.models.extraction import LLMConfig
from shipmail.models.security import (
    SecurityIssue,
    SecurityReport,
    SecurityWarning,
    Severity,
)
from shipmail.security.input_validator import InputValidator
from shipmail.security.sanitizer import ContentSanitizer

logger = logging.getLogger(__name__)

MIN_API_KEY_LENGTH = 20
MAX_REASONABLE_TIMEOUT = 600.0
STANDARD_PORTS = (80, 443)

WEAK_KEY_MARKERS = (
    "test",
    "demo",
    "example",
    "placeholder",
    "change-me",
    "12345",
    "abcde",
)

LOCAL_HOSTNAMES = ("localhost", "localhost.localdomain")


def has_weak_api_key(api_key: str) -> bool:
    """True for short keys or keys containing placeholder fragments."""
    if len(api_key) < MIN_API_KEY_LENGTH:
        return True
    lower = api_key.lower()
    return any(marker in lower for marker in WEAK_KEY_MARKERS)


def _is_loopback(hostname: str) -> bool:
    if hostname.lower() in LOCAL_HOSTNAMES:
        return True
    try:
        return ipaddress.ip_address(hostname).is_loopback
    except ValueError:
        return False


class SecurityValidator:
    """Runs configuration, input and endpoint checks into one report."""

    def __init__(
        self,
        input_validator: Optional[InputValidator] = None,
        sanitizer: Optional[ContentSanitizer] = None,
    ):
        self.sanitizer = sanitizer or ContentSanitizer()
        self.input_validator = input_validator or InputValidator(self.sanitizer)

    def validate_system_security(
        self,
        config: Optional[LLMConfig],
        email_content: str,
        tracking_number: str,
    ) -> SecurityReport:
        """
        Validate an inference configuration together with one request.

        A missing configuration fails immediately without checking inputs.
        Weak keys and plain-HTTP endpoints are medium issues that leave the
        report passing; input, safety and size failures fail it.
        """
        if config is None:
            return SecurityReport(
                passed=False,
                issues=(
                    SecurityIssue(
                        severity=Severity.HIGH,
                        component="configuration",
                        description="LLM configuration is nil",
                        mitigation="Provide a valid LLM configuration",
                    ),
                ),
            )

        issues: list[SecurityIssue] = []
        warnings: list[SecurityWarning] = []
        passed = True

        self._check_config(config, issues, warnings)
        if not self._check_inputs(email_content, tracking_number, issues):
            passed = False
        if config.endpoint and not self._check_endpoint(config.endpoint, issues, warnings):
            passed = False

        report = SecurityReport(passed=passed, issues=tuple(issues), warnings=tuple(warnings))
        if not report.passed:
            logger.warning(
                "Security validation failed",
                extra={
                    "json_fields": {
                        "issues": [issue.description for issue in report.issues],
                    }
                },
            )
        return report

    def _check_config(
        self,
        config: LLMConfig,
        issues: list[SecurityIssue],
        warnings: list[SecurityWarning],
    ) -> None:
        if config.api_key and has_weak_api_key(config.api_key):
            issues.append(
                SecurityIssue(
                    severity=Severity.MEDIUM,
                    component="api_key",
                    description="API key appears weak or is a placeholder",
                    mitigation="Use a strong, randomly generated API key",
                )
            )

        if config.endpoint.startswith("http://"):
            issues.append(
                SecurityIssue(
                    severity=Severity.MEDIUM,
                    component="endpoint",
                    description="Endpoint does not use HTTPS",
                    mitigation="Use an HTTPS endpoint outside local development",
                )
            )

        if config.timeout > MAX_REASONABLE_TIMEOUT:
            warnings.append(
                SecurityWarning(
                    component="timeout",
                    description=f"Timeout of {config.timeout:g}s is very long",
                    suggestion="Use a timeout of 10 minutes or less",
                )
            )

        if not config.enabled:
            warnings.append(
                SecurityWarning(
                    component="configuration",
                    description="LLM processing is disabled",
                    suggestion="Enable LLM processing only when required",
                )
            )

    def _check_inputs(
        self,
        email_content: str,
        tracking_number: str,
        issues: list[SecurityIssue],
    ) -> bool:
        passed = True

        email_errors = self.input_validator.validate_email_content(email_content)
        if email_errors:
            issues.append(
                SecurityIssue(
                    severity=Severity.MEDIUM,
                    component="email_content",
                    description="; ".join(email_errors),
                    mitigation="Reject or clean the email content before processing",
                )
            )
            passed = False

        tracking_errors = self.input_validator.validate_tracking_number(tracking_number)
        if tracking_errors:
            issues.append(
                SecurityIssue(
                    severity=Severity.MEDIUM,
                    component="tracking_number",
                    description="; ".join(tracking_errors),
                    mitigation="Provide a well-formed tracking number",
                )
            )
            passed = False

        if not self.sanitizer.validate_content_safety(email_content):
            issues.append(
                SecurityIssue(
                    severity=Severity.HIGH,
                    component="content_safety",
                    description="Email content failed safety validation",
                    mitigation="Do not send this content to the model",
                )
            )
            passed = False

        try:
            self.input_validator.validate_request_size(email_content, tracking_number)
        except RequestTooLargeError as e:
            issues.append(
                SecurityIssue(
                    severity=Severity.MEDIUM,
                    component="request_size",
                    description=str(e),
                    mitigation="Reduce the request size",
                )
            )
            passed = False

        return passed

    @staticmethod
    def _check_endpoint(
        endpoint: str,
        issues: list[SecurityIssue],
        warnings: list[SecurityWarning],
    ) -> bool:
        try:
            parsed = urlparse(endpoint)
            port = parsed.port
        except ValueError:
            parsed = None
            port = None

        if parsed is None or not parsed.scheme or not parsed.hostname:
            issues.append(
                SecurityIssue(
                    severity=Severity.HIGH,
                    component="endpoint",
                    description=f"Invalid endpoint URL: {endpoint}",
                    mitigation="Configure a valid http(s) endpoint URL",
                )
            )
            return False

        if _is_loopback(parsed.hostname):
            warnings.append(
                SecurityWarning(
                    component="endpoint",
                    description="Endpoint points at localhost",
                    suggestion="Make sure this is intended outside development",
                )
            )

        if port is not None and port not in STANDARD_PORTS:
            warnings.append(
                SecurityWarning(
                    component="endpoint",
                    description=f"Endpoint uses non-standard port {port}",
                    suggestion="Verify the port is intended and firewalled",
                )
            )

        return True
