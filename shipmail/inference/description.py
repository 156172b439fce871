"""
Product description extraction for a known tracking number.

Used by callers that already have a tracking number and only want to
know what was shipped. Independent of the tracking extraction pipeline.
"""

import logging
import threading
from typing import Optional, Protocol

from shipmail.exceptions import ContentSafetyError, InputValidationError
from shipmail.inference.base import clamp_confidence, parse_json_reply
from shipmail.inference.local import post_generate
from shipmail.inference.prompts import build_description_prompt
from shipmail.models.extraction import DescriptionResult, LLMConfig, LLMProvider
from shipmail.security.input_validator import InputValidator
from shipmail.security.rate_limiter import RateLimiter, default_llm_rate_limiter
from shipmail.utils.merchant import normalize_merchant_name

logger = logging.getLogger(__name__)


class DescriptionClient(Protocol):
    def extract_description(
        self,
        email_content: str,
        tracking_number: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> DescriptionResult: ...


class NoOpDescriptionClient:
    """Description extraction turned off."""

    def extract_description(
        self,
        email_content: str,
        tracking_number: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> DescriptionResult:
        return DescriptionResult()


class OllamaDescriptionClient:
    """Description extraction against a local model endpoint."""

    def __init__(
        self,
        config: LLMConfig,
        rate_limiter: Optional[RateLimiter] = None,
        validator: Optional[InputValidator] = None,
    ):
        self.config = config
        self.rate_limiter = rate_limiter or default_llm_rate_limiter()
        self.validator = validator or InputValidator()

    def extract_description(
        self,
        email_content: str,
        tracking_number: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> DescriptionResult:
        """
        Ask the model what was shipped under tracking_number.

        Inputs are validated and sanitized first. The rate limiter wait can
        be cancelled through cancel_event.

        Raises:
            InputValidationError: If the inputs are structurally invalid
            ContentSafetyError: If the email fails the safety gate
            RateLimitExceeded: If the wait is cancelled or times out
            InferenceError: If the call fails or the reply cannot be parsed
        """
        validation = self.validator.validate_email_processing_input(
            email_content, tracking_number
        )
        if not validation.is_valid:
            message = "; ".join(validation.errors)
            if validation.safety_failed:
                raise ContentSafetyError(message)
            raise InputValidationError(message)

        for warning in validation.warnings:
            logger.warning("Description input: %s", warning)

        prompt = build_description_prompt(
            validation.sanitized_email, validation.sanitized_tracking_number
        )

        self.rate_limiter.wait(cancel_event=cancel_event, timeout=self.config.timeout)
        reply = post_generate(self.config, prompt, json_format=True)
        data = parse_json_reply(reply)

        merchant = str(data.get("merchant") or "").strip()
        return DescriptionResult(
            description=str(data.get("description") or "").strip(),
            merchant=normalize_merchant_name(merchant) if merchant else "",
            confidence=clamp_confidence(data.get("confidence")),
        )


def new_description_client(config: Optional[LLMConfig]) -> DescriptionClient:
    """Local providers get a real client; everything else is a no-op."""
    if config is None or not config.enabled:
        return NoOpDescriptionClient()

    if config.provider.lower() in (LLMProvider.LOCAL, LLMProvider.OLLAMA):
        return OllamaDescriptionClient(config)

    logger.info("No description client for provider %s, using no-op", config.provider)
    return NoOpDescriptionClient()


class DescriptionExtractor:
    """Thin wrapper returning just the description string."""

    def __init__(self, client: DescriptionClient, enabled: bool = True):
        self.client = client
        self.enabled = enabled

    def extract_description(
        self,
        email_content: str,
        tracking_number: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> str:
        if not self.enabled or not email_content or not tracking_number:
            return ""

        result = self.client.extract_description(
            email_content, tracking_number, cancel_event
        )
        return result.description
