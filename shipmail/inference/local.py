"""
Local model endpoint (Ollama-style /api/generate).
"""

import logging
from typing import Any, Optional

from curl_cffi import requests

from shipmail.exceptions import ContentSafetyError, InferenceError
from shipmail.inference.base import parse_tracking_reply
from shipmail.inference.prompts import build_tracking_prompt
from shipmail.models.email import EmailContent, TrackingInfo
from shipmail.models.extraction import LLMConfig
from shipmail.security.rate_limiter import RateLimiter, default_llm_rate_limiter
from shipmail.security.redaction import redact_api_keys
from shipmail.security.sanitizer import ContentSanitizer

logger = logging.getLogger(__name__)

DEFAULT_ENDPOINT = "http://localhost:11434"
HEALTH_CHECK_PROMPT = "Health check. Respond with: OK"


def post_generate(config: LLMConfig, prompt: str, json_format: bool = False) -> str:
    """
    Send one prompt to {endpoint}/api/generate and return the reply text.

    Raises:
        InferenceError: On transport errors, non-200 status or a bad envelope
    """
    endpoint = (config.endpoint or DEFAULT_ENDPOINT).rstrip("/")
    payload: dict[str, Any] = {
        "model": config.model,
        "prompt": prompt,
        "stream": False,
        "temperature": config.temperature,
        "max_tokens": config.max_tokens,
    }
    if json_format:
        payload["format"] = "json"

    headers: dict[str, str] = {}
    if config.api_key:
        headers["Authorization"] = f"Bearer {config.api_key}"

    try:
        response = requests.post(
            f"{endpoint}/api/generate",
            json=payload,
            headers=headers or None,
            timeout=config.timeout,
        )
    except requests.RequestsError as e:
        raise InferenceError(
            f"request to model endpoint failed: {redact_api_keys(str(e))}"
        ) from e

    if response.status_code != 200:
        raise InferenceError(
            f"model endpoint returned status {response.status_code}: "
            f"{redact_api_keys(response.text[:200])}"
        )

    try:
        envelope = response.json()
    except ValueError as e:
        raise InferenceError("failed to decode model endpoint response") from e

    if not isinstance(envelope, dict) or not isinstance(envelope.get("response"), str):
        raise InferenceError("model endpoint response has no 'response' field")

    return envelope["response"]


class LocalInferenceExtractor:
    """Tracking extraction against a self-hosted model endpoint."""

    def __init__(
        self,
        config: LLMConfig,
        rate_limiter: Optional[RateLimiter] = None,
        sanitizer: Optional[ContentSanitizer] = None,
    ):
        self.config = config
        self.rate_limiter = rate_limiter or default_llm_rate_limiter()
        self.sanitizer = sanitizer or ContentSanitizer()

    def extract(self, content: EmailContent) -> list[TrackingInfo]:
        """
        Extract tracking numbers from one email.

        Raises:
            ContentSafetyError: If the sanitized body fails the safety gate
            InferenceError: If the call fails or the reply cannot be parsed
            RateLimitExceeded: If the rate limiter wait times out
        """
        if not self.is_enabled():
            return []

        prompt = build_prompt_for(content, self.sanitizer)
        self.rate_limiter.wait(timeout=self.config.timeout)
        reply = post_generate(self.config, prompt)
        results = parse_tracking_reply(reply)

        logger.info(
            "Local model returned %d tracking numbers",
            len(results),
            extra={"json_fields": {"model": self.config.model}},
        )
        return results

    def health_check(self) -> None:
        if not self.is_enabled():
            return
        self.rate_limiter.wait(timeout=self.config.timeout)
        post_generate(self.config, HEALTH_CHECK_PROMPT)

    def is_enabled(self) -> bool:
        return self.config.enabled


def build_prompt_for(content: EmailContent, sanitizer: ContentSanitizer) -> str:
    """Sanitize an email and build its tracking prompt."""
    subject = sanitizer.sanitize_email_content(content.subject)
    body = sanitizer.sanitize_email_content(content.plain_text)

    if not sanitizer.validate_content_safety(body):
        raise ContentSafetyError("email content failed safety validation")

    return build_tracking_prompt(content.sender, subject, body)
