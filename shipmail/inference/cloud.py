"""
Cloud model provider (Google Gemini through google-genai).
"""

import logging
from typing import Optional

from google import genai
from google.genai import errors, types

from shipmail.exceptions import InferenceError
from shipmail.inference.base import parse_tracking_reply
from shipmail.inference.local import HEALTH_CHECK_PROMPT, build_prompt_for
from shipmail.models.email import EmailContent, TrackingInfo
from shipmail.models.extraction import LLMConfig
from shipmail.security.rate_limiter import RateLimiter, default_llm_rate_limiter
from shipmail.security.redaction import redact_api_keys
from shipmail.security.sanitizer import ContentSanitizer

logger = logging.getLogger(__name__)


class CloudInferenceExtractor:
    """Tracking extraction through the Gemini API."""

    def __init__(
        self,
        config: LLMConfig,
        rate_limiter: Optional[RateLimiter] = None,
        client: Optional[genai.Client] = None,
        sanitizer: Optional[ContentSanitizer] = None,
    ):
        self.config = config
        self.rate_limiter = rate_limiter or default_llm_rate_limiter()
        self.sanitizer = sanitizer or ContentSanitizer()
        self._client = client

    @property
    def client(self) -> genai.Client:
        if self._client is None:
            self._client = genai.Client(
                api_key=self.config.api_key or None,
                http_options=types.HttpOptions(timeout=int(self.config.timeout * 1000)),
            )
        return self._client

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
        results = parse_tracking_reply(self._generate(prompt, json_response=True))

        logger.info(
            "Cloud model returned %d tracking numbers",
            len(results),
            extra={"json_fields": {"model": self.config.model}},
        )
        return results

    def health_check(self) -> None:
        if not self.is_enabled():
            return
        self._generate(HEALTH_CHECK_PROMPT, json_response=False)

    def is_enabled(self) -> bool:
        return self.config.enabled

    def _generate(self, prompt: str, json_response: bool) -> str:
        self.rate_limiter.wait(timeout=self.config.timeout)

        generate_config = types.GenerateContentConfig(
            temperature=self.config.temperature,
            max_output_tokens=self.config.max_tokens,
            response_mime_type="application/json" if json_response else None,
        )
        try:
            response = self.client.models.generate_content(
                model=self.config.model,
                contents=prompt,
                config=generate_config,
            )
        except errors.APIError as e:
            raise InferenceError(
                f"Gemini request failed: {redact_api_keys(str(e))}"
            ) from e

        if not response.text:
            raise InferenceError("Gemini returned an empty response")
        return response.text
