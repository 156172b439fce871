"""
Inference extractor selection.
"""

import logging
from typing import Optional

from shipmail.inference.base import DisabledInferenceExtractor, InferenceExtractor
from shipmail.inference.cloud import CloudInferenceExtractor
from shipmail.inference.local import LocalInferenceExtractor
from shipmail.models.extraction import LLMConfig, LLMProvider
from shipmail.security.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


def new_inference_extractor(
    config: Optional[LLMConfig], rate_limiter: Optional[RateLimiter] = None
) -> InferenceExtractor:
    """
    Pick the extractor for a configuration.

    Disabled or missing configs, and providers without an implementation,
    get the disabled extractor. Never raises.
    """
    if config is None or not config.enabled:
        return DisabledInferenceExtractor()

    provider = config.provider.lower()
    if provider in (LLMProvider.LOCAL, LLMProvider.OLLAMA):
        return LocalInferenceExtractor(config, rate_limiter=rate_limiter)
    if provider in (LLMProvider.GEMINI, LLMProvider.GOOGLE):
        return CloudInferenceExtractor(config, rate_limiter=rate_limiter)

    logger.warning("Unsupported inference provider %r, inference disabled", config.provider)
    return DisabledInferenceExtractor()
