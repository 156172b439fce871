"""
Language model extraction.

Tracking number extraction over a local endpoint or Gemini, plus the
description-only client.
"""

from shipmail.inference.base import (
    DisabledInferenceExtractor,
    InferenceExtractor,
    filter_by_confidence,
    parse_tracking_reply,
)
from shipmail.inference.cloud import CloudInferenceExtractor
from shipmail.inference.description import (
    DescriptionClient,
    DescriptionExtractor,
    NoOpDescriptionClient,
    OllamaDescriptionClient,
    new_description_client,
)
from shipmail.inference.factory import new_inference_extractor
from shipmail.inference.local import LocalInferenceExtractor

__all__ = [
    "CloudInferenceExtractor",
    "DescriptionClient",
    "DescriptionExtractor",
    "DisabledInferenceExtractor",
    "InferenceExtractor",
    "LocalInferenceExtractor",
    "NoOpDescriptionClient",
    "OllamaDescriptionClient",
    "filter_by_confidence",
    "new_description_client",
    "new_inference_extractor",
    "parse_tracking_reply",
]
