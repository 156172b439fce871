"""
shipmail: tracking number extraction from shipment notification emails.
"""

from shipmail.models import EmailContent, ExtractorConfig, LLMConfig, TrackingInfo
from shipmail.parser import TrackingExtractor, extract_tracking

__all__ = [
    "EmailContent",
    "ExtractorConfig",
    "LLMConfig",
    "TrackingExtractor",
    "TrackingInfo",
    "extract_tracking",
]
