"""
Regex extraction pipeline: patterns, carrier hints, scoring and the
orchestrating TrackingExtractor.
"""

from shipmail.parser.extractor import TrackingExtractor, extract_tracking
from shipmail.parser.patterns import PatternCatalog, PatternEntry, get_pattern_catalog

__all__ = [
    "PatternCatalog",
    "PatternEntry",
    "TrackingExtractor",
    "extract_tracking",
    "get_pattern_catalog",
]
