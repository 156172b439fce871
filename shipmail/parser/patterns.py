"""
Carrier-specific tracking number patterns.

The catalog is built once and shared read-only between extraction calls.
Each carrier owns an ordered tuple of patterns; every regex hit becomes a
TrackingCandidate carrying the pattern's base confidence.
"""

import re
from dataclasses import dataclass
from functools import lru_cache

from shipmail.models.email import Carrier, DetectionMethod, TrackingCandidate

CONTEXT_RADIUS = 50

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class PatternEntry:
    """Compiled regex with extraction metadata"""

    regex: re.Pattern[str]
    carrier: Carrier
    format: str
    confidence: float
    context: DetectionMethod
    description: str


def _entry(
    pattern: str,
    carrier: Carrier,
    format: str,
    confidence: float,
    context: DetectionMethod,
    description: str,
    flags: int = 0,
) -> PatternEntry:
    return PatternEntry(
        regex=re.compile(pattern, flags),
        carrier=carrier,
        format=format,
        confidence=confidence,
        context=context,
        description=description,
    )


def _ups_patterns() -> tuple[PatternEntry, ...]:
    return (
        # Most reliable UPS format
        _entry(
            r"\b1Z[A-Z0-9]{6}\d{2}\d{7}\b",
            Carrier.UPS,
            "standard",
            0.9,
            DetectionMethod.DIRECT,
            "Standard UPS tracking number format",
        ),
        _entry(
            r"(?:tracking\s*(?:number|#|id)?|shipment\s*(?:id|number)?)\s*:?\s*(1Z[A-Z0-9]{6}\d{2}\d{7})\b",
            Carrier.UPS,
            "labeled",
            0.8,
            DetectionMethod.LABELED,
            "UPS number with tracking label",
            re.IGNORECASE,
        ),
        _entry(
            r"<td[^>]*>(1Z[A-Z0-9]{6}\d{2}\d{7})</td>",
            Carrier.UPS,
            "table",
            0.7,
            DetectionMethod.TABLE,
            "UPS number in HTML table",
        ),
        _entry(
            r"\b1Z\s?[A-Z0-9]{3}\s?[A-Z0-9]{3}\s?\d{2}\s?\d{4}\s?\d{3}\b",
            Carrier.UPS,
            "spaced",
            0.8,
            DetectionMethod.FORMATTED,
            "UPS number with spacing",
        ),
    )


def _usps_patterns() -> tuple[PatternEntry, ...]:
    return (
        _entry(
            r"\b94\d{20}\b",
            Carrier.USPS,
            "priority_mail",
            0.9,
            DetectionMethod.DIRECT,
            "USPS Priority Mail 22-digit",
        ),
        _entry(
            r"\b93\d{20}\b",
            Carrier.USPS,
            "signature_confirmation",
            0.9,
            DetectionMethod.DIRECT,
            "USPS Signature Confirmation",
        ),
        _entry(
            r"\b92\d{20}\b",
            Carrier.USPS,
            "certified_mail",
            0.9,
            DetectionMethod.DIRECT,
            "USPS Certified Mail",
        ),
        _entry(
            r"\b91\d{20}\b",
            Carrier.USPS,
            "signature_confirmation",
            0.9,
            DetectionMethod.DIRECT,
            "USPS Signature Confirmation",
        ),
        _entry(
            r"\b7\d{19}\b",
            Carrier.USPS,
            "certified_mail",
            0.9,
            DetectionMethod.DIRECT,
            "USPS Certified Mail 20-digit",
        ),
        _entry(
            r"\b[A-Z]{2}\d{9}US\b",
            Carrier.USPS,
            "international",
            0.9,
            DetectionMethod.DIRECT,
            "USPS International format",
        ),
        _entry(
            r"\b(?:LC|LK|EA|CP|RA|RB|RC|RD)\d{9}US\b",
            Carrier.USPS,
            "international_specific",
            0.95,
            DetectionMethod.DIRECT,
            "USPS International specific services",
        ),
        _entry(
            r"\b82\d{8}\b",
            Carrier.USPS,
            "express_international",
            0.8,
            DetectionMethod.DIRECT,
            "USPS Express Mail International",
        ),
        _entry(
            r"(?:tracking\s*(?:number|#)?|usps)\s*:?\s*(9[0-9\s]{20,25})",
            Carrier.USPS,
            "labeled_priority",
            0.8,
            DetectionMethod.LABELED,
            "USPS Priority Mail with label",
            re.IGNORECASE,
        ),
        _entry(
            r"(?:tracking\s*(?:number|#)?|usps)\s*:?\s*([A-Z]{2}[0-9]{9}US)",
            Carrier.USPS,
            "labeled_international",
            0.8,
            DetectionMethod.LABELED,
            "USPS International with label",
            re.IGNORECASE,
        ),
        _entry(
            r"\b94\d{2}\s?\d{4}\s?\d{4}\s?\d{4}\s?\d{4}\s?\d{4}\b",
            Carrier.USPS,
            "spaced_priority",
            0.8,
            DetectionMethod.FORMATTED,
            "USPS Priority Mail with spacing",
        ),
    )


def _fedex_patterns() -> tuple[PatternEntry, ...]:
    return (
        # Bare 12 digits is ambiguous with order/phone numbers
        _entry(
            r"\b\d{12}\b",
            Carrier.FEDEX,
            "express_12",
            0.6,
            DetectionMethod.DIRECT,
            "FedEx Express 12-digit",
        ),
        _entry(
            r"\b\d{14}\b",
            Carrier.FEDEX,
            "ground_14",
            0.7,
            DetectionMethod.DIRECT,
            "FedEx Ground 14-digit",
        ),
        _entry(
            r"\b\d{15}\b",
            Carrier.FEDEX,
            "ground_15",
            0.7,
            DetectionMethod.DIRECT,
            "FedEx Ground 15-digit",
        ),
        _entry(
            r"\b\d{18}\b",
            Carrier.FEDEX,
            "ground_18",
            0.8,
            DetectionMethod.DIRECT,
            "FedEx Ground 18-digit",
        ),
        _entry(
            r"\b\d{20}\b",
            Carrier.FEDEX,
            "ground_20",
            0.8,
            DetectionMethod.DIRECT,
            "FedEx Ground 20-digit",
        ),
        _entry(
            r"\b\d{22}\b",
            Carrier.FEDEX,
            "ground_22",
            0.8,
            DetectionMethod.DIRECT,
            "FedEx Ground 22-digit",
        ),
        _entry(
            r"(?:fedex|tracking\s*(?:number|#)?)\s*:?\s*(\d{12,22})",
            Carrier.FEDEX,
            "labeled",
            0.9,
            DetectionMethod.LABELED,
            "FedEx number with label",
            re.IGNORECASE,
        ),
        _entry(
            r"\b\d{4}\s?\d{4}\s?\d{4}\b",
            Carrier.FEDEX,
            "spaced_12",
            0.7,
            DetectionMethod.FORMATTED,
            "FedEx 12-digit with spacing",
        ),
        _entry(
            r"\b\d{4}\s?\d{4}\s?\d{4}\s?\d{2}\b",
            Carrier.FEDEX,
            "spaced_14",
            0.7,
            DetectionMethod.FORMATTED,
            "FedEx 14-digit with spacing",
        ),
    )


def _dhl_patterns() -> tuple[PatternEntry, ...]:
    # Labeled only: bare 10-11 digit runs collide with phone numbers
    return (
        _entry(
            r"(?:dhl|tracking\s*(?:number|#)?)\s*:?\s*(\d{10,11})",
            Carrier.DHL,
            "labeled",
            0.9,
            DetectionMethod.LABELED,
            "DHL number with label",
            re.IGNORECASE,
        ),
        _entry(
            r"waybill\s*(?:number|#)?\s*:?\s*(\d{10,11})",
            Carrier.DHL,
            "waybill",
            0.9,
            DetectionMethod.LABELED,
            "DHL waybill number",
            re.IGNORECASE,
        ),
    )


def _amazon_patterns() -> tuple[PatternEntry, ...]:
    # Reference patterns require the word "Amazon" next to the label
    return (
        _entry(
            r"\bTBA\d{12}\b",
            Carrier.AMAZON,
            "logistics",
            0.9,
            DetectionMethod.DIRECT,
            "Amazon Logistics tracking number",
            re.IGNORECASE,
        ),
        _entry(
            r"amazon\s+logistics\s+tracking\s*(?:number|#|id)?\s*:?\s*(TBA\d{12})\b",
            Carrier.AMAZON,
            "logistics_labeled",
            0.85,
            DetectionMethod.LABELED,
            "Amazon Logistics number with label",
            re.IGNORECASE,
        ),
        _entry(
            r"\bamazon\s+(?:(?:order|shipment)\s+)?(?:reference\s*code|reference|code|id)\s*:?\s*([A-Z0-9]{6,20})",
            Carrier.AMAZON,
            "reference",
            0.7,
            DetectionMethod.CONTEXTUAL,
            "Amazon reference code in Amazon context",
            re.IGNORECASE,
        ),
        _entry(
            r"\bamazon\s+(?:shipment|package|order)\s+(?:reference|number)\s*:?\s*([A-Z0-9]{6,20})",
            Carrier.AMAZON,
            "shipment_reference",
            0.8,
            DetectionMethod.LABELED,
            "Amazon shipment reference with label",
            re.IGNORECASE,
        ),
    )


def _generic_patterns() -> tuple[PatternEntry, ...]:
    return (
        _entry(
            r"tracking\s*(?:number|#|id)\s*(?::|is)?\s*([A-Z0-9]{10,25})",
            Carrier.UNKNOWN,
            "generic_labeled",
            0.6,
            DetectionMethod.LABELED,
            "Generic tracking number with explicit label",
            re.IGNORECASE,
        ),
        _entry(
            r"shipment\s*(?:id|number)\s*:?\s*([A-Z0-9]{10,25})",
            Carrier.UNKNOWN,
            "generic_shipment",
            0.5,
            DetectionMethod.LABELED,
            "Generic shipment number with explicit label",
            re.IGNORECASE,
        ),
        # Minimal-context emails
        _entry(
            r"tracking:\s*([A-Z0-9]{10,25})",
            Carrier.UNKNOWN,
            "simple_colon",
            0.7,
            DetectionMethod.LABELED,
            "Simple tracking: format",
            re.IGNORECASE,
        ),
    )


def extract_context(text: str, position: int, radius: int = CONTEXT_RADIUS) -> str:
    """Return the whitespace-normalized text within radius of position."""
    start = max(position - radius, 0)
    end = min(position + radius, len(text))
    return _WHITESPACE.sub(" ", text[start:end]).strip()


class PatternCatalog:
    """Read-only per-carrier pattern sets."""

    def __init__(self) -> None:
        self._patterns: dict[Carrier, tuple[PatternEntry, ...]] = {
            Carrier.UPS: _ups_patterns(),
            Carrier.USPS: _usps_patterns(),
            Carrier.FEDEX: _fedex_patterns(),
            Carrier.DHL: _dhl_patterns(),
            Carrier.AMAZON: _amazon_patterns(),
        }
        self._generic = _generic_patterns()

    def extract_for_carrier(self, text: str, carrier: str) -> list[TrackingCandidate]:
        """Run one carrier's patterns. Unknown carriers yield no candidates."""
        try:
            patterns = self._patterns.get(Carrier(carrier))
        except ValueError:
            return []
        if not patterns:
            return []
        return self._extract_with_patterns(text, patterns)

    def extract_generic(self, text: str) -> list[TrackingCandidate]:
        """Run the label-based patterns that apply to any carrier."""
        return self._extract_with_patterns(text, self._generic)

    def all_patterns(self) -> dict[str, tuple[PatternEntry, ...]]:
        patterns: dict[str, tuple[PatternEntry, ...]] = {
            str(carrier): entries for carrier, entries in self._patterns.items()
        }
        patterns["generic"] = self._generic
        return patterns

    @staticmethod
    def validate_pattern(entry: PatternEntry, text: str) -> bool:
        return entry.regex.search(text) is not None

    @staticmethod
    def _extract_with_patterns(
        text: str, patterns: tuple[PatternEntry, ...]
    ) -> list[TrackingCandidate]:
        candidates: list[TrackingCandidate] = []
        if not text:
            return candidates

        for entry in patterns:
            for match in entry.regex.finditer(text):
                value = match.group(1) if entry.regex.groups else match.group(0)
                tracking_number = (value or "").strip()
                if not tracking_number:
                    continue

                position = match.start()
                candidates.append(
                    TrackingCandidate(
                        text=tracking_number,
                        position=position,
                        context=extract_context(text, position),
                        carrier=entry.carrier,
                        confidence=entry.confidence,
                        method=entry.context,
                    )
                )

        return candidates


@lru_cache(maxsize=1)
def get_pattern_catalog() -> PatternCatalog:
    """Shared catalog instance, built on first use."""
    return PatternCatalog()
