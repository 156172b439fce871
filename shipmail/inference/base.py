"""
Inference extractor contract and shared reply parsing.
"""

import json
import logging
import re
from typing import Any, Protocol, runtime_checkable

from shipmail.carriers.validators import normalize_carrier, normalize_tracking_number
from shipmail.exceptions import InferenceError
from shipmail.models.email import EmailContent, TrackingInfo, TrackingSource
from shipmail.utils.merchant import normalize_merchant_name

logger = logging.getLogger(__name__)

_CODE_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


@runtime_checkable
class InferenceExtractor(Protocol):
    """Extracts tracking numbers with a language model."""

    def extract(self, content: EmailContent) -> list[TrackingInfo]: ...

    def health_check(self) -> None: ...

    def is_enabled(self) -> bool: ...


class DisabledInferenceExtractor:
    """Inference turned off. Never calls anything, never fails."""

    def extract(self, content: EmailContent) -> list[TrackingInfo]:
        return []

    def health_check(self) -> None:
        return None

    def is_enabled(self) -> bool:
        return False


def filter_by_confidence(results: list[TrackingInfo], threshold: float) -> list[TrackingInfo]:
    """
    Keep results at or above threshold.

    When nothing passes, the unfiltered results are returned so the caller
    still has something to choose from.
    """
    filtered = [result for result in results if result.confidence >= threshold]
    if not filtered:
        return results
    return filtered


def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json ... ``` block."""
    return _CODE_FENCE.sub("", text.strip()).strip()


def parse_json_reply(text: str) -> dict[str, Any]:
    """
    Decode the JSON object embedded in a model reply.

    Raises:
        InferenceError: If the reply is not a JSON object
    """
    cleaned = strip_code_fences(text)
    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise InferenceError(f"failed to parse model response as JSON: {e}") from e

    if not isinstance(data, dict):
        raise InferenceError("model response is not a JSON object")
    return data


def clamp_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(max(confidence, 0.0), 1.0)


def parse_tracking_reply(text: str) -> list[TrackingInfo]:
    """
    Parse a {"tracking_numbers": [...]} reply into TrackingInfo records.

    Entries without a number or carrier are skipped. Numbers are
    normalized, carriers folded to the known set, merchants normalized.

    Raises:
        InferenceError: If the reply is not parseable JSON
    """
    data = parse_json_reply(text)
    entries = data.get("tracking_numbers") or []
    if not isinstance(entries, list):
        raise InferenceError("tracking_numbers is not a list")

    results: list[TrackingInfo] = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue

        number = str(entry.get("number") or "").strip()
        carrier = str(entry.get("carrier") or "").strip().lower()
        if not number or not carrier:
            logger.debug("Skipping model entry without number or carrier")
            continue

        merchant = str(entry.get("merchant") or "").strip()
        results.append(
            TrackingInfo(
                number=normalize_tracking_number(number),
                carrier=normalize_carrier(carrier),
                confidence=clamp_confidence(entry.get("confidence")),
                source=TrackingSource.LLM,
                description=str(entry.get("description") or "").strip(),
                merchant=normalize_merchant_name(merchant) if merchant else "",
            )
        )

    return results
