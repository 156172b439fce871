"""
Tracking number extraction pipeline.

Runs one email through preprocessing, carrier hint analysis, pattern
candidate generation, false-positive filtering and carrier validation,
optionally asks a language model when the regex pass looks weak, then
merges both sources into a ranked list of TrackingInfo records.

The pipeline holds no per-call state. The pattern catalog is shared and
read-only; the only shared mutable resource is the inference rate limiter.
"""

import logging
import re
import time
from typing import Mapping, Optional

from shipmail.carriers.validators import CARRIER_VALIDATORS, CarrierValidator
from shipmail.exceptions import PreprocessError
from shipmail.inference.base import (
    DisabledInferenceExtractor,
    InferenceExtractor,
    filter_by_confidence,
)
from shipmail.inference.factory import new_inference_extractor
from shipmail.models.email import (
    STANDARD_CARRIER_ORDER,
    Carrier,
    CarrierHint,
    EmailContent,
    TrackingCandidate,
    TrackingInfo,
    TrackingSource,
)
from shipmail.models.extraction import ExtractorConfig, LLMConfig
from shipmail.parser.hints import (
    identify_carriers,
    is_amazon_email_context,
    is_known_carrier_sender,
)
from shipmail.parser.patterns import PatternCatalog, get_pattern_catalog
from shipmail.parser.scoring import calculate_confidence, is_obvious_false_positive
from shipmail.parser.subject import (
    combine_description_and_merchant,
    extract_description_from_subject,
)
from shipmail.security.redaction import safe_error_message
from shipmail.utils.html import html_to_text

logger = logging.getLogger(__name__)

# Below this the regex pass is considered weak and inference is consulted
INFERENCE_CONFIDENCE_THRESHOLD = 0.7
COMPLEX_EMAIL_LENGTH = 10000

_WHITESPACE = re.compile(r"\s+")
_SEPARATORS = re.compile(r"[ \-_]")
_AMAZON_CODE = re.compile(r"^[A-Z0-9]+$")
_HAS_LETTER = re.compile(r"[A-Z]")

# Rejected as Amazon internal codes even though they are alphanumeric
_AMAZON_CODE_FALSE_POSITIVES = [
    re.compile(r"^(?:19|20)\d{2}$"),  # Years
    re.compile(r"^(?:mon|tue|wed|thu|fri|sat|sun)", re.IGNORECASE),
    re.compile(r"^(?:jan|feb|mar|apr|may|jun|jul|aug|sep|oct|nov|dec)", re.IGNORECASE),
    re.compile(r"^(?:http|www|email|phone|address)", re.IGNORECASE),
]

CandidateKey = tuple[str, Carrier]
ResultKey = tuple[str, Carrier]


def clean_tracking_number(text: str) -> str:
    return _SEPARATORS.sub("", text).upper()


def is_amazon_internal_code(text: str) -> bool:
    """
    Relaxed check for Amazon internal reference codes like BqPz3RXRS.

    6-20 alphanumeric characters with at least one letter, excluding
    years, weekday and month prefixes, and URL or contact words.
    """
    if not 6 <= len(text) <= 20:
        return False

    code = text.upper()
    if not _AMAZON_CODE.match(code) or not _HAS_LETTER.search(code):
        return False

    return not any(pattern.search(code) for pattern in _AMAZON_CODE_FALSE_POSITIVES)


def is_complex_email(content: EmailContent) -> bool:
    """HTML-dominated bodies, markup tables and very long emails."""
    if len(content.html_text) > len(content.plain_text) * 2:
        return True
    if "<table" in content.html_text.lower():
        return True
    return len(content.plain_text) > COMPLEX_EMAIL_LENGTH


class TrackingExtractor:
    """
    Extracts ranked tracking numbers from shipment notification emails.

    Args:
        config: Pipeline settings, defaults to ExtractorConfig()
        llm_config: Inference settings, used only when config.enable_llm
        carrier_validators: Carrier format checks keyed by carrier
        inference: Explicit inference extractor, overrides llm_config
        patterns: Pattern catalog, defaults to the shared instance
    """

    def __init__(
        self,
        config: Optional[ExtractorConfig] = None,
        llm_config: Optional[LLMConfig] = None,
        carrier_validators: Optional[Mapping[Carrier, CarrierValidator]] = None,
        inference: Optional[InferenceExtractor] = None,
        patterns: Optional[PatternCatalog] = None,
    ):
        self.config = config or ExtractorConfig()
        self.carrier_validators = (
            carrier_validators if carrier_validators is not None else CARRIER_VALIDATORS
        )
        self.patterns = patterns or get_pattern_catalog()

        if inference is None:
            if self.config.enable_llm and llm_config is not None:
                inference = new_inference_extractor(llm_config)
            else:
                inference = DisabledInferenceExtractor()
        self.inference = inference

    def extract(self, content: EmailContent) -> list[TrackingInfo]:
        """
        Extract tracking numbers from one email.

        Returns:
            Results at or above min_confidence, highest confidence first.
            An email without tracking numbers yields an empty list.

        Raises:
            PreprocessError: If the email cannot be preprocessed
        """
        start = time.monotonic()
        self._debug(
            "Starting extraction",
            sender=content.sender,
            subject=content.subject,
        )

        processed = self.preprocess(content)
        hints = identify_carriers(processed)
        candidates = self.extract_candidates(processed, hints)
        filtered = [c for c in candidates if not is_obvious_false_positive(c.text)]
        regex_results = self.validate_candidates(filtered, processed)

        self._debug(
            "Regex stage complete",
            hints=[(hint.carrier.value, hint.confidence) for hint in hints],
            candidates=len(candidates),
            filtered=len(filtered),
            validated=len(regex_results),
        )

        inference_results: list[TrackingInfo] = []
        if self.should_use_inference(regex_results, content, processed):
            inference_results = self._run_inference(processed)

        merged = self.merge_results(regex_results, inference_results, processed.subject)
        final = self.filter_and_sort(merged)

        self._debug(
            "Extraction complete",
            results=len(final),
            elapsed_ms=round((time.monotonic() - start) * 1000, 1),
        )
        return final

    def preprocess(self, content: EmailContent) -> EmailContent:
        """Normalize whitespace and derive plain text from HTML when absent."""
        try:
            plain_text = _WHITESPACE.sub(" ", content.plain_text).strip()
            if not plain_text and content.html_text:
                plain_text = html_to_text(content.html_text)

            return content.model_copy(
                update={
                    "sender": content.sender.strip().lower(),
                    "subject": content.subject.strip(),
                    "plain_text": plain_text,
                }
            )
        except Exception as e:
            raise PreprocessError(f"failed to preprocess email: {e}") from e

    def extract_candidates(
        self, content: EmailContent, hints: list[CarrierHint]
    ) -> list[TrackingCandidate]:
        """
        Run the hinted carriers' patterns plus the generic ones.

        Candidates are de-duplicated on (text, carrier) and capped at
        max_candidates, keeping the highest base confidence.
        """
        candidates: list[TrackingCandidate] = []
        for hint in hints:
            if hint.carrier != Carrier.UNKNOWN:
                candidates.extend(
                    self.patterns.extract_for_carrier(content.plain_text, hint.carrier)
                )
        candidates.extend(self.patterns.extract_generic(content.plain_text))

        unique: dict[CandidateKey, TrackingCandidate] = {}
        for candidate in candidates:
            unique.setdefault((candidate.text, candidate.carrier), candidate)

        deduped = list(unique.values())
        if len(deduped) > self.config.max_candidates:
            deduped.sort(key=lambda c: c.confidence, reverse=True)
            deduped = deduped[: self.config.max_candidates]
        return deduped

    def validation_order(self, candidate: TrackingCandidate) -> list[Carrier]:
        """
        Carriers to try for a candidate, suggested carrier first.

        Amazon stays last in the standard order.
        """
        if candidate.carrier == Carrier.UNKNOWN:
            return list(STANDARD_CARRIER_ORDER)

        order = [candidate.carrier]
        order.extend(c for c in STANDARD_CARRIER_ORDER if c != candidate.carrier)
        return order

    def validate_candidates(
        self, candidates: list[TrackingCandidate], content: EmailContent
    ) -> list[TrackingInfo]:
        """Accept each candidate under the first carrier that validates it."""
        amazon_context = is_amazon_email_context(content)
        results: list[TrackingInfo] = []

        for candidate in candidates:
            number = clean_tracking_number(candidate.text)

            for carrier in self.validation_order(candidate):
                if not self._validate_for_carrier(number, carrier, amazon_context):
                    continue

                confidence = calculate_confidence(candidate, carrier)
                if confidence < self.config.min_confidence:
                    continue

                results.append(
                    TrackingInfo(
                        number=number,
                        carrier=carrier,
                        confidence=confidence,
                        source=TrackingSource.REGEX,
                        context=candidate.context,
                    )
                )
                break

        return results

    def should_use_inference(
        self,
        regex_results: list[TrackingInfo],
        original: EmailContent,
        processed: EmailContent,
    ) -> bool:
        """
        Decide whether to consult the language model.

        Only when enabled, and then when the regex pass found nothing, found
        only weak results, the email is complex or the sender is not a
        known carrier.
        """
        if not self.config.enable_llm or not self.inference.is_enabled():
            return False
        if not regex_results:
            return True
        if max(r.confidence for r in regex_results) < INFERENCE_CONFIDENCE_THRESHOLD:
            return True
        if is_complex_email(original):
            return True
        return not is_known_carrier_sender(processed.sender)

    def merge_results(
        self,
        regex_results: list[TrackingInfo],
        inference_results: list[TrackingInfo],
        subject: str = "",
    ) -> list[TrackingInfo]:
        """
        Union both sources on (number, carrier).

        Agreement marks the record hybrid with the higher confidence. The
        model's description replaces the regex one when the regex record has
        none or the model was more confident. Records still missing a
        description fall back to the subject line. With hybrid validation
        off, the regex record wins a collision unchanged.
        """
        merged: dict[ResultKey, TrackingInfo] = {}

        for result in regex_results:
            key = (result.number, result.carrier)
            existing = merged.get(key)
            if existing is None or result.confidence > existing.confidence:
                merged[key] = result

        for result in inference_results:
            key = (result.number, result.carrier)
            description = combine_description_and_merchant(
                result.description, result.merchant
            )
            existing = merged.get(key)

            if existing is None:
                merged[key] = result.model_copy(update={"description": description})
                continue
            if not self.config.use_hybrid_validation:
                continue

            update: dict = {
                "confidence": max(existing.confidence, result.confidence),
                "source": TrackingSource.HYBRID,
            }
            if description and (
                not existing.description or result.confidence > existing.confidence
            ):
                update["description"] = description
            if result.merchant and not existing.merchant:
                update["merchant"] = result.merchant
            merged[key] = existing.model_copy(update=update)

        subject_description = ""
        if any(not r.description for r in merged.values()):
            subject_description = extract_description_from_subject(subject)

        results = []
        for result in merged.values():
            if not result.description and subject_description:
                result = result.model_copy(update={"description": subject_description})
            results.append(result)
        return results

    def filter_and_sort(self, results: list[TrackingInfo]) -> list[TrackingInfo]:
        kept = [r for r in results if r.confidence >= self.config.min_confidence]
        kept.sort(key=lambda r: r.confidence, reverse=True)
        return kept

    def _validate_for_carrier(
        self, number: str, carrier: Carrier, amazon_context: bool
    ) -> bool:
        validator = self.carrier_validators.get(carrier)
        if validator is not None and validator(number):
            return True

        if carrier == Carrier.AMAZON and amazon_context:
            return is_amazon_internal_code(number)
        return False

    def _run_inference(self, content: EmailContent) -> list[TrackingInfo]:
        """Call the model; failures are logged and yield no results."""
        try:
            results = self.inference.extract(content)
        except Exception as e:
            logger.warning(
                safe_error_message("Inference extraction", e),
                extra={"json_fields": {"error_type": type(e).__name__}},
            )
            return []

        return filter_by_confidence(results, INFERENCE_CONFIDENCE_THRESHOLD)

    def _debug(self, message: str, **fields) -> None:
        level = logging.INFO if self.config.debug_mode else logging.DEBUG
        logger.log(level, message, extra={"json_fields": fields})


def extract_tracking(
    content: EmailContent,
    config: Optional[ExtractorConfig] = None,
    llm_config: Optional[LLMConfig] = None,
) -> list[TrackingInfo]:
    """Extract tracking numbers from one email with a fresh pipeline."""
    return TrackingExtractor(config=config, llm_config=llm_config).extract(content)
