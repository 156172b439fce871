"""
Confidence scoring for validated tracking candidates.

A candidate that passes carrier validation gets its base confidence
adjusted by an ordered set of rules. Each rule is a plain function of
(confidence, candidate, carrier) so it can be tested on its own; the
result is clamped to [0, 1] after every rule has run.
"""

import re
from dataclasses import dataclass
from typing import Callable

from shipmail.models.email import Carrier, TrackingCandidate

# Words that look like long identifiers but never are tracking numbers
COMMON_FALSE_POSITIVES = frozenset(
    {
        "information",
        "confirmation",
        "notification",
        "description",
        "application",
        "registration",
        "verification",
        "installation",
        "transaction",
        "subscription",
        "publication",
        "organization",
        "communication",
        "documentation",
        "administration",
        "recommendation",
        "congratulations",
        "specifications",
        "instructions",
        "requirements",
        "acknowledgment",
        "acknowledgement",
        "establishment",
        "development",
        "announcement",
        "arrangement",
        "appointment",
        "agreement",
        "management",
        "department",
        "government",
        "environment",
        "improvement",
        "achievement",
        "measurement",
        "assessment",
        "assignment",
        "attachment",
        "statement",
        "treatment",
        "equipment",
        "requirement",
        "movement",
        "moment",
        "comment",
        "content",
        "present",
        "current",
        "account",
        "amount",
        "payment",
        "element",
        "segment",
        "document",
        "instrument",
        "supplement",
        "complement",
    }
)

CONTACT_WORDS = ("email", "phone", "address", "website")

MIN_CANDIDATE_LENGTH = 8
EARLY_POSITION = 1000

_ALPHA_ONLY = re.compile(r"^[a-z]+$")


def is_obvious_false_positive(text: str) -> bool:
    """
    Return True for text that can never be a tracking number.

    Common words, purely alphabetic strings, anything shorter than eight
    characters, and strings that mention contact details are rejected.
    """
    lower = text.lower().strip()

    if lower in COMMON_FALSE_POSITIVES:
        return True
    if _ALPHA_ONLY.match(lower):
        return True
    if len(lower) < MIN_CANDIDATE_LENGTH:
        return True
    return any(word in lower for word in CONTACT_WORDS)


def has_digits(text: str) -> bool:
    return any(c.isdigit() for c in text)


def carrier_match(confidence: float, candidate: TrackingCandidate, carrier: Carrier) -> float:
    """Pattern already named the carrier that validated."""
    if candidate.carrier == carrier:
        return confidence + 0.2
    return confidence


def tracking_label(confidence: float, candidate: TrackingCandidate, carrier: Carrier) -> float:
    """Context mentions tracking."""
    if "tracking" in candidate.context.lower():
        return confidence + 0.1
    return confidence


def early_position(confidence: float, candidate: TrackingCandidate, carrier: Carrier) -> float:
    """Found in the first 1000 characters."""
    if candidate.position < EARLY_POSITION:
        return confidence + 0.1
    return confidence


def alphabetic_only(confidence: float, candidate: TrackingCandidate, carrier: Carrier) -> float:
    """Letters only."""
    if _ALPHA_ONLY.match(candidate.text.lower()):
        return confidence * 0.1
    return confidence


def false_positive(confidence: float, candidate: TrackingCandidate, carrier: Carrier) -> float:
    """Common word or contact detail."""
    if is_obvious_false_positive(candidate.text):
        return confidence * 0.01
    return confidence


def missing_digits(confidence: float, candidate: TrackingCandidate, carrier: Carrier) -> float:
    # Every real carrier format carries digits
    if carrier != Carrier.UNKNOWN and not has_digits(candidate.text):
        return confidence * 0.1
    return confidence


@dataclass(frozen=True)
class ScoringRule:
    name: str
    apply: Callable[[float, TrackingCandidate, Carrier], float]


SCORING_RULES: tuple[ScoringRule, ...] = (
    ScoringRule("carrier_match", carrier_match),
    ScoringRule("tracking_label", tracking_label),
    ScoringRule("early_position", early_position),
    ScoringRule("alphabetic_only", alphabetic_only),
    ScoringRule("false_positive", false_positive),
    ScoringRule("missing_digits", missing_digits),
)


def calculate_confidence(
    candidate: TrackingCandidate,
    carrier: Carrier,
    rules: tuple[ScoringRule, ...] = SCORING_RULES,
) -> float:
    """Apply the scoring rules in order, then clamp to [0, 1]."""
    confidence = candidate.confidence
    for rule in rules:
        confidence = rule.apply(confidence, candidate, carrier)
    return min(max(confidence, 0.0), 1.0)
