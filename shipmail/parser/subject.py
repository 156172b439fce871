"""
Product description heuristics for email subjects.

Retailer subjects often carry the item name ("Shipped: "WOLFBOX MF50..."",
"Your iPhone Case has shipped"). These helpers pull it out when neither
the body patterns nor the inference step produced a description.
"""

import re

_QUOTED_ITEM = re.compile(
    r"^\s*(?:shipped|ordered|delivered)\s*:\s*([\"'“‘])(.+?)(?:\1|[”’]|$)",
    re.IGNORECASE,
)
_YOUR_ITEM = re.compile(r"\byour\s+(.+?)\s+(?:has|have)\s+shipped\b", re.IGNORECASE)
_TRUNCATION = re.compile(r"(?:\.\.\.|…|\s+and\s+\d*\s*more\b).*$", re.IGNORECASE)

GENERIC_ITEM_WORDS = frozenset(
    {"order", "package", "shipment", "item", "items", "parcel", "delivery"}
)

MIN_DESCRIPTION_LENGTH = 3


def extract_description_from_subject(subject: str) -> str:
    """
    Extract a product description from a shipping email subject.

    Returns an empty string when the subject only carries generic shipping
    words or order numbers.
    """
    if not subject:
        return ""

    match = _QUOTED_ITEM.search(subject)
    if match:
        description = _TRUNCATION.sub("", match.group(2)).strip()
        if len(description) > MIN_DESCRIPTION_LENGTH:
            return description

    match = _YOUR_ITEM.search(subject)
    if match:
        description = match.group(1).strip()
        words = description.lower().split()
        if words and not all(word in GENERIC_ITEM_WORDS for word in words):
            return description

    return ""


def combine_description_and_merchant(description: str, merchant: str) -> str:
    """Fold the merchant into the description ("X from Y")."""
    description = description.strip()
    merchant = merchant.strip()

    if description and merchant:
        return f"{description} from {merchant}"
    if merchant:
        return f"Package from {merchant}"
    return description
