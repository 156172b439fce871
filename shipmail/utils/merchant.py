"""
Merchant name normalization for model replies.

Models spell retailers many ways ("AMAZON", "amazon.com", "Best Buy Co.").
normalize_merchant_name folds them to one display name.
"""

import re
from typing import Iterator

_MERCHANT_ALIASES: dict[str, tuple[str, ...]] = {
    "Amazon": ("amazon", "amazon.com", "amzn"),
    "Amazon UK": ("amazon.co.uk",),
    "Amazon Canada": ("amazon.ca",),
    "Apple": ("apple", "apple.com", "apple store"),
    "B&H Photo": ("b&h", "bhphotovideo.com"),
    "Best Buy": ("best buy", "bestbuy", "bestbuy.com"),
    "Costco": ("costco", "costco.com"),
    "Dell": ("dell", "dell.com"),
    "eBay": ("ebay", "ebay.com"),
    "Etsy": ("etsy", "etsy.com"),
    "Home Depot": ("home depot", "the home depot", "homedepot.com"),
    "Newegg": ("newegg", "newegg.com"),
    "Nike": ("nike", "nike.com"),
    "Shopify": ("shopify", "shopify.com"),
    "Target": ("target", "target.com"),
    "Walmart": ("walmart", "walmart.com", "wal-mart"),
}

# Lowercase alias -> display name
KNOWN_MERCHANTS: dict[str, str] = {
    alias: display
    for display, aliases in _MERCHANT_ALIASES.items()
    for alias in aliases
}

ACRONYMS = frozenset({"dhl", "ups", "usps", "b&h"})

_HOST_PREFIX = re.compile(r"^(?:www|shop|store|orders?)\.")
_TLD = re.compile(r"\.(?:com|co\.uk|ca|de|net|org|io|store|shop)$")
_CORPORATE_SUFFIX = re.compile(r",?\s+(?:inc|llc|ltd|co|corp)\.?$", re.IGNORECASE)
_WORD_BREAK = re.compile(r"(\s+|-)")


def normalize_domain(domain: str | None) -> str | None:
    """
    Lower-case a domain and drop one leading www./shop./store./orders. label.

    Returns:
        Normalized domain (e.g., "amazon.com"), or None for empty input
    """
    if not domain:
        return None
    return _HOST_PREFIX.sub("", domain.strip().lower(), count=1)


def normalize_merchant_name(name: str, domain: str | None = None) -> str:
    """
    Fold a merchant name to its display form.

    The name, the optional sender domain and the name read as a domain are
    looked up in turn. Unknown names lose corporate suffixes and are
    title-cased unless they carry deliberate mixed casing.

    Examples:
        >>> normalize_merchant_name("AMAZON")
        'Amazon'
        >>> normalize_merchant_name("bestbuy.com")
        'Best Buy'
        >>> normalize_merchant_name("TechStore")
        'TechStore'
    """
    if not name:
        return name

    cleaned = name.strip()
    for key in _lookup_keys(cleaned.lower(), domain):
        if key in KNOWN_MERCHANTS:
            return KNOWN_MERCHANTS[key]

    cleaned = _CORPORATE_SUFFIX.sub("", cleaned).strip()
    return KNOWN_MERCHANTS.get(cleaned.lower()) or _display_case(cleaned)


def _lookup_keys(key: str, domain: str | None) -> Iterator[str]:
    yield key
    if domain:
        yield normalize_domain(domain)
    if "." in key:
        host = normalize_domain(key)
        yield host
        yield _TLD.sub("", host)


def _display_case(name: str) -> str:
    # Capitals past the first letter are deliberate (TechStore, eBay)
    if not name.isupper() and any(c.isupper() for c in name[1:]):
        return name
    return "".join(_display_word(part) for part in _WORD_BREAK.split(name))


def _display_word(word: str) -> str:
    if not word.strip() or word == "-":
        return word
    if word.lower() in ACRONYMS:
        return word.upper()
    if word.isupper() and len(word) <= 3:
        return word
    return word.capitalize()
