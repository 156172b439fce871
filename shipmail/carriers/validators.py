"""
Carrier tracking number format validation.

Each carrier exposes a boolean format check over a normalized tracking
number. The extractor only depends on this contract; carrier APIs, check
digits and tracking lookups live outside this package.
"""

import re
from typing import Callable, Mapping, Optional

from shipmail.models.email import Carrier

CarrierValidator = Callable[[str], bool]

_SEPARATORS = re.compile(r"[\s\-_]")

_UPS_PATTERN = re.compile(r"^1Z[A-Z0-9]{6}\d{2}\d{7}$")

_USPS_PATTERNS = [
    re.compile(r"^9[1-4]\d{20}$"),  # Priority Mail, Certified, Signature Confirmation
    re.compile(r"^82\d{8}$"),  # Priority Mail Express International
    re.compile(r"^7\d{19}$"),  # Certified Mail
    re.compile(r"^[A-Z]{2}\d{9}US$"),  # International (EA, LC, RA, ...)
]

_FEDEX_LENGTHS = {12, 14, 15, 18, 20, 22}

_AMAZON_LOGISTICS = re.compile(r"^TBA\d{12}$", re.IGNORECASE)
_AMAZON_ORDER = re.compile(r"^\d{17}$")


def normalize_tracking_number(number: str) -> str:
    """Strip spaces, hyphens and underscores and upper-case the result."""
    return _SEPARATORS.sub("", number).upper()


def normalize_carrier(carrier_str: str | None) -> Carrier:
    """Normalize a free-form carrier string to the Carrier enum"""
    if not carrier_str:
        return Carrier.UNKNOWN

    carrier_lower = carrier_str.lower()
    if "fedex" in carrier_lower:
        return Carrier.FEDEX
    elif "usps" in carrier_lower or "postal" in carrier_lower:
        return Carrier.USPS
    elif "ups" in carrier_lower:
        return Carrier.UPS
    elif "dhl" in carrier_lower:
        return Carrier.DHL
    elif "amazon" in carrier_lower or "amzl" in carrier_lower:
        return Carrier.AMAZON
    else:
        return Carrier.UNKNOWN


def validate_ups(number: str) -> bool:
    """1Z + 6 alphanumeric + 2 digits + 7 digits, e.g. 1Z999AA1234567890"""
    if not number:
        return False
    return bool(_UPS_PATTERN.match(number.replace(" ", "").upper()))


def validate_usps(number: str) -> bool:
    if not number:
        return False
    cleaned = number.replace(" ", "").upper()
    return any(pattern.match(cleaned) for pattern in _USPS_PATTERNS)


def validate_fedex(number: str) -> bool:
    """FedEx numbers are all digits with one of a fixed set of lengths."""
    if not number:
        return False
    cleaned = number.replace(" ", "")
    return cleaned.isascii() and cleaned.isdigit() and len(cleaned) in _FEDEX_LENGTHS


def validate_dhl(number: str) -> bool:
    """10-20 alphanumeric characters with at least one digit."""
    if not number:
        return False
    cleaned = number.replace(" ", "")
    if not re.fullmatch(r"[A-Za-z0-9]{10,20}", cleaned):
        return False
    # Digits keep words like INFORMATION from validating
    return any(c.isdigit() for c in cleaned)


def validate_amazon(number: str) -> bool:
    """Amazon Logistics (TBA + 12 digits) or a 3-7-7 order number."""
    if not number:
        return False
    cleaned = number.replace(" ", "").replace("-", "")
    return bool(_AMAZON_ORDER.match(cleaned) or _AMAZON_LOGISTICS.match(cleaned))


CARRIER_VALIDATORS: Mapping[Carrier, CarrierValidator] = {
    Carrier.UPS: validate_ups,
    Carrier.USPS: validate_usps,
    Carrier.FEDEX: validate_fedex,
    Carrier.DHL: validate_dhl,
    Carrier.AMAZON: validate_amazon,
}


def get_validator(carrier: str) -> Optional[CarrierValidator]:
    """Return the format validator for a carrier id, or None if unknown."""
    try:
        return CARRIER_VALIDATORS.get(Carrier(carrier))
    except ValueError:
        return None
