"""
Carrier format validation used by the extraction pipeline.
"""

from shipmail.carriers.validators import (
    CARRIER_VALIDATORS,
    CarrierValidator,
    get_validator,
    normalize_carrier,
    normalize_tracking_number,
)

__all__ = [
    "CARRIER_VALIDATORS",
    "CarrierValidator",
    "get_validator",
    "normalize_carrier",
    "normalize_tracking_number",
]
