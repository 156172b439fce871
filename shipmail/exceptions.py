"""
Exception hierarchy for the extraction pipeline.

Structural input problems, safety-gate rejections and inference transport
failures are kept as separate types so callers can tell "malformed" from
"adversarial" from "the model endpoint is down".
"""


class ShipmailError(Exception):
    """Base class for all pipeline errors."""


class InputValidationError(ShipmailError):
    """Raw input failed a structural check (size, encoding, length)."""


class RequestTooLargeError(InputValidationError):
    """Combined request size exceeds the allowed ceiling."""


class ContentSafetyError(ShipmailError):
    """Content was rejected by the injection/safety gate."""


class InferenceError(ShipmailError):
    """Inference call failed (transport, status, or unparseable reply)."""


class RateLimitExceeded(ShipmailError):
    """Waiting for a rate limiter slot was cancelled or timed out."""


class PreprocessError(ShipmailError):
    """Email content could not be preprocessed."""
