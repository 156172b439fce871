"""
API key redaction for logs and error messages.
"""

import re

from shipmail.models.extraction import LLMConfig

_BEARER = re.compile(r"(?i)(bearer\s+)([A-Za-z0-9._\-]+)")
_API_KEY_PARAM = re.compile(r"(?i)(api[_-]?key\s*[=:]\s*[\"']?)([A-Za-z0-9._\-]+)")
_AUTHORIZATION = re.compile(r"(?i)(authorization\s*[=:]\s*[\"']?)([A-Za-z0-9._\-]+)")
_LONG_TOKEN = re.compile(r"\b[A-Za-z0-9_\-]{32,}\b")


def mask_key(key: str) -> str:
    """
    Mask all but the ends of a secret.

    Keys of 8 characters or fewer are fully masked. Longer keys keep 4
    characters at each end, or 2 when shorter than 12.
    """
    if not key:
        return ""
    if len(key) <= 8:
        return "*" * len(key)

    visible = 2 if len(key) < 12 else 4
    return key[:visible] + "*" * (len(key) - 2 * visible) + key[-visible:]


def redact_api_keys(text: str) -> str:
    if not text:
        return text

    def _mask_value(match: re.Match[str]) -> str:
        return match.group(1) + mask_key(match.group(2))

    text = _BEARER.sub(_mask_value, text)
    text = _API_KEY_PARAM.sub(_mask_value, text)
    text = _AUTHORIZATION.sub(_mask_value, text)
    return _LONG_TOKEN.sub(lambda match: mask_key(match.group(0)), text)


def redact_config(config: LLMConfig) -> LLMConfig:
    """Copy of the config that is safe to log."""
    return config.model_copy(update={"api_key": mask_key(config.api_key)})


def safe_error_message(operation: str, exc: BaseException) -> str:
    return f"{operation} failed: {redact_api_keys(str(exc))}"
