"""
Environment configuration.

Values come from the process environment, with a local .env file loaded
first when present.
"""

import os

from dotenv import load_dotenv

from shipmail.models.extraction import ExtractorConfig, LLMConfig

load_dotenv()

DEFAULT_MODEL = os.getenv("SHIPMAIL_LLM_MODEL", "gemini-2.5-flash")
DEFAULT_LOCAL_ENDPOINT = "http://localhost:11434"

_TRUE_VALUES = ("1", "true", "yes", "on")


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None or value == "":
        return default
    return value.strip().lower() in _TRUE_VALUES


def load_extractor_config() -> ExtractorConfig:
    """Build the pipeline config from SHIPMAIL_* variables."""
    return ExtractorConfig(
        enable_llm=_env_bool("SHIPMAIL_LLM_ENABLED", False),
        min_confidence=float(os.getenv("SHIPMAIL_MIN_CONFIDENCE", "0.5")),
        max_candidates=int(os.getenv("SHIPMAIL_MAX_CANDIDATES", "10")),
        use_hybrid_validation=_env_bool("SHIPMAIL_HYBRID_VALIDATION", True),
        debug_mode=_env_bool("SHIPMAIL_DEBUG", False),
    )


def load_llm_config() -> LLMConfig:
    """Build the inference config from SHIPMAIL_LLM_* variables."""
    return LLMConfig(
        provider=os.getenv("SHIPMAIL_LLM_PROVIDER", "disabled"),
        model=os.getenv("SHIPMAIL_LLM_MODEL", DEFAULT_MODEL),
        api_key=os.getenv("SHIPMAIL_LLM_API_KEY") or os.getenv("GOOGLE_API_KEY", ""),
        endpoint=os.getenv("SHIPMAIL_LLM_ENDPOINT", DEFAULT_LOCAL_ENDPOINT),
        max_tokens=int(os.getenv("SHIPMAIL_LLM_MAX_TOKENS", "1000")),
        temperature=float(os.getenv("SHIPMAIL_LLM_TEMPERATURE", "0.1")),
        timeout=float(os.getenv("SHIPMAIL_LLM_TIMEOUT", "120")),
        enabled=_env_bool("SHIPMAIL_LLM_ENABLED", False),
    )
