from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field


class ExtractorConfig(BaseModel):
    """Per-run configuration for the extraction pipeline"""

    model_config = ConfigDict(frozen=True)

    enable_llm: bool = Field(default=False, description="Allow inference fallback")
    min_confidence: float = Field(
        default=0.5, ge=0.0, le=1.0, description="Minimum confidence to keep a result"
    )
    max_candidates: int = Field(
        default=10, ge=1, description="Maximum candidates considered per email"
    )
    use_hybrid_validation: bool = Field(
        default=True, description="Merge regex and inference results"
    )
    debug_mode: bool = Field(default=False, description="Verbose stage logging")


class LLMProvider(StrEnum):
    """Known inference providers"""

    DISABLED = "disabled"
    LOCAL = "local"
    OLLAMA = "ollama"
    GEMINI = "gemini"
    GOOGLE = "google"
    OPENAI = "openai"  # Not implemented, resolves to disabled
    ANTHROPIC = "anthropic"  # Not implemented, resolves to disabled


class LLMConfig(BaseModel):
    """Inference service configuration"""

    model_config = ConfigDict(frozen=True)

    provider: str = Field(
        default=LLMProvider.DISABLED,
        description="'local'/'ollama', 'gemini'/'google', or 'disabled'",
    )
    model: str = Field(default="", description="Model name")
    api_key: str = Field(default="", description="API key (cloud providers, authenticated endpoints)")
    endpoint: str = Field(default="", description="Base URL for local endpoints")
    max_tokens: int = Field(default=1000, ge=1, description="Maximum response tokens")
    temperature: float = Field(
        default=0.1, ge=0.0, le=2.0, description="Sampling temperature"
    )
    timeout: float = Field(default=120.0, gt=0, description="Request timeout (seconds)")
    enabled: bool = Field(default=False, description="Enable inference calls")


class DescriptionResult(BaseModel):
    """Product description extracted for a single tracking number"""

    description: str = Field(default="", description="Product description")
    merchant: str = Field(default="", description="Merchant/retailer name")
    confidence: float = Field(default=0.0, ge=0.0, le=1.0, description="Confidence")
