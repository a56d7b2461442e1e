"""Data types for the filter advisor.

The advisor is an optional external oracle that recommends an enhancement
preset. These types describe its configuration, its suggestion and the
outcome of consulting it (suggestion plus an optional warning).
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field, field_validator

from src.enhancement.presets import DEFAULT_FILTER, PRESETS

# API keys equal to this value are treated as missing
PLACEHOLDER_API_KEY = "your_gemini_api_key_here"

ADVISOR_NOT_CONFIGURED_WARNING = (
    "Filter advisor not configured. Using automatic enhancement."
)
ADVISOR_UNAVAILABLE_WARNING = (
    "Filter advisor unavailable ({reason}). Using automatic enhancement."
)


class AdvisorConfig(BaseModel):
    """Filter advisor configuration.

    Attributes:
        enabled: Consult the advisor during pipeline runs
        api_key: Gemini API key; when unset ``api_key_env`` is read
        api_key_env: Environment variable holding the API key
        model: Gemini model name
        endpoint: URL template with a ``{model}`` placeholder
        timeout_seconds: Upper bound for one advisor call
        jpeg_quality: JPEG quality of the uploaded image (1-100)
        default_filter: Preset used whenever the advisor cannot answer
        default_confidence: Confidence of the local default suggestion
        default_rationale: Rationale of the local default suggestion
        suggestion_confidence: Confidence assigned to parsed advisor replies
    """

    enabled: bool = False
    api_key: Optional[str] = None
    api_key_env: str = "GEMINI_API_KEY"
    model: str = "gemini-1.5-flash"
    endpoint: str = (
        "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"
    )
    timeout_seconds: float = Field(default=30.0, gt=0.0)
    jpeg_quality: int = Field(default=90, ge=1, le=100)
    default_filter: str = DEFAULT_FILTER
    default_confidence: float = Field(default=0.85, ge=0.0, le=1.0)
    default_rationale: str = "automatic enhancement"
    suggestion_confidence: float = Field(default=0.95, ge=0.0, le=1.0)

    @field_validator("default_filter")
    @classmethod
    def _check_filter(cls, v: str) -> str:
        if v not in PRESETS:
            raise ValueError(f"Unknown filter '{v}'. Available: {list(PRESETS)}")
        return v


@dataclass(frozen=True)
class FilterSuggestion:
    """Recommended preset with its free-text rationale.

    Attributes:
        suggested_filter: One of the preset names.
        rationale: Explanation returned by the advisor, or the default text.
        confidence: Advisor confidence (not a measured quality).
        document_type: Kind of document if the advisor named one.
        source: "advisor" for remote replies, "default" for the local fallback.
    """

    suggested_filter: str
    rationale: str
    confidence: float
    document_type: Optional[str] = None
    source: str = "advisor"

    @property
    def is_default(self) -> bool:
        return self.source == "default"


@dataclass(frozen=True)
class AdvisorOutcome:
    """Suggestion actually used plus the warning to surface, if any."""

    suggestion: FilterSuggestion
    warning: Optional[str] = None
