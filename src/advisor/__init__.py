"""
Optional AI filter advisor.

Recommends an enhancement preset for a raster. Always degrades to the
local default ("auto") when unconfigured, failing or slow.
"""

from src.advisor.gemini_advisor import (
    FilterAdvisor,
    GeminiFilterAdvisor,
    normalize_filter_name,
    parse_advisor_reply,
    resolve_api_key,
)
from src.advisor.resolver import default_suggestion, resolve_filter
from src.advisor.types import (
    ADVISOR_NOT_CONFIGURED_WARNING,
    ADVISOR_UNAVAILABLE_WARNING,
    AdvisorConfig,
    AdvisorOutcome,
    FilterSuggestion,
)

__all__ = [
    "FilterAdvisor",
    "GeminiFilterAdvisor",
    "parse_advisor_reply",
    "normalize_filter_name",
    "resolve_api_key",
    "resolve_filter",
    "default_suggestion",
    "AdvisorConfig",
    "AdvisorOutcome",
    "FilterSuggestion",
    "ADVISOR_NOT_CONFIGURED_WARNING",
    "ADVISOR_UNAVAILABLE_WARNING",
]
