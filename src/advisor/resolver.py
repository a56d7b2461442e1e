"""
Time-bounded, never-failing access to the filter advisor.

Whatever happens on the advisor side (missing key, HTTP error, garbage
reply, timeout) the caller receives a usable suggestion. Problems are
reported as a warning string instead of an exception.
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Optional

from src.advisor.gemini_advisor import FilterAdvisor, normalize_filter_name
from src.advisor.types import (
    ADVISOR_NOT_CONFIGURED_WARNING,
    ADVISOR_UNAVAILABLE_WARNING,
    AdvisorConfig,
    AdvisorOutcome,
    FilterSuggestion,
)
from src.common.types import RasterSurface

logger = logging.getLogger(__name__)


def default_suggestion(config: Optional[AdvisorConfig] = None) -> FilterSuggestion:
    """Deterministic local suggestion used whenever the advisor cannot answer."""
    config = config or AdvisorConfig()
    return FilterSuggestion(
        suggested_filter=config.default_filter,
        rationale=config.default_rationale,
        confidence=config.default_confidence,
        document_type=None,
        source="default",
    )


def resolve_filter(
    advisor: Optional[FilterAdvisor],
    raster: RasterSurface,
    config: Optional[AdvisorConfig] = None,
) -> AdvisorOutcome:
    """
    Consult the advisor with a timeout, degrading to the local default.

    The call runs on a worker thread; after ``timeout_seconds`` the pipeline
    moves on with the default and the pending call is abandoned.

    Args:
        advisor: Advisor to consult, or None when none is wired in.
        raster: Raster to analyze.
        config: Timeout and default settings.

    Returns:
        AdvisorOutcome whose ``warning`` is set when the default was used
        because of a configuration or runtime problem. Never raises.
    """
    config = config or AdvisorConfig()

    if advisor is None or not advisor.is_configured:
        logger.warning("Filter advisor not configured, using default filter")
        return AdvisorOutcome(
            suggestion=default_suggestion(config),
            warning=ADVISOR_NOT_CONFIGURED_WARNING,
        )

    executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="filter_advisor")
    future = executor.submit(advisor.suggest, raster)
    try:
        suggestion = future.result(timeout=config.timeout_seconds)
    except FuturesTimeoutError:
        future.cancel()
        reason = f"timed out after {config.timeout_seconds:g}s"
        logger.error(f"Filter advisor {reason}")
        return AdvisorOutcome(
            suggestion=default_suggestion(config),
            warning=ADVISOR_UNAVAILABLE_WARNING.format(reason=reason),
        )
    except Exception as e:
        logger.error(f"Filter advisor failed: {e}")
        return AdvisorOutcome(
            suggestion=default_suggestion(config),
            warning=ADVISOR_UNAVAILABLE_WARNING.format(reason=str(e) or type(e).__name__),
        )
    finally:
        executor.shutdown(wait=False, cancel_futures=True)

    checked = normalize_filter_name(suggestion.suggested_filter, config.default_filter)
    if checked != suggestion.suggested_filter:
        suggestion = FilterSuggestion(
            suggested_filter=checked,
            rationale=suggestion.rationale,
            confidence=suggestion.confidence,
            document_type=suggestion.document_type,
            source=suggestion.source,
        )

    return AdvisorOutcome(suggestion=suggestion, warning=None)
