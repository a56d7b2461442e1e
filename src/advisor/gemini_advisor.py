"""Gemini-backed filter advisor.

Uploads the raster as JPEG together with a prompt that lists the available
presets and asks for a JSON reply of the form::

    {"filter": "...", "reason": "...", "documentType": "..."}

The reply is free text from a language model, so the first ``{...}`` block
is extracted and parsed. Unknown preset names are coerced to the default.
"""

import base64
import json
import logging
import os
import re
import urllib.error
import urllib.request
from typing import Any, Dict, Optional, Protocol, runtime_checkable

import cv2

from src.advisor.types import PLACEHOLDER_API_KEY, AdvisorConfig, FilterSuggestion
from src.common.exceptions import AdvisorError
from src.common.types import RasterSurface
from src.enhancement.presets import PRESETS

logger = logging.getLogger(__name__)

_JSON_BLOCK = re.compile(r"\{[\s\S]*\}")

ADVISOR_PROMPT = """Analyze this document image and recommend the best enhancement filter.

Available filters:
- grayscale: Convert to grayscale
- highContrast: High contrast for scanned docs
- blackAndWhite: Sharp black and white
- enhance: Sharpen and adjust
- auto: Automatic enhancement

Respond with ONLY a JSON object in this exact format:
{
  "filter": "filterName",
  "reason": "brief explanation",
  "documentType": "type of document"
}"""


@runtime_checkable
class FilterAdvisor(Protocol):
    """External oracle recommending an enhancement preset."""

    @property
    def is_configured(self) -> bool:
        ...

    def suggest(self, raster: RasterSurface) -> FilterSuggestion:
        """Return a suggestion or raise AdvisorError."""
        ...


def resolve_api_key(config: AdvisorConfig) -> Optional[str]:
    """API key from config, then from the environment; placeholders count as missing."""
    key = config.api_key or os.environ.get(config.api_key_env)
    if not key or key.strip() == "" or key == PLACEHOLDER_API_KEY:
        return None
    return key


def normalize_filter_name(name: Any, default: str) -> str:
    """Return ``name`` if it is a known preset, else ``default``."""
    if isinstance(name, str) and name in PRESETS:
        return name
    if name:
        logger.warning(f"Advisor suggested unknown filter {name!r}, using '{default}'")
    return default


def _reply_text(payload: Dict[str, Any]) -> Optional[str]:
    try:
        return payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None


def parse_advisor_reply(
    payload: Dict[str, Any], config: Optional[AdvisorConfig] = None
) -> FilterSuggestion:
    """
    Turn a ``generateContent`` response into a FilterSuggestion.

    Args:
        payload: Decoded JSON response body.
        config: Advisor configuration for defaults and confidences.

    Returns:
        Parsed suggestion. A response without candidate text yields the
        default filter with "AI analysis completed".

    Raises:
        AdvisorError: If the candidate text holds a malformed JSON block.

    Example:
        >>> reply = {"candidates": [{"content": {"parts": [{"text":
        ...     '{"filter": "blackAndWhite", "reason": "printed text"}'}]}}]}
        >>> parse_advisor_reply(reply).suggested_filter
        'blackAndWhite'
    """
    config = config or AdvisorConfig()
    text = _reply_text(payload)

    match = _JSON_BLOCK.search(text) if isinstance(text, str) else None
    if match is None:
        logger.info("Advisor reply carried no JSON recommendation")
        return FilterSuggestion(
            suggested_filter=config.default_filter,
            rationale="AI analysis completed",
            confidence=config.default_confidence,
        )

    try:
        analysis = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise AdvisorError(f"Malformed advisor JSON: {e}") from e

    if not isinstance(analysis, dict):
        raise AdvisorError(f"Expected JSON object from advisor, got {type(analysis).__name__}")

    document_type = analysis.get("documentType")
    return FilterSuggestion(
        suggested_filter=normalize_filter_name(analysis.get("filter"), config.default_filter),
        rationale=analysis.get("reason") or "AI-analyzed",
        confidence=config.suggestion_confidence,
        document_type=str(document_type) if document_type else None,
    )


class GeminiFilterAdvisor:
    """
    FilterAdvisor calling the Gemini ``generateContent`` REST endpoint.

    Args:
        config: Advisor configuration. Defaults to ``AdvisorConfig()``.

    Example:
        >>> advisor = GeminiFilterAdvisor(AdvisorConfig(api_key="..."))
        >>> advisor.suggest(surface).suggested_filter
        'highContrast'
    """

    def __init__(self, config: Optional[AdvisorConfig] = None):
        self.config = config or AdvisorConfig()
        self._api_key = resolve_api_key(self.config)

        logger.info(
            f"GeminiFilterAdvisor initialized: model={self.config.model}, "
            f"configured={self.is_configured}"
        )

    @property
    def is_configured(self) -> bool:
        return self._api_key is not None

    def _encode_image(self, raster: RasterSurface) -> str:
        ok, buffer = cv2.imencode(
            ".jpg", raster.to_bgr(), [cv2.IMWRITE_JPEG_QUALITY, self.config.jpeg_quality]
        )
        if not ok:
            raise AdvisorError("Failed to encode raster as JPEG")
        return base64.b64encode(buffer.tobytes()).decode("ascii")

    def _build_request(self, raster: RasterSurface) -> urllib.request.Request:
        body = {
            "contents": [
                {
                    "parts": [
                        {"text": ADVISOR_PROMPT},
                        {
                            "inline_data": {
                                "mime_type": "image/jpeg",
                                "data": self._encode_image(raster),
                            }
                        },
                    ]
                }
            ]
        }
        return urllib.request.Request(
            self.config.endpoint.format(model=self.config.model),
            data=json.dumps(body).encode("utf-8"),
            headers={
                "Content-Type": "application/json",
                "x-goog-api-key": self._api_key,
            },
            method="POST",
        )

    def suggest(self, raster: RasterSurface) -> FilterSuggestion:
        """
        Ask Gemini for a preset recommendation.

        Raises:
            AdvisorError: If unconfigured, on transport failure, timeout or an
                unparseable reply.
        """
        if not self.is_configured:
            raise AdvisorError(
                f"No API key configured (set {self.config.api_key_env})"
            )

        request = self._build_request(raster)
        logger.info(f"Requesting filter recommendation from {self.config.model}")

        try:
            with urllib.request.urlopen(
                request, timeout=self.config.timeout_seconds
            ) as response:
                payload = json.loads(response.read().decode("utf-8"))
        except urllib.error.HTTPError as e:
            raise AdvisorError(f"HTTP {e.code} from advisor") from e
        except (urllib.error.URLError, TimeoutError, OSError) as e:
            raise AdvisorError(f"Advisor request failed: {e}") from e
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise AdvisorError(f"Advisor returned invalid JSON: {e}") from e

        suggestion = parse_advisor_reply(payload, self.config)
        logger.info(
            f"Advisor suggested '{suggestion.suggested_filter}': {suggestion.rationale}"
        )
        return suggestion
