"""
Named enhancement presets.

A preset is a fixed, ordered sequence of pixel operations. Presets are
static configuration; nothing builds or modifies them at runtime.
"""

from dataclasses import dataclass
from types import MappingProxyType
from typing import List, Mapping, Tuple

from src.common.exceptions import UnknownFilterError
from src.enhancement.filters import OPERATIONS

DEFAULT_FILTER = "auto"


@dataclass(frozen=True)
class FilterStep:
    """One parametrized operation, e.g. FilterStep("contrast", (1.5,))."""

    operation: str
    args: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        if self.operation not in OPERATIONS:
            raise ValueError(
                f"Unknown operation '{self.operation}'. Available: {list(OPERATIONS)}"
            )


@dataclass(frozen=True)
class FilterPreset:
    """Named, ordered sequence of filter steps.

    Attributes:
        name: Identifier used by callers and the filter advisor
        label: Human-readable name for presentation layers
        description: One line summary of the effect
        steps: Operations applied in order; empty means identity
    """

    name: str
    label: str
    description: str
    steps: Tuple[FilterStep, ...]


PRESETS: Mapping[str, FilterPreset] = MappingProxyType(
    {
        "auto": FilterPreset(
            name="auto",
            label="Auto Enhance (Recommended)",
            description="Grayscale + High Contrast",
            steps=(
                FilterStep("grayscale"),
                FilterStep("contrast", (1.4,)),
                FilterStep("brightness", (15,)),
            ),
        ),
        "grayscale": FilterPreset(
            name="grayscale",
            label="Grayscale",
            description="Convert to grayscale",
            steps=(FilterStep("grayscale"),),
        ),
        "highContrast": FilterPreset(
            name="highContrast",
            label="High Contrast",
            description="Best for scanned docs",
            steps=(
                FilterStep("grayscale"),
                FilterStep("contrast", (1.5,)),
                FilterStep("brightness", (10,)),
            ),
        ),
        "blackAndWhite": FilterPreset(
            name="blackAndWhite",
            label="Black & White",
            description="Sharp B&W threshold",
            steps=(FilterStep("threshold", (128,)),),
        ),
        "enhance": FilterPreset(
            name="enhance",
            label="Smart Enhance",
            description="Sharpen + Adjust",
            steps=(
                FilterStep("sharpen"),
                FilterStep("contrast", (1.2,)),
                FilterStep("brightness", (5,)),
            ),
        ),
        "original": FilterPreset(
            name="original",
            label="Original",
            description="No enhancement",
            steps=(),
        ),
    }
)


def get_preset(name: str) -> FilterPreset:
    """
    Look up a preset by name.

    Raises:
        UnknownFilterError: If no preset has this name.
    """
    try:
        return PRESETS[name]
    except KeyError:
        raise UnknownFilterError(
            f"Unknown filter '{name}'. Available: {list(PRESETS)}"
        ) from None


def list_presets() -> List[FilterPreset]:
    """All presets in presentation order (default first)."""
    return list(PRESETS.values())
