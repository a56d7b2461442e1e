"""Configuration loader with Pydantic validation for the scan pipeline.

Every tunable of every stage lives in one YAML file, one section per stage.
Each section is validated by the config model owned by that stage.
"""

import logging
from pathlib import Path

from pydantic import BaseModel, Field

from src.advisor.types import AdvisorConfig
from src.detection.types import DetectionConfig
from src.enhancement.types import EnhancementConfig
from src.geometry.types import ScoringConfig
from src.pipeline.types import OrchestrationConfig
from src.rectification.types import RectificationConfig
from src.utils.io import load_yaml

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class PipelineConfig(BaseModel):
    """Complete scan pipeline configuration.

    Attributes:
        detection: Edge/contour detection settings
        scoring: Confidence penalty constants
        rectification: Perspective warp settings
        enhancement: Filter bank settings
        advisor: Optional filter advisor settings
        orchestration: Stage sequencing and warning policy
    """

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    rectification: RectificationConfig = Field(default_factory=RectificationConfig)
    enhancement: EnhancementConfig = Field(default_factory=EnhancementConfig)
    advisor: AdvisorConfig = Field(default_factory=AdvisorConfig)
    orchestration: OrchestrationConfig = Field(default_factory=OrchestrationConfig)


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> PipelineConfig:
    """Load and validate configuration from YAML file.

    Missing sections or keys take their model defaults.

    Args:
        config_path: Path to YAML configuration file

    Returns:
        Validated PipelineConfig object with all settings

    Raises:
        FileNotFoundError: If config file does not exist
        ValueError: If the file does not hold a mapping
        yaml.YAMLError: If YAML parsing fails
        pydantic.ValidationError: If configuration validation fails

    Example:
        >>> config = load_config(Path("src/pipeline/config.yaml"))
        >>> print(config.detection.canny_low, config.detection.canny_high)
        75.0 200.0
    """
    config_path = Path(config_path)
    logger.debug(f"Loading pipeline config from {config_path}")

    config_dict = load_yaml(config_path)

    config = PipelineConfig(**config_dict)
    logger.info(f"Loaded pipeline configuration from {config_path}")
    return config


def get_default_config() -> PipelineConfig:
    """Get default configuration from bundled config.yaml file.

    Returns:
        PipelineConfig loaded from src/pipeline/config.yaml, or the model
        defaults when the file is missing
    """
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    else:
        # Fallback to hardcoded defaults if config file is missing
        logger.warning(f"{DEFAULT_CONFIG_PATH} not found, using built-in defaults")
        return PipelineConfig()
