"""
Logging setup for command line entry points.

Library modules only create ``logging.getLogger(__name__)`` loggers; the
application decides how records are emitted.
"""

import logging
from pathlib import Path
from typing import Optional, Union

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(
    level: Union[int, str] = logging.INFO, log_file: Optional[Path] = None
) -> None:
    """
    Configure the root logger.

    Args:
        level: Logging level name ("DEBUG", "INFO", ...) or number.
        log_file: Optional file receiving the same records as the console.

    Raises:
        ValueError: If ``level`` is not a known level name.
    """
    if isinstance(level, str):
        numeric = logging.getLevelName(level.upper())
        if not isinstance(numeric, int):
            raise ValueError(f"Unknown log level: {level}")
        level = numeric

    handlers = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))

    logging.basicConfig(level=level, format=LOG_FORMAT, handlers=handlers, force=True)
