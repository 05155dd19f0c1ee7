# subocr_core/pipeline_components/log_manager.py
"""
Log management component.

Handles logger setup, file handlers, and log output routing.
"""

import logging
import os
import sys
from pathlib import Path

LOG_ENV_VAR = "SUBOCR_LOG"
DEFAULT_LEVEL = logging.WARNING


class LogManager:
    """Manages logging setup and cleanup for a run."""

    @staticmethod
    def resolve_level(verbosity: int = 0) -> int:
        """
        Pick the log level from -v flags and the SUBOCR_LOG environment variable.

        The more verbose of the two wins; the default is WARNING.
        """
        levels = [DEFAULT_LEVEL]

        env_level = os.environ.get(LOG_ENV_VAR, "").strip().upper()
        if env_level:
            value = logging.getLevelName(env_level)
            if isinstance(value, int):
                levels.append(value)

        if verbosity >= 2:
            levels.append(logging.DEBUG)
        elif verbosity == 1:
            levels.append(logging.INFO)

        return min(levels)

    @staticmethod
    def setup_logging(
        level: int = DEFAULT_LEVEL, log_file: Path | None = None
    ) -> list[logging.Handler]:
        """
        Sets up logging for the subocr_core package.

        Args:
            level: Level for the package logger
            log_file: Optional file that receives the same records

        Returns:
            The handlers that were added (needed for cleanup)
        """
        logger = logging.getLogger("subocr_core")
        logger.setLevel(level)

        # Remove any existing handlers
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)

        console = logging.StreamHandler(sys.stderr)
        console.setFormatter(logging.Formatter("%(levelname)s %(message)s"))
        handlers: list[logging.Handler] = [console]

        if log_file is not None:
            file_handler = logging.FileHandler(log_file, mode="w", encoding="utf-8")
            file_handler.setFormatter(
                logging.Formatter("%(asctime)s %(levelname)s [%(threadName)s] %(name)s: %(message)s")
            )
            handlers.append(file_handler)

        for handler in handlers:
            logger.addHandler(handler)
        logger.propagate = False

        return handlers

    @staticmethod
    def cleanup_logging(handlers: list[logging.Handler]):
        """
        Cleans up handler resources.

        Args:
            handlers: Handlers returned by setup_logging
        """
        logger = logging.getLogger("subocr_core")
        for handler in handlers:
            handler.close()
            logger.removeHandler(handler)
        logger.propagate = True
        logger.setLevel(logging.NOTSET)
