"""
Centralized logger for pairguard components.

Loggers are plain ``logging`` loggers under the ``pairguard`` namespace.
Nothing is printed unless a caller asks for console or file output, so
importing the library stays silent.

Never pass passwords, scalars, shared secrets or keys to these loggers.
"""

import logging
import sys
from pathlib import Path
from typing import Dict, Optional


LOG_FORMAT = "[%(asctime)s] [%(name)s] [%(levelname)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
ROOT_LOGGER_NAME = "pairguard"

logging.getLogger(ROOT_LOGGER_NAME).addHandler(logging.NullHandler())


class PairGuardLogger:
    """
    Cache of configured loggers, one per component name.
    """

    _loggers: Dict[str, logging.Logger] = {}

    @staticmethod
    def get_logger(
        name: str,
        level: int = logging.INFO,
        console_output: bool = False,
        log_dir: Optional[str] = None,
    ) -> logging.Logger:
        """
        Get or create a configured logger.

        Args:
            name: Component name (e.g. "secret_deriver"); it is placed
                  under the ``pairguard`` namespace
            level: Minimum log level
            console_output: Also write to stdout
            log_dir: Directory for a ``<name>.log`` file (optional)

        Returns:
            Configured logger
        """
        if not name.startswith(ROOT_LOGGER_NAME):
            name = f"{ROOT_LOGGER_NAME}.{name}"

        if name in PairGuardLogger._loggers:
            return PairGuardLogger._loggers[name]

        logger = logging.getLogger(name)
        logger.setLevel(level)

        formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

        if console_output:
            console_handler = logging.StreamHandler(sys.stdout)
            console_handler.setLevel(level)
            console_handler.setFormatter(formatter)
            logger.addHandler(console_handler)

        if log_dir:
            log_path = Path(log_dir)
            log_path.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(
                log_path / f"{name}.log", encoding="utf-8"
            )
            file_handler.setLevel(level)
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

        PairGuardLogger._loggers[name] = logger
        return logger

