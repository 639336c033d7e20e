"""
Logging setup.
"""

from __future__ import annotations

import logging
import os

# Third-party loggers that flood INFO during model load and decode
NOISY_LOGGERS = ("ultralytics", "matplotlib", "PIL")


def setup_logging(log_path: str, log_level: str = "INFO") -> None:
    """
    Configure the root logger with a file and a console handler.

    Calling it again replaces the handlers from the previous call, so tests
    and repeated exports do not stack duplicate output.
    """
    level = logging.getLevelName(log_level.upper())
    if not isinstance(level, int):
        raise ValueError(f"Unknown log level: {log_level}")

    log_dir = os.path.dirname(log_path)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir)

    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[
            logging.FileHandler(log_path),
            logging.StreamHandler(),
        ],
        force=True,
    )

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
