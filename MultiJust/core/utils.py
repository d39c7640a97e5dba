from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional


def setup_logging(
    log_type: str,
    project_label: str,
    log_dir: Optional[str] = None,
    *,
    level: int = logging.INFO,
) -> logging.Logger:
    """Sets up a logger for a command-line session.

    A stream handler is always attached; a file handler is added when
    `log_dir` is given.
    """
    logger = logging.getLogger(f"{log_type}_{project_label}_logger")
    logger.setLevel(level)

    # Prevent adding multiple handlers if the logger already exists
    if not logger.handlers:
        session_id = int(time.time())
        formatter = logging.Formatter(
            f"%(asctime)s - %(levelname)s - [Session: {session_id}]-[Project: {project_label}] - %(message)s"
        )

        stream_handler = logging.StreamHandler()
        stream_handler.setFormatter(formatter)
        logger.addHandler(stream_handler)

        if log_dir:
            log_dir_path = Path(log_dir)
            log_dir_path.mkdir(parents=True, exist_ok=True)
            file_handler = logging.FileHandler(log_dir_path / f"{log_type}_logs.log", mode="a")  # Append mode
            file_handler.setFormatter(formatter)
            logger.addHandler(file_handler)

    return logger
