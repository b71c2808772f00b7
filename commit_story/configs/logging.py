"""
Commit Story Logging

The engine usually runs inside a post-commit hook, so the terminal belongs
to git: only warnings reach stderr, everything else goes to a log file.

Environment:
- COMMIT_STORY_DEBUG: Record debug detail in the log file (default: false)
- COMMIT_STORY_LOG_FILE: Log file path (default: ~/.commit-story/debug.log)
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

from commit_story.configs.paths import get_data_path

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"


def _debug_from_env() -> bool:
    return os.environ.get("COMMIT_STORY_DEBUG", "").lower() in ("true", "1", "yes")


def _hook_log_path(log_file: Optional[str]) -> Path:
    path = Path(log_file or os.environ.get("COMMIT_STORY_LOG_FILE") or get_data_path() / "debug.log")
    path.parent.mkdir(parents=True, exist_ok=True)
    return path


def setup_logging(
    debug: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Route commit_story logging for a hook run.

    Args:
        debug: Keep debug records in the log file. Falls back to COMMIT_STORY_DEBUG.
        log_file: Where the hook run is recorded. Falls back to
                  COMMIT_STORY_LOG_FILE, then the data directory.

    Returns:
        The `commit_story` logger
    """
    if debug is None:
        debug = _debug_from_env()
    path = _hook_log_path(log_file)
    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    logger = logging.getLogger("commit_story")
    logger.setLevel(level)
    logger.handlers.clear()

    terminal = logging.StreamHandler(sys.stderr)
    terminal.setFormatter(formatter)
    terminal.setLevel(logging.WARNING)
    logger.addHandler(terminal)

    hook_log = logging.FileHandler(path)
    hook_log.setFormatter(formatter)
    hook_log.setLevel(level)
    logger.addHandler(hook_log)
    logger.debug(f"Hook run recorded in {path} (debug={debug})")

    return logger


def get_logger(component: str) -> logging.Logger:
    """Child logger under `commit_story`, e.g. get_logger("collectors.claude")."""
    return logging.getLogger(f"commit_story.{component}")
