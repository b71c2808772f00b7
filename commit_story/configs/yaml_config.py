"""
Commit Story YAML Configuration

Loading and defaults for ~/.commit-story/config.yaml.
"""

from pathlib import Path

import yaml

from commit_story.configs.logging import get_logger
from commit_story.configs.paths import ensure_data_dir, get_data_path

logger = get_logger("configs.yaml")

# --- Default Config Template ---

DEFAULT_CONFIG_YAML = """\
# Commit Story Configuration
# Edit this file to customize how commit context is gathered.

# Context correlation and filtering
context:
  # Estimated token budget for diff + conversation (chars / 4)
  token_budget: 20000

  # Records with less text than this are noise (single-character acks)
  min_signal_chars: 2

  # Reduction tiers, applied in order while over budget
  diff_line_limit: 400      # Tier 1: keep the first N diff lines + file summary
  short_record_chars: 80    # Tier 2: drop records shorter than this
  tier3_keep: 25            # Tier 3: keep N records at each end of the window

  # Clock skew tolerance around the commit window, in seconds
  buffer_seconds: 60

  # Window length when the commit has no parent
  fallback_window_hours: 24

  # Parallel transcript file reads (1 = sequential)
  max_workers: 4

  # Redact e-mail addresses (including the commit author's)
  redact_emails: true
"""


def get_config_path() -> Path:
    """Get the path to config.yaml."""
    return get_data_path() / "config.yaml"


def load_yaml_config() -> dict:
    """
    Load configuration from ~/.commit-story/config.yaml.

    Returns:
        Configuration dictionary (empty if file doesn't exist or is invalid)
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        loaded = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        logger.warning(f"Ignoring invalid config file {config_path}: {e}")
        return {}

    if not isinstance(loaded, dict):
        return {}
    return loaded


def create_default_config() -> bool:
    """
    Create default config.yaml if it doesn't exist.

    Returns:
        True if file was created, False if it already exists
    """
    config_path = get_config_path()
    if config_path.exists():
        return False

    ensure_data_dir()
    config_path.write_text(DEFAULT_CONFIG_YAML)
    return True
