"""
Commit Story Runtime Configuration

The explicit configuration object handed to the context engine, and the
merging logic that builds it from defaults, YAML config and environment.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Optional

from commit_story.configs.constants import (
    DEFAULT_BUFFER_SECONDS,
    DEFAULT_DIFF_LINE_LIMIT,
    DEFAULT_FALLBACK_WINDOW_HOURS,
    DEFAULT_MAX_WORKERS,
    DEFAULT_MIN_SIGNAL_CHARS,
    DEFAULT_SHORT_RECORD_CHARS,
    DEFAULT_TIER3_KEEP,
    DEFAULT_TOKEN_BUDGET,
)
from commit_story.configs.ignore_patterns import load_ignore_patterns
from commit_story.configs.logging import get_logger
from commit_story.configs.yaml_config import load_yaml_config
from commit_story.exceptions import ConfigurationError

logger = get_logger("configs.runtime")


@dataclass(frozen=True)
class FilterConfig:
    """Configuration for correlation and filtering."""

    token_budget: int = DEFAULT_TOKEN_BUDGET
    """Estimated token budget for diff + message + conversation."""

    exclude_patterns: tuple[str, ...] = field(default_factory=tuple)
    """Gitignore-style patterns; matching diff sections and records are dropped."""

    min_signal_chars: int = DEFAULT_MIN_SIGNAL_CHARS
    """Records whose trimmed text is shorter than this are noise."""

    diff_line_limit: int = DEFAULT_DIFF_LINE_LIMIT
    """Tier 1 keeps this many diff lines."""

    short_record_chars: int = DEFAULT_SHORT_RECORD_CHARS
    """Tier 2 drops records shorter than this."""

    tier3_keep: int = DEFAULT_TIER3_KEEP
    """Tier 3 keeps this many records at each end of the window."""

    buffer_seconds: int = DEFAULT_BUFFER_SECONDS
    """Padding on both window edges for clock skew."""

    fallback_window_hours: int = DEFAULT_FALLBACK_WINDOW_HOURS
    """Window length for a commit without a parent."""

    max_workers: int = DEFAULT_MAX_WORKERS
    """Parallel transcript reads; 1 reads sequentially."""

    redact_emails: bool = True
    """Redact e-mail addresses, including the commit author's."""

    def __post_init__(self):
        if self.token_budget <= 0:
            raise ConfigurationError("token_budget must be positive", {"token_budget": self.token_budget})
        if self.max_workers < 1:
            raise ConfigurationError("max_workers must be at least 1", {"max_workers": self.max_workers})
        for name in ("min_signal_chars", "diff_line_limit", "short_record_chars", "tier3_keep", "buffer_seconds"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must not be negative", {name: getattr(self, name)})

    @classmethod
    def from_dict(cls, values: dict[str, Any]) -> "FilterConfig":
        """
        Create FilterConfig from a dictionary, ignoring unknown keys.

        Args:
            values: Dictionary with configuration values

        Returns:
            FilterConfig instance
        """
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in values.items() if k in known}
        if "exclude_patterns" in kwargs:
            kwargs["exclude_patterns"] = tuple(kwargs["exclude_patterns"] or ())
        try:
            return cls(**kwargs)
        except TypeError as e:
            raise ConfigurationError(f"Invalid context configuration: {e}") from e


def _int_from_env(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        logger.warning(f"Ignoring non-integer {name}={raw!r}")
        return None


def load_filter_config(repo_path: Optional[str] = None) -> FilterConfig:
    """
    Build the filter configuration merged from defaults, YAML, and environment.

    Priority (highest wins):
    1. Environment variables (COMMIT_STORY_TOKEN_BUDGET, COMMIT_STORY_BUFFER_SECONDS)
    2. `context:` section of config.yaml
    3. FilterConfig defaults

    Exclusion patterns come from <repo_path>/.commit-story-ignore.

    Args:
        repo_path: Repository whose ignore file should be read

    Returns:
        FilterConfig ready to pass to the engine
    """
    values: dict[str, Any] = {}

    yaml_config = load_yaml_config()
    context_section = yaml_config.get("context") or {}
    if isinstance(context_section, dict):
        values.update(context_section)

    budget = _int_from_env("COMMIT_STORY_TOKEN_BUDGET")
    if budget is not None:
        values["token_budget"] = budget
    buffer_seconds = _int_from_env("COMMIT_STORY_BUFFER_SECONDS")
    if buffer_seconds is not None:
        values["buffer_seconds"] = buffer_seconds

    if repo_path:
        values["exclude_patterns"] = load_ignore_patterns(repo_path)

    return FilterConfig.from_dict(values)
