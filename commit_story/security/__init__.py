"""
Commit Story Security

Secret detection and scrubbing utilities.
"""

from commit_story.security.scrubber import SECRET_PATTERNS, scrub_secrets, scrub_secrets_with_count

__all__ = [
    "SECRET_PATTERNS",
    "scrub_secrets",
    "scrub_secrets_with_count",
]
