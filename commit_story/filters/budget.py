"""
Token Budget

Length-based token estimates and the reduction tiers applied, in order,
while a context is over budget. Every tier only removes content.
"""

from typing import Iterable

from commit_story.models import TranscriptRecord, estimate_tokens

TIER_NONE = 0
TIER_TRUNCATE_DIFF = 1
TIER_DROP_SHORT = 2
TIER_CAP_RECORDS = 3

MAX_TIER = TIER_CAP_RECORDS


def estimate_context_tokens(message: str, diff: str, records: Iterable[TranscriptRecord]) -> int:
    """Estimated tokens for the commit message, the diff and every record's text."""
    return estimate_tokens(message) + estimate_tokens(diff) + sum(r.approximate_tokens for r in records)


def drop_short_records(records: list[TranscriptRecord], min_chars: int) -> list[TranscriptRecord]:
    """Tier 2: drop mechanical confirmations and short acknowledgements."""
    return [r for r in records if len(r.text.strip()) >= min_chars]


def cap_records(records: list[TranscriptRecord], keep: int) -> list[TranscriptRecord]:
    """
    Tier 3: keep the first and the last `keep` records of the window.

    The head shows how the work started; the tail is what immediately
    preceded the commit. Chronological order is preserved.
    """
    if len(records) <= keep * 2:
        return list(records)
    if keep == 0:
        return []
    return list(records[:keep]) + list(records[-keep:])
