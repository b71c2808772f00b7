"""
Context Filter

Turns a commit and its resolved transcript records into the bounded,
noise-free payload handed to narrative generation.

Passes, in order:
1. Path exclusion: diff sections and records touching excluded paths go.
   The commit message is never filtered by path.
2. Classification: internal records, tool-only records and near-empty
   records are noise. Signal records keep only their text.
3. Redaction: secrets in record text, the commit message and the diff are
   replaced by markers.
4. Budget: while the estimate is over budget, apply the reduction tiers.
   If the last tier is still over, return anyway with `over_budget` set.
"""

import os
import time
from dataclasses import replace
from typing import Optional

from commit_story.configs import FilterConfig, get_logger, matches_ignore_pattern
from commit_story.filters.budget import (
    TIER_CAP_RECORDS,
    TIER_DROP_SHORT,
    TIER_NONE,
    TIER_TRUNCATE_DIFF,
    cap_records,
    drop_short_records,
    estimate_context_tokens,
)
from commit_story.filters.diff import exclude_diff_paths, truncate_diff
from commit_story.models import (
    BLOCK_TEXT,
    Author,
    Commit,
    ContentBlock,
    ContextMetrics,
    CorrelationWindow,
    FilteredContext,
    Resolution,
    TierEstimate,
    TranscriptRecord,
)
from commit_story.security import scrub_secrets_with_count

logger = get_logger("filters.context")

NOISE_INTERNAL = "internal"
NOISE_TOOL_ONLY = "tool_only"
NOISE_TOO_SHORT = "too_short"


def classify_record(record: TranscriptRecord, min_signal_chars: int) -> Optional[str]:
    """
    Classify a record as noise or signal.

    Args:
        record: Transcript record
        min_signal_chars: Minimum trimmed text length for signal

    Returns:
        Noise reason (NOISE_*), or None for a signal record
    """
    if record.is_internal:
        return NOISE_INTERNAL
    if record.is_tool_only:
        return NOISE_TOOL_ONLY
    text = record.text.strip()
    if not text or len(text) < min_signal_chars:
        return NOISE_TOO_SHORT
    return None


def _relative_to_repo(path: str, repo_path: str) -> str:
    if os.path.isabs(path):
        try:
            relative = os.path.relpath(path, repo_path)
        except ValueError:
            return path
        if not relative.startswith(".."):
            return relative.replace(os.sep, "/")
    return path


def is_excluded_record(record: TranscriptRecord, repo_path: str, patterns: tuple[str, ...]) -> bool:
    """True when every file the record references matches an exclusion pattern."""
    if not patterns:
        return False
    paths = record.referenced_paths
    if not paths:
        return False
    return all(matches_ignore_pattern(_relative_to_repo(p, repo_path), patterns) for p in paths)


def _as_signal(record: TranscriptRecord, text: str) -> TranscriptRecord:
    # Text only: tool blocks never survive into the output
    return replace(record, text=text, blocks=(ContentBlock(type=BLOCK_TEXT, text=text),))


class ContextFilter:
    """Classifies, redacts and budgets commit context."""

    def __init__(self, config: Optional[FilterConfig] = None):
        self.config = config or FilterConfig()

    def filter(
        self,
        commit: Commit,
        records: list[TranscriptRecord] | tuple[TranscriptRecord, ...],
        resolution: Optional[Resolution] = None,
        previous: Optional[Commit] = None,
        window: Optional[CorrelationWindow] = None,
    ) -> FilteredContext:
        """
        Build the filtered context for a commit.

        Args:
            commit: The commit being described
            records: Resolved transcript records (chronological)
            resolution: How the records were resolved (carries the ambiguity flag)
            previous: Previous commit, passed through to the output
            window: Correlation window; records outside it are dropped

        Returns:
            FilteredContext with metrics describing every reduction
        """
        config = self.config
        started = time.perf_counter()
        patterns = tuple(config.exclude_patterns)

        metrics = ContextMetrics(
            original_record_count=len(records),
            token_budget=config.token_budget,
            ambiguous=resolution.ambiguous if resolution else False,
            session_count=(
                len(resolution.session_ids) if resolution else len({r.session_id for r in records})
            ),
        )

        # 1. Path exclusion (and the repository/window guarantees)
        diff, excluded_files = exclude_diff_paths(commit.diff, patterns)
        metrics.excluded_diff_files = excluded_files

        candidates = []
        for record in sorted(records, key=lambda r: r.timestamp):
            if record.working_directory != commit.repository_path:
                metrics.excluded_record_count += 1
            elif window is not None and record.timestamp not in window:
                metrics.excluded_record_count += 1
            elif is_excluded_record(record, commit.repository_path, patterns):
                metrics.excluded_record_count += 1
            else:
                candidates.append(record)

        # 2. Classification
        signal = []
        noise_reasons: dict[str, int] = {}
        for record in candidates:
            reason = classify_record(record, config.min_signal_chars)
            if reason is None:
                signal.append(record)
            else:
                noise_reasons[reason] = noise_reasons.get(reason, 0) + 1
        metrics.noise_record_count = sum(noise_reasons.values())

        # 3. Redaction
        message, redactions = scrub_secrets_with_count(commit.message, config.redact_emails)
        diff, count = scrub_secrets_with_count(diff, config.redact_emails)
        redactions += count
        redacted = []
        for record in signal:
            text, count = scrub_secrets_with_count(record.text, config.redact_emails)
            redactions += count
            redacted.append(_as_signal(record, text))
        signal = redacted
        author = commit.author
        if config.redact_emails and author.email:
            author = Author(name=author.name, email="[REDACTED_EMAIL]")
        metrics.redaction_count = redactions

        # 4. Budget
        tokens = estimate_context_tokens(message, diff, signal)
        metrics.tier_estimates.append(TierEstimate(TIER_NONE, tokens))
        tiers = (
            (TIER_TRUNCATE_DIFF, lambda d, s: (truncate_diff(d, config.diff_line_limit), s)),
            (TIER_DROP_SHORT, lambda d, s: (d, drop_short_records(s, config.short_record_chars))),
            (TIER_CAP_RECORDS, lambda d, s: (d, cap_records(s, config.tier3_keep))),
        )
        for tier, apply_tier in tiers:
            if tokens <= config.token_budget:
                break
            diff, signal = apply_tier(diff, signal)
            tokens = estimate_context_tokens(message, diff, signal)
            metrics.tier_estimates.append(TierEstimate(tier, tokens))
            metrics.reduction_tier = tier
            logger.debug(f"Tier {tier} reduced context to ~{tokens} tokens (budget {config.token_budget})")

        metrics.over_budget = tokens > config.token_budget
        metrics.signal_record_count = len(signal)
        metrics.removed_count = metrics.original_record_count - len(signal)
        metrics.processing_ms = round((time.perf_counter() - started) * 1000, 3)

        if metrics.over_budget:
            logger.warning(
                f"Context for {commit.short_hash} still ~{tokens} tokens after tier "
                f"{metrics.reduction_tier} (budget {config.token_budget}) - proceeding over budget"
            )
        logger.info(
            f"Kept {len(signal)} of {metrics.original_record_count} records "
            f"({metrics.noise_record_count} noise, {metrics.excluded_record_count} excluded), "
            f"~{tokens} tokens, tier {metrics.reduction_tier}"
        )
        if noise_reasons:
            logger.debug(f"Noise by reason: {dict(sorted(noise_reasons.items()))}")

        filtered_commit = replace(commit, message=message, diff=diff, author=author)
        return FilteredContext(
            commit=filtered_commit,
            records=tuple(signal),
            metrics=metrics,
            previous_commit=previous,
            window=window,
        )


def filter_context(
    commit: Commit,
    records: list[TranscriptRecord] | tuple[TranscriptRecord, ...],
    config: Optional[FilterConfig] = None,
    resolution: Optional[Resolution] = None,
    previous: Optional[Commit] = None,
    window: Optional[CorrelationWindow] = None,
) -> FilteredContext:
    """Convenience wrapper around ContextFilter.filter."""
    return ContextFilter(config).filter(commit, records, resolution, previous, window)
