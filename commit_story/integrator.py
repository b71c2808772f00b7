"""
Context Integrator

Wires the commit reader, transcript collector, session resolver and context
filter together for one commit. This is what the post-commit hook calls.
"""

from datetime import timedelta
from typing import Optional

from commit_story.collectors import TranscriptCollector
from commit_story.configs import FilterConfig, get_logger, load_filter_config
from commit_story.filters import ContextFilter
from commit_story.git import CommitReader, get_repo_root
from commit_story.models import Commit, CorrelationWindow, FilteredContext
from commit_story.sessions import SessionResolver

logger = get_logger("integrator")


def build_window(commit: Commit, previous: Optional[Commit], config: FilterConfig) -> CorrelationWindow:
    """Correlation window from the previous commit (or the fallback) to `commit`."""
    return CorrelationWindow.for_commit(
        commit,
        previous,
        buffer=timedelta(seconds=config.buffer_seconds),
        fallback=timedelta(hours=config.fallback_window_hours),
    )


def gather_context_for_commit(
    repo_path: str,
    ref: str = "HEAD",
    config: Optional[FilterConfig] = None,
    collector: Optional[TranscriptCollector] = None,
    resolver: Optional[SessionResolver] = None,
) -> FilteredContext:
    """
    Gather the filtered context for a commit.

    Args:
        repo_path: Path inside the repository
        ref: Commit reference
        config: Filter configuration (default: loaded for the repository)
        collector: Transcript collector (default: Claude Code storage)
        resolver: Session resolver (default: no relevance selector)

    Returns:
        FilteredContext for the commit

    Raises:
        NotAGitRepoError: If repo_path is not inside a git repository
        CommitNotFoundError: If ref does not resolve
        GitCommandError: If git cannot be run
    """
    # Transcript cwd is the repository root, so everything keys off it
    repo_root = get_repo_root(repo_path) or repo_path
    if config is None:
        config = load_filter_config(repo_root)
    if collector is None:
        collector = TranscriptCollector(max_workers=config.max_workers)
    if resolver is None:
        resolver = SessionResolver()

    reader = CommitReader(repo_root)
    commit = reader.read_commit(ref)
    previous = reader.read_previous_commit(ref)
    window = build_window(commit, previous, config)

    logger.info(
        f"Gathering context for {commit.short_hash} "
        f"({window.start.isoformat()} -> {window.end.isoformat()}, {window.minutes} min)"
    )

    collected = collector.collect(commit.repository_path, window)
    resolution = resolver.resolve(collected.sessions, commit)
    if resolution.ambiguous:
        logger.debug(f"Concurrent sessions: {', '.join(resolution.concurrent_session_ids)}")

    return ContextFilter(config).filter(
        commit,
        resolution.records,
        resolution=resolution,
        previous=previous,
        window=window,
    )
