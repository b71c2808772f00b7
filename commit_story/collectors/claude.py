"""
Claude Code Transcript Collector

Finds the Claude Code transcript records that belong to a repository and
fall inside a commit's correlation window, grouped by session.

Storage layout (owned by Claude Code, read-only here):
    ~/.claude/projects/<encoded repo path>/<session id>.jsonl
"""

from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from commit_story.collectors.transcript import ParsedTranscriptFile, parse_transcript_file
from commit_story.configs import get_logger, get_transcript_dir
from commit_story.configs.constants import DEFAULT_MAX_WORKERS
from commit_story.models import CollectionResult, CorrelationWindow, Session, TranscriptRecord

logger = get_logger("collectors.claude")


def find_transcript_files(transcript_dir: Path) -> list[Path]:
    """List transcript files in a project directory, sorted by name."""
    return sorted(p for p in transcript_dir.glob("*.jsonl") if p.is_file())


def _file_may_intersect(path: Path, window: CorrelationWindow) -> Optional[bool]:
    """Cheap mtime pre-filter.

    A file last written before the window opened cannot hold records inside
    it. Returns None if the file cannot be stat'ed.
    """
    try:
        mtime = datetime.fromtimestamp(path.stat().st_mtime, tz=timezone.utc)
    except OSError:
        return None
    return mtime > window.padded_start


def _read_file(path: Path) -> Optional[ParsedTranscriptFile]:
    try:
        return parse_transcript_file(path)
    except OSError as e:
        logger.warning(f"Skipping unreadable transcript {path}: {e}")
        return None


def group_by_session(
    records: list[TranscriptRecord],
    leaf_refs: Optional[dict[str, set[str]]] = None,
) -> dict[str, Session]:
    """
    Group records into sessions ordered by session id.

    Each session's records are sorted by timestamp; records with equal
    timestamps keep their input order. A record id seen twice in one
    session (the same line present in two files) is kept once.
    """
    leaf_refs = leaf_refs or {}
    grouped: dict[str, list[TranscriptRecord]] = {}
    seen: set[tuple[str, str]] = set()
    for record in records:
        key = (record.session_id, record.record_id)
        if key in seen:
            continue
        seen.add(key)
        grouped.setdefault(record.session_id, []).append(record)

    sessions = {}
    for session_id in sorted(grouped):
        ordered = sorted(grouped[session_id], key=lambda r: r.timestamp)
        sessions[session_id] = Session(
            session_id=session_id,
            records=tuple(ordered),
            continues_from=frozenset(leaf_refs.get(session_id, ())),
        )
    return sessions


class TranscriptCollector:
    """Collects window-relevant transcript records for a repository."""

    def __init__(
        self,
        projects_root: Optional[Path] = None,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ):
        """
        Args:
            projects_root: Root of Claude Code project directories
                           (default: ~/.claude/projects or $COMMIT_STORY_CLAUDE_PROJECTS)
            max_workers: Parallel file reads; 1 reads sequentially
        """
        self.projects_root = Path(projects_root) if projects_root is not None else None
        self.max_workers = max(1, max_workers)

    def transcript_dir(self, repository_path: str) -> Path:
        return get_transcript_dir(repository_path, self.projects_root)

    def collect(self, repository_path: str, window: CorrelationWindow) -> CollectionResult:
        """
        Collect records for `repository_path` inside `window`.

        Args:
            repository_path: Absolute repository path, compared exactly to each record's cwd
            window: Correlation window

        Returns:
            CollectionResult whose `sessions` maps session id -> Session
        """
        result = CollectionResult()
        transcript_dir = self.transcript_dir(repository_path)

        if not transcript_dir.is_dir():
            logger.debug(f"No transcript directory at {transcript_dir} - no assistant activity")
            return result

        files = find_transcript_files(transcript_dir)
        result.files_found = len(files)

        candidates = []
        for path in files:
            may_intersect = _file_may_intersect(path, window)
            if may_intersect is None:
                result.files_unreadable += 1
            elif may_intersect:
                candidates.append(path)
            else:
                result.files_skipped_mtime += 1

        logger.debug(
            f"Found {len(files)} transcript files in {transcript_dir}, "
            f"{len(candidates)} modified during the {window.minutes}-minute window"
        )

        parsed_files = self._read_all(candidates)

        kept: list[TranscriptRecord] = []
        leaf_refs: dict[str, set[str]] = {}
        for parsed in parsed_files:
            if parsed is None:
                result.files_unreadable += 1
                continue
            result.files_scanned += 1
            result.lines_total += parsed.total_lines
            result.lines_skipped += parsed.skipped_lines
            for session_id, leaves in parsed.leaf_refs.items():
                leaf_refs.setdefault(session_id, set()).update(leaves)

            for record in parsed.records:
                if record.working_directory != repository_path:
                    result.records_wrong_directory += 1
                elif record.timestamp not in window:
                    result.records_outside_window += 1
                else:
                    kept.append(record)

        result.sessions = group_by_session(kept, leaf_refs)

        if result.lines_skipped:
            logger.info(f"Skipped {result.lines_skipped} malformed transcript lines")
        if result.records_wrong_directory or result.records_outside_window:
            logger.debug(
                f"Filtered out {result.records_wrong_directory} records (wrong directory) + "
                f"{result.records_outside_window} records (outside time window)"
            )
        logger.info(
            f"Collected {result.record_count} records from {len(result.sessions)} sessions "
            f"({result.files_scanned} files scanned)"
        )
        return result

    def _read_all(self, paths: list[Path]) -> list[Optional[ParsedTranscriptFile]]:
        # executor.map yields in input order, so the merge is deterministic
        if self.max_workers == 1 or len(paths) <= 1:
            return [_read_file(p) for p in paths]
        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(paths))) as executor:
            return list(executor.map(_read_file, paths))


def collect(
    repository_path: str,
    window: CorrelationWindow,
    projects_root: Optional[Path] = None,
    max_workers: int = DEFAULT_MAX_WORKERS,
) -> CollectionResult:
    """Convenience wrapper around TranscriptCollector.collect."""
    return TranscriptCollector(projects_root, max_workers).collect(repository_path, window)
