"""
Context Data Model

Immutable value objects shared by the collectors, the session resolver and
the context filter: commits, transcript records, sessions, the correlation
window and the filtered context handed to narrative generation.
"""

import json
import re
from dataclasses import asdict, dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any, Optional

from commit_story.configs.constants import CHARS_PER_TOKEN, DOC_EXTENSIONS, DOC_NAME_MARKERS

_DIFF_HEADER = re.compile(r"^diff --git a/(.+?) b/(.+)$")

ROLE_HUMAN = "human"
ROLE_ASSISTANT = "assistant"

BLOCK_TEXT = "text"
BLOCK_TOOL_USE = "tool_use"
BLOCK_TOOL_RESULT = "tool_result"
BLOCK_OTHER = "other"

TOOL_BLOCK_TYPES = (BLOCK_TOOL_USE, BLOCK_TOOL_RESULT)

# Tool input keys that name a file
_PATH_INPUT_KEYS = ("file_path", "notebook_path", "path")


# =============================================================================
# Commits
# =============================================================================


@dataclass(frozen=True)
class Author:
    name: str
    email: str


@dataclass(frozen=True)
class Commit:
    """A single commit as read from git."""

    hash: str
    ref: str
    message: str
    diff: str
    author: Author
    timestamp: datetime
    repository_path: str

    @property
    def short_hash(self) -> str:
        return self.hash[:7]

    @property
    def changed_files(self) -> list[str]:
        """Paths named in the diff's `diff --git` headers, in diff order."""
        files = []
        for line in self.diff.splitlines():
            match = _DIFF_HEADER.match(line)
            if match:
                files.append(match.group(2))
        return files

    @property
    def doc_files(self) -> list[str]:
        return [f for f in self.changed_files if _is_doc_file(f)]

    @property
    def functional_files(self) -> list[str]:
        return [f for f in self.changed_files if not _is_doc_file(f)]

    @property
    def has_functional_code(self) -> bool:
        return bool(self.functional_files)

    @property
    def has_only_docs(self) -> bool:
        return bool(self.changed_files) and not self.functional_files

    def to_dict(self) -> dict[str, Any]:
        return {
            "hash": self.hash,
            "ref": self.ref,
            "message": self.message,
            "diff": self.diff,
            "author": {"name": self.author.name, "email": self.author.email},
            "timestamp": self.timestamp.isoformat(),
            "repository_path": self.repository_path,
        }


def _is_doc_file(path: str) -> bool:
    return path.endswith(DOC_EXTENSIONS) or any(marker in path for marker in DOC_NAME_MARKERS)


# =============================================================================
# Transcripts
# =============================================================================


@dataclass(frozen=True)
class ContentBlock:
    """One typed block of a transcript message."""

    type: str
    text: str = ""
    tool_name: Optional[str] = None
    tool_input: Optional[dict[str, Any]] = None
    tool_use_id: Optional[str] = None

    @property
    def is_tool(self) -> bool:
        return self.type in TOOL_BLOCK_TYPES

    @property
    def file_paths(self) -> list[str]:
        """File paths named in a tool invocation's input."""
        if self.type != BLOCK_TOOL_USE or not self.tool_input:
            return []
        paths = []
        for key in _PATH_INPUT_KEYS:
            value = self.tool_input.get(key)
            if isinstance(value, str) and value:
                paths.append(value)
        return paths


@dataclass(frozen=True)
class TranscriptRecord:
    """One human or assistant turn from a Claude Code transcript."""

    session_id: str
    record_id: str
    timestamp: datetime
    role: str
    is_internal: bool
    working_directory: str
    text: str
    blocks: tuple[ContentBlock, ...] = ()
    parent_id: Optional[str] = None
    is_compact_summary: bool = False
    source_file: Optional[str] = None

    @property
    def has_text(self) -> bool:
        return bool(self.text.strip())

    @property
    def is_tool_only(self) -> bool:
        """True when the record carries tool mechanics and no text."""
        return not self.has_text and any(b.is_tool for b in self.blocks)

    @property
    def tool_names(self) -> list[str]:
        return [b.tool_name for b in self.blocks if b.type == BLOCK_TOOL_USE and b.tool_name]

    @property
    def referenced_paths(self) -> list[str]:
        paths = []
        for block in self.blocks:
            paths.extend(block.file_paths)
        return paths

    @property
    def approximate_tokens(self) -> int:
        return estimate_tokens(self.text)

    def to_dict(self) -> dict[str, Any]:
        return {
            "session_id": self.session_id,
            "record_id": self.record_id,
            "timestamp": self.timestamp.isoformat(),
            "role": self.role,
            "text": self.text,
        }


@dataclass(frozen=True)
class Session:
    """Records sharing one session id, ordered by timestamp."""

    session_id: str
    records: tuple[TranscriptRecord, ...]
    continues_from: frozenset[str] = frozenset()
    """Record ids of earlier sessions named by summary continuation markers."""

    def __post_init__(self):
        if not self.records:
            raise ValueError(f"Session {self.session_id} has no records")

    @property
    def start_time(self) -> datetime:
        return self.records[0].timestamp

    @property
    def end_time(self) -> datetime:
        return self.records[-1].timestamp

    @property
    def record_ids(self) -> frozenset[str]:
        return frozenset(r.record_id for r in self.records)

    def overlaps(self, other: "Session") -> bool:
        """True when the time ranges share more than an end point."""
        return (
            self.start_time < other.end_time and other.start_time < self.end_time
        ) or self.start_time == other.start_time


@dataclass(frozen=True)
class CorrelationWindow:
    """Half-open interval (start, end], padded by `buffer` on both ends."""

    start: datetime
    end: datetime
    buffer: timedelta = timedelta(0)

    @classmethod
    def for_commit(
        cls,
        commit: Commit,
        previous: Optional[Commit],
        buffer: timedelta = timedelta(0),
        fallback: timedelta = timedelta(hours=24),
    ) -> "CorrelationWindow":
        end = commit.timestamp.astimezone(timezone.utc)
        if previous is not None:
            start = previous.timestamp.astimezone(timezone.utc)
        else:
            start = end - fallback
        return cls(start=start, end=end, buffer=buffer)

    @property
    def padded_start(self) -> datetime:
        return self.start - self.buffer

    @property
    def padded_end(self) -> datetime:
        return self.end + self.buffer

    def __contains__(self, moment: datetime) -> bool:
        return self.padded_start < moment <= self.padded_end

    @property
    def minutes(self) -> int:
        return round((self.end - self.start).total_seconds() / 60)

    def to_dict(self) -> dict[str, Any]:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "buffer_seconds": int(self.buffer.total_seconds()),
        }


@dataclass
class CollectionResult:
    """Sessions found for a window plus collection counters."""

    sessions: dict[str, Session] = field(default_factory=dict)
    files_found: int = 0
    files_scanned: int = 0
    files_skipped_mtime: int = 0
    files_unreadable: int = 0
    lines_total: int = 0
    lines_skipped: int = 0
    records_wrong_directory: int = 0
    records_outside_window: int = 0

    @property
    def record_count(self) -> int:
        return sum(len(s.records) for s in self.sessions.values())


@dataclass(frozen=True)
class Resolution:
    """The authoritative records for a commit and how they were chosen."""

    records: tuple[TranscriptRecord, ...] = ()
    session_ids: tuple[str, ...] = ()
    groups: tuple[tuple[str, ...], ...] = ()
    ambiguous: bool = False
    concurrent_session_ids: tuple[str, ...] = ()
    strategy: str = "empty"


# =============================================================================
# Filtered output
# =============================================================================


@dataclass(frozen=True)
class TierEstimate:
    tier: int
    tokens: int


@dataclass
class ContextMetrics:
    """What filtering removed and how hard the budget pass had to work."""

    original_record_count: int = 0
    excluded_record_count: int = 0
    noise_record_count: int = 0
    removed_count: int = 0
    signal_record_count: int = 0
    redaction_count: int = 0
    excluded_diff_files: list[str] = field(default_factory=list)
    tier_estimates: list[TierEstimate] = field(default_factory=list)
    reduction_tier: int = 0
    over_budget: bool = False
    token_budget: int = 0
    ambiguous: bool = False
    session_count: int = 0
    processing_ms: float = 0.0

    @property
    def tokens_before(self) -> int:
        return self.tier_estimates[0].tokens if self.tier_estimates else 0

    @property
    def tokens_after(self) -> int:
        return self.tier_estimates[-1].tokens if self.tier_estimates else 0


@dataclass(frozen=True)
class FilteredContext:
    """The engine's output, consumed by the narrative generator."""

    commit: Commit
    records: tuple[TranscriptRecord, ...]
    metrics: ContextMetrics
    previous_commit: Optional[Commit] = None
    window: Optional[CorrelationWindow] = None

    @property
    def has_chat(self) -> bool:
        return bool(self.records)

    def format_sessions(self) -> list[dict[str, Any]]:
        """Group records by session for prompt assembly.

        Sessions are labelled 'Session 1'..'Session n' in order of their
        first kept record.
        """
        grouped: dict[str, list[TranscriptRecord]] = {}
        for record in self.records:
            grouped.setdefault(record.session_id, []).append(record)
        formatted = []
        for index, records in enumerate(grouped.values(), 1):
            formatted.append(
                {
                    "session_id": f"Session {index}",
                    "session_start": records[0].timestamp.isoformat(),
                    "message_count": len(records),
                    "messages": [
                        {"type": r.role, "content": r.text, "timestamp": r.timestamp.isoformat()}
                        for r in records
                    ],
                }
            )
        return formatted

    def to_dict(self, include_timing: bool = True) -> dict[str, Any]:
        metrics = asdict(self.metrics)
        if not include_timing:
            metrics.pop("processing_ms", None)
        return {
            "commit": self.commit.to_dict(),
            "previous_commit": self.previous_commit.to_dict() if self.previous_commit else None,
            "window": self.window.to_dict() if self.window else None,
            "records": [r.to_dict() for r in self.records],
            "metrics": metrics,
        }

    def to_json(self, include_timing: bool = False) -> str:
        """Deterministic JSON rendering (sorted keys, no wall-clock timing by default)."""
        return json.dumps(self.to_dict(include_timing=include_timing), sort_keys=True, indent=2)


def estimate_tokens(text: str) -> int:
    """Rough token count estimate (chars / 4, rounded up)."""
    if not text:
        return 0
    return -(-len(text) // CHARS_PER_TOKEN)
