"""
Transcript Parsing

Parse Claude Code session transcripts from JSONL format.
Each line becomes a TranscriptRecord whose content is normalized into plain
text plus typed content blocks, so nothing downstream looks at raw JSON.
"""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Iterator, Optional

from commit_story.configs import COMPACTION_MARKER, get_logger
from commit_story.exceptions import TranscriptParseError
from commit_story.models import (
    BLOCK_OTHER,
    BLOCK_TEXT,
    BLOCK_TOOL_RESULT,
    BLOCK_TOOL_USE,
    ROLE_ASSISTANT,
    ROLE_HUMAN,
    ContentBlock,
    TranscriptRecord,
)

logger = get_logger("collectors.transcript")

# Transcript `type` values that are conversation turns
_ROLE_BY_TYPE = {
    "user": ROLE_HUMAN,
    "human": ROLE_HUMAN,
    "assistant": ROLE_ASSISTANT,
}

# Non-conversation entry carrying a pointer into an earlier session
SUMMARY_TYPE = "summary"


@dataclass
class ParsedTranscriptFile:
    """Records and bookkeeping extracted from one transcript file."""

    source_file: Optional[str]
    records: list[TranscriptRecord] = field(default_factory=list)
    leaf_refs: dict[str, set[str]] = field(default_factory=dict)
    """Summary leafUuids, keyed by the session id of the file they appear in."""
    total_lines: int = 0
    skipped_lines: int = 0

    @property
    def session_ids(self) -> list[str]:
        return sorted({r.session_id for r in self.records})


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a transcript timestamp to an aware UTC datetime.

    Accepts ISO 8601 strings ("2025-08-20T20:54:46.152Z" or with an offset)
    and epoch milliseconds. Naive values are taken as UTC.

    Raises:
        TranscriptParseError: If the value is missing or unparseable
    """
    if value is None or value == "":
        raise TranscriptParseError("missing timestamp")
    if isinstance(value, bool):
        raise TranscriptParseError(f"invalid timestamp: {value!r}")
    if isinstance(value, (int, float)):
        try:
            return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
        except (OverflowError, OSError, ValueError) as e:
            raise TranscriptParseError(f"invalid timestamp: {value!r}") from e
    if not isinstance(value, str):
        raise TranscriptParseError(f"invalid timestamp: {value!r}")

    text = value.strip()
    if text.endswith("Z") or text.endswith("z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise TranscriptParseError(f"invalid timestamp: {value!r}") from e
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def _tool_result_text(content: Any) -> str:
    # Tool result content can be a string or an array of text blocks
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        return " ".join(
            b.get("text", "") for b in content if isinstance(b, dict) and b.get("type") == "text"
        )
    return ""


def _parse_block(block: Any) -> ContentBlock:
    if isinstance(block, str):
        return ContentBlock(type=BLOCK_TEXT, text=block)
    if not isinstance(block, dict):
        return ContentBlock(type=BLOCK_OTHER)

    block_type = block.get("type", "")
    if block_type == "text":
        text = block.get("text", "")
        return ContentBlock(type=BLOCK_TEXT, text=text if isinstance(text, str) else "")
    if block_type == "tool_use":
        tool_input = block.get("input")
        return ContentBlock(
            type=BLOCK_TOOL_USE,
            tool_name=block.get("name", "unknown"),
            tool_input=tool_input if isinstance(tool_input, dict) else {},
            tool_use_id=block.get("id"),
        )
    if block_type == "tool_result":
        return ContentBlock(
            type=BLOCK_TOOL_RESULT,
            text=_tool_result_text(block.get("content", "")),
            tool_use_id=block.get("tool_use_id"),
        )
    # thinking, image, redacted_thinking, ...
    return ContentBlock(type=BLOCK_OTHER)


def normalize_content(content: Any) -> tuple[str, tuple[ContentBlock, ...]]:
    """
    Normalize string-or-array message content.

    Returns:
        (text, blocks): text is the plain string, or the newline-joined text
        blocks of an array; tool result text is never part of `text`.

    Raises:
        TranscriptParseError: If content is neither a string nor a list
    """
    if content is None:
        return "", ()
    if isinstance(content, str):
        return content, (ContentBlock(type=BLOCK_TEXT, text=content),)
    if isinstance(content, list):
        blocks = tuple(_parse_block(b) for b in content)
        text = "\n".join(b.text for b in blocks if b.type == BLOCK_TEXT and b.text)
        return text, blocks
    raise TranscriptParseError(f"unsupported content type: {type(content).__name__}")


def _optional_str(entry: dict[str, Any], key: str) -> Optional[str]:
    value = entry.get(key)
    return value if isinstance(value, str) and value else None


def _role_of(value: Any) -> Optional[str]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise TranscriptParseError(f"invalid type/role: {value!r}")
    return _ROLE_BY_TYPE.get(value)


def parse_record(
    entry: dict[str, Any],
    source_file: Optional[str] = None,
    line_number: Optional[int] = None,
) -> Optional[TranscriptRecord]:
    """
    Convert one decoded transcript entry into a TranscriptRecord.

    Args:
        entry: Decoded JSON object from one transcript line
        source_file: File the line came from (kept for diagnostics)
        line_number: Line of the entry, used for the id of uuid-less records

    Returns:
        TranscriptRecord, or None for non-conversation entries (summary,
        system, file snapshots)

    Raises:
        TranscriptParseError: If a conversation entry is malformed
    """
    message = entry.get("message")
    if not isinstance(message, dict):
        message = {}

    role = _role_of(entry.get("type")) or _role_of(message.get("role"))
    if role is None:
        return None

    session_id = entry.get("sessionId")
    if not isinstance(session_id, str) or not session_id:
        raise TranscriptParseError("missing sessionId")

    timestamp = parse_timestamp(entry.get("timestamp"))
    text, blocks = normalize_content(message.get("content", entry.get("content")))

    is_compact_summary = bool(entry.get("isCompactSummary")) or (
        role == ROLE_HUMAN and text.lstrip().startswith(COMPACTION_MARKER)
    )
    cwd = entry.get("cwd")

    record_id = _optional_str(entry, "uuid")
    if record_id is None:
        # Unique per line so distinct uuid-less records never deduplicate
        if line_number is not None:
            stem = Path(source_file).stem if source_file else "transcript"
            record_id = f"{session_id}:{stem}:{line_number}"
        else:
            record_id = f"{session_id}:{timestamp.isoformat()}"

    return TranscriptRecord(
        session_id=session_id,
        record_id=record_id,
        parent_id=_optional_str(entry, "parentUuid"),
        timestamp=timestamp,
        role=role,
        is_internal=bool(entry.get("isMeta")) or is_compact_summary,
        working_directory=cwd if isinstance(cwd, str) else "",
        text=text,
        blocks=blocks,
        is_compact_summary=is_compact_summary,
        source_file=source_file,
    )


def parse_transcript_lines(
    lines: Iterable[str],
    source_file: Optional[str] = None,
) -> ParsedTranscriptFile:
    """
    Parse transcript lines, skipping (and counting) malformed ones.

    Summary entries carry no session id of their own; their leafUuid is
    attributed to the session the file belongs to (the file stem, or the
    first record's session id).

    Args:
        lines: JSONL lines (file handle or list)
        source_file: File the lines came from

    Returns:
        ParsedTranscriptFile with records and counters
    """
    parsed = ParsedTranscriptFile(source_file=source_file)
    pending_leaves: set[str] = set()

    for line_num, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        parsed.total_lines += 1

        try:
            entry = json.loads(line)
        except json.JSONDecodeError as e:
            logger.debug(f"Invalid JSON on line {line_num} of {source_file}: {e}")
            parsed.skipped_lines += 1
            continue

        if not isinstance(entry, dict):
            parsed.skipped_lines += 1
            continue

        if entry.get("type") == SUMMARY_TYPE:
            leaf = entry.get("leafUuid")
            if isinstance(leaf, str) and leaf:
                pending_leaves.add(leaf)
            continue

        try:
            record = parse_record(entry, source_file, line_num)
        except TranscriptParseError as e:
            logger.debug(f"Skipping line {line_num} of {source_file}: {e}")
            parsed.skipped_lines += 1
            continue

        if record is not None:
            parsed.records.append(record)

    if pending_leaves:
        owner = Path(source_file).stem if source_file else None
        if parsed.records and owner not in {r.session_id for r in parsed.records}:
            owner = parsed.records[0].session_id
        if owner:
            parsed.leaf_refs.setdefault(owner, set()).update(pending_leaves)

    return parsed


def iter_transcript_lines(file_path: str | Path) -> Iterator[str]:
    """Stream a transcript file line by line."""
    with open(file_path, encoding="utf-8", errors="replace") as f:
        yield from f


def parse_transcript_file(file_path: str | Path) -> ParsedTranscriptFile:
    """
    Parse a transcript JSONL file.

    Args:
        file_path: Path to the JSONL transcript file

    Returns:
        ParsedTranscriptFile with extracted records

    Raises:
        OSError: If the file cannot be read
    """
    return parse_transcript_lines(iter_transcript_lines(file_path), str(file_path))
