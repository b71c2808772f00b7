"""
Transcript Collectors

Discovery and parsing of Claude Code session transcripts for a commit window.
"""

from .transcript import (
    ParsedTranscriptFile,
    normalize_content,
    parse_record,
    parse_timestamp,
    parse_transcript_file,
    parse_transcript_lines,
)
from .claude import (
    TranscriptCollector,
    collect,
    find_transcript_files,
    group_by_session,
)

__all__ = [
    # Transcript parsing
    "ParsedTranscriptFile",
    "normalize_content",
    "parse_record",
    "parse_timestamp",
    "parse_transcript_file",
    "parse_transcript_lines",
    # Collection
    "TranscriptCollector",
    "collect",
    "find_transcript_files",
    "group_by_session",
]
