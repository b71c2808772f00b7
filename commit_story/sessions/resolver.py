"""
Session Resolution

Decides which transcript sessions speak for a commit when more than one
session overlaps its window.

Tiers, applied in order:
1. Explicit continuation: sessions that are one conversation resumed under a
   new id are merged.
2. Disjoint sessions: sequential segments of the same work, all kept.
3. Overlapping sessions: parallel work. All kept and interleaved, and the
   result is flagged ambiguous so the consumer can narrow by relevance.

Dropping a relevant session loses the story; an unrelated one simply fails
to connect to the diff downstream. Resolution therefore leans to inclusion.
"""

from typing import Callable, Iterable, Optional

from commit_story.configs import get_logger
from commit_story.models import ROLE_HUMAN, Commit, Resolution, Session, TranscriptRecord

logger = get_logger("sessions.resolver")

SessionGroup = list[Session]
RelevanceSelector = Callable[[list[SessionGroup], Commit], list[SessionGroup]]


class _DisjointSet:
    def __init__(self, items: Iterable[str]):
        self.parent = {item: item for item in items}

    def find(self, item: str) -> str:
        root = item
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[item] != root:
            self.parent[item], item = root, self.parent[item]
        return root

    def union(self, a: str, b: str) -> None:
        root_a, root_b = self.find(a), self.find(b)
        if root_a != root_b:
            # Smaller id wins so grouping does not depend on link order
            if root_b < root_a:
                root_a, root_b = root_b, root_a
            self.parent[root_b] = root_a


def _opens_with_compaction(session: Session) -> bool:
    for record in session.records:
        if record.role == ROLE_HUMAN:
            return record.is_compact_summary
    return False


def find_continuations(sessions: list[Session]) -> list[tuple[str, str]]:
    """
    Find explicit continuation links between sessions.

    A session continues another when one of its records names a record of
    the other as parent, when its file carries a summary whose leafUuid is a
    record of the other, or when it opens with a compaction summary (the
    other then being the latest session that ended before it started).

    Returns:
        Sorted list of (continuing session id, continued session id)
    """
    owner: dict[str, str] = {}
    for session in sessions:
        for record_id in session.record_ids:
            owner.setdefault(record_id, session.session_id)

    links: set[tuple[str, str]] = set()
    for session in sessions:
        references = {r.parent_id for r in session.records if r.parent_id} | set(session.continues_from)
        for ref in references:
            other = owner.get(ref)
            if other and other != session.session_id:
                links.add((session.session_id, other))

        if _opens_with_compaction(session):
            earlier = [
                s for s in sessions
                if s.session_id != session.session_id and s.end_time <= session.start_time
            ]
            if earlier:
                latest = max(earlier, key=lambda s: (s.end_time, s.session_id))
                links.add((session.session_id, latest.session_id))

    return sorted(links)


def _group_bounds(group: SessionGroup):
    return min(s.start_time for s in group), max(s.end_time for s in group)


def _groups_overlap(a: SessionGroup, b: SessionGroup) -> bool:
    a_start, a_end = _group_bounds(a)
    b_start, b_end = _group_bounds(b)
    # Back-to-back groups (one ends as the next starts) are sequential
    return (a_start < b_end and b_start < a_end) or a_start == b_start


def merge_continuations(sessions: list[Session]) -> list[SessionGroup]:
    """Merge continued sessions into groups ordered by start time."""
    links = find_continuations(sessions)
    disjoint = _DisjointSet(s.session_id for s in sessions)
    for later, earlier in links:
        disjoint.union(later, earlier)

    grouped: dict[str, SessionGroup] = {}
    for session in sorted(sessions, key=lambda s: (s.start_time, s.session_id)):
        grouped.setdefault(disjoint.find(session.session_id), []).append(session)

    return sorted(grouped.values(), key=lambda g: (_group_bounds(g)[0], g[0].session_id))


def find_concurrent(groups: list[SessionGroup]) -> list[str]:
    """Session ids of every group whose time range overlaps another group's."""
    concurrent: set[str] = set()
    for i, group in enumerate(groups):
        for other in groups[i + 1:]:
            if _groups_overlap(group, other):
                concurrent.update(s.session_id for s in group)
                concurrent.update(s.session_id for s in other)
    return sorted(concurrent)


def interleave(sessions: Iterable[Session]) -> tuple[TranscriptRecord, ...]:
    """All records of `sessions` in chronological order, ties by session id then position."""
    keyed = []
    for session in sessions:
        for position, record in enumerate(session.records):
            keyed.append(((record.timestamp, session.session_id, position), record))
    keyed.sort(key=lambda item: item[0])
    return tuple(record for _, record in keyed)


class SessionResolver:
    """Chooses the authoritative transcript records for a commit."""

    def __init__(self, selector: Optional[RelevanceSelector] = None):
        """
        Args:
            selector: Optional relevance narrower for concurrent sessions.
                      Receives the continuation-merged groups and the commit
                      and returns the groups to keep. An empty answer keeps
                      every group.
        """
        self.selector = selector

    def resolve(self, sessions: dict[str, Session] | list[Session], commit: Commit) -> Resolution:
        """
        Resolve sessions into one ordered record list.

        Args:
            sessions: Collected sessions (mapping or list)
            commit: The commit being described

        Returns:
            Resolution with ordered records and the ambiguity flag
        """
        session_list = sorted(
            sessions.values() if isinstance(sessions, dict) else sessions,
            key=lambda s: s.session_id,
        )

        if not session_list:
            return Resolution(strategy="empty")

        if len(session_list) == 1:
            only = session_list[0]
            return Resolution(
                records=only.records,
                session_ids=(only.session_id,),
                groups=((only.session_id,),),
                strategy="single",
            )

        groups = merge_continuations(session_list)
        merged = sum(len(g) for g in groups) - len(groups)
        if merged:
            logger.debug(f"Merged {merged} continued sessions into {len(groups)} conversations")

        concurrent = find_concurrent(groups)
        if not concurrent:
            kept = groups
            strategy = "sequential"
        else:
            strategy = "concurrent"
            kept = groups
            if self.selector is not None:
                selected = self.selector(groups, commit)
                if selected:
                    kept = selected
                else:
                    logger.debug("Relevance selector kept nothing - keeping all sessions")
            concurrent = find_concurrent(kept)
            if concurrent:
                logger.info(
                    f"{len(concurrent)} concurrent sessions overlap commit {commit.short_hash} - "
                    f"keeping {sum(len(g) for g in kept)} sessions, flagged ambiguous"
                )

        kept_sessions = [s for group in kept for s in group]
        return Resolution(
            records=interleave(kept_sessions),
            session_ids=tuple(sorted(s.session_id for s in kept_sessions)),
            groups=tuple(tuple(s.session_id for s in group) for group in kept),
            ambiguous=bool(concurrent),
            concurrent_session_ids=tuple(concurrent),
            strategy=strategy,
        )


def resolve(
    sessions: dict[str, Session] | list[Session],
    commit: Commit,
    selector: Optional[RelevanceSelector] = None,
) -> Resolution:
    """Convenience wrapper around SessionResolver.resolve."""
    return SessionResolver(selector).resolve(sessions, commit)
