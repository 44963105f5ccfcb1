"""
Sentence Alignment Models v1.0.0
================================
Data classes for aligner input sentences and alignment results.

Alignment items form a closed sum type: every item is exactly one of
Match, Delete, Insert, MoveOut or MoveIn, each with the fields its kind
requires. Items are frozen; alignment passes build new items instead of
editing old ones.
"""

from dataclasses import dataclass, field, asdict
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Sequence, Tuple, Union


class AlignmentType(Enum):
    """Kinds of alignment result items."""
    MATCH = "match"         # Source sentence(s) paired with target sentence(s)
    DELETE = "delete"       # Source sentence with no counterpart
    INSERT = "insert"       # Target sentence with no counterpart
    MOVEIN = "movein"       # Relocated content at its new (target-order) slot
    MOVEOUT = "moveout"     # Relocated content at its old (source-order) slot


@dataclass(frozen=True)
class Sentence:
    """
    One segmented sentence of the source or target document.

    Attributes:
        text: Sentence text as produced by the splitter
        index: 0-based position within its own sequence
        line_start: 1-based first line of the sentence
        line_end: 1-based last line of the sentence
    """
    text: str
    index: int
    line_start: int = 0
    line_end: int = 0

    def __post_init__(self):
        if self.line_end < self.line_start:
            object.__setattr__(self, 'line_end', self.line_start)


@dataclass(frozen=True)
class Match:
    """
    Source sentence(s) aligned with target sentence(s).

    ``source_indices``/``target_indices`` hold more than one entry only
    after a merge; ``source_lines``/``target_lines`` run parallel to them.
    """
    kind: ClassVar[AlignmentType] = AlignmentType.MATCH

    source_text: str
    target_text: str
    similarity: float
    source_indices: Tuple[int, ...]
    target_indices: Tuple[int, ...]
    source_lines: Tuple[int, ...] = ()
    target_lines: Tuple[int, ...] = ()

    def source_side(self) -> Tuple[int, ...]:
        return self.source_indices

    def target_side(self) -> Tuple[int, ...]:
        return self.target_indices

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        data = asdict(self)
        data['type'] = self.kind.value
        data['source_indices'] = list(self.source_indices)
        data['target_indices'] = list(self.target_indices)
        data['source_lines'] = list(self.source_lines)
        data['target_lines'] = list(self.target_lines)
        return data


@dataclass(frozen=True)
class Delete:
    """Source sentence without a counterpart in the target."""
    kind: ClassVar[AlignmentType] = AlignmentType.DELETE

    source_text: str
    source_index: int
    source_line: int = 0

    @property
    def source_indices(self) -> Tuple[int, ...]:
        return (self.source_index,)

    @property
    def source_lines(self) -> Tuple[int, ...]:
        return (self.source_line,)

    def source_side(self) -> Tuple[int, ...]:
        return (self.source_index,)

    def target_side(self) -> Tuple[int, ...]:
        return ()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': self.kind.value,
            'source_text': self.source_text,
            'source_index': self.source_index,
            'source_line': self.source_line,
        }


@dataclass(frozen=True)
class Insert:
    """Target sentence without a counterpart in the source."""
    kind: ClassVar[AlignmentType] = AlignmentType.INSERT

    target_text: str
    target_index: int
    target_line: int = 0

    @property
    def target_indices(self) -> Tuple[int, ...]:
        return (self.target_index,)

    @property
    def target_lines(self) -> Tuple[int, ...]:
        return (self.target_line,)

    def source_side(self) -> Tuple[int, ...]:
        return ()

    def target_side(self) -> Tuple[int, ...]:
        return (self.target_index,)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'type': self.kind.value,
            'target_text': self.target_text,
            'target_index': self.target_index,
            'target_line': self.target_line,
        }


@dataclass(frozen=True)
class MoveOut(Match):
    """
    Relocated match, kept at the slot it held in source order.

    Owns the source side of the relocation; its MoveIn partner owns the
    target side.
    """
    kind: ClassVar[AlignmentType] = AlignmentType.MOVEOUT

    original_target_index: int = -1

    def target_side(self) -> Tuple[int, ...]:
        return ()


@dataclass(frozen=True)
class MoveIn(Match):
    """Relocated match, threaded at its new slot in target order."""
    kind: ClassVar[AlignmentType] = AlignmentType.MOVEIN

    original_source_index: int = -1

    def source_side(self) -> Tuple[int, ...]:
        return ()


AlignmentItem = Union[Match, Delete, Insert, MoveOut, MoveIn]


def is_plain_match(item: AlignmentItem) -> bool:
    """True for Match items that are not part of a relocation pair."""
    return type(item) is Match


def target_index_of(item: AlignmentItem) -> Optional[int]:
    """Single target index of an item, or None when it has zero or several."""
    if isinstance(item, Insert):
        return item.target_index
    if isinstance(item, Match) and len(item.target_indices) == 1:
        return item.target_indices[0]
    return None


def source_index_of(item: AlignmentItem) -> Optional[int]:
    """Single source index of an item, or None when it has zero or several."""
    if isinstance(item, Delete):
        return item.source_index
    if isinstance(item, Match) and len(item.source_indices) == 1:
        return item.source_indices[0]
    return None


@dataclass
class AlignmentStatistics:
    """
    Count of alignment items per result type.

    Attributes:
        total: Number of items in the alignment
        match: Match items
        delete: Delete items
        insert: Insert items
        movein: MoveIn items
        moveout: MoveOut items
    """
    total: int = 0
    match: int = 0
    delete: int = 0
    insert: int = 0
    movein: int = 0
    moveout: int = 0

    @property
    def changed(self) -> int:
        """Items that are not plain matches."""
        return self.total - self.match

    def to_dict(self) -> Dict[str, int]:
        """Convert to dictionary for JSON serialization."""
        return {
            'total': self.total,
            'match': self.match,
            'delete': self.delete,
            'insert': self.insert,
            'movein': self.movein,
            'moveout': self.moveout,
        }


@dataclass
class AlignmentResult:
    """
    Complete result of one alignment run.

    Attributes:
        items: Ordered alignment items
        statistics: Per-type counts
        source_count: Number of source sentences
        target_count: Number of target sentences
        runtime_seconds: Wall time spent aligning
    """
    items: List[AlignmentItem] = field(default_factory=list)
    statistics: AlignmentStatistics = field(default_factory=AlignmentStatistics)
    source_count: int = 0
    target_count: int = 0
    runtime_seconds: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            'alignment': [item.to_dict() for item in self.items],
            'statistics': self.statistics.to_dict(),
            'source_count': self.source_count,
            'target_count': self.target_count,
            'runtime_seconds': round(self.runtime_seconds, 4),
        }


def sentences_from_list(texts: Sequence[str]) -> List[Sentence]:
    """Wrap plain strings as sentences; line numbers follow list order."""
    return [
        Sentence(text=text, index=i, line_start=i + 1, line_end=i + 1)
        for i, text in enumerate(texts)
    ]
