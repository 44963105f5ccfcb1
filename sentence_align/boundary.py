"""
Boundary Merger v1.0.0
======================
Absorbs a Delete or Insert into a neighbouring Match when the merged text
matches the counterpart better, which repairs sentences that were split
or joined at a boundary during revision.

Both passes repeat until nothing more merges.
"""

from dataclasses import replace
from typing import List, Optional, Sequence, Tuple

from config_logging import get_logger

from .models import AlignmentItem, Delete, Insert, Match, is_plain_match
from .similarity import SimilarityScorer

logger = get_logger('sentence_align.boundary')


def _as_match(item: Optional[AlignmentItem]) -> Optional[Match]:
    return item if item is not None and is_plain_match(item) else None


def absorb_delete(match: Match, delete: Delete, before: bool, scorer: SimilarityScorer) -> Match:
    """
    Merge a delete into the source side of ``match``.

    Args:
        match: Neighbouring match
        delete: Delete to absorb
        before: True when the delete precedes the match (text is prepended)
        scorer: Scorer used to recompute the similarity
    """
    if before:
        text = delete.source_text + match.source_text
        indices = (delete.source_index,) + match.source_indices
        lines = (delete.source_line,) + match.source_lines
    else:
        text = match.source_text + delete.source_text
        indices = match.source_indices + (delete.source_index,)
        lines = match.source_lines + (delete.source_line,)
    return replace(match, source_text=text, source_indices=indices, source_lines=lines,
                   similarity=scorer.score(text, match.target_text))


def absorb_insert(match: Match, insert: Insert, before: bool, scorer: SimilarityScorer) -> Match:
    """Merge an insert into the target side of ``match``."""
    if before:
        text = insert.target_text + match.target_text
        indices = (insert.target_index,) + match.target_indices
        lines = (insert.target_line,) + match.target_lines
    else:
        text = match.target_text + insert.target_text
        indices = match.target_indices + (insert.target_index,)
        lines = match.target_lines + (insert.target_line,)
    return replace(match, target_text=text, target_indices=indices, target_lines=lines,
                   similarity=scorer.score(match.source_text, text))


def _merge_deletes_once(items: Sequence[AlignmentItem],
                        scorer: SimilarityScorer) -> Tuple[List[AlignmentItem], int]:
    pending = list(items)
    output: List[AlignmentItem] = []
    merged = 0
    i = 0
    while i < len(pending):
        item = pending[i]
        if not isinstance(item, Delete):
            output.append(item)
            i += 1
            continue

        prev = _as_match(output[-1] if output else None)
        nxt = _as_match(pending[i + 1] if i + 1 < len(pending) else None)

        prev_merge = absorb_delete(prev, item, False, scorer) if prev else None
        next_merge = absorb_delete(nxt, item, True, scorer) if nxt else None
        prev_ok = prev_merge is not None and prev_merge.similarity > prev.similarity
        next_ok = next_merge is not None and next_merge.similarity > nxt.similarity

        if prev_ok and (not next_ok or prev_merge.similarity >= next_merge.similarity):
            output[-1] = prev_merge
            merged += 1
        elif next_ok:
            pending[i + 1] = next_merge
            merged += 1
        else:
            output.append(item)
        i += 1
    return output, merged


def _contained(normalized_insert: str, normalized_source: str, at_end: bool) -> bool:
    if not normalized_insert:
        return False
    if at_end:
        return normalized_source.endswith(normalized_insert)
    return normalized_source.startswith(normalized_insert)


def _merge_inserts_once(items: Sequence[AlignmentItem],
                        scorer: SimilarityScorer) -> Tuple[List[AlignmentItem], int]:
    pending = list(items)
    output: List[AlignmentItem] = []
    merged = 0
    i = 0
    while i < len(pending):
        item = pending[i]
        if not isinstance(item, Insert):
            output.append(item)
            i += 1
            continue

        prev = _as_match(output[-1] if output else None)
        nxt = _as_match(pending[i + 1] if i + 1 < len(pending) else None)
        normalized = scorer.normalize(item.target_text)

        prev_merge = next_merge = None
        prev_ok = next_ok = next_contains = False
        if prev:
            prev_merge = absorb_insert(prev, item, False, scorer)
            prev_ok = (prev_merge.similarity > prev.similarity
                       or _contained(normalized, scorer.normalize(prev.source_text), at_end=True))
        if nxt:
            next_merge = absorb_insert(nxt, item, True, scorer)
            next_contains = _contained(normalized, scorer.normalize(nxt.source_text), at_end=False)
            next_ok = next_merge.similarity > nxt.similarity or next_contains

        use_next = next_ok and (
            not prev_ok
            or next_contains
            or next_merge.similarity > prev_merge.similarity
        )
        if use_next:
            pending[i + 1] = next_merge
            merged += 1
        elif prev_ok:
            output[-1] = prev_merge
            merged += 1
        else:
            output.append(item)
        i += 1
    return output, merged


def merge_deletes_into_matches(items: Sequence[AlignmentItem],
                               scorer: SimilarityScorer) -> List[AlignmentItem]:
    """
    Absorb Deletes into an adjacent Match whose similarity improves.

    The previous neighbour is the last item already emitted, so a chain of
    deletes can accumulate into one match. When both neighbours improve,
    the higher merged score wins and ties go to the previous match.
    """
    result = list(items)
    total = 0
    while True:
        result, merged = _merge_deletes_once(result, scorer)
        total += merged
        if not merged:
            break
    logger.debug("Boundary delete merge finished", merged=total)
    return result


def merge_inserts_into_matches(items: Sequence[AlignmentItem],
                               scorer: SimilarityScorer) -> List[AlignmentItem]:
    """
    Absorb Inserts into an adjacent Match on the target side.

    A neighbour qualifies when the merged similarity is higher, or when
    the normalized insert is a suffix (previous match) or prefix (next
    match) of that match's normalized source text. The previous match
    is preferred unless the next one qualifies by containment or scores
    strictly higher.
    """
    result = list(items)
    total = 0
    while True:
        result, merged = _merge_inserts_once(result, scorer)
        total += merged
        if not merged:
            break
    logger.debug("Boundary insert merge finished", merged=total)
    return result
