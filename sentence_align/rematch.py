"""
Delete/Insert Rematching v1.0.0
===============================
Repair passes that turn leftover Delete/Insert items into Match items.

- Adjacent rematch: inside each run of consecutive Delete/Insert items,
  try single sentences and short merged runs on both sides, so that a
  sentence split or merged by the editor still pairs up.
- Non-adjacent rematch: pair remaining Deletes and Inserts that are
  close by original index or by result position, regardless of what
  lies between them.

Both passes are greedy: candidates are visited in a fixed order and the
first strictly best partner wins.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence, Set, Tuple

from config_logging import get_logger

from .models import AlignmentItem, Delete, Insert, Match
from .similarity import SimilarityScorer

logger = get_logger('sentence_align.rematch')

# Side lengths up to which contiguous pairs / the whole side are merged
PAIR_MERGE_MAX_RUN = 3
FULL_MERGE_MAX_RUN = 2


@dataclass
class Candidate:
    """One or more contiguous run members offered as a single sentence."""
    members: Tuple[int, ...]   # positions within the side's item list
    text: str

    @property
    def size(self) -> int:
        return len(self.members)


def build_match(deletes: Sequence[Delete], inserts: Sequence[Insert], similarity: float) -> Match:
    """Match carrying the concatenated texts, indices and line numbers."""
    return Match(
        source_text=''.join(d.source_text for d in deletes),
        target_text=''.join(i.target_text for i in inserts),
        similarity=similarity,
        source_indices=tuple(d.source_index for d in deletes),
        target_indices=tuple(i.target_index for i in inserts),
        source_lines=tuple(d.source_line for d in deletes),
        target_lines=tuple(i.target_line for i in inserts),
    )


def generate_candidates(texts: Sequence[str]) -> List[Candidate]:
    """
    Candidates for one side of a run.

    Every single item; every contiguous pair when the side has at most
    three items; the whole side when it has at most two (deduplicated
    against the pair). Returned longest first, stable within a size.
    """
    count = len(texts)
    candidates = [Candidate((i,), texts[i]) for i in range(count)]

    if count <= PAIR_MERGE_MAX_RUN:
        for start in range(count - 1):
            candidates.append(Candidate((start, start + 1), texts[start] + texts[start + 1]))

    if 1 < count <= FULL_MERGE_MAX_RUN:
        everything = tuple(range(count))
        if not any(c.members == everything for c in candidates):
            candidates.append(Candidate(everything, ''.join(texts)))

    candidates.sort(key=lambda c: -c.size)
    return candidates


def _pair_run(deletes: List[Delete], inserts: List[Insert], threshold: float,
              scorer: SimilarityScorer) -> List[Tuple[Candidate, Candidate, float]]:
    """Greedy assignment of delete candidates to insert candidates."""
    delete_candidates = generate_candidates([d.source_text for d in deletes])
    insert_candidates = generate_candidates([i.target_text for i in inserts])

    used_deletes: Set[int] = set()
    used_inserts: Set[int] = set()
    pairs: List[Tuple[Candidate, Candidate, float]] = []

    for d_candidate in delete_candidates:
        if used_deletes.intersection(d_candidate.members):
            continue

        best: Optional[Candidate] = None
        best_similarity = 0.0
        for i_candidate in insert_candidates:
            if used_inserts.intersection(i_candidate.members):
                continue
            similarity = scorer.score(d_candidate.text, i_candidate.text)
            if similarity > best_similarity and similarity >= threshold:
                best_similarity = similarity
                best = i_candidate

        if best is not None:
            pairs.append((d_candidate, best, best_similarity))
            used_deletes.update(d_candidate.members)
            used_inserts.update(best.members)

    return pairs


def _rebuild_run(run: List[AlignmentItem], deletes: List[Delete], inserts: List[Insert],
                 pairs: List[Tuple[Candidate, Candidate, float]]) -> List[AlignmentItem]:
    """Replace paired members with Matches at the slot of their first delete."""
    match_at: Dict[int, Match] = {}
    consumed_deletes: Set[int] = set()
    consumed_inserts: Set[int] = set()
    for d_candidate, i_candidate, similarity in pairs:
        match_at[d_candidate.members[0]] = build_match(
            [deletes[m] for m in d_candidate.members],
            [inserts[m] for m in i_candidate.members],
            similarity,
        )
        consumed_deletes.update(d_candidate.members)
        consumed_inserts.update(i_candidate.members)

    rebuilt: List[AlignmentItem] = []
    d_counter = 0
    i_counter = 0
    for item in run:
        if isinstance(item, Delete):
            if d_counter in match_at:
                rebuilt.append(match_at[d_counter])
            elif d_counter not in consumed_deletes:
                rebuilt.append(item)
            d_counter += 1
        else:
            if i_counter not in consumed_inserts:
                rebuilt.append(item)
            i_counter += 1
    return rebuilt


def rematch_adjacent(alignment: Sequence[AlignmentItem], threshold: float,
                     scorer: SimilarityScorer) -> List[AlignmentItem]:
    """
    Rematch runs of consecutive Delete/Insert items.

    Args:
        alignment: Alignment to repair
        threshold: Minimum similarity for a pairing
        scorer: Similarity scorer of the current run

    Returns:
        New alignment list
    """
    result: List[AlignmentItem] = []
    rematched = 0
    i = 0
    while i < len(alignment):
        if not isinstance(alignment[i], (Delete, Insert)):
            result.append(alignment[i])
            i += 1
            continue

        start = i
        while i < len(alignment) and isinstance(alignment[i], (Delete, Insert)):
            i += 1
        run = list(alignment[start:i])
        deletes = [item for item in run if isinstance(item, Delete)]
        inserts = [item for item in run if isinstance(item, Insert)]

        if not deletes or not inserts:
            result.extend(run)
            continue

        pairs = _pair_run(deletes, inserts, threshold, scorer)
        rematched += len(pairs)
        result.extend(_rebuild_run(run, deletes, inserts, pairs) if pairs else run)

    logger.debug("Adjacent rematch finished", matches_created=rematched)
    return result


def rematch_non_adjacent(alignment: Sequence[AlignmentItem], threshold: float,
                         scorer: SimilarityScorer, index_range: int) -> List[AlignmentItem]:
    """
    Pair leftover Deletes and Inserts that are close but not adjacent.

    An insert is admissible for a delete when their original indices, or
    their positions in the alignment, differ by at most ``index_range``.
    Deletes are visited by ascending source index, inserts by ascending
    target index; the first strictly best admissible insert at or above
    ``threshold`` wins.
    """
    deletes = [(pos, item) for pos, item in enumerate(alignment) if isinstance(item, Delete)]
    inserts = [(pos, item) for pos, item in enumerate(alignment) if isinstance(item, Insert)]
    if not deletes or not inserts:
        return list(alignment)

    deletes.sort(key=lambda entry: entry[1].source_index)
    inserts.sort(key=lambda entry: entry[1].target_index)

    matched_inserts: Set[int] = set()
    match_at: Dict[int, Match] = {}

    for d_pos, d_item in deletes:
        best_pos: Optional[int] = None
        best_similarity = 0.0
        for i_pos, i_item in inserts:
            if i_pos in matched_inserts:
                continue
            index_diff = abs(d_item.source_index - i_item.target_index)
            position_diff = abs(d_pos - i_pos)
            if index_diff > index_range and position_diff > index_range:
                continue
            similarity = scorer.score(d_item.source_text, i_item.target_text)
            if similarity > best_similarity and similarity >= threshold:
                best_similarity = similarity
                best_pos = i_pos

        if best_pos is not None:
            matched_inserts.add(best_pos)
            match_at[d_pos] = build_match([d_item], [alignment[best_pos]], best_similarity)

    if not match_at:
        return list(alignment)

    logger.debug("Non-adjacent rematch finished", matches_created=len(match_at))
    return [
        match_at.get(pos, item)
        for pos, item in enumerate(alignment)
        if pos not in matched_inserts
    ]
