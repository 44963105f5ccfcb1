"""
Sentence Aligner v1.0.0
=======================
Multi-pass sentence alignment of an original and a revised document.

Pipeline:
1. Anchor matching (greedy, window around the expected target position)
2. Adjacent Delete/Insert rematch (split and merged sentences)
3. Non-adjacent Delete/Insert rematch
4. Boundary merge of Deletes, then of Inserts, into neighbouring Matches
5. Movement detection (MoveOut/MoveIn pairs)

Each pass takes an ordered item list and returns a new one.
"""

import time
from dataclasses import replace
from typing import Any, List, Optional, Sequence, Union

from config_logging import get_logger

from .anchor import AnchorMatcher
from .boundary import merge_deletes_into_matches, merge_inserts_into_matches
from .models import (
    AlignmentItem, AlignmentResult, AlignmentStatistics, AlignmentType,
    Sentence, sentences_from_list,
)
from .movement import detect_movements
from .options import AlignmentOptions
from .rematch import rematch_adjacent, rematch_non_adjacent

logger = get_logger('sentence_align.aligner')

SentenceInput = Union[Sequence[str], Sequence[Sentence]]


def as_sentences(items: SentenceInput) -> List[Sentence]:
    """
    Coerce plain strings or Sentence objects to a position-indexed list.

    Sentence indices are rewritten to their list position when they
    disagree with it; line numbers are kept.
    """
    items = list(items or [])
    if all(isinstance(item, str) for item in items):
        return sentences_from_list(items)

    sentences = []
    for pos, item in enumerate(items):
        if isinstance(item, str):
            sentences.append(Sentence(text=item, index=pos, line_start=pos + 1, line_end=pos + 1))
        elif isinstance(item, Sentence):
            sentences.append(item if item.index == pos else replace(item, index=pos))
        else:
            raise TypeError(f"Expected str or Sentence, got {type(item).__name__}")
    return sentences


def get_alignment_statistics(alignment: Sequence[AlignmentItem]) -> AlignmentStatistics:
    """Count alignment items per result type."""
    stats = AlignmentStatistics(total=len(alignment))
    for item in alignment:
        kind = item.kind
        if kind is AlignmentType.MATCH:
            stats.match += 1
        elif kind is AlignmentType.DELETE:
            stats.delete += 1
        elif kind is AlignmentType.INSERT:
            stats.insert += 1
        elif kind is AlignmentType.MOVEIN:
            stats.movein += 1
        elif kind is AlignmentType.MOVEOUT:
            stats.moveout += 1
    return stats


class SentenceAligner:
    """
    Alignment engine running the full pass pipeline.

    A fresh similarity scorer is built per run, so an aligner can be
    reused for any number of document pairs.
    """

    def __init__(self, options: Optional[AlignmentOptions] = None):
        """
        Initialize the aligner.

        Args:
            options: Validated alignment options (defaults when omitted)
        """
        self.options = options or AlignmentOptions()

    def align(self, source: SentenceInput, target: SentenceInput) -> AlignmentResult:
        """
        Align two sentence sequences.

        Args:
            source: Original sentences (strings or Sentence objects)
            target: Revised sentences (strings or Sentence objects)

        Returns:
            AlignmentResult with ordered items and statistics
        """
        source_sentences = as_sentences(source)
        target_sentences = as_sentences(target)
        started = time.time()

        with logger.log_operation('sentence_alignment',
                                  source_count=len(source_sentences),
                                  target_count=len(target_sentences)):
            items = self.run_passes(source_sentences, target_sentences)
            stats = get_alignment_statistics(items)

        logger.info(f"Alignment complete: {stats.total} items "
                    f"(={stats.match}, -{stats.delete}, +{stats.insert}, "
                    f"moved {stats.moveout})")

        return AlignmentResult(
            items=items,
            statistics=stats,
            source_count=len(source_sentences),
            target_count=len(target_sentences),
            runtime_seconds=time.time() - started,
        )

    def run_passes(self, source: Sequence[Sentence], target: Sequence[Sentence]) -> List[AlignmentItem]:
        """Run every pass in order and return the final item list."""
        options = self.options
        scorer = options.build_scorer()
        threshold = options.similarity_threshold

        items = AnchorMatcher(options, scorer).match(source, target)
        logger.debug(f"After anchor matching: {len(items)} items")

        items = rematch_adjacent(items, threshold, scorer)
        items = rematch_non_adjacent(items, threshold, scorer, options.index_range)
        items = merge_deletes_into_matches(items, scorer)
        items = merge_inserts_into_matches(items, scorer)
        logger.debug(f"After repair passes: {len(items)} items")

        return detect_movements(items)


def align_sentences(source: SentenceInput, target: SentenceInput,
                    options: Optional[AlignmentOptions] = None,
                    **overrides: Any) -> List[AlignmentItem]:
    """
    Convenience function for aligning two sentence lists.

    Args:
        source: Original sentences
        target: Revised sentences
        options: Base options (defaults when omitted)
        **overrides: Option fields replacing those of ``options``

    Returns:
        Ordered list of alignment items

    Raises:
        ConfigurationError: If any option value is invalid
    """
    if options is None or overrides:
        base = options.to_dict() if options is not None else {}
        tokenizer = overrides.pop('tokenizer', options.tokenizer if options is not None else None)
        options = AlignmentOptions.from_dict({**base, **overrides}, tokenizer=tokenizer)
    return SentenceAligner(options).align(source, target).items
