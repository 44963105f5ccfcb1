"""
Anchor Matcher v1.0.0
=====================
Single pass, source-order greedy alignment.

Each source sentence is compared against the unused target sentences in
a window centred on the anchor (the target position expected next). A
match moves the anchor just past the matched target; runs of failures
widen the window and eventually fall back to a scan of the whole target.
Target sentences left unused become Insert items threaded by target
order.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Sequence, Set

from config_logging import get_logger

from .models import AlignmentItem, Delete, Insert, Match, Sentence
from .options import AlignmentOptions
from .placement import thread_inserts
from .similarity import SimilarityScorer

logger = get_logger('sentence_align.anchor')

# Non-accepted best above this still pulls the anchor forward
SOFT_DRIFT_SIMILARITY = 0.3
# Near-miss similarity that justifies a global scan after a failure
GLOBAL_SEARCH_NEAR_MISS = 0.5


class MatchState(Enum):
    """Per-sentence states of the anchor matcher."""
    SCANNING = "scanning"
    WINDOW_SEARCH = "window_search"
    GLOBAL_SEARCH = "global_search"
    MATCHED = "matched"
    DELETE_EMITTED = "delete_emitted"


@dataclass
class AnchorState:
    """Mutable state of one anchor matching run."""
    anchor: int = 0
    consecutive_fails: int = 0
    window: int = 0
    used_targets: Set[int] = field(default_factory=set)
    global_searches: int = 0
    phase: MatchState = MatchState.SCANNING


@dataclass
class SearchOutcome:
    """Best candidate seen while scanning for one source sentence."""
    best_similarity: float = 0.0
    best_index: Optional[int] = None
    accept_index: Optional[int] = None

    def offer(self, target_index: int, similarity: float, threshold: float) -> None:
        # Strictly greater keeps the first candidate on ties
        if similarity > self.best_similarity:
            self.best_similarity = similarity
            self.best_index = target_index
            self.accept_index = target_index if similarity >= threshold else None


def current_window(state: AnchorState, options: AlignmentOptions) -> int:
    """Window half-width for the next source sentence."""
    if state.consecutive_fails >= options.consecutive_fail_threshold:
        expansion = min(
            options.max_window_expansion,
            1 + (state.consecutive_fails - options.consecutive_fail_threshold) // 2
        )
        return options.window_size * expansion
    return options.window_size


def should_search_globally(outcome: SearchOutcome, state: AnchorState,
                           options: AlignmentOptions) -> bool:
    """Whether a failed window scan escalates to a scan of the whole target."""
    if outcome.accept_index is not None:
        return False
    return (
        state.consecutive_fails >= options.consecutive_fail_threshold
        or state.window >= options.window_size * 2
        or (outcome.best_similarity > GLOBAL_SEARCH_NEAR_MISS and state.consecutive_fails >= 1)
    )


class AnchorMatcher:
    """
    Greedy anchor-guided matcher producing the initial alignment.

    The result holds Match and Delete items in source order, with Insert
    items for unused target sentences threaded in by target order.
    """

    def __init__(self, options: AlignmentOptions, scorer: Optional[SimilarityScorer] = None):
        self.options = options
        self.scorer = scorer or options.build_scorer()

    def match(self, source: Sequence[Sentence], target: Sequence[Sentence]) -> List[AlignmentItem]:
        """Align ``source`` against ``target``."""
        if not source and not target:
            return []

        options = self.options
        state = AnchorState(window=options.window_size)
        items: List[AlignmentItem] = []
        targets = [t.text for t in target]

        for sentence in source:
            state.phase = MatchState.SCANNING
            window = current_window(state, options)
            if window != state.window:
                logger.debug("Search window resized",
                             source_index=sentence.index,
                             consecutive_fails=state.consecutive_fails,
                             window=window)
            state.window = window
            outcome = self._search(sentence, targets, state)

            if outcome.accept_index is not None:
                items.append(self._emit_match(sentence, target[outcome.accept_index],
                                              outcome.best_similarity))
                state.anchor = outcome.accept_index + options.anchor_offset
                state.used_targets.add(outcome.accept_index)
                state.consecutive_fails = 0
                state.phase = MatchState.MATCHED
            else:
                items.append(Delete(
                    source_text=sentence.text,
                    source_index=sentence.index,
                    source_line=sentence.line_start,
                ))
                if outcome.best_index is not None and outcome.best_similarity > SOFT_DRIFT_SIMILARITY:
                    state.anchor = max(state.anchor, outcome.best_index)
                state.consecutive_fails += 1
                state.phase = MatchState.DELETE_EMITTED

        inserts = [
            Insert(target_text=t.text, target_index=t.index, target_line=t.line_start)
            for t in target
            if t.index not in state.used_targets
        ]
        logger.debug("Anchor matching finished",
                     matched=len(state.used_targets),
                     deleted=len(items) - len(state.used_targets),
                     inserted=len(inserts),
                     global_searches=state.global_searches)
        return thread_inserts(items, inserts)

    def _search(self, sentence: Sentence, targets: List[str], state: AnchorState) -> SearchOutcome:
        """WINDOW_SEARCH, escalating to GLOBAL_SEARCH when warranted."""
        options = self.options
        outcome = SearchOutcome()
        state.phase = MatchState.WINDOW_SEARCH

        start = max(0, state.anchor - state.window)
        end = min(len(targets), state.anchor + state.window + 1)
        self._scan(sentence.text, targets, range(start, end), state, outcome)

        if should_search_globally(outcome, state, options):
            state.phase = MatchState.GLOBAL_SEARCH
            state.global_searches += 1
            logger.debug("Global search triggered",
                         source_index=sentence.index,
                         consecutive_fails=state.consecutive_fails,
                         window=state.window,
                         best_similarity=round(outcome.best_similarity, 4))
            self._scan(sentence.text, targets, range(len(targets)), state, outcome)

        return outcome

    def _scan(self, text: str, targets: List[str], indices: range,
              state: AnchorState, outcome: SearchOutcome) -> None:
        threshold = self.options.similarity_threshold
        score = self.scorer.score
        used = state.used_targets
        for target_index in indices:
            if target_index in used:
                continue
            outcome.offer(target_index, score(text, targets[target_index]), threshold)

    def _emit_match(self, source: Sentence, target: Sentence, similarity: float) -> Match:
        return Match(
            source_text=source.text,
            target_text=target.text,
            similarity=similarity,
            source_indices=(source.index,),
            target_indices=(target.index,),
            source_lines=(source.line_start,),
            target_lines=(target.line_start,),
        )


def anchor_align(source: Sequence[Sentence], target: Sequence[Sentence],
                 options: AlignmentOptions,
                 scorer: Optional[SimilarityScorer] = None) -> List[AlignmentItem]:
    """Run the anchor matcher alone (no repair passes)."""
    return AnchorMatcher(options, scorer).match(source, target)
