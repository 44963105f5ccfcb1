"""
Tests for the Sentence Aligner
==============================
Full pipeline scenarios, the coverage and identity properties of the
result, and match counts across thresholds.
"""

import pytest

from config_logging import ConfigurationError
from sentence_align import align_sentences
from sentence_align.aligner import SentenceAligner, as_sentences, get_alignment_statistics
from sentence_align.models import (
    AlignmentResult, Delete, Insert, Match, MoveIn, MoveOut, Sentence, is_plain_match,
)
from sentence_align.options import AlignmentOptions


PARAGRAPHS = ["abc", "def", "ghi", "jkl", "mno", "pqr"]


@pytest.fixture
def revision_pairs():
    """Document pairs exercising edits, splits, merges and moves."""
    return [
        (["他去了北京。", "天气很好。"], ["他去了北京。", "天气很好。"]),
        (["ABCD"], ["ABCE"]),
        (["X", "Y"], ["X", "Z", "Y"]),
        (["X", "Z", "Y"], ["X", "Y"]),
        (PARAGRAPHS, PARAGRAPHS[2:] + PARAGRAPHS[:2]),
        (["开头。", "今天天气很好，我们去公园散步。", "结尾。"],
         ["开头。", "今天天气很好。", "我们去公园散步。", "结尾。"]),
        (["今天天气很好，我们去公园散步。", "他喜欢读书。"],
         ["今天天气很好。", "我们去公园散步。", "他喜欢读书。"]),
        (["第一句。", "第二句。", "第三句。", "第四句。"],
         ["第四句。", "第二句话。", "新增的一句。", "第一句。"]),
        ([], ["only target"]),
        (["only source"], []),
        ([], []),
    ]


class TestScenarios:
    """Reference scenarios."""

    def test_exact_match(self):
        items = align_sentences(["他去了北京。", "天气很好。"], ["他去了北京。", "天气很好。"])
        assert [type(i) for i in items] == [Match, Match]
        assert all(i.similarity == 1.0 for i in items)

    def test_partial_match_accepted(self):
        items = align_sentences(["ABCD"], ["ABCE"], ngram_size=2, similarity_threshold=0.5)
        assert len(items) == 1
        assert isinstance(items[0], Match)
        assert items[0].similarity == pytest.approx(0.5)

    def test_partial_match_rejected(self):
        items = align_sentences(["ABCD"], ["ABCE"], ngram_size=2, similarity_threshold=0.6)
        assert [type(i) for i in items] == [Delete, Insert]
        assert items[0].source_text == "ABCD"
        assert items[1].target_text == "ABCE"

    def test_simple_insertion(self):
        items = align_sentences(["X", "Y"], ["X", "Z", "Y"])
        assert [type(i) for i in items] == [Match, Insert, Match]
        assert items[1].target_text == "Z"

    def test_simple_deletion(self):
        items = align_sentences(["X", "Z", "Y"], ["X", "Y"])
        assert [type(i) for i in items] == [Match, Delete, Match]
        assert items[1].source_text == "Z"

    def test_movement(self, check_coverage):
        target = PARAGRAPHS[2:] + PARAGRAPHS[:2]
        items = align_sentences(PARAGRAPHS, target)
        assert [type(i) for i in items] == [
            MoveOut, MoveOut, Match, Match, Match, Match, MoveIn, MoveIn
        ]
        # MoveOut keeps the source slot, MoveIn sits where the target order continues
        assert [i.source_indices for i in items[:2]] == [(0,), (1,)]
        assert [i.target_indices for i in items[:2]] == [(4,), (5,)]
        assert [(i.source_indices, i.target_indices) for i in items[2:6]] == [
            ((2,), (0,)), ((3,), (1,)), ((4,), (2,)), ((5,), (3,))
        ]
        assert [i.original_source_index for i in items[6:]] == [0, 1]
        assert sum(isinstance(i, MoveOut) for i in items) == sum(isinstance(i, MoveIn) for i in items)
        check_coverage(items, 6, 6)

    def test_split_sentence_rematched(self):
        items = align_sentences(
            ["开头。", "今天天气很好，我们去公园散步。", "结尾。"],
            ["开头。", "今天天气很好。", "我们去公园散步。", "结尾。"],
        )
        assert [type(i) for i in items] == [Match, Match, Match]
        assert items[1].source_indices == (1,)
        assert items[1].target_indices == (1, 2)
        assert items[1].target_lines == (2, 3)
        assert items[1].similarity == pytest.approx(13 / 14)


class TestProperties:
    """Whole-result properties and threshold behavior."""

    def test_coverage(self, revision_pairs, check_coverage):
        for source, target in revision_pairs:
            check_coverage(align_sentences(source, target), len(source), len(target))

    @pytest.mark.parametrize("threshold", [0.0, 0.3, 0.6, 0.9, 1.0])
    def test_coverage_any_threshold(self, revision_pairs, check_coverage, threshold):
        for source, target in revision_pairs:
            items = align_sentences(source, target, similarity_threshold=threshold)
            check_coverage(items, len(source), len(target))

    def test_identity(self):
        text = ["第一句。", "第二句。", "第一句。", "最后一句！"]
        items = align_sentences(text, list(text))
        assert all(is_plain_match(i) for i in items)
        assert all(i.similarity == 1.0 for i in items)
        assert [i.source_indices for i in items] == [i.target_indices for i in items]

    def test_match_count_by_threshold(self):
        """
        Match counts for one input across rising thresholds.

        Fewer matches at a higher threshold is typical but not guaranteed:
        a repair pass may merge two sentences into one Match at one
        threshold and leave them as two Matches at a lower one. This pins
        the counts for an input without merges.
        """
        source = ["ABCD", "EFGH", "IJKL"]
        target = ["ABCX", "EFYZ", "IJKL"]
        counts = [
            sum(is_plain_match(i) for i in align_sentences(source, target, similarity_threshold=t))
            for t in (0.3, 0.5, 0.7, 0.9)
        ]
        assert counts == [3, 2, 1, 1]

    def test_deterministic(self, revision_pairs):
        for source, target in revision_pairs:
            assert align_sentences(source, target) == align_sentences(source, target)


class TestSentenceAligner:
    """Tests for the SentenceAligner class."""

    def test_result(self):
        result = SentenceAligner().align(["X", "Y"], ["X", "Z", "Y"])
        assert isinstance(result, AlignmentResult)
        assert result.source_count == 2
        assert result.target_count == 3
        assert result.statistics.match == 2
        assert result.statistics.insert == 1
        assert result.runtime_seconds >= 0

    def test_result_to_dict(self):
        data = SentenceAligner().align(["X"], ["Y"]).to_dict()
        assert [item['type'] for item in data['alignment']] == ['delete', 'insert']
        assert data['statistics']['total'] == 2

    def test_sentence_input_keeps_line_numbers(self):
        source = [Sentence("X", 0, line_start=10), Sentence("Y", 1, line_start=12)]
        target = [Sentence("X", 0, line_start=3), Sentence("Y", 1, line_start=4)]
        items = SentenceAligner().align(source, target).items
        assert [i.source_lines for i in items] == [(10,), (12,)]
        assert [i.target_lines for i in items] == [(3,), (4,)]

    def test_options_used(self):
        aligner = SentenceAligner(AlignmentOptions(ngram_size=2, similarity_threshold=0.5))
        assert aligner.align(["ABCD"], ["ABCE"]).statistics.match == 1

    def test_invalid_option_rejected_before_matching(self):
        with pytest.raises(ConfigurationError):
            align_sentences(["a"], ["a"], window_size=0)

    def test_unknown_override_rejected(self):
        with pytest.raises(ConfigurationError):
            align_sentences(["a"], ["a"], windowsize=3)

    def test_overrides_apply_on_top_of_options(self):
        base = AlignmentOptions(ngram_size=2)
        items = align_sentences(["ABCD"], ["ABCE"], options=base, similarity_threshold=0.5)
        assert isinstance(items[0], Match)


class TestHelpers:

    def test_as_sentences_from_strings(self):
        sentences = as_sentences(["a", "b"])
        assert [(s.index, s.line_start) for s in sentences] == [(0, 1), (1, 2)]

    def test_as_sentences_reindexes(self):
        sentences = as_sentences([Sentence("a", 5, line_start=7)])
        assert sentences[0].index == 0
        assert sentences[0].line_start == 7

    def test_as_sentences_rejects_other_types(self):
        with pytest.raises(TypeError):
            as_sentences([1, 2])

    def test_statistics(self):
        items = align_sentences(PARAGRAPHS, PARAGRAPHS[2:] + PARAGRAPHS[:2])
        stats = get_alignment_statistics(items)
        assert stats.to_dict() == {
            'total': 8, 'match': 4, 'delete': 0, 'insert': 0, 'movein': 2, 'moveout': 2
        }
        assert stats.changed == 4
