"""
Tests for the Movement Detector
===============================
Block grouping, placement search and MoveOut/MoveIn emission.
"""

from sentence_align.models import Match, MoveIn, MoveOut
from sentence_align.movement import (
    collect_entries,
    detect_movements,
    find_placement,
    group_into_blocks,
    split_move,
)
from tests.builders import delete, insert, match


def matches_for(targets):
    """Matches in source order pointing at the given target indices."""
    return [match(f"s{t}", f"s{t}", 1.0, pos, t) for pos, t in enumerate(targets)]


class TestGrouping:

    def test_blocks_of_consecutive_targets(self):
        blocks = group_into_blocks(collect_entries(matches_for([4, 5, 0, 1, 2, 3])))
        assert [[e.target_index for e in b.entries] for b in blocks] == [[4, 5], [0, 1, 2, 3]]
        assert (blocks[1].first_position, blocks[1].last_position) == (2, 5)

    def test_non_matches_ignored(self):
        items = [match("a", "a", 1.0, 0, 0), delete("x", 1), insert("y", 1),
                 match("b", "b", 1.0, 2, 2)]
        entries = collect_entries(items)
        assert [e.position for e in entries] == [0, 3]

    def test_multi_target_matches_ignored(self):
        merged = Match("ab", "ab", 1.0, (0,), (0, 1), (1,), (1, 2))
        assert collect_entries([merged]) == []

    def test_multi_source_match_grouped(self):
        merged = Match("ab", "ab", 1.0, (0, 1), (0,), (1, 2), (1,))
        items = [merged, match("c", "c", 1.0, 2, 1)]
        blocks = group_into_blocks(collect_entries(items))
        assert [[e.target_index for e in b.entries] for b in blocks] == [[0, 1]]


class TestFindPlacement:

    def test_bridging_placement(self):
        blocks = group_into_blocks(collect_entries(matches_for([0, 1, 4, 2, 3, 5])))
        # [0,1] [4] [2,3] [5]: block [4] bridges [2,3] and [5]
        assert find_placement(blocks, 1) == 5

    def test_after_single_block(self):
        blocks = group_into_blocks(collect_entries(matches_for([4, 5, 0, 1, 2, 3])))
        assert find_placement(blocks, 0) == 6

    def test_before_single_block(self):
        blocks = group_into_blocks(collect_entries(matches_for([2, 3, 4, 0, 1])))
        # [2,3,4] [0,1]: [0,1] continues into [2,3,4], so it goes before position 0
        assert find_placement(blocks, 1) == 0

    def test_no_placement(self):
        blocks = group_into_blocks(collect_entries(matches_for([0, 1, 2, 3, 5])))
        assert len(blocks) == 2
        assert find_placement(blocks, 1) is None
        blocks = group_into_blocks(collect_entries(matches_for([0, 1, 3, 4, 6])))
        assert find_placement(blocks, 2) is None


class TestSplitMove:

    def test_pair_carries_fields(self):
        original = match("abc", "abd", 0.5, 3, 7)
        move_out, move_in = split_move(original)
        assert isinstance(move_out, MoveOut)
        assert isinstance(move_in, MoveIn)
        assert move_out.original_target_index == 7
        assert move_in.original_source_index == 3
        assert move_out.source_side() == (3,)
        assert move_out.target_side() == ()
        assert move_in.source_side() == ()
        assert move_in.target_side() == (7,)
        assert move_in.similarity == 0.5


class TestDetectMovements:

    def test_no_movement_returns_equal_list(self):
        items = matches_for([0, 1, 2, 3])
        assert detect_movements(items) == items

    def test_fewer_than_two_matches(self):
        items = [match("a", "a", 1.0, 0, 0), delete("b", 1)]
        assert detect_movements(items) == items

    def test_moved_pair(self, check_coverage):
        items = matches_for([4, 5, 0, 1, 2, 3])
        result = detect_movements(items)
        assert [type(i) for i in result] == [
            MoveOut, MoveOut, Match, Match, Match, Match, MoveIn, MoveIn
        ]
        assert [i.source_indices[0] for i in result[:2]] == [0, 1]
        assert [i.target_indices[0] for i in result[-2:]] == [4, 5]
        check_coverage(result, 6, 6)

    def test_bridged_single_sentence(self, check_coverage):
        items = matches_for([0, 1, 4, 2, 3, 5])
        result = detect_movements(items)
        kinds = [type(i).__name__ for i in result]
        assert kinds == ['Match', 'Match', 'MoveOut', 'Match', 'Match', 'MoveIn', 'Match']
        assert result[5].target_indices == (4,)
        check_coverage(result, 6, 6)

    def test_moved_block_before_others(self, check_coverage):
        items = matches_for([2, 3, 4, 0, 1])
        result = detect_movements(items)
        assert [type(i).__name__ for i in result] == [
            'MoveIn', 'MoveIn', 'Match', 'Match', 'Match', 'MoveOut', 'MoveOut'
        ]
        check_coverage(result, 5, 5)
