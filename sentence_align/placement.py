"""
Ordered placement of target-side items.

Inserts and MoveIns are threaded into a source-ordered alignment in one
rebuild: every placement names the slot it goes before, slots are
resolved against a sorted index of owned target positions, and the new
list is assembled in a single pass.
"""

from bisect import bisect_left
from collections import defaultdict
from typing import Any, Dict, Iterable, List, Sequence, Tuple

from .models import AlignmentItem, Insert

# (slot, sort key, item); slot p means "before items[p]", len(items) is the end
Placement = Tuple[int, Tuple[Any, ...], AlignmentItem]


def weave(items: Sequence[AlignmentItem], placements: Iterable[Placement]) -> List[AlignmentItem]:
    """Return ``items`` with every placement inserted at its slot."""
    by_slot: Dict[int, List[Tuple[Tuple[Any, ...], AlignmentItem]]] = defaultdict(list)
    for slot, key, item in placements:
        by_slot[slot].append((key, item))

    if not by_slot:
        return list(items)

    result: List[AlignmentItem] = []
    for pos in range(len(items) + 1):
        pending = by_slot.get(pos)
        if pending:
            pending.sort(key=lambda entry: entry[0])
            result.extend(item for _, item in pending)
        if pos < len(items):
            result.append(items[pos])
    return result


def target_owner_positions(items: Sequence[AlignmentItem]) -> Dict[int, int]:
    """Map each owned target index to the position of the item owning it."""
    owners: Dict[int, int] = {}
    for pos, item in enumerate(items):
        for target_index in item.target_side():
            owners[target_index] = pos
    return owners


def thread_inserts(items: Sequence[AlignmentItem], inserts: Iterable[Insert]) -> List[AlignmentItem]:
    """
    Thread Insert items into a source-ordered alignment.

    Each insert goes immediately after the item owning the nearest smaller
    target index; consecutive inserts chain after one another in target
    order. Inserts with no smaller owned target index go to the end of the
    list, after any chain attached to the last item.
    """
    owners = target_owner_positions(items)
    resolved = sorted(owners)
    end = len(items)

    placements: List[Placement] = []
    for insert in inserts:
        k = bisect_left(resolved, insert.target_index)
        if k:
            slot = owners[resolved[k - 1]] + 1
            placements.append((slot, (0, insert.target_index), insert))
        else:
            placements.append((end, (1, insert.target_index), insert))
    return weave(items, placements)
