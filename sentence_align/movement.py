"""
Movement Detector v1.0.0
========================
Finds matched content that was relocated between the two versions.

Single-target Match items are grouped, in result order, into blocks of
consecutive target indices. The smallest block is repeatedly moved next
to the block(s) it continues in target order; every relocated match is
split into a MoveOut (kept at its source-order slot) and a MoveIn
(placed at the slot where the target order continues).
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

from config_logging import get_logger

from .models import AlignmentItem, Match, MoveIn, MoveOut, is_plain_match, source_index_of
from .placement import Placement, weave

logger = get_logger('sentence_align.movement')

MAX_ITERATIONS = 100


@dataclass
class BlockEntry:
    """A groupable Match with its result position and target index."""
    item: Match
    position: int
    target_index: int


@dataclass
class Block:
    """Run of entries whose target indices increase by exactly one."""
    entries: List[BlockEntry]

    @property
    def size(self) -> int:
        return len(self.entries)

    @property
    def min_target(self) -> int:
        return self.entries[0].target_index

    @property
    def max_target(self) -> int:
        return self.entries[-1].target_index

    @property
    def first_position(self) -> int:
        return self.entries[0].position

    @property
    def last_position(self) -> int:
        return self.entries[-1].position


def collect_entries(alignment: Sequence[AlignmentItem]) -> List[BlockEntry]:
    """Plain Match items owning exactly one target index."""
    entries = []
    for pos, item in enumerate(alignment):
        if is_plain_match(item) and len(item.target_indices) == 1:
            entries.append(BlockEntry(item, pos, item.target_indices[0]))
    return entries


def group_into_blocks(entries: Sequence[BlockEntry]) -> List[Block]:
    """Group entries (sorted by position) into target-contiguous blocks."""
    blocks: List[Block] = []
    for entry in sorted(entries, key=lambda e: e.position):
        if blocks and entry.target_index == blocks[-1].max_target + 1:
            blocks[-1].entries.append(entry)
        else:
            blocks.append(Block([entry]))
    return blocks


def find_placement(blocks: Sequence[Block], s_idx: int) -> Optional[int]:
    """
    Slot where block ``blocks[s_idx]`` continues the target order.

    A bridging placement between a predecessor P and a successor N is
    preferred; otherwise a single neighbouring block is used. Among
    candidates the largest merged size wins (first one on ties).

    Returns:
        The slot (insert-before position), or None
    """
    smallest = blocks[s_idx]
    best_slot: Optional[int] = None
    best_size = 0

    for p_idx, prev in enumerate(blocks):
        if p_idx == s_idx or prev.max_target + 1 != smallest.min_target:
            continue
        for n_idx, nxt in enumerate(blocks):
            if n_idx in (s_idx, p_idx) or smallest.max_target + 1 != nxt.min_target:
                continue
            merged_size = prev.size + smallest.size + nxt.size
            if merged_size > best_size:
                best_slot = nxt.first_position
                best_size = merged_size

    if best_slot is not None:
        return best_slot

    for t_idx, other in enumerate(blocks):
        if t_idx == s_idx:
            continue
        if smallest.max_target + 1 == other.min_target:
            slot = other.first_position
        elif other.max_target + 1 == smallest.min_target:
            slot = other.last_position + 1
        else:
            continue
        merged_size = smallest.size + other.size
        if merged_size > best_size:
            best_slot = slot
            best_size = merged_size

    return best_slot


def split_move(item: Match) -> Tuple[MoveOut, MoveIn]:
    """MoveOut/MoveIn pair carrying every field of ``item``."""
    fields = dict(
        source_text=item.source_text,
        target_text=item.target_text,
        similarity=item.similarity,
        source_indices=item.source_indices,
        target_indices=item.target_indices,
        source_lines=item.source_lines,
        target_lines=item.target_lines,
    )
    move_out = MoveOut(original_target_index=item.target_indices[0], **fields)
    move_in = MoveIn(original_source_index=item.source_indices[0], **fields)
    return move_out, move_in


def detect_movements(alignment: Sequence[AlignmentItem]) -> List[AlignmentItem]:
    """
    Replace relocated matches with MoveOut/MoveIn pairs.

    Args:
        alignment: Alignment after the repair passes

    Returns:
        New alignment list; an equal copy when nothing moved
    """
    entries = collect_entries(alignment)
    if len(entries) < 2:
        return list(alignment)

    relocations: List[Tuple[BlockEntry, int]] = []
    for _ in range(MAX_ITERATIONS):
        blocks = group_into_blocks(entries)
        if len(blocks) <= 1:
            break

        min_size = min(block.size for block in blocks)
        chosen: Optional[Tuple[Block, int]] = None
        for s_idx, block in enumerate(blocks):
            if block.size != min_size:
                continue
            slot = find_placement(blocks, s_idx)
            if slot is not None:
                chosen = (block, slot)
                break

        if chosen is None:
            break

        block, slot = chosen
        logger.debug("Relocating block",
                     target_range=[block.min_target, block.max_target],
                     size=block.size, slot=slot)
        moved_positions = set()
        for entry in block.entries:
            if source_index_of(entry.item) is not None:
                relocations.append((entry, slot))
            moved_positions.add(entry.position)
        entries = [e for e in entries if e.position not in moved_positions]

    if not relocations:
        return list(alignment)

    items = list(alignment)
    placements: List[Placement] = []
    for entry, slot in relocations:
        move_out, move_in = split_move(entry.item)
        items[entry.position] = move_out
        placements.append((slot, (entry.target_index,), move_in))

    logger.debug("Movement detection finished", relocated=len(relocations))
    return weave(items, placements)
