"""
Shared fixtures for the ProofAlign test suite.
"""

import sys
from pathlib import Path
from typing import List, Sequence

import pytest

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from sentence_align.models import AlignmentItem
from sentence_align.options import AlignmentOptions


@pytest.fixture
def default_options() -> AlignmentOptions:
    """Default alignment options."""
    return AlignmentOptions()


@pytest.fixture
def scorer(default_options):
    """Character unigram scorer with default normalization."""
    return default_options.build_scorer()


@pytest.fixture
def check_coverage():
    """Assert every source and target index is owned exactly once."""
    def _check(items: Sequence[AlignmentItem], source_count: int, target_count: int):
        source_side: List[int] = []
        target_side: List[int] = []
        for item in items:
            source_side.extend(item.source_side())
            target_side.extend(item.target_side())
        assert sorted(source_side) == list(range(source_count))
        assert sorted(target_side) == list(range(target_count))
    return _check
