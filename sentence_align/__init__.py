"""
Sentence Alignment Module v1.0.0
================================
Similarity-driven alignment of an original and a revised document at
sentence granularity, for building proofreading errata tables.

Features:
- Anchor-guided greedy matching with adaptive search window
- Rematching of split and merged sentences
- Boundary merging of leftover sentences into neighbouring matches
- Detection of moved content (MoveOut/MoveIn pairs)
- Errata export to JSON, CSV, HTML and Word

Usage:
    from sentence_align import align_sentences
    items = align_sentences(["A.", "B."], ["A.", "C.", "B."])
"""

__version__ = '1.0.0'

from .models import (
    AlignmentItem, AlignmentResult, AlignmentStatistics, AlignmentType,
    Delete, Insert, Match, MoveIn, MoveOut, Sentence, sentences_from_list,
)
from .options import AlignmentOptions
from .similarity import (
    NormalizeOptions, SimilarityScorer, jaccard_similarity, normalize_for_similarity,
)
from .aligner import SentenceAligner, align_sentences, get_alignment_statistics
from .segmenter import load_sentences, read_sentences
from .tokenizers import JiebaTokenizer

__all__ = [
    '__version__',
    'AlignmentItem',
    'AlignmentOptions',
    'AlignmentResult',
    'AlignmentStatistics',
    'AlignmentType',
    'Delete',
    'Insert',
    'JiebaTokenizer',
    'Match',
    'MoveIn',
    'MoveOut',
    'NormalizeOptions',
    'Sentence',
    'SentenceAligner',
    'SimilarityScorer',
    'align_sentences',
    'get_alignment_statistics',
    'jaccard_similarity',
    'load_sentences',
    'normalize_for_similarity',
    'read_sentences',
    'sentences_from_list',
]
