"""
Similarity & Normalization v1.0.0
=================================
Comparison-form normalization of sentences and Jaccard similarity over
character or word n-gram sets.

All selection loops built on these primitives scan candidates in a fixed
order and keep strictly greater scores, so ties resolve to the first
candidate encountered.
"""

import re
import unicodedata
from dataclasses import dataclass
from functools import lru_cache
from typing import Callable, Dict, FrozenSet, Optional, Sequence

Tokenizer = Callable[[str], Sequence[str]]

# Joins word n-grams; never occurs in natural text
WORD_NGRAM_SEPARATOR = '\x1f'

# Markdown footnote references [^1] [^abc]
MARKDOWN_FOOTNOTE_RE = re.compile(r'\[\^[^\]]*\]')
# Superscript markers ^1^ ^abc^
SUPERSCRIPT_MARKER_RE = re.compile(r'\^[^^]+\^')

WHITESPACE_RE = re.compile(r'\s')

# ASCII and full-width digits, circled / parenthesized / full-stop numerals
DIGITS_RE = re.compile('[0-9\uff10-\uff19\u2460-\u249b\u24ea\u24f5-\u24fe\u3280-\u3289]')

# ASCII and full-width Latin letters
LATIN_RE = re.compile('[A-Za-z\uff21-\uff3a\uff41-\uff5a]')


@dataclass(frozen=True)
class NormalizeOptions:
    """
    Switches for building the comparison form of a sentence.

    Attributes:
        remove_inner_whitespace: Drop all whitespace inside the sentence
        remove_punctuation: Drop Unicode punctuation (categories P*)
        remove_digits: Drop digits, including circled numerals
        remove_latin: Drop Latin letters
        remove_footnote_markers: Drop [^n] and ^n^ footnote references
    """
    remove_inner_whitespace: bool = True
    remove_punctuation: bool = False
    remove_digits: bool = False
    remove_latin: bool = False
    remove_footnote_markers: bool = False


DEFAULT_NORMALIZE_OPTIONS = NormalizeOptions()


def _strip_punctuation(text: str) -> str:
    return ''.join(ch for ch in text if not unicodedata.category(ch).startswith('P'))


def normalize_for_similarity(text: str, options: Optional[NormalizeOptions] = None) -> str:
    """
    Build the comparison form of a sentence.

    Leading and trailing whitespace is always removed; every other rule
    is controlled by ``options``.

    Args:
        text: Raw sentence text
        options: Normalization switches (defaults strip inner whitespace only)

    Returns:
        Normalized string
    """
    opts = options or DEFAULT_NORMALIZE_OPTIONS
    s = (text or '').strip()
    if opts.remove_footnote_markers:
        s = MARKDOWN_FOOTNOTE_RE.sub('', s)
        s = SUPERSCRIPT_MARKER_RE.sub('', s)
    if opts.remove_inner_whitespace:
        s = WHITESPACE_RE.sub('', s)
    if opts.remove_punctuation:
        s = _strip_punctuation(s)
    if opts.remove_digits:
        s = DIGITS_RE.sub('', s)
    if opts.remove_latin:
        s = LATIN_RE.sub('', s)
    return s


def get_ngrams(text: str, n: int) -> FrozenSet[str]:
    """Character n-gram set; the whole string when shorter than n."""
    if len(text) < n:
        return frozenset([text])
    return frozenset(text[i:i + n] for i in range(len(text) - n + 1))


def get_word_ngrams(text: str, n: int, tokenizer: Tokenizer) -> FrozenSet[str]:
    """
    Word n-gram set over the tokenizer's output.

    Whitespace-only tokens are dropped. An empty token list yields {''};
    fewer than n tokens yield the single joined sequence.
    """
    words = [w for w in tokenizer(text) if w and not w.isspace()]
    if not words:
        return frozenset([''])
    if len(words) < n:
        return frozenset([WORD_NGRAM_SEPARATOR.join(words)])
    return frozenset(
        WORD_NGRAM_SEPARATOR.join(words[i:i + n])
        for i in range(len(words) - n + 1)
    )


def jaccard(ngrams_a: FrozenSet[str], ngrams_b: FrozenSet[str]) -> float:
    """|A ∩ B| / |A ∪ B| of two n-gram sets."""
    intersection = len(ngrams_a & ngrams_b)
    union = len(ngrams_a) + len(ngrams_b) - intersection
    if union == 0:
        return 0.0
    return intersection / union


def jaccard_similarity(
    text_a: str,
    text_b: str,
    n: int = 1,
    granularity: str = 'char',
    tokenizer: Optional[Tokenizer] = None
) -> float:
    """
    Jaccard similarity of two (already normalized) texts.

    Args:
        text_a: First text
        text_b: Second text
        n: n-gram size, values below 1 are treated as 1
        granularity: 'char' or 'word'
        tokenizer: Required for word granularity; without it
                   character n-grams are used

    Returns:
        Similarity in [0, 1]
    """
    n = max(1, int(n))
    if text_a == text_b:
        return 1.0
    if not text_a or not text_b:
        return 0.0

    if granularity == 'word' and tokenizer is not None:
        return jaccard(get_word_ngrams(text_a, n, tokenizer),
                       get_word_ngrams(text_b, n, tokenizer))
    return jaccard(get_ngrams(text_a, n), get_ngrams(text_b, n))


class SimilarityScorer:
    """
    Normalize-then-compare scorer used by every alignment pass.

    Normalized forms and n-gram sets are memoized per raw text, since the
    anchor scan compares each target sentence many times.
    """

    def __init__(
        self,
        normalize_options: Optional[NormalizeOptions] = None,
        n: int = 1,
        granularity: str = 'char',
        tokenizer: Optional[Tokenizer] = None,
        cache_size: int = 65536
    ):
        self.normalize_options = normalize_options or DEFAULT_NORMALIZE_OPTIONS
        self.n = max(1, int(n))
        # Word granularity silently degrades to characters without a tokenizer
        self.granularity = 'word' if (granularity == 'word' and tokenizer is not None) else 'char'
        self.tokenizer = tokenizer
        self._normalized: Dict[str, str] = {}
        self._ngrams = lru_cache(maxsize=cache_size)(self._compute_ngrams)

    def normalize(self, text: str) -> str:
        """Normalized comparison form of ``text`` (memoized)."""
        cached = self._normalized.get(text)
        if cached is None:
            cached = normalize_for_similarity(text, self.normalize_options)
            self._normalized[text] = cached
        return cached

    def _compute_ngrams(self, normalized: str) -> FrozenSet[str]:
        if self.granularity == 'word':
            return get_word_ngrams(normalized, self.n, self.tokenizer)
        return get_ngrams(normalized, self.n)

    def score(self, text_a: str, text_b: str) -> float:
        """Similarity of two raw texts after normalization."""
        a = self.normalize(text_a)
        b = self.normalize(text_b)
        if a == b:
            return 1.0
        if not a or not b:
            return 0.0
        return jaccard(self._ngrams(a), self._ngrams(b))
