"""
Alignment Options v1.0.0
========================
Validated configuration surface of the aligner.

Options are checked when constructed, so an invalid value is rejected
with ConfigurationError before any matching work starts.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional

from config_logging import ConfigurationError

from .similarity import NormalizeOptions, SimilarityScorer, Tokenizer

GRANULARITIES = ('char', 'word')

# Original camelCase option names accepted by from_dict()
CAMEL_CASE_KEYS = {
    'windowSize': 'window_size',
    'similarityThreshold': 'similarity_threshold',
    'ngramSize': 'ngram_size',
    'ngramGranularity': 'ngram_granularity',
    'offset': 'anchor_offset',
    'anchorOffset': 'anchor_offset',
    'maxWindowExpansion': 'max_window_expansion',
    'consecutiveFailThreshold': 'consecutive_fail_threshold',
    'removeInnerWhitespace': 'remove_inner_whitespace',
    'removePunctuation': 'remove_punctuation',
    'removeDigits': 'remove_digits',
    'removeLatin': 'remove_latin',
    'removeFootnoteMarkers': 'remove_footnote_markers',
}

_TRUE_VALUES = ('1', 'true', 'yes', 'on')
_FALSE_VALUES = ('0', 'false', 'no', 'off')


@dataclass(frozen=True)
class AlignmentOptions:
    """
    Parameters of one alignment run.

    Attributes:
        window_size: Half-width of the search window around the anchor
        similarity_threshold: Minimum similarity accepted as a match (0.0 to 1.0)
        ngram_size: n-gram size for Jaccard similarity
        ngram_granularity: 'char' or 'word' (word needs a tokenizer)
        anchor_offset: Added to the matched target index to form the next anchor
        max_window_expansion: Upper bound of the window multiplier
        consecutive_fail_threshold: Failures before the window starts to widen
        remove_inner_whitespace: Normalizer switch (default on)
        remove_punctuation: Normalizer switch
        remove_digits: Normalizer switch
        remove_latin: Normalizer switch
        remove_footnote_markers: Normalizer switch
        tokenizer: Word tokenizer for word granularity
    """
    window_size: int = 10
    similarity_threshold: float = 0.6
    ngram_size: int = 1
    ngram_granularity: str = 'char'
    anchor_offset: int = 1
    max_window_expansion: int = 3
    consecutive_fail_threshold: int = 3
    remove_inner_whitespace: bool = True
    remove_punctuation: bool = False
    remove_digits: bool = False
    remove_latin: bool = False
    remove_footnote_markers: bool = False
    tokenizer: Optional[Tokenizer] = field(default=None, compare=False, repr=False)

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """Raise ConfigurationError on the first invalid value."""
        for name in ('window_size', 'ngram_size', 'max_window_expansion',
                     'consecutive_fail_threshold'):
            _require_int(name, getattr(self, name), minimum=1)
        _require_int('anchor_offset', self.anchor_offset, minimum=0)

        threshold = self.similarity_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
            raise ConfigurationError(
                f"similarity_threshold must be a number, got {threshold!r}",
                field='similarity_threshold')
        if not 0.0 <= threshold <= 1.0:
            raise ConfigurationError(
                f"similarity_threshold must be between 0 and 1, got {threshold}",
                field='similarity_threshold')

        if self.ngram_granularity not in GRANULARITIES:
            raise ConfigurationError(
                f"ngram_granularity must be one of {', '.join(GRANULARITIES)}, "
                f"got {self.ngram_granularity!r}",
                field='ngram_granularity')

        for name in ('remove_inner_whitespace', 'remove_punctuation', 'remove_digits',
                     'remove_latin', 'remove_footnote_markers'):
            if not isinstance(getattr(self, name), bool):
                raise ConfigurationError(f"{name} must be a boolean", field=name)

        if self.tokenizer is not None and not callable(self.tokenizer):
            raise ConfigurationError("tokenizer must be callable", field='tokenizer')

    @property
    def index_range(self) -> int:
        """Admissible distance for the non-adjacent rematch pass."""
        return self.window_size

    def normalize_options(self) -> NormalizeOptions:
        """Normalizer switches of these options."""
        return NormalizeOptions(
            remove_inner_whitespace=self.remove_inner_whitespace,
            remove_punctuation=self.remove_punctuation,
            remove_digits=self.remove_digits,
            remove_latin=self.remove_latin,
            remove_footnote_markers=self.remove_footnote_markers,
        )

    def build_scorer(self) -> SimilarityScorer:
        """Fresh memoizing scorer for one alignment run."""
        return SimilarityScorer(
            normalize_options=self.normalize_options(),
            n=self.ngram_size,
            granularity=self.ngram_granularity,
            tokenizer=self.tokenizer,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization (tokenizer omitted)."""
        return {
            f.name: getattr(self, f.name)
            for f in fields(self)
            if f.name != 'tokenizer'
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]],
                  tokenizer: Optional[Tokenizer] = None) -> 'AlignmentOptions':
        """
        Build options from a mapping.

        Accepts snake_case names and the camelCase names used by the
        editor extension settings. Unknown keys are rejected.
        """
        if data is not None and not isinstance(data, Mapping):
            raise ConfigurationError("options must be an object", field='options')
        known = {f.name for f in fields(cls)} - {'tokenizer'}
        kwargs: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            name = CAMEL_CASE_KEYS.get(key, key)
            if name not in known:
                raise ConfigurationError(f"Unknown alignment option: {key}", field=key)
            kwargs[name] = value
        return cls(tokenizer=tokenizer, **kwargs)

    @classmethod
    def from_env(cls, prefix: str = 'PA_ALIGN_',
                 environ: Optional[Mapping[str, str]] = None) -> 'AlignmentOptions':
        """Load options from environment variables such as PA_ALIGN_WINDOW_SIZE."""
        env = os.environ if environ is None else environ
        kwargs: Dict[str, Any] = {}
        for f in fields(cls):
            if f.name == 'tokenizer':
                continue
            raw = env.get(prefix + f.name.upper())
            if raw is None:
                continue
            kwargs[f.name] = _coerce(f.name, raw, type(f.default))
        return cls(**kwargs)


def _require_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(f"{name} must be an integer, got {value!r}", field=name)
    if value < minimum:
        raise ConfigurationError(f"{name} must be >= {minimum}, got {value}", field=name)


def _coerce(name: str, raw: str, kind: type) -> Any:
    """Convert an environment string to the option's type."""
    text = raw.strip()
    if kind is bool:
        lowered = text.lower()
        if lowered in _TRUE_VALUES:
            return True
        if lowered in _FALSE_VALUES:
            return False
        raise ConfigurationError(f"{name} must be a boolean, got {raw!r}", field=name)
    if kind is str:
        return text
    try:
        return kind(text)
    except ValueError:
        raise ConfigurationError(f"{name} must be a {kind.__name__}, got {raw!r}", field=name)
