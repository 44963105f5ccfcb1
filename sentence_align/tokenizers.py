"""
Word tokenizer adapters for word-granularity similarity.

jieba is an optional dependency (``pip install proofalign[word]``) and is
imported only when a tokenizer is actually built.
"""

from typing import List

from config_logging import ConfigurationError, get_logger

logger = get_logger('sentence_align.tokenizers')

CUT_MODES = ('default', 'search', 'all')


class JiebaTokenizer:
    """
    Callable tokenizer backed by jieba.

    Args:
        cut_mode: 'default' (accurate mode), 'search' (search-engine mode,
                  long words cut again) or 'all' (every possible word)
        hmm: Use the HMM model for unknown words
    """

    def __init__(self, cut_mode: str = 'default', hmm: bool = True):
        if cut_mode not in CUT_MODES:
            raise ConfigurationError(
                f"cut_mode must be one of {', '.join(CUT_MODES)}, got {cut_mode!r}",
                field='cut_mode')
        try:
            import jieba
        except ImportError as e:
            raise ConfigurationError(
                "Word granularity with JiebaTokenizer requires the 'jieba' package "
                "(pip install jieba)", field='tokenizer') from e

        self.cut_mode = cut_mode
        self.hmm = hmm
        self._jieba = jieba
        logger.debug(f"jieba tokenizer ready (mode={cut_mode}, hmm={hmm})")

    def __call__(self, text: str) -> List[str]:
        if self.cut_mode == 'search':
            tokens = self._jieba.cut_for_search(text, HMM=self.hmm)
        elif self.cut_mode == 'all':
            tokens = self._jieba.cut(text, cut_all=True)
        else:
            tokens = self._jieba.cut(text, cut_all=False, HMM=self.hmm)
        return [t for t in tokens if t.strip()]

    def __repr__(self) -> str:
        return f"JiebaTokenizer(cut_mode={self.cut_mode!r}, hmm={self.hmm})"
