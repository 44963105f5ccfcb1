"""
Line-based sentence loading.

Documents prepared for proofreading comparison usually hold one sentence
per line (the output of an upstream sentence splitter). Each non-blank
line becomes one Sentence carrying its 1-based line number.
"""

import os
from typing import List

from config_logging import FileError, get_logger

from .models import Sentence

logger = get_logger('sentence_align.segmenter')


def load_sentences(text: str, skip_blank: bool = True) -> List[Sentence]:
    """
    Split text into sentences, one per line.

    Args:
        text: Document text
        skip_blank: Drop lines that are empty after stripping

    Returns:
        Sentences indexed in order, with their source line numbers
    """
    sentences: List[Sentence] = []
    # Normalize line endings like the document differ does
    text = (text or '').replace('\r\n', '\n').replace('\r', '\n')
    for line_no, line in enumerate(text.split('\n'), start=1):
        stripped = line.strip()
        if skip_blank and not stripped:
            continue
        sentences.append(Sentence(
            text=stripped,
            index=len(sentences),
            line_start=line_no,
            line_end=line_no,
        ))
    return sentences


def read_sentences(path: str, encoding: str = 'utf-8', skip_blank: bool = True) -> List[Sentence]:
    """
    Load sentences from a text file.

    Raises:
        FileError: If the file is missing or unreadable
    """
    if not os.path.isfile(path):
        raise FileError(f"File not found: {path}", filename=path)
    try:
        with open(path, 'r', encoding=encoding) as f:
            text = f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise FileError(f"Cannot read {path}: {e}", filename=path) from e

    sentences = load_sentences(text, skip_blank=skip_blank)
    logger.debug(f"Loaded {len(sentences)} sentences from {path}")
    return sentences
