"""
Command line interface.

    python -m sentence_align original.txt revised.txt --format html -o errata.html

Input files hold one sentence per line. Options not given on the command
line come from PA_ALIGN_* environment variables, then the defaults.
"""

import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from config_logging import ProofAlignError, get_logger, handle_errors

from . import __version__
from .aligner import SentenceAligner
from .models import AlignmentResult
from .options import AlignmentOptions
from .report import EXPORTERS, export_alignment, write_export
from .segmenter import read_sentences
from .tokenizers import CUT_MODES, JiebaTokenizer

logger = get_logger('sentence_align.cli')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sentence_align',
        description='Align an original and a revised document sentence by sentence',
    )
    parser.add_argument('source', help='Original document (one sentence per line)')
    parser.add_argument('target', help='Revised document (one sentence per line)')
    parser.add_argument('--format', '-f', choices=sorted(EXPORTERS), default='json',
                        help='Output format (default: json)')
    parser.add_argument('--output', '-o', help='Write the report to this file instead of stdout')
    parser.add_argument('--encoding', default='utf-8', help='Input file encoding')

    group = parser.add_argument_group('alignment options')
    group.add_argument('--threshold', type=float, dest='similarity_threshold',
                       help='Similarity threshold (0-1)')
    group.add_argument('--window', type=int, dest='window_size', help='Search window half-width')
    group.add_argument('--ngram', type=int, dest='ngram_size', help='n-gram size')
    group.add_argument('--granularity', choices=['char', 'word'], dest='ngram_granularity',
                       help='n-gram granularity (word uses jieba)')
    group.add_argument('--cut-mode', choices=CUT_MODES, default='default',
                       help='jieba cut mode for word granularity')
    group.add_argument('--offset', type=int, dest='anchor_offset', help='Anchor offset')
    group.add_argument('--max-expansion', type=int, dest='max_window_expansion',
                       help='Maximum window expansion factor')
    group.add_argument('--fail-threshold', type=int, dest='consecutive_fail_threshold',
                       help='Consecutive failures before the window widens')
    group.add_argument('--keep-whitespace', action='store_false', default=None,
                       dest='remove_inner_whitespace', help='Compare inner whitespace')
    group.add_argument('--ignore-punctuation', action='store_true', default=None,
                       dest='remove_punctuation', help='Ignore punctuation when comparing')
    group.add_argument('--ignore-digits', action='store_true', default=None,
                       dest='remove_digits', help='Ignore digits when comparing')
    group.add_argument('--ignore-latin', action='store_true', default=None,
                       dest='remove_latin', help='Ignore Latin letters when comparing')
    group.add_argument('--ignore-footnotes', action='store_true', default=None,
                       dest='remove_footnote_markers', help='Ignore footnote markers when comparing')

    parser.add_argument('--stats', action='store_true', help='Print statistics to stderr')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


OPTION_DESTS = (
    'similarity_threshold', 'window_size', 'ngram_size', 'ngram_granularity',
    'anchor_offset', 'max_window_expansion', 'consecutive_fail_threshold',
    'remove_inner_whitespace', 'remove_punctuation', 'remove_digits',
    'remove_latin', 'remove_footnote_markers',
)


def options_from_args(args: argparse.Namespace) -> AlignmentOptions:
    """Environment options overridden by the flags that were given."""
    settings: Dict[str, Any] = AlignmentOptions.from_env().to_dict()
    for dest in OPTION_DESTS:
        value = getattr(args, dest)
        if value is not None:
            settings[dest] = value

    tokenizer = None
    if settings.get('ngram_granularity') == 'word':
        tokenizer = JiebaTokenizer(cut_mode=args.cut_mode)
    return AlignmentOptions.from_dict(settings, tokenizer=tokenizer)


@handle_errors(logger)
def run(args: argparse.Namespace) -> AlignmentResult:
    """Align the two input files and write the report."""
    options = options_from_args(args)
    source = read_sentences(args.source, encoding=args.encoding)
    target = read_sentences(args.target, encoding=args.encoding)

    result = SentenceAligner(options).align(source, target)
    export_kwargs = dict(source_name=args.source, target_name=args.target,
                         options=options.to_dict())

    if args.output:
        write_export(result.items, args.format, args.output, **export_kwargs)
    else:
        content = export_alignment(result.items, args.format, **export_kwargs)
        if isinstance(content, bytes):
            sys.stdout.buffer.write(content)
        else:
            sys.stdout.write(content)
            if not content.endswith('\n'):
                sys.stdout.write('\n')
    return result


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.format == 'docx' and not args.output:
        parser.error('--format docx requires --output')

    try:
        result = run(args)
    except ProofAlignError as e:
        print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        return 2 if e.status_code < 500 else 1

    if args.stats:
        print(json.dumps(result.statistics.to_dict(), indent=2), file=sys.stderr)
    return 0


if __name__ == '__main__':
    sys.exit(main())
