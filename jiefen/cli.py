"""
Command line interface for jiefen.

Usage:
    python -m jiefen.cli "我来到北京清华大学"
    python -m jiefen.cli -a "我来到北京清华大学"   # full mode
    python -m jiefen.cli -p "我来到北京清华大学"   # with POS tags
    echo "我来到北京清华大学" | python -m jiefen.cli
    python -m jiefen.cli build-cache             # compile dictionary cache
"""

import argparse
import json
import logging
import sys
import time
from pathlib import Path
from typing import List, Optional

from jiefen import __version__
from jiefen.context import SegmentationContext
from jiefen.db.connection import get_db_path
from jiefen.errors import JiefenError
from jiefen.loading.dict_cache import save_cache
from jiefen.loading.dictionary import load_dictionary
from jiefen.models import LoadReportResult, SegmentationResult
from jiefen.posseg import PosSegmenter
from jiefen.segment import Segmenter
from jiefen.settings import DEBUG, DICT_PATH


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if DEBUG else logging.INFO if verbose else logging.WARNING
    logging.basicConfig(level=level, format='%(asctime)s - %(levelname)s - %(message)s')


def build_cache_command(args) -> int:
    """Parse the dictionary and write the compiled cache."""
    dict_path = Path(args.dict) if args.dict else DICT_PATH
    db_path = get_db_path(args.output)
    if db_path is None:
        print("Error: no cache path. Use --output or set JIEFEN_CACHE_PATH.", file=sys.stderr)
        return 1

    t0 = time.perf_counter()
    try:
        dictionary, word_tags, report = load_dictionary(dict_path)
        count = save_cache(db_path, dictionary, word_tags, dict_path)
    except JiefenError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    elapsed = time.perf_counter() - t0
    print(f"Cache written: {db_path}")
    print(f"   Words: {count:,}")
    print(f"   Skipped lines: {len(report.skipped)}")
    print(f"   Time: {elapsed:.1f}s")
    return 0


def main_build_cache(args: list) -> int:
    """CLI entry point for build-cache subcommand."""
    parser = argparse.ArgumentParser(
        description='Compile the dictionary into a SQLite cache',
        prog='jiefen build-cache',
    )
    parser.add_argument(
        '--dict',
        type=str,
        metavar='PATH',
        help='Dictionary file (default: bundled dictionary or JIEFEN_DICT_PATH)',
    )
    parser.add_argument(
        '--output', '-o',
        type=str,
        metavar='PATH',
        help='Cache database path (default: JIEFEN_CACHE_PATH)',
    )
    parser.add_argument('-v', '--verbose', action='store_true', help='Log progress')

    parsed = parser.parse_args(args)
    _configure_logging(parsed.verbose)
    return build_cache_command(parsed)


def _read_input(parsed) -> str:
    if parsed.text:
        return ' '.join(parsed.text)
    if not sys.stdin.isatty():
        return sys.stdin.read()
    return ''


def main(args: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args_list = args if args is not None else sys.argv[1:]

    if args_list and args_list[0] == 'build-cache':
        return main_build_cache(args_list[1:])

    parser = argparse.ArgumentParser(
        description='Command line interface for Jiefen (Chinese word segmentation)',
        prog='jiefen',
        epilog='Subcommands:\n  jiefen build-cache   Compile the dictionary into a SQLite cache',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('text', nargs='*', help='Text to segment (default: read stdin)')
    parser.add_argument('-a', '--cut-all', action='store_true',
                        help='Full mode: output every dictionary word')
    parser.add_argument('-n', '--no-hmm', action='store_true',
                        help="Don't use the HMM for unknown words")
    parser.add_argument('-s', '--search', action='store_true',
                        help='Search-engine mode (adds sub-words of long words)')
    parser.add_argument('-p', '--pos', action='store_true',
                        help='Tag words with parts of speech')
    parser.add_argument('-d', '--delimiter', default=' / ', metavar='DELIM',
                        help="Word delimiter (default: ' / ')")
    parser.add_argument('-j', '--json', action='store_true', help='Output JSON')
    parser.add_argument('-u', '--user-dict', action='append', default=[], metavar='PATH',
                        help='Load a user dictionary (repeatable)')
    parser.add_argument('--dict', type=str, default=None, metavar='PATH',
                        help='Main dictionary file')
    parser.add_argument('--cache', type=str, default=None, metavar='PATH',
                        help='Compiled dictionary cache (SQLite)')
    parser.add_argument('-v', '--verbose', action='store_true', help='Log loading progress')
    parser.add_argument('--version', action='store_true', help='Show version information')

    parsed = parser.parse_args(args)

    if parsed.version:
        print(f'jiefen {__version__}')
        return 0

    text = _read_input(parsed)
    if not text:
        parser.print_help()
        return 1

    _configure_logging(parsed.verbose)

    try:
        context = SegmentationContext.from_files(dict_path=parsed.dict, cache_path=parsed.cache)
    except JiefenError as e:
        print(f'Error loading dictionary: {e}', file=sys.stderr)
        return 1

    segmenter = Segmenter(context)
    reports = [segmenter.load_userdict(path) for path in parsed.user_dict]
    hmm = not parsed.no_hmm

    try:
        if parsed.pos:
            mode = 'pos'
            tokens = PosSegmenter(segmenter).cut(text, hmm=hmm)
        elif parsed.cut_all:
            mode = 'full'
            tokens = segmenter.cut(text, cut_all=True)
        elif parsed.search:
            mode = 'search'
            tokens = segmenter.cut_for_search(text, hmm=hmm)
        else:
            mode = 'default'
            tokens = segmenter.cut(text, hmm=hmm)
    except JiefenError as e:
        print(f'Error processing text: {e}', file=sys.stderr)
        return 1

    if parsed.json:
        output = SegmentationResult.from_tokens(text, tokens, mode=mode, hmm=hmm).model_dump()
        if reports:
            output['user_dicts'] = [LoadReportResult.from_report(r).model_dump() for r in reports]
        print(json.dumps(output, ensure_ascii=False))
    elif parsed.pos:
        print(parsed.delimiter.join(f'{t.text}/{t.tag}' for t in tokens))
    else:
        print(parsed.delimiter.join(t.text for t in tokens))

    return 0


if __name__ == '__main__':
    sys.exit(main())
