"""
Command-line interface.

    jsfold INPUT [-o OUT_DIR] [--compact] [--quotes single|double]
                 [--indent STR] [--max-iterations N] [--dump-ast PATH] [-v]

Without ``-o`` the deobfuscated program is printed to stdout. With ``-o``
both ``deobfuscated.js`` and ``compactdeobfuscated.js`` are written to the
directory. ``INPUT`` may be ``-`` for stdin.
"""

import argparse
import json
import logging
import os
import sys
from typing import List, Optional

from jsfold import __version__
from jsfold.config import QUOTE_STYLES, GeneratorOptions, RewriteConfig
from jsfold.errors import JsfoldError, ParseError
from jsfold.pipeline import Deobfuscator
from jsfold.rewrite.rules import RULE_NAMES
from jsfold.tree.walk import to_dict
from jsfold.utils.helpers import format_duration

logger = logging.getLogger(__name__)

PRETTY_OUTPUT = 'deobfuscated.js'
COMPACT_OUTPUT = 'compactdeobfuscated.js'


def _rename_pair(text: str):
    old, sep, new = text.partition('=')
    if not sep or not old or not new:
        raise argparse.ArgumentTypeError(f"expected OLD=NEW, got {text!r}")
    return old, new


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='jsfold',
        description='Simplify obfuscated JavaScript by rewriting its syntax tree to a fixed point.',
    )
    parser.add_argument('input', help="input file, or '-' for stdin")
    parser.add_argument('-o', '--output-dir', help=f"write {PRETTY_OUTPUT} and {COMPACT_OUTPUT} here")
    parser.add_argument('--compact', action='store_true', help='print compact output')
    parser.add_argument('--quotes', choices=QUOTE_STYLES, default='single', help='string quote style')
    parser.add_argument('--indent', default='    ', help='indentation unit (default: four spaces)')
    parser.add_argument('--max-iterations', type=int, default=100, help='cap on rewrite passes')
    parser.add_argument('--dedup-depth', type=int, default=100,
                        help='discard duplicate function declarations nested deeper than this')
    parser.add_argument('--rename', type=_rename_pair, action='append', default=[], metavar='OLD=NEW',
                        help='rename an identifier before rewriting (repeatable)')
    parser.add_argument('--prune', action='append', default=[], metavar='NAME',
                        help='delete declarations and call statements of NAME (repeatable)')
    parser.add_argument('--disable', action='append', default=[], choices=RULE_NAMES, metavar='RULE',
                        help='leave a rule out of the rule set (repeatable)')
    parser.add_argument('--strict', action='store_true', help='fail when the rewrite does not converge')
    parser.add_argument('--dump-ast', metavar='PATH', help='write the final tree as ESTree JSON')
    parser.add_argument('-v', '--verbose', action='store_true', help='enable debug logging')
    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    return parser


def _read_input(path: str) -> str:
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def _write(path: str, text: str) -> None:
    with open(path, 'w', encoding='utf-8') as f:
        f.write(text)
        f.write('\n')


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    else:
        logging.basicConfig(level=logging.WARNING, format='%(levelname)s: %(message)s')

    try:
        config = RewriteConfig(
            max_iterations=args.max_iterations,
            dedup_depth_threshold=args.dedup_depth,
            renames=dict(args.rename),
            prune_names=args.prune,
            disabled_rules=args.disable,
            strict=args.strict,
        )
        options = GeneratorOptions(
            compact=args.compact, quote_style=args.quotes, indent_style=args.indent,
        )
    except ValueError as exc:
        parser.error(str(exc))

    try:
        source = _read_input(args.input)
    except OSError as exc:
        print(f"jsfold: cannot read {args.input}: {exc}", file=sys.stderr)
        return 1

    try:
        result = Deobfuscator(config, options).run(source)
    except ParseError as exc:
        where = f":{exc.line}:{exc.column}" if exc.line is not None else ''
        print(f"jsfold: {args.input}{where}: {exc}", file=sys.stderr)
        return 1
    except JsfoldError as exc:
        print(f"jsfold: {args.input}: {exc}", file=sys.stderr)
        return 1

    if args.dump_ast:
        with open(args.dump_ast, 'w', encoding='utf-8') as f:
            json.dump(to_dict(result.tree), f, indent=2)

    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        _write(os.path.join(args.output_dir, PRETTY_OUTPUT), result.code)
        _write(os.path.join(args.output_dir, COMPACT_OUTPUT), result.compact_code)
    else:
        sys.stdout.write(result.code + '\n')

    logger.info(
        "%d passes, %d changes, %d functions hoisted, %d factories collapsed in %s",
        result.rewrite.iterations,
        result.rewrite.total_changes,
        len(result.hoist.hoisted),
        len(result.collapsed),
        format_duration(result.wall_time_seconds),
    )
    return 0


if __name__ == '__main__':
    sys.exit(main())
