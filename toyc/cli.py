import argparse
import logging
import sys

from toyc.checker import check, format_verdict

logger = logging.getLogger(__name__)


def build_arg_parser():
    ap = argparse.ArgumentParser(
        prog='toyc-check',
        description='Check whether a ToyC source file is syntactically valid.')
    ap.add_argument('source', nargs='?', default='-',
                    help="source file to check ('-' or omitted reads standard input)")
    ap.add_argument('--lines-only', action='store_true',
                    help='on reject, print only the offending line numbers')
    ap.add_argument('--allow-stray-break', action='store_true',
                    help="do not reject 'break'/'continue' outside a loop")
    ap.add_argument('-v', '--verbose', action='store_true',
                    help='trace tokenizing and parsing on stderr')
    return ap


def read_source(path):
    if path == '-':
        return sys.stdin.read()
    with open(path, encoding='utf-8') as f:
        return f.read()


def main(argv=None):
    args = build_arg_parser().parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format='%(levelname)s %(name)s: %(message)s')

    try:
        source = read_source(args.source)
    except (OSError, UnicodeDecodeError) as err:
        print(f"toyc-check: cannot read {args.source}: {err}", file=sys.stderr)
        return 2

    logger.debug("checking %s (%d characters)", args.source, len(source))
    verdict = check(source, strict_loops=not args.allow_stray_break)
    print(format_verdict(verdict, lines_only=args.lines_only))
    return 0 if verdict.accepted else 1
