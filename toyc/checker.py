import logging
from collections import namedtuple

from toyc.analex import tokenize
from toyc.anasin import parse

logger = logging.getLogger(__name__)

Verdict = namedtuple('Verdict', ['accepted', 'diagnostics'])


def check(source, strict_loops=True, max_statement_depth=None, max_expression_depth=None):
    """
    Tokenize and parse one source text in a single pass.

    Lexical and syntax diagnostics end up in one set; when both hit the same
    line the lexical one is kept.
    """
    tokens, diagnostics = tokenize(source)
    parsed, syntax = parse(tokens, strict_loops=strict_loops,
                           max_statement_depth=max_statement_depth,
                           max_expression_depth=max_expression_depth)
    diagnostics.merge(syntax)
    accepted = parsed and len(diagnostics) == 0
    logger.debug("verdict: %s (%d diagnostics)", 'accept' if accepted else 'reject', len(diagnostics))
    return Verdict(accepted, diagnostics)


def format_verdict(verdict, lines_only=False):
    if verdict.accepted:
        return 'accept'
    out = ['reject']
    if lines_only:
        out.append(' '.join(str(line) for line in verdict.diagnostics.lines()))
    else:
        out.extend(f"line {d.line}: {d.message}" for d in verdict.diagnostics)
    return '\n'.join(out)
