import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

LEXICAL = 'lexical'
SYNTAX = 'syntax'

Diagnostic = namedtuple('Diagnostic', ['line', 'message', 'kind'])


class ToyCError(Exception):
    pass


class ParseError(ToyCError):
    def __init__(self, line, message):
        super().__init__(f"line {line}: {message}")
        self.line = line
        self.message = message


class DiagnosticSet:
    """
    Diagnostics keyed by source line. Only the first one recorded for a
    line is kept; iteration yields them by ascending line.
    """

    def __init__(self):
        self._by_line = {}

    def add(self, line, message, kind=SYNTAX):
        if line in self._by_line:
            logger.debug("line %d: suppressed %s error: %s", line, kind, message)
            return False
        self._by_line[line] = Diagnostic(line, message, kind)
        logger.debug("line %d: recorded %s error: %s", line, kind, message)
        return True

    def merge(self, other):
        # os já existentes ganham
        for diag in other:
            self.add(diag.line, diag.message, diag.kind)
        return self

    def lines(self):
        return sorted(self._by_line)

    def get(self, line):
        return self._by_line.get(line)

    def __iter__(self):
        return iter([self._by_line[line] for line in self.lines()])

    def __len__(self):
        return len(self._by_line)

    def __contains__(self, line):
        return line in self._by_line

    def __eq__(self, other):
        if not isinstance(other, DiagnosticSet):
            return NotImplemented
        return self._by_line == other._by_line

    def __repr__(self):
        return f"DiagnosticSet({list(self)!r})"
