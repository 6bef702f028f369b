import logging
from collections import namedtuple

import ply.lex as lex

from toyc.diagnostics import DiagnosticSet, LEXICAL

logger = logging.getLogger(__name__)

# Palavras reservadas
reserved = {
    'int': 'INT',
    'void': 'VOID',
    'if': 'IF',
    'else': 'ELSE',
    'while': 'WHILE',
    'break': 'BREAK',
    'continue': 'CONTINUE',
    'return': 'RETURN',
}

tokens = [
    'ID', 'NUM',
    'EQ', 'NE', 'LE', 'GE', 'AND', 'OR',
    'ERROR',
] + list(reserved.values())

literals = ['+', '-', '*', '/', '%', '(', ')', '{', '}',
            ';', ',', '=', '<', '>', '!']

t_EQ  = r'=='
t_NE  = r'!='
t_LE  = r'<='
t_GE  = r'>='
t_AND = r'&&'
t_OR  = r'\|\|'

t_ignore = ' \t\r'

Token = namedtuple('Token', ['kind', 'lexeme', 'line'])

EOF = 'EOF'


def t_LINE_COMMENT(t):
    r'//[^\n]*'
    pass


def t_COMMENT(t):
    r'/\*[\s\S]*?\*/'
    t.lexer.lineno += t.value.count('\n')


# Tem de vir depois de t_COMMENT: só apanha o que ficou sem */
def t_UNTERMINATED_COMMENT(t):
    r'/\*[\s\S]*'
    t.lexer.diagnostics.add(t.lexer.lineno, "unterminated comment", LEXICAL)
    t.lexer.remainder = t.value


def t_ID(t):
    r'[A-Za-z_][A-Za-z0-9_]*'
    t.type = reserved.get(t.value, 'ID')
    return t


def t_NUM(t):
    r'\d+'
    return t


def t_newline(t):
    r'\n+'
    t.lexer.lineno += len(t.value)


def t_error(t):
    c = t.value[0]
    if c in '&|':
        message = f"expected '{c}{c}'"
    else:
        message = f"unexpected character {c!r}"
    t.lexer.diagnostics.add(t.lineno, message, LEXICAL)
    t.lexer.skip(1)
    t.type = 'ERROR'
    t.value = c
    return t


lexer = lex.lex()


def tokenize(source):
    """
    Scan the whole source and return (tokens, diagnostics).

    The token list always ends with exactly one EOF token. An unterminated
    block comment stops the scan; the EOF token then sits on the line where
    the comment started and its lexeme holds the unscanned text.
    """
    scanner = lexer.clone()
    scanner.lineno = 1
    scanner.diagnostics = DiagnosticSet()
    scanner.remainder = ''
    scanner.input(source)

    result = []
    for tok in scanner:
        result.append(Token(tok.type, tok.value, tok.lineno))
    result.append(Token(EOF, scanner.remainder, scanner.lineno))

    if scanner.remainder:
        logger.debug("tokenizing stopped early at line %d", scanner.lineno)
    logger.debug("%d tokens, %d lexical errors", len(result), len(scanner.diagnostics))
    return result, scanner.diagnostics
