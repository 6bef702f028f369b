'''
P1:  program        -> function function*
P2:  function       -> ('int' | 'void') ID '(' params? ')' block
P3:  params         -> param (',' param)*
P4:  param          -> 'int' ID
P5:  block          -> '{' statement* '}'

P6:  statement      -> 'int' ID ('=' expr)? ';'
P7:                  | 'if' '(' expr ')' statement ('else' statement)?
P8:                  | 'while' '(' expr ')' statement
P9:                  | 'break' ';'
P10:                 | 'continue' ';'
P11:                 | 'return' expr? ';'
P12:                 | block
P13:                 | ';'
P14:                 | ID '=' expr ';'
P15:                 | ID args ';'
P16:                 | expr ';'             (expr not starting with ID)

P17: expr           -> and_expr ('||' and_expr)*
P18: and_expr       -> rel_expr ('&&' rel_expr)*
P19: rel_expr       -> add_expr (relop add_expr)*
P20: add_expr       -> mul_expr (('+' | '-') mul_expr)*
P21: mul_expr       -> unary (('*' | '/' | '%') unary)*
P22: unary          -> ('+' | '-' | '!') unary
P23:                 | primary
P24: primary        -> NUM
P25:                 | ID
P26:                 | ID args
P27:                 | '(' expr ')'
P28: args           -> '(' (expr (',' expr)*)? ')'
'''

import logging
import sys
from contextlib import contextmanager

from toyc.analex import EOF, reserved
from toyc.diagnostics import DiagnosticSet, ParseError, SYNTAX

logger = logging.getLogger(__name__)

# frames da pilha por nível de aninhamento
STATEMENT_FRAMES = 3
EXPRESSION_FRAMES = 7
STACK_RESERVE = 200

RELOPS = ('<', 'LE', '>', 'GE', 'EQ', 'NE')
UNARY_OPS = ('+', '-', '!')
# inícios de expressão que não são um ID (P16)
EXPR_START = ('NUM', '(') + UNARY_OPS

_kind_names = {
    'ID': 'identifier',
    'NUM': 'number',
    'EQ': "'=='",
    'NE': "'!='",
    'LE': "'<='",
    'GE': "'>='",
    'AND': "'&&'",
    'OR': "'||'",
    EOF: 'end of input',
}
_kind_names.update({kind: f"'{word}'" for word, kind in reserved.items()})


def kind_name(kind):
    return _kind_names.get(kind, f"'{kind}'")


def describe(tok):
    if tok.kind == EOF:
        return 'end of input'
    if tok.kind == 'ERROR':
        return f"invalid character '{tok.lexeme}'"
    return f"'{tok.lexeme}'"


class Parser:
    def __init__(self, tokens, diagnostics=None, strict_loops=True,
                 max_statement_depth=None, max_expression_depth=None):
        self.tokens = tokens
        self.pos = 0
        self.diagnostics = DiagnosticSet() if diagnostics is None else diagnostics
        self.strict_loops = strict_loops
        default_statements, default_expressions = depth_limits()
        self.max_statement_depth = max_statement_depth or default_statements
        self.max_expression_depth = max_expression_depth or default_expressions
        self.loop_depth = 0
        self.statement_depth = 0
        self.expression_depth = 0
        self.success = True

    # ---------- cursor ----------

    @property
    def prox_simb(self):
        return self.tokens[self.pos]

    def peek(self, k=1):
        return self.tokens[min(self.pos + k, len(self.tokens) - 1)]

    def advance(self):
        tok = self.tokens[self.pos]
        if tok.kind != EOF:
            self.pos += 1
        return tok

    def check(self, *kinds):
        return self.prox_simb.kind in kinds

    def rec_term(self, simb):
        if self.prox_simb.kind == simb:
            return self.advance()
        self.expected(kind_name(simb))

    # ---------- errors ----------

    def expected(self, what):
        tok = self.prox_simb
        line = tok.line
        # o que falta pertence à linha do último token consumido,
        # exceto num EOF depois de um comentário por fechar
        untrusted_end = tok.kind == EOF and tok.lexeme
        if self.pos > 0 and self.tokens[self.pos - 1].line < line and not untrusted_end:
            line = self.tokens[self.pos - 1].line
        raise ParseError(line, f"expected {what} before {describe(tok)}")

    def unexpected(self, what):
        tok = self.prox_simb
        raise ParseError(tok.line, f"expected {what}, found {describe(tok)}")

    def parser_error(self, err):
        self.success = False
        self.diagnostics.add(err.line, err.message, SYNTAX)

    def synchronize(self, top_level=False):
        """Skip to the next ';' (consumed) or '}' (left for the enclosing block)."""
        start = self.pos
        while not self.check(EOF):
            if self.check(';'):
                self.advance()
                break
            if self.check('}'):
                if top_level:
                    self.advance()
                break
            self.advance()
        logger.debug("recovered at token %d after skipping %d", self.pos, self.pos - start)

    def skip_to_body(self):
        """
        After a bad function header, skip to the '{' that opens its body.
        Returns False when a ';' or '}' (consumed) comes first.
        """
        while not self.check('{', EOF):
            if self.check(';', '}'):
                self.advance()
                return False
            self.advance()
        return self.check('{')

    @contextmanager
    def nested(self, counter, limit):
        depth = getattr(self, counter) + 1
        setattr(self, counter, depth)
        try:
            if depth > limit:
                raise ParseError(self.prox_simb.line, "nesting too deep")
            yield
        finally:
            setattr(self, counter, depth - 1)

    # ---------- program structure ----------

    # P1: program -> function function*

    def rec_program(self):
        logger.debug("deriving P1: program")
        while True:
            try:
                self.rec_function()
            except ParseError as err:
                self.parser_error(err)
                self.synchronize(top_level=True)
            if self.check(EOF):
                break
        return self.success

    # P2: function -> ('int' | 'void') ID '(' params? ')' block

    def rec_function(self):
        try:
            self.rec_header()
        except ParseError as err:
            self.parser_error(err)
            if not self.skip_to_body():
                return
        self.rec_block()

    def rec_header(self):
        if not self.check('INT', 'VOID'):
            self.unexpected("a function definition")
        ret_type = self.advance()
        name = self.rec_term('ID')
        logger.debug("deriving P2: function %s %s (line %d)", ret_type.lexeme, name.lexeme, name.line)
        self.rec_term('(')
        if not self.check(')'):
            self.rec_params()
        self.rec_term(')')

    # P3: params -> param (',' param)*
    # P4: param  -> 'int' ID

    def rec_params(self):
        self.rec_term('INT')
        self.rec_term('ID')
        while self.check(','):
            self.advance()
            self.rec_term('INT')
            self.rec_term('ID')

    # P5: block -> '{' statement* '}'

    def rec_block(self):
        self.rec_term('{')
        while not self.check('}', EOF):
            try:
                self.rec_statement()
            except ParseError as err:
                self.parser_error(err)
                self.synchronize()
        self.rec_term('}')

    # ---------- statements ----------

    def rec_statement(self):
        with self.nested('statement_depth', self.max_statement_depth):
            kind = self.prox_simb.kind
            logger.debug("deriving statement at line %d: %s", self.prox_simb.line, describe(self.prox_simb))
            if kind == 'INT':
                self.rec_declaration()
            elif kind == 'IF':
                self.rec_if()
            elif kind == 'WHILE':
                self.rec_while()
            elif kind in ('BREAK', 'CONTINUE'):
                self.rec_jump()
            elif kind == 'RETURN':
                self.rec_return()
            elif kind == '{':
                self.rec_block()
            elif kind == ';':
                self.advance()
            elif kind == 'ID':
                self.rec_id_statement()
            elif kind in EXPR_START:
                self.rec_expr()
                self.rec_term(';')
            else:
                self.unexpected("a statement")

    # P6: statement -> 'int' ID ('=' expr)? ';'

    def rec_declaration(self):
        self.rec_term('INT')
        self.rec_term('ID')
        if self.check('='):
            self.advance()
            self.rec_expr()
        self.rec_term(';')

    # P7: statement -> 'if' '(' expr ')' statement ('else' statement)?

    def rec_if(self):
        # cadeias else-if num ciclo, sem recursão
        while True:
            self.rec_term('IF')
            self.rec_term('(')
            self.rec_expr()
            self.rec_term(')')
            self.rec_statement()
            if not self.check('ELSE'):
                break
            self.advance()
            if not self.check('IF'):
                self.rec_statement()
                break

    # P8: statement -> 'while' '(' expr ')' statement

    def rec_while(self):
        self.rec_term('WHILE')
        self.rec_term('(')
        self.rec_expr()
        self.rec_term(')')
        self.loop_depth += 1
        try:
            self.rec_statement()
        finally:
            self.loop_depth -= 1

    # P9:  statement -> 'break' ';'
    # P10: statement -> 'continue' ';'

    def rec_jump(self):
        tok = self.advance()
        if self.strict_loops and self.loop_depth == 0:
            raise ParseError(tok.line, f"'{tok.lexeme}' outside of a loop")
        self.rec_term(';')

    # P11: statement -> 'return' expr? ';'

    def rec_return(self):
        self.rec_term('RETURN')
        if not self.check(';'):
            self.rec_expr()
        self.rec_term(';')

    # P14: statement -> ID '=' expr ';'
    # P15: statement -> ID args ';'

    def rec_id_statement(self):
        follow = self.peek().kind
        self.rec_term('ID')
        if follow == '=':
            self.advance()
            self.rec_expr()
        elif follow == '(':
            self.rec_args()
        else:
            self.expected("'=' or '('")
        self.rec_term(';')

    # ---------- expressions ----------

    # P17: expr -> and_expr ('||' and_expr)*

    def rec_expr(self):
        with self.nested('expression_depth', self.max_expression_depth):
            self.rec_and()
            while self.check('OR'):
                self.advance()
                self.rec_and()

    # P18: and_expr -> rel_expr ('&&' rel_expr)*

    def rec_and(self):
        self.rec_relational()
        while self.check('AND'):
            self.advance()
            self.rec_relational()

    # P19: rel_expr -> add_expr (relop add_expr)*

    def rec_relational(self):
        self.rec_additive()
        while self.check(*RELOPS):
            self.advance()
            self.rec_additive()

    # P20: add_expr -> mul_expr (('+' | '-') mul_expr)*

    def rec_additive(self):
        self.rec_multiplicative()
        while self.check('+', '-'):
            self.advance()
            self.rec_multiplicative()

    # P21: mul_expr -> unary (('*' | '/' | '%') unary)*

    def rec_multiplicative(self):
        self.rec_unary()
        while self.check('*', '/', '%'):
            self.advance()
            self.rec_unary()

    # P22: unary -> ('+' | '-' | '!') unary
    # P23:        | primary

    def rec_unary(self):
        while self.check(*UNARY_OPS):
            self.advance()
        self.rec_primary()

    # P24-P27: primary -> NUM | ID | ID args | '(' expr ')'

    def rec_primary(self):
        kind = self.prox_simb.kind
        if kind == 'NUM':
            self.advance()
        elif kind == 'ID':
            self.advance()
            if self.check('('):
                self.rec_args()
        elif kind == '(':
            self.advance()
            self.rec_expr()
            self.rec_term(')')
        else:
            self.unexpected("an expression")

    # P28: args -> '(' (expr (',' expr)*)? ')'

    def rec_args(self):
        self.rec_term('(')
        if not self.check(')'):
            self.rec_expr()
            while self.check(','):
                self.advance()
                self.rec_expr()
        self.rec_term(')')


def depth_limits():
    """Statement and expression nesting limits that fit the interpreter stack."""
    budget = max(sys.getrecursionlimit() - STACK_RESERVE, 0) // 2
    return max(budget // STATEMENT_FRAMES, 1), max(budget // EXPRESSION_FRAMES, 1)


def parse(tokens, diagnostics=None, strict_loops=True,
          max_statement_depth=None, max_expression_depth=None):
    """Run the parser over a token list; return (accepted, diagnostics)."""
    parser = Parser(tokens, diagnostics, strict_loops=strict_loops,
                    max_statement_depth=max_statement_depth,
                    max_expression_depth=max_expression_depth)
    parser.rec_program()
    return parser.success, parser.diagnostics
