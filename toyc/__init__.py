from toyc.analex import Token, tokenize
from toyc.anasin import Parser, parse
from toyc.checker import Verdict, check, format_verdict
from toyc.diagnostics import Diagnostic, DiagnosticSet, ParseError, ToyCError

__version__ = '0.1.0'
