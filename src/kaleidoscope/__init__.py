"""
Kaleidoscope - Front End for a Minimal Expression Language
==========================================================

This package converts Kaleidoscope source text into an abstract syntax
tree of function definitions, extern declarations and top-level
expressions.

Main Components
---------------
- **frontend**: lexer, precedence table, AST, parser and driver loop
- **config**: session configuration (precedence, recovery, prompt)
- **cli**: the `ksparse` command-line tool

Quick Start
-----------
Parse a program:
    >>> from kaleidoscope import parse_source
    >>> items = parse_source("extern sin(a); def f(x) x*sin(x)")

Parse one expression:
    >>> from kaleidoscope import parse_expression_source
    >>> parse_expression_source("1+2*3")
    BinaryExpr(operator='+', left=NumberExpr(value=1.0), right=BinaryExpr(operator='*', left=NumberExpr(value=2.0), right=NumberExpr(value=3.0)))

Or use the command-line tool:
    $ ksparse --ast program.ks
    $ ksparse --prompt          # interactive, reads stdin
"""

__version__ = "1.0.0"

# The frontend package must load before config, which imports from it.
from kaleidoscope.frontend import (
    ASTPrinter,
    BinaryExpr,
    CallExpr,
    Driver,
    DriverReport,
    Function,
    Lexer,
    NumberExpr,
    ParseResult,
    Parser,
    PrecedenceTable,
    Prototype,
    Token,
    TokenKind,
    VariableExpr,
    parse_expression_source,
    parse_source,
)
from kaleidoscope.config import FrontendConfig, RecoveryPolicy
from kaleidoscope.errors import KaleidoscopeError, SourceLocation

__all__ = [
    "__version__",
    "ASTPrinter",
    "BinaryExpr",
    "CallExpr",
    "Driver",
    "DriverReport",
    "Function",
    "Lexer",
    "NumberExpr",
    "ParseResult",
    "Parser",
    "PrecedenceTable",
    "Prototype",
    "Token",
    "TokenKind",
    "VariableExpr",
    "parse_expression_source",
    "parse_source",
    "FrontendConfig",
    "RecoveryPolicy",
    "KaleidoscopeError",
    "SourceLocation",
]
