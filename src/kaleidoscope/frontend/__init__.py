"""
Kaleidoscope Front End
======================

Turns a stream of characters into an AST of function definitions,
extern declarations and top-level expressions.

Pipeline
--------
    Characters → Lexer → Parser → AST (Function / Prototype)

- A lexer that pulls one character at a time with a single character of
  lookahead
- A recursive descent parser using precedence climbing for binary
  operator chains
- A driver loop that parses top-level constructs, reports status lines
  and recovers from syntax errors

Usage
-----
>>> from kaleidoscope.frontend import parse_source
>>> items = parse_source("def add(a b) a+b; add(1, 2*3)")
>>> items[0].prototype
Prototype(name='add', params=('a', 'b'))
"""

from kaleidoscope.frontend.lexer import CharSource, Lexer, Token, TokenKind
from kaleidoscope.frontend.precedence import (
    DEFAULT_PRECEDENCE,
    NOT_AN_OPERATOR,
    PrecedenceTable,
)
from kaleidoscope.frontend.ast import (
    ASTNode,
    ASTPrinter,
    ASTVisitor,
    BinaryExpr,
    CallExpr,
    Expression,
    Function,
    NumberExpr,
    Prototype,
    TopLevel,
    VariableExpr,
    expr_str,
)
from kaleidoscope.frontend.errors import (
    ErrorCollector,
    ErrorKind,
    FrontendCompilationError,
    FrontendError,
    FrontendSyntaxError,
    MalformedArgumentListError,
    MalformedPrototypeError,
    UnclosedParenError,
    UnexpectedTokenError,
)
from kaleidoscope.frontend.result import ParseResult
from kaleidoscope.frontend.parser import (
    ANONYMOUS_FUNCTION_NAME,
    Parser,
    parse_expression_source,
)
from kaleidoscope.frontend.driver import Driver, DriverReport, parse_source

__all__ = [
    # Lexer
    "CharSource",
    "Lexer",
    "Token",
    "TokenKind",
    # Precedence
    "DEFAULT_PRECEDENCE",
    "NOT_AN_OPERATOR",
    "PrecedenceTable",
    # AST
    "ASTNode",
    "ASTPrinter",
    "ASTVisitor",
    "BinaryExpr",
    "CallExpr",
    "Expression",
    "Function",
    "NumberExpr",
    "Prototype",
    "TopLevel",
    "VariableExpr",
    "expr_str",
    # Errors
    "ErrorCollector",
    "ErrorKind",
    "FrontendCompilationError",
    "FrontendError",
    "FrontendSyntaxError",
    "MalformedArgumentListError",
    "MalformedPrototypeError",
    "UnclosedParenError",
    "UnexpectedTokenError",
    # Parser
    "ParseResult",
    "ANONYMOUS_FUNCTION_NAME",
    "Parser",
    "parse_expression_source",
    # Driver
    "Driver",
    "DriverReport",
    "parse_source",
]
