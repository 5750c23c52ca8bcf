"""
Kaleidoscope Recursive Descent Parser
=====================================

This module implements the parser for the Kaleidoscope expression
language. It pulls tokens from the lexer through a single-token
lookahead slot (`current`) and builds AST nodes using recursive descent
for structural constructs and precedence climbing for binary-operator
chains.

Grammar (EBNF)
--------------
top             ::= definition | external | expression | ';'
definition      ::= 'def' prototype expression
external        ::= 'extern' prototype
expression      ::= primary binoprhs
binoprhs        ::= (binop primary)*
primary         ::= identifierexpr | numberexpr | parenexpr
identifierexpr  ::= IDENTIFIER | IDENTIFIER '(' (expression (',' expression)*)? ')'
numberexpr      ::= NUMBER
parenexpr       ::= '(' expression ')'
prototype       ::= IDENTIFIER '(' IDENTIFIER* ')'

Precedence Climbing
-------------------
`binoprhs` is parsed by `parse_bin_op_rhs(min_precedence, lhs)`: it
folds operators of at least `min_precedence` into `lhs`, recursing with
a raised minimum only when the next operator binds tighter than the one
just consumed. Equal precedences therefore associate to the left:

    1+2*3   ->  (1 + (2 * 3))
    1*2+3   ->  ((1 * 2) + 3)
    1+2+3   ->  ((1 + 2) + 3)

Failure Contract
----------------
Public `parse_*` methods return a ParseResult and never raise for
malformed input. On failure the parser has not consumed the offending
token, so `current` still points at it and the caller decides how to
recover. Internally the `_parse_*` methods raise FrontendSyntaxError and
the first failure aborts the whole construct.

Example Usage
-------------
>>> from kaleidoscope.frontend.parser import Parser
>>> parser = Parser("def foo(x y) x + foo(y, 4.0)")
>>> result = parser.parse_definition()
>>> result.ok
True
>>> result.value.prototype
Prototype(name='foo', params=('x', 'y'))
"""

import io
import logging
from typing import Callable, Iterable, Mapping, Optional, Union

from kaleidoscope.frontend.lexer import CharSource, Lexer, Token, TokenKind
from kaleidoscope.frontend.precedence import PrecedenceTable
from kaleidoscope.frontend.result import ParseResult
from kaleidoscope.frontend.ast import (
    BinaryExpr,
    CallExpr,
    Expression,
    Function,
    NumberExpr,
    Prototype,
    VariableExpr,
)
from kaleidoscope.frontend.errors import (
    FrontendSyntaxError,
    MalformedArgumentListError,
    MalformedPrototypeError,
    UnclosedParenError,
    UnexpectedTokenError,
)


logger = logging.getLogger(__name__)

# Reserved name of the synthetic function wrapping a top-level expression
ANONYMOUS_FUNCTION_NAME = "__anon_expr"


class Parser:
    """
    Recursive descent parser for Kaleidoscope.

    All parse state lives on the instance: the lexer, the current-token
    slot and the precedence table. Independent parsers never share state.

    Attributes:
        lexer: Token source
        precedence: Binary operator precedence table
        anonymous_name: Prototype name used for top-level expressions
    """

    def __init__(
        self,
        source: Union[Lexer, CharSource, str, io.TextIOBase, Iterable[str]],
        precedence: Optional[Mapping[str, int]] = None,
        anonymous_name: str = ANONYMOUS_FUNCTION_NAME,
        filename: str = "<input>",
    ):
        """
        Initialize the parser.

        Args:
            source: A Lexer, or characters to build one from
            precedence: Operator table; a PrecedenceTable is used as-is,
                any other mapping is copied, None selects the defaults
            anonymous_name: Name given to top-level expression wrappers
            filename: Source name for locations when building a lexer
        """
        self.lexer = source if isinstance(source, Lexer) else Lexer(source, filename)

        if isinstance(precedence, PrecedenceTable):
            self.precedence = precedence
        else:
            self.precedence = PrecedenceTable(precedence)

        self.anonymous_name = anonymous_name
        self._current: Optional[Token] = None

    # =========================================================================
    # Token Access Methods
    # =========================================================================

    @property
    def current(self) -> Token:
        """The token the parser is looking at (read on first access)."""
        if self._current is None:
            self._current = self.lexer.next_token()
        return self._current

    def advance(self) -> Token:
        """Consume the current token, read the next one and return it."""
        self.current  # the first token must be read before it is consumed
        self._current = self.lexer.next_token()
        return self._current

    def at_end(self) -> bool:
        return self.current.kind is TokenKind.EOF

    def _source_line(self, token: Token) -> Optional[str]:
        if token.location is None:
            return None
        return self.lexer.source_line(token.location.line)

    # =========================================================================
    # Public Operations
    # =========================================================================

    def parse_primary(self) -> ParseResult[Expression]:
        return self._attempt(self._parse_primary)

    def parse_number_expr(self) -> ParseResult[NumberExpr]:
        return self._attempt(self._parse_number_expr)

    def parse_paren_expr(self) -> ParseResult[Expression]:
        return self._attempt(self._parse_paren_expr)

    def parse_identifier_expr(self) -> ParseResult[Expression]:
        return self._attempt(self._parse_identifier_expr)

    def parse_bin_op_rhs(self, min_precedence: int, lhs: Expression) -> ParseResult[Expression]:
        return self._attempt(self._parse_bin_op_rhs, min_precedence, lhs)

    def parse_expression(self) -> ParseResult[Expression]:
        return self._attempt(self._parse_expression)

    def parse_prototype(self) -> ParseResult[Prototype]:
        return self._attempt(self._parse_prototype)

    def parse_definition(self) -> ParseResult[Function]:
        return self._attempt(self._parse_definition)

    def parse_extern(self) -> ParseResult[Prototype]:
        return self._attempt(self._parse_extern)

    def parse_top_level_expr(self) -> ParseResult[Function]:
        return self._attempt(self._parse_top_level_expr)

    def _attempt(self, parse: Callable, *args) -> ParseResult:
        """Run an internal parse method and capture a syntax failure."""
        try:
            return ParseResult.success(parse(*args))
        except FrontendSyntaxError as e:
            logger.debug(f"{parse.__name__} failed: {e.message} at {e.location}")
            return ParseResult.failure(e)

    # =========================================================================
    # Expression Parsing
    # =========================================================================

    def _parse_expression(self) -> Expression:
        """expression ::= primary binoprhs"""
        lhs = self._parse_primary()
        return self._parse_bin_op_rhs(0, lhs)

    def _parse_primary(self) -> Expression:
        """primary ::= identifierexpr | numberexpr | parenexpr"""
        token = self.current

        if token.kind is TokenKind.IDENTIFIER:
            return self._parse_identifier_expr()

        if token.kind is TokenKind.NUMBER:
            return self._parse_number_expr()

        if token.is_symbol("("):
            return self._parse_paren_expr()

        raise UnexpectedTokenError(
            token.describe(),
            location=token.location,
            source_line=self._source_line(token),
        )

    def _parse_number_expr(self) -> NumberExpr:
        """numberexpr ::= NUMBER"""
        token = self.current
        if token.kind is not TokenKind.NUMBER:
            raise UnexpectedTokenError(
                token.describe(),
                location=token.location,
                source_line=self._source_line(token),
            )

        result = NumberExpr(token.value)
        self.advance()
        return result

    def _parse_paren_expr(self) -> Expression:
        """parenexpr ::= '(' expression ')'"""
        self.advance()  # eat (
        expr = self._parse_expression()

        if not self.current.is_symbol(")"):
            raise UnclosedParenError(
                location=self.current.location,
                source_line=self._source_line(self.current),
            )

        self.advance()  # eat )
        return expr

    def _parse_identifier_expr(self) -> Expression:
        """
        identifierexpr ::= IDENTIFIER
                         | IDENTIFIER '(' (expression (',' expression)*)? ')'
        """
        name = self.current.value
        self.advance()  # eat identifier

        if not self.current.is_symbol("("):
            return VariableExpr(name)

        self.advance()  # eat (
        arguments = []
        if not self.current.is_symbol(")"):
            while True:
                # An argument list cut off by end of input is malformed as a
                # list rather than as the missing argument.
                if self.current.kind is TokenKind.EOF:
                    raise self._argument_list_error()

                arguments.append(self._parse_expression())

                if self.current.is_symbol(")"):
                    break
                if not self.current.is_symbol(","):
                    raise self._argument_list_error()
                self.advance()  # eat ,

        self.advance()  # eat )
        return CallExpr(name, arguments)

    def _argument_list_error(self) -> MalformedArgumentListError:
        return MalformedArgumentListError(
            location=self.current.location,
            source_line=self._source_line(self.current),
        )

    def _parse_bin_op_rhs(self, min_precedence: int, lhs: Expression) -> Expression:
        """
        binoprhs ::= (binop primary)*

        Folds every operator with precedence >= min_precedence into lhs.
        """
        while True:
            token_precedence = self.precedence.token_precedence(self.current)
            if token_precedence < min_precedence:
                return lhs

            operator = self.current.value
            self.advance()  # eat operator

            rhs = self._parse_primary()

            # If the pending operator binds tighter, it takes rhs as its lhs
            next_precedence = self.precedence.token_precedence(self.current)
            if token_precedence < next_precedence:
                rhs = self._parse_bin_op_rhs(token_precedence + 1, rhs)

            lhs = BinaryExpr(operator, lhs, rhs)

    # =========================================================================
    # Function Parsing
    # =========================================================================

    def _parse_prototype(self) -> Prototype:
        """prototype ::= IDENTIFIER '(' IDENTIFIER* ')'"""
        if self.current.kind is not TokenKind.IDENTIFIER:
            raise MalformedPrototypeError(
                "Expected function name in prototype",
                location=self.current.location,
                hint=f"found {self.current.describe()}",
                source_line=self._source_line(self.current),
            )

        name = self.current.value
        self.advance()  # eat name

        if not self.current.is_symbol("("):
            raise MalformedPrototypeError(
                "Expected '(' in prototype",
                location=self.current.location,
                source_line=self._source_line(self.current),
            )

        params = []
        while self.advance().kind is TokenKind.IDENTIFIER:
            params.append(self.current.value)

        if not self.current.is_symbol(")"):
            raise MalformedPrototypeError(
                "Expected ')' in prototype",
                location=self.current.location,
                hint="parameter names are separated by whitespace, not ','",
                source_line=self._source_line(self.current),
            )

        self.advance()  # eat )
        return Prototype(name, params)

    def _parse_definition(self) -> Function:
        """definition ::= 'def' prototype expression"""
        self.advance()  # eat def
        prototype = self._parse_prototype()
        body = self._parse_expression()
        logger.debug(f"parsed definition of '{prototype.name}'")
        return Function(prototype, body)

    def _parse_extern(self) -> Prototype:
        """external ::= 'extern' prototype"""
        self.advance()  # eat extern
        prototype = self._parse_prototype()
        logger.debug(f"parsed extern '{prototype.name}'")
        return prototype

    def _parse_top_level_expr(self) -> Function:
        """toplevelexpr ::= expression"""
        body = self._parse_expression()
        return Function(Prototype(self.anonymous_name, ()), body)


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_expression_source(
    source: str,
    precedence: Optional[Mapping[str, int]] = None,
    filename: str = "<input>",
) -> Expression:
    """
    Parse a single expression from source text.

    Args:
        source: Expression text, e.g. "1+2*3"
        precedence: Optional operator table (defaults otherwise)
        filename: Source name for error messages

    Returns:
        The expression AST

    Raises:
        FrontendSyntaxError: If the expression is malformed
    """
    parser = Parser(source, precedence=precedence, filename=filename)
    return parser.parse_expression().unwrap()
