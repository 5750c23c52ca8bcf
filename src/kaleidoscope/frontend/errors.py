"""
Front-End Error Hierarchy
=========================

This module defines the exceptions raised by the Kaleidoscope parser.
All of them are syntax errors: the tokenizer maps every character
sequence to some token, so there is no lexical error category.

Exception Hierarchy
-------------------
FrontendError (base for all front-end errors)
└── FrontendSyntaxError - parser syntax errors
    ├── UnexpectedTokenError - token cannot begin a primary expression
    ├── UnclosedParenError - missing ')' after a parenthesized expression
    ├── MalformedArgumentListError - call argument list lacks ',' or ')'
    └── MalformedPrototypeError - missing name, '(' or ')' in a prototype

Propagation
-----------
A construct that fails because one of its sub-parses failed does not
create a new error: the innermost error object travels up unchanged.
ErrorKind.PROPAGATED_FAILURE exists so that reports can say so when a
caller wraps the outcome of a nested parse.

Error Message Format
--------------------
    repl:1:7: error: Expected ')' or ',' in argument list
        foo(1 2)
              ^
    hint: separate arguments with ','
"""

from enum import Enum
from typing import Optional, List

from kaleidoscope.errors import KaleidoscopeError, SourceLocation


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(Enum):
    """Classification of syntax failures."""
    UNEXPECTED_TOKEN = "UnexpectedToken"
    UNCLOSED_PAREN = "UnclosedParen"
    MALFORMED_ARGUMENT_LIST = "MalformedArgumentList"
    MALFORMED_PROTOTYPE = "MalformedPrototype"
    PROPAGATED_FAILURE = "PropagatedFailure"


# =============================================================================
# Base Front-End Exception
# =============================================================================

class FrontendError(KaleidoscopeError):
    """
    Base exception for all front-end errors.

    Provides common formatting: source location, the source line with
    a caret under the error column, and an optional hint.

    Attributes:
        message: The error description
        location: Where in the source the error occurred
        hint: A suggestion for fixing the error
        source_line: The source text of the offending line
    """

    kind: Optional[ErrorKind] = None

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class FrontendCompilationError(FrontendError):
    """
    Aggregate error carrying a pre-formatted multi-error report.

    Raised by ErrorCollector.raise_if_errors(); the message is the
    rendered report and gets no additional prefix.
    """

    def _format_message(self) -> str:
        return self.message


# =============================================================================
# Syntax Errors
# =============================================================================

class FrontendSyntaxError(FrontendError):
    """
    Syntax error detected by the parser.

    The parser never advances past the offending token when raising;
    skipping forward is the caller's recovery policy.
    """
    pass


class UnexpectedTokenError(FrontendSyntaxError):
    """
    The current token cannot begin a primary expression.

    Example:
        def foo(x) )
    """

    kind = ErrorKind.UNEXPECTED_TOKEN

    def __init__(
        self,
        found: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.found = found
        super().__init__(
            "unknown token when expecting an expression",
            location=location,
            hint=f"found {found}; expected a number, identifier or '('",
            source_line=source_line,
        )


class UnclosedParenError(FrontendSyntaxError):
    """
    A parenthesized expression is not followed by ')'.

    Example:
        (1+2
    """

    kind = ErrorKind.UNCLOSED_PAREN

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "expected ')'",
            location=location,
            hint="add ')' to close the parenthesized expression",
            source_line=source_line,
        )


class MalformedArgumentListError(FrontendSyntaxError):
    """
    A call's argument list has neither ',' nor ')' where expected.

    Example:
        foo(1 2)
    """

    kind = ErrorKind.MALFORMED_ARGUMENT_LIST

    def __init__(
        self,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            "Expected ')' or ',' in argument list",
            location=location,
            hint="separate arguments with ','",
            source_line=source_line,
        )


class MalformedPrototypeError(FrontendSyntaxError):
    """
    A prototype is missing its function name, '(' or closing ')'.

    Parameter names are whitespace separated identifiers, so
    `def foo(x, y)` stops at ',' and fails here.
    """

    kind = ErrorKind.MALFORMED_PROTOTYPE

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        super().__init__(
            message,
            location=location,
            hint=hint,
            source_line=source_line,
        )


# =============================================================================
# Error Collection (for multi-error reporting)
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The driver keeps parsing after a failed top-level construct, so it
    uses this to gather every diagnostic of a session.

    Example:
        collector = ErrorCollector(max_errors=100)

        for source in sources:
            try:
                parse_source(source)
            except FrontendError as e:
                collector.add(e)
                if collector.should_stop():
                    break

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before stopping
        """
        self.errors: List[FrontendError] = []
        self.warnings: List[str] = []
        self.max_errors = max_errors

    def add(self, error: FrontendError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def add_warning(self, message: str, location: Optional[SourceLocation] = None) -> None:
        """Add a warning message."""
        if location:
            self.warnings.append(f"{location}: warning: {message}")
        else:
            self.warnings.append(f"warning: {message}")

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def should_stop(self) -> bool:
        """Return True if max_errors has been reached."""
        return len(self.errors) >= self.max_errors

    def error_count(self) -> int:
        return len(self.errors)

    def warning_count(self) -> int:
        return len(self.warnings)

    def report(self) -> str:
        """Format all errors and warnings for display."""
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        for warning in self.warnings:
            lines.append(warning)

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def raise_if_errors(self) -> None:
        """Raise a FrontendCompilationError if any errors were collected."""
        if self.has_errors():
            raise FrontendCompilationError(self.report())
