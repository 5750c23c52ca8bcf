"""
Kaleidoscope Error Hierarchy
============================

This module defines the root of the exception hierarchy for the
Kaleidoscope front end. All exceptions inherit from KaleidoscopeError,
allowing callers to catch every front-end error with a single except
clause if desired.

Exception Hierarchy
-------------------
KaleidoscopeError (base)
└── FrontendError (lexer, parser and driver errors)
    └── FrontendSyntaxError - malformed construct
        ├── UnexpectedTokenError - token cannot begin an expression
        ├── UnclosedParenError - missing ')' after a parenthesized expression
        ├── MalformedArgumentListError - neither ',' nor ')' in a call
        └── MalformedPrototypeError - bad function name, '(' or ')'

The frontend-specific classes live in kaleidoscope.frontend.errors.

Error messages follow this format:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass


# =============================================================================
# Base Exception Class
# =============================================================================

class KaleidoscopeError(Exception):
    """
    Base exception for all Kaleidoscope errors.

    All exceptions in the package inherit from this class, allowing
    callers to catch every error with a single except clause:

        try:
            parse_source("def foo(x) x+1")
        except KaleidoscopeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    Represents a location in source text for error reporting.

    The lexer stamps every token with the location of its first
    character, and syntax errors carry the location of the offending
    token. The immutable (frozen) design ensures locations cannot be
    accidentally modified.

    Attributes:
        filename: Name of the source (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"
