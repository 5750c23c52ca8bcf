"""
Kaleidoscope Lexer (Tokenizer)
==============================

This module implements the tokenizer for the Kaleidoscope expression
language. It pulls characters one at a time from a forward-only source
and produces one token per call, keeping exactly one character of
lookahead between calls.

Token Categories
----------------
- Keywords: def, extern
- Identifiers: [a-zA-Z][a-zA-Z0-9]*
- Numbers: [0-9.]+ converted like C strtod (permissive)
- Symbols: any other single character, returned verbatim
- End of input: returned forever once the source is exhausted

Comments
--------
'#' starts a comment that runs to the end of the line.

Number Conversion
-----------------
| Text    | Value | Note                         |
|---------|-------|------------------------------|
| 42      | 42.0  |                              |
| 3.14    | 3.14  |                              |
| .5      | 0.5   |                              |
| 1.2.3   | 1.2   | longest valid prefix, warned |
| ..      | 0.0   | no valid prefix, warned      |

Example Usage
-------------
>>> from kaleidoscope.frontend.lexer import Lexer
>>> lexer = Lexer("def foo(x) x*2")
>>> for token in lexer.tokenize():
...     print(token)
Token(DEF, 'def', 1:1)
Token(IDENTIFIER, 'foo', 1:5)
Token(SYMBOL, '(', 1:8)
Token(IDENTIFIER, 'x', 1:9)
Token(SYMBOL, ')', 1:10)
Token(IDENTIFIER, 'x', 1:12)
Token(SYMBOL, '*', 1:13)
Token(NUMBER, 2.0, 1:14)
Token(EOF, 1:15)
"""

import io
import logging
import re
import string
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Iterable, Iterator, Optional, Union

from kaleidoscope.errors import SourceLocation


logger = logging.getLogger(__name__)


# =============================================================================
# Token Kind Enumeration
# =============================================================================

class TokenKind(Enum):
    """
    Token kinds for the Kaleidoscope language.

    Keywords are distinguished from identifiers to simplify parsing.
    Every character that starts no other token is a SYMBOL, which
    covers operators, parentheses, ',' and ';'.
    """
    EOF = auto()            # End of input
    DEF = auto()            # def
    EXTERN = auto()         # extern
    IDENTIFIER = auto()     # Variable/function names
    NUMBER = auto()         # Numeric literals
    SYMBOL = auto()         # Any other single character


KEYWORDS: dict[str, TokenKind] = {
    "def": TokenKind.DEF,
    "extern": TokenKind.EXTERN,
}


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token produced by the lexer.

    The location is informational only and does not take part in
    equality, so `Token(TokenKind.SYMBOL, "+")` compares equal to any
    '+' token the lexer produces.

    Attributes:
        kind: The TokenKind classification
        value: Identifier text, numeric value, symbol character or None
        location: Where the token starts in the source
    """
    kind: TokenKind
    value: Union[str, float, None] = None
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __repr__(self) -> str:
        pos = ""
        if self.location is not None:
            pos = f", {self.location.line}:{self.location.column}"
        if self.value is None:
            return f"Token({self.kind.name}{pos})"
        return f"Token({self.kind.name}, {self.value!r}{pos})"

    def is_symbol(self, char: str) -> bool:
        """Return True if this token is the given single-character symbol."""
        return self.kind is TokenKind.SYMBOL and self.value == char

    def describe(self) -> str:
        """Short human-readable description for diagnostics."""
        if self.kind is TokenKind.EOF:
            return "end of input"
        if self.kind is TokenKind.SYMBOL:
            return f"'{self.value}'"
        if self.kind is TokenKind.NUMBER:
            return f"number {self.value:g}"
        if self.kind is TokenKind.IDENTIFIER:
            return f"identifier '{self.value}'"
        return f"keyword '{self.value}'"


# =============================================================================
# Character Source
# =============================================================================

class CharSource:
    """
    Forward-only, single-pass character source.

    Accepts a string, a text stream (read one character at a time, so
    interactive stdin works) or any iterable of characters. `read()`
    returns "" at end of input and keeps returning "" afterwards.
    """

    def __init__(self, source: Union[str, io.TextIOBase, Iterable[str]]):
        if hasattr(source, "read"):
            self._stream = source
            self._iterator = None
        else:
            self._stream = None
            self._iterator = iter(source)
        self._exhausted = False

    def read(self) -> str:
        """Return the next character, or "" once the source is exhausted."""
        if self._exhausted:
            return ""

        if self._stream is not None:
            char = self._stream.read(1)
        else:
            char = next(self._iterator, "")

        if not char:
            self._exhausted = True
            return ""
        return char

    @property
    def exhausted(self) -> bool:
        return self._exhausted


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes Kaleidoscope source text.

    The lexer holds a single character of lookahead: the character read
    while finishing the previous token, not yet consumed by any token.
    No input can make the lexer fail; every character maps to a token.

    The payload of the most recent token is also exposed through
    `identifier_text` and `number_value`, valid until the next call.

    Usage:
        lexer = Lexer(source_text, filename)
        token = lexer.next_token()

    Attributes:
        filename: Name of the source (for locations)
    """

    # C isspace() in the "C" locale
    BLANKS = " \t\n\v\f\r"

    IDENT_START = string.ascii_letters
    IDENT_CHARS = string.ascii_letters + string.digits
    NUMBER_CHARS = string.digits + "."

    _NUMBER_PREFIX = re.compile(r"\d*\.?\d*")

    def __init__(
        self,
        source: Union[CharSource, str, io.TextIOBase, Iterable[str]],
        filename: str = "<input>",
        on_warning: Optional[Callable[[str, SourceLocation], None]] = None,
    ):
        """
        Initialize the lexer.

        Args:
            source: Characters to tokenize (wrapped in a CharSource if needed)
            filename: Name of the source for token locations
            on_warning: Called with (message, location) for each warning,
                in addition to the log record
        """
        self.source = source if isinstance(source, CharSource) else CharSource(source)
        self.filename = filename
        self.on_warning = on_warning

        # Pending lookahead character; starts as a blank so the first call
        # reads from the source.
        self._last_char = " "

        # Position of _last_char
        self._line = 1
        self._column = 0

        # Source lines seen so far, for error context
        self._lines: list[list[str]] = [[]]

        self.identifier_text = ""
        self.number_value = 0.0

    # =========================================================================
    # Public API
    # =========================================================================

    def next_token(self) -> Token:
        """
        Return the next token from the source.

        Once the source is exhausted every call returns an EOF token
        without reading further.
        """
        while True:
            while self._last_char and self._last_char in self.BLANKS:
                self._read_char()

            location = self._location()
            char = self._last_char

            if char and char in self.IDENT_START:
                return self._scan_identifier(location)

            if char and char in self.NUMBER_CHARS:
                return self._scan_number(location)

            if char == "#":
                self._skip_comment()
                if self._last_char:
                    continue

            if not self._last_char:
                return Token(TokenKind.EOF, None, self._location())

            self._read_char()
            return Token(TokenKind.SYMBOL, char, location)

    def tokenize(self) -> Iterator[Token]:
        """
        Generate tokens up to and including the first EOF token.
        """
        while True:
            token = self.next_token()
            yield token
            if token.kind is TokenKind.EOF:
                return

    def source_line(self, line: int) -> Optional[str]:
        """Return the text of a line seen so far (1-indexed), if any."""
        if 0 < line <= len(self._lines):
            return "".join(self._lines[line - 1])
        return None

    # =========================================================================
    # Character Access
    # =========================================================================

    def _read_char(self) -> str:
        """Consume the lookahead character and fetch the next one."""
        if not self._last_char and self.source.exhausted:
            return ""

        if self._last_char == "\n":
            self._line += 1
            self._column = 1
            self._lines.append([])
        else:
            self._column += 1

        self._last_char = self.source.read()
        if self._last_char and self._last_char != "\n":
            self._lines[-1].append(self._last_char)
        return self._last_char

    def _location(self) -> SourceLocation:
        return SourceLocation(self.filename, self._line, max(self._column, 1))

    # =========================================================================
    # Token Scanning
    # =========================================================================

    def _scan_identifier(self, location: SourceLocation) -> Token:
        """
        Scan an identifier or keyword.

        Identifiers start with a letter and continue with letters or
        digits. Keywords are case-sensitive.
        """
        chars = [self._last_char]
        while self._read_char() and self._last_char in self.IDENT_CHARS:
            chars.append(self._last_char)

        name = "".join(chars)
        self.identifier_text = name

        if name in KEYWORDS:
            return Token(KEYWORDS[name], name, location)
        return Token(TokenKind.IDENTIFIER, name, location)

    def _scan_number(self, location: SourceLocation) -> Token:
        """Scan a maximal run of digits and '.' as a number."""
        chars = [self._last_char]
        while self._read_char() and self._last_char in self.NUMBER_CHARS:
            chars.append(self._last_char)

        text = "".join(chars)
        value = self._convert_number(text, location)
        self.number_value = value
        return Token(TokenKind.NUMBER, value, location)

    def _convert_number(self, text: str, location: SourceLocation) -> float:
        """
        Convert number text the way C strtod does.

        The longest leading prefix that forms a decimal is used; text
        with no such prefix converts to 0.0.
        """
        prefix = self._NUMBER_PREFIX.match(text).group()

        if prefix in ("", "."):
            value = 0.0
        else:
            value = float(prefix)

        if prefix != text:
            message = f"malformed number '{text}' read as {value!r}"
            logger.warning(f"{location}: {message}")
            if self.on_warning is not None:
                self.on_warning(message, location)

        return value

    def _skip_comment(self) -> None:
        """Skip from '#' up to, not including, a newline or end of input."""
        while True:
            char = self._read_char()
            if not char or char in "\n\r":
                return
