"""
Top-Level Driver
================

The driver repeatedly asks the parser for one top-level construct,
dispatching on the current token:

| Current token | Action                           | Status line                   |
|---------------|----------------------------------|-------------------------------|
| end of input  | stop                             |                               |
| ';'           | skip it                          |                               |
| 'def'         | parse a definition               | Parsed a function definition. |
| 'extern'      | parse an extern declaration      | Parsed an extern              |
| anything else | parse a top-level expression     | Parsed a top-level expr       |

A failed construct prints "Error: <message>", is recorded in the
session's ErrorCollector, and is skipped according to the configured
RecoveryPolicy. Errors never stop the session before max_errors.

Example Usage
-------------
>>> from kaleidoscope.frontend.driver import Driver
>>> report = Driver("def foo(x y) x+y; extern sin(a); foo(1, 2)", sink=print).run()
Parsed a function definition.
Parsed an extern
Parsed a top-level expr
>>> len(report.items)
3
"""

import io
import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Optional, Union

from kaleidoscope.config import FrontendConfig, RecoveryPolicy, get_default_config
from kaleidoscope.frontend.ast import Function, Prototype, TopLevel
from kaleidoscope.frontend.errors import ErrorCollector
from kaleidoscope.frontend.lexer import CharSource, Lexer, TokenKind
from kaleidoscope.frontend.parser import ANONYMOUS_FUNCTION_NAME, Parser
from kaleidoscope.frontend.result import ParseResult


logger = logging.getLogger(__name__)

# sink(text, newline)
Sink = Callable[..., None]


def _discard(text: str, newline: bool = True) -> None:
    pass


@dataclass
class DriverReport:
    """
    Outcome of a driver session.

    Attributes:
        items: Successfully parsed constructs, in source order
        errors: Diagnostics of the failed constructs
        anonymous_name: Prototype name marking wrapped top-level expressions
    """
    items: list[TopLevel] = field(default_factory=list)
    errors: ErrorCollector = field(default_factory=ErrorCollector)
    anonymous_name: str = field(default=ANONYMOUS_FUNCTION_NAME, repr=False)

    @property
    def ok(self) -> bool:
        return not self.errors.has_errors()

    @property
    def definitions(self) -> list[Function]:
        return [
            item for item in self.items
            if isinstance(item, Function) and not self._is_anonymous(item)
        ]

    @property
    def externs(self) -> list[Prototype]:
        return [item for item in self.items if isinstance(item, Prototype)]

    @property
    def expressions(self) -> list[Function]:
        return [
            item for item in self.items
            if isinstance(item, Function) and self._is_anonymous(item)
        ]

    def _is_anonymous(self, function: Function) -> bool:
        return function.prototype.name == self.anonymous_name


class Driver:
    """
    Read-parse loop over a stream of top-level constructs.

    Attributes:
        config: Session configuration
        errors: Errors and warnings of the session
        parser: The parser owning the current-token slot
        sink: Receives prompt and status text
        on_item: Optional callback for each parsed construct
    """

    def __init__(
        self,
        source: Union[Lexer, CharSource, str, io.TextIOBase, Iterable[str]],
        config: Optional[FrontendConfig] = None,
        sink: Optional[Sink] = None,
        filename: str = "<input>",
        on_item: Optional[Callable[[TopLevel], None]] = None,
    ):
        """
        Initialize the driver.

        Args:
            source: Characters (or a Lexer) to parse
            config: Session configuration (default instance if None)
            sink: Callable taking (text, newline=True); output is dropped if None
            filename: Source name for diagnostics
            on_item: Called with each construct as soon as it is parsed
        """
        self.config = config or get_default_config()
        self.errors = ErrorCollector(self.config.max_errors)

        lexer = source if isinstance(source, Lexer) else Lexer(source, filename)
        if lexer.on_warning is None:
            lexer.on_warning = self.errors.add_warning

        self.parser = Parser(
            lexer,
            precedence=self.config.precedence_table(),
            anonymous_name=self.config.anonymous_name,
            filename=filename,
        )
        self.sink = sink or _discard
        self.on_item = on_item

    def run(self) -> DriverReport:
        """Parse top-level constructs until end of input."""
        report = DriverReport(
            errors=self.errors,
            anonymous_name=self.config.anonymous_name,
        )

        while True:
            if self.config.show_prompt:
                self.sink(self.config.prompt, newline=False)

            token = self.parser.current

            if token.kind is TokenKind.EOF:
                break

            if token.is_symbol(";"):
                self.parser.advance()
                continue

            if token.kind is TokenKind.DEF:
                ok = self._handle(report, self.parser.parse_definition(), "Parsed a function definition.")
            elif token.kind is TokenKind.EXTERN:
                ok = self._handle(report, self.parser.parse_extern(), "Parsed an extern")
            else:
                ok = self._handle(report, self.parser.parse_top_level_expr(), "Parsed a top-level expr")

            if not ok and report.errors.should_stop():
                logger.warning(f"stopping after {report.errors.error_count()} errors")
                break

        if self.config.show_prompt:
            self.sink("")

        logger.debug(
            f"session finished: {len(report.items)} parsed, "
            f"{report.errors.error_count()} failed"
        )
        return report

    def _handle(self, report: DriverReport, result: ParseResult, status: str) -> bool:
        if result.ok:
            report.items.append(result.value)
            self.sink(status)
            if self.on_item is not None:
                self.on_item(result.value)
            return True

        report.errors.add(result.error)
        self.sink(f"Error: {result.error.message}")
        self._recover()
        return False

    def _recover(self) -> None:
        if self.config.recovery is RecoveryPolicy.SYNCHRONIZE:
            self._synchronize()
        else:
            skipped = self.parser.current
            self.parser.advance()
            logger.debug(f"recovery skipped {skipped!r}")

    def _synchronize(self) -> None:
        """
        Skip tokens until a likely top-level boundary.

        Stops before 'def', 'extern' or end of input, or just after ';'.
        """
        while True:
            token = self.parser.current
            if token.kind in (TokenKind.EOF, TokenKind.DEF, TokenKind.EXTERN):
                return
            self.parser.advance()
            logger.debug(f"recovery skipped {token!r}")
            if token.is_symbol(";"):
                return


# =============================================================================
# Convenience Functions
# =============================================================================

def parse_source(
    source: str,
    filename: str = "<input>",
    config: Optional[FrontendConfig] = None,
) -> list[TopLevel]:
    """
    Parse every top-level construct of a source text.

    Args:
        source: Kaleidoscope source
        filename: Source name for error messages
        config: Session configuration (default instance if None)

    Returns:
        Parsed definitions, externs and wrapped top-level expressions

    Raises:
        FrontendCompilationError: If any construct failed, with a report
            of every error
    """
    report = Driver(source, config=config, filename=filename).run()
    report.errors.raise_if_errors()
    return report.items
