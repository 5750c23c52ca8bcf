"""
ksparse - Kaleidoscope Parser Command-Line Interface
====================================================

This module implements the command-line interface for the Kaleidoscope
front end. It parses a source file (or stdin) one top-level construct
at a time and reports what it parsed, the way an interactive
read-eval loop would.

Usage Examples
--------------
Parse a file:
    $ ksparse program.ks

Interactive session with prompt:
    $ ksparse --prompt
    ready> def foo(x y) x+foo(y, 4.0);
    Parsed a function definition.

Show the parsed trees:
    $ ksparse --ast program.ks

Dump tokens only:
    $ ksparse --tokens program.ks

Add an operator:
    $ ksparse -p /=40 program.ks
"""

import logging
import sys
from typing import Optional, TextIO

import click

from kaleidoscope import __version__
from kaleidoscope.cli.errors import ExitCode, handle_cli_exception
from kaleidoscope.config import FrontendConfig, RecoveryPolicy
from kaleidoscope.frontend.ast import ASTPrinter
from kaleidoscope.frontend.driver import Driver
from kaleidoscope.frontend.lexer import Lexer
from kaleidoscope.frontend.precedence import PrecedenceTable


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(name)s: %(message)s" if verbose else "%(levelname)s: %(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.File("r"),
    default="-",
    required=False,
)
@click.option(
    "--ast",
    is_flag=True,
    help="Print each parsed construct as a tree",
)
@click.option(
    "--tokens",
    is_flag=True,
    help="Print the token stream and exit (for debugging)",
)
@click.option(
    "--recovery",
    type=click.Choice([policy.value for policy in RecoveryPolicy], case_sensitive=False),
    default=None,
    help="After an error: 'skip' one token (default) or 'sync' to the next ';', def or extern",
)
@click.option(
    "-p", "--precedence",
    multiple=True,
    metavar="OP=N",
    help="Set a binary operator precedence, e.g. -p /=40 (can be repeated; N <= 0 disables)",
)
@click.option(
    "--prompt/--no-prompt",
    default=None,
    help="Print the 'ready> ' prompt before each construct",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output (debug logging and full error report)",
)
@click.version_option(version=__version__, prog_name="ksparse")
def main(
    input_file: TextIO,
    ast: bool,
    tokens: bool,
    recovery: Optional[str],
    precedence: tuple[str, ...],
    prompt: Optional[bool],
    verbose: bool,
) -> None:
    """
    Parse Kaleidoscope source code.

    INPUT_FILE is the source to parse (default: stdin).

    Each top-level construct (a 'def' definition, an 'extern'
    declaration or a bare expression) is reported on stderr as it is
    parsed. The exit code is 1 if any construct failed.

    \b
    Examples:
        ksparse program.ks           # Report each construct
        ksparse --ast program.ks     # Also print the trees
        ksparse --prompt             # Interactive session on stdin
        ksparse -p /=40 program.ks   # Add a division operator
    """
    setup_logging(verbose)

    try:
        config = FrontendConfig.from_env()

        if recovery is not None:
            config.recovery = RecoveryPolicy(recovery.lower())
        if prompt is not None:
            config.show_prompt = prompt

        try:
            table = PrecedenceTable.parse_overrides(precedence, base=config.precedence)
        except (ValueError, TypeError) as e:
            raise click.BadParameter(str(e), param_hint="'--precedence'")
        config.precedence = dict(table)

        filename = getattr(input_file, "name", "<input>")

        if tokens:
            for token in Lexer(input_file, filename).tokenize():
                click.echo(repr(token))
            return

        printer = ASTPrinter()

        def sink(text: str, newline: bool = True) -> None:
            click.echo(text, nl=newline, err=True)

        def show(item) -> None:
            if ast:
                click.echo(printer.print(item))

        report = Driver(
            input_file,
            config=config,
            sink=sink,
            filename=filename,
            on_item=show,
        ).run()

        if verbose:
            click.echo(
                f"Parsed {len(report.definitions)} definitions, "
                f"{len(report.externs)} externs, "
                f"{len(report.expressions)} expressions",
                err=True,
            )

        if verbose and (not report.ok or report.errors.warning_count()):
            click.echo(report.errors.report(), err=True)

        if not report.ok:
            sys.exit(ExitCode.PARSE_ERROR)

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Parse")


if __name__ == "__main__":
    main()
