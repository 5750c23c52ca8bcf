"""
Kaleidoscope Front-End Configuration
====================================

Settings for a parse session: the operator precedence table, the error
recovery policy and the driver's prompt. Configuration can come from:
- Default values (defined here)
- Environment variables (FrontendConfig.from_env)
- Command-line options (kaleidoscope.cli.ksparse)

Environment Variables
---------------------
| Variable                  | Example      | Field        |
|---------------------------|--------------|--------------|
| KALEIDOSCOPE_RECOVERY     | sync         | recovery     |
| KALEIDOSCOPE_PROMPT       | "ks> "       | prompt       |
| KALEIDOSCOPE_MAX_ERRORS   | 20           | max_errors   |
| KALEIDOSCOPE_PRECEDENCE   | "/=40,<=10"  | precedence   |
"""

import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from kaleidoscope.frontend.precedence import DEFAULT_PRECEDENCE, PrecedenceTable
from kaleidoscope.frontend.parser import ANONYMOUS_FUNCTION_NAME


logger = logging.getLogger(__name__)


class RecoveryPolicy(Enum):
    """
    What the driver skips after a failed top-level construct.

    SKIP_TOKEN advances a single token and resumes, which can leave the
    parser in the middle of the broken construct and cascade into more
    errors. SYNCHRONIZE skips to the next ';', 'def', 'extern' or end of
    input, consuming a ';' it stops on.
    """
    SKIP_TOKEN = "skip"
    SYNCHRONIZE = "sync"


@dataclass
class FrontendConfig:
    """
    Configuration for a parse session.

    Attributes:
        precedence: Operator character -> precedence (<= 0 disables)
        recovery: Recovery policy after a failed construct
        prompt: Text printed before each top-level construct
        show_prompt: Whether the driver prints the prompt at all
        anonymous_name: Prototype name for top-level expressions
        max_errors: Stop the session after this many errors
    """
    precedence: dict[str, int] = field(default_factory=lambda: dict(DEFAULT_PRECEDENCE))
    recovery: RecoveryPolicy = RecoveryPolicy.SKIP_TOKEN
    prompt: str = "ready> "
    show_prompt: bool = False
    anonymous_name: str = ANONYMOUS_FUNCTION_NAME
    max_errors: int = 100

    @classmethod
    def from_env(cls) -> "FrontendConfig":
        """
        Create a FrontendConfig from environment variables.

        Invalid values are logged and ignored.
        """
        config = cls()

        if recovery := os.environ.get("KALEIDOSCOPE_RECOVERY"):
            try:
                config.recovery = RecoveryPolicy(recovery.strip().lower())
            except ValueError:
                logger.warning(f"ignoring KALEIDOSCOPE_RECOVERY={recovery!r}")

        if (prompt := os.environ.get("KALEIDOSCOPE_PROMPT")) is not None:
            config.prompt = prompt

        if max_errors := os.environ.get("KALEIDOSCOPE_MAX_ERRORS"):
            try:
                value = int(max_errors)
            except ValueError:
                value = 0
            if value < 1:
                logger.warning(f"ignoring KALEIDOSCOPE_MAX_ERRORS={max_errors!r}")
            else:
                config.max_errors = value

        if precedence := os.environ.get("KALEIDOSCOPE_PRECEDENCE"):
            overrides = [s.strip() for s in precedence.split(",") if s.strip()]
            try:
                table = PrecedenceTable.parse_overrides(overrides, base=config.precedence)
            except (ValueError, TypeError) as e:
                logger.warning(f"ignoring KALEIDOSCOPE_PRECEDENCE: {e}")
            else:
                config.precedence = dict(table)

        return config

    def precedence_table(self) -> PrecedenceTable:
        """Build a fresh PrecedenceTable from this configuration."""
        return PrecedenceTable(self.precedence)


# =============================================================================
# Default Configuration Instance
# =============================================================================

_default_config: Optional[FrontendConfig] = None


def get_default_config() -> FrontendConfig:
    """
    Get the default configuration.

    Created from environment variables on first access; replace it with
    set_default_config().
    """
    global _default_config
    if _default_config is None:
        _default_config = FrontendConfig.from_env()
    return _default_config


def set_default_config(config: Optional[FrontendConfig]) -> None:
    """Set the default configuration (None re-reads the environment on next access)."""
    global _default_config
    _default_config = config
