"""
Parse Results
=============

Every public parser operation returns a ParseResult instead of a
nullable node, so a failed parse is part of the visible contract:

    result = parser.parse_expression()
    if result.ok:
        use(result.value)
    else:
        report(result.error)

Callers that prefer exceptions use `unwrap()`, which raises the carried
FrontendSyntaxError.
"""

from dataclasses import dataclass
from typing import Generic, Optional, TypeVar

from kaleidoscope.frontend.errors import ErrorKind, FrontendSyntaxError


T = TypeVar("T")


@dataclass(frozen=True)
class ParseResult(Generic[T]):
    """
    Success-with-value or failure-with-error.

    Exactly one of `value` and `error` is set.

    Attributes:
        value: The parsed node on success
        error: The innermost syntax error on failure
    """
    value: Optional[T] = None
    error: Optional[FrontendSyntaxError] = None

    def __post_init__(self):
        if (self.value is None) == (self.error is None):
            raise ValueError("ParseResult needs exactly one of value or error")

    @classmethod
    def success(cls, value: T) -> "ParseResult[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: FrontendSyntaxError) -> "ParseResult[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        """ErrorKind of the failure, or None on success."""
        return None if self.error is None else self.error.kind

    @property
    def message(self) -> Optional[str]:
        return None if self.error is None else self.error.message

    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""
        if self.error is not None:
            raise self.error
        return self.value

    def __bool__(self) -> bool:
        return self.ok
