"""
Binary Operator Precedence Table
================================

Maps single operator characters to integer precedences for the
precedence-climbing expression parser. Higher numbers bind tighter.

Default Table
-------------
| Operator | Precedence |
|----------|------------|
| <        | 10         |
| + -      | 20         |
| *        | 40         |

A character that is absent from the table, or present with a
precedence <= 0, is not a binary operator; lookups report -1 for it.
All operators associate left to right.
"""

from typing import Iterator, Mapping, MutableMapping, Optional

from kaleidoscope.frontend.lexer import Token, TokenKind


# Sentinel precedence for "not a binary operator"
NOT_AN_OPERATOR = -1

DEFAULT_PRECEDENCE: dict[str, int] = {
    "<": 10,
    "+": 20,
    "-": 20,
    "*": 40,
}


class PrecedenceTable(MutableMapping[str, int]):
    """
    Mutable mapping from operator character to precedence.

    Each Parser owns its own table, so independent parses never share
    operator definitions.

    Example:
        table = PrecedenceTable()
        table["/"] = 40
        table.precedence_of("/")   # 40
        table.precedence_of("%")   # -1
    """

    def __init__(self, entries: Optional[Mapping[str, int]] = None):
        self._table: dict[str, int] = {}
        source = DEFAULT_PRECEDENCE if entries is None else entries
        for operator, precedence in source.items():
            self[operator] = precedence

    def __getitem__(self, operator: str) -> int:
        return self._table[operator]

    def __setitem__(self, operator: str, precedence: int) -> None:
        if not isinstance(operator, str) or len(operator) != 1:
            raise ValueError(f"operator must be a single character, got {operator!r}")
        if isinstance(precedence, bool) or not isinstance(precedence, int):
            raise TypeError(f"precedence must be an int, got {precedence!r}")
        self._table[operator] = precedence

    def __delitem__(self, operator: str) -> None:
        del self._table[operator]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"PrecedenceTable({self._table!r})"

    def precedence_of(self, operator: str) -> int:
        """Return the precedence of an operator, or -1 if it is not one."""
        precedence = self._table.get(operator, NOT_AN_OPERATOR)
        if precedence <= 0:
            return NOT_AN_OPERATOR
        return precedence

    def token_precedence(self, token: Token) -> int:
        """Return the precedence of a token; non-symbol tokens give -1."""
        if token.kind is not TokenKind.SYMBOL:
            return NOT_AN_OPERATOR
        return self.precedence_of(token.value)

    def copy(self) -> "PrecedenceTable":
        return PrecedenceTable(self._table)

    @classmethod
    def parse_overrides(cls, overrides, base: Optional[Mapping[str, int]] = None) -> "PrecedenceTable":
        """
        Build a table from "OP=N" strings applied on top of a base table.

        Args:
            overrides: Iterable of strings like "/=40" or "<=10"
            base: Starting table (defaults to DEFAULT_PRECEDENCE)

        Raises:
            ValueError: If an override is not of the form "OP=N"
        """
        table = cls(base)
        for override in overrides:
            operator, sep, value = override.rpartition("=")
            if not sep or len(operator) != 1:
                raise ValueError(f"invalid precedence '{override}' (expected OP=N)")
            try:
                table[operator] = int(value)
            except ValueError:
                raise ValueError(f"invalid precedence '{override}' (N must be an integer)") from None
        return table
