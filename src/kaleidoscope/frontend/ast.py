"""
Kaleidoscope Abstract Syntax Tree (AST) Definitions
===================================================

This module defines the AST node types produced by the parser.

Node Hierarchy
--------------
ASTNode (base)
├── Expressions (closed set, see `Expression`)
│   ├── NumberExpr - numeric literal
│   ├── VariableExpr - variable reference
│   ├── BinaryExpr - binary operator application
│   └── CallExpr - function call
├── Prototype - function name and parameter names
└── Function - prototype paired with a single body expression

Design Notes
------------
- All nodes are frozen dataclasses; sequences are stored as tuples, so
  a tree cannot be mutated after the parser returns it
- Each parent exclusively owns its children and the grammar cannot
  produce cycles
- Nodes carry no source positions; compare trees with ==
"""

from dataclasses import dataclass, field
from typing import Union


# =============================================================================
# AST Node Base Classes
# =============================================================================

@dataclass(frozen=True)
class ASTNode:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class ExprNode(ASTNode):
    """Base class for expression nodes."""
    pass


# =============================================================================
# Expression Nodes
# =============================================================================

@dataclass(frozen=True)
class NumberExpr(ExprNode):
    """
    Numeric literal like "1.0".

    Attributes:
        value: The literal's value
    """
    value: float


@dataclass(frozen=True)
class VariableExpr(ExprNode):
    """
    Reference to a variable, like "a".

    Attributes:
        name: The variable name
    """
    name: str


@dataclass(frozen=True)
class BinaryExpr(ExprNode):
    """
    Binary operator application (left op right).

    Both operands are always present.

    Attributes:
        operator: The single operator character
        left: Left operand
        right: Right operand
    """
    operator: str
    left: "Expression"
    right: "Expression"


@dataclass(frozen=True)
class CallExpr(ExprNode):
    """
    Function call expression.

    Attributes:
        callee: Name of the called function
        arguments: Fully parsed argument expressions, in order
    """
    callee: str
    arguments: tuple["Expression", ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "arguments", tuple(self.arguments))


# The closed set of expression variants
Expression = Union[NumberExpr, VariableExpr, BinaryExpr, CallExpr]


# =============================================================================
# Function Nodes
# =============================================================================

@dataclass(frozen=True)
class Prototype(ASTNode):
    """
    The "prototype" of a function: its name and parameter names, and so
    implicitly the number of arguments it takes.

    Parameter names are not validated; duplicates are kept.

    Attributes:
        name: Function name
        params: Parameter names, in order
    """
    name: str
    params: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        object.__setattr__(self, "params", tuple(self.params))

    @property
    def arity(self) -> int:
        return len(self.params)


@dataclass(frozen=True)
class Function(ASTNode):
    """
    A function definition: a prototype and exactly one body expression.

    Top-level expressions are wrapped in a Function with a reserved
    anonymous name and no parameters.

    Attributes:
        prototype: The function's prototype
        body: The body expression
    """
    prototype: Prototype
    body: Expression


# A top-level construct accepted by the driver
TopLevel = Union[Function, Prototype]


# =============================================================================
# AST Visitor Pattern
# =============================================================================

class ASTVisitor:
    """
    Base class for AST visitors.

    Subclasses override visit_* methods for the node types they care
    about; the defaults visit children.

    Usage:
        class CallCounter(ASTVisitor):
            def __init__(self):
                self.calls = 0

            def visit_CallExpr(self, node):
                self.calls += 1
                self.generic_visit(node)

        counter = CallCounter()
        counter.visit(function)
    """

    def visit(self, node: ASTNode):
        """Dispatch to visit_<ClassName>."""
        method_name = f"visit_{node.__class__.__name__}"
        visitor = getattr(self, method_name, self.generic_visit)
        return visitor(node)

    def generic_visit(self, node: ASTNode) -> None:
        """Visit all child nodes."""
        for field_value in node.__dict__.values():
            if isinstance(field_value, ASTNode):
                self.visit(field_value)
            elif isinstance(field_value, tuple):
                for item in field_value:
                    if isinstance(item, ASTNode):
                        self.visit(item)

    def visit_NumberExpr(self, node: NumberExpr): return self.generic_visit(node)
    def visit_VariableExpr(self, node: VariableExpr): return self.generic_visit(node)
    def visit_BinaryExpr(self, node: BinaryExpr): return self.generic_visit(node)
    def visit_CallExpr(self, node: CallExpr): return self.generic_visit(node)
    def visit_Prototype(self, node: Prototype): return self.generic_visit(node)
    def visit_Function(self, node: Function): return self.generic_visit(node)


# =============================================================================
# AST Pretty Printer
# =============================================================================

class ASTPrinter(ASTVisitor):
    """
    Pretty printer for AST debugging.

    Usage:
        printer = ASTPrinter()
        print(printer.print(function))

    Output for `def foo(x y) x + foo(y, 4.0)`:
        Function: foo(x, y)
          Body: (x + foo(y, 4))
    """

    def __init__(self):
        self.output: list[str] = []
        self.indent_level = 0

    def print(self, node: ASTNode) -> str:
        """Print the AST and return it as a string."""
        self.output = []
        self.indent_level = 0
        self.visit(node)
        return "\n".join(self.output)

    def _emit(self, text: str) -> None:
        indent = "  " * self.indent_level
        self.output.append(f"{indent}{text}")

    def visit_Function(self, node: Function):
        self._emit(f"Function: {self._proto_str(node.prototype)}")
        self.indent_level += 1
        self._emit(f"Body: {expr_str(node.body)}")
        self.indent_level -= 1

    def visit_Prototype(self, node: Prototype):
        self._emit(f"Extern: {self._proto_str(node)}")

    def generic_visit(self, node: ASTNode) -> None:
        self._emit(f"Expr: {expr_str(node)}")

    def _proto_str(self, proto: Prototype) -> str:
        return f"{proto.name}({', '.join(proto.params)})"


def expr_str(expr: Expression) -> str:
    """
    Render an expression on one line, fully parenthesizing binary
    operators so the tree shape is visible.
    """
    if isinstance(expr, NumberExpr):
        return f"{expr.value:g}"
    if isinstance(expr, VariableExpr):
        return expr.name
    if isinstance(expr, BinaryExpr):
        return f"({expr_str(expr.left)} {expr.operator} {expr_str(expr.right)})"
    if isinstance(expr, CallExpr):
        args = ", ".join(expr_str(a) for a in expr.arguments)
        return f"{expr.callee}({args})"
    raise TypeError(f"not an expression node: {type(expr).__name__}")
