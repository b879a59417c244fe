"""
Tiny BASIC Syntax Tree
Immutable, token-free representation of program lines
"""

from typing import Sequence, Tuple, Union
from dataclasses import dataclass


# ============================================================================
# EXPRESSIONS
# ============================================================================

@dataclass(frozen=True)
class Number:
    """Integer literal"""
    value: int

    def __str__(self) -> str:
        return f"Number({self.value})"


@dataclass(frozen=True)
class Variable:
    """One of the 26 letter variables, always uppercase"""
    name: str

    def __str__(self) -> str:
        return f"Variable({self.name})"


@dataclass(frozen=True)
class ArrayAccess:
    """Element read A(index)"""
    name: str
    index: 'Expr'

    def __str__(self) -> str:
        return f"ArrayAccess({self.name}, {self.index})"


@dataclass(frozen=True)
class BinaryOp:
    """Binary operation; op is one of + - * / = <> < <= > >="""
    left: 'Expr'
    op: str
    right: 'Expr'

    def __str__(self) -> str:
        return f"BinaryOp({self.left} {self.op} {self.right})"


Expr = Union[Number, Variable, ArrayAccess, BinaryOp]

# A PRINT item is either literal text or an expression to evaluate
PrintItem = Union[str, Expr]


# ============================================================================
# STATEMENTS
# ============================================================================

@dataclass(frozen=True)
class Print:
    items: Tuple[PrintItem, ...] = ()


@dataclass(frozen=True)
class Let:
    name: str
    value: Expr


@dataclass(frozen=True)
class LetArray:
    name: str
    index: Expr
    value: Expr


@dataclass(frozen=True)
class Goto:
    target: int


@dataclass(frozen=True)
class If:
    """IF condition THEN target; no ELSE branch"""
    condition: Expr
    target: int


@dataclass(frozen=True)
class End:
    pass


@dataclass(frozen=True)
class Dim:
    """Declare (or redeclare) array name with size elements"""
    name: str
    size: int


Stmt = Union[Print, Let, LetArray, Goto, If, End, Dim]


@dataclass(frozen=True)
class Line:
    """One numbered program line"""
    number: int
    statement: Stmt

    def __str__(self) -> str:
        return f"Line({self.number}, {type(self.statement).__name__})"


Program = Sequence[Line]


# ============================================================================
# DEBUG RENDERING
# ============================================================================

def pretty_print_node(node, indent: int = 0) -> str:
    """Pretty print a syntax tree node for debugging"""
    pad = "  " * indent

    if isinstance(node, Line):
        return f"{pad}LINE({node.number})\n" + pretty_print_node(node.statement, indent + 1)

    if isinstance(node, str):
        return f"{pad}STRING({node!r})\n"

    if isinstance(node, Number):
        return f"{pad}NUMBER({node.value})\n"

    if isinstance(node, Variable):
        return f"{pad}VARIABLE({node.name})\n"

    if isinstance(node, ArrayAccess):
        return f"{pad}ARRAY_ACCESS({node.name})\n" + pretty_print_node(node.index, indent + 1)

    if isinstance(node, BinaryOp):
        return (f"{pad}BINARY_OP({node.op!r})\n"
                + pretty_print_node(node.left, indent + 1)
                + pretty_print_node(node.right, indent + 1))

    if isinstance(node, Print):
        return f"{pad}PRINT\n" + "".join(pretty_print_node(item, indent + 1) for item in node.items)

    if isinstance(node, Let):
        return f"{pad}LET({node.name})\n" + pretty_print_node(node.value, indent + 1)

    if isinstance(node, LetArray):
        return (f"{pad}LET_ARRAY({node.name})\n"
                + pretty_print_node(node.index, indent + 1)
                + pretty_print_node(node.value, indent + 1))

    if isinstance(node, Goto):
        return f"{pad}GOTO({node.target})\n"

    if isinstance(node, If):
        return f"{pad}IF(then {node.target})\n" + pretty_print_node(node.condition, indent + 1)

    if isinstance(node, End):
        return f"{pad}END\n"

    if isinstance(node, Dim):
        return f"{pad}DIM({node.name}, {node.size})\n"

    return f"{pad}UNKNOWN({node!r})\n"
