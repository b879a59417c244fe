"""
Tiny BASIC source renderer
Turns parsed lines back into source text for LIST, SAVE and RUN
"""

from typing import Iterable

from syntax_tree import (
  Number, Variable, ArrayAccess, BinaryOp,
  Print, Let, LetArray, Goto, If, End, Dim,
  Line, Expr, Stmt,
)


def format_expr(expr: Expr) -> str:
  """Render an expression; binary operations are always parenthesized"""
  if isinstance(expr, Number):
    # Negative values only come from wrapped literals; keep them re-parseable
    if expr.value < 0:
      return f"(0 - {-expr.value})" if expr.value != -2 ** 31 else "(0 - 2147483647 - 1)"
    return str(expr.value)
  elif isinstance(expr, Variable):
    return expr.name
  elif isinstance(expr, ArrayAccess):
    return f"{expr.name}({format_expr(expr.index)})"
  elif isinstance(expr, BinaryOp):
    return f"({format_expr(expr.left)} {expr.op} {format_expr(expr.right)})"
  else:
    raise TypeError(f"Unknown expression node: {expr!r}")


def format_statement(stmt: Stmt) -> str:
  if isinstance(stmt, Print):
    parts = [f'"{item}"' if isinstance(item, str) else format_expr(item) for item in stmt.items]
    return f"PRINT {', '.join(parts)}".rstrip()
  elif isinstance(stmt, Let):
    return f"LET {stmt.name} = {format_expr(stmt.value)}"
  elif isinstance(stmt, LetArray):
    return f"LET {stmt.name}({format_expr(stmt.index)}) = {format_expr(stmt.value)}"
  elif isinstance(stmt, Goto):
    return f"GOTO {stmt.target}"
  elif isinstance(stmt, If):
    return f"IF {format_expr(stmt.condition)} THEN {stmt.target}"
  elif isinstance(stmt, End):
    return "END"
  elif isinstance(stmt, Dim):
    # DIM only accepts a literal; a negative size came from a wrapped literal
    return f"DIM {stmt.name}({stmt.size % 2 ** 32})"
  else:
    raise TypeError(f"Unknown statement node: {stmt!r}")


def format_line(line: Line) -> str:
  return f"{line.number} {format_statement(line.statement)}"


def format_program(lines: Iterable[Line]) -> str:
  """One rendered line per program line, newline terminated"""
  return "".join(format_line(line) + "\n" for line in lines)
