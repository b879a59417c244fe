"""
Utilities module for the Tiny BASIC interpreter
Signed 32-bit integer arithmetic, operator tables and letter-bank helpers
"""

from typing import Callable, Dict, List
import operator
import string

from error_handling import division_by_zero_error


LETTERS = string.ascii_uppercase

INT32_MIN = -2 ** 31
INT32_MAX = 2 ** 31 - 1
_INT32_SPAN = 2 ** 32


# ==================== INTEGER UTILITIES ====================

def wrap_int32(value: int) -> int:
  """
  Wrap an arbitrary Python int into the signed 32-bit range

  Two's complement wraparound is the single overflow policy used by both
  integer literals and arithmetic.

  Examples:
    wrap_int32(2147483647) -> 2147483647
    wrap_int32(2147483648) -> -2147483648
    wrap_int32(-2147483649) -> 2147483647
  """
  return (value - INT32_MIN) % _INT32_SPAN + INT32_MIN


def truncating_div(left: int, right: int) -> int:
  """
  Integer division rounding toward zero

  Raises:
    BasicRuntimeError(DIVISION_BY_ZERO) if right is 0

  Examples:
    truncating_div(7, 2) -> 3
    truncating_div(-7, 2) -> -3
  """
  if right == 0:
    raise division_by_zero_error()
  quotient = abs(left) // abs(right)
  if (left < 0) != (right < 0):
    quotient = -quotient
  return quotient


def bool_to_int(flag: bool) -> int:
  return 1 if flag else 0


# ==================== LETTER BANK UTILITIES ====================

def letter_index(name: str) -> int:
  """
  Offset of a variable letter in the 26-slot bank

  Examples:
    letter_index("A") -> 0
    letter_index("z") -> 25
  """
  return ord(name.upper()) - ord('A')


def is_letter(name: str) -> bool:
  return len(name) == 1 and name.upper() in LETTERS


def make_letter_bank() -> List[int]:
  """All 26 variables pre-seeded to zero"""
  return [0] * len(LETTERS)


# ==================== BINARY OPERATION FACTORIES ====================

def binary_comparison_op(op: Callable[[int, int], bool]) -> Callable[[int, int], int]:
  """
  Factory for comparison operations yielding 1 for true and 0 for false

  Examples:
    less = binary_comparison_op(operator.lt)
    less(1, 2) -> 1
  """
  def comparison(x: int, y: int) -> int:
    return bool_to_int(op(x, y))

  return comparison


def binary_arithmetic_op(op: Callable[[int, int], int]) -> Callable[[int, int], int]:
  """
  Factory for arithmetic operations wrapped to signed 32 bits

  Examples:
    add = binary_arithmetic_op(operator.add)
    add(2147483647, 1) -> -2147483648
  """
  def arithmetic(x: int, y: int) -> int:
    return wrap_int32(op(x, y))

  return arithmetic


BINARY_OPERATORS: Dict[str, Callable[[int, int], int]] = {
    '+': binary_arithmetic_op(operator.add),
    '-': binary_arithmetic_op(operator.sub),
    '*': binary_arithmetic_op(operator.mul),
    '/': binary_arithmetic_op(truncating_div),
    '=': binary_comparison_op(operator.eq),
    '<>': binary_comparison_op(operator.ne),
    '<': binary_comparison_op(operator.lt),
    '<=': binary_comparison_op(operator.le),
    '>': binary_comparison_op(operator.gt),
    '>=': binary_comparison_op(operator.ge),
}

COMPARISON_OPERATORS = ('=', '<>', '<', '<=', '>', '>=')
