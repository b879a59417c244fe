"""
Tiny BASIC Interpreter
Tree-walking evaluator: plain functions over a per-run execution state,
side effects (program output) handled through a caller-supplied sink
"""

from typing import Callable, Dict, List, Optional

from error_handling import (
  BasicRuntimeError,
  undefined_variable_error,
  array_not_dimensioned_error,
  index_out_of_bounds_error,
  invalid_line_number_error,
)
from syntax_tree import (
  Number, Variable, ArrayAccess, BinaryOp,
  Print, Let, LetArray, Goto, If, End, Dim,
  Expr, Stmt, Program,
)
from utilities import (
  BINARY_OPERATORS,
  letter_index,
  is_letter,
  make_letter_bank,
)


OutputSink = Callable[[str], None]


# ============================================================================
# DATA STRUCTURES
# ============================================================================

def make_execution_state() -> Dict:
  """Create a fresh execution state: zeroed letter bank, no arrays, cursor at 0"""
  return {
      'variables': make_letter_bank(),
      'arrays': {},
      'cursor': 0,
      'done': False
  }


def get_variable(state: Dict, name: str) -> int:
  if not is_letter(name):
    raise undefined_variable_error(name)
  return state['variables'][letter_index(name)]


def set_variable(state: Dict, name: str, value: int) -> None:
  if not is_letter(name):
    raise undefined_variable_error(name)
  state['variables'][letter_index(name)] = value


def lookup_array(state: Dict, name: str) -> List[int]:
  """Return the array declared under name, failing if DIM never ran for it"""
  array = state['arrays'].get(name)
  if array is None:
    raise array_not_dimensioned_error(name)
  return array


def check_index(name: str, array: List[int], index: int) -> None:
  if index < 0 or index >= len(array):
    raise index_out_of_bounds_error(name, index, len(array))


def find_line_index(program: Program, line_number: int) -> int:
  """Position of the first line numbered line_number in program order"""
  for position, line in enumerate(program):
    if line.number == line_number:
      return position
  raise invalid_line_number_error(line_number)


# ============================================================================
# EXPRESSION EVALUATION
# ============================================================================

def eval_expr(expr: Expr, state: Dict, debug: bool = False) -> int:
  """
  Evaluate an expression to a signed 32-bit integer.
  Pure with respect to the state: reads variables and arrays, never writes.
  """
  if isinstance(expr, Number):
    return expr.value
  elif isinstance(expr, Variable):
    return get_variable(state, expr.name)
  elif isinstance(expr, ArrayAccess):
    return eval_array_access(expr, state, debug)
  elif isinstance(expr, BinaryOp):
    return eval_binary_op(expr, state, debug)
  else:
    raise TypeError(f"Unknown expression node: {expr!r}")


def eval_array_access(expr: ArrayAccess, state: Dict, debug: bool = False) -> int:
  index = eval_expr(expr.index, state, debug)
  array = lookup_array(state, expr.name)
  check_index(expr.name, array, index)
  return array[index]


def eval_binary_op(expr: BinaryOp, state: Dict, debug: bool = False) -> int:
  # Both operands, left first, no short-circuit
  left = eval_expr(expr.left, state, debug)
  right = eval_expr(expr.right, state, debug)

  op_func = BINARY_OPERATORS.get(expr.op)
  if op_func is None:
    raise TypeError(f"Unknown operation: {expr.op}")
  return op_func(left, right)


# ============================================================================
# STATEMENT EXECUTION
# ============================================================================

def exec_statement(stmt: Stmt, state: Dict, output: OutputSink, debug: bool = False) -> Optional[int]:
  """
  Execute one statement and return the jump target, or None to fall through.
  """
  if isinstance(stmt, Print):
    return exec_print(stmt, state, output, debug)
  elif isinstance(stmt, Let):
    set_variable(state, stmt.name, eval_expr(stmt.value, state, debug))
    return None
  elif isinstance(stmt, LetArray):
    return exec_let_array(stmt, state, debug)
  elif isinstance(stmt, Goto):
    return stmt.target
  elif isinstance(stmt, If):
    if eval_expr(stmt.condition, state, debug) != 0:
      return stmt.target
    return None
  elif isinstance(stmt, End):
    state['done'] = True
    return None
  elif isinstance(stmt, Dim):
    return exec_dim(stmt, state, debug)
  else:
    raise TypeError(f"Unknown statement node: {stmt!r}")


def exec_print(stmt: Print, state: Dict, output: OutputSink, debug: bool = False) -> None:
  """Evaluate every item first so a failing item emits nothing"""
  parts = []
  for item in stmt.items:
    if isinstance(item, str):
      parts.append(item)
    else:
      parts.append(str(eval_expr(item, state, debug)))
  output(" ".join(parts))
  return None


def exec_let_array(stmt: LetArray, state: Dict, debug: bool = False) -> None:
  index = eval_expr(stmt.index, state, debug)
  value = eval_expr(stmt.value, state, debug)
  array = lookup_array(state, stmt.name)
  check_index(stmt.name, array, index)
  array[index] = value
  return None


def exec_dim(stmt: Dim, state: Dict, debug: bool = False) -> None:
  if stmt.size < 0:
    raise index_out_of_bounds_error(stmt.name, stmt.size, 0)
  if debug and stmt.name in state['arrays']:
    print(f"DEBUG: redeclaring array {stmt.name}")
  state['arrays'][stmt.name] = [0] * stmt.size
  return None


# ============================================================================
# PROGRAM EXECUTION
# ============================================================================

def run_program(program: Program, output: Optional[OutputSink] = None,
                debug: bool = False, state: Optional[Dict] = None) -> Dict:
  """
  Run a program from its first line until END, falling off the end, or a
  runtime error. Returns the final execution state.

  The program is used in the order given; it is not re-sorted.
  """
  if output is None:
    output = print
  if state is None:
    state = make_execution_state()

  while not state['done'] and state['cursor'] < len(program):
    line = program[state['cursor']]
    if debug:
      print(f"DEBUG: executing line {line.number}: {type(line.statement).__name__}")

    try:
      target = exec_statement(line.statement, state, output, debug)
      if target is not None:
        if debug:
          print(f"DEBUG: jump to {target}")
        state['cursor'] = find_line_index(program, target)
      else:
        state['cursor'] += 1
    except BasicRuntimeError as e:
      if e.line_number is None:
        e.line_number = line.number
      state['done'] = True
      raise

  state['done'] = True
  return state


# ============================================================================
# INTERPRETER OBJECT
# ============================================================================

class Interpreter:
  """Owns a program and the state of its most recent run"""

  def __init__(self, program: Program, output: Optional[OutputSink] = None,
               debug: bool = False):
    self.program = tuple(program)
    self.output = output if output is not None else print
    self.debug = debug
    self.state = make_execution_state()

  def run(self) -> None:
    """Run from a fresh state; raises BasicRuntimeError on failure"""
    self.state = make_execution_state()
    run_program(self.program, self.output, self.debug, self.state)

  def evaluate(self, expr: Expr) -> int:
    return eval_expr(expr, self.state, self.debug)

  def get_variable(self, name: str) -> int:
    return get_variable(self.state, name.upper())

  def get_array(self, name: str) -> List[int]:
    return list(lookup_array(self.state, name.upper()))

  @property
  def finished(self) -> bool:
    return self.state['done']


# ============================================================================
# FACTORY FUNCTIONS
# ============================================================================

def create_interpreter(program: Program = (), output: Optional[OutputSink] = None,
                       debug: bool = False) -> Interpreter:
  """Factory function returning an interpreter"""
  return Interpreter(program, output, debug)


def create_debug_interpreter(program: Program = (),
                             output: Optional[OutputSink] = None) -> Interpreter:
  """Factory function returning a debug interpreter"""
  return create_interpreter(program, output, debug=True)
