"""
Tiny BASIC program store
Line-number keyed program held by the interactive shell, with LOAD/SAVE.
Stores are plain dictionaries; every operation returns a new one.
"""

from typing import Dict, Iterable, List, Optional

from renderer import format_program
from parsing import BasicParser, create_parser
from syntax_tree import Line


def make_program_store(lines: Iterable[Line] = ()) -> Dict[int, Line]:
  """Create a store from lines; a later line replaces an earlier one with the same number"""
  return store_lines({}, lines)


def store_lines(store: Dict[int, Line], lines: Iterable[Line]) -> Dict[int, Line]:
  """Return a new store with lines inserted by number, last one wins"""
  new_store = dict(store)
  for line in lines:
    new_store[line.number] = line
  return new_store


def store_to_program(store: Dict[int, Line]) -> List[Line]:
  """Stored lines in ascending line-number order"""
  return [store[number] for number in sorted(store)]


def listing(store: Dict[int, Line]) -> str:
  return format_program(store_to_program(store))


def relinearize(store: Dict[int, Line], parser: Optional[BasicParser] = None) -> List[Line]:
  """
  Render the stored program back to text and parse it again, producing the
  executable program RUN hands to the interpreter.
  """
  parser = parser or create_parser()
  return parser.parse_string(listing(store))


def load_program_file(path: str, parser: Optional[BasicParser] = None) -> Dict[int, Line]:
  """Parse a source file into a fresh store; raises OSError or BasicParseError"""
  parser = parser or create_parser()
  return make_program_store(parser.parse_file(path))


def save_program_file(store: Dict[int, Line], path: str) -> int:
  """Write the stored program as source text; returns the number of lines saved"""
  with open(path, 'w', encoding='utf-8') as f:
    f.write(listing(store))
  return len(store)
