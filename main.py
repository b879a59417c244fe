"""
Tiny BASIC - Main Entry Point
A minimal line-numbered BASIC: script runner and interactive shell
"""

import sys
import argparse
from pathlib import Path
from typing import Callable, Dict, Tuple
import os

# Readline support for history and auto-completion
try:
  import readline
  READLINE_AVAILABLE = True
except ImportError:
  READLINE_AVAILABLE = False

from commands import parse_command, COMMAND_NAMES
from error_handling import (
  BasicParseError, BasicRuntimeError, BasicCommandError, format_source_error,
)
from interpreter import create_interpreter, create_debug_interpreter
from parsing import (
  create_parser, create_debug_parser, pretty_print_program, KEYWORDS, BasicParser,
)
from program_store import (
  make_program_store, store_lines, store_to_program, relinearize,
  load_program_file, save_program_file,
)
from renderer import format_line
from syntax_tree import Line

VERSION = "Tiny BASIC v0.1.0"
HISTORY_FILE = "~/.tinybasic_history"


def create_arg_parser() -> argparse.ArgumentParser:
  """Create command line argument parser"""
  parser = argparse.ArgumentParser(
      description='Tiny BASIC - line-numbered integer BASIC interpreter',
      formatter_class=argparse.RawDescriptionHelpFormatter,
      epilog="""
Examples:
  %(prog)s program.bas            # Run a program
  %(prog)s -i                     # Interactive mode
  %(prog)s --tokens program.bas   # Tokenize file and show tokens
  %(prog)s --parse program.bas    # Parse file and show syntax tree
  %(prog)s --debug program.bas    # Run with debug output
  %(prog)s -i --debug             # Interactive mode with debug
        """
  )

  parser.add_argument(
      'script',
      nargs='?',
      help='Tiny BASIC program file to execute'
  )

  parser.add_argument(
      '-i', '--interactive',
      action='store_true',
      help='Start interactive mode'
  )

  parser.add_argument(
      '--tokens',
      action='store_true',
      help='Tokenize file and show tokens (for debugging)'
  )

  parser.add_argument(
      '--parse',
      action='store_true',
      help='Parse file and show syntax tree (for debugging)'
  )

  parser.add_argument(
      '--debug',
      action='store_true',
      help='Enable debug output for all stages'
  )

  parser.add_argument(
      '--version',
      action='version',
      version=VERSION
  )

  return parser


def read_source(script_path: str) -> str:
  with open(script_path, 'r', encoding='utf-8') as f:
    return f.read()


def report_parse_error(source: str, error: BasicParseError, label: str) -> None:
  if error.position is not None:
    print(f"Parse error in {label}:")
    print(format_source_error(source, error.position, str(error)))
  else:
    print(f"Parse error in {label}: {error}")


def report_runtime_error(error: BasicRuntimeError, label: str) -> None:
  print(f"\n{'='*70}")
  print(f"Runtime Error in {label}")
  print(f"{'='*70}")
  print(f"\nError: {error.message}")
  if error.line_number is not None:
    print(f"\nLocation: line {error.line_number}")
  print(f"\n{'='*70}\n")


def tokenize_file(script_path: str, debug: bool = False) -> None:
  """Tokenize a program file and show its tokens"""
  parser = create_debug_parser() if debug else create_parser()
  source = ""
  try:
    source = read_source(script_path)
    tokens = parser.tokenize(source)
    print(f"Tokenized {script_path}: {len(tokens)} tokens")
    print("=" * 50)
    for token in tokens:
      print(f"{token.position:6d}  {token}")
  except (OSError, UnicodeDecodeError) as e:
    print(f"Error: Cannot read '{script_path}': {e}")
    sys.exit(1)
  except BasicParseError as e:
    report_parse_error(source, e, f"'{script_path}'")
    sys.exit(1)


def parse_file(script_path: str, debug: bool = False) -> None:
  """Parse a program file and show the syntax tree"""
  parser = create_debug_parser() if debug else create_parser()
  source = ""
  try:
    source = read_source(script_path)
    lines = parser.parse_string(source)
    print(f"Parsed {len(lines)} lines from {script_path}:")
    print("=" * 50)
    print(pretty_print_program(lines), end='')
  except (OSError, UnicodeDecodeError) as e:
    print(f"Error: Cannot read '{script_path}': {e}")
    sys.exit(1)
  except BasicParseError as e:
    report_parse_error(source, e, f"'{script_path}'")
    sys.exit(1)


def run_script_file(script_path: str, debug: bool = False) -> None:
  """Parse and run a program file"""
  parser = create_debug_parser() if debug else create_parser()
  source = ""
  try:
    source = read_source(script_path)
    if debug:
      print(f"Parsing {script_path}...")
    lines = parser.parse_string(source)
    if debug:
      print(f"Parsed {len(lines)} lines")

    interpreter = create_debug_interpreter(lines) if debug else create_interpreter(lines)
    interpreter.run()
  except (OSError, UnicodeDecodeError) as e:
    print(f"Error: Cannot read '{script_path}': {e}")
    print(f"  Hint: Check the file path and make sure it is a UTF-8 text file")
    sys.exit(1)
  except BasicParseError as e:
    report_parse_error(source, e, f"'{script_path}'")
    sys.exit(1)
  except BasicRuntimeError as e:
    report_runtime_error(e, f"'{script_path}'")
    sys.exit(1)


def setup_readline():
  """Setup readline with history and auto-completion"""
  if not READLINE_AVAILABLE:
    return

  history_file = os.path.expanduser(HISTORY_FILE)
  try:
    readline.read_history_file(history_file)
  except OSError:
    pass  # First time, no history yet, or permission denied

  readline.set_history_length(1000)

  completions = list(KEYWORDS) + list(COMMAND_NAMES)

  def completer(text, state):
    options = [word for word in completions if word.startswith(text.upper())]
    if state < len(options):
      return options[state]
    return None

  readline.set_completer(completer)
  readline.parse_and_bind("tab: complete")

  import atexit
  atexit.register(readline.write_history_file, history_file)


def report_shell_parse_error(source: str, error: BasicParseError,
                             output: Callable[[str], None]) -> None:
  if error.position is not None:
    output(format_source_error(source, error.position, str(error)).rstrip('\n'))
  else:
    output(f"Parse error: {error}")


def execute_shell_input(code: str, store: Dict[int, Line], parser: BasicParser,
                        debug: bool = False,
                        output: Callable[[str], None] = print) -> Tuple[Dict[int, Line], bool]:
  """
  Handle one line typed at the prompt.
  Returns the (possibly new) program store and whether the shell keeps running.
  """
  try:
    command = parse_command(code)
  except BasicCommandError as e:
    output(f"Command error: {e}")
    return store, True

  if command is None:
    # Program text: merge numbered lines into the store
    try:
      return store_lines(store, parser.parse_string(code)), True
    except BasicParseError as e:
      report_shell_parse_error(code, e, output)
      return store, True

  if command.name == "QUIT":
    output("Goodbye!")
    return store, False

  if command.name == "NEW":
    output("Program cleared.")
    return make_program_store(), True

  if command.name == "LIST":
    if not store:
      output("(No program)")
    for line in store_to_program(store):
      output(format_line(line))
    return store, True

  if command.name == "RUN":
    if not store:
      output("(No program to run)")
      return store, True
    try:
      program = relinearize(store, parser)
      interpreter = create_interpreter(program, output, debug)
      interpreter.run()
    except BasicParseError as e:
      output(f"Parse error: {e}")
    except BasicRuntimeError as e:
      output(f"Runtime error: {e}")
    return store, True

  if command.name == "LOAD":
    try:
      new_store = load_program_file(command.path, parser)
    except (OSError, UnicodeDecodeError) as e:
      output(f"Error loading file: {e}")
      return store, True
    except BasicParseError as e:
      output(f"Parse error in {command.path}:")
      report_shell_parse_error(read_source(command.path), e, output)
      return store, True
    output(f"Loaded {len(new_store)} lines from {command.path}")
    return new_store, True

  if command.name == "SAVE":
    try:
      count = save_program_file(store, command.path)
    except OSError as e:
      output(f"Error saving file: {e}")
      return store, True
    output(f"Saved {count} lines to {command.path}")
    return store, True

  output(f"Unknown command: {command.name}")
  return store, True


def run_interactive_mode(debug: bool = False) -> None:
  """Run Tiny BASIC in interactive mode"""
  print(f"{VERSION} - Interactive Mode")
  print("Commands: LOAD, SAVE, RUN, LIST, NEW, QUIT")
  if READLINE_AVAILABLE:
    print("Readline enabled: Use ↑/↓ for history, Tab for completion")
  if debug:
    print("Debug mode enabled")
  print()

  setup_readline()

  parser = create_debug_parser() if debug else create_parser()
  store = make_program_store()

  while True:
    try:
      code = input("> ").strip()
      if not code:
        continue

      store, keep_running = execute_shell_input(code, store, parser, debug)
      if not keep_running:
        break

    except KeyboardInterrupt:
      # Ctrl-C interrupts a runaway program but keeps the shell alive
      print("\nBreak")
    except EOFError:
      print("\nGoodbye!")
      break


def show_language_info() -> None:
  """Show Tiny BASIC language information"""
  print("Tiny BASIC")
  print("=" * 50)
  print("A minimal line-numbered BASIC with:")
  print("• Statements: PRINT, LET, GOTO, IF ... THEN, END, DIM")
  print("• Variables A-Z holding signed 32-bit integers")
  print("• One-dimensional integer arrays")
  print()


def main() -> None:
  """Main entry point for Tiny BASIC"""
  arg_parser = create_arg_parser()
  args = arg_parser.parse_args()

  if len(sys.argv) == 1:
    # No arguments - show info and start interactive mode
    show_language_info()
    run_interactive_mode(debug=False)
    return

  if args.script:
    if not Path(args.script).exists():
      print(f"Error: Program file '{args.script}' does not exist")
      sys.exit(1)

    if args.tokens:
      tokenize_file(args.script, debug=args.debug)
    elif args.parse:
      parse_file(args.script, debug=args.debug)
    else:
      run_script_file(args.script, debug=args.debug)

  elif args.interactive:
    run_interactive_mode(debug=args.debug)

  else:
    arg_parser.print_help()
    print()
    show_language_info()


if __name__ == "__main__":
  main()
