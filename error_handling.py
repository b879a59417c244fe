"""
Error handling for the Tiny BASIC toolchain
Three independent taxonomies (lexical, syntactic, runtime) plus shell
command errors built from pyparsing exceptions
"""

from typing import Any, List, Optional, Dict, Tuple
from pyparsing import ParseException
import re


# ============================================================================
# ERROR KINDS
# ============================================================================

# Parse error kinds
LEXICAL = "LEXICAL"
UNEXPECTED_END = "UNEXPECTED_END"
UNEXPECTED_TOKEN = "UNEXPECTED_TOKEN"
INVALID_LINE_NUMBER = "INVALID_LINE_NUMBER"

# Runtime error kinds
DIVISION_BY_ZERO = "DIVISION_BY_ZERO"
UNDEFINED_VARIABLE = "UNDEFINED_VARIABLE"
ARRAY_NOT_DIMENSIONED = "ARRAY_NOT_DIMENSIONED"
INDEX_OUT_OF_BOUNDS = "INDEX_OUT_OF_BOUNDS"
# INVALID_LINE_NUMBER is shared: a bad jump target at runtime


# ============================================================================
# DATA STRUCTURES (Immutable Dictionaries)
# ============================================================================

def make_parse_error(
    message: str,
    location: int,
    line: int,
    column: int,
    expected: Optional[List[str]] = None,
    got: Optional[str] = None,
    context: Optional[str] = None,
    suggestions: Optional[List[str]] = None
) -> Dict:
    """Create an immutable parse error structure"""
    return {
        'message': message,
        'location': location,
        'line': line,
        'column': column,
        'expected': expected or [],
        'got': got,
        'context': context,
        'suggestions': suggestions or []
    }


def format_parse_error(error: Dict) -> str:
    """Format parse error as string"""
    error_msg = f"Error at line {error['line']}, column {error['column']}:\n"
    error_msg += f"  {error['message']}\n"

    if error['expected']:
        error_msg += f"  Expected: {', '.join(error['expected'])}\n"

    if error['got']:
        error_msg += f"  Got: {error['got']}\n"

    if error['context']:
        error_msg += f"  Context:\n{error['context']}\n"

    if error['suggestions']:
        error_msg += f"  Suggestions:\n"
        for suggestion in error['suggestions']:
            error_msg += f"    - {suggestion}\n"

    return error_msg


# ============================================================================
# PURE FUNCTIONS
# ============================================================================

def position_to_line_col(source_text: str, position: int) -> Tuple[int, int]:
    """Convert a 0-based character offset into a 1-based (line, column) pair"""
    position = max(0, min(position, len(source_text)))
    before = source_text[:position]
    line_num = before.count('\n') + 1
    col_num = position - (before.rfind('\n') + 1) + 1
    return line_num, col_num


def get_context_lines(source_text: str, line_num: int, col_num: int, context_lines: int = 2) -> str:
    """Get context lines around the error"""
    lines = source_text.split('\n')
    start_line = max(0, line_num - context_lines - 1)
    end_line = min(len(lines), line_num + context_lines)

    context_parts = []
    for i in range(start_line, end_line):
        line_prefix = f"{i+1:4d}: "
        if i == line_num - 1:  # Error line
            context_parts.append(f"{line_prefix}{lines[i]}")
            context_parts.append(f"{'':6}{' ' * (col_num - 1)}^ Error here")
        else:
            context_parts.append(f"{line_prefix}{lines[i]}")

    return '\n'.join(context_parts)


def extract_expected(exc: ParseException) -> List[str]:
    """Extract expected tokens from exception"""
    expected = []

    # Parse from message (pyparsing doesn't always have .expected attribute)
    msg = str(exc)
    if "Expected" in msg:
        expected_match = re.search(r"Expected\s+(.+?)(?:,\s+found|\s+\(|$)", msg)
        if expected_match:
            expected.append(expected_match.group(1))

    return expected if expected else ["valid command"]


def extract_got(source_text: str, line_num: int, col_num: int) -> str:
    """Extract what was actually found at the error location"""
    lines = source_text.split('\n')

    if line_num <= len(lines):
        error_line = lines[line_num - 1]
        if col_num <= len(error_line):
            start = max(0, col_num - 1)
            end = min(len(error_line), col_num + 10)
            got_text = error_line[start:end].strip()
            if got_text:
                return f"'{got_text}'"
        return "end of line"
    return "unknown"


def generate_suggestions(source_text: str, got: str, expected: List[str]) -> List[str]:
    """Generate helpful suggestions for a malformed shell command"""
    suggestions = []
    command = source_text.strip().split(' ', 1)[0].upper()

    if command in ("LOAD", "SAVE") and got == "end of line":
        suggestions.append(f"{command} needs a file name, e.g. {command} \"prog.bas\"")

    if command in ("RUN", "LIST", "NEW", "QUIT", "BYE", "EXIT") and got != "end of line":
        suggestions.append(f"{command} takes no arguments")

    if got.startswith("'\"") and got.count('"') == 1:
        suggestions.append("Close the quoted file name with a double quote")

    return suggestions


def enhance_parse_exception_dict(exc: ParseException, source_text: str) -> Dict:
    """Convert pyparsing exception to an enhanced error dict"""
    line_num = exc.lineno
    col_num = exc.column

    context = get_context_lines(source_text, line_num, col_num, context_lines=0)
    expected = extract_expected(exc)
    got = extract_got(source_text, line_num, col_num)
    suggestions = generate_suggestions(source_text, got, expected)

    return make_parse_error(
        message=exc.msg,
        location=exc.loc,
        line=line_num,
        column=col_num,
        expected=expected,
        got=got,
        context=context,
        suggestions=suggestions
    )


def format_source_error(source_text: str, position: int, message: str) -> str:
    """Render a core error message with a caret under the offending character"""
    line_num, col_num = position_to_line_col(source_text, position)
    error_dict = make_parse_error(
        message, position, line_num, col_num,
        context=get_context_lines(source_text, line_num, col_num, context_lines=1)
    )
    return format_parse_error(error_dict)


# ============================================================================
# EXCEPTION CLASSES
# ============================================================================

class BasicLexError(Exception):
    """Tokenization failure with a 0-based scan position"""
    def __init__(self, message: str, position: int):
        self.message = message
        self.position = position
        super().__init__(f"{message} at position {position}")


class BasicParseError(Exception):
    """Syntax error; the first one aborts parsing of the submitted text"""
    def __init__(self, kind: str, detail: str = "", position: Optional[int] = None,
                 lex_error: Optional[BasicLexError] = None):
        self.kind = kind
        self.detail = detail
        self.position = position
        self.lex_error = lex_error
        super().__init__(self._format_error())

    def _format_error(self) -> str:
        if self.kind == LEXICAL and self.lex_error is not None:
            return str(self.lex_error)
        if self.kind == UNEXPECTED_END:
            return "Unexpected end of input"
        if self.kind == INVALID_LINE_NUMBER:
            if self.detail:
                return f"Invalid line number: {self.detail}"
            return "Invalid line number"
        return self.detail

    @classmethod
    def from_lex_error(cls, error: BasicLexError) -> 'BasicParseError':
        # The scan position counts the offending character as consumed
        return cls(LEXICAL, error.message, max(error.position - 1, 0), lex_error=error)


class BasicRuntimeError(Exception):
    """Execution failure; aborts the current run only"""
    def __init__(self, kind: str, message: str, line_number: Optional[int] = None,
                 **details: Any):
        self.kind = kind
        self.message = message
        self.line_number = line_number
        self.details = details
        for key, value in details.items():
            setattr(self, key, value)
        super().__init__(message)

    def __str__(self) -> str:
        if self.line_number is not None:
            return f"{self.message} (line {self.line_number})"
        return self.message


class BasicCommandError(Exception):
    """Malformed interactive shell command"""
    def __init__(self, message: str, location: int = 0, line: int = 0, column: int = 0,
                 expected: Optional[List[str]] = None, got: Optional[str] = None,
                 context: Optional[str] = None, suggestions: Optional[List[str]] = None):
        self.message = message
        self.location = location
        self.line = line
        self.column = column
        self.expected = expected or []
        self.got = got
        self.context = context
        self.suggestions = suggestions or []
        super().__init__(message)

    def __str__(self) -> str:
        error_dict = make_parse_error(
            self.message, self.location, self.line, self.column,
            self.expected, self.got, self.context, self.suggestions
        )
        return format_parse_error(error_dict)


# ============================================================================
# ERROR CONSTRUCTORS
# ============================================================================

def division_by_zero_error() -> BasicRuntimeError:
    return BasicRuntimeError(DIVISION_BY_ZERO, "Division by zero")


def undefined_variable_error(name: str) -> BasicRuntimeError:
    return BasicRuntimeError(UNDEFINED_VARIABLE, f"Undefined variable: {name}", name=name)


def array_not_dimensioned_error(name: str) -> BasicRuntimeError:
    return BasicRuntimeError(ARRAY_NOT_DIMENSIONED, f"Array {name} not dimensioned", name=name)


def index_out_of_bounds_error(array: str, index: int, size: int) -> BasicRuntimeError:
    return BasicRuntimeError(
        INDEX_OUT_OF_BOUNDS,
        f"Index {index} out of bounds for array {array} (size {size})",
        array=array, index=index, size=size
    )


def invalid_line_number_error(target: int) -> BasicRuntimeError:
    return BasicRuntimeError(INVALID_LINE_NUMBER, f"Invalid line number: {target}", target=target)


def command_error_from_exception(exc: ParseException, source_text: str) -> BasicCommandError:
    """Convert pyparsing exception to a shell command error"""
    error_dict = enhance_parse_exception_dict(exc, source_text)
    return BasicCommandError(
        message=error_dict['message'],
        location=error_dict['location'],
        line=error_dict['line'],
        column=error_dict['column'],
        expected=error_dict['expected'],
        got=error_dict['got'],
        context=error_dict['context'],
        suggestions=error_dict['suggestions']
    )
