"""
Tiny BASIC Parser
Tokenizer and recursive-descent parser producing syntax tree lines
"""

from typing import List, Optional, Any
from dataclasses import dataclass, field

from error_handling import (
    BasicLexError,
    BasicParseError,
    UNEXPECTED_END,
    UNEXPECTED_TOKEN,
    INVALID_LINE_NUMBER,
)
from syntax_tree import (
    Number, Variable, ArrayAccess, BinaryOp,
    Print, Let, LetArray, Goto, If, End, Dim,
    Line, Expr, Stmt, pretty_print_node,
)
from utilities import wrap_int32, COMPARISON_OPERATORS


# Token types
NUMBER = "NUMBER"
IDENT = "IDENT"
STRING = "STRING"
KEYWORD = "KEYWORD"
OPERATOR = "OPERATOR"
DELIMITER = "DELIMITER"

KEYWORDS = ("PRINT", "LET", "GOTO", "IF", "THEN", "END", "DIM")
STATEMENT_KEYWORDS = ("PRINT", "LET", "GOTO", "IF", "END", "DIM")


@dataclass(frozen=True)
class Token:
    """Tiny BASIC token; position is informational and not compared"""
    type: str
    value: Any
    position: int = field(default=0, compare=False)

    def __str__(self) -> str:
        return f"{self.type}({self.value})"

    def describe(self) -> str:
        """Human readable form used in syntax error messages"""
        if self.type == NUMBER:
            return f"number {self.value}"
        if self.type == IDENT:
            return f"identifier {self.value}"
        if self.type == STRING:
            return f'string "{self.value}"'
        if self.type == KEYWORD:
            return self.value
        return f"'{self.value}'"

    def is_a(self, token_type: str, value: Any = None) -> bool:
        return self.type == token_type and (value is None or self.value == value)


class BasicTokenizer:
    """Tiny BASIC tokenizer with one character of lookahead"""

    def __init__(self, text: str, debug: bool = False):
        self.text = text
        self.position = 0
        self.debug = debug

    def _peek(self) -> Optional[str]:
        if self.position < len(self.text):
            return self.text[self.position]
        return None

    def _advance(self) -> Optional[str]:
        char = self._peek()
        if char is not None:
            self.position += 1
        return char

    def _skip_whitespace(self):
        while True:
            char = self._peek()
            if char is not None and char.isspace() and char != '\n':
                self._advance()
            else:
                break

    def tokenize(self) -> List[Token]:
        """Tokenize the whole input, raising BasicLexError on the first problem"""
        tokens = []

        while True:
            self._skip_whitespace()
            start = self.position
            char = self._advance()
            if char is None:
                break

            # Line breaks only separate tokens
            if char in '\n\r':
                continue

            token = self._scan_token(char, start)
            if self.debug:
                print(f"DEBUG: token {token} at {start}")
            tokens.append(token)

        return tokens

    def _scan_token(self, char: str, start: int) -> Token:
        if char in '+-*/=':
            return Token(OPERATOR, char, start)

        if char in '(),':
            return Token(DELIMITER, char, start)

        if char == '<':
            if self._peek() == '=':
                self._advance()
                return Token(OPERATOR, '<=', start)
            if self._peek() == '>':
                self._advance()
                return Token(OPERATOR, '<>', start)
            return Token(OPERATOR, '<', start)

        if char == '>':
            if self._peek() == '=':
                self._advance()
                return Token(OPERATOR, '>=', start)
            return Token(OPERATOR, '>', start)

        if char == '"':
            return self._scan_string(start)

        if char.isascii() and char.isdigit():
            return self._scan_number(char, start)

        if char.isascii() and char.isalpha():
            return self._scan_word(char, start)

        raise BasicLexError(f"Unexpected character: {char}", self.position)

    def _scan_string(self, start: int) -> Token:
        chars = []
        while True:
            char = self._advance()
            if char is None:
                raise BasicLexError("Unterminated string", self.position)
            if char == '"':
                return Token(STRING, ''.join(chars), start)
            chars.append(char)

    def _scan_number(self, first: str, start: int) -> Token:
        value = int(first)
        while True:
            char = self._peek()
            if char is not None and char.isascii() and char.isdigit():
                self._advance()
                value = wrap_int32(value * 10 + int(char))
            else:
                break
        return Token(NUMBER, value, start)

    def _scan_word(self, first: str, start: int) -> Token:
        word = first.upper()
        while True:
            char = self._peek()
            if char is not None and char.isascii() and char.isalnum():
                self._advance()
                word += char.upper()
            else:
                break

        if word in KEYWORDS:
            return Token(KEYWORD, word, start)
        if len(word) == 1:
            return Token(IDENT, word, start)
        raise BasicLexError(f"Invalid identifier: {word}", self.position)


class BasicStatementParser:
    """Recursive-descent parser over a token list"""

    def __init__(self, tokens: List[Token], debug: bool = False):
        self.tokens = tokens
        self.index = 0
        self.debug = debug

    # ------------------------------------------------------------------
    # Token stream helpers
    # ------------------------------------------------------------------

    def _peek(self) -> Optional[Token]:
        if self.index < len(self.tokens):
            return self.tokens[self.index]
        return None

    def _advance(self) -> Optional[Token]:
        token = self._peek()
        if token is not None:
            self.index += 1
        return token

    def _check(self, token_type: str, value: Any = None) -> bool:
        token = self._peek()
        return token is not None and token.is_a(token_type, value)

    def _unexpected(self, expected: str, token: Optional[Token]) -> BasicParseError:
        if token is None:
            return BasicParseError(UNEXPECTED_END)
        return BasicParseError(
            UNEXPECTED_TOKEN, f"Expected {expected}, got {token.describe()}", token.position
        )

    def _expect(self, token_type: str, value: Any, expected: str) -> Token:
        token = self._advance()
        if token is None or not token.is_a(token_type, value):
            raise self._unexpected(expected, token)
        return token

    def _expect_ident(self, expected: str) -> str:
        return self._expect(IDENT, None, expected).value

    def _expect_line_number(self, expected: str = "line number") -> int:
        token = self._expect(NUMBER, None, expected)
        if token.value < 0:
            raise BasicParseError(INVALID_LINE_NUMBER, str(token.value), token.position)
        return token.value

    # ------------------------------------------------------------------
    # Program and lines
    # ------------------------------------------------------------------

    def parse_program(self) -> List[Line]:
        """Parse numbered lines until the stream stops with one, then sort by number"""
        lines = []
        while True:
            line = self.parse_line()
            if line is None:
                break
            lines.append(line)

        # sorted() is stable: duplicate numbers keep their relative order
        return sorted(lines, key=lambda line: line.number)

    def parse_line(self) -> Optional[Line]:
        if not self._check(NUMBER):
            return None

        number = self._expect_line_number()
        statement = self.parse_statement()

        # Statement boundary: only the next line number or end of input may follow
        token = self._peek()
        if token is not None and not token.is_a(NUMBER):
            raise BasicParseError(
                UNEXPECTED_TOKEN,
                f"Unexpected {token.describe()} after statement on line {number}",
                token.position
            )

        line = Line(number, statement)
        if self.debug:
            print(f"DEBUG: parsed {line}")
        return line

    def parse_statement(self) -> Stmt:
        token = self._advance()
        if token is None:
            raise BasicParseError(UNEXPECTED_END)

        if token.is_a(KEYWORD, "PRINT"):
            return self._parse_print()
        if token.is_a(KEYWORD, "LET"):
            return self._parse_let()
        if token.is_a(KEYWORD, "GOTO"):
            return Goto(self._expect_line_number())
        if token.is_a(KEYWORD, "IF"):
            return self._parse_if()
        if token.is_a(KEYWORD, "END"):
            return End()
        if token.is_a(KEYWORD, "DIM"):
            return self._parse_dim()

        raise self._unexpected("statement", token)

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    def _starts_next_line(self) -> bool:
        """A NUMBER followed by a statement keyword begins the next line"""
        if not self._check(NUMBER) or self.index + 1 >= len(self.tokens):
            return False
        following = self.tokens[self.index + 1]
        return following.type == KEYWORD and following.value in STATEMENT_KEYWORDS

    def _starts_print_item(self) -> bool:
        token = self._peek()
        if token is None or self._starts_next_line():
            return False
        return (token.type in (STRING, IDENT, NUMBER)
                or token.is_a(DELIMITER, '(')
                or token.is_a(OPERATOR, '-'))

    def _parse_print(self) -> Print:
        items = []
        while True:
            if self._check(DELIMITER, ','):
                self._advance()
                continue
            if not self._starts_print_item():
                break

            if self._check(STRING):
                items.append(self._advance().value)
            else:
                items.append(self.parse_expr())

            if self._check(DELIMITER, ','):
                self._advance()
            else:
                break

        return Print(tuple(items))

    def _parse_let(self) -> Stmt:
        name = self._expect_ident("variable")

        if self._check(DELIMITER, '('):
            self._advance()
            index = self.parse_expr()
            self._expect(DELIMITER, ')', "')'")
            self._expect(OPERATOR, '=', "'='")
            return LetArray(name, index, self.parse_expr())

        self._expect(OPERATOR, '=', "'='")
        return Let(name, self.parse_expr())

    def _parse_if(self) -> If:
        condition = self.parse_expr()
        self._expect(KEYWORD, "THEN", "THEN")
        return If(condition, self._expect_line_number())

    def _parse_dim(self) -> Dim:
        name = self._expect_ident("array name")
        self._expect(DELIMITER, '(', "'('")
        size = self._expect(NUMBER, None, "array size").value
        self._expect(DELIMITER, ')', "')'")
        return Dim(name, size)

    # ------------------------------------------------------------------
    # Expressions, lowest precedence first
    # ------------------------------------------------------------------

    def parse_expr(self) -> Expr:
        return self._parse_comparison()

    def _parse_comparison(self) -> Expr:
        # A single comparison; A < B < C is not chainable
        left = self._parse_additive()
        token = self._peek()
        if token is not None and token.type == OPERATOR and token.value in COMPARISON_OPERATORS:
            self._advance()
            return BinaryOp(left, token.value, self._parse_additive())
        return left

    def _parse_additive(self) -> Expr:
        left = self._parse_multiplicative()
        while self._check(OPERATOR, '+') or self._check(OPERATOR, '-'):
            op = self._advance().value
            left = BinaryOp(left, op, self._parse_multiplicative())
        return left

    def _parse_multiplicative(self) -> Expr:
        left = self._parse_unary()
        while self._check(OPERATOR, '*') or self._check(OPERATOR, '/'):
            op = self._advance().value
            left = BinaryOp(left, op, self._parse_unary())
        return left

    def _parse_unary(self) -> Expr:
        if self._check(OPERATOR, '-'):
            self._advance()
            return BinaryOp(Number(0), '-', self._parse_unary())
        return self._parse_primary()

    def _parse_primary(self) -> Expr:
        token = self._advance()

        if token is not None and token.is_a(NUMBER):
            return Number(token.value)

        if token is not None and token.is_a(IDENT):
            if self._check(DELIMITER, '('):
                self._advance()
                index = self.parse_expr()
                self._expect(DELIMITER, ')', "')'")
                return ArrayAccess(token.value, index)
            return Variable(token.value)

        if token is not None and token.is_a(DELIMITER, '('):
            expr = self.parse_expr()
            self._expect(DELIMITER, ')', "')'")
            return expr

        raise self._unexpected("expression", token)


class BasicParser:
    """Main Tiny BASIC parser combining tokenizer and recursive descent"""

    def __init__(self, debug: bool = False):
        self.debug = debug

    def parse_file(self, filepath: str) -> List[Line]:
        """Parse a Tiny BASIC source file"""
        with open(filepath, 'r', encoding='utf-8') as f:
            content = f.read()
        return self.parse_string(content)

    def parse_string(self, text: str) -> List[Line]:
        """Parse Tiny BASIC source code from string"""
        tokens = self.tokenize(text)
        return self.parse_tokens(tokens)

    def parse_tokens(self, tokens: List[Token]) -> List[Line]:
        return BasicStatementParser(tokens, self.debug).parse_program()

    def parse_expression(self, text: str) -> Expr:
        """Parse a single expression; the whole text must be consumed"""
        tokens = self.tokenize(text)
        parser = BasicStatementParser(tokens, self.debug)
        expr = parser.parse_expr()
        token = parser._peek()
        if token is not None:
            raise BasicParseError(
                UNEXPECTED_TOKEN, f"Unexpected {token.describe()} after expression", token.position
            )
        return expr

    def tokenize(self, text: str) -> List[Token]:
        """Tokenize Tiny BASIC source, reporting lexical failures as parse errors"""
        try:
            return BasicTokenizer(text, self.debug).tokenize()
        except BasicLexError as e:
            raise BasicParseError.from_lex_error(e) from e


# Module level entry points
def tokenize(text: str) -> List[Token]:
    """Tokenize raw text; raises BasicLexError"""
    return BasicTokenizer(text).tokenize()


def parse(text: str) -> List[Line]:
    """Tokenize, parse and sort a program; raises BasicParseError"""
    return BasicParser().parse_string(text)


# Factory functions for creating parsers
def create_parser(debug: bool = False) -> BasicParser:
    """Create a Tiny BASIC parser"""
    return BasicParser(debug=debug)


def create_debug_parser() -> BasicParser:
    """Create a Tiny BASIC parser with debug enabled"""
    return BasicParser(debug=True)


def pretty_print_program(lines: List[Line]) -> str:
    """Pretty print parsed lines for debugging"""
    return "".join(pretty_print_node(line) for line in lines)


if __name__ == "__main__":
    parser = create_debug_parser()

    try:
        expr = parser.parse_expression("1 + 2 * -A")
        print("Expression parse result:")
        print(pretty_print_node(expr))
    except BasicParseError as e:
        print(f"Parse error: {e}")

    try:
        program = parser.parse_string("""
        20 LET A = A + 1
        10 LET A = 1
        30 IF A < 3 THEN 20
        40 PRINT "A IS", A
        """)
        print("\nProgram parse result:")
        print(pretty_print_program(program))
    except BasicParseError as e:
        print(f"Parse error: {e}")
