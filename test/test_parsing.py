"""
Tokenizer and parser tests for Tiny BASIC
"""

import pytest
from parsing import (
  tokenize, parse, Token, BasicStatementParser,
  NUMBER, IDENT, STRING, KEYWORD, OPERATOR, DELIMITER,
)
from error_handling import (
  BasicLexError, BasicParseError,
  LEXICAL, UNEXPECTED_END, UNEXPECTED_TOKEN, INVALID_LINE_NUMBER,
)
from syntax_tree import (
  Number, Variable, ArrayAccess, BinaryOp,
  Print, Let, LetArray, Goto, If, End, Dim, Line,
)


class TestTokenizer:
  """Test lexical analysis"""

  @pytest.mark.parametrize("n", [0, 7, 10, 999, 65536, 123456789, 2147483647])
  def test_integer_literal_round_trip(self, n):
    assert tokenize(str(n)) == [Token(NUMBER, n)]

  def test_integer_literal_wraps_to_32_bits(self):
    assert tokenize("2147483648") == [Token(NUMBER, -2147483648)]
    assert tokenize("4294967306") == [Token(NUMBER, 10)]

  def test_keywords_are_case_insensitive(self):
    tokens = tokenize("print Let GOTO if Then end dim")
    assert [t.value for t in tokens] == ["PRINT", "LET", "GOTO", "IF", "THEN", "END", "DIM"]
    assert all(t.type == KEYWORD for t in tokens)

  def test_single_letter_identifier_is_uppercased(self):
    assert tokenize("a") == [Token(IDENT, "A")]

  def test_operators_with_lookahead(self):
    tokens = tokenize("<= <> < >= > = + - * /")
    assert [t.value for t in tokens] == ["<=", "<>", "<", ">=", ">", "=", "+", "-", "*", "/"]
    assert all(t.type == OPERATOR for t in tokens)

  def test_adjacent_operators_are_not_merged_backwards(self):
    # "<" followed by "=" is one token, "=" followed by "<" is two
    assert [t.value for t in tokenize("=<")] == ["=", "<"]
    assert [t.value for t in tokenize("><")] == [">", "<"]

  def test_punctuation(self):
    assert tokenize("(,)") == [
        Token(DELIMITER, "("), Token(DELIMITER, ","), Token(DELIMITER, ")")
    ]

  def test_string_literal_keeps_contents_verbatim(self):
    assert tokenize('"a b, c <> 1"') == [Token(STRING, "a b, c <> 1")]

  def test_empty_string_literal(self):
    assert tokenize('""') == [Token(STRING, "")]

  def test_newlines_only_separate_tokens(self):
    assert tokenize("10 END\n20 END") == tokenize("10 END 20 END")
    assert tokenize("10 END\r\n20 END") == tokenize("10 END 20 END")

  def test_whitespace_is_skipped(self):
    assert tokenize("  \t 5  ") == [Token(NUMBER, 5)]
    assert tokenize("") == []

  def test_token_positions(self):
    tokens = tokenize('10 PRINT "X"')
    assert [t.position for t in tokens] == [0, 3, 9]

  def test_multi_letter_name_is_invalid_identifier(self):
    with pytest.raises(BasicLexError) as exc_info:
      tokenize("Foo")
    assert exc_info.value.message == "Invalid identifier: FOO"
    assert exc_info.value.position == 3

  def test_keyword_glued_to_number_is_one_word(self):
    with pytest.raises(BasicLexError) as exc_info:
      tokenize("GOTO10")
    assert exc_info.value.message == "Invalid identifier: GOTO10"

  def test_unterminated_string(self):
    with pytest.raises(BasicLexError) as exc_info:
      tokenize('10 PRINT "abc')
    assert exc_info.value.message == "Unterminated string"
    assert exc_info.value.position == 13

  def test_unexpected_character(self):
    with pytest.raises(BasicLexError) as exc_info:
      tokenize("10 @")
    assert exc_info.value.message == "Unexpected character: @"
    assert exc_info.value.position == 4
    assert str(exc_info.value) == "Unexpected character: @ at position 4"


class TestExpressions:
  """Test the precedence ladder"""

  def test_multiplication_binds_tighter(self, parser):
    assert parser.parse_expression("1 + 2 * 3") == BinaryOp(
        Number(1), '+', BinaryOp(Number(2), '*', Number(3))
    )

  def test_additive_is_left_associative(self, parser):
    assert parser.parse_expression("8 - 3 - 1") == BinaryOp(
        BinaryOp(Number(8), '-', Number(3)), '-', Number(1)
    )

  def test_multiplicative_is_left_associative(self, parser):
    assert parser.parse_expression("8 / 4 * 2") == BinaryOp(
        BinaryOp(Number(8), '/', Number(4)), '*', Number(2)
    )

  def test_parentheses_override_precedence(self, parser):
    assert parser.parse_expression("(1 + 2) * 3") == BinaryOp(
        BinaryOp(Number(1), '+', Number(2)), '*', Number(3)
    )

  def test_unary_minus_desugars_to_subtraction(self, parser):
    assert parser.parse_expression("-A") == BinaryOp(Number(0), '-', Variable('A'))

  def test_repeated_unary_minus(self, parser):
    assert parser.parse_expression("--2") == BinaryOp(
        Number(0), '-', BinaryOp(Number(0), '-', Number(2))
    )

  def test_unary_binds_tighter_than_multiplication(self, parser):
    assert parser.parse_expression("-2 * 3") == BinaryOp(
        BinaryOp(Number(0), '-', Number(2)), '*', Number(3)
    )

  def test_comparison_is_lowest(self, parser):
    assert parser.parse_expression("A + 1 <> B * 2") == BinaryOp(
        BinaryOp(Variable('A'), '+', Number(1)),
        '<>',
        BinaryOp(Variable('B'), '*', Number(2))
    )

  def test_array_access(self, parser):
    assert parser.parse_expression("A(I + 1)") == ArrayAccess(
        'A', BinaryOp(Variable('I'), '+', Number(1))
    )

  def test_comparison_is_not_chainable(self, parser):
    with pytest.raises(BasicParseError) as exc_info:
      parser.parse_expression("A < B < C")
    assert exc_info.value.kind == UNEXPECTED_TOKEN

  def test_unmatched_parenthesis(self, parser):
    with pytest.raises(BasicParseError) as exc_info:
      parser.parse_expression("(1 + 2")
    assert exc_info.value.kind == UNEXPECTED_END

  def test_missing_operand(self, parser):
    with pytest.raises(BasicParseError) as exc_info:
      parser.parse_expression("1 + )")
    assert exc_info.value.kind == UNEXPECTED_TOKEN
    assert exc_info.value.detail == "Expected expression, got ')'"


class TestStatements:
  """Test statement grammars"""

  def test_print_mixed_items(self):
    assert parse('10 PRINT "A", 1+2, "B"') == [
        Line(10, Print(("A", BinaryOp(Number(1), '+', Number(2)), "B")))
    ]

  def test_print_without_items(self):
    assert parse("10 PRINT") == [Line(10, Print(()))]

  def test_print_skips_stray_commas(self):
    assert parse("10 PRINT ,1,,2,") == [Line(10, Print((Number(1), Number(2))))]

  def test_print_without_items_before_next_line(self):
    assert parse("10 PRINT\n20 END") == [Line(10, Print(())), Line(20, End())]

  def test_print_trailing_comma_before_next_line(self):
    assert parse('10 PRINT "A",\n20 PRINT "B"') == [
        Line(10, Print(("A",))), Line(20, Print(("B",)))
    ]

  def test_number_item_then_next_line(self):
    assert parse("10 PRINT 5\n20 LET A = 1") == [
        Line(10, Print((Number(5),))), Line(20, Let('A', Number(1)))
    ]

  def test_print_negative_expression(self):
    assert parse("10 PRINT -1") == [
        Line(10, Print((BinaryOp(Number(0), '-', Number(1)),)))
    ]

  def test_print_items_need_commas(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse('10 PRINT "A" "B"')
    assert exc_info.value.kind == UNEXPECTED_TOKEN

  def test_let(self):
    assert parse("10 LET A = B * 2") == [
        Line(10, Let('A', BinaryOp(Variable('B'), '*', Number(2))))
    ]

  def test_let_array(self):
    assert parse("10 LET A(I) = 5") == [Line(10, LetArray('A', Variable('I'), Number(5)))]

  def test_let_missing_equals(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 LET A 5")
    assert exc_info.value.kind == UNEXPECTED_TOKEN
    assert exc_info.value.detail == "Expected '=', got number 5"

  def test_let_missing_value(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 LET A =")
    assert exc_info.value.kind == UNEXPECTED_END

  def test_let_malformed_index(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 LET A(1 = 2")
    assert exc_info.value.kind == UNEXPECTED_END

  def test_goto(self):
    assert parse("10 GOTO 20") == [Line(10, Goto(20))]

  def test_goto_needs_number(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 GOTO X")
    assert exc_info.value.detail == "Expected line number, got identifier X"

  def test_if(self):
    assert parse("10 IF A >= 3 THEN 50") == [
        Line(10, If(BinaryOp(Variable('A'), '>=', Number(3)), 50))
    ]

  def test_if_requires_then(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 IF A > 1 20")
    assert exc_info.value.detail == "Expected THEN, got number 20"

  def test_end(self):
    assert parse("10 END") == [Line(10, End())]

  def test_dim(self):
    assert parse("10 DIM A(5)") == [Line(10, Dim('A', 5))]

  def test_dim_requires_parenthesis(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 DIM A 5")
    assert exc_info.value.detail == "Expected '(', got number 5"

  def test_dim_negative_size_is_accepted_syntactically(self):
    assert parse("10 DIM A(4294967295)") == [Line(10, Dim('A', -1))]

  def test_unknown_statement(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 THEN")
    assert exc_info.value.detail == "Expected statement, got THEN"

  def test_line_number_without_statement(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10")
    assert exc_info.value.kind == UNEXPECTED_END
    assert str(exc_info.value) == "Unexpected end of input"


class TestPrograms:
  """Test program-level parsing"""

  def test_empty_input(self):
    assert parse("") == []

  def test_bare_statement_is_empty_program(self):
    assert parse("PRINT 1") == []

  def test_lines_are_sorted_by_number(self):
    lines = parse("30 END\n10 END\n20 END")
    assert [line.number for line in lines] == [10, 20, 30]

  def test_duplicate_line_numbers_are_kept_in_order(self):
    lines = parse('10 PRINT "FIRST"\n5 END\n10 PRINT "SECOND"')
    assert [line.number for line in lines] == [5, 10, 10]
    assert lines[1].statement == Print(("FIRST",))
    assert lines[2].statement == Print(("SECOND",))

  def test_trailing_tokens_after_statement_are_rejected(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 LET A = 1 < 2 < 3")
    assert exc_info.value.kind == UNEXPECTED_TOKEN
    assert exc_info.value.detail == "Unexpected '<' after statement on line 10"

  def test_unnumbered_line_after_program_is_rejected(self):
    with pytest.raises(BasicParseError):
      parse("10 END\nPRINT 1")

  def test_wrapped_line_number_is_invalid(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("4294967295 END")
    assert exc_info.value.kind == INVALID_LINE_NUMBER

  def test_wrapped_jump_target_is_invalid(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 GOTO 4294967295")
    assert exc_info.value.kind == INVALID_LINE_NUMBER

  def test_lexical_failure_is_wrapped(self):
    with pytest.raises(BasicParseError) as exc_info:
      parse("10 LET AB = 1")
    error = exc_info.value
    assert error.kind == LEXICAL
    assert isinstance(error.lex_error, BasicLexError)
    assert isinstance(error.__cause__, BasicLexError)
    assert str(error) == "Invalid identifier: AB at position 9"

  def test_parser_accepts_token_list(self):
    tokens = tokenize("20 END 10 GOTO 20")
    lines = BasicStatementParser(tokens).parse_program()
    assert lines == [Line(10, Goto(20)), Line(20, End())]

  def test_parse_file(self, parser, tmp_path):
    source = tmp_path / "loop.bas"
    source.write_text("20 END\n10 PRINT 1\n", encoding="utf-8")
    assert parser.parse_file(str(source)) == [
        Line(10, Print((Number(1),))), Line(20, End())
    ]
