"""
Unit tests for the Lexer module
"""

import pytest
from cexpr.lexer import Lexer, Span, Token, TokenType, LexerError


class TestLexerBasics:
    """Test basic lexer functionality"""

    def test_empty_input(self):
        """Test lexer with empty input"""
        lexer = Lexer("")
        tokens = lexer.tokenize()
        assert len(tokens) == 1
        assert tokens[0].type == TokenType.EOF
        assert tokens[0].span == Span(0, 0)

    def test_single_identifier(self):
        """Test lexing a single identifier"""
        lexer = Lexer("hello")
        tokens = lexer.tokenize()
        assert len(tokens) == 2
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[0].value == "hello"
        assert tokens[1].type == TokenType.EOF

    def test_multiple_identifiers(self):
        """Test lexing multiple identifiers"""
        lexer = Lexer("hello world foo")
        tokens = lexer.tokenize()
        assert len(tokens) == 4  # 3 identifiers + EOF
        assert all(t.type == TokenType.IDENTIFIER for t in tokens[:3])
        assert tokens[3].type == TokenType.EOF


class TestKeywords:
    """Test keyword recognition"""

    def test_type_keywords(self):
        """Type specifiers and qualifiers are keywords"""
        words = "int char void unsigned long const volatile"
        tokens = Lexer(words).tokenize()[:-1]
        assert len(tokens) == len(words.split())
        assert all(t.type == TokenType.KEYWORD for t in tokens)

    def test_keyword_vs_identifier(self):
        """Test keyword vs identifier distinction"""
        tokens = Lexer("int integer").tokenize()
        assert tokens[0].type == TokenType.KEYWORD
        assert tokens[0].value == "int"
        assert tokens[1].type == TokenType.IDENTIFIER
        assert tokens[1].value == "integer"


class TestNumbers:
    """Test number literal lexing"""

    def test_decimal_integer(self):
        tokens = Lexer("123").tokenize()
        assert tokens[0].type == TokenType.INT_DEC
        assert tokens[0].text == "123"

    def test_zero_is_decimal(self):
        tokens = Lexer("0").tokenize()
        assert tokens[0].type == TokenType.INT_DEC

    def test_octal_integer(self):
        tokens = Lexer("0755").tokenize()
        assert tokens[0].type == TokenType.INT_OCT
        assert tokens[0].text == "0755"

    def test_hex_integer(self):
        tokens = Lexer("0xDEADBEEF").tokenize()
        assert tokens[0].type == TokenType.INT_HEX
        assert tokens[0].text == "0xDEADBEEF"

    def test_integer_suffix_kept(self):
        tokens = Lexer("10UL 0x1fu").tokenize()
        assert tokens[0].type == TokenType.INT_DEC
        assert tokens[0].text == "10UL"
        assert tokens[1].type == TokenType.INT_HEX
        assert tokens[1].text == "0x1fu"

    def test_float_literal(self):
        tokens = Lexer("3.14").tokenize()
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].text == "3.14"

    def test_float_with_exponent(self):
        tokens = Lexer("1.0e-5").tokenize()
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].text == "1.0e-5"

    def test_float_with_suffix(self):
        tokens = Lexer("3.14f").tokenize()
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].text == "3.14f"

    def test_leading_dot_float(self):
        tokens = Lexer(".5").tokenize()
        assert tokens[0].type == TokenType.FLOAT
        assert tokens[0].text == ".5"

    def test_bad_octal_digit(self):
        lexer = Lexer("089")
        lexer.tokenize()
        assert lexer.has_errors()


class TestStrings:
    """Test string literal lexing"""

    def test_simple_string(self):
        tokens = Lexer('"hello"').tokenize()
        assert tokens[0].type == TokenType.STRING
        assert tokens[0].value == "hello"
        assert tokens[0].text == '"hello"'

    def test_string_with_escape(self):
        tokens = Lexer('"hello\\nworld"').tokenize()
        assert tokens[0].value == "hello\nworld"

    def test_hex_escape(self):
        tokens = Lexer('"\\x41B"').tokenize()
        assert tokens[0].value == "AB"

    @pytest.mark.parametrize("source, value", [
        ('"\\101"', "A"),
        ('"\\0"', "\0"),
        ('"\\012"', "\n"),
        ('"\\7x"', "\7x"),
        ('"\\0011"', "\x011"),
        ('"\\1019"', "A9"),
    ])
    def test_octal_escape(self, source, value):
        """Octal escapes take one to three digits"""
        lexer = Lexer(source)
        tokens = lexer.tokenize()
        assert not lexer.has_errors()
        assert tokens[0].value == value

    def test_char_literal(self):
        tokens = Lexer("'a'").tokenize()
        assert tokens[0].type == TokenType.CHAR
        assert tokens[0].value == "a"
        assert tokens[0].text == "'a'"

    def test_empty_char_literal(self):
        lexer = Lexer("''")
        lexer.tokenize()
        assert lexer.has_errors()


class TestOperators:
    """Test operator lexing"""

    @pytest.mark.parametrize("text, expected", [
        ("+ - * / %", [TokenType.PLUS, TokenType.MINUS, TokenType.STAR, TokenType.SLASH, TokenType.PERCENT]),
        ("== != < > <= >=", [TokenType.EQ, TokenType.NEQ, TokenType.LT, TokenType.GT, TokenType.LTE, TokenType.GTE]),
        ("&& || !", [TokenType.LAND, TokenType.LOR, TokenType.BANG]),
        ("& | ^ ~ << >>", [TokenType.AMPERSAND, TokenType.PIPE, TokenType.CARET, TokenType.TILDE,
                           TokenType.LSHIFT, TokenType.RSHIFT]),
        ("= ? :", [TokenType.ASSIGN, TokenType.QUESTION, TokenType.COLON]),
        ("( ) [ ] ,", [TokenType.LPAREN, TokenType.RPAREN, TokenType.LBRACKET, TokenType.RBRACKET,
                       TokenType.COMMA]),
    ])
    def test_operator_kinds(self, text, expected):
        tokens = Lexer(text).tokenize()
        assert [t.type for t in tokens[:-1]] == expected

    def test_increment_decrement(self):
        tokens = Lexer("++ --").tokenize()
        assert tokens[0].type == TokenType.INCREMENT
        assert tokens[1].type == TokenType.DECREMENT

    def test_consecutive_operators(self):
        tokens = Lexer("++i--i").tokenize()
        assert tokens[0].type == TokenType.INCREMENT
        assert tokens[1].type == TokenType.IDENTIFIER
        assert tokens[2].type == TokenType.DECREMENT

    def test_maximal_munch(self):
        tokens = Lexer("a+++b").tokenize()
        assert [t.type for t in tokens[:-1]] == [
            TokenType.IDENTIFIER, TokenType.INCREMENT, TokenType.PLUS, TokenType.IDENTIFIER,
        ]


class TestComments:
    """Test comment handling"""

    def test_single_line_comment(self):
        tokens = Lexer("x // comment").tokenize()
        assert tokens[0].type == TokenType.IDENTIFIER
        assert tokens[1].type == TokenType.EOF

    def test_multi_line_comment(self):
        tokens = Lexer("a /* comment */ + b").tokenize()
        assert [t.type for t in tokens[:-1]] == [TokenType.IDENTIFIER, TokenType.PLUS, TokenType.IDENTIFIER]

    def test_unterminated_block_comment(self):
        lexer = Lexer("a /* never closed")
        lexer.tokenize()
        assert lexer.has_errors()


class TestErrorHandling:
    """Test error handling"""

    def test_unexpected_character(self):
        lexer = Lexer("x = 5 @ y")
        tokens = lexer.tokenize()
        assert lexer.has_errors()
        assert isinstance(lexer.get_errors()[0], LexerError)
        # lexing continues past the bad character
        assert tokens[-2].value == "y"

    def test_unterminated_string(self):
        lexer = Lexer('"unterminated')
        lexer.tokenize()
        assert lexer.has_errors()

    def test_error_position(self):
        lexer = Lexer("a\n  $")
        lexer.tokenize()
        err = lexer.get_errors()[0]
        assert (err.line, err.column) == (2, 3)


class TestPositions:
    """Test line, column and span tracking"""

    def test_column_tracking(self):
        tokens = Lexer("int x y").tokenize()
        assert tokens[0].column == 1
        assert tokens[1].column == 5

    def test_multiline_position(self):
        tokens = Lexer("a\nb").tokenize()
        assert tokens[0].line == 1
        assert tokens[1].line == 2

    def test_spans(self):
        tokens = Lexer("ab <<= 0x10").tokenize()
        assert tokens[0].span == Span(0, 2)
        assert tokens[1].span == Span(3, 2)
        assert tokens[2].span == Span(5, 1)
        assert tokens[3].span == Span(7, 4)
        assert tokens[-1].span == Span(11, 0)


def test_token_text_defaults_to_value():
    tok = Token(TokenType.IDENTIFIER, "x", 1, 1)
    assert tok.text == "x"
    assert tok.span == Span(0, 0)
