"""
Lexical Analyzer (Lexer) for C expressions

Converts expression source text into the token stream consumed by the parser.
Every token records its raw text and a character span so the parser can give
AST nodes exact source extents.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto
from typing import List, Optional, Set, Tuple


@dataclass(frozen=True)
class Span:
    """Character range in the source: start offset and length"""
    start: int
    length: int

    @property
    def end(self) -> int:
        return self.start + self.length

    def union(self, other: "Span") -> "Span":
        start = min(self.start, other.start)
        return Span(start, max(self.end, other.end) - start)

    def __repr__(self) -> str:
        return f"Span({self.start}, {self.length})"


class TokenType(Enum):
    """Token types for the expression lexer"""
    # Literals
    CHAR = auto()
    STRING = auto()
    FLOAT = auto()
    INT_DEC = auto()
    INT_OCT = auto()
    INT_HEX = auto()

    # Identifiers and Keywords
    IDENTIFIER = auto()
    KEYWORD = auto()

    # Operators
    ASSIGN = auto()              # =
    QUESTION = auto()            # ?
    COLON = auto()               # :
    LOR = auto()                 # ||
    LAND = auto()                # &&
    PIPE = auto()                # |
    CARET = auto()               # ^
    AMPERSAND = auto()           # &
    EQ = auto()                  # ==
    NEQ = auto()                 # !=
    LTE = auto()                 # <=
    GTE = auto()                 # >=
    LT = auto()                  # <
    GT = auto()                  # >
    LSHIFT = auto()              # <<
    RSHIFT = auto()              # >>
    PLUS = auto()                # +
    MINUS = auto()               # -
    STAR = auto()                # *
    SLASH = auto()               # /
    PERCENT = auto()             # %
    INCREMENT = auto()           # ++
    DECREMENT = auto()           # --
    BANG = auto()                # !
    TILDE = auto()               # ~

    # Delimiters
    LPAREN = auto()              # (
    RPAREN = auto()              # )
    LBRACKET = auto()            # [
    RBRACKET = auto()            # ]
    COMMA = auto()               # ,

    # Special
    EOF = auto()


@dataclass
class Token:
    """Represents a lexical token.

    ``value`` is the decoded content for string and character literals and
    the lexeme for everything else; ``text`` is always the raw lexeme.
    """
    type: TokenType
    value: str
    line: int
    column: int
    span: Span = Span(0, 0)
    text: str = ""

    def __post_init__(self) -> None:
        if not self.text:
            self.text = self.value

    def __repr__(self) -> str:
        return f"Token({self.type.name}, {repr(self.value)}, {self.line}:{self.column})"


class LexerError(Exception):
    """Lexer error with line and column information"""
    def __init__(self, message: str, line: int, column: int):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(f"{message} at {line}:{column}")


# Longest operators first so that "<<" wins over "<".
OPERATORS: Tuple[Tuple[str, TokenType], ...] = (
    ('<<', TokenType.LSHIFT),
    ('>>', TokenType.RSHIFT),
    ('<=', TokenType.LTE),
    ('>=', TokenType.GTE),
    ('==', TokenType.EQ),
    ('!=', TokenType.NEQ),
    ('&&', TokenType.LAND),
    ('||', TokenType.LOR),
    ('++', TokenType.INCREMENT),
    ('--', TokenType.DECREMENT),
    ('=', TokenType.ASSIGN),
    ('?', TokenType.QUESTION),
    (':', TokenType.COLON),
    ('|', TokenType.PIPE),
    ('^', TokenType.CARET),
    ('&', TokenType.AMPERSAND),
    ('<', TokenType.LT),
    ('>', TokenType.GT),
    ('+', TokenType.PLUS),
    ('-', TokenType.MINUS),
    ('*', TokenType.STAR),
    ('/', TokenType.SLASH),
    ('%', TokenType.PERCENT),
    ('!', TokenType.BANG),
    ('~', TokenType.TILDE),
    ('(', TokenType.LPAREN),
    (')', TokenType.RPAREN),
    ('[', TokenType.LBRACKET),
    (']', TokenType.RBRACKET),
    (',', TokenType.COMMA),
)

ESCAPES = {
    'n': '\n', 't': '\t', 'r': '\r', '\\': '\\',
    '"': '"', "'": "'", 'a': '\a',
    'b': '\b', 'f': '\f', 'v': '\v', '?': '?',
}

HEX_DIGITS = '0123456789abcdefABCDEF'
OCTAL_DIGITS = '01234567'


class Lexer:
    """Lexical analyzer for C expression source text"""

    # C99 keywords; type specifiers and qualifiers among them are what the
    # type-name oracle looks for.
    KEYWORDS: Set[str] = {
        'auto', 'break', 'case', 'char', 'const', 'continue', 'default', 'do',
        'double', 'else', 'enum', 'extern', 'float', 'for', 'goto', 'if',
        'inline', 'int', 'long', 'register', 'restrict', 'return', 'short',
        'signed', 'sizeof', 'static', 'struct', 'switch', 'typedef', 'union',
        'unsigned', 'void', 'volatile', 'while', '_Bool', '_Complex', '_Imaginary',
    }

    def __init__(self, source: str, filename: str = "<input>"):
        """Initialize lexer with source code"""
        self.source = source
        self.filename = filename
        self.position = 0
        self.line = 1
        self.column = 1
        self.tokens: List[Token] = []
        self.errors: List[LexerError] = []

    def current_char(self) -> Optional[str]:
        """Get current character without consuming"""
        if self.position >= len(self.source):
            return None
        return self.source[self.position]

    def peek_char(self, offset: int = 1) -> Optional[str]:
        """Peek ahead at character"""
        pos = self.position + offset
        if pos >= len(self.source):
            return None
        return self.source[pos]

    def advance(self) -> Optional[str]:
        """Consume and return current character"""
        if self.position >= len(self.source):
            return None

        char = self.source[self.position]
        self.position += 1

        if char == '\n':
            self.line += 1
            self.column = 1
        else:
            self.column += 1

        return char

    def _error(self, message: str, line: Optional[int] = None, column: Optional[int] = None) -> None:
        self.errors.append(LexerError(
            message,
            self.line if line is None else line,
            self.column if column is None else column,
        ))

    def skip_whitespace(self) -> None:
        """Skip whitespace characters, newlines included"""
        while self.current_char() and self.current_char() in ' \t\r\n\f\v':
            self.advance()

    def skip_line_comment(self) -> None:
        """Skip single-line comment (//...)"""
        self.advance()
        self.advance()

        while self.current_char() and self.current_char() != '\n':
            self.advance()

    def skip_block_comment(self) -> None:
        """Skip multi-line comment (/* ... */)"""
        self.advance()
        self.advance()

        while self.current_char():
            if self.current_char() == '*' and self.peek_char() == '/':
                self.advance()
                self.advance()
                return
            self.advance()

        self._error("Unterminated block comment")

    def read_quoted(self) -> str:
        """Read a string or character literal body, decoding escapes"""
        quote_char = self.current_char()
        self.advance()

        result = ""
        while self.current_char() and self.current_char() not in (quote_char, '\n'):
            if self.current_char() != '\\':
                result += self.current_char()
                self.advance()
                continue

            self.advance()
            next_char = self.current_char()
            if next_char is None:
                break
            if next_char in ESCAPES:
                result += ESCAPES[next_char]
                self.advance()
            elif next_char in OCTAL_DIGITS:
                # Octal escape \o, \oo or \ooo
                octal_chars = ""
                while len(octal_chars) < 3 and self.current_char() and self.current_char() in OCTAL_DIGITS:
                    octal_chars += self.current_char()
                    self.advance()
                result += chr(int(octal_chars, 8))
            elif next_char == 'x':
                # Hex escape \xHH
                self.advance()
                hex_chars = ""
                for _ in range(2):
                    if self.current_char() and self.current_char() in HEX_DIGITS:
                        hex_chars += self.current_char()
                        self.advance()
                    else:
                        break
                if hex_chars:
                    result += chr(int(hex_chars, 16))
                else:
                    self._error("\\x used with no following hex digits")
            else:
                result += next_char
                self.advance()

        if self.current_char() == quote_char:
            self.advance()
        else:
            what = "string" if quote_char == '"' else "character constant"
            self._error(f"Unterminated {what}")

        return result

    def read_number(self) -> TokenType:
        """Consume a numeric literal and classify it by radix or as floating"""
        if self.current_char() == '0' and self.peek_char() and self.peek_char() in 'xX':
            self.advance()
            self.advance()
            digits = 0
            while self.current_char() and self.current_char() in HEX_DIGITS:
                self.advance()
                digits += 1
            if digits == 0:
                self._error("Hexadecimal literal has no digits")
            self._read_suffix('uUlL')
            return TokenType.INT_HEX

        start = self.position
        while self.current_char() and self.current_char().isdigit():
            self.advance()
        digits = self.source[start:self.position]

        is_float = False
        if self.current_char() == '.':
            is_float = True
            self.advance()
            while self.current_char() and self.current_char().isdigit():
                self.advance()

        if self.current_char() and self.current_char() in 'eE':
            is_float = True
            self.advance()
            if self.current_char() and self.current_char() in '+-':
                self.advance()
            if not (self.current_char() and self.current_char().isdigit()):
                self._error("Exponent has no digits")
            while self.current_char() and self.current_char().isdigit():
                self.advance()

        if is_float:
            self._read_suffix('fFlL', limit=1)
            return TokenType.FLOAT

        self._read_suffix('uUlL')
        if len(digits) > 1 and digits.startswith('0'):
            if any(c in '89' for c in digits):
                self._error(f"Invalid digit in octal constant '{digits}'")
            return TokenType.INT_OCT
        return TokenType.INT_DEC

    def _read_suffix(self, allowed: str, limit: int = 3) -> None:
        count = 0
        while count < limit and self.current_char() and self.current_char() in allowed:
            self.advance()
            count += 1

    def read_identifier(self) -> str:
        """Read identifier or keyword"""
        ident = ""
        while self.current_char() and (self.current_char().isalnum() or self.current_char() == '_'):
            ident += self.advance()
        return ident

    def _emit(self, token_type: TokenType, value: str, start: int, line: int, column: int) -> None:
        text = self.source[start:self.position]
        self.tokens.append(Token(token_type, value, line, column, Span(start, self.position - start), text))

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source; always ends with an EOF token"""
        self.tokens = []
        self.errors = []

        while True:
            self.skip_whitespace()
            if self.position >= len(self.source):
                break

            start = self.position
            token_line = self.line
            token_column = self.column
            char = self.current_char()

            if char == '/' and self.peek_char() == '/':
                self.skip_line_comment()
                continue
            if char == '/' and self.peek_char() == '*':
                self.skip_block_comment()
                continue

            if char == '"':
                value = self.read_quoted()
                self._emit(TokenType.STRING, value, start, token_line, token_column)

            elif char == "'":
                value = self.read_quoted()
                if not value:
                    self._error("Empty character constant", token_line, token_column)
                self._emit(TokenType.CHAR, value, start, token_line, token_column)

            elif char.isdigit() or (char == '.' and self.peek_char() and self.peek_char().isdigit()):
                token_type = self.read_number()
                self._emit(token_type, self.source[start:self.position], start, token_line, token_column)

            elif char.isalpha() or char == '_':
                ident = self.read_identifier()
                token_type = TokenType.KEYWORD if ident in self.KEYWORDS else TokenType.IDENTIFIER
                self._emit(token_type, ident, start, token_line, token_column)

            else:
                for symbol, token_type in OPERATORS:
                    if self.source.startswith(symbol, self.position):
                        for _ in symbol:
                            self.advance()
                        self._emit(token_type, symbol, start, token_line, token_column)
                        break
                else:
                    self._error(f"Unexpected character '{char}'", token_line, token_column)
                    self.advance()

        self.tokens.append(Token(TokenType.EOF, '', self.line, self.column, Span(self.position, 0)))

        return self.tokens

    def has_errors(self) -> bool:
        """Check if any lexer errors occurred"""
        return len(self.errors) > 0

    def get_errors(self) -> List[LexerError]:
        """Get all lexer errors"""
        return self.errors
