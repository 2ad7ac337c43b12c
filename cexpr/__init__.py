"""
cexpr - C expression parser

Parses C expressions into immutable syntax trees, honoring C's precedence
and associativity and telling casts apart from parenthesized expressions
through a pluggable type-name oracle.
"""

__version__ = "0.1.0"
__author__ = "cexpr Contributors"
__license__ = "MIT"

from .lexer import Lexer, LexerError, Span, Token, TokenType
from .parser import (
    InvalidCastTarget,
    NestingTooDeep,
    Parser,
    ParserError,
    TokenStream,
    UnexpectedEndOfInput,
    UnexpectedToken,
)
from .type_names import CTypeNames, NoTypeNames, PlainIdentifiers
from .printer import to_source
from .dot import render_dot
from .frontend import ExpressionFrontend, ParseResult

__all__ = [
    'Lexer',
    'LexerError',
    'Span',
    'Token',
    'TokenType',
    'Parser',
    'ParserError',
    'TokenStream',
    'UnexpectedToken',
    'UnexpectedEndOfInput',
    'InvalidCastTarget',
    'NestingTooDeep',
    'CTypeNames',
    'NoTypeNames',
    'PlainIdentifiers',
    'to_source',
    'render_dot',
    'ExpressionFrontend',
    'ParseResult',
]
