"""
Expression Front End

Runs the lexer and the parser over source text and reports the outcome as a
``ParseResult``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Iterable, List, Optional

from cexpr.ast_nodes import Expression
from cexpr.lexer import Lexer, LexerError, Token
from cexpr.parser import Parser, ParserError
from cexpr.type_names import CTypeNames

logger = logging.getLogger(__name__)


@dataclass
class ParseResult:
    """Result of parsing one expression"""
    success: bool
    expression: Optional[Expression] = None
    errors: List[str] = None
    # The first failure, for callers that want its span
    error: Optional[Exception] = None

    def __post_init__(self):
        if self.errors is None:
            self.errors = []


def typedefs_from_env() -> List[str]:
    """Typedef names listed in CEXPR_TYPEDEFS (comma separated)"""
    raw = os.environ.get("CEXPR_TYPEDEFS", "")
    return [name.strip() for name in raw.split(",") if name.strip()]


class ExpressionFrontend:
    """Lexes and parses C expressions with a shared set of typedef names"""

    def __init__(self, *, typedefs: Iterable[str] = (), max_depth: Optional[int] = None):
        self.type_names = CTypeNames([*typedefs, *typedefs_from_env()])
        self.max_depth = max_depth

    def add_typedef(self, name: str) -> None:
        self.type_names.add_typedef(name)

    def parse_source(self, source_code: str) -> ParseResult:
        """Parse ``source_code`` as a single expression"""
        # Phase 1: Lexical Analysis
        try:
            tokens = self.get_tokens(source_code)
        except LexerError as e:
            logger.debug("lexing failed: %s", e)
            return ParseResult(success=False, errors=[f"Lexical analysis failed: {e}"], error=e)

        # Phase 2: Syntax Analysis
        try:
            expression = self.get_ast(tokens)
        except ParserError as e:
            logger.debug("parsing failed: %s", e)
            return ParseResult(success=False, errors=[f"Syntax analysis failed: {e}"], error=e)

        return ParseResult(success=True, expression=expression)

    def get_tokens(self, source_code: str) -> List[Token]:
        """Get tokens from source code; raises the first lexer error"""
        lexer = Lexer(source_code)
        tokens = lexer.tokenize()
        if lexer.has_errors():
            raise lexer.get_errors()[0]
        return tokens

    def get_ast(self, tokens: List[Token]) -> Expression:
        """Get AST from tokens"""
        parser = Parser(tokens, type_names=self.type_names, max_depth=self.max_depth)
        return parser.parse()
