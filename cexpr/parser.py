"""cexpr.parser

Recursive-descent parser for C expressions.

Precedence levels, loosest first: assignment, conditional, ||, &&, |, ^, &,
equality, relational, shift, additive, multiplicative, cast, unary, postfix,
primary. Binary levels fold left in a loop; assignment and the conditional's
else-branch recurse to the right.

The only ambiguity is ``(`` at the cast level, which may open a cast or a
parenthesized expression. The parser marks the cursor, asks the type-name
oracle, and commits to a cast only when a type name is followed by ``)`` and
then by something that can start an operand; otherwise it resets the cursor
and parses a grouping. A cast whose operand fails to parse is abandoned the
same way, so when neither reading works the grouping's error is reported.
"""

from __future__ import annotations

import logging
import os
from contextlib import contextmanager
from typing import Dict, FrozenSet, Iterable, Iterator, List, Optional, Union

from cexpr.lexer import Span, Token, TokenType
from cexpr.ast_nodes import (
    Assign,
    BinaryOp,
    BinaryOperator,
    Call,
    Cast,
    CharLiteral,
    Expression,
    FloatLiteral,
    Identifier,
    Index,
    IntLiteral,
    PostfixOp,
    PostfixOperator,
    Radix,
    StringLiteral,
    Ternary,
    TypeName,
    UnaryOp,
    UnaryOperator,
)
from cexpr.type_names import CTypeNames, IdentifierRecognizer, PlainIdentifiers, TypeNameOracle

logger = logging.getLogger(__name__)

DEFAULT_MAX_DEPTH = 40


def max_depth_from_env() -> int:
    """Nesting limit from CEXPR_MAX_DEPTH, or the default when unset or unusable"""
    raw = os.environ.get("CEXPR_MAX_DEPTH")
    if raw is None:
        return DEFAULT_MAX_DEPTH
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value < 1:
        logger.warning("ignoring CEXPR_MAX_DEPTH=%r, using %d", raw, DEFAULT_MAX_DEPTH)
        return DEFAULT_MAX_DEPTH
    return value


# -----------------
# Token classes
# -----------------

_LOGICAL_OR_OPS = {TokenType.LOR: BinaryOperator.OR}
_LOGICAL_AND_OPS = {TokenType.LAND: BinaryOperator.AND}
_BITWISE_OR_OPS = {TokenType.PIPE: BinaryOperator.BIT_OR}
_BITWISE_XOR_OPS = {TokenType.CARET: BinaryOperator.BIT_XOR}
_BITWISE_AND_OPS = {TokenType.AMPERSAND: BinaryOperator.BIT_AND}
_EQUALITY_OPS = {TokenType.EQ: BinaryOperator.EQ, TokenType.NEQ: BinaryOperator.NE}
_RELATIONAL_OPS = {
    TokenType.LTE: BinaryOperator.LE,
    TokenType.GTE: BinaryOperator.GE,
    TokenType.LT: BinaryOperator.LT,
    TokenType.GT: BinaryOperator.GT,
}
_SHIFT_OPS = {TokenType.LSHIFT: BinaryOperator.SHL, TokenType.RSHIFT: BinaryOperator.SHR}
_ADDITIVE_OPS = {TokenType.PLUS: BinaryOperator.ADD, TokenType.MINUS: BinaryOperator.SUB}
_MULTIPLICATIVE_OPS = {
    TokenType.STAR: BinaryOperator.MUL,
    TokenType.SLASH: BinaryOperator.DIV,
    TokenType.PERCENT: BinaryOperator.MOD,
}

UNARY_OPS: Dict[TokenType, UnaryOperator] = {
    TokenType.INCREMENT: UnaryOperator.INCREMENT,
    TokenType.DECREMENT: UnaryOperator.DECREMENT,
    TokenType.BANG: UnaryOperator.NOT,
    TokenType.PLUS: UnaryOperator.PLUS,
    TokenType.MINUS: UnaryOperator.MINUS,
    TokenType.AMPERSAND: UnaryOperator.ADDRESS_OF,
    TokenType.STAR: UnaryOperator.DEREF,
    TokenType.TILDE: UnaryOperator.BIT_NOT,
}

_POSTFIX_OPS = {TokenType.INCREMENT: PostfixOperator.INCREMENT, TokenType.DECREMENT: PostfixOperator.DECREMENT}

_INT_RADIX = {
    TokenType.INT_DEC: Radix.DECIMAL,
    TokenType.INT_OCT: Radix.OCTAL,
    TokenType.INT_HEX: Radix.HEXADECIMAL,
}

LITERAL_TOKENS: FrozenSet[TokenType] = frozenset(
    {TokenType.CHAR, TokenType.STRING, TokenType.FLOAT, *_INT_RADIX}
)

# Tokens that can begin a cast-level expression.
EXPRESSION_START: FrozenSet[TokenType] = frozenset(
    {TokenType.IDENTIFIER, TokenType.LPAREN, *LITERAL_TOKENS, *UNARY_OPS}
)

# Tokens that may follow a complete expression.
_CONTINUATION: FrozenSet[TokenType] = frozenset({
    TokenType.EOF,
    TokenType.ASSIGN,
    TokenType.QUESTION,
    TokenType.LBRACKET,
    *_POSTFIX_OPS,
    *_LOGICAL_OR_OPS, *_LOGICAL_AND_OPS,
    *_BITWISE_OR_OPS, *_BITWISE_XOR_OPS, *_BITWISE_AND_OPS,
    *_EQUALITY_OPS, *_RELATIONAL_OPS, *_SHIFT_OPS,
    *_ADDITIVE_OPS, *_MULTIPLICATIVE_OPS,
})


# -----------------
# Errors
# -----------------

class ParserError(Exception):
    """Parser error"""
    def __init__(self, message: str, token: Optional[Token] = None):
        self.message = message
        self.token = token
        if token:
            super().__init__(f"{message} at {token.line}:{token.column}")
        else:
            super().__init__(message)

    @property
    def span(self) -> Optional[Span]:
        return self.token.span if self.token else None


def _describe(token: Token) -> str:
    if token.type == TokenType.EOF:
        return "end of input"
    return repr(token.text)


def _expected_names(expected: Iterable[TokenType]) -> str:
    return ", ".join(sorted(t.name for t in expected))


class UnexpectedToken(ParserError):
    """A token of none of the expected kinds was found"""
    def __init__(self, expected: Iterable[TokenType], found: Token):
        self.expected: FrozenSet[TokenType] = frozenset(expected)
        self.found = found
        super().__init__(f"Unexpected {_describe(found)}, expected one of {_expected_names(self.expected)}", found)


class UnexpectedEndOfInput(ParserError):
    """The stream ended where more tokens were required"""
    def __init__(self, expected: Iterable[TokenType], token: Optional[Token] = None):
        self.expected: FrozenSet[TokenType] = frozenset(expected)
        super().__init__(f"Unexpected end of input, expected one of {_expected_names(self.expected)}", token)


class InvalidCastTarget(ParserError):
    """A type name appeared in parentheses where no cast can be formed"""
    def __init__(self, type_name: TypeName, token: Token):
        self.type_name = type_name
        super().__init__(f"Type name '{type_name}' cannot be used here", token)


class NestingTooDeep(ParserError):
    """Expression nesting exceeded the parser's depth limit"""
    def __init__(self, limit: int, token: Token):
        self.limit = limit
        super().__init__(f"Expression nesting exceeds limit of {limit}", token)


# -----------------
# Token stream
# -----------------

class TokenStream:
    """Token sequence with a cursor, lookahead and mark/reset.

    The sequence always ends with an EOF token; reads past the end return it.
    """

    def __init__(self, tokens: Iterable[Token]):
        self.tokens: List[Token] = list(tokens)
        if not self.tokens or self.tokens[-1].type != TokenType.EOF:
            last = self.tokens[-1] if self.tokens else None
            end = last.span.end if last else 0
            line = last.line if last else 1
            column = last.column + len(last.text) if last else 1
            self.tokens.append(Token(TokenType.EOF, '', line, column, Span(end, 0)))
        self.position = 0

    @property
    def current(self) -> Token:
        return self.tokens[self.position]

    @property
    def previous(self) -> Token:
        """The most recently consumed token"""
        return self.tokens[max(self.position - 1, 0)]

    def token_at(self, position: int) -> Token:
        if position < len(self.tokens):
            return self.tokens[position]
        return self.tokens[-1]

    def peek(self, offset: int = 1) -> Token:
        """Peek ahead; ``peek(0)`` is the current token"""
        return self.token_at(self.position + offset)

    def advance(self) -> Token:
        """Consume the current token and return it"""
        tok = self.current
        if tok.type != TokenType.EOF:
            self.position += 1
        return tok

    def at(self, t: TokenType) -> bool:
        return self.current.type == t

    def match(self, t: TokenType) -> bool:
        if self.at(t):
            self.advance()
            return True
        return False

    def mark(self) -> int:
        return self.position

    def reset(self, mark: int) -> None:
        self.position = mark


# -----------------
# Parser
# -----------------

class Parser:
    """Parser for C expressions"""

    def __init__(
        self,
        tokens: Union[TokenStream, Iterable[Token]],
        *,
        type_names: Optional[TypeNameOracle] = None,
        identifiers: Optional[IdentifierRecognizer] = None,
        max_depth: Optional[int] = None,
    ):
        self.stream = tokens if isinstance(tokens, TokenStream) else TokenStream(tokens)
        self.type_names: TypeNameOracle = type_names if type_names is not None else CTypeNames()
        self.identifiers: IdentifierRecognizer = identifiers if identifiers is not None else PlainIdentifiers()
        if max_depth is None:
            max_depth = max_depth_from_env()
        self.max_depth = max_depth
        self._depth = 0

    def parse(self) -> Expression:
        """Parse one expression that must span the whole stream"""
        expr = self.parse_expression()
        if not self.stream.at(TokenType.EOF):
            raise self._unexpected(_CONTINUATION)
        return expr

    def parse_expression(self) -> Expression:
        """Parse one expression and leave the cursor after it"""
        return self._parse_expression()

    # -----------------
    # Helpers
    # -----------------

    def _unexpected(self, expected: Iterable[TokenType]) -> ParserError:
        tok = self.stream.current
        if tok.type == TokenType.EOF:
            return UnexpectedEndOfInput(expected, tok)
        return UnexpectedToken(expected, tok)

    def _expect(self, t: TokenType) -> Token:
        if not self.stream.at(t):
            raise self._unexpected({t})
        return self.stream.advance()

    def _span_from(self, start: Token) -> Span:
        """Span from ``start`` through the most recently consumed token"""
        end = self.stream.previous.span.end
        return Span(start.span.start, end - start.span.start)

    def _can_start_expression(self, tok: Token) -> bool:
        return tok.type in EXPRESSION_START or self.identifiers.match(tok)

    @contextmanager
    def _nested(self) -> Iterator[None]:
        if self._depth >= self.max_depth:
            raise NestingTooDeep(self.max_depth, self.stream.current)
        self._depth += 1
        try:
            yield
        finally:
            self._depth -= 1

    # -----------------
    # Expressions (precedence climbing)
    # -----------------

    def _parse_expression(self) -> Expression:
        return self._parse_assignment()

    def _parse_assignment(self) -> Expression:
        with self._nested():
            start = self.stream.current
            left = self._parse_conditional()
            if self.stream.match(TokenType.ASSIGN):
                right = self._parse_assignment()
                return Assign(lhs=left, rhs=right, span=self._span_from(start))
            return left

    def _parse_conditional(self) -> Expression:
        start = self.stream.current
        expr = self._parse_logical_or()
        if self.stream.match(TokenType.QUESTION):
            then_branch = self._parse_expression()
            self._expect(TokenType.COLON)
            with self._nested():
                else_branch = self._parse_conditional()
            return Ternary(cond=expr, then_branch=then_branch, else_branch=else_branch, span=self._span_from(start))
        return expr

    def _parse_logical_or(self) -> Expression:
        start = self.stream.current
        expr = self._parse_logical_and()
        while self.stream.current.type in _LOGICAL_OR_OPS:
            op = _LOGICAL_OR_OPS[self.stream.advance().type]
            rhs = self._parse_logical_and()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_logical_and(self) -> Expression:
        start = self.stream.current
        expr = self._parse_bitwise_or()
        while self.stream.current.type in _LOGICAL_AND_OPS:
            op = _LOGICAL_AND_OPS[self.stream.advance().type]
            rhs = self._parse_bitwise_or()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_bitwise_or(self) -> Expression:
        start = self.stream.current
        expr = self._parse_bitwise_xor()
        while self.stream.current.type in _BITWISE_OR_OPS:
            op = _BITWISE_OR_OPS[self.stream.advance().type]
            rhs = self._parse_bitwise_xor()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_bitwise_xor(self) -> Expression:
        start = self.stream.current
        expr = self._parse_bitwise_and()
        while self.stream.current.type in _BITWISE_XOR_OPS:
            op = _BITWISE_XOR_OPS[self.stream.advance().type]
            rhs = self._parse_bitwise_and()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_bitwise_and(self) -> Expression:
        start = self.stream.current
        expr = self._parse_equality()
        while self.stream.current.type in _BITWISE_AND_OPS:
            op = _BITWISE_AND_OPS[self.stream.advance().type]
            rhs = self._parse_equality()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_equality(self) -> Expression:
        start = self.stream.current
        expr = self._parse_relational()
        while self.stream.current.type in _EQUALITY_OPS:
            op = _EQUALITY_OPS[self.stream.advance().type]
            rhs = self._parse_relational()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_relational(self) -> Expression:
        start = self.stream.current
        expr = self._parse_shift()
        while self.stream.current.type in _RELATIONAL_OPS:
            op = _RELATIONAL_OPS[self.stream.advance().type]
            rhs = self._parse_shift()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_shift(self) -> Expression:
        start = self.stream.current
        expr = self._parse_additive()
        while self.stream.current.type in _SHIFT_OPS:
            op = _SHIFT_OPS[self.stream.advance().type]
            rhs = self._parse_additive()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_additive(self) -> Expression:
        start = self.stream.current
        expr = self._parse_multiplicative()
        while self.stream.current.type in _ADDITIVE_OPS:
            op = _ADDITIVE_OPS[self.stream.advance().type]
            rhs = self._parse_multiplicative()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_multiplicative(self) -> Expression:
        start = self.stream.current
        expr = self._parse_cast()
        while self.stream.current.type in _MULTIPLICATIVE_OPS:
            op = _MULTIPLICATIVE_OPS[self.stream.advance().type]
            rhs = self._parse_cast()
            expr = BinaryOp(op=op, lhs=expr, rhs=rhs, span=self._span_from(start))
        return expr

    def _parse_cast(self) -> Expression:
        if self.stream.at(TokenType.LPAREN):
            cast = self._try_cast()
            if cast is not None:
                return cast
        return self._parse_unary()

    def _try_cast(self) -> Optional[Cast]:
        """Parse ``( type-name ) cast-expression`` or restore the cursor and return None"""
        mark = self.stream.mark()
        open_tok = self.stream.advance()
        count = self.type_names.match(self.stream, self.stream.position)
        if count:
            close = self.stream.peek(count)
            after = self.stream.peek(count + 1)
            if close.type == TokenType.RPAREN and self._can_start_expression(after):
                type_name = self._take_type_name(count)
                self.stream.advance()
                logger.debug("cast to '%s' at %d:%d", type_name, open_tok.line, open_tok.column)
                try:
                    with self._nested():
                        operand = self._parse_cast()
                except NestingTooDeep:
                    raise
                except ParserError as e:
                    # The grouping reading gets the last word, error included.
                    logger.debug("cast operand at %d:%d failed (%s), reparsing as parenthesized expression",
                                 open_tok.line, open_tok.column, e)
                    self.stream.reset(mark)
                    return None
                return Cast(type_name=type_name, operand=operand, span=self._span_from(open_tok))
            logger.debug(
                "type name at %d:%d is not a cast, reparsing as parenthesized expression",
                open_tok.line, open_tok.column,
            )
        self.stream.reset(mark)
        return None

    def _take_type_name(self, count: int) -> TypeName:
        toks = [self.stream.advance() for _ in range(count)]
        span = toks[0].span.union(toks[-1].span)
        return TypeName(words=tuple(t.text for t in toks), span=span)

    def _parse_unary(self) -> Expression:
        tok = self.stream.current
        op = UNARY_OPS.get(tok.type)
        if op is None:
            return self._parse_postfix()
        self.stream.advance()
        with self._nested():
            operand = self._parse_cast()
        return UnaryOp(op=op, operand=operand, span=self._span_from(tok))

    def _parse_postfix(self) -> Expression:
        start = self.stream.current
        if self.identifiers.match(start) and self.stream.peek().type == TokenType.LPAREN:
            expr = self._parse_call()
        else:
            expr = self._parse_primary()
        while True:
            if self.stream.match(TokenType.LBRACKET):
                idx = self._parse_expression()
                self._expect(TokenType.RBRACKET)
                expr = Index(base=expr, index=idx, span=self._span_from(start))
                continue
            if self.stream.current.type in _POSTFIX_OPS:
                op = _POSTFIX_OPS[self.stream.advance().type]
                expr = PostfixOp(op=op, operand=expr, span=self._span_from(start))
                continue
            break
        return expr

    def _parse_call(self) -> Call:
        name_tok = self.stream.advance()
        callee = Identifier(name=name_tok.value, span=name_tok.span)
        self.stream.advance()
        args: List[Expression] = []
        if not self.stream.at(TokenType.RPAREN):
            args.append(self._parse_assignment())
            while self.stream.match(TokenType.COMMA):
                args.append(self._parse_assignment())
            if not self.stream.at(TokenType.RPAREN):
                raise self._unexpected({TokenType.COMMA, TokenType.RPAREN})
        self.stream.advance()
        return Call(callee=callee, args=tuple(args), span=self._span_from(name_tok))

    def _parse_primary(self) -> Expression:
        tok = self.stream.current

        if tok.type == TokenType.LPAREN:
            count = self.type_names.match(self.stream, self.stream.position + 1)
            if count and not self._can_start_expression(self.stream.peek()):
                # The cast level already turned this down, so the type name
                # has nowhere to go.
                self.stream.advance()
                type_tok = self.stream.current
                raise InvalidCastTarget(self._take_type_name(count), type_tok)
            self.stream.advance()
            expr = self._parse_expression()
            self._expect(TokenType.RPAREN)
            return expr

        if tok.type == TokenType.STRING:
            value = ""
            while self.stream.at(TokenType.STRING):
                value += self.stream.advance().value
            return StringLiteral(value=value, span=self._span_from(tok))

        if tok.type in _INT_RADIX:
            self.stream.advance()
            return IntLiteral(raw=tok.text, radix=_INT_RADIX[tok.type], span=tok.span)

        if tok.type == TokenType.FLOAT:
            self.stream.advance()
            return FloatLiteral(raw=tok.text, span=tok.span)

        if tok.type == TokenType.CHAR:
            self.stream.advance()
            return CharLiteral(raw=tok.text, span=tok.span)

        if self.identifiers.match(tok):
            self.stream.advance()
            return Identifier(name=tok.value, span=tok.span)

        raise self._unexpected(EXPRESSION_START)
