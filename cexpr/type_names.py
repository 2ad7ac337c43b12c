"""cexpr.type_names

Collaborators the parser consults for context-sensitive decisions:

- a type-name oracle, which says whether a type name starts at a stream
  position and how many tokens it spans (this is what tells ``(T)x`` apart
  from ``(x)``);
- an identifier recognizer, which says whether a token names a value.

``CTypeNames`` understands C's primitive specifier combinations, qualifiers,
pointer declarators and a caller-maintained set of typedef names.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, FrozenSet, Iterable, List, Optional, Protocol, Set, Tuple

from cexpr.lexer import Token, TokenType

if TYPE_CHECKING:
    from cexpr.parser import TokenStream


class TypeNameOracle(Protocol):
    def match(self, stream: "TokenStream", position: int) -> Optional[int]:
        """Return the token count of the type name starting at ``position``.

        Must not move the stream's cursor.
        """
        ...


class IdentifierRecognizer(Protocol):
    def match(self, token: Token) -> bool:
        ...


QUALIFIERS: FrozenSet[str] = frozenset({"const", "volatile", "restrict"})

SPECIFIERS: FrozenSet[str] = frozenset({
    "void", "char", "short", "int", "long", "float", "double",
    "signed", "unsigned", "_Bool",
})

# Every accepted specifier multiset, spelled out the way C99 6.7.2 lists them.
_VALID_COMBINATIONS = (
    "void",
    "char", "signed char", "unsigned char",
    "short", "signed short", "short int", "signed short int",
    "unsigned short", "unsigned short int",
    "int", "signed", "signed int",
    "unsigned", "unsigned int",
    "long", "signed long", "long int", "signed long int",
    "unsigned long", "unsigned long int",
    "long long", "signed long long", "long long int", "signed long long int",
    "unsigned long long", "unsigned long long int",
    "float", "double", "long double",
    "_Bool",
)


def _key(specifiers: Iterable[str]) -> Tuple[str, ...]:
    return tuple(sorted(specifiers))


VALID_SPECIFIER_SETS: FrozenSet[Tuple[str, ...]] = frozenset(
    _key(combo.split()) for combo in _VALID_COMBINATIONS
)


class CTypeNames:
    """Type-name oracle for C primitive types, typedef names and pointers.

    Accepted shape::

        qualifier* (specifier+ | typedef-name) qualifier*  ('*' qualifier*)*

    with qualifiers allowed anywhere among the specifiers.
    """

    def __init__(self, typedefs: Iterable[str] = ()):
        self.typedefs: Set[str] = set(typedefs)

    def add_typedef(self, name: str) -> None:
        self.typedefs.add(name)

    def match(self, stream: "TokenStream", position: int) -> Optional[int]:
        i = position
        specifiers: List[str] = []
        typedef_name: Optional[str] = None

        while True:
            tok = stream.token_at(i)
            if tok.type == TokenType.KEYWORD and tok.value in QUALIFIERS:
                i += 1
                continue
            if tok.type == TokenType.KEYWORD and tok.value in SPECIFIERS and typedef_name is None:
                specifiers.append(tok.value)
                i += 1
                continue
            if (
                tok.type == TokenType.IDENTIFIER
                and tok.value in self.typedefs
                and not specifiers
                and typedef_name is None
            ):
                typedef_name = tok.value
                i += 1
                continue
            break

        if typedef_name is None and _key(specifiers) not in VALID_SPECIFIER_SETS:
            return None

        while stream.token_at(i).type == TokenType.STAR:
            i += 1
            while stream.token_at(i).type == TokenType.KEYWORD and stream.token_at(i).value in QUALIFIERS:
                i += 1

        return i - position


class NoTypeNames:
    """Oracle that knows no types: every parenthesis is a grouping."""

    def match(self, stream: "TokenStream", position: int) -> Optional[int]:
        return None


class PlainIdentifiers:
    """Recognizes every IDENTIFIER token."""

    def match(self, token: Token) -> bool:
        return token.type == TokenType.IDENTIFIER
