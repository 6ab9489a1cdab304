""" Module tokens.py.
Preprocessing tokens and related definitions.
"""

from __future__ import annotations

import collections
from dataclasses import dataclass
from typing import ClassVar, Iterable, NamedTuple

from ppmacro.tokentype import HeaderKind, Punctuator, Separation

__all__ = ('PpTok HeaderName Identifier PpNumber CharConstant StringLiteral '
           'Punct OtherChar Newline Hide HiddenTok EndScope Tokens '
           'ident number punct string'.split())


class Hide(frozenset[str]):
    """ The "hide set" of a token, in Prosser's algorithm.
    Any identifier token whose name is in its hide set won't be macro
    expanded.  Hide sets are values: every operation makes a new Hide.
    """
    EMPTY: ClassVar[Hide]

    def __or__(self, other: Iterable[str]) -> Hide:
        return Hide(frozenset(self).union(other))

    def __and__(self, other: Iterable[str]) -> Hide:
        return Hide(frozenset(self).intersection(other))

    def add(self, name: str) -> Hide:
        """ New hide set with given name added. """
        if name in self: return self
        return self | (name,)

    def __repr__(self) -> str:
        if self:
            return f"{{{', '.join(sorted(self))}}}"
        else:
            return "{}"

Hide.EMPTY = Hide()


@dataclass(frozen=True)
class PpTok:
    """
    A preprocessing token.  Tokens are immutable values, and two tokens are
    equal if they are the same variant with the same contents.  The hide set
    is not part of the token; it travels alongside in a HiddenTok.
    """
    # Type tests, so that callers don't need isinstance() everywhere.
    id: ClassVar[bool] = False      # Identifier
    nl: ClassVar[bool] = False      # Newline
    quoted: ClassVar[bool] = False  # String literal or character constant

    @property
    def spelling(self) -> str:
        """ The token as written in source text. """
        raise NotImplementedError

    def is_punct(self, *puncs: Punctuator) -> bool:
        """ True if a punctuator, and one of given ones (if any). """
        return False

    def __str__(self) -> str:
        return self.spelling


@dataclass(frozen=True)
class HeaderName(PpTok):
    kind: HeaderKind
    path: str

    @property
    def spelling(self) -> str:
        if self.kind is HeaderKind.SYSTEM_PATH:
            return f"<{self.path}>"
        return f'"{self.path}"'


@dataclass(frozen=True)
class Identifier(PpTok):
    name: str
    id: ClassVar[bool] = True

    @property
    def spelling(self) -> str:
        return self.name


@dataclass(frozen=True)
class PpNumber(PpTok):
    text: str                       # The raw lexeme.

    @property
    def spelling(self) -> str:
        return self.text


@dataclass(frozen=True)
class CharConstant(PpTok):
    text: str                       # Includes prefix and quotes.
    quoted: ClassVar[bool] = True

    @property
    def spelling(self) -> str:
        return self.text


@dataclass(frozen=True)
class StringLiteral(PpTok):
    text: str                       # Includes prefix and quotes.
    quoted: ClassVar[bool] = True

    @property
    def spelling(self) -> str:
        return self.text


@dataclass(frozen=True)
class Punct(PpTok):
    punc: Punctuator
    # Only meaningful for '('.  Other punctuators always have NONE.
    sep: Separation = Separation.NONE

    def __post_init__(self):
        if self.punc is not Punctuator.LEFT_PAREN:
            object.__setattr__(self, 'sep', Separation.NONE)

    @property
    def spelling(self) -> str:
        return self.punc.value

    def is_punct(self, *puncs: Punctuator) -> bool:
        return not puncs or self.punc in puncs


@dataclass(frozen=True)
class OtherChar(PpTok):
    """ Any single non-whitespace character that fits no other token. """
    char: str

    @property
    def spelling(self) -> str:
        return self.char


@dataclass(frozen=True)
class Newline(PpTok):
    """
    Newline is not an actual C token, but it is included here for two
    reasons: it is used in the grammar for directives, and the replaced
    output will more closely resemble the input.
    """
    nl: ClassVar[bool] = True

    @property
    def spelling(self) -> str:
        return '\n'


class HiddenTok(NamedTuple):
    """ A token together with its hide set. """
    tok: PpTok
    hide: Hide = Hide.EMPTY

    def __repr__(self) -> str:
        if self.hide:
            return f"{self.tok.spelling!r} - {self.hide!r}"
        return f"{self.tok.spelling!r}"


class EndScope(NamedTuple):
    """
    Zero-width marker placed after the replacement of a macro.  When the
    expander reaches it, the macro's replacement has been completely
    rescanned.  It is never given to the expander's caller.
    """
    name: str

    def __repr__(self) -> str:
        return f"<end {self.name}>"


class Tokens(collections.UserList[PpTok]):
    """
    A list of PpTok tokens.  str(tokens) shows the tokens as source text,
    with a space between two tokens only where needed to keep them apart,
    or before a '(' which was preceded by whitespace.
    """

    @staticmethod
    def join(*tokens: PpTok) -> Tokens:
        """ New Tokens object from given token objects. """
        return Tokens(tokens)

    def __str__(self) -> str:
        from ppmacro.lexer import needs_space
        parts: list[str] = []
        prev: PpTok = None
        for tok in self.data:
            if prev and not prev.nl and not tok.nl:
                if (tok.is_punct(Punctuator.LEFT_PAREN)
                        and tok.sep is Separation.WHITESPACE
                        or needs_space(prev, tok)):
                    parts.append(' ')
            parts.append(tok.spelling)
            prev = tok
        return ''.join(parts)

    def __repr__(self) -> str:
        if not self:
            return "<No tokens>"
        s = str(self)
        more = "..." if len(s) > 20 else ""
        return (f"<Tokens {s!r:.20}{more}>")


# Shorthand constructors, mostly for building macro bodies in code.

def ident(name: str) -> Identifier:
    return Identifier(name)

def number(text: str | int) -> PpNumber:
    return PpNumber(str(text))

def punct(spelling: str, sep: Separation = Separation.NONE) -> Punct:
    return Punct(Punctuator(spelling), sep)

def string(text: str) -> StringLiteral:
    """ String literal with given contents, used as is between the quotes. """
    return StringLiteral(f'"{text}"')
