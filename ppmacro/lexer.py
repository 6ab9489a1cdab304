""" lexer.py
Lexer for preprocessing tokens (C99 6.4), using the ply.lex module.

The expander needs it to re-lex the result of a '##' operator as a single
token, and the command line tool and the tests use it to turn text into a
token stream.  Translation phases 1 and 2 (trigraphs, line splicing,
character encodings) are not done here.

The rules are methods of the LexRules class, given to lex.lex(module=...).
See "Alternative specification of lexers" in the ply documentation.  Every
rule is a function rule, so the lexer tries them in the order they are
defined here.
"""

from __future__ import annotations

import re
from typing import Iterator

from ply import lex
from ply.lex import LexToken, Lexer, TOKEN

from ppmacro.tokens import (PpTok, HeaderName, Identifier, PpNumber,
                            CharConstant, StringLiteral, Punct, OtherChar,
                            Newline)
from ppmacro.tokentype import HeaderKind, Punctuator, Separation

__all__ = 'tokenize', 'lex_one', 'needs_space'


def joinalts(*alts: str) -> str:
    """ Make a regex from (non-empty) given alternatives. """
    return ' | '.join(filter(None, alts))


class RegExes:
    """ Collection of the REs used by the lexer.  ply compiles them with the
    VERBOSE flag, so spaces are not significant outside of brackets.
    """

    newline = r'\n'
    comment = r'(/\*(.|\n)*?\*/ | //[^\n]*)'

    digit = r'[0-9]'
    ident_nondigit = r'[A-Za-z_]'
    # Identifier (C99 6.4.2.1).
    ident = rf'{ident_nondigit}({digit}|{ident_nondigit})*'

    # Preprocessing number (C99 6.4.8).
    #   The exponent forms come before ident_nondigit, so that the sign is
    #   part of the number.
    ppnum_tail = joinalts(r'[eEpP][+-]', r'[.]', digit, ident_nondigit)
    ppnum = rf'[.]?{digit}({ppnum_tail})*'

    # Escape sequence, or any other character except the quote, backslash
    # and newline.
    escape = r'\\[^\n]'
    strprefix = r'(u8|u|U|L)?'
    string = rf'{strprefix}"([^"\\\n] | {escape})*"'
    char = rf"{strprefix}'([^'\\\n] | {escape})+'"

    # Header names (C99 6.4.7).  Only recognized in the INCLUDE state.
    hdrname = r'<[^>\n]*> | "[^"\n]*"'

    # Longest first, for maximal munch.
    punct = joinalts(*map(re.escape, Punctuator.spellings()))


class LexRules:
    """
    The class attributes and methods are used by lex.lex(module=self).  The
    token types are the names in `tokens`.  Any character which starts no
    token becomes an OTHER token, in t_error().
    """
    tokens = ('HEADER_NAME NEWLINE STRING CHAR PPNUM IDENT PUNCT OTHER'
              .split())

    # Header names are tokens only in an #include directive.
    states = [
        ('INCLUDE', 'inclusive'),
    ]

    # Whitespace other than newline.
    t_ignore = ' \t\f\v\r'

    @TOKEN(RegExes.hdrname)
    def t_INCLUDE_HEADER_NAME(self, t: LexToken) -> LexToken:
        return t

    @TOKEN(RegExes.newline)
    def t_NEWLINE(self, t: LexToken) -> LexToken:
        t.lexer.lineno += 1
        return t

    # Comments are whitespace.  Place before PUNCT, for '/'.
    @TOKEN(RegExes.comment)
    def t_COMMENT(self, t: LexToken) -> None:
        t.lexer.lineno += t.value.count('\n')

    # Literals before IDENT, which would match their prefix.
    @TOKEN(RegExes.string)
    def t_STRING(self, t: LexToken) -> LexToken:
        return t

    @TOKEN(RegExes.char)
    def t_CHAR(self, t: LexToken) -> LexToken:
        return t

    # Before PUNCT, which would match the '.' of '.5'.
    @TOKEN(RegExes.ppnum)
    def t_PPNUM(self, t: LexToken) -> LexToken:
        return t

    @TOKEN(RegExes.ident)
    def t_IDENT(self, t: LexToken) -> LexToken:
        return t

    @TOKEN(RegExes.punct)
    def t_PUNCT(self, t: LexToken) -> LexToken:
        return t

    def t_error(self, t: LexToken) -> LexToken:
        # t.value is all the remaining data.  Take just one character.
        t.value = t.value[0]
        t.type = 'OTHER'
        t.lexer.skip(1)
        return t


# Master lexer.  Each user works with a clone of it.
_lexer: Lexer = lex.lex(module=LexRules())


def _make_token(t: LexToken, ws_before: bool) -> PpTok:
    """ The token for a LexToken. """
    typ, value = t.type, t.value
    if typ == 'NEWLINE':
        return Newline()
    if typ == 'HEADER_NAME':
        kind = (value[0] == '<' and HeaderKind.SYSTEM_PATH
                or HeaderKind.USER_PATH)
        return HeaderName(kind, value[1:-1])
    if typ == 'STRING':
        return StringLiteral(value)
    if typ == 'CHAR':
        return CharConstant(value)
    if typ == 'PPNUM':
        return PpNumber(value)
    if typ == 'IDENT':
        return Identifier(value)
    if typ == 'PUNCT':
        return Punct(Punctuator(value),
                     ws_before and Separation.WHITESPACE or Separation.NONE)
    return OtherChar(value)


def tokenize(text: str, header_names: bool = False) -> Iterator[PpTok]:
    """
    Generates the preprocessing tokens in given text.  Whitespace and
    comments are skipped, a newline becomes a Newline token, and a '('
    records whether whitespace came before it.

    If header_names is true, <...> and "..." are lexed as header names, as
    in an #include directive.
    """
    lexer: Lexer = _lexer.clone()
    lexer.input(text)
    if header_names:
        lexer.begin('INCLUDE')
    after_nl = False
    end = 0                         # Where the previous token ended.
    while True:
        t: LexToken | None = lexer.token()
        if not t: return
        tok = _make_token(t, after_nl or t.lexpos > end)
        end = lexer.lexpos
        after_nl = tok.nl
        yield tok


def lex_one(text: str) -> PpTok | None:
    """
    The single preprocessing token spelled by the given text, or None if
    the text is anything other than exactly one token.
    """
    lexer: Lexer = _lexer.clone()
    lexer.input(text)
    t: LexToken | None = lexer.token()
    # The token has to start at the beginning and take up all the text.
    if not t or t.lexpos or len(text) != lexer.lexpos or t.type == 'NEWLINE':
        return None
    return _make_token(t, False)


def needs_space(lhs: PpTok, rhs: PpTok) -> bool:
    """
    True if writing the spellings of lhs and rhs next to each other would
    not lex back as lhs followed by rhs.
    """
    left = lhs.spelling
    lexer: Lexer = _lexer.clone()
    lexer.input(left + rhs.spelling)
    # First token, value should match left.
    lexer.token()
    return len(left) != lexer.lexpos
