""" Module subst.py.
Argument collection and substitution for a single macro invocation.

A MacroCall is created by the expander for each macro it is about to
replace.  For a function macro, MacroCall.collect() reads the argument list
from the expander, and substitute() then builds the replacement list from
the macro body and the arguments, following Prosser's algorithm:

    - A parameter is replaced by its argument, fully macro expanded, except
      as an operand of '#' or '##', where the argument is used as written.
    - '#' parameter becomes a string literal spelling the argument.
    - '##' pastes the tokens on either side into one token.  An empty
      argument next to '##' is a placemarker (C99 6.10.3.3).
    - Every resulting token gets the call's hide set added to its own.
"""

from __future__ import annotations

import functools
from typing import TYPE_CHECKING, Iterable

from ppmacro.errors import (ArityMismatch, ExpansionError, InvalidPaste,
                            UnterminatedInvocation, UpstreamFailure)
from ppmacro.lexer import lex_one, needs_space
from ppmacro.source import Error, TokenListSource
from ppmacro.tokens import (Hide, HiddenTok, PpTok, StringLiteral, Tokens)
from ppmacro.tokentype import Punctuator, Separation

if TYPE_CHECKING:
    from ppmacro.expander import MacroExpander
    from ppmacro.macros import Macro

__all__ = 'Arg', 'MacroCall', 'substitute', 'stringize', 'paste'


class Arg:
    """
    One actual argument of a function macro invocation.

        .raw        - The tokens as collected, including any newlines.
        .tokens     - Unexpanded view, without newlines.  Used for '##'.
        .expanded   - Fully macro expanded view.  Computed the first time
                      it is needed, by a nested expander over just this
                      argument, with the same macro table.
    """
    def __init__(self, raw: list[HiddenTok], call: MacroCall):
        self.raw = raw
        self.call = call

    @functools.cached_property
    def tokens(self) -> list[HiddenTok]:
        return [htok for htok in self.raw if not htok.tok.nl]

    @functools.cached_property
    def expanded(self) -> list[HiddenTok]:
        exp = self.call.exp
        nested = exp.nested(TokenListSource(self.tokens))
        result: list[HiddenTok] = []
        while True:
            atom = nested.next_hidden()
            if not atom: break
            if isinstance(atom, Error):
                if isinstance(atom.exc, ExpansionError):
                    raise atom.exc
                raise UpstreamFailure(atom, self.call.macro.name)
            result.append(atom.datum)
        return result

    def __bool__(self) -> bool:
        return bool(self.tokens)

    def __str__(self) -> str:
        return str(Tokens(htok.tok for htok in self.tokens))

    def __repr__(self) -> str:
        return f"<Arg {str(self)!r}>"


class MacroCall:
    """
    An invocation of a macro, found by the expander.  For a function macro,
    the name has already been seen to be followed by '(', which has been
    consumed.  collect() consumes the rest of the argument list.
    """
    # Argument for each parameter, once collected.
    args: list[Arg] = None

    # ')' token which ends an argument list.  Used by Prosser's algorithm in
    # computing hide sets.
    rparen: HiddenTok = None

    # Hidden names to be applied to all tokens in resulting expansion.
    hide: Hide = None

    def __init__(self, macro: Macro, nametok: HiddenTok, exp: MacroExpander):
        self.macro = macro
        self.nametok = nametok
        self.exp = exp
        if not macro.is_func:
            self.hide = nametok.hide.add(macro.name)

    @property
    def name(self) -> str:
        return self.macro.name

    def collect(self) -> None:
        """
        Parse argument list from the expander, up to the matching ')'.
        Splits at each comma not within nested parentheses, except for the
        commas within the variadic argument.  Sets self.args, self.rparen and
        self.hide.
        """
        m = self.macro
        nparams = m.nparams
        raws: list[list[HiddenTok]] = []
        raw: list[HiddenTok] = []
        nesting = 0
        while True:
            unit = self.exp.next_unit()
            if isinstance(unit, Error):
                raise UpstreamFailure(unit, m.name)
            if not unit:
                # End of tokens before end of the arg list.
                raise UnterminatedInvocation(m.name)
            tok = unit.tok
            if not nesting:
                # Looking for separating ',' or closing ')' at top level.
                if tok.is_punct(Punctuator.RIGHT_PAREN):
                    raws.append(raw)
                    self.rparen = unit
                    break
                if tok.is_punct(Punctuator.PARAMETER_SEPARATOR):
                    # Comma is part of the arg if within the __VA_ARGS__.
                    if not (m.variadic and len(raws) == nparams - 1):
                        raws.append(raw)
                        raw = []
                        continue
            if tok.is_punct(Punctuator.LEFT_PAREN):
                nesting += 1
            elif tok.is_punct(Punctuator.RIGHT_PAREN):
                nesting -= 1
            raw.append(unit)

        self.args = [Arg(raw, self) for raw in raws]
        self.check_arity()
        # Special adjustment for hide set in function macro.
        self.hide = (self.nametok.hide & self.rparen.hide).add(m.name)

    def check_arity(self) -> None:
        m = self.macro
        nparams = m.nparams
        nargs = len(self.args)
        if nargs == nparams:
            return
        if not nparams and nargs == 1 and not self.args[0]:
            # Empty only arg is OK if no params.
            del self.args[:]
        elif m.variadic and nargs == nparams - 1:
            # Variadic args allowed to be one short.  Supply trailing arg.
            self.args.append(Arg([], self))
        else:
            raise ArityMismatch(m.name, nparams, nargs, m.variadic)

    def __repr__(self) -> str:
        rep = self.name
        if self.args is None:
            if self.macro.is_func:
                rep += " <no arg list>"
        else:
            rep = f"{rep}({', '.join(map(str, self.args))})"
        return rep


# Stands for an empty argument next to a '##' operator.  Removed after all
# pastes are done.
PLACEMARKER = HiddenTok(StringLiteral(''))


def substitute(call: MacroCall) -> list[HiddenTok]:
    """
    Result of substituting the macro replacement list using call arguments.
    An object macro has no arguments, but its body may still use '##'.
    Raises InvalidPaste, or any error from expanding an argument.
    """
    m = call.macro
    body = m.body
    log = call.exp.log
    nest = call.exp.nesting + 1
    out: list[HiddenTok] = []

    def is_paste(tok: PpTok | None) -> bool:
        return (m.has_paste and tok is not None
                and tok.is_punct() and tok.punc.paste)

    def is_stringize(tok: PpTok) -> bool:
        return m.is_func and tok.is_punct() and tok.punc.stringize

    def operand(i: int) -> tuple[list[HiddenTok], int]:
        """
        Unexpanded tokens for body[i], as an operand of '##', and the index
        of what follows it.
        """
        tok = body[i]
        if is_stringize(tok):
            return [HiddenTok(stringize_param(body[i + 1]))], i + 2
        argnum = m.param_index(tok)
        if argnum is not None:
            return call.args[argnum].tokens, i + 1
        return [HiddenTok(tok)], i + 1

    def stringize_param(tok: PpTok) -> PpTok:
        arg = call.args[m.param_index(tok)]
        string = stringize(htok.tok for htok in arg.raw)
        log.stringize(tok.spelling, string, nest=nest)
        return string

    def glue(rhs: list[HiddenTok]) -> None:
        """ Paste last of out with first of rhs. """
        if not rhs:
            # Placemarker on the right leaves the left side as it is.
            return
        lhs = out.pop()
        if lhs is PLACEMARKER:
            out.extend(rhs)
            return
        first = rhs[0]
        try:
            tok = paste(lhs.tok, first.tok, m.name)
        except InvalidPaste:
            log.concatenate(None, lhs.tok, first.tok, nest=nest)
            raise
        log.concatenate(tok, lhs.tok, first.tok, nest=nest)
        out.append(HiddenTok(tok, lhs.hide & first.hide))
        out.extend(rhs[1:])

    i = 0
    while i < len(body):
        tok = body[i]
        if is_paste(tok):
            rhs, i = operand(i + 1)
            glue(rhs)
        elif is_paste(i + 1 < len(body) and body[i + 1] or None):
            # Left operand of '##'.
            lhs, i = operand(i)
            out.extend(lhs or [PLACEMARKER])
        elif is_stringize(tok):
            out.append(HiddenTok(stringize_param(body[i + 1])))
            i += 2
        elif m.param_index(tok) is not None:
            arg = call.args[m.param_index(tok)]
            out.extend(arg.expanded)
            i += 1
        else:
            out.append(HiddenTok(tok))
            i += 1

    hide = call.hide
    if m.has_paste:
        out = [htok for htok in out if htok is not PLACEMARKER]
    return [HiddenTok(htok.tok, htok.hide | hide) for htok in out]


def stringize(toks: Iterable[PpTok]) -> StringLiteral:
    """ Implement the '#' operator in a function macro (C99 6.10.3.2).
    A newline, or a '(' with whitespace before it, becomes a single space,
    and a space separates any two tokens which would otherwise lex as
    something else.  There is no leading or trailing space.  Every " and \\
    in a string literal or character constant is escaped.
    """
    parts: list[str] = []
    has_ws = False
    prev: PpTok = None
    for tok in toks:
        if tok.nl:
            has_ws = True
            continue
        if prev and (has_ws
                     or tok.is_punct(Punctuator.LEFT_PAREN)
                        and tok.sep is Separation.WHITESPACE
                     or needs_space(prev, tok)):
            parts.append(' ')
        has_ws = False
        value = tok.spelling
        if tok.quoted:
            value = value.replace('\\', '\\\\').replace('"', '\\"')
        parts.append(value)
        prev = tok

    # Don't end with a backslash.
    if parts and parts[-1] == '\\':
        parts.append('\\')
    string = ''.join(parts)
    return StringLiteral(f'"{string}"')


def paste(lhs: PpTok, rhs: PpTok, name: str = None) -> PpTok:
    """ Implement the '##' operator (C99 6.10.3.3).
    The spellings are joined and lexed again, which must give exactly one
    preprocessing token.  Otherwise raises InvalidPaste.
    """
    tok = lex_one(lhs.spelling + rhs.spelling)
    if tok is None:
        raise InvalidPaste(name, lhs.spelling, rhs.spelling)
    return tok
