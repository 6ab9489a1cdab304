""" macros
Manages macro definitions and lookups for a C translation unit.
"""
from __future__ import annotations

from itertools import zip_longest
from typing import ClassVar, Iterable, Sequence

from ppmacro.errors import MacroDefinitionError
from ppmacro.tokens import PpTok, Tokens
from ppmacro.tokentype import Punctuator, Separation

__all__ = 'Macro', 'ObjMacro', 'FuncMacro', 'Macros'

VA_ARGS = '__VA_ARGS__'

# ------------------------------------------------------------------
# Macro object
#
# This object holds information about one preprocessor macro.
#
#    .name      - Macro name string in the #define
#    .body      - Replacement list (a Tokens, from the #define or other source)
#    .is_func   - A function macro (class attribute).
#
# For function macros only:
#    .params    - List of parameter names, with __VA_ARGS__ for '...'
#    .variadic  - Boolean indicating whether or not variadic macro
#
# The replacement list is checked when the macro is created, so that the
# expander can rely on '##' never being first or last, and '#' in a function
# macro always being followed by a parameter.
# ------------------------------------------------------------------

class Macro:
    """ The definition of a preprocessor macro.
    The definition is stored in a Tokens self.body.
    """
    is_func: ClassVar[bool] = False         # True for FuncMacro class
    has_paste: bool = False                 # Contains any '##' tokens
    params: Sequence[str] = ()              # Parameter names, if any
    variadic: bool = False

    def __init__(self, name: str, body: Iterable[PpTok] = ()):
        self.name = name
        self.body = Tokens(tok for tok in body if not tok.nl)
        if any(tok.is_punct() and tok.punc.paste for tok in self.body):
            self.has_paste = True
            if (self.body[0].is_punct() and self.body[0].punc.paste
                    or self.body[-1].is_punct() and self.body[-1].punc.paste):
                raise MacroDefinitionError(
                    f"Macro {name!r}: '##' cannot appear at either end of "
                    f"a macro expansion.")
        if not self.variadic and any(tok.id and tok.name == VA_ARGS
                                     for tok in self.body):
            raise MacroDefinitionError(
                f"Macro {name!r}: {VA_ARGS} can only appear in a variadic "
                f"macro.")

    @property
    def nparams(self) -> int:
        return len(self.params)

    def param_index(self, tok: PpTok) -> int | None:
        """ Index of the parameter named by the token, if any. """
        if tok.id and tok.name in self.params:
            return self.params.index(tok.name)
        return None

    def sameas(self, other: Macro) -> bool:
        """ True if the two definitions are the same, per (C99 6.10.3p2). """
        if type(self) is not type(other): return False
        # Compare the replacement lists.  A '(' compares with its spacing.
        for x, y in zip_longest(self.body, other.body):
            if x is None or y is None: return False
            if x != y: return False
        return True

    def __repr__(self):
        return f"{self.name}={str(self.body)!r}"


class ObjMacro(Macro):
    """ An object-like macro.  Replaced by its replacement list. """


class FuncMacro(Macro):
    """
    A function-like macro.  Its replacement list may refer to the
    parameters, and to the '#' and '##' operators.
    """
    is_func: ClassVar[bool] = True

    def __init__(self, name: str, params: Sequence[str],
                 body: Iterable[PpTok] = (), variadic: bool = False):
        self.params = list(params)
        if variadic and (not self.params or self.params[-1] != VA_ARGS):
            # '...' is given only as the variadic flag.
            self.params.append(VA_ARGS)
        self.variadic = variadic
        super().__init__(name, body)
        seen: set[str] = set()
        for param in self.params:
            if param in seen:
                raise MacroDefinitionError(
                    f"Macro {name!r}: duplicate parameter {param!r}.")
            seen.add(param)
        if VA_ARGS in self.params[:-1] or VA_ARGS in self.params and not variadic:
            raise MacroDefinitionError(
                f"Macro {name!r}: {VA_ARGS} can only name the variadic "
                f"parameter.")
        # '#' must be followed by a parameter.
        for tok, nxt in zip_longest(self.body, self.body[1:]):
            if tok.is_punct() and tok.punc.stringize:
                if not (nxt and nxt.id and nxt.name in seen):
                    raise MacroDefinitionError(
                        f"Macro {name!r}: '#' is not followed by a macro "
                        f"parameter.")

    def sameas(self, other: FuncMacro) -> bool:
        """ True if the two definitions are the same (C99 6.10.3p2). """
        if not super().sameas(other): return False
        return (self.params == other.params
                and self.variadic == other.variadic)

    def __repr__(self):
        params = self.params
        if self.variadic:
            params = params[:-1] + ['...']
        return f"{self.name}({', '.join(params)})={str(self.body)!r}"


class Macros(dict[str, Macro]):
    """ All the macro definitions in a translation unit.

    The table is filled in by directive processing (#define and #undef),
    which happens between expansions.  The expander only reads it.
    """

    def define(self, m: Macro) -> Macro | None:
        """ Add or replace a macro.  Returns the macro it replaced, if any. """
        older = self.get(m.name)
        self[m.name] = m
        return older

    def defined(self, name: str) -> bool:
        return name in self

    def undef(self, name: str) -> None:
        if name in self:
            del self[name]

    def define_text(self, text: str) -> Macro:
        """
        Define a macro from the text which would follow '#define', as in
        a -D command line option.  For example 'ADD(a, b) a + b' or 'N 10'.
        """
        from ppmacro.lexer import tokenize

        toks = Tokens(tok for tok in tokenize(text) if not tok.nl)
        if not toks or not toks[0].id:
            raise MacroDefinitionError(
                f"Macro definition {text!r} requires an identifier")
        name = toks[0].name
        if name == 'defined':
            raise MacroDefinitionError("'defined' is not a valid macro name")
        rest = toks[1:]
        if not (rest and rest[0].is_punct(Punctuator.LEFT_PAREN)
                and rest[0].sep is Separation.NONE):
            self.define(ObjMacro(name, rest))
            return self[name]

        # A macro with parameters.  Get the names through the closing ')'.
        params: list[str] = []
        variadic = False
        i = 1
        expect_name = True
        while True:
            if i >= len(rest):
                raise MacroDefinitionError(
                    f"Macro {name!r}: missing ')' in parameter list.")
            tok = rest[i]
            i += 1
            if tok.is_punct(Punctuator.RIGHT_PAREN):
                if expect_name and params:
                    raise MacroDefinitionError(
                        f"Macro {name!r}: missing name after comma.")
                break
            if not expect_name and tok.is_punct(
                    Punctuator.PARAMETER_SEPARATOR) and not variadic:
                expect_name = True
            elif expect_name and tok.id:
                params.append(tok.name)
                expect_name = False
            elif expect_name and tok.is_punct(Punctuator.VARIADIC_PARAMETERS):
                variadic = True
                expect_name = False
            else:
                raise MacroDefinitionError(
                    f"Macro {name!r}: invalid macro parameter "
                    f"{tok.spelling!r}.")
        self.define(FuncMacro(name, params, rest[i:], variadic=variadic))
        return self[name]

    def expand(self, toks: Iterable[PpTok], **kwds) -> Tokens:
        """
        Completely macro expands the given tokens.  Raises SourceError if
        the expansion produces an Error.  Keywords go to MacroExpander().
        """
        from ppmacro.expander import MacroExpander
        from ppmacro.source import TokenListSource

        return Tokens(MacroExpander(self, TokenListSource(toks), **kwds).data())

    def __repr__(self) -> str:
        return f"<Macros len={len(self)}>"
