""" Module debug_log.
DebugLog class.
    Methods to write interesting information while expanding macros.
"""
from __future__ import annotations

import textwrap
from typing import TYPE_CHECKING, Iterable

from ppmacro.tokens import HiddenTok, PpTok, Tokens

if TYPE_CHECKING:
    from ppmacro.macros import Macro
    from ppmacro.subst import MacroCall

__all__ = 'DebugLog',

# ----------------------------------------------------------------------
# class DebugLog
#
# Methods to write information to the debug log file, if enabled.
# Each log line has a left part, naming the macro whose replacement is being
# rescanned (if any), and a right part with the message, indented by the
# nesting of expansions.
# ----------------------------------------------------------------------

class DebugLog:
    def __init__(self, filename: str = None, width: int = 80):
        self.enable: str = filename
        self.loglines: list[tuple[str, str]] = []
        self.wrapper = textwrap.TextWrapper(width=width)

    def arg(self, name: str, arg: Iterable[PpTok | HiddenTok], **kwds
            ) -> None:
        if not self.enable: return
        self.write(f"Arg {name} = {text(arg)!r}", **kwds)

    def concatenate(self, pasted: PpTok | None, *opnds: PpTok, **kwds
                    ) -> None:
        if not self.enable: return
        expr = ' ## '.join(repr(opnd.spelling) for opnd in opnds)
        if pasted:
            self.write(f"Concatenate {expr} -> {pasted.spelling!r}", **kwds)
        else:
            self.write(f"Concatenate {expr} FAILED", **kwds)

    def expand(self, tok: PpTok,
               macro: Macro = None,
               expand: bool = True,
               call: MacroCall = None,
               **kwds,
               ) -> None:
        """ Name of the macro appears in `tok` token.
        The arguments and the replacement are logged at one more nesting
        level.
        """
        if not self.enable: return
        name = tok.spelling
        is_func = macro and macro.is_func and "()" or ""
        if not expand:
            self.write(
                f"Macro {name}{is_func} not expanded: already expanding.",
                **kwds)
        elif is_func and call is None:
            self.write(
                f"-- Macro {name}{is_func} not expanded: no argument list.",
                **kwds)
        else:
            self.write(f"Expand macro {name}{is_func}", **kwds)
            nest = kwds.pop('nest', 0) + 1
            if call and call.hide:
                self.write(f"Hide set = {call.hide!r}", nest=nest, **kwds)
            if is_func:
                for param, arg in zip(macro.params, call.args):
                    self.arg(param, arg.tokens, nest=nest, **kwds)
            if macro:
                self.write(f"Replacement = {str(macro.body)!r}",
                           nest=nest, **kwds)

    def end_scope(self, name: str, **kwds) -> None:
        if not self.enable: return
        self.write(f"End of macro {name}", **kwds)

    def error(self, error: object, **kwds) -> None:
        if not self.enable: return
        self.write(f"ERROR: {error}", **kwds)

    def msg(self, msg: str, **kwds) -> None:
        if self.enable:
            self.write(msg, **kwds)

    def stringize(self, name: str, string: PpTok, **kwds) -> None:
        if not self.enable: return
        self.write(f"Stringize # {name} = {string.spelling}", **kwds)

    def write(self, text: str, *, nest: int = 0, left: str = '') -> None:
        """ Common method for all logging.
        Logs a single message, which may contain multiple lines.
        Resulting lines are saved in self.loglines, to be written
        to the log file by self.writelog().
        """
        if not self.enable: return
        wrapper = self.wrapper
        wrapper.initial_indent = '| ' * nest
        wrapper.subsequent_indent = wrapper.initial_indent + '... '
        for line in text.splitlines():
            if not line.strip(): continue
            for line2 in wrapper.wrap(line):
                self.loglines.append((left, line2))
                left = ''
            wrapper.initial_indent = wrapper.subsequent_indent

    def writelog(self) -> None:
        """ This writes the entire output log file, if enabled.
        Called after everything has been processed.
        """
        if self.enable:
            with open(self.enable, "wt") as file:
                if self.loglines:
                    lefts, _ = zip(*self.loglines)
                    leftwidth = max(len(s) for s in lefts)
                    for left, right in self.loglines:
                        print("%-*s %s" % (leftwidth, left, right), file=file)


def text(toks: Iterable[PpTok | HiddenTok]) -> str:
    """ Source text for tokens, which may have hide sets. """
    return str(Tokens.join(*(isinstance(tok, HiddenTok) and tok.tok or tok
                             for tok in toks)))
