""" Module expander.py.
MacroExpander class, the macro expanding stage of the preprocessor.

A MacroExpander wraps an upstream Source of preprocessing tokens and a macro
table, and is itself a Source of the fully macro expanded tokens.  Work is
done on demand, one token at a time, as the caller calls next().

Recursion is prevented with hide sets (Prosser's algorithm).  Each token
carries the names of the macros whose expansion produced it, and a token
is never expanded as an invocation of a macro named in its own hide set.

When a macro is replaced, its replacement tokens are put at the front of the
pending queue, followed by an EndScope marker, and are rescanned along with
the rest of the input.  The marker is reached once the replacement has been
completely rescanned.  It is consumed here and never given to the caller.
"""

from __future__ import annotations

from collections import deque
from typing import Union

from ppmacro.common import Stack
from ppmacro.debug_log import DebugLog
from ppmacro.errors import ExpansionError, UpstreamFailure
from ppmacro.macros import Macro, Macros
from ppmacro.source import Atom, Datum, Empty, Error, Source
from ppmacro.subst import MacroCall, substitute
from ppmacro.tokens import EndScope, HiddenTok, PpTok
from ppmacro.tokentype import Punctuator

__all__ = 'MacroExpander',

# What can be in the pending queue.
Unit = Union[HiddenTok, EndScope, Error]


class MacroExpander(Source[PpTok]):
    """
    Source of macro expanded tokens.

        .macros     - The macro table.  Only read, never changed.
        .upstream   - Where the input tokens come from.  Its data may be
                      either PpTok's or HiddenTok's.
        .pending    - Units to be scanned before reading from upstream:
                      replacement tokens, EndScope markers, and any Error
                      that was read from upstream while looking ahead.
        .expanding  - Names of the macros whose replacements are being
                      rescanned, innermost last.
        .log        - DebugLog for tracing the expansion.
        .outer      - The expander which created this one to expand a macro
                      argument, if any.
    """
    # Set when upstream has returned Empty.
    exhausted: bool = False
    outer: MacroExpander = None

    def __init__(self, macros: Macros, upstream: Source, *,
                 log: DebugLog = None, outer: MacroExpander = None):
        self.macros = macros
        self.upstream = upstream
        self.pending: deque[Unit] = deque()
        self.expanding: Stack[str] = Stack()
        self.log = log if log is not None else DebugLog()
        if outer: self.outer = outer

    @property
    def depth(self) -> int:
        """ How many macro replacements are currently being rescanned. """
        return self.expanding.depth

    @property
    def nesting(self) -> int:
        """ Depth of expansions including those of outer expanders. """
        if self.outer:
            return self.depth + self.outer.nesting + 1
        return self.depth

    def nested(self, upstream: Source) -> MacroExpander:
        """ New expander for a macro argument, with the same macro table. """
        return MacroExpander(self.macros, upstream, log=self.log, outer=self)

    # Reading units.

    def pull_unit(self) -> Unit | Atom:
        """
        Next unit from the pending queue, else from upstream.  Returns a
        HiddenTok, EndScope, Error, or Empty.
        """
        if self.pending:
            return self.pending.popleft()
        if self.exhausted:
            return Empty
        atom = self.upstream.next()
        if isinstance(atom, Datum):
            datum = atom.datum
            if isinstance(datum, HiddenTok):
                return datum
            return HiddenTok(datum)
        if not atom:
            self.exhausted = True
        return atom

    def next_unit(self) -> HiddenTok | Atom:
        """
        Next HiddenTok, Error, or Empty.  Any EndScope markers along the way
        are consumed.
        """
        while True:
            unit = self.pull_unit()
            if isinstance(unit, EndScope):
                self.end_scope(unit)
                continue
            return unit

    def end_scope(self, marker: EndScope) -> None:
        """ The replacement of marker.name has been completely rescanned. """
        self.log.end_scope(marker.name, nest=self.nesting)
        self.expanding.pop()

    def push(self, *units: Unit) -> None:
        """ Put units back at the front of the pending queue, in order. """
        self.pending.extendleft(reversed(units))

    def find_lparen(self) -> bool:
        """
        Looks ahead, past any newlines and EndScope markers, for a '('.  If
        found, it is consumed along with what came before it, and any
        EndScope markers are processed.  Otherwise everything looked at is
        pushed back, to be read again.
        """
        skipped: list[Unit] = []
        while True:
            unit = self.pull_unit()
            if (isinstance(unit, EndScope)
                    or isinstance(unit, HiddenTok) and unit.tok.nl):
                skipped.append(unit)
                continue
            if (isinstance(unit, HiddenTok)
                    and unit.tok.is_punct(Punctuator.LEFT_PAREN)):
                for unit in skipped:
                    if isinstance(unit, EndScope):
                        self.end_scope(unit)
                return True
            # Something else, an Error, or Empty.
            if unit:
                skipped.append(unit)
            self.push(*skipped)
            return False

    # Producing output.

    def next(self) -> Atom:
        """ Produce the next expanded token, an Error, or Empty. """
        atom = self.next_hidden()
        if isinstance(atom, Datum):
            return Datum(atom.datum.tok)
        return atom

    def next_hidden(self) -> Atom:
        """
        Same as next(), but the Datum is a HiddenTok, so that the hide set of
        the token is available.  A nested expander for a macro argument is
        read with this method.
        """
        while True:
            unit = self.next_unit()
            if not isinstance(unit, HiddenTok):
                # Error or Empty is passed along unchanged.
                return unit
            tok, hide = unit
            if not tok.id:
                return Datum(unit)
            m: Macro = self.macros.get(tok.name)
            if m is None:
                return Datum(unit)
            if tok.name in hide:
                self.log.expand(tok, m, expand=False, nest=self.nesting)
                return Datum(unit)
            try:
                repl = self.replace(m, unit)
            except UpstreamFailure as e:
                self.log.error(e, nest=self.nesting)
                return e.atom
            except ExpansionError as e:
                self.log.error(e, nest=self.nesting)
                return Error(str(e), e)
            if repl is None:
                # Function macro name without an argument list.
                return Datum(unit)
            # Rescan the replacement, along with the rest of the input.
            self.push(*repl, EndScope(m.name))
            self.expanding.append(m.name)

    def replace(self, m: Macro, nametok: HiddenTok) -> list[HiddenTok] | None:
        """
        The replacement for an invocation of macro m, whose name is in
        nametok.  None if m is a function macro and nametok is not followed
        by '('.  Raises an ExpansionError if the invocation is invalid.
        """
        call = MacroCall(m, nametok, self)
        if m.is_func:
            if not self.find_lparen():
                self.log.expand(nametok.tok, m, nest=self.nesting)
                return None
            call.collect()
        self.log.expand(nametok.tok, m, call=call, nest=self.nesting)
        return substitute(call)

    def __repr__(self) -> str:
        return (f"<MacroExpander in {self.expanding.top()!r} depth={self.depth}"
                f" {len(self.pending)} pending>")
