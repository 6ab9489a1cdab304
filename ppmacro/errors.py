""" Module errors.py.
Exceptions raised by the macro expansion stages.

Inside the expander, these are raised by argument collection and
substitution.  They never escape through Source.next(); the expander turns
them into Error atoms, whose value is the message string, with the exception
object in Error.exc.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ppmacro.source import Error

__all__ = ('ExpansionError UpstreamFailure UnterminatedInvocation '
           'ArityMismatch InvalidPaste MacroDefinitionError SourceError'
           .split())


class ExpansionError(Exception):
    """ Base class for anything that stops a single macro expansion. """

    # Name of the macro being expanded, if known.
    name: str = None


class UpstreamFailure(ExpansionError):
    """
    The wrapped source produced an Error atom.  The atom is kept in
    self.atom and is what the expander re-emits, unchanged.
    """
    def __init__(self, atom: Error, name: str = None):
        super().__init__(str(atom))
        self.atom = atom
        self.error = atom.error
        self.name = name


class UnterminatedInvocation(ExpansionError):
    """ End of input while collecting a function macro's arguments. """
    def __init__(self, name: str):
        super().__init__(f"Macro {name!r} missing ')' in argument list.")
        self.name = name


class ArityMismatch(ExpansionError):
    """ Wrong number of arguments for a function macro. """
    def __init__(self, name: str, nparams: int, nargs: int,
                 variadic: bool = False):
        if variadic:
            msg = (f"Macro {name!r} requires at least {nparams - 1} "
                   f"argument(s) but was passed {nargs}.")
        else:
            msg = (f"Macro {name!r} requires exactly {nparams} "
                   f"argument(s) but was passed {nargs}.")
        super().__init__(msg)
        self.name = name
        self.nparams = nparams
        self.nargs = nargs
        self.variadic = variadic


class InvalidPaste(ExpansionError):
    """ The '##' operator did not produce a single preprocessing token. """
    def __init__(self, name: str, lhs: str, rhs: str):
        super().__init__(
            f"Pasting {lhs!r} and {rhs!r} in macro {name!r} does not give "
            f"a valid preprocessing token.")
        self.name = name
        self.lhs = lhs
        self.rhs = rhs


class MacroDefinitionError(ValueError):
    """ A macro definition breaks a rule of the macro table. """


class SourceError(Exception):
    """
    Raised by Source.data() when the source produces an Error atom.  The
    atom's value is in self.error, and its exception, if any, in self.exc.
    """
    def __init__(self, error: Any, exc: BaseException = None):
        super().__init__(str(error))
        self.error = error
        self.exc = exc
