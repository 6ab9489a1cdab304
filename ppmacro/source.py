""" Module source.py
The Source protocol, and the Atoms which a Source produces.

Every stage of the preprocessor is a Source wrapping another Source.  A stage
does not know whether its input is a lexer, an include expander, another
macro expander, or a test double.

Each call to Source.next() produces exactly one Atom:

    Datum(datum)    One unit of information.
    Error(error)    A valid unit could not be produced.  Whether the source
                    can go on after this is up to the particular source.
                    The value is normally a message string.
    Empty           The source is used up.  Every later call to next() also
                    returns Empty.

In essence, an Atom is a combination of a result and an optional value.
"""

from __future__ import annotations

import abc
from collections import deque
from dataclasses import dataclass, field
import typing
from typing import Any, Generic, Iterable, Iterator

from ppmacro.errors import SourceError

__all__ = ('Atom Datum Error Empty Source TokenListSource IterSource'
           .split())

T = typing.TypeVar('T')


class Atom:
    """ Base class for what Source.next() produces. """

    def __bool__(self) -> bool:
        """ True unless the source is exhausted. """
        return True


@dataclass(frozen=True)
class Datum(Atom, Generic[T]):
    """ A unit produced by a source. """
    datum: T


@dataclass(frozen=True)
class Error(Atom):
    """ Why a source could not produce a unit.
    exc is the exception which caused the error, if there was one.  It does
    not take part in comparisons.
    """
    error: Any
    exc: BaseException = field(default=None, compare=False)

    def __str__(self) -> str:
        return str(self.error)


class EmptyAtom(Atom):
    """ Singleton class for Empty. """
    instance: typing.ClassVar[EmptyAtom] = None

    def __new__(cls):
        if cls.instance is None:
            cls.instance = super().__new__(cls)
        return cls.instance

    def __bool__(self) -> bool: return False

    def __repr__(self) -> str:
        return "Empty"

Empty = EmptyAtom()


class Source(abc.ABC, Generic[T]):
    """
    Pull-based producer of Atoms.  Subclasses implement next().

    Iterating a Source yields its Datum and Error atoms, and stops at the
    first Empty.
    """

    @abc.abstractmethod
    def next(self) -> Atom:
        """ Produce the next Datum, Error, or Empty. """

    def __iter__(self) -> Iterator[Atom]:
        while True:
            atom = self.next()
            if atom is Empty:
                return
            yield atom

    def data(self) -> Iterator[T]:
        """
        Generates the datum values, until Empty.  An Error atom raises
        SourceError, carrying the error value and exception.
        """
        for atom in self:
            if isinstance(atom, Error):
                raise SourceError(atom.error, atom.exc)
            yield atom.datum


class TokenListSource(Source[T]):
    """
    A finite, in-memory source.  Produces the given items in order, then
    Empty forever.
    """
    def __init__(self, items: Iterable[T] = ()):
        self.items = deque(items)

    def next(self) -> Atom:
        if not self.items:
            return Empty
        return Datum(self.items.popleft())

    def __len__(self) -> int:
        return len(self.items)

    def __repr__(self) -> str:
        return f"<TokenListSource {len(self.items)} left>"


class IterSource(Source[T]):
    """
    Adapts an ordinary Python iterable, such as a lexer generator, to the
    Source protocol.
    """
    def __init__(self, items: Iterable[T]):
        self.iter = iter(items)
        self.done = False

    def next(self) -> Atom:
        if self.done:
            return Empty
        try:
            return Datum(next(self.iter))
        except StopIteration:
            self.done = True
            return Empty
