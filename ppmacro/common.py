""" Module common.py.
Various things generally useful to many other modules.
"""

from __future__ import annotations

import collections
import typing

T = typing.TypeVar('T')


class Stack(collections.UserList[T]):
    """
    Maintains a stack of T objects.  It's a list with extra frills.
    """

    @property
    def depth(self) -> int:
        return len(self)

    def top(self, default: T = None) -> T | None:
        return self and self[-1] or default
