""" tokentype.py

Closed enumerations used in the token vocabulary.

Punctuator enumerates the C punctuator tokens.  The names capture how the
token is most often used in C.  A preprocessor doesn't care about C semantics,
but it helps keep the names short and understandable to those already
familiar with C.  The order of the definitions matches the C17 draft (N2176).
Each member's value is its spelling.
"""

from __future__ import annotations

import enum

__all__ = 'Punctuator', 'Separation', 'HeaderKind'


class Punctuator(enum.Enum):
    ARRAY_INDEX_BEGIN = '['
    ARRAY_INDEX_END = ']'
    # Whether a left paren is preceded by whitespace in a #define
    # differentiates between a function-like macro and an object macro whose
    # replacement starts with a left paren.  Recorded in Punct.sep.
    LEFT_PAREN = '('
    RIGHT_PAREN = ')'
    BLOCK_BEGIN = '{'
    BLOCK_END = '}'
    MEMBER = '.'
    DEREF_MEMBER = '->'
    INCREMENT = '++'
    DECREMENT = '--'
    ADDRESS_OF = '&'
    DEREFERENCE = '*'
    ADD = '+'
    SUBTRACT = '-'
    BITWISE_NOT = '~'
    LOGICAL_NOT = '!'
    DIVIDE = '/'
    MODULUS = '%'
    SHIFT_LEFT = '<<'
    SHIFT_RIGHT = '>>'
    LESS_THAN = '<'
    GREATER_THAN = '>'
    LESS_THAN_OR_EQUALS = '<='
    GREATER_THAN_OR_EQUALS = '>='
    EQUALS = '=='
    NOT_EQUALS = '!='
    BITWISE_XOR = '^'
    BITWISE_OR = '|'
    LOGICAL_AND = '&&'
    LOGICAL_OR = '||'
    TERNARY_CONDITION = '?'
    TERNARY_SEPARATOR = ':'
    STATEMENT_END = ';'
    VARIADIC_PARAMETERS = '...'
    ASSIGNMENT = '='
    MULTIPLY_AND_ASSIGN = '*='
    DIVIDE_AND_ASSIGN = '/='
    MODULUS_AND_ASSIGN = '%='
    ADD_AND_ASSIGN = '+='
    SUBTRACT_AND_ASSIGN = '-='
    SHIFT_LEFT_AND_ASSIGN = '<<='
    SHIFT_RIGHT_AND_ASSIGN = '>>='
    BITWISE_AND_AND_ASSIGN = '&='
    BITWISE_XOR_AND_ASSIGN = '^='
    BITWISE_OR_AND_ASSIGN = '|='
    PARAMETER_SEPARATOR = ','
    PREPROCESSING_DIRECTIVE = '#'
    PREPROCESSING_CONCAT = '##'
    ARRAY_INDEX_BEGIN_DIGRAPH = '<:'
    ARRAY_INDEX_END_DIGRAPH = ':>'
    BLOCK_BEGIN_DIGRAPH = '<%'
    BLOCK_END_DIGRAPH = '%>'
    PREPROCESSING_DIRECTIVE_DIGRAPH = '%:'
    PREPROCESSING_CONCAT_DIGRAPH = '%:%:'

    @property
    def spelling(self) -> str:
        return self.value

    @property
    def stringize(self) -> bool:
        """ The '#' operator, in either spelling. """
        return self in (Punctuator.PREPROCESSING_DIRECTIVE,
                        Punctuator.PREPROCESSING_DIRECTIVE_DIGRAPH)

    @property
    def paste(self) -> bool:
        """ The '##' operator, in either spelling. """
        return self in (Punctuator.PREPROCESSING_CONCAT,
                        Punctuator.PREPROCESSING_CONCAT_DIGRAPH)

    @classmethod
    def spellings(cls) -> list[str]:
        """ All spellings, longest first, for maximal munch. """
        return sorted((p.value for p in cls), key=len, reverse=True)


class Separation(enum.Enum):
    """ How a token is separated from the token before it. """
    WHITESPACE = enum.auto()
    NONE = enum.auto()


class HeaderKind(enum.Enum):
    SYSTEM_PATH = enum.auto()       # <...>
    USER_PATH = enum.auto()         # "..."
