""" Package ppmacro.
The macro expansion stage of a C preprocessor.

    macros = Macros()
    macros.define_text('ADD(a, b) a + b')
    exp = MacroExpander(macros, IterSource(tokenize('ADD(1, 2)')))
    str(Tokens(exp.data()))         # '1+2'
"""

from ppmacro.errors import *
from ppmacro.expander import MacroExpander
from ppmacro.lexer import lex_one, tokenize
from ppmacro.macros import FuncMacro, Macro, Macros, ObjMacro
from ppmacro.source import *
from ppmacro.tokens import *
from ppmacro.tokentype import HeaderKind, Punctuator, Separation
