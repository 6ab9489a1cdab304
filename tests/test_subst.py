import pytest

from ppmacro.errors import (ArityMismatch, InvalidPaste,
                            UnterminatedInvocation, UpstreamFailure)
from ppmacro.expander import MacroExpander
from ppmacro.lexer import tokenize
from ppmacro.macros import Macros
from ppmacro.source import Datum, Error, TokenListSource
from ppmacro.subst import Arg, MacroCall, paste, stringize, substitute
from ppmacro.tokens import (Hide, HiddenTok, Identifier, PpNumber, Punct,
                            StringLiteral, Tokens, ident, punct)
from ppmacro.tokentype import Punctuator

from test_source import ScriptedSource


def make_call(definition: str, text: str, macros: Macros = None,
              hide: Hide = Hide.EMPTY) -> MacroCall:
    """ A call to the macro, with its argument list in the text, after '('.
    """
    macros = macros if macros is not None else Macros()
    m = macros.define_text(definition)
    exp = MacroExpander(macros, TokenListSource(tokenize(text)))
    return MacroCall(m, HiddenTok(ident(m.name), hide), exp)


def collect(definition: str, text: str, **kwds) -> list[str]:
    call = make_call(definition, text, **kwds)
    call.collect()
    return [str(arg) for arg in call.args]


# Stringize.

def test_stringize_normalizes_spacing():
    assert stringize(tokenize("a + b")) == StringLiteral('"a+b"')
    assert stringize(tokenize("  hello  world  ")).spelling == '"hello world"'


def test_stringize_newline_is_one_space():
    assert stringize(tokenize("\na\n\nb\n")).spelling == '"a b"'


def test_stringize_keeps_space_before_paren():
    assert stringize(tokenize("f (x)")).spelling == '"f (x)"'
    assert stringize(tokenize("f(x)")).spelling == '"f(x)"'


def test_stringize_escapes_literals():
    result = stringize(tokenize(r'p = "a\n"'))
    assert result.spelling == r'"p=\"a\\n\""'
    assert stringize(tokenize(r"'\0'")).spelling == r'''"'\\0'"'''
    assert stringize(tokenize("'\"'")).spelling == r'''"'\"'"'''


def test_stringize_empty():
    assert stringize([]) == StringLiteral('""')


def test_stringize_trailing_backslash():
    assert stringize(tokenize("\\")).spelling == '"\\\\"'


# Paste.

def test_paste_makes_one_token():
    assert paste(ident('x'), PpNumber('1')) == Identifier('x1')
    assert paste(punct('+'), punct('=')) == Punct(Punctuator.ADD_AND_ASSIGN)
    assert paste(PpNumber('1'), ident('e')) == PpNumber('1e')
    assert paste(ident('L'), StringLiteral('"s"')) == StringLiteral('L"s"')


@pytest.mark.parametrize('lhs, rhs', [
    (punct('/'), punct('/')),
    (ident('x'), punct('+')),
    (punct('+'), punct('-')),
    (StringLiteral('"a"'), StringLiteral('"b"')),
])
def test_invalid_paste(lhs, rhs):
    with pytest.raises(InvalidPaste) as info:
        paste(lhs, rhs, 'CAT')
    assert info.value.name == 'CAT'
    assert 'CAT' in str(info.value)


# Argument collection.

def test_collect_splits_top_level_commas():
    assert collect('F(a, b) a b', "1, (2, 3))") == ['1', '(2,3)']


def test_collect_leaves_rest_of_input():
    call = make_call('F(a) a', "x) y")
    call.collect()
    assert call.exp.next() == Datum(ident('y'))


def test_collect_variadic_keeps_commas():
    assert collect('V(a, ...) a __VA_ARGS__', "1, 2, 3)") == ['1', '2,3']


def test_collect_variadic_argument_may_be_omitted():
    assert collect('V(a, ...) a __VA_ARGS__', "1)") == ['1', '']


def test_collect_empty_arguments():
    assert collect('F(a, b) a b', ",)") == ['', '']
    assert collect('F(a) a', ")") == ['']


def test_collect_zero_params():
    assert collect('p() int', ")") == []


def test_collect_keeps_newlines_in_raw():
    call = make_call('F(a) a', "1\n+\n2)")
    call.collect()
    arg = call.args[0]
    assert len(arg.raw) == 5
    assert len(arg.tokens) == 3
    assert str(arg) == '1+2'


@pytest.mark.parametrize('definition, text, nargs', [
    ('F(a, b) a b', "1)", 1),
    ('F(a, b) a b', "1, 2, 3)", 3),
    ('p() int', "x)", 1),
    ('V(a, b, ...) a', "1)", 1),
])
def test_collect_arity_mismatch(definition, text, nargs):
    with pytest.raises(ArityMismatch) as info:
        collect(definition, text)
    assert info.value.nargs == nargs


def test_arity_messages():
    assert str(ArityMismatch('ADD', 2, 1)) == (
        "Macro 'ADD' requires exactly 2 argument(s) but was passed 1.")
    assert str(ArityMismatch('V', 3, 1, variadic=True)) == (
        "Macro 'V' requires at least 2 argument(s) but was passed 1.")


def test_collect_unterminated():
    with pytest.raises(UnterminatedInvocation) as info:
        collect('F(a) a', "(1, 2")
    assert str(info.value) == "Macro 'F' missing ')' in argument list."


def test_collect_upstream_error():
    macros = Macros()
    m = macros.define_text('F(a) a')
    upstream = ScriptedSource(Datum(ident('x')), Error("bad token"))
    call = MacroCall(m, HiddenTok(ident('F')), MacroExpander(macros, upstream))
    with pytest.raises(UpstreamFailure) as info:
        call.collect()
    assert info.value.error == "bad token"
    assert info.value.atom == Error("bad token")


def test_call_hide_set():
    call = make_call('F(a) a', "x)", hide=Hide({'G', 'F2'}))
    call.collect()
    # The ')' has no hide set, so only the macro's own name remains.
    assert call.hide == {'F'}
    assert repr(call) == "F(x)"


def test_object_call_hide_set():
    macros = Macros()
    m = macros.define_text('X 1')
    call = MacroCall(m, HiddenTok(ident('X'), Hide({'Y'})),
                     MacroExpander(macros, TokenListSource()))
    assert call.hide == {'X', 'Y'}


# Arguments.

def test_arg_expanded_view():
    macros = Macros()
    macros.define_text('N 42')
    call = make_call('F(a) a', "N + 1)", macros=macros)
    call.collect()
    arg = call.args[0]
    assert isinstance(arg, Arg)
    assert [htok.tok for htok in arg.tokens] == list(tokenize("N + 1"))
    assert [htok.tok for htok in arg.expanded] == list(tokenize("42 + 1"))
    assert arg.expanded[0].hide == {'N'}
    # Computed only once.
    assert arg.expanded is arg.expanded


def test_arg_expansion_error_is_raised():
    macros = Macros()
    macros.define_text('ADD(a, b) a + b')
    call = make_call('F(a) a', "ADD(1))", macros=macros)
    call.collect()
    with pytest.raises(ArityMismatch):
        call.args[0].expanded


# Substitution.

def substituted(definition: str, text: str, macros: Macros = None) -> str:
    call = make_call(definition, text, macros=macros)
    if call.macro.is_func:
        call.collect()
    return str(Tokens(htok.tok for htok in substitute(call)))


def test_substitute_parameters():
    assert substituted('F(a, b) b - a', "1, 2)") == '2-1'


def test_substitute_adds_call_hide_set():
    call = make_call('F(a) a g', "x)")
    call.collect()
    result = substitute(call)
    assert [htok.hide for htok in result] == [{'F'}, {'F'}]


def test_substitute_stringize_uses_raw_argument():
    macros = Macros()
    macros.define_text('N 42')
    assert substituted('S(x) #x x', "N)", macros=macros) == '"N"42'


def test_substitute_paste_uses_unexpanded_argument():
    macros = Macros()
    macros.define_text('N 42')
    assert substituted('C(a, b) a ## b', "N, N)", macros=macros) == 'NN'


def test_substitute_paste_chain_left_to_right():
    assert substituted('C(a, b, c) a ## b ## c', "x, 1, y)") == 'x1y'


def test_substitute_paste_with_multi_token_arguments():
    assert substituted('C(a, b) a ## b', "x y, 1 2)") == 'x y1 2'


def test_substitute_placemarkers():
    text = 't(x,y,z) x ## y ## z'
    assert substituted(text, "1,2,3)") == '123'
    assert substituted(text, ",4,5)") == '45'
    assert substituted(text, "6,,7)") == '67'
    assert substituted(text, "8,9,)") == '89'
    assert substituted(text, "10,,)") == '10'
    assert substituted(text, ",11,)") == '11'
    assert substituted(text, ",,12)") == '12'
    assert substituted(text, ",,)") == ''


def test_substitute_paste_with_stringize():
    assert substituted('S(a) L ## #a', "x)") == 'L"x"'


def test_substitute_paste_hide_set_is_intersection():
    macros = Macros()
    m = macros.define_text('C(a, b) a ## b')
    exp = MacroExpander(macros, TokenListSource([
        HiddenTok(ident('x'), Hide({'A', 'B'})),
        HiddenTok(punct(',')),
        HiddenTok(ident('y'), Hide({'B', 'D'})),
        HiddenTok(punct(')')),
    ]))
    call = MacroCall(m, HiddenTok(ident('C')), exp)
    call.collect()
    [result] = substitute(call)
    assert result.tok == ident('xy')
    assert result.hide == {'B', 'C'}


def test_substitute_object_macro_paste():
    assert substituted('OBJ a ## b', "") == 'ab'


def test_substitute_without_paste_drops_empty_arguments():
    assert substituted('F(a, b) [a b]', ",)") == '[]'
    assert substituted('F(a, b) [a b]', "1,)") == '[1]'
