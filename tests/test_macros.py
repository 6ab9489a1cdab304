import pytest

from ppmacro.errors import MacroDefinitionError, SourceError, ArityMismatch
from ppmacro.lexer import tokenize
from ppmacro.macros import FuncMacro, Macro, Macros, ObjMacro
from ppmacro.tokens import ident, number, punct


def test_define_returns_replaced_macro():
    macros = Macros()
    first = ObjMacro('N', [number(1)])
    assert macros.define(first) is None
    assert macros.define(ObjMacro('N', [number(2)])) is first
    assert macros['N'].body == [number(2)]


def test_defined_and_undef():
    macros = Macros()
    macros.define_text('X 1')
    assert macros.defined('X')
    macros.undef('X')
    assert not macros.defined('X')
    # Undefining an unknown name is not an error.
    macros.undef('X')


def test_define_text_object_macro():
    macros = Macros()
    m = macros.define_text('FOO 1 + 2')
    assert isinstance(m, ObjMacro)
    assert not m.is_func
    assert m.body == [number(1), punct('+'), number(2)]


def test_define_text_function_macro():
    m = Macros().define_text('ADD(a, b) a + b')
    assert isinstance(m, FuncMacro)
    assert m.params == ['a', 'b']
    assert not m.variadic
    assert m.body == [ident('a'), punct('+'), ident('b')]
    assert repr(m) == "ADD(a, b)='a+b'"


def test_object_macros_have_no_params():
    a = ObjMacro('A', [number(1)])
    b = ObjMacro('B')
    assert a.params == () and b.params == ()
    assert a.nparams == 0
    assert a.param_index(ident('A')) is None
    assert isinstance(Macro.params, tuple)


def test_has_paste():
    macros = Macros()
    assert not macros.define_text('A x # y').has_paste
    assert not macros.define_text('F(a) #a').has_paste
    assert macros.define_text('G(a) x ## a').has_paste
    assert macros.define_text('H x %:%: y').has_paste


def test_space_before_paren_makes_object_macro():
    m = Macros().define_text('F (x) x')
    assert isinstance(m, ObjMacro)
    assert str(m.body) == "(x)x"


def test_define_text_variadic():
    m = Macros().define_text('LOG(fmt, ...) printf(fmt, __VA_ARGS__)')
    assert m.variadic
    assert m.params == ['fmt', '__VA_ARGS__']
    assert m.nparams == 2
    assert repr(m).startswith("LOG(fmt, ...)=")


def test_define_text_zero_params():
    m = Macros().define_text('p() int')
    assert m.is_func
    assert m.params == []


def test_empty_body():
    m = Macros().define_text('EMPTY')
    assert m.body == []


@pytest.mark.parametrize('text', [
    'F(a, a) a',
    'F(a) ## a',
    'F(a) a ##',
    'G ## x',
    'F(a) # b',
    'F(a) #',
    'F(a, ...,b) a',
    'F(a,) a',
    'F(a b',
    'F(1) 1',
    '1 2',
    '',
    'defined 1',
    'F(x) __VA_ARGS__ x',
])
def test_invalid_definitions(text):
    macros = Macros()
    with pytest.raises(MacroDefinitionError):
        macros.define_text(text)
    assert not macros


def test_duplicate_parameter_message():
    with pytest.raises(MacroDefinitionError, match="duplicate parameter 'a'"):
        FuncMacro('F', ['a', 'a'])


def test_stringize_allowed_in_object_macro():
    m = Macros().define_text('HASH # x')
    assert str(m.body) == "#x"


def test_sameas():
    macros = Macros()
    a = macros.define_text('F(x) x + 1')
    b = Macros().define_text('F(x)   x   +   1')
    c = Macros().define_text('F(y) y + 1')
    d = Macros().define_text('F(x) x+ 2')
    e = Macros().define_text('F x + 1')
    assert a.sameas(b)
    assert not a.sameas(c)
    assert not a.sameas(d)
    assert not a.sameas(e)


def test_sameas_paren_spacing():
    a = Macros().define_text('X -(1)')
    b = Macros().define_text('X - (1)')
    c = Macros().define_text('X -  (1)')
    assert not a.sameas(b)
    assert b.sameas(c)


def test_expand_convenience():
    macros = Macros()
    macros.define_text('ADD(a, b) a + b')
    macros.define_text('N 10')
    assert str(macros.expand(tokenize('ADD(N, 2)'))) == '10+2'


def test_expand_raises_on_error():
    macros = Macros()
    macros.define_text('ADD(a, b) a + b')
    with pytest.raises(SourceError) as info:
        macros.expand(tokenize('ADD(1)'))
    assert isinstance(info.value.exc, ArityMismatch)
    assert info.value.error == str(info.value.exc)
