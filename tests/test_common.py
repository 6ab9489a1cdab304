from ppmacro.common import Stack


def test_stack():
    stack = Stack()
    assert stack.depth == 0
    assert stack.top() is None
    assert stack.top('none') == 'none'
    stack.append('A')
    stack.append('B')
    assert stack.depth == 2
    assert stack.top() == 'B'
    assert stack.pop() == 'B'
    assert stack.top() == 'A'
