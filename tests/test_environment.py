import pytest

from pylox.ast import Token
from pylox.environment import Environment
from pylox.errors import LoxRuntimeError


def ident(name, line=1):
    return Token('IDENTIFIER', name, None, line)


def test_define_get_and_assign():
    env = Environment()
    env.define('a', 1.0)
    assert env.get(ident('a')) == 1.0
    env.assign(ident('a'), 2.0)
    assert env.get(ident('a')) == 2.0


def test_redefine_in_same_frame_overwrites():
    env = Environment()
    env.define('a', 1.0)
    env.define('a', 'again')
    assert env.get(ident('a')) == 'again'


def test_lookup_walks_enclosing_frames():
    outer = Environment()
    outer.define('a', 'outer')
    inner = Environment(outer)
    assert inner.get(ident('a')) == 'outer'
    inner.assign(ident('a'), 'changed')
    assert outer.values['a'] == 'changed'


def test_undefined_get_raises():
    env = Environment(Environment())
    with pytest.raises(LoxRuntimeError) as exc:
        env.get(ident('missing', line=7))
    assert exc.value.message == "Undefined variable 'missing'."
    assert exc.value.token.line == 7


def test_assign_never_creates_a_binding():
    env = Environment()
    with pytest.raises(LoxRuntimeError) as exc:
        env.assign(ident('nope'), 1.0)
    assert exc.value.message == "Undefined variable 'nope'."
    assert 'nope' not in env.values


def test_get_at_and_assign_at_use_exact_frame():
    globals_env = Environment()
    globals_env.define('x', 'global')
    middle = Environment(globals_env)
    middle.define('x', 'middle')
    inner = Environment(middle)
    inner.define('x', 'inner')

    assert inner.ancestor(0) is inner
    assert inner.ancestor(2) is globals_env
    assert inner.get_at(1, 'x') == 'middle'

    inner.assign_at(2, ident('x'), 'reassigned')
    assert globals_env.values['x'] == 'reassigned'
    assert middle.values['x'] == 'middle'
    assert inner.values['x'] == 'inner'
