import io

from pylox.ast import Token
from pylox.interpreter import Interpreter, run_program
from pylox.types import LoxClass, LoxFunction, LoxInstance


def run(source, capsys):
    interp = run_program(source)
    captured = capsys.readouterr()
    return captured.out.strip().splitlines(), interp


def test_class_and_instance_rendering(capsys):
    out, _ = run('class Bagel {} print Bagel; print Bagel();', capsys)
    assert out == ['Bagel', 'Bagel instance']


def test_fields_and_methods(capsys):
    source = '''
    class Person {
      init(name) { this.name = name; }
      greet() { return "Hi, " + this.name; }
    }
    var p = Person("Ada");
    print p.greet();
    p.name = "Grace";
    print p.greet();
    var greet = p.greet;
    print greet();
    print greet;
    '''
    out, _ = run(source, capsys)
    assert out == ['Hi, Ada', 'Hi, Grace', 'Hi, Grace', '<fn greet>']


def test_fields_shadow_methods(capsys):
    out, _ = run('class A { m() { return "method"; } } var a = A(); a.m = "field"; print a.m;', capsys)
    assert out == ['field']


def test_bound_method_keeps_its_instance(capsys):
    source = '''
    class Counter {
      init() { this.n = 0; }
      bump() { this.n = this.n + 1; return this.n; }
    }
    var a = Counter();
    var b = Counter();
    var bump = a.bump;
    bump();
    bump();
    b.bump();
    print a.n;
    print b.n;
    '''
    out, _ = run(source, capsys)
    assert out == ['2', '1']


def test_method_closure_captures_enclosing_scope(capsys):
    source = '''
    fun makeClass(greeting) {
      class Greeter {
        say() { return greeting; }
      }
      return Greeter;
    }
    print makeClass("hello")().say();
    '''
    out, _ = run(source, capsys)
    assert out == ['hello']


def test_super_call_chain(capsys):
    source = '''
    class A { method() { print "A method"; } }
    class B < A {
      method() { print "B method"; }
      test() { super.method(); }
    }
    class C < B {}
    C().test();
    '''
    out, _ = run(source, capsys)
    assert out == ['A method']


def test_inherited_initializer(capsys):
    source = '''
    class Base { init(x) { this.x = x; } }
    class Derived < Base {
      init(x, y) { super.init(x); this.y = y; }
    }
    var d = Derived(1, 2);
    print d.x + d.y;
    class Plain < Base {}
    print Plain(5).x;
    '''
    out, _ = run(source, capsys)
    assert out == ['3', '5']


def test_initializer_arity_checked_before_running(capsys):
    source = '''
    class Point {
      init(x, y) { print "init ran"; this.x = x; this.y = y; }
    }
    var p = Point(1);
    '''
    out, interp = run(source, capsys)
    assert out == []
    assert interp.reporter.errors == ['Expected 2 arguments but got 1.\n[line 5]']


def test_class_without_init_takes_no_arguments(capsys):
    out, interp = run('class A {}\nA(1);', capsys)
    assert out == []
    assert interp.reporter.errors == ['Expected 0 arguments but got 1.\n[line 2]']


def test_property_errors(capsys):
    _, interp = run('class A {}\nprint A().missing;', capsys)
    assert interp.reporter.errors == ["Undefined property 'missing'.\n[line 2]"]
    _, interp = run('var s = "x";\nprint s.length;', capsys)
    assert interp.reporter.errors == ['Only instances have properties.\n[line 2]']
    _, interp = run('var n = 1;\nn.x = 2;', capsys)
    assert interp.reporter.errors == ['Only instances have fields.\n[line 2]']


def test_superclass_must_be_a_class(capsys):
    _, interp = run('var NotAClass = "x";\nclass B < NotAClass {}', capsys)
    assert interp.reporter.errors == ['Superclass must be a class.\n[line 2]']


def test_super_method_missing(capsys):
    source = 'class A {}\nclass B < A { m() { return super.nope(); } }\nB().m();'
    _, interp = run(source, capsys)
    assert interp.reporter.errors == ["Undefined property 'nope'.\n[line 2]"]


def test_environment_after_subclass_declaration(capsys):
    source = '''
    class A { name() { return "A"; } }
    {
      class B < A { name() { return "B" + super.name(); } }
      var b = B();
      print b.name();
    }
    var after = "still global";
    print after;
    '''
    out, interp = run(source, capsys)
    assert out == ['BA', 'still global']
    assert interp.environment is interp.globals
    assert 'B' not in interp.globals.values


def test_property_access_binds_a_fresh_method():
    interp = Interpreter(output=io.StringIO())
    run_program('class A { m() { return this; } }\nvar a = A();', interp)
    klass = interp.globals.values['A']
    instance = interp.globals.values['a']
    assert isinstance(klass, LoxClass)
    assert isinstance(instance, LoxInstance)

    name = Token('IDENTIFIER', 'm', None, 1)
    first = instance.get(name)
    second = instance.get(name)
    assert isinstance(first, LoxFunction)
    assert first is not second
    assert first.declaration is second.declaration
    assert first.closure.get_at(0, 'this') is instance
    assert klass.find_method('m') is klass.methods['m']
    assert klass.arity() == 0
