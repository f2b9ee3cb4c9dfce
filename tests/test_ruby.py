"""Tests for the Ruby backend: first-pass emission and the correction passes."""

import copy

import pytest

from jsrb import translate
from jsrb.backend.ruby import RubyBackend, correct_ruby, emit_ruby
from jsrb.corrections import CorrectionTable, default_corrections
from jsrb.estree.ast import (
    ArrayExpression,
    Literal,
    VariableDeclaration,
    VariableDeclarator,
)
from jsrb.estree.builders import (
    assign,
    binary,
    block,
    call,
    do_while,
    expr,
    for_,
    func,
    ident,
    if_,
    let,
    member,
    num,
    program,
    ret,
    string,
    update,
    while_,
)

EMPTY = CorrectionTable({})


def generate(*body) -> str:
    return RubyBackend(EMPTY).generate(program(*body))


# --- Emission ---


def test_function_definition():
    assert generate(func("main", [], expr(call("run")))) == "def main()\n  run()\nend\n\n"


def test_function_parameters():
    out = generate(func("add", ["a", "b"], ret(binary("+", ident("a"), ident("b")))))
    assert out == "def add(a, b)\n  return a + b\nend\n\n"


def test_bare_return():
    assert generate(func("stop", [], ret())) == "def stop()\n  return\nend\n\n"


def test_consequent_expression_becomes_return():
    out = generate(if_(ident("a"), expr(call("f"))))
    assert out == "if a\n  return f()\nend\n"


def test_consequent_return_kept():
    out = generate(if_(ident("a"), ret(num(1))))
    assert out == "if a\n  return 1\nend\n"


def test_consequent_other_statement_wrapped():
    out = generate(if_(ident("a"), let("x", num(1))))
    assert out == "if a\n  x = 1\nend\n"


def test_block_consequent_not_rewritten():
    out = generate(if_(ident("a"), block(expr(call("f")))))
    assert out == "if a\n  f()\nend\n"


def test_alternate_statement_wrapped_without_return():
    out = generate(if_(ident("a"), expr(call("f")), expr(call("g"))))
    assert out == "if a\n  return f()\nelse\n  g()\nend\n"


def test_else_if_chains_on_one_end():
    out = generate(
        if_(
            ident("a"),
            block(expr(call("f"))),
            if_(ident("b"), block(expr(call("g"))), block(expr(call("h")))),
        )
    )
    assert out == "if a\n  f()\nelse if b\n  g()\nelse\n  h()\nend\n"


def test_nested_if_indentation():
    out = generate(
        func("f", ["x"], if_(ident("x"), block(if_(ident("y"), block(ret(num(1)))))))
    )
    assert out == (
        "def f(x)\n"
        "  if x\n"
        "    if y\n"
        "      return 1\n"
        "    end\n"
        "  end\n"
        "end\n\n"
    )


def test_while_single_statement_body():
    out = generate(while_(ident("running"), expr(call("tick"))))
    assert out == "while (running)\n  tick()\nend\n"


def test_for_becomes_while():
    loop = for_(
        assign(ident("i"), num(0)),
        binary("<", ident("i"), ident("n")),
        assign(ident("i"), num(2), "+="),
        expr(call("f")),
    )
    assert generate(loop) == "i = 0\nwhile (i < n)\n  f()\n  i += 2\nend\n"


def test_for_matches_equivalent_while():
    body = block(expr(call("f", ident("i"))))
    step = update("++", ident("i"))
    loop = for_(let("i", num(0)), binary("<", ident("i"), num(3)), step, body)
    desugared = [
        let("i", num(0)),
        while_(binary("<", ident("i"), num(3)), block(*body.body, expr(step))),
    ]
    assert generate(loop) == generate(*desugared)


def test_for_without_clauses():
    loop = for_(None, None, None, block(expr(call("f"))))
    assert generate(loop) == "while (true)\n  f()\nend\n"


def test_do_while():
    loop = do_while(block(expr(call("f"))), ident("again"))
    assert generate(loop) == "begin\n  f()\nend while again\n"


def test_declarations_one_per_line():
    decl = VariableDeclaration(
        kind="let",
        declarations=[
            VariableDeclarator(id=ident("a"), init=num(1)),
            VariableDeclarator(id=ident("b")),
        ],
    )
    assert generate(decl) == "a = 1\nb = nil\n"


def test_nil_and_holes():
    assert generate(expr(ArrayExpression(elements=[num(1), None]))) == "[1, nil]\n"
    assert generate(expr(Literal(value=None, raw="null"))) == "nil\n"


def test_double_quoted_strings_escape_interpolation():
    assert generate(expr(Literal(value="cost #{x}"))) == '"cost \\#{x}"\n'
    assert generate(expr(string("a#{b}"))) == '"a\\#{b}"\n'
    assert generate(expr(string("a#{b}", quote="'"))) == "'a#{b}'\n"
    assert generate(expr(Literal(value="#$x #@y #z"))) == '"\\#$x \\#@y #z"\n'


def test_caller_tree_not_modified():
    tree = program(
        if_(ident("a"), expr(call("f")), expr(call("g"))),
        for_(let("i", num(0)), None, update("++", ident("i")), expr(call("h"))),
        while_(ident("b"), expr(call("k"))),
    )
    before = copy.deepcopy(tree)
    translate(tree)
    assert tree == before


def test_generate_is_repeatable():
    backend = RubyBackend(EMPTY)
    tree = program(expr(call("f")))
    assert backend.generate(tree) == backend.generate(tree)


def test_emit_ruby_accepts_dicts():
    tree = {
        "type": "Program",
        "body": [
            {
                "type": "ExpressionStatement",
                "expression": {
                    "type": "UpdateExpression",
                    "operator": "++",
                    "prefix": False,
                    "argument": {"type": "Identifier", "name": "n"},
                },
            }
        ],
    }
    assert emit_ruby(tree) == "n += 1\n"


def test_injected_table():
    tree = program(expr(call("print", ident("x"))))
    assert translate(tree, {r"\bprint\(": "p("}) == "p(x)\n"
    assert translate(tree, EMPTY) == "print(x)\n"


# --- Corrections ---


def correct(code: str) -> str:
    return correct_ruby(code, EMPTY)


def test_floor():
    assert correct("x = Math.floor(a / b)\n") == "x = (a / b).floor\n"
    assert correct("y = Math.floor(f(x)) + 1\n") == "y = (f(x)).floor + 1\n"
    assert correct("x = Math.floor(f(g(y)))\n") == "x = (f(g(y))).floor\n"


def test_nested_floor():
    assert correct("x = Math.floor(Math.floor(y) / 2)\n") == "x = ((y).floor / 2).floor\n"


def test_floor_without_closing_paren_on_line():
    code = "x = Math.floor(a +\n  b)\n"
    assert correct(code) == code


@pytest.mark.parametrize(
    "code,expected",
    [
        ("i++\n", "i += 1\n"),
        ("i--\n", "i -= 1\n"),
        ("a.b++\n", "a.b += 1\n"),
        ("xs[i]--\n", "xs[i] -= 1\n"),
        ("  ++count\n", "  count += 1\n"),
        ("--count\n", "count -= 1\n"),
        ("xs[i + 1]++\n", "xs[i + 1] += 1\n"),
        ('s = "a--b"\n', 's = "a--b"\n'),
        ("s = 'c++' + n\n", "s = 'c++' + n\n"),
        ('m["k--"]++\n', 'm["k--"] += 1\n'),
    ],
)
def test_increments(code: str, expected: str):
    assert correct(code) == expected


def test_higher_order_parameter():
    code = "def run(fn, x)\n  return fn(x)\nend\n\nrun(show, 2)\n"
    assert correct(code) == (
        "def run(fn, x)\n  return fn.call(x)\nend\n\nrun(method(:show), 2)\n"
    )


def test_higher_order_second_parameter():
    code = "def each(xs, f)\n  f(xs)\nend\n\neach(items, log)\n"
    assert correct(code) == "def each(xs, f)\n  f.call(xs)\nend\n\neach(items, method(:log))\n"


def test_higher_order_skips_computed_arguments():
    code = "def run(fn)\n  return fn(1)\nend\n\nrun(make(2))\n"
    assert correct(code) == "def run(fn)\n  return fn.call(1)\nend\n\nrun(make(2))\n"


def test_method_call_on_parameter_is_not_higher_order():
    code = "def run(fn)\n  return obj.fn(1)\nend\n\nrun(show)\n"
    assert correct(code) == code


def test_higher_order_rewrites_every_call_site():
    code = "def run(fn)\n  fn(1)\n  fn(2)\nend\n\nrun(a)\nx = run(b)\n"
    assert correct(code) == (
        "def run(fn)\n  fn.call(1)\n  fn.call(2)\nend\n\nrun(method(:a))\nx = run(method(:b))\n"
    )


def test_higher_order_rewrites_calls_sharing_a_line():
    code = "def run(fn)\n  return fn(1)\nend\n\nx = run(a) + run(b)\n"
    assert correct(code) == (
        "def run(fn)\n  return fn.call(1)\nend\n\nx = run(method(:a)) + run(method(:b))\n"
    )


@pytest.mark.parametrize(
    "code,expected",
    [
        ("puts(x)\n", "puts((x).to_s)\n"),
        ('puts("a")\n', 'puts("a")\n'),
        ("puts('a')\n", "puts('a')\n"),
        ('puts("a" + b)\n', 'puts("a" + (b).to_s)\n'),
        ('puts(("a" + b) + "c")\n', 'puts("a" + (b).to_s + "c")\n'),
        ("puts(f(a + b))\n", "puts((f(a + b)).to_s)\n"),
        ('puts("x + y")\n', 'puts("x + y")\n'),
        ("puts(x.to_s)\n", "puts(x.to_s)\n"),
    ],
)
def test_puts_stringification(code: str, expected: str):
    assert correct(code) == expected


@pytest.mark.parametrize(
    "tree",
    [
        program(
            func("twice", ["x"], ret(binary("*", ident("x"), num(2)))),
            func("apply", ["cb"], ret(call(ident("cb"), num(1)))),
            expr(call("console.log", call("apply", ident("twice")))),
        ),
        program(
            for_(
                let("i", num(0)),
                binary("<", ident("i"), num(3)),
                update("++", ident("i")),
                expr(call("console.log", binary("+", string("i="), ident("i")))),
            )
        ),
        program(
            let("half", call("Math.floor", binary("/", ident("n"), num(2)))),
            if_(binary("===", ident("half"), ident("undefined")), expr(call("f"))),
        ),
        program(
            let(
                "x",
                call("Math.floor", binary("/", call("Math.floor", ident("y")), num(2))),
            )
        ),
    ],
    ids=["higher_order", "loop", "floor", "nested_floor"],
)
def test_corrections_idempotent(tree):
    table = default_corrections()
    once = translate(tree, table)
    assert correct_ruby(once, table) == once


def test_output_has_no_increment_operators():
    tree = program(
        let("i", num(0)),
        expr(update("++", ident("i"))),
        expr(update("--", ident("i"), prefix=True)),
        for_(let("j", num(0)), None, update("++", ident("j")), block()),
    )
    out = translate(tree)
    assert "++" not in out
    assert "--" not in out


def test_computed_member_increment():
    target = member(ident("xs"), binary("+", ident("i"), num(1)), computed=True)
    assert translate(program(expr(update("++", target)))) == "xs[i + 1] += 1\n"


def test_string_contents_keep_increment_text():
    tree = program(expr(call("console.log", string("a--b"))))
    assert translate(tree) == 'puts("a--b")\n'
