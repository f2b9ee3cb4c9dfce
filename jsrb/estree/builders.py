"""Short constructors for building ESTree nodes in Python code."""

from __future__ import annotations

from .ast import (
    ArrayExpression,
    AssignmentExpression,
    BinaryExpression,
    BlockStatement,
    BooleanLiteral,
    BreakStatement,
    CallExpression,
    ConditionalExpression,
    DoWhileStatement,
    ExpressionStatement,
    File,
    ForStatement,
    FunctionDeclaration,
    Identifier,
    IfStatement,
    ImportDeclaration,
    LogicalExpression,
    MemberExpression,
    Node,
    NullLiteral,
    NumericLiteral,
    Program,
    ReturnStatement,
    StringLiteral,
    UnaryExpression,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
)


def program(*body: Node) -> Program:
    return Program(body=list(body))


def file(*body: Node) -> File:
    return File(program=program(*body))


def ident(name: str) -> Identifier:
    return Identifier(name=name)


def num(value: int | float) -> NumericLiteral:
    return NumericLiteral(value=value, extra={"raw": str(value), "rawValue": value})


def string(value: str, quote: str = '"') -> StringLiteral:
    """String literal whose raw form uses the given quote character."""
    raw = quote + value.replace("\\", "\\\\").replace(quote, "\\" + quote) + quote
    return StringLiteral(value=value, extra={"raw": raw, "rawValue": value})


def boolean(value: bool) -> BooleanLiteral:
    return BooleanLiteral(value=value)


def null() -> NullLiteral:
    return NullLiteral()


def array(*elements: Node | None) -> ArrayExpression:
    return ArrayExpression(elements=list(elements))


def binary(op: str, left: Node, right: Node) -> BinaryExpression:
    return BinaryExpression(operator=op, left=left, right=right)


def logical(op: str, left: Node, right: Node) -> LogicalExpression:
    return LogicalExpression(operator=op, left=left, right=right)


def unary(op: str, argument: Node) -> UnaryExpression:
    return UnaryExpression(operator=op, argument=argument, prefix=True)


def update(op: str, argument: Node, prefix: bool = False) -> UpdateExpression:
    return UpdateExpression(operator=op, argument=argument, prefix=prefix)


def assign(left: Node, right: Node, op: str = "=") -> AssignmentExpression:
    return AssignmentExpression(operator=op, left=left, right=right)


def ternary(test: Node, consequent: Node, alternate: Node) -> ConditionalExpression:
    return ConditionalExpression(test=test, consequent=consequent, alternate=alternate)


def member(obj: Node, prop: Node, computed: bool = False) -> MemberExpression:
    return MemberExpression(object=obj, property=prop, computed=computed)


def call(callee: Node | str, *args: Node) -> CallExpression:
    """Call expression. A dotted string callee ("console.log") becomes a member chain."""
    if isinstance(callee, str):
        parts = callee.split(".")
        target: Node = ident(parts[0])
        for part in parts[1:]:
            target = member(target, ident(part))
        callee = target
    return CallExpression(callee=callee, arguments=list(args))


def expr(expression: Node) -> ExpressionStatement:
    return ExpressionStatement(expression=expression)


def let(name: str, init: Node | None = None, kind: str = "let") -> VariableDeclaration:
    return VariableDeclaration(
        kind=kind, declarations=[VariableDeclarator(id=ident(name), init=init)]
    )


def ret(argument: Node | None = None) -> ReturnStatement:
    return ReturnStatement(argument=argument)


def block(*body: Node) -> BlockStatement:
    return BlockStatement(body=list(body))


def func(name: str, params: list[str], *body: Node) -> FunctionDeclaration:
    return FunctionDeclaration(
        id=ident(name), params=[ident(p) for p in params], body=block(*body)
    )


def if_(test: Node, consequent: Node, alternate: Node | None = None) -> IfStatement:
    return IfStatement(test=test, consequent=consequent, alternate=alternate)


def while_(test: Node, body: Node) -> WhileStatement:
    return WhileStatement(test=test, body=body)


def do_while(body: Node, test: Node) -> DoWhileStatement:
    return DoWhileStatement(body=body, test=test)


def for_(
    init: Node | None, test: Node | None, step: Node | None, body: Node
) -> ForStatement:
    return ForStatement(init=init, test=test, update=step, body=body)


def break_() -> BreakStatement:
    return BreakStatement()


def import_(source: str) -> ImportDeclaration:
    return ImportDeclaration(source=string(source))
