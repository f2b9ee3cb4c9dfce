"""Base backend: generic, language-neutral rendering of ESTree nodes.

Every supported node tag has one `_emit_*` operation here. Language
backends subclass `TranspilerBase` and override the operations whose
surface syntax differs; the rest (expressions, mostly) are shared.
`recursive_parse` is the single dispatch point and returns the buffer's
text so far.
"""

from __future__ import annotations

import json

from .util import Buffer
from ..estree.ast import (
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
    Literal,
    LogicalExpression,
    MemberExpression,
    Node,
    NullLiteral,
    NumericLiteral,
    Program,
    RegExpLiteral,
    ReturnStatement,
    StringLiteral,
    UnaryExpression,
    UnsupportedNodeError,
    UpdateExpression,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
)

# Emitted for constructs that are dropped; removed by the correction table
DELETE_MARKER = "@DELETE@"

_WORD_OPERATORS = frozenset({"typeof", "void", "delete"})


class TranspilerBase:
    """Generic first-pass code generator driving an emission buffer."""

    def __init__(self) -> None:
        self.buffer = Buffer()

    def clear(self) -> None:
        self.buffer = Buffer()

    def parse(self, node: Node) -> str:
        """Translate a whole tree from a fresh buffer."""
        self.clear()
        return self.recursive_parse(node)

    def recursive_parse(self, node: Node) -> str:
        """Dispatch on the node's tag, then return the text emitted so far."""
        # Statements
        if isinstance(node, File):
            self._emit_file(node)
        elif isinstance(node, Program):
            self._emit_program(node)
        elif isinstance(node, ExpressionStatement):
            self._emit_expression_statement(node)
        elif isinstance(node, ImportDeclaration):
            self._emit_import_declaration(node)
        elif isinstance(node, FunctionDeclaration):
            self._emit_function_declaration(node)
        elif isinstance(node, BlockStatement):
            self._emit_block_statement(node)
        elif isinstance(node, VariableDeclaration):
            self._emit_variable_declaration(node)
        elif isinstance(node, VariableDeclarator):
            self._emit_variable_declarator(node)
        elif isinstance(node, ReturnStatement):
            self._emit_return_statement(node)
        elif isinstance(node, IfStatement):
            self._emit_if_statement(node)
        elif isinstance(node, WhileStatement):
            self._emit_while_statement(node)
        elif isinstance(node, DoWhileStatement):
            self._emit_do_while_statement(node)
        elif isinstance(node, ForStatement):
            self._emit_for_statement(node)
        elif isinstance(node, BreakStatement):
            self._emit_break_statement(node)
        # Expressions
        elif isinstance(node, AssignmentExpression):
            self._emit_assignment_expression(node)
        elif isinstance(node, CallExpression):
            self._emit_call_expression(node)
        elif isinstance(node, MemberExpression):
            self._emit_member_expression(node)
        elif isinstance(node, UnaryExpression):
            self._emit_unary_expression(node)
        elif isinstance(node, UpdateExpression):
            self._emit_update_expression(node)
        elif isinstance(node, BinaryExpression):
            self._emit_binary_expression(node)
        elif isinstance(node, LogicalExpression):
            self._emit_logical_expression(node)
        elif isinstance(node, ConditionalExpression):
            self._emit_conditional_expression(node)
        elif isinstance(node, ArrayExpression):
            self._emit_array_expression(node)
        # Leaves
        elif isinstance(node, Identifier):
            self.buffer.add(node.name)
        elif isinstance(node, Literal):
            self._emit_literal(node)
        elif isinstance(node, NumericLiteral):
            self._emit_numeric_literal(node)
        elif isinstance(node, StringLiteral):
            self._emit_string_literal(node)
        elif isinstance(node, BooleanLiteral):
            self.buffer.add("true" if node.value else "false")
        elif isinstance(node, NullLiteral):
            self.buffer.add(self._null())
        elif isinstance(node, RegExpLiteral):
            self._emit_regexp_literal(node)
        else:
            tag = node.type if isinstance(node, Node) else type(node).__name__
            pos = node.pos if isinstance(node, Node) else None
            if pos is None:
                raise UnsupportedNodeError(tag)
            raise UnsupportedNodeError(tag, pos.line, pos.col)
        return self.buffer.get()

    # --- Hooks for subclasses ---

    def _null(self) -> str:
        """Spelling of the null value."""
        return "null"

    def _quote(self, value: str) -> str:
        """Render a string value as a double-quoted literal."""
        return json.dumps(value, ensure_ascii=False)

    # --- Helpers ---

    def _emit_list(self, nodes: list[Node | None]) -> None:
        for i, node in enumerate(nodes):
            if i > 0:
                self.buffer.add(", ")
            if node is None:
                self.buffer.add(self._null())
            else:
                self.recursive_parse(node)

    # --- Statements ---

    def _emit_file(self, node: File) -> None:
        if node.program is not None:
            self.recursive_parse(node.program)

    def _emit_program(self, node: Program) -> None:
        for stmt in node.body:
            self.recursive_parse(stmt)

    def _emit_expression_statement(self, node: ExpressionStatement) -> None:
        self.recursive_parse(node.expression)

    def _emit_import_declaration(self, node: ImportDeclaration) -> None:
        self.buffer.add(DELETE_MARKER).newline()

    def _emit_function_declaration(self, node: FunctionDeclaration) -> None:
        self.recursive_parse(node.id)
        self.buffer.add("(")
        self._emit_list(node.params)
        self.buffer.add(")")
        self.recursive_parse(node.body)
        self.buffer.newline()

    def _emit_block_statement(self, node: BlockStatement) -> None:
        for stmt in node.body:
            self.recursive_parse(stmt)

    def _emit_variable_declaration(self, node: VariableDeclaration) -> None:
        for decl in node.declarations:
            self.recursive_parse(decl)

    def _emit_variable_declarator(self, node: VariableDeclarator) -> None:
        self.recursive_parse(node.id)
        if node.init is not None:
            self.buffer.add(" = ")
            self.recursive_parse(node.init)

    def _emit_return_statement(self, node: ReturnStatement) -> None:
        if node.argument is not None:
            self.recursive_parse(node.argument)

    def _emit_if_statement(self, node: IfStatement) -> None:
        self.buffer.add("if ")
        self.recursive_parse(node.test)
        self.recursive_parse(node.consequent)
        if node.alternate is not None:
            self.buffer.add("else ")
            self.recursive_parse(node.alternate)

    def _emit_while_statement(self, node: WhileStatement) -> None:
        self.buffer.add("while (")
        self.recursive_parse(node.test)
        self.buffer.add(")")
        self.recursive_parse(node.body)

    def _emit_do_while_statement(self, node: DoWhileStatement) -> None:
        self.buffer.add("do")
        self.recursive_parse(node.body)
        self.buffer.trim()
        self.buffer.add(" while (")
        self.recursive_parse(node.test)
        self.buffer.add(")").newline()

    def _emit_for_statement(self, node: ForStatement) -> None:
        self.buffer.add("for (")
        if node.init is not None:
            self.recursive_parse(node.init)
        self.buffer.trim()
        self.buffer.add("; ")
        if node.test is not None:
            self.recursive_parse(node.test)
        self.buffer.add("; ")
        if node.update is not None:
            self.recursive_parse(node.update)
        self.buffer.add(")")
        self.recursive_parse(node.body)

    def _emit_break_statement(self, node: BreakStatement) -> None:
        self.buffer.add("break").newline()

    # --- Expressions ---

    def _emit_assignment_expression(self, node: AssignmentExpression) -> None:
        self.recursive_parse(node.left)
        self.buffer.add(" " + node.operator + " ")
        self.recursive_parse(node.right)

    def _emit_call_expression(self, node: CallExpression) -> None:
        self.recursive_parse(node.callee)
        self.buffer.add("(")
        self._emit_list(node.arguments)
        self.buffer.add(")")

    def _emit_member_expression(self, node: MemberExpression) -> None:
        self.recursive_parse(node.object)
        if node.computed:
            self.buffer.add("[")
            self.recursive_parse(node.property)
            self.buffer.add("]")
        else:
            self.buffer.add(".")
            self.recursive_parse(node.property)

    def _emit_unary_expression(self, node: UnaryExpression) -> None:
        op = node.operator
        if op in _WORD_OPERATORS:
            op += " "
        nested = isinstance(node.argument, (UnaryExpression, UpdateExpression))
        if node.prefix:
            self.buffer.add(op)
        if nested:
            self.buffer.add("(")
        self.recursive_parse(node.argument)
        if nested:
            self.buffer.add(")")
        if not node.prefix:
            self.buffer.add(op)

    def _emit_update_expression(self, node: UpdateExpression) -> None:
        if node.prefix:
            self.buffer.add(node.operator)
        self.recursive_parse(node.argument)
        if not node.prefix:
            self.buffer.add(node.operator)

    def _emit_operand(self, node: Node, group: type[Node]) -> None:
        if isinstance(node, group):
            self.buffer.add("(")
            self.recursive_parse(node)
            self.buffer.add(")")
        else:
            self.recursive_parse(node)

    def _emit_binary_expression(self, node: BinaryExpression) -> None:
        self._emit_operand(node.left, BinaryExpression)
        self.buffer.add(" " + node.operator + " ")
        self._emit_operand(node.right, BinaryExpression)

    def _emit_logical_expression(self, node: LogicalExpression) -> None:
        self._emit_operand(node.left, LogicalExpression)
        self.buffer.add(" " + node.operator + " ")
        self._emit_operand(node.right, LogicalExpression)

    def _emit_conditional_expression(self, node: ConditionalExpression) -> None:
        self.buffer.add("(")
        self.recursive_parse(node.test)
        self.buffer.add(" ? ")
        self.recursive_parse(node.consequent)
        self.buffer.add(" : ")
        self.recursive_parse(node.alternate)
        self.buffer.add(")")

    def _emit_array_expression(self, node: ArrayExpression) -> None:
        self.buffer.add("[")
        self._emit_list(node.elements)
        self.buffer.add("]")

    # --- Literals ---

    def _emit_literal(self, node: Literal) -> None:
        if node.regex is not None:
            raw = node.raw
            if raw is None:
                raw = "/" + node.regex.get("pattern", "") + "/" + node.regex.get("flags", "")
            self.buffer.add(raw)
        elif node.value is None:
            self.buffer.add(self._null())
        elif isinstance(node.value, str):
            self.buffer.add(self._quote(node.value))
        else:
            self.buffer.add(json.dumps(node.value))

    def _emit_numeric_literal(self, node: NumericLiteral) -> None:
        if node.extra is not None and "raw" in node.extra:
            self.buffer.add(str(node.extra["raw"]))
        else:
            self.buffer.add(json.dumps(node.value))

    def _emit_string_literal(self, node: StringLiteral) -> None:
        if node.extra is not None and "raw" in node.extra:
            self.buffer.add(str(node.extra["raw"]))
        else:
            self.buffer.add(self._quote(node.value))

    def _emit_regexp_literal(self, node: RegExpLiteral) -> None:
        if node.extra is not None and "raw" in node.extra:
            self.buffer.add(str(node.extra["raw"]))
        else:
            self.buffer.add("/" + node.pattern + "/" + node.flags)
