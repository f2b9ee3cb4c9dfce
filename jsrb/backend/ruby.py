"""Ruby backend: ESTree AST → Ruby source code.

Generation is two passes. `RubyBackend` walks the tree and writes Ruby-shaped
text through the emission buffer; `correct_ruby` then patches the remaining
JavaScript-isms textually (table substitutions, floor calls, function
parameters used as callables, increments, print stringification).
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping

from .base import TranspilerBase
from ..corrections import CorrectionTable, as_table
from ..estree import ASTNode, load
from ..estree.ast import (
    BlockStatement,
    BooleanLiteral,
    DoWhileStatement,
    ExpressionStatement,
    ForStatement,
    FunctionDeclaration,
    IfStatement,
    Node,
    ReturnStatement,
    StringLiteral,
    VariableDeclaration,
    VariableDeclarator,
    WhileStatement,
)

logger = logging.getLogger(__name__)

_INTERPOLATION = re.compile(r"#(?=[{$@])")


def _escape_interpolation(value: str) -> str:
    """Escape #{, #$ and #@ so Ruby double-quoted strings stay literal."""
    return _INTERPOLATION.sub(r"\\#", value)


def _as_block(stmt: Node, returning: bool) -> BlockStatement:
    """Wrap a single statement in a synthesized block.

    With returning, a bare expression statement becomes a return of its value.
    The given statement is left untouched.
    """
    if isinstance(stmt, BlockStatement):
        return stmt
    if returning and isinstance(stmt, ExpressionStatement):
        stmt = ReturnStatement(argument=stmt.expression, pos=stmt.pos)
    return BlockStatement(body=[stmt], pos=stmt.pos)


# ============================================================
# EMITTER
# ============================================================


class RubyBackend(TranspilerBase):
    """Emit Ruby code from an ESTree AST, then apply the correction pipeline."""

    def __init__(
        self, corrections: CorrectionTable | Mapping[str, str] | None = None
    ) -> None:
        super().__init__()
        self.corrections = as_table(corrections)

    def generate(self, node: Node) -> str:
        """Raw first-pass output, before corrections."""
        return super().parse(node)

    def parse(self, node: Node) -> str:
        return self.correct(self.generate(node))

    def correct(self, code: str) -> str:
        return correct_ruby(code, self.corrections)

    # --- Hooks ---

    def _null(self) -> str:
        return "nil"

    def _quote(self, value: str) -> str:
        return _escape_interpolation(super()._quote(value))

    # --- Statements ---

    def _emit_expression_statement(self, node: ExpressionStatement) -> None:
        super()._emit_expression_statement(node)
        self.buffer.newline()

    def _emit_function_declaration(self, node: FunctionDeclaration) -> None:
        self.buffer.add("def ")
        super()._emit_function_declaration(node)

    def _emit_block_statement(self, node: BlockStatement) -> None:
        self.buffer.indent()
        self.buffer.newline()
        super()._emit_block_statement(node)
        self.buffer.trim()
        self.buffer.dedent()
        self.buffer.newline()
        self.buffer.add("end")
        self.buffer.newline()

    def _emit_if_statement(self, node: IfStatement) -> None:
        self.buffer.add("if ")
        self.recursive_parse(node.test)
        self.recursive_parse(_as_block(node.consequent, returning=True))
        if node.alternate is not None:
            # Retract the consequent's `end` so the else branch chains on
            self.buffer.delete_lines(1)
            self.buffer.add("else ")
            alternate = node.alternate
            if not isinstance(alternate, IfStatement):
                alternate = _as_block(alternate, returning=False)
            self.recursive_parse(alternate)

    def _emit_while_statement(self, node: WhileStatement) -> None:
        if not isinstance(node.body, BlockStatement):
            node = WhileStatement(
                test=node.test, body=_as_block(node.body, returning=False), pos=node.pos
            )
        super()._emit_while_statement(node)

    def _emit_do_while_statement(self, node: DoWhileStatement) -> None:
        self.buffer.add("begin")
        self.recursive_parse(_as_block(node.body, returning=False))
        self.buffer.trim()
        self.buffer.add(" while ")
        self.recursive_parse(node.test)
        self.buffer.newline()

    def _emit_for_statement(self, node: ForStatement) -> None:
        # Ruby has no counting for: init, then while with the update appended
        init = node.init
        if init is not None:
            if not isinstance(init, VariableDeclaration):
                init = ExpressionStatement(expression=init, pos=init.pos)
            self.recursive_parse(init)
        if isinstance(node.body, BlockStatement):
            body = list(node.body.body)
        else:
            body = [node.body]
        if node.update is not None:
            body.append(ExpressionStatement(expression=node.update, pos=node.update.pos))
        test = node.test
        if test is None:
            test = BooleanLiteral(value=True)
        loop = WhileStatement(test=test, body=BlockStatement(body=body), pos=node.pos)
        self.recursive_parse(loop)

    def _emit_variable_declaration(self, node: VariableDeclaration) -> None:
        for decl in node.declarations:
            self.recursive_parse(decl)
            self.buffer.newline()

    def _emit_variable_declarator(self, node: VariableDeclarator) -> None:
        super()._emit_variable_declarator(node)
        if node.init is None:
            self.buffer.add(" = " + self._null())

    def _emit_return_statement(self, node: ReturnStatement) -> None:
        self.buffer.add("return ")
        super()._emit_return_statement(node)
        self.buffer.newline()

    # --- Literals ---

    def _emit_string_literal(self, node: StringLiteral) -> None:
        if node.extra is not None and "raw" in node.extra:
            raw = str(node.extra["raw"])
            if raw.startswith('"'):
                raw = _escape_interpolation(raw)
            self.buffer.add(raw)
        else:
            self.buffer.add(self._quote(node.value))


# ============================================================
# CORRECTION PIPELINE
# ============================================================

_FLOOR_CALL = "Math.floor("

# A def line with parameters plus the following run of non-blank lines
_DEF_CHUNK = re.compile(r"def (\w+)\((.+)\)\n(?:.+\n)+", re.MULTILINE | re.IGNORECASE)

_PARAM = re.compile(r"([^\s,]+\(.+?\))|([^\s,]+)")

_ARG = re.compile(r"\w+(?:\([^()]*\))?")

_IDENT = re.compile(r"[A-Za-z_]\w*")

_TARGET = r"\w+(?:\.\w+)*(?:\[[^\[\]\n]+\])?"

_STRING_LITERAL = r"\"(?:[^\"\\\n]|\\.)*\"|'(?:[^'\\\n]|\\.)*'"

# String literals are matched first so they pass through unchanged
_POSTFIX: list[tuple[re.Pattern[str], str]] = [
    (re.compile(_STRING_LITERAL + r"|(" + _TARGET + r")\+\+"), " += 1"),
    (re.compile(_STRING_LITERAL + r"|(" + _TARGET + r")--"), " -= 1"),
]

_PREFIX: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"^([ \t]*)\+\+(" + _TARGET + r")[ \t]*$", re.MULTILINE), r"\1\2 += 1"),
    (re.compile(r"^([ \t]*)--(" + _TARGET + r")[ \t]*$", re.MULTILINE), r"\1\2 -= 1"),
]

_PUTS = re.compile(r"puts\((.+)\)\n", re.MULTILINE | re.IGNORECASE)


def _closing_paren(code: str, start: int) -> int | None:
    """Index of the `)` closing a paren opened just before start, on the same line."""
    depth = 1
    quote = ""
    i = start
    while i < len(code):
        c = code[i]
        if c == "\n":
            return None
        if quote:
            if c == "\\":
                i += 1
            elif c == quote:
                quote = ""
        elif c in "'\"":
            quote = c
        elif c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0:
                return i
        i += 1
    return None


def _rewrite_floor(code: str) -> str:
    """Math.floor(x) → (x).floor.

    Calls are rewritten right to left, so a nested call is already in method
    form when the call enclosing it is rewritten.
    """
    count = 0
    end = len(code)
    while True:
        start = code.rfind(_FLOOR_CALL, 0, end)
        if start < 0:
            break
        first = start + len(_FLOOR_CALL)
        close = _closing_paren(code, first)
        if close is not None:
            code = code[:start] + "(" + code[first:close] + ").floor" + code[close + 1 :]
            count += 1
        end = start
    if count:
        logger.debug("rewrote %d floor calls", count)
    return code


def _mark_higher_order(code: str, registry: dict[str, int]) -> str:
    """Rewrite calls of function-typed parameters to .call and record their index."""

    def visit(m: re.Match[str]) -> str:
        name = m.group(1)
        header, _, body = m.group(0).partition("\n")
        pos = 0
        for param_match in _PARAM.finditer(m.group(2)):
            param = param_match.group(0)
            invoked = re.compile(r"(?<![\w.])" + re.escape(param) + r"\(")
            if invoked.search(body):
                body = invoked.sub(lambda _: param + ".call(", body)
                registry[name] = pos
                logger.debug("parameter %s of %s is called (position %d)", param, name, pos)
            pos += 1
        return header + "\n" + body

    return _DEF_CHUNK.sub(visit, code)


def _rewrite_call_sites(code: str, name: str, index: int) -> str:
    """Pass the argument at index of each call to name as a method reference."""
    site = re.compile(
        r"(?<!def )(?<![\w.:])"
        + re.escape(name)
        + r"\(("
        + _ARG.pattern
        + r"(?:,\s"
        + _ARG.pattern
        + r")*)\)"
    )

    def visit(m: re.Match[str]) -> str:
        args = m.group(1)
        out: list[str] = []
        last = 0
        for i, arg in enumerate(_ARG.finditer(args)):
            out.append(args[last : arg.start()])
            text = arg.group(0)
            if i == index and _IDENT.fullmatch(text):
                logger.debug("passing %s to %s as a method reference", text, name)
                text = "method(:" + text + ")"
            out.append(text)
            last = arg.end()
        out.append(args[last:])
        return name + "(" + "".join(out) + ")"

    return site.sub(visit, code)


def _rewrite_increments(code: str) -> str:
    """x++ → x += 1 (and the --/prefix statement forms)."""
    total = 0
    for pattern, suffix in _POSTFIX:

        def visit(m: re.Match[str]) -> str:
            nonlocal total
            if m.group(1) is None:
                return m.group(0)
            total += 1
            return m.group(1) + suffix

        code = pattern.sub(visit, code)
    for pattern, template in _PREFIX:
        code, count = pattern.subn(template, code)
        total += count
    if total:
        logger.debug("rewrote %d increment operators", total)
    return code


def _split_top_level(text: str) -> list[str]:
    """Split on ' + ' outside parentheses, brackets and string literals."""
    parts: list[str] = []
    depth = 0
    quote = ""
    start = 0
    i = 0
    while i < len(text):
        c = text[i]
        if quote:
            if c == "\\":
                i += 1
            elif c == quote:
                quote = ""
        elif c in "'\"":
            quote = c
        elif c in "([":
            depth += 1
        elif c in ")]":
            depth -= 1
        elif depth == 0 and text.startswith(" + ", i):
            parts.append(text[start:i])
            start = i + 3
            i += 2
        i += 1
    parts.append(text[start:])
    return parts


def _unwrap(text: str) -> str | None:
    """Interior of a fully parenthesized expression, else None."""
    if not text.startswith("(") or not text.endswith(")"):
        return None
    depth = 0
    quote = ""
    i = 0
    while i < len(text):
        c = text[i]
        if quote:
            if c == "\\":
                i += 1
            elif c == quote:
                quote = ""
        elif c in "'\"":
            quote = c
        elif c == "(":
            depth += 1
        elif c == ")":
            depth -= 1
            if depth == 0 and i != len(text) - 1:
                return None
        i += 1
    return text[1:-1]


def _is_quoted(part: str) -> bool:
    return part[:1] in ("'", '"')


def _concat_operands(text: str) -> list[str]:
    """Operands of a + chain.

    A leading parenthesized group is a left-nested concatenation and is
    flattened when it already contains a string literal operand.
    """
    parts = _split_top_level(text)
    inner = _unwrap(parts[0])
    if inner is not None:
        sub = _concat_operands(inner)
        if len(sub) > 1 and any(_is_quoted(p) for p in sub):
            return sub + parts[1:]
    return parts


def _stringify_puts(code: str) -> str:
    """Wrap non-string puts operands in .to_s so + concatenates."""

    def visit(m: re.Match[str]) -> str:
        args: list[str] = []
        for part in _concat_operands(m.group(1)):
            if _is_quoted(part) or part.endswith(".to_s"):
                args.append(part)
            else:
                args.append("(" + part + ").to_s")
        return "puts(" + " + ".join(args) + ")\n"

    code, count = _PUTS.subn(visit, code)
    if count:
        logger.debug("stringified %d puts calls", count)
    return code


def correct_ruby(code: str, corrections: CorrectionTable) -> str:
    """Apply the correction passes in order. Later passes rely on earlier ones."""
    code = corrections.apply(code)
    code = _rewrite_floor(code)
    higher_order: dict[str, int] = {}
    code = _mark_higher_order(code, higher_order)
    for name, index in higher_order.items():
        code = _rewrite_call_sites(code, name, index)
    code = _rewrite_increments(code)
    code = _stringify_puts(code)
    return code


# ============================================================
# PUBLIC API
# ============================================================


def emit_ruby(
    root: Node | ASTNode,
    corrections: CorrectionTable | Mapping[str, str] | None = None,
) -> str:
    backend = RubyBackend(corrections)
    return backend.parse(load(root))
