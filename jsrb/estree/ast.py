"""ESTree AST: node definitions for the supported JavaScript subset."""

from __future__ import annotations

from dataclasses import dataclass, field, fields

# Type alias for ESTree JSON nodes as produced by the parser front-end
ASTNode = dict[str, object]


class UnsupportedNodeError(Exception):
    """A node tag with no registered translation."""

    def __init__(self, tag: str, lineno: int = 0, col: int = 0):
        self.tag: str = tag
        self.lineno: int = lineno
        self.col: int = col
        super().__init__("unsupported construct: " + tag)

    def __str__(self) -> str:
        return (
            "error:"
            + str(self.lineno)
            + ":"
            + str(self.col)
            + ": unsupported construct: "
            + self.tag
        )


# ============================================================
# POSITION
# ============================================================


@dataclass
class Pos:
    """Source position: 1-indexed line, 0-indexed column (ESTree convention)."""

    line: int
    col: int


# ============================================================
# BASE
# ============================================================


@dataclass
class Node:
    """Base for all nodes. The tag is the class name."""

    pos: Pos | None = field(default=None, kw_only=True, repr=False, compare=False)

    @property
    def type(self) -> str:
        return type(self).__name__


# ============================================================
# PROGRAM
# ============================================================


@dataclass
class Program(Node):
    body: list[Node] = field(default_factory=list)


@dataclass
class File(Node):
    """Babel wrapper around Program."""

    program: Program | None = None


# ============================================================
# STATEMENTS
# ============================================================


@dataclass
class ExpressionStatement(Node):
    expression: Node | None = None


@dataclass
class ImportDeclaration(Node):
    """import ... from "source"; not translated."""

    source: Node | None = None


@dataclass
class BlockStatement(Node):
    body: list[Node] = field(default_factory=list)


@dataclass
class FunctionDeclaration(Node):
    id: Node | None = None
    params: list[Node] = field(default_factory=list)
    body: BlockStatement | None = None


@dataclass
class VariableDeclarator(Node):
    id: Node | None = None
    init: Node | None = None


@dataclass
class VariableDeclaration(Node):
    """let/const/var. The kind is dropped in translation."""

    kind: str = "let"
    declarations: list[VariableDeclarator] = field(default_factory=list)


@dataclass
class ReturnStatement(Node):
    argument: Node | None = None


@dataclass
class IfStatement(Node):
    test: Node | None = None
    consequent: Node | None = None
    alternate: Node | None = None


@dataclass
class WhileStatement(Node):
    test: Node | None = None
    body: Node | None = None


@dataclass
class DoWhileStatement(Node):
    body: Node | None = None
    test: Node | None = None


@dataclass
class ForStatement(Node):
    """for (init; test; update) body. Any part but body may be None."""

    init: Node | None = None
    test: Node | None = None
    update: Node | None = None
    body: Node | None = None


@dataclass
class BreakStatement(Node):
    pass


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass
class AssignmentExpression(Node):
    operator: str = "="
    left: Node | None = None
    right: Node | None = None


@dataclass
class CallExpression(Node):
    callee: Node | None = None
    arguments: list[Node] = field(default_factory=list)


@dataclass
class MemberExpression(Node):
    """object.property, or object[property] when computed."""

    object: Node | None = None
    property: Node | None = None
    computed: bool = False


@dataclass
class UnaryExpression(Node):
    operator: str = ""
    argument: Node | None = None
    prefix: bool = True


@dataclass
class UpdateExpression(Node):
    """++x, x++, --x, x--."""

    operator: str = "++"
    argument: Node | None = None
    prefix: bool = False


@dataclass
class BinaryExpression(Node):
    operator: str = ""
    left: Node | None = None
    right: Node | None = None


@dataclass
class LogicalExpression(Node):
    operator: str = ""
    left: Node | None = None
    right: Node | None = None


@dataclass
class ConditionalExpression(Node):
    test: Node | None = None
    consequent: Node | None = None
    alternate: Node | None = None


@dataclass
class ArrayExpression(Node):
    """Elements may contain None for holes ([1, , 2])."""

    elements: list[Node | None] = field(default_factory=list)


# ============================================================
# LEAVES
# ============================================================


@dataclass
class Identifier(Node):
    name: str = ""


@dataclass
class Literal(Node):
    """ESTree literal. regex is {"pattern": ..., "flags": ...} for regex literals."""

    value: object = None
    raw: str | None = None
    regex: dict[str, str] | None = None


@dataclass
class NumericLiteral(Node):
    value: float | int = 0
    extra: dict[str, object] | None = None


@dataclass
class StringLiteral(Node):
    value: str = ""
    extra: dict[str, object] | None = None


@dataclass
class BooleanLiteral(Node):
    value: bool = False


@dataclass
class NullLiteral(Node):
    pass


@dataclass
class RegExpLiteral(Node):
    pattern: str = ""
    flags: str = ""
    extra: dict[str, object] | None = None


# ============================================================
# CONVERSION FROM ESTREE JSON
# ============================================================

NODE_TYPES: dict[str, type[Node]] = {
    cls.__name__: cls
    for cls in (
        Program,
        File,
        ExpressionStatement,
        ImportDeclaration,
        BlockStatement,
        FunctionDeclaration,
        VariableDeclarator,
        VariableDeclaration,
        ReturnStatement,
        IfStatement,
        WhileStatement,
        DoWhileStatement,
        ForStatement,
        BreakStatement,
        AssignmentExpression,
        CallExpression,
        MemberExpression,
        UnaryExpression,
        UpdateExpression,
        BinaryExpression,
        LogicalExpression,
        ConditionalExpression,
        ArrayExpression,
        Identifier,
        Literal,
        NumericLiteral,
        StringLiteral,
        BooleanLiteral,
        NullLiteral,
        RegExpLiteral,
    )
}


def _pos_of(d: ASTNode) -> Pos | None:
    loc = d.get("loc")
    if isinstance(loc, dict):
        start = loc.get("start")
        if isinstance(start, dict):
            return Pos(int(start.get("line", 0)), int(start.get("column", 0)))
    return None


def _convert(value: object) -> object:
    if isinstance(value, dict) and "type" in value:
        return from_dict(value)
    if isinstance(value, list):
        return [_convert(v) for v in value]
    return value


def from_dict(d: ASTNode) -> Node:
    """Convert an ESTree JSON dict into a Node tree. The dict is not modified."""
    tag = str(d.get("type", ""))
    pos = _pos_of(d)
    cls = NODE_TYPES.get(tag)
    if cls is None:
        if pos is None:
            raise UnsupportedNodeError(tag)
        raise UnsupportedNodeError(tag, pos.line, pos.col)
    kwargs: dict[str, object] = {}
    for f in fields(cls):
        if f.name == "pos" or f.name not in d:
            continue
        kwargs[f.name] = _convert(d[f.name])
    node = cls(**kwargs)
    node.pos = pos
    return node
