"""jsrb: translate JavaScript (ESTree ASTs) into Ruby source. Public API."""

from __future__ import annotations

from collections.abc import Mapping

from .backend.base import TranspilerBase
from .backend.ruby import RubyBackend, correct_ruby, emit_ruby
from .backend.util import Buffer, BufferContractError
from .corrections import (
    ConfigurationError,
    CorrectionTable,
    default_corrections,
    load_corrections,
)
from .estree import ASTNode, Node, UnsupportedNodeError, from_dict


def translate(
    root: Node | ASTNode,
    corrections: CorrectionTable | Mapping[str, str] | None = None,
) -> str:
    """Translate an ESTree tree (Node or JSON dict) into Ruby source."""
    return emit_ruby(root, corrections)


__all__ = [
    "ASTNode",
    "Buffer",
    "BufferContractError",
    "ConfigurationError",
    "CorrectionTable",
    "Node",
    "RubyBackend",
    "TranspilerBase",
    "UnsupportedNodeError",
    "correct_ruby",
    "default_corrections",
    "emit_ruby",
    "from_dict",
    "load_corrections",
    "translate",
]
