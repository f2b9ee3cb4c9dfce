"""ESTree front-end interface. Public API."""

from __future__ import annotations

from .ast import ASTNode, Node, UnsupportedNodeError, from_dict


def load(root: Node | ASTNode) -> Node:
    """Accept either a Node tree or an ESTree JSON dict and return a Node tree."""
    if isinstance(root, Node):
        return root
    if isinstance(root, dict):
        return from_dict(root)
    raise TypeError("expected an ESTree node or dict, got " + type(root).__name__)


__all__ = ["ASTNode", "Node", "UnsupportedNodeError", "from_dict", "load"]
