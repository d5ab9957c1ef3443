"""Node transforms.

A NodeTransform visits nodes top-down and answers each one with either
Replace(text) or a Visit directive. Replaced nodes are not descended.
With `stop_at_scopes`, nodes that open a new `this` scope are skipped
entirely (the starting node itself is always visited).
"""

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List, Union

import tree_sitter

from ..ast_parser.utils import THIS_SCOPE_TYPES
from .program import Edit, Statement


class Visit(Enum):
    CONTINUE = "continue"  # descend into children
    SKIP = "skip"  # leave this subtree alone


@dataclass(frozen=True)
class Replace:
    text: str


VisitResult = Union[Replace, Visit]


class NodeTransform:
    """Base class for tree rewrites."""

    stop_at_scopes: bool = False

    def visit(self, node: tree_sitter.Node, source: bytes) -> VisitResult:
        return Visit.CONTINUE


def collect_edits(root: tree_sitter.Node, source: bytes, transform: NodeTransform) -> List[Edit]:
    """Walk `root` with `transform` and return the resulting edits."""
    edits: List[Edit] = []
    stack = [(root, True)]
    while stack:
        node, is_root = stack.pop()
        if transform.stop_at_scopes and not is_root and node.type in THIS_SCOPE_TYPES:
            continue
        result = transform.visit(node, source)
        if isinstance(result, Replace):
            edits.append((node.start_byte, node.end_byte, result.text))
            continue
        if result is Visit.SKIP:
            continue
        stack.extend((child, False) for child in reversed(node.children))
    return edits


def apply_transform(statements: Iterable[Statement], transform: NodeTransform) -> int:
    """Run `transform` over every statement. Returns the number of replacements."""
    count = 0
    for statement in statements:
        edits = collect_edits(statement.tree.root_node, statement.source, transform)
        count += statement.apply_edits(edits)
    return count
