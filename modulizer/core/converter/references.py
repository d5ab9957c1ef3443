"""Reference rewriting passes.

- NamespacedReferenceTransform: `Polymer.Element` -> `$Element` for paths
  exported by already-converted modules, recording each import.
- ThisReferenceTransform: `this` -> namespace name inside one function body.
- LocalReferenceTransform: `Ns.member` -> `member` once members are exports.
- ExcludedReferenceTransform: excluded dotted paths -> `undefined`.
"""

import logging
from typing import AbstractSet, Optional

import tree_sitter

from ..ast_parser.utils import member_path, node_text
from .models import JsExport, ModuleRecord
from .registry import ReferenceIndex
from .transform import NodeTransform, Replace, Visit, VisitResult
from .urls import import_alias, module_id

logger = logging.getLogger(__name__)

# Parents whose "name" field declares rather than references an identifier
_DECLARING_PARENTS = frozenset({
    "variable_declarator",
    "function_declaration",
    "generator_function_declaration",
    "function_expression",
    "function",
    "generator_function",
    "class_declaration",
    "class",
})


# Parents any of whose identifier children is a binding
_BINDING_PARENTS = frozenset({
    "formal_parameters",
    "import_specifier",
    "namespace_import",
    "import_clause",
    "array_pattern",
    "rest_pattern",
})

# (parent, field) pairs naming a parameter or destructuring target
_BINDING_FIELDS = {
    "arrow_function": "parameter",
    "catch_clause": "parameter",
    "assignment_pattern": "left",
    "object_assignment_pattern": "left",
    "pair_pattern": "value",
}


def _is_field(parent: tree_sitter.Node, field: str, node: tree_sitter.Node) -> bool:
    child = parent.child_by_field_name(field)
    return child is not None and child.start_byte == node.start_byte and child.end_byte == node.end_byte


def _is_binding(node: tree_sitter.Node) -> bool:
    parent = node.parent
    if parent is None:
        return False
    if parent.type in _BINDING_PARENTS:
        return True
    if parent.type in _DECLARING_PARENTS:
        return _is_field(parent, "name", node)
    field = _BINDING_FIELDS.get(parent.type)
    return field is not None and _is_field(parent, field, node)


class NamespacedReferenceTransform(NodeTransform):
    """Rewrite references to exported namespace paths as import aliases.

    Member chains are matched longest-first: a matched chain is replaced
    whole and not descended. A bare identifier is only rewritten when it
    is a known namespace root and not itself the object of a chain.
    """

    def __init__(self, index: ReferenceIndex, record: ModuleRecord):
        self._index = index
        self._record = record

    def visit(self, node: tree_sitter.Node, source: bytes) -> VisitResult:
        if node.type == "member_expression":
            path = member_path(node, source)
            if path is None:
                return Visit.CONTINUE
            export = self._lookup(".".join(path))
            if export is None:
                return Visit.CONTINUE
            return Replace(self._reference(export))

        if node.type == "identifier":
            name = node_text(node, source)
            if name not in self._index.namespaces:
                return Visit.SKIP
            parent = node.parent
            if parent is not None and member_path(parent, source) is not None:
                return Visit.SKIP
            if _is_binding(node):
                return Visit.SKIP
            export = self._lookup(name)
            if export is None:
                return Visit.SKIP
            return Replace(self._reference(export))

        if node.type == "shorthand_property_identifier":
            # `{Foo}` keeps its key: `{Foo: $$foo}`
            name = node_text(node, source)
            export = self._lookup(name) if name in self._index.namespaces else None
            if export is None:
                return Visit.SKIP
            return Replace(f"{name}: {self._reference(export)}")

        return Visit.CONTINUE

    def _lookup(self, namespace_name: str) -> Optional[JsExport]:
        export = self._index.lookup(namespace_name)
        if export is None or export.url == self._record.url:
            return None
        return export

    def _reference(self, export: JsExport) -> str:
        self._index.record_reference(self._record, export)
        if export.name == "*":
            return module_id(export.url)
        return import_alias(export.name)


class ThisReferenceTransform(NodeTransform):
    """Replace `this` with an explicit namespace reference.

    Applied to one function body; nested functions, methods and class
    bodies keep their own `this`. Arrow functions are descended.
    """

    stop_at_scopes = True

    def __init__(self, namespace_name: str):
        self._namespace_name = namespace_name

    def visit(self, node: tree_sitter.Node, source: bytes) -> VisitResult:
        if node.type == "this":
            return Replace(self._namespace_name)
        return Visit.CONTINUE


class LocalReferenceTransform(NodeTransform):
    """Collapse `Ns.member` to `member` for one namespace name."""

    def __init__(self, namespace_name: str):
        self._namespace_name = namespace_name

    def visit(self, node: tree_sitter.Node, source: bytes) -> VisitResult:
        if node.type != "member_expression":
            return Visit.CONTINUE
        path = member_path(node, source)
        if path is not None and ".".join(path[:-1]) == self._namespace_name:
            return Replace(node_text(node.child_by_field_name("property"), source))
        return Visit.CONTINUE


class ExcludedReferenceTransform(NodeTransform):
    """Replace references to excluded dotted paths with `undefined`."""

    def __init__(self, excluded: AbstractSet[str]):
        self._excluded = excluded

    def visit(self, node: tree_sitter.Node, source: bytes) -> VisitResult:
        if node.type != "member_expression":
            return Visit.CONTINUE
        path = member_path(node, source)
        if path is not None and ".".join(path) in self._excluded:
            return Replace("undefined")
        return Visit.CONTINUE
