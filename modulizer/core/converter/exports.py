"""Namespace export rewriting.

Walks the top-level statements from the shared cursor and turns
namespace-shaped assignments into module exports:

    /** @namespace */            export const bar = 1;
    const Foo = {           =>   export function baz() { ... }
      bar: 1,
      baz: function() {...}
    };
    window.Foo = Foo;

Every exported name is registered in the reference index under its
dotted namespace path so later documents can import it.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import AbstractSet, List, Optional, Tuple

import tree_sitter

from ..ast_parser.models import ScriptDocument
from ..ast_parser.utils import (
    FUNCTION_EXPRESSION_TYPES,
    LITERAL_TYPES,
    first_statement,
    has_token,
    line_indent,
    member_path,
    node_text,
)
from ..settings import ConversionSettings
from .errors import NamespaceResolutionError
from .models import ModuleRecord, RewriteCursor
from .program import Program, Statement, dedented_text
from .registry import ReferenceIndex

logger = logging.getLogger(__name__)


class MemberKind(Enum):
    """How a namespace member's value is lowered."""

    VALUE = "value"  # object, array, literal, undefined -> const/let
    FUNCTION = "function"  # function expression, method -> function declaration
    ARROW = "arrow"  # arrow function -> const
    IDENTIFIER = "identifier"  # bare identifier -> export specifier
    UNSUPPORTED = "unsupported"


@dataclass
class NamespaceMember:
    """One lowered namespace member."""

    name: str
    kind: MemberKind
    text: str  # full export statement, leading comments included


def classify_value(node: tree_sitter.Node) -> MemberKind:
    # `undefined` has its own node type but is lowered like a literal
    if node.type in ("object", "array", "undefined") or node.type in LITERAL_TYPES:
        return MemberKind.VALUE
    if node.type in FUNCTION_EXPRESSION_TYPES:
        return MemberKind.FUNCTION
    if node.type == "arrow_function":
        return MemberKind.ARROW
    if node.type == "identifier":
        return MemberKind.IDENTIFIER
    return MemberKind.UNSUPPORTED


def export_target(
    statement: Statement, roots: AbstractSet[str]
) -> Optional[Tuple[List[str], tree_sitter.Node]]:
    """If `statement` assigns to a dotted path rooted in `roots`, return (path, value)."""
    node = statement.node
    if node is None or node.type != "expression_statement":
        return None
    assignment = first_statement(node)
    if assignment is None or assignment.type != "assignment_expression":
        return None
    left = assignment.child_by_field_name("left")
    right = assignment.child_by_field_name("right")
    if left is None or right is None or left.type != "member_expression":
        return None
    path = member_path(left, statement.source)
    if path is not None and path[0] in roots:
        return path, right
    return None


def _function_declaration(name: str, node: tree_sitter.Node, source: bytes, indent: int) -> str:
    """`export function name(params) {body}` from a function expression or method."""
    is_async = has_token(node, "async")
    is_generator = node.type == "generator_function" or has_token(node, "*")
    params = node.child_by_field_name("parameters")
    body = node.child_by_field_name("body")
    params_text = node_text(params, source) if params is not None else "()"
    body_text = dedented_text(source, node, body.start_byte, body.end_byte, indent)
    return (
        f"export {'async ' if is_async else ''}function{'*' if is_generator else ''} "
        f"{name}{params_text} {body_text}"
    )


def lower_namespace_members(
    namespace_name: str,
    body: tree_sitter.Node,
    source: bytes,
    settings: ConversionSettings,
    url: str = "",
) -> Tuple[List[NamespaceMember], List[str]]:
    """Lower an object literal's properties to export statements.

    Returns:
        (members, warnings). Unsupported properties are skipped and
        described in `warnings`
    """
    members: List[NamespaceMember] = []
    warnings: List[str] = []
    comments: List[str] = []

    for prop in body.named_children:
        if prop.type == "comment":
            indent = line_indent(source, prop.start_byte)
            comments.append(dedented_text(source, prop, prop.start_byte, prop.end_byte, indent))
            continue

        leading = "".join(c + "\n" for c in comments)
        comments = []
        indent = line_indent(source, prop.start_byte)
        member = None

        if prop.type == "pair":
            key = prop.child_by_field_name("key")
            value = prop.child_by_field_name("value")
            if key is None or value is None or key.type != "property_identifier":
                warnings.append(f"unsupported namespace property key {node_text(key, source) if key is not None else '?'}")
                continue
            name = node_text(key, source)
            kind = classify_value(value)
            value_text = dedented_text(source, value, value.start_byte, value.end_byte, indent)

            if kind is MemberKind.VALUE:
                keyword = "let" if settings.is_mutable(namespace_name, name) else "const"
                member = NamespaceMember(name, kind, f"export {keyword} {name} = {value_text};")
            elif kind is MemberKind.FUNCTION:
                member = NamespaceMember(name, kind, _function_declaration(name, value, source, indent))
            elif kind is MemberKind.ARROW:
                member = NamespaceMember(name, kind, f"export const {name} = {value_text};")
            elif kind is MemberKind.IDENTIFIER:
                specifier = name if value_text == name else f"{value_text} as {name}"
                member = NamespaceMember(name, kind, f"export {{ {specifier} }};")
            else:
                warnings.append(f"namespace property not handled: {name} ({value.type})")

        elif prop.type == "shorthand_property_identifier":
            name = node_text(prop, source)
            member = NamespaceMember(name, MemberKind.IDENTIFIER, f"export {{ {name} }};")

        elif prop.type == "method_definition":
            key = prop.child_by_field_name("name")
            if key is None or key.type != "property_identifier" or has_token(prop, "get") or has_token(prop, "set"):
                warnings.append(f"unsupported namespace method {node_text(prop, source).split('(')[0].strip()}")
                continue
            name = node_text(key, source)
            member = NamespaceMember(name, MemberKind.FUNCTION, _function_declaration(name, prop, source, indent))

        else:
            warnings.append(f"unsupported namespace property type {prop.type}")

        if member is not None:
            member.text = leading + member.text
            members.append(member)

    for warning in warnings:
        logger.warning(f"{url}: {namespace_name}: {warning}")
    return members, warnings


class NamespaceExportRewriter:
    """The statement-level export state machine for one document."""

    def __init__(
        self,
        program: Program,
        cursor: RewriteCursor,
        record: ModuleRecord,
        script: Optional[ScriptDocument],
        index: ReferenceIndex,
        settings: ConversionSettings,
    ):
        self._program = program
        self._cursor = cursor
        self._record = record
        self._script = script
        self._index = index
        self._settings = settings

    def rewrite(self) -> Tuple[Optional[str], Optional[str]]:
        """Rewrite namespace statements from the cursor to the end.

        Returns:
            (local_namespace_name, namespace_name): the namespace declared
            in this script, and the last namespace path exported
        """
        local_namespace_name: Optional[str] = None
        namespace_name: Optional[str] = None

        while self._cursor.index < len(self._program):
            statement = self._program[self._cursor.index]
            exported = export_target(statement, self._index.namespaces)

            if exported is not None:
                path, value = exported
                namespace_name = ".".join(path)

                if self._is_namespace(statement) and value.type == "object":
                    self._rewrite_namespace_object(namespace_name, value, statement)
                    local_namespace_name = namespace_name
                elif value.type == "identifier":
                    self._rewrite_identifier_export(path, value, statement)
                elif self._declaration_name(value, statement.source) is not None:
                    self._rewrite_declaration_export(namespace_name, value, statement)
                else:
                    namespace_name = self._rewrite_expression_export(path, value, statement)

            elif self._is_namespace(statement):
                declared = self._declared_name(statement)
                if declared is not None:
                    local_namespace_name = declared

            elif local_namespace_name:
                local_parts = local_namespace_name.split(".")
                assignment = export_target(statement, {local_parts[0]})
                if assignment is not None:
                    path, value = assignment
                    if path[:-1] == local_parts:
                        namespace_name = ".".join(path)
                        self._export_const(path[-1], namespace_name, value, statement)

            self._cursor.advance()

        return local_namespace_name, namespace_name

    # =========================================================================
    # Branches
    # =========================================================================

    def _rewrite_namespace_object(
        self, namespace_name: str, body: tree_sitter.Node, statement: Statement
    ) -> None:
        """Replace the statement declaring a namespace object with its members' exports."""
        members, warnings = lower_namespace_members(
            namespace_name, body, statement.source, self._settings, self._record.url
        )
        for warning in warnings:
            self._index.report(self._record.url, f"{namespace_name}: {warning}")

        replacements = [Statement(member.text) for member in members]
        if replacements:
            replacements[0].blank_before = statement.blank_before

        ns_index = self._program.index_of(statement)
        self._program.replace(ns_index, 1, replacements)
        if ns_index <= self._cursor.index:
            self._cursor.index += len(replacements) - 1

        for member in members:
            self._index.add_export(self._record, f"{namespace_name}.{member.name}", member.name)
        self._index.add_export(self._record, namespace_name, "*")

    def _rewrite_identifier_export(
        self, path: List[str], value: tree_sitter.Node, statement: Statement
    ) -> None:
        """`Ns.X = X;`: lower X's namespace object, or re-export X."""
        namespace_name = ".".join(path)
        local_name = node_text(value, statement.source)
        feature = self._script.find_namespace(namespace_name, local_name) if self._script else None

        if feature is not None:
            ns_statement = self._program.find_by_span(feature.span)
            if ns_statement is None or ns_statement.node is None:
                raise NamespaceResolutionError(self._record.url, namespace_name)
            body = self._namespace_object(ns_statement)
            if body is not None:
                self._rewrite_namespace_object(namespace_name, body, ns_statement)
                removed = self._program.remove(statement)
                if removed <= self._cursor.index:
                    self._cursor.index -= 1
                return
            message = f"namespace {feature.name} is not declared with an object literal"
            logger.warning(f"{self._record.url}: {message}")
            self._index.report(self._record.url, message)

        exported_name = path[-1]
        specifier = local_name if local_name == exported_name else f"{local_name} as {exported_name}"
        statement.rewrite(f"export {{ {specifier} }};")
        self._index.add_export(self._record, namespace_name, exported_name)

    def _rewrite_declaration_export(
        self, namespace_name: str, value: tree_sitter.Node, statement: Statement
    ) -> None:
        """`Ns.X = class X {...};` -> `export class X {...}`."""
        name = self._declaration_name(value, statement.source)
        statement.rewrite("export " + node_text(value, statement.source))
        self._index.add_export(self._record, namespace_name, name)

    def _rewrite_expression_export(
        self, path: List[str], value: tree_sitter.Node, statement: Statement
    ) -> str:
        """`Ns.x = expr;` -> `export const x = expr;`.

        The constructor bridge (`Ns._polymerFn = fn`) is exported as if it
        were the namespace itself: `export const Ns = fn;` under path "Ns".
        """
        namespace_name = ".".join(path)
        name = path[-1]
        if len(path) >= 2 and path[-1] == self._settings.constructor_bridge_member:
            namespace_name = ".".join(path[:-1])
            name = path[-2]
        self._export_const(name, namespace_name, value, statement)
        return namespace_name

    def _export_const(
        self, name: str, namespace_name: str, value: tree_sitter.Node, statement: Statement
    ) -> None:
        statement.rewrite(f"export const {name} = {node_text(value, statement.source)};")
        self._index.add_export(self._record, namespace_name, name)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _is_namespace(self, statement: Statement) -> bool:
        return self._script is not None and self._script.is_namespace_span(statement.span)

    @staticmethod
    def _declared_name(statement: Statement) -> Optional[str]:
        """Name bound by a `const X = ...` / `var X = ...` statement."""
        node = statement.node
        if node is None or node.type not in ("lexical_declaration", "variable_declaration"):
            return None
        declarator = first_statement(node)
        name = declarator.child_by_field_name("name") if declarator is not None else None
        if name is None or name.type != "identifier":
            return None
        return node_text(name, statement.source)

    @staticmethod
    def _namespace_object(statement: Statement) -> Optional[tree_sitter.Node]:
        """The object literal a namespace statement declares, if any."""
        node = statement.node
        if node.type in ("lexical_declaration", "variable_declaration"):
            declarator = first_statement(node)
            value = declarator.child_by_field_name("value") if declarator is not None else None
        elif node.type == "expression_statement":
            assignment = first_statement(node)
            value = (
                assignment.child_by_field_name("right")
                if assignment is not None and assignment.type == "assignment_expression"
                else None
            )
        else:
            value = None
        return value if value is not None and value.type == "object" else None

    @staticmethod
    def _declaration_name(value: tree_sitter.Node, source: bytes) -> Optional[str]:
        """Name of a named class or function expression."""
        if value.type not in ("class", "function_expression", "function", "generator_function"):
            return None
        name = value.child_by_field_name("name")
        return node_text(name, source) if name is not None else None
