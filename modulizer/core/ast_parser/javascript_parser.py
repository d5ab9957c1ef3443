"""JavaScript feature analyzer using tree-sitter.

Walks the tree-sitter AST of one script to find the features the
converter consumes: namespace declarations and custom element
definitions.
"""

import logging
import re
from typing import List, Optional, Set

import tree_sitter

from ..constants import ELEMENT_FACTORY_NAME, NAMESPACE_TAG
from .models import ElementFeature, NamespaceFeature, ScriptDocument, SourceSpan
from .utils import (
    CLASS_TYPES,
    first_statement,
    has_token,
    iife_body,
    iter_descendants,
    member_path,
    node_text,
    parse_javascript,
    string_value,
)

logger = logging.getLogger(__name__)

_NAMESPACE_TAG_RE = re.compile(re.escape(NAMESPACE_TAG) + r"(?:[ \t]+([\w$.]+))?")


class JavaScriptParser:
    """tree-sitter based script analyzer.

    Extracts:
    - `/** @namespace */ const Foo = {...};` -> NamespaceFeature "Foo"
    - `/** @namespace */ Polymer.Foo = {...};` -> NamespaceFeature "Polymer.Foo"
    - `Polymer({is: 'x-foo', ...})` -> ElementFeature (factory call)
    - `class X { static get is() { return 'x-foo'; } }` -> ElementFeature (class)

    Top-level statements and the statements of a single top-level IIFE
    are both searched for namespaces.
    """

    def parse_source(self, source_text: str, url: str) -> ScriptDocument:
        """Analyze one script's source text.

        Args:
            source_text: JavaScript source
            url: URL of the script (or of its HTML document if inline)

        Returns:
            ScriptDocument carrying the detected features
        """
        source = source_text.encode("utf-8")
        tree = parse_javascript(source)

        if tree.root_node.has_error:
            logger.warning(f"Tree-sitter reported parse errors in {url}")

        return ScriptDocument(
            url=url,
            contents=source_text,
            namespaces=self.extract_namespaces(tree, source),
            elements=self.extract_elements(tree, source),
        )

    def extract_namespaces(self, tree: tree_sitter.Tree, source: bytes) -> List[NamespaceFeature]:
        """Extract JSDoc-annotated namespace declarations."""
        statements = list(tree.root_node.named_children)
        body = None
        real = [s for s in statements if s.type != "comment"]
        if len(real) == 1:
            body = iife_body(real[0])
        if body is not None:
            statements.extend(body.named_children)

        namespaces: List[NamespaceFeature] = []
        for statement in statements:
            if statement.type == "comment":
                continue
            doc = self._extract_jsdoc(statement, source)
            if doc is None:
                continue
            match = _NAMESPACE_TAG_RE.search(doc)
            if match is None:
                continue
            inferred = self._namespace_name(statement, source)
            if inferred is None:
                logger.debug(f"{NAMESPACE_TAG} on unsupported statement: {node_text(statement, source)[:60]}")
                continue
            identifiers: Set[str] = {inferred}
            if match.group(1):
                identifiers.add(match.group(1))
            namespaces.append(NamespaceFeature(
                name=match.group(1) or inferred,
                span=SourceSpan(statement.start_byte, statement.end_byte),
                identifiers=frozenset(identifiers),
            ))
        return namespaces

    def extract_elements(self, tree: tree_sitter.Tree, source: bytes) -> List[ElementFeature]:
        """Extract custom element definitions anywhere in the script."""
        elements: List[ElementFeature] = []
        for node in iter_descendants(tree.root_node):
            tag_name = None
            if node.type == "call_expression":
                tag_name = self._factory_tag_name(node, source)
            elif node.type in CLASS_TYPES:
                tag_name = self._class_tag_name(node, source)
            if tag_name is not None:
                elements.append(ElementFeature(
                    tag_name=tag_name,
                    span=SourceSpan(node.start_byte, node.end_byte),
                ))
        return elements

    # =========================================================================
    # Helpers
    # =========================================================================

    @staticmethod
    def _namespace_name(statement: tree_sitter.Node, source: bytes) -> Optional[str]:
        """Name declared by `const X = {...}` or `A.B = {...}`."""
        if statement.type in ("lexical_declaration", "variable_declaration"):
            declarator = next(
                (c for c in statement.named_children if c.type == "variable_declarator"), None
            )
            if declarator is None:
                return None
            name = declarator.child_by_field_name("name")
            value = declarator.child_by_field_name("value")
            if name is None or name.type != "identifier" or value is None or value.type != "object":
                return None
            return node_text(name, source)

        if statement.type == "expression_statement":
            expression = first_statement(statement)
            if expression is None or expression.type != "assignment_expression":
                return None
            right = expression.child_by_field_name("right")
            path = member_path(expression.child_by_field_name("left"), source)
            if path is None or right is None or right.type != "object":
                return None
            return ".".join(path)
        return None

    @staticmethod
    def _factory_tag_name(node: tree_sitter.Node, source: bytes) -> Optional[str]:
        """Tag name of a `Polymer({is: '...'})` call, if that's what `node` is."""
        function = node.child_by_field_name("function")
        if function is None:
            return None
        if function.type == "identifier":
            if node_text(function, source) != ELEMENT_FACTORY_NAME:
                return None
        elif member_path(function, source) != [ELEMENT_FACTORY_NAME]:
            return None

        arguments = node.child_by_field_name("arguments")
        config = first_statement(arguments) if arguments is not None else None
        if config is None or config.type != "object":
            return None
        for prop in config.named_children:
            if prop.type != "pair":
                continue
            key = prop.child_by_field_name("key")
            if key is not None and node_text(key, source) == "is":
                return string_value(prop.child_by_field_name("value"), source)
        return None

    @staticmethod
    def _class_tag_name(node: tree_sitter.Node, source: bytes) -> Optional[str]:
        """Tag name returned by a class's `static get is()` getter."""
        body = node.child_by_field_name("body")
        if body is None:
            return None
        for member in body.named_children:
            if member.type != "method_definition":
                continue
            name = member.child_by_field_name("name")
            if name is None or node_text(name, source) != "is":
                continue
            if not (has_token(member, "static") and has_token(member, "get")):
                continue
            block = member.child_by_field_name("body")
            for statement in block.named_children if block is not None else []:
                if statement.type == "return_statement":
                    return string_value(first_statement(statement), source)
        return None

    @staticmethod
    def _extract_jsdoc(node: tree_sitter.Node, source: bytes) -> Optional[str]:
        """Extract JSDoc comment preceding a node.

        Looks at the previous sibling for a comment node starting with /**.
        """
        prev = node.prev_named_sibling
        if prev and prev.type == "comment":
            text = node_text(prev, source).strip()
            if text.startswith("/**"):
                content = text[3:]
                if content.endswith("*/"):
                    content = content[:-2]
                lines = []
                for line in content.split("\n"):
                    stripped = line.strip()
                    if stripped.startswith("*"):
                        stripped = stripped[1:].strip()
                    lines.append(stripped)
                return "\n".join(lines).strip()
        return None
