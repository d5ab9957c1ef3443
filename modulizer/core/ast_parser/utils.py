"""AST parser utilities.

tree-sitter setup and node helpers shared by the analyzers and the
syntax rewriter.
"""

from typing import Iterator, List, Optional

import tree_sitter
import tree_sitter_javascript

from ..constants import GLOBAL_OBJECT_NAME

_JS_LANGUAGE = tree_sitter.Language(tree_sitter_javascript.language())

# Node types that are not statements (extras tree-sitter hangs off the tree)
TRIVIA_TYPES = frozenset({"comment", "hash_bang_line"})

# `function () {}` expressions (older grammars call it "function")
FUNCTION_EXPRESSION_TYPES = frozenset({
    "function_expression",
    "function",
    "generator_function",
})

FUNCTION_DECLARATION_TYPES = frozenset({
    "function_declaration",
    "generator_function_declaration",
})

CLASS_TYPES = frozenset({"class", "class_declaration"})

# Nodes that introduce their own `this` binding
THIS_SCOPE_TYPES = FUNCTION_EXPRESSION_TYPES | FUNCTION_DECLARATION_TYPES | frozenset({
    "method_definition",
    "class_body",
})

# ESTree `Literal` equivalents
LITERAL_TYPES = frozenset({"string", "number", "true", "false", "null", "regex"})

# Nodes whose text must never be re-indented
VERBATIM_TYPES = frozenset({"string", "template_string"})

# One parser per process, created lazily
_parser: Optional[tree_sitter.Parser] = None


def get_parser() -> tree_sitter.Parser:
    """Get the shared tree-sitter JavaScript parser."""
    global _parser
    if _parser is None:
        _parser = tree_sitter.Parser(_JS_LANGUAGE)
    return _parser


def parse_javascript(source: bytes) -> tree_sitter.Tree:
    """Parse JavaScript source bytes into a tree-sitter tree."""
    return get_parser().parse(source)


def node_text(node: tree_sitter.Node, source: bytes) -> str:
    return source[node.start_byte:node.end_byte].decode("utf-8", errors="replace")


def first_statement(node: tree_sitter.Node) -> Optional[tree_sitter.Node]:
    """Return the first named, non-comment child of `node`."""
    for child in node.named_children:
        if child.type not in TRIVIA_TYPES:
            return child
    return None


def unwrap_parens(node: Optional[tree_sitter.Node]) -> Optional[tree_sitter.Node]:
    """Strip any number of enclosing parenthesized_expression nodes."""
    while node is not None and node.type == "parenthesized_expression":
        node = first_statement(node)
    return node


def has_token(node: tree_sitter.Node, token: str) -> bool:
    """Check whether an anonymous keyword/punctuation child is present."""
    return any(not child.is_named and child.type == token for child in node.children)


def iter_descendants(node: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Pre-order walk of every node below (and including) `node`."""
    stack = [node]
    while stack:
        current = stack.pop()
        yield current
        stack.extend(reversed(current.children))


def member_path(node: tree_sitter.Node, source: bytes) -> Optional[List[str]]:
    """Return the identifier chain of a dotted property access.

    `a.b.c` -> ["a", "b", "c"], `this.x` -> ["this", "x"]. A leading
    `window.` is dropped. Returns None for anything that is not a plain
    chain of identifiers (computed access, optional chaining, calls).
    """
    if node.type != "member_expression":
        return None
    if any(child.type == "optional_chain" for child in node.children):
        return None
    prop = node.child_by_field_name("property")
    obj = node.child_by_field_name("object")
    if prop is None or obj is None or prop.type != "property_identifier":
        return None
    name = node_text(prop, source)

    if obj.type == "this":
        return ["this", name]
    if obj.type == "identifier":
        obj_name = node_text(obj, source)
        if obj_name == GLOBAL_OBJECT_NAME:
            return [name]
        return [obj_name, name]
    if obj.type == "member_expression":
        prefix = member_path(obj, source)
        if prefix is not None:
            return prefix + [name]
    return None


def string_value(node: tree_sitter.Node, source: bytes) -> Optional[str]:
    """Return the cooked-ish value of a plain string literal node."""
    if node.type != "string":
        return None
    return "".join(
        node_text(child, source)
        for child in node.named_children
        if child.type == "string_fragment"
    )


def is_use_strict(node: Optional[tree_sitter.Node], source: bytes) -> bool:
    """True for an expression statement consisting of "use strict"."""
    if node is None or node.type != "expression_statement":
        return False
    expression = first_statement(node)
    return expression is not None and string_value(expression, source) == "use strict"


def iife_body(node: Optional[tree_sitter.Node]) -> Optional[tree_sitter.Node]:
    """Return the body block if `node` is a self-invoking function statement.

    Matches both `(function() {...})();` and `(function() {...}());`.
    """
    if node is None or node.type != "expression_statement":
        return None
    call = unwrap_parens(first_statement(node))
    if call is None or call.type != "call_expression":
        return None
    callee = unwrap_parens(call.child_by_field_name("function"))
    if callee is None or callee.type not in ("function_expression", "function"):
        return None
    return callee.child_by_field_name("body")


def line_indent(source: bytes, offset: int) -> int:
    """Width of the leading whitespace on the line containing `offset`."""
    line_start = source.rfind(b"\n", 0, offset) + 1
    width = 0
    while line_start + width < len(source) and source[line_start + width] in b" \t":
        width += 1
    return width
