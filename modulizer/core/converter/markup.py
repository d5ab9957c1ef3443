"""Markup inliner.

Serializes HTML with html5lib and injects it into the script as
template literals: retained top-level markup becomes DOM-construction
statements, and element templates are attached to their definitions.
"""

import logging
from typing import List, Optional

import html5lib

from ..ast_parser.models import Document, ScriptDocument
from ..ast_parser.utils import CLASS_TYPES, first_statement, line_indent
from ..constants import (
    DOCUMENT_CONTAINER_NAME,
    ELEMENT_BLACKLIST,
    TEMPLATE_GETTER_NAME,
    TEMPLATE_PROPERTY_NAME,
)
from .models import RewriteCursor
from .program import Program, Statement
from .registry import ReferenceIndex

logger = logging.getLogger(__name__)


def serialize_node(node) -> str:
    """Serialize one minidom node (element, text, comment) to HTML."""
    return html5lib.serialize(
        node,
        tree="dom",
        quote_attr_values="always",
        omit_optional_tags=False,
        minimize_boolean_attributes=False,
    )


def markup_literal(html: str, add_newlines: bool = False) -> str:
    """Wrap serialized HTML in a template literal.

    Blank leading and trailing lines are dropped. Backslashes are escaped
    first so the escapes added for backticks and `$` are not doubled.
    """
    lines = html.split("\n")
    while lines and not lines[0].strip():
        lines.pop(0)
    while lines and not lines[-1].strip():
        lines.pop()

    cooked = "\n".join(lines)
    if add_newlines:
        cooked = f"\n{cooked}\n"

    raw = cooked.replace("\\", "\\\\").replace("`", "\\`").replace("$", "\\$")
    return f"`{raw}`"


def retained_elements(markup) -> List:
    """Top-level <head>/<body> elements that are not blacklisted."""
    if markup is None or markup.documentElement is None:
        return []
    elements = []
    for section in markup.documentElement.childNodes:
        if section.nodeType != section.ELEMENT_NODE or section.tagName not in ("head", "body"):
            continue
        for child in section.childNodes:
            if child.nodeType == child.ELEMENT_NODE and child.tagName.lower() not in ELEMENT_BLACKLIST:
                elements.append(child)
    return elements


def convert_elements(document: Document, program: Program, cursor: RewriteCursor) -> int:
    """Inline retained markup as statements at the cursor.

    Returns:
        Number of statements inserted
    """
    elements = retained_elements(document.markup)
    if not elements:
        return 0

    literal = markup_literal("".join(serialize_node(e) for e in elements))
    name = DOCUMENT_CONTAINER_NAME
    statements = [
        Statement(f"const {name} = document.createElement('div');"),
        Statement(f"{name}.setAttribute('style', 'display: none;');"),
        Statement(f"{name}.innerHTML = {literal};"),
        Statement(f"document.head.appendChild({name});"),
    ]
    program.insert(cursor.index, statements)
    cursor.advance(len(statements))
    logger.debug(f"{document.url}: inlined {len(elements)} retained element(s)")
    return len(statements)


def _find_template(dom_module):
    for candidate in dom_module.getElementsByTagName("template"):
        return candidate
    return None


def template_literal(dom_module) -> Optional[str]:
    """Template literal for a <dom-module>'s <template> content, if any."""
    template = _find_template(dom_module)
    if template is None:
        return None
    return markup_literal("".join(serialize_node(child) for child in template.childNodes))


def inline_templates(
    script: Optional[ScriptDocument],
    program: Program,
    index: ReferenceIndex,
    url: str,
) -> int:
    """Attach each element's template to its definition.

    Class elements get a `static get template()` accessor; factory calls
    get a leading `_template` property in their configuration object.

    Returns:
        Number of templates inlined
    """
    if script is None:
        return 0

    inlined = 0
    for element in script.elements:
        if element.dom_module is None:
            continue
        literal = template_literal(element.dom_module)
        if literal is None:
            continue

        statement = program.find_covering(element.span)
        node = statement.find_node(element.span, CLASS_TYPES | {"call_expression"}) if statement else None
        if node is None:
            message = f"can't find definition of element {element.tag_name} to inline its template"
            logger.warning(f"{url}: {message}")
            index.report(url, message)
            continue

        if node.type in CLASS_TYPES:
            edit = _class_template_edit(statement, node, literal)
        else:
            edit = _factory_template_edit(statement, node, literal)
        if edit is None:
            message = f"element {element.tag_name} has no configuration object"
            logger.warning(f"{url}: {message}")
            index.report(url, message)
            continue

        statement.apply_edits([edit])
        inlined += 1
    return inlined


def _class_template_edit(statement: Statement, node, literal: str):
    body = node.child_by_field_name("body")
    if body is None:
        return None
    source = statement.source
    base = " " * line_indent(source, node.start_byte)
    indent = base + "  "
    text = (
        f"\n{indent}static get {TEMPLATE_GETTER_NAME}() {{"
        f"\n{indent}  return {literal};"
        f"\n{indent}}}"
    )
    if not any(child.type != "comment" for child in body.named_children):
        text += f"\n{base}"
    return (body.start_byte + 1, body.start_byte + 1, text)


def _factory_template_edit(statement: Statement, node, literal: str):
    arguments = node.child_by_field_name("arguments")
    config = first_statement(arguments) if arguments is not None else None
    if config is None or config.type != "object":
        return None
    source = statement.source
    base = " " * line_indent(source, node.start_byte)
    members = [child for child in config.named_children if child.type != "comment"]
    if members:
        indent = " " * line_indent(source, members[0].start_byte)
        if source.rfind(b"\n", 0, members[0].start_byte) < config.start_byte:
            # `{is: 'x'}` on one line
            return (config.start_byte + 1, config.start_byte + 1, f"{TEMPLATE_PROPERTY_NAME}: {literal}, ")
        return (config.start_byte + 1, config.start_byte + 1, f"\n{indent}{TEMPLATE_PROPERTY_NAME}: {literal},")
    text = f"\n{base}  {TEMPLATE_PROPERTY_NAME}: {literal}\n{base}"
    return (config.start_byte + 1, config.start_byte + 1, text)
