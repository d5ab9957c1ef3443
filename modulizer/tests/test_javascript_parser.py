"""Tests for the tree-sitter script analyzer."""

from modulizer.core.ast_parser import parse_script
from modulizer.core.ast_parser.models import SourceSpan


# =========================================================================
# Sample scripts
# =========================================================================

DECLARED = """/** @namespace */
const Foo = {
  a: 1
};
"""

ASSIGNED = """/**
 * Settings shared by every element.
 *
 * @namespace
 */
window.Polymer.Settings = {};
"""

NAMED = """/** @namespace Polymer.Foo */
const Foo = {};
"""

IN_IIFE = """(function() {
  'use strict';

  /** @namespace */
  Polymer.Async = {};
})();
"""

NOT_NAMESPACES = """/* @namespace */
const A = {};
/** @namespace */
const B = make();
/** Just a doc comment. */
const C = {};
"""

ELEMENTS = """Polymer({
  is: 'x-foo'
});
window.Polymer({is: 'x-baz'});
class XBar extends Polymer.Element {
  static get is() { return 'x-bar'; }
}
Other({is: 'x-other'});
class Plain {
  get is() { return 'x-plain'; }
}
"""


class TestNamespaces:

    def test_declared_namespace(self):
        script = parse_script(DECLARED, "foo.js")
        assert [ns.name for ns in script.namespaces] == ["Foo"]
        start = DECLARED.index("const")
        end = DECLARED.index(";") + 1
        assert script.namespaces[0].span == SourceSpan(start, end)

    def test_assigned_namespace_drops_window(self):
        script = parse_script(ASSIGNED, "settings.js")
        assert [ns.name for ns in script.namespaces] == ["Polymer.Settings"]

    def test_explicit_namespace_name(self):
        script = parse_script(NAMED, "foo.js")
        namespace = script.namespaces[0]
        assert namespace.name == "Polymer.Foo"
        assert namespace.identifiers == {"Foo", "Polymer.Foo"}
        assert script.find_namespace("Foo") is namespace

    def test_namespace_inside_iife(self):
        script = parse_script(IN_IIFE, "async.js")
        assert [ns.name for ns in script.namespaces] == ["Polymer.Async"]
        start = IN_IIFE.index("Polymer")
        assert script.is_namespace_span(SourceSpan(start, start + len("Polymer.Async = {};")))

    def test_non_namespaces(self):
        assert parse_script(NOT_NAMESPACES, "x.js").namespaces == []


class TestElements:

    def test_element_definitions(self):
        script = parse_script(ELEMENTS, "elements.js")
        assert [e.tag_name for e in script.elements] == ["x-foo", "x-baz", "x-bar"]

    def test_factory_span_covers_call(self):
        script = parse_script(ELEMENTS, "elements.js")
        span = script.elements[0].span
        assert ELEMENTS.encode()[span.start:span.end] == b"Polymer({\n  is: 'x-foo'\n})"

    def test_class_span_covers_declaration(self):
        script = parse_script(ELEMENTS, "elements.js")
        span = script.elements[2].span
        assert ELEMENTS.encode()[span.start:span.end].startswith(b"class XBar")
        assert script.elements[2].dom_module is None
