"""Tests for the reference rewriting passes."""

from modulizer.core.converter.program import Program, Statement
from modulizer.core.converter.references import (
    ExcludedReferenceTransform,
    LocalReferenceTransform,
    NamespacedReferenceTransform,
    ThisReferenceTransform,
)
from modulizer.core.converter.registry import ReferenceIndex
from modulizer.core.converter.transform import apply_transform, collect_edits


def _make_index() -> ReferenceIndex:
    index = ReferenceIndex(namespaces={"Polymer"})
    element = index.register_module("lib/polymer-element.js")
    index.add_export(element, "Polymer.Element", "Element")
    polymer = index.register_module("lib/polymer.js")
    index.add_export(polymer, "Polymer", "*")
    return index


def _rewrite(source: str, transform) -> str:
    program = Program.from_source(source)
    apply_transform(program, transform)
    return program.print()


class TestNamespacedReferences:

    def test_member_chains_become_aliases(self):
        index = _make_index()
        record = index.register_module("src/a.js")
        source = "class A extends Polymer.Element {}\nconst e = window.Polymer.Element;\n"
        result = _rewrite(source, NamespacedReferenceTransform(index, record))
        assert result == "class A extends $Element {}\nconst e = $Element;\n"
        assert record.imported_references == {"lib/polymer-element.js": {"Element"}}

    def test_unregistered_chain_keeps_its_root(self):
        index = _make_index()
        record = index.register_module("src/a.js")
        source = "Polymer.other();\n"
        assert _rewrite(source, NamespacedReferenceTransform(index, record)) == source
        assert record.imported_references == {}

    def test_bare_root_becomes_module_id(self):
        index = _make_index()
        record = index.register_module("src/a.js")
        result = _rewrite("const P = Polymer;\n", NamespacedReferenceTransform(index, record))
        assert result == "const P = $$polymer;\n"
        assert record.imported_references == {"lib/polymer.js": {"*"}}

    def test_bindings_are_not_rewritten(self):
        index = _make_index()
        record = index.register_module("src/a.js")
        source = "function f(Polymer) {}\nconst Polymer = 1;\n"
        assert _rewrite(source, NamespacedReferenceTransform(index, record)) == source

    def test_parameters_and_patterns_are_not_rewritten(self):
        index = _make_index()
        record = index.register_module("src/a.js")
        source = (
            "const f = Polymer => 1;\n"
            "try {} catch (Polymer) {}\n"
            "function g(Polymer = 1) {}\n"
            "function h(...Polymer) {}\n"
            "const [Polymer] = list;\n"
            "const {a: Polymer} = obj;\n"
            "const {Polymer = 2} = obj;\n"
        )
        assert _rewrite(source, NamespacedReferenceTransform(index, record)) == source
        assert record.imported_references == {}

    def test_default_values_are_still_references(self):
        index = _make_index()
        record = index.register_module("src/a.js")
        source = "function g(p = Polymer) {}\n"
        result = _rewrite(source, NamespacedReferenceTransform(index, record))
        assert result == "function g(p = $$polymer) {}\n"

    def test_shorthand_property_keeps_its_key(self):
        index = _make_index()
        record = index.register_module("src/a.js")
        result = _rewrite("const o = {Polymer, x};\n", NamespacedReferenceTransform(index, record))
        assert result == "const o = {Polymer: $$polymer, x};\n"
        assert record.imported_references == {"lib/polymer.js": {"*"}}

    def test_unknown_identifiers_are_ignored(self):
        index = _make_index()
        record = index.register_module("src/a.js")
        source = "const Element = Other.Element;\n"
        assert _rewrite(source, NamespacedReferenceTransform(index, record)) == source

    def test_own_exports_are_not_imported(self):
        index = _make_index()
        record = index.get_module("lib/polymer-element.js")
        source = "const e = Polymer.Element;\n"
        assert _rewrite(source, NamespacedReferenceTransform(index, record)) == source
        assert record.imported_references == {}


class TestThisReferences:

    def _normalize(self, text: str) -> str:
        statement = Statement(text)
        body = statement.node.child_by_field_name("body")
        statement.apply_edits(collect_edits(body, statement.source, ThisReferenceTransform("Foo")))
        return statement.text

    def test_this_in_body(self):
        assert self._normalize("function f() { return this.x; }") == "function f() { return Foo.x; }"

    def test_nested_function_keeps_this(self):
        source = "function f() { const self = this; return function() { return this; }; }"
        expected = "function f() { const self = Foo; return function() { return this; }; }"
        assert self._normalize(source) == expected

    def test_arrow_function_shares_this(self):
        assert self._normalize("function f() { return () => this.x; }") == "function f() { return () => Foo.x; }"

    def test_nested_class_keeps_this(self):
        source = "function f() { return class { m() { return this; } }; }"
        assert self._normalize(source) == source


class TestLocalReferences:

    def test_collapses_direct_members(self):
        source = "Foo.bar();\nFoo.baz.qux;\nOther.bar;\n"
        assert _rewrite(source, LocalReferenceTransform("Foo")) == "bar();\nbaz.qux;\nOther.bar;\n"

    def test_dotted_namespace(self):
        result = _rewrite("Polymer.Foo.x = Polymer.Foo.y;\n", LocalReferenceTransform("Polymer.Foo"))
        assert result == "x = y;\n"

    def test_window_prefix_is_dropped(self):
        assert _rewrite("window.Foo.bar();\n", LocalReferenceTransform("Foo")) == "bar();\n"


class TestExcludedReferences:

    def test_excluded_path_becomes_undefined(self):
        result = _rewrite(
            "if (Polymer.DomModule) { f(Polymer.DomModule.content); }\n",
            ExcludedReferenceTransform({"Polymer.DomModule"}),
        )
        assert result == "if (undefined) { f(undefined.content); }\n"
