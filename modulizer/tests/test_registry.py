"""Tests for the reference index."""

import pytest

from modulizer.core.converter.models import JsExport
from modulizer.core.converter.registry import ReferenceIndex


class TestModules:

    def test_register_and_lookup(self, index):
        record = index.register_module("a.js")
        assert index.has_module("a.js")
        assert index.get_module("a.js") is record
        assert not record.converted

    def test_duplicate_registration_raises(self, index):
        index.register_module("a.js")
        with pytest.raises(ValueError):
            index.register_module("a.js")

    def test_finalize_freezes_record(self, index):
        record = index.register_module("a.js")
        record.exports.add("x")
        record.finalize("export const x = 1;\n")
        assert record.converted
        assert isinstance(record.exports, frozenset)


class TestExports:

    def test_star_is_not_a_local_export(self, index):
        record = index.register_module("a.js")
        assert index.add_export(record, "Foo.bar", "bar")
        assert index.add_export(record, "Foo", "*")
        assert record.exports == {"bar"}
        assert index.lookup("Foo") == JsExport("a.js", "*")

    def test_first_registration_wins(self, index):
        first = index.register_module("a.js")
        second = index.register_module("b.js")
        index.add_export(first, "Foo.bar", "bar")
        assert not index.add_export(second, "Foo.bar", "bar")
        assert index.lookup("Foo.bar").url == "a.js"

    def test_namespace_roots(self):
        index = ReferenceIndex(namespaces=["Polymer"])
        index.add_namespace_roots(["Foo.Bar", "Baz"])
        assert index.namespaces == {"Polymer", "Foo", "Baz"}


class TestReferences:

    def test_records_references_by_url(self, index):
        record = index.register_module("a.js")
        assert index.record_reference(record, JsExport("b.js", "x"))
        index.record_reference(record, JsExport("b.js", "*"))
        assert record.imported_references == {"b.js": {"x", "*"}}

    def test_self_references_are_ignored(self, index):
        record = index.register_module("a.js")
        assert not index.record_reference(record, JsExport("a.js", "x"))
        assert record.imported_references == {}


class TestDiagnostics:

    def test_report_and_filter(self, index):
        index.report("a.js", "first")
        index.report("b.js", "second", severity="error")
        assert [d.message for d in index.diagnostics_for("b.js")] == ["second"]
        assert index.diagnostics_for("b.js")[0].severity == "error"
