"""Tests for import synthesis."""

from modulizer.core.converter.imports import import_declarations, synthesize_imports
from modulizer.core.converter.models import ModuleRecord, RewriteCursor
from modulizer.core.converter.program import Program


class TestImportDeclarations:

    def test_namespace_and_named_imports(self):
        assert import_declarations("lib/a.js", "src/b.js", {"*", "y", "x"}) == [
            "import * as $$a from '../lib/a.js';",
            "import { x as $x, y as $y } from '../lib/a.js';",
        ]

    def test_namespace_only(self):
        assert import_declarations("src/a.js", "src/b.js", {"*"}) == [
            "import * as $$a from './a.js';",
        ]

    def test_side_effect_import(self):
        assert import_declarations("src/a.js", "src/b.js") == ["import './a.js';"]
        assert import_declarations("src/a.js", "src/b.js", set()) == ["import './a.js';"]


class TestSynthesizeImports:

    def _make_record(self) -> ModuleRecord:
        record = ModuleRecord(url="src/main.js")
        record.imported_references = {
            "src/implicit.js": {"z"},
            "src/explicit.js": {"a"},
        }
        return record

    def test_explicit_edges_come_first(self):
        program = Program.from_source("run();\n")
        cursor = RewriteCursor()
        inserted = synthesize_imports(
            program, cursor, self._make_record(), ["src/side.js", "src/explicit.js"]
        )
        assert inserted == 3
        assert cursor.index == 3
        assert program.print() == (
            "import './side.js';\n"
            "import { a as $a } from './explicit.js';\n"
            "import { z as $z } from './implicit.js';\n"
            "run();\n"
        )

    def test_duplicate_and_self_edges_are_skipped(self):
        program = Program()
        cursor = RewriteCursor()
        record = ModuleRecord(url="src/main.js")
        synthesize_imports(program, cursor, record, ["src/a.js", "src/a.js", "src/main.js"])
        assert program.print() == "import './a.js';\n"
        assert cursor.index == 1
