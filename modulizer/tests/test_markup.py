"""Tests for the markup inliner."""

from modulizer.core.ast_parser.html_parser import parse_html
from modulizer.core.ast_parser.models import Document
from modulizer.core.converter.markup import (
    convert_elements,
    inline_templates,
    markup_literal,
    retained_elements,
)
from modulizer.core.converter.models import RewriteCursor
from modulizer.core.converter.program import Program


# =========================================================================
# Sample documents
# =========================================================================

MIXED_MARKUP = """<link rel="import" href="x.html">
<style>.x {}</style>
<div id="shared">hi</div>
<dom-module id="x-foo"></dom-module>
<span>b</span>
"""

FACTORY_ELEMENT = """<dom-module id="x-foo">
  <template><span>[[name]]</span></template>
</dom-module>
<script>
Polymer({
  is: 'x-foo'
});
</script>
"""

FACTORY_ELEMENT_ONE_LINE = """<dom-module id="x-foo">
  <template><b>hi</b></template>
</dom-module>
<script>
Polymer({is: 'x-foo'});
</script>
"""

CLASS_ELEMENT = """<dom-module id="x-bar">
  <template><span>hi</span></template>
</dom-module>
<script>
class XBar extends HTMLElement {
  static get is() { return 'x-bar'; }
}
</script>
"""

ELEMENT_WITHOUT_TEMPLATE = """<script>
Polymer({is: 'x-none'});
</script>
"""


class TestMarkupLiteral:

    def test_escapes_backslash_backtick_and_dollar(self):
        assert markup_literal("<p>a`b${c}\\d</p>") == "`<p>a\\`b\\${c}\\\\d</p>`"

    def test_strips_blank_edge_lines(self):
        assert markup_literal("\n  \n<p>x</p>\n\n") == "`<p>x</p>`"

    def test_add_newlines(self):
        assert markup_literal("<p>x</p>", add_newlines=True) == "`\n<p>x</p>\n`"


class TestRetainedMarkup:

    def test_blacklisted_elements_are_dropped(self):
        markup = parse_html(MIXED_MARKUP)
        assert [e.tagName for e in retained_elements(markup)] == ["div", "span"]

    def test_convert_elements_inserts_four_statements(self):
        document = Document(url="a.html", markup=parse_html('<div id="shared">hi</div>'))
        program = Program.from_source("run();\n")
        cursor = RewriteCursor()
        assert convert_elements(document, program, cursor) == 4
        assert cursor.index == 4
        assert program.print() == (
            "const $_documentContainer = document.createElement('div');\n"
            "$_documentContainer.setAttribute('style', 'display: none;');\n"
            '$_documentContainer.innerHTML = `<div id="shared">hi</div>`;\n'
            "document.head.appendChild($_documentContainer);\n"
            "run();\n"
        )

    def test_nothing_retained(self):
        document = Document(url="a.html", markup=parse_html("<script></script>"))
        program = Program()
        cursor = RewriteCursor()
        assert convert_elements(document, program, cursor) == 0
        assert cursor.index == 0


class TestInlineTemplates:

    def _inline(self, build_document, index, html: str) -> str:
        document = build_document({"x.html": html}, "x.html")
        script = document.scripts[0]
        program = Program.from_source(script.contents)
        inline_templates(script, program, index, "x.js")
        return program.print()

    def test_factory_gets_leading_template_property(self, build_document, index):
        assert self._inline(build_document, index, FACTORY_ELEMENT) == (
            "Polymer({\n"
            "  _template: `<span>[[name]]</span>`,\n"
            "  is: 'x-foo'\n"
            "});\n"
        )

    def test_factory_on_one_line(self, build_document, index):
        assert self._inline(build_document, index, FACTORY_ELEMENT_ONE_LINE) == (
            "Polymer({_template: `<b>hi</b>`, is: 'x-foo'});\n"
        )

    def test_class_gets_static_template_getter(self, build_document, index):
        assert self._inline(build_document, index, CLASS_ELEMENT) == (
            "class XBar extends HTMLElement {\n"
            "  static get template() {\n"
            "    return `<span>hi</span>`;\n"
            "  }\n"
            "  static get is() { return 'x-bar'; }\n"
            "}\n"
        )

    def test_element_without_dom_module_is_untouched(self, build_document, index):
        assert self._inline(build_document, index, ELEMENT_WITHOUT_TEMPLATE) == (
            "Polymer({is: 'x-none'});\n"
        )
        assert index.diagnostics == []
