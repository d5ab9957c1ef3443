"""Modulizer analyzers: tree-sitter JavaScript and html5lib HTML.

Public API:
    analyze_file(root, url) → Document | None
    parse_script(source, url) → ScriptDocument
"""

from typing import Optional

from .html_parser import HtmlAnalyzer
from .javascript_parser import JavaScriptParser
from .models import (
    Document,
    ElementFeature,
    HtmlImport,
    NamespaceFeature,
    ScriptDocument,
    SourceSpan,
)

__all__ = [
    "analyze_file",
    "parse_script",
    "HtmlAnalyzer",
    "JavaScriptParser",
    "Document",
    "ElementFeature",
    "HtmlImport",
    "NamespaceFeature",
    "ScriptDocument",
    "SourceSpan",
]


def analyze_file(root: str, url: str) -> Optional[Document]:
    """Analyze the HTML document at `url` (relative to `root`) and its imports.

    Args:
        root: Directory the document URLs are relative to
        url: Document URL, e.g. "src/paper-button.html"

    Returns:
        The Document graph, or None if the file cannot be read
    """
    return HtmlAnalyzer.from_directory(root).analyze(url)


def parse_script(source_text: str, url: str) -> ScriptDocument:
    """Parse JavaScript source into a ScriptDocument with its features."""
    return JavaScriptParser().parse_source(source_text, url)
