"""Shared fixtures for the modulizer tests."""

from typing import Dict, Optional

import pytest

from modulizer.core.ast_parser import HtmlAnalyzer, JavaScriptParser
from modulizer.core.ast_parser.models import Document, ScriptDocument
from modulizer.core.converter import ModuleConverter, ReferenceIndex
from modulizer.core.settings import ConversionSettings


@pytest.fixture
def settings() -> ConversionSettings:
    return ConversionSettings(namespaces={"Polymer"})


@pytest.fixture
def index() -> ReferenceIndex:
    return ReferenceIndex()


@pytest.fixture
def build_document():
    """Analyze an in-memory set of HTML files.

    Usage:
        document = build_document({"a.html": "...", "b.html": "..."}, "a.html")
    """

    def _build(files: Dict[str, str], entry: str) -> Optional[Document]:
        return HtmlAnalyzer.from_mapping(files).analyze(entry)

    return _build


@pytest.fixture
def build_script():
    """Analyze a script's source text into a ScriptDocument."""

    def _build(contents: str, url: str = "test.js") -> ScriptDocument:
        return JavaScriptParser().parse_source(contents, url)

    return _build


@pytest.fixture
def convert(index, settings, build_document):
    """Convert the entry of an in-memory file set; returns the entry's record."""

    def _convert(files: Dict[str, str], entry: str, conversion_settings: ConversionSettings = None):
        document = build_document(files, entry)
        if conversion_settings is None:
            conversion_settings = settings
        return ModuleConverter(index, conversion_settings).convert(document)

    return _convert
