"""Module Converter.

Orchestrates one document: dependencies → unwrap → references → imports →
markup → templates → exports → `this`/local/excluded fix-ups → print.
Dependencies are converted depth-first before the document itself so
their exports are registered when its references are rewritten.
"""

import logging
from typing import Iterable, List, Optional

from ..ast_parser.models import Document, ScriptDocument
from ..ast_parser.utils import FUNCTION_DECLARATION_TYPES, first_statement
from ..settings import ConversionSettings
from .errors import ConversionError, ImportCycleError, MultipleScriptsError
from .exports import NamespaceExportRewriter
from .imports import synthesize_imports
from .markup import convert_elements, inline_templates
from .models import ModuleRecord, RewriteCursor
from .program import Program
from .references import (
    ExcludedReferenceTransform,
    LocalReferenceTransform,
    NamespacedReferenceTransform,
    ThisReferenceTransform,
)
from .registry import ReferenceIndex
from .transform import apply_transform, collect_edits
from .urls import module_url

logger = logging.getLogger(__name__)


class ModuleConverter:
    """Converts documents into module records in one ReferenceIndex.

    The converter tracks the chain of documents currently being converted;
    reaching one of them again through an HTML import is an import cycle.
    """

    def __init__(self, index: ReferenceIndex, settings: Optional[ConversionSettings] = None):
        self.index = index
        self.settings = settings if settings is not None else ConversionSettings()
        self.index.add_namespace_roots(self.settings.namespaces)
        self._active: List[str] = []

    # ── Public entry points ──────────────────────────────────────────────

    def convert(self, document: Document) -> ModuleRecord:
        """Convert `document` (and its dependencies) to a module.

        Idempotent: a document whose module is already registered is not
        converted again and its existing record is returned.

        Returns:
            The document's ModuleRecord. Its `source` is None if the
            conversion failed; the reason is recorded as a diagnostic.
        """
        url = module_url(document.url)
        existing = self.index.get_module(url)
        if existing is not None:
            return existing

        record = self.index.register_module(url)
        self._active.append(url)
        try:
            DocumentConversion(self, document, record).run()
        except ConversionError as e:
            logger.error(f"Conversion failed for {e.url}: {e.message}")
            self.index.report(e.url, e.message, severity="error")
        finally:
            self._active.pop()

        if record.converted:
            logger.info(f"Converted {document.url} -> {url} ({len(record.exports)} export(s))")
        return record

    def convert_all(self, documents: Iterable[Document]) -> List[ModuleRecord]:
        """Convert several documents into the same index."""
        return [self.convert(document) for document in documents]

    # ── Dependencies ─────────────────────────────────────────────────────

    def convert_dependency(self, importer: ModuleRecord, document: Document) -> None:
        """Convert one HTML-import target of `importer`.

        Raises:
            ImportCycleError: If the target is still being converted
        """
        url = module_url(document.url)
        if url in self._active:
            chain = self._active[self._active.index(url):] + [url]
            raise ImportCycleError(importer.url, chain)
        if self.index.has_module(url):
            return
        self.convert(document)


class DocumentConversion:
    """The rewrite pipeline for a single document."""

    def __init__(self, converter: ModuleConverter, document: Document, record: ModuleRecord):
        self.converter = converter
        self.index = converter.index
        self.settings = converter.settings
        self.document = document
        self.record = record
        self.cursor = RewriteCursor()

    def run(self) -> None:
        document = self.document
        script = self._script()
        if script is not None:
            self.index.add_namespace_roots(ns.name for ns in script.namespaces)

        import_urls = self._convert_dependencies()

        program = Program.from_source(script.contents) if script is not None else Program()
        if program.unwrap_module_body():
            logger.debug(f"{document.url}: unwrapped module body")

        apply_transform(program, NamespacedReferenceTransform(self.index, self.record))
        synthesize_imports(program, self.cursor, self.record, import_urls)
        convert_elements(document, program, self.cursor)
        inline_templates(script, program, self.index, self.record.url)

        rewriter = NamespaceExportRewriter(
            program, self.cursor, self.record, script, self.index, self.settings
        )
        local_namespace_name, namespace_name = rewriter.rewrite()

        if namespace_name:
            self._rewrite_this_references(program, namespace_name)
        for name in (local_namespace_name, namespace_name):
            if name:
                apply_transform(program, LocalReferenceTransform(name))
        if self.settings.exclude_references:
            apply_transform(program, ExcludedReferenceTransform(self.settings.exclude_references))

        self.record.finalize(program.print())

    def _script(self) -> Optional[ScriptDocument]:
        scripts = self.document.scripts
        if len(scripts) > 1:
            raise MultipleScriptsError(self.record.url, len(scripts))
        return scripts[0] if scripts else None

    def _convert_dependencies(self) -> List[str]:
        """Convert every followed HTML import. Returns their module URLs in order."""
        urls: List[str] = []
        for html_import in self.document.imports:
            if html_import.url in self.settings.exclude_documents:
                logger.debug(f"{self.document.url}: skipping excluded import {html_import.url}")
                continue
            self.converter.convert_dependency(self.record, html_import.document)
            urls.append(module_url(html_import.url))
        return urls

    @staticmethod
    def _rewrite_this_references(program: Program, namespace_name: str) -> None:
        """`this` -> namespace name inside exported function declarations."""
        transform = ThisReferenceTransform(namespace_name)
        for statement in program:
            node = statement.node
            if node is None or node.type != "export_statement":
                continue
            declaration = node.child_by_field_name("declaration") or first_statement(node)
            if declaration is None or declaration.type not in FUNCTION_DECLARATION_TYPES:
                continue
            body = declaration.child_by_field_name("body")
            if body is not None:
                statement.apply_edits(collect_edits(body, statement.source, transform))
