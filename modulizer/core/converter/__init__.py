"""Namespace-to-module converter.

Public API:
    convert_document(document, settings, index) → ModuleRecord
"""

from typing import Optional

from ..ast_parser.models import Document
from ..settings import ConversionSettings
from .document_converter import ModuleConverter
from .errors import (
    ConversionError,
    ImportCycleError,
    MultipleScriptsError,
    NamespaceResolutionError,
)
from .models import Diagnostic, JsExport, ModuleRecord
from .registry import ReferenceIndex

__all__ = [
    "convert_document",
    "ModuleConverter",
    "ReferenceIndex",
    "ModuleRecord",
    "JsExport",
    "Diagnostic",
    "ConversionError",
    "ImportCycleError",
    "MultipleScriptsError",
    "NamespaceResolutionError",
]


def convert_document(
    document: Document,
    settings: Optional[ConversionSettings] = None,
    index: Optional[ReferenceIndex] = None,
) -> ModuleRecord:
    """Convert `document` and its HTML imports into ES modules.

    Args:
        document: Analyzed entry document
        settings: Conversion options (defaults if None)
        index: Index to register modules in; a new one if None. Pass the
            same index to convert several entry documents as one batch.

    Returns:
        The entry document's ModuleRecord. Dependencies' records are in
        `index.modules`.
    """
    converter = ModuleConverter(index if index is not None else ReferenceIndex(), settings)
    return converter.convert(document)
