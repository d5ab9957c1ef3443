"""Converter data models.

Module records, export entries, diagnostics and the shared rewrite
cursor. Pure data containers.
"""

from dataclasses import dataclass, field
from typing import AbstractSet, Dict, Optional


@dataclass(frozen=True)
class JsExport:
    """Where a namespace path lives after conversion.

    `name` is the exported local name, or "*" for the whole module.
    """

    url: str  # "src/foo.js"
    name: str  # "bar" | "*"


@dataclass
class ModuleRecord:
    """The converted output for one document.

    Mutated while its document converts; `finalize` freezes it.
    """

    url: str
    source: Optional[str] = None
    exports: AbstractSet[str] = field(default_factory=set)
    imported_references: Dict[str, AbstractSet[str]] = field(default_factory=dict)

    @property
    def converted(self) -> bool:
        return self.source is not None

    def add_reference(self, export: JsExport) -> None:
        self.imported_references.setdefault(export.url, set()).add(export.name)

    def finalize(self, source: str) -> None:
        self.source = source
        self.exports = frozenset(self.exports)
        self.imported_references = {
            url: frozenset(names) for url, names in self.imported_references.items()
        }


@dataclass
class Diagnostic:
    """A problem encountered while converting a document."""

    url: str
    message: str
    severity: str = "warning"  # "warning" | "error"


@dataclass
class RewriteCursor:
    """Index of the next top-level statement to rewrite.

    Owned by one document's conversion and shared by every phase that
    inserts or removes top-level statements.
    """

    index: int = 0

    def advance(self, count: int = 1) -> None:
        self.index += count
