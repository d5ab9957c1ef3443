"""Reference index.

Instance-owned registries for one conversion batch:

- modules: module URL -> ModuleRecord (exactly one per converted document)
- namespaced exports: "Polymer.Element" -> JsExport(url, name)
- namespaces: root names whose dotted paths are candidate exports

Nothing here is global; callers construct one index per batch and pass
it to every conversion.
"""

import logging
from typing import Dict, Iterable, List, Optional, Set

from .models import Diagnostic, JsExport, ModuleRecord

logger = logging.getLogger(__name__)


class ReferenceIndex:
    """Export/import bookkeeping shared by every document in a batch."""

    def __init__(self, namespaces: Iterable[str] = ()):
        self.modules: Dict[str, ModuleRecord] = {}
        self.namespaced_exports: Dict[str, JsExport] = {}
        self.namespaces: Set[str] = set(namespaces)
        self.diagnostics: List[Diagnostic] = []

    # =========================================================================
    # Modules
    # =========================================================================

    def has_module(self, url: str) -> bool:
        return url in self.modules

    def get_module(self, url: str) -> Optional[ModuleRecord]:
        return self.modules.get(url)

    def register_module(self, url: str) -> ModuleRecord:
        """Create the (empty) record for `url`.

        Raises:
            ValueError: If a record for `url` already exists
        """
        if url in self.modules:
            raise ValueError(f"module already registered: {url}")
        record = ModuleRecord(url=url)
        self.modules[url] = record
        return record

    # =========================================================================
    # Exports
    # =========================================================================

    def add_namespace_roots(self, names: Iterable[str]) -> None:
        """Record the root segment of each dotted namespace name."""
        for name in names:
            self.namespaces.add(name.split(".", 1)[0])

    def add_export(self, record: ModuleRecord, namespace_name: str, name: str) -> bool:
        """Register `namespace_name` as exported by `record` under `name`.

        "*" registers the whole module and is not added to the record's
        export set. A path already registered keeps its first entry.

        Returns:
            True if the path was newly registered
        """
        if name != "*":
            record.exports.add(name)

        existing = self.namespaced_exports.get(namespace_name)
        if existing is not None:
            logger.warning(
                "Namespace %s already exported by %s as %s; ignoring %s from %s",
                namespace_name, existing.url, existing.name, name, record.url,
            )
            return False

        self.namespaced_exports[namespace_name] = JsExport(url=record.url, name=name)
        return True

    def lookup(self, namespace_name: str) -> Optional[JsExport]:
        return self.namespaced_exports.get(namespace_name)

    def record_reference(self, record: ModuleRecord, export: JsExport) -> bool:
        """Note that `record` references `export`. Self references are ignored."""
        if export.url == record.url:
            return False
        record.add_reference(export)
        return True

    # =========================================================================
    # Diagnostics
    # =========================================================================

    def report(self, url: str, message: str, severity: str = "warning") -> Diagnostic:
        diagnostic = Diagnostic(url=url, message=message, severity=severity)
        self.diagnostics.append(diagnostic)
        return diagnostic

    def diagnostics_for(self, url: str) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.url == url]
