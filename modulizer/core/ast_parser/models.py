"""Analyzer data models.

The read-only document graph handed to the converter. These are pure data
containers with no parsing logic. Source spans are UTF-8 byte offsets into
the owning script's contents.
"""

from dataclasses import dataclass, field
from typing import Any, FrozenSet, List, Optional


@dataclass(frozen=True)
class SourceSpan:
    """Byte range [start, end) within a script."""

    start: int
    end: int

    def contains(self, other: "SourceSpan") -> bool:
        return self.start <= other.start and other.end <= self.end


@dataclass
class NamespaceFeature:
    """A statement that defines a dot-addressable namespace object.

    `span` covers the whole declaring statement, e.g.
    `const Foo = {...};` or `Polymer.Foo = {...};`.
    """

    name: str  # "Polymer.Foo"
    span: SourceSpan
    identifiers: FrozenSet[str] = frozenset()

    def __post_init__(self):
        self.identifiers = frozenset(self.identifiers) | {self.name}


@dataclass
class ElementFeature:
    """A custom element definition: a class or a `Polymer({...})` call."""

    tag_name: Optional[str]  # "paper-button"
    span: SourceSpan  # class node or call_expression node
    dom_module: Optional[Any] = None  # html5lib (minidom) <dom-module> element


@dataclass
class ScriptDocument:
    """One embedded or external script of an HTML document."""

    url: str
    contents: str
    namespaces: List[NamespaceFeature] = field(default_factory=list)
    elements: List[ElementFeature] = field(default_factory=list)

    def is_namespace_span(self, span: Optional[SourceSpan]) -> bool:
        return span is not None and any(ns.span == span for ns in self.namespaces)

    def find_namespace(self, *identifiers: str) -> Optional[NamespaceFeature]:
        """Find a namespace feature known by any of the given names."""
        for ns in self.namespaces:
            if any(identifier in ns.identifiers for identifier in identifiers):
                return ns
        return None


@dataclass
class HtmlImport:
    """An HTML-import edge to another document."""

    url: str
    document: "Document"


@dataclass
class Document:
    """One HTML document with its scripts and import edges."""

    url: str  # "src/paper-button.html"
    scripts: List[ScriptDocument] = field(default_factory=list)
    imports: List[HtmlImport] = field(default_factory=list)
    markup: Optional[Any] = None  # html5lib (minidom) Document
