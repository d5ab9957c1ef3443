"""HTML document analyzer using html5lib.

Builds the Document graph: inline and external scripts, HTML-import
edges and <dom-module> templates. Sources are fetched through a reader
callable so documents can come from disk or from memory.
"""

import logging
import posixpath
from pathlib import Path
from typing import Callable, Dict, List, Optional

import html5lib

from .javascript_parser import JavaScriptParser
from .models import Document, HtmlImport, ScriptDocument

logger = logging.getLogger(__name__)

SourceReader = Callable[[str], Optional[str]]

_JS_TYPES = frozenset({"", "text/javascript", "application/javascript", "module"})


def parse_html(html: str):
    """Parse an HTML string into an html5lib minidom Document."""
    return html5lib.parse(html, treebuilder="dom", namespaceHTMLElements=False)


def resolve_url(base_url: str, href: str) -> Optional[str]:
    """Resolve `href` against the document at `base_url`.

    Returns None for URLs with a scheme; those are never followed.
    """
    if "://" in href or href.startswith("//"):
        return None
    if href.startswith("/"):
        return posixpath.normpath(href.lstrip("/"))
    return posixpath.normpath(posixpath.join(posixpath.dirname(base_url), href))


def element_text(element) -> str:
    return "".join(
        child.data for child in element.childNodes if child.nodeType == child.TEXT_NODE
    )


class HtmlAnalyzer:
    """Loads HTML documents and their import graph.

    Each URL is analyzed at most once; a cyclic import graph produces
    documents that reference each other.
    """

    def __init__(self, read: SourceReader, js_parser: Optional[JavaScriptParser] = None):
        self._read = read
        self._js_parser = js_parser or JavaScriptParser()
        self._documents: Dict[str, Document] = {}

    @classmethod
    def from_directory(cls, root: str) -> "HtmlAnalyzer":
        """Analyzer reading URLs as paths relative to `root`."""
        root_path = Path(root)

        def read(url: str) -> Optional[str]:
            path = root_path / url
            try:
                return path.read_text(encoding="utf-8")
            except OSError as e:
                logger.warning(f"Could not read {path}: {e}")
                return None

        return cls(read)

    @classmethod
    def from_mapping(cls, files: Dict[str, str]) -> "HtmlAnalyzer":
        """Analyzer over an in-memory {url: source} mapping."""
        return cls(files.get)

    def analyze(self, url: str) -> Optional[Document]:
        """Analyze the document at `url` and, recursively, its imports.

        Returns:
            The Document, or None if it cannot be read
        """
        url = posixpath.normpath(url)
        if url in self._documents:
            return self._documents[url]

        html = self._read(url)
        if html is None:
            return None

        markup = parse_html(html)
        document = Document(url=url, markup=markup)
        self._documents[url] = document

        dom_modules = {}
        for element in markup.getElementsByTagName("*"):
            tag = element.tagName.lower()
            if tag == "link":
                self._add_import(document, element)
            elif tag == "script":
                script = self._load_script(document, element)
                if script is not None:
                    document.scripts.append(script)
            elif tag == "dom-module" and element.getAttribute("id"):
                dom_modules[element.getAttribute("id")] = element

        for script in document.scripts:
            for feature in script.elements:
                if feature.tag_name in dom_modules:
                    feature.dom_module = dom_modules[feature.tag_name]

        logger.debug(
            f"Analyzed {url}: {len(document.scripts)} script(s), "
            f"{len(document.imports)} import(s)"
        )
        return document

    def _add_import(self, document: Document, element) -> None:
        rel: List[str] = element.getAttribute("rel").lower().split()
        href = element.getAttribute("href")
        if "import" not in rel or not href:
            return
        target_url = resolve_url(document.url, href)
        if target_url is None:
            return
        target = self.analyze(target_url)
        if target is None:
            # Unresolvable imports are dropped, not reported as edges
            logger.warning(f"{document.url}: import not found: {href}")
            return
        document.imports.append(HtmlImport(url=target.url, document=target))

    def _load_script(self, document: Document, element) -> Optional[ScriptDocument]:
        if element.getAttribute("type").lower() not in _JS_TYPES:
            return None
        src = element.getAttribute("src")
        if not src:
            return self._js_parser.parse_source(element_text(element), document.url)

        script_url = resolve_url(document.url, src)
        contents = self._read(script_url) if script_url is not None else None
        if contents is None:
            logger.warning(f"{document.url}: script not found: {src}")
            return None
        return self._js_parser.parse_source(contents, script_url)
