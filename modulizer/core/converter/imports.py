"""Import synthesis.

Turns a module's recorded references (plus its HTML-import edges) into
import declarations at the top of the program.
"""

import logging
from typing import AbstractSet, List, Optional, Sequence

from .models import ModuleRecord, RewriteCursor
from .program import Program, Statement
from .urls import import_alias, import_specifier, module_id

logger = logging.getLogger(__name__)


def import_declarations(
    target_url: str, from_url: str, names: Optional[AbstractSet[str]] = None
) -> List[str]:
    """Import declarations for one dependency.

    - "*" referenced -> `import * as $$mod from '...';`
    - named members -> `import { a as $a } from '...';` (sorted)
    - nothing referenced -> `import '...';` so the dependency still runs
    """
    specifier = import_specifier(target_url, from_url)
    names = names or set()
    has_namespace_reference = "*" in names
    named = sorted(name for name in names if name != "*")

    declarations: List[str] = []
    if has_namespace_reference:
        declarations.append(f"import * as {module_id(target_url)} from '{specifier}';")
    if named:
        specifiers = ", ".join(f"{name} as {import_alias(name)}" for name in named)
        declarations.append(f"import {{ {specifiers} }} from '{specifier}';")
    elif not has_namespace_reference:
        declarations.append(f"import '{specifier}';")
    return declarations


def synthesize_imports(
    program: Program,
    cursor: RewriteCursor,
    record: ModuleRecord,
    import_urls: Sequence[str],
) -> int:
    """Insert import declarations at the top of `program`.

    Explicit HTML-import edges come first, in document order, followed by
    modules that were only referenced implicitly.

    Args:
        import_urls: Module URLs of the document's HTML-import edges

    Returns:
        Number of declarations inserted
    """
    explicit: List[str] = []
    for url in import_urls:
        if url != record.url and url not in explicit:
            explicit.append(url)

    declarations: List[str] = []
    for url in explicit:
        declarations.extend(
            import_declarations(url, record.url, record.imported_references.get(url))
        )
    for url, names in record.imported_references.items():
        if url not in explicit and names:
            logger.debug(f"{record.url}: implicit import of {url}")
            declarations.extend(import_declarations(url, record.url, names))

    program.insert(0, [Statement(text) for text in declarations])
    cursor.advance(len(declarations))
    return len(declarations)
