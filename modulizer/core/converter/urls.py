"""URL and identifier derivation for converted modules."""

import posixpath
import re

from ..constants import HTML_EXTENSION, IMPORT_ALIAS_PREFIX, JS_EXTENSION, MODULE_ID_PREFIX

_DASH_LOWER_RE = re.compile(r"-[a-z]")
_NON_IDENTIFIER_RE = re.compile(r"[^\w$]")


def module_url(document_url: str) -> str:
    """Module URL for an HTML document: `a/b.html` -> `a/b.js`."""
    if document_url.endswith(HTML_EXTENSION):
        return document_url[: -len(HTML_EXTENSION)] + JS_EXTENSION
    return document_url


def import_specifier(target_url: str, from_url: str) -> str:
    """Module specifier for importing `target_url` from the module at `from_url`."""
    base = posixpath.dirname(from_url) or "."
    specifier = posixpath.relpath(target_url, base)
    if not specifier.startswith(".") and not specifier.startswith("/"):
        specifier = "./" + specifier
    return specifier


def import_alias(name: str) -> str:
    """Local alias for an imported member: `Element` -> `$Element`."""
    return IMPORT_ALIAS_PREFIX + name


def module_id(url: str) -> str:
    """Local name for a namespace import: `a/polymer-element.js` -> `$$polymerElement`."""
    base_name = posixpath.basename(url)
    stem = base_name[: base_name.rfind(".")] if "." in base_name else base_name
    camel = _DASH_LOWER_RE.sub(lambda m: m.group(0)[1].upper(), stem)
    return MODULE_ID_PREFIX + _NON_IDENTIFIER_RE.sub("_", camel)
