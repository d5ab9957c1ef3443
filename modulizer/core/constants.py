"""Shared constants for modulizer.

This module contains constants that are used across the analyzer and
the converter to avoid duplication and keep emitted code consistent.
"""

# =============================================================================
# Markup
# =============================================================================

# Top-level elements never inlined as retained markup
ELEMENT_BLACKLIST = frozenset({
    "style",
    "base",
    "link",
    "meta",
    "script",
    "dom-module",
})

# Local variable holding the detached container for retained markup
DOCUMENT_CONTAINER_NAME = "$_documentContainer"

# Accessor / property names used when inlining element templates
TEMPLATE_GETTER_NAME = "template"
TEMPLATE_PROPERTY_NAME = "_template"

# =============================================================================
# Namespaces
# =============================================================================

# Global object whose members are treated as top-level names
GLOBAL_OBJECT_NAME = "window"

# Member name of the constructor-function bridge (`Polymer._polymerFn`)
DEFAULT_CONSTRUCTOR_BRIDGE_MEMBER = "_polymerFn"

# JSDoc tag marking a namespace declaration
NAMESPACE_TAG = "@namespace"

# Factory function used by legacy element definitions
ELEMENT_FACTORY_NAME = "Polymer"

# =============================================================================
# Import aliases
# =============================================================================

# Prefix for an imported member's local alias ($Element)
IMPORT_ALIAS_PREFIX = "$"

# Prefix for a whole-module namespace import ($$polymerElement)
MODULE_ID_PREFIX = "$$"

# =============================================================================
# URLs
# =============================================================================

HTML_EXTENSION = ".html"
JS_EXTENSION = ".js"
