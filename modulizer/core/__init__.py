# Lazy imports so `from modulizer.core import ConversionSettings` does not
# pull in tree-sitter and html5lib until a converter or analyzer is used.

__all__ = [
    # Conversion
    "ModuleConverter",
    "ReferenceIndex",
    "ModuleRecord",
    "ConversionError",
    "convert_document",
    # Analysis
    "HtmlAnalyzer",
    "JavaScriptParser",
    # Configuration
    "ConversionSettings",
    "load_settings",
]

_IMPORT_MAP = {
    "ModuleConverter": ".converter",
    "ReferenceIndex": ".converter",
    "ModuleRecord": ".converter",
    "ConversionError": ".converter",
    "convert_document": ".converter",
    "HtmlAnalyzer": ".ast_parser",
    "JavaScriptParser": ".ast_parser",
    "ConversionSettings": ".settings",
    "load_settings": ".settings",
}


def __getattr__(name):
    if name in _IMPORT_MAP:
        import importlib
        module = importlib.import_module(_IMPORT_MAP[name], __package__)
        return getattr(module, name)
    raise AttributeError(f"module 'modulizer.core' has no attribute {name}")
