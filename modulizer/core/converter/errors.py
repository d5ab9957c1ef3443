"""Converter exceptions.

Raised inside one document's conversion and caught at that document's
boundary by ModuleConverter, so a failure never spreads to siblings.
"""

from typing import Sequence


class ConversionError(Exception):
    """A document could not be converted."""

    def __init__(self, url: str, message: str):
        super().__init__(f"{url}: {message}")
        self.url = url
        self.message = message


class MultipleScriptsError(ConversionError):
    """The document embeds more than one script."""

    def __init__(self, url: str, count: int):
        super().__init__(url, f"multiple scripts ({count}) in one document are not supported")
        self.count = count


class NamespaceResolutionError(ConversionError):
    """A namespace assignment's declaring statement cannot be located."""

    def __init__(self, url: str, namespace_name: str):
        super().__init__(url, f"can't find associated node for namespace {namespace_name}")
        self.namespace_name = namespace_name


class ImportCycleError(ConversionError):
    """An HTML import edge leads back to a document still being converted."""

    def __init__(self, url: str, chain: Sequence[str]):
        super().__init__(url, "import cycle: " + " -> ".join(chain))
        self.chain = list(chain)
