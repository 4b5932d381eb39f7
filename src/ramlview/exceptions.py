"""ramlview exception hierarchy.

Only the fatal tier is modelled here: a RAML document that cannot be loaded
or serialised. Everything the builder meets after that point degrades to a
default value instead of raising.
"""


class RamlViewError(Exception):
    """Base exception for all ramlview errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class RamlLoadError(RamlViewError):
    """The RAML file could not be read, parsed or expanded."""

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        if path:
            message = f"{path}: {message}"
        super().__init__(message)


class InvalidRamlError(RamlViewError):
    """The API root cannot produce a JSON representation."""

    pass
