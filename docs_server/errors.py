"""Exception types for the docs server."""


class DocsServerError(Exception):
    """Base class for docs server errors."""


class RouteConfigError(DocsServerError):
    """The route table is malformed. Raised at load time, never per request."""


class DocumentNotFoundError(DocsServerError):
    """No tracked route serves the requested document key."""

    def __init__(self, key: str):
        super().__init__(f"No tracked document for '{key}'")
        self.key = key
