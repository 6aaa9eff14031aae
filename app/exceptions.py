"""Domain exceptions mapped to HTTP responses in ``app.main``."""


class ReportingError(Exception):
    """Base class for errors raised while building a report."""


class InvalidFilterError(ReportingError):
    """Caller-supplied criteria could not be interpreted (HTTP 400)."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidOptionKindError(InvalidFilterError):
    """The requested option list does not exist."""

    def __init__(self, kind: str) -> None:
        super().__init__("Tipo no válido")
        self.kind = kind
