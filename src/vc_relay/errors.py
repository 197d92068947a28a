"""Error types surfaced to HTTP callers."""


class RelayError(Exception):
    """Base class for errors reported back to the caller."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidRequestError(RelayError):
    """The caller sent something we cannot act on."""


class ExternalApiError(RelayError):
    """The VC Client API rejected a request or could not be reached."""

    def __init__(self, status_code: int, body: str) -> None:
        super().__init__(body)
        self.status_code = status_code
        self.body = body
