"""Exceptions raised by the batch runner."""


class NoValidUrlsError(RuntimeError):
    """Raised when there is nothing to audit."""


class LighthouseError(RuntimeError):
    """Raised when the Lighthouse engine fails for a URL.

    Args:
        message: Human-readable failure description
        code: Lighthouse runtime error code (e.g. ``ERRORED_DOCUMENT_REQUEST``), if known
    """

    def __init__(self, message: str, code: str | None = None):
        super().__init__(message)
        self.code = code
