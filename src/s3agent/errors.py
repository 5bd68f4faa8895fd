"""Client-side error definitions for s3agent.

Every failure a caller can observe is exactly one of these kinds. An absent
object is not an error: ``get`` and ``head`` return ``None`` instead.
"""


class StorageError(Exception):
    """Base class for all s3agent errors.

    Attributes:
        message: Human-readable error description.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class TransportError(StorageError):
    """The HTTP exchange itself failed (connection, TLS, timeout).

    Raised by the transport; the agent passes it through uninterpreted.
    """


class OperationFailed(StorageError):
    """The provider answered with a non-2xx status on an operation that
    distinguishes failure from absence.

    Attributes:
        status_code: The HTTP status code.
        status_message: The HTTP reason phrase.
        body: The raw response body text, unmodified.
    """

    def __init__(
        self,
        operation: str,
        key: str,
        status_code: int,
        status_message: str = "",
        body: str = "",
    ) -> None:
        """Initialize the error.

        Args:
            operation: The operation name (e.g. "put").
            key: The object key or listing path the operation targeted.
            status_code: HTTP status code of the response.
            status_message: HTTP reason phrase of the response.
            body: Response body text for diagnostics.
        """
        super().__init__(
            f"Unsuccessful {operation} of {key} got {status_code} {status_message}\n{body}"
        )
        self.operation = operation
        self.key = key
        self.status_code = status_code
        self.status_message = status_message
        self.body = body


class ParseError(StorageError):
    """A success response carried a malformed date, XML document or number."""


class ConfigError(StorageError):
    """The configuration could not be turned into a working agent."""
