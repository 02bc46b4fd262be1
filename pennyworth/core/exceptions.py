"""Exception hierarchy for the Pennyworth service.

Errors are grouped by how the HTTP layer treats them:

- **DecodeError**: a malformed request body or JSON value, answered with 400
- **InternalValidationError**: a validation rule that could not be evaluated,
  a programming or infrastructure fault rather than bad user input
- **PasswordGenerationError** / **RepositoryError**: infrastructure failures,
  logged and answered with 500
- **ServerError**: the HTTP listener failed or did not shut down cleanly

``Panic`` is not a ``PennyworthError``. It carries an arbitrary payload out of
a request handler and is always caught by the panic-recovery boundary.
"""


class PennyworthError(Exception):
    """Base exception class for all Pennyworth application exceptions.

    Args:
        message: Human-readable error message
        cause: The original exception that caused this error
    """

    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        self.message = message
        self.cause = cause

        super().__init__(message)
        if cause:
            self.__cause__ = cause

    def __repr__(self) -> str:
        """Return a detailed representation of the exception.

        Returns:
            str: The class name and message, plus the cause type when present
        """
        cause_str = f", cause={type(self.cause).__name__}" if self.cause else ""
        return f"{self.__class__.__name__}(message='{self.message}'{cause_str})"


class DecodeError(PennyworthError):
    """Raised when a JSON payload cannot be decoded into the expected shape."""


class InternalValidationError(PennyworthError):
    """Raised when a validation rule itself fails.

    This signals a defect such as a rule applied to a value of the wrong type,
    or a failing collaborator used by a rule. It must never be reported to the
    client as a field validation message.
    """


class PasswordGenerationError(PennyworthError):
    """Raised when a password hash cannot be generated."""


class RepositoryError(PennyworthError):
    """Raised when the customer store fails to read or write."""


class ServerError(PennyworthError):
    """Raised when the HTTP listener fails while serving or shutting down."""


class ShutdownTimeoutError(ServerError):
    """Raised when in-flight requests were abandoned at the shutdown timeout.

    Args:
        abandoned: Number of requests still running when the timeout expired
    """

    def __init__(self, abandoned: int) -> None:
        self.abandoned = abandoned
        super().__init__(
            f"graceful shutdown timed out with {abandoned} request(s) in flight"
        )


class Panic(Exception):  # noqa: N818 - mirrors the recovery vocabulary
    """Abort the current request with an arbitrary payload.

    Args:
        value: Anything describing the failure, usually a string or exception
    """

    def __init__(self, value: object) -> None:
        self.value = value
        super().__init__(value)
