"""Field-level validation of decoded request data.

Validation is expressed as a closed set of rules that share one contract,
``await rule.validate(value)``, returning a human-readable message when the
value is rejected and ``None`` otherwise:

- ``Required``: the value must not be empty
- ``Email``: the value must be a well-formed email address
- ``Length``: the value's length must fall within bounds
- ``Predicate``: a custom async check with captured context (a repository,
  a clock, ...)

A ``Field`` pairs a field name with its value and rule list. Rules run in
order and the first message wins. ``validate_fields`` collects the messages
of every field into ``ValidationErrors``.

User input failures are messages; rule failures are not. A rule applied to a
value it cannot handle, or whose collaborator fails, raises
``InternalValidationError`` so the request aborts loudly instead of telling
the client their input was wrong.
"""

from collections.abc import Awaitable, Callable, Sized
from dataclasses import dataclass
from typing import Protocol

from email_validator import EmailNotValidError, validate_email

from pennyworth.core.exceptions import InternalValidationError


class ValidationErrors(dict[str, str]):
    """Mapping of field name to the message of its first failing rule."""

    def __str__(self) -> str:
        """Render as ``field: message; field: message.`` sorted by field."""
        if not self:
            return ""
        return "; ".join(f"{key}: {self[key]}" for key in sorted(self)) + "."


class Rule(Protocol):
    """Contract shared by every validation rule."""

    async def validate(self, value: object) -> str | None:
        """Return a message if the value is invalid, otherwise None."""
        ...


def is_empty(value: object) -> bool:
    """Report whether a value counts as not provided."""
    if value is None:
        return True
    if isinstance(value, Sized):
        return len(value) == 0
    return False


class Required:
    """Reject missing and empty values."""

    message = "cannot be blank"

    async def validate(self, value: object) -> str | None:
        """Fail for None, empty strings and empty collections."""
        if is_empty(value):
            return self.message
        return None


class Email:
    """Require a syntactically valid email address.

    Only the format is checked; no DNS lookups are made. Empty values pass so
    that ``Required`` decides whether the field may be omitted.
    """

    message = "must be a valid email address"

    async def validate(self, value: object) -> str | None:
        """Check the address format."""
        if is_empty(value):
            return None
        if not isinstance(value, str):
            msg = f"email rule cannot validate a value of type {type(value).__name__}"
            raise InternalValidationError(msg)

        try:
            validate_email(value, check_deliverability=False)
        except EmailNotValidError:
            return self.message
        return None


@dataclass(frozen=True)
class Length:
    """Require the length of a value to be within ``[min, max]``.

    A bound of zero means that side is unbounded. Empty values pass.
    """

    min: int = 0
    max: int = 0

    def __post_init__(self) -> None:
        if self.min < 0 or self.max < 0 or (self.max and self.min > self.max):
            msg = f"invalid length bounds: min={self.min}, max={self.max}"
            raise InternalValidationError(msg)

    @property
    def message(self) -> str:
        """The message matching the configured bounds."""
        if self.min == self.max:
            return f"the length must be exactly {self.min}"
        if not self.max:
            return f"the length must be no less than {self.min}"
        if not self.min:
            return f"the length must be no more than {self.max}"
        return f"the length must be between {self.min} and {self.max}"

    async def validate(self, value: object) -> str | None:
        """Check the number of characters or items."""
        if is_empty(value):
            return None
        if not isinstance(value, Sized):
            msg = f"length rule cannot validate a value of type {type(value).__name__}"
            raise InternalValidationError(msg)

        length = len(value)
        if length < self.min or (self.max and length > self.max):
            return self.message
        return None


@dataclass(frozen=True)
class Predicate:
    """Custom rule backed by an async check.

    Args:
        check: Returns True when the value is acceptable. Any context it needs
            is captured by the callable itself.
        message: Reported when ``check`` returns False.
    """

    check: Callable[[object], Awaitable[bool]]
    message: str

    async def validate(self, value: object) -> str | None:
        """Run the check, wrapping its failures as internal errors."""
        try:
            accepted = await self.check(value)
        except InternalValidationError:
            raise
        except Exception as e:
            msg = f"predicate rule failed: {e}"
            raise InternalValidationError(msg, cause=e) from e

        if accepted:
            return None
        return self.message


class Field:
    """A named value and the rules it must satisfy."""

    def __init__(self, name: str, value: object, *rules: Rule) -> None:
        self.name = name
        self.value = value
        self.rules = rules

    async def validate(self) -> str | None:
        """Return the message of the first failing rule, if any."""
        for rule in self.rules:
            try:
                message = await rule.validate(self.value)
            except InternalValidationError:
                raise
            except Exception as e:
                msg = f"rule {type(rule).__name__} failed on field {self.name}: {e}"
                raise InternalValidationError(msg, cause=e) from e

            if message is not None:
                return message
        return None


async def validate_fields(*fields: Field) -> ValidationErrors:
    """Validate each field and collect the failures.

    Args:
        *fields: The fields to check.

    Returns:
        ValidationErrors: Empty when every field is valid.

    Raises:
        InternalValidationError: If a rule could not be evaluated.
    """
    errors = ValidationErrors()
    for field in fields:
        message = await field.validate()
        if message is not None:
            errors[field.name] = message
    return errors
