"""The customer entity and its storage contract."""

import uuid
from dataclasses import dataclass, field
from typing import Protocol, Self

import bcrypt

from pennyworth.core.exceptions import PasswordGenerationError

DEFAULT_HASH_ROUNDS = 14

# bcrypt only reads the first 72 bytes of its input
BCRYPT_MAX_PASSWORD_BYTES = 72


def _password_bytes(password: str) -> bytes:
    return password.encode("utf-8")[:BCRYPT_MAX_PASSWORD_BYTES]


@dataclass(frozen=True)
class Customer:
    """The main user of the application.

    Use ``Customer.new`` to register a customer from a plain text password and
    ``Customer.restore`` to rebuild one from stored credentials.
    """

    username: str
    password_hash: str = field(repr=False)
    id: uuid.UUID = field(default_factory=uuid.uuid4)

    @classmethod
    def new(
        cls, username: str, password: str, rounds: int = DEFAULT_HASH_ROUNDS
    ) -> Self:
        """Create a customer with a fresh id and a bcrypt password hash.

        Args:
            username: The customer's email address.
            password: Plain text password.
            rounds: bcrypt cost factor.

        Returns:
            Self: The new customer.

        Raises:
            PasswordGenerationError: If the password cannot be hashed.
        """
        try:
            hashed = bcrypt.hashpw(_password_bytes(password), bcrypt.gensalt(rounds))
        except (ValueError, TypeError) as e:
            msg = "unable to create customer: password generation failed"
            raise PasswordGenerationError(msg, cause=e) from e

        return cls(username=username, password_hash=hashed.decode("utf-8"))

    @classmethod
    def restore(cls, id: uuid.UUID, username: str, password_hash: str) -> Self:  # noqa: A002
        """Rebuild a customer from stored credentials without rehashing."""
        return cls(username=username, password_hash=password_hash, id=id)

    def has_password(self, password: str) -> bool:
        """Report whether the given plain text password matches the hash."""
        try:
            return bcrypt.checkpw(
                _password_bytes(password), self.password_hash.encode("utf-8")
            )
        except ValueError:
            return False


class CustomerRepository(Protocol):
    """Storage for customers."""

    async def add(self, customer: Customer) -> None:
        """Add a new customer."""
        ...

    async def find_by_username(self, username: str) -> Customer | None:
        """Return the customer with the given username, or None."""
        ...
