"""PostgreSQL storage for customers."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError

from pennyworth.core.exceptions import RepositoryError
from pennyworth.domain.customer import Customer
from pennyworth.infrastructure.database.models import CustomerModel

if TYPE_CHECKING:
    from loguru import Logger

    from pennyworth.infrastructure.database.session import Database


class SqlCustomerRepository:
    """Customer repository backed by the ``customers`` table.

    Each operation runs in its own session, committed when it returns.

    Args:
        database: The database to read from and write to.
        logger: Logger for storage events.
    """

    def __init__(self, database: Database, logger: Logger) -> None:
        self._database = database
        self._logger = logger

    async def add(self, customer: Customer) -> None:
        """Insert a new customer.

        Raises:
            RepositoryError: If the row cannot be written.
        """
        row = CustomerModel(
            uuid=customer.id,
            username=customer.username,
            password=customer.password_hash,
        )
        try:
            async with self._database.session() as session:
                session.add(row)
        except SQLAlchemyError as e:
            msg = f"unable to create customer: {e}"
            raise RepositoryError(msg, cause=e) from e

        self._logger.info(
            "Created customer {customer_id}", customer_id=str(customer.id)
        )

    async def find_by_username(self, username: str) -> Customer | None:
        """Return the customer with the given username, or None.

        Raises:
            RepositoryError: If the lookup fails.
        """
        stmt = select(CustomerModel).where(CustomerModel.username == username)
        try:
            async with self._database.session() as session:
                result = await session.execute(stmt)
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            msg = f"unable to fetch customer: {e}"
            raise RepositoryError(msg, cause=e) from e

        if row is None:
            return None
        return Customer.restore(row.uuid, row.username, row.password)
