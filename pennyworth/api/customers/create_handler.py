"""``POST /customers``: register a new customer."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field as ModelField
from starlette import status
from starlette.concurrency import run_in_threadpool

from pennyworth.api.handler import Handler
from pennyworth.core.exceptions import (
    DecodeError,
    PasswordGenerationError,
    RepositoryError,
)
from pennyworth.core.validation import (
    Email,
    Field,
    Length,
    Predicate,
    Required,
    validate_fields,
)
from pennyworth.domain.customer import DEFAULT_HASH_ROUNDS, Customer

if TYPE_CHECKING:
    from pennyworth.api.request import Request
    from pennyworth.api.responder import Responder
    from pennyworth.domain.customer import CustomerRepository

PATH = "/customers"

USERNAME_TAKEN_MESSAGE = "customers already exists with the given username"
CREATE_FAILED_MESSAGE = "unable to create customer"

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 256


class CreateCustomerRequest(BaseModel):
    """Body of a customer registration request."""

    username: str = ModelField(default="", description="Email address")
    password: str = ModelField(default="", description="Plain text password")


def new_create_handler(
    repository: CustomerRepository, hash_rounds: int = DEFAULT_HASH_ROUNDS
) -> Handler:
    """Build the customer registration handler.

    Args:
        repository: Where customers are looked up and stored.
        hash_rounds: bcrypt cost factor for new passwords.

    Returns:
        Handler: The ``POST /customers`` handler.
    """

    async def username_is_free(username: object) -> bool:
        return await repository.find_by_username(str(username)) is None

    async def create(responder: Responder, request: Request) -> None:
        try:
            body = await request.decode(CreateCustomerRequest)
        except DecodeError as e:
            responder.respond_error(status.HTTP_400_BAD_REQUEST, e)
            return

        errors = await validate_fields(
            Field(
                "username",
                body.username,
                Required(),
                Email(),
                Predicate(username_is_free, USERNAME_TAKEN_MESSAGE),
            ),
            Field(
                "password",
                body.password,
                Required(),
                Length(PASSWORD_MIN_LENGTH, PASSWORD_MAX_LENGTH),
            ),
        )
        if errors:
            responder.respond_validation_failed(errors)
            return

        try:
            customer = await run_in_threadpool(
                Customer.new, body.username, body.password, hash_rounds
            )
            await repository.add(customer)
        except (PasswordGenerationError, RepositoryError) as e:
            responder.logger.opt(exception=e).error(
                "customer creation failed: {error}", error=str(e)
            )
            responder.respond_error(
                status.HTTP_500_INTERNAL_SERVER_ERROR, CREATE_FAILED_MESSAGE
            )
            return

        responder.write_header(status.HTTP_201_CREATED)

    return Handler(path=PATH, methods=("POST",), func=create)
