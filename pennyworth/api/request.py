"""Inbound request wrapper used by service functions."""

from typing import Any

from pydantic import TypeAdapter, ValidationError
from starlette.requests import Request as StarletteRequest

from pennyworth.core.exceptions import DecodeError


class Request:
    """An HTTP request as seen by a service function.

    Args:
        request: The underlying Starlette request.
    """

    def __init__(self, request: StarletteRequest) -> None:
        self.raw = request

    @property
    def method(self) -> str:
        """The HTTP method."""
        return self.raw.method

    @property
    def path(self) -> str:
        """The request path."""
        return self.raw.url.path

    async def decode[T](self, target: type[T]) -> T:
        """Decode the JSON body into ``target``.

        Args:
            target: A pydantic model or any type pydantic can validate.

        Returns:
            T: The decoded value.

        Raises:
            DecodeError: If the body is not valid JSON or does not match
                ``target``.
        """
        body = await self.raw.body()
        adapter: TypeAdapter[Any] = TypeAdapter(target)
        try:
            return adapter.validate_json(body)
        except ValidationError as e:
            msg = f"unable to decode request: {e}"
            raise DecodeError(msg, cause=e) from e
