"""Outbound side of the handler contract.

A service function never builds a response itself. It tells the
``Responder`` what the outcome is and the endpoint turns the responder into
a Starlette ``Response`` once the function returns. Nothing reaches the wire
before that point, so a late failure (an unencodable body, a panic) can still
replace the outcome.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import orjson
from starlette import status as http_status
from starlette.responses import Response

from pennyworth.api.schemas.errors import ErrorDetail, ErrorResponse
from pennyworth.api.utils.responses import encode_json

if TYPE_CHECKING:
    from collections.abc import Mapping

    from loguru import Logger

JSON_CONTENT_TYPE = "application/json"
INVALID_FIELDS_MESSAGE = "request contains invalid fields"


class Responder:
    """Collects the status, headers and body of one response.

    Args:
        logger: Logger for encoding failures and application errors.
    """

    def __init__(self, logger: Logger) -> None:
        self.logger = logger
        self.status_code = http_status.HTTP_200_OK
        self.headers: dict[str, str] = {}
        self.body = b""

    def write_header(self, status_code: int) -> None:
        """Set the status code and leave the body empty."""
        self.status_code = status_code
        self.body = b""

    def set_header(self, name: str, value: str) -> None:
        """Set a response header."""
        self.headers[name] = value

    def respond(self, status_code: int, data: object = None) -> None:
        """Respond with JSON.

        Args:
            status_code: HTTP status of the response.
            data: Content to encode. ``None`` leaves the body empty.
        """
        self.status_code = status_code
        self.headers["Content-Type"] = JSON_CONTENT_TYPE
        self.body = b""
        if data is None:
            return

        try:
            self.body = encode_json(data)
        except orjson.JSONEncodeError as e:
            self.logger.opt(exception=e).error(
                "unable to encode response", status_code=status_code
            )
            self.reset()
            self.status_code = http_status.HTTP_500_INTERNAL_SERVER_ERROR

    def respond_error(self, status_code: int, err: BaseException | str) -> None:
        """Log an application error and respond with its message."""
        self.logger.error(
            "responding application error: {error}",
            error=str(err),
            status_code=status_code,
        )
        body = ErrorResponse(error=ErrorDetail(message=str(err)))
        self.respond(status_code, body.to_content())

    def respond_validation_failed(self, errors: Mapping[str, str]) -> None:
        """Respond 400 with the failing fields and their messages."""
        body = ErrorResponse(
            error=ErrorDetail(
                message=INVALID_FIELDS_MESSAGE, validation_errors=dict(errors)
            )
        )
        self.respond(http_status.HTTP_400_BAD_REQUEST, body.to_content())

    def reset(self) -> None:
        """Discard everything written so far."""
        self.status_code = http_status.HTTP_200_OK
        self.headers.clear()
        self.body = b""

    def to_response(self) -> Response:
        """Build the Starlette response for the collected outcome."""
        return Response(
            content=self.body, status_code=self.status_code, headers=self.headers
        )
