"""Unit tests for the Responder."""

import orjson
import pytest

from pennyworth.api.responder import Responder
from pennyworth.core.money import Amount
from pennyworth.core.validation import ValidationErrors
from tests.support import LogCapture


@pytest.fixture
def responder(log_capture: LogCapture) -> Responder:
    """Provide a responder logging to the capture."""
    return Responder(log_capture.logger)


@pytest.mark.unit
class TestResponder:
    """Test suite for Responder."""

    def test_defaults_to_empty_ok(self, responder: Responder) -> None:
        """Test a responder nobody wrote to is an empty 200."""
        response = responder.to_response()

        assert response.status_code == 200
        assert response.body == b""

    def test_write_header(self, responder: Responder) -> None:
        """Test a status without a body."""
        responder.write_header(201)

        response = responder.to_response()

        assert response.status_code == 201
        assert response.body == b""
        assert "content-type" not in response.headers

    def test_respond_encodes_sorted_json(self, responder: Responder) -> None:
        """Test data is encoded with sorted keys and a JSON content type."""
        responder.respond(200, {"b": 1, "a": {"d": 2, "c": 3}})

        response = responder.to_response()

        assert response.status_code == 200
        assert response.headers["content-type"] == "application/json"
        assert response.body == b'{"a":{"c":3,"d":2},"b":1}'

    def test_respond_encodes_amounts_as_pence(self, responder: Responder) -> None:
        """Test Amounts use their integer wire form."""
        responder.respond(200, {"balance": Amount(-150)})

        assert responder.body == b'{"balance":-150}'

    def test_respond_without_data(self, responder: Responder) -> None:
        """Test None leaves the body empty but sets the content type."""
        responder.respond(202)

        response = responder.to_response()

        assert response.status_code == 202
        assert response.body == b""
        assert response.headers["content-type"] == "application/json"

    def test_respond_encoding_failure(
        self, responder: Responder, log_capture: LogCapture
    ) -> None:
        """Test unencodable data becomes an empty 500 and is logged."""
        responder.respond(200, {"value": object()})

        response = responder.to_response()

        assert response.status_code == 500
        assert response.body == b""
        assert log_capture.messages("ERROR") == ["unable to encode response"]

    def test_respond_error(
        self, responder: Responder, log_capture: LogCapture
    ) -> None:
        """Test errors are logged and wrapped in the error shape."""
        responder.respond_error(409, ValueError("already done"))

        response = responder.to_response()

        assert response.status_code == 409
        assert orjson.loads(response.body) == {
            "error": {"message": "already done"}
        }
        [record] = log_capture.records
        assert record["level"].name == "ERROR"
        assert record["message"] == "responding application error: already done"
        assert record["extra"]["status_code"] == 409

    def test_respond_validation_failed(self, responder: Responder) -> None:
        """Test field errors are reported with a 400."""
        errors = ValidationErrors(
            username="cannot be blank", password="cannot be blank"
        )

        responder.respond_validation_failed(errors)

        response = responder.to_response()
        assert response.status_code == 400
        assert response.body == (
            b'{"error":{"message":"request contains invalid fields",'
            b'"validation_errors":{"password":"cannot be blank",'
            b'"username":"cannot be blank"}}}'
        )

    def test_set_header(self, responder: Responder) -> None:
        """Test custom headers reach the response."""
        responder.set_header("Location", "/customers/1")
        responder.write_header(201)

        assert responder.to_response().headers["location"] == "/customers/1"

    def test_reset(self, responder: Responder) -> None:
        """Test reset discards status, headers and body."""
        responder.set_header("X-Test", "1")
        responder.respond(418, {"teapot": True})

        responder.reset()

        response = responder.to_response()
        assert response.status_code == 200
        assert response.body == b""
        assert "x-test" not in response.headers
