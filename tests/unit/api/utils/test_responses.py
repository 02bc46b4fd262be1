"""Unit tests for API response utilities."""

from dataclasses import dataclass
from uuid import UUID

import orjson
import pytest
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pennyworth.api.utils.responses import ORJSONResponse, encode_json, json_default
from pennyworth.core.money import Amount


class Account(BaseModel):
    """Sample model with an Amount."""

    id: UUID
    balance: Amount


@pytest.mark.unit
class TestJsonDefault:
    """Test suite for json_default."""

    def test_amount(self) -> None:
        """Test Amounts become their pence."""
        assert json_default(Amount(150)) == 150

    def test_model(self) -> None:
        """Test models are dumped in JSON mode."""
        account = Account(id=UUID(int=1), balance=Amount(5))

        assert json_default(account) == {
            "id": "00000000-0000-0000-0000-000000000001",
            "balance": 5,
        }

    def test_unknown_type(self) -> None:
        """Test other values are rejected."""
        with pytest.raises(TypeError, match="not JSON serializable"):
            json_default(object())


@pytest.mark.unit
class TestEncodeJson:
    """Test suite for encode_json."""

    def test_sorts_keys(self) -> None:
        """Test output key order is stable."""
        assert encode_json({"b": 1, "a": [Amount(-1)]}) == b'{"a":[-1],"b":1}'

    def test_amount_is_a_bare_integer(self) -> None:
        """Test an Amount never goes out as its dataclass fields."""
        assert encode_json(Amount(-150)) == b"-150"
        assert encode_json({"balance": Amount(-150)}) == b'{"balance":-150}'

    def test_other_dataclasses_are_rejected(self) -> None:
        """Test dataclasses without a wire form are not dumped field by field."""

        @dataclass
        class Point:
            x: int

        with pytest.raises(orjson.JSONEncodeError):
            encode_json({"point": Point(1)})

    def test_failure(self) -> None:
        """Test unencodable content raises orjson's error."""
        with pytest.raises(orjson.JSONEncodeError):
            encode_json({"x": {1, 2}})


@pytest.mark.unit
class TestORJSONResponse:
    """Test suite for ORJSONResponse class."""

    def test_initialization(self) -> None:
        """Test ORJSONResponse initializes correctly with proper media type."""
        response = ORJSONResponse(content={"test": "data"})

        assert response.media_type == "application/json"
        assert isinstance(response, JSONResponse)

    def test_render(self) -> None:
        """Test content is rendered with encode_json."""
        response = ORJSONResponse(content={"z": Amount(1), "a": None})

        assert response.body == b'{"a":null,"z":1}'
