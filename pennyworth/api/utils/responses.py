"""JSON encoding for HTTP responses using orjson.

Every JSON body the service writes goes through ``encode_json`` so that keys
are sorted and domain values have a single wire form:

- ``Amount`` is encoded as its bare pence count, not as a dataclass object
- Pydantic models are dumped in JSON mode
"""

from typing import Any

import orjson
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from pennyworth.core.money import Amount


def json_default(value: object) -> object:
    """Convert values orjson does not know natively.

    Args:
        value: The value orjson failed to serialize.

    Returns:
        object: A JSON-compatible replacement.

    Raises:
        TypeError: If the value has no JSON form.
    """
    if isinstance(value, Amount):
        return value.pence
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    msg = f"Type is not JSON serializable: {type(value).__name__}"
    raise TypeError(msg)


def encode_json(content: object) -> bytes:
    """Serialize content to JSON with sorted keys.

    Raises:
        orjson.JSONEncodeError: If the content cannot be encoded.
    """
    return orjson.dumps(
        content,
        default=json_default,
        option=orjson.OPT_SORT_KEYS | orjson.OPT_PASSTHROUGH_DATACLASS,
    )


class ORJSONResponse(JSONResponse):
    """FastAPI response class rendering its content with ``encode_json``.

    Attributes:
        media_type: The media type for the response.
    """

    media_type = "application/json"

    def render(self, content: Any) -> bytes:  # noqa: ANN401 - accepts any JSON-serializable content
        """Render the content as JSON using orjson.

        Args:
            content: The content to serialize to JSON.

        Returns:
            bytes: The JSON-encoded bytes.
        """
        return encode_json(content)
