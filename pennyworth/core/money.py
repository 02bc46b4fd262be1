"""Fixed-point monetary amounts held as an integer number of pence.

An ``Amount`` is an immutable value type for GBP. One ``Amount`` unit is a
single penny and one pound is exactly 100 pence. The value is bounded by the
signed 64-bit integer domain so that it maps losslessly onto a ``BIGINT``
column and onto a JSON integer.

Amounts are deliberately arithmetic free: they are created from pence, from a
float number of pounds or from JSON, compared, rounded to whole pounds and
formatted for humans (``-£1,234.50``).

The JSON wire form is the bare integer number of pence, never a decimal
string or an object.
"""

import math
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Final, Self

import orjson
from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from pennyworth.core.exceptions import DecodeError

PENCE_IN_POUND: Final[int] = 100
MAX_PENCE: Final[int] = 2**63 - 1
MIN_PENCE: Final[int] = -(2**63)


@dataclass(frozen=True, order=True, slots=True)
class Amount:
    """A signed amount of money in pence.

    Args:
        pence: Number of minor currency units. Must fit in a signed 64-bit
            integer.

    Raises:
        TypeError: If pence is not an integer.
        OverflowError: If pence is outside the signed 64-bit range.
    """

    pence: int = 0

    def __post_init__(self) -> None:
        if isinstance(self.pence, bool) or not isinstance(self.pence, int):
            msg = f"pence must be an int, got {type(self.pence).__name__}"
            raise TypeError(msg)
        if not MIN_PENCE <= self.pence <= MAX_PENCE:
            msg = f"amount of {self.pence} pence is out of range"
            raise OverflowError(msg)

    @classmethod
    def from_pence(cls, pence: int) -> Self:
        """Create an Amount from an integer number of pence."""
        return cls(pence)

    @classmethod
    def from_pounds(cls, pounds: float) -> Self:
        """Create an Amount from a float number of pounds.

        The product ``pounds * 100`` is truncated toward zero rather than
        rounded, so ``0.001`` becomes zero pence and ``-0.01`` becomes -1.

        Args:
            pounds: Value in pounds.

        Returns:
            Self: The truncated Amount.

        Raises:
            ValueError: If pounds is NaN.
            OverflowError: If the value does not fit in an Amount.
        """
        product = float(pounds) * PENCE_IN_POUND
        if math.isnan(product):
            msg = "cannot create an amount from NaN"
            raise ValueError(msg)
        if math.isinf(product):
            msg = "cannot create an amount from an infinite value"
            raise OverflowError(msg)
        return cls(int(product))

    @classmethod
    def zero(cls) -> Self:
        """Create an Amount of zero pence."""
        return cls(0)

    @classmethod
    def from_json(cls, data: bytes | str) -> Self:
        """Decode a bare JSON integer of pence.

        Args:
            data: The JSON document.

        Returns:
            Self: The decoded Amount.

        Raises:
            DecodeError: If the document is not a JSON integer in range.
        """
        try:
            value = orjson.loads(data)
        except orjson.JSONDecodeError as e:
            msg = f"unable to decode amount: {e}"
            raise DecodeError(msg, cause=e) from e

        if isinstance(value, bool) or not isinstance(value, int):
            msg = f"unable to decode amount: expected an integer, got {value!r}"
            raise DecodeError(msg)

        try:
            return cls.from_pence(value)
        except OverflowError as e:
            msg = f"unable to decode amount: {e}"
            raise DecodeError(msg, cause=e) from e

    def to_json(self) -> bytes:
        """Encode the Amount as a bare JSON integer of pence."""
        return orjson.dumps(self.pence)

    def pounds(self) -> float:
        """Return the Amount as a float number of pounds.

        The whole pounds and the remaining pence are converted separately
        using truncating division so the fractional part stays exact even
        when the whole part is beyond float precision.
        """
        sign = -1 if self.pence < 0 else 1
        whole, remainder = divmod(abs(self.pence), PENCE_IN_POUND)
        return float(sign * whole) + (sign * remainder) / PENCE_IN_POUND

    def ceil(self) -> "Amount":
        """Round up to the nearest pound."""
        return Amount.from_pounds(float(math.ceil(self.pounds())))

    def floor(self) -> "Amount":
        """Round down to the nearest pound."""
        return Amount.from_pounds(float(math.floor(self.pounds())))

    def round(self) -> "Amount":
        """Round to the nearest pound, halves away from zero."""
        rounded = Decimal(self.pounds()).to_integral_value(rounding=ROUND_HALF_UP)
        return Amount.from_pounds(float(rounded))

    def trunc(self) -> "Amount":
        """Drop the pence, keeping whole pounds."""
        return Amount.from_pounds(float(math.trunc(self.pounds())))

    def __str__(self) -> str:
        """Format as a human readable value, e.g. ``-£1,234.50``."""
        sign = ""
        pence = self.pence
        if pence < 0:
            pence = -pence
            sign = "-"

        whole, remainder = divmod(pence, PENCE_IN_POUND)
        return f"{sign}£{whole:,}.{remainder:02d}"

    @classmethod
    def __get_pydantic_core_schema__(
        cls,
        _source_type: Any,  # noqa: ANN401 - required by the pydantic protocol
        _handler: GetCoreSchemaHandler,
    ) -> core_schema.CoreSchema:
        """Validate from a strict integer of pence and serialise back to it."""
        from_int = core_schema.no_info_after_validator_function(
            cls.from_pence,
            core_schema.int_schema(strict=True, ge=MIN_PENCE, le=MAX_PENCE),
        )
        return core_schema.json_or_python_schema(
            json_schema=from_int,
            python_schema=core_schema.union_schema(
                [core_schema.is_instance_schema(cls), from_int]
            ),
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda amount: amount.pence,
                return_schema=core_schema.int_schema(),
            ),
        )


PENNY: Final[Amount] = Amount(1)
POUND: Final[Amount] = Amount(PENCE_IN_POUND)
MAX_AMOUNT: Final[Amount] = Amount(MAX_PENCE)
MIN_AMOUNT: Final[Amount] = Amount(MIN_PENCE)


def maximum(a: Amount, b: Amount) -> Amount:
    """Return the larger of two Amounts."""
    if a > b:
        return a
    return b


def minimum(a: Amount, b: Amount) -> Amount:
    """Return the smaller of two Amounts."""
    if a < b:
        return a
    return b
