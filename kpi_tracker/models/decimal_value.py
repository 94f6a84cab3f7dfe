"""
Decimal value object.

Accepts "," or "." as fractional separator and stores a fixed-point value
with two fractional digits.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Union

from pydantic import GetCoreSchemaHandler
from pydantic_core import core_schema

from kpi_tracker.core.exceptions import InvalidDecimalFormat

_TWO_PLACES = Decimal("0.01")
_NUMERIC_RE = re.compile(r"[+-]?([0-9]+(\.[0-9]*)?|\.[0-9]+)([eE][+-]?[0-9]+)?", re.ASCII)


@dataclass(frozen=True, init=False)
class DecimalValue:
    """
    Normalized fixed-point number.

    ``value`` holds the canonical storage form ("1234.50"); ``format()``
    renders the display form with a comma ("1234,50").
    """

    value: str

    def __init__(self, raw: Union[str, int, float, Decimal]):
        object.__setattr__(self, "value", _normalize(raw))

    def __str__(self) -> str:
        return self.format()

    @classmethod
    def from_string(cls, raw: str) -> DecimalValue:
        return cls(raw)

    @classmethod
    def __get_pydantic_core_schema__(
        cls, source_type: Any, handler: GetCoreSchemaHandler
    ) -> core_schema.CoreSchema:
        return core_schema.no_info_plain_validator_function(
            cls,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda decimal_value: decimal_value.value
            ),
        )

    def to_decimal(self) -> Decimal:
        return Decimal(self.value)

    def to_float(self) -> float:
        return float(self.value)

    def format(self) -> str:
        return self.value.replace(".", ",")


def _normalize(raw: Union[str, int, float, Decimal]) -> str:
    if isinstance(raw, bool):
        raise InvalidDecimalFormat(f'Ungültiger Dezimalwert "{raw}"', details={"value": raw})
    if isinstance(raw, DecimalValue):
        return raw.value

    text = str(raw).strip().replace(",", ".")
    if isinstance(raw, str) and not _NUMERIC_RE.fullmatch(text):
        raise InvalidDecimalFormat(f'Ungültiger Dezimalwert "{raw}"', details={"value": raw})
    try:
        amount = Decimal(text)
    except InvalidOperation:
        raise InvalidDecimalFormat(
            f'Ungültiger Dezimalwert "{raw}"', details={"value": raw}
        ) from None

    if not amount.is_finite():
        raise InvalidDecimalFormat(f'Ungültiger Dezimalwert "{raw}"', details={"value": raw})

    try:
        quantized = amount.quantize(_TWO_PLACES, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        raise InvalidDecimalFormat(
            f'Dezimalwert "{raw}" ist zu groß', details={"value": raw}
        ) from None
    if quantized == 0:
        quantized = abs(quantized)
    return f"{quantized:f}"
