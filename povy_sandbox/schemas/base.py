"""
Shared base for request/response schemas.

The public API uses camelCase field names (accountNumber, remainingBalance)
while the Python side stays snake_case. Monetary values are Decimals inside
the service and plain JSON numbers on the wire.
"""

from decimal import Decimal
from typing import Annotated

from pydantic import BaseModel, ConfigDict, PlainSerializer
from pydantic.alias_generators import to_camel

_CENT = Decimal("0.01")


def _json_number(value: Decimal) -> int | float:
    """
    Render a money Decimal as a JSON number (6000, not "6000.00").

    Amounts are capped at money.MAX_CENTS, so a fractional value has at most
    15 significant digits and the float's shortest repr is the exact
    decimal (9999999999999.99 stays 9999999999999.99).
    """
    quantized = value.quantize(_CENT)
    if quantized == quantized.to_integral_value():
        return int(quantized)
    return float(quantized)


# Decimal in Python, JSON number on the wire
Money = Annotated[Decimal, PlainSerializer(_json_number, return_type=int | float)]


class ApiModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def stringify(value):
    """Accept numeric JSON values for fields the API compares as strings."""
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value
