"""
Money value object.

All amounts are scalar decimals in a single currency unit, held at the
precision of the smallest currency unit (``settings.currency_decimal_places``).
"""

import functools
from decimal import Decimal, InvalidOperation, ROUND_CEILING, ROUND_HALF_UP
from typing import Any, Union

from pydantic_core import core_schema

from common.core.config import settings

MoneyLike = Union["Money", Decimal, int, str, float]


def _minor_unit() -> Decimal:
    return Decimal(1).scaleb(-settings.currency_decimal_places)


@functools.total_ordering
class Money:
    """Decimal-safe amount, quantized to the smallest currency unit."""

    __slots__ = ("_amount",)

    def __init__(self, amount: MoneyLike = 0, rounding: str = ROUND_HALF_UP):
        if isinstance(amount, Money):
            value = amount._amount
        elif isinstance(amount, bool):
            raise TypeError("Money amount cannot be a boolean")
        elif isinstance(amount, float):
            # Go through str() so 0.1 stays 0.1
            value = Decimal(str(amount))
        else:
            try:
                value = Decimal(amount)
            except (InvalidOperation, TypeError) as e:
                raise ValueError(f"Invalid money amount: {amount!r}") from e

        if not value.is_finite():
            raise ValueError(f"Invalid money amount: {amount!r}")

        self._amount = value.quantize(_minor_unit(), rounding=rounding)

    @classmethod
    def zero(cls) -> "Money":
        return cls(0)

    @classmethod
    def extend(cls, rate: Union[Decimal, int, str], quantity: int) -> "Money":
        """
        Price ``quantity`` units at a per-unit ``rate``.

        Rates keep their full precision (a search can cost 0.005); only the
        extended amount is rounded to the smallest currency unit.
        """
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            raise TypeError("Quantity must be an integer")
        return cls(Decimal(str(rate)) * quantity)

    @property
    def amount(self) -> Decimal:
        return self._amount

    def is_zero(self) -> bool:
        return self._amount == 0

    def is_negative(self) -> bool:
        return self._amount < 0

    def percentage(self, percent: MoneyLike, rounding: str = ROUND_CEILING) -> "Money":
        """
        Take ``percent`` % of this amount.

        Rounds up to the smallest currency unit by default so a discount never
        shortchanges the payer.
        """
        raw = self._amount * Decimal(str(percent)) / Decimal(100)
        return Money(raw, rounding=rounding)

    def __add__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self._amount + other._amount)

    def __sub__(self, other: "Money") -> "Money":
        if not isinstance(other, Money):
            return NotImplemented
        return Money(self._amount - other._amount)

    def __mul__(self, quantity: int) -> "Money":
        if isinstance(quantity, bool) or not isinstance(quantity, int):
            return NotImplemented
        return Money(self._amount * quantity)

    __rmul__ = __mul__

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, Money):
            return self._amount == other._amount
        if isinstance(other, (int, Decimal)) and not isinstance(other, bool):
            return self._amount == other
        return NotImplemented

    def __lt__(self, other: "Money") -> bool:
        if isinstance(other, Money):
            return self._amount < other._amount
        if isinstance(other, (int, Decimal)) and not isinstance(other, bool):
            return self._amount < other
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._amount)

    def __str__(self) -> str:
        return str(self._amount)

    def __repr__(self) -> str:
        return f"Money('{self._amount}')"

    @classmethod
    def sum(cls, amounts) -> "Money":
        total = cls.zero()
        for amount in amounts:
            total = total + amount
        return total

    # Pydantic integration

    @classmethod
    def _validate(cls, value: Any) -> "Money":
        if isinstance(value, Money):
            return value
        try:
            return cls(value)
        except TypeError as e:
            raise ValueError(str(e)) from e

    @classmethod
    def __get_pydantic_core_schema__(cls, source_type, handler):
        return core_schema.no_info_plain_validator_function(
            cls._validate,
            serialization=core_schema.plain_serializer_function_ser_schema(
                lambda money: str(money.amount), when_used="json"
            ),
        )

    @classmethod
    def __get_pydantic_json_schema__(cls, schema, handler):
        return {"type": "string", "format": "decimal", "examples": ["1140.00"]}
