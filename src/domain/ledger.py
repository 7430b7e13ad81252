from __future__ import annotations

import datetime
from decimal import ROUND_HALF_EVEN, Decimal
from enum import StrEnum
from typing import NewType
from uuid import UUID, uuid4

from pydantic import BaseModel, ConfigDict, Field, model_validator

ProfileId = NewType("ProfileId", UUID)
LineId = NewType("LineId", UUID)

MAX_PRECISION = 8


class LineType(StrEnum):
    BUY = "BUY"
    SELL = "SELL"
    SETUP = "SETUP"


class CalculationMethod(StrEnum):
    WEIGHTED_AVERAGE = "WEIGHTED_AVERAGE"
    FIFO = "FIFO"


class Asset(BaseModel):
    """Name and decimal precision of the tracked holding.

    The precision drives rounding of every monetary and quantity product the
    strategies compute. Rounding is always ROUND_HALF_EVEN.
    """

    model_config = ConfigDict(frozen=True)

    name: str
    precision: int

    @model_validator(mode="after")
    def _validate_fields(self) -> Asset:
        if not self.name:
            raise ValueError("Asset.name must be non-empty")
        if not 0 <= self.precision <= MAX_PRECISION:
            raise ValueError(f"Asset.precision must be between 0 and {MAX_PRECISION}")
        return self

    def round(self, value: Decimal) -> Decimal:
        return value.quantize(Decimal(1).scaleb(-self.precision), rounding=ROUND_HALF_EVEN)


BITCOIN = Asset(name="BTC", precision=8)


class LineTotals(BaseModel):
    model_config = ConfigDict(frozen=True)

    average_cost: Decimal = Decimal(0)
    total_cost: Decimal = Decimal(0)
    quantity: Decimal = Decimal(0)

    @classmethod
    def empty(cls) -> LineTotals:
        return cls()

    @property
    def is_empty(self) -> bool:
        return self == LineTotals.empty()


class Line(BaseModel):
    """A single entry of a profile's ledger.

    For BUY and SELL lines `quantity` is the traded amount and `unit_price` the
    trade price. For SETUP lines `quantity` is the new absolute holding and
    `unit_price` the asserted average cost.
    """

    id: LineId = LineId(Field(default_factory=uuid4))
    date: datetime.date
    display_order: int = 0
    type: LineType
    quantity: Decimal
    unit_price: Decimal
    comment: str = ""
    totals: LineTotals = Field(default_factory=LineTotals.empty)

    @property
    def sort_key(self) -> tuple[datetime.date, int]:
        return self.date, self.display_order
