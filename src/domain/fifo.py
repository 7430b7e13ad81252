from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from .ledger import Asset, CalculationMethod, Line, LineTotals, LineType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CostLot:
    quantity: Decimal
    unit_price: Decimal


class FifoStrategy:
    """Track acquisitions as lots and consume the oldest ones on every sell.

    Totals after each line only account for lots that are still open, so the
    cost basis follows the prices of the most recent purchases.
    """

    method = CalculationMethod.FIFO

    def __init__(self, asset: Asset) -> None:
        self._asset = asset

    def recalculate(self, ordered_lines: Iterable[Line]) -> list[LineTotals]:
        lots: deque[CostLot] = deque()
        snapshots: list[LineTotals] = []

        for line in ordered_lines:
            self._apply(line, lots)
            snapshots.append(self._totals(lots))

        return snapshots

    def open_lots(self, ordered_lines: Iterable[Line]) -> list[CostLot]:
        """Lots left unconsumed once every line has been applied."""
        lots: deque[CostLot] = deque()
        for line in ordered_lines:
            self._apply(line, lots)
        return list(lots)

    def _apply(self, line: Line, lots: deque[CostLot]) -> None:
        if line.type == LineType.BUY:
            lots.append(CostLot(quantity=line.quantity, unit_price=line.unit_price))
        elif line.type == LineType.SELL:
            self._consume(line, lots)
        else:
            lots.clear()
            lots.append(CostLot(quantity=line.quantity, unit_price=line.unit_price))

    def _consume(self, line: Line, lots: deque[CostLot]) -> None:
        remaining = line.quantity
        while remaining > 0 and lots:
            lot = lots.popleft()
            if lot.quantity <= remaining:
                remaining -= lot.quantity
            else:
                lots.appendleft(CostLot(quantity=lot.quantity - remaining, unit_price=lot.unit_price))
                remaining = Decimal(0)

        if remaining > 0:
            logger.warning(
                "Sell of %s on %s exceeds open lots; %s left unmatched",
                line.quantity,
                line.date,
                remaining,
            )

    def _totals(self, lots: deque[CostLot]) -> LineTotals:
        if not lots:
            return LineTotals.empty()

        total_cost = sum((self._asset.round(lot.quantity * lot.unit_price) for lot in lots), start=Decimal(0))
        quantity = sum((lot.quantity for lot in lots), start=Decimal(0))
        avg = self._asset.round(total_cost / quantity) if quantity > 0 else Decimal(0)
        return LineTotals(average_cost=avg, total_cost=total_cost, quantity=quantity)
