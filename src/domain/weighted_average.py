from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable

from .ledger import Asset, CalculationMethod, Line, LineTotals, LineType

logger = logging.getLogger(__name__)


class WeightedAverageStrategy:
    """Blend every acquisition into a single running average cost.

    Buys add their rounded cost to the pool, sells remove a share of the pool
    proportional to the quantity sold, and setups replace the running state.
    """

    method = CalculationMethod.WEIGHTED_AVERAGE

    def __init__(self, asset: Asset) -> None:
        self._asset = asset

    def recalculate(self, ordered_lines: Iterable[Line]) -> list[LineTotals]:
        total_cost = Decimal(0)
        quantity = Decimal(0)
        avg = Decimal(0)
        snapshots: list[LineTotals] = []

        for line in ordered_lines:
            if line.type == LineType.BUY:
                total_cost += self._asset.round(line.quantity * line.unit_price)
                quantity += line.quantity
                avg = self._average(total_cost, quantity)
            elif line.type == LineType.SELL:
                total_cost, quantity = self._sell(line, total_cost, quantity)
                avg = self._average(total_cost, quantity)
            else:
                quantity = line.quantity
                avg = line.unit_price
                total_cost = self._asset.round(quantity * avg)

            snapshots.append(LineTotals(average_cost=avg, total_cost=total_cost, quantity=quantity))

        return snapshots

    def _sell(self, line: Line, total_cost: Decimal, quantity: Decimal) -> tuple[Decimal, Decimal]:
        if quantity <= 0:
            logger.warning("Sell of %s on %s ignored: nothing held", line.quantity, line.date)
            return total_cost, quantity

        sold = line.quantity
        if sold > quantity:
            logger.warning(
                "Sell of %s on %s exceeds holding of %s; clamping to the holding",
                sold,
                line.date,
                quantity,
            )
            sold = quantity

        proportion = sold / quantity
        total_cost -= self._asset.round(total_cost * proportion)
        return total_cost, quantity - sold

    def _average(self, total_cost: Decimal, quantity: Decimal) -> Decimal:
        if quantity > 0:
            return self._asset.round(total_cost / quantity)
        return Decimal(0)
