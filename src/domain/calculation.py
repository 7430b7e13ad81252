from __future__ import annotations

from typing import Iterable, Protocol

from .fifo import FifoStrategy
from .ledger import Asset, CalculationMethod, Line, LineTotals
from .weighted_average import WeightedAverageStrategy


class CalculationStrategy(Protocol):
    """Map a chronologically ordered sequence of lines to one snapshot per line."""

    method: CalculationMethod

    def recalculate(self, ordered_lines: Iterable[Line]) -> list[LineTotals]: ...


class UnknownCalculationMethodError(Exception):
    def __init__(self, method: object) -> None:
        super().__init__(f"Unknown calculation method: {method!r}")
        self.method = method


_STRATEGIES: dict[CalculationMethod, type[WeightedAverageStrategy] | type[FifoStrategy]] = {
    CalculationMethod.WEIGHTED_AVERAGE: WeightedAverageStrategy,
    CalculationMethod.FIFO: FifoStrategy,
}


def parse_calculation_method(method: CalculationMethod | str) -> CalculationMethod:
    try:
        parsed = CalculationMethod(method)
    except ValueError as err:
        raise UnknownCalculationMethodError(method) from err
    if parsed not in _STRATEGIES:
        raise UnknownCalculationMethodError(method)
    return parsed


def strategy_for(method: CalculationMethod | str, asset: Asset) -> CalculationStrategy:
    return _STRATEGIES[parse_calculation_method(method)](asset)


__all__ = [
    "CalculationStrategy",
    "UnknownCalculationMethodError",
    "parse_calculation_method",
    "strategy_for",
]
