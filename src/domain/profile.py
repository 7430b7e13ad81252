from __future__ import annotations

import datetime
import logging
from decimal import Decimal
from typing import Iterable
from uuid import uuid4

from .calculation import CalculationStrategy, parse_calculation_method, strategy_for
from .events import DomainEvent, LineCreated, LineDeleted, LineUpdated, ProfileCreated, ProfileUpdated
from .ledger import BITCOIN, Asset, CalculationMethod, Line, LineId, LineTotals, LineType, ProfileId

logger = logging.getLogger(__name__)

MAX_NAME_LENGTH = 30


class ProfileError(Exception):
    pass


class LineNotFoundError(ProfileError):
    def __init__(self, line_id: LineId, profile_id: ProfileId) -> None:
        super().__init__(f"Line {line_id} does not belong to profile {profile_id}")
        self.line_id = line_id
        self.profile_id = profile_id


class LineMoveError(ProfileError):
    pass


def _validate_name(name: str) -> str:
    name = name.strip()
    if not 1 <= len(name) <= MAX_NAME_LENGTH:
        raise ValueError(f"Profile name must be between 1 and {MAX_NAME_LENGTH} characters")
    return name


def _build_line(
    date: datetime.date,
    display_order: int,
    line_type: LineType | str,
    quantity: Decimal,
    unit_price: Decimal,
    comment: str,
) -> Line:
    return Line(
        date=date,
        display_order=display_order,
        type=LineType(line_type),
        quantity=quantity,
        unit_price=unit_price,
        comment=comment,
    )


class Profile:
    """Aggregate root owning the ledger lines of a single holding.

    Every structural change re-sorts the whole ledger by (date, display_order)
    and recomputes the totals of every line with the active strategy. Changes
    are recorded as pending domain events until a repository persists them.
    """

    def __init__(
        self,
        *,
        profile_id: ProfileId | None = None,
        name: str,
        asset: Asset = BITCOIN,
        visible: bool = True,
        icon: str = "",
        currency: str,
        calculation_method: CalculationMethod | str,
        lines: Iterable[Line] = (),
    ) -> None:
        self.id = profile_id or ProfileId(uuid4())
        self._name = _validate_name(name)
        self._asset = asset
        self._visible = visible
        self._icon = icon
        self._currency = currency
        self._calculation_method = parse_calculation_method(calculation_method)
        self._strategy: CalculationStrategy = strategy_for(self._calculation_method, asset)
        self._lines: dict[LineId, Line] = {line.id: line for line in lines}
        self._events: list[DomainEvent] = []

    @classmethod
    def new(
        cls,
        *,
        name: str,
        currency: str,
        calculation_method: CalculationMethod | str,
        asset: Asset = BITCOIN,
        visible: bool = True,
        icon: str = "",
    ) -> Profile:
        profile = cls(
            name=name,
            asset=asset,
            visible=visible,
            icon=icon,
            currency=currency,
            calculation_method=calculation_method,
        )
        profile._events.append(ProfileCreated(profile_id=profile.id))
        return profile

    @property
    def name(self) -> str:
        return self._name

    @property
    def asset(self) -> Asset:
        return self._asset

    @property
    def visible(self) -> bool:
        return self._visible

    @property
    def icon(self) -> str:
        return self._icon

    @property
    def currency(self) -> str:
        return self._currency

    @property
    def calculation_method(self) -> CalculationMethod:
        return self._calculation_method

    @calculation_method.setter
    def calculation_method(self, method: CalculationMethod | str) -> None:
        self.change_calculation_method(method)

    @property
    def lines(self) -> list[Line]:
        return list(self._lines.values())

    @property
    def events(self) -> list[DomainEvent]:
        return list(self._events)

    def ordered_lines(self) -> list[Line]:
        return sorted(self._lines.values(), key=lambda line: line.sort_key)

    def clear_events(self) -> None:
        self._events.clear()

    def add_line(
        self,
        date: datetime.date,
        display_order: int,
        line_type: LineType | str,
        quantity: Decimal,
        unit_price: Decimal,
        comment: str = "",
    ) -> Line:
        line = _build_line(date, display_order, line_type, quantity, unit_price, comment)

        self._lines[line.id] = line

        self._recalculate(self._lines.values())

        self._events.append(LineCreated(profile_id=self.id, line=line))
        return line

    def remove_line(self, line: Line) -> None:
        self._require_line(line)
        del self._lines[line.id]

        self._recalculate(self._lines.values())

        self._events.append(LineDeleted(profile_id=self.id, line_id=line.id))

    def edit_line(
        self,
        line: Line,
        *,
        date: datetime.date,
        line_type: LineType | str,
        quantity: Decimal,
        unit_price: Decimal,
        comment: str = "",
    ) -> Line:
        """Replace `line` with a new one, keeping its position within the day.

        The replacement is validated before anything changes, so a rejected
        edit leaves the ledger and the pending events untouched.
        """
        self._require_line(line)
        replacement = _build_line(date, line.display_order, line_type, quantity, unit_price, comment)

        del self._lines[line.id]
        self._lines[replacement.id] = replacement
        self._events.append(LineDeleted(profile_id=self.id, line_id=line.id))

        self._recalculate(self._lines.values())

        self._events.append(LineCreated(profile_id=self.id, line=replacement))
        return replacement

    def move_line_up(self, line: Line) -> None:
        self._swap_with_neighbour(line, offset=-1)

    def move_line_down(self, line: Line) -> None:
        self._swap_with_neighbour(line, offset=1)

    def change_line_totals(self, line: Line, totals: LineTotals) -> None:
        if line.totals == totals:
            return
        line.totals = totals
        self._events.append(LineUpdated(profile_id=self.id, line=line))

    def change_calculation_method(self, method: CalculationMethod | str) -> None:
        """Swap the active strategy.

        Existing totals are left untouched; call `recalculate` to restate the
        history under the new method.
        """
        parsed = parse_calculation_method(method)
        if parsed == self._calculation_method:
            return
        self._calculation_method = parsed
        self._strategy = strategy_for(parsed, self._asset)
        self._events.append(ProfileUpdated(profile_id=self.id))

    def change_asset(self, asset: Asset) -> None:
        if asset == self._asset:
            return
        self._asset = asset
        self._strategy = strategy_for(self._calculation_method, asset)
        self._events.append(ProfileUpdated(profile_id=self.id))
        self.recalculate()

    def rename(self, name: str) -> None:
        name = _validate_name(name)
        if name == self._name:
            return
        self._name = name
        self._events.append(ProfileUpdated(profile_id=self.id))

    def change_icon(self, icon: str) -> None:
        if icon == self._icon:
            return
        self._icon = icon
        self._events.append(ProfileUpdated(profile_id=self.id))

    def change_visibility(self, visible: bool) -> None:
        if visible == self._visible:
            return
        self._visible = visible
        self._events.append(ProfileUpdated(profile_id=self.id))

    def recalculate(self) -> None:
        self._recalculate(self._lines.values())

    def _recalculate(self, lines: Iterable[Line]) -> None:
        ordered = sorted(lines, key=lambda line: line.sort_key)
        snapshots = self._strategy.recalculate(ordered)
        for line, totals in zip(ordered, snapshots, strict=True):
            self.change_line_totals(line, totals)
        logger.debug(
            "Recalculated %d lines of profile %s using %s",
            len(ordered),
            self.id,
            self._calculation_method,
        )

    def _swap_with_neighbour(self, line: Line, *, offset: int) -> None:
        self._require_line(line)
        same_day = sorted(
            (other for other in self._lines.values() if other.date == line.date),
            key=lambda other: other.display_order,
        )
        index = next(idx for idx, other in enumerate(same_day) if other.id == line.id)
        target = index + offset
        if not 0 <= target < len(same_day):
            direction = "up" if offset < 0 else "down"
            raise LineMoveError(f"Line {line.id} cannot be moved {direction} within {line.date.isoformat()}")

        orders = [other.display_order for other in same_day]
        if len(set(orders)) != len(orders):
            orders = list(range(len(same_day)))

        same_day[index], same_day[target] = same_day[target], same_day[index]
        for order, other in zip(orders, same_day, strict=True):
            if other.display_order != order:
                other.display_order = order
                self._events.append(LineUpdated(profile_id=self.id, line=other))

        self.recalculate()

    def _require_line(self, line: Line) -> None:
        if line.id not in self._lines:
            raise LineNotFoundError(line.id, self.id)
