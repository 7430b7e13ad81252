from __future__ import annotations

import csv
import datetime
import logging
from collections import defaultdict
from dataclasses import dataclass, replace
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Iterable

from domain.ledger import Line, LineType
from domain.profile import Profile

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = {"date", "type", "quantity", "unit_price"}


@dataclass(frozen=True)
class LineRow:
    date: datetime.date
    display_order: int
    line_type: LineType
    quantity: Decimal
    unit_price: Decimal
    comment: str = ""


def load_lines(csv_path: Path) -> list[LineRow]:
    """Load ledger lines from CSV.

    Each row should contain: date,type,quantity,unit_price[,display_order][,comment]
    Dates are ISO formatted, type is one of buy/sell/setup (any case). Explicit
    display_order values are reserved first; rows without one take the lowest
    free order on their date, in file order.
    """

    with csv_path.open(newline="") as f:
        reader = csv.DictReader(f)
        if reader.fieldnames is None:
            raise ValueError(f"Lines CSV {csv_path} is empty or missing headers")

        missing = REQUIRED_COLUMNS - set(reader.fieldnames)
        if missing:
            raise ValueError(f"Lines CSV {csv_path} missing required columns: {', '.join(sorted(missing))}")

        taken: dict[datetime.date, set[int]] = defaultdict(set)
        parsed: list[tuple[LineRow, bool]] = []
        for row_number, row in enumerate(reader, start=2):
            line_date = _parse_date(row["date"], row_number)
            display_order = _parse_display_order(row.get("display_order"), row_number)
            if display_order is not None:
                if display_order in taken[line_date]:
                    raise ValueError(
                        f"Row {row_number}: display_order {display_order} already used on {line_date.isoformat()}"
                    )
                taken[line_date].add(display_order)

            parsed.append(
                (
                    LineRow(
                        date=line_date,
                        display_order=display_order or 0,
                        line_type=_parse_type(row["type"], row_number),
                        quantity=_parse_decimal(row["quantity"], "quantity", row_number),
                        unit_price=_parse_decimal(row["unit_price"], "unit_price", row_number),
                        comment=(row.get("comment") or "").strip(),
                    ),
                    display_order is None,
                )
            )

    rows = [_assign_free_order(row, taken) if needs_order else row for row, needs_order in parsed]
    logger.info("Loaded %d lines from %s", len(rows), csv_path)
    return rows


def import_lines(profile: Profile, rows: Iterable[LineRow]) -> list[Line]:
    return [
        profile.add_line(row.date, row.display_order, row.line_type, row.quantity, row.unit_price, row.comment)
        for row in rows
    ]


def _parse_date(raw: str | None, row_number: int) -> datetime.date:
    if not raw or not raw.strip():
        raise ValueError(f"Row {row_number}: date is required")
    try:
        return datetime.date.fromisoformat(raw.strip())
    except ValueError as err:
        raise ValueError(f"Row {row_number}: invalid date {raw!r}") from err


def _parse_type(raw: str | None, row_number: int) -> LineType:
    try:
        return LineType((raw or "").strip().upper())
    except ValueError as err:
        raise ValueError(f"Row {row_number}: unknown line type {raw!r}") from err


def _parse_decimal(raw: str | None, column: str, row_number: int) -> Decimal:
    try:
        return Decimal((raw or "").strip())
    except InvalidOperation as err:
        raise ValueError(f"Row {row_number}: invalid {column} {raw!r}") from err


def _parse_display_order(raw: str | None, row_number: int) -> int | None:
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as err:
        raise ValueError(f"Row {row_number}: invalid display_order {raw!r}") from err


def _assign_free_order(row: LineRow, taken: dict[datetime.date, set[int]]) -> LineRow:
    used = taken[row.date]
    order = 0
    while order in used:
        order += 1
    used.add(order)
    return replace(row, display_order=order)
