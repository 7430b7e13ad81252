from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from decimal import Decimal

from domain.ledger import CalculationMethod, LineTotals, LineType
from domain.profile import Profile

from .formatting import format_decimal, format_money


@dataclass
class LineSummary:
    date: datetime.date
    line_type: LineType
    quantity: Decimal
    unit_price: Decimal
    totals: LineTotals
    comment: str = ""


@dataclass
class ProfileSummary:
    name: str
    asset_name: str
    currency: str
    calculation_method: CalculationMethod
    lines: list[LineSummary] = field(default_factory=list)

    @property
    def final_totals(self) -> LineTotals:
        if not self.lines:
            return LineTotals.empty()
        return self.lines[-1].totals


def compute_profile_summary(profile: Profile) -> ProfileSummary:
    return ProfileSummary(
        name=profile.name,
        asset_name=profile.asset.name,
        currency=profile.currency,
        calculation_method=profile.calculation_method,
        lines=[
            LineSummary(
                date=line.date,
                line_type=line.type,
                quantity=line.quantity,
                unit_price=line.unit_price,
                totals=line.totals,
                comment=line.comment,
            )
            for line in profile.ordered_lines()
        ],
    )


def format_profile_summary(summary: ProfileSummary) -> str:
    title = f"{summary.name} ({summary.asset_name}, {summary.calculation_method.value})"
    if not summary.lines:
        return f"{title}\n  (no lines)"

    labels = ("Date", "Type", "Quantity", "Unit price", "Holding", "Avg cost", "Total cost")
    rows = [
        (
            line.date.isoformat(),
            line.line_type.value,
            format_decimal(line.quantity),
            format_money(line.unit_price, summary.currency),
            format_decimal(line.totals.quantity),
            format_money(line.totals.average_cost, summary.currency),
            format_money(line.totals.total_cost, summary.currency),
        )
        for line in summary.lines
    ]

    widths = [max(len(label), max(len(row[idx]) for row in rows)) for idx, label in enumerate(labels)]
    header = " ".join(
        f"{label:<{width}}" if idx < 2 else f"{label:>{width}}"
        for idx, (label, width) in enumerate(zip(labels, widths))
    )

    lines = [title, header, "-" * len(header)]
    for row in rows:
        lines.append(
            " ".join(
                f"{cell:<{width}}" if idx < 2 else f"{cell:>{width}}"
                for idx, (cell, width) in enumerate(zip(row, widths))
            )
        )
    lines.append("-" * len(header))

    final = summary.final_totals
    lines.append(
        f"Holding {format_decimal(final.quantity)} {summary.asset_name} "
        f"at {format_money(final.average_cost, summary.currency)} "
        f"(cost basis {format_money(final.total_cost, summary.currency)})"
    )
    return "\n".join(lines)


def render_profile_summary(summary: ProfileSummary) -> None:
    print(format_profile_summary(summary))
