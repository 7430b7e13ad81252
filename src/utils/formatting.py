from __future__ import annotations

from decimal import Decimal


def format_decimal(value: Decimal) -> str:
    quantized = value.normalize()
    # Avoid scientific notation for integers.
    if quantized == quantized.to_integral():
        return f"{quantized:.0f}"
    return format(quantized, "f")


def format_money(value: Decimal, currency: str, places: int = 2) -> str:
    amount = value.quantize(Decimal(1).scaleb(-places))
    return f"{amount:,.{places}f} {currency}"
