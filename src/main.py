from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from config import config
from db.db import init_db
from db.repositories import ProfileRepository
from domain.ledger import MAX_PRECISION, Asset, CalculationMethod
from domain.profile import Profile
from importers.line_csv import import_lines, load_lines
from utils.profile_summary import compute_profile_summary, render_profile_summary

logger = logging.getLogger(__name__)


def run(
    csv_path: Path,
    *,
    name: str,
    method: CalculationMethod | str,
    asset: Asset,
    currency: str,
    db_file: str | None = None,
) -> Profile:
    session = init_db(db_file)
    repository = ProfileRepository(session)

    profile = Profile.new(name=name, asset=asset, currency=currency, calculation_method=method)
    rows = load_lines(csv_path)
    import_lines(profile, rows)

    repository.save(profile)
    logger.info("Stored profile %s (%s) with %d lines", profile.name, profile.id, len(profile.lines))

    render_profile_summary(compute_profile_summary(profile))
    return profile


def main(argv: Sequence[str] | None = None) -> None:
    settings = config()
    logging.basicConfig(level=settings.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    parser = argparse.ArgumentParser(description="Import ledger lines and compute the running cost basis.")
    parser.add_argument("--csv", type=Path, required=True)
    parser.add_argument("--name", default="Default")
    parser.add_argument(
        "--method",
        type=str.upper,
        choices=[method.value for method in CalculationMethod],
        default=CalculationMethod.WEIGHTED_AVERAGE.value,
    )
    parser.add_argument("--asset", default="BTC")
    parser.add_argument(
        "--precision",
        type=int,
        choices=range(0, MAX_PRECISION + 1),
        metavar=f"{{0..{MAX_PRECISION}}}",
        default=settings.default_precision,
    )
    parser.add_argument("--currency", default="USD")
    parser.add_argument("--db", default=None, help="SQLite file; defaults to the configured db_file")
    args = parser.parse_args(argv)
    try:
        asset = Asset(name=args.asset, precision=args.precision)
    except ValueError as err:
        parser.error(f"invalid asset: {err}")
    run(
        args.csv,
        name=args.name,
        method=args.method,
        asset=asset,
        currency=args.currency,
        db_file=args.db,
    )


if __name__ == "__main__":
    main()
