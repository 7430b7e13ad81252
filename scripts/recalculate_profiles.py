# flake8: noqa E402
# Run via: uv run scripts/recalculate_profiles.py --db cost_basis.db [--method FIFO]
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Sequence

PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from db.db import init_db
from db.repositories import ProfileRepository
from domain.ledger import CalculationMethod
from utils.profile_summary import compute_profile_summary, render_profile_summary


def run(db_file: str | None, *, method: str | None) -> None:
    repository = ProfileRepository(init_db(db_file))
    profiles = repository.list()
    if not profiles:
        print("No profiles stored.")
        return

    for profile in profiles:
        if method is not None:
            profile.change_calculation_method(method)
        profile.recalculate()
        repository.save(profile)
        render_profile_summary(compute_profile_summary(profile))
        print()


def main(argv: Sequence[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    parser = argparse.ArgumentParser(description="Recompute stored profiles, optionally switching their method.")
    parser.add_argument("--db", default=None)
    parser.add_argument("--method", type=str.upper, choices=[method.value for method in CalculationMethod])
    args = parser.parse_args(argv)
    run(args.db, method=args.method)


if __name__ == "__main__":
    main()
