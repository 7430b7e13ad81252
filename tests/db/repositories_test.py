from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from sqlalchemy.orm import Session

from db import models
from db.repositories import ProfileRepository
from domain.calculation import UnknownCalculationMethodError
from domain.ledger import Asset, CalculationMethod, Line, LineTotals, LineType
from domain.profile import Profile


@pytest.fixture()
def repo(test_session: Session) -> ProfileRepository:
    return ProfileRepository(test_session)


def _sample_profile(name: str = "Cold storage") -> Profile:
    profile = Profile.new(
        name=name,
        asset=Asset(name="ETH", precision=6),
        currency="EUR",
        calculation_method=CalculationMethod.FIFO,
        icon="ethereum",
    )
    profile.add_line(date(2024, 1, 2), 0, LineType.BUY, Decimal("1.5"), Decimal("2000"), "first")
    profile.add_line(date(2024, 1, 5), 0, LineType.BUY, Decimal("0.5"), Decimal("2400"), "second")
    profile.add_line(date(2024, 1, 9), 0, LineType.SELL, Decimal("1"), Decimal("2600"), "sell")
    return profile


def test_save_and_get_profile(repo: ProfileRepository) -> None:
    profile = _sample_profile()

    repo.save(profile)
    fetched = repo.get(profile.id)

    assert fetched is not None
    assert fetched.id == profile.id
    assert fetched.name == profile.name
    assert fetched.asset == Asset(name="ETH", precision=6)
    assert fetched.currency == "EUR"
    assert fetched.icon == "ethereum"
    assert fetched.calculation_method == CalculationMethod.FIFO
    assert fetched.events == []
    assert [line.id for line in fetched.ordered_lines()] == [line.id for line in profile.ordered_lines()]
    assert [line.totals for line in fetched.ordered_lines()] == [line.totals for line in profile.ordered_lines()]
    assert fetched.ordered_lines()[-1].totals == LineTotals(
        average_cost=Decimal(2200), total_cost=Decimal(2200), quantity=Decimal(1)
    )


def test_save_clears_pending_events(repo: ProfileRepository) -> None:
    profile = _sample_profile()
    assert profile.events

    repo.save(profile)

    assert profile.events == []


def test_get_missing_profile_returns_none(repo: ProfileRepository) -> None:
    assert repo.get(uuid4()) is None


def test_removed_lines_are_deleted(repo: ProfileRepository, test_session: Session) -> None:
    profile = _sample_profile()
    repo.save(profile)

    first = profile.ordered_lines()[0]
    profile.remove_line(first)
    repo.save(profile)

    stored_ids = {line_id for (line_id,) in test_session.query(models.LineOrm.id).all()}
    assert first.id not in stored_ids
    assert len(stored_ids) == 2

    fetched = repo.get(profile.id)
    assert fetched is not None
    assert fetched.ordered_lines()[-1].totals == LineTotals(
        average_cost=Decimal(0), total_cost=Decimal(0), quantity=Decimal(0)
    )


def test_lines_added_and_removed_before_save_are_not_stored(
    repo: ProfileRepository, test_session: Session
) -> None:
    profile = _sample_profile()
    transient = profile.add_line(date(2024, 1, 3), 0, LineType.BUY, Decimal(1), Decimal(1))
    profile.remove_line(transient)

    repo.save(profile)

    assert test_session.get(models.LineOrm, transient.id) is None
    assert test_session.query(models.LineOrm).count() == 3


def test_recalculated_totals_are_persisted(repo: ProfileRepository) -> None:
    profile = _sample_profile()
    repo.save(profile)

    loaded = repo.get(profile.id)
    assert loaded is not None
    loaded.change_calculation_method(CalculationMethod.WEIGHTED_AVERAGE)
    loaded.recalculate()
    repo.save(loaded)

    reloaded = repo.get(profile.id)
    assert reloaded is not None
    assert reloaded.calculation_method == CalculationMethod.WEIGHTED_AVERAGE
    assert reloaded.ordered_lines()[-1].totals == LineTotals(
        average_cost=Decimal(2100), total_cost=Decimal(2100), quantity=Decimal(1)
    )


def test_list_profiles_sorted_by_name(repo: ProfileRepository) -> None:
    repo.save(_sample_profile("Savings"))
    repo.save(_sample_profile("Arbitrage"))

    names = [profile.name for profile in repo.list()]

    assert names == ["Arbitrage", "Savings"]


def test_delete_profile_removes_lines(repo: ProfileRepository, test_session: Session) -> None:
    profile = _sample_profile()
    repo.save(profile)

    repo.delete(profile)

    assert repo.get(profile.id) is None
    assert test_session.query(models.LineOrm).count() == 0


def test_unknown_stored_method_is_fatal(repo: ProfileRepository, test_session: Session) -> None:
    profile = _sample_profile()
    repo.save(profile)

    orm_profile = test_session.get(models.ProfileOrm, profile.id)
    assert orm_profile is not None
    orm_profile.calculation_method = "LIFO"
    test_session.commit()

    with pytest.raises(UnknownCalculationMethodError):
        repo.get(profile.id)


def test_save_writes_lines_of_profile_built_without_events(repo: ProfileRepository) -> None:
    line = Line(
        date=date(2024, 3, 1),
        type=LineType.SETUP,
        quantity=Decimal(2),
        unit_price=Decimal(30000),
        totals=LineTotals(average_cost=Decimal(30000), total_cost=Decimal(60000), quantity=Decimal(2)),
    )
    profile = Profile(name="Migrated", currency="USD", calculation_method=CalculationMethod.FIFO, lines=[line])
    profile.recalculate()
    assert profile.events == []

    repo.save(profile)

    fetched = repo.get(profile.id)
    assert fetched is not None
    assert fetched.lines == [line]
