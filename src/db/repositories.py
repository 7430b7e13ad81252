from __future__ import annotations

import logging
from uuid import UUID

from sqlalchemy.orm import Session

from db import models
from domain.ledger import Asset, Line, LineId, LineTotals, LineType, ProfileId
from domain.profile import Profile

logger = logging.getLogger(__name__)


class ProfileRepository:
    """Persist profiles together with every line and its computed totals.

    `save` writes the profile row and brings the stored lines in line with
    `profile.lines` (insert, update, delete) in a single commit, then clears
    the pending events on the aggregate.
    """

    def __init__(self, session: Session) -> None:
        self._session = session

    def save(self, profile: Profile) -> None:
        orm_profile = self._session.get(models.ProfileOrm, profile.id)
        if orm_profile is None:
            orm_profile = models.ProfileOrm(id=profile.id)
            self._session.add(orm_profile)

        orm_profile.name = profile.name
        orm_profile.asset_name = profile.asset.name
        orm_profile.asset_precision = profile.asset.precision
        orm_profile.visible = profile.visible
        orm_profile.icon = profile.icon
        orm_profile.currency = profile.currency
        orm_profile.calculation_method = profile.calculation_method.value

        orm_lines = {orm_line.id: orm_line for orm_line in orm_profile.lines}
        lines = {line.id: line for line in profile.lines}

        for line_id, orm_line in orm_lines.items():
            if line_id not in lines:
                orm_profile.lines.remove(orm_line)

        for line_id, line in lines.items():
            orm_line = orm_lines.get(line_id)
            if orm_line is None:
                orm_line = models.LineOrm(id=line_id)
                orm_profile.lines.append(orm_line)
            self._write_line(orm_line, line)

        self._session.commit()
        logger.debug("Saved profile %s with %d lines (%d pending events)", profile.id, len(lines), len(profile.events))
        profile.clear_events()

    def get(self, profile_id: UUID) -> Profile | None:
        orm_profile = self._session.get(models.ProfileOrm, profile_id)
        if orm_profile is None:
            return None
        return self._to_domain(orm_profile)

    def list(self) -> list[Profile]:
        orm_profiles = (
            self._session.query(models.ProfileOrm).order_by(models.ProfileOrm.name.asc()).all()
        )
        return [self._to_domain(orm_profile) for orm_profile in orm_profiles]

    def delete(self, profile: Profile) -> None:
        orm_profile = self._session.get(models.ProfileOrm, profile.id)
        if orm_profile is None:
            return
        self._session.delete(orm_profile)
        self._session.commit()

    @staticmethod
    def _write_line(orm_line: models.LineOrm, line: Line) -> None:
        orm_line.date = line.date
        orm_line.display_order = line.display_order
        orm_line.line_type = line.type.value
        orm_line.quantity = line.quantity
        orm_line.unit_price = line.unit_price
        orm_line.comment = line.comment
        orm_line.average_cost = line.totals.average_cost
        orm_line.total_cost = line.totals.total_cost
        orm_line.total_quantity = line.totals.quantity

    @staticmethod
    def _to_domain(orm_profile: models.ProfileOrm) -> Profile:
        lines = [
            Line(
                id=LineId(orm_line.id),
                date=orm_line.date,
                display_order=orm_line.display_order,
                type=LineType(orm_line.line_type),
                quantity=orm_line.quantity,
                unit_price=orm_line.unit_price,
                comment=orm_line.comment,
                totals=LineTotals(
                    average_cost=orm_line.average_cost,
                    total_cost=orm_line.total_cost,
                    quantity=orm_line.total_quantity,
                ),
            )
            for orm_line in orm_profile.lines
        ]
        return Profile(
            profile_id=ProfileId(orm_profile.id),
            name=orm_profile.name,
            asset=Asset(name=orm_profile.asset_name, precision=orm_profile.asset_precision),
            visible=orm_profile.visible,
            icon=orm_profile.icon,
            currency=orm_profile.currency,
            calculation_method=orm_profile.calculation_method,
            lines=lines,
        )
