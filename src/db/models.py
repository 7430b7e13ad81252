from __future__ import annotations

import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship
from sqlalchemy.types import TypeDecorator


class DecimalAsString(TypeDecorator):
    impl = String
    cache_ok = True

    def process_bind_param(self, value: Decimal | None, dialect: object) -> str | None:
        if value is None:
            return None
        return str(value)

    def process_result_value(self, value: str | None, dialect: object) -> Decimal | None:
        if value is None:
            return None
        return Decimal(value)


class Base(DeclarativeBase):
    pass


class ProfileOrm(Base):
    __tablename__ = "profiles"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    name: Mapped[str] = mapped_column(String(30), nullable=False)
    asset_name: Mapped[str] = mapped_column(String, nullable=False)
    asset_precision: Mapped[int] = mapped_column(Integer, nullable=False)
    visible: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)
    icon: Mapped[str] = mapped_column(String, default="", nullable=False)
    currency: Mapped[str] = mapped_column(String, nullable=False)
    calculation_method: Mapped[str] = mapped_column(String, nullable=False)

    lines: Mapped[list["LineOrm"]] = relationship(
        cascade="all, delete-orphan", back_populates="profile", lazy="joined"
    )


class LineOrm(Base):
    __tablename__ = "lines"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)
    profile_id: Mapped[UUID] = mapped_column(Uuid, ForeignKey("profiles.id"), nullable=False)
    date: Mapped[datetime.date] = mapped_column(Date, nullable=False)
    display_order: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    line_type: Mapped[str] = mapped_column(String, nullable=False)
    quantity: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    comment: Mapped[str] = mapped_column(String, default="", nullable=False)
    average_cost: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    total_cost: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)
    total_quantity: Mapped[Decimal] = mapped_column(DecimalAsString, nullable=False)

    profile: Mapped[ProfileOrm] = relationship(back_populates="lines")
