from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, Enum, ForeignKey, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from prima_fpa.db.base import Base
from prima_fpa.models.enums import Scenario


class FactLedger(Base):
    __tablename__ = "fact_ledger"
    __table_args__ = (
        Index("ix_fact_ledger_period_scenario_measure", "period_id", "scenario", "measure"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    period_id: Mapped[int] = mapped_column(
        ForeignKey("calendar.id", ondelete="RESTRICT"), nullable=False
    )
    market_id: Mapped[int | None] = mapped_column(
        ForeignKey("dim_markets.id", ondelete="SET NULL"), nullable=True
    )
    department_id: Mapped[int | None] = mapped_column(
        ForeignKey("dim_departments.id", ondelete="SET NULL"), nullable=True
    )
    product_id: Mapped[int | None] = mapped_column(
        ForeignKey("dim_products.id", ondelete="SET NULL"), nullable=True
    )
    channel_id: Mapped[int | None] = mapped_column(
        ForeignKey("dim_channels.id", ondelete="SET NULL"), nullable=True
    )

    scenario: Mapped[Scenario] = mapped_column(
        Enum(Scenario, name="scenario", values_callable=lambda members: [item.value for item in members]),
        nullable=False,
    )
    measure: Mapped[str] = mapped_column(String(100), nullable=False)
    # Nullable: imports sometimes land without an amount; the engine reads those as zero.
    value: Mapped[Decimal | None] = mapped_column(Numeric(24, 2), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )

    period: Mapped["CalendarPeriod"] = relationship("CalendarPeriod", back_populates="facts")
    market: Mapped["Market | None"] = relationship("Market", back_populates="facts")
    department: Mapped["Department | None"] = relationship("Department", back_populates="facts")
    product: Mapped["Product | None"] = relationship("Product", back_populates="facts")
    channel: Mapped["Channel | None"] = relationship("Channel", back_populates="facts")
