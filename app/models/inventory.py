from datetime import date, datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, Date, DateTime, ForeignKey, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.database import Base
from app.models.catalog import Medicine


class Batch(Base):
    """Quantity of one medicine received under one batch number, per account.

    Rows are identified for merging by (account_id, medicine_id, batch_number,
    incoming_date, expiry_date).
    """

    __tablename__ = "batches"
    __table_args__ = (
        CheckConstraint("quantity_available >= 0", name="ck_batches_quantity_non_negative"),
        Index(
            "ix_batches_merge_key",
            "account_id",
            "medicine_id",
            "batch_number",
            "incoming_date",
            "expiry_date",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    account_id: Mapped[int] = mapped_column(ForeignKey("accounts.id", ondelete="CASCADE"), index=True, nullable=False)
    medicine_id: Mapped[int] = mapped_column(ForeignKey("medicines.id", ondelete="CASCADE"), index=True, nullable=False)
    batch_number: Mapped[str] = mapped_column(String(100), index=True, nullable=False)
    incoming_date: Mapped[date] = mapped_column(Date, nullable=False)
    expiry_date: Mapped[date] = mapped_column(Date, index=True, nullable=False)
    units_per_pack: Mapped[int | None] = mapped_column(Integer, nullable=True)
    quantity_available: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    medicine: Mapped[Medicine] = relationship()
