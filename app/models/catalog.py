from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, String, Table
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.db.database import Base

medicine_contents = Table(
    "medicine_contents",
    Base.metadata,
    Column("medicine_id", ForeignKey("medicines.id", ondelete="CASCADE"), primary_key=True),
    Column("content_id", ForeignKey("contents.id", ondelete="CASCADE"), primary_key=True),
)


class Content(Base):
    __tablename__ = "contents"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(160), unique=True, index=True, nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class Medicine(Base):
    """Master catalog entry shared by every account."""

    __tablename__ = "medicines"

    id: Mapped[int] = mapped_column(primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(160), unique=True, index=True, nullable=False)
    hsn: Mapped[str | None] = mapped_column(String(50), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    contents: Mapped[list[Content]] = relationship(secondary=medicine_contents, order_by=Content.id)
