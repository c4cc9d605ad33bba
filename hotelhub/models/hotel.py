from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, SmallInteger, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.types import DateTime

from hotelhub.models.base import Base
from hotelhub.services.tags import MAX_TAGS_LENGTH
from hotelhub.services.workflow import HotelStatus


class Hotel(Base):
    __tablename__ = "hotels"
    __table_args__ = (
        CheckConstraint("status IN (0, 1, 2, 3)", name="ck_hotels_status"),
        CheckConstraint("(status IN (2, 3)) = (cancellation IS NOT NULL)", name="ck_hotels_cancellation_status"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # owning merchant, never reassigned
    merchant_id: Mapped[int] = mapped_column(Integer, ForeignKey("accounts.id"), nullable=False, index=True)

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    city: Mapped[str] = mapped_column(String(100), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    price: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)
    star_level: Mapped[int | None] = mapped_column(SmallInteger, nullable=True)

    # tag set joined with the full-width comma, see services/tags.py
    tags: Mapped[str | None] = mapped_column(String(MAX_TAGS_LENGTH), nullable=True)
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # 0 pending | 1 published | 2 rejected | 3 offline
    status: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=int(HotelStatus.PENDING), index=True)

    # admin reason; non-null only while rejected or offline
    cancellation: Mapped[str | None] = mapped_column(Text, nullable=True)

    create_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    update_time: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    # compare-and-set token; the ORM adds "AND version = :seen" to every UPDATE/DELETE
    version: Mapped[int] = mapped_column(Integer, nullable=False)

    updated_by: Mapped[str | None] = mapped_column(String, nullable=True)

    room_types: Mapped[list["RoomType"]] = relationship(
        back_populates="hotel",
        lazy="selectin",
        order_by="RoomType.id",
        cascade="all, delete-orphan",
    )

    __mapper_args__ = {"version_id_col": version}


class RoomType(Base):
    __tablename__ = "room_types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    hotel_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("hotels.id", ondelete="CASCADE"), nullable=False, index=True
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    # comma-joined image URLs
    image_url: Mapped[str | None] = mapped_column(Text, nullable=True)

    hotel: Mapped[Hotel] = relationship(back_populates="room_types")
