from datetime import datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from hotelhub.schemas.common import Envelope
from hotelhub.services.tags import parse_tags
from hotelhub.services.workflow import HotelStatus


class RoomTypeIn(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    # name and price are checked by the submission rules, not here, so the
    # caller gets one consistent message for an incomplete room type
    name: str | None = Field(default=None, max_length=100)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    description: str | None = None
    image_url: str | None = None

    @field_validator("name", "description", "image_url")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        return v or None


class HotelIn(BaseModel):
    """Full listing content, used by both submit and edit (edit replaces everything)."""

    model_config = ConfigDict(str_strip_whitespace=True, populate_by_name=True)

    name: str = Field(min_length=1, max_length=200)
    city: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1, max_length=255)
    phone: str | None = Field(default=None, max_length=32)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    star_level: int | None = Field(default=None, ge=1, le=5)
    tags: str | list[str] | None = None
    image_url: str | None = None
    description: str | None = None
    room_types: list[RoomTypeIn] = Field(default_factory=list, alias="roomTypes")

    @field_validator("phone", "image_url", "description")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        return v or None


class ReasonIn(BaseModel):
    reason: str | None = None


class StatusChangeIn(BaseModel):
    status: int


class RoomTypeOut(BaseModel):
    id: int
    name: str
    price: float
    description: str | None
    image_url: str | None


class HotelOut(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int
    merchant_id: int
    merchant_name: str | None = None
    name: str
    city: str
    address: str
    phone: str | None
    price: float | None
    star_level: int | None
    tags: str | None
    tag_list: list[str]
    image_url: str | None
    description: str | None
    status: int
    status_label: str
    cancellation: str | None
    create_time: datetime
    update_time: datetime
    room_types: list[RoomTypeOut] = Field(default_factory=list, alias="roomTypes")

    @field_validator("create_time", "update_time")
    @classmethod
    def _as_utc(cls, v: datetime) -> datetime:
        # SQLite returns naive values; they were written as UTC
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v.astimezone(timezone.utc)

    @classmethod
    def from_hotel(cls, hotel, *, merchant_name: str | None = None) -> "HotelOut":
        return cls(
            id=hotel.id,
            merchant_id=hotel.merchant_id,
            merchant_name=merchant_name,
            name=hotel.name,
            city=hotel.city,
            address=hotel.address,
            phone=hotel.phone,
            price=float(hotel.price) if hotel.price is not None else None,
            star_level=hotel.star_level,
            tags=hotel.tags,
            tag_list=parse_tags(hotel.tags),
            image_url=hotel.image_url,
            description=hotel.description,
            status=hotel.status,
            status_label=HotelStatus(hotel.status).label,
            cancellation=hotel.cancellation,
            create_time=hotel.create_time,
            update_time=hotel.update_time,
            room_types=[
                RoomTypeOut(
                    id=rt.id,
                    name=rt.name,
                    price=float(rt.price),
                    description=rt.description,
                    image_url=rt.image_url,
                )
                for rt in hotel.room_types
            ],
        )


class HotelEnvelope(Envelope):
    hotel: HotelOut


class HotelListEnvelope(Envelope):
    hotels: list[HotelOut]


class HotelIdEnvelope(Envelope):
    model_config = ConfigDict(populate_by_name=True)

    hotel_id: int = Field(alias="hotelId")


class HotelCreatedEnvelope(HotelEnvelope):
    model_config = ConfigDict(populate_by_name=True)

    hotel_id: int = Field(alias="hotelId")
