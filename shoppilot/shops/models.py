from __future__ import annotations

import re
from datetime import datetime
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

_TIME_RE = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


class CamelModel(BaseModel):
    """Snake_case attributes, camelCase JSON."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Weekday(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"

    @classmethod
    def of(cls, moment: datetime) -> "Weekday":
        return list(cls)[moment.weekday()]


class DayHours(CamelModel):
    open: str = "09:00"
    close: str = "17:00"
    is_closed: bool = False

    @field_validator("open", "close")
    @classmethod
    def _check_time(cls, value: str) -> str:
        value = value.strip()
        # Accept "9:00" and store it zero-padded so string comparison works
        if re.match(r"^\d:[0-5]\d$", value):
            value = "0" + value
        if not _TIME_RE.match(value):
            raise ValueError("time must be HH:MM (24-hour)")
        return value


def _weekday_hours() -> DayHours:
    return DayHours(open="09:00", close="17:00")


def _weekend_hours() -> DayHours:
    return DayHours(open="10:00", close="16:00")


class OpeningHours(CamelModel):
    monday: DayHours = Field(default_factory=_weekday_hours)
    tuesday: DayHours = Field(default_factory=_weekday_hours)
    wednesday: DayHours = Field(default_factory=_weekday_hours)
    thursday: DayHours = Field(default_factory=_weekday_hours)
    friday: DayHours = Field(default_factory=_weekday_hours)
    saturday: DayHours = Field(default_factory=_weekend_hours)
    sunday: DayHours = Field(default_factory=_weekend_hours)

    def for_day(self, day: Weekday) -> DayHours:
        return getattr(self, day.value)


class Location(BaseModel):
    """GeoJSON point; coordinates are ``[longitude, latitude]``."""

    type: Literal["Point"] = "Point"
    coordinates: list[float]

    @field_validator("coordinates")
    @classmethod
    def _check_coordinates(cls, coords: list[float]) -> list[float]:
        if len(coords) != 2:
            raise ValueError("coordinates must be [longitude, latitude]")
        lng, lat = coords
        if not -180 <= lng <= 180 or not -90 <= lat <= 90:
            raise ValueError(
                "Invalid coordinates. Longitude must be between -180 and 180, "
                "latitude between -90 and 90."
            )
        return coords

    @property
    def lng(self) -> float:
        return self.coordinates[0]

    @property
    def lat(self) -> float:
        return self.coordinates[1]

    @classmethod
    def at(cls, lat: float, lng: float) -> "Location":
        return cls(coordinates=[lng, lat])


class Shop(CamelModel):
    id: str
    owner_id: str
    name: str
    description: str
    address: str
    contact: str | None = None
    categories: list[str] = Field(..., min_length=1)
    images: list[str] = Field(default_factory=list)
    location: Location
    approved: bool = False
    opening_hours: OpeningHours = Field(default_factory=OpeningHours)
    created_at: datetime = Field(default_factory=datetime.now)


class ShopCreate(CamelModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    address: str = Field(..., min_length=1)
    contact: str | None = None
    categories: list[str] = Field(default_factory=lambda: ["General"], min_length=1)
    images: list[str] = Field(default_factory=list)
    location: Location
    opening_hours: OpeningHours = Field(default_factory=OpeningHours)

    @field_validator("contact")
    @classmethod
    def _strip_contact(cls, value: str | None) -> str | None:
        return value.strip() if value is not None else None


class ShopUpdate(CamelModel):
    name: str | None = Field(default=None, min_length=1)
    description: str | None = Field(default=None, min_length=1)
    address: str | None = Field(default=None, min_length=1)
    contact: str | None = None
    categories: list[str] | None = Field(default=None, min_length=1)
    images: list[str] | None = None
    location: Location | None = None
    opening_hours: OpeningHours | None = None


class AdminShopUpdate(ShopUpdate):
    approved: bool | None = None


class ShopResponse(BaseModel):
    message: str | None = None
    shop: Shop


class ShopListResponse(BaseModel):
    shops: list[Shop]
    count: int


class ShopStatus(CamelModel):
    is_open: bool
    message: str
    current_time: str | None = None
    current_day: Weekday | None = None
