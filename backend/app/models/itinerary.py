"""Itinerary models - the trip document loaded from the external API."""

import datetime as dt
from typing import Any

from pydantic import Field, field_validator

from backend.app.models.budget import Budget, UserRef
from backend.app.models.common import ItineraryStatus, Permission, WireModel, parse_wire_date, ref_id
from backend.app.models.stops import Stop, tag_stop_payloads


class Day(WireModel):
    """One day of the trip.

    The day's ordinal is its list position plus one; any ``dayNumber`` in the
    payload is kept only for round-tripping.
    """

    day_number: int | None = Field(None, alias="dayNumber")
    date: dt.date | None = None
    title: str | None = None
    description: str | None = None
    stops: list[Stop] = Field(default_factory=list)

    @field_validator("date", mode="before")
    @classmethod
    def trim_datetime(cls, v: Any) -> Any:
        """Accept full ISO datetimes as sent by the API."""
        return parse_wire_date(v)

    @field_validator("stops", mode="before")
    @classmethod
    def tag_untyped_stops(cls, v: Any) -> Any:
        """Infer missing stop variant tags."""
        return tag_stop_payloads(v)


class Collaborator(WireModel):
    """Non-owner user granted access to an itinerary."""

    # None when the collaborating user was deleted upstream
    user: str | UserRef | None = Field(None, alias="userId")
    permission: Permission = Permission.view

    @property
    def user_id(self) -> str | None:
        """Id of the collaborating user."""
        return ref_id(self.user)


class Itinerary(WireModel):
    """Complete itinerary document."""

    id: str | None = Field(None, alias="_id")
    title: str = ""
    description: str | None = None
    destination: str | None = None
    owner: str | UserRef | None = Field(None, alias="ownerId")
    is_public: bool = Field(False, alias="isPublic")
    status: ItineraryStatus = ItineraryStatus.planning
    start_date: dt.date | None = Field(None, alias="startDate")
    end_date: dt.date | None = Field(None, alias="endDate")
    days: list[Day] = Field(default_factory=list)
    collaborators: list[Collaborator] = Field(default_factory=list)
    budget: Budget | None = None
    tags: list[str] = Field(default_factory=list)
    # Computed upstream; passed through untouched
    completeness: float | None = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def trim_datetime(cls, v: Any) -> Any:
        """Accept full ISO datetimes as sent by the API."""
        return parse_wire_date(v)

    @property
    def owner_id(self) -> str | None:
        """Id of the owning user."""
        return ref_id(self.owner)
