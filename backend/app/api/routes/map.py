"""Map projection endpoint - POST /map/projection."""

from typing import Any

from fastapi import APIRouter
from pydantic import BaseModel, Field, field_validator

from backend.app.itinerary.map_projector import project_map
from backend.app.models.itinerary import Day
from backend.app.models.map import MapProjection
from backend.app.models.stops import Stop, tag_stop_payloads

router = APIRouter(prefix="/map", tags=["map"])


class MapProjectionRequest(BaseModel):
    """Request body for POST /map/projection."""

    days: list[Day] | None = None
    stops: list[Stop] | None = None
    active_day: int | None = Field(None, ge=0, description="0-based index of the active day")

    @field_validator("stops", mode="before")
    @classmethod
    def tag_untyped_stops(cls, v: Any) -> Any:
        """Infer missing stop variant tags."""
        return tag_stop_payloads(v)


@router.post("/projection", response_model=MapProjection)
async def map_projection(request: MapProjectionRequest) -> MapProjection:
    """Project day-grouped or flat stops into markers, a route, and bounds.

    An empty marker list is a normal response; the client shows a placeholder.
    """
    return project_map(days=request.days, stops=request.stops, active_day=request.active_day)
