"""Day generation endpoint - POST /days/generate."""

import datetime as dt

from fastapi import APIRouter
from pydantic import BaseModel, Field

from backend.app.config import get_settings
from backend.app.itinerary.days import generate_days
from backend.app.models.itinerary import Day

router = APIRouter(prefix="/days", tags=["days"])


class GenerateDaysRequest(BaseModel):
    """Request body for POST /days/generate."""

    start_date: dt.date
    end_date: dt.date
    existing: list[Day] = Field(default_factory=list)


@router.post("/generate", response_model=list[Day])
async def generate(request: GenerateDaysRequest) -> list[Day]:
    """One day per date in the range; existing days on surviving dates keep their stops."""
    return generate_days(
        request.start_date,
        request.end_date,
        max_days=get_settings().max_trip_days,
        existing=request.existing,
    )
