"""Core data models for Stroll Planner.

Pydantic models for coordinates, places, route requests/responses and the
category catalog.
"""

from typing import Optional

from pydantic import BaseModel, Field, field_validator


class Coordinates(BaseModel):
    """Geographic coordinates with validation.

    Latitude must be between -90 and 90 degrees.
    Longitude must be between -180 and 180 degrees.
    """

    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in degrees")


class Place(BaseModel):
    """A point of interest, either a catalog candidate or the synthetic start.

    Two places with the same ``id`` are the same place regardless of the
    other fields. Catalog ids are numeric strings; the start point is not.
    """

    id: str = Field(..., min_length=1, description="Catalog identifier")
    name: str = Field(..., description="Display name")
    category: Optional[str] = Field(None, description="Category label")
    lat: float = Field(..., ge=-90, le=90, description="Latitude in degrees")
    lon: float = Field(..., ge=-180, le=180, description="Longitude in degrees")
    address: Optional[str] = Field(None, description="Short address")
    description: Optional[str] = Field(None, description="Catalog description")
    rating: Optional[float] = Field(None, ge=0, le=5, description="Average review rating")
    review_count: Optional[int] = Field(None, ge=0, description="Number of reviews")
    working_hours: Optional[str] = Field(None, description="Opening hours summary")
    open_now: Optional[bool] = Field(None, description="Whether the place is open right now")
    photo_url: Optional[str] = Field(None, description="Main photo URL")


class RouteRequest(BaseModel):
    """Input of the route generation endpoint."""

    city: str = Field(..., description="City name", examples=["Saint Petersburg"])
    categories: Optional[list[str]] = Field(
        default_factory=list,
        description="Category names from the catalog",
        examples=[["Museums", "Parks"]],
    )
    description: str = Field(
        ..., description="Free-text wish", examples=["Culture and a walk by the water"]
    )
    duration_hours: int = Field(..., gt=0, description="Time budget in hours")
    start_point: Coordinates = Field(..., description="Where the walk starts")

    @field_validator("city", "description")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value

    @field_validator("categories")
    @classmethod
    def _drop_blank_categories(cls, value: Optional[list[str]]) -> list[str]:
        if value is None:
            return []
        return [c.strip() for c in value if c and c.strip()]


class RouteResponse(BaseModel):
    """Generated route: ordered places, a short description and a deep link."""

    places: list[Place] = Field(
        default_factory=list, description="Places in visit order, start point first"
    )
    description: str = Field(..., description="Natural-language route summary")
    directions_url: Optional[str] = Field(
        None, description="Deep link opening the route in the map app"
    )


class Category(BaseModel):
    """An entry of the allowed category vocabulary."""

    id: str = Field(..., description="Stable slug", examples=["museum"])
    name: str = Field(
        ..., alias="category", description="Display name", examples=["Museums"]
    )

    model_config = {"populate_by_name": True}
