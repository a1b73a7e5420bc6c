"""Response models of the 2GIS Catalog API.

Only the fields the planner reads are declared. Unknown fields are ignored
and everything that may be absent (schedule, reviews, photos, rubrics) is
optional, so a sparse item never fails the parse.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class GisModel(BaseModel):
    model_config = ConfigDict(
        extra="ignore", populate_by_name=True, coerce_numbers_to_str=True
    )


class GisError(GisModel):
    type: Optional[str] = None
    message: Optional[str] = None


class GisMeta(GisModel):
    code: int = 0
    error: Optional[GisError] = None


class GisPoint(GisModel):
    lat: Optional[float] = None
    lon: Optional[float] = None


class GisRubric(GisModel):
    id: Optional[str] = None
    name: Optional[str] = None
    short_name: Optional[str] = None


class GisReviews(GisModel):
    # The API sends numbers as strings on some plans
    rating: Optional[str | float] = None
    general_rating: Optional[str | float] = None
    review_count: Optional[str | int] = None
    general_review_count: Optional[str | int] = None


class GisWorkingHours(GisModel):
    from_: Optional[str] = Field(None, alias="from")
    to: Optional[str] = None


class GisDaySchedule(GisModel):
    working_hours: list[GisWorkingHours] = Field(default_factory=list)


class GisSchedule(GisModel):
    is_24x7: bool = False
    comment: Optional[str] = None
    Mon: Optional[GisDaySchedule] = None
    Tue: Optional[GisDaySchedule] = None
    Wed: Optional[GisDaySchedule] = None
    Thu: Optional[GisDaySchedule] = None
    Fri: Optional[GisDaySchedule] = None
    Sat: Optional[GisDaySchedule] = None
    Sun: Optional[GisDaySchedule] = None

    def day(self, name: str) -> Optional[GisDaySchedule]:
        return getattr(self, name, None)


class GisExternalContent(GisModel):
    type: Optional[str] = None
    main_photo_url: Optional[str] = None
    url: Optional[str] = None


class GisItem(GisModel):
    id: Optional[str] = None
    name: Optional[str] = None
    type: Optional[str] = None
    point: Optional[GisPoint] = None
    rubrics: list[GisRubric] = Field(default_factory=list)
    address_name: Optional[str] = None
    description: Optional[str] = None
    reviews: Optional[GisReviews] = None
    schedule: Optional[GisSchedule] = None
    external_content: list[GisExternalContent] = Field(default_factory=list)


class GisItemsResult(GisModel):
    total: int = 0
    items: list[GisItem] = Field(default_factory=list)


class GisItemsResponse(GisModel):
    meta: GisMeta = Field(default_factory=GisMeta)
    result: Optional[GisItemsResult] = None


class GisRegion(GisModel):
    id: str
    name: Optional[str] = None
    type: Optional[str] = None


class GisRegionResult(GisModel):
    total: int = 0
    items: list[GisRegion] = Field(default_factory=list)


class GisRegionSearchResponse(GisModel):
    meta: GisMeta = Field(default_factory=GisMeta)
    result: Optional[GisRegionResult] = None


class GisRubricCandidate(GisModel):
    id: str
    name: Optional[str] = None
    branch_count: Optional[int] = None
    org_count: Optional[int] = None


class GisRubricResult(GisModel):
    total: int = 0
    items: list[GisRubricCandidate] = Field(default_factory=list)


class GisRubricSearchResponse(GisModel):
    meta: GisMeta = Field(default_factory=GisMeta)
    result: Optional[GisRubricResult] = None
