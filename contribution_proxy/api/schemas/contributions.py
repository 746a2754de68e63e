from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field


ContributionsByDate = dict[str, list[str]]


class YearSummary(BaseModel):
    """Years with recorded activity, sorted ascending."""

    model_config = ConfigDict(populate_by_name=True)

    start_year: int = Field(alias="startYear")
    end_year: int = Field(alias="endYear")
    years: list[int]


class HealthResponse(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    """Body returned when an upstream-backed endpoint fails."""

    error: str
