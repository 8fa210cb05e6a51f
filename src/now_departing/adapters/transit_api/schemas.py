"""Wire models for arrivals API responses."""

from pydantic import BaseModel, ConfigDict, Field


class WireArrival(BaseModel):
    """One predicted arrival as sent by the API."""

    model_config = ConfigDict(extra="ignore")

    route: str
    time: str


class WireStation(BaseModel):
    """One station entry with northbound and southbound arrivals."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    id: str | None = None
    name: str
    location: list[float] | None = None
    routes: list[str] = Field(default_factory=list)
    north: list[WireArrival] = Field(default_factory=list, alias="N")
    south: list[WireArrival] = Field(default_factory=list, alias="S")


class WireResponse(BaseModel):
    """Top-level response of both by-route and by-location queries."""

    model_config = ConfigDict(extra="ignore")

    data: list[WireStation]
    updated: str | None = None
