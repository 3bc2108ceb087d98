"""Trainer and family location models."""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator


class CapabilityTag(str, Enum):
    """Service-mode skills a trainer can offer."""
    TRAVEL_ESCORT = "travel_escort"
    SCHOOL_RUN = "school_run"
    RESPITE = "respite"
    ACTIVITY_SUPPORT = "activity_support"
    SEN_SUPPORT = "sen_support"
    OVERNIGHT = "overnight"


class Coordinates(BaseModel):
    latitude: float = Field(ge=-90.0, le=90.0)
    longitude: float = Field(ge=-180.0, le=180.0)


class FamilyLocation(BaseModel):
    """Where the child receives care. Any combination of fields may be known."""

    region: Optional[str] = None
    postcode: Optional[str] = None
    coordinates: Optional[Coordinates] = None

    @field_validator("region", "postcode")
    @classmethod
    def _blank_to_none(cls, value: Optional[str]) -> Optional[str]:
        if value is None:
            return None
        value = value.strip()
        return value or None

    def has_any(self) -> bool:
        return bool(self.region or self.postcode or self.coordinates)


class Trainer(BaseModel):
    """A trainer on the roster with their service area and skills."""

    id: str
    name: str = ""
    home_location: Optional[Coordinates] = None
    service_postcode_prefixes: list[str] = Field(default_factory=list)
    service_regions: list[str] = Field(default_factory=list)
    service_radius_km: Optional[float] = None
    capabilities: set[CapabilityTag] = Field(default_factory=set)

    @field_validator("service_postcode_prefixes")
    @classmethod
    def _upper_prefixes(cls, value: list[str]) -> list[str]:
        return [p.strip().upper() for p in value if p and p.strip()]
