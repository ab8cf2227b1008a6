from dataclasses import dataclass
from typing import Any, Dict, Optional, Union
from pydantic import BaseModel, Field


@dataclass(frozen=True)
class GeoRecord:
    """Raw per-IP bundle returned by a single provider record lookup"""
    city: Optional[str] = None
    region: Optional[str] = None
    postal_code: Optional[str] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    area_code: Optional[Union[int, str]] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GeoRecord":
        return cls(
            city=data.get("city"),
            region=data.get("region"),
            postal_code=data.get("postal_code"),
            latitude=data.get("latitude"),
            longitude=data.get("longitude"),
            area_code=data.get("area_code"),
        )


class GeoLocationResponse(BaseModel):
    ip: Optional[str] = Field(None, description="Subject IP the lookup was performed against")
    city: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = Field(None, description="ISO 3166-1 alpha-2 code")
    country_code3: Optional[str] = Field(None, description="ISO 3166-1 alpha-3 code")
    continent_code: Optional[str] = None
    region: Optional[str] = Field(None, description="Region, state or province name")
    region_code: Optional[str] = Field(None, description="Subdivision code from the record")
    postal_code: Optional[str] = None
    area_code: Optional[Union[int, str]] = None
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    timezone: Optional[str] = None
    formatted: str = Field("", description="Display label, empty when nothing is known")


class GeoFieldResponse(BaseModel):
    ip: Optional[str] = None
    field: str
    value: Any = None
