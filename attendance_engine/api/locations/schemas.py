from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class LocationProfileCreate(BaseModel):
    name: str
    latitude: Optional[float] = Field(default=None, ge=-90, le=90)
    longitude: Optional[float] = Field(default=None, ge=-180, le=180)
    allowed_radius_meters: float = Field(default=100, gt=0)
    geofence_enabled: bool = True
    early_window_minutes: int = Field(default=30, ge=0)


class LocationProfile(LocationProfileCreate):
    id: int

    model_config = ConfigDict(
        from_attributes=True,
    )
