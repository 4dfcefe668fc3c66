from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from models.drone import DroneStatus

# Statuses an administrator may set by hand; delivering is owned by the lifecycle
ADMIN_SETTABLE_STATUSES = (
    DroneStatus.AVAILABLE,
    DroneStatus.MAINTENANCE,
    DroneStatus.CHARGING,
)

# Drone Creation Schema
class DroneCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    model: Optional[str] = Field(None, max_length=255)
    battery_level: int = Field(100, ge=0, le=100)
    max_payload_kg: Optional[float] = Field(None, ge=0)
    max_range_km: Optional[float] = Field(None, ge=0)
    status: DroneStatus = DroneStatus.AVAILABLE

    @validator('name')
    def validate_name(cls, v):
        if not v.strip():
            raise ValueError('Drone name must not be blank')
        return v.strip()

    @validator('status')
    def validate_status(cls, v):
        if v not in ADMIN_SETTABLE_STATUSES:
            raise ValueError('Drone status must be available, maintenance or charging')
        return v

# Drone Update Schema
class DroneUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    model: Optional[str] = Field(None, max_length=255)
    battery_level: Optional[int] = Field(None, ge=0, le=100)
    max_payload_kg: Optional[float] = Field(None, ge=0)
    max_range_km: Optional[float] = Field(None, ge=0)
    status: Optional[DroneStatus] = None

    @validator('status')
    def validate_status(cls, v):
        if v is not None and v not in ADMIN_SETTABLE_STATUSES:
            raise ValueError('Drone status must be available, maintenance or charging')
        return v

# Drone Response Schema
class DroneResponse(BaseModel):
    id: str
    name: str
    model: Optional[str]
    battery_level: int
    status: str
    max_payload_kg: Optional[float]
    max_range_km: Optional[float]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
