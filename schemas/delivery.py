from pydantic import BaseModel, Field, validator
from typing import Optional
from datetime import datetime
from models.delivery import DeliveryPriority

# Delivery Creation Schema
class DeliveryCreate(BaseModel):
    hospital_id: Optional[str] = None
    village_id: Optional[str] = None
    medicine_type_id: Optional[str] = None
    priority: DeliveryPriority = DeliveryPriority.NORMAL
    notes: Optional[str] = Field(None, max_length=1000)

    @validator('hospital_id', 'village_id', 'medicine_type_id', pre=True)
    def coerce_numeric_id(cls, v):
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v

    @validator('priority', pre=True)
    def default_priority(cls, v):
        if v is None or v == "":
            return DeliveryPriority.NORMAL
        return v

# Status Update Schema
class DeliveryStatusUpdate(BaseModel):
    status: Optional[str] = None

# Delivery Response Schema
class DeliveryResponse(BaseModel):
    id: str
    hospital_id: str
    village_id: str
    medicine_type_id: str
    requester_user_id: str
    operator_id: Optional[str]
    drone_id: Optional[str]
    status: str
    priority: str
    distance_km: float
    eta_minutes: int
    estimated_arrival: Optional[datetime]
    actual_arrival: Optional[datetime]
    notes: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True

# Delivery detail with the names dashboards show next to the ids
class DeliveryDetailResponse(DeliveryResponse):
    hospital_name: Optional[str] = None
    hospital_pincode: Optional[str] = None
    village_name: Optional[str] = None
    village_lat: Optional[float] = None
    village_lng: Optional[float] = None
    medicine_name: Optional[str] = None
    medicine_icon: Optional[str] = None
    drone_name: Optional[str] = None
    battery_level: Optional[int] = None
    user_name: Optional[str] = None
    operator_name: Optional[str] = None

    @classmethod
    def from_delivery(cls, delivery):
        """Flatten a delivery and its related rows into one response."""
        hospital = delivery.hospital
        village = delivery.village
        medicine = delivery.medicine_type
        drone = delivery.drone
        return cls(
            **DeliveryResponse.from_orm(delivery).dict(),
            hospital_name=hospital.name if hospital else None,
            hospital_pincode=hospital.pincode if hospital else None,
            village_name=village.name if village else None,
            village_lat=village.latitude if village else None,
            village_lng=village.longitude if village else None,
            medicine_name=medicine.name if medicine else None,
            medicine_icon=medicine.icon if medicine else None,
            drone_name=drone.name if drone else None,
            battery_level=drone.battery_level if drone else None,
            user_name=delivery.requester.name if delivery.requester else None,
            operator_name=delivery.operator.name if delivery.operator else None,
        )
