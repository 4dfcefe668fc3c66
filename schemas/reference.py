from pydantic import BaseModel
from typing import Optional

class HospitalResponse(BaseModel):
    id: str
    name: str
    city_id: Optional[str]
    address: Optional[str]
    contact_number: Optional[str]
    pincode: Optional[str]
    latitude: Optional[float]
    longitude: Optional[float]

    class Config:
        from_attributes = True

class VillageResponse(BaseModel):
    id: str
    name: str
    city_id: Optional[str]
    population: Optional[int]
    latitude: Optional[float]
    longitude: Optional[float]

    class Config:
        from_attributes = True

class MedicineTypeResponse(BaseModel):
    id: str
    name: str
    icon: Optional[str]
    description: Optional[str]
    requires_refrigeration: bool

    class Config:
        from_attributes = True
