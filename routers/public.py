from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session
from typing import List

from database.connection import get_db
from models.reference import Hospital, Village, MedicineType
from schemas.drone import DroneResponse
from schemas.reference import HospitalResponse, VillageResponse, MedicineTypeResponse
from services import drone_pool

router = APIRouter()

@router.get("/hospitals", response_model=List[HospitalResponse])
def list_hospitals(db: Session = Depends(get_db)):
    return db.query(Hospital).order_by(Hospital.name.asc()).all()

@router.get("/villages", response_model=List[VillageResponse])
def list_villages(db: Session = Depends(get_db)):
    return db.query(Village).order_by(Village.name.asc()).all()

@router.get("/medicine-types", response_model=List[MedicineTypeResponse])
def list_medicine_types(db: Session = Depends(get_db)):
    return db.query(MedicineType).order_by(MedicineType.name.asc()).all()

@router.get("/drones", response_model=List[DroneResponse])
def list_public_drones(db: Session = Depends(get_db)):
    """Fleet overview shown on the dashboard map."""
    return drone_pool.list_drones(db)
