from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database.connection import get_db
from models.user import UserRole
from routers.auth import require_roles
from schemas.user import UserResponse
from schemas.drone import DroneCreate, DroneUpdate, DroneResponse
from services import drone_pool
from core.response import success_response

logger = logging.getLogger(__name__)

router = APIRouter()

require_admin = require_roles(UserRole.ADMIN)

@router.get("/drones", response_model=List[DroneResponse])
def list_fleet(
    drone_status: Optional[str] = Query(None, alias="status"),
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    return drone_pool.list_drones(db, status=drone_status)

@router.post("/drones", response_model=DroneResponse, status_code=status.HTTP_201_CREATED)
def create_fleet_drone(
    drone_data: DroneCreate,
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    logger.info(f"Admin {current_user.id} creating drone {drone_data.name}")
    return drone_pool.create_drone(db, drone_data)

@router.put("/drones/{drone_id}", response_model=DroneResponse)
def update_fleet_drone(
    drone_id: str,
    drone_data: DroneUpdate,
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    logger.info(f"Admin {current_user.id} updating drone {drone_id}")
    return drone_pool.update_drone(db, drone_id, drone_data)

@router.delete("/drones/{drone_id}")
def delete_fleet_drone(
    drone_id: str,
    current_user: UserResponse = Depends(require_admin),
    db: Session = Depends(get_db)
):
    logger.info(f"Admin {current_user.id} deleting drone {drone_id}")
    drone_pool.delete_drone(db, drone_id)
    return success_response(message="Drone deleted successfully")
