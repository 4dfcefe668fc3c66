from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database.connection import get_db
from routers.auth import get_current_user
from schemas.user import UserResponse
from schemas.delivery import DeliveryCreate, DeliveryDetailResponse, DeliveryResponse, DeliveryStatusUpdate
from services import delivery_lifecycle
from core.response import success_response

logger = logging.getLogger(__name__)
router = APIRouter()

@router.get("", response_model=List[DeliveryResponse])
def list_deliveries(
    skip: int = Query(0, ge=0),
    limit: Optional[int] = Query(None, ge=1, le=500),
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Users see their own deliveries, operators see pending and their own, admins see all."""
    deliveries = delivery_lifecycle.list_deliveries_for(db, current_user, skip=skip, limit=limit)
    logger.info(f"Listed {len(deliveries)} deliveries for {current_user.id} ({current_user.role.value})")
    return deliveries

@router.get("/{delivery_id}", response_model=DeliveryDetailResponse)
def get_delivery(
    delivery_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """One delivery with hospital, village, medicine, drone and account names."""
    delivery = delivery_lifecycle.get_delivery_for(db, delivery_id, current_user)
    return DeliveryDetailResponse.from_delivery(delivery)

@router.post("", response_model=DeliveryResponse, status_code=status.HTTP_201_CREATED)
def create_delivery(
    delivery_data: DeliveryCreate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Request a medicine delivery from a hospital to a village."""
    return delivery_lifecycle.create_delivery_request(db, current_user, delivery_data)

@router.patch("/{delivery_id}/assign", response_model=DeliveryResponse)
def assign_delivery(
    delivery_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Assign the best available drone to a pending delivery."""
    return delivery_lifecycle.assign_delivery(db, delivery_id, current_user)

@router.patch("/{delivery_id}/status", response_model=DeliveryResponse)
def update_delivery_status(
    delivery_id: str,
    status_update: DeliveryStatusUpdate,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return delivery_lifecycle.advance_delivery_status(
        db, delivery_id, current_user, status_update.status
    )

@router.delete("/{delivery_id}")
def cancel_delivery(
    delivery_id: str,
    current_user: UserResponse = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Cancel a delivery (owner or admin) while it is pending or preparing."""
    delivery = delivery_lifecycle.cancel_delivery(db, delivery_id, current_user)
    return success_response(
        data=DeliveryResponse.from_orm(delivery).dict(),
        message="Delivery cancelled successfully"
    )
