"""
Delivery lifecycle engine.

Drives a delivery through ``pending -> preparing -> in-transit -> delivered``
(with ``cancelled`` and ``failed`` as the other terminal states) and binds or
releases a drone from the pool as part of the same transaction. Every state
change is a conditional UPDATE keyed on the status that was read, so a caller
that loses a race gets a ``ConflictError`` instead of overwriting the winner.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import List, Optional, Tuple
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
import logging
import math
import random

from core.config import settings
from core.exceptions import (
    AuthorizationError,
    ConflictError,
    InvalidArgumentError,
    ResourceExhaustedError,
    ResourceNotFoundError,
)
from models.delivery import Delivery, DeliveryStatus, ACTIVE_STATUSES, TERMINAL_STATUSES
from models.drone import Drone, DroneStatus
from models.reference import Hospital, Village
from models.user import UserRole
from schemas.delivery import DeliveryCreate
from schemas.user import UserResponse
from services import delivery_store, drone_pool

logger = logging.getLogger(__name__)

EARTH_RADIUS_KM = 6371

# Values accepted by advance_delivery_status
UPDATABLE_STATUSES = (
    DeliveryStatus.PREPARING.value,
    DeliveryStatus.IN_TRANSIT.value,
    DeliveryStatus.DELIVERED.value,
    DeliveryStatus.CANCELLED.value,
    DeliveryStatus.FAILED.value,
)
CANCELLABLE_STATUSES = (
    DeliveryStatus.PENDING.value,
    DeliveryStatus.PREPARING.value,
)


def _role_of(caller: UserResponse) -> UserRole:
    return UserRole(caller.role)


def _require_role(caller: UserResponse, *roles: UserRole) -> None:
    if _role_of(caller) not in roles:
        logger.warning(f"User {caller.id} with role {caller.role} denied; requires {[r.value for r in roles]}")
        raise AuthorizationError("Access denied. Insufficient permissions.")


# ---- Distance and ETA ----

def calculate_distance(lat1: float, lng1: float, lat2: float, lng2: float) -> float:
    """Calculate distance using Haversine formula"""
    dlat = math.radians(lat2 - lat1)
    dlng = math.radians(lng2 - lng1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) *
         math.sin(dlng / 2) ** 2)

    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))
    return EARTH_RADIUS_KM * c


def _has_coordinates(place) -> bool:
    return place.latitude is not None and place.longitude is not None


def estimate_route(hospital: Hospital, village: Village) -> Tuple[Decimal, int]:
    """Distance (km, 2 decimals) and ETA (minutes) between a hospital and a village.

    Uses the great-circle distance when both ends have coordinates and the
    configured default distance otherwise. The choice depends only on the
    stored records, so the same pair always gets the same estimate.
    """
    if _has_coordinates(hospital) and _has_coordinates(village):
        distance = calculate_distance(
            float(hospital.latitude), float(hospital.longitude),
            float(village.latitude), float(village.longitude)
        )
    else:
        distance = settings.DEFAULT_DISTANCE_KM

    distance_km = Decimal(str(distance)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    eta_minutes = math.ceil(settings.ETA_BASE_MINUTES + float(distance_km) * settings.ETA_MINUTES_PER_KM)
    return distance_km, eta_minutes


# ---- Operations ----

def create_delivery_request(db: Session, requester: UserResponse, delivery_data: DeliveryCreate) -> Delivery:
    """Record a new pending delivery for ``requester``."""
    _require_role(requester, UserRole.USER, UserRole.ADMIN)

    if not delivery_data.hospital_id or not delivery_data.village_id or not delivery_data.medicine_type_id:
        raise InvalidArgumentError("Hospital, village, and medicine type are required")

    try:
        hospital = db.query(Hospital).filter(Hospital.id == delivery_data.hospital_id).first()
        if not hospital:
            raise ResourceNotFoundError("Hospital", delivery_data.hospital_id)

        village = db.query(Village).filter(Village.id == delivery_data.village_id).first()
        if not village:
            raise ResourceNotFoundError("Village", delivery_data.village_id)

        distance_km, eta_minutes = estimate_route(hospital, village)

        delivery = delivery_store.create_delivery(
            db,
            hospital_id=hospital.id,
            village_id=village.id,
            medicine_type_id=delivery_data.medicine_type_id,
            requester_user_id=requester.id,
            operator_id=None,
            drone_id=None,
            status=DeliveryStatus.PENDING.value,
            priority=delivery_data.priority.value,
            distance_km=distance_km,
            eta_minutes=eta_minutes,
            estimated_arrival=datetime.utcnow() + timedelta(minutes=eta_minutes),
            notes=delivery_data.notes,
        )
        db.commit()
        db.refresh(delivery)

        logger.info(
            f"Delivery created: {delivery.id} by {requester.id} "
            f"({distance_km} km, eta {eta_minutes} min, priority {delivery.priority})"
        )
        return delivery

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating delivery: {str(e)}")
        raise InvalidArgumentError("Invalid medicine type", field="medicine_type_id")
    except Exception:
        db.rollback()
        raise


def assign_delivery(db: Session, delivery_id: str, operator: UserResponse) -> Delivery:
    """Bind the best available drone to a pending delivery and move it to preparing."""
    _require_role(operator, UserRole.OPERATOR, UserRole.ADMIN)

    try:
        delivery = delivery_store.get_delivery(db, delivery_id, for_update=True)
        if not delivery:
            raise ResourceNotFoundError("Delivery", delivery_id)

        if delivery.status != DeliveryStatus.PENDING.value:
            logger.warning(f"Assign rejected for delivery {delivery_id} in status {delivery.status}")
            raise ConflictError(
                "Delivery already assigned or not pending",
                details={"status": delivery.status}
            )

        # Drones claimed by a concurrent assign between selection and claim
        lost = []
        while True:
            drone = drone_pool.find_best_available(db, exclude=lost)
            if not drone:
                logger.warning(f"No available drones for delivery {delivery_id}")
                raise ResourceExhaustedError("No available drones at the moment")
            if drone_pool.mark_delivering(db, drone.id):
                break
            lost.append(drone.id)
            logger.info(f"Drone {drone.id} taken concurrently; trying next for delivery {delivery_id}")

        bound = delivery_store.compare_and_set(
            db,
            delivery_id,
            [DeliveryStatus.PENDING.value],
            {
                Delivery.drone_id: drone.id,
                Delivery.operator_id: operator.id,
                Delivery.status: DeliveryStatus.PREPARING.value,
            }
        )
        if not bound:
            raise ConflictError("Delivery already assigned or not pending")

        db.commit()
        db.refresh(delivery)

        logger.info(f"Delivery {delivery_id} assigned to drone {drone.id} by operator {operator.id}")
        return delivery

    except Exception:
        db.rollback()
        raise


def advance_delivery_status(
    db: Session,
    delivery_id: str,
    operator: UserResponse,
    new_status: Optional[str],
    rng: Optional[random.Random] = None
) -> Delivery:
    """Move a delivery to ``new_status``; terminal states release its drone with a battery drain.

    Adjacency between non-terminal states is not enforced (``pending`` may go
    straight to ``delivered``), but a terminal delivery never changes again.
    """
    _require_role(operator, UserRole.OPERATOR, UserRole.ADMIN)

    if not new_status:
        raise InvalidArgumentError("Status is required", field="status")
    if new_status not in UPDATABLE_STATUSES:
        raise InvalidArgumentError(
            "Invalid status",
            field="status",
            details={"allowed": list(UPDATABLE_STATUSES)}
        )

    rng = rng or random

    try:
        delivery = delivery_store.get_delivery(db, delivery_id, for_update=True)
        if not delivery:
            raise ResourceNotFoundError("Delivery", delivery_id)

        current_status = delivery.status
        if current_status in TERMINAL_STATUSES:
            logger.warning(f"Status change rejected for delivery {delivery_id}: already {current_status}")
            raise ConflictError(
                f"Delivery is already {current_status}",
                details={"status": current_status}
            )

        changes = {Delivery.status: new_status}
        if delivery.operator_id is None:
            changes[Delivery.operator_id] = operator.id
        if new_status == DeliveryStatus.DELIVERED.value:
            changes[Delivery.actual_arrival] = datetime.utcnow()

        if not delivery_store.compare_and_set(db, delivery_id, [current_status], changes):
            raise ConflictError("Delivery status changed concurrently; reload and retry")

        if new_status in TERMINAL_STATUSES and delivery.drone_id:
            drain = rng.randint(settings.BATTERY_DRAIN_MIN, settings.BATTERY_DRAIN_MAX)
            drone_pool.mark_available(db, delivery.drone_id, battery_delta=drain)

        db.commit()
        db.refresh(delivery)

        logger.info(f"Delivery {delivery_id}: {current_status} -> {new_status} by {operator.id}")
        return delivery

    except Exception:
        db.rollback()
        raise


def cancel_delivery(db: Session, delivery_id: str, caller: UserResponse) -> Delivery:
    """Cancel a pending or preparing delivery. The drone is released without battery drain."""
    try:
        delivery = delivery_store.get_delivery(db, delivery_id, for_update=True)
        if not delivery:
            raise ResourceNotFoundError("Delivery", delivery_id)

        if _role_of(caller) != UserRole.ADMIN and delivery.requester_user_id != caller.id:
            logger.warning(f"User {caller.id} denied cancelling delivery {delivery_id}")
            raise AuthorizationError("Access denied")

        if delivery.status not in CANCELLABLE_STATUSES:
            raise ConflictError(
                "Cannot cancel delivery in current status",
                details={"status": delivery.status}
            )

        cancelled = delivery_store.compare_and_set(
            db,
            delivery_id,
            CANCELLABLE_STATUSES,
            {Delivery.status: DeliveryStatus.CANCELLED.value}
        )
        if not cancelled:
            raise ConflictError("Delivery status changed concurrently; reload and retry")

        if delivery.drone_id:
            drone_pool.mark_available(db, delivery.drone_id)

        db.commit()
        db.refresh(delivery)

        logger.info(f"Delivery {delivery_id} cancelled by {caller.id}")
        return delivery

    except Exception:
        db.rollback()
        raise


def get_delivery_for(db: Session, delivery_id: str, caller: UserResponse) -> Delivery:
    delivery = delivery_store.get_delivery(db, delivery_id)
    if not delivery:
        raise ResourceNotFoundError("Delivery", delivery_id)

    if _role_of(caller) == UserRole.USER and delivery.requester_user_id != caller.id:
        logger.warning(f"User {caller.id} denied reading delivery {delivery_id}")
        raise AuthorizationError("Access denied")

    return delivery


def list_deliveries_for(
    db: Session,
    caller: UserResponse,
    skip: int = 0,
    limit: Optional[int] = None
) -> List[Delivery]:
    """Deliveries visible to ``caller``, newest first."""
    role = _role_of(caller)
    if role == UserRole.USER:
        return delivery_store.list_for_requester(db, caller.id, skip=skip, limit=limit)
    if role == UserRole.OPERATOR:
        return delivery_store.list_for_operator(db, caller.id, skip=skip, limit=limit)
    return delivery_store.list_all(db, skip=skip, limit=limit)


def reconcile_drones(db: Session) -> int:
    """Release drones left delivering without an active delivery bound to them.

    Run at startup to repair state after a crash. Returns how many drones were
    released.
    """
    try:
        released = 0
        stuck = db.query(Drone).filter(Drone.status == DroneStatus.DELIVERING.value).all()
        for drone in stuck:
            active = db.query(Delivery.id).filter(
                Delivery.drone_id == drone.id,
                Delivery.status.in_(ACTIVE_STATUSES)
            ).first()
            if active:
                continue
            if drone_pool.mark_available(db, drone.id):
                released += 1

        db.commit()
        if released:
            logger.warning(f"Reconciled {released} drone(s) left delivering without an active delivery")
        return released

    except Exception:
        db.rollback()
        raise
