"""
Drone resource pool.

Owns every mutation of ``Drone.status`` and ``Drone.battery_level``. The
allocation helpers (``find_best_available``, ``mark_delivering``,
``mark_available``) never commit: they run inside the caller's unit of work
so a delivery write and its drone write succeed or roll back together.
The admin helpers further down commit their own changes.
"""
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from typing import Iterable, List, Optional
from datetime import datetime
import logging

from core.config import settings
from core.exceptions import ConflictError, InvalidArgumentError, ResourceNotFoundError
from models.drone import Drone, DroneStatus
from models.delivery import Delivery
from schemas.drone import DroneCreate, DroneUpdate

logger = logging.getLogger(__name__)


def find_best_available(db: Session, exclude: Iterable[str] = ()) -> Optional[Drone]:
    """Return the available drone with the highest battery, lowest id on ties."""
    query = db.query(Drone).filter(Drone.status == DroneStatus.AVAILABLE.value)
    exclude = list(exclude)
    if exclude:
        query = query.filter(Drone.id.notin_(exclude))
    return query.order_by(
        Drone.battery_level.desc(),
        Drone.id.asc()
    ).with_for_update().first()


def mark_delivering(db: Session, drone_id: str) -> bool:
    """Claim a drone. Returns False when another caller already took it."""
    claimed = db.query(Drone).filter(
        Drone.id == drone_id,
        Drone.status == DroneStatus.AVAILABLE.value
    ).update(
        {
            Drone.status: DroneStatus.DELIVERING.value,
            Drone.updated_at: datetime.utcnow()
        },
        synchronize_session=False
    )
    if claimed != 1:
        logger.warning(f"Drone {drone_id} could not be claimed; no longer available")
        return False

    logger.info(f"Drone {drone_id} marked delivering")
    return True


def drained_battery(battery_level: int, battery_delta: int) -> int:
    """Battery after a drain of ``battery_delta``, never below the configured floor."""
    if battery_delta <= 0:
        return battery_level
    return max(battery_level - battery_delta, settings.BATTERY_FLOOR)


def mark_available(db: Session, drone_id: str, battery_delta: int = 0) -> bool:
    """Release a delivering drone back to the pool.

    Releasing a drone that is not delivering is a no-op and returns False, so a
    repeated release never drains the battery twice.
    """
    drone = db.query(Drone).filter(Drone.id == drone_id).with_for_update().first()
    if drone is None:
        logger.warning(f"Attempt to release non-existent drone: {drone_id}")
        return False

    if drone.status != DroneStatus.DELIVERING.value:
        logger.info(f"Drone {drone_id} already {drone.status}; release skipped")
        return False

    new_battery = drained_battery(drone.battery_level, battery_delta)
    released = db.query(Drone).filter(
        Drone.id == drone_id,
        Drone.status == DroneStatus.DELIVERING.value
    ).update(
        {
            Drone.status: DroneStatus.AVAILABLE.value,
            Drone.battery_level: new_battery,
            Drone.updated_at: datetime.utcnow()
        },
        synchronize_session=False
    )
    if released != 1:
        return False

    logger.info(
        f"Drone {drone_id} released: battery {drone.battery_level} -> {new_battery}"
    )
    return True


# ---- Fleet administration ----

# Columns a partial update may not clear
REQUIRED_DRONE_FIELDS = ("name", "battery_level", "status")


def list_drones(db: Session, status: Optional[str] = None) -> List[Drone]:
    query = db.query(Drone)
    if status:
        query = query.filter(Drone.status == status)
    return query.order_by(Drone.name.asc()).all()


def get_drone(db: Session, drone_id: str) -> Drone:
    drone = db.query(Drone).filter(Drone.id == drone_id).first()
    if not drone:
        raise ResourceNotFoundError("Drone", drone_id)
    return drone


def create_drone(db: Session, drone_data: DroneCreate) -> Drone:
    """Register a new drone in the fleet."""
    try:
        if db.query(Drone).filter(Drone.name == drone_data.name).first():
            logger.warning(f"Attempt to create drone with existing name: {drone_data.name}")
            raise ConflictError(f"Drone name '{drone_data.name}' is already taken")

        db_drone = Drone(
            name=drone_data.name,
            model=drone_data.model,
            battery_level=drone_data.battery_level,
            status=drone_data.status.value,
            max_payload_kg=drone_data.max_payload_kg,
            max_range_km=drone_data.max_range_km,
        )
        db.add(db_drone)
        db.commit()
        db.refresh(db_drone)

        logger.info(f"Drone created successfully: {db_drone.name} ({db_drone.id})")
        return db_drone

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating drone: {str(e)}")
        raise ConflictError("Drone name already exists")
    except Exception:
        db.rollback()
        raise


def update_drone(db: Session, drone_id: str, drone_data: DroneUpdate) -> Drone:
    """Update fleet details of a drone that is not out on a delivery."""
    try:
        db_drone = db.query(Drone).filter(Drone.id == drone_id).with_for_update().first()
        if not db_drone:
            raise ResourceNotFoundError("Drone", drone_id)

        update_data = drone_data.dict(exclude_unset=True)

        for field in REQUIRED_DRONE_FIELDS:
            if field in update_data and update_data[field] is None:
                raise InvalidArgumentError(f"Drone {field} cannot be null", field=field)

        touches_pool_state = "status" in update_data or "battery_level" in update_data
        if touches_pool_state and db_drone.status == DroneStatus.DELIVERING.value:
            logger.warning(f"Attempt to change status/battery of delivering drone: {drone_id}")
            raise ConflictError("Cannot change status or battery of a drone that is delivering")

        if "name" in update_data:
            existing = db.query(Drone).filter(
                Drone.name == update_data["name"],
                Drone.id != drone_id
            ).first()
            if existing:
                raise ConflictError(f"Drone name '{update_data['name']}' is already taken")

        for field, value in update_data.items():
            if field == "status" and value is not None:
                value = DroneStatus(value).value
            setattr(db_drone, field, value)

        db_drone.updated_at = datetime.utcnow()
        db.commit()
        db.refresh(db_drone)

        logger.info(f"Drone updated successfully: {drone_id}")
        return db_drone

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error updating drone {drone_id}: {str(e)}")
        raise ConflictError("Drone update conflicts with an existing drone")
    except Exception:
        db.rollback()
        raise


def delete_drone(db: Session, drone_id: str) -> None:
    """Remove a drone that no delivery has ever referenced."""
    try:
        db_drone = db.query(Drone).filter(Drone.id == drone_id).first()
        if not db_drone:
            raise ResourceNotFoundError("Drone", drone_id)

        referenced = db.query(Delivery.id).filter(Delivery.drone_id == drone_id).first()
        if referenced:
            logger.warning(f"Attempt to delete drone referenced by deliveries: {drone_id}")
            raise ConflictError("Cannot delete a drone referenced by deliveries")

        db.delete(db_drone)
        db.commit()
        logger.info(f"Drone deleted successfully: {drone_id}")

    except Exception:
        db.rollback()
        raise
