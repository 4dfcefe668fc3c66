from models.user import User, UserRole
from models.reference import City, Hospital, Village, MedicineType
from models.drone import Drone, DroneStatus
from models.delivery import Delivery, DeliveryStatus, DeliveryPriority

__all__ = [
    "User",
    "UserRole",
    "City",
    "Hospital",
    "Village",
    "MedicineType",
    "Drone",
    "DroneStatus",
    "Delivery",
    "DeliveryStatus",
    "DeliveryPriority",
]
