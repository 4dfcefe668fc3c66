import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Numeric, Text, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from database.base import Base
import enum

class DeliveryStatus(str, enum.Enum):
    PENDING = "pending"
    PREPARING = "preparing"
    IN_TRANSIT = "in-transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    FAILED = "failed"

class DeliveryPriority(str, enum.Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    EMERGENCY = "emergency"

# A bound drone is busy only while its delivery is in one of these
ACTIVE_STATUSES = (DeliveryStatus.PREPARING.value, DeliveryStatus.IN_TRANSIT.value)
TERMINAL_STATUSES = (
    DeliveryStatus.DELIVERED.value,
    DeliveryStatus.CANCELLED.value,
    DeliveryStatus.FAILED.value,
)

class Delivery(Base):
    __tablename__ = "deliveries"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    hospital_id = Column(String(36), ForeignKey("hospitals.id"), nullable=False)
    village_id = Column(String(36), ForeignKey("villages.id"), nullable=False)
    medicine_type_id = Column(String(36), ForeignKey("medicine_types.id"), nullable=False)
    requester_user_id = Column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    operator_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    drone_id = Column(String(36), ForeignKey("drones.id"), nullable=True, index=True)
    status = Column(String(50), nullable=False, default=DeliveryStatus.PENDING.value, index=True)
    priority = Column(String(50), nullable=False, default=DeliveryPriority.NORMAL.value)
    distance_km = Column(Numeric(6, 2), nullable=False)
    eta_minutes = Column(Integer, nullable=False)
    estimated_arrival = Column(DateTime, nullable=True)
    actual_arrival = Column(DateTime, nullable=True)
    notes = Column(Text, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    hospital = relationship("Hospital")
    village = relationship("Village")
    medicine_type = relationship("MedicineType")
    drone = relationship("Drone", back_populates="deliveries")
    requester = relationship("User", back_populates="deliveries_requested", foreign_keys=[requester_user_id])
    operator = relationship("User", back_populates="deliveries_operated", foreign_keys=[operator_id])
