import uuid
from datetime import datetime
from sqlalchemy import Column, String, Integer, Numeric, DateTime, CheckConstraint
from sqlalchemy.orm import relationship
from database.base import Base
import enum

class DroneStatus(str, enum.Enum):
    AVAILABLE = "available"
    DELIVERING = "delivering"
    MAINTENANCE = "maintenance"
    CHARGING = "charging"

class Drone(Base):
    __tablename__ = "drones"
    __table_args__ = (
        CheckConstraint("battery_level >= 0 AND battery_level <= 100", name="ck_drones_battery_range"),
    )

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String(255), unique=True, nullable=False)
    model = Column(String(255), nullable=True)
    battery_level = Column(Integer, nullable=False, default=100)
    status = Column(String(50), nullable=False, default=DroneStatus.AVAILABLE.value, index=True)
    max_payload_kg = Column(Numeric(5, 2), nullable=True)
    max_range_km = Column(Numeric(6, 2), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    # Relationships
    deliveries = relationship("Delivery", back_populates="drone")
