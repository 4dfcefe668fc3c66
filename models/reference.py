import uuid
from sqlalchemy import Column, String, Integer, Numeric, Text, Boolean, ForeignKey
from sqlalchemy.orm import relationship
from database.base import Base

class City(Base):
    __tablename__ = "cities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String(255), nullable=False)
    state = Column(String(255), nullable=True)
    country = Column(String(255), default="India")
    latitude = Column(Numeric(10, 7), nullable=True)
    longitude = Column(Numeric(10, 7), nullable=True)

    hospitals = relationship("Hospital", back_populates="city")
    villages = relationship("Village", back_populates="city")

class Hospital(Base):
    __tablename__ = "hospitals"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String(255), nullable=False)
    city_id = Column(String(36), ForeignKey("cities.id"), nullable=True)
    address = Column(Text, nullable=True)
    contact_number = Column(String(50), nullable=True)
    pincode = Column(String(10), nullable=True)
    latitude = Column(Numeric(10, 7), nullable=True)
    longitude = Column(Numeric(10, 7), nullable=True)

    city = relationship("City", back_populates="hospitals")

class Village(Base):
    __tablename__ = "villages"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String(255), nullable=False)
    city_id = Column(String(36), ForeignKey("cities.id"), nullable=True)
    population = Column(Integer, nullable=True)
    latitude = Column(Numeric(10, 7), nullable=True)
    longitude = Column(Numeric(10, 7), nullable=True)

    city = relationship("City", back_populates="villages")

class MedicineType(Base):
    __tablename__ = "medicine_types"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()), index=True)
    name = Column(String(255), nullable=False)
    icon = Column(String(10), nullable=True)
    description = Column(Text, nullable=True)
    requires_refrigeration = Column(Boolean, default=False)
