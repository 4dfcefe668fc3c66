"""
Shared fixtures: a fresh in-memory database per test.
"""

import unittest
import uuid
from sqlalchemy.orm import sessionmaker

from database.base import Base
from database.connection import build_engine, create_tables
from models.delivery import Delivery
from models.drone import Drone
from models.reference import Hospital, MedicineType, Village
from models.user import User
from schemas.user import UserResponse


class DatabaseTestCase(unittest.TestCase):
    """Base class giving each test its own empty schema."""

    def database_url(self):
        return "sqlite://"

    def setUp(self):
        self.engine = build_engine(self.database_url())
        create_tables(self.engine)
        self.SessionFactory = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)
        self.db = self.SessionFactory()

    def tearDown(self):
        self.db.close()
        Base.metadata.drop_all(self.engine)
        self.engine.dispose()

    def make_user(self, role="user", email=None):
        user = User(
            email=email or f"{role}-{uuid.uuid4().hex[:8]}@example.com",
            password_hash="not-a-real-hash",
            name=f"Test {role}",
            role=role,
        )
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return UserResponse.from_orm(user)

    def make_hospital(self, latitude=None, longitude=None):
        hospital = Hospital(name="District Hospital", latitude=latitude, longitude=longitude)
        self.db.add(hospital)
        self.db.commit()
        return hospital

    def make_village(self, latitude=None, longitude=None):
        village = Village(name="Hill Village", latitude=latitude, longitude=longitude)
        self.db.add(village)
        self.db.commit()
        return village

    def make_medicine(self):
        medicine = MedicineType(name="Vaccines", requires_refrigeration=True)
        self.db.add(medicine)
        self.db.commit()
        return medicine

    def make_drone(self, name, battery_level=100, status="available", drone_id=None):
        drone = Drone(name=name, model="Test X1", battery_level=battery_level, status=status)
        if drone_id:
            drone.id = drone_id
        self.db.add(drone)
        self.db.commit()
        self.db.refresh(drone)
        return drone

    def reload(self, instance):
        self.db.expire_all()
        return self.db.get(type(instance), instance.id)

    def count_deliveries(self):
        return self.db.query(Delivery).count()


class FixedRandom:
    """Stand-in for ``random`` returning a chosen drain."""

    def __init__(self, value):
        self.value = value
        self.calls = []

    def randint(self, low, high):
        self.calls.append((low, high))
        return self.value
