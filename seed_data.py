#!/usr/bin/env python3
"""
Seed script with sample reference data, a small drone fleet and one account per role
"""
import logging
from sqlalchemy.orm import Session

from database.connection import SessionLocal, create_tables
from models.reference import City, Hospital, Village, MedicineType
from models.drone import Drone
from models.user import UserRole
from schemas.drone import DroneCreate
from services.auth import create_user, get_user_by_email
from services.drone_pool import create_drone

logger = logging.getLogger(__name__)

SAMPLE_PASSWORD = "Password123!"

ACCOUNTS = [
    ("admin@dronemed.in", "Fleet Admin", UserRole.ADMIN),
    ("operator@dronemed.in", "Control Room Operator", UserRole.OPERATOR),
    ("user@dronemed.in", "Village Health Worker", UserRole.USER),
]

CITIES = [
    {
        "name": "Pune",
        "state": "Maharashtra",
        "latitude": 18.5204,
        "longitude": 73.8567,
        "hospitals": [
            {"name": "Sassoon General Hospital", "pincode": "411001", "latitude": 18.5286, "longitude": 73.8743},
            {"name": "Ruby Hall Clinic", "pincode": "411001", "latitude": 18.5314, "longitude": 73.8777},
        ],
        "villages": [
            {"name": "Khed Shivapur", "population": 8200, "latitude": 18.3630, "longitude": 73.8540},
            {"name": "Velhe", "population": 3100, "latitude": 18.2960, "longitude": 73.6370},
        ],
    },
    {
        "name": "Nashik",
        "state": "Maharashtra",
        "latitude": 19.9975,
        "longitude": 73.7898,
        "hospitals": [
            {"name": "Nashik Civil Hospital", "pincode": "422001", "latitude": 20.0059, "longitude": 73.7910},
        ],
        "villages": [
            {"name": "Trimbak", "population": 12000, "latitude": 19.9322, "longitude": 73.5293},
            # No survey coordinates yet; deliveries fall back to the default distance
            {"name": "Harsul", "population": 2500, "latitude": None, "longitude": None},
        ],
    },
]

MEDICINE_TYPES = [
    {"name": "Vaccines", "icon": "💉", "description": "Routine immunisation stock", "requires_refrigeration": True},
    {"name": "Antivenom", "icon": "🐍", "description": "Snake bite antivenom", "requires_refrigeration": True},
    {"name": "Blood Units", "icon": "🩸", "description": "Packed red blood cells", "requires_refrigeration": True},
    {"name": "First Aid", "icon": "🩹", "description": "Dressings and antiseptics", "requires_refrigeration": False},
]

DRONES = [
    DroneCreate(name="Garuda-1", model="MedLift X4", battery_level=100, max_payload_kg=5.0, max_range_km=60.0),
    DroneCreate(name="Garuda-2", model="MedLift X4", battery_level=85, max_payload_kg=5.0, max_range_km=60.0),
    DroneCreate(name="Sarus-1", model="AeroCare Q2", battery_level=70, max_payload_kg=2.5, max_range_km=40.0),
    DroneCreate(name="Sarus-2", model="AeroCare Q2", battery_level=40, max_payload_kg=2.5, max_range_km=40.0, status="maintenance"),
]

def seed_accounts(db: Session):
    for email, name, role in ACCOUNTS:
        if get_user_by_email(db, email):
            continue
        create_user(db, email=email, password=SAMPLE_PASSWORD, name=name, role=role)
        print(f"Created {role.value} account: {email}")

def seed_reference_data(db: Session):
    if db.query(City).first():
        print("Reference data already present, skipping")
        return

    for city_data in CITIES:
        city = City(
            name=city_data["name"],
            state=city_data["state"],
            latitude=city_data["latitude"],
            longitude=city_data["longitude"],
        )
        db.add(city)
        db.flush()

        for hospital in city_data["hospitals"]:
            db.add(Hospital(city_id=city.id, **hospital))
        for village in city_data["villages"]:
            db.add(Village(city_id=city.id, **village))

    for medicine in MEDICINE_TYPES:
        db.add(MedicineType(**medicine))

    db.commit()
    print("Reference data created")

def seed_drones(db: Session):
    for drone_data in DRONES:
        if db.query(Drone).filter(Drone.name == drone_data.name).first():
            continue
        create_drone(db, drone_data)
        print(f"Created drone: {drone_data.name}")

def main():
    logging.basicConfig(level=logging.INFO)
    create_tables()

    db = SessionLocal()
    try:
        seed_accounts(db)
        seed_reference_data(db)
        seed_drones(db)
        print(f"Seeding complete. Sample accounts use password {SAMPLE_PASSWORD}")
    finally:
        db.close()

if __name__ == "__main__":
    main()
