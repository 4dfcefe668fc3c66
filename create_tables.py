#!/usr/bin/env python3
import sys

from database.connection import create_tables, engine

def create_all_tables():
    """Create all database tables"""
    try:
        print("Creating database tables...")
        create_tables(engine)
        print("All tables created successfully!")
        return True
    except Exception as e:
        print(f"Failed to create tables: {e}")
        return False

if __name__ == "__main__":
    success = create_all_tables()
    sys.exit(0 if success else 1)
