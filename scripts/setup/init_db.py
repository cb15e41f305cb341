# scripts/setup/init_db.py
"""
Initialize database — creates all tables (and the bookings overlap constraint on PostgreSQL).
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from app.database import create_tables, engine
from app.config import settings
from sqlalchemy import text


def main():
    print("Fleet Booking DB Initialization")
    print("=" * 40)
    print(f"Database: {settings.DATABASE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot connect to database: {e}")
        print("\nMake sure PostgreSQL is running:")
        print("  docker-compose up -d db")
        print("  # or: sudo systemctl start postgresql")
        sys.exit(1)

    print("\nCreating tables...")
    create_tables()
    print("All tables created")

    with engine.connect() as conn:
        result = conn.execute(text(
            "SELECT conname FROM pg_constraint WHERE conname = 'bookings_no_overlap'"
        ))
        has_constraint = result.first() is not None
    print(f"Overlap exclusion constraint: {'present' if has_constraint else 'MISSING'}")

    print("\nDatabase ready! Create an admin next:")
    print("   python scripts/setup/create_admin.py --user-id <identity provider id> --email admin")
    print("Then start the backend:")
    print("   uvicorn app.main:app --host 0.0.0.0 --port 8080 --reload")


if __name__ == "__main__":
    main()
