"""
Initialize databases: creates all tables, seeds the service catalog and the
default admin / attendant accounts.
Run once before first launch, or after adding new models.
Usage: python scripts/setup/init_db.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", ".."))

from sqlalchemy import inspect, text
from smartwash.config import settings
from smartwash.context import build_context
from smartwash.database import engine, local_engine


def main():
    print("SmartWash DB Initialization")
    print("=" * 40)
    print(f"Backing store: {settings.DATABASE_URL}")
    print(f"Local store:   {settings.LOCAL_STORE_URL}")

    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        print("Database connection OK")
    except Exception as e:
        print(f"Cannot connect to database: {e}")
        sys.exit(1)

    ctx = build_context()
    print("\nCreating tables and seeding catalog...")
    ctx.init(seed=True)
    created = ctx.seed_accounts()
    print(f"Seeded {created} account(s)")
    if created:
        print(f"   admin:     {settings.SEED_ADMIN_EMAIL}")
        print(f"   attendant: {settings.SEED_ATTENDANT_EMAIL}")
        print("   Change the seed passwords (SEED_*_PASSWORD in .env) before going live.")

    for label, eng in (("Backing store", engine), ("Local store", local_engine)):
        tables = sorted(inspect(eng).get_table_names())
        print(f"\n{label} tables ({len(tables)} total):")
        for t in tables:
            print(f"   - {t}")

    ctx.close()
    print("\nDatabase ready! You can now start the backend:")
    print(f"   uvicorn smartwash.main:app --host {settings.BACKEND_HOST} --port {settings.BACKEND_PORT} --reload")


if __name__ == "__main__":
    main()
