"""
Database initialization script for Dolu Logistics
Creates tables and seeds the default reference data
"""
import argparse
import asyncio

from sqlalchemy import select, func

from dolu.db.database import Base, engine, get_async_session, init_db, close_db
from dolu.db.seed import seed_all
from dolu.models import State, Zone, Area, ZoneRate, Addon, ItemCategory, MessageTemplate, AppSetting


async def main(reset: bool):
    if reset:
        print("🗑️ Dropping existing tables...")
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    print("📦 Creating tables...")
    await init_db()
    print("✅ Tables ready")

    print("🌱 Seeding reference data...")
    async with get_async_session() as db:
        await seed_all(db)

        for model in (State, Zone, Area, ZoneRate, Addon, ItemCategory, MessageTemplate, AppSetting):
            count = await db.scalar(select(func.count()).select_from(model))
            print(f"   {model.__tablename__}: {count}")

    await close_db()
    print("✅ Database initialized")


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create the Dolu Logistics schema and seed defaults")
    parser.add_argument("--reset", action="store_true", help="drop all tables first")
    args = parser.parse_args()
    asyncio.run(main(args.reset))
