"""Idempotent database seeding for development and ephemeral sandboxes.

Safe to run repeatedly: rows are only inserted when no row with the same
natural key exists.

Usage:
    python -m app.seed
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from app.core.config import settings
from app.core.logging import setup_logging
from models import Base, Item

logger = logging.getLogger(__name__)

SAMPLE_ITEMS = [
    {"name": "Sample Item 1", "description": "First sample item"},
    {"name": "Sample Item 2", "description": "Second sample item"},
]


async def seed_items(db: AsyncSession, items: list[dict] | None = None) -> int:
    """Insert sample items that are not present yet. Returns how many were added."""
    items = SAMPLE_ITEMS if items is None else items
    added = 0
    for data in items:
        result = await db.execute(select(Item.id).where(Item.name == data["name"]))
        if result.first() is not None:
            continue
        db.add(Item(**data))
        added += 1

    await db.commit()
    return added


async def seed() -> None:
    from app.database import AsyncSessionLocal, engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    try:
        async with AsyncSessionLocal() as db:
            added = await seed_items(db)
        logger.info("Seeded %d item(s)", added)
    finally:
        await engine.dispose()


def main():
    """Console entry point."""
    setup_logging(settings)
    asyncio.run(seed())


if __name__ == "__main__":
    main()
