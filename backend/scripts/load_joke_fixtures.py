#!/usr/bin/env python3
"""
Load sample jokes into the database for local development.
Creates the jokes table when it is missing and skips loading if rows exist.
"""

import asyncio

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import create_async_engine

from jokebox.core.config import get_settings
from jokebox.core.database import Base
from jokebox.persistence.models import Joke

SAMPLE_JOKES = [
    {
        "title": "Why do programmers prefer dark mode?",
        "body": "Because light attracts bugs.",
    },
    {
        "title": "How many programmers does it take to change a light bulb?",
        "body": "None. It's a hardware problem.",
    },
    {
        "title": "Why did the database administrator leave his wife?",
        "body": "She had one-to-many relationships.",
    },
    {
        "title": "Why was the cache so calm?",
        "body": "It knew that even when the database went down, it could still serve stale jokes.",
    },
]


async def load_fixtures():
    """Create the schema and insert sample jokes."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)

    try:
        async with engine.begin() as conn:
            print("Loading joke fixtures...")
            await conn.run_sync(Base.metadata.create_all)

            result = await conn.execute(select(Joke.id).limit(1))
            if result.first():
                print("⚠️  Fixtures already loaded, skipping...")
                return

            await conn.execute(Joke.__table__.insert(), SAMPLE_JOKES)
            print(f"✓ Inserted {len(SAMPLE_JOKES)} jokes")

    finally:
        await engine.dispose()


async def verify_fixtures():
    """Verify that fixtures were loaded correctly."""
    settings = get_settings()
    engine = create_async_engine(settings.database_url, echo=False)

    try:
        async with engine.connect() as conn:
            print("\nVerifying joke fixtures...")
            result = await conn.execute(select(func.count()).select_from(Joke))
            joke_count = result.scalar_one()
            print(f"✓ Jokes: {joke_count}")

            if joke_count > 0:
                print("\n✅ All fixtures verified!")
                return True
            print("\n❌ Fixture verification failed!")
            return False

    finally:
        await engine.dispose()


async def main():
    """Main entry point."""
    await load_fixtures()
    await verify_fixtures()


if __name__ == "__main__":
    asyncio.run(main())
