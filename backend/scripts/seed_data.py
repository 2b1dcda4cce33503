"""Seed script: create demo Auth0 accounts and repopulate the prompts table.

Usage:
    PYTHONPATH=backend/src python backend/scripts/seed_data.py

Reads DATABASE_URL, AUTH0_DOMAIN, AUTH0_MANAGEMENT_CLIENT_ID and
AUTH0_MANAGEMENT_CLIENT_SECRET from the environment (or .env).

Not idempotent: every run deletes all existing prompts and creates new Auth0
accounts. Exits non-zero if anything fails.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from core.auth0_management import Auth0ManagementClient
from core.config import get_settings
from db.session import build_engine
from services.seed_service import seed

logger = logging.getLogger('seed_data')


async def run() -> None:
    settings = get_settings()
    settings.require_management_credentials()

    engine = build_engine(settings.database_url)
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    logger.info('Starting database seeding...')
    try:
        async with Auth0ManagementClient.from_settings(settings) as client:
            async with session_factory() as session:
                result = await seed(session, client)
                await session.commit()
        logger.info(
            'Seeding completed: %d accounts, %d prompts.',
            len(result.accounts),
            result.inserted,
        )
    finally:
        await engine.dispose()
        logger.info('Seed script finished.')


def main() -> None:
    logging.basicConfig(
        level=get_settings().log_level,
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    asyncio.run(run())


if __name__ == '__main__':
    main()
