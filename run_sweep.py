"""Move elapsed Pending matches to Finished once; meant to be run from cron."""

import asyncio

from loguru import logger

from app.core.config import settings
from app.core.db import Database
from app.services.match import MatchService
from app.utils.logging import setup_logging


async def main() -> None:
    setup_logging("sweep.log")
    database = Database(settings.db_url)
    try:
        async with database.session() as session:
            updated = await MatchService(session).update_match_statuses()
        logger.info(f"Status sweep done, {updated} matches finished")
    finally:
        await database.dispose()


if __name__ == "__main__":
    asyncio.run(main())
