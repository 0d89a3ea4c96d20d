"""Delete expired rows from the refresh token ledger.

Expired tokens already fail refresh and are removed when presented; this
job clears the ones nobody presents again.  Intended for cron.

Run with:
    DATABASE_URL=postgresql+asyncpg://... python scripts/purge_refresh_tokens.py
"""

from __future__ import annotations

import asyncio
import logging
import sys

from event_portal.core.config import SETTINGS
from event_portal.core.logging import setup_logging
from event_portal.db import engine as db_engine
from event_portal.db.stores import sql_stores
from event_portal.services.session_service import purge_expired_refresh_tokens

logger = logging.getLogger("purge_refresh_tokens")


async def run() -> int:
    factory = db_engine.async_session_factory
    if factory is None or db_engine.engine is None:
        logger.error("DATABASE_URL is not configured; nothing to purge")
        return 1

    async with factory() as session:
        async with session.begin():
            await purge_expired_refresh_tokens(sql_stores(session))
    await db_engine.engine.dispose()
    return 0


def main() -> None:
    setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)
    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
