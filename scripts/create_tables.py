import asyncio
import sys
from pathlib import Path

from loguru import logger

sys.path.insert(0, str(Path(__file__).parent.parent))

from playerstats.db.database import Base, dispose_engine, init_models


async def main():
    logger.info("Creating database tables...")

    try:
        await init_models()
    except Exception as e:
        logger.exception(f"Error creating tables: {e}")
        sys.exit(1)
    finally:
        await dispose_engine()

    logger.success(f"Tables ready: {', '.join(sorted(Base.metadata.tables))}")


if __name__ == "__main__":
    asyncio.run(main())
