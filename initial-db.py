import asyncio
from skillswap import db
from skillswap.core import config

if __name__ == "__main__":
    settings = config.get_settings()
    print(f"Recreating tables on {settings.DATABASE_URL}")
    db.init_db(settings)
    asyncio.run(db.recreate_table())
