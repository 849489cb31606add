import asyncio
from logging.config import fileConfig

from alembic import context

# this is the Alembic Config object, which provides
# access to the values within the .ini file in use.
config = context.config

# Read DATABASE_URL through the app settings (environment first, then .env)
# so the alembic CLI and the app always agree on the target database.
from seva_backend.config import get_settings

config.set_main_option("sqlalchemy.url", get_settings().database_url)

# Interpret the config file for Python logging.
fileConfig(config.config_file_name)

# Import the app's metadata
from seva_backend.database import engine
from seva_backend.models import SQLModel
target_metadata = SQLModel.metadata


def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(url=url, target_metadata=target_metadata, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def do_run_migrations(connection):
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()


async def run_async_migrations():
    async with engine.connect() as connection:
        await connection.run_sync(do_run_migrations)


def run_migrations_online():
    asyncio.run(run_async_migrations())


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
