import os
from logging.config import fileConfig
from sqlalchemy import create_engine
from alembic import context

config = context.config
if config.config_file_name is not None:
    # Keep the app's loggers alive when migrations run in-process
    fileConfig(config.config_file_name, disable_existing_loggers=False)


def database_url() -> str:
    """DATABASE_PATH (exported by database.init_db) wins over alembic.ini."""
    database_path = os.getenv("DATABASE_PATH")
    if database_path:
        return f"sqlite:///{database_path}"
    return config.get_main_option("sqlalchemy.url")


def run_migrations_offline(url: str) -> None:
    """Emit SQL without a connection."""
    context.configure(url=url, target_metadata=None, literal_binds=True)
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online(url: str) -> None:
    # Batch mode lets SQLite emulate ALTER TABLE in later migrations
    with create_engine(url).connect() as connection:
        context.configure(connection=connection, target_metadata=None, render_as_batch=True)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline(database_url())
else:
    run_migrations_online(database_url())
