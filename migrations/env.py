"""
Alembic environment configuration.

Runs whenever Alembic performs a migration. The database URL
comes from the application settings, and the schema from
Base.metadata after every ledger model has been imported.
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from general_ledger.config import get_settings
from general_ledger.models import Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# Importing general_ledger.models registers every table on Base.metadata,
# which is what autogenerate compares against the live database.
target_metadata = Base.metadata

config.set_main_option("sqlalchemy.url", get_settings().DATABASE_URL)


def run_migrations_offline() -> None:
    """Emit SQL for review without connecting to the database."""
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Connect and apply migrations directly."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
            # SQLite cannot ALTER most constraints in place
            render_as_batch=connection.dialect.name == "sqlite",
        )

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
