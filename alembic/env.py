"""Migration environment for the registry tables."""

from logging.config import fileConfig

from sqlalchemy import create_engine, pool

from alembic import context

from app_registry.infrastructure.postgres.config import get_database_settings
from app_registry.infrastructure.postgres.database import Base
from app_registry.infrastructure.postgres import models  # noqa: F401  registers tables on Base

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# applications, domains, legacy_domains
target_metadata = Base.metadata


def _database_url() -> str:
    return config.get_main_option("sqlalchemy.url") or get_database_settings().database_url


def run_migrations_offline() -> None:
    """Emit SQL for the registry tables without a live connection."""
    context.configure(
        url=_database_url(),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations over a single unpooled connection."""
    connectable = create_engine(_database_url(), poolclass=pool.NullPool)

    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            compare_type=True,
        )

        with context.begin_transaction():
            context.run_migrations()

    connectable.dispose()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
