"""Alembic environment for the job board schema."""

import sys
from logging.config import fileConfig
from pathlib import Path

from sqlalchemy import engine_from_config, pool

from alembic import context

# Make the app package importable when running `alembic` from the repo root
sys.path.insert(0, str(Path(__file__).parent.parent))

from app.config import settings  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.models import Application, Invoice, Job, PaymentIntent, User  # noqa: E402,F401

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata

# asyncpg query options and their psycopg2 spelling
_SSL_OPTIONS = {
    "ssl=false": "sslmode=disable",
    "ssl=true": "sslmode=require",
    "ssl=require": "sslmode=require",
}


def sync_database_url(url: str) -> str:
    """Migrations run synchronously through psycopg2."""
    if not url.startswith("postgresql+asyncpg://"):
        return url
    url = url.replace("postgresql+asyncpg://", "postgresql://", 1)
    for async_opt, sync_opt in _SSL_OPTIONS.items():
        url = url.replace(f"?{async_opt}", f"?{sync_opt}").replace(f"&{async_opt}", f"&{sync_opt}")
    return url


config.set_main_option("sqlalchemy.url", sync_database_url(settings.DATABASE_URL))


def run_migrations_offline() -> None:
    """Emit SQL to stdout without a database connection."""
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        compare_type=True,
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Apply migrations against the configured database."""
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata, compare_type=True)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
