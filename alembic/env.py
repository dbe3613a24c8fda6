"""
env.py — Alembic environment for the visitas / followups / app_state schema

The database URL always comes from visita360 Settings (DATABASE_URL), so the
CLI and the app hit the same database. SQLite gets batch mode because it
cannot ALTER most column properties in place.

Called by: alembic CLI
Depends on: visita360.models, visita360.config
"""

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from visita360.config import Settings
from visita360.models import Base  # noqa: F401  (registers every table on Base.metadata)

config = context.config
settings = Settings()
config.set_main_option("sqlalchemy.url", settings.database_url)

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
_batch = settings.is_sqlite


def _configure(**kwargs) -> None:
    context.configure(target_metadata=target_metadata, render_as_batch=_batch, **kwargs)


def run_migrations_offline() -> None:
    """Emit SQL to stdout instead of connecting."""
    _configure(
        url=config.get_main_option("sqlalchemy.url"),
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _configure(connection=connection)
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
