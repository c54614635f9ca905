# =============================================================================
# GIGA WMS v1.0 - ALEMBIC ENV
# =============================================================================
# Migrazioni SQL esplicite (nessun metadata ORM)
# =============================================================================

from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from wms.config import config as wms_config


alembic_config = context.config

if alembic_config.config_file_name is not None:
    fileConfig(alembic_config.config_file_name)

alembic_config.set_main_option(
    "sqlalchemy.url",
    wms_config.database_url.replace("%", "%%")
)

target_metadata = None


def run_migrations_offline() -> None:
    """Genera lo script SQL senza connessione."""
    context.configure(
        url=alembic_config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )

    with context.begin_transaction():
        context.run_migrations()


def run_migrations_online() -> None:
    """Applica le migrazioni sul database configurato."""
    connectable = engine_from_config(
        alembic_config.get_section(alembic_config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )

    with connectable.connect() as connection:
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
