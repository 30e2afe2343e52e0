import re
from logging.config import fileConfig

from sqlalchemy import engine_from_config, pool

from alembic import context
from app.core.config import settings

config = context.config

if config.config_file_name is not None:
    fileConfig(config.config_file_name)

# The service uses raw asyncpg; there is no SQLAlchemy ORM / declarative Base.
# Migrations are explicit op.* calls, so autogenerate is not used.
target_metadata = None

# Alembic runs synchronously: point SQLAlchemy at psycopg whatever driver the URL names.
config.set_main_option(
    "sqlalchemy.url",
    re.sub(r"^postgres(?:ql)?(\+\w+)?://", "postgresql+psycopg://", settings.DATABASE_URL).replace(
        "%", "%%"
    ),
)


def run_migrations_offline() -> None:
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
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
        context.configure(connection=connection, target_metadata=target_metadata)

        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
