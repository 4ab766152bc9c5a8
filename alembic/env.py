from logging.config import fileConfig
from sqlalchemy import engine_from_config
from sqlalchemy import pool
from alembic import context
from sqlmodel import SQLModel
from app.models import *  # importa os modelos aqui

from app.core.config import load_settings, resolve_connection_string

# ✅ DATABASE_URL ou DEFAULT_CONNECTION (mesma resolução da API)
DATABASE_URL = resolve_connection_string(load_settings())

# Configuração Alembic
config = context.config
fileConfig(config.config_file_name)

# ✅ Injeta a URL dinamicamente; % precisa ser escapado no configparser
config.set_main_option("sqlalchemy.url", DATABASE_URL.replace("%", "%%"))

# Metadados dos modelos
target_metadata = SQLModel.metadata

def run_migrations_offline():
    url = config.get_main_option("sqlalchemy.url")
    context.configure(
        url=url,
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
        include_schemas=True,
    )
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online():
    connectable = engine_from_config(
        config.get_section(config.config_ini_section),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            include_schemas=True,
        )
        with context.begin_transaction():
            context.run_migrations()

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
