from logging.config import fileConfig

from alembic import context
from sqlalchemy import engine_from_config, pool

from trainer_assignment.core.config import settings
from trainer_assignment.database import Base
from trainer_assignment.models import (  # noqa: F401
    CalendarEntry,
    CoursePurchase,
    PurchaseSession,
    ScheduleSlot,
    Zone,
)

_EXPECTED_TABLES = {
    "calendar_entries",
    "course_purchases",
    "purchase_sessions",
    "schedule_slots",
    "zones",
}
_registered = set(Base.metadata.tables)
assert _registered == _EXPECTED_TABLES, (
    f"Model tables {_registered} must match migration tables {_EXPECTED_TABLES}"
)

config = context.config
if config.config_file_name is not None:
    fileConfig(config.config_file_name)

target_metadata = Base.metadata
config.set_main_option("sqlalchemy.url", settings.database_url)


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
        context.configure(
            connection=connection,
            target_metadata=target_metadata,
            render_as_batch=connection.dialect.name == "sqlite",
        )
        with context.begin_transaction():
            context.run_migrations()


if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
