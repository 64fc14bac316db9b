"""
Base models and mixins for the database
"""

from datetime import UTC, datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

# Bump together with an alembic revision when a table's shape changes
CURRENT_SCHEMA_VERSION = 1


class Base(DeclarativeBase):
    pass


class TimestampMixin:
    """Timezone-aware UTC created/updated timestamps."""

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(UTC),
        nullable=False,
    )


class SchemaVersionMixin:
    """Row-level schema version for aggregates that evolve over time."""

    schema_version: Mapped[int] = mapped_column(Integer, nullable=False, default=CURRENT_SCHEMA_VERSION)
