"""
Declarative base for wage protection persistence.

Column conventions shared by every table:

* primary key ``id``: a uuid4, stored as 36-character text so the schema is
  identical on PostgreSQL and SQLite;
* ``Decimal`` annotations map to ``Numeric(38, 9)``, never a float column;
* ``datetime`` annotations are timezone-aware.

``TrackedBase`` adds who/when audit columns.  This module imports nothing
from the wage file modules.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any, ClassVar
from uuid import UUID, uuid4

from sqlalchemy import BigInteger, DateTime, Numeric, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import TypeDecorator


class UUIDString(TypeDecorator):
    """``uuid.UUID`` in Python, ``VARCHAR(36)`` in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value: Any, dialect: Any) -> str | None:
        return None if value is None else str(UUID(str(value)))

    def process_result_value(self, value: Any, dialect: Any) -> UUID | None:
        return None if value is None else UUID(value)


def _now_column(**kwargs: Any) -> Any:
    return mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False, **kwargs)


class Base(DeclarativeBase):

    type_annotation_map: ClassVar[dict] = {
        UUID: UUIDString(),
        Decimal: Numeric(38, 9),
        datetime: DateTime(timezone=True),
        int: BigInteger,
    }

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TrackedBase(Base):
    """
    Abstract base recording creation and last update.

    ``created_by_id`` is mandatory: every stored wage file names the actor
    who generated it.  ``updated_by_id`` is set by lifecycle transitions.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = _now_column()
    updated_at: Mapped[datetime] = _now_column(onupdate=func.now())
    created_by_id: Mapped[UUID] = mapped_column(nullable=False)
    updated_by_id: Mapped[UUID | None] = mapped_column(nullable=True)
