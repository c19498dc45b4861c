"""
Module: selection_kernel.db.base
Responsibility: Declarative base classes for SQLAlchemy models that expose
    selections.  Provides the type annotation map for consistent column types
    and the TrackedBase mixin carrying the conventional creation timestamp
    that date selectors and ordering fall back to.
Architecture position: Kernel > DB.  Lowest-level import target for models.
    This module MUST NOT import from selectors/, services/ or outer layers.

Invariants enforced:
    - Timestamps are naive DateTime columns: selection dates are compared as
      naive values, so stored values must be naive as well.
    - TrackedBase.created_at is set on INSERT and never changes.
"""

from datetime import datetime
from typing import ClassVar

from sqlalchemy import DateTime, String, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """
    Declarative base for all SQLAlchemy models.

    Contract:
        Every model inherits from Base (or TrackedBase) and declares its own
        primary key.  The type_annotation_map keeps column types consistent
        across the schema.
    """

    type_annotation_map: ClassVar[dict] = {
        datetime: DateTime(timezone=False),
        str: String(255),
    }


class TrackedBase(Base):
    """
    Abstract base with creation and update timestamps.

    Guarantees:
        - created_at defaults to the server clock on INSERT.
        - updated_at defaults to the server clock and refreshes on UPDATE.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
