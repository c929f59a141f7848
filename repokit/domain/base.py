"""Declarative base and mixins shared by repository-managed models."""

from __future__ import annotations

from datetime import datetime
from typing import Any, ClassVar, Optional, Tuple

from sqlalchemy import DateTime
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    """Declarative base for models handled by ``SqlAlchemyRepository``.

    Models list the attributes that may be mass-assigned from untrusted input
    in ``__fillable__``. Anything not listed is dropped by ``create`` and
    ``update_by``.

    Example:
        class Author(Base):
            __tablename__ = "authors"
            __fillable__ = ("name", "email")

            id: Mapped[int] = mapped_column(primary_key=True)
            name: Mapped[str] = mapped_column(String(100))
    """

    __fillable__: ClassVar[Tuple[str, ...]] = ()


class SoftDeleteMixin:
    """Marks a model as soft-deletable.

    Repositories stamp ``deleted_at`` instead of removing rows and hide
    stamped rows from every read.
    """

    deleted_at: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True), nullable=True, default=None
    )


def is_soft_deletable(model: type) -> bool:
    return isinstance(model, type) and issubclass(model, SoftDeleteMixin)


def fillable_fields(model: Any) -> Tuple[str, ...]:
    """Return the mass-assignable attribute names declared by ``model``."""
    fields = getattr(model, "__fillable__", None) or ()
    if isinstance(fields, str):
        return (fields,)
    return tuple(fields)


__all__ = ["Base", "SoftDeleteMixin", "fillable_fields", "is_soft_deletable"]
