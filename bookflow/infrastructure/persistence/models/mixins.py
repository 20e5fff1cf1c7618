"""SQLAlchemy mixins for common model patterns.

Provides: CuidMixin, OrganizationMixin, TimestampMixin, SoftDeleteMixin,
CreatedByMixin and the combined OrganizationModel / AuditedOrganizationModel.
Organization and user rows live in the booking side's own tables, so their
ids are stored without foreign keys here.
"""

from datetime import datetime

from sqlalchemy import DateTime, String
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from bookflow.shared.utils.generators import generate_cuid


class CuidMixin:
    """Mixin for models using CUID as primary key. Provides id with default generate_cuid."""

    @declared_attr
    def id(cls) -> Mapped[str]:
        return mapped_column(String, primary_key=True, default=generate_cuid)


class OrganizationMixin:
    """Mixin for tenant-scoped models. Provides an indexed organization_id."""

    @declared_attr
    def organization_id(cls) -> Mapped[str]:
        return mapped_column(String, nullable=False, index=True)


class TimestampMixin:
    """Mixin for created_at and updated_at (server defaults, timezone-aware)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True), server_default=func.now(), nullable=False
        )

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            server_default=func.now(),
            onupdate=func.now(),
            nullable=False,
        )


class SoftDeleteMixin:
    """Mixin for soft delete (deleted_at). Null means not deleted."""

    @declared_attr
    def deleted_at(cls) -> Mapped[datetime | None]:
        return mapped_column(DateTime(timezone=True), nullable=True, index=True)


class CreatedByMixin(TimestampMixin, SoftDeleteMixin):
    """Mixin for user audit: timestamps, soft delete and created_by (user id)."""

    @declared_attr
    def created_by(cls) -> Mapped[str | None]:
        return mapped_column(String, nullable=True, index=True)


class OrganizationModel(CuidMixin, OrganizationMixin):
    """Combined mixin: CUID + organization_id (execution records)."""

    __abstract__ = True


class AuditedOrganizationModel(CuidMixin, OrganizationMixin, CreatedByMixin):
    """Combined mixin: CUID + organization_id + timestamps, soft delete, created_by."""

    __abstract__ = True
