"""Declarative base classes and column mixins"""

import uuid
from sqlalchemy import Column, DateTime, Boolean, ForeignKey
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import declared_attr

from billboard.database import Base
from billboard.utils.time import get_utc_now


class BaseModel(Base):
    """UUID primary key plus naive-UTC ``created_at``/``updated_at``."""
    __abstract__ = True

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    created_at = Column(DateTime, default=get_utc_now, nullable=False)
    updated_at = Column(DateTime, default=get_utc_now, onupdate=get_utc_now, nullable=False)


class ShopScopedMixin:
    """Rows owned by one shop; removing the shop removes them."""

    @declared_attr
    def shop_id(cls):
        return Column(
            UUID(as_uuid=True),
            ForeignKey("shops.id", ondelete="CASCADE"),
            nullable=False,
            index=True
        )


class SoftDeleteMixin:
    """
    Rows are hidden by stamping ``deleted_at`` instead of deleting them.

    Queries filter with ``Model.live()``; a soft-deleted bill keeps its
    number reserved.
    """
    deleted_at = Column(DateTime, nullable=True, index=True)

    @classmethod
    def live(cls):
        return cls.deleted_at.is_(None)

    def soft_delete(self):
        self.deleted_at = get_utc_now()

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


class StatusMixin:
    is_active = Column(Boolean, default=True, nullable=False, index=True)
