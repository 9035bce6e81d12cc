"""
Royalty Engine Database Models
SQLAlchemy ORM models for works, passes and play records
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import (
    String,
    Integer,
    Boolean,
    TIMESTAMP,
    ForeignKey,
    Index,
    DECIMAL
)
from sqlalchemy.dialects.postgresql import UUID, JSONB
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship, Mapped, mapped_column

from ..core.splits import SplitModel
from .connection import Base


class Work(Base):
    """Creative unit (track, pack, derivative recording) and its split model"""
    __tablename__ = "works"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid()
    )

    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content_category: Mapped[str] = mapped_column(String(30), default="loop", nullable=False)
    is_draft: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Owner of the split model
    uploader_identity: Mapped[str] = mapped_column(String(255), nullable=False)

    # Source lineage for derivative recordings
    source_work_ids: Mapped[List[str]] = mapped_column(JSONB, default=list, nullable=False)
    remix_depth: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    remixer_stake_percentage: Mapped[int] = mapped_column(Integer, default=0, nullable=False)

    # Split slots: [{"payee": {"kind": ..., ...} | null, "percentage": int}, ...]
    composition_splits: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)
    production_splits: Mapped[list] = mapped_column(JSONB, default=list, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now()
    )

    @property
    def split_model(self) -> SplitModel:
        return SplitModel.from_storage(self.composition_splits, self.production_splits)

    def apply_split_model(self, model: SplitModel) -> None:
        stored = model.to_storage()
        self.composition_splits = stored["composition"]
        self.production_splits = stored["production"]

    def __repr__(self) -> str:
        return f"<Work(id={self.id}, title='{self.title}', uploader='{self.uploader_identity}')>"


class AccessPass(Base):
    """Time-boxed listening pass"""
    __tablename__ = "passes"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid()
    )

    payer_identity: Mapped[str] = mapped_column(String(255), nullable=False)
    purchased_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    expires_at: Mapped[datetime] = mapped_column(TIMESTAMP(timezone=True), nullable=False)
    amount: Mapped[Decimal] = mapped_column(DECIMAL(12, 6), nullable=False)
    tx_reference: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    # active, expired, distributed
    status: Mapped[str] = mapped_column(String(20), default="active", nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    plays: Mapped[List["PlayRecord"]] = relationship(
        "PlayRecord",
        back_populates="access_pass",
        order_by="PlayRecord.created_at"
    )

    def __repr__(self) -> str:
        return f"<AccessPass(id={self.id}, payer='{self.payer_identity}', status='{self.status}')>"


class PlayRecord(Base):
    """One completed playback under a pass; insert-only"""
    __tablename__ = "pass_plays"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid()
    )

    pass_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("passes.id", ondelete="RESTRICT"),
        nullable=False
    )
    work_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    content_category: Mapped[str] = mapped_column(String(30), nullable=False)

    # Fixed at insert time, never recalculated
    credits: Mapped[int] = mapped_column(Integer, nullable=False)

    duration_seconds: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    globe_location: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    access_pass: Mapped["AccessPass"] = relationship("AccessPass", back_populates="plays")

    def __repr__(self) -> str:
        return f"<PlayRecord(id={self.id}, pass_id={self.pass_id}, credits={self.credits})>"


class PreviewPlay(Base):
    """Unpaid sample play kept for engagement analytics only"""
    __tablename__ = "preview_plays"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=func.gen_random_uuid()
    )

    work_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    content_category: Mapped[str] = mapped_column(String(30), nullable=False)
    listener_identity: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    globe_location: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=func.now()
    )

    def __repr__(self) -> str:
        return f"<PreviewPlay(id={self.id}, work_id={self.work_id})>"


# Additional indexes for performance
Index("ix_works_uploader", Work.uploader_identity)
Index("ix_works_uploader_deleted", Work.uploader_identity, Work.is_deleted)
Index("ix_passes_payer_status", AccessPass.payer_identity, AccessPass.status)
Index("ix_passes_expires_at", AccessPass.expires_at)
Index("ix_pass_plays_pass_id", PlayRecord.pass_id)
Index("ix_pass_plays_work_id", PlayRecord.work_id)
Index("ix_preview_plays_work_id", PreviewPlay.work_id)
Index("ix_preview_plays_created", PreviewPlay.created_at)
