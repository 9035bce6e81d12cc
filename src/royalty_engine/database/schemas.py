"""
Royalty Engine Pydantic Schemas
Request/response models for API validation and serialization
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, ConfigDict, field_validator

from ..core.payees import Payee, parse_payee
from ..core.pricing import CostBreakdown, RecipientPayment, SourceWork
from ..core.splits import SplitModel, SplitSlot


# Base configuration for all schemas
class BaseSchema(BaseModel):
    """Base schema with common configuration"""
    model_config = ConfigDict(
        from_attributes=True,
        use_enum_values=True,
        arbitrary_types_allowed=True
    )


# Split Schemas
class SplitSlotIn(BaseSchema):
    """One split slot as entered on the upload form"""
    payee: Optional[Payee] = Field(
        None,
        description="Wallet address, collaborator name, or tagged payee object; blank for an empty slot"
    )
    percentage: int = Field(default=0, description="Integer share of the category pie")

    @field_validator("payee", mode="before")
    @classmethod
    def _parse_payee(cls, value: Any):
        return parse_payee(value)


class SplitsIn(BaseSchema):
    """Composition and production slots"""
    composition: List[SplitSlotIn] = Field(default_factory=list)
    production: List[SplitSlotIn] = Field(default_factory=list)

    def to_model(self) -> SplitModel:
        return SplitModel.from_pairs(
            composition=[(slot.payee, slot.percentage) for slot in self.composition],
            production=[(slot.payee, slot.percentage) for slot in self.production],
        )

    @property
    def is_empty(self) -> bool:
        return not self.composition and not self.production


class SplitSlotOut(BaseSchema):
    """Stored split slot with its pending flag"""
    payee: Optional[Payee] = None
    percentage: int
    pending: bool = False

    @classmethod
    def from_slot(cls, slot: SplitSlot) -> "SplitSlotOut":
        return cls(
            payee=slot.payee,
            percentage=slot.percentage,
            pending=slot.payee is not None and slot.payee.is_pending
        )


class SplitsOut(BaseSchema):
    composition: List[SplitSlotOut] = Field(default_factory=list)
    production: List[SplitSlotOut] = Field(default_factory=list)

    @classmethod
    def from_model(cls, model: SplitModel) -> "SplitsOut":
        return cls(
            composition=[SplitSlotOut.from_slot(slot) for slot in model.composition],
            production=[SplitSlotOut.from_slot(slot) for slot in model.production],
        )


# Work Schemas
class WorkCreate(SplitsIn):
    """Schema for creating a work; splits are derived from sources when omitted"""
    title: str = Field(..., min_length=1, max_length=255, description="Work title")
    content_category: str = Field(default="loop", min_length=1, max_length=30)
    uploader_identity: str = Field(..., min_length=1, max_length=255)
    is_draft: bool = False
    source_work_ids: List[str] = Field(default_factory=list, max_length=2)
    remixer_stake_percentage: Optional[int] = Field(
        default=None, ge=0, le=100,
        description="Defaults to the configured remixer stake for derivatives, 0 otherwise"
    )


class SplitUpdate(SplitsIn):
    """Schema for replacing a work's split model"""
    caller_identity: str = Field(..., min_length=1, description="Identity requesting the change")


class WorkResponse(BaseSchema):
    """Schema for work responses"""
    id: uuid.UUID
    title: str
    content_category: str
    uploader_identity: str
    is_draft: bool
    source_work_ids: List[str]
    remix_depth: int
    remixer_stake_percentage: int
    splits: SplitsOut
    pending_names: List[str]

    @classmethod
    def from_work(cls, work) -> "WorkResponse":
        model = work.split_model
        return cls(
            id=work.id,
            title=work.title,
            content_category=work.content_category,
            uploader_identity=work.uploader_identity,
            is_draft=work.is_draft,
            source_work_ids=list(work.source_work_ids or []),
            remix_depth=work.remix_depth,
            remixer_stake_percentage=work.remixer_stake_percentage,
            splits=SplitsOut.from_model(model),
            pending_names=model.pending_names(),
        )


class PendingPlaceholderSummary(BaseSchema):
    """Outstanding pending payee across an uploader's works"""
    name: str
    work_ids: List[str]
    slot_count: int


# Resolution Schemas
class ResolvePendingRequest(BaseSchema):
    """Blank values are rejected by the service with a 400"""
    pending_name: str = ""
    resolved_identity: str = ""
    work_ids: List[str] = Field(default_factory=list)
    caller_identities: List[str] = Field(default_factory=list)


class ResolutionOutcome(BaseSchema):
    updated_field_count: int
    works_processed: int


# Recording Payment Schemas
class CostResponse(BaseSchema):
    """Cost breakdown with display strings"""
    breakdown: CostBreakdown
    formula: str
    split_display: str


class PreparePaymentRequest(BaseSchema):
    bars: int
    source_work_ids: List[str] = Field(..., min_length=1)


class SourceWorkOut(BaseSchema):
    """Source lineage entry of a prepared payment"""
    work_id: str
    title: str
    generation: int
    remixer_stake_percentage: int
    splits: SplitsOut

    @classmethod
    def from_source(cls, source: SourceWork) -> "SourceWorkOut":
        return cls(
            work_id=source.work_id,
            title=source.title,
            generation=source.generation,
            remixer_stake_percentage=source.remixer_stake_percentage,
            splits=SplitsOut.from_model(source.splits),
        )


class RecipientOut(BaseSchema):
    payee: Optional[Payee] = None
    pending: bool
    unassigned: bool
    amount: Decimal
    payment_type: str
    percentage: Optional[int] = None
    source_work_id: Optional[str] = None
    source_work_title: Optional[str] = None

    @classmethod
    def from_recipient(cls, recipient: RecipientPayment) -> "RecipientOut":
        return cls(
            payee=recipient.payee,
            pending=recipient.pending,
            unassigned=recipient.unassigned,
            amount=recipient.amount,
            payment_type=recipient.payment_type,
            percentage=recipient.percentage,
            source_work_id=recipient.source_work_id,
            source_work_title=recipient.source_work_title,
        )


class PreparedPayment(BaseSchema):
    """Everything the caller needs to build the settlement transaction"""
    breakdown: CostBreakdown
    recipients: List[RecipientOut]
    source_works: List[SourceWorkOut]
    pending_recipient_count: int
    formula: str
    split_display: str


# Pass Schemas
class IssuePassRequest(BaseSchema):
    """Blank payer is rejected by the service with a 400"""
    payer_identity: str = ""
    tx_reference: Optional[str] = Field(None, max_length=255)


class PassResponse(BaseSchema):
    """Schema for issued passes"""
    id: uuid.UUID
    payer_identity: str
    purchased_at: datetime
    expires_at: datetime
    amount: Decimal
    tx_reference: Optional[str] = None
    status: str


class PassStatus(BaseSchema):
    """Read-only liveness view of a pass"""
    pass_id: uuid.UUID
    active: bool
    remaining_seconds: int
    time_remaining: str
    expires_at: datetime
    total_plays: int


class LogPlayRequest(BaseSchema):
    work_id: str = ""
    content_category: str = ""
    duration_seconds: Optional[int] = None


class PlayReceipt(BaseSchema):
    play_id: uuid.UUID
    credits: int
    total_plays: int


class PreviewPlayRequest(BaseSchema):
    work_id: str = ""
    content_category: str = ""
    listener_identity: Optional[str] = None


class PreviewPlayResponse(BaseSchema):
    recorded: bool
    preview_seconds: int


class UsageSummary(BaseSchema):
    """Per-pass aggregate consumed by the distribution job"""
    pass_id: uuid.UUID
    total_plays: int
    total_credits: int
    credits_by_work: Dict[str, int]
