"""
Recording Payment Calculator
Block-quantized ("sausage link") pricing and multi-party fee splits. No I/O.
"""

import math
from decimal import ROUND_DOWN, Decimal
from typing import Dict, List, Literal, Optional, Sequence

from pydantic import BaseModel, ConfigDict, Field

from .config import PricingConfig
from .errors import InputValidationError
from .logging import ledger_logger
from .payees import Payee
from .splits import SplitCategory, SplitModel

# USDC has 6 decimal places
MICRO_UNIT = Decimal("0.000001")

PaymentType = Literal["platform", "composition", "production"]


class PaymentSplit(BaseModel):
    """Three-way partition of a recording fee"""
    model_config = ConfigDict(frozen=True)

    platform: Decimal
    creators: Decimal
    remixer_stake: Decimal  # recorded stake, not paid out

    @property
    def total(self) -> Decimal:
        return self.platform + self.creators + self.remixer_stake


class CostBreakdown(BaseModel):
    """Numeric breakdown of one recording action"""
    model_config = ConfigDict(frozen=True)

    bars: int
    blocks: int
    track_count: int
    price_per_block: Decimal
    total_cost: Decimal
    split: PaymentSplit


class SourceWork(BaseModel):
    """Snapshot of a source work used to route the creators share"""
    model_config = ConfigDict(frozen=True)

    work_id: str
    title: str = ""
    generation: int = 0
    remixer_stake_percentage: int = 0
    splits: SplitModel = Field(default_factory=SplitModel)


class RecipientPayment(BaseModel):
    """Money owed to one payee out of a recording fee"""
    payee: Optional[Payee] = None  # None: no claim recorded for this pool
    amount: Decimal
    payment_type: PaymentType
    percentage: Optional[int] = None
    source_work_id: Optional[str] = None
    source_work_title: Optional[str] = None

    @property
    def pending(self) -> bool:
        return self.payee is not None and self.payee.is_pending

    @property
    def unassigned(self) -> bool:
        return self.payee is None


def _require_int(value, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InputValidationError(f"{name} must be an integer")
    return value


def block_count(bars: int, config: PricingConfig) -> int:
    """Number of billable blocks: ceil(bars / block_size_bars)"""
    bars = _require_int(bars, "bars")
    if bars <= 0:
        raise InputValidationError("Invalid bars count: must be greater than 0")
    return math.ceil(bars / config.block_size_bars)


def total_cost(bars: int, track_count: int, config: PricingConfig) -> Decimal:
    """blocks × price_per_block × track_count"""
    track_count = _require_int(track_count, "track_count")
    if not 1 <= track_count <= config.max_tracks:
        raise InputValidationError(
            f"Invalid track count {track_count}: a recording mixes 1 to {config.max_tracks} source tracks"
        )
    return block_count(bars, config) * config.price_per_block * track_count


def split(amount: Decimal, config: PricingConfig) -> PaymentSplit:
    """
    Partition a recording fee into platform, creators and remixer-stake shares.

    Platform and stake shares are truncated to micro-USDC; the creators share
    takes the remainder so the three parts always sum to amount.
    """
    amount = Decimal(amount)
    platform = (amount * config.platform_cut_percent / 100).quantize(MICRO_UNIT, rounding=ROUND_DOWN)
    stake = (amount * config.remixer_stake_percent / 100).quantize(MICRO_UNIT, rounding=ROUND_DOWN)
    return PaymentSplit(
        platform=platform,
        creators=amount - platform - stake,
        remixer_stake=stake,
    )


def calculate_cost(bars: int, track_count: int, config: PricingConfig) -> CostBreakdown:
    """Full cost breakdown for a recording action"""
    cost = total_cost(bars, track_count, config)
    return CostBreakdown(
        bars=bars,
        blocks=block_count(bars, config),
        track_count=track_count,
        price_per_block=config.price_per_block,
        total_cost=cost,
        split=split(cost, config),
    )


def allocate(amount: Decimal, weights: Sequence[int]) -> List[Decimal]:
    """
    Divide amount proportionally to weights in micro-USDC.

    Shares are truncated and the leftover dust is added to the first share,
    so the result always sums to amount.
    """
    total_weight = sum(weights)
    if not weights or total_weight <= 0:
        raise ValueError("allocate needs at least one positive weight")
    shares = [
        (amount * weight / total_weight).quantize(MICRO_UNIT, rounding=ROUND_DOWN)
        for weight in weights
    ]
    shares[0] += amount - sum(shares)
    return shares


def distribute_creators_share(
    works: Sequence[SourceWork],
    creators_amount: Decimal
) -> List[RecipientPayment]:
    """
    Route the creators share across the split models of the source works.

    Each work gets an equal portion, halved between its composition and
    production pools; each pool is divided by recorded percentage. Pending
    payees are included and flagged. A pool with no recorded claim yields a
    single unassigned entry so no money disappears from the breakdown.
    """
    recipients: List[RecipientPayment] = []
    if not works:
        return recipients

    per_work = allocate(Decimal(creators_amount), [1] * len(works))
    for work, work_amount in zip(works, per_work):
        pools = allocate(work_amount, [1, 1])
        for category, pool_amount in zip(SplitCategory, pools):
            slots = work.splits.populated(category)
            if not slots:
                recipients.append(RecipientPayment(
                    payee=None,
                    amount=pool_amount,
                    payment_type=category.value,
                    source_work_id=work.work_id,
                    source_work_title=work.title,
                ))
                continue

            amounts = allocate(pool_amount, [slot.percentage for slot in slots])
            for slot, slot_amount in zip(slots, amounts):
                recipients.append(RecipientPayment(
                    payee=slot.payee,
                    amount=slot_amount,
                    payment_type=category.value,
                    percentage=slot.percentage,
                    source_work_id=work.work_id,
                    source_work_title=work.title,
                ))

    return recipients


def merge_recipients(recipients: Sequence[RecipientPayment]) -> List[RecipientPayment]:
    """Combine entries owed to the same payee for the same payment type"""
    merged: Dict[tuple, RecipientPayment] = {}
    result: List[RecipientPayment] = []
    for recipient in recipients:
        if recipient.unassigned:
            result.append(recipient.model_copy())
            continue
        key = (recipient.payment_type, recipient.payee.key)
        existing = merged.get(key)
        if existing is None:
            existing = recipient.model_copy()
            merged[key] = existing
            result.append(existing)
        else:
            existing.amount += recipient.amount
    return result


def format_cost_breakdown(bars: int, track_count: int, config: PricingConfig) -> str:
    """Human-readable cost formula; empty string if it cannot be built"""
    try:
        breakdown = calculate_cost(bars, track_count, config)
        blocks = breakdown.blocks
        return (
            f"{blocks} block{'s' if blocks != 1 else ''} × "
            f"{track_count} track{'s' if track_count != 1 else ''} × "
            f"${breakdown.price_per_block:.2f} = ${breakdown.total_cost:.2f} USDC"
        )
    except Exception as e:
        ledger_logger.log_display_error("format_cost_breakdown", str(e))
        return ""


def format_payment_split(amount: Decimal, config: PricingConfig) -> str:
    """Human-readable fee split; empty string if it cannot be built"""
    try:
        shares = split(amount, config)
        return (
            f"Platform ({config.platform_cut_percent}%): ${shares.platform:.2f} | "
            f"Creators ({config.creators_cut_percent}%): ${shares.creators:.2f} | "
            f"Your Stake ({config.remixer_stake_percent}%): ${shares.remixer_stake:.2f}"
        )
    except Exception as e:
        ledger_logger.log_display_error("format_payment_split", str(e))
        return ""
