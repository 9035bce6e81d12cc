"""
Split Model
Composition and production ownership slots with percentage invariants
"""

from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import SplitValidationError
from .payees import Payee, ResolvedPayee, payee_from_dict, payee_to_dict

MAX_SLOTS_PER_CATEGORY = 3
TOTAL_PERCENT = 100


class SplitCategory(str, Enum):
    """Rights category a slot belongs to"""
    COMPOSITION = "composition"
    PRODUCTION = "production"


class SplitSlot(BaseModel):
    """One payee + percentage entry"""
    model_config = ConfigDict(frozen=True)

    category: SplitCategory
    payee: Optional[Payee] = None
    percentage: int = 0

    @property
    def is_empty(self) -> bool:
        return self.payee is None

    def to_storage(self) -> dict:
        return {"payee": payee_to_dict(self.payee), "percentage": self.percentage}


class SplitValidation(BaseModel):
    """Outcome of checking a set of slots"""
    valid: bool
    error_reason: Optional[str] = None


def validate_splits(slots: Iterable[SplitSlot]) -> SplitValidation:
    """
    Check the percentage invariants for a set of split slots.

    Each category is checked on its own: populated slots must carry a positive
    percentage and sum to exactly 100. A category with no populated slot is
    "no claim recorded" and passes.
    """
    by_category: Dict[SplitCategory, List[SplitSlot]] = {
        category: [] for category in SplitCategory
    }
    for slot in slots:
        by_category[slot.category].append(slot)

    for category, category_slots in by_category.items():
        label = category.value.capitalize()

        if len(category_slots) > MAX_SLOTS_PER_CATEGORY:
            return SplitValidation(
                valid=False,
                error_reason=f"{label} allows at most {MAX_SLOTS_PER_CATEGORY} slots, got {len(category_slots)}"
            )

        total = 0
        populated = 0
        for slot in category_slots:
            if slot.is_empty:
                if slot.percentage != 0:
                    return SplitValidation(
                        valid=False,
                        error_reason=f"{label} slot has {slot.percentage}% but no payee"
                    )
                continue

            if slot.percentage <= 0:
                return SplitValidation(
                    valid=False,
                    error_reason=f"{label} payee {slot.payee.display} must have a positive percentage"
                )
            if slot.percentage > TOTAL_PERCENT:
                return SplitValidation(
                    valid=False,
                    error_reason=f"{label} payee {slot.payee.display} exceeds 100%"
                )
            total += slot.percentage
            populated += 1

        if populated and total != TOTAL_PERCENT:
            return SplitValidation(
                valid=False,
                error_reason=f"{label} splits must add up to 100%, got {total}%"
            )

    return SplitValidation(valid=True)


class SplitModel(BaseModel):
    """Ownership record attached to a work"""
    model_config = ConfigDict(frozen=True)

    composition: Tuple[SplitSlot, ...] = Field(default_factory=tuple)
    production: Tuple[SplitSlot, ...] = Field(default_factory=tuple)

    @field_validator("composition")
    @classmethod
    def _composition_category(cls, slots):
        return _check_category(slots, SplitCategory.COMPOSITION)

    @field_validator("production")
    @classmethod
    def _production_category(cls, slots):
        return _check_category(slots, SplitCategory.PRODUCTION)

    @classmethod
    def from_pairs(
        cls,
        composition: Sequence[Tuple[Optional[Payee], int]] = (),
        production: Sequence[Tuple[Optional[Payee], int]] = ()
    ) -> "SplitModel":
        """Build a model from (payee, percentage) pairs per category"""
        return cls(
            composition=tuple(
                SplitSlot(category=SplitCategory.COMPOSITION, payee=payee, percentage=pct)
                for payee, pct in composition
            ),
            production=tuple(
                SplitSlot(category=SplitCategory.PRODUCTION, payee=payee, percentage=pct)
                for payee, pct in production
            ),
        )

    @classmethod
    def from_storage(
        cls,
        composition: Optional[list],
        production: Optional[list]
    ) -> "SplitModel":
        """Rebuild a model from the JSON columns of a work row"""
        return cls.from_pairs(
            composition=[
                (payee_from_dict(item.get("payee")), int(item.get("percentage") or 0))
                for item in composition or []
            ],
            production=[
                (payee_from_dict(item.get("payee")), int(item.get("percentage") or 0))
                for item in production or []
            ],
        )

    def to_storage(self) -> Dict[str, list]:
        return {
            "composition": [slot.to_storage() for slot in self.composition],
            "production": [slot.to_storage() for slot in self.production],
        }

    @property
    def slots(self) -> Tuple[SplitSlot, ...]:
        return self.composition + self.production

    def populated(self, category: SplitCategory) -> List[SplitSlot]:
        slots = self.composition if category == SplitCategory.COMPOSITION else self.production
        return [slot for slot in slots if not slot.is_empty]

    def validate_invariants(self) -> SplitValidation:
        return validate_splits(self.slots)

    def pending_names(self) -> List[str]:
        """Distinct pending names, first-seen spelling kept"""
        seen = {}
        for slot in self.slots:
            if slot.payee is not None and slot.payee.is_pending:
                seen.setdefault(slot.payee.key, slot.payee.name)
        return list(seen.values())

    def count_pending(self, name: str) -> int:
        """Slots whose pending name matches, in any category"""
        return sum(
            1 for slot in self.slots
            if slot.payee is not None and slot.payee.matches_pending(name)
        )

    def resolve_pending(self, name: str, identity: str) -> Tuple["SplitModel", int]:
        """
        Replace every pending slot matching name (case-insensitive) with identity.

        Returns the rewritten model and the number of slots changed; the model
        is returned unchanged when nothing matched.
        """
        resolved = ResolvedPayee(identity=identity)
        changed = 0

        def rewrite(slots: Tuple[SplitSlot, ...]) -> Tuple[SplitSlot, ...]:
            nonlocal changed
            result = []
            for slot in slots:
                if slot.payee is not None and slot.payee.matches_pending(name):
                    result.append(slot.model_copy(update={"payee": resolved}))
                    changed += 1
                else:
                    result.append(slot)
            return tuple(result)

        updated = SplitModel(
            composition=rewrite(self.composition),
            production=rewrite(self.production),
        )
        if not changed:
            return self, 0
        return updated, changed


def _check_category(slots, category: SplitCategory):
    for slot in slots:
        if slot.category != category:
            raise ValueError(f"slot category {slot.category.value} placed under {category.value}")
    return slots


def derive_remix_splits(*sources: SplitModel) -> SplitModel:
    """
    Derive the split model of a recording made from one or two source works.

    Each source contributing to a category gets an equal share of that pie;
    contributor percentages are scaled down and floored, duplicate payees are
    consolidated, and the rounding shortfall goes to the first slot so each
    populated category sums to exactly 100.
    """
    if not 1 <= len(sources) <= 2:
        raise SplitValidationError(
            f"A recording derives from 1 or 2 source works, got {len(sources)}"
        )
    if len(sources) == 1:
        return sources[0]

    derived = {}
    for category in SplitCategory:
        contributing = [source.populated(category) for source in sources]
        contributing = [slots for slots in contributing if slots]

        consolidated: Dict[tuple, list] = {}
        for slots in contributing:
            for slot in slots:
                scaled = slot.percentage // len(contributing)
                entry = consolidated.setdefault(slot.payee.key, [slot.payee, 0])
                entry[1] += scaled

        pairs = [(payee, pct) for payee, pct in consolidated.values() if pct > 0]
        if pairs:
            shortfall = TOTAL_PERCENT - sum(pct for _, pct in pairs)
            first_payee, first_pct = pairs[0]
            pairs[0] = (first_payee, first_pct + shortfall)

        if len(pairs) > MAX_SLOTS_PER_CATEGORY:
            raise SplitValidationError(
                f"Derived {category.value} split has {len(pairs)} payees, "
                f"at most {MAX_SLOTS_PER_CATEGORY} are allowed"
            )
        derived[category] = pairs

    return SplitModel.from_pairs(
        composition=derived[SplitCategory.COMPOSITION],
        production=derived[SplitCategory.PRODUCTION],
    )
