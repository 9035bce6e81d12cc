"""
Payee References
A split slot's payee is either a resolved payable identity or a pending placeholder name
"""

import re
from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, field_validator

# Sui/EVM style hex addresses and Stacks principals
ADDRESS_PATTERNS = (
    re.compile(r"^0x[0-9a-fA-F]{1,64}$"),
    re.compile(r"^S[PTMN][0-9A-Z]{28,41}$"),
)

# Upload rows written before payees were tagged used this prefix
LEGACY_PENDING_PREFIX = "pending:"


class ResolvedPayee(BaseModel):
    """Payable identity (wallet/account address)"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["resolved"] = "resolved"
    identity: str = Field(..., min_length=1)

    @field_validator("identity")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("identity must not be blank")
        return value

    @property
    def is_pending(self) -> bool:
        return False

    @property
    def display(self) -> str:
        return self.identity

    @property
    def key(self) -> Tuple[str, str]:
        return ("resolved", self.identity)

    def matches_pending(self, name: str) -> bool:
        return False


class PendingPayee(BaseModel):
    """Named collaborator with no payable identity yet"""
    model_config = ConfigDict(frozen=True)

    kind: Literal["pending"] = "pending"
    name: str = Field(..., min_length=1)

    @field_validator("name")
    @classmethod
    def _strip(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("pending name must not be blank")
        return value

    @property
    def is_pending(self) -> bool:
        return True

    @property
    def display(self) -> str:
        return self.name

    @property
    def key(self) -> Tuple[str, str]:
        return ("pending", self.name.casefold())

    def matches_pending(self, name: str) -> bool:
        return self.name.casefold() == name.strip().casefold()


Payee = Annotated[Union[ResolvedPayee, PendingPayee], Field(discriminator="kind")]

_payee_adapter = TypeAdapter(Payee)


def looks_like_address(value: str) -> bool:
    """Check whether a raw string is shaped like a payable address"""
    return any(pattern.match(value) for pattern in ADDRESS_PATTERNS)


def parse_payee(raw: Any) -> Optional[Union[ResolvedPayee, PendingPayee]]:
    """
    Convert upload-form input into a payee reference.

    Address-shaped strings become resolved payees, any other non-blank string
    is a human name and becomes a pending placeholder. Blank input means an
    empty slot. Dicts are validated as already-tagged payees.
    """
    if raw is None:
        return None
    if isinstance(raw, (ResolvedPayee, PendingPayee)):
        return raw
    if isinstance(raw, dict):
        return _payee_adapter.validate_python(raw)

    value = str(raw).strip()
    if not value:
        return None
    if value.lower().startswith(LEGACY_PENDING_PREFIX):
        name = value[len(LEGACY_PENDING_PREFIX):].strip()
        return PendingPayee(name=name) if name else None
    if looks_like_address(value):
        return ResolvedPayee(identity=value)
    return PendingPayee(name=value)


def payee_to_dict(payee: Optional[Union[ResolvedPayee, PendingPayee]]) -> Optional[dict]:
    """Serialize a payee for JSON storage"""
    if payee is None:
        return None
    return payee.model_dump()


def payee_from_dict(data: Optional[dict]) -> Optional[Union[ResolvedPayee, PendingPayee]]:
    """Deserialize a stored payee"""
    if data is None:
        return None
    return _payee_adapter.validate_python(data)
