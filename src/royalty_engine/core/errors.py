"""
Royalty Engine Errors
Typed rejections raised by services and mapped to HTTP status codes by the API layer
"""

from datetime import datetime
from typing import Optional


class EngineError(Exception):
    """Base error for all engine rejections"""
    status_code = 400

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InputValidationError(EngineError):
    """Bad bar count, bad track count, missing identifiers"""
    status_code = 400


class SplitValidationError(EngineError):
    """Split model violates the percentage invariants"""
    status_code = 422


class OwnershipError(EngineError):
    """Caller does not own the target work"""
    status_code = 403


class NotFoundError(EngineError):
    """Referenced entity does not exist"""
    status_code = 404


class WorkNotFoundError(NotFoundError):
    """Work id unknown or soft-deleted"""

    def __init__(self, work_id):
        super().__init__(f"Work {work_id} not found")
        self.work_id = work_id


class PassNotFoundError(NotFoundError):
    """Pass id unknown"""

    def __init__(self, pass_id):
        super().__init__(f"Pass {pass_id} not found")
        self.pass_id = pass_id


class PassExpiredError(EngineError):
    """Pass is no longer accepting plays"""
    status_code = 410

    def __init__(self, pass_id, expires_at: Optional[datetime] = None):
        super().__init__(f"Pass {pass_id} has expired")
        self.pass_id = pass_id
        self.expires_at = expires_at


class PassAlreadyActiveError(EngineError):
    """Payer already holds a live pass"""
    status_code = 409

    def __init__(self, payer_identity: str, expires_at: datetime):
        super().__init__("You already have an active pass")
        self.payer_identity = payer_identity
        self.expires_at = expires_at
