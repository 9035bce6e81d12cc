"""
Credit Metering Rules
Pass lifecycle checks and weighted play credits, evaluated against an explicit clock
"""

import math
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Callable, Optional, Tuple

from .config import MeteringConfig

Clock = Callable[[], datetime]

# Placement suffix appended to work ids by the playlist globe ("<uuid>-loc-<n>")
LOCATION_SEPARATOR = "-loc-"


class ContentCategory(str, Enum):
    """Kinds of works that can be uploaded"""
    LOOP = "loop"
    FULL_SONG = "full_song"
    LOOP_PACK = "loop_pack"
    EP = "ep"
    MIX = "mix"
    RADIO_STATION = "radio_station"
    STATION_PACK = "station_pack"
    VIDEO_CLIP = "video_clip"


class PassState(str, Enum):
    """Stored pass status; expiry is always recomputed from expires_at"""
    ACTIVE = "active"
    EXPIRED = "expired"
    DISTRIBUTED = "distributed"


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(moment: datetime) -> datetime:
    """Treat naive timestamps from the database as UTC"""
    if moment.tzinfo is None:
        return moment.replace(tzinfo=timezone.utc)
    return moment


def pass_expiry(purchased_at: datetime, config: MeteringConfig) -> datetime:
    return purchased_at + timedelta(seconds=config.pass_duration_seconds)


def is_pass_live(status: str, expires_at: datetime, now: datetime) -> bool:
    """A pass accrues plays only while stored as active and before its expiry"""
    return status == PassState.ACTIVE.value and as_utc(now) < as_utc(expires_at)


def remaining_seconds(expires_at: datetime, now: datetime) -> int:
    delta = (as_utc(expires_at) - as_utc(now)).total_seconds()
    return max(0, math.floor(delta))


def credit_weight(content_category: str, config: MeteringConfig) -> int:
    """Credits earned by one completed play of the given category"""
    if isinstance(content_category, ContentCategory):
        content_category = content_category.value
    return config.credit_weights.get(content_category, config.default_credit_weight)


def parse_work_reference(reference: str) -> Tuple[str, Optional[int]]:
    """Split "<work-id>-loc-<n>" into the work id and its globe location"""
    reference = reference.strip()
    if LOCATION_SEPARATOR not in reference:
        return reference, None

    work_id, _, location = reference.partition(LOCATION_SEPARATOR)
    try:
        return work_id, int(location)
    except ValueError:
        return work_id, None


def format_time_remaining(seconds: float) -> str:
    """Format remaining pass time as HH:MM:SS"""
    if seconds <= 0:
        return "00:00:00"
    seconds = int(seconds)
    hours, rest = divmod(seconds, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"
