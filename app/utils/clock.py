"""
Wall-clock helper

All persisted timestamps are naive UTC. Services read the time through
``utcnow`` so expiry checks can be exercised without sleeping.
"""
from datetime import datetime, timezone


def utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)
