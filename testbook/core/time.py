from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC now, matching the naive DateTime columns"""
    return datetime.utcnow()


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)
