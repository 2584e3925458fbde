import datetime
import math


def utcnow() -> datetime.datetime:
    # Stored timestamps are naive UTC so SQLite and Postgres compare the same way
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def to_naive_utc(dt: datetime.datetime) -> datetime.datetime:
    # If dt is None, return as-is
    if dt is None:
        return dt
    # Naive values are already treated as UTC
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(datetime.timezone.utc).replace(tzinfo=None)


def to_iso(dt: datetime.datetime) -> str:
    if dt is None:
        return None
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=datetime.timezone.utc)
    return dt.isoformat()


def paginate(page: int, limit: int) -> tuple[int, int, int]:
    """Clamp page/limit the way every list endpoint expects and return the offset."""
    page = max(1, int(page or 1))
    limit = min(100, max(1, int(limit or 10)))
    return page, limit, (page - 1) * limit


def page_count(total: int, limit: int) -> int:
    return math.ceil(total / limit) if limit else 0
