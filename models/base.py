from datetime import datetime, timezone


def utcnow() -> datetime:
    """Current time as a timezone-aware UTC datetime, used for model timestamps."""
    return datetime.now(timezone.utc)
