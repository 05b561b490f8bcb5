from datetime import datetime, timezone


def utcnow() -> datetime:
    """Naive UTC timestamp, the form MongoDB hands back by default."""
    return datetime.now(timezone.utc).replace(tzinfo=None)
