from datetime import datetime, timezone


def utcnow():
    # naive UTC, the way SQLite stores it
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value):
    if value is None:
        return None
    return value.isoformat(timespec="milliseconds") + "Z"
