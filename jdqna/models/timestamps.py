# jdqna/models/timestamps.py
from datetime import datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    # DB에는 naive UTC로 저장
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None
