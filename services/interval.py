from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

from services.errors import InvalidRange


def to_utc_naive(value: datetime) -> datetime:
    # Naive datetimes are taken as UTC already; that's what the DB columns hold.
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


def parse_instant(value: str) -> datetime:
    """
    Parse an ISO-8601 instant like "2024-01-01T09:00:00Z" or
    "2024-01-01T09:00:00+02:00" into a naive UTC datetime.
    """
    if not isinstance(value, str) or not value.strip():
        raise InvalidRange("Invalid datetime format. Use ISO e.g. 2024-01-01T09:00:00Z")
    text = value.strip()
    if text.endswith(("Z", "z")):
        text = text[:-1] + "+00:00"
    try:
        return to_utc_naive(datetime.fromisoformat(text))
    except ValueError:
        raise InvalidRange("Invalid datetime format. Use ISO e.g. 2024-01-01T09:00:00Z")


@dataclass(frozen=True)
class TimeInterval:
    """Half-open time range [start, end). Back-to-back intervals do not overlap."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if not isinstance(self.start, datetime) or not isinstance(self.end, datetime):
            raise InvalidRange("start and end must be datetimes")
        start = to_utc_naive(self.start)
        end = to_utc_naive(self.end)
        if start >= end:
            raise InvalidRange()
        object.__setattr__(self, "start", start)
        object.__setattr__(self, "end", end)

    @classmethod
    def parse(cls, start: str, end: str) -> "TimeInterval":
        return cls(parse_instant(start), parse_instant(end))

    @property
    def duration(self) -> timedelta:
        return self.end - self.start

    def overlaps(self, other: "TimeInterval") -> bool:
        return self.start < other.end and other.start < self.end

    def __str__(self):
        return f"[{self.start.isoformat()}, {self.end.isoformat()})"
