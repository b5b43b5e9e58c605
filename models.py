from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


def utc_timestamp() -> str:
    # e.g. 2024-12-01T09:30:00.123Z
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class BookingRecord(BaseModel):
    name: str
    people: int
    createdAt: str = Field(default_factory=utc_timestamp)


# Request fields stay loose so each rule can answer with its own 400 message
class ReservationCreate(BaseModel):
    date: Any = None
    timeSlots: Any = None
    name: Any = None
    people: Any = None


class ReservationCreated(BaseModel):
    message: str
    date: str
    timeSlots: List[str]


class DateReservations(BaseModel):
    date: str
    reservations: Dict[str, Dict[str, Any]]


class HealthStatus(BaseModel):
    ok: bool = True


class ErrorResponse(BaseModel):
    message: str
    conflicts: Optional[List[str]] = None
