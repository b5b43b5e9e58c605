import math
import re
from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Tuple

# 1. Business rules (fixed constants)
TARGET_MONTH = 12  # December only
OPEN_HOUR = 10
CLOSE_HOUR = 18
SLOT_STEP_MINUTES = 30
MIN_PEOPLE = 1
MAX_PEOPLE = 30

# 2. User-facing messages
MSG_INVALID_DATE = "날짜 형식이 올바르지 않습니다. (YYYY-MM-DD, 12월 평일만 가능)"
MSG_NO_SLOTS = "하나 이상의 시간대를 선택해야 합니다."
MSG_INVALID_SLOT = "허용되지 않는 시간대입니다: {slot}"
MSG_EMPTY_NAME = "성명을 입력해주세요."
MSG_INVALID_PEOPLE = "인원수는 1~30 사이 정수여야 합니다."

_DATE_RE = re.compile(r"(\d{4})-(\d{2})-(\d{2})", re.ASCII)
# Plain decimal or exponent notation; no underscores, no non-ASCII digits
_NUMBER_RE = re.compile(r"[+-]?(\d+\.?\d*|\.\d+)([eE][+-]?\d+)?", re.ASCII)


class ValidationFailed(ValueError):
    """A create precondition did not hold. Always maps to HTTP 400."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


@dataclass(frozen=True)
class ValidReservation:
    date: str
    slots: List[str]
    name: str
    people: int


def is_valid_date(value: Any) -> bool:
    if not isinstance(value, str):
        return False
    match = _DATE_RE.fullmatch(value)
    if not match:
        return False

    year, month, day = (int(part) for part in match.groups())
    if month != TARGET_MONTH:
        return False

    # date() refuses out-of-range days instead of rolling them over
    try:
        parsed = date(year, month, day)
    except ValueError:
        return False

    return parsed.weekday() < 5


def build_allowed_slots(
    open_hour: int = OPEN_HOUR,
    close_hour: int = CLOSE_HOUR,
    step_minutes: int = SLOT_STEP_MINUTES,
) -> Tuple[str, ...]:
    """Every slot boundary from open_hour (inclusive) to close_hour (exclusive)."""
    slots = []
    for hour in range(open_hour, close_hour):
        for minute in range(0, 60, step_minutes):
            slots.append(f"{hour:02d}:{minute:02d}")
    return tuple(slots)


# Computed once per process; tuples keep it read-only
ALLOWED_SLOTS = build_allowed_slots()


def is_allowed_slot(label: Any, allowed: Tuple[str, ...] = ALLOWED_SLOTS) -> bool:
    return isinstance(label, str) and label in allowed


def parse_people(value: Any) -> Optional[int]:
    """Coerce a people count to int, or None when it is not a whole number."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        return value

    if isinstance(value, str):
        text = value.strip()
        if not _NUMBER_RE.fullmatch(text):
            return None
        try:
            return int(text)
        except ValueError:
            pass
        try:
            value = float(text)
        except ValueError:
            return None

    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        return None

    return None


def validate_reservation_request(
    payload: dict, allowed: Tuple[str, ...] = ALLOWED_SLOTS
) -> ValidReservation:
    """
    Check a create request in a fixed order and return the cleaned values.
    Raises ValidationFailed naming the first rule that failed.
    """
    reservation_date = payload.get("date")
    if not is_valid_date(reservation_date):
        raise ValidationFailed(MSG_INVALID_DATE)

    slots = payload.get("timeSlots")
    if not isinstance(slots, list) or not slots:
        raise ValidationFailed(MSG_NO_SLOTS)

    for slot in slots:
        if not is_allowed_slot(slot, allowed):
            raise ValidationFailed(MSG_INVALID_SLOT.format(slot=slot))

    name = payload.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationFailed(MSG_EMPTY_NAME)

    people = parse_people(payload.get("people"))
    if people is None or not MIN_PEOPLE <= people <= MAX_PEOPLE:
        raise ValidationFailed(MSG_INVALID_PEOPLE)

    return ValidReservation(
        date=reservation_date,
        slots=list(slots),
        name=name.strip(),
        people=people,
    )
