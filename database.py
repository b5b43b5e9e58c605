import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from dotenv import load_dotenv

from models import BookingRecord

# 1. Load environment variables from .env file
load_dotenv()

# 2. Where the reservation table lives. Created on startup if missing.
RESERVATIONS_FILE = os.environ.get(
    "RESERVATIONS_FILE", os.path.join("data", "reservations.json")
)

logger = logging.getLogger(__name__)

FILE_MODE = 0o644

# date -> slot -> booking record (plain dicts, as stored on disk)
ReservationTable = Dict[str, Dict[str, dict]]


class StoreWriteError(RuntimeError):
    """The reservation file could not be written; the booking did not persist."""


@dataclass
class LoadResult:
    table: ReservationTable
    error: Optional[Exception] = None


@dataclass
class CreateResult:
    created: bool
    conflicts: List[str] = field(default_factory=list)


class ReservationStore:
    """
    Reservation table kept in a single JSON file.

    Nothing is cached between calls: every read goes back to disk. Creates
    hold a lock around load -> conflict check -> save, so two requests in
    this process can never both claim the same slot.
    """

    def __init__(self, path: str):
        self.path = path
        self._lock = threading.Lock()

    def ensure_file(self) -> None:
        folder = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(folder, exist_ok=True)
        if not os.path.exists(self.path):
            self.save({})
            logger.info("Created empty reservation file at %s", self.path)

    def _read(self) -> LoadResult:
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                raw = f.read()
        except FileNotFoundError:
            return LoadResult(table={})
        except OSError as e:
            return LoadResult(table={}, error=e)

        if not raw.strip():
            return LoadResult(table={})

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            return LoadResult(table={}, error=e)

        if not isinstance(data, dict):
            return LoadResult(
                table={}, error=ValueError(f"expected a JSON object, got {type(data).__name__}")
            )
        return LoadResult(table=data)

    def load(self) -> ReservationTable:
        result = self._read()
        if result.error is not None:
            # Corrupted state shouldn't break requests; start fresh.
            logger.warning(
                "Could not read reservations from %s, using an empty table: %s",
                self.path,
                result.error,
            )
        return result.table

    def save(self, table: ReservationTable) -> None:
        folder = os.path.dirname(os.path.abspath(self.path))
        tmp_name = None
        try:
            # Atomic write
            with tempfile.NamedTemporaryFile(
                "w", delete=False, encoding="utf-8", dir=folder, suffix=".tmp"
            ) as tf:
                tmp_name = tf.name
                json.dump(table, tf, ensure_ascii=False, indent=2)
                tf.flush()
                os.fsync(tf.fileno())
            # NamedTemporaryFile is created 0600; keep the data file readable
            os.chmod(tmp_name, FILE_MODE)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise StoreWriteError(f"failed to write {self.path}") from e

    def get_reservations_for_date(self, date: str) -> Dict[str, dict]:
        day = self.load().get(date)
        return day if isinstance(day, dict) else {}

    def create_reservation(
        self, date: str, slots: List[str], name: str, people: int
    ) -> CreateResult:
        with self._lock:
            table = self.load()
            day = table.get(date)
            if not isinstance(day, dict):
                day = {}

            conflicts = [slot for slot in slots if day.get(slot)]
            if conflicts:
                return CreateResult(created=False, conflicts=conflicts)

            for slot in slots:
                day[slot] = BookingRecord(name=name.strip(), people=people).model_dump()

            table[date] = day
            self.save(table)

        return CreateResult(created=True)


_store = ReservationStore(RESERVATIONS_FILE)


def init_db() -> None:
    _store.ensure_file()


def get_store() -> ReservationStore:
    return _store
