import logging
import threading
from typing import Callable, Dict, Generic, Iterable, List, Optional, Type, TypeVar

from pydantic import TypeAdapter, ValidationError

from database import LocalStore, new_id
from schemas import (
    Announcement,
    AttendanceRecord,
    Class,
    Graduate,
    MadrasaFeeRecord,
    Record,
    Student,
    TanzimRecord,
    Teacher,
)
from seed_data import CLASSES, SEEDS

logger = logging.getLogger(__name__)

R = TypeVar("R", bound=Record)


class Collection(Generic[R]):
    """One persisted array of records, kept in memory and written on every change."""

    def __init__(self, key: str, model: Type[R], store: LocalStore, lock: threading.RLock,
                 id_factory: Callable[[], str] = new_id):
        self.key = key
        self.model = model
        self.store = store
        self._lock = lock
        self._new_id = id_factory
        self._items: List[R] = []

    def load(self, seed: Optional[Callable[[], List[R]]] = None) -> None:
        raw = self.store.get(self.key, [])
        try:
            items = TypeAdapter(List[self.model]).validate_python(raw)
        except ValidationError as e:
            logger.warning("Discarding malformed %s collection: %s", self.key, e)
            items = []
        if not items and seed is not None:
            logger.info("Seeding empty %s collection", self.key)
            self.replace(seed())
        else:
            self._items = items

    def all(self) -> List[R]:
        return list(self._items)

    def get(self, record_id: str) -> Optional[R]:
        for item in self._items:
            if item.id == record_id:
                return item
        return None

    def save(self, record: R) -> R:
        with self._lock:
            existing = self.get(record.id) if record.id else None
            if existing is None:
                if not record.id:
                    record = record.model_copy(update={"id": self._new_id()})
                self.replace(self._items + [record])
                return record
            merged = self.model.model_validate({**existing.model_dump(), **record.model_dump(exclude_unset=True)})
            self.replace([merged if item.id == merged.id else item for item in self._items])
            return merged

    def remove(self, record_id: str) -> bool:
        with self._lock:
            remaining = [item for item in self._items if item.id != record_id]
            if len(remaining) == len(self._items):
                return False
            self.replace(remaining)
            return True

    def replace(self, records: Iterable[R]) -> None:
        with self._lock:
            self._items = list(records)
            self.store.set(self.key, [item.to_json() for item in self._items])

    def __len__(self):
        return len(self._items)


class AppState:
    """Application state shared by every route.

    Collections are loaded once, seeded when empty, and persisted after each
    mutation. Classes are reference data and are reset on every load.
    """

    def __init__(self, store: LocalStore, id_factory: Callable[[], str] = new_id):
        self.store = store
        self._lock = threading.RLock()
        self.new_id = id_factory

        def collection(key, model):
            return Collection(key, model, store, self._lock, id_factory)

        self.classes: List[Class] = [c.model_copy() for c in CLASSES]
        self.students: Collection[Student] = collection("students", Student)
        self.teachers: Collection[Teacher] = collection("teachers", Teacher)
        self.graduates: Collection[Graduate] = collection("graduates", Graduate)
        self.tanzim_records: Collection[TanzimRecord] = collection("tanzimRecords", TanzimRecord)
        self.madrasa_fee_records: Collection[MadrasaFeeRecord] = collection("madrasaFeeRecords", MadrasaFeeRecord)
        self.announcements: Collection[Announcement] = collection("announcements", Announcement)
        self.attendance: Collection[AttendanceRecord] = collection("attendance", AttendanceRecord)
        self.load()

    def collections(self) -> Dict[str, Collection]:
        return {
            c.key: c
            for c in (self.students, self.teachers, self.graduates, self.tanzim_records,
                      self.madrasa_fee_records, self.announcements, self.attendance)
        }

    def load(self) -> None:
        self.store.set("classes", [c.to_json() for c in self.classes])
        for key, coll in self.collections().items():
            coll.load(SEEDS.get(key))

    def class_map(self) -> Dict[str, Class]:
        return {c.id: c for c in self.classes}

    def student_map(self) -> Dict[str, Student]:
        return {s.id: s for s in self.students.all()}

    # ----------------------- Attendance -----------------------

    def attendance_status(self, student_id: str, on_date: str) -> Optional[str]:
        for record in self.attendance.all():
            if record.student_id == student_id and record.date == on_date:
                return record.status
        return None

    def set_attendance_status(self, student_id: str, on_date: str, status: str) -> AttendanceRecord:
        record = AttendanceRecord(student_id=student_id, date=on_date, status=status)
        with self._lock:
            others = [a for a in self.attendance.all() if not (a.student_id == student_id and a.date == on_date)]
            self.attendance.replace(others + [record])
        return record

    def clear_attendance_status(self, student_id: str, on_date: str) -> None:
        with self._lock:
            self.attendance.replace(
                a for a in self.attendance.all() if not (a.student_id == student_id and a.date == on_date)
            )

    def mark_all(self, student_ids: Iterable[str], on_date: str, status: str) -> List[AttendanceRecord]:
        ids = list(dict.fromkeys(student_ids))
        wanted = set(ids)
        new_records = [AttendanceRecord(student_id=sid, date=on_date, status=status) for sid in ids]
        with self._lock:
            others = [a for a in self.attendance.all() if a.date != on_date or a.student_id not in wanted]
            self.attendance.replace(others + new_records)
        return new_records
