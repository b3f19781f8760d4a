"""
Derived views over the record collections.

Everything here is a pure function of its arguments and is recomputed on
every call; nothing is cached between requests.
"""

import calendar
from datetime import date
from typing import Dict, Iterable, List, Optional

from schemas import (
    ABSENT,
    DARS_E_NIZAMI,
    HIFZ,
    LEAVE,
    PAID,
    PENDING,
    PRESENT,
    WEEKDAYS,
    Announcement,
    AttendanceRecord,
    Class,
    Graduate,
    MadrasaFeeRecord,
    Record,
    Student,
    TanzimRecord,
    Teacher,
    TimetableEntry,
)

ALL = "all"
DARS_E_NIZAMI_ALL = "dars-e-nizami-all"
HIFZ_ALL = "hifz-all"

DEFAULT_MONTHLY_FEE = 1500
NOT_AVAILABLE = "N/A"


# ----------------------- Student filters -----------------------

def students_in_group(students: Iterable[Student], classes: Iterable[Class], group: str = ALL,
                      search: str = "") -> List[Student]:
    """Students of a track (``dars-e-nizami-all``/``hifz-all``), one class id, or ``all``,
    narrowed by a case-insensitive name search and sorted by name."""
    classes = list(classes)
    if group == DARS_E_NIZAMI_ALL:
        class_ids = {c.id for c in classes if c.track == DARS_E_NIZAMI}
        selected = [s for s in students if s.class_id in class_ids]
    elif group == HIFZ_ALL:
        class_ids = {c.id for c in classes if c.track == HIFZ}
        selected = [s for s in students if s.class_id in class_ids]
    elif group == ALL:
        selected = list(students)
    else:
        selected = [s for s in students if s.class_id == group]

    if search.strip():
        term = search.lower()
        selected = [s for s in selected if term in s.name.lower()]
    return sorted(selected, key=lambda s: s.name.casefold())


# ----------------------- Attendance -----------------------

class DailyStats(Record):
    total: int = 0
    present: int = 0
    absent: int = 0
    leave: int = 0


def daily_stats(students: Iterable[Student], attendance: Iterable[AttendanceRecord], on_date: str) -> DailyStats:
    students = list(students)
    student_ids = {s.id for s in students}
    stats = DailyStats(total=len(students))
    for record in attendance:
        if record.date != on_date or record.student_id not in student_ids:
            continue
        if record.status == PRESENT:
            stats.present += 1
        elif record.status == ABSENT:
            stats.absent += 1
        elif record.status == LEAVE:
            stats.leave += 1
    return stats


class CalendarDay(Record):
    date: str
    day: int
    # single-student mode
    status: Optional[str] = None
    # group mode
    present: int = 0
    absent: int = 0
    leave: int = 0
    total: int = 0
    percentage: float = 0.0
    tier: str = "none"


class CalendarMonth(Record):
    month: str
    student_id: Optional[str] = None
    leading_blanks: int
    days: List[CalendarDay]


def attendance_tier(present: int, absent: int, leave: int, total: int) -> str:
    percentage = present / total * 100 if total > 0 else 0
    if percentage >= 90:
        return "excellent"
    if percentage >= 70:
        return "good"
    if present > 0:
        return "partial"
    if total > 0 and (absent > 0 or leave > 0):
        return "poor"
    return "none"


def calendar_month(month: str, students: Iterable[Student], attendance: Iterable[AttendanceRecord],
                   student_id: Optional[str] = None) -> CalendarMonth:
    """Per-day attendance for ``month`` (YYYY-MM).

    With ``student_id`` each day carries that student's status; otherwise each
    day carries counts over the group, with ``total`` being the group size.
    """
    year, month_number = (int(part) for part in month.split("-"))
    student_ids = {student_id} if student_id else {s.id for s in students}
    group_size = len(student_ids)

    by_date: Dict[str, List[AttendanceRecord]] = {}
    for record in attendance:
        if record.student_id in student_ids and record.date.startswith(month + "-"):
            by_date.setdefault(record.date, []).append(record)

    days = []
    for day in range(1, calendar.monthrange(year, month_number)[1] + 1):
        iso = date(year, month_number, day).isoformat()
        records = by_date.get(iso, [])
        cell = CalendarDay(date=iso, day=day)
        if student_id:
            cell.status = records[-1].status if records else None
        elif records:
            cell.present = sum(1 for r in records if r.status == PRESENT)
            cell.absent = sum(1 for r in records if r.status == ABSENT)
            cell.leave = sum(1 for r in records if r.status == LEAVE)
            cell.total = group_size
            cell.percentage = cell.present / group_size * 100 if group_size else 0.0
            cell.tier = attendance_tier(cell.present, cell.absent, cell.leave, group_size)
        days.append(cell)

    # weeks start on Sunday
    leading_blanks = (date(year, month_number, 1).weekday() + 1) % 7
    return CalendarMonth(month=month, student_id=student_id, leading_blanks=leading_blanks, days=days)


class AttendanceSummary(Record):
    total_days: int
    present: int
    absent: int
    leave: int
    percentage: str


def attendance_summary(student_id: str, attendance: Iterable[AttendanceRecord]) -> AttendanceSummary:
    records = [a for a in attendance if a.student_id == student_id]
    present = sum(1 for r in records if r.status == PRESENT)
    return AttendanceSummary(
        total_days=len(records),
        present=present,
        absent=sum(1 for r in records if r.status == ABSENT),
        leave=sum(1 for r in records if r.status == LEAVE),
        percentage=f"{present / len(records) * 100:.1f}" if records else NOT_AVAILABLE,
    )


# ----------------------- Fees -----------------------

def pending_madrasa_fees(records: Iterable[MadrasaFeeRecord], month: str) -> float:
    return sum(r.amount for r in records if r.month == month and r.status == PENDING)


def pending_tanzim_fees(records: Iterable[TanzimRecord]) -> float:
    total = 0
    for record in records:
        if record.fee_status == PENDING:
            total += record.admission_fee
        if record.other_fee_status == PENDING and record.other_fee_amount:
            total += record.other_fee_amount
    return total


class FeeView(Record):
    student: Student
    record: Optional[MadrasaFeeRecord] = None
    status: str
    amount: Optional[float] = None
    amount_display: str
    receipt_display: str


def resolve_fee_view(student: Student, record: Optional[MadrasaFeeRecord]) -> FeeView:
    """Effective fee row for a student: without a record the fee shows as
    Pending with no amount (``N/A``)."""
    if record is None:
        return FeeView(student=student, status=PENDING, amount_display=NOT_AVAILABLE,
                       receipt_display=NOT_AVAILABLE)
    return FeeView(
        student=student,
        record=record,
        status=record.status,
        amount=record.amount,
        amount_display=f"Rs. {record.amount:,.0f}",
        receipt_display=record.receipt_number or NOT_AVAILABLE,
    )


class FeeSummary(Record):
    total: float = 0
    paid: float = 0
    pending: float = 0


class FeeRoster(Record):
    month: str
    rows: List[FeeView]
    summary: FeeSummary


def fee_roster(students: Iterable[Student], records: Iterable[MadrasaFeeRecord], month: str,
               class_id: str = ALL, status: str = ALL, search: str = "") -> FeeRoster:
    by_student: Dict[str, MadrasaFeeRecord] = {}
    for record in records:
        if record.month == month:
            by_student[record.student_id] = record

    term = search.lower()
    rows = []
    for student in students:
        if class_id != ALL and student.class_id != class_id:
            continue
        if term and term not in student.name.lower():
            continue
        rows.append(resolve_fee_view(student, by_student.get(student.id)))

    if status != ALL:
        rows = [row for row in rows if row.status == status]
    rows.sort(key=lambda row: row.student.name.casefold())

    # students without a record this month add nothing to the totals
    summary = FeeSummary()
    for row in rows:
        if row.record is None:
            continue
        summary.total += row.record.amount
        if row.status == PAID:
            summary.paid += row.record.amount
        else:
            summary.pending += row.record.amount
    return FeeRoster(month=month, rows=rows, summary=summary)


def fee_draft(student_id: str, month: str, records: Iterable[MadrasaFeeRecord]) -> MadrasaFeeRecord:
    for record in records:
        if record.student_id == student_id and record.month == month:
            return record
    return MadrasaFeeRecord(student_id=student_id, month=month, amount=DEFAULT_MONTHLY_FEE,
                            status=PENDING, receipt_number="")


# ----------------------- Dashboard -----------------------

class Dashboard(Record):
    total_students: int
    total_teachers: int
    present_today: int
    tanzim_admissions: int
    pending_madrasa_fees: float
    pending_tanzim_fees: float
    announcements: List[Announcement]


def newest_first(announcements: Iterable[Announcement]) -> List[Announcement]:
    return sorted(announcements, key=lambda a: a.date, reverse=True)


def dashboard(state, today: date) -> Dashboard:
    today_iso = today.isoformat()
    return Dashboard(
        total_students=len(state.students),
        total_teachers=len(state.teachers),
        present_today=sum(1 for a in state.attendance.all() if a.date == today_iso and a.status == PRESENT),
        tanzim_admissions=len(state.tanzim_records),
        pending_madrasa_fees=pending_madrasa_fees(state.madrasa_fee_records.all(), today_iso[:7]),
        pending_tanzim_fees=pending_tanzim_fees(state.tanzim_records.all()),
        announcements=newest_first(state.announcements.all()),
    )


# ----------------------- Teachers, graduates, tanzim -----------------------

class TimetableDay(Record):
    day: str
    entries: List[TimetableEntry]


def timetable_by_day(teacher: Teacher) -> List[TimetableDay]:
    days = []
    for day in WEEKDAYS:
        entries = [e for e in teacher.timetable if e.day == day]
        if entries:
            days.append(TimetableDay(day=day, entries=entries))
    return days


class ProgressItem(Record):
    class_id: str
    class_name: str
    completed: bool


def dars_e_nizami_progress(graduate: Graduate, classes: Iterable[Class]) -> List[ProgressItem]:
    progress = graduate.dars_e_nizami_progress or {}
    return [
        ProgressItem(class_id=c.id, class_name=c.name, completed=bool(progress.get(c.id)))
        for c in classes
        if c.track == DARS_E_NIZAMI
    ]


def documents_complete(record: TanzimRecord) -> bool:
    docs = record.required_documents
    return docs.cnic_b_form and docs.passport_photos and docs.fee_receipt
