import logging
import os
from datetime import date, datetime, timezone
from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import ConfigDict, Field, ValidationInfo, field_validator

import views
from database import LocalStore
from messaging import bulk_message_text, default_remark, report_text, sms_url, whatsapp_url
from schemas import (
    PAID,
    AcademicTrack,
    Announcement,
    AttendanceStatus,
    Class,
    Graduate,
    MadrasaFeeRecord,
    Record,
    Student,
    TanzimRecord,
    Teacher,
    TimetableEntry,
)
from state import AppState, Collection
from textgen import (
    DEFAULT_MODEL,
    UNAVAILABLE_MESSAGE,
    GenerationResult,
    ModelId,
    TextGenerator,
    announcement_prompt,
    parse_announcement,
    remark_prompt,
)

logger = logging.getLogger(__name__)

# Environment & configuration
DATA_DIR = os.getenv("DATA_DIR", "data")
API_KEY = os.getenv("API_KEY") or os.getenv("GEMINI_API_KEY")

app = FastAPI(title="Madrasa Records Manager")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ----------------------- Dependencies -----------------------
@lru_cache
def get_state() -> AppState:
    return AppState(LocalStore(DATA_DIR))


@lru_cache
def get_text_generator() -> TextGenerator:
    if not API_KEY:
        logger.warning("API_KEY is not set. AI features will be disabled.")
    return TextGenerator(API_KEY)


def get_today() -> date:
    return date.today()


# ----------------------- Utility Functions -----------------------
def get_or_404(collection: Collection, record_id: str):
    record = collection.get(record_id)
    if record is None:
        raise HTTPException(status_code=404, detail="Not found")
    return record


def as_record(model, form: Record, record_id: Optional[str] = None):
    data = form.model_dump(exclude_unset=True)
    if record_id is not None:
        data["id"] = record_id
    return model.model_validate(data)


def require(v, message: str):
    if v is None or (isinstance(v, str) and not v.strip()):
        raise ValueError(message)
    return v


def check_month(month: str) -> str:
    try:
        parsed = datetime.strptime(month, "%Y-%m")
    except ValueError:
        raise HTTPException(status_code=400, detail="Month must be YYYY-MM")
    # strptime also takes "2024-1"
    if parsed.strftime("%Y-%m") != month:
        raise HTTPException(status_code=400, detail="Month must be YYYY-MM")
    return month


# ----------------------- Forms -----------------------
STUDENT_MESSAGES = {
    "name": "Full name is required",
    "father_name": "Father's name is required",
    "phone": "Contact number is required",
    "class_id": "Please select a class",
    "graduation_date": "Graduation date is required",
}


class StudentForm(Student):
    model_config = ConfigDict(validate_default=True)

    @field_validator("name", "father_name", "phone", "class_id")
    @classmethod
    def required(cls, v: str, info: ValidationInfo) -> str:
        return require(v, STUDENT_MESSAGES[info.field_name])


class GraduateForm(Graduate):
    model_config = ConfigDict(validate_default=True)

    @field_validator("name", "father_name", "phone", "class_id", "graduation_date")
    @classmethod
    def required(cls, v: str, info: ValidationInfo) -> str:
        return require(v, STUDENT_MESSAGES[info.field_name])


class TeacherForm(Teacher):
    model_config = ConfigDict(validate_default=True)

    @field_validator("name", "contact", "qualifications")
    @classmethod
    def required(cls, v: str, info: ValidationInfo) -> str:
        messages = {
            "name": "Full name is required",
            "contact": "Contact number is required",
            "qualifications": "Qualifications are required",
        }
        return require(v, messages[info.field_name])


class TanzimForm(TanzimRecord):
    model_config = ConfigDict(validate_default=True)

    @field_validator("student_id")
    @classmethod
    def student_given(cls, v: str) -> str:
        return require(v, "Please select a student")

    @field_validator("tanzim_class_id")
    @classmethod
    def class_given(cls, v: str) -> str:
        return require(v, "Exam class is required")

    @field_validator("exam_year")
    @classmethod
    def exam_year_given(cls, v: int) -> int:
        if not v:
            raise ValueError("Exam year is required")
        return v

    @field_validator("admission_fee")
    @classmethod
    def positive_fee(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Fee must be greater than zero")
        return v

    @field_validator("fee_receipt_number")
    @classmethod
    def receipt_when_paid(cls, v: str, info: ValidationInfo) -> str:
        if info.data.get("fee_status") == PAID and not v:
            raise ValueError("Receipt number is required for paid fees")
        return v


class MadrasaFeeForm(MadrasaFeeRecord):
    model_config = ConfigDict(validate_default=True)

    @field_validator("student_id")
    @classmethod
    def student_given(cls, v: str) -> str:
        return require(v, "Student is required")

    @field_validator("amount")
    @classmethod
    def positive_amount(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Amount must be positive")
        return v

    @field_validator("receipt_number")
    @classmethod
    def receipt_when_paid(cls, v: Optional[str], info: ValidationInfo) -> Optional[str]:
        if info.data.get("status") == PAID and not v:
            raise ValueError("Receipt number is required for paid fees")
        return v


class AnnouncementForm(Record):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1)


class GenerateAnnouncementRequest(Record):
    topic: str = Field(..., min_length=1)

    @field_validator("topic")
    @classmethod
    def topic_given(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Please enter a topic for the announcement.")
        return v


class BulkMessageRequest(Record):
    student_ids: List[str]
    message: str = Field(..., min_length=1)


class AttendanceStatusIn(Record):
    status: AttendanceStatus


class MarkAllRequest(Record):
    on_date: date = Field(..., alias="date")
    status: AttendanceStatus
    group: str = views.DARS_E_NIZAMI_ALL
    q: str = ""


class RemarkRequest(Record):
    model_id: ModelId = DEFAULT_MODEL


# ----------------------- Responses -----------------------
class StudentRow(Record):
    student: Student
    class_name: str
    whatsapp_url: str


class AttendanceRow(Record):
    student: Student
    status: Optional[AttendanceStatus] = None


class AttendanceSheet(Record):
    date: str
    group: str
    stats: views.DailyStats
    rows: List[AttendanceRow]


class TanzimRow(Record):
    record: TanzimRecord
    student_name: str
    class_name: str
    documents_complete: bool


class StudentReport(Record):
    student: Student
    class_name: str
    attendance: views.AttendanceSummary
    remark: str
    report_text: str
    whatsapp_url: str
    ai_available: bool


def class_name(state: AppState, class_id: str) -> str:
    cls = state.class_map().get(class_id)
    return cls.name if cls else "Unknown Class"


# ----------------------- Health -----------------------
@app.get("/")
def read_root():
    return {"message": "Madrasa Records Manager API running"}


@app.get("/health")
def health(state: AppState = Depends(get_state)):
    return {
        "ok": True,
        "time": datetime.now(timezone.utc).isoformat(),
        "data_dir": state.store.base_dir,
        "collections": {key: len(coll) for key, coll in state.collections().items()},
    }


@app.get("/ai/status")
def ai_status(generator: TextGenerator = Depends(get_text_generator)):
    return {"available": generator.is_available()}


# ----------------------- Dashboard -----------------------
@app.get("/dashboard", response_model=views.Dashboard)
def get_dashboard(state: AppState = Depends(get_state), today: date = Depends(get_today)):
    return views.dashboard(state, today)


@app.get("/classes", response_model=List[Class])
def list_classes(track: Optional[AcademicTrack] = None, state: AppState = Depends(get_state)):
    return [c for c in state.classes if track is None or c.track == track]


# ----------------------- Students -----------------------
@app.get("/students", response_model=List[StudentRow])
def list_students(class_id: str = views.ALL, q: str = "", state: AppState = Depends(get_state)):
    # list order is insertion order, as entered
    term = q.lower()
    students = [
        s for s in state.students.all()
        if (class_id == views.ALL or s.class_id == class_id) and term in s.name.lower()
    ]
    return [
        StudentRow(student=s, class_name=class_name(state, s.class_id), whatsapp_url=whatsapp_url(s.phone))
        for s in students
    ]


@app.get("/students/{student_id}", response_model=Student)
def get_student(student_id: str, state: AppState = Depends(get_state)):
    return get_or_404(state.students, student_id)


@app.post("/students", response_model=Student)
def save_student(form: StudentForm, state: AppState = Depends(get_state)):
    return state.students.save(as_record(Student, form))


@app.put("/students/{student_id}", response_model=Student)
def update_student(student_id: str, form: StudentForm, state: AppState = Depends(get_state)):
    get_or_404(state.students, student_id)
    return state.students.save(as_record(Student, form, student_id))


@app.delete("/students/{student_id}")
def delete_student(student_id: str, state: AppState = Depends(get_state)):
    if not state.students.remove(student_id):
        raise HTTPException(status_code=404, detail="Not found")
    return {"status": "deleted"}


@app.post("/students/messages")
def bulk_message(payload: BulkMessageRequest, state: AppState = Depends(get_state)):
    selected = [s for s in state.students.all() if s.id in set(payload.student_ids)]
    if not selected:
        raise HTTPException(status_code=400, detail="No students selected")
    phones = [s.phone for s in selected]
    return {
        "recipients": [s.name for s in selected],
        "smsUrl": sms_url(phones, payload.message),
        "clipboardText": bulk_message_text(payload.message, phones),
    }


# ----------------------- Teachers -----------------------
@app.get("/teachers", response_model=List[Teacher])
def list_teachers(state: AppState = Depends(get_state)):
    return state.teachers.all()


@app.get("/teachers/{teacher_id}", response_model=Teacher)
def get_teacher(teacher_id: str, state: AppState = Depends(get_state)):
    return get_or_404(state.teachers, teacher_id)


@app.post("/teachers", response_model=Teacher)
def save_teacher(form: TeacherForm, state: AppState = Depends(get_state)):
    return state.teachers.save(as_record(Teacher, form))


@app.put("/teachers/{teacher_id}", response_model=Teacher)
def update_teacher(teacher_id: str, form: TeacherForm, state: AppState = Depends(get_state)):
    get_or_404(state.teachers, teacher_id)
    return state.teachers.save(as_record(Teacher, form, teacher_id))


@app.delete("/teachers/{teacher_id}")
def delete_teacher(teacher_id: str, state: AppState = Depends(get_state)):
    if not state.teachers.remove(teacher_id):
        raise HTTPException(status_code=404, detail="Not found")
    return {"status": "deleted"}


@app.get("/teachers/{teacher_id}/timetable", response_model=List[views.TimetableDay])
def get_timetable(teacher_id: str, state: AppState = Depends(get_state)):
    return views.timetable_by_day(get_or_404(state.teachers, teacher_id))


@app.post("/teachers/{teacher_id}/timetable", response_model=Teacher)
def add_timetable_entry(teacher_id: str, entry: TimetableEntry, state: AppState = Depends(get_state)):
    teacher = get_or_404(state.teachers, teacher_id)
    if not entry.id:
        entry = entry.model_copy(update={"id": state.new_id()})
    timetable = [e for e in teacher.timetable if e.id != entry.id] + [entry]
    return state.teachers.save(teacher.model_copy(update={"timetable": timetable}))


@app.delete("/teachers/{teacher_id}/timetable/{entry_id}", response_model=Teacher)
def remove_timetable_entry(teacher_id: str, entry_id: str, state: AppState = Depends(get_state)):
    teacher = get_or_404(state.teachers, teacher_id)
    timetable = [e for e in teacher.timetable if e.id != entry_id]
    if len(timetable) == len(teacher.timetable):
        raise HTTPException(status_code=404, detail="Not found")
    return state.teachers.save(teacher.model_copy(update={"timetable": timetable}))


# ----------------------- Attendance -----------------------
@app.get("/attendance", response_model=AttendanceSheet)
def attendance_sheet(group: str = views.DARS_E_NIZAMI_ALL, q: str = "", on_date: Optional[date] = None,
                     state: AppState = Depends(get_state), today: date = Depends(get_today)):
    day = (on_date or today).isoformat()
    students = views.students_in_group(state.students.all(), state.classes, group, q)
    return AttendanceSheet(
        date=day,
        group=group,
        stats=views.daily_stats(students, state.attendance.all(), day),
        rows=[AttendanceRow(student=s, status=state.attendance_status(s.id, day)) for s in students],
    )


@app.put("/attendance/{student_id}/{on_date}")
def set_attendance(student_id: str, on_date: date, payload: AttendanceStatusIn,
                   state: AppState = Depends(get_state)):
    get_or_404(state.students, student_id)
    return state.set_attendance_status(student_id, on_date.isoformat(), payload.status).to_json()


@app.delete("/attendance/{student_id}/{on_date}")
def clear_attendance(student_id: str, on_date: date, state: AppState = Depends(get_state)):
    state.clear_attendance_status(student_id, on_date.isoformat())
    return {"status": "cleared"}


@app.post("/attendance/mark-all")
def mark_all_attendance(payload: MarkAllRequest, state: AppState = Depends(get_state)):
    students = views.students_in_group(state.students.all(), state.classes, payload.group, payload.q)
    records = state.mark_all([s.id for s in students], payload.on_date.isoformat(), payload.status)
    return {"marked": len(records)}


@app.get("/attendance/calendar", response_model=views.CalendarMonth)
def attendance_calendar(month: Optional[str] = None, group: str = views.DARS_E_NIZAMI_ALL, q: str = "",
                        student_id: Optional[str] = None, state: AppState = Depends(get_state),
                        today: date = Depends(get_today)):
    month = check_month(month or today.isoformat()[:7])
    if student_id:
        get_or_404(state.students, student_id)
    students = views.students_in_group(state.students.all(), state.classes, group, q)
    return views.calendar_month(month, students, state.attendance.all(), student_id)


# ----------------------- Graduates -----------------------
@app.get("/graduates", response_model=List[Graduate])
def list_graduates(state: AppState = Depends(get_state)):
    return state.graduates.all()


@app.get("/graduates/{graduate_id}", response_model=Graduate)
def get_graduate(graduate_id: str, state: AppState = Depends(get_state)):
    return get_or_404(state.graduates, graduate_id)


@app.post("/graduates", response_model=Graduate)
def save_graduate(form: GraduateForm, state: AppState = Depends(get_state)):
    graduate = as_record(Graduate, form)
    if not graduate.alumni_picture and graduate.picture:
        graduate = graduate.model_copy(update={"alumni_picture": graduate.picture})
    return state.graduates.save(graduate)


@app.put("/graduates/{graduate_id}", response_model=Graduate)
def update_graduate(graduate_id: str, form: GraduateForm, state: AppState = Depends(get_state)):
    get_or_404(state.graduates, graduate_id)
    return state.graduates.save(as_record(Graduate, form, graduate_id))


@app.delete("/graduates/{graduate_id}")
def delete_graduate(graduate_id: str, state: AppState = Depends(get_state)):
    if not state.graduates.remove(graduate_id):
        raise HTTPException(status_code=404, detail="Not found")
    return {"status": "deleted"}


@app.get("/graduates/{graduate_id}/progress", response_model=List[views.ProgressItem])
def graduate_progress(graduate_id: str, state: AppState = Depends(get_state)):
    return views.dars_e_nizami_progress(get_or_404(state.graduates, graduate_id), state.classes)


# ----------------------- Tanzim -----------------------
def tanzim_row(state: AppState, record: TanzimRecord) -> TanzimRow:
    student = state.students.get(record.student_id)
    return TanzimRow(
        record=record,
        student_name=student.name if student else "Unknown Student",
        class_name=class_name(state, record.tanzim_class_id),
        documents_complete=views.documents_complete(record),
    )


@app.get("/tanzim", response_model=List[TanzimRow])
def list_tanzim(exam_year: Optional[int] = None, state: AppState = Depends(get_state)):
    return [
        tanzim_row(state, r) for r in state.tanzim_records.all()
        if exam_year is None or r.exam_year == exam_year
    ]


@app.get("/tanzim/{record_id}", response_model=TanzimRow)
def get_tanzim(record_id: str, state: AppState = Depends(get_state)):
    return tanzim_row(state, get_or_404(state.tanzim_records, record_id))


@app.post("/tanzim", response_model=TanzimRecord)
def save_tanzim(form: TanzimForm, state: AppState = Depends(get_state)):
    return state.tanzim_records.save(as_record(TanzimRecord, form))


@app.put("/tanzim/{record_id}", response_model=TanzimRecord)
def update_tanzim(record_id: str, form: TanzimForm, state: AppState = Depends(get_state)):
    get_or_404(state.tanzim_records, record_id)
    return state.tanzim_records.save(as_record(TanzimRecord, form, record_id))


@app.delete("/tanzim/{record_id}")
def delete_tanzim(record_id: str, state: AppState = Depends(get_state)):
    if not state.tanzim_records.remove(record_id):
        raise HTTPException(status_code=404, detail="Not found")
    return {"status": "deleted"}


# ----------------------- Madrasa fees -----------------------
@app.get("/madrasa-fees", response_model=views.FeeRoster)
def madrasa_fees(month: Optional[str] = None, class_id: str = views.ALL, status: str = views.ALL, q: str = "",
                 state: AppState = Depends(get_state), today: date = Depends(get_today)):
    return views.fee_roster(state.students.all(), state.madrasa_fee_records.all(),
                            check_month(month or today.isoformat()[:7]), class_id, status, q)


@app.get("/madrasa-fees/draft", response_model=MadrasaFeeRecord)
def madrasa_fee_draft(student_id: str, month: Optional[str] = None, state: AppState = Depends(get_state),
                      today: date = Depends(get_today)):
    get_or_404(state.students, student_id)
    month = check_month(month or today.isoformat()[:7])
    return views.fee_draft(student_id, month, state.madrasa_fee_records.all())


@app.post("/madrasa-fees", response_model=MadrasaFeeRecord)
def save_madrasa_fee(form: MadrasaFeeForm, state: AppState = Depends(get_state)):
    return state.madrasa_fee_records.save(as_record(MadrasaFeeRecord, form))


@app.put("/madrasa-fees/{record_id}", response_model=MadrasaFeeRecord)
def update_madrasa_fee(record_id: str, form: MadrasaFeeForm, state: AppState = Depends(get_state)):
    get_or_404(state.madrasa_fee_records, record_id)
    return state.madrasa_fee_records.save(as_record(MadrasaFeeRecord, form, record_id))


# ----------------------- Announcements -----------------------
@app.get("/announcements", response_model=List[Announcement])
def list_announcements(state: AppState = Depends(get_state)):
    return views.newest_first(state.announcements.all())


@app.post("/announcements", response_model=Announcement)
def create_announcement(payload: AnnouncementForm, state: AppState = Depends(get_state)):
    announcement = Announcement(title=payload.title, content=payload.content,
                                date=datetime.now(timezone.utc).isoformat())
    return state.announcements.save(announcement)


@app.delete("/announcements/{announcement_id}")
def delete_announcement(announcement_id: str, state: AppState = Depends(get_state)):
    if not state.announcements.remove(announcement_id):
        raise HTTPException(status_code=404, detail="Not found")
    return {"status": "deleted"}


@app.post("/announcements/generate", response_model=GenerationResult)
def generate_announcement(payload: GenerateAnnouncementRequest,
                          generator: TextGenerator = Depends(get_text_generator)):
    if not generator.is_available():
        return GenerationResult(ok=False, error=UNAVAILABLE_MESSAGE)
    return parse_announcement(generator.generate(DEFAULT_MODEL, announcement_prompt(payload.topic)))


# ----------------------- Student report -----------------------
@app.get("/report/{student_id}", response_model=StudentReport)
def student_report(student_id: str, remark: Optional[str] = None, state: AppState = Depends(get_state),
                   generator: TextGenerator = Depends(get_text_generator)):
    student = get_or_404(state.students, student_id)
    cls = state.class_map().get(student.class_id)
    summary = views.attendance_summary(student_id, state.attendance.all())
    remark = remark or default_remark(student.name)
    text = report_text(student.name, cls.name if cls else "N/A", summary.present, summary.absent,
                       summary.leave, summary.percentage, remark)
    return StudentReport(
        student=student,
        class_name=cls.name if cls else "N/A",
        attendance=summary,
        remark=remark,
        report_text=text,
        whatsapp_url=whatsapp_url(student.phone, text),
        ai_available=generator.is_available(),
    )


@app.post("/report/{student_id}/remark")
def generate_remark(student_id: str, payload: Optional[RemarkRequest] = None,
                    state: AppState = Depends(get_state),
                    generator: TextGenerator = Depends(get_text_generator)):
    student = get_or_404(state.students, student_id)
    cls = state.class_map().get(student.class_id)
    if cls is None:
        raise HTTPException(status_code=400, detail="Student has no class")
    summary = views.attendance_summary(student_id, state.attendance.all())
    prompt = remark_prompt(student.name, cls.name, summary.total_days, summary.present, summary.absent,
                           summary.leave, summary.percentage)
    model_id = payload.model_id if payload else DEFAULT_MODEL
    return {"remark": generator.generate(model_id, prompt)}


if __name__ == "__main__":
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
