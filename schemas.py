"""
Record schemas for the Madrasa Records Manager (JSON files via Pydantic models)
Each persisted collection is a JSON array of one of these models, stored under
a stable key; field names are kept camelCase on disk through aliases.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

HIFZ = "Hifz"
DARS_E_NIZAMI = "Dars-e-Nizami"

PRESENT = "Present"
ABSENT = "Absent"
LEAVE = "Leave"

PAID = "Paid"
PENDING = "Pending"

AcademicTrack = Literal["Hifz", "Dars-e-Nizami"]
AttendanceStatus = Literal["Present", "Absent", "Leave"]
FeeStatus = Literal["Paid", "Pending"]
SanadStatus = Literal["Received", "Not Yet Issued", "Pending Collection"]
Weekday = Literal["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]

WEEKDAYS = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


class Record(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


# Configuration
class Class(Record):
    id: str
    name: str
    track: AcademicTrack


# People
class Student(Record):
    id: Optional[str] = None
    name: str
    picture: str = ""
    b_form: str = ""
    father_name: str = ""
    father_cnic: str = ""
    address: str = ""
    phone: str = ""
    class_id: str = ""


class TimetableEntry(Record):
    id: Optional[str] = None
    day: Weekday
    subject: str
    class_id: str
    start_time: str = Field(..., description="HH:MM")
    end_time: str = Field(..., description="HH:MM")


class Teacher(Record):
    id: Optional[str] = None
    name: str
    picture: str = ""
    contact: str = ""
    qualifications: str = ""
    timetable: List[TimetableEntry] = Field(default_factory=list)


class Graduate(Student):
    graduation_date: str = Field(..., description="YYYY-MM-DD")
    degree_completed: AcademicTrack
    alumni_picture: Optional[str] = None
    # keyed by Dars-e-Nizami class id, e.g. {"dn1": True}
    dars_e_nizami_progress: Optional[Dict[str, bool]] = None
    dars_e_nizami_sanad_status: Optional[SanadStatus] = None
    hifz_sanad_status: Optional[SanadStatus] = None


# Attendance
class AttendanceRecord(Record):
    student_id: str
    date: str = Field(..., description="YYYY-MM-DD")
    status: AttendanceStatus


# Fees
class TanzimRequiredDocuments(Record):
    cnic_b_form: bool = False
    passport_photos: bool = False
    fee_receipt: bool = False


class TanzimRecord(Record):
    id: Optional[str] = None
    student_id: str
    exam_year: int
    tanzim_class_id: str
    admission_fee: float
    fee_status: FeeStatus = PENDING
    fee_receipt_number: str = ""
    other_fee_amount: Optional[float] = None
    other_fee_status: Optional[FeeStatus] = None
    other_fee_receipt_number: Optional[str] = None
    # base64 data URLs
    cnic_b_form_copy: str = ""
    passport_photo1: str = ""
    passport_photo2: str = ""
    fee_receipt_copy: str = ""
    required_documents: TanzimRequiredDocuments = Field(default_factory=TanzimRequiredDocuments)


class MadrasaFeeRecord(Record):
    id: Optional[str] = None
    student_id: str
    month: str = Field(..., description="YYYY-MM")
    amount: float
    status: FeeStatus = PENDING
    receipt_number: Optional[str] = None


# Notice board
class Announcement(Record):
    id: Optional[str] = None
    title: str
    content: str
    date: str = Field(..., description="ISO 8601 timestamp")
