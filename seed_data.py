"""Reference classes and the sample records loaded into empty collections."""

from datetime import datetime, timezone

from schemas import (
    DARS_E_NIZAMI,
    HIFZ,
    PAID,
    PENDING,
    Announcement,
    Class,
    Graduate,
    MadrasaFeeRecord,
    Student,
    TanzimRecord,
    TanzimRequiredDocuments,
    Teacher,
    TimetableEntry,
)

CLASSES = [
    Class(id="dn1", name="Mutawassitah", track=DARS_E_NIZAMI),
    Class(id="dn2", name="Aammah Awwal", track=DARS_E_NIZAMI),
    Class(id="dn3", name="Aammah Doum", track=DARS_E_NIZAMI),
    Class(id="dn4", name="Khaasah Awwal", track=DARS_E_NIZAMI),
    Class(id="dn5", name="Khaasah Doum", track=DARS_E_NIZAMI),
    Class(id="dn6", name="Aaliyah Awwal", track=DARS_E_NIZAMI),
    Class(id="dn7", name="Aaliyah Doum", track=DARS_E_NIZAMI),
    Class(id="dn8", name="Aalamiyah Awwal", track=DARS_E_NIZAMI),
    Class(id="dn9", name="Aalamiyah Doum", track=DARS_E_NIZAMI),
    Class(id="h1", name="Nazira", track=HIFZ),
    Class(id="h2", name="Hifz Ibtidai", track=HIFZ),
    Class(id="h3", name="Hifz Mukammal", track=HIFZ),
]


def students():
    return [
        Student(id="s1", name="Ahmed Ali", picture="https://picsum.photos/seed/s1/200",
                b_form="12345-6789012-1", father_name="Muhammad Ali", father_cnic="34567-8901234-5",
                address="123, Main Street, Lahore", phone="0300-1234567", class_id="dn2"),
        Student(id="s2", name="Fatima Raza", picture="https://picsum.photos/seed/s2/200",
                b_form="12345-6789012-2", father_name="Ali Raza", father_cnic="34567-8901234-6",
                address="456, Park Avenue, Karachi", phone="0321-7654321", class_id="h1"),
        Student(id="s3", name="Bilal Khan", picture="https://picsum.photos/seed/s3/200",
                b_form="12345-6789012-3", father_name="Imran Khan", father_cnic="34567-8901234-7",
                address="789, Gulberg, Islamabad", phone="0333-1122334", class_id="dn2"),
    ]


def teachers():
    return [
        Teacher(
            id="t1",
            name="Ustad Tariq Jameel",
            picture="https://picsum.photos/seed/t1/200",
            contact="0301-9876543",
            qualifications="PhD in Islamic Studies, Wafaq ul Madaris",
            timetable=[
                TimetableEntry(id="tt1", day="Monday", subject="Fiqh", class_id="dn8", start_time="09:00", end_time="10:00"),
                TimetableEntry(id="tt2", day="Monday", subject="Hadith", class_id="dn9", start_time="10:00", end_time="11:00"),
                TimetableEntry(id="tt3", day="Tuesday", subject="Tafseer", class_id="dn8", start_time="09:00", end_time="10:00"),
            ],
        ),
        Teacher(
            id="t2",
            name="Qari Ahmed Raza",
            picture="https://picsum.photos/seed/t2/200",
            contact="0345-1237890",
            qualifications="Certified Qari, 10 Qiraat",
            timetable=[
                TimetableEntry(id="tt4", day="Monday", subject="Tajweed", class_id="h1", start_time="08:00", end_time="10:00"),
                TimetableEntry(id="tt5", day="Tuesday", subject="Hifz Review", class_id="h3", start_time="11:00", end_time="13:00"),
            ],
        ),
    ]


def graduates():
    return [
        Graduate(
            id="a1",
            name="Zayn Abdullah",
            picture="https://picsum.photos/seed/a1/200",
            alumni_picture="https://picsum.photos/seed/a1-grad/200",
            b_form="23456-7890123-1",
            father_name="Abdullah Khan",
            father_cnic="45678-9012345-6",
            address="House 1, Sector A, Capital City",
            phone="0311-1122334",
            class_id="dn9",  # last class attended
            graduation_date="2023-03-15",
            degree_completed=DARS_E_NIZAMI,
            dars_e_nizami_progress={f"dn{i}": True for i in range(1, 10)},
            dars_e_nizami_sanad_status="Received",
        ),
        Graduate(
            id="a2",
            name="Aisha Malik",
            picture="https://picsum.photos/seed/a2/200",
            b_form="34567-8901234-2",
            father_name="Tariq Malik",
            father_cnic="56789-0123456-7",
            address="Apt 5, B Block, Metro City",
            phone="0322-2233445",
            class_id="h3",
            graduation_date="2024-01-20",
            degree_completed=HIFZ,
            hifz_sanad_status="Pending Collection",
        ),
    ]


def tanzim_records():
    return [
        TanzimRecord(
            id="tz1",
            student_id="s1",
            exam_year=2025,
            tanzim_class_id="dn2",
            admission_fee=2500,
            fee_status=PAID,
            fee_receipt_number="CH-12345",
            other_fee_amount=500,
            other_fee_status=PAID,
            other_fee_receipt_number="MISC-01",
            required_documents=TanzimRequiredDocuments(cnic_b_form=True, passport_photos=True, fee_receipt=True),
        ),
        TanzimRecord(
            id="tz2",
            student_id="s3",
            exam_year=2025,
            tanzim_class_id="dn2",
            admission_fee=2500,
            fee_status=PENDING,
            required_documents=TanzimRequiredDocuments(cnic_b_form=True),
        ),
    ]


def madrasa_fee_records():
    return [
        MadrasaFeeRecord(id="mf1", student_id="s1", month="2024-09", amount=1500, status=PAID, receipt_number="R-09-001"),
        MadrasaFeeRecord(id="mf2", student_id="s2", month="2024-09", amount=1200, status=PAID, receipt_number="R-09-002"),
        MadrasaFeeRecord(id="mf3", student_id="s3", month="2024-09", amount=1500, status=PENDING),
        MadrasaFeeRecord(id="mf4", student_id="s1", month="2024-10", amount=1500, status=PENDING),
    ]


def announcements():
    return [
        Announcement(
            id="anno1",
            title="Welcome to Noor ul Masajid",
            content="Classes will commence from the 1st of next month.",
            date=datetime.now(timezone.utc).isoformat(),
        )
    ]


# collection key -> fixture factory
SEEDS = {
    "students": students,
    "teachers": teachers,
    "graduates": graduates,
    "tanzimRecords": tanzim_records,
    "madrasaFeeRecords": madrasa_fee_records,
    "announcements": announcements,
}
