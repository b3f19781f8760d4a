import re
from typing import Iterable, Optional
from urllib.parse import quote

INSTITUTION_NAME = "Noor ul Masajid"


def _encode(text: str) -> str:
    # same escaping as encodeURIComponent
    return quote(text, safe="-_.!~*'()")


def digits_only(phone: str) -> str:
    return re.sub(r"[^0-9]", "", phone or "")


def normalize_phone(phone: str) -> str:
    """Pakistani numbers in international form: 03xx... -> 923xx..., 3xx... -> 923xx..."""
    digits = digits_only(phone)
    if digits.startswith("03"):
        return "92" + digits[1:]
    if digits.startswith("3"):
        return "92" + digits
    return digits


def whatsapp_url(phone: str, text: Optional[str] = None) -> str:
    url = f"https://wa.me/{normalize_phone(phone)}"
    if text:
        url += f"?text={_encode(text)}"
    return url


def sms_url(phones: Iterable[str], body: str) -> str:
    numbers = ",".join(digits_only(p) for p in phones)
    return f"sms:{numbers}?body={_encode(body)}"


def bulk_message_text(message: str, phones: Iterable[str]) -> str:
    recipients = "\n".join(phones)
    return f"Message from {INSTITUTION_NAME}:\n{message}\n\nRecipients:\n{recipients}"


def default_remark(student_name: str) -> str:
    return (f"{student_name} has shown excellent progress this term. "
            "Consistent effort and participation in class activities are highly appreciated.")


def report_text(student_name: str, class_name: str, present: int, absent: int, leave: int,
                percentage: str, remark: str) -> str:
    return (
        f"*{INSTITUTION_NAME} Student Report*\n\n"
        f"*Name:* {student_name}\n"
        f"*Class:* {class_name}\n\n"
        f"*Attendance Summary:*\n"
        f"- Present: {present}\n"
        f"- Absent: {absent}\n"
        f"- Leave: {leave}\n"
        f"- Percentage: {percentage}%\n\n"
        f"*Remarks:* {remark}\n\n"
        f"_This is an auto-generated report._"
    )
