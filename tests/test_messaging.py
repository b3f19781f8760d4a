from messaging import bulk_message_text, normalize_phone, report_text, sms_url, whatsapp_url


def test_normalize_phone_local_format():
    assert normalize_phone("0300-1234567") == "923001234567"


def test_normalize_phone_without_leading_zero():
    assert normalize_phone("3001234567") == "923001234567"


def test_normalize_phone_already_international():
    assert normalize_phone("923001234567") == "923001234567"
    assert normalize_phone("+92 300 1234567") == "923001234567"


def test_normalize_phone_other_numbers_unchanged():
    assert normalize_phone("(042) 111-222") == "042111222"
    assert normalize_phone("") == ""


def test_whatsapp_url():
    assert whatsapp_url("0321-7654321") == "https://wa.me/923217654321"
    assert whatsapp_url("0321-7654321", "Fee due: Rs. 1,500 & more") == (
        "https://wa.me/923217654321?text=Fee%20due%3A%20Rs.%201%2C500%20%26%20more"
    )


def test_sms_url_uses_digits_only():
    url = sms_url(["0300-1234567", "0321 7654321"], "Eid holiday (Monday)")
    assert url == "sms:03001234567,03217654321?body=Eid%20holiday%20(Monday)"


def test_bulk_message_text():
    text = bulk_message_text("Classes resume Monday.", ["0300-1234567", "0321-7654321"])
    assert text == (
        "Message from Noor ul Masajid:\nClasses resume Monday.\n\n"
        "Recipients:\n0300-1234567\n0321-7654321"
    )


def test_report_text():
    text = report_text("Ahmed Ali", "Aammah Awwal", 8, 1, 1, "80.0", "Keep it up.")
    assert "*Name:* Ahmed Ali" in text
    assert "*Class:* Aammah Awwal" in text
    assert "- Percentage: 80.0%" in text
    assert "*Remarks:* Keep it up." in text
