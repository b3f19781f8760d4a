import json

from schemas import ABSENT, LEAVE, PRESENT, Announcement, Student
from state import AppState


def test_empty_store_is_seeded(state, store):
    assert [s.id for s in state.students.all()] == ["s1", "s2", "s3"]
    assert len(state.teachers) == 2
    assert len(state.graduates) == 2
    assert len(state.tanzim_records) == 2
    assert len(state.madrasa_fee_records) == 4
    assert [a.id for a in state.announcements.all()] == ["anno1"]
    assert state.attendance.all() == []
    assert len(store.get("students")) == 3


def test_reload_leaves_existing_data_untouched(state, store):
    state.students.remove("s2")
    reloaded = AppState(store)
    assert [s.id for s in reloaded.students.all()] == ["s1", "s3"]


def test_emptied_collection_is_reseeded_on_next_load(state, store):
    state.teachers.replace([])
    assert store.get("teachers") == []
    reloaded = AppState(store)
    assert [t.id for t in reloaded.teachers.all()] == ["t1", "t2"]


def test_malformed_collection_is_replaced_by_seed(store):
    store.set("students", [{"unexpected": True}])
    state = AppState(store)
    assert [s.id for s in state.students.all()] == ["s1", "s2", "s3"]


def test_classes_are_reset_on_every_load(store):
    store.set("classes", [{"id": "x", "name": "Edited", "track": "Hifz"}])
    state = AppState(store)
    assert len(state.classes) == 12
    assert [c["id"] for c in store.get("classes")][:2] == ["dn1", "dn2"]


def test_persisted_json_uses_camel_case_field_names(state, store):
    with open(store.path_for("students"), encoding="utf-8") as f:
        first = json.load(f)[0]
    assert first["fatherName"] == "Muhammad Ali"
    assert first["classId"] == "dn2"
    tanzim = store.get("tanzimRecords")[0]
    assert tanzim["requiredDocuments"] == {"cnicBForm": True, "passportPhotos": True, "feeReceipt": True}


def test_saving_new_student_assigns_fresh_id(state):
    before = {s.id for s in state.students.all()}
    student = Student(name="Usman Ghani", father_name="Ghani Khan", phone="0300-7654321", class_id="h2")

    saved = state.students.save(student)

    after = state.students.all()
    new = [s for s in after if s.id not in before]
    assert len(new) == 1
    assert new[0].id == saved.id
    assert saved.id
    assert new[0].model_dump(exclude={"id"}) == student.model_dump(exclude={"id"})


def test_ids_come_from_injected_factory(store):
    counter = iter(range(1, 100))
    state = AppState(store, id_factory=lambda: f"id{next(counter)}")
    first = state.announcements.save(Announcement(title="Exams", content="Exams start Monday.", date="2024-10-01"))
    assert first.id == "id1"


def test_saving_existing_record_merges_fields(state):
    update = Student.model_validate({"id": "s1", "name": "Ahmed Ali Khan"})
    saved = state.students.save(update)
    assert saved.name == "Ahmed Ali Khan"
    assert saved.father_name == "Muhammad Ali"
    assert len(state.students) == 3


def test_remove(state, store):
    assert state.students.remove("s3") is True
    assert state.students.remove("s3") is False
    assert [s["id"] for s in store.get("students")] == ["s1", "s2"]


def test_attendance_overwrite_keeps_one_record(state):
    state.set_attendance_status("s1", "2024-10-01", PRESENT)
    state.set_attendance_status("s1", "2024-10-01", ABSENT)
    records = [a for a in state.attendance.all() if a.student_id == "s1" and a.date == "2024-10-01"]
    assert len(records) == 1
    assert records[0].status == ABSENT
    assert state.attendance_status("s1", "2024-10-01") == ABSENT


def test_clearing_attendance_removes_record(state):
    state.set_attendance_status("s1", "2024-10-01", LEAVE)
    state.set_attendance_status("s1", "2024-10-02", PRESENT)
    state.clear_attendance_status("s1", "2024-10-01")
    assert state.attendance_status("s1", "2024-10-01") is None
    assert state.attendance_status("s1", "2024-10-02") == PRESENT
    assert len(state.attendance) == 1


def test_mark_all_replaces_only_given_students(state):
    state.set_attendance_status("s1", "2024-10-01", ABSENT)
    state.set_attendance_status("s2", "2024-10-01", LEAVE)
    state.set_attendance_status("s1", "2024-10-02", ABSENT)

    state.mark_all(["s1", "s3"], "2024-10-01", PRESENT)

    assert state.attendance_status("s1", "2024-10-01") == PRESENT
    assert state.attendance_status("s3", "2024-10-01") == PRESENT
    assert state.attendance_status("s2", "2024-10-01") == LEAVE
    assert state.attendance_status("s1", "2024-10-02") == ABSENT
    assert len(state.attendance) == 4


def test_attendance_survives_reload(state, store):
    state.set_attendance_status("s2", "2024-10-03", PRESENT)
    reloaded = AppState(store)
    assert reloaded.attendance_status("s2", "2024-10-03") == PRESENT


def test_failed_write_keeps_session_state(state, tmp_path):
    blocker = tmp_path / "blocked"
    blocker.write_text("")
    state.store.base_dir = str(blocker)
    saved = state.students.save(Student(name="Hamza", father_name="Yusuf", phone="03001112223"))
    assert state.students.get(saved.id) is not None
