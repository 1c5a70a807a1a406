"""Unit tests for RecordStore."""

import pytest

from exceptions import UnknownSectionError
from record_store import RecordStore
from schema_cv import new_record


@pytest.mark.unit
def test_starts_empty():
    store = RecordStore()
    assert store.snapshot() == new_record()
    assert store.dirty is False


@pytest.mark.unit
def test_get_is_read_only():
    store = RecordStore()
    view = store.get()
    with pytest.raises(TypeError):
        view["professionalSummary"] = "x"
    view["personalDetails"]["name"] = "changed copy"
    assert store.get_scalar("name") == ""


@pytest.mark.unit
def test_set_scalar_personal_and_summary():
    store = RecordStore()
    assert store.set_scalar("email", "a@b.c")
    assert store.set_scalar("summary", "Hello")
    record = store.snapshot()
    assert record["personalDetails"]["email"] == "a@b.c"
    assert record["professionalSummary"] == "Hello"
    assert store.dirty


@pytest.mark.unit
def test_set_scalar_unknown_key_is_ignored():
    store = RecordStore()
    assert store.set_scalar("favouriteColour", "blue") is False
    assert store.snapshot() == new_record()
    assert store.dirty is False


@pytest.mark.unit
def test_append_returns_ordinal_with_blank_shape():
    store = RecordStore()
    assert store.append_entry("experience") == 0
    assert store.append_entry("workExperience") == 1
    assert store.snapshot()["workExperience"] == [
        {"title": "", "company": "", "description": ""},
        {"title": "", "company": "", "description": ""},
    ]


@pytest.mark.unit
def test_append_drops_fields_outside_the_shape():
    store = RecordStore()
    store.append_entry("skills", {"skill": "Python", "level": "expert"})
    assert store.snapshot()["skills"] == [{"skill": "Python"}]


@pytest.mark.unit
@pytest.mark.parametrize("ordinal", [-1, 1, 5])
def test_set_entry_field_out_of_range_is_a_no_op(ordinal):
    store = RecordStore()
    store.append_entry("skills")
    store.mark_clean()
    before = store.snapshot()

    assert store.set_entry_field("skills", ordinal, "skill", "Go") is False
    assert store.snapshot() == before
    assert store.dirty is False


@pytest.mark.unit
def test_set_entry_field_outside_shape_is_a_no_op():
    store = RecordStore()
    store.append_entry("education")
    assert store.set_entry_field("education", 0, "title", "x") is False
    assert store.set_entry_field("hobbies", 0, "name", "x") is False
    assert store.snapshot()["education"] == [{"degree": "", "institution": ""}]


@pytest.mark.unit
def test_remove_shifts_later_entries_down():
    store = RecordStore()
    for name in ["A", "B", "C"]:
        ordinal = store.append_entry("projects")
        store.set_entry_field("projects", ordinal, "name", name)

    assert store.remove_entry("projects", 1)
    assert [p["name"] for p in store.snapshot()["projects"]] == ["A", "C"]
    assert store.remove_entry("projects", 2) is False


@pytest.mark.unit
def test_structural_calls_reject_unknown_sections():
    store = RecordStore()
    with pytest.raises(UnknownSectionError):
        store.append_entry("hobbies")
    with pytest.raises(UnknownSectionError):
        store.remove_entry("hobbies", 0)


@pytest.mark.unit
def test_replace_with_bad_data_gives_empty_record():
    store = RecordStore()
    store.set_scalar("name", "Ada")
    store.replace(["not", "a", "record"])
    assert store.snapshot() == new_record()
