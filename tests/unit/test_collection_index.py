"""Unit tests for field addresses and the CollectionIndexManager."""

import pytest

from collection_index import CollectionIndexManager, FieldAddress, group_addresses
from exceptions import UnknownSectionError


@pytest.mark.unit
@pytest.mark.parametrize("key, expected", [
    ("workExperience-0-title", FieldAddress("title", "workExperience", 0)),
    ("experience-3-company", FieldAddress("company", "workExperience", 3)),
    ("skills-12-skill", FieldAddress("skill", "skills", 12)),
    ("email", FieldAddress("email")),
    ("summary", FieldAddress("summary")),
])
def test_parse(key, expected):
    assert FieldAddress.parse(key) == expected


@pytest.mark.unit
@pytest.mark.parametrize("key", [
    "", "workExperience-x-title", "workExperience-0-degree",
    "hobbies-0-name", "skills--1-skill", "nonsense",
])
def test_parse_rejects_malformed_addresses(key):
    assert FieldAddress.parse(key) is None


@pytest.mark.unit
def test_wire_form():
    assert FieldAddress("title", "workExperience", 2).wire == "workExperience-2-title"
    assert FieldAddress("phone").wire == "phone"


@pytest.mark.unit
def test_append_builds_only_the_new_group():
    index = CollectionIndexManager()
    index.commit(index.plan_append("skills"))
    plan = index.plan_append("skills")

    assert plan.full_rebuild is False
    assert plan.teardown == ()
    assert plan.build == group_addresses("skills", 1)
    assert plan.remap == {0: 0}


@pytest.mark.unit
def test_remove_plans_full_rebuild_with_shifted_ordinals():
    index = CollectionIndexManager()
    for _ in range(3):
        index.commit(index.plan_append("workExperience"))

    plan = index.plan_remove("workExperience", 1)

    assert plan.full_rebuild
    assert plan.length == 2
    assert plan.remap == {0: 0, 1: None, 2: 1}
    assert len(plan.teardown) == 9
    assert plan.build == group_addresses("workExperience", 0) + group_addresses("workExperience", 1)

    index.commit(plan)
    assert index.length("workExperience") == 2
    assert not index.contains(FieldAddress("title", "workExperience", 2))
    assert index.contains(FieldAddress("title", "workExperience", 1))


@pytest.mark.unit
def test_remove_out_of_range_has_no_plan():
    index = CollectionIndexManager()
    assert index.plan_remove("education", 0) is None


@pytest.mark.unit
def test_contains_checks_field_shape():
    index = CollectionIndexManager()
    index.commit(index.plan_append("education"))
    assert index.contains(FieldAddress("degree", "education", 0))
    assert not index.contains(FieldAddress("title", "education", 0))
    assert index.contains(FieldAddress("linkedin"))


@pytest.mark.unit
def test_unknown_section():
    with pytest.raises(UnknownSectionError):
        CollectionIndexManager().plan_append("hobbies")
