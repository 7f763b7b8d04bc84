"""Tests for the local metadata store."""

import pytest

from tracksheet.core.errors import TemplateNotFoundError
from tracksheet.services import LocalMetadataStore


@pytest.fixture
def store(tmp_path):
    return LocalMetadataStore(tmp_path / "data")


def test_save_new_template_assigns_id(store):
    template_id = store.save_template(None, "Weekly", {"rows": []}, owner_id="alice")

    document = store.load_template(template_id)

    assert document["id"] == template_id
    assert document["name"] == "Weekly"
    assert document["template_data"] == {"rows": []}
    assert document["owner_id"] == "alice"


def test_update_existing_template_keeps_creation_time(store):
    template_id = store.save_template(None, "Weekly", {}, owner_id="alice")
    created = store.load_template(template_id)["created_at"]

    same_id = store.save_template(template_id, "Renamed", {"rows": [1]}, owner_id="alice")

    document = store.load_template(template_id)
    assert same_id == template_id
    assert document["name"] == "Renamed"
    assert document["created_at"] == created


def test_update_of_unknown_template(store):
    with pytest.raises(TemplateNotFoundError):
        store.save_template("nope", "Name", {})


def test_load_unknown_template(store):
    with pytest.raises(TemplateNotFoundError) as excinfo:
        store.load_template("nope")

    assert str(excinfo.value) == "Template not found: nope"
    assert isinstance(excinfo.value, KeyError)


def test_list_templates_by_owner(store):
    store.save_template(None, "A", {}, owner_id="alice")
    store.save_template(None, "B", {}, owner_id="bob")

    assert [t["name"] for t in store.list_templates("alice")] == ["A"]
    assert len(store.list_templates()) == 2


def test_list_templates_skips_corrupt_files(store):
    store.save_template(None, "Good", {})
    (store.templates_dir / "broken.json").write_text("{not json", encoding="utf-8")

    assert [t["name"] for t in store.list_templates()] == ["Good"]


def test_record_and_list_files(store):
    first = store.record_file("alice", "a.pdf", "alice/1-a.pdf", "application/pdf", 10)
    store.record_file("bob", "b.pdf", "bob/2-b.pdf", "application/pdf", 20)

    files = store.list_files("alice")

    assert files == [first]
    assert len(store.list_files()) == 2
