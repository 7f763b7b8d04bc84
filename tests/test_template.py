"""Tests for the template aggregate and attachment kinds."""

import pytest

from tracksheet.core.annotations import Annotation
from tracksheet.core.errors import UnsupportedAttachmentError
from tracksheet.core.template import DEFAULT_TEMPLATE_NAME, Attachment, AttachmentKind, Template


@pytest.mark.parametrize("filename,content_type,kind", [
    ("hours.pdf", "application/pdf", AttachmentKind.PDF),
    ("hours.pdf", None, AttachmentKind.PDF),
    ("hours.docx", "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
     AttachmentKind.WORD),
    ("hours.docx", None, AttachmentKind.WORD),
    ("hours.xlsx", "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
     AttachmentKind.EXCEL),
    ("HOURS.XLSX", None, AttachmentKind.EXCEL),
])
def test_attachment_kind_detection(filename, content_type, kind):
    assert AttachmentKind.detect(filename, content_type) == kind


@pytest.mark.parametrize("filename,content_type", [
    ("photo.png", "image/png"),
    ("notes.txt", None),
])
def test_unsupported_attachment(filename, content_type):
    with pytest.raises(UnsupportedAttachmentError):
        AttachmentKind.detect(filename, content_type)


def test_only_pdf_supports_annotations():
    assert Attachment(AttachmentKind.PDF, "u", "p").supports_annotations
    assert not Attachment(AttachmentKind.WORD, "u", "p").supports_annotations
    assert not Template().supports_annotations


def test_new_template_defaults():
    template = Template()

    assert template.name == DEFAULT_TEMPLATE_NAME
    assert template.id is None
    assert template.annotations == []
    assert len(template.rows) == 1
    assert len(template.rows[0]) == 3


def test_replacing_attachment_drops_annotations():
    template = Template(
        attachment=Attachment(AttachmentKind.PDF, "file:///old.pdf", "me/old.pdf"),
        annotations=[Annotation(0, 0.1, 0.1)],
    )

    template.set_attachment(Attachment(AttachmentKind.PDF, "file:///new.pdf", "me/new.pdf"))

    assert template.annotations == []
    assert template.attachment.storage_path == "me/new.pdf"


def test_dict_round_trip_keeps_foreign_fields():
    template = Template(
        name="Weekly",
        id="abc",
        attachment=Attachment(AttachmentKind.PDF, "file:///a.pdf", "me/a.pdf"),
        annotations=[Annotation(1, 0.5, 0.5, text="Signed")],
        header_image={"url": "file:///logo.png"},
        rows=[[{"id": "r1", "text": "Mon"}]],
        meta={"week": 42},
    )

    data = template.to_dict()
    restored = Template.from_dict(data)

    assert data["template_data"]["attachment"] == {
        "type": "pdf", "url": "file:///a.pdf", "storage_path": "me/a.pdf",
    }
    assert restored == template


def test_from_dict_with_missing_fields():
    template = Template.from_dict({"id": "x", "template_data": None})

    assert template.name == DEFAULT_TEMPLATE_NAME
    assert template.attachment is None
    assert template.annotations == []
