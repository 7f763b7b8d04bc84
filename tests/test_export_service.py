"""Tests for the export pipeline, its busy gate and result delivery."""

from unittest.mock import patch

import pytest

from conftest import MemoryStorage, make_pdf
from tracksheet.core.annotations import Annotation
from tracksheet.core.errors import (
    DocumentParseError,
    ExportBusyError,
    SourceFetchError,
    StorageUploadError,
    TrackSheetError,
)
from tracksheet.core.export import ExportGate, ExportService, download_filename
from tracksheet.core.template import Attachment, AttachmentKind, Template
from tracksheet.services import LocalMetadataStore


@pytest.fixture
def storage():
    storage = MemoryStorage()
    storage.objects["owner/source.pdf"] = make_pdf(pages=1)
    return storage


@pytest.fixture
def template():
    return Template(
        name="Weekly  Hours",
        attachment=Attachment(AttachmentKind.PDF, "mem://owner/source.pdf", "owner/source.pdf"),
        annotations=[
            Annotation(page_index=0, x_fraction=0.5, y_fraction=0.1, text="Draft"),
            Annotation(page_index=4, x_fraction=0.5, y_fraction=0.1, text="Gone"),
        ],
    )


@pytest.mark.parametrize("name,expected", [
    ("Weekly  Hours", "Weekly_Hours.pdf"),
    ("My Time Tracker", "My_Time_Tracker.pdf"),
    ("  tabs\tand\nnewlines ", "tabs_and_newlines.pdf"),
    ("", "time-tracker.pdf"),
    ("   ", "time-tracker.pdf"),
])
def test_download_filename(name, expected):
    assert download_filename(name) == expected


def test_gate_rejects_second_entry():
    gate = ExportGate()
    gate.acquire()

    with pytest.raises(ExportBusyError):
        gate.acquire()

    gate.release()
    gate.acquire()
    assert gate.busy


def test_gate_released_after_failure():
    gate = ExportGate()

    with pytest.raises(RuntimeError):
        with gate.admit():
            assert gate.busy
            raise RuntimeError("boom")

    assert not gate.busy


def test_export_writes_download_and_reports_skips(storage, template, tmp_path):
    service = ExportService(storage)
    target = tmp_path / "out" / "export.pdf"

    result = service.export(template, download_path=target)

    assert target.read_bytes() == result.data
    assert result.data.startswith(b"%PDF")
    assert result.total == 2
    assert result.skipped_count == 1
    assert result.summary() == "1 of 2 annotations failed to render"
    assert result.filename == "Weekly_Hours.pdf"
    assert not service.busy


def test_busy_service_rejects_new_export(storage, template):
    service = ExportService(storage)
    job = service.begin(template)

    with pytest.raises(ExportBusyError):
        service.begin(template)

    service.run(job)
    service.finish()
    assert not service.busy


def test_snapshot_taken_at_request_time(storage, template):
    service = ExportService(storage)
    job = service.begin(template)

    template.annotations.clear()
    result = service.run(job)
    service.finish()

    assert result.total == 2


def test_fetch_failure_aborts_and_releases_gate(template):
    service = ExportService(MemoryStorage())

    with pytest.raises(SourceFetchError):
        service.export(template)

    assert not service.busy


def test_parse_failure_aborts(storage, template):
    storage.objects["owner/source.pdf"] = b"<html>not a pdf</html>"
    service = ExportService(storage)

    with pytest.raises(DocumentParseError):
        service.export(template)

    assert not service.busy


def test_template_without_pdf_cannot_export(storage):
    service = ExportService(storage)
    word = Template(attachment=Attachment(AttachmentKind.WORD, "mem://a.docx", "a.docx"))

    with pytest.raises(TrackSheetError):
        service.export(word)
    with pytest.raises(TrackSheetError):
        service.export(Template())
    assert not service.busy


def test_save_copy_uploads_new_file_and_records_it(storage, template, tmp_path):
    metadata = LocalMetadataStore(tmp_path / "data")
    service = ExportService(storage, metadata=metadata)

    result = service.export(template, save_copy=True, owner_id="alice")

    assert result.persist_error is None
    assert result.stored_path.startswith("alice/")
    assert result.stored_path.endswith("-Weekly_Hours.pdf")
    assert storage.objects[result.stored_path] == result.data
    assert storage.objects["owner/source.pdf"] != result.data
    [record] = metadata.list_files("alice")
    assert record.storage_path == result.stored_path
    assert record.content_type == "application/pdf"
    assert record.size == len(result.data)


def test_persist_failure_is_reported_separately(storage, template, tmp_path):
    storage.fail_uploads = True
    service = ExportService(storage)
    target = tmp_path / "export.pdf"

    result = service.export(template, download_path=target, save_copy=True, owner_id="alice")

    assert target.exists()
    assert result.stored_path is None
    assert "bucket unavailable" in result.persist_error
    assert "File exported but not saved to storage" in result.message()


def test_save_copy_raises_on_upload_failure(storage, template):
    service = ExportService(storage)
    result = service.export(template)
    storage.fail_uploads = True

    with pytest.raises(StorageUploadError):
        service.save_copy(result.composition, "alice", "copy.pdf")


def test_message_mentions_download(storage, template, tmp_path):
    target = tmp_path / "export.pdf"

    result = ExportService(storage).export(template, download_path=target)

    assert result.message().splitlines() == [
        "1 of 2 annotations failed to render",
        f"Saved to {target}",
    ]


def test_failed_download_keeps_existing_file(storage, template, tmp_path):
    target = tmp_path / "export.pdf"
    target.write_bytes(b"%PDF-previous export")
    service = ExportService(storage)

    with patch("tracksheet.core.export.export_service.shutil.move",
                    side_effect=OSError("disk full")):
        with pytest.raises(OSError):
            service.export(template, download_path=target)

    assert target.read_bytes() == b"%PDF-previous export"
    assert [p.name for p in tmp_path.iterdir()] == ["export.pdf"]
    assert not service.busy


def test_download_replaces_existing_file(storage, template, tmp_path):
    target = tmp_path / "export.pdf"
    target.write_bytes(b"%PDF-previous export")

    result = ExportService(storage).export(template, download_path=target)

    assert target.read_bytes() == result.data
    assert [p.name for p in tmp_path.iterdir()] == ["export.pdf"]
