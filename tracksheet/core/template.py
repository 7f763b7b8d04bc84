"""
Template aggregate: the attachment reference, its annotations and the
layout data edited elsewhere in the application.
"""
import copy
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional

from .annotations.models import Annotation
from .errors import UnsupportedAttachmentError

DEFAULT_TEMPLATE_NAME = "My Time Tracker"


class AttachmentKind(Enum):
    PDF = "pdf"
    WORD = "word"
    EXCEL = "excel"

    @classmethod
    def detect(cls, filename: str, content_type: Optional[str]) -> "AttachmentKind":
        """
        Work out the attachment kind from an uploaded file.

        Raises:
            UnsupportedAttachmentError: For anything but PDF, Word or Excel
        """
        content_type = content_type or ""
        name = filename.lower()
        if content_type == "application/pdf" or (not content_type and name.endswith(".pdf")):
            return cls.PDF
        if "word" in content_type or name.endswith(".docx"):
            return cls.WORD
        if "spreadsheet" in content_type or name.endswith(".xlsx"):
            return cls.EXCEL
        raise UnsupportedAttachmentError(filename, content_type or None)


@dataclass
class Attachment:
    kind: AttachmentKind
    url: str
    storage_path: str

    @property
    def supports_annotations(self) -> bool:
        # Only PDF attachments can be annotated and exported
        return self.kind == AttachmentKind.PDF

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.kind.value, "url": self.url, "storage_path": self.storage_path}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Attachment":
        return Attachment(
            kind=AttachmentKind(data["type"]),
            url=data["url"],
            storage_path=data["storage_path"],
        )


def _default_rows() -> List[List[Dict[str, str]]]:
    return [[{"id": uuid.uuid4().hex, "text": ""} for _ in range(3)]]


@dataclass
class Template:
    """
    Persisted template.

    header_image, rows and meta belong to the table editor; they are
    carried through save and load unchanged.
    """
    name: str = DEFAULT_TEMPLATE_NAME
    id: Optional[str] = None
    attachment: Optional[Attachment] = None
    annotations: List[Annotation] = field(default_factory=list)
    header_image: Optional[Dict[str, Any]] = None
    rows: List[Any] = field(default_factory=_default_rows)
    meta: Dict[str, Any] = field(default_factory=dict)

    @property
    def supports_annotations(self) -> bool:
        return self.attachment is not None and self.attachment.supports_annotations

    def set_attachment(self, attachment: Attachment) -> None:
        """Replace the attachment. Annotations of the old one are dropped."""
        self.attachment = attachment
        self.annotations = []

    def template_data(self) -> Dict[str, Any]:
        """Payload handed to the metadata store."""
        data: Dict[str, Any] = {
            "rows": copy.deepcopy(self.rows),
            "meta": copy.deepcopy(self.meta),
            "annotations": [ann.to_dict() for ann in self.annotations],
        }
        if self.attachment is not None:
            data["attachment"] = self.attachment.to_dict()
        if self.header_image is not None:
            data["header_image"] = copy.deepcopy(self.header_image)
        return data

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name, "template_data": self.template_data()}

    @staticmethod
    def from_dict(data: Dict[str, Any]) -> "Template":
        template_data = data.get("template_data") or {}
        attachment = template_data.get("attachment")
        return Template(
            name=data.get("name") or DEFAULT_TEMPLATE_NAME,
            id=data.get("id"),
            attachment=Attachment.from_dict(attachment) if attachment else None,
            annotations=[Annotation.from_dict(a) for a in template_data.get("annotations", [])],
            header_image=template_data.get("header_image"),
            rows=template_data.get("rows") or _default_rows(),
            meta=template_data.get("meta") or {},
        )
