"""
Data structures (dataclasses) for Legal Secretary.
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


@dataclass
class OriginalFile:
    """The uploaded sample a template was extracted from."""
    name: str
    data: str  # base64
    mime_type: str

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "data": self.data, "mimeType": self.mime_type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OriginalFile":
        return cls(
            name=data.get("name", ""),
            data=data.get("data", ""),
            mime_type=data.get("mimeType") or "application/octet-stream",
        )


@dataclass
class Template:
    """A reusable document template with {{NAME}} placeholders."""
    name: str
    structure: str
    category: str = "General"
    description: str = ""
    placeholders: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    created_at: int = field(default_factory=now_ms)
    original_file: Optional[OriginalFile] = None

    def to_dict(self) -> Dict[str, Any]:
        """Wire/storage representation (camelCase keys)."""
        data = {
            "id": self.id,
            "name": self.name,
            "category": self.category,
            "description": self.description,
            "structure": self.structure,
            "placeholders": list(self.placeholders),
            "createdAt": self.created_at,
        }
        if self.original_file is not None:
            data["originalFile"] = self.original_file.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Template":
        original = data.get("originalFile")
        kwargs = {}
        if data.get("id"):
            kwargs["id"] = str(data["id"])
        if data.get("createdAt") is not None:
            kwargs["created_at"] = int(data["createdAt"])
        return cls(
            name=data.get("name", ""),
            structure=data.get("structure", ""),
            category=data.get("category") or "General",
            description=data.get("description") or "",
            placeholders=list(data.get("placeholders") or []),
            original_file=OriginalFile.from_dict(original) if original else None,
            **kwargs,
        )


@dataclass
class CloudConfig:
    """Remote JSON-blob store settings."""
    endpoint: str = ""
    api_key: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint)

    def to_dict(self) -> Dict[str, str]:
        return {"endpoint": self.endpoint, "apiKey": self.api_key}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "CloudConfig":
        if not isinstance(data, dict):
            return cls()
        return cls(
            endpoint=(data.get("endpoint") or "").strip(),
            api_key=(data.get("apiKey") or "").strip(),
        )


@dataclass
class CloudData:
    """Logical payload stored in the remote store."""
    version: str
    templates: List[Dict[str, Any]]
    last_updated: int = field(default_factory=now_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.version,
            "templates": self.templates,
            "lastUpdated": self.last_updated,
        }


@dataclass
class AppState:
    """Everything the library persists locally."""
    templates: List[Dict[str, Any]]
    version: str
    cloud_config: CloudConfig = field(default_factory=CloudConfig)


@dataclass
class DocumentNote:
    """Reviewer note attached to a drafted document."""
    location: str
    comment: str


@dataclass
class DraftResult:
    """Outcome of a drafting request."""
    status: str  # "success" or "incomplete"
    selected_template: str
    missing_fields: List[str]
    document_text: str
    document_html: str
    notes: List[DocumentNote] = field(default_factory=list)
    document_docx_base64: str = ""

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DraftResult":
        notes = [
            DocumentNote(location=n.get("location", ""), comment=n.get("comment", ""))
            for n in data.get("notes") or []
            if isinstance(n, dict)
        ]
        return cls(
            status=data.get("status") or "incomplete",
            selected_template=data.get("selected_template") or "",
            missing_fields=list(data.get("missing_fields") or []),
            document_text=data.get("document_text") or "",
            document_html=data.get("document_html") or "",
            notes=notes,
            document_docx_base64=data.get("document_docx_base64") or "",
        )
