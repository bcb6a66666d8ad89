"""Data models shared by the client core"""

from __future__ import annotations

import mimetypes
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UserProfile(BaseModel):
    """The signed-in user, as reported by the remote service"""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(alias="_id")
    name: str = ""
    email: str = ""


class IdentityClaim(BaseModel):
    """Profile fields handed back by a third-party identity provider"""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    name: str = ""


class Document(BaseModel):
    """A transcription/summary record.

    The remote service is the system of record; the client only ever replaces
    whole documents with what the server returns.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="_id")
    title: str = ""
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")
    updated_at: Optional[datetime] = Field(default=None, alias="updatedAt")
    transcription: str = ""
    summary: str = ""
    edited_summary: Optional[str] = Field(default=None, alias="editedSummary")

    @property
    def effective_content(self) -> str:
        """The edited summary if the user saved a non-empty one, otherwise the generated summary"""
        if self.edited_summary:
            return self.edited_summary
        return self.summary

    @property
    def has_edits(self) -> bool:
        return bool(self.edited_summary)


class DocumentPatch(BaseModel):
    """Fields a client may change on a document"""

    title: Optional[str] = None
    edited_summary: Optional[str] = Field(default=None, serialization_alias="editedSummary")

    def to_payload(self) -> dict:
        """JSON body for PUT /summary/{id}; unset fields are omitted"""
        return self.model_dump(by_alias=True, exclude_none=True)


class UploadPhase(str, Enum):
    """Display phase of an upload, derived from the percent alone"""
    UPLOADING = "Uploading"
    TRANSCRIBING = "Transcribing"
    SUMMARIZING = "Summarizing"
    FINISHING = "Finishing"

    @classmethod
    def for_percent(cls, percent: int) -> "UploadPhase":
        if percent < 30:
            return cls.UPLOADING
        if percent < 60:
            return cls.TRANSCRIBING
        if percent < 95:
            return cls.SUMMARIZING
        return cls.FINISHING

    @property
    def label(self) -> str:
        return _PHASE_LABELS[self]


_PHASE_LABELS = {
    UploadPhase.UPLOADING: "Uploading audio...",
    UploadPhase.TRANSCRIBING: "Transcribing audio...",
    UploadPhase.SUMMARIZING: "Generating summary...",
    UploadPhase.FINISHING: "Almost done...",
}


class UploadProgress(BaseModel):
    """Simulated progress of one upload"""

    percent: int = Field(default=0, ge=0, le=100)

    @property
    def phase(self) -> UploadPhase:
        return UploadPhase.for_percent(self.percent)


class AudioUpload(BaseModel):
    """An audio file selected for ingestion"""

    path: Path
    content_type: str = ""
    size_bytes: int = 0
    title: str = ""

    @classmethod
    def from_path(cls, path: Path, title: Optional[str] = None) -> "AudioUpload":
        """Describe a file on disk; the title defaults to the file name without extension"""
        path = Path(path)
        content_type, _ = mimetypes.guess_type(path.name)
        return cls(
            path=path,
            content_type=content_type or "",
            size_bytes=path.stat().st_size,
            title=title if title is not None else path.stem,
        )

    @property
    def size_mb(self) -> float:
        return self.size_bytes / (1024 * 1024)


class ExportRequest(BaseModel):
    """Options for one export invocation"""

    file_base_name: str
    include_header: bool = True
    include_metadata_date: bool = True


def format_display_date(value: Optional[datetime]) -> str:
    """Long date for display and export headers, e.g. 'March 5, 2025'"""
    if value is None:
        return ""
    return f"{value:%B} {value.day}, {value.year}"


def format_display_datetime(value: Optional[datetime]) -> str:
    """Short date and time for lists, e.g. 'Mar 5, 2025 2:07 PM'"""
    if value is None:
        return ""
    hour = value.hour % 12 or 12
    return f"{value:%b} {value.day}, {value.year} {hour}:{value:%M %p}"
