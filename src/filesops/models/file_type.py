"""File type classification dataclasses."""

from __future__ import annotations

import enum
from dataclasses import dataclass


class FileCategory(str, enum.Enum):
    """Closed set of classification buckets."""

    TEXT = "Text"
    DOCUMENTATION = "Documentation"
    DATA = "Data"
    WEB = "Web"
    CODE = "Code"
    SCRIPT = "Script"
    IMAGE = "Image"
    AUDIO = "Audio"
    VIDEO = "Video"
    ARCHIVE = "Archive"
    DOCUMENT = "Document"
    EXECUTABLE = "Executable"
    UNKNOWN = "Unknown"

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True, slots=True)
class FileTypeInfo:
    """Descriptor of a file's kind.

    ``is_text`` is always the complement of ``is_binary``. The media flags
    follow from ``category``; ``is_executable`` is decided by the file
    classifier and follows the extension, not the content.
    """

    extension: str
    mime_type: str
    category: FileCategory
    description: str
    is_binary: bool
    is_executable: bool = False

    @property
    def is_text(self) -> bool:
        return not self.is_binary

    @property
    def is_image(self) -> bool:
        return self.category is FileCategory.IMAGE

    @property
    def is_video(self) -> bool:
        return self.category is FileCategory.VIDEO

    @property
    def is_audio(self) -> bool:
        return self.category is FileCategory.AUDIO

    @property
    def is_archive(self) -> bool:
        return self.category is FileCategory.ARCHIVE

    def to_dict(self) -> dict[str, object]:
        return {
            "extension": self.extension,
            "mime_type": self.mime_type,
            "category": self.category.value,
            "description": self.description,
            "is_binary": self.is_binary,
            "is_text": self.is_text,
            "is_image": self.is_image,
            "is_video": self.is_video,
            "is_audio": self.is_audio,
            "is_archive": self.is_archive,
            "is_executable": self.is_executable,
        }


class DetectionSource(enum.Enum):
    """Which stage of the content pipeline produced a classification."""

    SIGNATURE = "signature"
    EXTENSION = "extension"


@dataclass(frozen=True, slots=True)
class Detection:
    """Classification tagged with the stage that produced it."""

    info: FileTypeInfo
    source: DetectionSource

    @property
    def from_signature(self) -> bool:
        return self.source is DetectionSource.SIGNATURE
