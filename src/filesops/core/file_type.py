"""File type detection from extensions and magic numbers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from types import MappingProxyType

from filesops.models.file_type import Detection, DetectionSource, FileCategory, FileTypeInfo

log = logging.getLogger(__name__)

_C = FileCategory

# extension -> (mime type, category, description)
_EXTENSIONS: MappingProxyType[str, tuple[str, FileCategory, str]] = MappingProxyType({
    # Text and code
    ".txt": ("text/plain", _C.TEXT, "Plain text file"),
    ".md": ("text/markdown", _C.DOCUMENTATION, "Markdown document"),
    ".json": ("application/json", _C.DATA, "JSON data file"),
    ".xml": ("application/xml", _C.DATA, "XML document"),
    ".html": ("text/html", _C.WEB, "HTML web page"),
    ".htm": ("text/html", _C.WEB, "HTML web page"),
    ".css": ("text/css", _C.WEB, "CSS stylesheet"),
    ".js": ("application/javascript", _C.CODE, "JavaScript file"),
    ".ts": ("application/typescript", _C.CODE, "TypeScript file"),
    ".jsx": ("application/javascript", _C.CODE, "React JavaScript file"),
    ".tsx": ("application/typescript", _C.CODE, "React TypeScript file"),
    ".py": ("text/x-python", _C.CODE, "Python script"),
    ".java": ("text/x-java-source", _C.CODE, "Java source file"),
    ".cpp": ("text/x-c++src", _C.CODE, "C++ source file"),
    ".c": ("text/x-csrc", _C.CODE, "C source file"),
    ".h": ("text/x-chdr", _C.CODE, "C/C++ header file"),
    ".php": ("application/x-httpd-php", _C.CODE, "PHP script"),
    ".rb": ("application/x-ruby", _C.CODE, "Ruby script"),
    ".go": ("text/x-go", _C.CODE, "Go source file"),
    ".rs": ("text/x-rust", _C.CODE, "Rust source file"),
    ".sh": ("application/x-sh", _C.SCRIPT, "Shell script"),
    ".bat": ("application/x-bat", _C.SCRIPT, "Batch file"),
    ".ps1": ("application/x-powershell", _C.SCRIPT, "PowerShell script"),
    # Images
    ".jpg": ("image/jpeg", _C.IMAGE, "JPEG image"),
    ".jpeg": ("image/jpeg", _C.IMAGE, "JPEG image"),
    ".png": ("image/png", _C.IMAGE, "PNG image"),
    ".gif": ("image/gif", _C.IMAGE, "GIF image"),
    ".bmp": ("image/bmp", _C.IMAGE, "Bitmap image"),
    ".svg": ("image/svg+xml", _C.IMAGE, "SVG vector image"),
    ".webp": ("image/webp", _C.IMAGE, "WebP image"),
    ".ico": ("image/x-icon", _C.IMAGE, "Icon file"),
    ".tiff": ("image/tiff", _C.IMAGE, "TIFF image"),
    ".tif": ("image/tiff", _C.IMAGE, "TIFF image"),
    # Audio
    ".mp3": ("audio/mpeg", _C.AUDIO, "MP3 audio file"),
    ".wav": ("audio/wav", _C.AUDIO, "WAV audio file"),
    ".flac": ("audio/flac", _C.AUDIO, "FLAC audio file"),
    ".aac": ("audio/aac", _C.AUDIO, "AAC audio file"),
    ".ogg": ("audio/ogg", _C.AUDIO, "OGG audio file"),
    ".m4a": ("audio/mp4", _C.AUDIO, "M4A audio file"),
    # Video
    ".mp4": ("video/mp4", _C.VIDEO, "MP4 video file"),
    ".avi": ("video/x-msvideo", _C.VIDEO, "AVI video file"),
    ".mov": ("video/quicktime", _C.VIDEO, "QuickTime video"),
    ".wmv": ("video/x-ms-wmv", _C.VIDEO, "Windows Media video"),
    ".flv": ("video/x-flv", _C.VIDEO, "Flash video"),
    ".webm": ("video/webm", _C.VIDEO, "WebM video"),
    ".mkv": ("video/x-matroska", _C.VIDEO, "Matroska video"),
    # Archives
    ".zip": ("application/zip", _C.ARCHIVE, "ZIP archive"),
    ".rar": ("application/vnd.rar", _C.ARCHIVE, "RAR archive"),
    ".tar": ("application/x-tar", _C.ARCHIVE, "TAR archive"),
    ".gz": ("application/gzip", _C.ARCHIVE, "Gzip compressed file"),
    ".7z": ("application/x-7z-compressed", _C.ARCHIVE, "7-Zip archive"),
    ".bz2": ("application/x-bzip2", _C.ARCHIVE, "Bzip2 compressed file"),
    # Documents
    ".pdf": ("application/pdf", _C.DOCUMENT, "PDF document"),
    ".doc": ("application/msword", _C.DOCUMENT, "Word document"),
    ".docx": (
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        _C.DOCUMENT,
        "Word document",
    ),
    ".xls": ("application/vnd.ms-excel", _C.DOCUMENT, "Excel spreadsheet"),
    ".xlsx": (
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        _C.DOCUMENT,
        "Excel spreadsheet",
    ),
    ".ppt": ("application/vnd.ms-powerpoint", _C.DOCUMENT, "PowerPoint presentation"),
    ".pptx": (
        "application/vnd.openxmlformats-officedocument.presentationml.presentation",
        _C.DOCUMENT,
        "PowerPoint presentation",
    ),
    # Executables and packages
    ".exe": ("application/x-msdownload", _C.EXECUTABLE, "Windows executable"),
    ".msi": ("application/x-msi", _C.EXECUTABLE, "Windows installer"),
    ".deb": ("application/vnd.debian.binary-package", _C.EXECUTABLE, "Debian package"),
    ".rpm": ("application/x-rpm", _C.EXECUTABLE, "RPM package"),
    ".dmg": ("application/x-apple-diskimage", _C.EXECUTABLE, "macOS disk image"),
    ".app": ("application/x-apple-app", _C.EXECUTABLE, "macOS application"),
})

_BINARY_EXTENSIONS = frozenset({
    ".exe", ".dll", ".so", ".dylib", ".bin", ".dat",
    ".jpg", ".jpeg", ".png", ".gif", ".bmp", ".ico", ".tiff", ".tif", ".webp",
    ".mp3", ".wav", ".flac", ".aac", ".ogg", ".m4a",
    ".mp4", ".avi", ".mov", ".wmv", ".flv", ".webm", ".mkv",
    ".zip", ".rar", ".tar", ".gz", ".7z", ".bz2",
    ".pdf", ".doc", ".docx", ".xls", ".xlsx", ".ppt", ".pptx",
    ".msi", ".deb", ".rpm", ".dmg", ".app",
})

_EXECUTABLE_EXTENSIONS = frozenset({
    ".exe", ".msi", ".deb", ".rpm", ".dmg", ".app", ".sh", ".bat", ".ps1", ".com", ".cmd",
})

_UNKNOWN = ("application/octet-stream", _C.UNKNOWN, "Unknown file type")

# Bytes sampled for signatures; shorter buffers than the minimum never match.
SIGNATURE_SAMPLE_SIZE = 16
_MIN_SIGNATURE_BYTES = 4

# Bytes sampled by the text heuristic and the share of control bytes tolerated.
TEXT_SAMPLE_SIZE = 8192
_BINARY_THRESHOLD = 0.3
_TEXT_CONTROL_BYTES = frozenset({9, 10, 13})


@dataclass(frozen=True, slots=True)
class _Signature:
    """A magic number: any of *prefixes*, plus a *marker* found in the sample."""

    prefixes: tuple[bytes, ...]
    mime_type: str
    category: FileCategory
    description: str
    marker: bytes | None = None

    def matches(self, sample: bytes) -> bool:
        # Markers are searched byte-aligned anywhere in the sample.
        if self.prefixes and not sample.startswith(self.prefixes):
            return False
        return self.marker is None or self.marker in sample


_RIFF = b"RIFF"

# Checked in order; the first match wins. RIFF containers share a prefix
# and are told apart by their chunk type marker.
_SIGNATURES: tuple[_Signature, ...] = (
    _Signature((b"\xff\xd8\xff",), "image/jpeg", _C.IMAGE, "JPEG image"),
    _Signature((b"\x89PNG",), "image/png", _C.IMAGE, "PNG image"),
    _Signature((b"GIF8",), "image/gif", _C.IMAGE, "GIF image"),
    _Signature((b"BM",), "image/bmp", _C.IMAGE, "BMP image"),
    _Signature((_RIFF,), "image/webp", _C.IMAGE, "WebP image", marker=b"WEBP"),
    _Signature((b"PK\x03\x04", b"PK\x05\x06", b"PK\x07\x08"), "application/zip", _C.ARCHIVE, "ZIP archive"),
    _Signature((b"Rar!\x1a\x07",), "application/vnd.rar", _C.ARCHIVE, "RAR archive"),
    _Signature((b"7z\xbc\xaf\x27\x1c",), "application/x-7z-compressed", _C.ARCHIVE, "7-Zip archive"),
    _Signature((b"\x1f\x8b",), "application/gzip", _C.ARCHIVE, "Gzip compressed file"),
    _Signature((b"%PDF",), "application/pdf", _C.DOCUMENT, "PDF document"),
    _Signature((b"MZ",), "application/x-msdownload", _C.EXECUTABLE, "Windows executable"),
    _Signature((b"ID3", b"\xff\xfb", b"\xff\xf3", b"\xff\xf2"), "audio/mpeg", _C.AUDIO, "MP3 audio file"),
    _Signature((_RIFF,), "audio/wav", _C.AUDIO, "WAV audio file", marker=b"WAVE"),
    _Signature((), "video/mp4", _C.VIDEO, "MP4 video file", marker=b"ftypmp42"),
    _Signature((), "video/mp4", _C.VIDEO, "MP4 video file", marker=b"ftypmp41"),
    _Signature((_RIFF,), "video/x-msvideo", _C.VIDEO, "AVI video file", marker=b"AVI"),
)


def _extension_of(path: Path | str) -> str:
    return Path(path).suffix.lower()


def detect_from_path(path: Path | str) -> FileTypeInfo:
    """Classify a file by its extension alone. Never fails."""
    ext = _extension_of(path)
    mime_type, category, description = _EXTENSIONS.get(ext, _UNKNOWN)
    return FileTypeInfo(
        extension=ext,
        mime_type=mime_type,
        category=category,
        description=description,
        is_binary=ext in _BINARY_EXTENSIONS,
        is_executable=ext in _EXECUTABLE_EXTENSIONS,
    )


def detect_signature(data: bytes) -> FileTypeInfo | None:
    """Classify the leading bytes of *data* by magic number alone.

    Returns None when no signature matches. The result carries no
    extension; :func:`detect` merges it with the path-based result.
    """
    if len(data) < _MIN_SIGNATURE_BYTES:
        return None
    sample = bytes(data[:SIGNATURE_SAMPLE_SIZE])
    for signature in _SIGNATURES:
        if signature.matches(sample):
            return FileTypeInfo(
                extension="",
                mime_type=signature.mime_type,
                category=signature.category,
                description=signature.description,
                is_binary=True,
            )
    return None


def _read_head(path: Path | str, size: int) -> bytes:
    with open(path, "rb") as f:
        return f.read(size)


def detect(path: Path | str, content: bytes | None = None) -> Detection:
    """Classify a file by extension, then refine it with its magic number.

    When *content* is given it is used instead of reading the file. If the
    file cannot be read, the extension result is returned unchanged; the
    returned :class:`Detection` records which stage produced the answer.
    """
    base = detect_from_path(path)

    if content is None:
        try:
            content = _read_head(path, SIGNATURE_SAMPLE_SIZE)
        except OSError as e:
            log.debug("Cannot read %s for signature detection: %s", path, e)
            return Detection(base, DetectionSource.EXTENSION)

    sniffed = detect_signature(content)
    if sniffed is None:
        return Detection(base, DetectionSource.EXTENSION)

    info = replace(sniffed, extension=base.extension, is_executable=base.is_executable)
    return Detection(info, DetectionSource.SIGNATURE)


def detect_from_content(path: Path | str, content: bytes | None = None) -> FileTypeInfo:
    """Classify a file, preferring its magic number over its extension."""
    return detect(path, content).info


def is_text_file(path: Path | str) -> bool:
    """Guess whether a file holds text by sampling its first 8 KB.

    A file is text when fewer than 30% of the sampled bytes are control
    characters other than tab, newline and carriage return. Unreadable and
    empty files are reported as not text.
    """
    try:
        sample = _read_head(path, TEXT_SAMPLE_SIZE)
    except OSError as e:
        log.debug("Cannot read %s for text detection: %s", path, e)
        return False
    if not sample:
        return False

    control = sum(1 for b in sample if b < 32 and b not in _TEXT_CONTROL_BYTES)
    return control / len(sample) < _BINARY_THRESHOLD


def get_supported_extensions() -> list[str]:
    """All extensions with a known MIME type."""
    return list(_EXTENSIONS)


def get_extensions_by_category(category: FileCategory | str) -> list[str]:
    """Extensions mapped to *category* (enum member or its display name)."""
    try:
        wanted = FileCategory(category)
    except ValueError:
        return []
    return [ext for ext, (_, cat, _) in _EXTENSIONS.items() if cat is wanted]
