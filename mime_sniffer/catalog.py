"""
Signature Catalog for MimeSniffer

Ordered, deduplicated collection of SignatureRecord values with a default
table of common file types.
"""

import copy
import json
import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Union

from .signatures import (
    SignatureRecord,
    normalize_extension,
    normalize_mime_type,
    parse_header_pattern,
)

logger = logging.getLogger(__name__)


ZIP_HEADER = bytes([0x50, 0x4B, 0x03, 0x04])
RIFF_HEADER = "52 49 46 46 ?? ?? ?? ??"

DEFAULT_SIGNATURES: List[SignatureRecord] = [
    # ============================================================
    # IMAGE FORMATS
    # ============================================================
    SignatureRecord(bytes([0xFF, 0xD8, 0xFF]), "jpg", "image/jpeg", False),
    SignatureRecord(bytes([0xFF, 0xD8, 0xFF]), "jpeg", "image/jpeg", False),
    SignatureRecord(bytes([0x89, 0x50, 0x4E, 0x47, 0x0D, 0x0A, 0x1A, 0x0A]), "png", "image/png", False),
    SignatureRecord(b"GIF87a", "gif", "image/gif", False),
    SignatureRecord(b"GIF89a", "gif", "image/gif", False),
    SignatureRecord(b"BM", "bmp", "image/bmp", False),
    SignatureRecord(bytes([0x49, 0x49, 0x2A, 0x00]), "tif", "image/tiff", False),
    SignatureRecord(bytes([0x4D, 0x4D, 0x00, 0x2A]), "tiff", "image/tiff", False),
    SignatureRecord(bytes([0x00, 0x00, 0x01, 0x00]), "ico", "image/x-icon", False),
    SignatureRecord(parse_header_pattern(RIFF_HEADER + " 57 45 42 50"), "webp", "image/webp", False),
    SignatureRecord(b"8BPS", "psd", "image/vnd.adobe.photoshop", False),

    # ============================================================
    # ARCHIVE FORMATS
    # ============================================================
    SignatureRecord(ZIP_HEADER, "zip", "application/zip", True),
    SignatureRecord(ZIP_HEADER, "jar", "application/java-archive", True),
    SignatureRecord(ZIP_HEADER, "apk", "application/vnd.android.package-archive", True),
    SignatureRecord(b"Rar!\x1a\x07", "rar", "application/vnd.rar", False),
    SignatureRecord(bytes([0x37, 0x7A, 0xBC, 0xAF, 0x27, 0x1C]), "7z", "application/x-7z-compressed", False),
    SignatureRecord(bytes([0x1F, 0x8B]), "gz", "application/gzip", False),
    SignatureRecord(b"BZh", "bz2", "application/x-bzip2", False),
    SignatureRecord(bytes([0xFD, 0x37, 0x7A, 0x58, 0x5A, 0x00]), "xz", "application/x-xz", False),
    SignatureRecord.at_offset(b"ustar", 257, "tar", "application/x-tar", False),
    SignatureRecord.at_offset(b"CD001", 0x8001, "iso", "application/x-iso9660-image", False),

    # ============================================================
    # DOCUMENT FORMATS
    # ============================================================
    SignatureRecord(b"%PDF", "pdf", "application/pdf", False),
    SignatureRecord(b"{\\rtf1", "rtf", "application/rtf", False),
    SignatureRecord(
        bytes([0xD0, 0xCF, 0x11, 0xE0, 0xA1, 0xB1, 0x1A, 0xE1]), "doc", "application/msword", True
    ),
    SignatureRecord(
        bytes([0xD0, 0xCF, 0x11, 0xE0, 0xA1, 0xB1, 0x1A, 0xE1]), "xls", "application/vnd.ms-excel", True
    ),
    SignatureRecord(
        bytes([0xD0, 0xCF, 0x11, 0xE0, 0xA1, 0xB1, 0x1A, 0xE1]), "ppt", "application/vnd.ms-powerpoint", True
    ),
    # Office Open XML, OpenDocument and friends are ZIP containers
    SignatureRecord(
        ZIP_HEADER, "docx",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document", True
    ),
    SignatureRecord(
        ZIP_HEADER, "xlsx",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", True
    ),
    SignatureRecord(
        ZIP_HEADER, "pptx",
        "application/vnd.openxmlformats-officedocument.presentationml.presentation", True
    ),
    SignatureRecord(ZIP_HEADER, "odt", "application/vnd.oasis.opendocument.text", True),
    SignatureRecord(ZIP_HEADER, "epub", "application/epub+zip", True),

    # ============================================================
    # MULTIMEDIA FORMATS
    # ============================================================
    SignatureRecord(b"ID3", "mp3", "audio/mpeg", False),
    SignatureRecord(bytes([0xFF, 0xFB]), "mp3", "audio/mpeg", False),
    SignatureRecord(parse_header_pattern(RIFF_HEADER + " 57 41 56 45"), "wav", "audio/wav", False),
    SignatureRecord(parse_header_pattern(RIFF_HEADER + " 41 56 49 20"), "avi", "video/x-msvideo", False),
    SignatureRecord(b"OggS", "ogg", "audio/ogg", False),
    SignatureRecord(b"fLaC", "flac", "audio/flac", False),
    SignatureRecord(bytes([0x1A, 0x45, 0xDF, 0xA3]), "mkv", "video/x-matroska", True),
    SignatureRecord(bytes([0x1A, 0x45, 0xDF, 0xA3]), "webm", "video/webm", True),
    SignatureRecord.at_offset(b"ftyp3gp", 4, "3gp", "video/3gpp", False),
    SignatureRecord.at_offset(b"ftypM4A", 4, "m4a", "audio/mp4", False),
    SignatureRecord.at_offset(b"ftypqt", 4, "mov", "video/quicktime", False),
    SignatureRecord.at_offset(b"ftyp", 4, "mp4", "video/mp4", False),

    # ============================================================
    # EXECUTABLE FORMATS
    # ============================================================
    SignatureRecord(b"MZ", "exe", "application/x-msdownload", True),
    SignatureRecord(b"MZ", "dll", "application/x-msdownload", True),
    SignatureRecord(bytes([0x7F, 0x45, 0x4C, 0x46]), "elf", "application/x-elf", False),
    SignatureRecord(bytes([0xCA, 0xFE, 0xBA, 0xBE]), "class", "application/java-vm", False),
    SignatureRecord(b"\x00asm", "wasm", "application/wasm", False),

    # ============================================================
    # OTHER (extension-only, no reliable header)
    # ============================================================
    SignatureRecord(b"", "txt", "text/plain", True),
    SignatureRecord(b"", "csv", "text/csv", True),
    SignatureRecord(b"", "json", "application/json", True),
    SignatureRecord(b"", "md", "text/markdown", True),
    SignatureRecord(b"<?xml", "xml", "application/xml", False),
    SignatureRecord(b"SQLite format 3\x00", "sqlite", "application/vnd.sqlite3", False),
]


class SignatureCatalog:
    """
    Catalog of known file signatures.

    Records keep insertion order; a record combined-equal to one already
    present is not added twice. Catalogs are plain objects, so independent
    catalogs can coexist. They are not internally synchronized.
    """

    def __init__(self, records: Optional[Iterable[SignatureRecord]] = None, load_defaults: bool = True):
        """
        Initialize the catalog.

        Args:
            records: Extra records added after the defaults
            load_defaults: Start from the built-in signature table
        """
        self._records: List[SignatureRecord] = []
        if load_defaults:
            self.extend(copy.copy(r) for r in DEFAULT_SIGNATURES)
        if records is not None:
            self.extend(records)

    @classmethod
    def from_json(cls, path: Union[str, Path], load_defaults: bool = False) -> "SignatureCatalog":
        """Create a catalog from a JSON signature file."""
        catalog = cls(load_defaults=load_defaults)
        catalog.load_json(path)
        return catalog

    def add(self, record: SignatureRecord) -> bool:
        """
        Add a record to the catalog.

        Returns:
            False if an equal record was already present
        """
        if not isinstance(record, SignatureRecord):
            raise TypeError(f"Expected SignatureRecord, got {type(record).__name__}")
        if record in self._records:
            logger.debug("Skipping duplicate signature %r", record)
            return False
        self._records.append(record)
        return True

    def extend(self, records: Iterable[SignatureRecord]) -> int:
        """Add several records; returns how many were new."""
        return sum(1 for record in records if self.add(record))

    def remove(self, record: SignatureRecord):
        """Remove a record. Raises ValueError if it is not in the catalog."""
        self._records.remove(record)

    def load_json(self, path: Union[str, Path]) -> int:
        """
        Load signatures from a JSON file.

        The file holds a list of objects:

            {"header": "50 4B 03 04", "offset": 0, "extension": "zip",
             "mime_type": "application/zip",
             "requires_extension_confirmation": true}

        "header" uses hex pairs with "??" for wildcards and may be empty.

        Returns:
            Number of records added

        Raises:
            FileNotFoundError: If the file does not exist
            ValueError: If the file or one of its entries is malformed
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Signature file not found: {path}")

        try:
            raw = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as e:
            raise ValueError(f"Signature file {path} is not valid JSON: {e}") from e

        if not isinstance(raw, list):
            raise ValueError(f"Signature file {path} must contain a list of entries")

        records = [self._record_from_entry(entry, index) for index, entry in enumerate(raw)]
        added = self.extend(records)
        logger.info("Loaded %d signatures from %s (%d new)", len(records), path, added)
        return added

    @staticmethod
    def _record_from_entry(entry, index: int) -> SignatureRecord:
        if not isinstance(entry, dict):
            raise ValueError(f"Signature entry {index} is not an object")
        for key in ("extension", "mime_type"):
            if not isinstance(entry.get(key), str):
                raise ValueError(f"Signature entry {index} is missing '{key}'")

        pattern = entry.get("header", "")
        if pattern is None:
            pattern = ""
        if not isinstance(pattern, str):
            raise ValueError(f"Signature entry {index}: 'header' must be a hex string")
        try:
            header = parse_header_pattern(pattern)
        except ValueError as e:
            raise ValueError(f"Signature entry {index}: {e}") from e

        offset = entry.get("offset", 0)
        if not isinstance(offset, int) or isinstance(offset, bool):
            raise ValueError(f"Signature entry {index}: 'offset' must be an integer")
        if offset < 0:
            raise ValueError(f"Signature entry {index}: offset cannot be negative")

        requires_confirmation = entry.get("requires_extension_confirmation", False)
        if not isinstance(requires_confirmation, bool):
            raise ValueError(
                f"Signature entry {index}: 'requires_extension_confirmation' must be true or false"
            )

        return SignatureRecord.at_offset(
            header,
            offset,
            entry["extension"],
            entry["mime_type"],
            requires_confirmation,
        )

    def get_by_extension(self, extension: str) -> List[SignatureRecord]:
        """Get records for a file extension (normalized before lookup)."""
        extension = normalize_extension(extension)
        return [r for r in self._records if r.extension == extension]

    def get_by_mime_type(self, mime_type: str) -> List[SignatureRecord]:
        """Get records for a MIME type (normalized before lookup)."""
        mime_type = normalize_mime_type(mime_type)
        return [r for r in self._records if r.mime_type == mime_type]

    def extensions(self) -> List[str]:
        """Distinct extensions in catalog order."""
        return list(dict.fromkeys(r.extension for r in self._records))

    def mime_types(self) -> List[str]:
        """Distinct MIME types in catalog order."""
        return list(dict.fromkeys(r.mime_type for r in self._records))

    def match_header(self, data: bytes) -> List[SignatureRecord]:
        """
        Find all records whose header matches the start of `data`.

        Args:
            data: Leading bytes of a file

        Returns:
            Matching records, most specific header first, then catalog order
        """
        matches = [r for r in self._records if r.matches(data)]
        matches.sort(key=lambda r: -r.specificity)
        return matches

    def max_header_length(self) -> int:
        """Get the number of leading bytes needed to check every header."""
        return max((r.header_length for r in self._records), default=0)

    def filter_by_extensions(self, extensions: Iterable[str]) -> "SignatureCatalog":
        """Create a new catalog with only the specified extensions."""
        wanted = {normalize_extension(e) for e in extensions}
        return SignatureCatalog(
            (r for r in self._records if r.extension in wanted),
            load_defaults=False
        )

    def __len__(self) -> int:
        return len(self._records)

    def __iter__(self) -> Iterator[SignatureRecord]:
        return iter(self._records)

    def __contains__(self, record) -> bool:
        return record in self._records
