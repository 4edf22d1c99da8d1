"""
MIME Type Detector for MimeSniffer

Reads the leading bytes of a buffer or file, matches them against a
SignatureCatalog and resolves ambiguous matches using the claimed extension.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Union

from .catalog import SignatureCatalog
from .signatures import SignatureRecord, normalize_extension

logger = logging.getLogger(__name__)


@dataclass
class DetectionResult:
    """Outcome of a detection."""
    record: SignatureRecord
    matched_by: str  # "header", "header+extension" or "extension"
    claimed_extension: Optional[str] = None

    @property
    def mime_type(self) -> str:
        return self.record.mime_type

    @property
    def extension(self) -> str:
        return self.record.extension

    @property
    def extension_mismatch(self) -> bool:
        """True when the claimed extension disagrees with the detected type."""
        return self.claimed_extension is not None and self.claimed_extension != self.record.extension

    def as_dict(self) -> Dict[str, object]:
        return {
            "mime_type": self.mime_type,
            "extension": self.extension,
            "matched_by": self.matched_by,
            "claimed_extension": self.claimed_extension,
            "extension_mismatch": self.extension_mismatch,
        }


class MimeDetector:
    """
    Content-based MIME type detector.

    Disambiguation:
    - A candidate whose extension equals the claimed extension wins.
    - Otherwise candidates that need extension confirmation only win when
      no unambiguous candidate matched.
    - With no header match, extension-only records (empty header) for the
      claimed extension are used when `extension_fallback` is set.
    """

    def __init__(
        self,
        catalog: Optional[SignatureCatalog] = None,
        read_size: Optional[int] = None,
        extension_fallback: bool = True
    ):
        """
        Initialize the detector.

        Args:
            catalog: Signatures to match against (default: built-in table)
            read_size: Bytes to read from files (default: longest header)
            extension_fallback: Use extension-only records when no header matches
        """
        if read_size is not None and read_size < 0:
            raise ValueError("read_size cannot be negative")

        self.catalog = catalog if catalog is not None else SignatureCatalog()
        self._read_size = read_size
        self.extension_fallback = extension_fallback

    @property
    def read_size(self) -> int:
        """Bytes read from files; follows the catalog unless set explicitly."""
        if self._read_size is not None:
            return self._read_size
        return self.catalog.max_header_length()

    def detect_all(self, data: bytes, extension: Optional[str] = None) -> List[SignatureRecord]:
        """
        Find candidate records for `data`, best first.

        Args:
            data: Leading bytes of the file
            extension: Extension the file claims to have, if known

        Returns:
            Ranked candidates; empty when nothing matched
        """
        claimed = normalize_extension(extension) if extension is not None else None
        candidates = self.catalog.match_header(data)

        if not candidates:
            if claimed is not None and self.extension_fallback:
                return [r for r in self.catalog.get_by_extension(claimed) if not r.header]
            return []

        if claimed is not None:
            confirmed = [r for r in candidates if r.extension == claimed]
            rest = [r for r in candidates if r.extension != claimed]
            candidates = confirmed + rest

        if claimed is None or candidates[0].extension != claimed:
            unambiguous = [r for r in candidates if not r.requires_extension_confirmation]
            ambiguous = [r for r in candidates if r.requires_extension_confirmation]
            candidates = unambiguous + ambiguous

        return candidates

    def detect(self, data: bytes, extension: Optional[str] = None) -> Optional[DetectionResult]:
        """
        Detect the type of `data`.

        Returns:
            DetectionResult for the best candidate, or None
        """
        claimed = normalize_extension(extension) if extension is not None else None
        candidates = self.detect_all(data, extension)
        if not candidates:
            logger.debug("No signature matched %d bytes (extension=%s)", len(data), claimed)
            return None

        best = candidates[0]
        if not best.header:
            matched_by = "extension"
        elif claimed is not None and best.extension == claimed:
            matched_by = "header+extension"
        else:
            matched_by = "header"

        if len(candidates) > 1:
            logger.debug(
                "%d candidates for %s, chose %s",
                len(candidates), claimed, best.extension
            )
        return DetectionResult(record=best, matched_by=matched_by, claimed_extension=claimed)

    @staticmethod
    def claimed_extension(path: Union[str, Path]) -> Optional[str]:
        """Normalized suffix of `path`, or None when it has none."""
        suffix = Path(path).suffix
        return normalize_extension(suffix) if suffix else None

    def read_header(self, path: Union[str, Path]) -> bytes:
        """
        Read the leading bytes of a file needed for detection.

        Raises:
            FileNotFoundError: If the file does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"File not found: {path}")
        with open(path, 'rb') as f:
            return f.read(self.read_size)

    def detect_file(self, path: Union[str, Path]) -> Optional[DetectionResult]:
        """Detect the type of a file, using its suffix as the claimed extension."""
        path = Path(path)
        data = self.read_header(path)
        result = self.detect(data, self.claimed_extension(path))
        if result is not None and result.extension_mismatch:
            logger.info(
                "%s: content is %s but extension is %s",
                path, result.mime_type, result.claimed_extension
            )
        return result
