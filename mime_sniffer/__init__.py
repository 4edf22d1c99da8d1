"""
MimeSniffer - Content-Based File Type Detection

Identifies file types by matching leading magic bytes against a catalog of
known signatures.
"""

__version__ = "1.0.0"
__author__ = "MimeSniffer Team"

from .signatures import (
    SignatureRecord,
    WILDCARD,
    normalize_extension,
    normalize_mime_type,
)
from .catalog import SignatureCatalog
from .detector import MimeDetector, DetectionResult

__all__ = [
    "SignatureRecord",
    "WILDCARD",
    "normalize_extension",
    "normalize_mime_type",
    "SignatureCatalog",
    "MimeDetector",
    "DetectionResult",
]
