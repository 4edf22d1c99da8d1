"""
Signature Records for MimeSniffer

A signature record ties a magic-byte header (at an optional offset) to a
canonical file extension and MIME type.
"""

import re
from typing import Iterable, Optional, Tuple, Union


class _Wildcard:
    """Header position that accepts any byte when matching."""
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "WILDCARD"

    def __reduce__(self):
        return (_Wildcard, ())


WILDCARD = _Wildcard()

HeaderElement = Union[int, _Wildcard]
Header = Tuple[HeaderElement, ...]


def _remove_whitespace(value: str) -> str:
    return "".join(value.split())


def normalize_mime_type(mime_type: str) -> str:
    """Remove all whitespace from a MIME type string and lowercase it."""
    return _remove_whitespace(mime_type).lower()


def normalize_extension(extension: str) -> str:
    """
    Normalize a file extension.

    All whitespace is removed (internal whitespace too), the result is
    lowercased and given exactly one leading dot.

    Examples: "MP3" -> ".mp3", " m p 3 " -> ".mp3", "" -> "."
    """
    extension = _remove_whitespace(extension).lower()
    return "." + extension.lstrip(".")


def to_header(header: Optional[Iterable]) -> Optional[Header]:
    """
    Convert bytes or an iterable of ints / None / WILDCARD into a header tuple.

    None elements become WILDCARD. A None header stays None.
    """
    if header is None:
        return None
    if isinstance(header, (bytes, bytearray)):
        return tuple(header)

    elements = []
    for element in header:
        if element is None or element is WILDCARD:
            elements.append(WILDCARD)
        elif isinstance(element, int) and not isinstance(element, bool) and 0 <= element <= 0xFF:
            elements.append(element)
        else:
            raise ValueError(f"Invalid header byte: {element!r}")
    return tuple(elements)


_WILDCARD_TOKENS = ("??", "**")
_HEX_TOKEN_RE = re.compile(r"^[0-9a-fA-F]{2}$")


def parse_header_pattern(pattern: str) -> Header:
    """
    Parse a hex header pattern into a header tuple.

    Bytes are written as two hex digits, optionally separated by whitespace;
    "??" (or "**") marks a wildcard position.

    Examples: "50 4B 03 04", "52494646 ???????? 57454250"

    Raises:
        ValueError: If the pattern is not a string of hex pairs and wildcards
    """
    if not isinstance(pattern, str):
        raise ValueError(f"Header pattern must be a hex string, got {type(pattern).__name__}")

    compact = "".join(pattern.split())
    if len(compact) % 2:
        raise ValueError(f"Header pattern has an odd number of digits: {pattern!r}")

    header = []
    for i in range(0, len(compact), 2):
        token = compact[i:i + 2]
        if token in _WILDCARD_TOKENS:
            header.append(WILDCARD)
        elif _HEX_TOKEN_RE.match(token):
            header.append(int(token, 16))
        else:
            raise ValueError(f"Invalid token {token!r} in header pattern {pattern!r}")
    return tuple(header)


def format_header(header: Iterable) -> str:
    """Format a header as space-separated hex pairs, "??" for wildcards."""
    return " ".join("??" if b is WILDCARD else f"{b:02X}" for b in header)


class SignatureRecord:
    """
    Known file-type signature.

    Extension and MIME type are normalized on construction and are read-only
    afterwards, as are the offset and the confirmation flag. The header may be
    reassigned while a catalog is being built; it is not safe to do so while
    other threads compare the record.
    """

    __slots__ = ("_header", "_offset", "_extension", "_mime_type", "_requires_extension_confirmation")

    def __init__(
        self,
        header: Optional[Iterable],
        extension: str,
        mime_type: str,
        requires_extension_confirmation: bool = False,
        offset: int = 0
    ):
        """
        Create a record whose header starts at byte 0 (or at `offset`).

        Args:
            header: Magic bytes; None/WILDCARD elements match any byte
            extension: File extension, with or without the leading dot
            mime_type: MIME type such as "image/png"
            requires_extension_confirmation: Header is shared by several
                types and the extension must decide between them
            offset: Position in the file where the header begins
        """
        self._header = to_header(header)
        self._offset = offset
        self._extension = normalize_extension(extension)
        self._mime_type = normalize_mime_type(mime_type)
        self._requires_extension_confirmation = bool(requires_extension_confirmation)

    @classmethod
    def at_offset(
        cls,
        header: Optional[Iterable],
        offset: int,
        extension: str,
        mime_type: str,
        requires_extension_confirmation: bool = False
    ) -> "SignatureRecord":
        """Create a record whose header begins at `offset`."""
        return cls(header, extension, mime_type, requires_extension_confirmation, offset=offset)

    @property
    def header(self) -> Optional[Header]:
        return self._header

    @header.setter
    def header(self, value: Optional[Iterable]):
        self._header = to_header(value)

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def extension(self) -> str:
        return self._extension

    @property
    def mime_type(self) -> str:
        return self._mime_type

    @property
    def requires_extension_confirmation(self) -> bool:
        return self._requires_extension_confirmation

    @property
    def header_length(self) -> int:
        """Number of leading file bytes needed to check this header."""
        return max(self._offset, 0) + len(self._header or ())

    @property
    def specificity(self) -> int:
        """Count of exact (non-wildcard) header bytes."""
        return sum(1 for b in self._header or () if b is not WILDCARD)

    def equals_by_extension(self, other: "SignatureRecord") -> bool:
        return self._extension == other._extension

    def equals_by_mime_type(self, other: "SignatureRecord") -> bool:
        return self._mime_type == other._mime_type

    def equals_by_header_content(self, other: "SignatureRecord") -> bool:
        """
        Compare headers position by position, including length.

        A wildcard only equals a wildcard at the same index.

        Raises:
            ValueError: If either record has no header sequence at all
        """
        if self._header is None or other._header is None:
            raise ValueError(
                f"Cannot compare header content: {self!r} or {other!r} has no header"
            )
        return self._header == other._header

    def matches(self, data: bytes) -> bool:
        """
        Check whether `data` (read from the start of a file) holds this header.

        Empty or absent headers, and negative offsets, never match.
        """
        if not self._header or self._offset < 0:
            return False
        end = self._offset + len(self._header)
        if len(data) < end:
            return False
        window = data[self._offset:end]
        for expected, actual in zip(self._header, window):
            if expected is not WILDCARD and expected != actual:
                return False
        return True

    def __eq__(self, other):
        if not isinstance(other, SignatureRecord):
            return NotImplemented
        if self._extension != other._extension or self._mime_type != other._mime_type:
            return False
        if self._header is None or other._header is None:
            return self._header is None and other._header is None
        return self._header == other._header

    def __hash__(self):
        return hash((self._extension, self._mime_type, self._header))

    def __str__(self) -> str:
        return self._mime_type

    def __repr__(self) -> str:
        header = "None" if self._header is None else repr(format_header(self._header))
        return (
            f"SignatureRecord(header={header}, offset={self._offset}, "
            f"extension={self._extension!r}, mime_type={self._mime_type!r}, "
            f"requires_extension_confirmation={self._requires_extension_confirmation})"
        )
