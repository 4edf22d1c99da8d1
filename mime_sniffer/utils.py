"""
Utility Functions for MimeSniffer
"""


def format_size(size: int) -> str:
    """Format size in human-readable format."""
    for unit in ['B', 'KB', 'MB', 'GB', 'TB']:
        if size < 1024:
            return f"{size:.2f} {unit}" if unit != 'B' else f"{size} {unit}"
        size /= 1024
    return f"{size:.2f} PB"


def hex_dump(data: bytes, offset: int = 0, length: int = 64) -> str:
    """
    Create hex dump of data.

    Args:
        data: Bytes to dump
        offset: Starting offset for display
        length: Number of bytes to show

    Returns:
        Formatted hex dump string
    """
    lines = []
    data = data[:length]

    for i in range(0, len(data), 16):
        chunk = data[i:i + 16]
        hex_part = ' '.join(f'{b:02x}' for b in chunk)
        hex_part = hex_part.ljust(48)

        # ASCII representation
        ascii_part = ''.join(
            chr(b) if 32 <= b < 127 else '.'
            for b in chunk
        )

        addr = offset + i
        lines.append(f'{addr:08x}  {hex_part} |{ascii_part}|')

    return '\n'.join(lines)
