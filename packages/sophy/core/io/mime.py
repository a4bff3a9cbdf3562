"""Content-type detection for stored files.

Sniffs a leading sample of the file for well-known binary signatures and
falls back to the extension map for anything that looks like text.
"""

import mimetypes
from typing import Literal

# Bytes read from the head of a file for detection
SAMPLE_SIZE = 4096

_SIGNATURES: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", "image/png"),
    (b"\xff\xd8\xff", "image/jpeg"),
    (b"GIF87a", "image/gif"),
    (b"GIF89a", "image/gif"),
    (b"%PDF-", "application/pdf"),
    (b"PK\x03\x04", "application/zip"),
    (b"\x1f\x8b", "application/gzip"),
    (b"OggS", "audio/ogg"),
    (b"fLaC", "audio/flac"),
    (b"ID3", "audio/mpeg"),
    (b"\x7fELF", "application/x-elf"),
)


def _looks_like_text(sample: bytes) -> bool:
    if b"\x00" in sample:
        return False
    try:
        sample.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte sequence cut off by the sample boundary is still text
        return e.start >= len(sample) - 3 and e.reason == "unexpected end of data"
    return True


def detect_mime(name: str, sample: bytes) -> str | Literal[False]:
    """
    Detect the media type of a file from its name and leading bytes.

    Args:
        name: File name (used for the extension fallback)
        sample: First bytes of the file (up to SAMPLE_SIZE)

    Returns:
        Media type string, or False if the content is empty or unrecognizable

    Example:
        >>> detect_mime("notes.txt", b"hello")
        'text/plain'
        >>> detect_mime("empty.txt", b"")
        False
    """
    if not sample:
        return False

    for signature, mime in _SIGNATURES:
        if sample.startswith(signature):
            return mime
    if sample[:4] == b"RIFF" and sample[8:12] == b"WEBP":
        return "image/webp"
    if sample[:4] == b"RIFF" and sample[8:12] == b"WAVE":
        return "audio/wav"

    guessed, _ = mimetypes.guess_type(name)
    if _looks_like_text(sample):
        return guessed or "text/plain"

    # Binary content without a known signature: trust only non-text extensions
    if guessed and not guessed.startswith("text/"):
        return guessed
    return False
