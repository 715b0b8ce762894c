"""xz (LZMA) stream helpers used transparently on tree input and JSON output."""

from __future__ import annotations

import lzma

from .errors import DecompressionError

XZ_SIGNATURE = b"\xfd7zXZ\x00"


def xz_compressed(data: bytes) -> bool:
    return data[:len(XZ_SIGNATURE)] == XZ_SIGNATURE


def xz_decompress(data: bytes) -> bytes:
    """Decode a (possibly concatenated) xz stream."""
    try:
        return lzma.decompress(data, format=lzma.FORMAT_XZ)
    except lzma.LZMAError as err:
        raise DecompressionError(f"xz decompression failed: {err}") from err


def xz_compress(data: bytes) -> bytes:
    return lzma.compress(
        data,
        format=lzma.FORMAT_XZ,
        check=lzma.CHECK_CRC64,
        preset=9 | lzma.PRESET_EXTREME,
    )
