import pytest

from phylopdf.errors import DecompressionError
from phylopdf.xz import XZ_SIGNATURE, xz_compress, xz_compressed, xz_decompress


def test_compress_and_detect():
    data = xz_compress(b"(A:1,B:2);")
    assert data.startswith(XZ_SIGNATURE)
    assert xz_compressed(data)
    assert not xz_compressed(b"(A:1,B:2);")
    assert xz_decompress(data) == b"(A:1,B:2);"


def test_concatenated_streams():
    data = xz_compress(b"(A:1,") + xz_compress(b"B:2);")
    assert xz_decompress(data) == b"(A:1,B:2);"


def test_corrupt_stream():
    with pytest.raises(DecompressionError):
        xz_decompress(XZ_SIGNATURE + b"garbage")
