import zlib

from .errors import ZipCorruptDataError


def inflate(data: bytes) -> bytes:
    """
    Decompresses raw DEFLATE data (i.e. with no zlib or gzip wrapper), as stored in ZIP entries.

    Raises:
        ZipCorruptDataError: If the data is not valid DEFLATE, or ends before the final block does.
    """
    decompressor = zlib.decompressobj(-zlib.MAX_WBITS)

    try:
        result = decompressor.decompress(data) + decompressor.flush()
    except zlib.error as e:
        raise ZipCorruptDataError(f"Invalid DEFLATE data: {e}") from e

    if not decompressor.eof:
        raise ZipCorruptDataError(f"DEFLATE stream is truncated ({len(data)} bytes read, final block not reached)")

    return result
