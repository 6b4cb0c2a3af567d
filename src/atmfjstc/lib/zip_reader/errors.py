"""
Exceptions raised while decoding ZIP archives.

All of them derive from `ZipReaderError`, so callers that only care whether the archive could be read can catch that.
"""

from typing import Optional


class ZipReaderError(Exception):
    """
    Base class for all errors raised by the ZIP reader.
    """


class ZipOutOfRangeError(ZipReaderError):
    position: int
    length: int
    total_size: int
    meaning: Optional[str]

    def __init__(self, position: int, length: int, total_size: int, meaning: Optional[str] = None):
        self.position = position
        self.length = length
        self.total_size = total_size
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {length} "
            f"bytes{f' for {meaning}' if meaning is not None else ''}"
            f", but the archive is only {total_size} bytes long"
        )


class ZipSignatureMismatchError(ZipReaderError):
    position: int
    expected_signature: int
    found_signature: int
    meaning: Optional[str]

    def __init__(self, position: int, expected_signature: int, found_signature: int, meaning: Optional[str] = None):
        self.position = position
        self.expected_signature = expected_signature
        self.found_signature = found_signature
        self.meaning = meaning

        super().__init__(
            f"At position {position}, expected {meaning or 'signature'} 0x{expected_signature:08x}, but found "
            f"0x{found_signature:08x}"
        )


class ZipUnknownStructureError(ZipReaderError):
    position: int
    signature: int

    def __init__(self, position: int, signature: int):
        self.position = position
        self.signature = signature

        super().__init__(f"At position {position}, found unknown ZIP structure signature 0x{signature:08x}")


class ZipStructureNotFoundError(ZipReaderError):
    total_size: int

    def __init__(self, total_size: int):
        self.total_size = total_size

        super().__init__(
            f"Unable to find the end of central directory record in the last bytes of the archive "
            f"(size: {total_size}). The data is either corrupt or not a ZIP archive."
        )


class ZipUnsupportedCompressionError(ZipReaderError):
    method: int

    def __init__(self, method: int):
        self.method = method

        super().__init__(f"Unsupported compression method: {method}. Only Store (0) and Deflate (8) are supported.")


class ZipEntryCRCError(ZipReaderError):
    name: str
    expected_crc: int
    actual_crc: int

    def __init__(self, name: str, expected_crc: int, actual_crc: int):
        self.name = name
        self.expected_crc = expected_crc
        self.actual_crc = actual_crc

        super().__init__(
            f"CRC check failed for entry '{name}' (declared: 0x{expected_crc:08x}, actual: 0x{actual_crc:08x})"
        )


class ZipCorruptDataError(ZipReaderError):
    """
    Raised when compressed entry data cannot be decoded completely, e.g. because the DEFLATE stream is truncated.
    """


class ZipEntrySizeError(ZipReaderError):
    name: str
    expected_size: int
    actual_size: int

    def __init__(self, name: str, expected_size: int, actual_size: int):
        self.name = name
        self.expected_size = expected_size
        self.actual_size = actual_size

        super().__init__(
            f"Size check failed for entry '{name}' (declared: {expected_size} bytes, decoded: {actual_size} bytes)"
        )
