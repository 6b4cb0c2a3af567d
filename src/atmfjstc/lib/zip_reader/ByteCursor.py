"""
This module contains the `ByteCursor` class, a read position over a `ByteWindow` that offers functions for extracting
the binary-encoded ints, strings and structures found in ZIP archives.
"""

from contextlib import contextmanager
from os import SEEK_SET
from typing import Callable, Optional

from atmfjstc.lib.archive_forensics.zip import ZipCompressionMethod
from atmfjstc.lib.binary_utils.BinaryReader import BinaryReader, BinaryReaderReadPastEndError, \
    BinaryReaderMissingDataError

from .ByteWindow import ByteWindow
from .errors import ZipUnsupportedCompressionError, ZipOutOfRangeError
from .inflate import inflate as default_inflate


InflateFunc = Callable[[bytes], bytes]


class ByteCursor:
    """
    A stateful read position over a shared `ByteWindow`.

    Every read advances the position. Seeking is never checked by itself; a position past the end of the data only
    causes an error once a read is attempted there.

    Ints and structures are decoded by a little-endian `BinaryReader` private to the cursor. The window is not owned
    by the cursor. Use `fork` to get an independent cursor over the same data.
    """

    _window: ByteWindow
    _reader: BinaryReader
    _offset: int
    _inflate: InflateFunc

    def __init__(self, window: ByteWindow, offset: int = 0, inflate: Optional[InflateFunc] = None):
        self._window = window
        self._reader = BinaryReader(window.data(), big_endian=False)
        self._offset = offset
        self._inflate = inflate or default_inflate

    @property
    def window(self) -> ByteWindow:
        return self._window

    def fork(self, offset: Optional[int] = None) -> 'ByteCursor':
        return ByteCursor(self._window, self._offset if offset is None else offset, self._inflate)

    def length(self) -> int:
        return self._window.length()

    def position(self) -> int:
        return self._offset

    def seek(self, offset: int) -> 'ByteCursor':
        self._offset = offset

        return self

    def read(self, length: int, meaning: Optional[str] = None) -> bytes:
        data = self._window.read(self._offset, length, meaning)
        self._offset += length

        return data

    def read_integer(self, length: int, big_endian: bool = False, meaning: Optional[str] = None) -> int:
        """
        Reads an unsigned integer stored in a given number of bytes.

        Args:
            length: The number of bytes the int is stored over (e.g. a 32 bit int has 4 bytes). Must be at least 1.
            big_endian: Whether the most significant byte comes first. ZIP structures are always little-endian.
            meaning: An indication as to the meaning of the data being read (e.g. "CRC-32"). It is used in the text of
                any exceptions that may be thrown.

        Returns:
            The parsed integer.

        Raises:
            ZipOutOfRangeError: If the int does not fit in the data remaining after the current position.
        """

        if length < 1:
            raise ValueError("Number of bytes in int must be at least 1")

        with self._reading(length, meaning or 'int') as reader:
            return reader.read_fixed_size_int(length, meaning=meaning or 'int', big_endian=big_endian)

    def read_string(self, length: int, charset: str = 'utf-8', meaning: Optional[str] = None) -> str:
        return self.read(length, meaning or 'string').decode(charset, errors='replace')

    def read_struct(self, struct_format: str, meaning: Optional[str] = None) -> tuple:
        """
        Reads structured data, as per the Python `struct` package. Little-endian is assumed unless the format starts
        with an explicit byte order specifier.

        Raises:
            ZipOutOfRangeError: If the structure does not fit in the data remaining after the current position.
        """

        with self._reading(0, meaning or f"struct ({struct_format})") as reader:
            return reader.read_struct(struct_format, meaning)

    @contextmanager
    def _reading(self, length: int, meaning: str):
        if self._offset < 0:
            raise ZipOutOfRangeError(self._offset, length, self.length(), meaning)

        self._reader.seek(self._offset, SEEK_SET)

        try:
            yield self._reader
        except (BinaryReaderReadPastEndError, BinaryReaderMissingDataError) as e:
            raise ZipOutOfRangeError(e.position, e.expected_length, self.length(), e.meaning) from e

        self._offset = self._reader.tell()

    def read_uncompressed(self, length: int, method: int, meaning: Optional[str] = None) -> bytes:
        """
        Reads `length` bytes of entry payload and decompresses them according to the ZIP compression method.

        Raises:
            ZipUnsupportedCompressionError: For any method other than Store and Deflate. Note that the raw bytes have
                already been consumed at that point.
            ZipCorruptDataError: If the default inflater finds the DEFLATE stream truncated or invalid.
        """

        compressed = self.read(length, meaning or 'compressed data')

        if method == ZipCompressionMethod.STORE:
            return compressed
        if method == ZipCompressionMethod.DEFLATE:
            return self._inflate(compressed)

        raise ZipUnsupportedCompressionError(method)
