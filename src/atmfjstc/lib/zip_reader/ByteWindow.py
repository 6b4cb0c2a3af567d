"""
This module contains the `ByteWindow` class, an immutable, bounds-checked view over an in-memory archive.
"""

from typing import Union, Optional

from .errors import ZipOutOfRangeError


class ByteWindow:
    """
    Wraps a fixed byte buffer and gives out bounded slices of it.

    The window holds no position of its own, so a single instance can be shared freely between any number of cursors
    (and threads).
    """

    _data: bytes

    def __init__(self, data: Union[bytes, bytearray, memoryview]):
        if not isinstance(data, (bytes, bytearray, memoryview)):
            raise TypeError("Input to ByteWindow must be bytes, bytearray or memoryview")

        self._data = bytes(data)

    def length(self) -> int:
        return len(self._data)

    def data(self) -> bytes:
        """
        The whole underlying buffer. It is immutable, so no copy is made.
        """
        return self._data


    def read(self, offset: int, length: int, meaning: Optional[str] = None) -> bytes:
        """
        Returns exactly `length` bytes starting at `offset`.

        Args:
            offset: The absolute offset to read from.
            length: The number of bytes to read.
            meaning: An indication as to the meaning of the data being read (e.g. "file name"). It is used in the text
                of any exceptions that may be thrown.

        Returns:
            An independent `bytes` copy of the data.

        Raises:
            ZipOutOfRangeError: If any part of the requested range falls outside the buffer.
        """

        if length < 0:
            raise ValueError("The number of bytes to read cannot be negative")

        if (offset < 0) or (offset + length > len(self._data)):
            raise ZipOutOfRangeError(offset, length, len(self._data), meaning)

        return self._data[offset:offset + length]
