"""
This module contains the `ZipReader` class, which walks the central directory of an in-memory ZIP archive, and the
`ZipEntry` objects it produces.
"""

import logging
import zlib

from datetime import datetime
from threading import Lock
from typing import Union, Optional, Callable, Dict, List, Iterator, Any

from atmfjstc.lib.archive_forensics.zip import ZipCompressionMethod, ZipEntryFlags, ZipHostOS
from atmfjstc.lib.iso_timestamp import ISOTimestamp, iso_from_datetime
from atmfjstc.lib.os_forensics.posix import PosixNumericPermissions, PosixPermissionsString, \
    posix_permissions_num_to_string

from .ByteWindow import ByteWindow
from .ByteCursor import ByteCursor, InflateFunc
from .dos_time import dos_date_time_to_datetime
from .errors import ZipEntryCRCError, ZipEntrySizeError
from .locate import locate_end_of_central_directory
from .records import LocalFileHeader, CentralDirectoryHeader, EndOfCentralDirectoryRecord, DataDescriptor, \
    read_local_file_header, read_central_directory_header, read_end_of_central_directory_record, \
    read_data_descriptor, compression_method_enum


LOG = logging.getLogger(__name__)


class ZipReader:
    """
    Read-only access to a ZIP archive held entirely in memory.

    Entries are produced lazily by walking the central directory::

        reader = ZipReader(data)

        for entry in reader:
            print(entry.name, entry.is_directory(), entry.last_modified())

    The content of an entry is only decompressed when its `ZipEntry.data` method is first called.

    The archive data is copied into an immutable `ByteWindow` once. Every walk and every content read uses its own
    `ByteCursor`, so entries from the same reader may be read from multiple threads.
    """

    _window: ByteWindow
    _inflate: Optional[InflateFunc]
    _encoding: str
    _verify_crc: bool

    _end_record: Optional[EndOfCentralDirectoryRecord] = None
    _end_record_lock: Lock

    def __init__(
        self, data: Union[bytes, bytearray, memoryview], inflate: Optional[InflateFunc] = None,
        encoding: str = 'utf-8', verify_crc: bool = False
    ):
        """
        Args:
            data: The complete archive.
            inflate: A function for decompressing raw DEFLATE data. By default, `zlib` is used.
            encoding: The encoding for file names and comments of entries that are not flagged as UTF-8.
            verify_crc: If True, decoded entry data is checked against the CRC-32 in the central directory.
        """

        self._window = ByteWindow(data)
        self._inflate = inflate
        self._encoding = encoding
        self._verify_crc = verify_crc
        self._end_record_lock = Lock()

    def _new_cursor(self, offset: int = 0) -> ByteCursor:
        return ByteCursor(self._window, offset, self._inflate)

    def end_record(self) -> EndOfCentralDirectoryRecord:
        """
        The end of central directory record, located and parsed on first access.

        Raises:
            ZipStructureNotFoundError: If the data is not a ZIP archive.
        """
        with self._end_record_lock:
            if self._end_record is None:
                cursor = self._new_cursor()
                locate_end_of_central_directory(cursor)
                self._end_record = read_end_of_central_directory_record(cursor, encoding=self._encoding)

            return self._end_record

    @property
    def comment(self) -> str:
        return self.end_record().file_comment

    def __len__(self) -> int:
        return self.end_record().central_dir_total_records

    def iterator(self) -> 'ZipEntryIterator':
        end_record = self.end_record()

        return ZipEntryIterator(
            self._new_cursor(end_record.central_dir_offset),
            end_record.central_dir_disk_records,
            self._encoding,
            self._verify_crc,
        )

    def __iter__(self) -> Iterator['ZipEntry']:
        return self.iterator()

    def for_each(self, visitor: Callable[['ZipEntry'], Any]):
        """
        Calls `visitor` for every entry in the archive, in central directory order.
        """
        for entry in self.iterator():
            visitor(entry)

    def entries(self) -> List['ZipEntry']:
        return list(self.iterator())

    def get(self, name: str) -> Optional['ZipEntry']:
        for entry in self.iterator():
            if entry.name == name:
                return entry

        return None

    def to_dict(self, charset: Optional[str] = None) -> Dict[str, Union[bytes, str]]:
        """
        Decodes all the file entries (directories are skipped) into a name -> content mapping.

        Args:
            charset: If specified, the content is decoded to `str` with this charset. Otherwise it is left as `bytes`.
        """
        result = {}

        def _collect(entry: ZipEntry):
            if entry.is_file():
                data = entry.data()
                result[entry.name] = data.decode(charset) if charset is not None else data

        self.for_each(_collect)

        return result


class ZipEntryIterator:
    """
    Walks the central directory one header at a time.

    Each step also looks up the entry's local header, as the payload starts right after it. Once the declared number of
    records is exhausted, the iterator stays exhausted.
    """

    _cursor: ByteCursor
    _remaining: int
    _encoding: str
    _verify_crc: bool

    def __init__(self, cursor: ByteCursor, count: int, encoding: str = 'utf-8', verify_crc: bool = False):
        self._cursor = cursor
        self._remaining = count
        self._encoding = encoding
        self._verify_crc = verify_crc

    def __iter__(self) -> 'ZipEntryIterator':
        return self

    def __next__(self) -> 'ZipEntry':
        if self._remaining <= 0:
            raise StopIteration

        self._remaining -= 1

        central_header = read_central_directory_header(self._cursor, encoding=self._encoding)

        local_cursor = self._cursor.fork(central_header.local_file_header_offset)
        local_header = read_local_file_header(local_cursor, encoding=self._encoding)

        LOG.debug(
            "Entry '%s': local header at %d, data at %d",
            central_header.file_name, central_header.local_file_header_offset, local_cursor.position()
        )

        return ZipEntry(
            local_header=local_header,
            central_header=central_header,
            cursor=local_cursor,
            data_offset=local_cursor.position(),
            verify_crc=self._verify_crc,
        )


class ZipEntry:
    """
    A single item in a ZIP archive.

    The metadata comes from the local and central directory headers, which are both retained (see `local_header` and
    `central_header`). Sizes, compression method and mode are taken from the central directory, which is authoritative
    for entries whose local header sizes were deferred to a data descriptor.
    """

    local_header: LocalFileHeader
    central_header: CentralDirectoryHeader

    _cursor: ByteCursor
    _data_offset: int
    _verify_crc: bool

    _data: Optional[bytes] = None
    _data_lock: Lock

    def __init__(
        self, local_header: LocalFileHeader, central_header: CentralDirectoryHeader, cursor: ByteCursor,
        data_offset: int, verify_crc: bool = False
    ):
        self.local_header = local_header
        self.central_header = central_header
        self._cursor = cursor
        self._data_offset = data_offset
        self._verify_crc = verify_crc
        self._data_lock = Lock()

    @property
    def name(self) -> str:
        return self.local_header.file_name

    @property
    def comment(self) -> str:
        return self.central_header.file_comment

    @property
    def data_offset(self) -> int:
        return self._data_offset

    @property
    def compressed_size(self) -> int:
        return self.central_header.compressed_size

    @property
    def uncompressed_size(self) -> int:
        return self.central_header.uncompressed_size

    @property
    def crc_32(self) -> int:
        return self.central_header.crc_32

    @property
    def compression_method(self) -> Union[ZipCompressionMethod, int]:
        return compression_method_enum(self.central_header.compression_method)

    @property
    def host_os(self) -> Union[ZipHostOS, int]:
        return self.central_header.host_os

    def is_directory(self) -> bool:
        return self.name.endswith('/')

    def is_file(self) -> bool:
        return not self.is_directory()

    def last_modified(self) -> datetime:
        return dos_date_time_to_datetime(self.local_header.last_mod_file_date, self.local_header.last_mod_file_time)

    def last_modified_iso(self) -> ISOTimestamp:
        return iso_from_datetime(self.last_modified())

    def mode(self) -> Optional[int]:
        """
        The POSIX permission bits (e.g. ``0o644``) if the entry was archived on Unix, None otherwise.
        """
        return self.central_header.mode

    def mode_string(self) -> Optional[PosixPermissionsString]:
        mode = self.mode()

        return posix_permissions_num_to_string(PosixNumericPermissions(mode)) if mode is not None else None

    def data(self) -> bytes:
        """
        The decompressed content of the entry.

        It is decoded on the first call only; later calls return the same object.

        Raises:
            ZipUnsupportedCompressionError: If the entry uses a compression method other than Store or Deflate.
            ZipOutOfRangeError: If the compressed data runs past the end of the archive.
            ZipCorruptDataError: If the compressed data is not a complete DEFLATE stream.
            ZipEntrySizeError: If the decoded data does not have the size declared in the central directory.
            ZipEntryCRCError: If CRC verification was requested and failed.
        """
        with self._data_lock:
            if self._data is None:
                self._data = self._decode()

            return self._data

    def _decode(self) -> bytes:
        LOG.debug("Decoding entry '%s' (%d bytes at %d)", self.name, self.compressed_size, self._data_offset)

        data = self._cursor.fork(self._data_offset).read_uncompressed(
            self.compressed_size, self.central_header.compression_method, f"data for entry '{self.name}'"
        )

        if len(data) != self.uncompressed_size:
            raise ZipEntrySizeError(self.name, self.uncompressed_size, len(data))

        if self._verify_crc:
            actual_crc = zlib.crc32(data) & 0xffffffff
            if actual_crc != self.crc_32:
                raise ZipEntryCRCError(self.name, self.crc_32, actual_crc)

        return data

    def data_descriptor(self) -> Optional[DataDescriptor]:
        """
        The data descriptor following the entry content, if the entry declares one (general purpose flag bit 3).
        """
        if not (self.local_header.flags & ZipEntryFlags.DEFERRED_CRC32):
            return None

        return read_data_descriptor(self._cursor.fork(self._data_offset + self.compressed_size))

    def __repr__(self) -> str:
        return f"ZipEntry({self.name!r}, method={self.compression_method!r}, size={self.uncompressed_size})"
