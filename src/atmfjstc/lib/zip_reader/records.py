"""
Parsers for the binary records that make up a ZIP archive.

Layouts (all integers are little-endian)::

    Local file header                        Central directory file header
    Offset  Bytes  Description               Offset  Bytes  Description
    0       4      Signature (0x04034b50)    0       4      Signature (0x02014b50)
    4       2      Version needed            4       2      Version made by
    6       2      General purpose flags     6       2      Version needed
    8       2      Compression method        8       2      General purpose flags
    10      2      Last mod. time            10      2      Compression method
    12      2      Last mod. date            12      2      Last mod. time
    14      4      CRC-32                    14      2      Last mod. date
    18      4      Compressed size           16      4      CRC-32
    22      4      Uncompressed size         20      4      Compressed size
    26      2      File name length (n)      24      4      Uncompressed size
    28      2      Extra field length (m)    28      2      File name length (n)
    30      n      File name                 30      2      Extra field length (m)
    30+n    m      Extra field               32      2      File comment length (k)
                                             34      2      Disk number where file starts
    End of central directory record          36      2      Internal file attributes
    Offset  Bytes  Description               38      4      External file attributes
    0       4      Signature (0x06054b50)    42      4      Local file header offset
    4       2      Number of this disk       46      n      File name
    6       2      Disk where CD starts      46+n    m      Extra field
    8       2      CD records on this disk   46+n+m  k      File comment
    10      2      Total CD records
    12      4      Size of CD
    16      4      Offset of CD
    20      2      Comment length (n)
    22      n      Comment
"""

from dataclasses import dataclass
from typing import Optional, Union, Type, TypeVar

from atmfjstc.lib.archive_forensics.zip import ZipEntryFlags, ZipHostOS, ZipCompressionMethod

from .ByteCursor import ByteCursor
from .errors import ZipSignatureMismatchError, ZipUnknownStructureError


LOCAL_FILE_HEADER_SIGNATURE = 0x04034b50
CENTRAL_DIRECTORY_FILE_HEADER_SIGNATURE = 0x02014b50
END_OF_CENTRAL_DIRECTORY_SIGNATURE = 0x06054b50
DATA_DESCRIPTOR_SIGNATURE = 0x08074b50

END_OF_CENTRAL_DIRECTORY_SIZE = 22


@dataclass(frozen=True)
class LocalFileHeader:
    signature: int
    version_needed: int
    flags: int
    compression_method: int
    last_mod_file_time: int
    last_mod_file_date: int
    crc_32: int
    compressed_size: int
    uncompressed_size: int
    file_name_length: int
    extra_field_length: int
    file_name: str
    extra_field: bytes
    raw_file_name: bytes = b''


@dataclass(frozen=True)
class CentralDirectoryHeader:
    signature: int
    version_made_by: int
    version_needed: int
    flags: int
    compression_method: int
    last_mod_file_time: int
    last_mod_file_date: int
    crc_32: int
    compressed_size: int
    uncompressed_size: int
    file_name_length: int
    extra_field_length: int
    file_comment_length: int
    disk_number: int
    internal_file_attributes: int
    external_file_attributes: int
    local_file_header_offset: int
    file_name: str
    extra_field: bytes
    file_comment: str
    mode: Optional[int] = None
    raw_file_name: bytes = b''

    @property
    def host_os(self) -> Union[ZipHostOS, int]:
        return _as_enum(self.version_made_by >> 8, ZipHostOS)


@dataclass(frozen=True)
class EndOfCentralDirectoryRecord:
    signature: int
    disk_number: int
    central_dir_disk_number: int
    central_dir_disk_records: int
    central_dir_total_records: int
    central_dir_size: int
    central_dir_offset: int
    file_comment_length: int
    file_comment: str


@dataclass(frozen=True)
class DataDescriptor:
    crc_32: int
    compressed_size: int
    uncompressed_size: int
    has_signature: bool = False


def read_local_file_header(
    cursor: ByteCursor, signature: Optional[int] = None, encoding: str = 'utf-8'
) -> LocalFileHeader:
    signature = _check_signature(cursor, signature, LOCAL_FILE_HEADER_SIGNATURE, 'local file header signature')

    version_needed, flags, compression_method, mod_time, mod_date, crc_32, compressed_size, uncompressed_size, \
        name_length, extra_length = cursor.read_struct('HHHHHIIIHH', 'local file header')

    raw_file_name = cursor.read(name_length, 'file name')
    extra_field = cursor.read(extra_length, 'extra field')

    return LocalFileHeader(
        signature=signature,
        version_needed=version_needed,
        flags=flags,
        compression_method=compression_method,
        last_mod_file_time=mod_time,
        last_mod_file_date=mod_date,
        crc_32=crc_32,
        compressed_size=compressed_size,
        uncompressed_size=uncompressed_size,
        file_name_length=name_length,
        extra_field_length=extra_length,
        file_name=_decode_text(raw_file_name, flags, encoding),
        extra_field=extra_field,
        raw_file_name=raw_file_name,
    )


def read_central_directory_header(
    cursor: ByteCursor, signature: Optional[int] = None, encoding: str = 'utf-8'
) -> CentralDirectoryHeader:
    signature = _check_signature(
        cursor, signature, CENTRAL_DIRECTORY_FILE_HEADER_SIGNATURE, 'central directory file header signature'
    )

    version_made_by, version_needed, flags, compression_method, mod_time, mod_date, crc_32, compressed_size, \
        uncompressed_size, name_length, extra_length, comment_length, disk_number, internal_attributes, \
        external_attributes, local_header_offset = cursor.read_struct(
            'HHHHHHIIIHHHHHII', 'central directory file header'
        )

    raw_file_name = cursor.read(name_length, 'file name')
    extra_field = cursor.read(extra_length, 'extra field')
    raw_comment = cursor.read(comment_length, 'file comment')

    return CentralDirectoryHeader(
        signature=signature,
        version_made_by=version_made_by,
        version_needed=version_needed,
        flags=flags,
        compression_method=compression_method,
        last_mod_file_time=mod_time,
        last_mod_file_date=mod_date,
        crc_32=crc_32,
        compressed_size=compressed_size,
        uncompressed_size=uncompressed_size,
        file_name_length=name_length,
        extra_field_length=extra_length,
        file_comment_length=comment_length,
        disk_number=disk_number,
        internal_file_attributes=internal_attributes,
        external_file_attributes=external_attributes,
        local_file_header_offset=local_header_offset,
        file_name=_decode_text(raw_file_name, flags, encoding),
        extra_field=extra_field,
        file_comment=_decode_text(raw_comment, flags, encoding),
        mode=detect_mode(version_made_by, external_attributes),
        raw_file_name=raw_file_name,
    )


def read_end_of_central_directory_record(
    cursor: ByteCursor, signature: Optional[int] = None, encoding: str = 'utf-8'
) -> EndOfCentralDirectoryRecord:
    signature = _check_signature(
        cursor, signature, END_OF_CENTRAL_DIRECTORY_SIGNATURE, 'end of central directory signature'
    )

    disk_number, cd_disk_number, cd_disk_records, cd_total_records, cd_size, cd_offset, comment_length = \
        cursor.read_struct('HHHHIIH', 'end of central directory record')

    return EndOfCentralDirectoryRecord(
        signature=signature,
        disk_number=disk_number,
        central_dir_disk_number=cd_disk_number,
        central_dir_disk_records=cd_disk_records,
        central_dir_total_records=cd_total_records,
        central_dir_size=cd_size,
        central_dir_offset=cd_offset,
        file_comment_length=comment_length,
        file_comment=cursor.read_string(comment_length, encoding, 'archive comment'),
    )


def read_data_descriptor(cursor: ByteCursor) -> DataDescriptor:
    """
    Reads the data descriptor that follows the payload of entries whose sizes were not known in advance.

    The descriptor signature is optional in the format, so it is only skipped if present.
    """
    crc_32 = cursor.read_integer(4, meaning='CRC-32')
    has_signature = (crc_32 == DATA_DESCRIPTOR_SIGNATURE)

    if has_signature:
        crc_32 = cursor.read_integer(4, meaning='CRC-32')

    compressed_size, uncompressed_size = cursor.read_struct('II', 'data descriptor sizes')

    return DataDescriptor(
        crc_32=crc_32,
        compressed_size=compressed_size,
        uncompressed_size=uncompressed_size,
        has_signature=has_signature,
    )


ZipStructure = Union[LocalFileHeader, CentralDirectoryHeader, EndOfCentralDirectoryRecord]


def read_structure(cursor: ByteCursor, encoding: str = 'utf-8') -> ZipStructure:
    """
    Reads whichever of the three main ZIP records is found at the current position, as told by its signature.
    """
    position = cursor.position()
    signature = cursor.read_integer(4, meaning='structure signature')

    parser = _PARSERS_BY_SIGNATURE.get(signature)
    if parser is None:
        raise ZipUnknownStructureError(position, signature)

    return parser(cursor, signature, encoding)


_PARSERS_BY_SIGNATURE = {
    LOCAL_FILE_HEADER_SIGNATURE: read_local_file_header,
    CENTRAL_DIRECTORY_FILE_HEADER_SIGNATURE: read_central_directory_header,
    END_OF_CENTRAL_DIRECTORY_SIGNATURE: read_end_of_central_directory_record,
}


def detect_mode(version_made_by: int, external_attributes: int) -> Optional[int]:
    """
    Extracts the POSIX permission bits (``rwxrwxrwx``) for an entry, if it was archived on Unix.

    The host running this code is irrelevant; only the archive's own "made by" field counts.

    Returns:
        The permissions as an int (e.g. ``0o755``), or None if the entry was not made on Unix.
    """
    if (version_made_by >> 8) != ZipHostOS.UNIX:
        return None

    return (external_attributes >> 16) & 0o777


def compression_method_enum(method: int) -> Union[ZipCompressionMethod, int]:
    return _as_enum(method, ZipCompressionMethod)


def _check_signature(cursor: ByteCursor, signature: Optional[int], expected: int, meaning: str) -> int:
    if signature is None:
        position = cursor.position()
        signature = cursor.read_integer(4, meaning=meaning)
    else:
        position = cursor.position() - 4

    if signature != expected:
        raise ZipSignatureMismatchError(position, expected, signature, meaning)

    return signature


def _decode_text(raw: bytes, flags: int, encoding: str) -> str:
    if flags & ZipEntryFlags.UTF8:
        encoding = 'utf-8'

    return raw.decode(encoding, errors='replace')


T = TypeVar('T')


def _as_enum(raw_value: int, enum: Type[T]) -> Union[T, int]:
    try:
        return enum(raw_value)
    except Exception:
        return raw_value
