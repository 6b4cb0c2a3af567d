"""
Locating the end of central directory record.

The record is fixed size, but it is followed by a comment of up to 65535 bytes, so its offset cannot be computed from
the archive size alone. We scan backwards from the last possible position instead.
"""

import logging

from .ByteCursor import ByteCursor
from .errors import ZipStructureNotFoundError
from .records import END_OF_CENTRAL_DIRECTORY_SIGNATURE, END_OF_CENTRAL_DIRECTORY_SIZE


LOG = logging.getLogger(__name__)

MAX_COMMENT_SEARCH = 1 << 16

_SIGNATURE_BYTES = END_OF_CENTRAL_DIRECTORY_SIGNATURE.to_bytes(4, byteorder='little')


def locate_end_of_central_directory(cursor: ByteCursor) -> int:
    """
    Finds the offset of the end of central directory record and leaves the cursor positioned there.

    A candidate is only accepted if its declared comment length exactly covers the rest of the data. This rules out
    signature bytes that happen to appear inside the comment itself.

    Raises:
        ZipStructureNotFoundError: If no valid record exists within the maximum comment distance from the end.
    """
    total_size = cursor.length()
    last_candidate = total_size - END_OF_CENTRAL_DIRECTORY_SIZE
    min_position = max(0, total_size - MAX_COMMENT_SEARCH - END_OF_CENTRAL_DIRECTORY_SIZE)

    if last_candidate < 0:
        raise ZipStructureNotFoundError(total_size)

    tail = cursor.seek(min_position).read(total_size - min_position, 'archive tail')

    end = last_candidate - min_position + len(_SIGNATURE_BYTES)
    while True:
        index = tail.rfind(_SIGNATURE_BYTES, 0, end)
        if index == -1:
            raise ZipStructureNotFoundError(total_size)

        position = min_position + index
        comment_length = int.from_bytes(tail[index + 20:index + 22], byteorder='little')

        if position + END_OF_CENTRAL_DIRECTORY_SIZE + comment_length == total_size:
            break

        LOG.debug("Rejected end of central directory candidate at %d (comment length %d)", position, comment_length)
        end = index + len(_SIGNATURE_BYTES) - 1

    LOG.debug("Found end of central directory record at %d", position)

    cursor.seek(position)
    return position
