"""
Binary codec for the user state record.

Layout of a stored record:

    [L: u32 LE][body: L bytes]
    body = [online: u8][count: u32 LE]{count x [key: string][value: string]}
    string = [len: u32 LE][utf-8 bytes]

Entries are sorted by key bytes, the way Borsh serializes a HashMap. The
value channel is written as an empty string and ignored when reading.
"""

import struct
from typing import Optional, Tuple

from copain.domain.entities.user_state import UserState
from copain.domain.exceptions.base import RecordTooLargeError
from copain.domain.value_objects.identity import is_valid_identity

LENGTH_PREFIX_SIZE = 4

# One status byte plus the u32 entry count of the map.
EMPTY_RECORD_THRESHOLD = 5

_U32 = struct.Struct("<I")


class _MalformedRecord(Exception):
    """Internal: body could not be parsed."""


def encode_user_state(state: UserState, capacity: int = 0) -> bytes:
    """
    Encode user state into its length-prefixed record.

    Args:
        state: State to encode
        capacity: Account size in bytes; 0 disables the size check

    Returns:
        Encoded record (length prefix + body)

    Raises:
        RecordTooLargeError: If the record exceeds ``capacity``
    """
    parts = [bytes([1 if state.online else 0])]
    keys = sorted(key.encode("utf-8") for key in state.friends)
    parts.append(_U32.pack(len(keys)))
    for key in keys:
        parts.append(_U32.pack(len(key)))
        parts.append(key)
        parts.append(_U32.pack(0))

    body = b"".join(parts)
    record = _U32.pack(len(body)) + body

    if capacity and len(record) > capacity:
        raise RecordTooLargeError(len(record), capacity)

    return record


def decode_user_state(buf: bytes) -> UserState:
    """
    Decode a stored record.

    Anything that is not a well-formed record decodes to the empty
    default: the account may be freshly allocated (zero-filled) or
    written by an incompatible client.

    Args:
        buf: Raw account data

    Returns:
        Decoded UserState
    """
    state = parse_record(buf)
    return state if state is not None else UserState.empty()


def parse_record(buf: bytes) -> Optional[UserState]:
    """
    Decode a stored record, or return None if it counts as empty.

    A record is empty when it is below the threshold or does not parse.

    Args:
        buf: Raw account data

    Returns:
        Decoded UserState, or None
    """
    body = record_body(buf)
    if body is None:
        return None

    try:
        online, friends = _parse_body(body)
    except _MalformedRecord:
        return None

    return UserState(
        online=online,
        friends=frozenset(f for f in friends if is_valid_identity(f)),
    )


def record_body(buf: bytes) -> Optional[bytes]:
    """
    Extract the record body, or None if the record counts as empty.

    Args:
        buf: Raw account data

    Returns:
        Body bytes, or None below the empty-record threshold
    """
    if buf is None or len(buf) < LENGTH_PREFIX_SIZE:
        return None

    (length,) = _U32.unpack_from(buf, 0)
    if length < EMPTY_RECORD_THRESHOLD:
        return None

    end = LENGTH_PREFIX_SIZE + length
    if len(buf) < end:
        return None

    return bytes(buf[LENGTH_PREFIX_SIZE:end])


def _parse_body(body: bytes) -> Tuple[bool, list]:
    online = body[0] != 0
    offset = 1

    count, offset = _read_u32(body, offset)
    friends = []
    for _ in range(count):
        key, offset = _read_string(body, offset)
        _, offset = _read_string(body, offset)
        friends.append(key)

    if offset != len(body):
        raise _MalformedRecord("trailing bytes after friend map")

    return online, friends


def _read_u32(body: bytes, offset: int) -> Tuple[int, int]:
    if offset + 4 > len(body):
        raise _MalformedRecord("truncated length")
    (value,) = _U32.unpack_from(body, offset)
    return value, offset + 4


def _read_string(body: bytes, offset: int) -> Tuple[str, int]:
    length, offset = _read_u32(body, offset)
    end = offset + length
    if end > len(body):
        raise _MalformedRecord("truncated string")
    try:
        return body[offset:end].decode("utf-8"), end
    except UnicodeDecodeError:
        raise _MalformedRecord("invalid utf-8")
