"""Byte cursor shared by every field while a record is decoded.

The cursor wraps either an in-memory buffer or a caller-supplied binary
stream. Decoding reads from it strictly forward; the only backwards moves are
the peeks used for tagged dispatch, which always restore the position.
"""

from __future__ import annotations

import io
from typing import BinaryIO, Union

from ..exceptions import DecodeError

ByteSource = Union[bytes, bytearray, memoryview, BinaryIO, "ByteCursor"]


class ByteCursor:
    """Reads bytes sequentially from a buffer or a seekable binary stream.

    When built from a stream, the stream itself is the cursor: its position
    advances as fields are decoded, so callers can keep reading whatever
    follows the record.

    Example:
        >>> cursor = ByteCursor(b"\\x00\\x2a\\x00\\x00\\x00\\x15")
        >>> cursor.read(2)
        b'\\x00*'
        >>> cursor.remaining()
        4
    """

    def __init__(self, source: bytes | bytearray | memoryview | BinaryIO) -> None:
        """Initialize a cursor over the given source.

        Args:
            source: Byte buffer, or a binary stream supporting read/tell/seek

        Raises:
            TypeError: If source is neither a buffer nor a readable stream
        """
        if isinstance(source, (bytes, bytearray, memoryview)):
            self._stream: BinaryIO = io.BytesIO(bytes(source))
        elif hasattr(source, "read"):
            self._stream = source
        else:
            raise TypeError(
                f"Cannot decode from {type(source).__name__}; "
                f"expected bytes or a binary stream"
            )

    @classmethod
    def wrap(cls, source: ByteSource) -> ByteCursor:
        """Return source unchanged if it is already a cursor, else wrap it."""
        if isinstance(source, cls):
            return source
        return cls(source)

    def read(self, num_bytes: int) -> bytes:
        """Read exactly num_bytes and advance.

        Args:
            num_bytes: Number of bytes to read

        Returns:
            The bytes read

        Raises:
            DecodeError: If fewer than num_bytes are available
        """
        data = self._stream.read(num_bytes)
        if len(data) != num_bytes:
            raise DecodeError(
                f"Truncated data: need {num_bytes} bytes, got {len(data)}"
            )
        return bytes(data)

    def peek(self, num_bytes: int) -> bytes:
        """Return up to num_bytes without moving the cursor."""
        position = self._stream.tell()
        try:
            return bytes(self._stream.read(num_bytes))
        finally:
            self._stream.seek(position)

    def tell(self) -> int:
        """Return the current byte position."""
        return self._stream.tell()

    def seek(self, position: int) -> None:
        """Move the cursor to an absolute position (e.g. a saved mark)."""
        self._stream.seek(position)

    def remaining(self) -> int:
        """Return the number of bytes between the cursor and the end of the source."""
        position = self._stream.tell()
        end = self._stream.seek(0, io.SEEK_END)
        self._stream.seek(position)
        return end - position

    def at_end(self) -> bool:
        """Return True when no bytes are left to read."""
        return not self.peek(1)
