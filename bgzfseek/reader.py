"""
Provides a random access interface to the uncompressed contents of BGZF data.
"""

import builtins
import os

from .cursor import Cursor
from .source import Source


class Reader:
    """
    Random access reader over BGZF data.
    Positions are zero based offsets into the uncompressed stream.
    Iterating yields the unread remainder of each block as bytes.
    """

    def __init__(self, input, offset: int = 0, owned: bool = False):
        """
        Constructor.
        :param input: A binary file object, seekable stream, or buffer object containing BGZF data.
        :param offset: Offset into input of the first block.
        :param owned: Close input when the reader is closed.
        """
        self._source = Source(input, owned)
        self._cursor = Cursor(self._source, offset)
        self.closed = False

    @property
    def cursor(self) -> Cursor:
        return self._cursor

    def seek(self, position: int) -> int:
        """
        Move to an uncompressed position. Nothing is decompressed until the next read.
        :param position: Offset into the uncompressed stream, at most total_uncompressed_length().
        :return: The new position.
        """
        self._cursor.seek(position)
        return self._cursor.position

    def tell(self) -> int:
        return self._cursor.position

    def total_uncompressed_length(self) -> int:
        return self._cursor.total_length()

    def read_to(self, buffer, offset: int = 0, length: int = None) -> int:
        """
        Fill buffer with uncompressed data from the current position, crossing block boundaries as needed.
        :param buffer: Writable buffer to receive data.
        :param offset: Offset into buffer to begin writing.
        :param length: Number of bytes to read. Defaults to the remainder of buffer after offset.
        :return: Number of bytes written. Less than length only at end of stream.
        """
        view = memoryview(buffer).cast('B')
        if length is None:
            length = len(view) - offset
        if offset < 0 or length < 0 or offset + length > len(view):
            raise ValueError("Range [{}, {}) is outside of buffer of length {}.".format(offset, offset + length, len(view)))

        cursor = self._cursor
        written = 0
        while written < length:
            span = cursor.span()
            if not span:
                break
            count = min(len(span), length - written)
            start = offset + written
            view[start:start + count] = span[:count]
            cursor.advance(count)
            written += count
        return written

    def read(self, size: int = -1) -> bytes:
        """
        Read up to size bytes, or to the end of stream if size is negative.
        """
        if size is None or size < 0:
            return b''.join(self)
        buffer = bytearray(size)
        written = self.read_to(buffer)
        del buffer[written:]
        return bytes(buffer)

    def close(self):
        if not self.closed:
            self._source.close()
            self.closed = True

    def __iter__(self):
        return self

    def __next__(self) -> bytes:
        span = self._cursor.span()
        if not span:
            raise StopIteration()
        data = bytes(span)
        self._cursor.advance(len(data))
        return data

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()


def open(input, offset: int = 0) -> Reader:
    """
    Open BGZF data for random access.
    :param input: A path, a binary file object, or a buffer object.
    :param offset: Offset into input of the first block.
    :return: Reader instance. Readers opened from a path close their file when closed.
    """
    if isinstance(input, (str, os.PathLike)):
        file = builtins.open(input, 'rb')
        try:
            return Reader(file, offset, owned=True)
        except Exception:
            file.close()
            raise
    return Reader(input, offset)
