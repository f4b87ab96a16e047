"""
Positioned byte sources.

Every read names an explicit offset, so scanning blocks never disturbs a file position that the caller relies on.
"""

import io
import mmap
import os
import threading


class _Source:
    """
    Base class for byte sources.
    """

    def pread(self, offset: int, size: int) -> bytes:
        """
        Read up to size bytes starting at offset.
        :param offset: Absolute offset into the source.
        :param size: Number of bytes wanted.
        :return: The bytes read. Shorter than size only at the end of the source.
        """
        raise NotImplementedError()

    def close(self):
        pass


class BufferSource(_Source):
    """
    Implements _Source over any object supporting the buffer protocol (bytes, bytearray, mmap, memoryview).
    """

    def __init__(self, buffer):
        self._buffer = memoryview(buffer).cast('B')

    def __len__(self):
        return len(self._buffer)

    def pread(self, offset, size):
        return bytes(self._buffer[offset:offset + size])

    def close(self):
        self._buffer.release()


class FileSource(_Source):
    """
    Implements _Source over a file descriptor using os.pread().
    """

    def __init__(self, file, owned=False):
        """
        Constructor.
        :param file: Binary file object backed by a real file descriptor.
        :param owned: Close the file object when the source is closed.
        """
        self._file = file
        self._fd = file.fileno()
        self._owned = owned

    def pread(self, offset, size):
        chunks = []
        while size > 0:
            chunk = os.pread(self._fd, size, offset)
            if not chunk:
                break
            chunks.append(chunk)
            offset += len(chunk)
            size -= len(chunk)
        return b''.join(chunks)

    def close(self):
        if self._owned:
            self._file.close()


class StreamSource(_Source):
    """
    Implements _Source over a seekable stream that has no usable file descriptor.
    The stream position is restored after every read.
    """

    def __init__(self, stream, owned=False):
        self._stream = stream
        self._owned = owned
        self._lock = threading.Lock()

    def pread(self, offset, size):
        with self._lock:
            stream = self._stream
            previous = stream.tell()
            try:
                stream.seek(offset)
                chunks = []
                while size > 0:
                    chunk = stream.read(size)
                    if not chunk:
                        break
                    chunks.append(chunk)
                    size -= len(chunk)
                return b''.join(chunks)
            finally:
                stream.seek(previous)

    def close(self):
        if self._owned:
            self._stream.close()


def _has_fileno(stream):
    try:
        stream.fileno()
    except (AttributeError, OSError, io.UnsupportedOperation):
        return False
    return True


def Source(input, owned=False) -> _Source:
    """
    Factory to provide a unified positioned read interface.
    Resolves if input is a file, a stream, or a buffer and provides the appropriate _Source implementation.
    :param input: A binary file object, seekable stream, or buffer object.
    :param owned: If input is a stream, close it together with the source. Ignored for buffers.
    :return: An instance of FileSource, StreamSource or BufferSource.
    """
    if isinstance(input, _Source):
        return input
    if isinstance(input, (bytes, bytearray, memoryview, mmap.mmap)):
        return BufferSource(input)
    if isinstance(input, (io.RawIOBase, io.BufferedIOBase)) or hasattr(input, 'read'):
        if hasattr(os, 'pread') and _has_fileno(input):
            return FileSource(input, owned)
        if not input.seekable():
            raise io.UnsupportedOperation("BGZF random access requires a seekable input.")
        return StreamSource(input, owned)
    return BufferSource(input)
