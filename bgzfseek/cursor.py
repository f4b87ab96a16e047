"""
Maps absolute uncompressed positions onto blocks, keeping exactly one decoded block resident.
"""

import operator
import warnings
from bisect import bisect_right

from .block import Block
from .util import OutOfRange, TruncatedFileWarning


class Empty:
    """No block is cached."""
    __slots__ = ()

    def __contains__(self, position):
        return False

    def __repr__(self):
        return 'Empty()'


EMPTY = Empty()


class Cached:
    """
    A decoded block resident in memory covering uncompressed positions [start, end).
    """
    __slots__ = 'start', 'block'

    def __init__(self, start, block):
        self.start = start
        self.block = block

    @property
    def end(self):
        return self.start + len(self.block)

    def __contains__(self, position):
        return self.start <= position < self.end

    def __repr__(self):
        return 'Cached({}, {})'.format(self.start, self.end)


class Cursor:
    """
    Logical read position over a BGZF source.

    Blocks are discovered strictly in file order by reading their framing, and remembered as
    (compressed offset, uncompressed start) so that seeking backwards never rescans.
    Payloads are only inflated when span() needs data the cache does not hold.
    """

    def __init__(self, source, offset=0):
        """
        Constructor.
        :param source: Positioned byte source, see bgzfseek.source.
        :param offset: Offset into source of the first block.
        """
        self._source = source
        self._offsets = []
        self._starts = []
        self._next_offset = offset
        self._scanned = 0
        self._complete = False
        self.position = 0
        self.state = EMPTY
        self.blocks_decoded = 0
        self.total_in = 0
        self.total_out = 0

    def _discover(self):
        """
        Read the framing of the next undiscovered block.
        """
        block = Block.from_source(self._source, self._next_offset)
        if block is None:
            warnings.warn("Missing EOF marker, data is possibly truncated.", TruncatedFileWarning)
            self._complete = True
        elif block.is_terminator:
            # Empty blocks only end the stream when nothing follows them, as in concatenated files
            if self._source.pread(block.next_offset, 1):
                self._next_offset = block.next_offset
            else:
                self._complete = True
        else:
            self._offsets.append(block.offset)
            self._starts.append(self._scanned)
            self._scanned += block.uncompressed_size
            self._next_offset = block.next_offset

    def _locate(self, position):
        """
        Find the block holding position, scanning forward as needed.
        :return: Index into the block table, or None if position is at or past the end of the stream.
        """
        while position >= self._scanned and not self._complete:
            self._discover()
        if position >= self._scanned:
            return None
        return bisect_right(self._starts, position) - 1

    def total_length(self) -> int:
        """
        Total uncompressed length of the stream. Scans framing up to the terminator.
        """
        while not self._complete:
            self._discover()
        return self._scanned

    def seek(self, position: int):
        """
        Move to an absolute uncompressed position.
        Stays on the cached block if it covers position, otherwise drops it without decoding anything.
        """
        position = operator.index(position)
        if position in self.state:
            self.position = position
            return
        if position < 0:
            raise OutOfRange(position)
        if self._locate(position) is None and position != self._scanned:
            raise OutOfRange(position, self._scanned)
        self.state = EMPTY
        self.position = position

    def span(self) -> memoryview:
        """
        Unread bytes of the block covering the current position, decoding it if it is not cached.
        :return: Read only view, empty at end of stream.
        """
        if self.position not in self.state:
            index = self._locate(self.position)
            if index is None:
                self.state = EMPTY
                return memoryview(b'')
            block = Block.from_source(self._source, self._offsets[index])
            decoded = block.decode(self._source)
            self.blocks_decoded += 1
            self.total_in += block.data_size
            self.total_out += len(decoded)
            self.state = Cached(self._starts[index], decoded)
        state = self.state
        return state.block.data[self.position - state.start:]

    def advance(self, count: int):
        """
        Move forward after consuming count bytes from span().
        """
        self.position += count
        if self.position not in self.state:
            self.state = EMPTY
