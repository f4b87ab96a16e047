MAGIC = b'\x1F\x8B'
"""bytes: Magic bytes identifying BGZF block"""

MAX_BLOCK_SIZE = 2 ** 16
"""int: Largest total on disk size of a BGZF block. The BSIZE subfield stores the size minus one in two bytes."""

EMPTY_BLOCK = b'\x1f\x8b\x08\x04\x00\x00\x00\x00\x00\xff\x06\x00\x42\x43\x02\x00\x1b\x00\x03\x00\x00\x00\x00\x00\x00\x00\x00\x00'
"""bytes: This is the byte data representing an empty block. This is used as an EOF marker at the end of BGZF compressed files."""

SIZEOF_EMPTY_BLOCK = len(EMPTY_BLOCK)
"""int: Number of bytes that the empty block occupies."""


def is_bgzf(buffer, offset=0):
    """
    Helper to determine if passed buffer contains a BGZF block.
    Checks the gzip magic, the FEXTRA flag and a leading BC subfield of length 2, as written by bgzip and htslib.
    :param buffer: Buffer containing unknown data.
    :param offset: Offset into buffer to being reading.
    :return: True if offset points to beginning of a BGZF block, False otherwise.
    """
    header = bytes(buffer[offset:offset + 16])
    return len(header) == 16 and header[:2] == MAGIC and bool(header[3] & 0x04) and header[12:16] == b'BC\x02\x00'


class InvalidBGZF(ValueError):
    """
    Exception to indicate invalid or unexpected data was read while trying to parse BGZF data.
    """
    pass


class CorruptBlock(InvalidBGZF):
    """
    Block framing is inconsistent or the payload does not inflate to the declared size.
    """
    pass


class ChecksumMismatch(InvalidBGZF):
    """
    The CRC32 of the inflated data does not match the value stored in the block trailer.
    """

    def __init__(self, offset, expected, actual):
        super().__init__("CRC32 mismatch in block at {}: expected {:#010x}, got {:#010x}".format(offset, expected, actual))
        self.offset = offset
        self.expected = expected
        self.actual = actual


class UnexpectedTerminator(InvalidBGZF, EOFError):
    """
    The data source ended part way through a block.
    """
    pass


class OutOfRange(IndexError):
    """
    Seek target lies outside of the uncompressed stream.
    """

    def __init__(self, position, length=None):
        if length is None:
            super().__init__("Position {} is outside of the uncompressed stream".format(position))
        else:
            super().__init__("Position {} is outside of the uncompressed stream of length {}".format(position, length))
        self.position = position
        self.length = length


class TruncatedFileWarning(UserWarning):
    """
    Warning to indicate the empty BGZF block marking EOF is missing and the data is possibly truncated.
    """
    pass
