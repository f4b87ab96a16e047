"""
Random access reading of BGZF compressed data.

A BGZF file is a series of independently compressed gzip blocks. This package seeks to any offset of the
uncompressed stream and reads forward, inflating only the blocks that are actually touched.

Classes:
    Reader: Random access interface to the uncompressed stream.
    Block: Represents the framing of a BGZF/GZIP block.
    DecodedBlock: Inflated and validated contents of a block.
    Cursor: Maps uncompressed positions to blocks and caches the current one.

Functions:
    open: Open a path, file object, or buffer for random access.
    is_bgzf: Test if a buffer begins with a BGZF block.

Exceptions:
    InvalidBGZF: Base class of all format errors.
    CorruptBlock: Block framing is inconsistent or the payload does not inflate to its declared size.
    ChecksumMismatch: Inflated data fails CRC32 validation.
    UnexpectedTerminator: The data ends part way through a block.
    OutOfRange: Seek target is outside of the uncompressed stream.

Warnings:
    TruncatedFileWarning: The empty block marking EOF is missing.

Constants:
    EMPTY_BLOCK bytes: This is the byte data representing an empty block. This is used as an EOF marker at the end of BGZF compressed files.
    MAX_BLOCK_SIZE int: Largest total size of a BGZF block.

Example:
    import bgzfseek

    with bgzfseek.open("data.txt.gz") as reader:
        reader.seek(1000000)
        buffer = bytearray(100)
        count = reader.read_to(buffer)
"""

from .__version import __version__
from .block import Block, DecodedBlock
from .cursor import Cursor
from .reader import Reader, open
from .util import EMPTY_BLOCK, MAX_BLOCK_SIZE, SIZEOF_EMPTY_BLOCK, ChecksumMismatch, CorruptBlock, InvalidBGZF, \
    OutOfRange, TruncatedFileWarning, UnexpectedTerminator, is_bgzf
