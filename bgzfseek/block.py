"""
Parses BGZF block framing and inflates block payloads.
"""

import ctypes as C
from enum import IntFlag

from . import zlib
from .util import MAGIC, MAX_BLOCK_SIZE, ChecksumMismatch, CorruptBlock, UnexpectedTerminator

DEFLATE = 8
BSIZE_ID = b'BC'


# Taken from RFC 1952
class BlockFlags(IntFlag):
    FTEXT = 1 << 0
    FHCRC = 1 << 1
    FEXTRA = 1 << 2
    FNAME = 1 << 3
    FCOMMENT = 1 << 4
    reserved1 = 1 << 5
    reserved2 = 1 << 6
    reserved3 = 1 << 7


# BGZF headers only carry the extra field, anything adding data after it would shift the payload
UNSUPPORTED_FLAGS = BlockFlags.FHCRC | BlockFlags.FNAME | BlockFlags.FCOMMENT


class Header(C.LittleEndianStructure):
    """
    Represents BGZF/GZIP block header.
    """
    _pack_ = 1
    _fields_ = [
        ("id1", C.c_uint8),  # ID1   gzip IDentifier1            uint8 31
        ("id2", C.c_uint8),  # ID2   gzip IDentifier2            uint8 139
        ("compression_method", C.c_uint8),  # CM    gzip Compression Method     uint8 8
        ("flag", C.c_uint8),  # FLG   gzip FLaGs                  uint8 4
        ("modification_time", C.c_uint32),  # MTIME gzip Modification TIME      uint32
        ("extra_flags", C.c_uint8),  # XFL   gzip eXtra FLags            uint8
        ("os", C.c_uint8),  # OS    gzip Operating System       uint8
        ("extra_length", C.c_uint16)  # XLEN  gzip eXtra LENgth           uint16
    ]


SIZEOF_HEADER = C.sizeof(Header)


class SubField(C.LittleEndianStructure):
    """
    Represents a BGZF/GZIP block subfield header.
    """
    _pack_ = 1
    _fields_ = [
        ("SI1", C.c_uint8),  # SI1 Subfield Identifier1        uint8 66
        ("SI2", C.c_uint8),  # SI2 Subfield Identifier2        uint8 67
        ("SLEN", C.c_uint16)  # SLEN Subfield LENgth uint16 t 2
    ]


SIZEOF_SUBFIELD = C.sizeof(SubField)


class Trailer(C.LittleEndianStructure):
    """
    Represents BGZF/GZIP block trailer.
    """
    _pack_ = 1
    _fields_ = [
        ("CRC32", C.c_uint32),  # CRC32 CRC-32                      uint32
        ("uncompressed_size", C.c_uint32)  # ISIZE Input SIZE (length of uncompressed data) uint32
    ]


SIZEOF_TRAILER = C.sizeof(Trailer)


class DecodedBlock:
    """
    Inflated and validated contents of one block.
    """
    __slots__ = 'data', 'crc32'

    def __init__(self, data: memoryview, crc32: int):
        self.data = data
        self.crc32 = crc32

    def __len__(self):
        return len(self.data)


class Block:
    """
    Represents BGZF/GZIP block framing located at a known offset of a source.
    Only the header, extra fields and trailer are held, the compressed payload is read by decode().
    """
    __slots__ = 'offset', '_header', 'extra_fields', 'size', '_trailer'

    def __init__(self, offset: int, header: Header, extra_fields: dict, trailer: Trailer):
        """
        Constructor.
        :param offset: Offset of the first block byte in the source.
        :param header: Header object instance.
        :param extra_fields: Dictionary of extra fields keyed by the two byte identifier.
        :param trailer: Trailer object instance.
        """
        self.offset = offset
        self._header = header
        self.extra_fields = extra_fields
        self.size = Block._getSize(extra_fields, offset)
        self._trailer = trailer

    @property
    def flags(self):
        return BlockFlags(self._header.flag)

    @property
    def extra_length(self):
        return self._header.extra_length

    @property
    def crc32(self):
        return self._trailer.CRC32

    @property
    def uncompressed_size(self):
        return self._trailer.uncompressed_size

    @property
    def is_terminator(self):
        return not self._trailer.uncompressed_size

    @property
    def data_offset(self):
        return self.offset + SIZEOF_HEADER + self._header.extra_length

    @property
    def data_size(self):
        return self.size - SIZEOF_HEADER - self._header.extra_length - SIZEOF_TRAILER

    @property
    def next_offset(self):
        return self.offset + self.size

    def __len__(self):
        return self.size

    @staticmethod
    def from_source(source, offset=0) -> 'Block':
        """
        Load block framing from a positioned source.
        The compressed payload is not read.
        :param source: Object providing pread(offset, size), see bgzfseek.source.
        :param offset: Offset into source pointing to first block byte.
        :return: Block instance, or None if the source ends exactly at offset.
        """
        header_buffer = source.pread(offset, SIZEOF_HEADER)
        if not header_buffer:
            return None
        if len(header_buffer) < SIZEOF_HEADER:
            raise UnexpectedTerminator("Truncated block header at offset {}.".format(offset))
        header = Header.from_buffer_copy(header_buffer)
        if header_buffer[:2] != MAGIC:
            raise CorruptBlock("Invalid block header found at offset {}: ID1: {} ID2: {}".format(offset, header.id1, header.id2))
        if header.compression_method != DEFLATE:
            raise CorruptBlock("Unknown compression method {} at offset {}.".format(header.compression_method, offset))
        if not header.flag & BlockFlags.FEXTRA or header.flag & UNSUPPORTED_FLAGS:
            raise CorruptBlock("Unexpected gzip flags {!r} at offset {}.".format(BlockFlags(header.flag), offset))

        extra_buffer = source.pread(offset + SIZEOF_HEADER, header.extra_length)
        if len(extra_buffer) < header.extra_length:
            raise UnexpectedTerminator("Truncated extra field in block at offset {}.".format(offset))
        extra_fields = Block._parseExtra(extra_buffer, offset)

        block_size = Block._getSize(extra_fields, offset)
        if block_size < SIZEOF_HEADER + header.extra_length + SIZEOF_TRAILER or block_size > MAX_BLOCK_SIZE:
            raise CorruptBlock("Impossible block size {} at offset {}.".format(block_size, offset))

        trailer_buffer = source.pread(offset + block_size - SIZEOF_TRAILER, SIZEOF_TRAILER)
        if len(trailer_buffer) < SIZEOF_TRAILER:
            raise UnexpectedTerminator("Truncated block at offset {}, expected {} bytes.".format(offset, block_size))
        trailer = Trailer.from_buffer_copy(trailer_buffer)
        if trailer.uncompressed_size > MAX_BLOCK_SIZE:
            raise CorruptBlock("Declared uncompressed size {} of block at offset {} exceeds the BGZF maximum.".format(trailer.uncompressed_size, offset))

        return Block(offset, header, extra_fields, trailer)

    def decode(self, source) -> DecodedBlock:
        """
        Read and inflate the compressed payload, validating its length and CRC32 against the trailer.
        :param source: The source this block was loaded from.
        :return: DecodedBlock holding a read only view of the inflated data.
        """
        if self.is_terminator:
            return DecodedBlock(memoryview(b''), 0)

        data_size = self.data_size
        cdata = bytearray(source.pread(self.data_offset, data_size))
        if len(cdata) < data_size:
            raise UnexpectedTerminator("Truncated payload in block at offset {}.".format(self.offset))
        if not data_size:
            raise CorruptBlock("Block at offset {} declares {} bytes but has no payload.".format(self.offset, self.uncompressed_size))

        data = bytearray(self.uncompressed_size)
        res, state = zlib.raw_decompress((C.c_ubyte * data_size).from_buffer(cdata), (C.c_ubyte * len(data)).from_buffer(data))
        if res != zlib.Z_STREAM_END or state.total_out != len(data) or state.avail_in:
            raise CorruptBlock("Block at offset {} did not inflate to its declared {} bytes (zlib code {}).".format(self.offset, len(data), res))

        crc = zlib.crc32(data)
        if crc != self.crc32:
            raise ChecksumMismatch(self.offset, self.crc32, crc)
        return DecodedBlock(memoryview(data).toreadonly(), crc)

    @staticmethod
    def _parseExtra(buffer, offset=0) -> dict:
        """
        Parse GZIP formatted extra data fields into dictionary.
        :param buffer: Buffer containing extra field data.
        :param offset: Block offset, used for error reporting.
        :return: Dict containing field values keyed on two byte field identifier.
        """
        extraFields = {}
        fieldOffset = 0
        while fieldOffset < len(buffer):
            if fieldOffset + SIZEOF_SUBFIELD > len(buffer):
                raise CorruptBlock("Truncated extra subfield in block at offset {}.".format(offset))
            field = SubField.from_buffer_copy(buffer, fieldOffset)
            fieldStart = fieldOffset + SIZEOF_SUBFIELD
            if fieldStart + field.SLEN > len(buffer):
                raise CorruptBlock("Extra subfield overruns XLEN in block at offset {}.".format(offset))
            extraFields[bytes((field.SI1, field.SI2))] = bytes(buffer[fieldStart: fieldStart + field.SLEN])
            fieldOffset = fieldStart + field.SLEN
        return extraFields

    @staticmethod
    def _getSize(extra_fields, offset=0) -> int:
        """
        Helper to parse BGZF block size subfield.
        :param extra_fields: Dict returned from _parseExtra().
        :param offset: Block offset, used for error reporting.
        :return: Total size of block.
        """
        # Load BGZF required BC field
        BC = extra_fields.get(BSIZE_ID)
        if BC is None or len(BC) != 2:
            raise CorruptBlock("Missing block size field in block at offset {}.".format(offset))
        return int.from_bytes(BC, byteorder='little', signed=False) + 1
