from unittest import TestCase

from bgzfseek import Block, ChecksumMismatch, CorruptBlock, EMPTY_BLOCK, UnexpectedTerminator, is_bgzf
from bgzfseek.source import BufferSource

from .data import BLOCK_VALID, TEST_TEXT, make_block


def load(data, offset=0):
    return Block.from_source(BufferSource(data), offset)


class TestBlock(TestCase):
    def test_from_source(self):
        # Empty Block
        block = load(EMPTY_BLOCK)
        self.assertEqual(block.data_size, 2, "EMPTY: CDATA expected to be length 2")
        self.assertEqual(block.size, 28, "EMPTY: Incorrect block size")
        self.assertTrue(block.is_terminator)

        # Valid block w. data
        block = load(BLOCK_VALID)
        self.assertEqual(block.size, len(BLOCK_VALID), "VALID: Incorrect block size")
        self.assertEqual(block.uncompressed_size, 7)
        self.assertEqual(block.next_offset, len(BLOCK_VALID))
        self.assertFalse(block.is_terminator)

    def test_from_source_offset(self):
        data = BLOCK_VALID + EMPTY_BLOCK
        block = load(data, len(BLOCK_VALID))
        self.assertEqual(block.offset, len(BLOCK_VALID))
        self.assertTrue(block.is_terminator)
        self.assertEqual(block.next_offset, len(data))
        self.assertIsNone(load(data, len(data)))

    def test_extra_subfields(self):
        data = make_block(b'test123', extra=b'XY\x03\x00abc')
        block = load(data)
        self.assertEqual(block.size, len(data))
        self.assertEqual(block.extra_length, 13)
        self.assertEqual(block.extra_fields[b'XY'], b'abc')
        self.assertEqual(bytes(block.decode(BufferSource(data)).data), b'test123')

    def test_invalid_magic(self):
        data = bytearray(BLOCK_VALID)
        data[1] = 0x8c
        with self.assertRaises(CorruptBlock):
            load(data)

    def test_unsupported_flags(self):
        data = bytearray(BLOCK_VALID)
        data[3] |= 0x08  # FNAME
        with self.assertRaises(CorruptBlock):
            load(data)

    def test_missing_bsize(self):
        data = bytearray(BLOCK_VALID)
        data[12:14] = b'XX'
        with self.assertRaises(CorruptBlock):
            load(data)

    def test_impossible_bsize(self):
        data = bytearray(BLOCK_VALID)
        data[16:18] = (10).to_bytes(2, 'little')
        with self.assertRaises(CorruptBlock):
            load(data)

    def test_truncated(self):
        with self.assertRaises(UnexpectedTerminator):
            load(BLOCK_VALID[:5])
        with self.assertRaises(UnexpectedTerminator):
            load(BLOCK_VALID[:14])
        with self.assertRaises(UnexpectedTerminator):
            load(BLOCK_VALID[:-3])

    def test_decode(self):
        block = load(BLOCK_VALID)
        decoded = block.decode(BufferSource(BLOCK_VALID))
        self.assertEqual(bytes(decoded.data), b'test123')
        self.assertEqual(len(decoded), 7)
        self.assertEqual(decoded.crc32, block.crc32)
        self.assertTrue(decoded.data.readonly)

        self.assertEqual(len(load(EMPTY_BLOCK).decode(BufferSource(EMPTY_BLOCK))), 0)

    def test_decode_flipped_payload(self):
        original = make_block(TEST_TEXT)
        for position in range(18, len(original) - 8, 5):
            data = bytearray(original)
            data[position] ^= 0xFF
            block = load(data)
            with self.assertRaises((CorruptBlock, ChecksumMismatch)):
                block.decode(BufferSource(data))

    def test_decode_checksum_mismatch(self):
        data = bytearray(BLOCK_VALID)
        data[-8:-4] = bytes(4)
        with self.assertRaises(ChecksumMismatch) as context:
            load(data).decode(BufferSource(data))
        self.assertEqual(context.exception.expected, 0)
        self.assertEqual(context.exception.offset, 0)

    def test_decode_size_mismatch(self):
        for size in (6, 8):
            data = bytearray(BLOCK_VALID)
            data[-4:] = size.to_bytes(4, 'little')
            with self.assertRaises(CorruptBlock):
                load(data).decode(BufferSource(data))

    def test_is_bgzf(self):
        self.assertTrue(is_bgzf(EMPTY_BLOCK))
        self.assertTrue(is_bgzf(BLOCK_VALID))
        self.assertTrue(is_bgzf(b'JUNK' + BLOCK_VALID, 4))
        self.assertFalse(is_bgzf(BLOCK_VALID, 1))
        self.assertFalse(is_bgzf(BLOCK_VALID[:10]))

        # Plain gzip member without the BC subfield
        data = bytearray(BLOCK_VALID)
        data[12:14] = b'XX'
        self.assertFalse(is_bgzf(data))
        data = bytearray(BLOCK_VALID)
        data[3] = 0
        self.assertFalse(is_bgzf(data))
