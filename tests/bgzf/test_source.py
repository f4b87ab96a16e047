import io
import os
import tempfile
from unittest import TestCase

from bgzfseek.source import BufferSource, FileSource, Source, StreamSource

DATA = bytes(range(256))


class TestSource(TestCase):
    def test_buffer_source(self):
        source = Source(bytearray(DATA))
        self.assertIsInstance(source, BufferSource)
        self.assertEqual(source.pread(10, 5), DATA[10:15])
        self.assertEqual(source.pread(250, 10), DATA[250:])
        self.assertEqual(source.pread(300, 10), b'')

    def test_stream_source_restores_position(self):
        stream = io.BytesIO(DATA)
        stream.seek(7)
        source = Source(stream)
        self.assertIsInstance(source, StreamSource)
        self.assertEqual(source.pread(100, 3), DATA[100:103])
        self.assertEqual(stream.tell(), 7)
        self.assertEqual(source.pread(254, 10), DATA[254:])

    def test_file_source(self):
        if not hasattr(os, 'pread'):
            self.skipTest("os.pread not available")
        with tempfile.TemporaryDirectory() as directory:
            path = os.path.join(directory, 'data')
            with open(path, 'wb') as file:
                file.write(DATA)
            with open(path, 'rb') as file:
                file.seek(42)
                source = Source(file)
                self.assertIsInstance(source, FileSource)
                self.assertEqual(source.pread(0, 4), DATA[:4])
                self.assertEqual(source.pread(255, 4), DATA[255:])
                self.assertEqual(file.tell(), 42)
                source.close()
                self.assertFalse(file.closed)

    def test_owned_stream_closed(self):
        stream = io.BytesIO(DATA)
        Source(stream, owned=True).close()
        self.assertTrue(stream.closed)
