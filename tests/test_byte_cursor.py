import unittest
import zlib

from atmfjstc.lib.zip_reader.ByteWindow import ByteWindow
from atmfjstc.lib.zip_reader.ByteCursor import ByteCursor
from atmfjstc.lib.zip_reader.errors import ZipOutOfRangeError, ZipUnsupportedCompressionError


def _deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(9, zlib.DEFLATED, -zlib.MAX_WBITS)

    return compressor.compress(data) + compressor.flush()


class ByteCursorTest(unittest.TestCase):
    def _cursor(self, data: bytes, **kwargs) -> ByteCursor:
        return ByteCursor(ByteWindow(data), **kwargs)

    def test_read_advances(self):
        cursor = self._cursor(b'abcdef')

        self.assertEqual(cursor.read(2), b'ab')
        self.assertEqual(cursor.position(), 2)
        self.assertEqual(cursor.read(3), b'cde')
        self.assertEqual(cursor.position(), 5)

    def test_little_endian(self):
        self.assertEqual(self._cursor(b'\x50\x4b\x05\x06').read_integer(4), 0x06054b50)

    def test_big_endian(self):
        self.assertEqual(self._cursor(b'\x12\x34\x56').read_integer(3, big_endian=True), 0x123456)

    def test_single_byte(self):
        self.assertEqual(self._cursor(b'\xff').read_integer(1), 255)

    def test_eight_bytes(self):
        self.assertEqual(self._cursor(b'\x01' + b'\x00' * 6 + b'\x80').read_integer(8), (1 << 63) | 1)

    def test_zero_length_int(self):
        with self.assertRaises(ValueError):
            self._cursor(b'ab').read_integer(0)

    def test_seek_past_end_is_lazy(self):
        cursor = self._cursor(b'abc')

        cursor.seek(100)
        self.assertEqual(cursor.position(), 100)

        with self.assertRaises(ZipOutOfRangeError):
            cursor.read(1)

    def test_read_past_end(self):
        cursor = self._cursor(b'abc').seek(2)

        with self.assertRaises(ZipOutOfRangeError):
            cursor.read_integer(2)

    def test_read_string(self):
        self.assertEqual(self._cursor('héllo'.encode('utf-8')).read_string(6), 'héllo')

    def test_read_string_charset(self):
        self.assertEqual(self._cursor(b'\x82').read_string(1, 'cp437'), 'é')

    def test_read_struct(self):
        cursor = self._cursor(b'\x01\x00\x02\x00\x00\x00')

        self.assertEqual(cursor.read_struct('HI'), (1, 2))
        self.assertEqual(cursor.position(), 6)

    def test_read_struct_past_end(self):
        cursor = self._cursor(b'\x01\x00\x02\x00').seek(1)

        with self.assertRaises(ZipOutOfRangeError) as ctx:
            cursor.read_struct('HI', 'test header')

        self.assertEqual(ctx.exception.position, 1)
        self.assertEqual(ctx.exception.length, 6)
        self.assertEqual(ctx.exception.total_size, 4)
        self.assertEqual(ctx.exception.meaning, 'test header')
        self.assertEqual(cursor.position(), 1)

    def test_read_struct_at_end(self):
        with self.assertRaises(ZipOutOfRangeError):
            self._cursor(b'ab').seek(2).read_struct('H')

    def test_read_struct_explicit_byte_order(self):
        self.assertEqual(self._cursor(b'\x00\x01').read_struct('>H'), (1,))

    def test_read_integer_past_end_keeps_position(self):
        cursor = self._cursor(b'abc').seek(1)

        with self.assertRaises(ZipOutOfRangeError) as ctx:
            cursor.read_integer(4, meaning='signature')

        self.assertEqual(ctx.exception.meaning, 'signature')
        self.assertEqual(cursor.position(), 1)

    def test_read_integer_at_negative_position(self):
        with self.assertRaises(ZipOutOfRangeError):
            self._cursor(b'abcd').seek(-2).read_integer(2)

    def test_forks_read_ints_independently(self):
        cursor = self._cursor(b'\x01\x02\x03\x04')
        fork = cursor.fork(2)

        self.assertEqual(cursor.read_integer(1), 1)
        self.assertEqual(fork.read_integer(1), 3)
        self.assertEqual(cursor.read_integer(1), 2)
        self.assertEqual(fork.read_integer(1), 4)

    def test_read_stored(self):
        cursor = self._cursor(b'xxhello')

        self.assertEqual(cursor.seek(2).read_uncompressed(5, 0), b'hello')

    def test_read_deflated(self):
        original = b'hello hello hello hello'
        compressed = _deflate(original)

        self.assertEqual(self._cursor(compressed).read_uncompressed(len(compressed), 8), original)

    def test_unsupported_method(self):
        with self.assertRaises(ZipUnsupportedCompressionError) as ctx:
            self._cursor(b'abc').read_uncompressed(3, 12)

        self.assertEqual(ctx.exception.method, 12)

    def test_custom_inflate(self):
        calls = []

        def fake_inflate(data):
            calls.append(data)
            return b'inflated'

        cursor = self._cursor(b'abc', inflate=fake_inflate)

        self.assertEqual(cursor.read_uncompressed(3, 8), b'inflated')
        self.assertEqual(calls, [b'abc'])

    def test_stored_bypasses_inflate(self):
        def fail_inflate(data):
            raise AssertionError("Should not be called")

        self.assertEqual(self._cursor(b'abc', inflate=fail_inflate).read_uncompressed(3, 0), b'abc')

    def test_fork_is_independent(self):
        cursor = self._cursor(b'abcdef')
        cursor.read(2)

        fork = cursor.fork()
        self.assertEqual(fork.read(2), b'cd')
        self.assertEqual(cursor.position(), 2)

        self.assertEqual(cursor.fork(5).read(1), b'f')
        self.assertIs(fork.window, cursor.window)
