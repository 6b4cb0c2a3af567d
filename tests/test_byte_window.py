import unittest

from atmfjstc.lib.zip_reader.ByteWindow import ByteWindow
from atmfjstc.lib.zip_reader.errors import ZipOutOfRangeError


class ByteWindowTest(unittest.TestCase):
    def setUp(self):
        self.window = ByteWindow(b'0123456789')

    def test_length(self):
        self.assertEqual(self.window.length(), 10)

    def test_read(self):
        self.assertEqual(self.window.read(2, 3), b'234')

    def test_read_up_to_end(self):
        self.assertEqual(self.window.read(7, 3), b'789')

    def test_zero_length_read_at_end(self):
        self.assertEqual(self.window.read(10, 0), b'')

    def test_read_past_end(self):
        with self.assertRaises(ZipOutOfRangeError) as ctx:
            self.window.read(8, 3, 'file name')

        self.assertEqual(ctx.exception.position, 8)
        self.assertEqual(ctx.exception.length, 3)
        self.assertEqual(ctx.exception.total_size, 10)
        self.assertIn('file name', str(ctx.exception))

    def test_negative_offset(self):
        with self.assertRaises(ZipOutOfRangeError):
            self.window.read(-1, 2)

    def test_negative_length(self):
        with self.assertRaises(ValueError):
            self.window.read(0, -1)

    def test_accepts_bytearray_and_memoryview(self):
        self.assertEqual(ByteWindow(bytearray(b'abc')).read(0, 3), b'abc')
        self.assertEqual(ByteWindow(memoryview(b'abc')).read(1, 2), b'bc')

    def test_rejects_text(self):
        with self.assertRaises(TypeError):
            ByteWindow('abc')

    def test_copies_mutable_input(self):
        data = bytearray(b'abc')
        window = ByteWindow(data)
        data[0] = ord('x')

        self.assertEqual(window.read(0, 1), b'a')
