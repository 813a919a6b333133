import unittest
from io import BytesIO

import numpy as np
from PIL import Image

from copypose.frame_source import PushedFrameSource


def jpeg_bytes(w=32, h=24, color=(200, 10, 10)):
	buf = BytesIO()
	Image.new("RGB", (w, h), color).save(buf, format="JPEG")
	return buf.getvalue()


class TestPushedFrameSource(unittest.TestCase):
	def test_empty_until_pushed(self):
		src = PushedFrameSource()
		self.assertIsNone(src.latest())
		self.assertEqual(src.get_status()["frames"], 0)

	def test_push_jpeg_decodes_rgb(self):
		src = PushedFrameSource()
		frame = src.push_jpeg(jpeg_bytes())
		self.assertEqual(frame.seq, 1)
		self.assertEqual(frame.rgb.shape, (24, 32, 3))
		self.assertEqual(frame.rgb.dtype, np.uint8)
		self.assertIs(src.latest(), frame)
		st = src.get_status()
		self.assertEqual((st["width"], st["height"]), (32, 24))

	def test_latest_wins(self):
		src = PushedFrameSource()
		src.push_jpeg(jpeg_bytes())
		second = src.push_jpeg(jpeg_bytes(color=(0, 0, 255)))
		self.assertEqual(src.latest().seq, 2)
		self.assertIs(src.latest(), second)

	def test_garbage_rejected(self):
		src = PushedFrameSource()
		with self.assertRaises(ValueError):
			src.push_jpeg(b"not an image")
		with self.assertRaises(ValueError):
			src.push_jpeg(b"")
		self.assertEqual(src.get_status()["rejected"], 2)
		self.assertIsNone(src.latest())

	def test_oversized_image_rejected(self):
		# 32x24 = 768 pixels, more than twice the limit, so Pillow refuses to open it.
		self.addCleanup(setattr, Image, "MAX_IMAGE_PIXELS", Image.MAX_IMAGE_PIXELS)
		Image.MAX_IMAGE_PIXELS = 100
		src = PushedFrameSource()
		with self.assertRaises(ValueError):
			src.push_jpeg(jpeg_bytes())
		self.assertEqual(src.get_status()["rejected"], 1)
		self.assertIsNone(src.latest())


if __name__ == "__main__":
	unittest.main(verbosity=2)
