"""Unit tests for schedule_engine/preprocessor.py"""
import os
import tempfile
import unittest

import numpy as np
from PIL import Image

from schedule_engine.errors import ExtractionError, ValidationError
from schedule_engine.preprocessor import DocumentPreprocessor


class TestDocumentPreprocessor(unittest.TestCase):
    """Test page counting and rendering of image documents."""

    def setUp(self):
        self.directory = tempfile.TemporaryDirectory()
        self.addCleanup(self.directory.cleanup)
        self.preprocessor = DocumentPreprocessor(enhance=False)

    def path(self, name):
        return os.path.join(self.directory.name, name)

    def test_single_image(self):
        path = self.path("poster.png")
        Image.new('RGB', (40, 30), (255, 0, 0)).save(path)

        self.assertEqual(self.preprocessor.page_count(path), 1)
        image = self.preprocessor.render_page(path, 1)
        self.assertEqual(image.shape, (30, 40, 3))
        # BGR channel order
        self.assertEqual(image[0, 0].tolist(), [0, 0, 255])

    def test_multi_page_tiff(self):
        path = self.path("week.tiff")
        first = Image.new('RGB', (20, 20), (255, 0, 0))
        second = Image.new('RGB', (20, 20), (0, 0, 255))
        first.save(path, save_all=True, append_images=[second])

        self.assertEqual(self.preprocessor.page_count(path), 2)
        second_page = self.preprocessor.render_page(path, 2)
        self.assertEqual(second_page[0, 0].tolist(), [255, 0, 0])

    def test_enhanced_render_keeps_shape(self):
        path = self.path("poster.jpg")
        Image.new('RGB', (32, 32), (200, 200, 200)).save(path)
        image = DocumentPreprocessor().render_page(path, 1)
        self.assertEqual(image.shape, (32, 32, 3))

    def test_unsupported_format(self):
        with self.assertRaises(ValidationError):
            self.preprocessor.page_count(self.path("schedule.docx"))

    def test_unreadable_image(self):
        path = self.path("broken.png")
        with open(path, 'wb') as f:
            f.write(b"not an image")
        with self.assertRaises(ExtractionError):
            self.preprocessor.render_page(path, 1)

    def test_resize_for_ocr(self):
        large = np.zeros((4000, 2000, 3), dtype=np.uint8)
        self.assertEqual(DocumentPreprocessor.resize_for_ocr(large).shape, (3000, 1500, 3))
        small = np.zeros((100, 100, 3), dtype=np.uint8)
        self.assertIs(DocumentPreprocessor.resize_for_ocr(small), small)


if __name__ == "__main__":
    unittest.main()
