"""Unit tests for schedule_engine/ocr_extractor.py"""
import sys
import unittest
from unittest.mock import Mock, patch

import numpy as np

from schedule_engine.errors import ExtractionError
from schedule_engine.ocr_extractor import OCRExtractor


def make_extractor(result=None, error=None):
    # Skip __init__ so PaddleOCR is never loaded
    extractor = object.__new__(OCRExtractor)
    extractor.use_gpu = False
    extractor.ocr = Mock()
    if error:
        extractor.ocr.ocr.side_effect = error
    else:
        extractor.ocr.ocr.return_value = result
    return extractor


IMAGE = np.zeros((20, 20, 3), dtype=np.uint8)


class TestParseResult(unittest.TestCase):
    """Test conversion of PaddleOCR output formats."""

    def test_legacy_format(self):
        result = [[
            [[[10, 60], [110, 60], [110, 80], [10, 80]], ("7:00 AM FIT - Anisha", 0.97)],
            [[[10, 20], [110, 20], [110, 40], [10, 40]], ("MONDAY", 0.99)],
        ]]
        fragments = OCRExtractor.parse_result(result)
        self.assertEqual([f.text for f in fragments], ["MONDAY", "7:00 AM FIT - Anisha"])
        header = fragments[0]
        self.assertEqual((header.x, header.y, header.width, header.height), (10, 30, 100, 20))

    def test_pipeline_format_with_polygons(self):
        result = [{
            'rec_texts': ["TUESDAY", "  "],
            'rec_polys': [
                np.array([[300, 10], [400, 10], [400, 30], [300, 30]]),
                np.array([[0, 0], [1, 0], [1, 1], [0, 1]]),
            ],
        }]
        fragments = OCRExtractor.parse_result(result)
        self.assertEqual(len(fragments), 1)
        self.assertEqual((fragments[0].x, fragments[0].y), (300, 20))

    def test_pipeline_format_with_rectangles(self):
        result = [{'rec_texts': ["FRIDAY"], 'rec_boxes': np.array([[50, 100, 150, 120]])}]
        fragment = OCRExtractor.parse_result(result)[0]
        self.assertEqual((fragment.x, fragment.y, fragment.width), (50, 110, 100))

    def test_malformed_lines_skipped(self):
        result = [[None, [[[0, 0], [5, 0], [5, 5], [0, 5]], ("ok", 0.9)]]]
        self.assertEqual([f.text for f in OCRExtractor.parse_result(result)], ["ok"])

    def test_empty(self):
        self.assertEqual(OCRExtractor.parse_result(None), [])
        self.assertEqual(OCRExtractor.parse_result([]), [])


class TestRecognize(unittest.TestCase):
    """Test page recognition."""

    def test_positioned_fragments(self):
        extractor = make_extractor([[
            [[[10, 20], [110, 20], [110, 40], [10, 40]], ("MONDAY", 0.99)],
        ]])
        payload = extractor.recognize(IMAGE)
        self.assertIsInstance(payload, list)
        self.assertEqual(payload[0].text, "MONDAY")

    def test_text_when_boxes_are_empty(self):
        extractor = make_extractor([{
            'rec_texts': ["MONDAY", "7:00 AM FIT - Anisha"],
            'rec_boxes': [[5, 5, 5, 5], [5, 5, 5, 5]],
        }])
        self.assertEqual(extractor.recognize(IMAGE), "MONDAY\n7:00 AM FIT - Anisha")

    def test_engine_failure(self):
        extractor = make_extractor(error=RuntimeError("model missing"))
        with self.assertRaises(ExtractionError):
            extractor.recognize(IMAGE)

    def test_bad_image(self):
        extractor = make_extractor([])
        with self.assertRaises(ExtractionError):
            extractor.extract_fragments(np.zeros((0, 0, 3), dtype=np.uint8))
        with self.assertRaises(ExtractionError):
            extractor.extract_fragments("page.png")


class TestEngineSetup(unittest.TestCase):
    """Test how the OCR engine is constructed."""

    def _build(self, **kwargs):
        engine_module = Mock()
        with patch.dict(sys.modules, {"paddleocr": engine_module}):
            extractor = OCRExtractor(**kwargs)
        return extractor, engine_module.PaddleOCR.call_args.kwargs

    def test_gpu_flag_forwarded(self):
        extractor, options = self._build(use_gpu=True)
        self.assertTrue(extractor.use_gpu)
        self.assertIs(options["use_gpu"], True)

    def test_cpu_by_default(self):
        _, options = self._build()
        self.assertIs(options["use_gpu"], False)
        self.assertEqual(options["lang"], "en")


if __name__ == "__main__":
    unittest.main()
