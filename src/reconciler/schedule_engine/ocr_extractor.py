"""OCR extraction using PaddleOCR."""

from typing import Any, List, Optional, Sequence

import numpy as np

from .errors import ExtractionError
from .logging import get_logger
from .models import PagePayload, PositionedFragment

log = get_logger(__name__)


def _bbox_from(poly: Any) -> Optional[List[List[float]]]:
    """Four-point box from a polygon or an (x1, y1, x2, y2) rectangle."""
    try:
        points = [[float(p[0]), float(p[1])] for p in poly]
        if len(points) >= 4:
            return points
    except (TypeError, IndexError):
        pass
    try:
        x1, y1, x2, y2 = map(float, poly)
    except (TypeError, ValueError):
        return None
    return [[x1, y1], [x2, y1], [x2, y2], [x1, y2]]


def _fragment(text: Any, bbox: Optional[Sequence[Sequence[float]]]) -> Optional[PositionedFragment]:
    text = str(text or '').strip()
    if not text:
        return None
    if not bbox:
        return PositionedFragment(text=text, x=0.0, y=0.0)

    xs = [p[0] for p in bbox]
    ys = [p[1] for p in bbox]
    # x is the left edge (columns align on it), y the vertical center
    return PositionedFragment(
        text=text,
        x=min(xs),
        y=sum(ys) / len(ys),
        width=max(xs) - min(xs),
        height=max(ys) - min(ys),
    )


class OCRExtractor:
    """Turns rendered pages into positioned text fragments with PaddleOCR."""

    def __init__(self, use_gpu: bool = False, lang: str = 'en'):
        """
        Initialize OCR extractor.

        Args:
            use_gpu: Whether to use GPU acceleration (requires paddlepaddle-gpu)
            lang: Language code for OCR (default: 'en')
        """
        from paddleocr import PaddleOCR

        self.use_gpu = use_gpu
        self.ocr = PaddleOCR(
            use_angle_cls=True,  # rotated poster text
            lang=lang,
            use_gpu=use_gpu,
            det_db_box_thresh=0.3,  # faint text on coloured backgrounds
            det_db_unclip_ratio=2.0,
        )

    def extract_fragments(self, image: np.ndarray) -> List[PositionedFragment]:
        """
        Run OCR on one page image.

        Args:
            image: Input image as numpy array (BGR format from OpenCV)

        Returns:
            Fragments sorted top to bottom, then left to right

        Raises:
            ExtractionError: If the image is unusable or the engine fails
        """
        if not isinstance(image, np.ndarray) or image.size == 0:
            raise ExtractionError(f"Expected a non-empty image array, got {type(image).__name__}")

        try:
            result = self.ocr.ocr(image)
        except Exception as e:
            raise ExtractionError(f"OCR engine failed: {e}") from e

        return self.parse_result(result)

    @staticmethod
    def parse_result(result: Any) -> List[PositionedFragment]:
        """
        Convert raw PaddleOCR output into fragments.

        PaddleOCR has had API changes: older versions return a list of
        (bbox, (text, confidence)) pairs per page, newer pipelines return a
        dict per page with 'rec_texts' and 'rec_polys' or 'rec_boxes'.
        Both are handled.
        """
        if not result:
            return []

        first = result[0]
        fragments: List[PositionedFragment] = []

        if isinstance(first, dict) and 'rec_texts' in first:
            texts = first.get('rec_texts') or []
            polys = first.get('rec_polys')
            if polys is None:
                polys = first.get('rec_boxes')

            for index, text in enumerate(texts):
                bbox = _bbox_from(polys[index]) if polys is not None and index < len(polys) else None
                fragment = _fragment(text, bbox)
                if fragment:
                    fragments.append(fragment)
        else:
            lines = first if isinstance(first, list) else result
            for line in lines or []:
                try:
                    bbox, text_info = line[0], line[1]
                    text = text_info[0]
                except (IndexError, TypeError) as e:
                    log.debug("ocr_line_skipped", error=str(e))
                    continue
                fragment = _fragment(text, _bbox_from(bbox))
                if fragment:
                    fragments.append(fragment)

        fragments.sort(key=lambda f: (f.y, f.x))
        return fragments

    def recognize(self, image: np.ndarray) -> PagePayload:
        """
        Page payload for the parser: positioned fragments when the engine
        reported boxes, otherwise the recognized text one fragment per line.
        """
        fragments = self.extract_fragments(image)
        if fragments and all(f.width == 0 and f.height == 0 for f in fragments):
            return '\n'.join(f.text for f in fragments)
        return fragments
