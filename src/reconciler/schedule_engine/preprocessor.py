"""Page rendering and image cleanup for OCR."""

from pathlib import Path
from typing import Union

import cv2
import numpy as np
from PIL import Image

from .errors import ExtractionError, ValidationError

IMAGE_FORMATS = {'.png', '.jpg', '.jpeg', '.bmp', '.tiff', '.tif'}


class DocumentPreprocessor:
    """Renders PDF pages and image files to OCR-ready BGR arrays."""

    def __init__(self, dpi: int = 300, enhance: bool = True):
        """
        Initialize the document preprocessor.

        Args:
            dpi: PDF render resolution
            enhance: Apply denoising and contrast enhancement
        """
        self.dpi = dpi
        self.enhance = enhance

    def page_count(self, file_path: Union[str, Path]) -> int:
        """
        Number of pages in a document (1 for an image).

        Raises:
            ValidationError: If the file format is not supported
        """
        file_path = Path(file_path)
        extension = file_path.suffix.lower()

        if extension in IMAGE_FORMATS:
            # multi-page TIFFs carry one frame per page
            with Image.open(file_path) as image:
                return getattr(image, 'n_frames', 1)
        if extension == '.pdf':
            from pdf2image import pdfinfo_from_path

            return int(pdfinfo_from_path(str(file_path))['Pages'])
        raise ValidationError(f"Unsupported file format: {extension}")

    def render_page(self, file_path: Union[str, Path], page_number: int) -> np.ndarray:
        """
        Render one page.

        Args:
            file_path: PDF or image path
            page_number: 1-based page number

        Returns:
            Image as numpy array (BGR)

        Raises:
            ExtractionError: If the page cannot be rendered
        """
        file_path = Path(file_path)

        if file_path.suffix.lower() in IMAGE_FORMATS:
            image = self._load_image_frame(file_path, page_number)
        else:
            image = self._render_pdf_page(file_path, page_number)

        image = self.resize_for_ocr(image)
        return self._preprocess_image(image) if self.enhance else image

    def _load_image_frame(self, file_path: Path, page_number: int) -> np.ndarray:
        try:
            with Image.open(file_path) as image:
                image.seek(page_number - 1)
                rgb = np.array(image.convert('RGB'))
        except (OSError, EOFError) as e:
            raise ExtractionError(f"Failed to load image {file_path}: {e}") from e
        return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)

    def _render_pdf_page(self, file_path: Path, page_number: int) -> np.ndarray:
        from pdf2image import convert_from_path

        images = convert_from_path(
            str(file_path),
            dpi=self.dpi,
            fmt='RGB',
            first_page=page_number,
            last_page=page_number,
        )
        if not images:
            raise ExtractionError(f"Page {page_number} of {file_path} rendered empty")

        # PIL (RGB) -> OpenCV (BGR), which PaddleOCR expects
        return cv2.cvtColor(np.array(images[0]), cv2.COLOR_RGB2BGR)

    def _preprocess_image(self, image: np.ndarray) -> np.ndarray:
        """
        Apply preprocessing to improve OCR accuracy.

        Args:
            image: Input image as numpy array (BGR format from OpenCV)

        Returns:
            Preprocessed image (BGR format)
        """
        denoised = cv2.fastNlMeansDenoisingColored(image, None, 10, 10, 7, 21)

        # Poster text is often light-on-dark; CLAHE on the L channel lifts it
        lab = cv2.cvtColor(denoised, cv2.COLOR_BGR2LAB)
        l, a, b = cv2.split(lab)
        clahe = cv2.createCLAHE(clipLimit=3.0, tileGridSize=(8, 8))
        l = clahe.apply(l)
        enhanced = cv2.merge([l, a, b])
        return cv2.cvtColor(enhanced, cv2.COLOR_LAB2BGR)

    @staticmethod
    def resize_for_ocr(image: np.ndarray, max_dimension: int = 3000) -> np.ndarray:
        """
        Resize image if too large, maintaining aspect ratio.

        Args:
            image: Input image
            max_dimension: Maximum width or height

        Returns:
            Resized image
        """
        h, w = image.shape[:2]

        if max(h, w) > max_dimension:
            scale = max_dimension / max(h, w)
            return cv2.resize(image, (int(w * scale), int(h * scale)),
                              interpolation=cv2.INTER_LANCZOS4)

        return image
