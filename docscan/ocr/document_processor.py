"""Unified processing for single images, PDF page ranges and image folders.

Combines image loading, PDF rendering, recognition and result building, and
applies the aggregation policy for each input kind:

- a PDF always yields one page entry per requested page, with empty
  placeholders for pages that failed;
- a folder yields entries only for the images that succeeded;
- an invocation that produced nothing at all raises :class:`NoResultsError`.
"""

import re
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from PIL import Image, UnidentifiedImageError

from docscan.exceptions import (
    ImageLoadError,
    NoResultsError,
    PageRangeError,
    PerItemFailure,
)
from docscan.output.ordering import natural_key
from docscan.utils.config import AppConfig
from docscan.utils.logger import get_logger

from .pdf_handler import PDFHandler
from .result_builder import ResultBuilder
from .results import BatchResult, DocumentResult, Dpi, ImageResult, PageResult
from .tesseract_engine import TesseractEngine

logger = get_logger(__name__)

_RANGE_PATTERN = re.compile(r"^\s*(\d+)\s*-\s*(\d+)\s*$")


@dataclass(frozen=True)
class PageRange:
    """Inclusive, 1-based range of PDF pages."""

    start: int
    end: int

    def __post_init__(self) -> None:
        if self.start < 1:
            raise PageRangeError(f"Page range must start at 1 or later, got {self.start}")
        if self.end < self.start:
            raise PageRangeError(
                f"Page range end {self.end} is before its start {self.start}"
            )

    @classmethod
    def parse(cls, text: str) -> "PageRange":
        """Parse a ``start-end`` string such as ``2-5``."""
        match = _RANGE_PATTERN.match(text)
        if not match:
            raise PageRangeError(
                f"Invalid page range format {text!r}. Use format like '2-5'"
            )
        return cls(int(match.group(1)), int(match.group(2)))

    def clamp(self, page_count: int) -> "PageRange":
        """Restrict the range to the pages a document actually has."""
        end = min(self.end, page_count)
        if self.start > end:
            raise PageRangeError(
                f"Page range {self.start}-{self.end} is outside the document "
                f"({page_count} pages)"
            )
        return PageRange(self.start, end)

    def __iter__(self):
        return iter(range(self.start, self.end + 1))

    def __len__(self) -> int:
        return self.end - self.start + 1


def load_image(path: Path) -> np.ndarray:
    """Load an image file as an RGB numpy array.

    Raises:
        ImageLoadError: If the file is missing or cannot be decoded.
    """
    try:
        with Image.open(path) as img:
            return np.array(img.convert("RGB"))
    except (OSError, UnidentifiedImageError, ValueError) as exc:
        raise ImageLoadError(f"Failed to load or convert image '{path}': {exc}") from exc


def find_images(input_dir: Path, extensions: list[str]) -> list[Path]:
    """Find images in a directory by case-insensitive extension, naturally sorted."""
    allowed = {ext.lower() for ext in extensions}
    files = [
        path
        for path in input_dir.iterdir()
        if path.is_file() and path.suffix.lower() in allowed
    ]
    return sorted(files, key=lambda p: natural_key(p.name))


class DocumentProcessor:
    """End-to-end OCR processing for images, PDFs and folders.

    Args:
        config: Application configuration object.
    """

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        self.pdf_handler = PDFHandler(
            dpi=config.pdf.render_dpi, poppler_path=config.pdf.poppler_path
        )
        self.ocr_engine = TesseractEngine(
            tesseract_cmd=config.ocr.tesseract_cmd,
            psm=config.ocr.psm,
        )
        self.builder = ResultBuilder(
            self.ocr_engine,
            languages=config.ocr.languages,
            group_paragraphs=config.ocr.group_paragraphs,
            confidence_threshold=config.ocr.confidence_threshold,
        )

    def process_image(self, path: Path) -> ImageResult:
        """Run OCR on a single image file.

        Raises:
            NoResultsError: If the image could not be loaded or recognized.
        """
        result = self._try_image(path)
        if result is None:
            raise NoResultsError(f"OCR failed for image: {path}")
        return result

    def process_pdf(
        self, path: Path, page_range: PageRange | None = None
    ) -> DocumentResult:
        """Run OCR over a range of PDF pages.

        Every page in the (clamped) range gets an entry; pages that fail to
        render or recognize are kept as empty placeholders. The DPI comes
        from the first page in range that renders.

        Raises:
            PageRangeError: If the range falls outside the document.
            NoResultsError: If not a single page in range rendered.
        """
        page_count = self.pdf_handler.get_page_count(path)
        if page_count < 1:
            raise NoResultsError(f"PDF has no pages: {path}")
        pages_to_process = (page_range or PageRange(1, page_count)).clamp(page_count)

        grouped = self.config.ocr.group_paragraphs
        mode_text = " (with paragraph grouping)" if grouped else ""
        pages: list[PageResult] = []
        dpi: Dpi | None = None

        for page_number in pages_to_process:
            logger.info(
                "Processing page %d of %d%s...", page_number, page_count, mode_text
            )
            try:
                rendered = self.pdf_handler.render_page(path, page_number)
            except PerItemFailure as exc:
                logger.warning("%s", exc)
                pages.append(PageResult.placeholder(page_number, grouped))
                continue

            if dpi is None:
                dpi = Dpi.from_render(
                    rendered.pixel_width,
                    rendered.pixel_height,
                    rendered.width_pt,
                    rendered.height_pt,
                )

            result = self.builder.build(rendered.image)
            if result is None:
                logger.warning("OCR failed for page %d, keeping empty page", page_number)
                pages.append(
                    PageResult.placeholder(
                        page_number,
                        grouped,
                        width=rendered.pixel_width,
                        height=rendered.pixel_height,
                    )
                )
            else:
                pages.append(PageResult(page=page_number, image=result))

        if dpi is None:
            raise NoResultsError(
                f"No pages rendered for range {pages_to_process.start}-"
                f"{pages_to_process.end} of {path}"
            )

        logger.info("Processed %d pages from %s", len(pages), path.name)
        return DocumentResult(pages=tuple(pages), dpi=dpi)

    def process_directory(self, input_dir: Path) -> BatchResult:
        """Run OCR on every supported image in a directory.

        Images that fail are left out of the result.

        Raises:
            NoResultsError: If no image was processed successfully.
        """
        files = find_images(input_dir, self.config.batch.image_extensions)
        logger.info("Found %d images in %s", len(files), input_dir)

        results: dict[str, ImageResult] = {}
        for i, file_path in enumerate(files, 1):
            logger.info("Processing [%d/%d]: %s", i, len(files), file_path.name)
            result = self._try_image(file_path)
            if result is not None:
                results[file_path.name] = result

        if not results:
            raise NoResultsError(f"No images processed in directory: {input_dir}")

        logger.info(
            "Processed %d of %d images from %s", len(results), len(files), input_dir
        )
        return BatchResult(results=results)

    def _try_image(self, path: Path) -> ImageResult | None:
        try:
            image = load_image(path)
        except ImageLoadError as exc:
            logger.warning("%s", exc)
            return None
        return self.builder.build(image)
