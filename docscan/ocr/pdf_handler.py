"""PDF page rendering for multi-page document processing.

Renders individual PDF pages to numpy arrays through poppler (pdf2image)
and reports each page's size in PDF points so the effective DPI of the
rendering can be derived.
"""

import re
from dataclasses import dataclass
from pathlib import Path

import numpy as np
from pdf2image import convert_from_path
from pdf2image.exceptions import (
    PDFInfoNotInstalledError,
    PDFPageCountError,
    PDFSyntaxError,
)
from pdf2image.pdf2image import pdfinfo_from_path

from docscan.exceptions import InputError, PageRenderError
from docscan.utils.logger import get_logger

logger = get_logger(__name__)

_PAGE_SIZE_KEY = re.compile(r"^Page\s+(\d+)\s+size$")
_PAGE_SIZE_VALUE = re.compile(r"([\d.]+)\s*x\s*([\d.]+)\s*pts")


@dataclass(frozen=True)
class RenderedPage:
    """A rendered PDF page and its physical size."""

    page_number: int
    image: np.ndarray
    width_pt: float
    height_pt: float

    @property
    def pixel_width(self) -> int:
        return int(self.image.shape[1])

    @property
    def pixel_height(self) -> int:
        return int(self.image.shape[0])


def parse_page_size(info: dict[str, object], page_number: int) -> tuple[float, float]:
    """Extract a page's size in points from ``pdfinfo`` output.

    ``pdfinfo -f N -l N`` reports ``Page    N size: 612 x 792 pts (letter)``;
    without a range only ``Page size`` for the first page is present.

    Raises:
        ValueError: If no size is reported for the page.
    """
    raw: object | None = None
    for key, value in info.items():
        match = _PAGE_SIZE_KEY.match(str(key).strip())
        if match and int(match.group(1)) == page_number:
            raw = value
            break
    if raw is None and page_number == 1:
        raw = info.get("Page size")
    if raw is None:
        raise ValueError(f"No page size reported for page {page_number}")

    size = _PAGE_SIZE_VALUE.search(str(raw))
    if not size:
        raise ValueError(f"Unrecognized page size {raw!r} for page {page_number}")
    width_pt, height_pt = float(size.group(1)), float(size.group(2))
    if width_pt <= 0 or height_pt <= 0:
        raise ValueError(f"Empty page size {raw!r} for page {page_number}")
    return width_pt, height_pt


class PDFHandler:
    """Renders PDF pages to images for OCR processing.

    Args:
        dpi: Resolution for PDF rendering. 144 renders at twice the
            72 points-per-inch reference size.
        poppler_path: Directory containing the poppler binaries, if they
            are not on ``PATH``.
    """

    def __init__(self, dpi: int = 144, poppler_path: str | None = None) -> None:
        self.dpi = dpi
        self.poppler_path = poppler_path

    def get_page_count(self, pdf_path: Path) -> int:
        """Get the number of pages in a PDF without rendering it.

        Raises:
            FileNotFoundError: If the file does not exist.
            InputError: If the file cannot be opened as a PDF or poppler is
                not installed.
        """
        if not Path(pdf_path).exists():
            raise FileNotFoundError(f"PDF file not found: {pdf_path}")
        try:
            info = pdfinfo_from_path(str(pdf_path), poppler_path=self.poppler_path)
        except (PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError) as exc:
            raise InputError(f"Error opening PDF: {pdf_path}: {exc}") from exc
        count = int(info["Pages"])
        logger.debug("PDF %s has %d pages", pdf_path, count)
        return count

    def render_page(self, pdf_path: Path, page_number: int) -> RenderedPage:
        """Render one 1-based page of a PDF.

        Raises:
            PageRenderError: If poppler fails or returns no image.
        """
        try:
            info = pdfinfo_from_path(
                str(pdf_path),
                poppler_path=self.poppler_path,
                first_page=page_number,
                last_page=page_number,
            )
            width_pt, height_pt = parse_page_size(info, page_number)
            pil_images = convert_from_path(
                str(pdf_path),
                dpi=self.dpi,
                first_page=page_number,
                last_page=page_number,
                poppler_path=self.poppler_path,
            )
        except Exception as exc:
            raise PageRenderError(page_number, str(exc)) from exc

        if not pil_images:
            raise PageRenderError(page_number, "renderer returned no image")

        image = np.array(pil_images[0].convert("RGB"))
        logger.debug(
            "Rendered page %d at %d DPI (%dx%d px)",
            page_number,
            self.dpi,
            image.shape[1],
            image.shape[0],
        )
        return RenderedPage(
            page_number=page_number,
            image=image,
            width_pt=width_pt,
            height_pt=height_pt,
        )
