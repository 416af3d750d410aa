"""Tesseract OCR engine wrapper with line and paragraph recognition.

Groups Tesseract's word-level output into lines and paragraphs and reports
every region in unit-square coordinates with a bottom-left origin, the
convention the result builder expects from any recognition engine.
"""

from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
import pytesseract
from PIL import Image

from docscan.utils.logger import get_logger

from .geometry import NormalizedRect, from_pixel_box

logger = get_logger(__name__)

_WORD_LEVEL = 5


@dataclass(frozen=True)
class RecognizedText:
    """A single recognized line with its region and confidence."""

    transcript: str
    region: NormalizedRect
    confidence: float


@dataclass(frozen=True)
class RecognizedLine(RecognizedText):
    """A line inside a recognized paragraph."""

    is_title: bool = False


@dataclass(frozen=True)
class RecognizedParagraph:
    """A paragraph and the lines it is made of."""

    transcript: str
    region: NormalizedRect
    lines: list[RecognizedLine] = field(default_factory=list)


@dataclass
class _PixelLine:
    key: tuple[int, int, int]
    words: list[str]
    confidences: list[float]
    left: int
    top: int
    right: int
    bottom: int

    def extend(self, word: str, conf: float, box: tuple[int, int, int, int]) -> None:
        left, top, width, height = box
        self.words.append(word)
        self.confidences.append(conf)
        self.left = min(self.left, left)
        self.top = min(self.top, top)
        self.right = max(self.right, left + width)
        self.bottom = max(self.bottom, top + height)


class TesseractEngine:
    """Wrapper around Tesseract for line and paragraph recognition.

    Args:
        tesseract_cmd: Path to the Tesseract executable.
            If ``None``, uses the system default.
        psm: Tesseract page segmentation mode.
    """

    def __init__(self, tesseract_cmd: str | None = None, psm: int = 3) -> None:
        if tesseract_cmd:
            pytesseract.pytesseract.tesseract_cmd = tesseract_cmd
        self.psm = psm

    def supported_languages(self) -> list[str]:
        """List the language packs installed for Tesseract."""
        return sorted(pytesseract.get_languages(config=""))

    def recognize(
        self, image: np.ndarray, languages: Sequence[str]
    ) -> list[RecognizedText]:
        """Recognize text lines in reading order.

        Args:
            image: Input image as a numpy array.
            languages: Tesseract language codes, e.g. ``["eng", "fra"]``.

        Returns:
            One entry per recognized line.
        """
        height, width = image.shape[:2]
        lines = self._pixel_lines(image, languages)
        logger.debug("Recognized %d lines", len(lines))
        return [self._to_recognized_line(line, width, height) for line in lines]

    def recognize_document(
        self, image: np.ndarray, languages: Sequence[str]
    ) -> list[RecognizedParagraph]:
        """Recognize paragraphs, each carrying its lines.

        Tesseract has no notion of titles, so every line reports
        ``is_title=False``.
        """
        height, width = image.shape[:2]
        grouped: dict[tuple[int, int], list[_PixelLine]] = {}
        for line in self._pixel_lines(image, languages):
            grouped.setdefault(line.key[:2], []).append(line)

        paragraphs: list[RecognizedParagraph] = []
        for lines in grouped.values():
            left = min(line.left for line in lines)
            top = min(line.top for line in lines)
            right = max(line.right for line in lines)
            bottom = max(line.bottom for line in lines)
            paragraphs.append(
                RecognizedParagraph(
                    transcript=" ".join(" ".join(line.words) for line in lines),
                    region=from_pixel_box(
                        left, top, right - left, bottom - top, width, height
                    ),
                    lines=[
                        self._to_recognized_line(line, width, height)
                        for line in lines
                    ],
                )
            )

        logger.debug("Recognized %d paragraphs", len(paragraphs))
        return paragraphs

    def _pixel_lines(
        self, image: np.ndarray, languages: Sequence[str]
    ) -> list[_PixelLine]:
        """Run Tesseract and collect words into lines, in output order."""
        data = pytesseract.image_to_data(
            Image.fromarray(image),
            lang="+".join(languages) if languages else None,
            config=f"--psm {self.psm}",
            output_type=pytesseract.Output.DICT,
        )

        lines: dict[tuple[int, int, int], _PixelLine] = {}
        for i in range(len(data["text"])):
            if "level" in data and int(data["level"][i]) != _WORD_LEVEL:
                continue
            word = str(data["text"][i]).strip()
            conf = float(data["conf"][i])
            if conf < 0 or not word:
                continue

            key = (
                int(data["block_num"][i]),
                int(data["par_num"][i]),
                int(data["line_num"][i]),
            )
            box = (
                int(data["left"][i]),
                int(data["top"][i]),
                int(data["width"][i]),
                int(data["height"][i]),
            )
            if key not in lines:
                left, top, w, h = box
                lines[key] = _PixelLine(key, [], [], left, top, left + w, top + h)
            lines[key].extend(word, conf, box)

        return list(lines.values())

    @staticmethod
    def _to_recognized_line(
        line: _PixelLine, image_width: int, image_height: int
    ) -> RecognizedLine:
        avg_conf = sum(line.confidences) / len(line.confidences) / 100.0
        return RecognizedLine(
            transcript=" ".join(line.words),
            region=from_pixel_box(
                line.left,
                line.top,
                line.right - line.left,
                line.bottom - line.top,
                image_width,
                image_height,
            ),
            confidence=min(max(avg_conf, 0.0), 1.0),
        )
