"""Assembly of per-image results from raw engine output.

The module-level builders are pure: the same recognition output and settings
always produce the same :class:`ImageResult`. :class:`ResultBuilder` adds the
engine call and turns engine failures into a missing result.
"""

from collections.abc import Sequence
from decimal import Decimal

import numpy as np
import pytesseract

from docscan.utils.logger import get_logger

from .geometry import to_pixel_bbox
from .results import ImageResult, TextUnit
from .rounding import round3
from .tesseract_engine import (
    RecognizedParagraph,
    RecognizedText,
    TesseractEngine,
)

logger = get_logger(__name__)


def gated_confidence(confidence: float, threshold: float) -> Decimal | None:
    """Return the rounded confidence only when it falls below the threshold.

    A threshold of zero disables reporting entirely.
    """
    if threshold > 0 and confidence < threshold:
        return round3(confidence)
    return None


def build_flat_result(
    width: int,
    height: int,
    candidates: Sequence[RecognizedText],
    confidence_threshold: float,
) -> ImageResult:
    """Build a flat result with one observation per candidate, in engine order."""
    observations = [
        TextUnit(
            text=candidate.transcript,
            bbox=to_pixel_bbox(candidate.region, width, height),
            confidence=gated_confidence(candidate.confidence, confidence_threshold),
        )
        for candidate in candidates
    ]
    return ImageResult.flat(width, height, observations)


def build_grouped_result(
    width: int,
    height: int,
    paragraphs: Sequence[RecognizedParagraph],
    confidence_threshold: float,
) -> ImageResult:
    """Build a grouped result with one entry per paragraph and nested lines."""
    units: list[TextUnit] = []
    for paragraph in paragraphs:
        lines = tuple(
            TextUnit(
                text=line.transcript,
                bbox=to_pixel_bbox(line.region, width, height),
                confidence=gated_confidence(line.confidence, confidence_threshold),
                is_title=line.is_title,
            )
            for line in paragraph.lines
        )
        units.append(
            TextUnit(
                text=paragraph.transcript,
                bbox=to_pixel_bbox(paragraph.region, width, height),
                lines=lines,
            )
        )
    return ImageResult.grouped(width, height, units)


class ResultBuilder:
    """Runs the recognition engine on an image and builds its result.

    Args:
        engine: Recognition engine.
        languages: Language codes passed to the engine.
        group_paragraphs: Emit paragraphs with nested lines instead of a
            flat list of observations.
        confidence_threshold: Lines below this confidence carry their
            score in the output. ``0`` disables it.
    """

    def __init__(
        self,
        engine: TesseractEngine,
        languages: Sequence[str],
        group_paragraphs: bool = False,
        confidence_threshold: float = 0.0,
    ) -> None:
        if not 0.0 <= confidence_threshold <= 1.0:
            raise ValueError(
                f"confidence_threshold must be within [0, 1], got {confidence_threshold}"
            )
        self.engine = engine
        self.languages = list(languages)
        self.group_paragraphs = group_paragraphs
        self.confidence_threshold = confidence_threshold

    def build(self, image: np.ndarray) -> ImageResult | None:
        """Recognize ``image`` and build its result.

        Returns:
            The image result, or ``None`` if the engine could not process
            the image. An image without any text is a valid empty result.
        """
        height, width = image.shape[:2]
        try:
            if self.group_paragraphs:
                paragraphs = self.engine.recognize_document(image, self.languages)
                return build_grouped_result(
                    width, height, paragraphs, self.confidence_threshold
                )
            candidates = self.engine.recognize(image, self.languages)
            return build_flat_result(
                width, height, candidates, self.confidence_threshold
            )
        except (pytesseract.TesseractError, RuntimeError, OSError, ValueError) as exc:
            logger.warning("OCR execution failed for image: %s", exc)
            return None
