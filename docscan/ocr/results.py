"""Immutable result types produced by the OCR pipeline.

Each type knows how to turn itself into a plain JSON-like tree via
``to_tree()``. Optional keys (``confidence``, ``isTitle``, ``lines``) are only
added when the corresponding field carries information, so the serializers
never have to probe for them.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Union

from .rounding import round3

TreeValue = Union[
    str, int, bool, Decimal, list["TreeValue"], dict[str, "TreeValue"]
]


@dataclass(frozen=True)
class BoundingBox:
    """Axis-aligned box in absolute pixels, origin top-left."""

    x: Decimal
    y: Decimal
    width: Decimal
    height: Decimal

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Bounding box size must be non-negative, got "
                f"{self.width}x{self.height}"
            )

    def to_tree(self) -> dict[str, TreeValue]:
        return {
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }


@dataclass(frozen=True)
class TextUnit:
    """A recognized line, or a paragraph grouping several lines."""

    text: str
    bbox: BoundingBox
    confidence: Decimal | None = None
    is_title: bool = False
    lines: tuple["TextUnit", ...] = ()

    def to_tree(self) -> dict[str, TreeValue]:
        tree: dict[str, TreeValue] = {
            "text": self.text,
            "bbox": self.bbox.to_tree(),
        }
        if self.confidence is not None:
            tree["confidence"] = self.confidence
        if self.is_title:
            tree["isTitle"] = True
        if self.lines:
            tree["lines"] = [line.to_tree() for line in self.lines]
        return tree


@dataclass(frozen=True)
class ImageResult:
    """OCR output for one image.

    Exactly one of ``observations`` (flat mode) and ``paragraphs`` (grouped
    mode) is set.
    """

    width: int
    height: int
    observations: tuple[TextUnit, ...] | None = None
    paragraphs: tuple[TextUnit, ...] | None = None

    def __post_init__(self) -> None:
        if (self.observations is None) == (self.paragraphs is None):
            raise ValueError(
                "ImageResult needs exactly one of observations or paragraphs"
            )

    @classmethod
    def flat(
        cls, width: int, height: int, observations: list[TextUnit]
    ) -> "ImageResult":
        return cls(width=width, height=height, observations=tuple(observations))

    @classmethod
    def grouped(
        cls, width: int, height: int, paragraphs: list[TextUnit]
    ) -> "ImageResult":
        return cls(width=width, height=height, paragraphs=tuple(paragraphs))

    @property
    def grouped_mode(self) -> bool:
        return self.paragraphs is not None

    def to_tree(self) -> dict[str, TreeValue]:
        tree: dict[str, TreeValue] = {"width": self.width, "height": self.height}
        if self.paragraphs is not None:
            tree["paragraphs"] = [p.to_tree() for p in self.paragraphs]
        else:
            tree["observations"] = [o.to_tree() for o in self.observations or ()]
        return tree


@dataclass(frozen=True)
class PageResult:
    """OCR output for one PDF page."""

    page: int
    image: ImageResult

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError(f"Page numbers are 1-based, got {self.page}")

    @classmethod
    def placeholder(
        cls, page: int, grouped: bool = False, width: int = 0, height: int = 0
    ) -> "PageResult":
        """Empty page standing in for one that failed to render or OCR.

        A page that rendered but failed OCR keeps its pixel size; one that
        never rendered is 0x0.
        """
        if grouped:
            return cls(page=page, image=ImageResult.grouped(width, height, []))
        return cls(page=page, image=ImageResult.flat(width, height, []))

    def to_tree(self) -> dict[str, TreeValue]:
        return {"page": self.page, **self.image.to_tree()}


@dataclass(frozen=True)
class Dpi:
    """Effective render resolution of a document."""

    x: Decimal = Decimal("0.000")
    y: Decimal = Decimal("0.000")

    @classmethod
    def from_render(
        cls,
        pixel_width: int,
        pixel_height: int,
        width_points: float,
        height_points: float,
    ) -> "Dpi":
        """Derive DPI from a rendered bitmap and its page size in points.

        72 points make one inch.
        """
        if width_points <= 0 or height_points <= 0:
            raise ValueError(
                f"Page size must be positive, got {width_points}x{height_points} pt"
            )
        return cls(
            x=round3(pixel_width / (width_points / 72.0)),
            y=round3(pixel_height / (height_points / 72.0)),
        )

    def to_tree(self) -> dict[str, TreeValue]:
        return {"x": self.x, "y": self.y}


@dataclass(frozen=True)
class DocumentResult:
    """OCR output for a PDF page range."""

    pages: tuple[PageResult, ...]
    dpi: Dpi = field(default_factory=Dpi)

    @property
    def page_count(self) -> int:
        return len(self.pages)

    def to_tree(self) -> dict[str, TreeValue]:
        return {
            "pages": [page.to_tree() for page in self.pages],
            "dpi": self.dpi.to_tree(),
        }


@dataclass(frozen=True)
class BatchResult:
    """OCR output for a directory, keyed by filename."""

    results: Mapping[str, ImageResult]

    def __len__(self) -> int:
        return len(self.results)

    def to_tree(self) -> dict[str, TreeValue]:
        return {name: result.to_tree() for name, result in self.results.items()}


def to_tree(obj: Any) -> Any:
    """Return the JSON-like tree for a result object, or ``obj`` unchanged."""
    converter = getattr(obj, "to_tree", None)
    if callable(converter):
        return converter()
    return obj
