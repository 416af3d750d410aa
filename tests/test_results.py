"""Tests for the result data model and its tree form."""

from decimal import Decimal

import pytest

from docscan.ocr.results import (
    BatchResult,
    BoundingBox,
    DocumentResult,
    Dpi,
    ImageResult,
    PageResult,
    TextUnit,
    to_tree,
)


def _bbox(x: str = "1.000", y: str = "2.000") -> BoundingBox:
    return BoundingBox(Decimal(x), Decimal(y), Decimal("10.000"), Decimal("5.000"))


class TestBoundingBox:
    """Tests for the BoundingBox data class."""

    def test_tree_keeps_field_order(self) -> None:
        assert list(_bbox().to_tree()) == ["x", "y", "width", "height"]

    def test_rejects_negative_size(self) -> None:
        with pytest.raises(ValueError):
            BoundingBox(Decimal("0"), Decimal("0"), Decimal("-1.000"), Decimal("1.000"))


class TestTextUnit:
    """Tests for optional keys on text units."""

    def test_minimal_unit(self) -> None:
        tree = TextUnit(text="hello", bbox=_bbox()).to_tree()
        assert tree == {"text": "hello", "bbox": _bbox().to_tree()}

    def test_confidence_only_when_set(self) -> None:
        tree = TextUnit(text="x", bbox=_bbox(), confidence=Decimal("0.120")).to_tree()
        assert tree["confidence"] == Decimal("0.120")

    def test_is_title_never_false(self) -> None:
        assert "isTitle" not in TextUnit(text="x", bbox=_bbox()).to_tree()
        assert TextUnit(text="x", bbox=_bbox(), is_title=True).to_tree()["isTitle"] is True

    def test_paragraph_without_lines_has_no_lines_key(self) -> None:
        paragraph = TextUnit(text="p", bbox=_bbox(), lines=())
        assert "lines" not in paragraph.to_tree()

    def test_paragraph_lines_nested(self) -> None:
        line = TextUnit(text="l", bbox=_bbox())
        tree = TextUnit(text="p", bbox=_bbox(), lines=(line,)).to_tree()
        assert tree["lines"] == [line.to_tree()]


class TestImageResult:
    """Tests for the observations/paragraphs exclusivity."""

    def test_flat(self) -> None:
        tree = ImageResult.flat(300, 200, []).to_tree()
        assert tree == {"width": 300, "height": 200, "observations": []}

    def test_grouped(self) -> None:
        result = ImageResult.grouped(300, 200, [])
        assert result.grouped_mode
        assert result.to_tree() == {"width": 300, "height": 200, "paragraphs": []}

    def test_rejects_both(self) -> None:
        with pytest.raises(ValueError):
            ImageResult(1, 1, observations=(), paragraphs=())

    def test_rejects_neither(self) -> None:
        with pytest.raises(ValueError):
            ImageResult(1, 1)

    def test_is_immutable(self) -> None:
        result = ImageResult.flat(1, 1, [])
        with pytest.raises(AttributeError):
            result.width = 5  # type: ignore[misc]


class TestPageResult:
    """Tests for page entries and placeholders."""

    def test_page_number_leads(self) -> None:
        tree = PageResult(page=3, image=ImageResult.flat(10, 20, [])).to_tree()
        assert list(tree) == ["page", "width", "height", "observations"]
        assert tree["page"] == 3

    def test_placeholder_flat(self) -> None:
        tree = PageResult.placeholder(4).to_tree()
        assert tree == {"page": 4, "width": 0, "height": 0, "observations": []}

    def test_placeholder_grouped(self) -> None:
        tree = PageResult.placeholder(4, grouped=True).to_tree()
        assert tree == {"page": 4, "width": 0, "height": 0, "paragraphs": []}

    def test_placeholder_keeps_rendered_size(self) -> None:
        tree = PageResult.placeholder(5, width=1224, height=1584).to_tree()
        assert tree == {"page": 5, "width": 1224, "height": 1584, "observations": []}

    def test_rejects_zero_page(self) -> None:
        with pytest.raises(ValueError):
            PageResult.placeholder(0)


class TestDpi:
    """Tests for DPI derivation."""

    def test_default_is_zero(self) -> None:
        assert Dpi().to_tree() == {"x": Decimal("0.000"), "y": Decimal("0.000")}

    def test_from_render(self) -> None:
        dpi = Dpi.from_render(1224, 1584, 612.0, 792.0)
        assert dpi.x == Decimal("144.000")
        assert dpi.y == Decimal("144.000")

    def test_from_render_rounds(self) -> None:
        dpi = Dpi.from_render(1000, 1000, 700.0, 300.0)
        assert dpi.x == Decimal("102.857")
        assert dpi.y == Decimal("240.000")

    def test_rejects_empty_page(self) -> None:
        with pytest.raises(ValueError):
            Dpi.from_render(100, 100, 0.0, 10.0)


class TestContainers:
    """Tests for document and batch trees."""

    def test_document_tree(self) -> None:
        doc = DocumentResult(
            pages=(PageResult.placeholder(1), PageResult.placeholder(2)),
            dpi=Dpi(Decimal("144.000"), Decimal("144.000")),
        )
        tree = doc.to_tree()
        assert doc.page_count == 2
        assert [p["page"] for p in tree["pages"]] == [1, 2]
        assert tree["dpi"] == {"x": Decimal("144.000"), "y": Decimal("144.000")}

    def test_batch_tree(self) -> None:
        batch = BatchResult(results={"b.png": ImageResult.flat(1, 2, [])})
        assert len(batch) == 1
        assert batch.to_tree() == {"b.png": {"width": 1, "height": 2, "observations": []}}

    def test_to_tree_passes_plain_values_through(self) -> None:
        tree = {"observations": []}
        assert to_tree(tree) is tree
