"""Shared test fixtures for the docscan test suite."""

from pathlib import Path

import numpy as np
import pytest
from PIL import Image

from docscan.ocr.geometry import NormalizedRect
from docscan.ocr.tesseract_engine import (
    RecognizedLine,
    RecognizedParagraph,
    RecognizedText,
)


@pytest.fixture
def sample_image() -> np.ndarray:
    """Create a synthetic 300x200 RGB test image."""
    image = np.zeros((200, 300, 3), dtype=np.uint8)
    image[50:150, 50:250] = (255, 255, 255)
    return image


@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return Path(__file__).parent.parent


@pytest.fixture
def config_dir(project_root: Path) -> Path:
    """Return the configs directory path."""
    return project_root / "configs"


@pytest.fixture
def recognized_lines() -> list[RecognizedText]:
    """Two lines as an engine would report them, top line first."""
    return [
        RecognizedText(
            transcript="Invoice 2024-001",
            region=NormalizedRect(x=0.1, y=0.8, width=0.5, height=0.1),
            confidence=0.95,
        ),
        RecognizedText(
            transcript="Total due",
            region=NormalizedRect(x=0.1, y=0.5, width=0.3, height=0.1),
            confidence=0.25,
        ),
    ]


@pytest.fixture
def recognized_paragraphs() -> list[RecognizedParagraph]:
    """A titled paragraph with two lines and a paragraph without lines."""
    return [
        RecognizedParagraph(
            transcript="Quarterly Report Revenue grew",
            region=NormalizedRect(x=0.1, y=0.6, width=0.8, height=0.3),
            lines=[
                RecognizedLine(
                    transcript="Quarterly Report",
                    region=NormalizedRect(x=0.1, y=0.8, width=0.6, height=0.1),
                    confidence=0.99,
                    is_title=True,
                ),
                RecognizedLine(
                    transcript="Revenue grew",
                    region=NormalizedRect(x=0.1, y=0.6, width=0.4, height=0.1),
                    confidence=0.1,
                ),
            ],
        ),
        RecognizedParagraph(
            transcript="",
            region=NormalizedRect(x=0.0, y=0.0, width=0.5, height=0.5),
            lines=[],
        ),
    ]


@pytest.fixture
def write_png():
    """Factory writing a small black PNG to a path."""

    def _write(path: Path, width: int = 300, height: int = 200) -> Path:
        Image.fromarray(np.zeros((height, width, 3), dtype=np.uint8)).save(path, format="PNG")
        return path

    return _write
