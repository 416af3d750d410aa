"""Configuration management for docscan.

Loads and validates YAML configuration with sensible defaults for
recognition, PDF rendering, batch discovery, and output settings.
"""

import logging
from pathlib import Path

import yaml
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class OCRConfig(BaseModel):
    """Configuration for the Tesseract recognition engine."""

    tesseract_cmd: str | None = None
    languages: list[str] = Field(default_factory=lambda: ["eng"])
    psm: int = 3
    group_paragraphs: bool = False
    confidence_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    @field_validator("languages")
    @classmethod
    def _strip_languages(cls, value: list[str]) -> list[str]:
        languages = [lang.strip() for lang in value if lang.strip()]
        return languages or ["eng"]


class PDFConfig(BaseModel):
    """Configuration for PDF page rendering."""

    render_dpi: int = Field(default=144, gt=0)
    poppler_path: str | None = None


class BatchConfig(BaseModel):
    """Configuration for directory batch processing."""

    image_extensions: list[str] = Field(
        default_factory=lambda: [".jpg", ".jpeg", ".png"]
    )
    output_filename: str = "batch_output.json"

    @field_validator("image_extensions")
    @classmethod
    def _normalize_extensions(cls, value: list[str]) -> list[str]:
        return [ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in value]


class OutputConfig(BaseModel):
    """Configuration for rendered output."""

    json_indent: int = Field(default=2, ge=0)


class AppConfig(BaseModel):
    """Top-level application configuration."""

    ocr: OCRConfig = Field(default_factory=OCRConfig)
    pdf: PDFConfig = Field(default_factory=PDFConfig)
    batch: BatchConfig = Field(default_factory=BatchConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    log_level: str = "INFO"


def load_config(path: Path | None = None) -> AppConfig:
    """Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.
            Defaults to configs/config.yaml.

    Returns:
        Validated application configuration.
    """
    if path is None:
        path = Path("configs/config.yaml")

    if path.exists():
        logger.info("Loading configuration from %s", path)
        with open(path) as f:
            raw = yaml.safe_load(f) or {}
        return AppConfig(**raw)

    logger.info("No config file found at %s, using defaults", path)
    return AppConfig()
