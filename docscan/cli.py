"""Command-line interface for OCR of images, PDFs and image folders.

Writes JSON with pixel bounding boxes, or a plain-text transcript when the
output path ends in ``.txt``.
"""

import argparse
import json
import sys
from pathlib import Path

import yaml
from pydantic import ValidationError

from docscan import __version__
from docscan.exceptions import DocscanError, InputError
from docscan.ocr.document_processor import DocumentProcessor, PageRange
from docscan.ocr.tesseract_engine import TesseractEngine
from docscan.output.writers import JSON_SUFFIX, TEXT_SUFFIX, write_result
from docscan.utils.config import AppConfig, load_config
from docscan.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)

_EPILOG = """\
output formats:
  .json   full OCR data with top-left origin pixel boxes (3 decimals)
  .txt    plain text only; paragraphs preferred over lines

examples:
  docscan image.png                           -> image.json next to the input
  docscan -l eng,fra -o results.json doc.pdf
  docscan -p 1-3 -o output/ document.pdf      -> output/document_pdf_output.json
  docscan -g -c 0.5 scans/ -o scans.txt       -> one section per image
"""


def parse_languages(value: str) -> list[str]:
    """Split a comma-separated language list, dropping blanks."""
    return [lang.strip() for lang in value.split(",") if lang.strip()]


def _confidence(value: str) -> float:
    try:
        threshold = float(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid confidence value: {value!r}") from exc
    if not 0.0 <= threshold <= 1.0:
        raise argparse.ArgumentTypeError(
            f"confidence must be between 0 and 1, got {value}"
        )
    return threshold


def _page_range(value: str) -> PageRange:
    try:
        return PageRange.parse(value)
    except InputError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="docscan",
        description="OCR for images, PDFs and image folders using Tesseract",
        epilog=_EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("input_path", nargs="?", type=Path, help="Image, PDF or directory")
    parser.add_argument(
        "-l",
        "--language",
        "--languages",
        dest="languages",
        type=parse_languages,
        help="Comma-separated Tesseract language codes (default from config: eng)",
    )
    parser.add_argument(
        "-o", "--output", type=Path, help="Output .json/.txt file or directory"
    )
    parser.add_argument(
        "-p",
        "--pages",
        type=_page_range,
        help="Page range for PDF input, 1-indexed, e.g. 2-5",
    )
    parser.add_argument(
        "-g",
        "--group",
        action="store_true",
        default=None,
        help="Group lines into paragraphs",
    )
    parser.add_argument(
        "-c",
        "--confidence",
        type=_confidence,
        help="Report confidence for lines below this threshold (0 disables)",
    )
    parser.add_argument("--config", type=Path, help="YAML configuration file")
    parser.add_argument("--log-level", help="Logging level (default from config)")
    parser.add_argument(
        "-v", "--version", action="version", version=f"docscan version {__version__}"
    )
    parser.add_argument(
        "--supported-languages",
        action="store_true",
        help="List installed OCR languages as JSON and exit",
    )
    return parser


def apply_overrides(config: AppConfig, args: argparse.Namespace) -> AppConfig:
    """Return a copy of ``config`` with command-line values applied."""
    ocr_updates: dict[str, object] = {}
    if args.languages:
        ocr_updates["languages"] = args.languages
    if args.group is not None:
        ocr_updates["group_paragraphs"] = args.group
    if args.confidence is not None:
        ocr_updates["confidence_threshold"] = args.confidence

    updates: dict[str, object] = {}
    if ocr_updates:
        updates["ocr"] = config.ocr.model_copy(update=ocr_updates)
    if args.log_level:
        updates["log_level"] = args.log_level
    return config.model_copy(update=updates)


def resolve_output_path(
    output: Path | None, default_name: str, default_dir: Path
) -> Path:
    """Pick the output file for an input.

    An output ending in ``.json`` or ``.txt`` is used as is; any other
    output is a directory receiving ``default_name``. Without an output,
    ``default_name`` goes into ``default_dir``.
    """
    if output is None:
        return default_dir / default_name
    if output.suffix.lower() in (JSON_SUFFIX, TEXT_SUFFIX):
        return output
    return output / default_name


def run(
    input_path: Path,
    output: Path | None,
    config: AppConfig,
    page_range: PageRange | None = None,
) -> Path:
    """Process one input and write its result.

    Returns:
        Path of the written file.

    Raises:
        DocscanError: If processing or writing failed.
    """
    processor = DocumentProcessor(config)
    indent = config.output.json_indent

    if input_path.is_dir():
        result = processor.process_directory(input_path)
        out_path = resolve_output_path(
            output, config.batch.output_filename, input_path
        )
        label = "Batch OCR"
    elif input_path.suffix.lower() == ".pdf":
        result = processor.process_pdf(input_path, page_range)
        out_path = resolve_output_path(
            output, f"{input_path.stem}_pdf_output.json", input_path.parent
        )
        label = "PDF OCR"
    else:
        result = processor.process_image(input_path)
        out_path = resolve_output_path(
            output, f"{input_path.stem}.json", input_path.parent
        )
        label = "OCR"

    write_result(result, out_path, indent=indent)
    kind = "text" if out_path.suffix.lower() == TEXT_SUFFIX else "data"
    print(f"{label} {kind} written to {out_path}")
    return out_path


def main(argv: list[str] | None = None) -> None:
    """Parse CLI arguments and run OCR on the given input.

    Args:
        argv: Command-line arguments (defaults to sys.argv).
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = apply_overrides(load_config(args.config), args)
    except (ValidationError, yaml.YAMLError) as exc:
        print(f"Error: Invalid configuration: {exc}", file=sys.stderr)
        sys.exit(1)
    setup_logging(config.log_level)

    if args.supported_languages:
        engine = TesseractEngine(tesseract_cmd=config.ocr.tesseract_cmd)
        try:
            languages = engine.supported_languages()
        except (RuntimeError, OSError) as exc:
            print(f"Error: Could not retrieve supported languages: {exc}", file=sys.stderr)
            sys.exit(1)
        print("Supported recognition languages:")
        print(json.dumps(languages))
        sys.exit(0)

    if args.input_path is None:
        print("Error: No input path provided", file=sys.stderr)
        parser.print_usage(sys.stderr)
        sys.exit(1)

    if not args.input_path.exists():
        print(f"Error: Input path does not exist: {args.input_path}", file=sys.stderr)
        sys.exit(1)

    try:
        run(args.input_path, args.output, config, args.pages)
    except (DocscanError, FileNotFoundError) as exc:
        logger.debug("OCR run failed", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
