"""JSON and plain-text rendering of OCR results, plus atomic file output.

Both renderers accept either a result object (anything with ``to_tree()``)
or an already-built tree of dicts, lists, strings, numbers and decimals, and
return UTF-8 bytes. Rendering the same result twice is byte-identical.
"""

import json
import os
import stat
import tempfile
from collections.abc import Mapping, Sequence
from decimal import Decimal
from pathlib import Path
from typing import Any

from docscan.exceptions import SerializationError
from docscan.ocr.results import to_tree
from docscan.ocr.rounding import format_decimal
from docscan.utils.logger import get_logger

from .ordering import natural_key, ordered_keys

logger = get_logger(__name__)

TEXT_SUFFIX = ".txt"
JSON_SUFFIX = ".json"


def render_structured(obj: Any, indent: int = 2) -> bytes:
    """Render a result as pretty-printed JSON.

    Top-level keys are put in canonical order (numeric when every key is an
    integer, natural otherwise). Nested values keep the order they were
    built in. Decimals are written as numbers with three fractional digits.
    """
    tree = to_tree(obj)
    if isinstance(tree, Mapping):
        tree = {key: tree[key] for key in ordered_keys(tree.keys())}
    return _encode(tree, indent, 0).encode("utf-8")


def render_text(obj: Any) -> bytes:
    """Render a result as a plain-text transcript.

    Batches get a ``=== name ===`` header per file in natural order,
    documents a ``--- Page n ---`` header per page in page order, and single
    images no framing at all. Blocks are separated by one blank line.
    """
    tree = to_tree(obj)
    blocks: list[list[str]] = []

    if _is_batch(tree):
        for filename in sorted(tree.keys(), key=natural_key):
            blocks.append([f"=== {filename} ===", *extract_text_lines(tree[filename])])
    elif isinstance(tree, Mapping) and isinstance(tree.get("pages"), Sequence):
        pages = [page for page in tree["pages"] if isinstance(page, Mapping)]
        for page in sorted(pages, key=_page_number):
            block: list[str] = []
            page_number = page.get("page")
            if isinstance(page_number, int) and not isinstance(page_number, bool):
                block.append(f"--- Page {page_number} ---")
            block.extend(extract_text_lines(page))
            blocks.append(block)
    else:
        blocks.append(extract_text_lines(tree))

    lines: list[str] = []
    for block in blocks:
        if lines:
            lines.append("")
        lines.extend(block)
    return "\n".join(lines).encode("utf-8")


def extract_text_lines(result: Any) -> list[str]:
    """Text lines of one image result, preferring paragraphs over observations."""
    if not isinstance(result, Mapping):
        return []
    paragraphs = result.get("paragraphs")
    if isinstance(paragraphs, Sequence) and not isinstance(paragraphs, str) and paragraphs:
        entries = paragraphs
    else:
        entries = result.get("observations")
        if not isinstance(entries, Sequence) or isinstance(entries, str):
            return []
    return [
        entry["text"]
        for entry in entries
        if isinstance(entry, Mapping) and isinstance(entry.get("text"), str)
    ]


def write_output(data: bytes, path: Path) -> None:
    """Write bytes to ``path`` atomically.

    The data goes to a temporary file next to the destination, which then
    replaces it. On failure the temporary file is removed and any existing
    destination is left untouched.

    Raises:
        SerializationError: If the file could not be written.
    """
    path = Path(path)
    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "wb", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
        ) as tmp:
            tmp_name = tmp.name
            tmp.write(data)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.chmod(tmp_name, _output_mode(path))
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None and os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise SerializationError(f"Error writing output to {path}: {exc}") from exc

    logger.debug("Wrote %d bytes to %s", len(data), path)


def write_result(obj: Any, path: Path, indent: int = 2) -> None:
    """Render a result in the format implied by the path suffix and write it.

    ``.txt`` (any case) selects the text transcript, anything else JSON.
    """
    path = Path(path)
    if path.suffix.lower() == TEXT_SUFFIX:
        data = render_text(obj)
    else:
        data = render_structured(obj, indent=indent)
    write_output(data, path)


def _output_mode(path: Path) -> int:
    """Mode for a written file: keep an existing file's, else honor the umask."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _is_batch(tree: Any) -> bool:
    return (
        isinstance(tree, Mapping)
        and bool(tree)
        and all(isinstance(value, Mapping) for value in tree.values())
    )


def _page_number(page: Mapping[str, Any]) -> int:
    number = page.get("page")
    if isinstance(number, int) and not isinstance(number, bool):
        return number
    return 0


def _encode(value: Any, indent: int, level: int) -> str:
    if isinstance(value, Decimal):
        return format_decimal(value)
    if isinstance(value, bool) or value is None:
        return json.dumps(value)
    if isinstance(value, (str, int, float)):
        return json.dumps(value, ensure_ascii=False)

    inner = "\n" + " " * (indent * (level + 1))
    outer = "\n" + " " * (indent * level)

    if isinstance(value, Mapping):
        if not value:
            return "{}"
        items = [
            f"{json.dumps(str(key), ensure_ascii=False)}: {_encode(item, indent, level + 1)}"
            for key, item in value.items()
        ]
        return "{" + inner + ("," + inner).join(items) + outer + "}"
    if isinstance(value, (list, tuple)):
        if not value:
            return "[]"
        items = [_encode(item, indent, level + 1) for item in value]
        return "[" + inner + ("," + inner).join(items) + outer + "]"
    converted = to_tree(value)
    if converted is not value:
        return _encode(converted, indent, level)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")
