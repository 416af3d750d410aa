"""Exception hierarchy for the docscan pipeline.

Exception Hierarchy:
    DocscanError (base)
    ├── InputError
    │   └── PageRangeError
    ├── PerItemFailure
    │   ├── ImageLoadError
    │   └── PageRenderError
    ├── NoResultsError
    └── SerializationError

Per-item failures are absorbed by the aggregator (placeholder page or
omitted batch entry). Everything else propagates to the caller.
"""


class DocscanError(Exception):
    """Base exception for all docscan errors."""


class InputError(DocscanError):
    """Raised when caller input is rejected before any work begins."""


class PageRangeError(InputError):
    """Raised for a malformed or out-of-bounds PDF page range."""


class PerItemFailure(DocscanError):
    """Raised when a single image or page cannot be processed."""


class ImageLoadError(PerItemFailure):
    """Raised when an image file cannot be opened or decoded."""


class PageRenderError(PerItemFailure):
    """Raised when a PDF page cannot be rendered to an image."""

    def __init__(self, page_number: int, message: str) -> None:
        self.page_number = page_number
        super().__init__(f"Failed to render page {page_number}: {message}")


class NoResultsError(DocscanError):
    """Raised when an invocation produced no usable result at all."""


class SerializationError(DocscanError):
    """Raised when rendered output cannot be written to its destination."""
