"""docscan - OCR result normalization for images, PDFs and image folders.

Runs Tesseract over single images, PDF page ranges or whole directories and
turns the recognized lines and paragraphs into deterministic JSON or plain
text transcripts with top-left pixel coordinates.
"""

__version__ = "1.3.0"
