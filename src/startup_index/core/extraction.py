"""Document validation and text extraction for pitch deck analysis.

PDF text comes from PyMuPDF. PDFs whose text layer is too thin (scanned
decks) and image files are OCR'd through PyMuPDF's Tesseract integration,
which needs a Tesseract install with language data. Word documents are read
with python-docx and plain-text documents are decoded directly.
Presentations must be exported to PDF first.
"""

from __future__ import annotations

import io
import logging
import zipfile
from pathlib import PurePath
from typing import Optional

import docx
import fitz  # PyMuPDF
from docx.opc.exceptions import PackageNotFoundError

from .errors import DocumentValidationError
from .models import FileType

logger = logging.getLogger(__name__)

MAX_FILE_SIZE_BYTES = 20 * 1024 * 1024

# Below this many characters of embedded text a PDF is treated as scanned.
OCR_TEXT_THRESHOLD = 50
OCR_LANGUAGE = "eng"
OCR_DPI = 300

IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif", "bmp", "webp", "tiff", "tif"}
PRESENTATION_EXTENSIONS = {"ppt", "pptx", "key"}
DOCUMENT_EXTENSIONS = {"doc", "docx", "odt", "txt", "rtf", "md"}
PLAIN_TEXT_EXTENSIONS = {"txt", "md"}
WORD_EXTENSIONS = {"docx"}


def _extension(file_name: str) -> str:
    return PurePath(file_name).suffix.lstrip(".").lower()


def detect_file_type(file_name: str, mime_type: Optional[str] = None) -> FileType:
    """Classify a document from its extension and optional MIME type."""
    extension = _extension(file_name)
    mime = (mime_type or "").lower()

    if "pdf" in mime or extension == "pdf":
        return FileType.PDF
    if "image" in mime or extension in IMAGE_EXTENSIONS:
        return FileType.IMAGE
    if "presentation" in mime or extension in PRESENTATION_EXTENSIONS:
        return FileType.PRESENTATION
    if (
        "word" in mime
        or "opendocument" in mime
        or "text/plain" in mime
        or extension in DOCUMENT_EXTENSIONS
    ):
        return FileType.DOCUMENT
    return FileType.UNKNOWN


def validate_document(data: bytes, file_type: FileType) -> None:
    """Raise DocumentValidationError if the document cannot be analyzed."""
    if not data:
        raise DocumentValidationError("The file is empty (0 bytes)")
    if len(data) > MAX_FILE_SIZE_BYTES:
        raise DocumentValidationError("File size exceeds the 20MB limit")

    if file_type is FileType.PDF:
        if not data.startswith(b"%PDF"):
            raise DocumentValidationError(
                "This file doesn't appear to be a valid PDF. It might be corrupted or improperly exported."
            )
        return

    if file_type in (FileType.DOCUMENT, FileType.IMAGE):
        return

    if file_type is FileType.PRESENTATION:
        raise DocumentValidationError("Presentation files are not supported directly. Please export your deck to PDF.")
    raise DocumentValidationError("Unsupported file type. Please upload a PDF, an image, or a text document.")


def _ocr_page(page: fitz.Page) -> str:
    """OCR one rendered page. Raises RuntimeError when Tesseract is unavailable or fails."""
    textpage = page.get_textpage_ocr(language=OCR_LANGUAGE, dpi=OCR_DPI, full=True)
    return page.get_text(textpage=textpage).strip()


def _slide(number: int, text: str) -> str:
    return f"----- Slide {number} -----\n{text}\n"


def extract_pdf_text(data: bytes, ocr: bool = True) -> str:
    """Return the PDF's text with each page labelled as a slide.

    When the embedded text is shorter than OCR_TEXT_THRESHOLD and ``ocr`` is
    set, every page is OCR'd instead. A page that fails OCR is skipped.
    """
    try:
        doc = fitz.open(stream=data, filetype="pdf")
    except RuntimeError as exc:
        raise DocumentValidationError(f"Could not open PDF: {exc}") from exc

    with doc:
        if doc.page_count == 0:
            raise DocumentValidationError("This PDF doesn't contain any pages")

        pages = [(page.number + 1, page.get_text().strip()) for page in doc]
        embedded = sum(len(text) for _, text in pages)
        if embedded < OCR_TEXT_THRESHOLD and ocr:
            logger.info("PDF has %d characters of embedded text, falling back to OCR", embedded)
            pages = []
            for page in doc:
                try:
                    pages.append((page.number + 1, _ocr_page(page)))
                except RuntimeError as exc:
                    logger.warning("OCR failed for page %d: %s", page.number + 1, exc)

    return "\n".join(_slide(number, text) for number, text in pages if text)


def extract_image_text(data: bytes, file_name: str) -> str:
    """OCR an image file.

    The image is wrapped in a one-page PDF so it goes through the same OCR
    path as scanned decks.
    """
    try:
        with fitz.open(stream=data, filetype=_extension(file_name) or "png") as image:
            pdf_bytes = image.convert_to_pdf()
        with fitz.open(stream=pdf_bytes, filetype="pdf") as doc:
            text = "\n".join(_ocr_page(page) for page in doc)
    except RuntimeError as exc:
        raise DocumentValidationError(f"Error processing image file: {exc}") from exc

    if len(text.strip()) < OCR_TEXT_THRESHOLD:
        logger.warning("Limited text detected in image %s: %d characters", file_name, len(text.strip()))
    return text


def extract_docx_text(data: bytes) -> str:
    """Paragraph text of a .docx file, blank paragraphs dropped."""
    try:
        document = docx.Document(io.BytesIO(data))
    except (PackageNotFoundError, zipfile.BadZipFile, KeyError, ValueError) as exc:
        raise DocumentValidationError(f"Could not open Word document: {exc}") from exc
    return "\n\n".join(p.text for p in document.paragraphs if p.text).strip()


def extract_text(data: bytes, file_name: str, mime_type: Optional[str] = None) -> str:
    """Validate a document and extract its text.

    Returns an empty string when nothing could be read (for example a scanned
    PDF on a host without Tesseract). The caller decides whether there is
    enough text to analyze.
    """
    file_type = detect_file_type(file_name, mime_type)
    validate_document(data, file_type)
    extension = _extension(file_name)

    if file_type is FileType.PDF:
        text = extract_pdf_text(data)
    elif file_type is FileType.IMAGE:
        text = extract_image_text(data, file_name)
    elif extension in WORD_EXTENSIONS or "wordprocessingml" in (mime_type or ""):
        text = extract_docx_text(data)
    elif extension in PLAIN_TEXT_EXTENSIONS or "text/plain" in (mime_type or ""):
        text = data.decode("utf-8", errors="replace")
    else:
        raise DocumentValidationError(
            f"Text extraction for {PurePath(file_name).suffix or 'this'} documents is not supported. "
            "Please upload a PDF, .docx or .txt file."
        )

    logger.info("Extracted %d characters from %s (%s)", len(text), file_name, file_type.value)
    return text
