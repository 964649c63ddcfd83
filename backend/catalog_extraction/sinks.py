"""
Output sinks for extracted renditions.

The extraction operation hands raster data to an ImageSink and vector data to
a DocumentSink and never touches the encoding libraries itself. Sinks return
the path they actually wrote, since the file extension follows the container
format.
"""

import io
import logging
import os
import tempfile

import fitz  # PyMuPDF
import numpy as np
from PIL import Image

from .errors import CannotCreatePDFDocument, CannotSaveImage

logger = logging.getLogger(__name__)

LOSSLESS_IMAGE_FORMATS = ("PNG", "TIFF", "BMP")

# Accepted extensions per container, the first one is used when renaming
FORMAT_EXTENSIONS = {
    "PNG": (".png",),
    "TIFF": (".tiff", ".tif"),
    "BMP": (".bmp",),
    "PDF": (".pdf",),
}

# Extensions that name a container and get replaced instead of appended to
KNOWN_EXTENSIONS = (
    ".png", ".tiff", ".tif", ".bmp", ".pdf",
    ".jpg", ".jpeg", ".gif", ".webp", ".heic",
)


def path_for_format(path: str, container: str) -> str:
    """
    Make the extension of path match the container format.

    'a@2x.png' stays as is for PNG and becomes 'a@2x.tiff' for TIFF. Names
    without a known image extension get the container extension appended.
    """
    extensions = FORMAT_EXTENSIONS[container]
    root, extension = os.path.splitext(path)
    if extension.lower() in extensions:
        return path
    if extension.lower() in KNOWN_EXTENSIONS:
        return root + extensions[0]
    return path + extensions[0]


def _current_umask() -> int:
    umask = os.umask(0)
    os.umask(umask)
    return umask


def write_atomically(path: str, data: bytes) -> None:
    """
    Write data to path through a temporary file in the same directory.

    The file gets the usual permissions of a new file (0666 minus umask).
    """
    directory = os.path.dirname(path) or "."
    fd, tmp_path = tempfile.mkstemp(dir=directory, prefix=".", suffix=".part")
    try:
        with os.fdopen(fd, "wb") as f:
            f.write(data)
        os.chmod(tmp_path, 0o666 & ~_current_umask())
        os.replace(tmp_path, path)
    except OSError:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)
        raise


class ImageSink:
    """Writes raster pixel data to a file."""

    def save(self, image, path: str) -> str:
        """Write the image and return the path written."""
        raise NotImplementedError


class DocumentSink:
    """Writes vector page data to a file."""

    def save(self, document, path: str) -> str:
        """Write the document and return the path written."""
        raise NotImplementedError


class PillowImageSink(ImageSink):
    """Encodes raster data losslessly with Pillow (PNG by default)."""

    def __init__(self, image_format: str = "PNG", compress_level: int = 6):
        image_format = image_format.upper()
        if image_format not in LOSSLESS_IMAGE_FORMATS:
            raise ValueError(f"Unsupported image format: {image_format}")
        self.image_format = image_format
        self.compress_level = compress_level

    def encode(self, image) -> bytes:
        """
        Encode a PIL image or numpy pixel buffer.

        Raises:
            CannotSaveImage: If there is no pixel data or encoding fails
        """
        if image is None:
            raise CannotSaveImage("No raster image data")

        try:
            if isinstance(image, np.ndarray):
                image = Image.fromarray(image)

            options = {}
            if self.image_format == "PNG":
                options["compress_level"] = self.compress_level

            buffer = io.BytesIO()
            image.save(buffer, format=self.image_format, **options)
        except Exception as e:
            raise CannotSaveImage(f"Cannot encode image as {self.image_format}: {e}") from e

        return buffer.getvalue()

    def save(self, image, path: str) -> str:
        data = self.encode(image)
        path = path_for_format(path, self.image_format)
        try:
            write_atomically(path, data)
        except OSError as e:
            logger.debug(f"Cannot write image {path}: {e}")
            raise CannotSaveImage(f"Cannot write image: {e}") from e
        return path


class PDFDocumentSink(DocumentSink):
    """Copies the first page of a PyMuPDF document into a new single-page PDF."""

    def __init__(self, deflate: bool = True):
        self.deflate = deflate

    def render(self, document: fitz.Document) -> bytes:
        """
        Build a single-page PDF from the document's first page.

        The new page gets the media box size of the source page. Only the
        first page is kept.

        Raises:
            CannotCreatePDFDocument: If the document is missing, closed, has
                no pages or cannot be rendered
        """
        if document is None:
            raise CannotCreatePDFDocument("No vector document")

        try:
            page_count = document.page_count
        except Exception as e:
            raise CannotCreatePDFDocument(f"Cannot read vector document: {e}") from e
        if page_count == 0:
            raise CannotCreatePDFDocument("Vector document has no pages")

        output = fitz.open()
        try:
            source_page = document[0]
            media_box = source_page.mediabox
            page = output.new_page(width=media_box.width, height=media_box.height)
            # show_pdf_page refuses pages without content streams
            if source_page.get_contents():
                page.show_pdf_page(page.rect, document, 0)
            return output.tobytes(deflate=self.deflate)
        except Exception as e:
            raise CannotCreatePDFDocument(f"Cannot render PDF page: {e}") from e
        finally:
            output.close()

    def save(self, document, path: str) -> str:
        data = self.render(document)
        path = path_for_format(path, "PDF")
        try:
            write_atomically(path, data)
        except OSError as e:
            logger.debug(f"Cannot write PDF {path}: {e}")
            raise CannotCreatePDFDocument(f"Cannot write PDF: {e}") from e
        return path
