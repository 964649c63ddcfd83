"""
Renditions built from encoded payloads.

Lets callers assemble a catalog from PDF or image bytes (or base64 data URLs)
without going through the compiled catalog parser.
"""

import base64
import binascii
import io
import logging
from typing import Optional

import fitz  # PyMuPDF
import numpy as np
from PIL import Image

from .catalog import Rendition
from .errors import InvalidDataURL

logger = logging.getLogger(__name__)

PDF_MAGIC = b"%PDF"


class DataRendition(Rendition):
    """Rendition holding an already decoded vector document or raster image."""

    def __init__(self, vector_document: Optional[fitz.Document] = None, raster_image=None):
        self._vector_document = vector_document
        self._raster_image = raster_image

    def vector_document(self) -> Optional[fitz.Document]:
        return self._vector_document

    def raster_image(self):
        return self._raster_image

    def close(self) -> None:
        if self._vector_document is not None:
            self._vector_document.close()

    @property
    def kind(self) -> str:
        if self._vector_document is not None:
            return "vector"
        if self._raster_image is not None:
            return "raster"
        return "empty"


def rendition_from_bytes(data: bytes) -> DataRendition:
    """
    Decode a PDF or image payload into a rendition.

    Payloads that cannot be decoded produce an empty rendition so that the
    extraction run reports them instead of failing.
    """
    if data.lstrip()[:4] == PDF_MAGIC:
        try:
            return DataRendition(vector_document=fitz.open(stream=data, filetype="pdf"))
        except (RuntimeError, ValueError) as e:
            logger.warning(f"Cannot open PDF payload: {e}")
            return DataRendition()

    try:
        image = Image.open(io.BytesIO(data))
        image.load()
    except (OSError, ValueError) as e:
        logger.warning(f"Cannot decode image payload: {e}")
        return DataRendition()

    return DataRendition(raster_image=image)


def rendition_from_array(pixels: np.ndarray) -> DataRendition:
    """Wrap a numpy pixel buffer (H x W or H x W x C, uint8) as a rendition."""
    if pixels.ndim not in (2, 3):
        raise ValueError(f"Unsupported pixel buffer shape: {pixels.shape}")
    return DataRendition(raster_image=pixels)


def rendition_from_data_url(data_url: str) -> DataRendition:
    """
    Decode a base64 data URL into a rendition.

    Args:
        data_url: URL of the form ``data:<mime>;base64,<payload>``

    Raises:
        InvalidDataURL: If the URL is malformed or the payload is not base64
    """
    if not data_url.startswith("data:") or "," not in data_url:
        raise InvalidDataURL("Invalid data URL format")

    header, payload = data_url.split(",", 1)
    if not header.endswith(";base64"):
        raise InvalidDataURL("Only base64 encoded data URLs are supported")

    try:
        data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError) as e:
        raise InvalidDataURL(f"Invalid base64 payload: {e}") from e

    return rendition_from_bytes(data)
