"""
Exceptions raised by catalog extraction.

Fatal errors abort an extraction run before any asset is written. Asset errors
are caught per asset by the extraction operation and only reported.
"""


class CatalogExtractionError(Exception):
    """Base class for all catalog extraction errors."""
    pass


class FatalExtractionError(CatalogExtractionError):
    """Raised when an extraction run cannot start."""
    pass


class OutputPathIsNotDirectory(FatalExtractionError):
    """Raised when the output path exists and is not a directory."""

    def __init__(self, path: str):
        super().__init__(f"Output path is not a directory: {path}")
        self.path = path


class CannotCreateOutputDirectory(FatalExtractionError):
    """Raised when the output directory cannot be created."""

    def __init__(self, path: str, reason: str = ""):
        message = f"Cannot create output directory: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path


class CannotCreateGroupDirectory(CatalogExtractionError):
    """Raised when the directory of a nested asset group cannot be created."""

    def __init__(self, path: str, reason: str = ""):
        message = f"Cannot create group directory: {path}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = path


class AssetExtractionError(CatalogExtractionError):
    """Base class for errors confined to a single asset."""
    pass


class RenditionMissingData(AssetExtractionError):
    """Raised when a rendition carries neither vector nor raster data."""
    pass


class CannotSaveImage(AssetExtractionError):
    """Raised when raster data cannot be encoded or written."""
    pass


class CannotCreatePDFDocument(AssetExtractionError):
    """Raised when vector data cannot be turned into a PDF file."""
    pass


class InvalidAssetName(AssetExtractionError):
    """Raised when an asset name does not yield a file name."""
    pass


class InvalidDataURL(CatalogExtractionError):
    """Raised when an encoded payload is not a valid data URL."""
    pass
