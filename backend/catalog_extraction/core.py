"""
Catalog extraction core functionality.

This module provides the extraction operation, which writes every named asset
of a catalog to disk. Asset group names containing '/' are turned into nested
folders; each asset is saved as a single-page PDF when its rendition carries a
vector page and as a lossless raster image otherwise.
"""

import enum
import logging
import os
import posixpath
from typing import List, Optional

from .catalog import AssetGroup, AssetsCatalog, NamedAsset
from .errors import (
    AssetExtractionError,
    CannotCreateGroupDirectory,
    CannotCreateOutputDirectory,
    CannotCreatePDFDocument,
    CannotSaveImage,
    InvalidAssetName,
    OutputPathIsNotDirectory,
    RenditionMissingData,
)
from .operations import Operation
from .reporting import AssetResult, ExtractionReport, ExtractionReporter
from .sinks import (
    LOSSLESS_IMAGE_FORMATS,
    DocumentSink,
    ImageSink,
    PDFDocumentSink,
    PillowImageSink,
)

logger = logging.getLogger(__name__)

GROUP_SEPARATOR = "/"


class ExtractionConfig:
    """Configuration for catalog extraction."""

    def __init__(
        self,
        image_format: str = "PNG",    # Lossless container for raster assets
        png_compress_level: int = 6,  # zlib level, 0 (none) to 9 (smallest)
        pdf_deflate: bool = True      # Compress PDF streams
    ):
        self.image_format = image_format.upper()
        self.png_compress_level = png_compress_level
        self.pdf_deflate = pdf_deflate
        self.validate()

    def validate(self) -> None:
        if self.image_format not in LOSSLESS_IMAGE_FORMATS:
            raise ValueError(
                f"image_format must be one of {', '.join(LOSSLESS_IMAGE_FORMATS)}, "
                f"got {self.image_format}"
            )
        if not 0 <= self.png_compress_level <= 9:
            raise ValueError(f"png_compress_level must be between 0 and 9, got {self.png_compress_level}")


class OperationState(enum.Enum):
    NOT_STARTED = "not_started"
    COMPLETED = "completed"
    ABORTED = "aborted"


def asset_file_name(asset_name: str) -> str:
    """Last path component of an asset name, ignoring a trailing separator."""
    return posixpath.basename(asset_name.rstrip(GROUP_SEPARATOR))


def group_folder_components(group_name: str) -> List[str]:
    """
    Folder components encoded in a group name.

    All components but the last one are folders. Empty and '.' components
    are dropped.

    Raises:
        CannotCreateGroupDirectory: If a component would leave the output root
    """
    components = group_name.split(GROUP_SEPARATOR)
    folders = [c for c in components[:-1] if c not in ("", ".")]
    if ".." in folders:
        raise CannotCreateGroupDirectory(group_name, "parent directory references are not allowed")
    return folders


class ExtractOperation(Operation):
    """Extracts all named assets of a catalog into an output directory."""

    def __init__(
        self,
        path: str,
        config: Optional[ExtractionConfig] = None,
        reporter: Optional[ExtractionReporter] = None,
        image_sink: Optional[ImageSink] = None,
        document_sink: Optional[DocumentSink] = None
    ):
        self.output_path = os.path.expanduser(path)
        self.config = config or ExtractionConfig()
        self.reporter = reporter or ExtractionReporter()
        self.image_sink = image_sink or PillowImageSink(
            image_format=self.config.image_format,
            compress_level=self.config.png_compress_level
        )
        self.document_sink = document_sink or PDFDocumentSink(deflate=self.config.pdf_deflate)
        self.state = OperationState.NOT_STARTED
        self.report = ExtractionReport(self.output_path)

    def read(self, catalog: AssetsCatalog) -> None:
        """
        Extract every asset of the catalog.

        Per-asset failures are reported and skipped.

        Raises:
            OutputPathIsNotDirectory: If the output path is an existing file
            CannotCreateOutputDirectory: If the output directory cannot be created
        """
        self.report = ExtractionReport(self.output_path)
        try:
            self._check_and_create_output_directory()
        except (OutputPathIsNotDirectory, CannotCreateOutputDirectory):
            self.state = OperationState.ABORTED
            raise

        self.reporter.extraction_started(self.output_path)
        for group in catalog.asset_groups:
            self._extract_group(group)

        self.state = OperationState.COMPLETED
        logger.info(
            f"Extraction into {self.output_path} finished: "
            f"{self.report.extracted} extracted, {self.report.failed} failed"
        )
        self.reporter.extraction_finished(self.report)

    def _check_and_create_output_directory(self) -> None:
        if os.path.exists(self.output_path):
            if not os.path.isdir(self.output_path):
                raise OutputPathIsNotDirectory(self.output_path)
            return

        try:
            os.makedirs(self.output_path, exist_ok=True)
        except OSError as e:
            raise CannotCreateOutputDirectory(self.output_path, str(e)) from e

    def group_directory(self, group_name: str) -> str:
        """Create (if needed) and return the target directory of a group."""
        folders = group_folder_components(group_name)
        if not folders:
            return self.output_path

        directory = os.path.join(self.output_path, *folders)
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            raise CannotCreateGroupDirectory(directory, str(e)) from e
        logger.debug(f"Using directory {directory} for group {group_name}")
        return directory

    def _extract_group(self, group: AssetGroup) -> None:
        try:
            directory = self.group_directory(group.name)
        except CannotCreateGroupDirectory as e:
            logger.warning(f"Skipping group {group.name}: {e}")
            self.report.skipped_groups[group.name] = str(e)
            self.reporter.group_failed(group.name, e.path, e)
            return

        for named_asset in group.named_assets:
            self._extract_named_asset(named_asset, group.name, directory)

    def _extract_named_asset(self, named_asset: NamedAsset, group_name: str, directory: str) -> None:
        file_name = asset_file_name(named_asset.name)
        file_path = os.path.join(directory, file_name)
        try:
            if not file_name:
                raise InvalidAssetName(f"Asset name {named_asset.name!r} has no file name")
            file_path = self.save_named_asset(named_asset, file_path)
        except AssetExtractionError as e:
            logger.debug(f"Failed to extract {group_name}/{file_name}: {e}")
            self.report.results.append(AssetResult(group_name, file_name, error=e))
            self.reporter.asset_failed(group_name, file_name, e)
            return

        self.report.results.append(AssetResult(group_name, file_name, path=file_path))
        self.reporter.asset_extracted(group_name, file_name, file_path)

    def save_named_asset(self, named_asset: NamedAsset, file_path: str) -> str:
        """
        Save an asset as PDF (vector page) or raster image.

        Returns:
            The path written; its extension follows the container format

        Raises:
            RenditionMissingData: If the rendition has neither kind of data
                or cannot be read
            CannotCreatePDFDocument: If the vector page cannot be written
            CannotSaveImage: If the raster image cannot be written
        """
        rendition = named_asset.rendition
        try:
            if rendition.has_vector_page():
                is_vector, payload = True, rendition.vector_document()
            elif rendition.has_raster_image():
                is_vector, payload = False, rendition.raster_image()
            else:
                raise RenditionMissingData(f"Rendition of {named_asset.name!r} has no image data")
        except RenditionMissingData:
            raise
        except Exception as e:
            raise RenditionMissingData(f"Cannot read rendition of {named_asset.name!r}: {e}") from e

        if is_vector:
            try:
                return self.document_sink.save(payload, file_path) or file_path
            except AssetExtractionError:
                raise
            except Exception as e:
                raise CannotCreatePDFDocument(f"Cannot write PDF: {e}") from e

        try:
            return self.image_sink.save(payload, file_path) or file_path
        except AssetExtractionError:
            raise
        except Exception as e:
            raise CannotSaveImage(f"Cannot write image: {e}") from e
