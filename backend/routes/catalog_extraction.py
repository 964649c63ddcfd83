"""
Catalog extraction API routes.

This module provides endpoints for extracting the assets of an in-memory
catalog, sent as base64 data URLs, into a directory on the server.
"""

import logging
from typing import Dict, List, Optional

import fitz  # PyMuPDF
import PIL
from fastapi import APIRouter, HTTPException
from pydantic import BaseModel, Field

from catalog_extraction.catalog import AssetGroup, AssetsCatalog, NamedAsset
from catalog_extraction.core import ExtractionConfig, ExtractOperation
from catalog_extraction.errors import FatalExtractionError, InvalidDataURL
from catalog_extraction.renditions import rendition_from_data_url
from catalog_extraction.sinks import LOSSLESS_IMAGE_FORMATS

logger = logging.getLogger(__name__)

router = APIRouter()


class AssetPayload(BaseModel):
    """A named asset with its encoded rendition."""

    name: str = Field(..., description="Full asset name, e.g. 'd_iphone_ipad_mac@2x.png'")
    data_url: str = Field(..., description="Base64 data URL holding a PDF or image")


class AssetGroupPayload(BaseModel):
    """An asset group; '/' in the name denotes folder nesting."""

    name: str = Field(..., description="Group name, e.g. 'devices/mix/d_iphone_ipad_mac'")
    assets: List[AssetPayload] = Field(default_factory=list, description="Assets of the group")


class ExtractionRequest(BaseModel):
    """Request model for catalog extraction."""

    output_path: str = Field(..., description="Directory the assets are written to")
    groups: List[AssetGroupPayload] = Field(default_factory=list, description="Asset groups in catalog order")
    config: Optional[Dict] = Field(None, description="Optional extraction configuration parameters")


class ExtractionResponse(BaseModel):
    """Response model for catalog extraction results."""

    success: bool = Field(..., description="Whether extraction completed")
    message: str = Field(..., description="Status message")
    assets: List[Dict] = Field(default_factory=list, description="Per-asset results")
    stats: Dict = Field(default_factory=dict, description="Extraction statistics")


def _build_config(overrides: Optional[Dict]) -> ExtractionConfig:
    config = ExtractionConfig()
    if overrides:
        for key, value in overrides.items():
            if hasattr(config, key) and not callable(getattr(config, key)):
                setattr(config, key, value)
            else:
                logger.warning(f"Unknown config parameter: {key}")
        if isinstance(config.image_format, str):
            config.image_format = config.image_format.upper()
        config.validate()
    return config


def _build_catalog(groups: List[AssetGroupPayload]) -> AssetsCatalog:
    catalog = AssetsCatalog()
    renditions = []
    try:
        for group in groups:
            named_assets = []
            for asset in group.assets:
                rendition = rendition_from_data_url(asset.data_url)
                renditions.append(rendition)
                named_assets.append(NamedAsset(asset.name, rendition))
            catalog.add_group(AssetGroup(group.name, named_assets))
    except InvalidDataURL:
        # Release documents opened for the assets decoded so far
        for rendition in renditions:
            rendition.close()
        raise
    return catalog


def _close_renditions(catalog: AssetsCatalog) -> None:
    for group in catalog.asset_groups:
        for named_asset in group.named_assets:
            named_asset.rendition.close()


@router.post("/extract", response_model=ExtractionResponse)
async def extract_catalog(request: ExtractionRequest) -> ExtractionResponse:
    """
    Extract catalog assets into a directory.

    Every asset group is written below the output path, using all but the last
    component of its name as nested folders. Assets that cannot be extracted
    are reported in the response and do not stop the run.

    Args:
        request: Extraction request containing the output path and asset groups

    Returns:
        ExtractionResponse with per-asset results and a tally

    Raises:
        HTTPException: If the payload or output path is invalid
    """
    try:
        config = _build_config(request.config)
        catalog = _build_catalog(request.groups)
    except (ValueError, TypeError) as e:
        logger.error(f"Invalid extraction config: {str(e)}")
        raise HTTPException(status_code=400, detail=f"Invalid extraction config: {str(e)}")
    except InvalidDataURL as e:
        logger.error(f"Invalid asset payload: {str(e)}")
        raise HTTPException(status_code=400, detail=f"Invalid asset payload: {str(e)}")

    try:
        operation = ExtractOperation(request.output_path, config=config)
        logger.info(f"Starting catalog extraction into {operation.output_path}")
        catalog.perform_operation(operation)

        report = operation.report
        stats = {
            "total_assets": len(report.results),
            "extracted": report.extracted,
            "failed": report.failed,
            "skipped_groups": report.skipped_groups,
            "output_path": report.output_path
        }

        logger.info(f"Extracted {report.extracted} assets, {report.failed} failed")

        return ExtractionResponse(
            success=True,
            message=f"Extracted {report.extracted} of {len(report.results)} assets",
            assets=[result.to_dict() for result in report.results],
            stats=stats
        )

    except FatalExtractionError as e:
        logger.error(f"Catalog extraction failed: {str(e)}")
        raise HTTPException(status_code=400, detail=f"Catalog extraction failed: {str(e)}")

    except Exception as e:
        logger.error(f"Unexpected error during catalog extraction: {str(e)}")
        raise HTTPException(status_code=500, detail="Internal server error during catalog extraction")

    finally:
        _close_renditions(catalog)


@router.get("/config/defaults")
async def get_default_config() -> Dict:
    """
    Get the default extraction configuration parameters.

    Returns:
        Dictionary containing default configuration values and descriptions
    """
    config = ExtractionConfig()

    return {
        "config": {
            "image_format": {
                "value": config.image_format,
                "description": "Lossless container used for raster assets",
                "type": "string",
                "choices": list(LOSSLESS_IMAGE_FORMATS)
            },
            "png_compress_level": {
                "value": config.png_compress_level,
                "description": "zlib compression level for PNG output",
                "type": "integer",
                "min": 0,
                "max": 9
            },
            "pdf_deflate": {
                "value": config.pdf_deflate,
                "description": "Compress streams of extracted PDF files",
                "type": "boolean"
            }
        },
        "output_formats": [
            "application/pdf",
            "image/png",
            "image/tiff",
            "image/bmp"
        ]
    }


@router.get("/health")
async def health_check() -> Dict:
    """
    Report the versions of the encoding libraries.

    Returns:
        Health status and library versions
    """
    return {
        "status": "healthy",
        "message": "Catalog extraction service is ready",
        "dependencies": {
            "pymupdf": fitz.VersionBind,
            "pillow": PIL.__version__
        },
        "features": {
            "vector_extraction": True,
            "raster_extraction": True
        }
    }
