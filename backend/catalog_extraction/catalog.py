"""
In-memory assets catalog.

These classes describe the catalog as the extraction engine consumes it:
an ordered list of asset groups, each holding named assets backed by a
rendition. Parsing compiled catalogs into this shape happens elsewhere.
"""

from typing import Iterable, List, Optional

from .operations import CompoundOperation, Operation


class Rendition:
    """
    Image payload of a named asset.

    A well formed rendition carries either a vector page or raster pixels.
    A rendition carrying neither is valid but cannot be extracted.
    """

    def has_vector_page(self) -> bool:
        return self.vector_document() is not None

    def has_raster_image(self) -> bool:
        return self.raster_image() is not None

    def vector_document(self):
        """Return the PyMuPDF document holding the vector page, if any."""
        return None

    def raster_image(self):
        """Return the pixel data (PIL image or numpy array), if any."""
        return None

    def close(self) -> None:
        pass


class NamedAsset:
    """A single image variant of an asset group."""

    def __init__(self, name: str, rendition: Rendition):
        self._name = name
        self._rendition = rendition

    @property
    def name(self) -> str:
        return self._name

    @property
    def rendition(self) -> Rendition:
        return self._rendition

    def __repr__(self) -> str:
        return f"NamedAsset({self._name!r})"


class AssetGroup:
    """A named collection of assets. The name may contain '/' separators."""

    def __init__(self, name: str, named_assets: Optional[Iterable[NamedAsset]] = None):
        self._name = name
        self._named_assets = tuple(named_assets or ())

    @property
    def name(self) -> str:
        return self._name

    @property
    def named_assets(self) -> tuple:
        return self._named_assets

    def __repr__(self) -> str:
        return f"AssetGroup({self._name!r}, {len(self._named_assets)} assets)"


class AssetsCatalog:
    """Ordered collection of asset groups."""

    def __init__(self, asset_groups: Optional[Iterable[AssetGroup]] = None):
        self._asset_groups = list(asset_groups or [])

    @property
    def asset_groups(self) -> List[AssetGroup]:
        return list(self._asset_groups)

    def add_group(self, group: AssetGroup) -> None:
        self._asset_groups.append(group)

    def all_asset_names(self) -> List[str]:
        """Names of all asset groups, in catalog order."""
        return [group.name for group in self._asset_groups]

    def perform_operation(self, operation: Operation) -> None:
        operation.read(self)

    def perform_operations(self, operations: Iterable[Operation]) -> None:
        CompoundOperation(list(operations)).read(self)

    def __len__(self) -> int:
        return len(self._asset_groups)
