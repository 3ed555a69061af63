"""bbcount ROI — acquisition gate, polygon geometry and ImageJ ROI archives."""

from bbcount.roi.geometry import polygon_area, polygon_mask, validate_bounds
from bbcount.roi.provider import (
    RoiProvider,
    RoiZipProvider,
    StaticRoiProvider,
    acquire_rois,
    cell_label,
)
from bbcount.roi.roi_io import read_roi_zip, write_roi_zip

__all__ = [
    "NAPARI_AVAILABLE",
    "NapariRoiProvider",
    "RoiProvider",
    "RoiZipProvider",
    "StaticRoiProvider",
    "acquire_rois",
    "cell_label",
    "polygon_area",
    "polygon_mask",
    "read_roi_zip",
    "validate_bounds",
    "write_roi_zip",
]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    """Lazy imports for napari-dependent symbols to avoid slow startup."""
    if name in ("NAPARI_AVAILABLE", "NapariRoiProvider"):
        from bbcount.roi.viewer import NAPARI_AVAILABLE, NapariRoiProvider

        return {
            "NAPARI_AVAILABLE": NAPARI_AVAILABLE,
            "NapariRoiProvider": NapariRoiProvider,
        }[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
