"""SpotDetector — background suppression and prominence-based maxima search."""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from bbcount.core.exceptions import GeometryError
from bbcount.core.models import Spot

SUPPORTED_METHODS = frozenset({"otsu", "triangle", "li"})

# Relative to the image magnitude; well above float64 rounding of the residue
_TIE_RESOLUTION = 1e-9


@dataclass(frozen=True, eq=False)
class PreparedImage:
    """A plane after filtering, with its foreground and maxima regions.

    Attributes:
        filtered: float64 image after top-hat and median filtering.
        foreground: Pixels above the global threshold.
        maxima_labels: int32 label image, one label per maximum region
            whose prominence exceeds the tolerance.
        threshold_value: The global threshold applied to ``filtered``.
        tolerance: Prominence tolerance used for ``maxima_labels``.
    """

    filtered: np.ndarray
    foreground: np.ndarray
    maxima_labels: np.ndarray
    threshold_value: float
    tolerance: float

    @property
    def shape(self) -> tuple[int, int]:
        return self.filtered.shape  # type: ignore[return-value]

    def spots_in(self, mask: np.ndarray | None = None) -> set[Spot]:
        """Return one Spot per maximum region, restricted to ``mask``.

        Each region is represented by its brightest pixel (first in raster
        order on ties). The region counts only when that pixel is in the
        foreground and inside ``mask``.

        Raises:
            GeometryError: If mask shape differs from the image shape.
        """
        from scipy import ndimage as ndi

        if mask is not None and mask.shape != self.filtered.shape:
            raise GeometryError(
                f"Mask shape {mask.shape} does not match image shape "
                f"{self.filtered.shape}"
            )

        n_regions = int(self.maxima_labels.max()) if self.maxima_labels.size else 0
        if n_regions == 0:
            return set()

        positions = ndi.maximum_position(
            self.filtered, labels=self.maxima_labels, index=np.arange(1, n_regions + 1),
        )
        spots: set[Spot] = set()
        for row, col in positions:
            row, col = int(row), int(col)
            if not self.foreground[row, col]:
                continue
            if mask is not None and not mask[row, col]:
                continue
            spots.add(Spot(x=col, y=row))
        return spots


class SpotDetector:
    """Count local intensity maxima after background suppression.

    Preprocessing runs in a fixed order: white top-hat (disk of
    ``top_hat_radius``), median filter (disk of ``median_radius``), then a
    global automatic threshold that defines the foreground. A radius of 0
    disables the corresponding filter.

    Args:
        top_hat_radius: Top-hat structuring element radius in pixels.
        median_radius: Median filter radius in pixels.
        threshold_method: "otsu", "triangle" or "li".
    """

    def __init__(
        self,
        top_hat_radius: int = 5,
        median_radius: int = 1,
        threshold_method: str = "otsu",
    ) -> None:
        if top_hat_radius < 0 or median_radius < 0:
            raise ValueError("Filter radii must be >= 0")
        if threshold_method not in SUPPORTED_METHODS:
            raise ValueError(
                f"Unknown threshold method {threshold_method!r}. "
                f"Supported: {sorted(SUPPORTED_METHODS)}"
            )
        self.top_hat_radius = int(top_hat_radius)
        self.median_radius = int(median_radius)
        self.threshold_method = threshold_method

    def detect(
        self,
        image: np.ndarray,
        mask: np.ndarray | None,
        tolerance: float,
    ) -> set[Spot]:
        """Find maxima with prominence > ``tolerance`` inside ``mask``.

        Args:
            image: 2D plane.
            mask: Boolean region to search, or None for the whole image.
            tolerance: Prominence a maximum must exceed, on the filtered
                intensity scale.

        Returns:
            Set of Spot coordinates, deterministic for identical input.

        Raises:
            GeometryError: If mask shape differs from the image shape.
        """
        if mask is not None and np.shape(mask) != np.shape(image):
            raise GeometryError(
                f"Mask shape {np.shape(mask)} does not match image shape "
                f"{np.shape(image)}"
            )
        return self.prepare(image, tolerance).spots_in(mask)

    def prepare(self, image: np.ndarray, tolerance: float) -> PreparedImage:
        """Filter, threshold and locate maxima regions once for a plane.

        Raises:
            ValueError: If image is not 2D or tolerance is negative.
        """
        from scipy import ndimage as ndi

        if image.ndim != 2:
            raise ValueError(f"Expected a 2D image, got shape {image.shape}")
        if tolerance < 0:
            raise ValueError(f"tolerance must be >= 0, got {tolerance}")

        filtered = self.filter(image)
        threshold_value, foreground = self._foreground(filtered)

        if foreground.any():
            peaks = self._maxima(filtered, tolerance)
            labels, _ = ndi.label(peaks, structure=np.ones((3, 3), dtype=bool))
        else:
            labels = np.zeros(filtered.shape, dtype=np.int32)

        return PreparedImage(
            filtered=filtered,
            foreground=foreground,
            maxima_labels=labels.astype(np.int32, copy=False),
            threshold_value=threshold_value,
            tolerance=float(tolerance),
        )

    def filter(self, image: np.ndarray) -> np.ndarray:
        """Apply top-hat then median filtering; returns float64."""
        from scipy import ndimage as ndi
        from skimage.morphology import disk, white_tophat

        result = np.asarray(image, dtype=np.float64)
        if self.top_hat_radius > 0:
            result = white_tophat(result, footprint=disk(self.top_hat_radius))
        if self.median_radius > 0:
            result = ndi.median_filter(result, footprint=disk(self.median_radius))
        return result

    def _foreground(self, filtered: np.ndarray) -> tuple[float, np.ndarray]:
        """Global threshold; a constant image has no foreground."""
        lo = float(filtered.min())
        if float(filtered.max()) == lo:
            return lo, np.zeros(filtered.shape, dtype=bool)
        threshold_value = self._compute_threshold(filtered)
        return threshold_value, filtered > threshold_value

    def _compute_threshold(self, image: np.ndarray) -> float:
        """Compute the threshold value using the configured method."""
        from skimage.filters import threshold_li, threshold_otsu, threshold_triangle

        if self.threshold_method == "otsu":
            return float(threshold_otsu(image))
        elif self.threshold_method == "triangle":
            return float(threshold_triangle(image))
        elif self.threshold_method == "li":
            return float(threshold_li(image))
        else:
            raise ValueError(f"Unknown method: {self.threshold_method}")

    @staticmethod
    def _maxima(filtered: np.ndarray, tolerance: float) -> np.ndarray:
        """Boolean map of maxima regions whose prominence exceeds tolerance.

        The highest maxima have no taller peak to descend to; their
        prominence is their height above the image minimum.
        """
        from skimage.morphology import h_maxima, local_maxima

        if tolerance == 0:
            return local_maxima(filtered, connectivity=2, allow_borders=True)
        lo, hi = float(filtered.min()), float(filtered.max())
        if hi - lo <= tolerance:
            return np.zeros(filtered.shape, dtype=bool)
        # h_maxima keeps prominence >= h; step past the tolerance so ties drop out
        step = _TIE_RESOLUTION * max(1.0, abs(lo), abs(hi))
        return h_maxima(filtered, tolerance + step).astype(bool)
