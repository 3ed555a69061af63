"""TIFF metadata helpers via tifffile."""

from __future__ import annotations

import xml.etree.ElementTree as ET

import tifffile

_UM_UNITS = ("µm", "um", "micron")


def extract_pixel_size(tif: tifffile.TiffFile) -> float | None:
    """Try to extract pixel size in micrometers from TIFF metadata.

    Checks OME-XML first, then resolution tags. ImageJ files store
    pixels per unit in the resolution tags with the unit in their metadata.
    """
    # 1. Try OME-XML
    if tif.ome_metadata:
        try:
            root = ET.fromstring(tif.ome_metadata)
            pixels = root.find(".//{*}Pixels")
            if pixels is not None:
                ps_x = pixels.get("PhysicalSizeX")
                unit = pixels.get("PhysicalSizeXUnit", "µm")
                if ps_x is not None:
                    value = float(ps_x)
                    if unit == "nm":
                        return value / 1000.0
                    if unit in ("mm", "millimeter"):
                        return value * 1000.0
                    return value  # assume µm
        except (ET.ParseError, ValueError):
            pass

    # 2. Try TIFF resolution tags
    ij = tif.imagej_metadata
    tags = tif.pages[0].tags
    if "XResolution" in tags and "ResolutionUnit" in tags:
        try:
            x_res = tags["XResolution"].value
            res_unit = tags["ResolutionUnit"].value
            # x_res is a tuple (numerator, denominator)
            if isinstance(x_res, tuple) and len(x_res) == 2:
                pixels_per_unit = x_res[0] / x_res[1]
            else:
                pixels_per_unit = float(x_res)

            if pixels_per_unit > 0:
                # ResolutionUnit: 1=no unit, 2=inch, 3=centimeter
                if ij and ij.get("unit") in _UM_UNITS:
                    return 1.0 / pixels_per_unit
                if res_unit == 3:  # centimeter
                    return 10000.0 / pixels_per_unit
                if res_unit == 2:  # inch
                    return 25400.0 / pixels_per_unit
        except (TypeError, ValueError, ZeroDivisionError):
            pass

    return None
