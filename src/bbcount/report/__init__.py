"""bbcount Report — spot composites, cell overlays and result tables."""

from bbcount.report.render import cell_overlay, colorize, spot_composite, spot_layer
from bbcount.report.writer import (
    COORDS_DIRNAME,
    RESULTS_FILENAME,
    SeriesReportWriter,
    prepare_output_dir,
    read_results_table,
    write_coordinates,
    write_results_table,
)

__all__ = [
    "COORDS_DIRNAME",
    "RESULTS_FILENAME",
    "SeriesReportWriter",
    "cell_overlay",
    "colorize",
    "prepare_output_dir",
    "read_results_table",
    "spot_composite",
    "spot_layer",
    "write_coordinates",
    "write_results_table",
]
