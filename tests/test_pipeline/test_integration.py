"""End-to-end run over real multi-series TIFF containers."""

from pathlib import Path

import pandas as pd

from bbcount.core.config import AnalysisConfig
from bbcount.pipeline import AnalysisEngine
from bbcount.roi.provider import RoiZipProvider, StaticRoiProvider


def test_tiff_container_end_to_end(make_tiff_container, spot_stack, two_cells, tmp_path: Path):
    make_tiff_container("exp.tif", [spot_stack, spot_stack[:, :1]])
    output_dir = tmp_path / "output"
    config = AnalysisConfig(extensions=(".tif",))
    provider = StaticRoiProvider({"exp_Series001": two_cells})

    result = AnalysisEngine(config, provider, output_dir).run(tmp_path / "input")

    assert provider.requests == ["exp_Series001", "exp_Series002"]
    assert result.summary.series_processed == 1
    assert result.summary.series_skipped == 1
    assert [r.n_spots for r in result.results] == [1, 2]
    assert (output_dir / "exp_Series001_spots.tiff").exists()
    assert not (output_dir / "exp_Series002_spots.tiff").exists()


def test_requantify_from_saved_rois(make_tiff_container, spot_stack, two_cells, tmp_path: Path):
    make_tiff_container("exp.tif", [spot_stack])
    first_out = tmp_path / "first"
    config = AnalysisConfig(extensions=(".tif",))
    AnalysisEngine(config, StaticRoiProvider(lambda p: two_cells), first_out).run(tmp_path / "input")

    second_out = tmp_path / "second"
    stricter = config.with_overrides(maxima_tolerance=2000)
    result = AnalysisEngine(stricter, RoiZipProvider(first_out), second_out).run(tmp_path / "input")

    df = pd.read_csv(second_out / "Full_Results.csv")
    assert df["Cell"].tolist() == ["Cell_1", "Cell_2"]
    assert df["No_Spots"].tolist() == [0, 0]
    assert df["ROI_Area"].tolist() == [81.0, 200.0]
    assert result.summary.series_processed == 1
