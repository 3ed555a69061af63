"""Tests for bbcount.io.readers."""

from pathlib import Path
from unittest.mock import MagicMock, patch

import numpy as np
import pytest

from bbcount.core.exceptions import FormatError, ShapeError
from bbcount.io.models import ContainerFile
from bbcount.io.readers import LifReader, TiffReader, open_container, to_czyx


class TestTiffReader:
    def test_series_count(self, make_tiff_container, spot_stack):
        path = make_tiff_container("sample.tif", [spot_stack, spot_stack[:, :1]])
        with open_container(path) as reader:
            assert isinstance(reader, TiffReader)
            assert reader.series_count() == 2

    def test_series_names(self, make_tiff_container, spot_stack):
        path = make_tiff_container("sample.tif", [spot_stack, spot_stack])
        with open_container(path) as reader:
            info = reader.series_info(1)
            assert info.raw_name == "Series002"
            assert info.name == "sample_Series002"
            assert reader.series_name(0) == "sample_Series001"

    def test_single_series_name(self, make_tiff_container, spot_stack):
        path = make_tiff_container("single.tif", [spot_stack])
        with open_container(path) as reader:
            assert reader.series_info(0).raw_name == "Series001"
            assert reader.series_name(0) == "single_Series001"

    def test_read_series_is_czyx(self, make_tiff_container, spot_stack):
        path = make_tiff_container("sample.tif", [spot_stack])
        with open_container(path) as reader:
            series = reader.read_series(0)
        assert series.data.shape == (2, 3, 32, 32)
        np.testing.assert_array_equal(series.data, spot_stack)
        assert series.channel_count == 2
        assert series.slice_count == 3

    def test_single_slice_series(self, make_tiff_container, spot_stack):
        path = make_tiff_container("sample.tif", [spot_stack[:, :1]])
        with open_container(path) as reader:
            series = reader.read_series(0)
        assert series.data.shape == (2, 1, 32, 32)

    def test_index_out_of_range(self, make_tiff_container, spot_stack):
        path = make_tiff_container("sample.tif", [spot_stack])
        with open_container(path) as reader:
            with pytest.raises(IndexError):
                reader.read_series(1)

    def test_pixel_size_from_resolution_tags(self, tmp_path: Path, spot_stack):
        import tifffile

        path = tmp_path / "calibrated.tif"
        tifffile.imwrite(
            path, spot_stack[1], photometric="minisblack",
            resolution=(4.0, 4.0), resolutionunit=tifffile.RESUNIT.CENTIMETER,
        )
        with open_container(path) as reader:
            series = reader.read_series(0)
        assert series.pixel_size_um == pytest.approx(2500.0)

    def test_corrupt_file(self, tmp_path: Path):
        path = tmp_path / "broken.tif"
        path.write_bytes(b"this is not a tiff")
        with pytest.raises(FormatError, match="broken.tif"):
            open_container(path)


class TestLifReader:
    def test_series_metadata(self, tmp_path: Path, fake_lif: MagicMock):
        path = tmp_path / "exp.lif"
        with patch("readlif.reader.LifFile", return_value=fake_lif):
            reader = open_container(path)
        assert isinstance(reader, LifReader)
        assert reader.series_count() == 2
        info = reader.series_info(1)
        assert info.raw_name == "Nucleus 01"
        assert info.name == "exp_Nucleus_01"

    def test_read_series_stacks_planes(self, tmp_path: Path, fake_lif: MagicMock):
        with patch("readlif.reader.LifFile", return_value=fake_lif):
            reader = open_container(tmp_path / "exp.lif")
        series = reader.read_series(0)
        assert series.data.shape == (2, 3, 8, 8)
        assert series.data[1, 2, 0, 0] == 12
        assert series.data[0, 1, 4, 4] == 1
        assert series.pixel_size_um == pytest.approx(0.25)

    def test_unnamed_series_fallback(self, tmp_path: Path, fake_lif: MagicMock):
        fake_lif.image_list = [{"name": ""}, {}]
        with patch("readlif.reader.LifFile", return_value=fake_lif):
            reader = open_container(tmp_path / "exp.lif")
        assert reader.series_info(0).raw_name == "Series001"
        assert reader.series_info(1).raw_name == "Series002"

    def test_open_failure_is_format_error(self, tmp_path: Path):
        with patch("readlif.reader.LifFile", side_effect=ValueError("bad header")):
            with pytest.raises(FormatError, match="bad header"):
                open_container(tmp_path / "exp.lif")

    def test_frame_failure_is_format_error(self, tmp_path: Path, fake_lif: MagicMock):
        fake_lif.get_image.return_value.get_frame.side_effect = ValueError("truncated")
        with patch("readlif.reader.LifFile", return_value=fake_lif):
            reader = open_container(tmp_path / "exp.lif")
        with pytest.raises(FormatError, match="truncated"):
            reader.read_series(0)

    def test_mismatched_planes_is_shape_error(self, tmp_path: Path, fake_lif: MagicMock):
        def frame(z=0, t=0, c=0, m=0):
            return np.zeros((8, 8) if c == 0 else (4, 4), dtype=np.uint8)

        fake_lif.get_image.return_value.get_frame.side_effect = frame
        with patch("readlif.reader.LifFile", return_value=fake_lif):
            reader = open_container(tmp_path / "exp.lif")
        with pytest.raises(ShapeError, match="differing shapes"):
            reader.read_series(0)


class TestOpenContainer:
    def test_unsupported_extension(self, tmp_path: Path):
        with pytest.raises(FormatError, match="unsupported extension"):
            open_container(tmp_path / "image.czi")

    def test_unsupported_format(self, tmp_path: Path):
        with pytest.raises(FormatError, match="unsupported format"):
            open_container(ContainerFile(path=tmp_path / "x.nd2", format="nd2"))


class TestToCzyx:
    def test_identity(self):
        data = np.zeros((2, 3, 4, 5))
        assert to_czyx(data, "CZYX").shape == (2, 3, 4, 5)

    def test_reorders_axes(self):
        data = np.zeros((3, 2, 4, 5))
        data[1, 0] = 7
        result = to_czyx(data, "ZCYX")
        assert result.shape == (2, 3, 4, 5)
        assert result[0, 1, 0, 0] == 7

    def test_missing_axes_added(self):
        assert to_czyx(np.zeros((4, 5)), "YX").shape == (1, 1, 4, 5)

    def test_time_reduced_to_first(self):
        data = np.zeros((3, 2, 4, 5))
        data[0] = 1
        result = to_czyx(data, "TZYX")
        assert result.shape == (1, 2, 4, 5)
        assert np.all(result == 1)

    def test_samples_become_channels(self):
        assert to_czyx(np.zeros((4, 5, 3)), "YXS").shape == (3, 1, 4, 5)

    def test_unknown_axis_becomes_z(self):
        assert to_czyx(np.zeros((6, 4, 5)), "QYX").shape == (1, 6, 4, 5)

    def test_axes_length_mismatch(self):
        with pytest.raises(ShapeError):
            to_czyx(np.zeros((4, 5)), "ZYX")

    def test_unmappable_axis(self):
        with pytest.raises(ShapeError):
            to_czyx(np.zeros((2, 2, 4, 5)), "QQYX")
