"""
Test suite for the ImageSlim command line tools.
"""

import json

import pytest
import numpy as np
from PIL import Image

from imageslim.cli import main, parse_args, parse_svd_args, svd_demo_main
from imageslim.utils import load_image


@pytest.fixture
def input_image(tmp_path):
    """Small RGB PNG on disk."""
    rng = np.random.default_rng(11)
    image = rng.integers(0, 256, size=(12, 10, 3), dtype=np.uint8)
    path = tmp_path / "input.png"
    Image.fromarray(image).save(path)
    return path, image


class TestCompressCommand:
    """Test cases for the imageslim command."""

    def test_parse_args(self):
        """Test argument parsing."""
        args = parse_args(["photo.png", "-c", "4", "-o", "small.png", "--backend", "numpy"])

        assert args.input == "photo.png"
        assert args.level == 4
        assert args.output == "small.png"
        assert args.backend == "numpy"
        assert not args.stats

    def test_compress_to_png(self, tmp_path, input_image):
        """Test end-to-end compression to a lossless format."""
        path, image = input_image
        output = tmp_path / "out" / "result.png"

        status = main([str(path), "-c", "0", "-o", str(output), "-q"])

        assert status == 0
        result = load_image(output)
        assert result.shape == image.shape
        assert np.abs(result.astype(int) - image.astype(int)).max() <= 1

    def test_default_output_is_jpeg(self, tmp_path, input_image, monkeypatch):
        """Test that the default output is out.jpg in the working directory."""
        path, _ = input_image
        monkeypatch.chdir(tmp_path)

        status = main([str(path), "-c", "5", "-q"])

        assert status == 0
        with Image.open(tmp_path / "out.jpg") as img:
            assert img.format == "JPEG"

    def test_format_given_as_extension(self, tmp_path, input_image):
        """Test that --format accepts an extension such as jpg."""
        path, _ = input_image
        output = tmp_path / "o.img"

        status = main([str(path), "-c", "3", "-o", str(output), "--format", "jpg", "-q"])

        assert status == 0
        with Image.open(output) as img:
            assert img.format == "JPEG"

    def test_invalid_level(self, tmp_path, input_image):
        """Test that an invalid level fails without writing output."""
        path, _ = input_image
        output = tmp_path / "never.png"

        status = main([str(path), "-c", "10", "-o", str(output), "-q"])

        assert status == 2
        assert not output.exists()

    def test_missing_input(self, tmp_path):
        """Test a missing input file."""
        status = main([str(tmp_path / "missing.png"), "-c", "3", "-o", str(tmp_path / "x.png"), "-q"])

        assert status == 1

    def test_config_file(self, tmp_path, input_image):
        """Test that configuration values apply when flags are absent."""
        path, image = input_image
        output = tmp_path / "from_config.png"
        config = tmp_path / "config.json"
        config.write_text(json.dumps({
            "compression": {"level": 9, "backend": "numpy"},
            "output": {"path": str(output)}
        }))

        status = main([str(path), "--config", str(config), "-q"])

        assert status == 0
        assert load_image(output).shape == image.shape

    def test_stats_report(self, tmp_path, input_image, capsys):
        """Test the printed quality report."""
        path, _ = input_image

        status = main([str(path), "-c", "6", "-o", str(tmp_path / "r.png"), "--stats", "-q"])

        assert status == 0
        report = capsys.readouterr().out
        assert "input.png" in report
        assert "Rank: 4 / 10" in report


class TestSVDDemo:
    """Test cases for the imageslim-svd command."""

    def test_truncated_output(self, capsys):
        """Test printed factor shapes."""
        status = svd_demo_main(["4", "3", "-s", "2"])

        assert status == 0
        out = capsys.readouterr().out
        assert "Source matrix (4x3)" in out
        assert "U matrix (4x2)" in out
        assert "Singular values (2x2)" in out
        assert "Vt matrix (2x3)" in out

    def test_all_singular_values_by_default(self, capsys):
        """Test that every triple is shown without -s."""
        svd_demo_main(["3", "5"])

        out = capsys.readouterr().out
        assert "Singular values (3x3)" in out

    def test_seeded_matrix_is_reproducible(self, capsys):
        """Test that the same seed prints the same matrix."""
        svd_demo_main(["3", "3", "--seed", "7"])
        first = capsys.readouterr().out
        svd_demo_main(["3", "3", "--seed", "7"])
        second = capsys.readouterr().out

        assert first == second

    @pytest.mark.parametrize("argv", [["0", "3"], ["3", "-1"], ["3", "3", "-s", "0"]])
    def test_invalid_arguments(self, argv):
        """Test argument validation."""
        with pytest.raises(SystemExit):
            parse_svd_args(argv)
