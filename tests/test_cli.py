"""
Tests for the command line interface.
"""

import json

import numpy as np
import pytest
from PIL import Image
from typer.testing import CliRunner

from pixelgrind.cli import app, resolve_output_paths

runner = CliRunner()


def write_grey(path, values):
    values = np.asarray(values, dtype=np.uint8)
    Image.fromarray(np.stack([values] * 3, axis=2)).save(path)
    return path


@pytest.fixture
def cross_png(tmp_path):
    return write_grey(tmp_path / "cross.png", [
        [255, 0, 255],
        [0, 128, 0],
        [255, 0, 255],
    ])


@pytest.fixture
def reference_png(tmp_path):
    return write_grey(tmp_path / "cross-noaa.png", [
        [255, 0, 255],
        [0, 0, 0],
        [255, 0, 255],
    ])


class TestDetect:
    """Tests for the detect command."""

    def test_writes_default_outputs(self, tmp_path, cross_png):
        out_dir = tmp_path / "out"
        result = runner.invoke(app, ["detect", str(cross_png), "--out-dir", str(out_dir)])

        assert result.exit_code == 0, result.output
        assert (out_dir / "output.png").exists()
        assert (out_dir / "overlay.png").exists()
        assert not (out_dir / "differential.png").exists()

        summary = json.loads((out_dir / "result.json").read_text())
        assert summary["counts"]["detected"] == 1
        assert summary["counts"]["precision"] is None

    def test_with_reference(self, tmp_path, cross_png, reference_png):
        out_dir = tmp_path / "out"
        gt_path = tmp_path / "custom" / "truth.png"
        result = runner.invoke(app, [
            "detect", str(cross_png),
            "--without-aa", str(reference_png),
            "--out-dir", str(out_dir),
            "--ground-truth", str(gt_path),
        ])

        assert result.exit_code == 0, result.output
        assert (out_dir / "differential.png").exists()
        assert gt_path.exists()
        assert "Precision" in result.output

        summary = json.loads((out_dir / "result.json").read_text())
        assert summary["counts"]["true_positives"] == 1
        assert summary["counts"]["f1"] == 1.0

    def test_dimension_mismatch(self, tmp_path, cross_png):
        other = write_grey(tmp_path / "wide.png", np.zeros((3, 5)))
        out_dir = tmp_path / "out"
        result = runner.invoke(app, [
            "detect", str(cross_png), "--without-aa", str(other), "--out-dir", str(out_dir),
        ])

        assert result.exit_code == 1
        assert not out_dir.exists()

    def test_bad_output_suffix_writes_nothing(self, tmp_path, cross_png, reference_png):
        out_dir = tmp_path / "out"
        result = runner.invoke(app, [
            "detect", str(cross_png),
            "--without-aa", str(reference_png),
            "--out-dir", str(out_dir),
            "--ground-truth", str(tmp_path / "truth.jpg"),
        ])

        assert result.exit_code == 1
        assert not (out_dir / "output.png").exists()
        assert not (out_dir / "overlay.png").exists()

    def test_unused_bad_suffix_ignored_without_reference(self, tmp_path, cross_png):
        result = runner.invoke(app, [
            "detect", str(cross_png),
            "--out-dir", str(tmp_path / "out"),
            "--differential", str(tmp_path / "diff.jpg"),
        ])
        assert result.exit_code == 0, result.output

    def test_unwritable_result(self, tmp_path, cross_png):
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")
        result = runner.invoke(app, [
            "detect", str(cross_png),
            "--out-dir", str(tmp_path / "out"),
            "--result", str(blocker / "result.json"),
        ])
        assert result.exit_code == 1

    def test_missing_input(self, tmp_path):
        result = runner.invoke(app, ["detect", str(tmp_path / "nope.png")])
        assert result.exit_code == 1

    def test_quiet(self, tmp_path, cross_png):
        result = runner.invoke(app, [
            "detect", str(cross_png), "--out-dir", str(tmp_path / "out"), "--quiet",
        ])
        assert result.exit_code == 0
        assert "Detected" not in result.output


class TestPixel:
    def test_explains_pixel(self, cross_png):
        result = runner.invoke(app, ["pixel", str(cross_png), "1", "1"])
        assert result.exit_code == 0, result.output
        assert "Anti-aliased" in result.output

    def test_out_of_bounds(self, cross_png):
        result = runner.invoke(app, ["pixel", str(cross_png), "5", "0"])
        assert result.exit_code == 1


class TestMisc:
    def test_version(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_resolve_output_paths(self, tmp_path):
        paths = resolve_output_paths(tmp_path, overlay=tmp_path / "x.png")
        assert paths["overlay"] == tmp_path / "x.png"
        assert paths["output"] == tmp_path / "output.png"
        assert paths["ground_truth"] == tmp_path / "ground-truth.png"
