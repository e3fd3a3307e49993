"""
Tests for the tilemap command-line interface.
"""

import json
import os
import subprocess
import sys

import pytest
import yaml

from tilemap.cli import main, setup_argparse
from tilemap.pipeline import save_image
from tests.fixtures.tile_map_fixtures import create_two_rooms

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))


def _run_cli(*args):
    return subprocess.run(
        [sys.executable, "-m", "tilemap", *args],
        capture_output=True,
        text=True,
        cwd=PROJECT_ROOT,
    )


@pytest.fixture
def map_path(tmp_path):
    return save_image(tmp_path / "map.png", create_two_rooms())


@pytest.fixture
def document_path(map_path, tmp_path):
    output = str(tmp_path / "tile-data.json")
    assert main(["extract", map_path, "-o", output]) == 0
    return output


class TestArgparse:
    def test_extract_defaults(self):
        args = setup_argparse().parse_args(["extract", "map.png"])

        assert args.output == "tile-data.json"
        assert args.config is None
        assert args.visual is None
        assert args.stages is None
        assert args.verbose is False

    def test_locate_coordinates_are_floats(self):
        args = setup_argparse().parse_args(["locate", "doc.json", "12.5", "3"])

        assert args.x == 12.5
        assert args.y == 3.0

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage" in capsys.readouterr().out.lower()


class TestExtractCommand:
    """Tests for the extract command."""

    def test_extract_via_module(self, map_path, tmp_path):
        output = tmp_path / "tile-data.json"

        result = _run_cli("extract", map_path, "-o", str(output))

        assert result.returncode == 0
        assert "Tiles: 2" in result.stdout
        data = json.loads(output.read_text())
        assert len(data["tiles"]) == 2

    def test_extract_missing_image(self, tmp_path):
        result = _run_cli("extract", str(tmp_path / "nonexistent.png"), "-o", str(tmp_path / "out.json"))

        assert result.returncode == 1
        assert "Error" in result.stderr
        assert not (tmp_path / "out.json").exists()

    def test_extract_with_config(self, map_path, tmp_path, capsys):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("tile_extraction:\n  segmentation:\n    max_area: 1000\n")
        output = tmp_path / "tile-data.json"

        code = main(["extract", map_path, "-o", str(output), "-c", str(config_path)])

        assert code == 0
        assert "Tiles: 0" in capsys.readouterr().out
        assert json.loads(output.read_text())["tiles"] == []

    def test_extract_invalid_config(self, map_path, tmp_path, capsys):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("tile_extraction:\n  repair:\n    passes: -1\n")

        code = main(["extract", map_path, "-o", str(tmp_path / "out.json"), "-c", str(config_path)])

        assert code == 1
        assert "Invalid configuration" in capsys.readouterr().err

    def test_extract_writes_stages_and_visual(self, map_path, tmp_path):
        stages = tmp_path / "stages"
        visual = tmp_path / "visual.png"

        code = main([
            "extract", map_path,
            "-o", str(tmp_path / "out.json"),
            "--stages", str(stages),
            "--visual", str(visual),
        ])

        assert code == 0
        assert (stages / "map-clean.png").exists()
        assert (stages / "map-repaired.png").exists()
        assert visual.exists()


class TestInspectCommand:
    def test_inspect_prints_summary(self, document_path, capsys):
        capsys.readouterr()

        assert main(["inspect", document_path]) == 0

        summary = json.loads(capsys.readouterr().out)
        assert summary["tile_count"] == 2
        assert summary["width"] == 120

    def test_inspect_missing_document(self, tmp_path, capsys):
        assert main(["inspect", str(tmp_path / "missing.json")]) == 1
        assert "not found" in capsys.readouterr().err

    def test_inspect_invalid_document(self, tmp_path, capsys):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"width": 5}))

        assert main(["inspect", str(path)]) == 1
        assert "Invalid tile document" in capsys.readouterr().err


class TestLocateCommand:
    def test_point_inside_tile(self, document_path, capsys):
        capsys.readouterr()

        assert main(["locate", document_path, "85", "40"]) == 0

        assert json.loads(capsys.readouterr().out) == {"id": 1, "centerX": 85, "centerY": 40}

    def test_point_outside_tiles(self, document_path, capsys):
        assert main(["locate", document_path, "2", "2"]) == 1
        assert "No tile at (2, 2)" in capsys.readouterr().err


class TestConfigCommand:
    def test_prints_defaults(self, capsys):
        assert main(["config"]) == 0

        data = yaml.safe_load(capsys.readouterr().out)
        assert data["tile_extraction"]["repair"]["passes"] == 3

    def test_merges_file(self, tmp_path):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("simplify:\n  tolerance: 4.0\n")

        result = _run_cli("config", "-c", str(config_path))

        assert result.returncode == 0
        data = yaml.safe_load(result.stdout)
        assert data["tile_extraction"]["simplify"]["tolerance"] == 4.0
        assert data["tile_extraction"]["segmentation"]["min_area"] == 201


class TestMalformedConfig:
    """Tests that broken configuration files exit cleanly."""

    @pytest.mark.parametrize("text", [
        "segmentation: 5\n",
        "- repair\n",
        "tile_extraction:\n  segmentation:\n    seed_stride: '5'\n",
        "tile_extraction:\n  segmentation:\n    seed_strid: 3\n",
    ])
    def test_config_command_reports_error(self, tmp_path, capsys, text):
        config_path = tmp_path / "config.yaml"
        config_path.write_text(text)

        assert main(["config", "--config", str(config_path)]) == 1
        assert "Error: Invalid configuration" in capsys.readouterr().err

    def test_extract_reports_error(self, map_path, tmp_path, capsys):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("repair: not-a-section\n")
        output = tmp_path / "out.json"

        assert main(["extract", map_path, "-o", str(output), "-c", str(config_path)]) == 1
        assert "Error: Invalid configuration" in capsys.readouterr().err
        assert not output.exists()

    def test_null_tile_extraction_prints_defaults(self, tmp_path, capsys):
        config_path = tmp_path / "config.yaml"
        config_path.write_text("tile_extraction:\n")

        assert main(["config", "--config", str(config_path)]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["tile_extraction"]["repair"]["passes"] == 3
