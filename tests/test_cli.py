"""Tests for the command line interface."""

import cv2
import pytest
from click.testing import CliRunner

from optar.cli.config import AppConfig, load_config, save_config
from optar.cli.main import cli
from optar.visual.geometry import LayoutConfig

SMALL = "_-3-3-4-1-3-1-2"


@pytest.fixture
def config_path(tmp_path):
    # Keep log lines out of the command output
    path = tmp_path / "config.toml"
    path.write_text('log_level = "WARNING"\n')
    return str(path)


def _run(config_path, *args, **kwargs):
    runner = CliRunner()
    return runner.invoke(cli, ["-c", config_path, *args], **kwargs)


class TestInfo:
    def test_small_layout(self, config_path):
        result = _run(config_path, "info", "--layout", SMALL)
        assert result.exit_code == 0, result.output
        assert "12x14 px" in result.output
        assert "Total bits:    64" in result.output
        assert "Symbols/page:  8" in result.output
        assert "Net bytes:     4" in result.output

    def test_default_layout(self, config_path):
        result = _run(config_path, "info")
        assert result.exit_code == 0, result.output
        assert "Hamming(4)" in result.output
        assert "3081456" in result.output

    def test_bad_layout(self, config_path):
        result = _run(config_path, "info", "--layout", "_-3-x")
        assert result.exit_code != 0
        assert "--layout" in result.output

    def test_pitch_too_small(self, config_path):
        result = _run(config_path, "info", "--layout", "_-3-3-2-1")
        assert result.exit_code != 0


class TestEncode:
    def test_file_input(self, config_path, tmp_path):
        src = tmp_path / "data.bin"
        src.write_bytes(bytes(range(9)))
        base = str(tmp_path / "out")
        result = _run(config_path, "encode", str(src), "-o", base,
                      "--layout", SMALL)
        assert result.exit_code == 0, result.output
        paths = result.output.split()
        assert paths == [f"{base}_000{n}.png" for n in (1, 2, 3)]
        img = cv2.imread(paths[0], cv2.IMREAD_GRAYSCALE)
        assert img.shape == (14, 12)

    def test_stdin(self, config_path, tmp_path):
        base = str(tmp_path / "piped")
        result = _run(config_path, "encode", "-", "-o", base, "-f", "bmp",
                      "--layout", SMALL, input=b"hi")
        assert result.exit_code == 0, result.output
        assert result.output.split() == [f"{base}_0001.bmp"]

    def test_golay_fails_cleanly(self, config_path, tmp_path):
        base = str(tmp_path / "g")
        result = _run(config_path, "encode", "-", "-o", base,
                      "--layout", "_-3-3-8-1-1-1-2", input=b"abc")
        assert result.exit_code == 1
        assert "Golay" in result.output

    def test_missing_input(self, config_path, tmp_path):
        result = _run(config_path, "encode", str(tmp_path / "none.bin"))
        assert result.exit_code != 0


class TestConfigCommand:
    def test_show(self, config_path):
        result = _run(config_path, "config")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines()[0] == "optar-67-87-24-3-4-2-24"

    def test_save_layout(self, config_path):
        result = _run(config_path, "config", "--layout", SMALL, "--save")
        assert result.exit_code == 0, result.output
        saved = load_config(config_path)
        assert saved.layout_xcrosses == 3
        assert saved.layout_cpitch == 4
        assert saved.layout_fec_order == 3

    def test_invalid_layout_in_config_file(self, tmp_path):
        path = tmp_path / "bad.toml"
        path.write_text("[layout]\ncpitch = 6\nchalf = 3\n")
        result = _run(str(path), "info")
        assert result.exit_code == 1
        assert "Invalid layout in configuration" in result.output
        assert "--layout" not in result.output

    def test_saved_quoted_base_used_by_encode(self, tmp_path):
        path = tmp_path / "saved.toml"
        base = str(tmp_path / 'quoted "base"')
        cfg = AppConfig(output_base=base, log_level="WARNING")
        cfg.apply_layout(LayoutConfig.from_string(SMALL))
        save_config(cfg, path)

        result = _run(str(path), "encode", "-", input=b"")
        assert result.exit_code == 0, result.output
        assert result.output.splitlines() == [f"{base}_0001.png"]
