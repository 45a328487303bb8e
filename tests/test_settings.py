"""
Tests for persistent settings and the command-line entry point.

Usage:
    pytest tests/test_settings.py
"""

import json
import sys
from pathlib import Path

import pytest
from PIL import Image

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from grid_reader import GridReader
from grid_reader.recognition import TextRecognizer
from grid_reader.settings import DEFAULT_SETTINGS, load_settings, save_settings

import main


def test_missing_file_gives_defaults(tmp_path):
    settings = load_settings(tmp_path / "config.json")
    assert settings == DEFAULT_SETTINGS
    assert settings is not DEFAULT_SETTINGS


def test_round_trip_merges_with_defaults(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"padding": 12, "per_cell": False}), encoding="utf-8")

    settings = load_settings(path)
    assert settings["padding"] == 12
    assert settings["per_cell"] is False
    assert settings["cell_margin"] == DEFAULT_SETTINGS["cell_margin"]

    settings["cell_timeout_sec"] = 3.5
    save_settings(settings, path)
    assert load_settings(path)["cell_timeout_sec"] == 3.5


@pytest.mark.parametrize("content", ["{not json", "[1, 2, 3]"])
def test_invalid_file_gives_defaults(tmp_path, content):
    path = tmp_path / "config.json"
    path.write_text(content, encoding="utf-8")
    assert load_settings(path) == DEFAULT_SETTINGS


def test_cli_overrides_settings():
    args = main.build_parser().parse_args(["shot.png", "--padding", "4", "--whole-region", "--timeout", "2"])
    settings = main.apply_overrides(DEFAULT_SETTINGS.copy(), args)
    assert settings["padding"] == 4
    assert settings["per_cell"] is False
    assert settings["cell_timeout_sec"] == 2.0
    assert settings["cell_margin"] == DEFAULT_SETTINGS["cell_margin"]


def test_cli_manual_entry(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main.main(["--words", "apple, pear"]) == 0
    output = capsys.readouterr().out
    assert "APPLE" in output
    assert "WORD 16" in output


def test_cli_reports_decode_error(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    bad = tmp_path / "bad.png"
    bad.write_bytes(b"nope")
    monkeypatch.setattr(main, "load_settings", lambda: dict(DEFAULT_SETTINGS))
    assert main.main([str(bad)]) == 2



class SilentRecognizer(TextRecognizer):
    @property
    def name(self) -> str:
        return "silent"

    def recognize(self, image, region=None):
        return []


def test_cli_debug_decodes_image_once(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    shot = tmp_path / "shot.png"
    Image.new("RGB", (200, 120), (250, 250, 250)).save(shot)

    loads = []
    real_load = main.load_image

    def counting_load(path):
        loads.append(path)
        return real_load(path)

    monkeypatch.setattr(main, "load_image", counting_load)
    monkeypatch.setattr(main, "DEBUG_DIR", tmp_path / "debug")
    monkeypatch.setattr(main, "load_settings", lambda: dict(DEFAULT_SETTINGS))
    monkeypatch.setattr(main, "GridReader", lambda settings: GridReader(SilentRecognizer(), settings))

    assert main.main([str(shot), "--debug"]) == 1
    assert len(loads) == 1
    assert len(list((tmp_path / "debug").glob("debug_*.png"))) == 1

if __name__ == "__main__":
    sys.exit(pytest.main([__file__, "-v"]))
