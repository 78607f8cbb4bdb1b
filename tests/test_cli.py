"""
Runtime config and the command-line entry point.
"""
from __future__ import annotations

import json

from urbanlayout.cli import main
from urbanlayout.config import read_config
from urbanlayout.constants import DEFAULT_SEED
from urbanlayout.protocol import CityLayout


def _write_city(tmp_path):
    city = {
        "roads": {"width": 8, "lines": [[[0, 50], [120, 50]]]},
        "buildings": {
            "landmarks": [{"center": [60, 50], "size": [14, 14, 30]}],
            "blocks": [{"boundary": [[0, 0], [120, 0], [120, 100], [0, 100]]}],
            "defaults": {"size": [10, 10], "spacing": 2, "coverage": 0.4},
        },
    }
    path = tmp_path / "city.json"
    path.write_text(json.dumps(city), encoding="utf-8")
    return path


def test_config_defaults_and_overrides():
    config = read_config([])
    assert config.city.seed == DEFAULT_SEED
    assert config.city.format == "json"
    assert config.generator.coverage_strategy == "shuffled"
    assert config.generator.no_trees is False

    config = read_config(
        ["--city.seed", "7", "--city.path", "c.json", "--generator.coverage_strategy", "largest_first"]
    )
    assert config.city.seed == 7
    assert config.city.path == "c.json"
    assert config.generator.coverage_strategy == "largest_first"


def test_cli_writes_json(tmp_path):
    out = tmp_path / "layout.json"
    rc = main(["--city.path", str(_write_city(tmp_path)), "--city.seed", "7", "--city.output", str(out)])
    assert rc == 0
    data = json.loads(out.read_text(encoding="utf-8"))
    assert data["seed"] == 7
    assert len(data["sha256"]) == 64
    assert data["buildings"]


def test_cli_writes_msgpack(tmp_path):
    out = tmp_path / "layout.bin"
    rc = main(
        [
            "--city.path", str(_write_city(tmp_path)),
            "--city.output", str(out),
            "--city.format", "msgpack",
            "--generator.no_trees",
        ]
    )
    assert rc == 0
    layout = CityLayout.unpack(out.read_bytes())
    assert layout.seed == DEFAULT_SEED
    assert layout.trees == []


def test_cli_reports_bad_input(tmp_path):
    assert main([]) == 2
    assert main(["--city.path", str(tmp_path / "missing.json")]) == 1
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"roads": {"lines": []}}), encoding="utf-8")
    assert main(["--city.path", str(bad)]) == 1


def test_cli_reports_malformed_landmark(tmp_path):
    bad = tmp_path / "bad_landmark.json"
    bad.write_text(
        json.dumps({"roads": {"width": 8, "lines": []}, "buildings": {"landmarks": [{"size": [10, 10, 10]}]}}),
        encoding="utf-8",
    )
    assert main(["--city.path", str(bad)]) == 1
