"""Tests for the command line interface."""
import json

import pytest
from typer.testing import CliRunner

from svgmotion.cli import app

runner = CliRunner()

SVG = '<svg xmlns="http://www.w3.org/2000/svg"><path d="M0 0"/><circle id="dot" r="1"/></svg>'


@pytest.fixture
def svg_file(tmp_path):
    path = tmp_path / "in.svg"
    path.write_text(SVG, encoding="utf-8")
    return path


@pytest.fixture
def script_file(tmp_path):
    path = tmp_path / "script.json"
    path.write_text(json.dumps({
        "duration": 2000,
        "layers": {
            "dot": {
                "name": "Dot",
                "keyframes": [
                    {"time": 0, "properties": {"opacity": 0}},
                    {"time": 2000, "properties": {"opacity": 1}},
                ],
            },
        },
    }), encoding="utf-8")
    return path


def test_inspect_lists_layers(svg_file):
    result = runner.invoke(app, ["--log-level", "WARNING", "inspect", str(svg_file)])
    assert result.exit_code == 0
    layers = json.loads(result.stdout)
    assert [layer["id"] for layer in layers] == ["path-0-1", "dot"]
    assert layers[1]["kind"] == "circle"


def test_compile_writes_output(svg_file, script_file, tmp_path):
    out = tmp_path / "out.svg"
    result = runner.invoke(app, ["--log-level", "WARNING", "compile", str(svg_file), "--script", str(script_file), "--output", str(out)])
    assert result.exit_code == 0
    text = out.read_text(encoding="utf-8")
    assert ".dot { animation: anim-dot 2s linear infinite; }" in text


def test_compile_duration_override(svg_file, script_file):
    result = runner.invoke(app, ["--log-level", "WARNING", "compile", str(svg_file), "-s", str(script_file), "-d", "4000"])
    assert result.exit_code == 0
    assert "anim-dot 4s linear infinite" in result.stdout
    assert "50.0% { opacity: 1; }" in result.stdout


def test_preview_prints_state(svg_file, script_file):
    result = runner.invoke(app, ["--log-level", "WARNING", "preview", str(svg_file), "--time", "1000", "--script", str(script_file)])
    assert result.exit_code == 0
    assert json.loads(result.stdout)["dot"] == {"opacity": 0.5}


def test_invalid_svg_exits_nonzero(tmp_path):
    bad = tmp_path / "bad.svg"
    bad.write_text("<svg><nope></svg>", encoding="utf-8")
    result = runner.invoke(app, ["--log-level", "WARNING", "inspect", str(bad)])
    assert result.exit_code == 1
