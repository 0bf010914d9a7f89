"""Tests for the reverc command-line tool."""

from __future__ import annotations

import json

import pytest
import yaml

from reverlib import __version__
from reverlib.cli import main

SOURCE = "GET /users/{id}\n  |> input(id: path.id)\n  |> respond 200 { id: user.id }\n"


@pytest.fixture
def source_file(tmp_path):
    path = tmp_path / "users.rever"
    path.write_text(SOURCE)
    return path


@pytest.fixture(autouse=True)
def isolated_cwd(tmp_path, monkeypatch):
    # Keep a developer's own .reverc.yml out of the tests.
    monkeypatch.chdir(tmp_path)


class TestMain:
    def test_json_to_stdout(self, source_file, capsys) -> None:
        assert main([str(source_file)]) == 0
        out = capsys.readouterr().out
        data = json.loads(out)
        assert data["routes"][0]["route"] == {"method": "GET", "path": "/users/{id}"}
        assert out.startswith('{\n  "version"')

    def test_compact(self, source_file, capsys) -> None:
        assert main(["--compact", str(source_file)]) == 0
        assert capsys.readouterr().out.count("\n") == 1

    def test_yaml(self, source_file, capsys) -> None:
        assert main(["--format", "yaml", str(source_file)]) == 0
        data = yaml.safe_load(capsys.readouterr().out)
        assert data["routes"][0]["output"]["status"] == 200

    def test_output_file(self, source_file, tmp_path) -> None:
        out = tmp_path / "build" / "ir.json"
        assert main(["-o", str(out), str(source_file)]) == 0
        assert json.loads(out.read_text())["version"] == "0.1"

    def test_compile_error(self, tmp_path, capsys) -> None:
        bad = tmp_path / "bad.rever"
        bad.write_text("GET /a\n  |> 42\n")
        assert main([str(bad)]) == 1
        captured = capsys.readouterr()
        assert captured.out == ""
        assert f"{bad}:2:6: expected step keyword" in captured.err

    def test_missing_file(self, tmp_path, capsys) -> None:
        assert main([str(tmp_path / "nope.rever")]) == 2
        assert "error:" in capsys.readouterr().err

    def test_no_input(self, capsys) -> None:
        assert main([]) == 2
        assert "no input files" in capsys.readouterr().err

    def test_bad_config(self, source_file, tmp_path, capsys) -> None:
        config = tmp_path / "conf.yml"
        config.write_text("format: xml\n")
        assert main(["--config", str(config), str(source_file)]) == 2
        assert "format" in capsys.readouterr().err

    def test_config_include_and_flags_override(self, tmp_path, capsys) -> None:
        (tmp_path / "routes").mkdir()
        (tmp_path / "routes" / "a.rever").write_text("GET /a\n  |> respond 200\n")
        (tmp_path / ".reverc.yml").write_text("format: yaml\ninclude:\n  - routes/*.rever\n")
        assert main(["--format", "json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["routes"][0]["route"]["path"] == "/a"

    def test_include_relative_to_config_dir(self, tmp_path, capsys) -> None:
        (tmp_path / "routes").mkdir()
        (tmp_path / "routes" / "wrong.rever").write_text("GET /wrong\n  |> respond 200\n")
        project = tmp_path / "sub"
        (project / "routes").mkdir(parents=True)
        (project / "routes" / "a.rever").write_text("GET /sub\n  |> respond 200\n")
        (project / ".reverc.yml").write_text("include:\n  - routes/*.rever\n")
        assert main(["--config", "sub/.reverc.yml"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert [r["route"]["path"] for r in data["routes"]] == ["/sub"]

    def test_version(self, capsys) -> None:
        with pytest.raises(SystemExit) as exc_info:
            main(["--version"])
        assert exc_info.value.code == 0
        assert __version__ in capsys.readouterr().out
