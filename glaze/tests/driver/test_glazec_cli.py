# vim: set noexpandtab: -*- indent-tabs-mode: t -*-

import json
from pathlib import Path

import pytest

from glaze import compile_file
from glaze.core.errors import SourceLoadError
from glaze.glazec import main

SOURCE = ".class\n\tspan\n\t\tcolor: lightgray\n"
EXPECTED = ".class span {\n\tcolor: lightgray;\n}\n\n"


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
	monkeypatch.chdir(tmp_path)
	return tmp_path


def test_compiles_into_output_dir(workdir: Path) -> None:
	(workdir / "style.glz").write_text(SOURCE)
	assert main(["style.glz", "out"]) == 0
	assert (workdir / "out" / "style.css").read_text() == EXPECTED
	assert (workdir / "out" / "style.js").read_text() == ""


def test_defaults_to_current_directory(workdir: Path) -> None:
	(workdir / "style.glz").write_text(SOURCE)
	assert main(["style.glz"]) == 0
	assert (workdir / "style.css").read_text() == EXPECTED


def test_stdout_mode(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	(workdir / "style.glz").write_text(SOURCE)
	assert main(["style.glz", "--stdout"]) == 0
	assert capsys.readouterr().out == EXPECTED
	assert not (workdir / "style.css").exists()


def test_production_flag_compacts(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	(workdir / "style.glz").write_text("/* c */\n" + SOURCE)
	assert main(["style.glz", "--stdout", "-p"]) == 0
	assert capsys.readouterr().out == ".class span{color:lightgray}"


def test_rejects_other_extensions(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	(workdir / "style.css").write_text(SOURCE)
	assert main(["style.css"]) == 1
	assert "Glaze files must end with .glz extension" in capsys.readouterr().err


def test_missing_source(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	assert main(["missing.glz"]) == 1
	assert capsys.readouterr().err == "missing.glz:?:?: error: file not found: missing.glz\n"


def test_human_error_format(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	(workdir / "style.glz").write_text(".a\n\tcolor: $missing\n")
	assert main(["style.glz"]) == 1
	assert capsys.readouterr().err == "style.glz:2:9: error: Could not find variable: $missing\n"
	assert not (workdir / "style.css").exists()


def test_json_error_payload(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	(workdir / "style.glz").write_text(".a\n\tcolor: $missing\n")
	assert main(["style.glz", "--json"]) == 1
	payload = json.loads(capsys.readouterr().out)
	assert payload["exit_code"] == 1
	assert payload["diagnostics"] == [
		{
			"phase": "generator",
			"message": "Could not find variable: $missing",
			"severity": "error",
			"file": "style.glz",
			"line": 2,
			"column": 9,
			"code": "undefined_variable",
		}
	]


def test_json_reports_parse_phase(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	(workdir / "style.glz").write_text('.a\n\tcontent: "open\n')
	assert main(["style.glz", "--json"]) == 1
	diag = json.loads(capsys.readouterr().out)["diagnostics"][0]
	assert (diag["phase"], diag["code"], diag["line"], diag["column"]) == ("lexer", "unterminated_string", 2, 11)


def test_json_success_payload(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	(workdir / "style.glz").write_text(SOURCE)
	assert main(["style.glz", "--json"]) == 0
	assert json.loads(capsys.readouterr().out) == {"exit_code": 0, "diagnostics": []}


def test_config_out_dir_and_compact(workdir: Path) -> None:
	(workdir / "glaze.json").write_text(json.dumps({"format": "glaze-config", "version": 0, "outDir": "dist", "compact": True}))
	(workdir / "style.glz").write_text(SOURCE)
	assert main(["style.glz"]) == 0
	assert (workdir / "dist" / "style.css").read_text() == ".class span{color:lightgray}"


def test_output_dir_argument_overrides_config(workdir: Path) -> None:
	(workdir / "glaze.json").write_text(json.dumps({"outDir": "dist"}))
	(workdir / "style.glz").write_text(SOURCE)
	assert main(["style.glz", "build"]) == 0
	assert (workdir / "build" / "style.css").exists()
	assert not (workdir / "dist").exists()


def test_bad_config_is_reported(workdir: Path, capsys: pytest.CaptureFixture[str]) -> None:
	(workdir / "glaze.json").write_text(json.dumps({"outdir": "dist"}))
	(workdir / "style.glz").write_text(SOURCE)
	assert main(["style.glz", "--json"]) == 1
	diag = json.loads(capsys.readouterr().out)["diagnostics"][0]
	assert diag["phase"] == "config"
	assert diag["code"] == "config"
	assert "unknown key 'outdir'" in diag["message"]


def test_explicit_config_path(workdir: Path) -> None:
	conf = workdir / "conf"
	conf.mkdir()
	(conf / "site.json").write_text(json.dumps({"outDir": "../public"}))
	(workdir / "style.glz").write_text(SOURCE)
	assert main(["style.glz", "--config", "conf/site.json"]) == 0
	assert (workdir / "public" / "style.css").read_text() == EXPECTED


def test_compile_file_reports_bad_utf8(tmp_path: Path) -> None:
	path = tmp_path / "bad.glz"
	path.write_bytes(b".a\n\tcontent: '\xff'\n")
	with pytest.raises(SourceLoadError) as exc:
		compile_file(path)
	assert "is not valid UTF-8" in exc.value.message
	assert exc.value.phase == "io"
