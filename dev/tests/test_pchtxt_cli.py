"""Command line entry point: argument handling, exit codes and written files."""

from __future__ import annotations

import json

import pytest

from pchtxt import main as cli
from pchtxt.version import load_version

SAMPLE = """@title "CLI Sample"

@flag nsobid AAAA
// first
@enabled
0100 DEAD

@flag nsobid BBBB
// second
@enabled
0200 BEEF
"""


@pytest.fixture(autouse=True)
def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("PCHTXT_LOG_LEVEL", "PCHTXT_LOG_JSON", "PCHTXT_OUTPUT_DIR"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def sample_file(tmp_path):
    path = tmp_path / "game.pchtxt"
    path.write_text(SAMPLE, encoding="utf-8")
    return path


def test_version_flag(capsys) -> None:
    assert cli.main(["--version"]) == 0
    assert capsys.readouterr().out.strip() == f"pchtxt2ips v{load_version()}"


def test_missing_input_argument() -> None:
    assert cli.main([]) == 2


def test_writes_first_collection_by_default(sample_file, tmp_path) -> None:
    out_dir = tmp_path / "out"

    assert cli.main([str(sample_file), "-o", str(out_dir)]) == 0

    assert sorted(p.name for p in out_dir.iterdir()) == ["AAAA.ips"]
    assert (out_dir / "AAAA.ips").read_bytes() == b"IPS32\x00\x00\x01\x00\x00\x02\xde\xadEEOF"


def test_all_flag_writes_every_collection(sample_file, tmp_path) -> None:
    out_dir = tmp_path / "out"

    assert cli.main([str(sample_file), "-o", str(out_dir), "--all"]) == 0
    assert sorted(p.name for p in out_dir.iterdir()) == ["AAAA.ips", "BBBB.ips"]


def test_config_file_sets_output_dir_and_template(sample_file, tmp_path) -> None:
    config = tmp_path / "pchtxt.yaml"
    out_dir = tmp_path / "from_config"
    config.write_text(
        f"output:\n  output_dir: {out_dir.as_posix()}\n  file_template: \"{{build_id}}.patch.ips\"\n",
        encoding="utf-8",
    )

    assert cli.main([str(sample_file), "--config", str(config)]) == 0
    assert (out_dir / "AAAA.patch.ips").exists()


def test_dump_prints_compiled_json(sample_file, tmp_path, capsys) -> None:
    assert cli.main([str(sample_file), "-o", str(tmp_path), "--dump"]) == 0

    payload = json.loads(capsys.readouterr().out)
    assert payload["meta"]["title"] == "CLI Sample"
    assert [c["build_id"] for c in payload["collections"]] == ["AAAA", "BBBB"]


def test_missing_file_returns_error(tmp_path) -> None:
    assert cli.main([str(tmp_path / "missing.pchtxt"), "-o", str(tmp_path)]) == 1


def test_empty_compile_returns_error(tmp_path) -> None:
    path = tmp_path / "broken.pchtxt"
    path.write_text("@enabled\n0100 00\n", encoding="utf-8")

    assert cli.main([str(path), "-o", str(tmp_path / "out")]) == 1
    assert not (tmp_path / "out").exists()


def test_invalid_config_returns_error(sample_file, tmp_path, capsys) -> None:
    config = tmp_path / "bad.json"
    config.write_text('{"logging": {"level": "LOUD"}}', encoding="utf-8")

    assert cli.main([str(sample_file), "--config", str(config)]) == 1
    assert "Configuration error" in capsys.readouterr().err
