from __future__ import annotations

import json
from pathlib import Path

import numpy as np
import pytest

from edf_reader.edf import cli


def _signals():
    return [
        ("EEG Fpz-Cz", 8, np.arange(16, dtype=np.int16)),
        ("EDF Annotations", 20, [b"+0\x14\x14\x00+0.5\x15\x30\x14Sleep stage W\x14\x00", b"+1\x14\x14\x00"]),
    ]


def test_cli_prints_summary(write_edf, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_edf(_signals(), name="night.edf")

    exit_code = cli.main([str(path), "--annotations"])

    assert exit_code == 0
    out = capsys.readouterr().out
    assert "night.edf: 2 signals, 2 records" in out
    assert "EEG Fpz-Cz" in out
    assert "16 samples" in out
    assert "Sleep stage W" in out


def test_cli_writes_json_sidecar(write_edf, tmp_path: Path) -> None:
    path = write_edf(_signals(), name="night.edf")
    output_dir = tmp_path / "out"

    exit_code = cli.main([str(path), "--json-sidecar", "--out", str(output_dir)])

    assert exit_code == 0
    payload = json.loads((output_dir / "night.json").read_text())
    assert payload["edf_file"] == "night.edf"
    assert payload["start_time"] == "2024-03-15 10:30:00"
    assert payload["number_of_blocks_in_record"] == 2
    assert payload["bytes_in_data_record"] == 56
    assert [signal["label"] for signal in payload["signals"]] == ["EEG Fpz-Cz", "EDF Annotations"]
    assert payload["signals"][0]["decoded_count"] == 16
    assert payload["signals"][0]["sample_rate_hz"] == 8
    assert payload["annotations"] == [{"start": "+0.5", "duration": "0", "value": "Sleep stage W"}]


def test_cli_sidecar_defaults_next_to_input(write_edf) -> None:
    path = write_edf(_signals(), name="night.edf")
    assert cli.main([str(path), "--json-sidecar"]) == 0
    assert path.with_suffix(".json").exists()


def test_cli_reports_failures(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    broken = tmp_path / "broken.edf"
    broken.write_bytes(b"0" * 12)

    exit_code = cli.main([str(broken), str(tmp_path / "missing.edf")])

    assert exit_code == 1
    assert "Failed to decode" in caplog.text


def test_cli_succeeds_when_any_file_decodes(write_edf, tmp_path: Path) -> None:
    good = write_edf(_signals(), name="good.edf")
    assert cli.main([str(good), str(tmp_path / "missing.edf")]) == 0


def test_cli_ui_requires_rich(write_edf, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]) -> None:
    path = write_edf(_signals())
    monkeypatch.setattr(cli, "rich_available", lambda: False)

    assert cli.main([str(path), "--ui"]) == 1
    assert "requires 'rich'" in capsys.readouterr().out


def test_cli_ui_renders_tables(write_edf, capsys: pytest.CaptureFixture[str]) -> None:
    pytest.importorskip("rich")
    path = write_edf(_signals(), name="night.edf")

    assert cli.main([str(path), "--ui", "--annotations"]) == 0
    out = capsys.readouterr().out
    assert "Signals" in out
    assert "Sleep stage W" in out


def _reject_constant(name: str) -> None:
    raise AssertionError(f"sidecar contains non-standard JSON constant {name}")


def test_cli_sidecar_writes_null_for_non_finite_values(write_edf, tmp_path: Path) -> None:
    path = write_edf(
        [("EDF Annotations", 10, [b"+0\x14\x14\x00"])],
        name="events.edf",
        record_duration="0",
        signal_overrides={"physical_min": ["n/a"]},
    )
    output_dir = tmp_path / "out"

    assert cli.main([str(path), "--json-sidecar", "--out", str(output_dir)]) == 0

    text = (output_dir / "events.json").read_text()
    payload = json.loads(text, parse_constant=_reject_constant)
    signal = payload["signals"][0]
    assert signal["physical_min"] is None
    assert signal["sample_rate_hz"] is None
    assert signal["sample_duration_seconds"] == 0
    assert payload["duration_of_data_record"] == 0
