"""Cross-check the decoder against files written by PyEDFlib.

PyEDFlib wraps the reference EDFlib C library, so files it writes are a
good stand-in for recordings produced by clinical software.
"""

from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest

from edf_reader.edf import read_edf

pyedflib = pytest.importorskip("pyedflib", reason="pyedflib required for compatibility tests")


def _write_with_pyedflib(path: Path, signals: list[np.ndarray], labels: list[str], sfreq: int) -> None:
    writer = pyedflib.EdfWriter(str(path), len(signals), file_type=pyedflib.FILETYPE_EDFPLUS)
    try:
        for ch_idx, label in enumerate(labels):
            writer.setLabel(ch_idx, label)
            writer.setPhysicalDimension(ch_idx, "uV")
            writer.setSamplefrequency(ch_idx, sfreq)
            writer.setPhysicalMinimum(ch_idx, -3276.8)
            writer.setPhysicalMaximum(ch_idx, 3276.7)
            writer.setDigitalMinimum(ch_idx, -32768)
            writer.setDigitalMaximum(ch_idx, 32767)
        writer.writeSamples(signals, digital=True)
        writer.writeAnnotation(1.5, 2, "Blink")
        writer.writeAnnotation(3.0, -1, "Lights off")
    finally:
        writer.close()


class TestPyedflibCompatibility:
    def test_digital_samples_match(self, tmp_path: Path) -> None:
        sfreq = 128
        n_samples = sfreq * 4
        rng = np.random.default_rng(7)
        signals = [
            rng.integers(-32768, 32767, size=n_samples, dtype=np.int32),
            np.linspace(-1000, 1000, n_samples).astype(np.int32),
        ]
        path = tmp_path / "pyedflib.edf"
        _write_with_pyedflib(path, signals, ["C3", "C4"], sfreq)

        document = read_edf(path)

        assert document.file_header.number_of_bytes_in_header == 256 * (1 + len(document.signals))
        labels = [signal.header.label for signal in document.signals]
        assert labels[:2] == ["C3", "C4"]
        assert "EDF Annotations" in labels
        for expected, label in zip(signals, ["C3", "C4"]):
            decoded = document.signal(label).samples
            assert decoded.size == document.file_header.number_of_blocks_in_record * document.signal(label).header.number_of_samples
            np.testing.assert_array_equal(decoded.astype(np.int32), expected)
            assert document.signal(label).layout.sample_rate == pytest.approx(sfreq)

    def test_annotations_match(self, tmp_path: Path) -> None:
        sfreq = 64
        signals = [np.zeros(sfreq * 5, dtype=np.int32)]
        path = tmp_path / "annotated.edf"
        _write_with_pyedflib(path, signals, ["Fpz"], sfreq)

        annotations = read_edf(path).annotations
        by_value = {annotation.value: annotation for annotation in annotations}

        assert set(by_value) == {"Blink", "Lights off"}
        assert float(by_value["Blink"].start) == pytest.approx(1.5)
        assert float(by_value["Blink"].duration) == pytest.approx(2.0)
        assert float(by_value["Lights off"].start) == pytest.approx(3.0)
        assert by_value["Lights off"].duration == "\x00"
