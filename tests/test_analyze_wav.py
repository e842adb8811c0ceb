import importlib.util
import json
from pathlib import Path

import numpy as np
import pytest
import soundfile as sf

TOOL = Path(__file__).resolve().parents[1] / "tools" / "analyze_wav.py"


@pytest.fixture(scope="module")
def analyze_wav():
    spec = importlib.util.spec_from_file_location("analyze_wav", TOOL)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def write_tone(path, freq, sr=44100, seconds=0.5, channels=1):
    t = np.arange(int(sr * seconds)) / sr
    mono = 0.4 * np.sin(2 * np.pi * freq * t)
    data = np.column_stack([mono] * channels) if channels > 1 else mono
    sf.write(str(path), data, sr)


def test_iter_frames(analyze_wav):
    frames = list(analyze_wav.iter_frames(np.arange(10.0), 4, 3))
    assert [f[0] for f in frames] == [0.0, 3.0, 6.0]
    assert all(len(f) == 4 for f in frames)


def test_analyze_tone(analyze_wav, tmp_path):
    path = tmp_path / "a4.wav"
    write_tone(path, 440.0, channels=2)

    result = analyze_wav.analyze_file(path, frame_size=2048, hop=2048)

    assert result["samplerate"] == 44100
    assert len(result["frames_hz"]) == 22050 // 2048
    assert result["median_hz"] == pytest.approx(440.0, abs=1.0)
    assert result["note"] == "A4"


def test_analyze_silence(analyze_wav, tmp_path):
    path = tmp_path / "silence.wav"
    sf.write(str(path), np.zeros(8192), 44100)

    result = analyze_wav.analyze_file(path, frame_size=2048, hop=1024)

    assert result["frames_hz"] == [0.0] * 7
    assert result["median_hz"] is None
    assert result["note"] is None


def test_unreadable_file_is_reported(analyze_wav, tmp_path):
    path = tmp_path / "broken.wav"
    path.write_bytes(b"not audio at all")

    result = analyze_wav.analyze_file(path, frame_size=2048, hop=2048)

    assert result["file"] == str(path)
    assert result["error"].startswith("read-error")


def test_find_audio_files(analyze_wav, tmp_path):
    write_tone(tmp_path / "b.wav", 220.0, seconds=0.1)
    write_tone(tmp_path / "a.flac", 220.0, seconds=0.1)
    (tmp_path / "notes.txt").write_text("x")

    found = list(analyze_wav.find_audio_files([tmp_path]))

    assert [p.name for p in found] == ["a.flac", "b.wav"]


@pytest.mark.parametrize("flags", [["--hop", "-512"], ["--frame-size", "0"], ["--a4", "0"]])
def test_invalid_framing_is_rejected(analyze_wav, tmp_path, flags):
    path = tmp_path / "a4.wav"
    write_tone(path, 440.0, seconds=0.1)
    out = tmp_path / "out.json"

    assert analyze_wav.main([str(path), "--output", str(out), *flags]) == 2
    assert not out.exists()


def test_main_writes_json(analyze_wav, tmp_path):
    path = tmp_path / "a4.wav"
    write_tone(path, 440.0)
    out = tmp_path / "out.json"

    assert analyze_wav.main([str(path), "--output", str(out)]) == 0
    results = json.loads(out.read_text(encoding="utf-8"))
    assert [r["note"] for r in results] == ["A4"]
