import numpy as np
import pytest

from tuner.dsp import EMPTY_READING, guidance, hz_to_midi, midi_to_hz, nearest_note, rms


def test_rms():
    assert rms(np.zeros(0)) == 0.0
    assert rms(np.full(128, 0.25)) == pytest.approx(0.25)
    assert rms(np.array([1.0, -1.0, 1.0, -1.0])) == pytest.approx(1.0)


def test_hz_midi_conversions():
    assert hz_to_midi(440.0) == pytest.approx(69.0)
    assert hz_to_midi(0.0) is None
    assert hz_to_midi(-3.0) is None
    assert midi_to_hz(60.0) == pytest.approx(261.6256, abs=1e-3)
    assert midi_to_hz(69.0, a4_hz=442.0) == pytest.approx(442.0)


def test_nearest_note_in_tune():
    reading = nearest_note(440.0)
    assert (reading.name, reading.octave) == ("A", 4)
    assert reading.cents == pytest.approx(0.0, abs=1e-9)
    assert reading.target_frequency == pytest.approx(440.0)


def test_nearest_note_reports_cents():
    reading = nearest_note(82.41 * 2 ** (10 / 1200))
    assert (reading.name, reading.octave) == ("E", 2)
    assert reading.cents == pytest.approx(10.0, abs=0.1)

    flat = nearest_note(261.6256 * 2 ** (-30 / 1200))
    assert (flat.name, flat.octave) == ("C", 4)
    assert flat.cents == pytest.approx(-30.0, abs=0.01)


def test_nearest_note_uses_reference():
    reading = nearest_note(442.0, a4_hz=442.0)
    assert reading.name == "A"
    assert reading.cents == pytest.approx(0.0, abs=1e-9)


def test_no_pitch_reading():
    assert nearest_note(0.0) is EMPTY_READING
    assert EMPTY_READING.name == "-"


@pytest.mark.parametrize(
    "cents, expected",
    [(0.0, "AFINADO"), (4.9, "AFINADO"), (-4.9, "AFINADO"), (-12.0, "SUBA O TOM"), (5.5, "DESCA O TOM"), (30.0, "DESCA O TOM")],
)
def test_guidance_direction(cents, expected):
    reading = nearest_note(440.0 * 2 ** (cents / 1200))
    assert guidance(reading) == expected


def test_guidance_without_pitch():
    assert guidance(EMPTY_READING, listening=True) == "OUVINDO..."
    assert guidance(EMPTY_READING, listening=False) == "Toque uma corda"
