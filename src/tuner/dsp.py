from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

import numpy as np

NOTE_NAMES = ("C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B")
IN_TUNE_CENTS = 5.0


@dataclass(frozen=True)
class NoteReading:
    name: str
    octave: int
    cents: float
    frequency: float
    target_frequency: float


EMPTY_READING = NoteReading(name="-", octave=0, cents=0.0, frequency=0.0, target_frequency=0.0)


def rms(frame: np.ndarray) -> float:
    frame = np.asarray(frame)
    if frame.size == 0:
        return 0.0
    return float(np.sqrt(np.mean(frame.astype(np.float32) ** 2)))


def hz_to_midi(hz: float, a4_hz: float = 440.0) -> Optional[float]:
    if hz <= 0:
        return None
    return 69.0 + 12.0 * math.log2(hz / a4_hz)


def midi_to_hz(midi: float, a4_hz: float = 440.0) -> float:
    return a4_hz * (2.0 ** ((midi - 69.0) / 12.0))


def nearest_note(hz: float, a4_hz: float = 440.0) -> NoteReading:
    """Equal-tempered note closest to ``hz`` and the deviation from it in cents."""
    midi = hz_to_midi(hz, a4_hz)
    if midi is None:
        return EMPTY_READING
    nearest = int(round(midi))
    target = midi_to_hz(nearest, a4_hz)
    return NoteReading(
        name=NOTE_NAMES[nearest % 12],
        octave=nearest // 12 - 1,
        cents=1200.0 * math.log2(hz / target),
        frequency=hz,
        target_frequency=target,
    )


def guidance(reading: NoteReading, listening: bool = True) -> str:
    """Which way to turn the peg."""
    if reading.frequency <= 0:
        return "OUVINDO..." if listening else "Toque uma corda"
    if abs(reading.cents) < IN_TUNE_CENTS:
        return "AFINADO"
    return "SUBA O TOM" if reading.cents < 0 else "DESCA O TOM"
