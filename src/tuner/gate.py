from __future__ import annotations

from typing import Optional

import numpy as np

from .config import GateConfig
from .dsp import rms


class LevelGate:
    """Attack/sustain level gate with a hold time."""

    def __init__(self, config: GateConfig):
        self.config = config
        self.is_open = False
        self.shown_hz = 0.0
        self.silence_start: Optional[float] = None

    def process(self, time_s: float, frame: np.ndarray, pitch_hz: float) -> float:
        threshold = self.config.sustain_rms if self.is_open else self.config.attack_rms
        voiced = pitch_hz > 0 and rms(frame) > threshold

        if voiced:
            self.is_open = True
            self.shown_hz = pitch_hz
            self.silence_start = None
        elif self.silence_start is None:
            self.silence_start = time_s
        elif time_s - self.silence_start > self.config.hold_s:
            self.reset()

        return self.shown_hz

    def reset(self) -> None:
        self.is_open = False
        self.shown_hz = 0.0
        self.silence_start = None
