from __future__ import annotations

from typing import Protocol

import numpy as np


class FFTEngine(Protocol):
    def forward(self, buffer: np.ndarray, scratch: np.ndarray) -> None: ...

    def inverse(self, buffer: np.ndarray, scratch: np.ndarray) -> None: ...


class NumpyFFT:
    """Unscaled in-place DFT pair; ``scratch`` is overwritten."""

    def forward(self, buffer: np.ndarray, scratch: np.ndarray) -> None:
        np.fft.fft(buffer, norm="backward", out=scratch)
        buffer[:] = scratch

    def inverse(self, buffer: np.ndarray, scratch: np.ndarray) -> None:
        np.fft.ifft(buffer, norm="forward", out=scratch)
        buffer[:] = scratch
