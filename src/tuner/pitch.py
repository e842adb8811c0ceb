from __future__ import annotations

import logging
from typing import Optional, Sequence, Tuple, Union

import numpy as np

from .fft import FFTEngine, NumpyFFT

logger = logging.getLogger(__name__)

MIN_FREQ = 60.0
MAX_FREQ = 1200.0
NO_PITCH = 0.0

# Relative size under which the parabola through three lags is treated as flat.
_FLAT_EPS = 1e-9

Frame = Union[Sequence[float], np.ndarray]


def lag_bounds(sample_rate: float, n: int) -> Tuple[int, int]:
    """Lag search window for the 60-1200 Hz band, clamped to the frame."""
    min_lag = int(sample_rate / MAX_FREQ)
    max_lag = int(sample_rate / MIN_FREQ)
    return min_lag, min(max_lag, n - 1)


def parabolic_offset(y1: float, y2: float, y3: float) -> float:
    """Vertex offset of the parabola through (-1, y1), (0, y2), (1, y3).

    Returns 0.0 when the three points are (nearly) collinear.
    """
    denom = 2.0 * y2 - y1 - y3
    if denom == 0.0 or abs(denom) <= _FLAT_EPS * abs(y2):
        return 0.0
    return (y3 - y1) / (2.0 * denom)


class PitchDetector:
    """Single-frame pitch by autocorrelation. Not safe to share between threads."""

    def __init__(self, sample_rate: float, buffer_size: int, fft: Optional[FFTEngine] = None):
        if not sample_rate > 0:
            raise ValueError(f"sample_rate must be positive, got {sample_rate!r}")
        if buffer_size <= 0:
            raise ValueError(f"buffer_size must be positive, got {buffer_size!r}")
        self._sample_rate = float(sample_rate)
        self._fft = fft if fft is not None else NumpyFFT()
        self._allocate(2 * int(buffer_size))

    @property
    def sample_rate(self) -> float:
        return self._sample_rate

    @property
    def buffer_len(self) -> int:
        return len(self._buffer)

    def detect(self, frame: Frame) -> float:
        x = np.asarray(frame, dtype=np.float64).reshape(-1)
        n = x.size
        if n == 0:
            return NO_PITCH

        padded_len = 2 * n
        if len(self._buffer) != padded_len:
            logger.debug("Redimensionando buffers de %d para %d", len(self._buffer), padded_len)
            self._allocate(padded_len)

        buf = self._buffer
        buf[:n] = x
        buf[n:] = 0.0

        self._fft.forward(buf, self._scratch)
        np.multiply(buf, buf.conj(), out=buf)
        buf.imag = 0.0
        self._fft.inverse(buf, self._scratch)

        corr = buf.real[:n]
        min_lag, max_lag = lag_bounds(self._sample_rate, n)
        if min_lag >= max_lag:
            return NO_PITCH

        lag = _strongest_peak(corr, max(min_lag, 1), max_lag)
        if lag is None:
            return NO_PITCH

        d = parabolic_offset(float(corr[lag - 1]), float(corr[lag]), float(corr[lag + 1]))
        return self._sample_rate / (lag + d)

    def _allocate(self, length: int) -> None:
        self._buffer = np.zeros(length, dtype=np.complex128)
        self._scratch = np.zeros(length, dtype=np.complex128)


def _strongest_peak(corr: np.ndarray, start: int, stop: int) -> Optional[int]:
    # Strict local maxima in [start, stop); the earliest one wins a tie.
    if start >= stop:
        return None
    mid = corr[start:stop]
    is_peak = (mid > corr[start - 1 : stop - 1]) & (mid > corr[start + 1 : stop + 1])
    candidates = np.flatnonzero(is_peak & (mid > -1.0))
    if candidates.size == 0:
        return None
    return start + int(candidates[np.argmax(mid[candidates])])
