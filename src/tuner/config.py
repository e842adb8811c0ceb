from dataclasses import dataclass


@dataclass
class AudioConfig:
    sample_rate: int = 44100
    block_size: int = 2048
    channels: int = 1


@dataclass
class GateConfig:
    attack_rms: float = 0.01
    sustain_rms: float = 0.001
    hold_s: float = 0.3


@dataclass
class TuningConfig:
    a4_hz: float = 440.0
