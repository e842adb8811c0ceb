from __future__ import annotations

import argparse
import logging
import queue
import time
from typing import Optional, Sequence

import numpy as np

from .config import AudioConfig, GateConfig, TuningConfig
from .dsp import NoteReading, guidance, nearest_note
from .gate import LevelGate
from .pitch import PitchDetector

logger = logging.getLogger(__name__)


class StreamClock:
    def __init__(self, sample_rate: int):
        self.sample_rate = sample_rate
        self.time_s = 0.0

    def advance(self, frames: int) -> float:
        current = self.time_s
        self.time_s += frames / self.sample_rate
        return current


class TunerSession:
    """Runs each captured block through the detector and the level gate."""

    def __init__(self, audio_cfg: AudioConfig, gate_cfg: GateConfig, tuning_cfg: TuningConfig):
        if not tuning_cfg.a4_hz > 0:
            raise ValueError(f"a4_hz must be positive, got {tuning_cfg.a4_hz!r}")
        self.detector = PitchDetector(audio_cfg.sample_rate, audio_cfg.block_size)
        self.gate = LevelGate(gate_cfg)
        self.clock = StreamClock(audio_cfg.sample_rate)
        self.a4_hz = tuning_cfg.a4_hz

    def process(self, block: np.ndarray) -> NoteReading:
        mono = block[:, 0] if block.ndim > 1 else block
        frame_time = self.clock.advance(len(mono))
        raw_hz = self.detector.detect(mono)
        shown_hz = self.gate.process(frame_time, mono, raw_hz)
        return nearest_note(shown_hz, self.a4_hz)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Afinador de instrumentos")
    parser.add_argument("--device", help="Dispositivo de entrada de audio (indice ou nome)")
    parser.add_argument("--samplerate", type=int, default=44100, help="Sample rate")
    parser.add_argument("--blocksize", type=int, default=2048, help="Tamanho do bloco de audio")
    parser.add_argument("--a4", type=float, default=440.0, help="Referencia do La4 em Hz (so para o nome da nota)")
    parser.add_argument("--fullscreen", action="store_true", help="Tela cheia")
    parser.add_argument("--headless", action="store_true", help="Sem UI, imprime as leituras no terminal")
    parser.add_argument("--verbose", action="store_true", help="Log detalhado")
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    audio_cfg = AudioConfig(sample_rate=args.samplerate, block_size=args.blocksize)
    tuning_cfg = TuningConfig(a4_hz=args.a4)
    try:
        session = TunerSession(audio_cfg, GateConfig(), tuning_cfg)
    except ValueError as exc:
        logger.error("Configuracao invalida: %s", exc)
        return 2

    try:
        import sounddevice as sd
    except OSError as exc:
        logger.error("Nao consegui carregar o PortAudio: %s", exc)
        return 1

    try:
        _run(sd, session, audio_cfg, args)
    except sd.PortAudioError as exc:
        logger.error("Erro no dispositivo de audio: %s", exc)
        return 1
    except KeyboardInterrupt:
        logger.info("Interrompido.")
    return 0


def _run(sd, session: TunerSession, audio_cfg: AudioConfig, args: argparse.Namespace) -> None:
    audio_queue: "queue.Queue[np.ndarray]" = queue.Queue()

    def audio_callback(indata: np.ndarray, frames: int, time_info, status) -> None:
        if status:
            logger.debug("Status do stream: %s", status)
            return
        audio_queue.put(indata.copy())

    stream = sd.InputStream(
        channels=audio_cfg.channels,
        samplerate=audio_cfg.sample_rate,
        blocksize=audio_cfg.block_size,
        device=args.device,
        dtype="float32",
        callback=audio_callback,
    )

    ui = None
    if not args.headless:
        from .ui import TunerUI, UIState

        ui = TunerUI(fullscreen=args.fullscreen)

    reading = nearest_note(0.0)
    last_printed: Optional[NoteReading] = None
    logger.info(
        "Afinador iniciado (%d Hz, bloco de %d amostras)", audio_cfg.sample_rate, audio_cfg.block_size
    )
    try:
        with stream:
            running = True
            while running:
                while not audio_queue.empty():
                    reading = session.process(audio_queue.get())

                if ui:
                    running = ui.update(UIState(reading=reading, a4_hz=session.a4_hz, listening=stream.active))
                else:
                    if reading != last_printed:
                        print(format_reading(reading))
                        last_printed = reading
                    time.sleep(0.01)
    finally:
        if ui:
            ui.close()


def format_reading(reading: NoteReading) -> str:
    if reading.frequency <= 0:
        return "  --"
    return f"  {reading.name}{reading.octave:<2d} {reading.frequency:8.2f} Hz  {reading.cents:+6.1f} cents  {guidance(reading)}"


if __name__ == "__main__":
    raise SystemExit(main())
