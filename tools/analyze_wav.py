#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Sequence

import numpy as np
import soundfile as sf

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT / "src"))

from tuner.dsp import nearest_note  # noqa: E402
from tuner.pitch import PitchDetector  # noqa: E402

logger = logging.getLogger("analyze_wav")

AUDIO_EXTS = (".wav", ".flac", ".ogg", ".aiff", ".aif")


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Detecta a altura de arquivos de audio, quadro a quadro.")
    parser.add_argument("inputs", nargs="+", help="Arquivos ou pastas com audio")
    parser.add_argument("--frame-size", type=int, default=2048, help="Amostras por quadro")
    parser.add_argument("--hop", type=int, default=0, help="Passo entre quadros (0 = frame-size)")
    parser.add_argument("--a4", type=float, default=440.0, help="Referencia do La4 em Hz")
    parser.add_argument("--output", help="Arquivo JSON de saida (padrao: stdout)")
    return parser.parse_args(argv)


def read_mono(path: Path):
    data, sr = sf.read(str(path), dtype="float32", always_2d=True)
    return data.mean(axis=1), sr


def iter_frames(samples: np.ndarray, frame_size: int, hop: int) -> Iterator[np.ndarray]:
    for start in range(0, len(samples) - frame_size + 1, hop):
        yield samples[start : start + frame_size]


def analyze_file(path: Path, frame_size: int, hop: int, a4_hz: float = 440.0) -> Dict:
    try:
        samples, sr = read_mono(path)
    except (RuntimeError, sf.LibsndfileError) as exc:
        logger.warning("Falha lendo %s: %s", path, exc)
        return {"file": str(path), "error": f"read-error: {exc}"}

    detector = PitchDetector(sr, frame_size)
    frames: List[float] = [round(detector.detect(frame), 3) for frame in iter_frames(samples, frame_size, hop)]
    voiced = [hz for hz in frames if hz > 0]

    result = {
        "file": str(path),
        "samplerate": int(sr),
        "duration_s": round(len(samples) / sr, 3),
        "frame_size": frame_size,
        "hop": hop,
        "frames_hz": frames,
        "median_hz": None,
        "note": None,
        "cents": None,
    }
    if voiced:
        median = float(np.median(voiced))
        reading = nearest_note(median, a4_hz)
        result.update(median_hz=round(median, 2), note=f"{reading.name}{reading.octave}", cents=round(reading.cents, 1))
    return result


def find_audio_files(paths: List[Path]) -> Iterator[Path]:
    for path in paths:
        if path.is_dir():
            yield from sorted(p for p in path.rglob("*") if p.is_file() and p.suffix.lower() in AUDIO_EXTS)
        else:
            yield path


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    if args.frame_size <= 0:
        logger.error("--frame-size precisa ser positivo")
        return 2
    if args.hop < 0:
        logger.error("--hop nao pode ser negativo")
        return 2
    if not args.a4 > 0:
        logger.error("--a4 precisa ser positivo")
        return 2
    hop = args.hop or args.frame_size

    missing = [p for p in args.inputs if not Path(p).exists()]
    if missing:
        logger.error("Nao achei: %s", ", ".join(missing))
        return 2

    results = [analyze_file(p, args.frame_size, hop, args.a4) for p in find_audio_files([Path(p) for p in args.inputs])]
    text = json.dumps(results, ensure_ascii=True, indent=2)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        logger.info("%d arquivo(s) analisado(s), resultado em %s", len(results), args.output)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
