from __future__ import annotations

from dataclasses import dataclass

import pygame

from .dsp import IN_TUNE_CENTS, NoteReading, guidance

NEEDLE_SPAN_CENTS = 50.0


@dataclass
class UIState:
    reading: NoteReading
    a4_hz: float
    listening: bool


class TunerUI:
    def __init__(self, fullscreen: bool = False, size: tuple[int, int] | None = None):
        pygame.init()
        flags = pygame.FULLSCREEN if fullscreen else 0
        if size is None:
            size = (0, 0) if fullscreen else (640, 400)
        self.screen = pygame.display.set_mode(size, flags)
        pygame.display.set_caption("Tuner")

        self.clock = pygame.time.Clock()
        self.width, self.height = self.screen.get_size()
        self.font_note = pygame.font.SysFont("DejaVu Sans", 120, bold=True)
        self.font_freq = pygame.font.SysFont("DejaVu Sans", 34)
        self.font_meta = pygame.font.SysFont("DejaVu Sans", 22)

    def update(self, state: UIState) -> bool:
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN and event.key in (pygame.K_ESCAPE, pygame.K_q):
                return False

        self.screen.fill((10, 12, 18))
        self._draw_note(state)
        self._draw_needle(state)
        self._draw_guidance(state)
        self._draw_meta(state)

        pygame.display.flip()
        self.clock.tick(30)
        return True

    def _draw_note(self, state: UIState) -> None:
        reading = state.reading
        label = reading.name if reading.frequency <= 0 else f"{reading.name}{reading.octave}"
        color = _note_color(reading)
        note_surf = self.font_note.render(label, True, color)
        note_rect = note_surf.get_rect(center=(self.width // 2, self.height // 2 - 70))
        self.screen.blit(note_surf, note_rect)

        if reading.frequency > 0:
            freq_text = f"{reading.frequency:7.2f} Hz   {reading.cents:+5.1f} cents"
        else:
            freq_text = "--"
        freq_surf = self.font_freq.render(freq_text, True, (200, 200, 200))
        freq_rect = freq_surf.get_rect(center=(self.width // 2, self.height // 2 + 15))
        self.screen.blit(freq_surf, freq_rect)

    def _draw_needle(self, state: UIState) -> None:
        reading = state.reading
        left = 60
        right = self.width - 60
        y = self.height - 130
        center = (left + right) // 2
        pygame.draw.line(self.screen, (90, 90, 90), (left, y), (right, y), 2)
        pygame.draw.line(self.screen, (160, 160, 160), (center, y - 18), (center, y + 18), 2)
        if reading.frequency <= 0:
            return
        cents = max(-NEEDLE_SPAN_CENTS, min(NEEDLE_SPAN_CENTS, reading.cents))
        x = center + int(round(cents / NEEDLE_SPAN_CENTS * (right - center)))
        pygame.draw.line(self.screen, _note_color(reading), (x, y - 30), (x, y + 30), 5)

    def _draw_guidance(self, state: UIState) -> None:
        text = guidance(state.reading, state.listening)
        surf = self.font_freq.render(text, True, _note_color(state.reading))
        rect = surf.get_rect(center=(self.width // 2, self.height - 75))
        self.screen.blit(surf, rect)

    def _draw_meta(self, state: UIState) -> None:
        status = "ouvindo" if state.listening else "parado"
        meta_text = f"A4 = {state.a4_hz:.1f} Hz  |  {status}"
        meta_surf = self.font_meta.render(meta_text, True, (150, 150, 150))
        self.screen.blit(meta_surf, (20, self.height - 35))

    def close(self) -> None:
        pygame.quit()


def _note_color(reading: NoteReading) -> tuple[int, int, int]:
    if reading.frequency <= 0:
        return (120, 120, 120)
    if abs(reading.cents) < IN_TUNE_CENTS:
        return (120, 230, 140)
    if reading.cents < 0:
        return (255, 200, 110)
    return (240, 90, 90)
