# khata_pos/utils/sound.py
"""
Audio feedback for named UI events.

Tones are synthesized once into small WAV files under the data directory
and played through QSoundEffect. Playback is fire-and-forget: any failure
(no audio device, missing QtMultimedia backend) is logged and ignored.
"""
from __future__ import annotations

import logging
import math
import struct
import wave
from pathlib import Path
from typing import Dict, Optional, Tuple

_log = logging.getLogger(__name__)

SOUND_EVENTS = (
    "scan-success",
    "scan-error",
    "add-to-cart",
    "delete",
    "click",
    "payment-success",
    "sync",
)

# event -> (start Hz, end Hz, seconds, volume)
_TONES: Dict[str, Tuple[float, float, float, float]] = {
    "scan-success": (1200.0, 600.0, 0.15, 0.10),
    "scan-error": (150.0, 100.0, 0.20, 0.10),
    "add-to-cart": (800.0, 800.0, 0.08, 0.05),
    "delete": (300.0, 150.0, 0.12, 0.08),
    "click": (1000.0, 1000.0, 0.03, 0.04),
    "payment-success": (660.0, 1320.0, 0.30, 0.10),
    "sync": (500.0, 700.0, 0.10, 0.05),
}

_SAMPLE_RATE = 22050


def write_tone(path: Path, start_hz: float, end_hz: float, seconds: float, volume: float) -> None:
    """Write a mono 16-bit sweep with a linear fade-out."""
    n = max(1, int(_SAMPLE_RATE * seconds))
    frames = bytearray()
    phase = 0.0
    for i in range(n):
        t = i / n
        freq = start_hz + (end_hz - start_hz) * t
        phase += 2 * math.pi * freq / _SAMPLE_RATE
        amp = volume * (1.0 - t)
        frames += struct.pack("<h", int(32767 * amp * math.sin(phase)))
    with wave.open(str(path), "wb") as w:
        w.setnchannels(1)
        w.setsampwidth(2)
        w.setframerate(_SAMPLE_RATE)
        w.writeframes(bytes(frames))


class NullSoundPlayer:
    """Silent player (tests, headless runs). Records what was requested."""

    def __init__(self) -> None:
        self.played: list[str] = []

    def play(self, event: str) -> None:
        self.played.append(event)


class SoundPlayer:
    def __init__(self, cache_dir: Path, enabled: bool = True):
        self._dir = Path(cache_dir)
        self._enabled = enabled
        self._effects: Dict[str, object] = {}

    def set_enabled(self, enabled: bool) -> None:
        self._enabled = bool(enabled)

    def _effect_for(self, event: str) -> Optional[object]:
        if event in self._effects:
            return self._effects[event]
        tone = _TONES.get(event)
        if tone is None:
            _log.warning("Unknown sound event %r", event)
            return None
        from PySide6.QtCore import QUrl
        from PySide6.QtMultimedia import QSoundEffect

        self._dir.mkdir(parents=True, exist_ok=True)
        wav = self._dir / f"{event}.wav"
        if not wav.exists():
            write_tone(wav, *tone)
        effect = QSoundEffect()
        effect.setSource(QUrl.fromLocalFile(str(wav)))
        self._effects[event] = effect
        return effect

    def play(self, event: str) -> None:
        if not self._enabled:
            return
        try:
            effect = self._effect_for(event)
            if effect is not None:
                effect.play()
        except Exception as exc:
            _log.warning("Sound %r failed: %s", event, exc)
