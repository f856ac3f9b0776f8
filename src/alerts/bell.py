"""Sounddevice-backed completion bell synthesized with numpy."""

import logging
from typing import Optional

import numpy as np
import sounddevice as sd

from .contracts import AlertError

_SAMPLE_RATE_HZ = 44100


class BellNotifier:
    """Plays a short decaying chime whenever an interval completes."""
    def __init__(
        self,
        *,
        frequency_hz: float = 880.0,
        duration_seconds: float = 1.2,
        volume: float = 0.4,
        output_device_index: Optional[int] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if frequency_hz <= 0:
            raise AlertError("Bell frequency must be greater than zero")
        if duration_seconds <= 0:
            raise AlertError("Bell duration must be greater than zero")
        if not 0.0 < volume <= 1.0:
            raise AlertError("Bell volume must be in (0, 1]")

        self._output_device_index = output_device_index
        self._logger = logger or logging.getLogger("alerts.bell")
        self._wav = synthesize_chime(
            frequency_hz=frequency_hz,
            duration_seconds=duration_seconds,
            volume=volume,
        )

    @property
    def samples(self) -> np.ndarray:
        return self._wav

    def notify(self, title: str, body: str) -> None:
        del title, body  # The bell carries no text.
        try:
            sd.play(
                self._wav,
                samplerate=_SAMPLE_RATE_HZ,
                device=self._output_device_index,
                blocking=False,
            )
        except Exception as error:
            raise AlertError(f"Bell playback failed: {error}") from error
        self._logger.debug("Bell started (%d samples)", len(self._wav))


def synthesize_chime(
    *,
    frequency_hz: float,
    duration_seconds: float,
    volume: float,
    sample_rate_hz: int = _SAMPLE_RATE_HZ,
) -> np.ndarray:
    """Return a mono float32 bell tone: fundamental plus overtone with exponential decay."""
    sample_count = max(1, int(duration_seconds * sample_rate_hz))
    t = np.arange(sample_count, dtype=np.float32) / sample_rate_hz
    envelope = np.exp(-4.0 * t / duration_seconds)
    tone = np.sin(2 * np.pi * frequency_hz * t) + 0.35 * np.sin(
        2 * np.pi * frequency_hz * 2.76 * t
    )
    wav = tone * envelope
    peak = float(np.max(np.abs(wav))) or 1.0
    return (wav / peak * volume).astype(np.float32)
