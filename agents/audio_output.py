"""
Audio output handles.

The Narration Player owns exactly one sink; the sink decides what "playing"
means for its surface (a browser audio element, a buffer kept in memory, ...).
"""

import time
from abc import ABC, abstractmethod
from typing import List, Optional

import numpy as np

from config.settings import settings
from utils.audio import buffer_duration


class AudioSink(ABC):

    @abstractmethod
    def play(self, buffer: np.ndarray, sample_rate: int = settings.AUDIO_SAMPLE_RATE) -> None:
        """Start playing `buffer`. Callers stop the previous source first."""

    @abstractmethod
    def stop(self) -> None:
        """Silence whatever is playing. Idempotent."""

    @property
    @abstractmethod
    def is_playing(self) -> bool: ...


class MemoryAudioSink(AudioSink):
    """
    Keeps every played buffer. A buffer counts as sounding until its duration
    has elapsed or `stop()` is called.
    """

    def __init__(self, clock=time.monotonic):
        self._clock = clock
        self.played: List[np.ndarray] = []
        self.stop_count = 0
        self._playing_until: Optional[float] = None

    def play(self, buffer: np.ndarray, sample_rate: int = settings.AUDIO_SAMPLE_RATE) -> None:
        self.played.append(buffer)
        self._playing_until = self._clock() + buffer_duration(buffer, sample_rate)

    def stop(self) -> None:
        self.stop_count += 1
        self._playing_until = None

    @property
    def is_playing(self) -> bool:
        return self._playing_until is not None and self._clock() < self._playing_until
