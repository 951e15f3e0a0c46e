"""
Presentation context: the ambient state of one user session, constructed
explicitly and handed to the components that need it.
"""

import logging
from dataclasses import dataclass
from typing import Callable

from agents.audio_output import AudioSink
from db.history import HistoryStore

logger = logging.getLogger(__name__)


@dataclass
class PresentationContext:
    history: HistoryStore
    audio: AudioSink
    muted: bool = False

    def toggle_mute(self, confirm: Callable[[], bool]) -> bool:
        """
        Flip the narration mute flag and return the new value.

        Muting requires `confirm()` to return True and silences sounding audio
        at once. Unmuting needs no confirmation and never replays narration
        for sections revealed while muted.
        """
        if self.muted:
            self.muted = False
            logger.info("🔊 Narration enabled")
            return self.muted

        if not confirm():
            return self.muted

        self.muted = True
        self.audio.stop()
        logger.info("🔇 Narration muted")
        return self.muted
