"""
Narration Player
-----------------
Turns a text snippet into speech through the generation service, decodes the
raw PCM and plays it on the context's audio sink.

Ordering: every `speak` takes a fresh token and stops current playback, so at
most one source sounds at a time and a slow response for an older snippet is
dropped when it finally lands. A generation tag ties each snippet to the
report it belongs to; `invalidate()` drops everything from older reports.

Failures (service error, undecodable audio) are logged and skipped; they never
reach the reveal timeline.
"""

import asyncio
import logging
from typing import List, Optional, Set, Tuple

from agents.context import PresentationContext
from agents.generation import GenerationService
from config.settings import settings
from utils.audio import decode_to_playable_buffer

logger = logging.getLogger(__name__)


class NarrationPlayer:

    def __init__(
        self,
        service: GenerationService,
        context: PresentationContext,
        voice: str = settings.NARRATION_VOICE,
        sample_rate: int = settings.AUDIO_SAMPLE_RATE,
        channels: int = settings.AUDIO_CHANNELS,
    ):
        self.service = service
        self.context = context
        self.voice = voice
        self.sample_rate = sample_rate
        self.channels = channels
        # Snippets sent for the current generation only
        self.dispatched: List[Tuple[int, str]] = []
        self._token = 0
        self._generation = 0
        self._tasks: Set[asyncio.Task] = set()

    @property
    def generation(self) -> int:
        return self._generation

    def _is_current(self, token: int, generation: int) -> bool:
        return (
            token == self._token
            and generation == self._generation
            and not self.context.muted
        )

    async def speak(self, text: str, generation: Optional[int] = None) -> bool:
        """Synthesize and play `text`. Returns True if it reached the speakers."""
        if not text or not text.strip():
            return False
        if generation is None:
            generation = self._generation

        self._token += 1
        token = self._token
        self.context.audio.stop()

        try:
            pcm = await self.service.generate_speech(text, self.voice)
            if not self._is_current(token, generation):
                logger.debug(f"Discarding stale narration (generation {generation})")
                return False
            buffer = decode_to_playable_buffer(pcm, self.channels)
        except Exception as e:
            logger.error(f"Narration skipped: {e}")
            return False

        if not self._is_current(token, generation):
            return False

        self.context.audio.stop()
        self.context.audio.play(buffer, self.sample_rate)
        return True

    def dispatch(self, text: str, generation: int) -> Optional[asyncio.Task]:
        """Fire-and-forget `speak`; the caller never waits on it."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Narration skipped: no running event loop")
            return None
        self.dispatched.append((generation, text))
        task = loop.create_task(self.speak(text, generation))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    def stop(self) -> None:
        """Silence the current source and drop every in-flight snippet."""
        self._token += 1
        self.context.audio.stop()
        for task in list(self._tasks):
            task.cancel()

    def invalidate(self, generation: int) -> None:
        self._generation = generation
        self.dispatched = []
        self.stop()

    async def drain(self) -> None:
        """Wait for outstanding snippets to settle."""
        if self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
