"""
Progressive Reveal Scheduler
-----------------------------
Presents a report one section at a time at a fixed cadence, dispatching
narration for each section as it appears.

States:
  IDLE        no report
  PRESENTING  0 <= revealed < total
  COMPLETE    revealed == total

Every report gets a new generation number. The repeating timer and each
narration snippet carry the generation they were started for, so nothing
from a previous report can land after a switch.
"""

import asyncio
import logging
from enum import Enum
from typing import Callable, List, Optional

from agents.context import PresentationContext
from agents.narration import NarrationPlayer
from config.settings import settings
from models.schemas import Section, TrafficRecord
from utils.report_parser import extract_traffic_data, narration_text, split_sections

logger = logging.getLogger(__name__)


class RevealPhase(str, Enum):
    IDLE = "idle"
    PRESENTING = "presenting"
    COMPLETE = "complete"


class RevealScheduler:

    def __init__(
        self,
        narrator: NarrationPlayer,
        context: PresentationContext,
        interval: float = settings.REVEAL_INTERVAL_SECONDS,
        narration_chars: int = settings.NARRATION_MAX_CHARS,
        on_reveal: Optional[Callable[[Section], None]] = None,
    ):
        self.narrator = narrator
        self.context = context
        self.interval = interval
        self.narration_chars = narration_chars
        self.on_reveal = on_reveal

        self.report: Optional[str] = None
        self.sections: List[Section] = []
        self.revealed = 0
        self.phase = RevealPhase.IDLE
        self._generation = 0
        self._timer: Optional[asyncio.Task] = None

    # ─── State ────────────────────────────────────────────────────────────

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def total(self) -> int:
        return len(self.sections)

    @property
    def is_presenting(self) -> bool:
        return self.phase == RevealPhase.PRESENTING

    @property
    def visible_sections(self) -> List[Section]:
        return self.sections[:self.revealed]

    @property
    def visible_text(self) -> str:
        return "\n\n".join(s.text for s in self.visible_sections)

    @property
    def traffic_data(self) -> Optional[List[TrafficRecord]]:
        # Re-run on every read: the table may only appear a few sections in
        return extract_traffic_data(self.visible_text)

    # ─── Transitions ──────────────────────────────────────────────────────

    def _invalidate(self) -> None:
        self._generation += 1
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._timer = None
        self.narrator.invalidate(self._generation)

    def load(self, report: str) -> int:
        """Start presenting a new report. Returns its generation."""
        self._invalidate()
        self.report = report
        self.sections = split_sections(report)
        self.revealed = 0
        self.phase = RevealPhase.PRESENTING if self.sections else RevealPhase.COMPLETE
        logger.info(
            f"🎬 Presenting report (generation {self._generation}, {self.total} sections)"
        )
        return self._generation

    def cancel(self) -> None:
        """Stop the timer and narration; revealed sections stay visible."""
        self._invalidate()

    def reset(self) -> None:
        """Back to IDLE; cancels the timer and any narration in flight."""
        self._invalidate()
        self.report = None
        self.sections = []
        self.revealed = 0
        self.phase = RevealPhase.IDLE

    def tick(self, generation: Optional[int] = None) -> Optional[Section]:
        """Reveal exactly one more section. Stale or idle ticks do nothing."""
        if generation is not None and generation != self._generation:
            logger.debug(f"Dropping stale tick for generation {generation}")
            return None
        if self.phase != RevealPhase.PRESENTING:
            return None

        section = self.sections[self.revealed]
        self.revealed += 1
        if self.revealed == self.total:
            self.phase = RevealPhase.COMPLETE
            logger.info(f"✅ Presentation complete (generation {self._generation})")

        # Sampled at reveal time only; unmuting later never backfills
        if not self.context.muted:
            self.narrator.dispatch(narration_text(section, self.narration_chars), self._generation)

        if self.on_reveal is not None:
            try:
                self.on_reveal(section)
            except Exception as e:
                logger.error(f"Reveal callback failed for section {section.index}: {e}")
        return section

    # ─── Timer ────────────────────────────────────────────────────────────

    def start(self) -> Optional[asyncio.Task]:
        """Start the repeating reveal timer for the current generation."""
        if self.phase != RevealPhase.PRESENTING:
            return None
        loop = asyncio.get_running_loop()
        # A timer left behind on another (closed) loop is abandoned
        if self._timer is not None and not self._timer.done() and self._timer.get_loop() is loop:
            return self._timer
        self._timer = loop.create_task(self._run(self._generation))
        return self._timer

    async def _run(self, generation: int) -> None:
        while generation == self._generation and self.phase == RevealPhase.PRESENTING:
            await asyncio.sleep(self.interval)
            if generation != self._generation:
                return
            self.tick(generation)

    async def wait(self) -> None:
        """Wait until the current timer finishes (completion or cancellation)."""
        if self._timer is not None:
            await asyncio.wait({self._timer})
