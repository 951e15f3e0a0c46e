"""
Report Request Orchestrator
----------------------------
Validated competitor list + analysis mode -> report request -> history entry
-> progressive presentation.

  analyze(names, mode)        -> AgentResult(data=report)
  select_history_item(item)   re-present a past report
  new_investigation()         back to an empty form
  clear_history(confirm)      drop all history (after confirmation)
  cinematic_briefing()        dramatized spoken summary of the current report
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from agents.base import Agent, AgentResult
from agents.context import PresentationContext
from agents.generation import GenerationService
from agents.narration import NarrationPlayer
from agents.reveal import RevealScheduler
from config import messages
from models.exceptions import ValidationError
from models.schemas import AnalysisMode, HistoryItem
from utils.validation import clean_competitors, validate_competitors

logger = logging.getLogger(__name__)


@dataclass
class ReportRequest:
    competitors: List[str]
    mode: AnalysisMode = AnalysisMode.STANDARD


class ReportAgent(Agent):
    """One report request against the generation service."""

    failure_message = messages.GENERATION_FAILED

    def __init__(self, service: GenerationService):
        super().__init__("ReportAgent")
        self.service = service

    async def run(self, data: ReportRequest) -> str:
        return await self.service.generate_report(data.competitors, data.mode)


class SummaryAgent(Agent):
    failure_message = messages.SPEECH_FAILED

    def __init__(self, service: GenerationService):
        super().__init__("SummaryAgent")
        self.service = service

    async def run(self, data: str) -> str:
        return await self.service.summarize_for_narration(data)


def validate_request(names: Sequence[str]) -> List[str]:
    """
    Validate every slot, then drop the blank ones. Raises ValidationError;
    `field_errors` lines up with the input slots.
    """
    field_errors = validate_competitors([n.strip() for n in names])
    if any(field_errors):
        raise ValidationError(messages.FORM_HAS_ERRORS, field_errors)
    competitors = clean_competitors(names)
    if not competitors:
        raise ValidationError(messages.EMPTY_COMPETITORS)
    return competitors


class ReportOrchestrator:

    def __init__(
        self,
        service: GenerationService,
        context: PresentationContext,
        narrator: NarrationPlayer,
        scheduler: RevealScheduler,
    ):
        self.service = service
        self.context = context
        self.narrator = narrator
        self.scheduler = scheduler
        self.report_agent = ReportAgent(service)
        self.summary_agent = SummaryAgent(service)
        self.logger = logging.getLogger("orchestrator")

        self.report: Optional[str] = None
        self.current_competitors: List[str] = []
        self.current_item_id: Optional[str] = None
        self.highlighted_item_id: Optional[str] = None
        self.error: Optional[str] = None
        self.is_loading = False

    @property
    def history(self):
        return self.context.history

    # ─── Analysis ─────────────────────────────────────────────────────────

    async def analyze(self, names: Sequence[str], mode: AnalysisMode = AnalysisMode.STANDARD) -> AgentResult:
        if self.is_loading:
            return AgentResult.failure("orchestrator", messages.ANALYSIS_IN_PROGRESS)

        try:
            competitors = validate_request(names)
        except ValidationError as e:
            self.error = str(e)
            self.logger.info(f"Rejected input {list(names)!r}: {e}")
            return AgentResult.failure("orchestrator", str(e), field_errors=e.field_errors)

        self.is_loading = True
        self.error = None
        self.logger.info(f"🚀 Analysis requested — {', '.join(competitors)} ({mode.value})")
        try:
            result = await self.report_agent.execute(ReportRequest(competitors, mode))
        finally:
            self.is_loading = False

        if not result.success:
            # Prior report and history stay as they were
            self.error = result.error
            return result

        report: str = result.data
        item = HistoryItem.new(competitors, report)
        self.history.append(item)

        self.report = report
        self.current_competitors = competitors
        self.current_item_id = item.id
        self._present(report)

        result.metadata["history_id"] = item.id
        return result

    def _present(self, report: str) -> None:
        self.scheduler.load(report)
        self.scheduler.start()

    async def select_history_item(self, item: HistoryItem) -> None:
        self.error = None
        self.report = item.report
        self.current_competitors = list(item.competitors)
        self.current_item_id = item.id
        self._present(item.report)

    # ─── Housekeeping ─────────────────────────────────────────────────────

    def new_investigation(self) -> Optional[str]:
        """Clear the displayed report; returns the history id to highlight, if any."""
        self.highlighted_item_id = None
        if self.report is not None:
            current = self.history.find(self.current_item_id) if self.current_item_id else None
            current = current or self.history.find_by_report(self.report)
            if current is not None:
                self.highlighted_item_id = current.id

        self.report = None
        self.current_competitors = []
        self.current_item_id = None
        self.error = None
        self.scheduler.reset()
        return self.highlighted_item_id

    def clear_history(self, confirm: Callable[[], bool]) -> bool:
        if not confirm():
            return False
        self.history.clear()
        self.report = None
        self.current_competitors = []
        self.current_item_id = None
        self.scheduler.reset()
        self.logger.info("🗑️ History cleared")
        return True

    def toggle_mute(self, confirm: Callable[[], bool]) -> bool:
        was_muted = self.context.muted
        muted = self.context.toggle_mute(confirm)
        if muted and not was_muted:
            self.narrator.stop()
        return muted

    async def cinematic_briefing(self) -> AgentResult:
        if self.report is None:
            return AgentResult.failure("orchestrator", "Nenhum relatório carregado.")
        result = await self.summary_agent.execute(self.report)
        if result.success:
            result.metadata["spoken"] = await self.narrator.speak(result.data)
        return result

    def summary(self) -> dict:
        return {
            "phase": self.scheduler.phase.value,
            "revealed": self.scheduler.revealed,
            "total": self.scheduler.total,
            "competitors": self.current_competitors,
            "history": len(self.history),
            "muted": self.context.muted,
            "error": self.error,
        }
